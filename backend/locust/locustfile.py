"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test overselling
  locust -f locustfile.py --tags throughput   # Test cache
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests
"""

import random
import string
from datetime import datetime, timedelta, timezone

from locust import HttpUser, between, events, tag, task

# Shared state
EVENT_IDS = []
CONCURRENCY_EVENT_ID = None
CONCURRENCY_TICKET_TYPE_ID = None

PASSWORD = "loadtest123"


def random_username():
    return "u_" + "".join(random.choices(string.ascii_lowercase, k=10))


def register(client, organizer=False):
    """Register a fresh account and return Bearer headers ({} on failure)."""
    username = random_username()
    resp = client.post("/api/v1/auth/register", json={
        "email": f"{username}@example.com",
        "username": username,
        "password": PASSWORD,
        "full_name": "Load Tester",
        "is_organizer": organizer,
    })
    if resp.status_code != 201:
        return {}
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def cart(event_id, ticket_type_id, quantity):
    return {
        "purchase": {"event_id": event_id},
        "items": [{"ticket_type_id": ticket_type_id, "quantity": quantity}],
    }


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print("SETUP: Creating concurrency test event...")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - 100 users → 10 tickets

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify:
      GET /api/v1/events/{id}/ticket-types  → available == 0, never negative
      SELECT SUM(quantity) FROM purchase_items WHERE ticket_type_id = X;
    Should be exactly 10
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.headers = register(self.client)

        if not CONCURRENCY_EVENT_ID:
            organizer_headers = register(self.client, organizer=True)
            categories = self.client.get("/api/v1/categories/").json()
            if not organizer_headers or not categories:
                return

            start = datetime.now(timezone.utc) + timedelta(days=30)
            resp = self.client.post("/api/v1/events/",
                json={
                    "title": "Concurrency Test Event",
                    "description": "10 tickets only",
                    "location": "Test",
                    "start_date": start.isoformat(),
                    "end_date": start.isoformat(),
                    "category_id": categories[0]["id"],
                    "ticket_types": [{"name": "Last Call", "price": "10.00", "quantity": 10}],
                },
                headers=organizer_headers,
            )
            if resp.status_code == 201 and not CONCURRENCY_EVENT_ID:
                data = resp.json()
                globals()["CONCURRENCY_EVENT_ID"] = data["id"]
                globals()["CONCURRENCY_TICKET_TYPE_ID"] = data["ticket_types"][0]["id"]
                print(f"\n✓ Created event {CONCURRENCY_EVENT_ID} with 10 tickets\n")

    @tag("concurrency")
    @task
    def buy_limited_tickets(self):
        """All users fight for the same 10 tickets."""
        if not CONCURRENCY_TICKET_TYPE_ID or not self.headers:
            return

        with self.client.post("/api/v1/purchases/",
            json=cart(CONCURRENCY_EVENT_ID, CONCURRENCY_TICKET_TYPE_ID, 1),
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 409:
                resp.success()  # Expected: sold out
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false, run again

    Compare:
      - Avg response time
      - Requests/sec
      - P95/P99 latency
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_events_cached(self):
        """Hammer the cached endpoint."""
        search = random.choice(["", "music", "festival", "new york"])
        resp = self.client.get(f"/api/v1/events/?search={search}", name="/api/v1/events/ [cached]")
        if resp.status_code == 200:
            for event in resp.json():
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @tag("throughput", "read")
    @task(3)
    def get_event_detail(self):
        """Read individual events (live availability, not cached)."""
        if EVENT_IDS:
            event_id = random.choice(EVENT_IDS)
            self.client.get(f"/api/v1/events/{event_id}", name="/api/v1/events/{id}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = register(self.client)

    def _expect(self, payload, allowed, headers=None, **kwargs):
        with self.client.post("/api/v1/purchases/",
            json=payload,
            headers=self.headers if headers is None else headers,
            catch_response=True,
            **kwargs,
        ) as resp:
            if resp.status_code in allowed:
                resp.success()
            else:
                resp.failure(f"Expected {allowed}, got {resp.status_code}")

    @tag("edge")
    @task
    def invalid_event_id(self):
        """Buy for a non-existent event."""
        self._expect(cart(999999, 1, 1), [404])

    @tag("edge")
    @task
    def unknown_ticket_type(self):
        self._expect(cart(1, 999999, 1), [404])

    @tag("edge")
    @task
    def negative_quantity(self):
        self._expect(cart(1, 1, -5), [422])

    @tag("edge")
    @task
    def zero_quantity(self):
        self._expect(cart(1, 1, 0), [422])

    @tag("edge")
    @task
    def huge_quantity(self):
        """Try to buy an absurd number of tickets."""
        self._expect(cart(1, 1, 999999), [404, 409])

    @tag("edge")
    @task
    def wrong_price(self):
        payload = cart(1, 1, 1)
        payload["items"][0]["price"] = "0.01"
        self._expect(payload, [404, 422])

    @tag("edge")
    @task
    def malformed_json(self):
        """Send garbage data."""
        with self.client.post("/api/v1/purchases/",
            data="not json at all",
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code == 422:
                resp.success()
            else:
                resp.failure(f"Expected 422, got {resp.status_code}")

    @tag("edge")
    @task
    def missing_auth(self):
        """Try buying without a session."""
        self._expect(cart(1, 1, 1), [401], headers={})


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Simulates real traffic:
      - Mostly browsing (80%)
      - Some purchases (15%)
      - Checking purchase history (5%)
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = register(self.client)

    @task(50)
    def browse_events(self):
        resp = self.client.get("/api/v1/events/")
        if resp.status_code == 200:
            for event in resp.json():
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @task(30)
    def view_event(self):
        if EVENT_IDS:
            self.client.get(f"/api/v1/events/{random.choice(EVENT_IDS)}", name="/api/v1/events/{id}")

    @task(15)
    def buy_tickets(self):
        """Pick an event, pick a ticket type with stock left, buy 1-3."""
        if not EVENT_IDS or not self.headers:
            return
        event_id = random.choice(EVENT_IDS)
        resp = self.client.get(f"/api/v1/events/{event_id}/ticket-types", name="/api/v1/events/{id}/ticket-types")
        if resp.status_code != 200:
            return
        in_stock = [t for t in resp.json() if t["available"] > 0]
        if not in_stock:
            return
        ticket_type = random.choice(in_stock)
        self.client.post("/api/v1/purchases/",
            json=cart(event_id, ticket_type["id"], random.randint(1, 3)),
            headers=self.headers)

    @task(5)
    def purchase_history(self):
        if self.headers:
            self.client.get("/api/v1/purchases/me", headers=self.headers)
