"""
Tests for catalog endpoints: categories, listing and search, event details,
organizer writes and the sales dashboard.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from httpx import AsyncClient


def _event_payload(category_id: int, **overrides) -> dict:
    start = datetime.now(timezone.utc) + timedelta(days=14)
    data = {
        "title": "Jazz Night",
        "description": "An evening of live jazz",
        "location": "Blue Note, New York",
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(hours=4)).isoformat(),
        "category_id": category_id,
    }
    data.update(overrides)
    return data


@pytest.mark.asyncio
async def test_list_categories(client: AsyncClient, concerts, sports):
    response = await client.get("/api/v1/categories/")
    assert response.status_code == 200
    assert [c["name"] for c in response.json()] == ["Concerts", "Sports"]


@pytest.mark.asyncio
async def test_list_events(client: AsyncClient, test_event, other_event):
    """All events are returned in id order."""
    response = await client.get("/api/v1/events/")
    assert response.status_code == 200
    data = response.json()
    assert [e["id"] for e in data] == [test_event.id, other_event.id]
    assert data[0]["seating_map"] == {"rows": 10, "cols": 20, "unavailable_seats": [[2, 3], [5, 9]]}


@pytest.mark.asyncio
async def test_search_matches_location_only(client: AsyncClient, test_event, other_event):
    """A term found only in the location still finds the event."""
    response = await client.get("/api/v1/events/", params={"search": "grand park"})
    assert [e["id"] for e in response.json()] == [test_event.id]


@pytest.mark.asyncio
async def test_search_is_case_insensitive(client: AsyncClient, test_event, other_event):
    response = await client.get("/api/v1/events/", params={"search": "DECISIVE"})
    assert [e["id"] for e in response.json()] == [other_event.id]


@pytest.mark.asyncio
async def test_search_without_match_returns_empty_list(client: AsyncClient, test_event, other_event):
    response = await client.get("/api/v1/events/", params={"search": "opera"})
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_filter_by_category(client: AsyncClient, test_event, other_event, sports):
    response = await client.get("/api/v1/events/", params={"category_id": sports.id})
    assert [e["id"] for e in response.json()] == [other_event.id]


@pytest.mark.asyncio
async def test_category_and_search_combine(client: AsyncClient, test_event, other_event, concerts):
    """Both filters must match."""
    response = await client.get("/api/v1/events/", params={"category_id": concerts.id, "search": "boston"})
    assert response.json() == []


@pytest.mark.asyncio
async def test_featured_and_trending(client: AsyncClient, test_event, other_event):
    featured = await client.get("/api/v1/events/featured")
    trending = await client.get("/api/v1/events/trending")
    assert [e["id"] for e in featured.json()] == [test_event.id]
    assert [e["id"] for e in trending.json()] == [test_event.id]


@pytest.mark.asyncio
async def test_get_event_details(client: AsyncClient, test_event, organizer, concerts, vip_tickets, general_tickets):
    """Details embed the organizer's public profile, the category and ticket types."""
    response = await client.get(f"/api/v1/events/{test_event.id}")
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Summer Music Festival"
    assert data["organizer"]["username"] == organizer.username
    assert "email" not in data["organizer"]
    assert "hashed_password" not in data["organizer"]
    assert data["category"]["name"] == concerts.name
    assert [t["name"] for t in data["ticket_types"]] == ["VIP Package", "General Admission"]
    assert data["ticket_types"][0]["available"] == 150
    assert Decimal(data["ticket_types"][0]["price"]) == Decimal("199.00")


@pytest.mark.asyncio
async def test_get_event_not_found(client: AsyncClient):
    """Non-existent event returns 404."""
    response = await client.get("/api/v1/events/99999")
    assert response.status_code == 404
    assert response.json()["code"] == "EVENT_NOT_FOUND"


@pytest.mark.asyncio
async def test_create_event(client: AsyncClient, organizer_headers, organizer, concerts):
    """Organizers can create events with inline ticket types."""
    payload = _event_payload(
        concerts.id,
        has_seating=True,
        seating_map={"rows": 5, "cols": 8, "unavailable_seats": [[0, 0]]},
        ticket_types=[
            {"name": "Standard", "price": "45.00", "quantity": 120},
            {"name": "Front Row", "description": "First row", "price": "90.00", "quantity": 8},
        ],
    )
    response = await client.post("/api/v1/events/", json=payload, headers=organizer_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Jazz Night"
    assert data["organizer_id"] == organizer.id
    assert data["seating_map"]["unavailable_seats"] == [[0, 0]]
    assert [(t["quantity"], t["available"]) for t in data["ticket_types"]] == [(120, 120), (8, 8)]

    listing = await client.get("/api/v1/events/")
    assert [e["title"] for e in listing.json()] == ["Jazz Night"]


@pytest.mark.asyncio
async def test_create_event_requires_organizer(client: AsyncClient, auth_headers, concerts):
    response = await client.post("/api/v1/events/", json=_event_payload(concerts.id), headers=auth_headers)
    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_create_event_unauthenticated(client: AsyncClient, concerts):
    """Creating events without auth returns 401."""
    response = await client.post("/api/v1/events/", json=_event_payload(concerts.id))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_event_end_before_start(client: AsyncClient, organizer_headers, concerts):
    start = datetime.now(timezone.utc) + timedelta(days=5)
    payload = _event_payload(
        concerts.id,
        start_date=start.isoformat(),
        end_date=(start - timedelta(hours=1)).isoformat(),
    )
    response = await client.post("/api/v1/events/", json=payload, headers=organizer_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_event_naive_start_aware_end(client: AsyncClient, organizer_headers, concerts):
    """A date without an offset is read as UTC."""
    payload = _event_payload(concerts.id, start_date="2027-01-01T10:00:00", end_date="2027-01-02T10:00:00Z")
    response = await client.post("/api/v1/events/", json=payload, headers=organizer_headers)
    assert response.status_code == 201
    data = response.json()
    start = datetime.fromisoformat(data["start_date"].replace("Z", "+00:00"))
    assert start == datetime(2027, 1, 1, 10, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_create_event_mixed_offsets_end_before_start(client: AsyncClient, organizer_headers, concerts):
    payload = _event_payload(concerts.id, start_date="2027-01-02T10:00:00", end_date="2027-01-01T10:00:00+00:00")
    response = await client.post("/api/v1/events/", json=payload, headers=organizer_headers)
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_create_event_seat_outside_map(client: AsyncClient, organizer_headers, concerts):
    payload = _event_payload(concerts.id, seating_map={"rows": 2, "cols": 2, "unavailable_seats": [[2, 0]]})
    response = await client.post("/api/v1/events/", json=payload, headers=organizer_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_event_unknown_category(client: AsyncClient, organizer_headers, storage):
    response = await client.post("/api/v1/events/", json=_event_payload(42), headers=organizer_headers)
    assert response.status_code == 404
    assert response.json()["code"] == "CATEGORY_NOT_FOUND"
    assert await storage.list_events() == []


@pytest.mark.asyncio
async def test_update_event(client: AsyncClient, organizer_headers, test_event):
    """The organizer can change a subset of fields."""
    response = await client.patch(
        f"/api/v1/events/{test_event.id}",
        json={"title": "Summer Music Festival 2027", "is_featured": False},
        headers=organizer_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Summer Music Festival 2027"
    assert data["is_featured"] is False
    assert data["location"] == test_event.location


@pytest.mark.asyncio
async def test_update_event_not_owner(client: AsyncClient, other_headers, test_event):
    response = await client.patch(f"/api/v1/events/{test_event.id}", json={"title": "Mine now"}, headers=other_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_update_event_end_before_existing_start(client: AsyncClient, organizer_headers, test_event):
    end = test_event.start_date - timedelta(days=1)
    response = await client.patch(
        f"/api/v1/events/{test_event.id}",
        json={"end_date": end.isoformat()},
        headers=organizer_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_event_mixed_offsets(client: AsyncClient, organizer_headers, test_event):
    backwards = await client.patch(
        f"/api/v1/events/{test_event.id}",
        json={"start_date": "2027-03-02T10:00:00Z", "end_date": "2027-03-01T10:00:00"},
        headers=organizer_headers,
    )
    assert backwards.status_code == 422

    response = await client.patch(
        f"/api/v1/events/{test_event.id}",
        json={"start_date": "2027-03-01T10:00:00", "end_date": "2027-03-02T10:00:00Z"},
        headers=organizer_headers,
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_update_missing_event(client: AsyncClient, organizer_headers):
    response = await client.patch("/api/v1/events/99999", json={"title": "Ghost"}, headers=organizer_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_ticket_types(client: AsyncClient, test_event, vip_tickets, general_tickets):
    response = await client.get(f"/api/v1/events/{test_event.id}/ticket-types")
    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == [vip_tickets.id, general_tickets.id]


@pytest.mark.asyncio
async def test_list_ticket_types_missing_event(client: AsyncClient):
    response = await client.get("/api/v1/events/99999/ticket-types")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_create_ticket_type(client: AsyncClient, organizer_headers, test_event):
    """A new ticket type starts fully available."""
    response = await client.post(
        f"/api/v1/events/{test_event.id}/ticket-types",
        json={"name": "Early Bird", "price": "59.50", "quantity": 300},
        headers=organizer_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["event_id"] == test_event.id
    assert data["available"] == 300
    assert Decimal(data["price"]) == Decimal("59.50")


@pytest.mark.asyncio
async def test_create_ticket_type_not_owner(client: AsyncClient, other_headers, test_event):
    response = await client.post(
        f"/api/v1/events/{test_event.id}/ticket-types",
        json={"name": "Bootleg", "price": "1.00", "quantity": 10},
        headers=other_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_ticket_type_rejects_bad_numbers(client: AsyncClient, organizer_headers, test_event):
    negative_price = await client.post(
        f"/api/v1/events/{test_event.id}/ticket-types",
        json={"name": "Refund", "price": "-5.00", "quantity": 10},
        headers=organizer_headers,
    )
    zero_quantity = await client.post(
        f"/api/v1/events/{test_event.id}/ticket-types",
        json={"name": "Nothing", "price": "5.00", "quantity": 0},
        headers=organizer_headers,
    )
    assert negative_price.status_code == 422
    assert zero_quantity.status_code == 422


@pytest.mark.asyncio
async def test_organizer_events(client: AsyncClient, organizer_headers, test_event, other_event):
    response = await client.get("/api/v1/events/organizer/me", headers=organizer_headers)
    assert response.status_code == 200
    assert [e["id"] for e in response.json()] == [test_event.id, other_event.id]


@pytest.mark.asyncio
async def test_organizer_summary(client: AsyncClient, organizer_headers, test_event, vip_tickets, general_tickets):
    """Sold = quantity - available, revenue = sold * price, summed per event."""
    response = await client.get("/api/v1/events/organizer/me/summary", headers=organizer_headers)
    assert response.status_code == 200
    [summary] = response.json()
    assert summary["event_id"] == test_event.id
    assert summary["tickets_sold"] == 50
    assert summary["tickets_remaining"] == 150 + 1000
    assert Decimal(summary["gross_revenue"]) == Decimal("9950.00")


@pytest.mark.asyncio
async def test_organizer_summary_requires_organizer(client: AsyncClient, auth_headers):
    response = await client.get("/api/v1/events/organizer/me/summary", headers=auth_headers)
    assert response.status_code == 403
