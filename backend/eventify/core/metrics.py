"""
Prometheus metrics, exposed at /metrics.

Checkout is the path worth watching: how many carts succeed versus lose to
inventory, how long a purchase takes, and how many tickets each ticket type
has sold. HTTP traffic is labelled by route template, never by raw path.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# HTTP
http_requests = Counter(
    "http_requests_total",
    "HTTP requests handled",
    ["method", "route", "status"],
)

http_request_duration = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "route"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

# Checkout
purchase_attempts = Counter(
    "purchase_attempts_total",
    "Checkout attempts by outcome",
    ["status"],  # success, insufficient, not_found, invalid
)

purchase_latency = Histogram(
    "purchase_latency_seconds",
    "Time from cart validation to committed purchase",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

tickets_sold = Counter(
    "tickets_sold_total",
    "Tickets sold per ticket type",
    ["ticket_type_id"],
)

# Event-list cache
cache_operations = Counter(
    "cache_operations_total",
    "Event-list cache operations",
    ["operation", "result"],  # get/set, hit/miss
)


def metrics_endpoint() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def record_http_request(method: str, route: str, status_code: int, seconds: float) -> None:
    http_requests.labels(method=method, route=route, status=str(status_code)).inc()
    http_request_duration.labels(method=method, route=route).observe(seconds)


def record_purchase_attempt(status: str) -> None:
    purchase_attempts.labels(status=status).inc()


def record_tickets_sold(ticket_type_id: int, quantity: int) -> None:
    tickets_sold.labels(ticket_type_id=str(ticket_type_id)).inc(quantity)


def record_cache_operation(operation: str, hit: bool) -> None:
    cache_operations.labels(operation=operation, result="hit" if hit else "miss").inc()
