"""
Tests for service-level endpoints, error mapping, demo seeding and
session token helpers.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from eventify.core.logging import REDACTED, redact_sensitive
from eventify.core.security import create_access_token, decode_access_token, hash_password, verify_password
from eventify.services.cache_service import event_list_key
from eventify.stores.memory_store import MemoryStorage
from eventify.stores.seed import DEFAULT_CATEGORIES, DEMO_EVENTS, seed_demo_data


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["cache"] == {"status": "disabled"}
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_is_propagated(client: AsyncClient):
    response = await client.get("/", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"


@pytest.mark.asyncio
async def test_metrics_exposed(client: AsyncClient):
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "purchase_attempts_total" in response.text


@pytest.mark.asyncio
async def test_request_validation_error_shape(client: AsyncClient):
    """Malformed bodies get the same {code, message} shape as domain errors."""
    response = await client.post("/api/v1/auth/login", json={"username": "someone"})
    assert response.status_code == 422
    data = response.json()
    assert data["code"] == "VALIDATION_ERROR"
    assert "password" in data["message"]


@pytest.mark.asyncio
async def test_seed_demo_data():
    storage = MemoryStorage()

    assert await seed_demo_data(storage, admin_password="adminpassword") is True

    categories = await storage.list_categories()
    assert [c.name for c in categories] == [name for name, _ in DEFAULT_CATEGORIES]
    assert len(await storage.list_events()) == len(DEMO_EVENTS)

    admin = await storage.get_user_by_username("admin")
    assert admin.is_organizer
    assert verify_password("adminpassword", admin.hashed_password)

    festival = (await storage.list_events(search="summer music"))[0]
    vip = next(t for t in await storage.list_ticket_types(festival.id) if t.name == "VIP Package")
    assert (vip.quantity, vip.available) == (200, 150)


@pytest.mark.asyncio
async def test_seed_skips_populated_store():
    storage = MemoryStorage()
    await seed_demo_data(storage)

    assert await seed_demo_data(storage) is False
    assert len(await storage.list_categories()) == len(DEFAULT_CATEGORIES)


def test_password_hashing():
    hashed = hash_password("correct horse battery")
    assert hashed != "correct horse battery"
    assert verify_password("correct horse battery", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("anything", "not-a-bcrypt-hash")


def test_access_token_round_trip():
    token = create_access_token(data={"sub": "42"})
    assert decode_access_token(token) == 42


def test_expired_or_tampered_token_is_rejected():
    expired = create_access_token(data={"sub": "42"}, expires_delta=timedelta(seconds=-1))
    assert decode_access_token(expired) is None
    assert decode_access_token(create_access_token(data={"sub": "42"}) + "x") is None
    assert decode_access_token(create_access_token(data={"sub": "not-a-number"})) is None


def test_event_list_cache_key():
    """Keys ignore search case and never contain raw user input."""
    assert event_list_key(None, "Jazz") == event_list_key(None, "jazz")
    # Stores match the term as given, so surrounding spaces select different events
    assert event_list_key(None, "jazz") != event_list_key(None, " jazz")
    assert event_list_key(3, "jazz") != event_list_key(None, "jazz")
    assert "*" not in event_list_key(None, "jazz*")
    assert event_list_key(None, None).startswith("events:list:all:")


def test_credentials_are_redacted_from_logs():
    event = redact_sensitive(None, "info", {"event": "login_failed", "username": "bob", "password": "hunter22"})
    assert event == {"event": "login_failed", "username": "bob", "password": REDACTED}
