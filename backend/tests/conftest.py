"""
Pytest fixtures for storage, client, and authentication.

Every test gets a fresh in-memory store injected in place of the
application's storage singleton, so tests are isolated and need no
database or Redis.
"""

import os

os.environ["REDIS_ENABLED"] = "false"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["STORAGE_BACKEND"] = "memory"

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from eventify.core.security import create_access_token, hash_password
from eventify.domain import (
    Category,
    Event,
    NewCategory,
    NewEvent,
    NewTicketType,
    NewUser,
    SeatingMap,
    TicketType,
    User,
)
from eventify.main import app
from eventify.stores.factory import get_storage
from eventify.stores.memory_store import MemoryStorage

TEST_PASSWORD = "testpassword123"


@pytest_asyncio.fixture
async def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest_asyncio.fixture
async def client(storage: MemoryStorage) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the storage dependency with the test store."""
    app.dependency_overrides[get_storage] = lambda: storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def organizer(storage: MemoryStorage) -> User:
    """An organizer account that owns the test events."""
    return await storage.create_user(
        NewUser(
            username="organizer",
            email="organizer@example.com",
            hashed_password=hash_password(TEST_PASSWORD),
            full_name="Olivia Organizer",
            is_organizer=True,
        )
    )


@pytest_asyncio.fixture
async def test_user(storage: MemoryStorage) -> User:
    """A regular ticket buyer."""
    return await storage.create_user(
        NewUser(
            username="testuser",
            email="test@example.com",
            hashed_password=hash_password(TEST_PASSWORD),
            full_name="Test User",
        )
    )


@pytest_asyncio.fixture
async def other_user(storage: MemoryStorage) -> User:
    return await storage.create_user(
        NewUser(
            username="otheruser",
            email="other@example.com",
            hashed_password=hash_password(TEST_PASSWORD),
            full_name="Other User",
        )
    )


def _headers_for(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    """Authorization headers with Bearer token for the buyer."""
    return _headers_for(test_user)


@pytest_asyncio.fixture
async def organizer_headers(organizer: User) -> dict:
    return _headers_for(organizer)


@pytest_asyncio.fixture
async def other_headers(other_user: User) -> dict:
    return _headers_for(other_user)


@pytest_asyncio.fixture
async def concerts(storage: MemoryStorage) -> Category:
    return await storage.create_category(NewCategory(name="Concerts", icon="music"))


@pytest_asyncio.fixture
async def sports(storage: MemoryStorage) -> Category:
    return await storage.create_category(NewCategory(name="Sports", icon="futbol"))


@pytest_asyncio.fixture
async def test_event(storage: MemoryStorage, organizer: User, concerts: Category) -> Event:
    """A seated concert thirty days from now."""
    start = datetime.now(timezone.utc) + timedelta(days=30)
    return await storage.create_event(
        NewEvent(
            title="Summer Music Festival",
            description="Three days of music under the open sky",
            image_url="https://images.example.com/festival.jpg",
            location="Grand Park, Los Angeles",
            start_date=start,
            end_date=start + timedelta(days=2),
            organizer_id=organizer.id,
            category_id=concerts.id,
            is_featured=True,
            is_trending=True,
            has_seating=True,
            seating_map=SeatingMap(rows=10, cols=20, unavailable_seats=((2, 3), (5, 9))),
        )
    )


@pytest_asyncio.fixture
async def other_event(storage: MemoryStorage, organizer: User, sports: Category) -> Event:
    start = datetime.now(timezone.utc) + timedelta(days=60)
    return await storage.create_event(
        NewEvent(
            title="Basketball Finals",
            description="The decisive game of the season",
            location="Boston Garden",
            image_url="",
            start_date=start,
            end_date=start,
            organizer_id=organizer.id,
            category_id=sports.id,
        )
    )


@pytest_asyncio.fixture
async def vip_tickets(storage: MemoryStorage, test_event: Event) -> TicketType:
    """VIP tickets: 200 printed, 150 left, 199.00 each."""
    return await storage.create_ticket_type(
        NewTicketType(
            event_id=test_event.id,
            name="VIP Package",
            description="Premium viewing areas",
            price=Decimal("199.00"),
            quantity=200,
            available=150,
        )
    )


@pytest_asyncio.fixture
async def general_tickets(storage: MemoryStorage, test_event: Event) -> TicketType:
    return await storage.create_ticket_type(
        NewTicketType(
            event_id=test_event.id,
            name="General Admission",
            price=Decimal("99.00"),
            quantity=1000,
        )
    )


@pytest_asyncio.fixture
async def sold_out_tickets(storage: MemoryStorage, test_event: Event) -> TicketType:
    return await storage.create_ticket_type(
        NewTicketType(
            event_id=test_event.id,
            name="Backstage Pass",
            price=Decimal("500.00"),
            quantity=10,
            available=0,
        )
    )


@pytest_asyncio.fixture
async def other_event_tickets(storage: MemoryStorage, other_event: Event) -> TicketType:
    return await storage.create_ticket_type(
        NewTicketType(
            event_id=other_event.id,
            name="Courtside",
            price=Decimal("1200.00"),
            quantity=100,
            available=20,
        )
    )
