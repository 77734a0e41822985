"""
In-process storage over id-indexed tables.

Each table is a dict keyed by an auto-incrementing integer id. Nothing is
durable; a restart starts from an empty (or freshly seeded) state.

CONCURRENCY
===========

Purchases against the same ticket type must not oversell. Every ticket type
has its own asyncio.Lock; ``create_purchase`` takes the locks of all ticket
types in the cart in ascending id order (so two carts can never deadlock),
re-checks availability under the locks, and only then mutates anything.
User creation is serialized by a single lock so the uniqueness check and the
insert cannot interleave.
"""

import asyncio
import itertools
from collections import defaultdict
from contextlib import AsyncExitStack
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Optional

from eventify.core.errors import (
    EmailTakenError,
    InsufficientInventoryError,
    TicketTypeNotFoundError,
    UsernameTakenError,
)
from eventify.core.logging import get_logger
from eventify.domain import (
    PURCHASE_STATUS_COMPLETED,
    Category,
    Event,
    NewCategory,
    NewEvent,
    NewPurchase,
    NewPurchaseItem,
    NewTicketType,
    NewUser,
    Purchase,
    PurchaseItem,
    TicketType,
    User,
    quantities_by_ticket_type,
)
from eventify.stores.interfaces import Storage

logger = get_logger(__name__)


class MemoryStorage(Storage):
    """Storage backed by process-local dicts."""

    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._categories: dict[int, Category] = {}
        self._events: dict[int, Event] = {}
        self._ticket_types: dict[int, TicketType] = {}
        self._purchases: dict[int, Purchase] = {}
        self._purchase_items: dict[int, list[PurchaseItem]] = {}

        self._ids = defaultdict(lambda: itertools.count(1))

        self._ticket_locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._identity_lock = asyncio.Lock()

    def _next_id(self, table: str) -> int:
        return next(self._ids[table])

    # Users

    async def get_user(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        wanted = username.lower()
        return next((u for u in self._users.values() if u.username.lower() == wanted), None)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        wanted = email.lower()
        return next((u for u in self._users.values() if u.email.lower() == wanted), None)

    async def create_user(self, user: NewUser) -> User:
        async with self._identity_lock:
            if await self.get_user_by_username(user.username):
                raise UsernameTakenError()
            if await self.get_user_by_email(user.email):
                raise EmailTakenError()

            new_user = User(
                id=self._next_id("users"),
                username=user.username,
                email=user.email,
                hashed_password=user.hashed_password,
                full_name=user.full_name,
                is_organizer=user.is_organizer,
                avatar_url=user.avatar_url,
                created_at=datetime.now(timezone.utc),
            )
            self._users[new_user.id] = new_user
            return new_user

    # Categories

    async def list_categories(self) -> list[Category]:
        return list(self._categories.values())

    async def get_category(self, category_id: int) -> Optional[Category]:
        return self._categories.get(category_id)

    async def create_category(self, category: NewCategory) -> Category:
        new_category = Category(id=self._next_id("categories"), name=category.name, icon=category.icon)
        self._categories[new_category.id] = new_category
        return new_category

    # Events

    async def list_events(
        self,
        category_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> list[Event]:
        events = list(self._events.values())
        if category_id is not None:
            events = [e for e in events if e.category_id == category_id]
        if search:
            events = [e for e in events if e.matches_search(search)]
        return events

    async def list_featured_events(self) -> list[Event]:
        return [e for e in self._events.values() if e.is_featured]

    async def list_trending_events(self) -> list[Event]:
        return [e for e in self._events.values() if e.is_trending]

    async def list_events_by_organizer(self, organizer_id: int) -> list[Event]:
        return [e for e in self._events.values() if e.organizer_id == organizer_id]

    async def get_event(self, event_id: int) -> Optional[Event]:
        return self._events.get(event_id)

    async def create_event(self, event: NewEvent) -> Event:
        new_event = Event(
            id=self._next_id("events"),
            title=event.title,
            description=event.description,
            image_url=event.image_url,
            location=event.location,
            start_date=event.start_date,
            end_date=event.end_date,
            organizer_id=event.organizer_id,
            category_id=event.category_id,
            is_featured=event.is_featured,
            is_trending=event.is_trending,
            has_seating=event.has_seating,
            seating_map=event.seating_map,
            created_at=datetime.now(timezone.utc),
        )
        self._events[new_event.id] = new_event
        return new_event

    async def update_event(self, event_id: int, changes: dict[str, Any]) -> Optional[Event]:
        event = self._events.get(event_id)
        if event is None:
            return None
        updated = replace(event, **changes)
        self._events[event_id] = updated
        return updated

    # Ticket types

    async def get_ticket_type(self, ticket_type_id: int) -> Optional[TicketType]:
        return self._ticket_types.get(ticket_type_id)

    async def list_ticket_types(self, event_id: int) -> list[TicketType]:
        return [t for t in self._ticket_types.values() if t.event_id == event_id]

    async def create_ticket_type(self, ticket_type: NewTicketType) -> TicketType:
        new_ticket_type = TicketType(
            id=self._next_id("ticket_types"),
            event_id=ticket_type.event_id,
            name=ticket_type.name,
            description=ticket_type.description,
            price=ticket_type.price,
            quantity=ticket_type.quantity,
            available=ticket_type.initial_available,
        )
        self._ticket_types[new_ticket_type.id] = new_ticket_type
        return new_ticket_type

    # Purchases

    async def create_purchase(self, purchase: NewPurchase, items: list[NewPurchaseItem]) -> Purchase:
        demand = quantities_by_ticket_type(items)

        async with AsyncExitStack() as stack:
            for ticket_type_id in sorted(demand):
                await stack.enter_async_context(self._ticket_locks[ticket_type_id])

            for ticket_type_id, quantity in demand.items():
                ticket_type = self._ticket_types.get(ticket_type_id)
                if ticket_type is None:
                    raise TicketTypeNotFoundError(ticket_type_id)
                if quantity > ticket_type.available:
                    raise InsufficientInventoryError(
                        ticket_type_id, ticket_type.name, quantity, ticket_type.available
                    )

            new_purchase = Purchase(
                id=self._next_id("purchases"),
                user_id=purchase.user_id,
                event_id=purchase.event_id,
                total_amount=purchase.total_amount,
                purchase_date=datetime.now(timezone.utc),
                status=PURCHASE_STATUS_COMPLETED,
            )
            self._purchases[new_purchase.id] = new_purchase
            self._purchase_items[new_purchase.id] = [
                PurchaseItem(
                    id=self._next_id("purchase_items"),
                    purchase_id=new_purchase.id,
                    ticket_type_id=item.ticket_type_id,
                    quantity=item.quantity,
                    price=item.price,
                    seat_info=item.seat_info,
                )
                for item in items
            ]

            for ticket_type_id, quantity in demand.items():
                ticket_type = self._ticket_types[ticket_type_id]
                self._ticket_types[ticket_type_id] = replace(
                    ticket_type, available=max(0, ticket_type.available - quantity)
                )

        logger.debug("inventory_decremented", purchase_id=new_purchase.id, demand=demand)
        return new_purchase

    async def get_purchase(self, purchase_id: int) -> Optional[Purchase]:
        return self._purchases.get(purchase_id)

    async def list_purchases_by_user(self, user_id: int) -> list[Purchase]:
        purchases = [p for p in self._purchases.values() if p.user_id == user_id]
        return sorted(purchases, key=lambda p: (p.purchase_date, p.id), reverse=True)

    async def list_purchase_items(self, purchase_id: int) -> list[PurchaseItem]:
        return list(self._purchase_items.get(purchase_id, []))
