"""Store interface (repository pattern).

Stores must be swappable and return domain models. The purchase processor and
the other services depend only on this interface, so the in-memory tables can
be replaced by the SQLAlchemy store without touching business logic.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from eventify.core.errors import TicketTypeNotFoundError
from eventify.domain import (
    Category,
    Event,
    EventWithDetails,
    NewCategory,
    NewEvent,
    NewPurchase,
    NewPurchaseItem,
    NewTicketType,
    NewUser,
    Purchase,
    PurchaseItem,
    PurchaseItemWithTicketType,
    PurchaseWithDetails,
    TicketType,
    User,
    field_values,
)


class Storage(ABC):
    """Interface for catalog, inventory, purchase and identity persistence."""

    # Users

    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Case-insensitive lookup."""
        ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup."""
        ...

    @abstractmethod
    async def create_user(self, user: NewUser) -> User:
        """Insert a user.

        Raises:
            UsernameTakenError: If the username exists (case-insensitive).
            EmailTakenError: If the email exists (case-insensitive).
        """
        ...

    # Categories

    @abstractmethod
    async def list_categories(self) -> list[Category]:
        ...

    @abstractmethod
    async def get_category(self, category_id: int) -> Optional[Category]:
        ...

    @abstractmethod
    async def create_category(self, category: NewCategory) -> Category:
        ...

    # Events

    @abstractmethod
    async def list_events(
        self,
        category_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> list[Event]:
        """Return events ordered by id, filtered by category and/or free-text search."""
        ...

    @abstractmethod
    async def list_featured_events(self) -> list[Event]:
        ...

    @abstractmethod
    async def list_trending_events(self) -> list[Event]:
        ...

    @abstractmethod
    async def list_events_by_organizer(self, organizer_id: int) -> list[Event]:
        ...

    @abstractmethod
    async def get_event(self, event_id: int) -> Optional[Event]:
        ...

    @abstractmethod
    async def create_event(self, event: NewEvent) -> Event:
        ...

    @abstractmethod
    async def update_event(self, event_id: int, changes: dict[str, Any]) -> Optional[Event]:
        """Apply a partial update; return None if the event does not exist."""
        ...

    # Ticket types

    @abstractmethod
    async def get_ticket_type(self, ticket_type_id: int) -> Optional[TicketType]:
        ...

    @abstractmethod
    async def list_ticket_types(self, event_id: int) -> list[TicketType]:
        ...

    @abstractmethod
    async def create_ticket_type(self, ticket_type: NewTicketType) -> TicketType:
        ...

    # Purchases

    @abstractmethod
    async def create_purchase(self, purchase: NewPurchase, items: list[NewPurchaseItem]) -> Purchase:
        """Atomically decrement inventory and record a purchase with its items.

        Every ticket type in ``items`` is re-checked and decremented with a
        compare-and-decrement serialized per ticket type. Either all
        decrements and inserts happen, or none do.

        Raises:
            TicketTypeNotFoundError: If a ticket type vanished.
            InsufficientInventoryError: If a ticket type no longer has enough left.
        """
        ...

    @abstractmethod
    async def get_purchase(self, purchase_id: int) -> Optional[Purchase]:
        ...

    @abstractmethod
    async def list_purchases_by_user(self, user_id: int) -> list[Purchase]:
        """Return a user's purchases, newest first."""
        ...

    @abstractmethod
    async def list_purchase_items(self, purchase_id: int) -> list[PurchaseItem]:
        ...

    async def initialize(self) -> None:
        """Prepare the backend (e.g. create tables) before first use."""

    async def close(self) -> None:
        """Release backend resources."""

    # Composed views, built from the primitives above

    async def get_event_with_details(self, event_id: int) -> Optional[EventWithDetails]:
        event = await self.get_event(event_id)
        if event is None:
            return None

        organizer = await self.get_user(event.organizer_id)
        category = await self.get_category(event.category_id)
        if organizer is None or category is None:
            return None

        ticket_types = await self.list_ticket_types(event_id)
        return EventWithDetails(
            **field_values(event),
            organizer=organizer,
            category=category,
            ticket_types=tuple(ticket_types),
        )

    async def get_purchase_with_details(self, purchase_id: int) -> Optional[PurchaseWithDetails]:
        purchase = await self.get_purchase(purchase_id)
        if purchase is None:
            return None
        return await self._with_details(purchase)

    async def list_purchases_with_details(self, user_id: int) -> list[PurchaseWithDetails]:
        purchases = await self.list_purchases_by_user(user_id)
        detailed = [await self._with_details(p) for p in purchases]
        return [p for p in detailed if p is not None]

    async def _with_details(self, purchase: Purchase) -> Optional[PurchaseWithDetails]:
        event = await self.get_event(purchase.event_id)
        if event is None:
            return None

        items = []
        for item in await self.list_purchase_items(purchase.id):
            ticket_type = await self.get_ticket_type(item.ticket_type_id)
            if ticket_type is None:
                raise TicketTypeNotFoundError(item.ticket_type_id)
            items.append(PurchaseItemWithTicketType(**field_values(item), ticket_type=ticket_type))

        return PurchaseWithDetails(**field_values(purchase), event=event, items=tuple(items))
