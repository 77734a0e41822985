"""Domain models representing persisted state.

These are pure domain objects with no API input rules. Both storage backends
return them; SQLAlchemy ORM models live in ``eventify.models``.
"""

from collections import Counter
from dataclasses import dataclass, fields
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Optional

PURCHASE_STATUS_COMPLETED = "completed"


@dataclass(frozen=True)
class SeatingMap:
    """Seat grid for seat-picking; coordinates are zero-based [row, col]."""

    rows: int
    cols: int
    unavailable_seats: tuple[tuple[int, int], ...] = ()

    def __post_init__(self) -> None:
        if self.rows < 1 or self.cols < 1:
            raise ValueError("Seating map needs at least one row and one column")
        for row, col in self.unavailable_seats:
            if not (0 <= row < self.rows and 0 <= col < self.cols):
                raise ValueError(f"Seat [{row}, {col}] is outside the seating map")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SeatingMap":
        return cls(
            rows=data["rows"],
            cols=data["cols"],
            unavailable_seats=tuple(tuple(seat) for seat in data.get("unavailable_seats", ())),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows": self.rows,
            "cols": self.cols,
            "unavailable_seats": [list(seat) for seat in self.unavailable_seats],
        }


@dataclass(frozen=True)
class User:
    id: int
    username: str
    email: str
    hashed_password: str
    full_name: str
    is_organizer: bool
    avatar_url: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Category:
    id: int
    name: str
    icon: str


@dataclass(frozen=True)
class Event:
    id: int
    title: str
    description: str
    image_url: str
    location: str
    start_date: datetime
    end_date: datetime
    organizer_id: int
    category_id: int
    is_featured: bool
    is_trending: bool
    has_seating: bool
    seating_map: Optional[SeatingMap]
    created_at: datetime

    def matches_search(self, term: str) -> bool:
        """Case-insensitive substring match on title, description or location."""
        needle = term.lower()
        return (
            needle in self.title.lower()
            or needle in self.description.lower()
            or needle in self.location.lower()
        )


@dataclass(frozen=True)
class TicketType:
    id: int
    event_id: int
    name: str
    description: Optional[str]
    price: Decimal
    quantity: int
    available: int

    def __post_init__(self) -> None:
        if not 0 <= self.available <= self.quantity:
            raise ValueError("Ticket availability must be between 0 and quantity")

    @property
    def sold(self) -> int:
        return self.quantity - self.available


@dataclass(frozen=True)
class Purchase:
    id: int
    user_id: int
    event_id: int
    total_amount: Decimal
    purchase_date: datetime
    status: str


@dataclass(frozen=True)
class PurchaseItem:
    id: int
    purchase_id: int
    ticket_type_id: int
    quantity: int
    price: Decimal
    seat_info: Optional[dict[str, Any]] = None


# Records handed to a store for insertion (ids and timestamps assigned there)


@dataclass(frozen=True)
class NewUser:
    username: str
    email: str
    hashed_password: str
    full_name: str
    is_organizer: bool = False
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class NewCategory:
    name: str
    icon: str


@dataclass(frozen=True)
class NewEvent:
    title: str
    description: str
    image_url: str
    location: str
    start_date: datetime
    end_date: datetime
    organizer_id: int
    category_id: int
    is_featured: bool = False
    is_trending: bool = False
    has_seating: bool = False
    seating_map: Optional[SeatingMap] = None


@dataclass(frozen=True)
class NewTicketType:
    event_id: int
    name: str
    price: Decimal
    quantity: int
    available: Optional[int] = None
    description: Optional[str] = None

    @property
    def initial_available(self) -> int:
        return self.quantity if self.available is None else self.available


@dataclass(frozen=True)
class NewPurchase:
    user_id: int
    event_id: int
    total_amount: Decimal


@dataclass(frozen=True)
class NewPurchaseItem:
    ticket_type_id: int
    quantity: int
    price: Decimal
    seat_info: Optional[dict[str, Any]] = None


# Composed read views


@dataclass(frozen=True)
class EventWithDetails(Event):
    organizer: Optional[User] = None
    category: Optional[Category] = None
    ticket_types: tuple[TicketType, ...] = ()


@dataclass(frozen=True)
class PurchaseItemWithTicketType(PurchaseItem):
    ticket_type: Optional[TicketType] = None


@dataclass(frozen=True)
class PurchaseWithDetails(Purchase):
    event: Optional[Event] = None
    items: tuple[PurchaseItemWithTicketType, ...] = ()


@dataclass(frozen=True)
class OrganizerEventSummary:
    event_id: int
    title: str
    tickets_sold: int
    tickets_remaining: int
    gross_revenue: Decimal
    ticket_types: tuple[TicketType, ...] = ()


def field_values(record: Any) -> dict[str, Any]:
    """Shallow field mapping of a dataclass instance (unlike ``asdict``, no recursion)."""
    return {f.name: getattr(record, f.name) for f in fields(record)}


def quantities_by_ticket_type(items: Iterable[NewPurchaseItem]) -> dict[int, int]:
    """Total requested quantity per ticket type across all cart lines."""
    demand: Counter[int] = Counter()
    for item in items:
        demand[item.ticket_type_id] += item.quantity
    return dict(demand)
