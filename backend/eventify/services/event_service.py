"""
Catalog service: categories, events, ticket types and the organizer dashboard.

Services depend only on the Storage interface and raise domain errors.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from eventify.core.errors import (
    CategoryNotFoundError,
    EventNotFoundError,
    ForbiddenError,
    ValidationError,
)
from eventify.core.logging import get_logger
from eventify.domain import (
    Category,
    Event,
    EventWithDetails,
    NewEvent,
    NewTicketType,
    OrganizerEventSummary,
    TicketType,
    User,
)
from eventify.schemas.event import EventCreate, EventUpdate, TicketTypeCreate
from eventify.stores.interfaces import Storage

logger = get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything we store is UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


async def list_categories(storage: Storage) -> list[Category]:
    return await storage.list_categories()


async def list_events(
    storage: Storage,
    category_id: Optional[int] = None,
    search: Optional[str] = None,
) -> list[Event]:
    """Filter by category (exact) and search (substring of title, description or location)."""
    return await storage.list_events(category_id=category_id, search=search or None)


async def list_featured_events(storage: Storage) -> list[Event]:
    return await storage.list_featured_events()


async def list_trending_events(storage: Storage) -> list[Event]:
    return await storage.list_trending_events()


async def get_event_details(storage: Storage, event_id: int) -> EventWithDetails:
    event = await storage.get_event_with_details(event_id)
    if event is None:
        raise EventNotFoundError(event_id)
    return event


async def _get_owned_event(storage: Storage, event_id: int, user: User, action: str) -> Event:
    event = await storage.get_event(event_id)
    if event is None:
        raise EventNotFoundError(event_id)
    if event.organizer_id != user.id:
        logger.warning("event_access_denied", event_id=event_id, user_id=user.id, action=action)
        raise ForbiddenError(f"Only the event organizer can {action}")
    return event


async def _require_category(storage: Storage, category_id: int) -> None:
    if await storage.get_category(category_id) is None:
        raise CategoryNotFoundError(category_id)


async def create_event(storage: Storage, event_data: EventCreate, organizer: User) -> EventWithDetails:
    """Create an event (and any inline ticket types) owned by the organizer."""
    if not organizer.is_organizer:
        raise ForbiddenError("Only organizers can create events")

    await _require_category(storage, event_data.category_id)

    event = await storage.create_event(
        NewEvent(
            title=event_data.title,
            description=event_data.description,
            image_url=event_data.image_url,
            location=event_data.location,
            start_date=event_data.start_date,
            end_date=event_data.end_date,
            organizer_id=organizer.id,
            category_id=event_data.category_id,
            is_featured=event_data.is_featured,
            is_trending=event_data.is_trending,
            has_seating=event_data.has_seating,
            seating_map=event_data.seating_map.to_domain() if event_data.seating_map else None,
        )
    )
    for ticket_data in event_data.ticket_types:
        await storage.create_ticket_type(_new_ticket_type(event.id, ticket_data))

    logger.info(
        "event_created",
        event_id=event.id,
        title=event.title,
        organizer_id=organizer.id,
        ticket_types=len(event_data.ticket_types),
    )
    return await get_event_details(storage, event.id)


async def update_event(storage: Storage, event_id: int, event_data: EventUpdate, user: User) -> Event:
    """Partially update an event. Only its organizer may do this."""
    event = await _get_owned_event(storage, event_id, user, "update this event")

    changes = event_data.model_dump(exclude_unset=True)
    if "seating_map" in changes:
        changes["seating_map"] = event_data.seating_map.to_domain() if event_data.seating_map else None
    for required in ("title", "description", "image_url", "location", "start_date", "end_date",
                     "category_id", "is_featured", "is_trending", "has_seating"):
        if required in changes and changes[required] is None:
            raise ValidationError(f"{required} cannot be null")
    if "category_id" in changes:
        await _require_category(storage, changes["category_id"])

    start = _as_utc(changes.get("start_date", event.start_date))
    end = _as_utc(changes.get("end_date", event.end_date))
    if end < start:
        raise ValidationError("end_date must not be before start_date")

    if not changes:
        return event

    updated = await storage.update_event(event_id, changes)
    if updated is None:
        raise EventNotFoundError(event_id)

    logger.info("event_updated", event_id=event_id, fields=sorted(changes))
    return updated


async def list_ticket_types(storage: Storage, event_id: int) -> list[TicketType]:
    if await storage.get_event(event_id) is None:
        raise EventNotFoundError(event_id)
    return await storage.list_ticket_types(event_id)


def _new_ticket_type(event_id: int, data: TicketTypeCreate) -> NewTicketType:
    return NewTicketType(
        event_id=event_id,
        name=data.name,
        description=data.description,
        price=data.price,
        quantity=data.quantity,
    )


async def create_ticket_type(
    storage: Storage,
    event_id: int,
    ticket_data: TicketTypeCreate,
    user: User,
) -> TicketType:
    """Add a ticket type to an event; it starts with available == quantity."""
    await _get_owned_event(storage, event_id, user, "add ticket types")

    ticket_type = await storage.create_ticket_type(_new_ticket_type(event_id, ticket_data))
    logger.info(
        "ticket_type_created",
        ticket_type_id=ticket_type.id,
        event_id=event_id,
        quantity=ticket_type.quantity,
        price=str(ticket_type.price),
    )
    return ticket_type


async def list_organizer_events(storage: Storage, user: User) -> list[Event]:
    return await storage.list_events_by_organizer(user.id)


async def organizer_summary(storage: Storage, user: User) -> list[OrganizerEventSummary]:
    """Tickets sold and gross revenue per event, computed from the inventory ledger."""
    if not user.is_organizer:
        raise ForbiddenError("Only organizers have a sales dashboard")

    summaries = []
    for event in await storage.list_events_by_organizer(user.id):
        ticket_types = await storage.list_ticket_types(event.id)
        summaries.append(
            OrganizerEventSummary(
                event_id=event.id,
                title=event.title,
                tickets_sold=sum(t.sold for t in ticket_types),
                tickets_remaining=sum(t.available for t in ticket_types),
                gross_revenue=sum((t.price * t.sold for t in ticket_types), Decimal("0")),
                ticket_types=tuple(ticket_types),
            )
        )
    return summaries
