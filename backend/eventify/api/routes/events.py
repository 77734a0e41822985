"""
Event endpoints with Redis caching on list operations.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from eventify.api.deps import get_current_user
from eventify.core.logging import get_logger
from eventify.domain import User
from eventify.schemas.event import (
    EventCreate,
    EventDetailResponse,
    EventResponse,
    EventUpdate,
    OrganizerEventSummaryResponse,
    TicketTypeCreate,
    TicketTypeResponse,
)
from eventify.services import event_service
from eventify.services.cache_service import get_cached_events, invalidate_event_cache, set_cached_events
from eventify.stores.factory import get_storage
from eventify.stores.interfaces import Storage

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.post("/", response_model=EventDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Create a new event, optionally with its ticket types. Organizers only."""
    event = await event_service.create_event(storage, event_data, user)
    await invalidate_event_cache()
    return event


@router.get("/", response_model=list[EventResponse])
async def list_events_endpoint(
    category_id: Optional[int] = Query(None, ge=1),
    search: Optional[str] = Query(None, max_length=200),
    storage: Storage = Depends(get_storage),
):
    """
    List events filtered by category and/or free-text search.
    Results are cached in Redis; the cache is invalidated when events change.
    """
    cached = await get_cached_events(category_id, search)
    if cached is not None:
        logger.info("events_list_cache_hit", category_id=category_id, search=search)
        return cached

    events = await event_service.list_events(storage, category_id=category_id, search=search)
    response_data = [EventResponse.model_validate(e).model_dump(mode="json") for e in events]
    await set_cached_events(category_id, search, response_data)
    return response_data


@router.get("/featured", response_model=list[EventResponse])
async def list_featured_endpoint(storage: Storage = Depends(get_storage)):
    return await event_service.list_featured_events(storage)


@router.get("/trending", response_model=list[EventResponse])
async def list_trending_endpoint(storage: Storage = Depends(get_storage)):
    return await event_service.list_trending_events(storage)


@router.get("/organizer/me", response_model=list[EventResponse])
async def list_my_events_endpoint(
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Events organized by the current user."""
    return await event_service.list_organizer_events(storage, user)


@router.get("/organizer/me/summary", response_model=list[OrganizerEventSummaryResponse])
async def organizer_summary_endpoint(
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Dashboard numbers: tickets sold and revenue per event."""
    return await event_service.organizer_summary(storage, user)


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event_endpoint(event_id: int, storage: Storage = Depends(get_storage)):
    """Full event details. Not cached (carries live ticket availability)."""
    return await event_service.get_event_details(storage, event_id)


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event_endpoint(
    event_id: int,
    event_data: EventUpdate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    event = await event_service.update_event(storage, event_id, event_data, user)
    await invalidate_event_cache()
    return event


@router.get("/{event_id}/ticket-types", response_model=list[TicketTypeResponse])
async def list_ticket_types_endpoint(event_id: int, storage: Storage = Depends(get_storage)):
    return await event_service.list_ticket_types(storage, event_id)


@router.post(
    "/{event_id}/ticket-types",
    response_model=TicketTypeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_ticket_type_endpoint(
    event_id: int,
    ticket_data: TicketTypeCreate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Add a ticket type to an event. Only the event's organizer may do this."""
    return await event_service.create_ticket_type(storage, event_id, ticket_data, user)
