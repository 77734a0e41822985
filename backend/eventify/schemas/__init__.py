from eventify.schemas.user import AuthStatus, SessionResponse, UserCreate, UserLogin, UserPublic, UserResponse
from eventify.schemas.event import (
    CategoryResponse,
    EventCreate,
    EventDetailResponse,
    EventResponse,
    EventUpdate,
    OrganizerEventSummaryResponse,
    SeatingMapSchema,
    TicketTypeCreate,
    TicketTypeResponse,
)
from eventify.schemas.purchase import PurchaseCreate, PurchaseItemCreate, PurchaseResponse

__all__ = [
    "UserCreate", "UserLogin", "UserResponse", "UserPublic", "SessionResponse", "AuthStatus",
    "CategoryResponse", "SeatingMapSchema", "EventCreate", "EventUpdate", "EventResponse",
    "EventDetailResponse", "OrganizerEventSummaryResponse", "TicketTypeCreate", "TicketTypeResponse",
    "PurchaseCreate", "PurchaseItemCreate", "PurchaseResponse",
]
