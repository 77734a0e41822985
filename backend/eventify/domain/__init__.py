from eventify.domain.models import (
    PURCHASE_STATUS_COMPLETED,
    Category,
    Event,
    EventWithDetails,
    NewCategory,
    NewEvent,
    NewPurchase,
    NewPurchaseItem,
    NewTicketType,
    NewUser,
    OrganizerEventSummary,
    Purchase,
    PurchaseItem,
    PurchaseItemWithTicketType,
    PurchaseWithDetails,
    SeatingMap,
    TicketType,
    User,
    field_values,
    quantities_by_ticket_type,
)

__all__ = [
    "PURCHASE_STATUS_COMPLETED",
    "Category",
    "Event",
    "EventWithDetails",
    "NewCategory",
    "NewEvent",
    "NewPurchase",
    "NewPurchaseItem",
    "NewTicketType",
    "NewUser",
    "OrganizerEventSummary",
    "Purchase",
    "PurchaseItem",
    "PurchaseItemWithTicketType",
    "PurchaseWithDetails",
    "SeatingMap",
    "TicketType",
    "User",
    "field_values",
    "quantities_by_ticket_type",
]
