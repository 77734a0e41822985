from eventify.models.user import User
from eventify.models.event import Category, Event, TicketType
from eventify.models.purchase import Purchase, PurchaseItem

__all__ = ["User", "Category", "Event", "TicketType", "Purchase", "PurchaseItem"]
