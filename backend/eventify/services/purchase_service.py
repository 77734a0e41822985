"""
Purchase processor: cart -> validated purchase with line items.

FLOW
====

  1. Validation pre-pass (no mutation):
     - the event exists
     - every ticket type exists and belongs to that event
     - quantities are summed per ticket type (two cart lines for the same
       ticket type count together) and checked against `available`
     - prices are taken from the catalog; a client-declared unit price or
       total that disagrees is rejected instead of silently trusted

  2. Commit through the store:
     `Storage.create_purchase` re-checks and decrements every ticket type
     with a compare-and-decrement serialized per ticket type, and records
     the purchase and its items in the same atomic step. A purchase that
     loses a race to a concurrent one fails with InsufficientInventory and
     leaves no trace.

  3. Return the purchase joined with its event and ticket types.

There are no retries: an inventory conflict is reported to the caller.
"""

from decimal import Decimal
from typing import Optional

from eventify.core.config import get_settings
from eventify.core.errors import (
    ErrorCode,
    EventNotFoundError,
    ForbiddenError,
    InsufficientInventoryError,
    NotFoundError,
    PurchaseNotFoundError,
    TicketTypeNotFoundError,
    ValidationError,
)
from eventify.core.logging import get_logger
from eventify.core.metrics import purchase_latency, record_purchase_attempt, record_tickets_sold
from eventify.domain import (
    NewPurchase,
    NewPurchaseItem,
    PurchaseWithDetails,
    TicketType,
    User,
    quantities_by_ticket_type,
)
from eventify.schemas.purchase import PurchaseCreate
from eventify.stores.interfaces import Storage

logger = get_logger(__name__)

PRICE_TOLERANCE = Decimal("0.01")


def _prices_differ(declared: Optional[Decimal], actual: Decimal) -> bool:
    return declared is not None and abs(declared - actual) > PRICE_TOLERANCE


def calculate_total(items: list[NewPurchaseItem], service_fee: Decimal) -> Decimal:
    """Sum of quantity * unit price, plus one service fee per purchase."""
    subtotal = sum((item.price * item.quantity for item in items), Decimal("0"))
    return subtotal + service_fee


async def _validate_cart(
    storage: Storage,
    user: User,
    purchase_data: PurchaseCreate,
) -> tuple[NewPurchase, list[NewPurchaseItem]]:
    event_id = purchase_data.purchase.event_id
    if await storage.get_event(event_id) is None:
        raise EventNotFoundError(event_id)

    ticket_types: dict[int, TicketType] = {}
    items = []
    for item in purchase_data.items:
        ticket_type = ticket_types.get(item.ticket_type_id)
        if ticket_type is None:
            ticket_type = await storage.get_ticket_type(item.ticket_type_id)
            if ticket_type is None or ticket_type.event_id != event_id:
                raise TicketTypeNotFoundError(item.ticket_type_id)
            ticket_types[ticket_type.id] = ticket_type

        if _prices_differ(item.price, ticket_type.price):
            raise ValidationError(
                f"Price for {ticket_type.name} has changed to {ticket_type.price}",
                code=ErrorCode.PRICE_MISMATCH,
            )

        items.append(
            NewPurchaseItem(
                ticket_type_id=ticket_type.id,
                quantity=item.quantity,
                price=ticket_type.price,
                seat_info=item.seat_info,
            )
        )

    for ticket_type_id, quantity in quantities_by_ticket_type(items).items():
        ticket_type = ticket_types[ticket_type_id]
        if quantity > ticket_type.available:
            raise InsufficientInventoryError(ticket_type_id, ticket_type.name, quantity, ticket_type.available)

    total = calculate_total(items, get_settings().SERVICE_FEE)
    if _prices_differ(purchase_data.purchase.total_amount, total):
        raise ValidationError(
            f"Declared total does not match order total {total}",
            code=ErrorCode.PRICE_MISMATCH,
        )

    return NewPurchase(user_id=user.id, event_id=event_id, total_amount=total), items


async def create_purchase(storage: Storage, user: User, purchase_data: PurchaseCreate) -> PurchaseWithDetails:
    """
    Validate the cart, commit purchase + items + inventory decrement, and
    return the purchase with its details.
    """
    with purchase_latency.time():
        try:
            header, items = await _validate_cart(storage, user, purchase_data)
            purchase = await storage.create_purchase(header, items)
        except InsufficientInventoryError as exc:
            record_purchase_attempt("insufficient")
            logger.warning(
                "purchase_rejected",
                reason="insufficient_inventory",
                user_id=user.id,
                ticket_type_id=exc.ticket_type_id,
                requested=exc.requested,
                available=exc.available,
            )
            raise
        except NotFoundError as exc:
            record_purchase_attempt("not_found")
            logger.warning("purchase_rejected", reason=exc.code.value, user_id=user.id)
            raise
        except ValidationError as exc:
            record_purchase_attempt("invalid")
            logger.warning("purchase_rejected", reason=exc.code.value, user_id=user.id, detail=exc.message)
            raise

    record_purchase_attempt("success")
    for ticket_type_id, quantity in quantities_by_ticket_type(items).items():
        record_tickets_sold(ticket_type_id, quantity)

    logger.info(
        "purchase_created",
        purchase_id=purchase.id,
        user_id=user.id,
        event_id=purchase.event_id,
        items=len(items),
        total=str(purchase.total_amount),
    )

    details = await storage.get_purchase_with_details(purchase.id)
    if details is None:
        raise PurchaseNotFoundError(purchase.id)
    return details


async def get_purchase(storage: Storage, purchase_id: int, user: User) -> PurchaseWithDetails:
    purchase = await storage.get_purchase_with_details(purchase_id)
    if purchase is None:
        raise PurchaseNotFoundError(purchase_id)
    if purchase.user_id != user.id:
        raise ForbiddenError("Access denied")
    return purchase


async def list_user_purchases(storage: Storage, user: User) -> list[PurchaseWithDetails]:
    """All purchases of a user with details, newest first."""
    return await storage.list_purchases_with_details(user.id)
