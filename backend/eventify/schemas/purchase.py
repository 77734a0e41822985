"""
Pydantic schemas for checkout request/response validation.

Client-declared prices are optional; when sent they must match the server's
prices (see purchase_service).
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field

from eventify.schemas.event import EventResponse, TicketTypeResponse


class PurchaseHeader(BaseModel):
    event_id: int
    total_amount: Optional[Decimal] = Field(None, ge=0)


class PurchaseItemCreate(BaseModel):
    ticket_type_id: int
    quantity: int = Field(..., gt=0)
    price: Optional[Decimal] = Field(None, ge=0)
    seat_info: Optional[dict[str, Any]] = None


class PurchaseCreate(BaseModel):
    purchase: PurchaseHeader
    items: list[PurchaseItemCreate] = Field(..., min_length=1)


class PurchaseItemResponse(BaseModel):
    id: int
    purchase_id: int
    ticket_type_id: int
    quantity: int
    price: Decimal
    seat_info: Optional[dict[str, Any]]
    ticket_type: TicketTypeResponse

    model_config = {"from_attributes": True}


class PurchaseResponse(BaseModel):
    id: int
    user_id: int
    event_id: int
    total_amount: Decimal
    purchase_date: datetime
    status: str
    event: EventResponse
    items: list[PurchaseItemResponse]

    model_config = {"from_attributes": True}
