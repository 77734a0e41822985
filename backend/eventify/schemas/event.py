"""
Pydantic schemas for catalog request/response validation.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from eventify.domain import SeatingMap
from eventify.schemas.user import UserPublic


class SeatingMapSchema(BaseModel):
    rows: int = Field(..., ge=1, le=500)
    cols: int = Field(..., ge=1, le=500)
    unavailable_seats: list[tuple[int, int]] = Field(default_factory=list)

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def seats_inside_grid(self):
        for row, col in self.unavailable_seats:
            if not (0 <= row < self.rows and 0 <= col < self.cols):
                raise ValueError(f"Seat [{row}, {col}] is outside the seating map")
        return self

    def to_domain(self) -> SeatingMap:
        return SeatingMap(
            rows=self.rows,
            cols=self.cols,
            unavailable_seats=tuple(tuple(seat) for seat in self.unavailable_seats),
        )


class CategoryResponse(BaseModel):
    id: int
    name: str
    icon: str

    model_config = {"from_attributes": True}


class TicketTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    quantity: int = Field(..., gt=0, le=1_000_000)


class TicketTypeResponse(BaseModel):
    id: int
    event_id: int
    name: str
    description: Optional[str]
    price: Decimal
    quantity: int
    available: int

    model_config = {"from_attributes": True}


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken to be UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _check_dates(start: Optional[datetime], end: Optional[datetime]) -> None:
    if start is not None and end is not None and end < start:
        raise ValueError("end_date must not be before start_date")


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    image_url: str = Field("", max_length=500)
    location: str = Field(..., min_length=1, max_length=255)
    start_date: datetime
    end_date: datetime
    category_id: int
    is_featured: bool = False
    is_trending: bool = False
    has_seating: bool = False
    seating_map: Optional[SeatingMapSchema] = None
    ticket_types: list[TicketTypeCreate] = Field(default_factory=list)

    @field_validator("start_date", "end_date")
    @classmethod
    def dates_utc(cls, value):
        return _as_utc(value)

    @model_validator(mode="after")
    def dates_ordered(self):
        _check_dates(self.start_date, self.end_date)
        return self


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    image_url: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    category_id: Optional[int] = None
    is_featured: Optional[bool] = None
    is_trending: Optional[bool] = None
    has_seating: Optional[bool] = None
    seating_map: Optional[SeatingMapSchema] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def dates_utc(cls, value):
        return _as_utc(value)

    @model_validator(mode="after")
    def dates_ordered(self):
        _check_dates(self.start_date, self.end_date)
        return self


class EventResponse(BaseModel):
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
    seating_map: Optional[SeatingMapSchema]
    created_at: datetime

    model_config = {"from_attributes": True}


class EventDetailResponse(EventResponse):
    organizer: UserPublic
    category: CategoryResponse
    ticket_types: list[TicketTypeResponse]


class OrganizerEventSummaryResponse(BaseModel):
    event_id: int
    title: str
    tickets_sold: int
    tickets_remaining: int
    gross_revenue: Decimal
    ticket_types: list[TicketTypeResponse]

    model_config = {"from_attributes": True}

