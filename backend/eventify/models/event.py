"""
Catalog models: categories, events and their ticket types.

Key design decisions:
- `available` on ticket_types is the inventory ledger; it is only written by
  the conditional UPDATE in the purchase commit
- CHECK constraints keep 0 <= available <= quantity at the DB level
- Seating map is stored as JSON ({rows, cols, unavailable_seats})
"""

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)

from eventify.db.base import Base, TimestampMixin


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    icon = Column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name})>"


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    image_url = Column(String(500), nullable=False, default="")
    location = Column(String(255), nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    organizer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    is_trending = Column(Boolean, nullable=False, default=False)
    has_seating = Column(Boolean, nullable=False, default=False)
    seating_map = Column(JSON, nullable=True)

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="check_event_dates_ordered"),
        Index("ix_events_start_date", "start_date"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title})>"


class TicketType(Base):
    __tablename__ = "ticket_types"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(1000), nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    available = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("available >= 0", name="check_available_non_negative"),
        CheckConstraint("available <= quantity", name="check_available_lte_quantity"),
        CheckConstraint("quantity > 0", name="check_quantity_positive"),
        CheckConstraint("price >= 0", name="check_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<TicketType(id={self.id}, name={self.name}, available={self.available}/{self.quantity})>"
