"""
Purchase and line-item models.

A purchase and its items are inserted in the same transaction as the
inventory decrement and never modified afterwards.
"""

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from eventify.db.base import Base, utcnow


class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    purchase_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    status = Column(String(20), nullable=False, default="completed")

    items = relationship("PurchaseItem", back_populates="purchase", lazy="selectin", order_by="PurchaseItem.id")

    __table_args__ = (
        CheckConstraint("status IN ('completed')", name="check_purchase_status"),
    )

    def __repr__(self) -> str:
        return f"<Purchase(id={self.id}, user={self.user_id}, event={self.event_id}, total={self.total_amount})>"


class PurchaseItem(Base):
    __tablename__ = "purchase_items"

    id = Column(Integer, primary_key=True, index=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id"), nullable=False, index=True)
    ticket_type_id = Column(Integer, ForeignKey("ticket_types.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    seat_info = Column(JSON, nullable=True)

    purchase = relationship("Purchase", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_item_quantity_positive"),
    )
