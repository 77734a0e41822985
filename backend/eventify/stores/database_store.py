"""
SQLAlchemy-backed storage.

CONCURRENCY STRATEGY: Conditional decrement in one transaction
==============================================================

Problem:
  Two carts read available=1 for the same ticket type, both decrement,
  both succeed. Result: overselling.

Solution:
  For each ticket type in the cart (ascending id order) we run

    UPDATE ticket_types SET available = available - :qty
    WHERE id = :id AND available >= :qty

  inside the purchase transaction. The row lock taken by the UPDATE
  serializes concurrent purchases of the same ticket type, and the WHERE
  clause is the compare-and-set: rowcount == 0 means another purchase got
  there first. In that case the whole transaction rolls back, so earlier
  decrements of the same cart are undone and no purchase rows exist.

  The CHECK constraint (available >= 0) is the final safety net.
"""

from typing import Any, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine

from eventify import domain
from eventify import models
from eventify.core.errors import (
    EmailTakenError,
    InsufficientInventoryError,
    TicketTypeNotFoundError,
    UsernameTakenError,
)
from eventify.core.logging import get_logger
from eventify.db.session import create_session_factory, create_tables
from eventify.domain import quantities_by_ticket_type
from eventify.stores.interfaces import Storage

logger = get_logger(__name__)


def _user(row: models.User) -> domain.User:
    return domain.User(
        id=row.id,
        username=row.username,
        email=row.email,
        hashed_password=row.hashed_password,
        full_name=row.full_name,
        is_organizer=row.is_organizer,
        avatar_url=row.avatar_url,
        created_at=row.created_at,
    )


def _category(row: models.Category) -> domain.Category:
    return domain.Category(id=row.id, name=row.name, icon=row.icon)


def _event(row: models.Event) -> domain.Event:
    return domain.Event(
        id=row.id,
        title=row.title,
        description=row.description,
        image_url=row.image_url,
        location=row.location,
        start_date=row.start_date,
        end_date=row.end_date,
        organizer_id=row.organizer_id,
        category_id=row.category_id,
        is_featured=row.is_featured,
        is_trending=row.is_trending,
        has_seating=row.has_seating,
        seating_map=domain.SeatingMap.from_dict(row.seating_map) if row.seating_map else None,
        created_at=row.created_at,
    )


def _ticket_type(row: models.TicketType) -> domain.TicketType:
    return domain.TicketType(
        id=row.id,
        event_id=row.event_id,
        name=row.name,
        description=row.description,
        price=row.price,
        quantity=row.quantity,
        available=row.available,
    )


def _purchase(row: models.Purchase) -> domain.Purchase:
    return domain.Purchase(
        id=row.id,
        user_id=row.user_id,
        event_id=row.event_id,
        total_amount=row.total_amount,
        purchase_date=row.purchase_date,
        status=row.status,
    )


def _purchase_item(row: models.PurchaseItem) -> domain.PurchaseItem:
    return domain.PurchaseItem(
        id=row.id,
        purchase_id=row.purchase_id,
        ticket_type_id=row.ticket_type_id,
        quantity=row.quantity,
        price=row.price,
        seat_info=row.seat_info,
    )


class DatabaseStorage(Storage):
    """Storage over an async SQLAlchemy engine (one session per operation)."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    async def _scalar(self, query) -> Optional[Any]:
        async with self._session_factory() as session:
            return (await session.execute(query)).scalar_one_or_none()

    async def _scalars(self, query) -> list[Any]:
        async with self._session_factory() as session:
            return list((await session.execute(query)).scalars().all())

    # Users

    async def get_user(self, user_id: int) -> Optional[domain.User]:
        row = await self._scalar(select(models.User).where(models.User.id == user_id))
        return _user(row) if row else None

    async def get_user_by_username(self, username: str) -> Optional[domain.User]:
        row = await self._scalar(select(models.User).where(func.lower(models.User.username) == username.lower()))
        return _user(row) if row else None

    async def get_user_by_email(self, email: str) -> Optional[domain.User]:
        row = await self._scalar(select(models.User).where(func.lower(models.User.email) == email.lower()))
        return _user(row) if row else None

    async def create_user(self, user: domain.NewUser) -> domain.User:
        if await self.get_user_by_username(user.username):
            raise UsernameTakenError()
        if await self.get_user_by_email(user.email):
            raise EmailTakenError()

        row = models.User(
            username=user.username,
            email=user.email,
            hashed_password=user.hashed_password,
            full_name=user.full_name,
            is_organizer=user.is_organizer,
            avatar_url=user.avatar_url,
        )
        async with self._session_factory() as session:
            session.add(row)
            try:
                await session.commit()
            except IntegrityError:
                # Lost a race against a concurrent registration
                await session.rollback()
                if await self.get_user_by_username(user.username):
                    raise UsernameTakenError()
                raise EmailTakenError()
        return _user(row)

    # Categories

    async def list_categories(self) -> list[domain.Category]:
        rows = await self._scalars(select(models.Category).order_by(models.Category.id))
        return [_category(r) for r in rows]

    async def get_category(self, category_id: int) -> Optional[domain.Category]:
        row = await self._scalar(select(models.Category).where(models.Category.id == category_id))
        return _category(row) if row else None

    async def create_category(self, category: domain.NewCategory) -> domain.Category:
        row = models.Category(name=category.name, icon=category.icon)
        async with self._session_factory() as session:
            session.add(row)
            await session.commit()
        return _category(row)

    # Events

    async def list_events(
        self,
        category_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> list[domain.Event]:
        query = select(models.Event)
        if category_id is not None:
            query = query.where(models.Event.category_id == category_id)
        if search:
            needle = search.lower()
            query = query.where(
                or_(
                    func.lower(models.Event.title).contains(needle, autoescape=True),
                    func.lower(models.Event.description).contains(needle, autoescape=True),
                    func.lower(models.Event.location).contains(needle, autoescape=True),
                )
            )
        rows = await self._scalars(query.order_by(models.Event.id))
        return [_event(r) for r in rows]

    async def list_featured_events(self) -> list[domain.Event]:
        rows = await self._scalars(
            select(models.Event).where(models.Event.is_featured.is_(True)).order_by(models.Event.id)
        )
        return [_event(r) for r in rows]

    async def list_trending_events(self) -> list[domain.Event]:
        rows = await self._scalars(
            select(models.Event).where(models.Event.is_trending.is_(True)).order_by(models.Event.id)
        )
        return [_event(r) for r in rows]

    async def list_events_by_organizer(self, organizer_id: int) -> list[domain.Event]:
        rows = await self._scalars(
            select(models.Event).where(models.Event.organizer_id == organizer_id).order_by(models.Event.id)
        )
        return [_event(r) for r in rows]

    async def get_event(self, event_id: int) -> Optional[domain.Event]:
        row = await self._scalar(select(models.Event).where(models.Event.id == event_id))
        return _event(row) if row else None

    async def create_event(self, event: domain.NewEvent) -> domain.Event:
        row = models.Event(
            title=event.title,
            description=event.description,
            image_url=event.image_url,
            location=event.location,
            start_date=event.start_date,
            end_date=event.end_date,
            organizer_id=event.organizer_id,
            category_id=event.category_id,
            is_featured=event.is_featured,
            is_trending=event.is_trending,
            has_seating=event.has_seating,
            seating_map=event.seating_map.to_dict() if event.seating_map else None,
        )
        async with self._session_factory() as session:
            session.add(row)
            await session.commit()
        return _event(row)

    async def update_event(self, event_id: int, changes: dict[str, Any]) -> Optional[domain.Event]:
        async with self._session_factory() as session:
            row = await session.get(models.Event, event_id)
            if row is None:
                return None
            for name, value in changes.items():
                if name == "seating_map" and value is not None:
                    value = value.to_dict()
                setattr(row, name, value)
            await session.commit()
            await session.refresh(row)
            return _event(row)

    # Ticket types

    async def get_ticket_type(self, ticket_type_id: int) -> Optional[domain.TicketType]:
        row = await self._scalar(select(models.TicketType).where(models.TicketType.id == ticket_type_id))
        return _ticket_type(row) if row else None

    async def list_ticket_types(self, event_id: int) -> list[domain.TicketType]:
        rows = await self._scalars(
            select(models.TicketType).where(models.TicketType.event_id == event_id).order_by(models.TicketType.id)
        )
        return [_ticket_type(r) for r in rows]

    async def create_ticket_type(self, ticket_type: domain.NewTicketType) -> domain.TicketType:
        row = models.TicketType(
            event_id=ticket_type.event_id,
            name=ticket_type.name,
            description=ticket_type.description,
            price=ticket_type.price,
            quantity=ticket_type.quantity,
            available=ticket_type.initial_available,
        )
        async with self._session_factory() as session:
            session.add(row)
            await session.commit()
        return _ticket_type(row)

    # Purchases

    async def create_purchase(
        self,
        purchase: domain.NewPurchase,
        items: list[domain.NewPurchaseItem],
    ) -> domain.Purchase:
        demand = quantities_by_ticket_type(items)

        async with self._session_factory() as session:
            async with session.begin():
                for ticket_type_id in sorted(demand):
                    quantity = demand[ticket_type_id]
                    result = await session.execute(
                        update(models.TicketType)
                        .where(
                            models.TicketType.id == ticket_type_id,
                            models.TicketType.available >= quantity,
                        )
                        .values(available=models.TicketType.available - quantity)
                    )
                    if result.rowcount == 0:
                        current = await session.get(models.TicketType, ticket_type_id)
                        if current is None:
                            raise TicketTypeNotFoundError(ticket_type_id)
                        raise InsufficientInventoryError(
                            ticket_type_id, current.name, quantity, current.available
                        )

                row = models.Purchase(
                    user_id=purchase.user_id,
                    event_id=purchase.event_id,
                    total_amount=purchase.total_amount,
                    status=domain.PURCHASE_STATUS_COMPLETED,
                    items=[
                        models.PurchaseItem(
                            ticket_type_id=item.ticket_type_id,
                            quantity=item.quantity,
                            price=item.price,
                            seat_info=item.seat_info,
                        )
                        for item in items
                    ],
                )
                session.add(row)
                await session.flush()

        logger.debug("inventory_decremented", purchase_id=row.id, demand=demand)
        return _purchase(row)

    async def get_purchase(self, purchase_id: int) -> Optional[domain.Purchase]:
        row = await self._scalar(select(models.Purchase).where(models.Purchase.id == purchase_id))
        return _purchase(row) if row else None

    async def list_purchases_by_user(self, user_id: int) -> list[domain.Purchase]:
        rows = await self._scalars(
            select(models.Purchase)
            .where(models.Purchase.user_id == user_id)
            .order_by(models.Purchase.purchase_date.desc(), models.Purchase.id.desc())
        )
        return [_purchase(r) for r in rows]

    async def list_purchase_items(self, purchase_id: int) -> list[domain.PurchaseItem]:
        rows = await self._scalars(
            select(models.PurchaseItem)
            .where(models.PurchaseItem.purchase_id == purchase_id)
            .order_by(models.PurchaseItem.id)
        )
        return [_purchase_item(r) for r in rows]

    async def initialize(self) -> None:
        await create_tables(self._engine)

    async def close(self) -> None:
        await self._engine.dispose()
