"""Relational backend on a SQLAlchemy async session.

Quantity changes never read-then-write from the client. Increments are a
single ``INSERT .. ON CONFLICT DO UPDATE SET quantity = quantity + :delta``,
decrements a conditional ``UPDATE .. WHERE quantity + :delta >= 0``, both with
``RETURNING``, so concurrent writers on the same row cannot lose updates or
drive a quantity below zero.

Everything done inside ``transaction()`` commits together. Calls made
outside one commit on their own.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_tracker.core.converters import (
    audit_from_model,
    audit_to_model,
    booking_from_model,
    item_from_model,
    location_from_model,
)
from inventory_tracker.core.errors import (
    DuplicateSkuError,
    InsufficientStockError,
    StorageUnavailableError,
    UnknownLocationError,
    UnknownSkuError,
)
from inventory_tracker.core.models import (
    AuditEntry,
    AuditFilter,
    Booking,
    Item,
    Location,
    StockLevel,
)
from inventory_tracker.db.booking import Booking as BookingModel
from inventory_tracker.db.inventory.audit import AuditTrailEntry as AuditModel
from inventory_tracker.db.inventory.stock import StockByLocation as StockModel
from inventory_tracker.db.item import Item as ItemModel
from inventory_tracker.db.location import Location as LocationModel
from inventory_tracker.db.reason import AdjustmentReason as ReasonModel
from inventory_tracker.stores.base import (
    AuditRepository,
    BookingRepository,
    InventoryStore,
    ItemRepository,
    LocationRepository,
    ReasonRepository,
    StockRepository,
)

# Dialects with INSERT .. ON CONFLICT DO UPDATE .. RETURNING
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class _SqlRepository:

    def __init__(self, store: "SqlInventoryStore") -> None:
        self._store = store

    @property
    def _session(self) -> AsyncSession:
        return self._store.session


class SqlItemRepository(_SqlRepository, ItemRepository):

    async def get(self, sku: str) -> Item | None:
        async with self._store.reading():
            model = await self._session.get(ItemModel, sku)
            return item_from_model(model) if model else None

    async def list_all(self) -> list[Item]:
        async with self._store.reading():
            res = await self._session.execute(select(ItemModel).order_by(func.lower(ItemModel.name).asc()))
            return [item_from_model(m) for m in res.scalars().all()]

    async def add(self, item: Item) -> None:
        async with self._store.transaction():
            if await self._session.get(ItemModel, item.sku) is not None:
                raise DuplicateSkuError(item.sku)
            self._session.add(
                ItemModel(
                    sku=item.sku,
                    name=item.name,
                    selling_price_minor_units=item.selling_price_minor_units,
                    quantity_unit=item.quantity_unit.value,
                )
            )
            try:
                await self._session.flush()
            except IntegrityError as exc:
                # lost a race with another client creating the same SKU
                raise DuplicateSkuError(item.sku) from exc

    async def update(self, item: Item) -> None:
        async with self._store.transaction():
            model = await self._session.get(ItemModel, item.sku)
            if model is None:
                raise UnknownSkuError(item.sku)
            model.name = item.name
            model.selling_price_minor_units = item.selling_price_minor_units
            model.quantity_unit = item.quantity_unit.value

    async def upsert_many(self, items: list[Item]) -> int:
        async with self._store.transaction():
            for item in items:
                await self._session.merge(
                    ItemModel(
                        sku=item.sku,
                        name=item.name,
                        selling_price_minor_units=item.selling_price_minor_units,
                        quantity_unit=item.quantity_unit.value,
                    )
                )
        return len(items)

    async def delete(self, sku: str) -> bool:
        async with self._store.transaction():
            res = await self._session.execute(delete(ItemModel).where(ItemModel.sku == sku))
            return (res.rowcount or 0) > 0


class SqlLocationRepository(_SqlRepository, LocationRepository):

    async def get(self, location_id: str) -> Location | None:
        async with self._store.reading():
            model = await self._session.get(LocationModel, location_id)
            return location_from_model(model) if model else None

    async def list_all(self) -> list[Location]:
        async with self._store.reading():
            res = await self._session.execute(select(LocationModel).order_by(func.lower(LocationModel.name).asc()))
            return [location_from_model(m) for m in res.scalars().all()]

    async def add(self, location: Location) -> None:
        async with self._store.transaction():
            self._session.add(LocationModel(id=location.id, name=location.name))

    async def update(self, location: Location) -> None:
        async with self._store.transaction():
            model = await self._session.get(LocationModel, location.id)
            if model is None:
                raise UnknownLocationError(location.id)
            model.name = location.name

    async def delete(self, location_id: str) -> bool:
        async with self._store.transaction():
            res = await self._session.execute(delete(LocationModel).where(LocationModel.id == location_id))
            return (res.rowcount or 0) > 0


class SqlStockRepository(_SqlRepository, StockRepository):

    async def get(self, sku: str, location_id: str) -> int:
        async with self._store.reading():
            return await self._current(sku, location_id)

    async def _current(self, sku: str, location_id: str) -> int:
        stock_tbl = StockModel.__table__
        res = await self._session.execute(
            select(stock_tbl.c.quantity).where(
                stock_tbl.c.sku == sku,
                stock_tbl.c.location_id == location_id,
            )
        )
        return int(res.scalar_one_or_none() or 0)

    def _insert(self):
        dialect = self._session.get_bind().dialect.name
        try:
            return _UPSERT_INSERTS[dialect]
        except KeyError:
            raise StorageUnavailableError(f"No atomic upsert available for dialect {dialect!r}") from None

    async def apply_delta(self, sku: str, location_id: str, delta: int) -> int:
        stock_tbl = StockModel.__table__
        async with self._store.transaction():
            if delta >= 0:
                upsert = (
                    self._insert()(stock_tbl)
                    .values(
                        id=str(uuid.uuid4()),
                        sku=sku,
                        location_id=location_id,
                        quantity=delta,
                    )
                    .on_conflict_do_update(
                        index_elements=[stock_tbl.c.sku, stock_tbl.c.location_id],
                        set_={"quantity": stock_tbl.c.quantity + delta},
                    )
                    .returning(stock_tbl.c.quantity)
                )
                row = (await self._session.execute(upsert)).first()
                return int(row.quantity)

            decrement = (
                update(stock_tbl)
                .where(
                    stock_tbl.c.sku == sku,
                    stock_tbl.c.location_id == location_id,
                    stock_tbl.c.quantity + delta >= 0,
                )
                .values(quantity=stock_tbl.c.quantity + delta)
                .returning(stock_tbl.c.quantity)
            )
            row = (await self._session.execute(decrement)).first()
            if row is None:
                available = await self._current(sku, location_id)
                raise InsufficientStockError(sku, location_id, available=available, requested=-delta)
            return int(row.quantity)

    async def _levels(self, *criteria) -> list[StockLevel]:
        stock_tbl = StockModel.__table__
        async with self._store.reading():
            res = await self._session.execute(
                select(stock_tbl.c.sku, stock_tbl.c.location_id, stock_tbl.c.quantity)
                .where(*criteria)
                .order_by(stock_tbl.c.sku, stock_tbl.c.location_id)
            )
            return [StockLevel(r.sku, r.location_id, int(r.quantity)) for r in res.all()]

    async def list_all(self) -> list[StockLevel]:
        return await self._levels()

    async def list_for_sku(self, sku: str) -> list[StockLevel]:
        return await self._levels(StockModel.__table__.c.sku == sku)

    async def list_for_location(self, location_id: str) -> list[StockLevel]:
        return await self._levels(StockModel.__table__.c.location_id == location_id)

    async def delete_for_sku(self, sku: str) -> int:
        async with self._store.transaction():
            res = await self._session.execute(delete(StockModel).where(StockModel.sku == sku))
            return res.rowcount or 0

    async def delete_for_location(self, location_id: str) -> int:
        async with self._store.transaction():
            res = await self._session.execute(delete(StockModel).where(StockModel.location_id == location_id))
            return res.rowcount or 0


class SqlAuditRepository(_SqlRepository, AuditRepository):

    async def append(self, entry: AuditEntry) -> None:
        async with self._store.transaction():
            self._session.add(audit_to_model(entry))
            await self._session.flush()

    async def fetch(self, filters: AuditFilter, offset: int, limit: int) -> list[AuditEntry]:
        stmt = select(AuditModel)
        if filters.start_time is not None:
            stmt = stmt.where(AuditModel.timestamp >= filters.start_time)
        if filters.end_time is not None:
            stmt = stmt.where(AuditModel.timestamp <= filters.end_time)
        if filters.kind is not None:
            stmt = stmt.where(AuditModel.kind == filters.kind.value)
        if filters.sku is not None:
            stmt = stmt.where(AuditModel.sku == filters.sku)
        stmt = stmt.order_by(AuditModel.timestamp.desc(), AuditModel.seq.desc()).offset(offset).limit(limit)
        async with self._store.reading():
            res = await self._session.execute(stmt)
            return [audit_from_model(m) for m in res.scalars().all()]


class SqlBookingRepository(_SqlRepository, BookingRepository):

    async def get(self, sku: str) -> Booking | None:
        async with self._store.reading():
            model = await self._session.get(BookingModel, sku)
            return booking_from_model(model) if model else None

    async def save(self, booking: Booking) -> None:
        async with self._store.transaction():
            await self._session.merge(BookingModel(sku=booking.sku, quantity=booking.quantity, note=booking.note))

    async def delete(self, sku: str) -> bool:
        async with self._store.transaction():
            res = await self._session.execute(delete(BookingModel).where(BookingModel.sku == sku))
            return (res.rowcount or 0) > 0


class SqlReasonRepository(_SqlRepository, ReasonRepository):

    async def list_all(self) -> list[str]:
        async with self._store.reading():
            res = await self._session.execute(
                select(ReasonModel.name).order_by(ReasonModel.created_at.asc(), ReasonModel.name.asc())
            )
            return list(res.scalars().all())

    async def add(self, reason: str) -> bool:
        async with self._store.transaction():
            if await self._session.get(ReasonModel, reason) is not None:
                return False
            self._session.add(ReasonModel(name=reason))
            return True

    async def remove(self, reason: str) -> bool:
        async with self._store.transaction():
            res = await self._session.execute(delete(ReasonModel).where(ReasonModel.name == reason))
            return (res.rowcount or 0) > 0


class SqlInventoryStore(InventoryStore):
    """Relational store bound to one session (one request)."""

    transactional = True

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._depth = 0
        self.items = SqlItemRepository(self)
        self.locations = SqlLocationRepository(self)
        self.stock = SqlStockRepository(self)
        self.audit = SqlAuditRepository(self)
        self.bookings = SqlBookingRepository(self)
        self.reasons = SqlReasonRepository(self)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        # NOTE: the auth dependency may already have used this session (autobegin),
        # so we never call `session.begin()`; the outermost block commits or
        # rolls back explicitly instead.
        outermost = self._depth == 0
        self._depth += 1
        try:
            yield
            if outermost:
                await self.session.commit()
        except SQLAlchemyError as exc:
            if outermost:
                await self.session.rollback()
            raise StorageUnavailableError(f"Database error: {exc}") from exc
        except BaseException:
            if outermost:
                await self.session.rollback()
            raise
        finally:
            self._depth -= 1

    @asynccontextmanager
    async def reading(self) -> AsyncIterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(f"Database error: {exc}") from exc
