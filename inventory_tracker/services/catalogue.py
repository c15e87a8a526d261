"""Catalogue: item definitions keyed by SKU."""

from __future__ import annotations

import logging
from typing import Optional

from inventory_tracker.core.errors import UnknownSkuError, ValidationError
from inventory_tracker.core.models import Item, QuantityUnit
from inventory_tracker.services.base import StoreService

logger = logging.getLogger(__name__)


def _clean(value: Optional[str], field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required")
    return value


def _price(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"Selling price must be a non-negative integer of minor units, got {value!r}")
    return value


class Catalogue(StoreService):

    async def get(self, sku: str) -> Item | None:
        return await self._call(self._store.items.get(sku), "item lookup")

    async def require(self, sku: str) -> Item:
        item = await self.get(sku)
        if item is None:
            raise UnknownSkuError(sku)
        return item

    async def exists(self, sku: str) -> bool:
        return await self.get((sku or "").strip()) is not None

    async def list_all(self) -> list[Item]:
        return await self._call(self._store.items.list_all(), "item list")

    async def add(
        self,
        sku: str,
        name: str,
        selling_price_minor_units: int = 0,
        quantity_unit: QuantityUnit = QuantityUnit.DISCRETE,
    ) -> Item:
        """Create an item. SKU collisions raise DuplicateSkuError."""
        item = Item(
            sku=_clean(sku, "SKU"),
            name=_clean(name, "Name"),
            selling_price_minor_units=_price(selling_price_minor_units),
            quantity_unit=QuantityUnit(quantity_unit),
        )
        await self._call(self._store.items.add(item), "item create")
        logger.info("Item %s created (%s)", item.sku, item.name)
        return item

    async def update(
        self,
        sku: str,
        name: Optional[str] = None,
        selling_price_minor_units: Optional[int] = None,
        quantity_unit: Optional[QuantityUnit] = None,
    ) -> Item:
        item = await self.require(sku)
        if name is not None:
            item.name = _clean(name, "Name")
        if selling_price_minor_units is not None:
            item.selling_price_minor_units = _price(selling_price_minor_units)
        if quantity_unit is not None:
            item.quantity_unit = QuantityUnit(quantity_unit)
        await self._call(self._store.items.update(item), "item update")
        return item

    async def delete(self, sku: str) -> None:
        """Remove the item and cascade to its ledger entries and booking.

        Audit entries stay: they carry the item name cached at write time.
        """
        await self.require(sku)
        async with self._store.transaction():
            removed = await self._call(self._store.stock.delete_for_sku(sku), "stock cascade")
            await self._call(self._store.bookings.delete(sku), "booking cascade")
            await self._call(self._store.items.delete(sku), "item delete")
        logger.info("Item %s deleted, %d stock entries removed", sku, removed)

    async def upsert(self, items: list[Item]) -> int:
        """Insert or overwrite items by SKU (imports and restores)."""
        if not items:
            return 0
        return await self._call(self._store.items.upsert_many(items), "item import")
