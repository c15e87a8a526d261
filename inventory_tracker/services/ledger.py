"""Stock ledger: the sole authority on how much of a SKU sits at a location."""

from __future__ import annotations

from inventory_tracker.core.errors import InvalidQuantityError
from inventory_tracker.core.models import StockLevel, stock_key
from inventory_tracker.services.base import StoreService


class StockLedger(StoreService):

    async def get(self, sku: str, location_id: str) -> int:
        """Current quantity; 0 when nothing was ever recorded."""
        return await self._call(self._store.stock.get(sku, location_id), "stock read")

    async def apply_delta(self, sku: str, location_id: str, delta: int) -> int:
        """Atomically add ``delta`` and return the new quantity.

        Raises InsufficientStockError without changing anything if the result
        would be negative. The error is reported, never retried here.
        """
        if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
            raise InvalidQuantityError(delta)
        return await self._call(
            self._store.stock.apply_delta(sku, location_id, delta),
            f"stock update {sku}@{location_id}",
        )

    async def levels(self) -> list[StockLevel]:
        return await self._call(self._store.stock.list_all(), "stock list")

    async def levels_for_sku(self, sku: str) -> list[StockLevel]:
        return await self._call(self._store.stock.list_for_sku(sku), "stock list")

    async def levels_for_location(self, location_id: str) -> list[StockLevel]:
        return await self._call(self._store.stock.list_for_location(location_id), "stock list")

    async def stock_map(self) -> dict[str, int]:
        """``{"sku::location": quantity}`` for every recorded entry."""
        return {stock_key(s.sku, s.location_id): s.quantity for s in await self.levels()}

    async def remove_sku(self, sku: str) -> int:
        return await self._call(self._store.stock.delete_for_sku(sku), "stock cascade")

    async def remove_location(self, location_id: str) -> int:
        return await self._call(self._store.stock.delete_for_location(location_id), "stock cascade")
