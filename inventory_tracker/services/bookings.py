"""Per-SKU bookings: quantity promised to customers plus a note."""

from __future__ import annotations

import logging

from inventory_tracker.core.errors import InvalidQuantityError
from inventory_tracker.core.models import Booking
from inventory_tracker.services.base import StoreService
from inventory_tracker.services.catalogue import Catalogue

logger = logging.getLogger(__name__)


class Bookings(StoreService):

    def __init__(self, store, catalogue: Catalogue, timeout=None) -> None:
        super().__init__(store, timeout)
        self._catalogue = catalogue

    async def get(self, sku: str) -> Booking:
        booking = await self._call(self._store.bookings.get(sku), "booking read")
        return booking or Booking(sku=sku)

    async def adjust(self, sku: str, delta: int) -> Booking:
        """Change the booked quantity by ``delta``, never below zero."""
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise InvalidQuantityError(delta)
        await self._catalogue.require(sku)
        current = await self.get(sku)
        quantity = max(0, current.quantity + delta)
        if quantity == current.quantity:
            return current
        booking = Booking(sku=sku, quantity=quantity, note=current.note)
        await self._call(self._store.bookings.save(booking), "booking update")
        logger.info("Booking for %s now %d", sku, quantity)
        return booking

    async def set_note(self, sku: str, note: str) -> Booking:
        await self._catalogue.require(sku)
        current = await self.get(sku)
        booking = Booking(sku=sku, quantity=current.quantity, note=note or "")
        await self._call(self._store.bookings.save(booking), "booking update")
        return booking
