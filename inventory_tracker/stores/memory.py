"""In-memory backend.

Keeps everything in dicts. Used by the test suite and for local experiments.
Each (sku, location) pair has its own ``asyncio.Lock`` held across the
read-modify-write in ``apply_delta``, so concurrent movements on one key
cannot lose updates even when ``latency`` simulates a slow round trip.
"""

from __future__ import annotations

import asyncio
import copy
from collections import defaultdict

from inventory_tracker.core.errors import DuplicateSkuError, InsufficientStockError
from inventory_tracker.core.models import (
    AuditEntry,
    AuditFilter,
    Booking,
    Item,
    Location,
    StockLevel,
)
from inventory_tracker.stores.base import (
    AuditRepository,
    BookingRepository,
    InventoryStore,
    ItemRepository,
    LocationRepository,
    ReasonRepository,
    StockRepository,
)


class _Latency:

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds

    async def wait(self) -> None:
        if self.seconds:
            await asyncio.sleep(self.seconds)


class MemoryItemRepository(ItemRepository):

    def __init__(self, latency: _Latency) -> None:
        self._store: dict[str, Item] = {}
        self._latency = latency

    async def get(self, sku: str) -> Item | None:
        await self._latency.wait()
        item = self._store.get(sku)
        return copy.copy(item) if item else None

    async def list_all(self) -> list[Item]:
        await self._latency.wait()
        return [copy.copy(i) for i in sorted(self._store.values(), key=lambda i: i.name.lower())]

    async def add(self, item: Item) -> None:
        await self._latency.wait()
        if item.sku in self._store:
            raise DuplicateSkuError(item.sku)
        self._store[item.sku] = copy.copy(item)

    async def update(self, item: Item) -> None:
        await self._latency.wait()
        self._store[item.sku] = copy.copy(item)

    async def upsert_many(self, items: list[Item]) -> int:
        await self._latency.wait()
        for item in items:
            self._store[item.sku] = copy.copy(item)
        return len(items)

    async def delete(self, sku: str) -> bool:
        await self._latency.wait()
        return self._store.pop(sku, None) is not None


class MemoryLocationRepository(LocationRepository):

    def __init__(self, latency: _Latency) -> None:
        self._store: dict[str, Location] = {}
        self._latency = latency

    async def get(self, location_id: str) -> Location | None:
        await self._latency.wait()
        location = self._store.get(location_id)
        return copy.copy(location) if location else None

    async def list_all(self) -> list[Location]:
        await self._latency.wait()
        return [copy.copy(loc) for loc in sorted(self._store.values(), key=lambda loc: loc.name.lower())]

    async def add(self, location: Location) -> None:
        await self._latency.wait()
        self._store[location.id] = copy.copy(location)

    async def update(self, location: Location) -> None:
        await self._latency.wait()
        self._store[location.id] = copy.copy(location)

    async def delete(self, location_id: str) -> bool:
        await self._latency.wait()
        return self._store.pop(location_id, None) is not None


class MemoryStockRepository(StockRepository):

    def __init__(self, latency: _Latency) -> None:
        self._quantities: dict[tuple[str, str], int] = {}
        self._locks: defaultdict[tuple[str, str], asyncio.Lock] = defaultdict(asyncio.Lock)
        # callers holding or waiting on each lock
        self._lock_users: defaultdict[tuple[str, str], int] = defaultdict(int)
        self._latency = latency

    async def get(self, sku: str, location_id: str) -> int:
        await self._latency.wait()
        return self._quantities.get((sku, location_id), 0)

    async def apply_delta(self, sku: str, location_id: str, delta: int) -> int:
        key = (sku, location_id)
        self._lock_users[key] += 1
        try:
            async with self._locks[key]:
                current = self._quantities.get(key, 0)
                # the lock spans the simulated round trip between read and write
                await self._latency.wait()
                new_quantity = current + delta
                if new_quantity < 0:
                    raise InsufficientStockError(sku, location_id, available=current, requested=-delta)
                self._quantities[key] = new_quantity
                return new_quantity
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]

    def _drop_idle_locks(self, matches) -> None:
        for key in [k for k in self._locks if matches(k) and k not in self._lock_users]:
            del self._locks[key]

    async def list_all(self) -> list[StockLevel]:
        await self._latency.wait()
        return [StockLevel(sku, loc, qty) for (sku, loc), qty in sorted(self._quantities.items())]

    async def list_for_sku(self, sku: str) -> list[StockLevel]:
        return [s for s in await self.list_all() if s.sku == sku]

    async def list_for_location(self, location_id: str) -> list[StockLevel]:
        return [s for s in await self.list_all() if s.location_id == location_id]

    async def delete_for_sku(self, sku: str) -> int:
        await self._latency.wait()
        keys = [k for k in self._quantities if k[0] == sku]
        for k in keys:
            del self._quantities[k]
        self._drop_idle_locks(lambda key: key[0] == sku)
        return len(keys)

    async def delete_for_location(self, location_id: str) -> int:
        await self._latency.wait()
        keys = [k for k in self._quantities if k[1] == location_id]
        for k in keys:
            del self._quantities[k]
        self._drop_idle_locks(lambda key: key[1] == location_id)
        return len(keys)


class MemoryAuditRepository(AuditRepository):

    def __init__(self, latency: _Latency) -> None:
        self._entries: list[AuditEntry] = []
        self._latency = latency

    async def append(self, entry: AuditEntry) -> None:
        await self._latency.wait()
        self._entries.append(entry)

    async def fetch(self, filters: AuditFilter, offset: int, limit: int) -> list[AuditEntry]:
        await self._latency.wait()
        # newest first; insertion order breaks timestamp ties
        ordered = sorted(
            enumerate(self._entries),
            key=lambda pair: (pair[1].timestamp, pair[0]),
            reverse=True,
        )
        matching = [entry for _, entry in ordered if filters.matches(entry)]
        return matching[offset:offset + limit]


class MemoryBookingRepository(BookingRepository):

    def __init__(self, latency: _Latency) -> None:
        self._store: dict[str, Booking] = {}
        self._latency = latency

    async def get(self, sku: str) -> Booking | None:
        await self._latency.wait()
        booking = self._store.get(sku)
        return copy.copy(booking) if booking else None

    async def save(self, booking: Booking) -> None:
        await self._latency.wait()
        self._store[booking.sku] = copy.copy(booking)

    async def delete(self, sku: str) -> bool:
        await self._latency.wait()
        return self._store.pop(sku, None) is not None


class MemoryReasonRepository(ReasonRepository):

    def __init__(self, latency: _Latency) -> None:
        self._reasons: list[str] = []
        self._latency = latency

    async def list_all(self) -> list[str]:
        await self._latency.wait()
        return list(self._reasons)

    async def add(self, reason: str) -> bool:
        await self._latency.wait()
        if reason in self._reasons:
            return False
        self._reasons.append(reason)
        return True

    async def remove(self, reason: str) -> bool:
        await self._latency.wait()
        if reason not in self._reasons:
            return False
        self._reasons.remove(reason)
        return True


class MemoryInventoryStore(InventoryStore):
    """Dict-backed store. Not transactional: movements run as a saga on it."""

    transactional = False

    def __init__(self, latency: float = 0.0) -> None:
        self._latency = _Latency(latency)
        self.items = MemoryItemRepository(self._latency)
        self.locations = MemoryLocationRepository(self._latency)
        self.stock = MemoryStockRepository(self._latency)
        self.audit = MemoryAuditRepository(self._latency)
        self.bookings = MemoryBookingRepository(self._latency)
        self.reasons = MemoryReasonRepository(self._latency)

    @property
    def latency(self) -> float:
        return self._latency.seconds

    @latency.setter
    def latency(self, seconds: float) -> None:
        self._latency.seconds = seconds
