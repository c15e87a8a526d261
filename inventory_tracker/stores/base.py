"""Abstract repositories for the inventory backends.

A backend bundles one repository per table behind an ``InventoryStore``.
Services only ever talk to these interfaces, so the in-memory backend used in
tests and the relational backend used in production are interchangeable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from inventory_tracker.core.models import (
    AuditEntry,
    AuditFilter,
    Booking,
    Item,
    Location,
    StockLevel,
)


class ItemRepository(ABC):

    @abstractmethod
    async def get(self, sku: str) -> Item | None:
        """Return the item with this SKU, or None."""

    @abstractmethod
    async def list_all(self) -> list[Item]:
        """Return every item, ordered by name."""

    @abstractmethod
    async def add(self, item: Item) -> None:
        """Insert a new item. Raises DuplicateSkuError if the SKU exists."""

    @abstractmethod
    async def update(self, item: Item) -> None:
        """Replace the mutable fields of an existing item."""

    @abstractmethod
    async def upsert_many(self, items: list[Item]) -> int:
        """Insert or overwrite items by SKU; return how many were written."""

    @abstractmethod
    async def delete(self, sku: str) -> bool:
        """Remove the item; return False if it did not exist."""


class LocationRepository(ABC):

    @abstractmethod
    async def get(self, location_id: str) -> Location | None: ...

    @abstractmethod
    async def list_all(self) -> list[Location]: ...

    @abstractmethod
    async def add(self, location: Location) -> None: ...

    @abstractmethod
    async def update(self, location: Location) -> None: ...

    @abstractmethod
    async def delete(self, location_id: str) -> bool: ...


class StockRepository(ABC):
    """The quantity-by-(sku, location) map.

    A missing entry means zero. ``apply_delta`` is the only mutation and must
    be race-free against concurrent callers on the same key.
    """

    @abstractmethod
    async def get(self, sku: str, location_id: str) -> int:
        """Stored quantity, or 0 when there is no entry."""

    @abstractmethod
    async def apply_delta(self, sku: str, location_id: str, delta: int) -> int:
        """Atomically add ``delta`` and return the new quantity.

        Raises InsufficientStockError, leaving the entry untouched, when the
        result would be negative.
        """

    @abstractmethod
    async def list_all(self) -> list[StockLevel]: ...

    @abstractmethod
    async def list_for_sku(self, sku: str) -> list[StockLevel]: ...

    @abstractmethod
    async def list_for_location(self, location_id: str) -> list[StockLevel]: ...

    @abstractmethod
    async def delete_for_sku(self, sku: str) -> int:
        """Cascade: drop every entry for the SKU, return how many."""

    @abstractmethod
    async def delete_for_location(self, location_id: str) -> int:
        """Cascade: drop every entry for the location, return how many."""


class AuditRepository(ABC):
    """Append-only. There is deliberately no update or delete."""

    @abstractmethod
    async def append(self, entry: AuditEntry) -> None:
        """Persist an entry that already carries its id and timestamp."""

    @abstractmethod
    async def fetch(self, filters: AuditFilter, offset: int, limit: int) -> list[AuditEntry]:
        """One page of matching entries, newest first."""


class BookingRepository(ABC):

    @abstractmethod
    async def get(self, sku: str) -> Booking | None: ...

    @abstractmethod
    async def save(self, booking: Booking) -> None: ...

    @abstractmethod
    async def delete(self, sku: str) -> bool: ...


class ReasonRepository(ABC):

    @abstractmethod
    async def list_all(self) -> list[str]:
        """Reasons in insertion order."""

    @abstractmethod
    async def add(self, reason: str) -> bool:
        """Return False if the reason was already present."""

    @abstractmethod
    async def remove(self, reason: str) -> bool: ...


class InventoryStore(ABC):
    """One storage backend: a repository per table plus transaction support.

    ``transactional`` backends commit everything done inside ``transaction()``
    at once, or nothing. Non-transactional backends apply each call
    immediately and callers must compensate on failure.
    """

    items: ItemRepository
    locations: LocationRepository
    stock: StockRepository
    audit: AuditRepository
    bookings: BookingRepository
    reasons: ReasonRepository

    transactional: bool = False

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        yield
