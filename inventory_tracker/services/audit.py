"""Audit trail: append-only record of every stock movement."""

from __future__ import annotations

import dataclasses
import uuid
from collections.abc import AsyncIterator, Callable
from datetime import datetime, timezone
from typing import Optional

from inventory_tracker.core.models import AuditEntry, AuditFilter, MovementKind
from inventory_tracker.core.values import as_utc
from inventory_tracker.services.base import StoreService


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuditSelection:
    """Lazy, restartable view over matching entries, newest first.

    Each ``async for`` starts a fresh walk from the newest entry and pulls one
    page at a time from the store. Writes landing mid-iteration may shift the
    pages; re-iterate for a consistent view.
    """

    def __init__(self, trail: "AuditTrail", filters: AuditFilter) -> None:
        self._trail = trail
        self.filters = filters

    def __aiter__(self) -> AsyncIterator[AuditEntry]:
        return self._walk()

    async def _walk(self, limit: Optional[int] = None) -> AsyncIterator[AuditEntry]:
        page_size = self._trail.page_size
        offset = 0
        yielded = 0
        while True:
            page = await self._trail._fetch(self.filters, offset, page_size)
            for entry in page:
                if limit is not None and yielded >= limit:
                    return
                yield entry
                yielded += 1
            if len(page) < page_size:
                return
            offset += len(page)

    async def all(self, limit: Optional[int] = None) -> list[AuditEntry]:
        return [entry async for entry in self._walk(limit)]


class AuditTrail(StoreService):
    """Appends stamped entries and answers filtered queries.

    There is no update or delete: entries are frozen dataclasses and the
    repository interface offers nothing to change them.
    """

    page_size = 200

    def __init__(self, store, timeout: Optional[float] = None, clock: Callable[[], datetime] = utc_now) -> None:
        super().__init__(store, timeout)
        self._clock = clock
        self._last_timestamp: Optional[datetime] = None

    def stamp(self, entry: AuditEntry) -> AuditEntry:
        """Assign id and timestamp where unset.

        Timestamps never go backwards within one trail instance; across
        concurrent writers ordering is best-effort.
        """
        timestamp = as_utc(entry.timestamp) if entry.timestamp else self._clock()
        if self._last_timestamp is not None and timestamp < self._last_timestamp:
            timestamp = self._last_timestamp
        self._last_timestamp = timestamp
        return dataclasses.replace(entry, id=entry.id or str(uuid.uuid4()), timestamp=timestamp)

    async def append(self, entry: AuditEntry) -> AuditEntry:
        stamped = self.stamp(entry)
        await self._call(self._store.audit.append(stamped), "audit append")
        return stamped

    def query(
        self,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
        kind: Optional[MovementKind] = None,
        sku: Optional[str] = None,
    ) -> AuditSelection:
        filters = AuditFilter(
            start_time=as_utc(start_time),
            end_time=as_utc(end_time),
            kind=MovementKind(kind) if kind is not None else None,
            sku=sku or None,
        )
        return AuditSelection(self, filters)

    async def _fetch(self, filters: AuditFilter, offset: int, limit: int) -> list[AuditEntry]:
        return await self._call(self._store.audit.fetch(filters, offset, limit), "audit query")
