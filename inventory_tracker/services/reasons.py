"""Editable list of adjustment reasons offered for add/deduct."""

from __future__ import annotations

from inventory_tracker.core.models import DEFAULT_REASONS
from inventory_tracker.services.base import StoreService


class Reasons(StoreService):

    async def list_all(self) -> list[str]:
        return await self._call(self._store.reasons.list_all(), "reason list")

    async def add(self, reason: str) -> bool:
        reason = (reason or "").strip()
        if not reason:
            return False
        return await self._call(self._store.reasons.add(reason), "reason add")

    async def remove(self, reason: str) -> bool:
        return await self._call(self._store.reasons.remove(reason), "reason remove")

    async def seed_defaults(self) -> int:
        """Install the default reasons into an empty list."""
        if await self.list_all():
            return 0
        added = 0
        for reason in DEFAULT_REASONS:
            added += await self.add(reason)
        return added
