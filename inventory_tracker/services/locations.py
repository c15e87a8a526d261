"""Location registry: named storage locations with stable generated ids."""

from __future__ import annotations

import logging
import uuid

from inventory_tracker.core.errors import UnknownLocationError, ValidationError
from inventory_tracker.core.models import Location
from inventory_tracker.services.base import StoreService

logger = logging.getLogger(__name__)


def new_location_id() -> str:
    return uuid.uuid4().hex[:12]


def _name(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError("Location name is required")
    return value


class LocationRegistry(StoreService):

    async def get(self, location_id: str) -> Location | None:
        return await self._call(self._store.locations.get(location_id), "location lookup")

    async def require(self, location_id: str) -> Location:
        location = await self.get(location_id)
        if location is None:
            raise UnknownLocationError(location_id)
        return location

    async def list_all(self) -> list[Location]:
        return await self._call(self._store.locations.list_all(), "location list")

    async def add(self, name: str) -> Location:
        location = Location(id=new_location_id(), name=_name(name))
        await self._call(self._store.locations.add(location), "location create")
        logger.info("Location %s created (%s)", location.id, location.name)
        return location

    async def rename(self, location_id: str, name: str) -> Location:
        location = await self.require(location_id)
        location.name = _name(name)
        await self._call(self._store.locations.update(location), "location update")
        return location

    async def delete(self, location_id: str) -> None:
        """Remove the location and every ledger entry held there."""
        await self.require(location_id)
        async with self._store.transaction():
            removed = await self._call(self._store.stock.delete_for_location(location_id), "stock cascade")
            await self._call(self._store.locations.delete(location_id), "location delete")
        logger.info("Location %s deleted, %d stock entries removed", location_id, removed)

    async def restore(self, locations: list[Location]) -> int:
        """Insert or rename locations keeping their ids (backup restore)."""
        for location in locations:
            location.name = _name(location.name)
            if await self.get(location.id) is None:
                await self._call(self._store.locations.add(location), "location create")
            else:
                await self._call(self._store.locations.update(location), "location update")
        return len(locations)
