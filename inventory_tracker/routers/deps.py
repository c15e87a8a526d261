from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_tracker.core.config import settings
from inventory_tracker.db.database import get_async_session
from inventory_tracker.services import InventoryService
from inventory_tracker.stores.sql import SqlInventoryStore


async def get_inventory(db: AsyncSession = Depends(get_async_session)) -> InventoryService:
    """One service container per request, bound to the request's session."""
    return InventoryService(SqlInventoryStore(db), timeout=settings.storage_timeout_seconds)
