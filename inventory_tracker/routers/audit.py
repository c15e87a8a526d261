from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from inventory_tracker.core.auth import current_active_user
from inventory_tracker.core.converters import audit_to_schema
from inventory_tracker.db.users import User
from inventory_tracker.routers.deps import get_inventory
from inventory_tracker.schemas.inventory import AuditEntryRead, MovementKindName
from inventory_tracker.services import InventoryService

router = APIRouter()


@router.get("/", response_model=List[AuditEntryRead])
async def query_audit(
    start: Optional[datetime] = Query(default=None),
    end: Optional[datetime] = Query(default=None),
    kind: Optional[MovementKindName] = Query(default=None),
    sku: Optional[str] = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_active_user),
):
    """Matching movements, newest first; both time bounds are inclusive."""
    selection = inventory.audit.query(start_time=start, end_time=end, kind=kind, sku=sku)
    return [AuditEntryRead(**audit_to_schema(e)) for e in await selection.all(limit=limit)]
