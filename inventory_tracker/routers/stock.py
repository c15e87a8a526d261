from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from inventory_tracker.core.auth import current_active_user, current_editor
from inventory_tracker.core.converters import audit_to_schema
from inventory_tracker.core.models import MovementReceipt
from inventory_tracker.db.users import User
from inventory_tracker.routers.deps import get_inventory
from inventory_tracker.schemas.inventory import (
    AuditEntryRead,
    MovementRead,
    QuickAdjustRequest,
    StockLevelRead,
    StockMovementCreate,
    StockSetRequest,
    StockTransferCreate,
)
from inventory_tracker.services import InventoryService

router = APIRouter()


def _receipt(receipt: MovementReceipt) -> MovementRead:
    return MovementRead(entry=AuditEntryRead(**audit_to_schema(receipt.entry)), levels=receipt.levels)


@router.get("/", response_model=Dict[str, int])
async def stock_map(
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_active_user),
):
    """Every ledger entry keyed ``"<sku>::<location_id>"``."""
    return await inventory.ledger.stock_map()


@router.get("/levels", response_model=List[StockLevelRead])
async def stock_levels(
    sku: Optional[str] = Query(default=None),
    location_id: Optional[str] = Query(default=None),
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_active_user),
):
    if sku:
        levels = await inventory.ledger.levels_for_sku(sku)
        if location_id:
            levels = [lv for lv in levels if lv.location_id == location_id]
    elif location_id:
        levels = await inventory.ledger.levels_for_location(location_id)
    else:
        levels = await inventory.ledger.levels()
    return [StockLevelRead(sku=lv.sku, location_id=lv.location_id, quantity=lv.quantity) for lv in levels]


@router.get("/{sku}/{location_id}", response_model=StockLevelRead)
async def get_stock(
    sku: str,
    location_id: str,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_active_user),
):
    quantity = await inventory.ledger.get(sku, location_id)
    return StockLevelRead(sku=sku, location_id=location_id, quantity=quantity)


@router.post("/add", response_model=MovementRead, status_code=status.HTTP_201_CREATED)
async def add_stock(
    payload: StockMovementCreate,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_editor),
):
    receipt = await inventory.movements.add_stock(
        payload.sku,
        payload.location_id,
        payload.quantity,
        reason=payload.reason,
        note=payload.note,
        actor_id=str(user.id),
    )
    return _receipt(receipt)


@router.post("/deduct", response_model=MovementRead, status_code=status.HTTP_201_CREATED)
async def deduct_stock(
    payload: StockMovementCreate,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_editor),
):
    receipt = await inventory.movements.deduct_stock(
        payload.sku,
        payload.location_id,
        payload.quantity,
        reason=payload.reason,
        note=payload.note,
        actor_id=str(user.id),
    )
    return _receipt(receipt)


@router.post("/transfer", response_model=MovementRead, status_code=status.HTTP_201_CREATED)
async def transfer_stock(
    payload: StockTransferCreate,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_editor),
):
    receipt = await inventory.movements.transfer_stock(
        payload.sku,
        payload.from_location_id,
        payload.to_location_id,
        payload.quantity,
        note=payload.note,
        actor_id=str(user.id),
    )
    return _receipt(receipt)


@router.post("/set", response_model=Optional[MovementRead])
async def set_stock(
    payload: StockSetRequest,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_editor),
):
    """Stocktake correction; ``null`` when the quantity was already right."""
    receipt = await inventory.movements.set_stock(
        payload.sku,
        payload.location_id,
        payload.quantity,
        reason=payload.reason,
        note=payload.note,
        actor_id=str(user.id),
    )
    return _receipt(receipt) if receipt else None


@router.post("/quick", response_model=MovementRead, status_code=status.HTTP_201_CREATED)
async def quick_adjust(
    payload: QuickAdjustRequest,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_editor),
):
    receipt = await inventory.movements.quick_adjust(
        payload.sku,
        payload.location_id,
        increase=payload.direction == "up",
        actor_id=str(user.id),
    )
    return _receipt(receipt)
