from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from inventory_tracker.core.auth import current_active_user, current_editor
from inventory_tracker.db.users import User
from inventory_tracker.routers.deps import get_inventory
from inventory_tracker.schemas.inventory import ReasonCreate
from inventory_tracker.services import InventoryService

router = APIRouter()


@router.get("/", response_model=List[str])
async def list_reasons(
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_active_user),
):
    return await inventory.reasons.list_all()


@router.post("/", response_model=List[str], status_code=status.HTTP_201_CREATED)
async def add_reason(
    payload: ReasonCreate,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_editor),
):
    if not await inventory.reasons.add(payload.name):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Reason already exists")
    return await inventory.reasons.list_all()


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_reason(
    name: str,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_editor),
):
    if not await inventory.reasons.remove(name):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reason not found")
