from typing import List

from fastapi import APIRouter, Depends, status

from inventory_tracker.core.auth import current_active_user, current_editor
from inventory_tracker.core.converters import item_to_schema
from inventory_tracker.db.users import User
from inventory_tracker.routers.deps import get_inventory
from inventory_tracker.schemas.items import ItemCreate, ItemRead, ItemUpdate
from inventory_tracker.services import InventoryService

router = APIRouter()


@router.get("/", response_model=List[ItemRead])
async def list_items(
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_active_user),
):
    return [ItemRead(**item_to_schema(i)) for i in await inventory.catalogue.list_all()]


@router.get("/exists/{sku}")
async def item_exists(
    sku: str,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_active_user),
):
    return {"sku": sku, "exists": await inventory.catalogue.exists(sku)}


@router.get("/{sku}", response_model=ItemRead)
async def get_item(
    sku: str,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_active_user),
):
    return ItemRead(**item_to_schema(await inventory.catalogue.require(sku)))


@router.post("/", response_model=ItemRead, status_code=status.HTTP_201_CREATED)
async def create_item(
    payload: ItemCreate,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_editor),
):
    item = await inventory.catalogue.add(
        payload.sku,
        payload.name,
        selling_price_minor_units=payload.selling_price_minor_units,
        quantity_unit=payload.quantity_unit,
    )
    return ItemRead(**item_to_schema(item))


@router.patch("/{sku}", response_model=ItemRead)
async def update_item(
    sku: str,
    payload: ItemUpdate,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_editor),
):
    data = payload.model_dump(exclude_unset=True)
    item = await inventory.catalogue.update(
        sku,
        name=data.get("name"),
        selling_price_minor_units=data.get("selling_price_minor_units"),
        quantity_unit=data.get("quantity_unit"),
    )
    return ItemRead(**item_to_schema(item))


@router.delete("/{sku}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    sku: str,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_editor),
):
    await inventory.catalogue.delete(sku)
