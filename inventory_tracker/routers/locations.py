from typing import List

from fastapi import APIRouter, Depends, status

from inventory_tracker.core.auth import current_active_user, current_editor
from inventory_tracker.core.converters import location_to_schema
from inventory_tracker.db.users import User
from inventory_tracker.routers.deps import get_inventory
from inventory_tracker.schemas.locations import LocationCreate, LocationRead, LocationUpdate
from inventory_tracker.services import InventoryService

router = APIRouter()


@router.get("/", response_model=List[LocationRead])
async def list_locations(
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_active_user),
):
    return [LocationRead(**location_to_schema(loc)) for loc in await inventory.locations.list_all()]


@router.get("/{location_id}", response_model=LocationRead)
async def get_location(
    location_id: str,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_active_user),
):
    return LocationRead(**location_to_schema(await inventory.locations.require(location_id)))


@router.post("/", response_model=LocationRead, status_code=status.HTTP_201_CREATED)
async def create_location(
    payload: LocationCreate,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_editor),
):
    return LocationRead(**location_to_schema(await inventory.locations.add(payload.name)))


@router.patch("/{location_id}", response_model=LocationRead)
async def rename_location(
    location_id: str,
    payload: LocationUpdate,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_editor),
):
    return LocationRead(**location_to_schema(await inventory.locations.rename(location_id, payload.name)))


@router.delete("/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_location(
    location_id: str,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_editor),
):
    await inventory.locations.delete(location_id)
