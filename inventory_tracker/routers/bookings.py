from fastapi import APIRouter, Depends

from inventory_tracker.core.auth import current_active_user, current_editor
from inventory_tracker.db.users import User
from inventory_tracker.routers.deps import get_inventory
from inventory_tracker.schemas.inventory import BookingRead, BookingUpdate
from inventory_tracker.services import InventoryService

router = APIRouter()


@router.get("/{sku}", response_model=BookingRead)
async def get_booking(
    sku: str,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_active_user),
):
    await inventory.catalogue.require(sku)
    b = await inventory.bookings.get(sku)
    return BookingRead(sku=b.sku, quantity=b.quantity, note=b.note)


@router.patch("/{sku}", response_model=BookingRead)
async def update_booking(
    sku: str,
    payload: BookingUpdate,
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_editor),
):
    if payload.delta is not None:
        b = await inventory.bookings.adjust(sku, payload.delta)
    if payload.note is not None:
        b = await inventory.bookings.set_note(sku, payload.note)
    return BookingRead(sku=b.sku, quantity=b.quantity, note=b.note)
