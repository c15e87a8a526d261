from typing import Any

from fastapi import APIRouter, Body, Depends, File, Response, UploadFile

from inventory_tracker.core.auth import current_active_user, current_admin, current_editor
from inventory_tracker.core.errors import ImportFormatError
from inventory_tracker.db.users import User
from inventory_tracker.routers.deps import get_inventory
from inventory_tracker.schemas.backup import ImportSummaryRead
from inventory_tracker.services import InventoryService
from inventory_tracker.services.backup import csv_template

router = APIRouter()


def _summary(s) -> ImportSummaryRead:
    return ImportSummaryRead(imported=s.imported, skipped=s.skipped, locations=s.locations)


@router.post("/import/csv", response_model=ImportSummaryRead)
async def import_items_csv(
    file: UploadFile = File(...),
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_editor),
):
    raw = await file.read()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ImportFormatError("CSV file must be UTF-8 encoded") from exc
    return _summary(await inventory.backup.import_items_csv(text))


@router.get("/template.csv")
async def template(user: User = Depends(current_active_user)):
    return Response(
        content=csv_template(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="inventory_template.csv"'},
    )


@router.get("/export")
async def export_snapshot(
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_active_user),
):
    return await inventory.backup.export_snapshot()


@router.get("/export/items")
async def export_items(
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_active_user),
):
    return await inventory.backup.export_items()


@router.post("/restore", response_model=ImportSummaryRead)
async def restore(
    payload: Any = Body(...),
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_admin),
):
    return _summary(await inventory.backup.restore(payload))
