from datetime import datetime
from typing import Dict, Literal, Optional

from fastapi import APIRouter, Depends, Query, Response

from inventory_tracker.core.auth import current_active_user
from inventory_tracker.core.config import settings
from inventory_tracker.core.converters import item_to_schema, location_to_schema
from inventory_tracker.core.values import format_minor
from inventory_tracker.db.users import User
from inventory_tracker.routers.deps import get_inventory
from inventory_tracker.services import InventoryService
from inventory_tracker.services.backup import rows_to_csv

router = APIRouter()

ReportFormat = Literal["json", "csv"]


def _csv_response(rows: list, filename: str) -> Response:
    return Response(
        content=rows_to_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/locations/{location_id}")
async def location_report(
    location_id: str,
    include_empty: bool = Query(default=False),
    format: ReportFormat = Query(default="json"),
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_active_user),
):
    report = await inventory.reports.location_report(location_id, include_empty=include_empty)
    if format == "csv":
        return _csv_response(report.as_rows(), f"location-{location_id}.csv")
    return {
        "location": location_to_schema(report.location),
        "rows": [
            {
                "sku": r.sku,
                "name": r.name,
                "quantity": r.quantity,
                "quantity_unit": r.quantity_unit,
                "value_minor_units": r.value_minor_units,
            }
            for r in report.rows
        ],
        "total_quantity": report.total_quantity,
    }


@router.get("/products/{sku}")
async def product_report(
    sku: str,
    format: ReportFormat = Query(default="json"),
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_active_user),
):
    report = await inventory.reports.product_report(sku)
    if format == "csv":
        return _csv_response(report.as_rows(), f"product-{sku}.csv")
    return {
        "item": item_to_schema(report.item),
        "rows": [
            {"location_id": r.location_id, "location_name": r.location_name, "quantity": r.quantity}
            for r in report.rows
        ],
        "total_quantity": report.total_quantity,
        "booking": {"quantity": report.booking.quantity, "note": report.booking.note},
    }


@router.get("/summary")
async def summary(
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_active_user),
):
    s = await inventory.reports.summary()
    return {
        "item_count": s.item_count,
        "location_count": s.location_count,
        "total_units": s.total_units,
        "stock_value_minor_units": s.stock_value_minor_units,
        "stock_value": format_minor(s.stock_value_minor_units, settings.default_currency),
        "out_of_stock_skus": s.out_of_stock_skus,
    }


@router.get("/movements/{sku}", response_model=Dict[str, int])
async def net_movements(
    sku: str,
    start: Optional[datetime] = Query(default=None),
    end: Optional[datetime] = Query(default=None),
    inventory: InventoryService = Depends(get_inventory),
    user: User = Depends(current_active_user),
):
    """Net change per location implied by the audit trail."""
    return await inventory.reports.net_movements(sku, start_time=start, end_time=end)
