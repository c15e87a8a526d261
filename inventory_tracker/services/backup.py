"""CSV catalogue import, JSON backup export and restore, CSV report rendering.

Imports only ever touch reference data (items, locations). Stock changes
exclusively through movement operations, so restoring a backup never rewrites
quantities or audit history.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from inventory_tracker.core.errors import ImportFormatError
from inventory_tracker.core.models import (
    AuditEntry,
    ImportSummary,
    Item,
    Location,
    QuantityUnit,
)
from inventory_tracker.core.values import minor_from_price
from inventory_tracker.services.audit import AuditTrail
from inventory_tracker.services.base import StoreService
from inventory_tracker.services.catalogue import Catalogue
from inventory_tracker.services.ledger import StockLedger
from inventory_tracker.services.locations import LocationRegistry

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"
CSV_TEMPLATE_HEADERS = ("sku", "name", "price", "quantityKind")


def csv_template() -> str:
    return ",".join(CSV_TEMPLATE_HEADERS) + "\n"


def parse_items_csv(text: str) -> tuple[list[Item], int]:
    """Parse ``sku,name,price,quantityKind`` rows (an extra ``cost`` column is ignored).

    Rows without a sku or name are skipped. Returns the items and the skip count.
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    if reader.fieldnames is None:
        return [], 0
    missing = {"sku", "name"} - {(f or "").strip() for f in reader.fieldnames}
    if missing:
        raise ImportFormatError(f"CSV header is missing column(s): {', '.join(sorted(missing))}")

    items: list[Item] = []
    skipped = 0
    for raw in reader:
        row = {(k or "").strip(): (v or "").strip() for k, v in raw.items() if k is not None}
        if not row.get("sku") or not row.get("name"):
            skipped += 1
            continue
        items.append(
            Item(
                sku=row["sku"],
                name=row["name"],
                selling_price_minor_units=max(0, minor_from_price(row.get("price", ""))),
                quantity_unit=QuantityUnit.parse(row.get("quantityKind")),
            )
        )
    return items, skipped


def rows_to_csv(rows: list[dict]) -> str:
    if not rows:
        return ""
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=list(rows[0].keys()), lineterminator="\n")
    writer.writeheader()
    writer.writerows(rows)
    return out.getvalue()


# --- JSON shapes ----------------------------------------------------------------


def _item_out(item: Item) -> dict:
    return {
        "sku": item.sku,
        "name": item.name,
        "sellingPriceMinorUnits": item.selling_price_minor_units,
        "quantityUnit": item.quantity_unit.value,
    }


def _item_in(raw: Any) -> Optional[Item]:
    if not isinstance(raw, dict):
        return None
    sku = str(raw.get("sku") or "").strip()
    name = str(raw.get("name") or "").strip()
    if not sku or not name:
        return None
    price = raw.get("sellingPriceMinorUnits", raw.get("sellingPriceEuroCents", 0))
    try:
        price = max(0, int(price or 0))
    except (TypeError, ValueError):
        price = 0
    return Item(
        sku=sku,
        name=name,
        selling_price_minor_units=price,
        quantity_unit=QuantityUnit.parse(raw.get("quantityUnit", raw.get("quantityKind"))),
    )


def _location_in(raw: Any) -> Optional[Location]:
    if not isinstance(raw, dict):
        return None
    location_id = str(raw.get("id") or "").strip()
    name = str(raw.get("name") or "").strip()
    if not location_id or not name:
        return None
    return Location(id=location_id, name=name)


def _audit_out(entry: AuditEntry) -> dict:
    return {
        "id": entry.id,
        "timestampUtc": entry.timestamp.isoformat() if entry.timestamp else None,
        "kind": entry.kind.value,
        "sku": entry.sku,
        "locationId": entry.location_id,
        "fromLocationId": entry.from_location_id,
        "toLocationId": entry.to_location_id,
        "quantity": entry.quantity,
        "reason": entry.reason,
        "note": entry.note,
        "actorId": entry.actor_id,
        "itemName": entry.item_name,
        "locationName": entry.location_name,
        "fromLocationName": entry.from_location_name,
        "toLocationName": entry.to_location_name,
    }


def _as_collection(value: Any) -> list:
    if isinstance(value, dict):
        return list(value.values())
    if isinstance(value, list):
        return value
    return []


class Backup(StoreService):

    def __init__(
        self,
        store,
        catalogue: Catalogue,
        locations: LocationRegistry,
        ledger: StockLedger,
        audit: AuditTrail,
        timeout: Optional[float] = None,
    ) -> None:
        super().__init__(store, timeout)
        self._catalogue = catalogue
        self._locations = locations
        self._ledger = ledger
        self._audit = audit

    async def import_items_csv(self, text: str) -> ImportSummary:
        items, skipped = parse_items_csv(text)
        imported = await self._catalogue.upsert(items)
        logger.info("CSV import: %d items written, %d rows skipped", imported, skipped)
        return ImportSummary(imported=imported, skipped=skipped)

    async def export_snapshot(self) -> dict:
        """Full-state backup: items, locations, stock map and audit trail."""
        items = await self._catalogue.list_all()
        locations = await self._locations.list_all()
        stock = await self._ledger.stock_map()
        audit = [_audit_out(e) async for e in self._audit.query()]
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": BACKUP_VERSION,
            "items": [_item_out(i) for i in items],
            "locations": [{"id": loc.id, "name": loc.name} for loc in locations],
            "stockByLocation": stock,
            "auditTrail": audit,
            "metadata": {
                "totalItems": len(items),
                "totalLocations": len(locations),
                "totalStockEntries": len(stock),
                "totalAuditRecords": len(audit),
            },
        }

    async def export_items(self) -> dict:
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "type": "items-only",
            "items": [_item_out(i) for i in await self._catalogue.list_all()],
            "locations": [{"id": loc.id, "name": loc.name} for loc in await self._locations.list_all()],
        }

    async def restore(self, payload: Any) -> ImportSummary:
        """Upsert items (and locations) from a backup.

        Accepts a full snapshot, an items-only export, a legacy ``{"data": {...}}``
        wrapper, or a bare list of items.
        """
        if isinstance(payload, list):
            raw_items, raw_locations = payload, []
        elif isinstance(payload, dict):
            body = payload.get("data") if isinstance(payload.get("data"), dict) else payload
            if "items" not in body:
                raise ImportFormatError("Invalid data format: no items found")
            raw_items = _as_collection(body.get("items"))
            raw_locations = _as_collection(body.get("locations"))
        else:
            raise ImportFormatError("Invalid data format: expected an object or a list")

        items = [i for i in (_item_in(r) for r in raw_items) if i is not None]
        locations = [loc for loc in (_location_in(r) for r in raw_locations) if loc is not None]

        restored_locations = await self._locations.restore(locations)
        imported = await self._catalogue.upsert(items)
        logger.info("Restore: %d items, %d locations", imported, restored_locations)
        return ImportSummary(
            imported=imported,
            skipped=len(raw_items) - len(items),
            locations=restored_locations,
        )
