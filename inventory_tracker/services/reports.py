"""Read-only reports derived from the catalogue, ledger and audit trail."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from inventory_tracker.core.models import Booking, Item, Location
from inventory_tracker.services.audit import AuditTrail
from inventory_tracker.services.base import StoreService
from inventory_tracker.services.bookings import Bookings
from inventory_tracker.services.catalogue import Catalogue
from inventory_tracker.services.ledger import StockLedger
from inventory_tracker.services.locations import LocationRegistry


@dataclass(frozen=True)
class LocationReportRow:
    sku: str
    name: str
    quantity: int
    quantity_unit: str
    selling_price_minor_units: int

    @property
    def value_minor_units(self) -> int:
        return self.quantity * self.selling_price_minor_units


@dataclass(frozen=True)
class LocationReport:
    location: Location
    rows: list[LocationReportRow]

    @property
    def total_quantity(self) -> int:
        return sum(r.quantity for r in self.rows)

    def as_rows(self) -> list[dict]:
        return [{"SKU": r.sku, "Name": r.name, "Quantity": r.quantity} for r in self.rows]


@dataclass(frozen=True)
class ProductReportRow:
    location_id: str
    location_name: str
    quantity: int


@dataclass(frozen=True)
class ProductReport:
    item: Item
    rows: list[ProductReportRow]
    booking: Booking

    @property
    def total_quantity(self) -> int:
        return sum(r.quantity for r in self.rows)

    def as_rows(self) -> list[dict]:
        return [{"Location": r.location_name, "Quantity": r.quantity} for r in self.rows]


@dataclass(frozen=True)
class InventorySummary:
    item_count: int
    location_count: int
    total_units: int
    stock_value_minor_units: int
    out_of_stock_skus: list[str]


class Reports(StoreService):

    def __init__(
        self,
        store,
        catalogue: Catalogue,
        locations: LocationRegistry,
        ledger: StockLedger,
        audit: AuditTrail,
        bookings: Bookings,
        timeout: Optional[float] = None,
    ) -> None:
        super().__init__(store, timeout)
        self._catalogue = catalogue
        self._locations = locations
        self._ledger = ledger
        self._audit = audit
        self._bookings = bookings

    async def location_report(self, location_id: str, include_empty: bool = False) -> LocationReport:
        """Items held at one location, by item name."""
        location = await self._locations.require(location_id)
        quantities = {s.sku: s.quantity for s in await self._ledger.levels_for_location(location_id)}
        rows = [
            LocationReportRow(
                sku=item.sku,
                name=item.name,
                quantity=quantities.get(item.sku, 0),
                quantity_unit=item.quantity_unit.value,
                selling_price_minor_units=item.selling_price_minor_units,
            )
            for item in await self._catalogue.list_all()
            if include_empty or quantities.get(item.sku, 0) > 0
        ]
        return LocationReport(location=location, rows=rows)

    async def product_report(self, sku: str) -> ProductReport:
        """One item's quantity at every location, zero included."""
        item = await self._catalogue.require(sku)
        quantities = {s.location_id: s.quantity for s in await self._ledger.levels_for_sku(sku)}
        rows = [
            ProductReportRow(location_id=loc.id, location_name=loc.name, quantity=quantities.get(loc.id, 0))
            for loc in await self._locations.list_all()
        ]
        booking = await self._bookings.get(sku)
        return ProductReport(item=item, rows=rows, booking=booking)

    async def summary(self) -> InventorySummary:
        items = await self._catalogue.list_all()
        locations = await self._locations.list_all()
        totals: dict[str, int] = defaultdict(int)
        for level in await self._ledger.levels():
            totals[level.sku] += level.quantity
        return InventorySummary(
            item_count=len(items),
            location_count=len(locations),
            total_units=sum(totals.values()),
            stock_value_minor_units=sum(totals[i.sku] * i.selling_price_minor_units for i in items),
            out_of_stock_skus=[i.sku for i in items if totals[i.sku] == 0],
        )

    async def net_movements(
        self,
        sku: str,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> dict[str, int]:
        """Net ledger change per location implied by the audit trail.

        Over the whole history this equals the current ledger for the SKU
        (locations deleted since are reported too).
        """
        net: dict[str, int] = defaultdict(int)
        async for entry in self._audit.query(start_time=start_time, end_time=end_time, sku=sku):
            for location_id, delta in entry.signed_changes.items():
                net[location_id] += delta
        return dict(net)
