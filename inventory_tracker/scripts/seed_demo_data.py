"""
Seed demo data (locations A-D, a few items, opening stock) into the DB.

Opening stock goes through the movement operations, so the seed shows up in
the audit trail like any other delivery.

Run from the repo root:
  python -m inventory_tracker.scripts.seed_demo_data
"""

from __future__ import annotations

import argparse
import asyncio

from inventory_tracker.core.models import QuantityUnit
from inventory_tracker.db.database import async_session_maker, create_db_and_tables
from inventory_tracker.services import InventoryService
from inventory_tracker.stores.sql import SqlInventoryStore

DEMO_LOCATIONS = ("A", "B", "C", "D")

# sku, name, price in minor units, unit, opening quantity at "A"
DEMO_ITEMS = (
    ("WID-001", "Widget", 250, QuantityUnit.DISCRETE, 40),
    ("GAD-002", "Gadget", 1299, QuantityUnit.DISCRETE, 12),
    ("FLR-003", "Flour", 180, QuantityUnit.WEIGHTED, 25),
    ("BOL-004", "Bolt M6", 15, QuantityUnit.DISCRETE, 500),
)


async def main(with_stock: bool) -> None:
    await create_db_and_tables()
    async with async_session_maker() as db:
        inventory = InventoryService(SqlInventoryStore(db))
        await inventory.reasons.seed_defaults()

        existing = {loc.name: loc for loc in await inventory.locations.list_all()}
        for name in DEMO_LOCATIONS:
            if name not in existing:
                existing[name] = await inventory.locations.add(name)
        first = existing[DEMO_LOCATIONS[0]]

        items_created = 0
        movements = 0
        for sku, name, price, unit, opening in DEMO_ITEMS:
            if await inventory.catalogue.exists(sku):
                continue
            await inventory.catalogue.add(sku, name, selling_price_minor_units=price, quantity_unit=unit)
            items_created += 1
            if with_stock:
                await inventory.movements.add_stock(sku, first.id, opening, reason="purchase", note="demo seed")
                movements += 1

        print(f"Done. Locations: {len(existing)}. Items created: {items_created}. Movements: {movements}.")


if __name__ == "__main__":
    p = argparse.ArgumentParser()
    p.add_argument("--no-stock", action="store_true", help="Create items and locations only")
    args = p.parse_args()

    asyncio.run(main(with_stock=not args.no_stock))
