"""Movement operations against the in-memory backend."""

import asyncio

import pytest

from inventory_tracker.core.errors import (
    InsufficientStockError,
    InvalidQuantityError,
    SameLocationError,
    UnknownLocationError,
    UnknownSkuError,
)
from inventory_tracker.core.models import MovementKind
from inventory_tracker.services import InventoryService
from tests.fakes import flaky_store, seed

pytestmark = pytest.mark.anyio


async def _entries(inventory, **filters):
    return await inventory.audit.query(**filters).all()


class TestScenarios:

    async def test_a_add_to_empty_ledger(self, inventory):
        await seed(inventory)

        receipt = await inventory.movements.add_stock("SKU1", "LOC_A", 5)

        assert await inventory.ledger.get("SKU1", "LOC_A") == 5
        assert receipt.levels == {"LOC_A": 5}
        entries = await _entries(inventory)
        assert len(entries) == 1
        assert entries[0].kind is MovementKind.ADD
        assert entries[0].quantity == 5
        assert entries[0].item_name == "Item SKU1"
        assert entries[0].location_name == "Location A"

    async def test_b_deduct(self, inventory):
        await seed(inventory)
        await inventory.movements.add_stock("SKU1", "LOC_A", 5)

        await inventory.movements.deduct_stock("SKU1", "LOC_A", 3)

        assert await inventory.ledger.get("SKU1", "LOC_A") == 2
        latest = (await _entries(inventory))[0]
        assert latest.kind is MovementKind.DEDUCT
        assert latest.quantity == 3

    async def test_c_deduct_more_than_available_changes_nothing(self, inventory):
        await seed(inventory)
        await inventory.movements.add_stock("SKU1", "LOC_A", 5)
        await inventory.movements.deduct_stock("SKU1", "LOC_A", 3)

        with pytest.raises(InsufficientStockError, match="Available: 2, Requested: 10") as exc_info:
            await inventory.movements.deduct_stock("SKU1", "LOC_A", 10)

        assert exc_info.value.available == 2
        assert exc_info.value.requested == 10
        assert await inventory.ledger.get("SKU1", "LOC_A") == 2
        assert len(await _entries(inventory)) == 2

    async def test_d_transfer(self, inventory):
        await seed(inventory)
        await inventory.movements.add_stock("SKU1", "LOC_A", 2)
        assert await inventory.ledger.get("SKU1", "LOC_B") == 0

        receipt = await inventory.movements.transfer_stock("SKU1", "LOC_A", "LOC_B", 2)

        assert await inventory.ledger.get("SKU1", "LOC_A") == 0
        assert await inventory.ledger.get("SKU1", "LOC_B") == 2
        assert receipt.levels == {"LOC_A": 0, "LOC_B": 2}
        transfers = await _entries(inventory, kind=MovementKind.TRANSFER)
        assert len(transfers) == 1
        assert transfers[0].quantity == 2
        assert transfers[0].from_location_name == "Location A"
        assert transfers[0].to_location_name == "Location B"

    async def test_e_concurrent_adds_are_not_lost(self, inventory, store):
        await seed(inventory)
        store.latency = 0.01

        await asyncio.gather(
            inventory.movements.add_stock("SKU1", "LOC_A", 1),
            inventory.movements.add_stock("SKU1", "LOC_A", 1),
        )

        assert await inventory.ledger.get("SKU1", "LOC_A") == 2
        assert len(await _entries(inventory)) == 2


class TestValidation:

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True, "3", None])
    async def test_invalid_quantity_rejected(self, inventory, quantity):
        await seed(inventory)
        with pytest.raises(InvalidQuantityError):
            await inventory.movements.add_stock("SKU1", "LOC_A", quantity)
        assert await _entries(inventory) == []

    async def test_integral_float_accepted(self, inventory):
        await seed(inventory)
        await inventory.movements.add_stock("SKU1", "LOC_A", 3.0)
        assert await inventory.ledger.get("SKU1", "LOC_A") == 3

    async def test_unknown_location(self, inventory):
        await seed(inventory)
        with pytest.raises(UnknownLocationError):
            await inventory.movements.add_stock("SKU1", "NOWHERE", 1)

    async def test_unknown_sku(self, inventory):
        await seed(inventory)
        with pytest.raises(UnknownSkuError):
            await inventory.movements.add_stock("NOPE", "LOC_A", 1)

    async def test_transfer_to_same_location(self, inventory):
        await seed(inventory)
        await inventory.movements.add_stock("SKU1", "LOC_A", 5)
        with pytest.raises(SameLocationError):
            await inventory.movements.transfer_stock("SKU1", "LOC_A", "LOC_A", 1)
        assert len(await _entries(inventory)) == 1

    async def test_transfer_checks_source_before_writing(self, inventory):
        await seed(inventory)
        await inventory.movements.add_stock("SKU1", "LOC_A", 1)

        with pytest.raises(InsufficientStockError, match="Available: 1, Requested: 4"):
            await inventory.movements.transfer_stock("SKU1", "LOC_A", "LOC_B", 4)

        assert await inventory.ledger.get("SKU1", "LOC_A") == 1
        assert await inventory.ledger.get("SKU1", "LOC_B") == 0
        assert await _entries(inventory, kind=MovementKind.TRANSFER) == []


class TestProperties:

    async def test_ledger_never_negative_and_audit_reconciles(self, inventory):
        await seed(inventory, locations=("LOC_A", "LOC_B", "LOC_C"))
        ops = [
            ("add", "LOC_A", 7),
            ("deduct", "LOC_A", 9),
            ("transfer", ("LOC_A", "LOC_B"), 4),
            ("deduct", "LOC_B", 1),
            ("transfer", ("LOC_B", "LOC_C"), 5),
            ("transfer", ("LOC_B", "LOC_C"), 3),
            ("add", "LOC_C", 2),
            ("deduct", "LOC_C", 6),
        ]
        for kind, where, qty in ops:
            try:
                if kind == "add":
                    await inventory.movements.add_stock("SKU1", where, qty)
                elif kind == "deduct":
                    await inventory.movements.deduct_stock("SKU1", where, qty)
                else:
                    await inventory.movements.transfer_stock("SKU1", where[0], where[1], qty)
            except InsufficientStockError:
                pass
            for level in await inventory.ledger.levels():
                assert level.quantity >= 0

        net = await inventory.reports.net_movements("SKU1")
        ledger = {lv.location_id: lv.quantity for lv in await inventory.ledger.levels_for_sku("SKU1")}
        assert {k: v for k, v in net.items() if v} == {k: v for k, v in ledger.items() if v}

    async def test_transfer_conserves_total(self, inventory):
        await seed(inventory)
        await inventory.movements.add_stock("SKU1", "LOC_A", 10)
        await inventory.movements.add_stock("SKU1", "LOC_B", 4)

        await inventory.movements.transfer_stock("SKU1", "LOC_A", "LOC_B", 6)

        a = await inventory.ledger.get("SKU1", "LOC_A")
        b = await inventory.ledger.get("SKU1", "LOC_B")
        assert (a, b) == (4, 10)
        assert a + b == 14

    async def test_concurrent_deducts_never_oversell(self, inventory, store):
        await seed(inventory)
        await inventory.movements.add_stock("SKU1", "LOC_A", 3)
        store.latency = 0.005

        results = await asyncio.gather(
            *(inventory.movements.deduct_stock("SKU1", "LOC_A", 1) for _ in range(5)),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, InsufficientStockError)]
        assert len(failures) == 2
        assert await inventory.ledger.get("SKU1", "LOC_A") == 0
        assert len(await _entries(inventory, kind=MovementKind.DEDUCT)) == 3


class TestTransferWriteOrder:

    async def _stocked(self, transactional):
        store = flaky_store()
        store.transactional = transactional
        inventory = InventoryService(store)
        await seed(inventory)
        await inventory.movements.add_stock("SKU1", "LOC_A", 5)
        await inventory.movements.add_stock("SKU1", "LOC_B", 5)
        store.stock.writes.clear()
        return store, inventory

    async def test_transaction_writes_rows_in_location_order(self):
        store, inventory = await self._stocked(transactional=True)

        await inventory.movements.transfer_stock("SKU1", "LOC_B", "LOC_A", 2)
        await inventory.movements.transfer_stock("SKU1", "LOC_A", "LOC_B", 3)

        assert store.stock.writes == [("LOC_A", 2), ("LOC_B", -2), ("LOC_A", -3), ("LOC_B", 3)]

    async def test_saga_decrements_source_first(self):
        store, inventory = await self._stocked(transactional=False)

        await inventory.movements.transfer_stock("SKU1", "LOC_B", "LOC_A", 2)

        assert store.stock.writes == [("LOC_B", -2), ("LOC_A", 2)]

    async def test_opposite_concurrent_transfers_both_succeed(self):
        store, inventory = await self._stocked(transactional=True)
        store.latency = 0.005

        receipts = await asyncio.gather(
            inventory.movements.transfer_stock("SKU1", "LOC_A", "LOC_B", 3),
            inventory.movements.transfer_stock("SKU1", "LOC_B", "LOC_A", 2),
        )

        assert [r.entry.kind for r in receipts] == [MovementKind.TRANSFER, MovementKind.TRANSFER]
        a = await inventory.ledger.get("SKU1", "LOC_A")
        b = await inventory.ledger.get("SKU1", "LOC_B")
        assert (a, b) == (4, 6)
        assert len(await _entries(inventory, kind=MovementKind.TRANSFER)) == 2


class TestSetStock:

    async def test_set_up_records_add(self, inventory):
        await seed(inventory)
        await inventory.movements.add_stock("SKU1", "LOC_A", 2)

        receipt = await inventory.movements.set_stock("SKU1", "LOC_A", 7)

        assert await inventory.ledger.get("SKU1", "LOC_A") == 7
        assert receipt.entry.kind is MovementKind.ADD
        assert receipt.entry.quantity == 5
        assert receipt.entry.reason == "stocktake"

    async def test_set_down_records_deduct(self, inventory):
        await seed(inventory)
        await inventory.movements.add_stock("SKU1", "LOC_A", 9)

        receipt = await inventory.movements.set_stock("SKU1", "LOC_A", 0, reason="correction")

        assert await inventory.ledger.get("SKU1", "LOC_A") == 0
        assert receipt.entry.kind is MovementKind.DEDUCT
        assert receipt.entry.quantity == 9
        assert receipt.entry.reason == "correction"

    async def test_set_same_value_is_noop(self, inventory):
        await seed(inventory)
        await inventory.movements.add_stock("SKU1", "LOC_A", 4)

        assert await inventory.movements.set_stock("SKU1", "LOC_A", 4) is None
        assert len(await _entries(inventory)) == 1

    async def test_set_negative_rejected(self, inventory):
        await seed(inventory)
        with pytest.raises(InvalidQuantityError):
            await inventory.movements.set_stock("SKU1", "LOC_A", -1)


class TestQuickAdjust:

    async def test_quick_add_and_deduct(self, inventory):
        await seed(inventory)

        up = await inventory.movements.quick_adjust("SKU1", "LOC_A", increase=True)
        down = await inventory.movements.quick_adjust("SKU1", "LOC_A", increase=False)

        assert up.entry.reason == "Quick add"
        assert down.entry.reason == "Quick deduct"
        assert await inventory.ledger.get("SKU1", "LOC_A") == 0

    async def test_quick_deduct_on_zero_is_rejected(self, inventory):
        await seed(inventory)
        with pytest.raises(InsufficientStockError):
            await inventory.movements.quick_adjust("SKU1", "LOC_A", increase=False)
        assert await _entries(inventory) == []
