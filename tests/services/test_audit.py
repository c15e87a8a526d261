import dataclasses
from datetime import datetime, timedelta, timezone

import pytest

from inventory_tracker.core.errors import MalformedAuditEntryError
from inventory_tracker.core.models import AuditEntry, MovementKind
from inventory_tracker.services import InventoryService
from inventory_tracker.stores.base import AuditRepository
from tests.fakes import seed

pytestmark = pytest.mark.anyio

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class Clock:
    """Returns the queued instants in order, then keeps repeating the last."""

    def __init__(self, *instants: datetime) -> None:
        self._instants = list(instants)

    def __call__(self) -> datetime:
        if len(self._instants) > 1:
            return self._instants.pop(0)
        return self._instants[0]


def _minutes(*offsets: int) -> Clock:
    return Clock(*(T0 + timedelta(minutes=m) for m in offsets))


async def _history(store, clock):
    inventory = InventoryService(store, clock=clock)
    await seed(inventory, skus=("SKU1", "SKU2"))
    await inventory.movements.add_stock("SKU1", "LOC_A", 5)                   # T0+0
    await inventory.movements.add_stock("SKU2", "LOC_A", 5)                   # T0+1
    await inventory.movements.deduct_stock("SKU1", "LOC_A", 1)                # T0+2
    await inventory.movements.transfer_stock("SKU1", "LOC_A", "LOC_B", 2)     # T0+3
    return inventory


class TestAppend:

    async def test_assigns_id_and_timestamp(self, inventory):
        entry = AuditEntry(kind=MovementKind.ADD, sku="SKU1", quantity=1, location_id="LOC_A", item_name="x")

        stored = await inventory.audit.append(entry)

        assert stored.id
        assert stored.timestamp is not None
        assert entry.id is None

    async def test_keeps_given_id(self, inventory):
        entry = AuditEntry(kind=MovementKind.ADD, sku="SKU1", quantity=1, location_id="LOC_A", id="fixed")
        assert (await inventory.audit.append(entry)).id == "fixed"

    async def test_timestamps_never_go_backwards(self, store):
        inventory = InventoryService(store, clock=_minutes(5, 3))
        first = await inventory.audit.append(AuditEntry(kind="add", sku="S", quantity=1, location_id="L"))
        second = await inventory.audit.append(AuditEntry(kind="add", sku="S", quantity=1, location_id="L"))

        assert second.timestamp == first.timestamp

    @pytest.mark.parametrize(
        "fields",
        [
            dict(kind="add", sku="", quantity=1, location_id="L"),
            dict(kind="add", sku="S", quantity=0, location_id="L"),
            dict(kind="deduct", sku="S", quantity=1),
            dict(kind="transfer", sku="S", quantity=1, from_location_id="A"),
            dict(kind="transfer", sku="S", quantity=1, location_id="A", from_location_id="A", to_location_id="B"),
        ],
    )
    def test_malformed_entries_rejected(self, fields):
        with pytest.raises(MalformedAuditEntryError):
            AuditEntry(**fields)

    def test_entries_are_immutable(self):
        entry = AuditEntry(kind="add", sku="S", quantity=1, location_id="L")
        with pytest.raises(dataclasses.FrozenInstanceError):
            entry.quantity = 2
        assert not hasattr(AuditRepository, "update")
        assert not hasattr(AuditRepository, "delete")


class TestQuery:

    async def test_newest_first(self, store):
        inventory = await _history(store, _minutes(0, 1, 2, 3))

        kinds = [e.kind for e in await inventory.audit.query().all()]

        assert kinds == [MovementKind.TRANSFER, MovementKind.DEDUCT, MovementKind.ADD, MovementKind.ADD]

    async def test_filters_are_a_conjunction(self, store):
        inventory = await _history(store, _minutes(0, 1, 2, 3))

        sku1_adds = await inventory.audit.query(sku="SKU1", kind=MovementKind.ADD).all()
        assert [(e.sku, e.kind) for e in sku1_adds] == [("SKU1", MovementKind.ADD)]

        by_string_kind = await inventory.audit.query(kind="transfer").all()
        assert len(by_string_kind) == 1

    async def test_time_bounds_are_inclusive(self, store):
        inventory = await _history(store, _minutes(0, 1, 2, 3))

        window = await inventory.audit.query(
            start_time=T0 + timedelta(minutes=1),
            end_time=T0 + timedelta(minutes=2),
        ).all()

        assert [e.timestamp for e in window] == [T0 + timedelta(minutes=2), T0 + timedelta(minutes=1)]

    async def test_naive_bounds_are_treated_as_utc(self, store):
        inventory = await _history(store, _minutes(0, 1, 2, 3))
        naive = (T0 + timedelta(minutes=3)).replace(tzinfo=None)

        assert len(await inventory.audit.query(start_time=naive).all()) == 1

    async def test_query_is_idempotent_and_restartable(self, store):
        inventory = await _history(store, _minutes(0, 1, 2, 3))
        selection = inventory.audit.query(sku="SKU1")

        first = [e async for e in selection]
        second = [e async for e in selection]

        assert first == second
        assert first == await inventory.audit.query(sku="SKU1").all()

    async def test_pages_through_long_histories(self, store):
        inventory = await _history(store, _minutes(0, 1, 2, 3))
        inventory.audit.page_size = 1

        assert len(await inventory.audit.query().all()) == 4
        assert len(await inventory.audit.query().all(limit=3)) == 3

    async def test_no_match(self, store):
        inventory = await _history(store, _minutes(0, 1, 2, 3))
        assert await inventory.audit.query(sku="NOPE").all() == []
