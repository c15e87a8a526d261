"""Movement operations: add, deduct, transfer (and set, built on add/deduct).

Every successful movement changes the ledger and appends exactly one audit
entry; a failed one leaves neither behind. The order inside one movement is
always validate, then mutate the ledger, then append the audit entry.

On a transactional store the ledger writes and the audit append share one
transaction, with the rows written in location id order. On any other store the movement runs as a saga: writes are
applied in order and, if a later step fails, the earlier ones are reverted by
compensating deltas before the error is re-raised. A compensation that
itself fails is reported as an ``InconsistentStateError``, never swallowed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from inventory_tracker.core.errors import (
    InconsistentTransferStateError,
    InsufficientStockError,
    SameLocationError,
    UnauditedMovementError,
)
from inventory_tracker.core.models import AuditEntry, MovementKind, MovementReceipt
from inventory_tracker.services.audit import AuditTrail
from inventory_tracker.services.base import StoreService, whole_number
from inventory_tracker.services.catalogue import Catalogue
from inventory_tracker.services.ledger import StockLedger
from inventory_tracker.services.locations import LocationRegistry

logger = logging.getLogger(__name__)

QUICK_ADD_REASON = "Quick add"
QUICK_DEDUCT_REASON = "Quick deduct"

# a ledger step: (location_id, signed delta)
Step = tuple[str, int]


class StockMovements(StoreService):

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

    async def add_stock(
        self,
        sku: str,
        location_id: str,
        quantity: int,
        reason: Optional[str] = None,
        note: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> MovementReceipt:
        quantity = whole_number(quantity)
        item = await self._catalogue.require(sku)
        location = await self._locations.require(location_id)

        entry = AuditEntry(
            kind=MovementKind.ADD,
            sku=sku,
            quantity=quantity,
            location_id=location_id,
            reason=reason,
            note=note,
            actor_id=actor_id,
            item_name=item.name,
            location_name=location.name,
        )
        receipt = await self._apply([(location_id, quantity)], entry)
        logger.info("Added %d x %s at %s (actor=%s)", quantity, sku, location_id, actor_id)
        return receipt

    async def deduct_stock(
        self,
        sku: str,
        location_id: str,
        quantity: int,
        reason: Optional[str] = None,
        note: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> MovementReceipt:
        quantity = whole_number(quantity)
        item = await self._catalogue.require(sku)
        location = await self._locations.require(location_id)

        available = await self._ledger.get(sku, location_id)
        if quantity > available:
            logger.info("Rejected deduct of %d x %s at %s: only %d available", quantity, sku, location_id, available)
            raise InsufficientStockError(sku, location_id, available=available, requested=quantity)

        entry = AuditEntry(
            kind=MovementKind.DEDUCT,
            sku=sku,
            quantity=quantity,
            location_id=location_id,
            reason=reason,
            note=note,
            actor_id=actor_id,
            item_name=item.name,
            location_name=location.name,
        )
        receipt = await self._apply([(location_id, -quantity)], entry)
        logger.info("Deducted %d x %s at %s (actor=%s)", quantity, sku, location_id, actor_id)
        return receipt

    async def transfer_stock(
        self,
        sku: str,
        from_location_id: str,
        to_location_id: str,
        quantity: int,
        note: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> MovementReceipt:
        """Move stock between two locations as one logical unit.

        Source availability is checked before anything is written. Without a
        transaction the source is decremented first, then the destination
        incremented.
        """
        quantity = whole_number(quantity)
        if from_location_id == to_location_id:
            raise SameLocationError(from_location_id)
        item = await self._catalogue.require(sku)
        source = await self._locations.require(from_location_id)
        destination = await self._locations.require(to_location_id)

        available = await self._ledger.get(sku, from_location_id)
        if quantity > available:
            logger.info(
                "Rejected transfer of %d x %s from %s: only %d available",
                quantity, sku, from_location_id, available,
            )
            raise InsufficientStockError(sku, from_location_id, available=available, requested=quantity)

        entry = AuditEntry(
            kind=MovementKind.TRANSFER,
            sku=sku,
            quantity=quantity,
            from_location_id=from_location_id,
            to_location_id=to_location_id,
            note=note,
            actor_id=actor_id,
            item_name=item.name,
            from_location_name=source.name,
            to_location_name=destination.name,
        )
        receipt = await self._apply([(from_location_id, -quantity), (to_location_id, quantity)], entry)
        logger.info(
            "Transferred %d x %s from %s to %s (actor=%s)",
            quantity, sku, from_location_id, to_location_id, actor_id,
        )
        return receipt

    async def set_stock(
        self,
        sku: str,
        location_id: str,
        new_quantity: int,
        reason: Optional[str] = None,
        note: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> Optional[MovementReceipt]:
        """Stocktake correction: bring the quantity to ``new_quantity``.

        Recorded as the Add or Deduct of the difference; returns None when the
        quantity is already right. The difference is computed from a read, so
        a concurrent movement on the same key can make the final quantity
        differ from ``new_quantity``; it can never make it negative.
        """
        new_quantity = whole_number(new_quantity, allow_zero=True)
        await self._catalogue.require(sku)
        await self._locations.require(location_id)

        current = await self._ledger.get(sku, location_id)
        delta = new_quantity - current
        reason = reason or "stocktake"
        if delta > 0:
            return await self.add_stock(sku, location_id, delta, reason, note, actor_id)
        if delta < 0:
            return await self.deduct_stock(sku, location_id, -delta, reason, note, actor_id)
        return None

    async def quick_adjust(self, sku: str, location_id: str, increase: bool, actor_id: Optional[str] = None) -> MovementReceipt:
        """One-unit add or deduct from the product report."""
        if increase:
            return await self.add_stock(sku, location_id, 1, QUICK_ADD_REASON, None, actor_id)
        return await self.deduct_stock(sku, location_id, 1, QUICK_DEDUCT_REASON, None, actor_id)

    # --- Internal helpers -----------------------------------------------------

    async def _apply(self, steps: list[Step], entry: AuditEntry) -> MovementReceipt:
        if self._store.transactional:
            return await self._apply_in_transaction(steps, entry)
        return await self._apply_as_saga(steps, entry)

    async def _apply_in_transaction(self, steps: list[Step], entry: AuditEntry) -> MovementReceipt:
        levels: dict[str, int] = {}
        async with self._store.transaction():
            # rows are locked in location order so opposite transfers cannot deadlock
            for location_id, delta in sorted(steps):
                levels[location_id] = await self._ledger.apply_delta(entry.sku, location_id, delta)
            recorded = await self._audit.append(entry)
        return MovementReceipt(entry=recorded, levels=levels)

    async def _apply_as_saga(self, steps: list[Step], entry: AuditEntry) -> MovementReceipt:
        levels: dict[str, int] = {}
        applied: list[Step] = []
        try:
            for location_id, delta in steps:
                levels[location_id] = await self._ledger.apply_delta(entry.sku, location_id, delta)
                applied.append((location_id, delta))
            recorded = await self._audit.append(entry)
        except (Exception, asyncio.CancelledError) as exc:
            if applied:
                await self._compensate(entry, applied, exc)
            raise
        return MovementReceipt(entry=recorded, levels=levels)

    async def _compensate(self, entry: AuditEntry, applied: list[Step], cause: BaseException) -> None:
        logger.warning(
            "%s of %d x %s failed after %d ledger write(s), reverting: %r",
            entry.kind.value, entry.quantity, entry.sku, len(applied), cause,
        )
        for location_id, delta in reversed(applied):
            try:
                await self._ledger.apply_delta(entry.sku, location_id, -delta)
            except (Exception, asyncio.CancelledError) as exc:
                if entry.kind is MovementKind.TRANSFER:
                    logger.critical(
                        "Transfer rollback failed: sku=%s from=%s to=%s quantity=%d; manual reconciliation needed",
                        entry.sku, entry.from_location_id, entry.to_location_id, entry.quantity,
                        exc_info=exc,
                    )
                    raise InconsistentTransferStateError(
                        entry.sku,
                        entry.from_location_id,
                        entry.to_location_id,
                        entry.quantity,
                        cause=cause,
                    ) from exc
                logger.critical(
                    "Unaudited stock change left in place: sku=%s location=%s delta=%+d",
                    entry.sku, location_id, delta,
                    exc_info=exc,
                )
                raise UnauditedMovementError(entry.sku, location_id, delta, cause=cause) from exc
