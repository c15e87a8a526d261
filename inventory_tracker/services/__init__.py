"""Inventory services wired onto one storage backend."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Optional

from inventory_tracker.services.audit import AuditTrail, utc_now
from inventory_tracker.services.backup import Backup
from inventory_tracker.services.bookings import Bookings
from inventory_tracker.services.catalogue import Catalogue
from inventory_tracker.services.ledger import StockLedger
from inventory_tracker.services.locations import LocationRegistry
from inventory_tracker.services.movements import StockMovements
from inventory_tracker.services.reasons import Reasons
from inventory_tracker.services.reports import Reports
from inventory_tracker.stores.base import InventoryStore


class InventoryService:
    """Composition root for one store.

    Callers hold a reference to this object instead of reaching for a global;
    the API builds one per request around that request's database session.
    """

    def __init__(
        self,
        store: InventoryStore,
        timeout: Optional[float] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.catalogue = Catalogue(store, timeout)
        self.locations = LocationRegistry(store, timeout)
        self.ledger = StockLedger(store, timeout)
        self.audit = AuditTrail(store, timeout, clock=clock)
        self.bookings = Bookings(store, self.catalogue, timeout)
        self.reasons = Reasons(store, timeout)
        self.movements = StockMovements(store, self.catalogue, self.locations, self.ledger, self.audit, timeout)
        self.reports = Reports(store, self.catalogue, self.locations, self.ledger, self.audit, self.bookings, timeout)
        self.backup = Backup(store, self.catalogue, self.locations, self.ledger, self.audit, timeout)


__all__ = ["InventoryService"]
