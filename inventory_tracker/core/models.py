"""Domain records shared by stores, services and routers.

These are plain dataclasses, independent of the storage backend. ORM rows are
converted to and from them in ``core.converters``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from inventory_tracker.core.errors import MalformedAuditEntryError


STOCK_KEY_SEPARATOR = "::"


def stock_key(sku: str, location_id: str) -> str:
    """Key used for the ``stockByLocation`` map in exports."""
    return f"{sku}{STOCK_KEY_SEPARATOR}{location_id}"


class QuantityUnit(str, enum.Enum):
    DISCRETE = "unit"
    WEIGHTED = "kg"

    @classmethod
    def parse(cls, value: Optional[str]) -> "QuantityUnit":
        # anything that is not exactly "kg" is counted in units
        return cls.WEIGHTED if value == cls.WEIGHTED.value else cls.DISCRETE


class MovementKind(str, enum.Enum):
    ADD = "add"
    DEDUCT = "deduct"
    TRANSFER = "transfer"


class Role(str, enum.Enum):
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


DEFAULT_REASONS = (
    "purchase",
    "sale",
    "correction",
    "wastage",
    "return_in",
    "return_out",
    "stocktake",
    "other",
)


@dataclass
class Item:
    sku: str
    name: str
    selling_price_minor_units: int = 0
    quantity_unit: QuantityUnit = QuantityUnit.DISCRETE


@dataclass
class Location:
    id: str
    name: str


@dataclass(frozen=True)
class StockLevel:
    sku: str
    location_id: str
    quantity: int


@dataclass
class Booking:
    sku: str
    quantity: int = 0
    note: str = ""


@dataclass(frozen=True)
class AuditEntry:
    """Immutable record of one completed stock movement.

    Add/Deduct entries carry ``location_id``; Transfer entries carry
    ``from_location_id`` and ``to_location_id``. Display names are copied in
    at write time so the trail stays readable after renames and deletions.
    ``id`` and ``timestamp`` are assigned by the audit trail on append.
    """

    kind: MovementKind
    sku: str
    quantity: int
    location_id: Optional[str] = None
    from_location_id: Optional[str] = None
    to_location_id: Optional[str] = None
    reason: Optional[str] = None
    note: Optional[str] = None
    actor_id: Optional[str] = None
    item_name: Optional[str] = None
    location_name: Optional[str] = None
    from_location_name: Optional[str] = None
    to_location_name: Optional[str] = None
    id: Optional[str] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, MovementKind):
            object.__setattr__(self, "kind", MovementKind(self.kind))
        if not self.sku:
            raise MalformedAuditEntryError("Audit entry requires a sku")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity <= 0:
            raise MalformedAuditEntryError(f"Audit quantity must be a positive integer, got {self.quantity!r}")
        if self.kind is MovementKind.TRANSFER:
            if not self.from_location_id or not self.to_location_id or self.location_id:
                raise MalformedAuditEntryError("Transfer entries require from/to locations only")
        elif not self.location_id or self.from_location_id or self.to_location_id:
            raise MalformedAuditEntryError(f"{self.kind.value} entries require a single location")

    @property
    def signed_changes(self) -> dict[str, int]:
        """Ledger delta per location implied by this entry."""
        if self.kind is MovementKind.ADD:
            return {self.location_id: self.quantity}
        if self.kind is MovementKind.DEDUCT:
            return {self.location_id: -self.quantity}
        return {self.from_location_id: -self.quantity, self.to_location_id: self.quantity}


@dataclass(frozen=True)
class AuditFilter:
    """Conjunction of optional predicates; unset fields do not filter."""

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    kind: Optional[MovementKind] = None
    sku: Optional[str] = None

    def matches(self, entry: AuditEntry) -> bool:
        if self.start_time is not None and entry.timestamp < self.start_time:
            return False
        if self.end_time is not None and entry.timestamp > self.end_time:
            return False
        if self.kind is not None and entry.kind is not self.kind:
            return False
        if self.sku is not None and entry.sku != self.sku:
            return False
        return True


@dataclass(frozen=True)
class MovementReceipt:
    """Outcome of a successful movement: its audit entry and new quantities."""

    entry: AuditEntry
    levels: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ImportSummary:
    imported: int = 0
    skipped: int = 0
    locations: int = 0
