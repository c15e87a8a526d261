"""Inventory error taxonomy.

Every failure a store or service can raise is an ``InventoryError`` so the
HTTP layer can map them uniformly:

- ``ValidationError``: rejected before any mutation, surfaced verbatim.
- ``InsufficientStockError``: business rule, rejected before any mutation.
- ``InfrastructureError``: timeout or connection failure. The mutation may or
  may not have applied; re-query the ledger before retrying.
- ``InconsistentStateError``: a compensating rollback failed and the ledger
  needs manual reconciliation.
"""

from __future__ import annotations


class InventoryError(Exception):
    """Base class for all inventory errors."""


# --- Validation ---------------------------------------------------------------


class ValidationError(InventoryError):
    """Input was rejected before touching the ledger."""


class InvalidQuantityError(ValidationError):
    def __init__(self, quantity: object) -> None:
        super().__init__(f"Quantity must be a positive whole number, got {quantity!r}")
        self.quantity = quantity


class SameLocationError(ValidationError):
    def __init__(self, location_id: str) -> None:
        super().__init__(f"Cannot transfer from location {location_id!r} to itself")
        self.location_id = location_id


class UnknownSkuError(ValidationError):
    def __init__(self, sku: str) -> None:
        super().__init__(f"Item not found: {sku!r}")
        self.sku = sku


class UnknownLocationError(ValidationError):
    def __init__(self, location_id: str) -> None:
        super().__init__(f"Location not found: {location_id!r}")
        self.location_id = location_id


class DuplicateSkuError(ValidationError):
    def __init__(self, sku: str) -> None:
        super().__init__(f'SKU "{sku}" already exists. Please use a different SKU.')
        self.sku = sku


class MalformedAuditEntryError(ValidationError):
    """An audit entry is missing the fields its kind requires."""


class ImportFormatError(ValidationError):
    """An import payload could not be understood."""


# --- Business rules -----------------------------------------------------------


class InsufficientStockError(InventoryError):
    def __init__(self, sku: str, location_id: str, available: int, requested: int) -> None:
        super().__init__(
            f"Insufficient stock for {sku} at {location_id}. "
            f"Available: {available}, Requested: {requested}"
        )
        self.sku = sku
        self.location_id = location_id
        self.available = available
        self.requested = requested


# --- Infrastructure -----------------------------------------------------------


class InfrastructureError(InventoryError):
    """The backing store could not be reached or did not answer in time."""


class StorageTimeoutError(InfrastructureError):
    def __init__(self, operation: str, timeout: float) -> None:
        super().__init__(f"{operation} timed out after {timeout:g}s")
        self.operation = operation
        self.timeout = timeout


class StorageUnavailableError(InfrastructureError):
    pass


# --- Partial failures ---------------------------------------------------------


class InconsistentStateError(InventoryError):
    """The ledger was left in a state that needs manual reconciliation."""


class InconsistentTransferStateError(InconsistentStateError):
    def __init__(
        self,
        sku: str,
        from_location_id: str,
        to_location_id: str,
        quantity: int,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            f"Transfer of {quantity} x {sku} from {from_location_id} to {to_location_id} "
            f"failed and the source could not be restored"
        )
        self.sku = sku
        self.from_location_id = from_location_id
        self.to_location_id = to_location_id
        self.quantity = quantity
        self.cause = cause


class UnauditedMovementError(InconsistentStateError):
    def __init__(self, sku: str, location_id: str, delta: int, cause: BaseException | None = None) -> None:
        super().__init__(
            f"Stock change of {delta:+d} for {sku} at {location_id} could not be audited "
            f"and could not be reverted"
        )
        self.sku = sku
        self.location_id = location_id
        self.delta = delta
        self.cause = cause
