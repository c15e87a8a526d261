from datetime import datetime
from typing import Dict, Literal, Optional

from pydantic import BaseModel, field_validator, model_validator

MovementKindName = Literal["add", "deduct", "transfer"]


def _strip_nullable(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


class _QuantityPayload(BaseModel):
    sku: str
    quantity: int

    @field_validator("quantity", mode="before")
    @classmethod
    def _no_bool(cls, v):
        if isinstance(v, bool):
            raise ValueError("quantity must be a whole number")
        return v

    @field_validator("sku")
    @classmethod
    def _strip_sku(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("sku is required")
        return v


class StockMovementCreate(_QuantityPayload):
    location_id: str
    reason: Optional[str] = None
    note: Optional[str] = None

    @field_validator("reason", "note")
    @classmethod
    def _strip(cls, v: Optional[str]) -> Optional[str]:
        return _strip_nullable(v)


class StockSetRequest(StockMovementCreate):
    pass


class StockTransferCreate(_QuantityPayload):
    from_location_id: str
    to_location_id: str
    note: Optional[str] = None

    @field_validator("note")
    @classmethod
    def _strip(cls, v: Optional[str]) -> Optional[str]:
        return _strip_nullable(v)


class QuickAdjustRequest(BaseModel):
    sku: str
    location_id: str
    direction: Literal["up", "down"]


class AuditEntryRead(BaseModel):
    id: Optional[str]
    timestamp: Optional[datetime]
    kind: MovementKindName
    sku: str
    location_id: Optional[str] = None
    from_location_id: Optional[str] = None
    to_location_id: Optional[str] = None
    quantity: int
    reason: Optional[str] = None
    note: Optional[str] = None
    actor_id: Optional[str] = None
    item_name: Optional[str] = None
    location_name: Optional[str] = None
    from_location_name: Optional[str] = None
    to_location_name: Optional[str] = None


class MovementRead(BaseModel):
    entry: AuditEntryRead
    levels: Dict[str, int]


class StockLevelRead(BaseModel):
    sku: str
    location_id: str
    quantity: int


class BookingRead(BaseModel):
    sku: str
    quantity: int
    note: str


class BookingUpdate(BaseModel):
    delta: Optional[int] = None
    note: Optional[str] = None

    @model_validator(mode="after")
    def _something_to_change(self):
        if self.delta is None and self.note is None:
            raise ValueError("provide delta and/or note")
        return self


class ReasonCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("name is required")
        return v
