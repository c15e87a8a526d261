from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

QuantityUnitName = Literal["unit", "kg"]


class ItemCreate(BaseModel):
    sku: str
    name: str
    selling_price_minor_units: int = Field(default=0, ge=0)
    quantity_unit: QuantityUnitName = "unit"

    @field_validator("sku", "name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v


class ItemUpdate(BaseModel):
    name: Optional[str] = None
    selling_price_minor_units: Optional[int] = Field(default=None, ge=0)
    quantity_unit: Optional[QuantityUnitName] = None

    @field_validator("name")
    @classmethod
    def _strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty")
        return v


class ItemRead(BaseModel):
    sku: str
    name: str
    selling_price_minor_units: int
    price: float
    quantity_unit: QuantityUnitName
