from pydantic import BaseModel, field_validator


class LocationCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("name is required")
        return v


class LocationUpdate(LocationCreate):
    pass


class LocationRead(BaseModel):
    id: str
    name: str
