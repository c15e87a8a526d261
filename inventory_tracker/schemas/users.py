from typing import Literal
from uuid import UUID

from fastapi_users import schemas
from pydantic import BaseModel

RoleName = Literal["admin", "editor", "viewer"]


class UserRead(schemas.BaseUser[UUID]):
    role: RoleName = "viewer"


class UserCreate(schemas.BaseUserCreate):
    pass


class UserUpdate(schemas.BaseUserUpdate):
    pass


class RoleUpdate(BaseModel):
    role: RoleName
