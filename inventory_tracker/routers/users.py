from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_tracker.core.auth import current_admin
from inventory_tracker.db.database import get_async_session
from inventory_tracker.db.users import User
from inventory_tracker.schemas.users import RoleUpdate, UserRead

router = APIRouter()


@router.get("/", response_model=List[UserRead])
async def list_users(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_admin),
):
    res = await db.execute(select(User).order_by(User.email.asc()))
    return [UserRead(**u.to_schema) for u in res.scalars().all()]


@router.patch("/{user_id}/role", response_model=UserRead)
async def set_role(
    user_id: UUID,
    payload: RoleUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(current_admin),
):
    target = await db.get(User, user_id)
    if not target:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    target.role = payload.role
    await db.commit()
    await db.refresh(target)
    return UserRead(**target.to_schema)
