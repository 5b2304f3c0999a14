"""
Admin User Management endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from app.core.database import get_db
from app.core.exceptions import UserNotFoundError, ValidationError
from app.core.logging_config import logger
from app.core.types import is_valid_uuid
from app.models import User, user_friends
from app.modules.auth.dependencies import get_current_admin
from app.schemas.admin import serialize_admin_user

router = APIRouter()


async def _get_user(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id) if is_valid_uuid(user_id) else None
    if not user:
        raise UserNotFoundError(user_id)
    return user


async def _set_suspended(db: AsyncSession, user: User, suspended: bool, admin: User) -> User:
    user.is_suspended = suspended
    await db.commit()
    logger.info(
        f"[Admin] {admin.id} {'suspended' if suspended else 'unsuspended'} user {user.id}"
    )
    return user


@router.get("")
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """All users, newest first, with their friend counts"""
    counts = dict(
        (await db.execute(
            select(user_friends.c.user_id, func.count()).group_by(user_friends.c.user_id)
        )).all()
    )
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return [
        serialize_admin_user(user, counts.get(user.id, 0))
        for user in result.scalars().all()
    ]


@router.put("/{user_id}/suspend")
async def suspend_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    user = await _get_user(db, user_id)
    if user.is_admin:
        raise ValidationError("Cannot suspend admin users")
    await _set_suspended(db, user, True, current_admin)
    return {"message": "User suspended successfully", "user": serialize_admin_user(user)}


@router.put("/{user_id}/unsuspend")
async def unsuspend_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    user = await _get_user(db, user_id)
    await _set_suspended(db, user, False, current_admin)
    return {"message": "User unsuspended successfully", "user": serialize_admin_user(user)}
