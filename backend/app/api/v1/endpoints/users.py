"""
Users API - directory and profiles.
"""
from typing import Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import UserNotFoundError
from app.core.types import is_valid_uuid
from app.models.user import User, user_friends
from app.modules.auth.dependencies import get_current_user
from app.schemas.auth import serialize_user, serialize_user_brief
from app.schemas.user import ProfileUpdate
from app.services.project_service import ProjectService

router = APIRouter()


async def _friend_map(db: AsyncSession) -> Dict[str, List[str]]:
    result = await db.execute(select(user_friends.c.user_id, user_friends.c.friend_id))
    friends: Dict[str, List[str]] = {}
    for user_id, friend_id in result.all():
        friends.setdefault(user_id, []).append(friend_id)
    return friends


async def _profile(db: AsyncSession, user: User) -> dict:
    result = await db.execute(
        select(User)
        .join(user_friends, user_friends.c.friend_id == User.id)
        .where(user_friends.c.user_id == user.id)
        .order_by(User.name)
    )
    friends = result.scalars().all()

    data = serialize_user(user)
    data["friends"] = [
        {**serialize_user_brief(friend), "email": friend.email, "section": friend.section}
        for friend in friends
    ]
    data["friendsCount"] = len(friends)
    data["projectsCount"] = await ProjectService(db).count_owned(user.id)
    return data


@router.get("")
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Everyone except the caller"""
    result = await db.execute(
        select(User).where(User.id != current_user.id).order_by(User.name)
    )
    friends = await _friend_map(db)

    items = []
    for user in result.scalars().all():
        data = serialize_user(user)
        data["friends"] = friends.get(user.id, [])
        data["friendsCount"] = len(data["friends"])
        items.append(data)
    return items


@router.put("/profile")
async def update_profile(
    profile: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update the caller's name, bio, section or avatar"""
    for field, value in profile.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(current_user, field, value.strip() if field in ("name", "section") else value)
    await db.commit()
    return await _profile(db, current_user)


@router.get("/{user_id}")
async def get_user_profile(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Public profile with friends, win count and project count"""
    user = await db.get(User, user_id) if is_valid_uuid(user_id) else None
    if not user:
        raise UserNotFoundError(user_id)
    return await _profile(db, user)
