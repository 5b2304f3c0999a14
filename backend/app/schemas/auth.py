from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

from app.core.config import settings
from app.models.user import User, UserRole
from app.schemas.common import iso


class UserRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=settings.PASSWORD_MIN_LENGTH)
    section: str = Field(..., min_length=1, max_length=100)
    role: UserRole = UserRole.USER

    @field_validator('name', 'section')
    @classmethod
    def strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator('email')
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class UserLogin(BaseModel):
    email: EmailStr
    password: str


def serialize_user(user: User, include_email: bool = True) -> dict:
    """Account view of a user, as returned by auth and profile endpoints"""
    data = {
        "id": user.id,
        "name": user.name,
        "avatarUrl": user.avatar_url,
        "bio": user.bio or "",
        "section": user.section,
        "role": user.role.value,
        "powWins": user.pow_wins,
        "isSuspended": user.is_suspended,
        "createdAt": iso(user.created_at),
    }
    if include_email:
        data["email"] = user.email
    return data


def serialize_user_brief(user: Optional[User]) -> Optional[dict]:
    """Name and avatar, for embedding in projects, comments and requests"""
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "avatarUrl": user.avatar_url}
