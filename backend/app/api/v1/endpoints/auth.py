from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import (
    AccountSuspendedError,
    AdminExistsError,
    EmailTakenError,
    InvalidCredentialsError,
)
from app.core.logging_config import logger
from app.core.rate_limiter import auth_rate_limit, strict_rate_limit
from app.core.security import create_user_token, get_password_hash, verify_password
from app.models.user import User, UserRole
from app.modules.auth.dependencies import get_current_user
from app.schemas.auth import UserLogin, UserRegister, serialize_user

router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED)
@strict_rate_limit()
async def register(
    request: Request,
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """Create an account and sign it in"""

    result = await db.execute(select(User).where(User.email == user_data.email))
    if result.scalar_one_or_none():
        raise EmailTakenError()

    if user_data.role == UserRole.ADMIN:
        result = await db.execute(select(User.id).where(User.role == UserRole.ADMIN))
        if result.first():
            raise AdminExistsError()

    user = User(
        name=user_data.name,
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
        section=user_data.section,
        role=user_data.role,
        avatar_url=settings.default_avatar_url(user_data.email),
    )
    db.add(user)

    try:
        await db.commit()
    except IntegrityError:
        # Unique email or the single-admin index caught a concurrent registration
        await db.rollback()
        if user_data.role == UserRole.ADMIN:
            raise AdminExistsError()
        raise EmailTakenError()

    logger.log_auth_event("register", True, user_email=user.email, role=user.role.value)
    return {"token": create_user_token(user), "user": serialize_user(user)}


@router.post("/login")
@auth_rate_limit()
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Exchange email and password for a bearer token"""

    result = await db.execute(select(User).where(User.email == credentials.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.log_auth_event("login", False, user_email=credentials.email, reason="invalid_credentials")
        raise InvalidCredentialsError()

    if user.is_suspended:
        logger.log_auth_event("login", False, user_email=user.email, reason="suspended")
        raise AccountSuspendedError()

    logger.log_auth_event("login", True, user_email=user.email)
    return {"token": create_user_token(user), "user": serialize_user(user)}


@router.get("/me")
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return serialize_user(current_user)
