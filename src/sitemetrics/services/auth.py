"""User lookup and login for the metrics page gate."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sitemetrics.core.config import settings
from sitemetrics.core.security import create_access_token, hash_password, verify_password
from sitemetrics.models.user import User, UserRole
from sitemetrics.schemas.auth import TokenResponse

logger = logging.getLogger(__name__)


async def _find_user(db: AsyncSession, condition) -> User | None:
    result = await db.execute(select(User).where(condition))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    return await _find_user(db, User.id == user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    return await _find_user(db, User.email == email)


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User | None:
    """Check a login; None when the email is unknown or the password is wrong.

    Blocked users can still log in. The metrics gate refuses them, so they
    see why they are locked out instead of a generic login failure.
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info(f"Failed login attempt for {email}")
        return None
    return user


def create_user_token(user: User) -> TokenResponse:
    """Issue the bearer token that also backs the browser session cookie."""
    access_token = create_access_token(
        data={"sub": str(user.id), "email": user.email, "role": user.role.value}
    )
    return TokenResponse(
        access_token=access_token,
        expires_in=settings.jwt_expiration_minutes * 60,
    )


async def create_admin_user(db: AsyncSession, email: str, password: str) -> User:
    """Create the bootstrap admin from settings."""
    user = User(email=email, password_hash=hash_password(password), role=UserRole.ADMIN)
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user
