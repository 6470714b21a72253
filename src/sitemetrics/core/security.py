"""Password hashing and bearer tokens for the metrics page gate."""

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import TYPE_CHECKING, Any

import jwt
from jwt.exceptions import PyJWTError

if TYPE_CHECKING:
    from passlib.context import CryptContext

from .config import settings


@lru_cache(maxsize=1)
def _crypt_context() -> "CryptContext":
    # passlib is imported on first use; its backend detecting is slow at import time
    from passlib.context import CryptContext

    return CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a password for storage in the users table."""
    return _crypt_context().hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return _crypt_context().verify(plain_password, hashed_password)


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a JWT carrying ``data`` plus issue and expiry times.

    Tokens live for ``settings.jwt_expiration_minutes`` unless
    ``expires_delta`` says otherwise.
    """
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.jwt_expiration_minutes)
    claims = {**data, "iat": issued_at, "exp": issued_at + lifetime}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Return the token's claims, or None if it is invalid or expired."""
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except PyJWTError:
        return None
