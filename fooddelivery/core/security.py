"""
Authentication & Authorization

Password hashing (werkzeug), bearer token issue/verification (PyJWT) and
the FastAPI dependencies that resolve the calling user and gate routes by
role.

Usage:
    @router.patch("/{order_id}/status")
    async def update_status(
        user: User = Depends(require_roles(UserRole.RESTAURANT_OWNER, UserRole.ADMIN)),
    ): ...
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from werkzeug.security import check_password_hash, generate_password_hash

from fooddelivery.core.config import get_settings
from fooddelivery.core.exceptions import AuthenticationError, ForbiddenError
from fooddelivery.database import get_db
from fooddelivery.models import User, UserRole

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


# =============================================================================
# PASSWORDS
# =============================================================================

def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


# =============================================================================
# TOKENS
# =============================================================================

def create_access_token(user_id: int, expires_minutes: Optional[int] = None) -> str:
    """
    Issue a signed bearer token for a user.

    Args:
        user_id: Subject of the token
        expires_minutes: Lifetime override (defaults to JWT_EXPIRES_MINUTES)

    Returns:
        Encoded JWT string
    """
    settings = get_settings()
    lifetime = expires_minutes if expires_minutes is not None else settings.jwt_expires_minutes
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(minutes=lifetime),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify a bearer token and return its claims."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")


# =============================================================================
# DEPENDENCIES
# =============================================================================

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the user behind the ``Authorization: Bearer`` header."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Access denied. No token provided.")

    claims = decode_access_token(credentials.credentials)
    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError("Invalid token")

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        logger.warning(f"Rejected token for missing or inactive user #{user_id}")
        raise AuthenticationError("Invalid token")

    return user


def require_roles(*roles: UserRole):
    """Dependency factory admitting only users holding one of ``roles``."""

    async def _check_role(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise ForbiddenError("Access denied")
        return user

    return _check_role
