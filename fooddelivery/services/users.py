"""
User Registration & Login
"""

import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fooddelivery.core.exceptions import AuthenticationError, BusinessRuleError
from fooddelivery.core.security import create_access_token, hash_password, verify_password
from fooddelivery.models import User
from fooddelivery.schemas import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)


async def register_user(db: AsyncSession, data: RegisterRequest) -> tuple[User, str]:
    """Create a user account and issue its first token."""
    existing = await db.execute(
        select(User.id).where(or_(User.email == data.email, User.phone == data.phone))
    )
    if existing.first() is not None:
        raise BusinessRuleError("User with this email or phone already exists")

    user = User(
        email=data.email,
        password_hash=hash_password(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        phone=data.phone,
        role=data.role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info(f"Registered user #{user.id} ({user.role.value})")
    return user, create_access_token(user.id)


async def authenticate_user(db: AsyncSession, data: LoginRequest) -> tuple[User, str]:
    """Check credentials and issue a token."""
    result = await db.execute(select(User).where(User.email == data.email))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(user.password_hash, data.password):
        logger.info(f"Failed login for {data.email}")
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        raise AuthenticationError("Account is deactivated")

    return user, create_access_token(user.id)
