"""
Address Store

CRUD over a user's saved delivery addresses.

Invariants:
    - a user has at most one default address; marking one as default
      clears the flag on all others
    - the default address cannot be deleted while the user has other
      addresses (the user must pick a new default first)
"""

import logging
from typing import Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fooddelivery.core.exceptions import BusinessRuleError, NotFoundError
from fooddelivery.models import Address
from fooddelivery.schemas import AddressCreate, AddressUpdate

logger = logging.getLogger(__name__)


async def list_addresses(db: AsyncSession, user_id: int) -> Sequence[Address]:
    """User's addresses, default first, then newest first."""
    result = await db.execute(
        select(Address)
        .where(Address.user_id == user_id)
        .order_by(Address.is_default.desc(), Address.created_at.desc(), Address.id.desc())
    )
    return result.scalars().all()


async def get_user_address(db: AsyncSession, user_id: int, address_id: int) -> Address:
    result = await db.execute(
        select(Address).where(Address.id == address_id, Address.user_id == user_id)
    )
    address = result.scalar_one_or_none()
    if address is None:
        raise NotFoundError("Address not found")
    return address


async def _clear_default(
    db: AsyncSession, user_id: int, keep_id: Optional[int] = None
) -> None:
    stmt = update(Address).where(Address.user_id == user_id, Address.is_default.is_(True))
    if keep_id is not None:
        stmt = stmt.where(Address.id != keep_id)
    await db.execute(stmt.values(is_default=False))


async def create_address(db: AsyncSession, user_id: int, data: AddressCreate) -> Address:
    try:
        if data.is_default:
            await _clear_default(db, user_id)

        address = Address(user_id=user_id, **data.model_dump())
        db.add(address)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(address)
    logger.info(f"Created address #{address.id} for user #{user_id}")
    return address


async def update_address(
    db: AsyncSession, user_id: int, address_id: int, data: AddressUpdate
) -> Address:
    address = await get_user_address(db, user_id, address_id)
    changes = data.model_dump(exclude_unset=True)

    try:
        if changes.get("is_default"):
            await _clear_default(db, user_id, keep_id=address.id)

        for field, value in changes.items():
            if value is None and field not in ("landmark", "latitude", "longitude"):
                continue
            setattr(address, field, value)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(address)
    logger.info(f"Updated address #{address.id} for user #{user_id}")
    return address


async def delete_address(db: AsyncSession, user_id: int, address_id: int) -> None:
    address = await get_user_address(db, user_id, address_id)

    if address.is_default:
        others = await db.execute(
            select(Address.id)
            .where(Address.user_id == user_id, Address.id != address.id)
            .limit(1)
        )
        if others.first() is not None:
            raise BusinessRuleError(
                "Cannot delete default address. Please set another address as default first."
            )

    try:
        await db.delete(address)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise BusinessRuleError("Address is referenced by existing orders and cannot be deleted")

    logger.info(f"Deleted address #{address_id} for user #{user_id}")
