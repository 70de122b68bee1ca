"""
Address Endpoints (authentication required)

    - GET    /api/addresses
    - POST   /api/addresses
    - PUT    /api/addresses/{address_id}
    - DELETE /api/addresses/{address_id}
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fooddelivery.core.security import get_current_user
from fooddelivery.database import get_db
from fooddelivery.models import User
from fooddelivery.schemas import AddressCreate, AddressOut, AddressUpdate, ApiResponse, ErrorResponse
from fooddelivery.services import addresses as address_store

router = APIRouter(prefix="/api/addresses", tags=["Addresses"])


@router.get("", response_model=ApiResponse[list[AddressOut]])
async def list_addresses(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[list[AddressOut]]:
    """Saved addresses, default first."""
    addresses = await address_store.list_addresses(db, user.id)
    return ApiResponse(data=[AddressOut.model_validate(a) for a in addresses])


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[AddressOut],
    responses={400: {"model": ErrorResponse}},
)
async def create_address(
    data: AddressCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[AddressOut]:
    address = await address_store.create_address(db, user.id, data)
    return ApiResponse(message="Address created successfully", data=AddressOut.model_validate(address))


@router.put(
    "/{address_id}",
    response_model=ApiResponse[AddressOut],
    responses={404: {"model": ErrorResponse}},
)
async def update_address(
    address_id: int,
    data: AddressUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[AddressOut]:
    address = await address_store.update_address(db, user.id, address_id, data)
    return ApiResponse(message="Address updated successfully", data=AddressOut.model_validate(address))


@router.delete(
    "/{address_id}",
    response_model=ApiResponse[None],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_address(
    address_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[None]:
    """Delete an address. The default one is protected while others exist."""
    await address_store.delete_address(db, user.id, address_id)
    return ApiResponse(message="Address deleted successfully")
