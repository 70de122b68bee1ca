"""
Auth Endpoints

    - POST /api/auth/register
    - POST /api/auth/login
    - GET  /api/auth/me
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fooddelivery.core.security import get_current_user
from fooddelivery.database import get_db
from fooddelivery.models import User
from fooddelivery.schemas import (
    ApiResponse,
    AuthPayload,
    ErrorResponse,
    LoginRequest,
    RegisterRequest,
    UserOut,
)
from fooddelivery.services.users import authenticate_user, register_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=ApiResponse[AuthPayload],
    responses={400: {"model": ErrorResponse}},
    summary="Register a new user",
)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[AuthPayload]:
    logger.info(f"Registration attempt: {data.email} ({data.role.value})")
    user, token = await register_user(db, data)
    return ApiResponse(
        message="User registered successfully",
        data=AuthPayload(user=UserOut.model_validate(user), token=token),
    )


@router.post(
    "/login",
    response_model=ApiResponse[AuthPayload],
    responses={401: {"model": ErrorResponse}},
    summary="Exchange credentials for a bearer token",
)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[AuthPayload]:
    user, token = await authenticate_user(db, data)
    return ApiResponse(
        message="Login successful",
        data=AuthPayload(user=UserOut.model_validate(user), token=token),
    )


@router.get("/me", response_model=ApiResponse[UserOut])
async def me(user: User = Depends(get_current_user)) -> ApiResponse[UserOut]:
    """Profile of the authenticated user."""
    return ApiResponse(data=UserOut.model_validate(user))
