"""User listing and profile edits."""

import logging

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from sakila_rentals.database import get_db_session
from sakila_rentals.routes.deps import PageParams, page_params
from sakila_rentals.schemas.account import UserListResponse, UserResponse, UserUpdateRequest
from sakila_rentals.schemas.common import MAX_DB_ID, ErrorResponse
from sakila_rentals.services.account_service import account_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=UserListResponse, summary="List users")
async def list_users(
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> UserListResponse:
    return await account_service.list_users(db, page=paging.page, page_size=paging.page_size)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get one user",
)
async def get_user(
    user_id: int = Path(ge=1, le=MAX_DB_ID),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await account_service.get_user(db, user_id)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    responses={
        404: {"description": "User not found", "model": ErrorResponse},
        409: {"description": "Name or email already taken", "model": ErrorResponse},
    },
    summary="Edit a user's profile fields",
)
async def update_user(
    body: UserUpdateRequest,
    user_id: int = Path(ge=1, le=MAX_DB_ID),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await account_service.update_user(db, user_id, body)
