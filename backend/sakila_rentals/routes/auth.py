"""
Sakila Rentals Backend — Signup & Signin Routes
=================================================

What:  Account creation and credential check.
Note:  Signin issues no token or session; it only confirms the
       credentials and returns the user's profile.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from sakila_rentals.database import get_db_session
from sakila_rentals.schemas.account import (
    SigninRequest,
    SigninResponse,
    SignupEnvelope,
    SignupResponse,
)
from sakila_rentals.schemas.common import ErrorResponse
from sakila_rentals.services.account_service import account_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing fields or unknown store", "model": ErrorResponse},
        409: {"description": "Name or email already taken", "model": ErrorResponse},
    },
    summary="Create a user and its customer record",
)
async def signup(
    body: SignupEnvelope,
    db: AsyncSession = Depends(get_db_session),
) -> SignupResponse:
    return await account_service.signup(db, body.unwrap())


@router.post(
    "/signin",
    response_model=SigninResponse,
    responses={
        400: {"description": "Missing username or password", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Verify a username and password",
)
async def signin(
    body: SigninRequest,
    db: AsyncSession = Depends(get_db_session),
) -> SigninResponse:
    return await account_service.signin(db, body)
