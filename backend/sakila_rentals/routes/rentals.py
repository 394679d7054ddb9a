"""
Sakila Rentals Backend — Rental Route Handlers
================================================

What:  Create and return rentals; list open and overdue ones.
Who:   Called by the rental desk UI.

Status codes:
    POST /api/rentals              201 when at least one copy was rented,
                                   400 when none could be (all_unavailable)
    POST /api/rentals/{id}/return  200, 404 unknown rental, 400 already returned
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sakila_rentals.database import get_db_session
from sakila_rentals.routes.deps import PageParams, page_params
from sakila_rentals.schemas.common import MAX_DB_ID, ErrorResponse
from sakila_rentals.schemas.rental import (
    ActiveRentalListResponse,
    OverdueRentalListResponse,
    RentalBatchResponse,
    RentalCreateRequest,
    RentalReturnResponse,
)
from sakila_rentals.services.rental_service import rental_service

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/rentals", tags=["Rentals"])


@router.post(
    "",
    response_model=RentalBatchResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Bad input, unknown customer/staff, or nothing available", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Rent one or more inventory copies",
)
async def create_rentals(
    body: RentalCreateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> RentalBatchResponse:
    """
    Copies already out are skipped and reported in `unavailable_inventory_ids`;
    the request fails only if none could be rented.
    """
    return await rental_service.create_rentals(
        db,
        customer_id=body.customer_id,
        inventory_ids=body.inventory_ids,
        staff_id=body.staff_id,
    )


@router.post(
    "/{rental_id}/return",
    response_model=RentalReturnResponse,
    responses={
        400: {"description": "Rental already returned", "model": ErrorResponse},
        404: {"description": "Rental not found", "model": ErrorResponse},
    },
    summary="Return a rented copy",
)
async def return_rental(
    rental_id: int = Path(ge=1, le=MAX_DB_ID),
    db: AsyncSession = Depends(get_db_session),
) -> RentalReturnResponse:
    return await rental_service.return_rental(db, rental_id)


@router.get(
    "/active",
    response_model=ActiveRentalListResponse,
    summary="Open rentals, newest first",
)
async def list_active_rentals(
    customer_id: Optional[int] = Query(
        default=None, ge=1, le=MAX_DB_ID, description="Only this customer's rentals"
    ),
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> ActiveRentalListResponse:
    return await rental_service.list_active_rentals(
        db,
        page=paging.page,
        page_size=paging.page_size,
        customer_id=customer_id,
    )


@router.get(
    "/overdue",
    response_model=OverdueRentalListResponse,
    summary="Open rentals past the overdue threshold, most overdue first",
)
async def list_overdue_rentals(
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> OverdueRentalListResponse:
    return await rental_service.list_overdue_rentals(db, page=paging.page, page_size=paging.page_size)
