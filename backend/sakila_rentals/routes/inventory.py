"""Inventory copy-count aggregation endpoint."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sakila_rentals.database import get_db_session
from sakila_rentals.routes.deps import PageParams, page_params
from sakila_rentals.schemas.catalog import CopyCountResponse
from sakila_rentals.schemas.common import MAX_DB_ID, ErrorResponse
from sakila_rentals.services.availability_service import availability_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Inventory"])


@router.get(
    "/inventory/counts",
    response_model=CopyCountResponse,
    responses={400: {"description": "Unknown group_by", "model": ErrorResponse}},
    summary="Total, available and rented copies per group",
)
async def copy_counts(
    group_by: str = Query(default="film", description="film, store or film_store"),
    film_id: Optional[int] = Query(default=None, ge=1, le=MAX_DB_ID),
    store_id: Optional[int] = Query(default=None, ge=1, le=MAX_DB_ID),
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> CopyCountResponse:
    return await availability_service.count_copies(
        db,
        group_by=group_by,
        page=paging.page,
        page_size=paging.page_size,
        film_id=film_id,
        store_id=store_id,
    )
