"""
Sakila Rentals Backend — Film Route Handlers
==============================================

What:  Catalog listing/search and per-store availability of a film.
Who:   Called by the rental desk UI to find a film and pick a copy.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sakila_rentals.database import get_db_session
from sakila_rentals.repositories.catalog import FilmSearchFilters
from sakila_rentals.routes.deps import PageParams, page_params
from sakila_rentals.schemas.catalog import (
    AvailabilityResponse,
    FilmListResponse,
    FilmsByCategoryRequest,
    FilmsInCategory,
)
from sakila_rentals.schemas.common import MAX_DB_ID, ErrorResponse
from sakila_rentals.services.availability_service import availability_service
from sakila_rentals.services.catalog_service import catalog_service

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api", tags=["Films"])


@router.get(
    "/films",
    response_model=FilmListResponse,
    summary="List films with their categories",
)
async def list_films(
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> FilmListResponse:
    return await catalog_service.list_films(db, paging.page, paging.page_size)


@router.get(
    "/films/search",
    response_model=FilmListResponse,
    summary="Search films",
    description=(
        "Filters are combined with AND. `category` may be repeated; a film "
        "matches if it belongs to any of the given categories."
    ),
)
async def search_films(
    title: Optional[str] = Query(default=None, description="Case-insensitive substring of the title"),
    category: Optional[List[str]] = Query(default=None, description="Category name (repeatable)"),
    min_year: Optional[int] = Query(default=None, ge=0, le=9999, alias="minYear"),
    max_year: Optional[int] = Query(default=None, ge=0, le=9999, alias="maxYear"),
    rating: Optional[str] = Query(default=None, description="MPAA rating, e.g. PG-13"),
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_session),
) -> FilmListResponse:
    filters = FilmSearchFilters(
        title=title,
        categories=tuple(c for c in (category or []) if c),
        min_year=min_year,
        max_year=max_year,
        rating=rating,
    )
    return await catalog_service.search_films(db, filters, paging.page, paging.page_size)


@router.post(
    "/films/by-categories",
    response_model=List[FilmsInCategory],
    responses={400: {"description": "categories is not a non-empty list", "model": ErrorResponse}},
    summary="Films for each of several categories",
)
async def films_by_categories(
    body: FilmsByCategoryRequest,
    db: AsyncSession = Depends(get_db_session),
) -> List[FilmsInCategory]:
    return await catalog_service.films_by_categories(db, body.categories, body.limit)


@router.get(
    "/films/{film_id}/availability",
    response_model=AvailabilityResponse,
    responses={404: {"description": "Film or store not found", "model": ErrorResponse}},
    summary="Copies of a film available at a store",
)
async def check_availability(
    film_id: int = Path(ge=1, le=MAX_DB_ID),
    store_id: int = Query(ge=1, le=MAX_DB_ID, description="Store to check"),
    db: AsyncSession = Depends(get_db_session),
) -> AvailabilityResponse:
    """
    Per-copy availability, computed from open rentals at request time.

    `available_inventory_ids` lists the copies that can be passed to
    POST /api/rentals right now.
    """
    return await availability_service.check_availability(db, film_id=film_id, store_id=store_id)
