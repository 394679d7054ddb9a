"""
Sakila Rentals Backend — Catalog Service
==========================================

What:  Film listing, search and per-category lookup.
How:   Thin orchestration over repositories/catalog.py; turns ORM rows
       into response models and storage failures into DatabaseError.
"""

import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from sakila_rentals.repositories import catalog as catalog_repo
from sakila_rentals.repositories.catalog import FilmSearchFilters
from sakila_rentals.repositories.common import page_offset
from sakila_rentals.schemas.catalog import FilmItem, FilmListResponse, FilmsInCategory
from sakila_rentals.services.storage_errors import storage_errors

logger = logging.getLogger(__name__)


class CatalogService:

    async def list_films(self, db: AsyncSession, page: int, page_size: int) -> FilmListResponse:
        """All films with their categories, one page at a time."""
        return await self.search_films(db, FilmSearchFilters(), page, page_size)

    async def search_films(
        self,
        db: AsyncSession,
        filters: FilmSearchFilters,
        page: int,
        page_size: int,
    ) -> FilmListResponse:
        async with storage_errors("search films"):
            films, total = await catalog_repo.search_films(
                db,
                filters,
                offset=page_offset(page, page_size),
                limit=page_size,
            )
        return FilmListResponse(
            page=page,
            page_size=page_size,
            total=total,
            films=[FilmItem.model_validate(f) for f in films],
        )

    async def films_by_categories(
        self,
        db: AsyncSession,
        categories: List[str],
        limit: int,
    ) -> List[FilmsInCategory]:
        """Up to `limit` films for each category name, in request order."""
        results = []
        async with storage_errors("fetch films by category", categories=categories):
            for name in categories:
                films = await catalog_repo.films_in_category(db, name, limit)
                results.append(
                    FilmsInCategory(
                        category=name,
                        films=[FilmItem.model_validate(f) for f in films],
                    )
                )
        return results


# ── Singleton Instance ────────────────────────────────────────────────────
catalog_service = CatalogService()
