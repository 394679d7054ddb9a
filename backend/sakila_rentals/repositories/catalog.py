"""
Sakila Rentals Backend — Catalog Queries
==========================================

What:  Film listing and search.
How:   `FilmSearchFilters` enumerates every optional filter the search
       endpoint accepts. Each filter maps to one fixed clause with bound
       parameters; no identifier is ever interpolated into SQL.

Filter semantics:
    - Filters of different kinds are combined with AND.
    - The category filter accepts several names, matched with OR
      (a film qualifies if it belongs to any of them).
    - Category matching uses a subquery on film_category, so a film that
      sits in several categories is returned once, not once per category.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql.elements import ColumnElement

from sakila_rentals.models.category import Category
from sakila_rentals.models.film import Film, FilmCategory
from sakila_rentals.repositories.common import count_rows


@dataclass(frozen=True)
class FilmSearchFilters:
    """Optional film search filters; unset fields do not constrain the result."""

    title: Optional[str] = None
    categories: Tuple[str, ...] = field(default_factory=tuple)
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    rating: Optional[str] = None

    def conditions(self) -> List[ColumnElement[bool]]:
        clauses: List[ColumnElement[bool]] = []
        if self.title:
            # LIKE wildcards typed by the user match literally
            pattern = (
                self.title.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            )
            clauses.append(Film.title.ilike(f"%{pattern}%", escape="\\"))
        if self.categories:
            in_categories = (
                select(FilmCategory.film_id)
                .join(Category, Category.category_id == FilmCategory.category_id)
                .where(Category.name.in_(self.categories))
            )
            clauses.append(Film.film_id.in_(in_categories))
        if self.min_year is not None:
            clauses.append(Film.release_year >= self.min_year)
        if self.max_year is not None:
            clauses.append(Film.release_year <= self.max_year)
        if self.rating:
            clauses.append(Film.rating == self.rating)
        return clauses


async def search_films(
    db: AsyncSession,
    filters: FilmSearchFilters,
    offset: int,
    limit: int,
) -> Tuple[Sequence[Film], int]:
    """
    One page of films matching `filters`, categories eagerly loaded,
    plus the total number of matches.
    """
    query = select(Film).where(*filters.conditions())
    total = await count_rows(db, query)

    result = await db.execute(
        query.options(selectinload(Film.categories))
        .order_by(Film.film_id)
        .offset(offset)
        .limit(limit)
    )
    return result.scalars().all(), total


async def films_in_category(db: AsyncSession, category_name: str, limit: int) -> Sequence[Film]:
    """Up to `limit` films filed under the category named `category_name`."""
    filters = FilmSearchFilters(categories=(category_name,))
    result = await db.execute(
        select(Film)
        .where(*filters.conditions())
        .options(selectinload(Film.categories))
        .order_by(Film.film_id)
        .limit(limit)
    )
    return result.scalars().all()


async def get_film(db: AsyncSession, film_id: int) -> Optional[Film]:
    result = await db.execute(select(Film).where(Film.film_id == film_id))
    return result.scalar_one_or_none()
