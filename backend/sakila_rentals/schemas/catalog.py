"""
Sakila Rentals Backend — Catalog & Availability Schemas
=========================================================

What:  API contracts for film listing/search, per-store availability and
       copy-count aggregation.
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from sakila_rentals.schemas.common import PageMeta


# ══════════════════════════════════════════════════════════════════════════
# Films
# ══════════════════════════════════════════════════════════════════════════


class CategoryItem(BaseModel):
    category_id: int
    name: str

    model_config = {"from_attributes": True}


class FilmItem(BaseModel):
    """A film with the categories it is filed under."""

    film_id: int
    title: str
    description: Optional[str] = None
    release_year: Optional[int] = None
    language_id: int
    original_language_id: Optional[int] = None
    rental_duration: int
    rental_rate: Decimal
    length: Optional[int] = None
    replacement_cost: Decimal
    rating: Optional[str] = None
    special_features: Optional[str] = None
    categories: List[CategoryItem] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class FilmListResponse(PageMeta):
    films: List[FilmItem] = Field(description="One page of films")


class FilmsByCategoryRequest(BaseModel):
    """
    Body of POST /api/films/by-categories.

    `categories` must be a non-empty list of category names; `limit` caps
    the films returned per category (default 5).
    """
    categories: List[str] = Field(description="Category names to look up")
    limit: int = Field(default=5, ge=1, le=100, description="Films per category")

    @field_validator("categories")
    @classmethod
    def validate_categories(cls, v: List[str]) -> List[str]:
        names = [name.strip() for name in v if name and name.strip()]
        if not names:
            raise ValueError("categories must be a non-empty array of category names.")
        return names


class FilmsInCategory(BaseModel):
    category: str
    films: List[FilmItem]


# ══════════════════════════════════════════════════════════════════════════
# Availability
# ══════════════════════════════════════════════════════════════════════════


class AvailabilityResponse(BaseModel):
    """
    What:  Per-copy availability of one film at one store.
    Why:   The id lists let the caller pick a specific copy to rent.
    """
    film_id: int
    store_id: int
    title: str
    is_available: bool = Field(description="True when at least one copy is free")
    total_copies: int
    available_copies: int
    rented_copies: int
    available_inventory_ids: List[int]
    rented_inventory_ids: List[int]


class CopyCountItem(BaseModel):
    """Copy counts for one group; group columns not in the grouping are null."""

    film_id: Optional[int] = None
    title: Optional[str] = None
    store_id: Optional[int] = None
    total_copies: int
    available_copies: int
    rented_copies: int


class CopyCountResponse(PageMeta):
    group_by: str = Field(description="film, store or film_store")
    items: List[CopyCountItem]
