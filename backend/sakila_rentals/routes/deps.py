"""Query-parameter dependencies shared by list endpoints."""

from dataclasses import dataclass

from fastapi import Query

from sakila_rentals.config import settings
from sakila_rentals.schemas.common import MAX_DB_ID


@dataclass
class PageParams:
    page: int
    page_size: int


def page_params(
    page: int = Query(default=1, ge=1, le=MAX_DB_ID, description="1-based page number"),
    page_size: int = Query(
        default=settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        alias="pageSize",
        description="Items per page",
    ),
) -> PageParams:
    return PageParams(page=page, page_size=page_size)
