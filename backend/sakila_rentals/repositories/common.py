"""Existence checks and pagination helpers shared by the repositories."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.sql import Select


def page_offset(page: int, page_size: int) -> int:
    """Row offset for a 1-based page number."""
    return (max(page, 1) - 1) * page_size


async def row_exists(db: AsyncSession, key: InstrumentedAttribute, value: Any) -> bool:
    """True if a row whose `key` column equals `value` exists."""
    result = await db.execute(select(key).where(key == value).limit(1))
    return result.first() is not None


async def count_rows(db: AsyncSession, query: Select) -> int:
    """COUNT(*) over an arbitrary select, ignoring its ordering and limits."""
    subquery = query.order_by(None).limit(None).offset(None).subquery()
    result = await db.execute(select(func.count()).select_from(subquery))
    return result.scalar() or 0
