"""User lookups for signup, signin and profile edits."""

from typing import Optional, Sequence, Tuple

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sakila_rentals.models.user import User
from sakila_rentals.repositories.common import count_rows


async def find_user_by_name_or_email(
    db: AsyncSession,
    name: Optional[str],
    email: Optional[str],
    exclude_user_id: Optional[int] = None,
) -> Optional[User]:
    """First user whose name OR email matches; `exclude_user_id` skips one row (edits)."""
    matches = []
    if name:
        matches.append(User.name == name)
    if email:
        matches.append(User.email == email)
    if not matches:
        return None

    query = select(User).where(or_(*matches))
    if exclude_user_id is not None:
        query = query.where(User.id != exclude_user_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_name(db: AsyncSession, name: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.name == name))
    return result.scalar_one_or_none()


async def list_users(db: AsyncSession, offset: int, limit: int) -> Tuple[Sequence[User], int]:
    """One page of users by id, plus the total user count."""
    query = select(User)
    total = await count_rows(db, query)
    result = await db.execute(query.order_by(User.id).offset(offset).limit(limit))
    return result.scalars().all(), total
