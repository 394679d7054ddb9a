"""
Sakila Rentals Backend — Inventory & Availability Queries
===========================================================

What:  Per-copy rented/available classification and copy-count aggregation.

Rented test:
    A copy is rented iff some rental row references it with
    return_date IS NULL. Both queries LEFT JOIN inventory to *open*
    rentals only; the partial unique index on rental guarantees at most
    one open rental per copy, so the join never multiplies inventory rows
    and COUNT(rental_id) is exactly the number of rented copies.
"""

import enum
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from sqlalchemy import and_, func, select
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession

from sakila_rentals.models.film import Film
from sakila_rentals.models.inventory import Inventory
from sakila_rentals.models.rental import Rental
from sakila_rentals.repositories.common import count_rows


class CopyStatus(NamedTuple):
    inventory_id: int
    film_id: int
    store_id: int
    rented: bool


class CopyGrouping(str, enum.Enum):
    """Dimensions the copy-count aggregation can group by."""

    FILM = "film"
    STORE = "store"
    FILM_STORE = "film_store"


def _with_open_rental(query):
    return query.outerjoin(
        Rental,
        and_(
            Rental.inventory_id == Inventory.inventory_id,
            Rental.return_date.is_(None),
        ),
    )


async def copy_statuses(
    db: AsyncSession,
    film_id: Optional[int] = None,
    store_id: Optional[int] = None,
    inventory_ids: Optional[Iterable[int]] = None,
) -> List[CopyStatus]:
    """
    Rented/available status for each inventory copy matching the filters,
    ordered by inventory_id. Evaluated on every call, never cached.
    """
    query = _with_open_rental(
        select(
            Inventory.inventory_id,
            Inventory.film_id,
            Inventory.store_id,
            Rental.rental_id,
        )
    )
    if film_id is not None:
        query = query.where(Inventory.film_id == film_id)
    if store_id is not None:
        query = query.where(Inventory.store_id == store_id)
    if inventory_ids is not None:
        query = query.where(Inventory.inventory_id.in_(list(inventory_ids)))

    result = await db.execute(query.order_by(Inventory.inventory_id))
    return [
        CopyStatus(
            inventory_id=row.inventory_id,
            film_id=row.film_id,
            store_id=row.store_id,
            rented=row.rental_id is not None,
        )
        for row in result.all()
    ]


async def statuses_by_id(db: AsyncSession, inventory_ids: Iterable[int]) -> Dict[int, CopyStatus]:
    return {
        status.inventory_id: status
        for status in await copy_statuses(db, inventory_ids=inventory_ids)
    }


# Columns selected and grouped for each grouping; film groupings carry the title
_GROUP_COLUMNS = {
    CopyGrouping.FILM: (Inventory.film_id, Film.title),
    CopyGrouping.STORE: (Inventory.store_id,),
    CopyGrouping.FILM_STORE: (Inventory.film_id, Film.title, Inventory.store_id),
}


async def count_copies(
    db: AsyncSession,
    group_by: CopyGrouping,
    offset: int,
    limit: int,
    film_id: Optional[int] = None,
    store_id: Optional[int] = None,
) -> Tuple[Sequence[Row], int]:
    """
    Total and rented copies per group, one parameterized aggregation for
    every grouping. Each row has the group columns plus `total_copies`
    and `rented_copies`. Returns one page of groups and the group count.
    """
    columns = _GROUP_COLUMNS[group_by]
    query = _with_open_rental(
        select(
            *columns,
            func.count(Inventory.inventory_id).label("total_copies"),
            func.count(Rental.rental_id).label("rented_copies"),
        ).join(Film, Film.film_id == Inventory.film_id)
    )
    if film_id is not None:
        query = query.where(Inventory.film_id == film_id)
    if store_id is not None:
        query = query.where(Inventory.store_id == store_id)
    query = query.group_by(*columns)

    total = await count_rows(db, query)
    order = [column for column in columns if column is not Film.title]
    result = await db.execute(query.order_by(*order).offset(offset).limit(limit))
    return result.all(), total
