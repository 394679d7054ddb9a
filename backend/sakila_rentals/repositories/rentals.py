"""
Sakila Rentals Backend — Rental Queries
=========================================

What:  Conditional rental insert, one-shot return update, and the open /
       overdue rental scans.

Conditional insert:
    INSERT ... ON CONFLICT (inventory_id) WHERE return_date IS NULL DO NOTHING
    RETURNING rental_id

    The conflict target is the partial unique index uq_rental_open_inventory.
    If another transaction already holds an open rental for the copy, the
    statement inserts nothing and returns no row; the caller reports the
    copy as unavailable. Availability check and insert are therefore one
    atomic statement, whatever happened between the caller's earlier read
    and this write.

    PostgreSQL and SQLite share this syntax. Other backends fall back to a
    SAVEPOINT around a plain INSERT, where the unique index violation is
    caught and rolled back to the savepoint.
"""

from datetime import datetime
from typing import Iterable, Optional, Sequence, Tuple

from sqlalchemy import insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Row
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sakila_rentals.models.customer import Customer
from sakila_rentals.models.film import Film
from sakila_rentals.models.inventory import Inventory
from sakila_rentals.models.rental import Rental
from sakila_rentals.repositories.common import count_rows

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


async def get_rental(db: AsyncSession, rental_id: int) -> Optional[Rental]:
    # populate_existing: a rental returned earlier in this session is re-read, not served stale
    result = await db.execute(
        select(Rental)
        .where(Rental.rental_id == rental_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def insert_open_rental(
    db: AsyncSession,
    inventory_id: int,
    customer_id: int,
    staff_id: int,
    rental_date: datetime,
) -> Optional[int]:
    """
    Open a rental on `inventory_id` unless one is already open.

    Returns the new rental_id, or None when the copy already has an open rental.
    """
    values = dict(
        inventory_id=inventory_id,
        customer_id=customer_id,
        staff_id=staff_id,
        rental_date=rental_date,
        last_update=rental_date,
    )
    upsert_insert = _UPSERT_INSERTS.get(db.get_bind().dialect.name)

    if upsert_insert is not None:
        statement = (
            upsert_insert(Rental)
            .values(**values)
            .on_conflict_do_nothing(
                index_elements=[Rental.inventory_id],
                index_where=Rental.return_date.is_(None),
            )
            .returning(Rental.rental_id)
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    try:
        async with db.begin_nested():
            result = await db.execute(insert(Rental).values(**values).returning(Rental.rental_id))
            return result.scalar_one()
    except IntegrityError:
        return None


async def mark_returned(db: AsyncSession, rental_id: int, returned_at: datetime) -> bool:
    """
    Set return_date on an open rental.

    The WHERE clause only matches while return_date IS NULL, so of two
    concurrent returns exactly one updates the row. Returns True if this
    call closed the rental.
    """
    result = await db.execute(
        update(Rental)
        .where(Rental.rental_id == rental_id, Rental.return_date.is_(None))
        .values(return_date=returned_at, last_update=returned_at)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _rental_detail_query():
    """Rental columns joined with the film, store and customer names shown to clients."""
    return (
        select(
            Rental.rental_id,
            Rental.rental_date,
            Rental.return_date,
            Rental.inventory_id,
            Rental.customer_id,
            Rental.staff_id,
            Inventory.film_id,
            Inventory.store_id,
            Film.title.label("film_title"),
            Customer.first_name,
            Customer.last_name,
        )
        .join(Inventory, Inventory.inventory_id == Rental.inventory_id)
        .join(Film, Film.film_id == Inventory.film_id)
        .join(Customer, Customer.customer_id == Rental.customer_id)
    )


async def rental_details(db: AsyncSession, rental_ids: Iterable[int]) -> Sequence[Row]:
    result = await db.execute(
        _rental_detail_query()
        .where(Rental.rental_id.in_(list(rental_ids)))
        .order_by(Rental.rental_id)
    )
    return result.all()


async def list_open_rentals(
    db: AsyncSession,
    offset: int,
    limit: int,
    customer_id: Optional[int] = None,
) -> Tuple[Sequence[Row], int]:
    """Open rentals, newest first, optionally for one customer."""
    query = _rental_detail_query().where(Rental.return_date.is_(None))
    if customer_id is not None:
        query = query.where(Rental.customer_id == customer_id)

    total = await count_rows(db, query)
    result = await db.execute(
        query.order_by(Rental.rental_date.desc(), Rental.rental_id.desc())
        .offset(offset)
        .limit(limit)
    )
    return result.all(), total


async def list_overdue_rentals(
    db: AsyncSession,
    rented_before: datetime,
    offset: int,
    limit: int,
) -> Tuple[Sequence[Row], int]:
    """Open rentals taken out before `rented_before`, oldest (most overdue) first."""
    query = _rental_detail_query().where(
        Rental.return_date.is_(None),
        Rental.rental_date < rented_before,
    )
    total = await count_rows(db, query)
    result = await db.execute(
        query.order_by(Rental.rental_date.asc(), Rental.rental_id.asc())
        .offset(offset)
        .limit(limit)
    )
    return result.all(), total
