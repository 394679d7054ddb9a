"""
Sakila Rentals Backend — Rental Lifecycle Service
===================================================

What:  Opens and closes rentals, and lists open and overdue ones.
Why:   The whole point of the backend: a physical copy can be out with at
       most one customer at a time, and a return happens exactly once.
How:   Per-copy state machine, AVAILABLE → RENTED → AVAILABLE. "Overdue"
       is derived from rental age, never stored.

       - Creation inserts each rental conditionally against the partial
         unique index on open rentals, so a copy rented by a concurrent
         request between our availability read and our insert is reported
         as unavailable instead of being rented twice.
       - Returning is a conditional UPDATE (WHERE return_date IS NULL):
         of two concurrent returns exactly one succeeds.

Batch semantics:
    Several copies can be rented in one request. Copies that cannot be
    rented are skipped and listed; the call only fails (AllUnavailable)
    when nothing at all was created.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession

from sakila_rentals.config import settings
from sakila_rentals.exceptions import (
    AllUnavailableError,
    AlreadyReturnedError,
    BadRequestError,
    InvalidReferenceError,
    NotFoundError,
)
from sakila_rentals.models.customer import Customer, format_display_name
from sakila_rentals.models.store import Staff
from sakila_rentals.repositories import rentals as rental_repo
from sakila_rentals.repositories.common import page_offset, row_exists
from sakila_rentals.schemas.rental import (
    ActiveRentalItem,
    ActiveRentalListResponse,
    OverdueRentalItem,
    OverdueRentalListResponse,
    RentalBatchResponse,
    RentalItem,
    RentalReturnResponse,
)
from sakila_rentals.services.availability_service import availability_service
from sakila_rentals.services.storage_errors import storage_errors
from sakila_rentals.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


def _unique_in_order(ids: Iterable[int]) -> List[int]:
    """Drop repeated ids, keeping the first occurrence of each."""
    seen = set()
    unique = []
    for inventory_id in ids:
        if inventory_id not in seen:
            seen.add(inventory_id)
            unique.append(inventory_id)
    return unique


def _rental_item(row: Row) -> RentalItem:
    return RentalItem(
        rental_id=row.rental_id,
        rental_date=as_utc(row.rental_date),
        return_date=as_utc(row.return_date),
        inventory_id=row.inventory_id,
        customer_id=row.customer_id,
        staff_id=row.staff_id,
        film_id=row.film_id,
        film_title=row.film_title,
        store_id=row.store_id,
    )


def days_overdue(rental_date: datetime, now: datetime) -> int:
    """Whole days elapsed since `rental_date` (floor)."""
    elapsed = (now - as_utc(rental_date)).total_seconds()
    return math.floor(elapsed / SECONDS_PER_DAY)


class RentalService:
    """
    Service layer for rental creation, returns and listings.

    Every write runs inside the request's transaction; the dependency in
    database.py commits on success and rolls back on error.
    """

    # ══════════════════════════════════════════════════════════════════════
    # Create
    # ══════════════════════════════════════════════════════════════════════

    async def create_rentals(
        self,
        db: AsyncSession,
        customer_id: Optional[int],
        inventory_ids: Optional[Iterable[int]],
        staff_id: Optional[int] = None,
    ) -> RentalBatchResponse:
        """
        Rent every available copy among `inventory_ids` to `customer_id`.

        Raises:
            BadRequestError:       no inventory ids or no customer id (→ 400)
            InvalidReferenceError: unknown customer or staff member (→ 400)
            AllUnavailableError:   no copy could be rented (→ 400)
            DatabaseError:         storage failure (→ 500)
        """
        requested = _unique_in_order(inventory_ids or [])
        if not requested:
            raise BadRequestError(
                message="At least one inventory_id is required",
                field="inventory_id",
            )
        if customer_id is None:
            raise BadRequestError(message="customer_id is required", field="customer_id")
        if staff_id is None:
            staff_id = settings.default_staff_id

        async with storage_errors("create the rentals", customer_id=customer_id):
            if not await row_exists(db, Customer.customer_id, customer_id):
                raise InvalidReferenceError(resource="customer", resource_id=customer_id)
            if not await row_exists(db, Staff.staff_id, staff_id):
                raise InvalidReferenceError(resource="staff", resource_id=staff_id)

            partition = await availability_service.partition_inventory(db, requested)
            lost: List[int] = []
            created_ids: List[int] = []
            rental_date = utcnow()

            for inventory_id in partition.available:
                rental_id = await rental_repo.insert_open_rental(
                    db,
                    inventory_id=inventory_id,
                    customer_id=customer_id,
                    staff_id=staff_id,
                    rental_date=rental_date,
                )
                if rental_id is None:
                    # Rented by a concurrent request after our availability read
                    lost.append(inventory_id)
                else:
                    created_ids.append(rental_id)

            skipped = set(partition.unavailable) | set(lost)
            unavailable = [i for i in requested if i in skipped]
            if not created_ids:
                logger.info(
                    "No rentals created for customer %s: unavailable=%s",
                    customer_id,
                    unavailable,
                )
                raise AllUnavailableError(inventory_ids=unavailable)

            rows = await rental_repo.rental_details(db, created_ids)

        logger.info(
            "Created %d of %d rentals for customer %s (rental ids %s)",
            len(created_ids),
            len(requested),
            customer_id,
            created_ids,
        )

        response = RentalBatchResponse(
            created_count=len(created_ids),
            requested_count=len(requested),
            rentals=[_rental_item(row) for row in rows],
        )
        if unavailable:
            response.unavailable_inventory_ids = unavailable
            response.warning = (
                f"{len(unavailable)} of {len(requested)} requested items "
                "were not available and were skipped"
            )
        return response

    # ══════════════════════════════════════════════════════════════════════
    # Return
    # ══════════════════════════════════════════════════════════════════════

    async def return_rental(self, db: AsyncSession, rental_id: int) -> RentalReturnResponse:
        """
        Close an open rental.

        Raises:
            NotFoundError:        rental does not exist (→ 404)
            AlreadyReturnedError: rental was already closed (→ 400)
            DatabaseError:        storage failure (→ 500)
        """
        async with storage_errors("return the rental", rental_id=rental_id):
            rental = await rental_repo.get_rental(db, rental_id)
            if rental is None:
                raise NotFoundError(resource="rental", resource_id=rental_id)
            if rental.return_date is not None:
                raise AlreadyReturnedError(rental_id=rental_id)

            returned_at = utcnow()
            if not await rental_repo.mark_returned(db, rental_id, returned_at):
                # Closed by a concurrent request between our read and the update
                raise AlreadyReturnedError(rental_id=rental_id)

            rows = await rental_repo.rental_details(db, [rental_id])

        row = rows[0]
        logger.info("Returned rental %s (inventory %s)", rental_id, row.inventory_id)
        return RentalReturnResponse(
            rental_id=row.rental_id,
            inventory_id=row.inventory_id,
            customer_id=row.customer_id,
            customer_name=format_display_name(row.first_name, row.last_name),
            film_id=row.film_id,
            film_title=row.film_title,
            store_id=row.store_id,
            rental_date=as_utc(row.rental_date),
            return_date=returned_at,
        )

    # ══════════════════════════════════════════════════════════════════════
    # Listings
    # ══════════════════════════════════════════════════════════════════════

    async def list_active_rentals(
        self,
        db: AsyncSession,
        page: int,
        page_size: int,
        customer_id: Optional[int] = None,
    ) -> ActiveRentalListResponse:
        """Open rentals, newest first, optionally for one customer."""
        async with storage_errors("list active rentals", customer_id=customer_id):
            rows, total = await rental_repo.list_open_rentals(
                db,
                offset=page_offset(page, page_size),
                limit=page_size,
                customer_id=customer_id,
            )

        return ActiveRentalListResponse(
            page=page,
            page_size=page_size,
            total=total,
            rentals=[
                ActiveRentalItem(
                    **_rental_item(row).model_dump(),
                    customer_name=format_display_name(row.first_name, row.last_name),
                )
                for row in rows
            ],
        )

    async def list_overdue_rentals(
        self,
        db: AsyncSession,
        page: int,
        page_size: int,
    ) -> OverdueRentalListResponse:
        """
        Open rentals older than the configured threshold, most overdue first.

        Read-only: nothing is flagged or stored, the list is derived from
        rental_date at request time.
        """
        threshold_days = settings.overdue_threshold_days
        now = utcnow()
        cutoff = now - timedelta(days=threshold_days)

        async with storage_errors("list overdue rentals", threshold_days=threshold_days):
            rows, total = await rental_repo.list_overdue_rentals(
                db,
                rented_before=cutoff,
                offset=page_offset(page, page_size),
                limit=page_size,
            )

        return OverdueRentalListResponse(
            page=page,
            page_size=page_size,
            total=total,
            threshold_days=threshold_days,
            rentals=[
                OverdueRentalItem(
                    **_rental_item(row).model_dump(),
                    customer_name=format_display_name(row.first_name, row.last_name),
                    days_overdue=days_overdue(row.rental_date, now),
                )
                for row in rows
            ],
        )


# ── Singleton Instance ────────────────────────────────────────────────────
rental_service = RentalService()
