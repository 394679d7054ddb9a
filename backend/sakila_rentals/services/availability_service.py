"""
Sakila Rentals Backend — Availability Calculator
==================================================

What:  Decides which physical copies are rentable right now.
Why:   Both the availability endpoint and rental creation need the same
       answer to "is this copy free?", computed the same way.
How:   A copy is `rented` iff an open rental (return_date IS NULL)
       references it; otherwise it is `available`. The status is read
       from the database on every call and never cached: a stale
       "available" would let the UI offer a copy that is already out.

Operations:
    - check_availability(): one film at one store, with per-copy id lists
    - partition_inventory(): classify an arbitrary list of inventory ids
    - count_copies(): total/available/rented per film, store or (film, store)
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from sakila_rentals.exceptions import BadRequestError, NotFoundError
from sakila_rentals.models.store import Store
from sakila_rentals.repositories import catalog as catalog_repo
from sakila_rentals.repositories import inventory as inventory_repo
from sakila_rentals.repositories.common import page_offset, row_exists
from sakila_rentals.repositories.inventory import CopyGrouping
from sakila_rentals.schemas.catalog import (
    AvailabilityResponse,
    CopyCountItem,
    CopyCountResponse,
)
from sakila_rentals.services.storage_errors import storage_errors

logger = logging.getLogger(__name__)


@dataclass
class InventoryPartition:
    """
    Classification of requested inventory ids, each list in request order.

    `missing` holds ids with no inventory row; they are not rentable.    """
    available: List[int] = field(default_factory=list)
    rented: List[int] = field(default_factory=list)
    missing: List[int] = field(default_factory=list)

    @property
    def unavailable(self) -> List[int]:
        return self.rented + self.missing


class AvailabilityService:
    """Stateless; every method takes the request's session."""

    async def check_availability(
        self,
        db: AsyncSession,
        film_id: int,
        store_id: int,
    ) -> AvailabilityResponse:
        """
        Availability of one film at one store.

        Raises:
            NotFoundError: film or store does not exist (→ 404)
            DatabaseError: query failed (→ 500)
        """
        async with storage_errors("check availability", film_id=film_id, store_id=store_id):
            film = await catalog_repo.get_film(db, film_id)
            if film is None:
                raise NotFoundError(resource="film", resource_id=film_id)
            if not await row_exists(db, Store.store_id, store_id):
                raise NotFoundError(resource="store", resource_id=store_id)

            copies = await inventory_repo.copy_statuses(db, film_id=film_id, store_id=store_id)

        available = [c.inventory_id for c in copies if not c.rented]
        rented = [c.inventory_id for c in copies if c.rented]
        return AvailabilityResponse(
            film_id=film_id,
            store_id=store_id,
            title=film.title,
            is_available=bool(available),
            total_copies=len(copies),
            available_copies=len(available),
            rented_copies=len(rented),
            available_inventory_ids=available,
            rented_inventory_ids=rented,
        )

    async def partition_inventory(
        self,
        db: AsyncSession,
        inventory_ids: Iterable[int],
    ) -> InventoryPartition:
        """Split `inventory_ids` into available, rented and unknown copies."""
        ids = list(inventory_ids)
        async with storage_errors("check inventory availability", inventory_ids=ids):
            statuses = await inventory_repo.statuses_by_id(db, ids)

        partition = InventoryPartition()
        for inventory_id in ids:
            status = statuses.get(inventory_id)
            if status is None:
                partition.missing.append(inventory_id)
            elif status.rented:
                partition.rented.append(inventory_id)
            else:
                partition.available.append(inventory_id)
        return partition

    async def count_copies(
        self,
        db: AsyncSession,
        group_by: str,
        page: int,
        page_size: int,
        film_id: Optional[int] = None,
        store_id: Optional[int] = None,
    ) -> CopyCountResponse:
        """
        Copy counts grouped by film, store or film+store pair.

        Raises:
            BadRequestError: unknown grouping (→ 400)
        """
        try:
            grouping = CopyGrouping(group_by)
        except ValueError:
            raise BadRequestError(
                message=(
                    f"Invalid group_by '{group_by}'. Must be one of: "
                    f"{', '.join(g.value for g in CopyGrouping)}"
                ),
                field="group_by",
            )

        async with storage_errors("count inventory copies", group_by=grouping.value):
            rows, total = await inventory_repo.count_copies(
                db,
                grouping,
                offset=page_offset(page, page_size),
                limit=page_size,
                film_id=film_id,
                store_id=store_id,
            )

        items = []
        for row in rows:
            values = row._mapping
            items.append(
                CopyCountItem(
                    film_id=values.get("film_id"),
                    title=values.get("title"),
                    store_id=values.get("store_id"),
                    total_copies=values["total_copies"],
                    available_copies=values["total_copies"] - values["rented_copies"],
                    rented_copies=values["rented_copies"],
                )
            )
        return CopyCountResponse(
            page=page,
            page_size=page_size,
            total=total,
            group_by=grouping.value,
            items=items,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
availability_service = AvailabilityService()
