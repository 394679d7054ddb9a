"""
Sakila Rentals Backend — Availability Service Tests
=====================================================

What we test:
    ✅ Film with only free copies at a store is available
    ✅ Open rentals move copies from available to rented
    ✅ A returned rental frees the copy again
    ✅ Unknown film / store → NotFoundError
    ✅ partition_inventory separates available, rented and unknown ids
    ✅ Copy counts per film, store and film+store, and bad group_by
"""

import pytest

from sakila_rentals.exceptions import BadRequestError, NotFoundError
from sakila_rentals.services.availability_service import AvailabilityService
from sakila_rentals.timeutils import utcnow


class TestCheckAvailability:

    def setup_method(self):
        self.service = AvailabilityService()

    @pytest.mark.asyncio
    async def test_all_copies_free(self, db_session):
        result = await self.service.check_availability(db_session, film_id=1, store_id=1)

        assert result.title == "THE MATRIX"
        assert result.is_available is True
        assert result.total_copies == 2
        assert result.available_copies == 2
        assert result.rented_copies == 0
        assert result.available_inventory_ids == [1, 2]
        assert result.rented_inventory_ids == []

    @pytest.mark.asyncio
    async def test_open_rental_counts_as_rented(self, db_session, add_open_rental):
        await add_open_rental(inventory_id=1)

        result = await self.service.check_availability(db_session, film_id=1, store_id=1)

        assert result.is_available is True
        assert result.available_inventory_ids == [2]
        assert result.rented_inventory_ids == [1]
        assert result.rented_copies == 1

    @pytest.mark.asyncio
    async def test_every_copy_rented_is_unavailable(self, db_session, add_open_rental):
        await add_open_rental(inventory_id=1)
        await add_open_rental(inventory_id=2, customer_id=2)

        result = await self.service.check_availability(db_session, film_id=1, store_id=1)

        assert result.is_available is False
        assert result.available_copies == 0
        assert result.total_copies == 2

    @pytest.mark.asyncio
    async def test_returned_rental_frees_copy(self, db_session, add_open_rental):
        rental = await add_open_rental(inventory_id=1, days_ago=3)
        rental.return_date = utcnow()
        await db_session.flush()

        result = await self.service.check_availability(db_session, film_id=1, store_id=1)

        assert result.available_copies == 2

    @pytest.mark.asyncio
    async def test_film_without_copies_at_store(self, db_session):
        result = await self.service.check_availability(db_session, film_id=4, store_id=1)

        assert result.is_available is False
        assert result.total_copies == 0

    @pytest.mark.asyncio
    async def test_unknown_film(self, db_session):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.check_availability(db_session, film_id=999, store_id=1)
        assert exc_info.value.context["resource"] == "film"

    @pytest.mark.asyncio
    async def test_unknown_store(self, db_session):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.check_availability(db_session, film_id=1, store_id=99)
        assert exc_info.value.context["resource"] == "store"


class TestPartitionInventory:

    def setup_method(self):
        self.service = AvailabilityService()

    @pytest.mark.asyncio
    async def test_partition_keeps_request_order(self, db_session, add_open_rental):
        await add_open_rental(inventory_id=5)

        partition = await self.service.partition_inventory(db_session, [6, 404, 5, 4])

        assert partition.available == [6, 4]
        assert partition.rented == [5]
        assert partition.missing == [404]
        assert partition.unavailable == [5, 404]


class TestCountCopies:

    def setup_method(self):
        self.service = AvailabilityService()

    @pytest.mark.asyncio
    async def test_group_by_film(self, db_session, add_open_rental):
        await add_open_rental(inventory_id=3)

        result = await self.service.count_copies(db_session, "film", page=1, page_size=10)

        by_film = {item.film_id: item for item in result.items}
        assert result.total == 3  # film 4 has no copies, so no group
        assert by_film[1].title == "THE MATRIX"
        assert (by_film[1].total_copies, by_film[1].rented_copies, by_film[1].available_copies) == (3, 1, 2)
        assert by_film[2].total_copies == 3
        assert by_film[3].total_copies == 1

    @pytest.mark.asyncio
    async def test_group_by_store(self, db_session, add_open_rental):
        await add_open_rental(inventory_id=7)

        result = await self.service.count_copies(db_session, "store", page=1, page_size=10)

        by_store = {item.store_id: item for item in result.items}
        assert by_store[1].total_copies == 5
        assert by_store[2].total_copies == 2
        assert by_store[2].rented_copies == 1
        assert by_store[1].film_id is None

    @pytest.mark.asyncio
    async def test_group_by_film_store_filtered(self, db_session):
        result = await self.service.count_copies(
            db_session, "film_store", page=1, page_size=10, film_id=1
        )

        assert [(i.film_id, i.store_id, i.total_copies) for i in result.items] == [
            (1, 1, 2),
            (1, 2, 1),
        ]

    @pytest.mark.asyncio
    async def test_pagination(self, db_session):
        result = await self.service.count_copies(db_session, "film", page=2, page_size=2)

        assert result.total == 3
        assert [i.film_id for i in result.items] == [3]

    @pytest.mark.asyncio
    async def test_unknown_grouping(self, db_session):
        with pytest.raises(BadRequestError):
            await self.service.count_copies(db_session, "language", page=1, page_size=10)
