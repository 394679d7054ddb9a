"""
Sakila Rentals Backend — HTTP API Tests
=========================================

What:  End-to-end requests through create_app() against the test database.
Why:   Verifies routing, status codes, the error body format and the
       wire names (pageSize, userData, minYear).
"""

from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from sakila_rentals.exceptions import DatabaseError
from sakila_rentals.main import create_app
from sakila_rentals.services.availability_service import AvailabilityService


class TestRentalEndpoints:

    @pytest.mark.asyncio
    async def test_availability(self, test_client):
        response = await test_client.get("/api/films/1/availability", params={"store_id": 1})

        assert response.status_code == 200
        body = response.json()
        assert body["is_available"] is True
        assert body["total_copies"] == 2
        assert body["available_copies"] == 2
        assert body["rented_copies"] == 0
        assert "X-Request-ID" in response.headers

    @pytest.mark.asyncio
    async def test_availability_unknown_film(self, test_client):
        response = await test_client.get("/api/films/999/availability", params={"store_id": 1})

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_rent_return_cycle(self, test_client):
        created = await test_client.post("/api/rentals", json={"inventory_id": 1, "customer_id": 1})
        assert created.status_code == 201
        body = created.json()
        assert body["created_count"] == 1
        assert "unavailable_inventory_ids" not in body
        assert "warning" not in body
        rental_id = body["rentals"][0]["rental_id"]

        availability = await test_client.get("/api/films/1/availability", params={"store_id": 1})
        assert availability.json()["rented_inventory_ids"] == [1]

        returned = await test_client.post(f"/api/rentals/{rental_id}/return")
        assert returned.status_code == 200
        assert returned.json()["customer_name"] == "MARY SMITH"

        again = await test_client.post(f"/api/rentals/{rental_id}/return")
        assert again.status_code == 400
        assert again.json()["error"] == "already_returned"

    @pytest.mark.asyncio
    async def test_partial_batch(self, test_client):
        await test_client.post("/api/rentals", json={"inventory_id": 5, "customer_id": 2})

        response = await test_client.post(
            "/api/rentals", json={"inventory_id": [4, 5, 6], "customer_id": 1}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["created_count"] == 2
        assert body["requested_count"] == 3
        assert body["unavailable_inventory_ids"] == [5]
        assert body["warning"]

    @pytest.mark.asyncio
    async def test_all_unavailable(self, test_client):
        await test_client.post("/api/rentals", json={"inventory_id": 7, "customer_id": 1})

        response = await test_client.post("/api/rentals", json={"inventory_id": [7], "customer_id": 2})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "all_unavailable"
        assert body["details"]["unavailable_inventory_ids"] == [7]

    @pytest.mark.asyncio
    async def test_unknown_customer(self, test_client):
        response = await test_client.post("/api/rentals", json={"inventory_id": 1, "customer_id": 999})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_reference"

    @pytest.mark.asyncio
    async def test_malformed_body_lists_fields_only(self, test_client):
        response = await test_client.post("/api/rentals", json={"inventory_id": []})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "bad_request"
        assert set(body["details"]["fields"]) == {"inventory_id", "customer_id"}

    @pytest.mark.asyncio
    async def test_ids_beyond_column_range_are_rejected(self, test_client):
        huge = 2**64

        returned = await test_client.post(f"/api/rentals/{huge}/return")
        created = await test_client.post(
            "/api/rentals", json={"inventory_id": [1, huge], "customer_id": 1}
        )
        availability = await test_client.get(f"/api/films/{huge}/availability", params={"store_id": 1})
        active = await test_client.get("/api/rentals/active", params={"customer_id": huge})

        assert returned.status_code == 400
        assert returned.json()["details"]["fields"] == ["path.rental_id"]
        assert created.status_code == 400
        assert availability.status_code == 400
        assert active.status_code == 400

    @pytest.mark.asyncio
    async def test_oversized_batch_rejected(self, test_client):
        response = await test_client.post(
            "/api/rentals", json={"inventory_id": list(range(1, 102)), "customer_id": 1}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "bad_request"

    @pytest.mark.asyncio
    async def test_return_unknown(self, test_client):
        response = await test_client.post("/api/rentals/999/return")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_active_and_overdue_lists(self, test_client):
        await test_client.post("/api/rentals", json={"inventory_id": [1, 4], "customer_id": 1})

        active = await test_client.get("/api/rentals/active", params={"customer_id": 1, "pageSize": 1})
        overdue = await test_client.get("/api/rentals/overdue")

        assert active.status_code == 200
        assert active.json()["total"] == 2
        assert active.json()["pageSize"] == 1
        assert len(active.json()["rentals"]) == 1
        assert overdue.json()["total"] == 0
        assert overdue.json()["threshold_days"] == 7

    @pytest.mark.asyncio
    async def test_copy_counts(self, test_client):
        response = await test_client.get("/api/inventory/counts", params={"group_by": "store"})
        bad = await test_client.get("/api/inventory/counts", params={"group_by": "genre"})

        assert response.status_code == 200
        assert [i["total_copies"] for i in response.json()["items"]] == [5, 2]
        assert bad.status_code == 400


class TestCatalogEndpoints:

    @pytest.mark.asyncio
    async def test_list_films(self, test_client):
        response = await test_client.get("/api/films", params={"page": 1, "pageSize": 2})

        body = response.json()
        assert response.status_code == 200
        assert body["total"] == 4
        assert body["pageSize"] == 2
        assert len(body["films"]) == 2

    @pytest.mark.asyncio
    async def test_search(self, test_client):
        response = await test_client.get(
            "/api/films/search",
            params=[("category", "Comedy"), ("category", "Action"), ("minYear", "2005")],
        )

        assert [f["film_id"] for f in response.json()["films"]] == [2, 3]

    @pytest.mark.asyncio
    async def test_by_categories(self, test_client):
        ok = await test_client.post("/api/films/by-categories", json={"categories": ["Drama"]})
        empty = await test_client.post("/api/films/by-categories", json={"categories": []})

        assert ok.status_code == 200
        assert [f["film_id"] for f in ok.json()[0]["films"]] == [2, 4]
        assert empty.status_code == 400


class TestAccountEndpoints:

    @pytest.mark.asyncio
    async def test_signup_signin_flow(self, test_client):
        signup = await test_client.post(
            "/api/auth/signup",
            json={"userData": {"name": "alice", "password": "pw", "email": "alice@example.com"}},
        )
        assert signup.status_code == 201

        duplicate = await test_client.post(
            "/api/auth/signup",
            json={"name": "alice", "password": "pw", "email": "alice@example.com"},
        )
        assert duplicate.status_code == 409

        signin = await test_client.post("/api/auth/signin", json={"username": "alice", "password": "pw"})
        assert signin.status_code == 200
        assert "password_hash" not in signin.json()["user"]

        wrong = await test_client.post("/api/auth/signin", json={"username": "alice", "password": "x"})
        assert wrong.status_code == 401

        missing = await test_client.post("/api/auth/signin", json={"username": "alice"})
        assert missing.status_code == 400

    @pytest.mark.asyncio
    async def test_signup_unknown_store(self, test_client):
        response = await test_client.post(
            "/api/auth/signup",
            json={"name": "bob", "password": "pw", "email": "bob@example.com", "store_id": 9},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_reference"

    @pytest.mark.asyncio
    async def test_users(self, test_client):
        created = await test_client.post(
            "/api/auth/signup",
            json={"name": "carol", "password": "pw", "email": "carol@example.com"},
        )
        user_id = created.json()["user_id"]

        listing = await test_client.get("/api/users")
        edited = await test_client.put(f"/api/users/{user_id}", json={"role": "manager"})
        missing = await test_client.get("/api/users/999")

        assert listing.json()["total"] == 1
        assert edited.json()["role"] == "manager"
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_users_paging(self, test_client):
        for name in ("dave", "erin"):
            await test_client.post(
                "/api/auth/signup",
                json={"name": name, "password": "pw", "email": f"{name}@example.com"},
            )

        response = await test_client.get("/api/users", params={"page": 2, "pageSize": 1})
        huge_id = await test_client.get(f"/api/users/{2**64}")

        body = response.json()
        assert response.status_code == 200
        assert body["total"] == 2
        assert body["page"] == 2
        assert body["pageSize"] == 1
        assert [u["name"] for u in body["users"]] == ["erin"]
        assert huge_id.status_code == 400


class TestHealthAndErrors:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    @pytest.mark.asyncio
    async def test_health_database_down(self):
        broken = MagicMock()
        broken.engine.connect.side_effect = OSError("connection refused")
        app = create_app(database=broken)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_storage_failure_becomes_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("timeout"))

        with pytest.raises(DatabaseError) as exc_info:
            await AvailabilityService().check_availability(mock_db_session, film_id=1, store_id=1)

        assert exc_info.value.status_code == 500
        assert exc_info.value.context["error_type"] == "OperationalError"
