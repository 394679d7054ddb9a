"""
Sakila Rentals Backend — Test Configuration (conftest.py)
===========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Service and HTTP tests run against a fresh in-memory SQLite database
       (aiosqlite, foreign keys ON) per test, seeded with a small catalog.
       Unit tests that only need a session-shaped object use AsyncMock.

Fixture Hierarchy:
    database          Database handle on sqlite+aiosqlite://, schema + seed
    ├── db_session    AsyncSession from that handle
    └── test_client   httpx AsyncClient → create_app(database=database)
    mock_db_session   AsyncMock session (no database)

Seed data:
    Stores 1 and 2; staff 1 (store 1) and 2 (store 2).
    Customers 1 MARY SMITH and 2 PATRICIA JOHNSON, both at store 1.

    film  title              year  rating  categories       copies (inventory_id@store)
    1     THE MATRIX         1999  R       Action           1@1, 2@1, 3@2
    2     ACADEMY DINOSAUR   2006  PG      Drama, Comedy    4@1, 5@1, 6@1
    3     ACE GOLDFINGER     2006  G       Comedy           7@2
    4     AIRPORT POLLOCK    2001  R       Action, Drama    (none)
"""

import os

# Settings are read at import time; point them at SQLite before any app import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import timedelta
from decimal import Decimal
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from sakila_rentals.database import Base, Database
from sakila_rentals.models import (
    Category,
    Customer,
    Film,
    FilmCategory,
    Inventory,
    Language,
    Rental,
    Staff,
    Store,
)
from sakila_rentals.timeutils import utcnow


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def _seed(session: AsyncSession) -> None:
    # Flushed in dependency order; the models declare no store ↔ staff relationship
    session.add(Language(language_id=1, name="English"))
    session.add_all([
        Category(category_id=1, name="Action"),
        Category(category_id=2, name="Comedy"),
        Category(category_id=3, name="Drama"),
    ])
    await session.flush()

    session.add_all([
        Film(film_id=1, title="THE MATRIX", release_year=1999, rating="R", language_id=1,
             rental_rate=Decimal("2.99"), replacement_cost=Decimal("19.99")),
        Film(film_id=2, title="ACADEMY DINOSAUR", release_year=2006, rating="PG", language_id=1,
             rental_rate=Decimal("0.99"), replacement_cost=Decimal("20.99")),
        Film(film_id=3, title="ACE GOLDFINGER", release_year=2006, rating="G", language_id=1,
             rental_rate=Decimal("4.99"), replacement_cost=Decimal("12.99")),
        Film(film_id=4, title="AIRPORT POLLOCK", release_year=2001, rating="R", language_id=1,
             rental_rate=Decimal("4.99"), replacement_cost=Decimal("15.99")),
    ])
    await session.flush()

    session.add_all([
        FilmCategory(film_id=1, category_id=1),
        FilmCategory(film_id=2, category_id=3),
        FilmCategory(film_id=2, category_id=2),
        FilmCategory(film_id=3, category_id=2),
        FilmCategory(film_id=4, category_id=1),
        FilmCategory(film_id=4, category_id=3),
    ])
    session.add_all([Store(store_id=1), Store(store_id=2)])
    await session.flush()

    session.add_all([
        Staff(staff_id=1, first_name="Mike", last_name="Hillyer", store_id=1, username="Mike"),
        Staff(staff_id=2, first_name="Jon", last_name="Stephens", store_id=2, username="Jon"),
    ])
    await session.flush()

    session.add_all([
        Inventory(inventory_id=1, film_id=1, store_id=1),
        Inventory(inventory_id=2, film_id=1, store_id=1),
        Inventory(inventory_id=3, film_id=1, store_id=2),
        Inventory(inventory_id=4, film_id=2, store_id=1),
        Inventory(inventory_id=5, film_id=2, store_id=1),
        Inventory(inventory_id=6, film_id=2, store_id=1),
        Inventory(inventory_id=7, film_id=3, store_id=2),
        Customer(customer_id=1, store_id=1, first_name="MARY", last_name="SMITH",
                 email="mary.smith@sakilacustomer.org"),
        Customer(customer_id=2, store_id=1, first_name="PATRICIA", last_name="JOHNSON",
                 email="patricia.johnson@sakilacustomer.org"),
    ])
    await session.flush()


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """
    Fresh in-memory database per test.

    StaticPool keeps a single connection, so every session (seed, service
    test, HTTP request) sees the same in-memory database.
    """
    db = Database(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(db.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with db.session_factory() as session:
        await _seed(session)
        await session.commit()

    yield db

    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(database: Database) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to an app wired to the test database.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from sakila_rentals.main import create_app

    app = create_app(database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def add_open_rental(db_session: AsyncSession):
    """
    Insert an open rental directly, `days_ago` days in the past.

    Bypasses the service so tests can set up old rentals.
    """
    async def _add(inventory_id: int, customer_id: int = 1, days_ago: float = 0) -> Rental:
        rental_date = utcnow() - timedelta(days=days_ago)
        rental = Rental(
            rental_date=rental_date,
            inventory_id=inventory_id,
            customer_id=customer_id,
            staff_id=1,
            last_update=rental_date,
        )
        db_session.add(rental)
        await db_session.flush()
        return rental

    return _add


# ══════════════════════════════════════════════════════════════════════════
# Mock Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    AsyncSession stand-in for tests that must not reach a database.

    Usage:
        mock_db_session.execute.side_effect = OperationalError("SELECT 1", {}, Exception())
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session
