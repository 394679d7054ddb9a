"""
Sakila Rentals Backend — Database Handle & Session Management
===============================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   A `Database` object owns one engine and one session factory. It is
       created once in the application lifespan, stored on `app.state.db`,
       and handed to route handlers through the `get_db_session` dependency.
Who:   Built by `main.lifespan` (production) and by the test fixtures.

Connection Pooling Strategy (PostgreSQL):
    pool_size / max_overflow / pool_pre_ping come from settings.
    pool_recycle=3600 recycles connections every hour.
    command_timeout bounds every statement; a timeout surfaces as an error
    that the service layer maps to DatabaseError.
"""

from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from sakila_rentals.config import Settings, settings as default_settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for autogenerate
    and the test suite uses for `create_all`.
    """
    pass


def build_engine_options(config: Settings) -> Dict[str, Any]:
    """
    What:  Engine keyword arguments for the configured backend.
    Why:   Pool sizing and timeouts only make sense for a server database;
           SQLite (tests, local tinkering) gets the driver defaults.
    """
    options: Dict[str, Any] = {"echo": config.log_level == "DEBUG"}
    if config.is_postgres:
        timeout_ms = int(config.db_command_timeout * 1000)
        options.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_pre_ping=config.db_pool_pre_ping,
            pool_recycle=3600,
            connect_args={
                "command_timeout": config.db_command_timeout,
                "server_settings": {"statement_timeout": str(timeout_ms)},
            },
        )
    return options


class Database:
    """
    Process-wide storage handle: one engine, one session factory.

    expire_on_commit=False: attributes stay readable after commit, so
    response models can be built from ORM objects once the work is done.
    """

    def __init__(self, url: str, **engine_options: Any):
        self.engine: AsyncEngine = create_async_engine(url, **engine_options)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "Database":
        config = config or default_settings
        return cls(config.database_url, **build_engine_options(config))

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    async def dispose(self) -> None:
        """Close all pooled connections (application shutdown)."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    The handle is looked up on `request.app.state.db` rather than imported
    as a global, so tests and alternative deployments can inject their own.

    How it works:
        1. Creates a new session from the handle's factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handler
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/rentals/active")
        async def active(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.db
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
