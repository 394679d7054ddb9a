"""
Sakila Rentals Backend — Storage Error Boundary
=================================================

What:  Async context manager wrapped around every service operation's
       database work.
Why:   Storage failures (driver errors, lost connections, statement
       timeouts) must reach the client as one generic DatabaseError,
       with the raw error logged server-side only.
How:   Application exceptions (SakilaError) pass through untouched;
       SQLAlchemy errors, timeouts and OS-level connection errors become
       DatabaseError. Nothing is retried: the caller re-requests.

Usage:
    async with storage_errors("return the rental", rental_id=rental_id):
        ...
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.exc import SQLAlchemyError

from sakila_rentals.exceptions import DatabaseError, SakilaError

logger = logging.getLogger(__name__)

STORAGE_FAILURES = (SQLAlchemyError, asyncio.TimeoutError, OSError)


@asynccontextmanager
async def storage_errors(action: str, **context: Any) -> AsyncIterator[None]:
    try:
        yield
    except SakilaError:
        raise
    except STORAGE_FAILURES as e:
        logger.error(
            "Database error while trying to %s (%s): %s",
            action,
            context,
            str(e),
            exc_info=True,
        )
        raise DatabaseError(
            message=f"Could not {action}. Please try again.",
            context={**context, "error_type": type(e).__name__},
        ) from e
