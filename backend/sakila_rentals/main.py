"""
Sakila Rentals Backend — FastAPI Application Factory
======================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers; the
       lifespan owns the Database handle.
Who:   uvicorn (`uvicorn sakila_rentals.main:app`) and the test suite,
       which passes its own Database to create_app().

Lifecycle:
    Startup:
    1. Initialize logging
    2. Build the Database handle (unless one was injected) → app.state.db
    Shutdown:
    1. Dispose the handle the lifespan created (close pooled connections)

Error responses:
    Every SakilaError carries an ErrorKind; one handler maps it to the
    HTTP status and the body {error, message, details, request_id}.
    Storage failures always answer with a generic message.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from sakila_rentals import __version__
from sakila_rentals.config import settings
from sakila_rentals.database import Database
from sakila_rentals.exceptions import DatabaseError, ErrorKind, SakilaError
from sakila_rentals.middleware.logging import RequestLoggingMiddleware
from sakila_rentals.middleware.request_id import RequestIDMiddleware, request_id_var
from sakila_rentals.routes import auth, films, health, inventory, rentals, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """Configure the root logger once, writing to stdout."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("Sakila Rentals backend %s starting up...", __version__)

    owns_database = getattr(app.state, "db", None) is None
    if owns_database:
        app.state.db = Database.from_settings()
    logger.info("Database backend: %s", app.state.db.dialect_name)
    logger.info(
        "Overdue threshold: %d days; default store %d, default staff %d",
        settings.overdue_threshold_days,
        settings.default_store_id,
        settings.default_staff_id,
    )
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Sakila Rentals backend shutting down...")
    if owns_database:
        await app.state.db.dispose()
        app.state.db = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to HTTP responses.

        SakilaError             → status from its ErrorKind (see exceptions.py)
        RequestValidationError  → 400 bad_request, offending field names only
        Exception (fallback)    → 500

    Responses never contain stack traces or database error text; those are
    logged server-side.
    """

    @app.exception_handler(SakilaError)
    async def handle_sakila_error(request: Request, exc: SakilaError):
        rid = request_id_var.get("")
        if isinstance(exc, DatabaseError):
            logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
            return JSONResponse(
                status_code=exc.status_code,
                content=_error_body(
                    exc.kind.value,
                    "An internal error occurred. Please try again later.",
                ),
            )

        logger.warning("[%s] %s: %s", rid, exc.kind.value, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.kind.value, exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        # Field paths only; validator text can echo submitted values
        fields = sorted({
            ".".join(str(part) for part in error.get("loc", ()) if part != "body")
            for error in exc.errors()
        })
        logger.warning("[%s] Invalid request fields: %s", request_id_var.get(""), fields)
        return JSONResponse(
            status_code=400,
            content=_error_body(
                ErrorKind.BAD_REQUEST.value,
                "Invalid or missing request fields.",
                {"fields": fields},
            ),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Assemble the application.

    Args:
        database: storage handle to use instead of one built from settings.
                  The caller keeps ownership and disposes it.
    """
    app = FastAPI(
        title="Sakila Rentals API",
        description=(
            "Film catalog, per-store availability and rental lifecycle "
            "(rent, return, overdue) over the Sakila schema."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.db = database

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → route
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(films.router)
    app.include_router(inventory.router)
    app.include_router(rentals.router)
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
