"""
Sakila Rentals Backend — Shared Response Schemas
==================================================

What:  Error format, pagination metadata and health response shared by
       every router.

Pagination convention:
    1-based `page`, `pageSize` (default 10), and `total` matching rows.
    The field is `page_size` in Python and `pageSize` on the wire; FastAPI
    serializes response models by alias.
"""

from typing import Annotated, Optional

from pydantic import BaseModel, Field

# Primary keys are 32-bit INTEGER columns
MAX_DB_ID = 2**31 - 1

DbId = Annotated[int, Field(ge=1, le=MAX_DB_ID)]


class PageMeta(BaseModel):
    """Pagination fields included in every list response."""

    page: int = Field(description="1-based page number")
    page_size: int = Field(alias="pageSize", description="Items per page")
    total: int = Field(description="Total number of matching items")

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "all_unavailable",
            "message": "None of the requested inventory items are available for rent",
            "details": {"unavailable_inventory_ids": [4, 7]},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
