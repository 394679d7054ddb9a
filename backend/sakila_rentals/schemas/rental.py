"""
Sakila Rentals Backend — Rental Schemas
=========================================

What:  API contracts for creating, returning and listing rentals.

Batch creation result:
    Creating rentals is partial-success: copies that turn out to be rented
    are skipped, not fatal. The response reports how many were requested,
    how many were created, and (only when some were skipped) which
    inventory ids were unavailable plus a warning string.
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_serializer

from sakila_rentals.schemas.common import DbId, PageMeta

# Keeps the inventory IN (...) lookup under driver bind-parameter limits
MAX_RENTAL_BATCH = 100


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RentalCreateRequest(BaseModel):
    """
    Body of POST /api/rentals.

    `inventory_id` accepts a single id or a list of ids. `staff_id`
    defaults to the configured default staff member.
    """
    inventory_id: Union[DbId, List[DbId]] = Field(description="Inventory id or list of ids to rent")
    customer_id: DbId = Field(description="Customer renting the copies")
    staff_id: Optional[DbId] = Field(default=None, description="Staff member processing the rental")

    @field_validator("inventory_id")
    @classmethod
    def validate_inventory_id(cls, v: Union[int, List[int]]) -> Union[int, List[int]]:
        if isinstance(v, list) and not v:
            raise ValueError("inventory_id must not be empty")
        if isinstance(v, list) and len(v) > MAX_RENTAL_BATCH:
            raise ValueError(f"at most {MAX_RENTAL_BATCH} inventory ids per request")
        return v

    @property
    def inventory_ids(self) -> List[int]:
        return self.inventory_id if isinstance(self.inventory_id, list) else [self.inventory_id]


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class RentalItem(BaseModel):
    """A rental enriched with the film title and store it came from."""

    rental_id: int
    rental_date: datetime
    return_date: Optional[datetime] = None
    inventory_id: int
    customer_id: int
    staff_id: int
    film_id: int
    film_title: str
    store_id: int


class RentalBatchResponse(BaseModel):
    """
    Result of POST /api/rentals (HTTP 201).

    `unavailable_inventory_ids` and `warning` are omitted entirely when
    every requested copy was rented.
    """
    message: str = Field(default="Rentals created successfully")
    created_count: int
    requested_count: int
    rentals: List[RentalItem]
    unavailable_inventory_ids: Optional[List[int]] = None
    warning: Optional[str] = None

    @model_serializer(mode="wrap")
    def omit_empty_skip_report(self, handler):
        data = handler(self)
        for key in ("unavailable_inventory_ids", "warning"):
            if data.get(key) is None:
                data.pop(key, None)
        return data


class RentalReturnResponse(BaseModel):
    """Result of returning a rental: the closed rental plus display names."""

    message: str = Field(default="Rental returned successfully")
    rental_id: int
    inventory_id: int
    customer_id: int
    customer_name: str
    film_id: int
    film_title: str
    store_id: int
    rental_date: datetime
    return_date: datetime


class ActiveRentalItem(RentalItem):
    customer_name: str


class ActiveRentalListResponse(PageMeta):
    rentals: List[ActiveRentalItem]


class OverdueRentalItem(ActiveRentalItem):
    days_overdue: int = Field(description="Whole days since the rental was taken out")


class OverdueRentalListResponse(PageMeta):
    threshold_days: int = Field(description="Open rentals older than this are overdue")
    rentals: List[OverdueRentalItem]
