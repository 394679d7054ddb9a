"""
Sakila Rentals Backend — Inventory Model
==========================================

What:  One row per physical copy of a film held at a store.
Lifecycle:
    Created by stocking (outside this service), never mutated by rental
    logic. Rentals reference a copy; they never own it.

Availability is not stored here: a copy is rented iff an open rental
(return_date IS NULL) points at it. See services/availability_service.py.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sakila_rentals.database import Base
from sakila_rentals.models.film import Film
from sakila_rentals.models.store import Store
from sakila_rentals.timeutils import utcnow


class Inventory(Base):
    __tablename__ = "inventory"

    inventory_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    film_id: Mapped[int] = mapped_column(ForeignKey("film.film_id"), nullable=False)
    store_id: Mapped[int] = mapped_column(ForeignKey("store.store_id"), nullable=False)
    last_update: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    film: Mapped[Film] = relationship()
    store: Mapped[Store] = relationship()

    # (store_id, film_id): the availability check filters on exactly this pair
    __table_args__ = (
        Index("idx_inventory_film_id", "film_id"),
        Index("idx_inventory_store_id_film_id", "store_id", "film_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Inventory(id={self.inventory_id}, film={self.film_id}, "
            f"store={self.store_id})>"
        )
