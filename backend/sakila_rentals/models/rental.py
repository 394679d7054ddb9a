"""
Sakila Rentals Backend — Rental Model
=======================================

What:  One checkout of one inventory copy by one customer.
Lifecycle:
    1. Inserted on rental create with return_date = NULL ("open")
    2. return_date set exactly once on return
    3. Never deleted

Central invariant:
    For any inventory_id, at most one rental row has return_date IS NULL.

    Enforced in the schema by the partial unique index
    `uq_rental_open_inventory` (inventory_id WHERE return_date IS NULL),
    supported by both PostgreSQL and SQLite. The rental service inserts with
    ON CONFLICT DO NOTHING against this index, so two concurrent requests for
    the same copy cannot both succeed: the loser simply gets no row back.

Query Patterns:
    - Open rental for a copy: WHERE inventory_id = :id AND return_date IS NULL
      → uq_rental_open_inventory
    - Overdue scan: WHERE return_date IS NULL AND rental_date < :cutoff
      ORDER BY rental_date → idx_rental_open_rental_date
    - Active rentals per customer: WHERE customer_id = :id → idx_rental_customer_id
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sakila_rentals.database import Base
from sakila_rentals.models.customer import Customer
from sakila_rentals.models.inventory import Inventory
from sakila_rentals.timeutils import utcnow

OPEN_RENTAL_WHERE = text("return_date IS NULL")


class Rental(Base):
    __tablename__ = "rental"

    rental_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    rental_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    inventory_id: Mapped[int] = mapped_column(
        ForeignKey("inventory.inventory_id"),
        nullable=False,
    )
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customer.customer_id"),
        nullable=False,
    )
    # NULL while the copy is checked out
    return_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )
    staff_id: Mapped[int] = mapped_column(ForeignKey("staff.staff_id"), nullable=False)
    last_update: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    inventory: Mapped[Inventory] = relationship()
    customer: Mapped[Customer] = relationship()

    __table_args__ = (
        Index(
            "uq_rental_open_inventory",
            "inventory_id",
            unique=True,
            postgresql_where=OPEN_RENTAL_WHERE,
            sqlite_where=OPEN_RENTAL_WHERE,
        ),
        Index(
            "idx_rental_open_rental_date",
            "rental_date",
            postgresql_where=OPEN_RENTAL_WHERE,
            sqlite_where=OPEN_RENTAL_WHERE,
        ),
        Index("idx_rental_customer_id", "customer_id"),
        Index("idx_rental_inventory_id", "inventory_id"),
    )

    @property
    def is_open(self) -> bool:
        return self.return_date is None

    def __repr__(self) -> str:
        return (
            f"<Rental(id={self.rental_id}, inventory={self.inventory_id}, "
            f"customer={self.customer_id}, open={self.is_open})>"
        )
