"""
Sakila Rentals Backend — Store & Staff Models
===============================================

What:  Stores own inventory; staff members are recorded on each rental.
Why:   Kept minimal: only the columns rentals and signup rely on.

Cycle:
    staff.store_id → store, and store.manager_staff_id → staff.
    The manager foreign key uses use_alter so CREATE TABLE order can be
    resolved (the constraint is added after both tables exist).
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from sakila_rentals.database import Base
from sakila_rentals.timeutils import utcnow


class Store(Base):
    __tablename__ = "store"

    store_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    manager_staff_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("staff.staff_id", use_alter=True, name="fk_store_manager_staff"),
        nullable=True,
        unique=True,
    )
    last_update: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Store(id={self.store_id}, manager={self.manager_staff_id})>"


class Staff(Base):
    __tablename__ = "staff"

    staff_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(45), nullable=False)
    last_name: Mapped[str] = mapped_column(String(45), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    store_id: Mapped[int] = mapped_column(ForeignKey("store.store_id"), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    username: Mapped[str] = mapped_column(String(16), nullable=False)
    last_update: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Staff(id={self.staff_id}, username='{self.username}')>"
