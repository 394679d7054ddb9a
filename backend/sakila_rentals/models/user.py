"""
Sakila Rentals Backend — User Model
=====================================

What:  Application login identity, optionally bound 1:1 to a Customer.
How:   `name` and `email` carry unique indexes. Signup checks for an
       existing name/email first; the indexes catch the race where two
       signups pass that check at the same time.

password_hash holds one opaque argon2id string (salt and parameters are
encoded inside it); see services/passwords.py.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sakila_rentals.database import Base
from sakila_rentals.models.customer import Customer
from sakila_rentals.timeutils import utcnow


class User(Base):
    __tablename__ = "user"
    __table_args__ = (
        Index("uq_user_name", "name", unique=True),
        Index("uq_user_email", "email", unique=True),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_admin: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True, default=False)
    first_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    role: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    customer_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("customer.customer_id"),
        nullable=True,
        unique=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    customer: Mapped[Optional[Customer]] = relationship()

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name='{self.name}')>"
