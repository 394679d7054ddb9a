"""Customer profile: the party that rents copies."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from sakila_rentals.database import Base
from sakila_rentals.timeutils import utcnow


def format_display_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    """'FIRST LAST', trimmed when either part is blank."""
    return f"{first_name or ''} {last_name or ''}".strip()


class Customer(Base):
    """
    Owns zero or more rentals. Optionally linked 1:1 from a User
    (see models/user.py); signup creates both in one transaction.
    """

    __tablename__ = "customer"

    customer_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[int] = mapped_column(ForeignKey("store.store_id"), nullable=False)
    first_name: Mapped[str] = mapped_column(String(45), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(45), nullable=False, default="")
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    create_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    last_update: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    @property
    def display_name(self) -> str:
        return format_display_name(self.first_name, self.last_name)

    def __repr__(self) -> str:
        return f"<Customer(id={self.customer_id}, name='{self.display_name}')>"
