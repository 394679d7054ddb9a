"""Film category lookup table."""

from datetime import datetime
from typing import List, TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sakila_rentals.database import Base
from sakila_rentals.timeutils import utcnow

if TYPE_CHECKING:
    from sakila_rentals.models.film import Film


class Category(Base):
    __tablename__ = "category"

    category_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(25), nullable=False, index=True)
    last_update: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    films: Mapped[List["Film"]] = relationship(
        secondary="film_category",
        back_populates="categories",
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.category_id}, name='{self.name}')>"
