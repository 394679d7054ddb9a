"""
Sakila Rentals Backend — Film & FilmCategory Models
=====================================================

What:  The `film` catalog table and the `film_category` junction table.
How:   Film ↔ Category is many-to-many; the junction row is keyed by
       (film_id, category_id) and owned by the film.

Language references:
    language_id            → the language the copy is dubbed/subtitled in (required)
    original_language_id   → the language the film was made in (optional)
    Both point at `language`, so the relationships name their foreign key
    explicitly to tell SQLAlchemy which column each one follows.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sakila_rentals.database import Base
from sakila_rentals.timeutils import utcnow

if TYPE_CHECKING:
    from sakila_rentals.models.category import Category
    from sakila_rentals.models.language import Language


class Film(Base):
    """
    One catalog title. Physical copies live in `inventory`.

    Query Patterns:
        - Title search: WHERE title LIKE :pattern → idx_film_title
        - Year range / rating filters from the search endpoint
    """

    __tablename__ = "film"

    film_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    release_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    language_id: Mapped[int] = mapped_column(
        ForeignKey("language.language_id"),
        nullable=False,
    )
    original_language_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("language.language_id"),
        nullable=True,
    )

    # Days a copy may be kept before it counts against the customer
    rental_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    rental_rate: Mapped[Decimal] = mapped_column(Numeric(4, 2), nullable=False, default=Decimal("4.99"))
    length: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    replacement_cost: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("19.99")
    )
    # G, PG, PG-13, R, NC-17
    rating: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    # Comma-separated, e.g. "Trailers,Deleted Scenes"
    special_features: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last_update: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    language: Mapped["Language"] = relationship(foreign_keys=[language_id])
    original_language: Mapped[Optional["Language"]] = relationship(
        foreign_keys=[original_language_id]
    )
    categories: Mapped[List["Category"]] = relationship(
        secondary="film_category",
        back_populates="films",
    )

    __table_args__ = (
        Index("idx_film_title", "title"),
    )

    def __repr__(self) -> str:
        return f"<Film(id={self.film_id}, title='{self.title}')>"


class FilmCategory(Base):
    """Junction row linking a film to one category."""

    __tablename__ = "film_category"

    film_id: Mapped[int] = mapped_column(
        ForeignKey("film.film_id", ondelete="CASCADE"),
        primary_key=True,
    )
    category_id: Mapped[int] = mapped_column(
        ForeignKey("category.category_id"),
        primary_key=True,
    )
    last_update: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )
