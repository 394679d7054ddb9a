# Models package init
"""
Importing this package registers every table on `Base.metadata`.

Alembic's env.py and the test fixtures rely on that side effect.
"""

from sakila_rentals.models.language import Language
from sakila_rentals.models.category import Category
from sakila_rentals.models.film import Film, FilmCategory
from sakila_rentals.models.store import Staff, Store
from sakila_rentals.models.inventory import Inventory
from sakila_rentals.models.customer import Customer
from sakila_rentals.models.rental import Rental
from sakila_rentals.models.user import User

__all__ = [
    "Category",
    "Customer",
    "Film",
    "FilmCategory",
    "Inventory",
    "Language",
    "Rental",
    "Staff",
    "Store",
    "User",
]
