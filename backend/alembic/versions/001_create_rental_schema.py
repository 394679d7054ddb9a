"""Create rental schema

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the catalog, store, inventory, customer, rental and user tables.
How:   Mirrors sakila_rentals/models. The store ↔ staff cycle is broken by
       adding store.manager_staff_id's foreign key after staff exists.

Invariant carried by the schema:
    uq_rental_open_inventory: unique inventory_id WHERE return_date IS NULL,
    i.e. at most one open rental per physical copy.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

OPEN_RENTAL = sa.text("return_date IS NULL")


def _last_update() -> sa.Column:
    return sa.Column(
        "last_update",
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    # ── Catalog ───────────────────────────────────────────────────────────
    op.create_table(
        "language",
        sa.Column("language_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(20), nullable=False),
        _last_update(),
    )

    op.create_table(
        "category",
        sa.Column("category_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(25), nullable=False),
        _last_update(),
    )
    op.create_index("ix_category_name", "category", ["name"])

    op.create_table(
        "film",
        sa.Column("film_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("release_year", sa.Integer(), nullable=True),
        sa.Column("language_id", sa.Integer(), sa.ForeignKey("language.language_id"), nullable=False),
        sa.Column(
            "original_language_id",
            sa.Integer(),
            sa.ForeignKey("language.language_id"),
            nullable=True,
        ),
        sa.Column("rental_duration", sa.Integer(), nullable=False, server_default=sa.text("3")),
        sa.Column("rental_rate", sa.Numeric(4, 2), nullable=False, server_default=sa.text("4.99")),
        sa.Column("length", sa.Integer(), nullable=True),
        sa.Column("replacement_cost", sa.Numeric(5, 2), nullable=False, server_default=sa.text("19.99")),
        sa.Column("rating", sa.String(10), nullable=True),
        sa.Column("special_features", sa.String(255), nullable=True),
        _last_update(),
    )
    op.create_index("idx_film_title", "film", ["title"])

    op.create_table(
        "film_category",
        sa.Column(
            "film_id",
            sa.Integer(),
            sa.ForeignKey("film.film_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("category.category_id"), primary_key=True),
        _last_update(),
    )

    # ── Stores & Staff ────────────────────────────────────────────────────
    op.create_table(
        "store",
        sa.Column("store_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("manager_staff_id", sa.Integer(), nullable=True, unique=True),
        _last_update(),
    )

    op.create_table(
        "staff",
        sa.Column("staff_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(45), nullable=False),
        sa.Column("last_name", sa.String(45), nullable=False),
        sa.Column("email", sa.String(50), nullable=True),
        sa.Column("store_id", sa.Integer(), sa.ForeignKey("store.store_id"), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("username", sa.String(16), nullable=False),
        _last_update(),
    )

    with op.batch_alter_table("store") as batch:
        batch.create_foreign_key(
            "fk_store_manager_staff",
            "staff",
            ["manager_staff_id"],
            ["staff_id"],
        )

    op.create_table(
        "inventory",
        sa.Column("inventory_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("film_id", sa.Integer(), sa.ForeignKey("film.film_id"), nullable=False),
        sa.Column("store_id", sa.Integer(), sa.ForeignKey("store.store_id"), nullable=False),
        _last_update(),
    )
    op.create_index("idx_inventory_film_id", "inventory", ["film_id"])
    op.create_index("idx_inventory_store_id_film_id", "inventory", ["store_id", "film_id"])

    # ── Customers & Rentals ───────────────────────────────────────────────
    op.create_table(
        "customer",
        sa.Column("customer_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("store_id", sa.Integer(), sa.ForeignKey("store.store_id"), nullable=False),
        sa.Column("first_name", sa.String(45), nullable=False, server_default=sa.text("''")),
        sa.Column("last_name", sa.String(45), nullable=False, server_default=sa.text("''")),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "create_date",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        _last_update(),
    )

    op.create_table(
        "rental",
        sa.Column("rental_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("rental_date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("inventory_id", sa.Integer(), sa.ForeignKey("inventory.inventory_id"), nullable=False),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customer.customer_id"), nullable=False),
        sa.Column("return_date", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("staff_id", sa.Integer(), sa.ForeignKey("staff.staff_id"), nullable=False),
        _last_update(),
    )
    op.create_index(
        "uq_rental_open_inventory",
        "rental",
        ["inventory_id"],
        unique=True,
        postgresql_where=OPEN_RENTAL,
        sqlite_where=OPEN_RENTAL,
    )
    op.create_index(
        "idx_rental_open_rental_date",
        "rental",
        ["rental_date"],
        postgresql_where=OPEN_RENTAL,
        sqlite_where=OPEN_RENTAL,
    )
    op.create_index("idx_rental_customer_id", "rental", ["customer_id"])
    op.create_index("idx_rental_inventory_id", "rental", ["inventory_id"])

    # ── Users ─────────────────────────────────────────────────────────────
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("first_name", sa.Text(), nullable=True),
        sa.Column("last_name", sa.Text(), nullable=True),
        sa.Column("role", sa.String(100), nullable=True),
        sa.Column(
            "customer_id",
            sa.Integer(),
            sa.ForeignKey("customer.customer_id"),
            nullable=True,
            unique=True,
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    )
    # Backstop for two signups passing the name/email pre-check together
    op.create_index("uq_user_name", "user", ["name"], unique=True)
    op.create_index("uq_user_email", "user", ["email"], unique=True)


def downgrade() -> None:
    op.drop_index("uq_user_email", table_name="user")
    op.drop_index("uq_user_name", table_name="user")
    op.drop_table("user")

    op.drop_index("idx_rental_inventory_id", table_name="rental")
    op.drop_index("idx_rental_customer_id", table_name="rental")
    op.drop_index("idx_rental_open_rental_date", table_name="rental")
    op.drop_index("uq_rental_open_inventory", table_name="rental")
    op.drop_table("rental")
    op.drop_table("customer")

    op.drop_index("idx_inventory_store_id_film_id", table_name="inventory")
    op.drop_index("idx_inventory_film_id", table_name="inventory")
    op.drop_table("inventory")

    with op.batch_alter_table("store") as batch:
        batch.drop_constraint("fk_store_manager_staff", type_="foreignkey")
    op.drop_table("staff")
    op.drop_table("store")

    op.drop_table("film_category")
    op.drop_index("idx_film_title", table_name="film")
    op.drop_table("film")
    op.drop_index("ix_category_name", table_name="category")
    op.drop_table("category")
    op.drop_table("language")
