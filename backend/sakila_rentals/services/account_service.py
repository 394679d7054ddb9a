"""
Sakila Rentals Backend — Account Provisioning Service
=======================================================

What:  Signup, signin and user profile administration.
Why:   A login identity (User) and the rental party (Customer) are created
       together; a User without its Customer, or the reverse, must never
       be left behind.
How:   signup() inserts Customer then User in the request's transaction.
       The name/email pre-check gives a friendly 409; the unique indexes
       on user.name and user.email catch the race where two signups pass
       the pre-check together. Any failure rolls back both rows.

Passwords:
    Hashed with argon2id off the event loop (run_in_threadpool); never
    logged, never returned.
"""

import logging
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sakila_rentals.config import settings
from sakila_rentals.exceptions import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    InvalidReferenceError,
    NotFoundError,
)
from sakila_rentals.models.customer import Customer
from sakila_rentals.models.store import Store
from sakila_rentals.models.user import User
from sakila_rentals.repositories import accounts as account_repo
from sakila_rentals.repositories.common import page_offset, row_exists
from sakila_rentals.schemas.account import (
    SigninRequest,
    SigninResponse,
    SignupRequest,
    SignupResponse,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)
from sakila_rentals.services.passwords import hash_password, needs_rehash, verify_password
from sakila_rentals.services.storage_errors import storage_errors
from sakila_rentals.timeutils import utcnow

logger = logging.getLogger(__name__)

DUPLICATE_USER_MESSAGE = "User with this name or email already exists."


class AccountService:
    """Service layer for user accounts and their linked customers."""

    # ══════════════════════════════════════════════════════════════════════
    # Signup / Signin
    # ══════════════════════════════════════════════════════════════════════

    async def signup(self, db: AsyncSession, request: SignupRequest) -> SignupResponse:
        """
        Create a Customer and its User in one transaction.

        Raises:
            BadRequestError:       name, password or email missing (→ 400)
            ConflictError:         name or email already taken (→ 409)
            InvalidReferenceError: store does not exist (→ 400)
            DatabaseError:         storage failure (→ 500)
        """
        missing = [f for f in ("name", "password", "email") if not getattr(request, f)]
        if missing:
            raise BadRequestError(
                message="Missing required fields: name, password, and email are required.",
                context={"missing_fields": missing},
            )

        store_id = request.store_id if request.store_id is not None else settings.default_store_id

        async with storage_errors("create the account", name=request.name):
            existing = await account_repo.find_user_by_name_or_email(db, request.name, request.email)
            if existing is not None:
                raise ConflictError(message=DUPLICATE_USER_MESSAGE)

            if not await row_exists(db, Store.store_id, store_id):
                raise InvalidReferenceError(resource="store", resource_id=store_id)

            password_hash = await run_in_threadpool(hash_password, request.password)

            customer = Customer(
                store_id=store_id,
                first_name=request.first_name or "",
                last_name=request.last_name or "",
                email=request.email,
                active=True,
            )
            db.add(customer)
            try:
                await db.flush()
            except IntegrityError:
                await db.rollback()
                raise InvalidReferenceError(resource="store", resource_id=store_id)

            user = User(
                name=request.name,
                email=request.email,
                password_hash=password_hash,
                first_name=request.first_name,
                last_name=request.last_name,
                customer_id=customer.customer_id,
            )
            db.add(user)
            try:
                await db.flush()
            except IntegrityError:
                # Lost the race to a concurrent signup; the Customer goes too
                await db.rollback()
                raise ConflictError(message=DUPLICATE_USER_MESSAGE)

        logger.info(
            "Signed up user %s (user_id=%s, customer_id=%s)",
            user.name,
            user.id,
            customer.customer_id,
        )
        return SignupResponse(
            user_id=user.id,
            customer_id=customer.customer_id,
            name=user.name,
            email=user.email,
        )

    async def signin(self, db: AsyncSession, request: SigninRequest) -> SigninResponse:
        """
        Verify a username/password pair.

        No session or token is issued; success only confirms the credentials.
        A legacy SHA-256 hash is upgraded to argon2id on successful signin.

        Raises:
            BadRequestError:     username or password missing (→ 400)
            AuthenticationError: unknown user or wrong password (→ 401)
        """
        if not request.username or not request.password:
            raise BadRequestError(message="Username and password are required.")

        async with storage_errors("sign in"):
            user = await account_repo.get_user_by_name(db, request.username)
            if user is None:
                raise AuthenticationError()

            matches = await run_in_threadpool(verify_password, user.password_hash, request.password)
            if not matches:
                logger.info("Failed signin for user %s", request.username)
                raise AuthenticationError()

            if needs_rehash(user.password_hash):
                user.password_hash = await run_in_threadpool(hash_password, request.password)
                await db.flush()
                logger.info("Upgraded password hash for user %s", user.id)

        return SigninResponse(user=UserResponse.model_validate(user))

    # ══════════════════════════════════════════════════════════════════════
    # User Administration
    # ══════════════════════════════════════════════════════════════════════

    async def list_users(self, db: AsyncSession, page: int, page_size: int) -> UserListResponse:
        async with storage_errors("list users"):
            users, total = await account_repo.list_users(
                db, offset=page_offset(page, page_size), limit=page_size
            )
        return UserListResponse(
            page=page,
            page_size=page_size,
            total=total,
            users=[UserResponse.model_validate(u) for u in users],
        )

    async def get_user(self, db: AsyncSession, user_id: int) -> UserResponse:
        async with storage_errors("fetch the user", user_id=user_id):
            user = await account_repo.get_user(db, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return UserResponse.model_validate(user)

    async def update_user(
        self,
        db: AsyncSession,
        user_id: int,
        changes: UserUpdateRequest,
    ) -> UserResponse:
        """
        Apply the fields present in `changes` to one user.

        Raises:
            NotFoundError: user does not exist (→ 404)
            ConflictError: new name or email belongs to another user (→ 409)
        """
        values = changes.model_dump(exclude_unset=True)
        # name and email are NOT NULL; an explicit null leaves them unchanged
        for required in ("name", "email"):
            if values.get(required) is None:
                values.pop(required, None)

        async with storage_errors("update the user", user_id=user_id):
            user = await account_repo.get_user(db, user_id)
            if user is None:
                raise NotFoundError(resource="user", resource_id=user_id)

            clash = await account_repo.find_user_by_name_or_email(
                db,
                values.get("name"),
                values.get("email"),
                exclude_user_id=user_id,
            )
            if clash is not None:
                raise ConflictError(message=DUPLICATE_USER_MESSAGE)

            for key, value in values.items():
                setattr(user, key, value)
            user.updated_at = utcnow()
            try:
                await db.flush()
            except IntegrityError:
                await db.rollback()
                raise ConflictError(message=DUPLICATE_USER_MESSAGE)

        logger.info("Updated user %s (fields: %s)", user_id, sorted(values))
        return UserResponse.model_validate(user)


# ── Singleton Instance ────────────────────────────────────────────────────
account_service = AccountService()
