"""
Sakila Rentals Backend — Account Provisioning Tests
=====================================================

What we test:
    ✅ Signup creates a linked Customer and User, password stored hashed
    ✅ Duplicate name or email → Conflict, no second Customer
    ✅ A failure at the User insert rolls back the Customer
    ✅ Unknown store → InvalidReference
    ✅ Signin success, wrong password, unknown user, legacy hash upgrade
    ✅ User list / get / update (including collisions)
"""

import hashlib
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select

from sakila_rentals.exceptions import (
    AuthenticationError,
    BadRequestError,
    ConflictError,
    InvalidReferenceError,
    NotFoundError,
)
from sakila_rentals.models.customer import Customer
from sakila_rentals.models.user import User
from sakila_rentals.repositories import accounts as account_repo
from sakila_rentals.schemas.account import SigninRequest, SignupRequest, UserUpdateRequest
from sakila_rentals.services.account_service import AccountService


async def _customer_count(db_session) -> int:
    result = await db_session.execute(select(func.count()).select_from(Customer))
    return result.scalar()


def _alice(**overrides) -> SignupRequest:
    fields = dict(
        name="alice",
        password="wonderland",
        email="alice@example.com",
        first_name="Alice",
        last_name="Liddell",
    )
    fields.update(overrides)
    return SignupRequest(**fields)


class TestSignup:

    def setup_method(self):
        self.service = AccountService()

    @pytest.mark.asyncio
    async def test_signup_creates_customer_and_user(self, db_session):
        result = await self.service.signup(db_session, _alice())

        assert result.success is True
        assert result.name == "alice"

        user = await account_repo.get_user(db_session, result.user_id)
        customer = await db_session.get(Customer, result.customer_id)
        assert user.customer_id == customer.customer_id
        assert customer.store_id == 1
        assert customer.first_name == "Alice"
        assert user.password_hash != "wonderland"
        assert user.password_hash.startswith("$argon2id$")

    @pytest.mark.asyncio
    async def test_signup_twice_conflicts(self, db_session):
        await self.service.signup(db_session, _alice())
        await db_session.commit()
        customers = await _customer_count(db_session)

        with pytest.raises(ConflictError):
            await self.service.signup(db_session, _alice(email="other@example.com"))

        assert await _customer_count(db_session) == customers

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, db_session):
        await self.service.signup(db_session, _alice())

        with pytest.raises(ConflictError):
            await self.service.signup(db_session, _alice(name="alice2"))

    @pytest.mark.asyncio
    async def test_user_insert_failure_rolls_back_customer(self, db_session, monkeypatch):
        """The unique index catches a duplicate the pre-check missed; no Customer is left behind."""
        await self.service.signup(db_session, _alice())
        await db_session.commit()
        customers = await _customer_count(db_session)

        monkeypatch.setattr(account_repo, "find_user_by_name_or_email", AsyncMock(return_value=None))
        with pytest.raises(ConflictError):
            await self.service.signup(db_session, _alice())

        assert await _customer_count(db_session) == customers

    @pytest.mark.asyncio
    async def test_unknown_store(self, db_session):
        with pytest.raises(InvalidReferenceError) as exc_info:
            await self.service.signup(db_session, _alice(store_id=77))

        assert exc_info.value.status_code == 400
        assert await _customer_count(db_session) == 2

    @pytest.mark.asyncio
    async def test_missing_fields(self, db_session):
        with pytest.raises(BadRequestError) as exc_info:
            await self.service.signup(db_session, SignupRequest(name="bob", email="  "))

        assert exc_info.value.context["missing_fields"] == ["password", "email"]


class TestSignin:

    def setup_method(self):
        self.service = AccountService()

    @pytest.mark.asyncio
    async def test_signin_success(self, db_session):
        await self.service.signup(db_session, _alice())

        result = await self.service.signin(
            db_session, SigninRequest(username="alice", password="wonderland")
        )

        assert result.success is True
        assert result.message == "Login successful."
        assert result.user.name == "alice"
        assert "password_hash" not in result.user.model_dump()

    @pytest.mark.asyncio
    async def test_wrong_password(self, db_session):
        await self.service.signup(db_session, _alice())

        with pytest.raises(AuthenticationError) as exc_info:
            await self.service.signin(db_session, SigninRequest(username="alice", password="nope"))
        assert exc_info.value.message == "Invalid credentials."

    @pytest.mark.asyncio
    async def test_unknown_user(self, db_session):
        with pytest.raises(AuthenticationError):
            await self.service.signin(db_session, SigninRequest(username="ghost", password="x"))

    @pytest.mark.asyncio
    async def test_missing_credentials(self, db_session):
        with pytest.raises(BadRequestError):
            await self.service.signin(db_session, SigninRequest(username="alice"))

    @pytest.mark.asyncio
    async def test_legacy_hash_is_upgraded(self, db_session):
        legacy = hashlib.sha256(b"letmein").hexdigest()
        db_session.add(User(name="legacy", email="legacy@example.com", password_hash=legacy))
        await db_session.flush()

        await self.service.signin(db_session, SigninRequest(username="legacy", password="letmein"))

        user = await account_repo.get_user_by_name(db_session, "legacy")
        assert user.password_hash.startswith("$argon2id$")


class TestUserAdministration:

    def setup_method(self):
        self.service = AccountService()

    @pytest.mark.asyncio
    async def test_list_and_get(self, db_session):
        created = await self.service.signup(db_session, _alice())

        listing = await self.service.list_users(db_session, page=1, page_size=10)
        user = await self.service.get_user(db_session, created.user_id)

        assert listing.total == 1
        assert [u.name for u in listing.users] == ["alice"]
        assert user.email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_list_is_paginated(self, db_session):
        for name in ("alice", "bob", "carol"):
            await self.service.signup(db_session, _alice(name=name, email=f"{name}@example.com"))

        second = await self.service.list_users(db_session, page=2, page_size=2)

        assert second.total == 3
        assert second.page == 2
        assert second.page_size == 2
        assert [u.name for u in second.users] == ["carol"]

    @pytest.mark.asyncio
    async def test_get_unknown(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_user(db_session, 31337)

    @pytest.mark.asyncio
    async def test_update_fields(self, db_session):
        created = await self.service.signup(db_session, _alice())

        updated = await self.service.update_user(
            db_session, created.user_id, UserUpdateRequest(role="clerk", last_name="Pleasance")
        )

        assert updated.role == "clerk"
        assert updated.last_name == "Pleasance"
        assert updated.name == "alice"

    @pytest.mark.asyncio
    async def test_update_to_taken_name(self, db_session):
        await self.service.signup(db_session, _alice())
        bob = await self.service.signup(
            db_session, _alice(name="bob", email="bob@example.com")
        )

        with pytest.raises(ConflictError):
            await self.service.update_user(db_session, bob.user_id, UserUpdateRequest(name="alice"))

    @pytest.mark.asyncio
    async def test_update_unknown_user(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.update_user(db_session, 404, UserUpdateRequest(role="x"))
