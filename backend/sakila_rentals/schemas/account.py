"""
Sakila Rentals Backend — Account Schemas
==========================================

What:  API contracts for signup, signin and user administration.
Security:
    Response models never include `password_hash`. Passwords are accepted
    only in request bodies and are never echoed back.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from sakila_rentals.schemas.common import DbId, PageMeta


def _strip_or_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class SignupRequest(BaseModel):
    """
    Signup payload. Blank strings are treated as missing, so the service
    can reject them with one consistent message.
    """
    name: Optional[str] = Field(default=None, max_length=100, description="Login name")
    password: Optional[str] = Field(default=None, max_length=1024, description="Cleartext password")
    email: Optional[str] = Field(default=None, max_length=255, description="Email address")
    first_name: Optional[str] = Field(default=None, max_length=45)
    last_name: Optional[str] = Field(default=None, max_length=45)
    store_id: Optional[DbId] = Field(default=None, description="Home store of the new customer")

    @field_validator("name", "email", "first_name", "last_name")
    @classmethod
    def strip_blank(cls, v: Optional[str]) -> Optional[str]:
        return _strip_or_none(v)


class SignupEnvelope(SignupRequest):
    """
    Signup body as accepted on the wire: either the fields directly, or
    wrapped as {"userData": {...}} (the web client sends the wrapped form).
    """
    user_data: Optional[SignupRequest] = Field(default=None, alias="userData")

    model_config = {"populate_by_name": True}

    def unwrap(self) -> SignupRequest:
        if self.user_data is not None:
            return self.user_data
        return SignupRequest(**self.model_dump(exclude={"user_data"}))


class SigninRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class UserUpdateRequest(BaseModel):
    """Fields a user edit may change; omitted fields are left untouched."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = Field(default=None, max_length=100)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class SignupResponse(BaseModel):
    success: bool = True
    message: str = "User created successfully."
    user_id: int
    customer_id: int
    name: str
    email: str


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None
    is_admin: Optional[bool] = None
    customer_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SigninResponse(BaseModel):
    success: bool = True
    message: str = "Login successful."
    user: UserResponse


class UserListResponse(PageMeta):
    users: List[UserResponse] = Field(description="One page of users, ordered by id")
