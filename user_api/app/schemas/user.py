"""
Pydantic models for user data.

``UserCreate`` and ``UserUpdate`` hold the field rules of the two
validation rulesets; ``UserRead`` is the projection returned by list and
get, ``UserRecord`` the full row returned after a write.  Only ``name``,
``email`` and ``age`` are writable; unknown keys in a payload are
ignored.
"""

from typing import Optional

import email_validator
from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError


WRITABLE_FIELDS = ("name", "email", "age")

# Largest value an SQLite INTEGER column can hold.
SQLITE_MAX_INTEGER = 2 ** 63 - 1

# Only address syntax is checked: reserved names such as ``localhost`` or
# ``.test`` are valid domains for this service.
email_validator.SPECIAL_USE_DOMAIN_NAMES = []


def _check_email(value):
    # Stored exactly as submitted; the normalised form is discarded.
    if value is None:
        return value
    try:
        validate_email(value, check_deliverability=False, globally_deliverable=False)
    except EmailNotValidError:
        raise PydanticCustomError("email", "value is not a valid email address")
    return value


def _reject_bool(value):
    # JSON ``true``/``false`` would otherwise be coerced to 1/0.
    if isinstance(value, bool):
        raise PydanticCustomError("int_type", "Input should be a valid integer")
    return value


class UserCreate(BaseModel):
    """Rules for ``POST /users``: every field is required."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Ann"])
    email: str = Field(..., min_length=1, max_length=255, examples=["ann@example.com"])
    age: int = Field(..., ge=0, le=SQLITE_MAX_INTEGER, examples=[30])

    model_config = {"str_strip_whitespace": True, "extra": "ignore"}

    @field_validator("email")
    @classmethod
    def email_syntax(cls, value):
        return _check_email(value)

    @field_validator("age", mode="before")
    @classmethod
    def age_not_bool(cls, value):
        return _reject_bool(value)


class UserUpdate(BaseModel):
    """Rules for ``PUT /users/{id}``.

    Every field is optional, but a field that is present must satisfy
    the same constraints as on creation.  Defaults are not validated, so
    an explicit ``null`` still fails the type check.
    """

    name: str = Field(None, min_length=1, max_length=255)
    email: str = Field(None, min_length=1, max_length=255)
    age: int = Field(None, ge=0, le=SQLITE_MAX_INTEGER)

    model_config = {"str_strip_whitespace": True, "extra": "ignore"}

    @field_validator("email")
    @classmethod
    def email_syntax(cls, value):
        return _check_email(value)

    @field_validator("age", mode="before")
    @classmethod
    def age_not_bool(cls, value):
        return _reject_bool(value)


class UserRead(BaseModel):
    """Projected user returned by list and get."""

    id: int
    name: str
    email: str
    age: int

    model_config = {
        "from_attributes": True,
    }


class UserRecord(UserRead):
    """Full user row, including timestamps."""

    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def project(self) -> UserRead:
        return UserRead(id=self.id, name=self.name, email=self.email, age=self.age)
