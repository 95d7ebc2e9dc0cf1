"""Request schemas for user creation, update and search."""

import re
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator

from rolegate.schemas.common import check_password_strength, strip_markup

_NAME_QUERY_RE = re.compile(r"^[^\W\d_]+(?:\s+[^\W\d_]+)*$")


def _clean_name(v: str) -> str:
    cleaned = strip_markup(v)
    if not (2 <= len(cleaned) <= 50):
        raise ValueError("Names must be between 2 and 50 characters")
    return cleaned


class UserCreate(BaseModel):
    """
    Registration / creation payload.

    role_id is optional: the service forces SuperAdmin for the first user and
    Guest for self-registration, and checks privileged requests against the
    permission matrix.
    """

    email: EmailStr
    password: str
    first_name: str
    last_name: str
    role_id: Literal[1, 2, 3] | None = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return strip_markup(v).lower() if isinstance(v, str) else v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_strength(v.strip())

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_names(cls, v: str) -> str:
        return _clean_name(v)


class UserUpdate(BaseModel):
    """Partial update; every field is optional but must be valid when sent."""

    email: EmailStr | None = None
    first_name: str | None = None
    last_name: str | None = None
    role_id: Literal[1, 2, 3] | None = None
    is_blocked: bool | None = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return strip_markup(v).lower() if isinstance(v, str) else v

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_names(cls, v: str | None) -> str | None:
        return _clean_name(v) if v is not None else None


class UserSearch(BaseModel):
    """Pagination and filters for POST /admin/search."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
    name: str | None = None
    role_id: list[Literal[1, 2, 3]] | Literal[1, 2, 3] | None = None
    is_blocked: bool | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = strip_markup(v)
        if v and not _NAME_QUERY_RE.match(v):
            raise ValueError("Name may only contain letters and spaces")
        return v or None

    def role_ids(self) -> list[int] | None:
        if self.role_id is None:
            return None
        return list(self.role_id) if isinstance(self.role_id, list) else [self.role_id]
