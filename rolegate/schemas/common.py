"""Shared schema pieces: response envelope, OpenAPI response maps and input sanitizers."""

import re
from typing import Any

from pydantic import BaseModel, Field

from rolegate.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN

_TAG_RE = re.compile(r"<[^>]*>")
_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).+$")


class Envelope(BaseModel):
    """Uniform response body: success flag, optional message and payload."""

    success: bool
    message: str | None = None
    body: Any | None = Field(default=None, description="Operation payload")


def envelope_responses(
    *error_statuses: int,
    success_status: int = 200,
    model: type[Envelope] = Envelope,
) -> dict[int | str, dict[str, Any]]:
    """OpenAPI ``responses`` map: ``model`` for success, Envelope for each listed failure."""
    responses: dict[int | str, dict[str, Any]] = {success_status: {"model": model}}
    for status in error_statuses:
        responses[status] = {"model": Envelope}
    return responses


def strip_markup(value: str) -> str:
    """Remove HTML/XML tags from free text and trim it."""
    return _TAG_RE.sub("", value).strip()


def check_password_strength(value: str) -> str:
    """8-32 chars with at least one lowercase, one uppercase and one digit."""
    if not (PASSWORD_MIN_LEN <= len(value) <= PASSWORD_MAX_LEN):
        raise ValueError(
            f"Password must be between {PASSWORD_MIN_LEN} and {PASSWORD_MAX_LEN} characters"
        )
    if not _PASSWORD_RE.match(value):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter and one number"
        )
    return value
