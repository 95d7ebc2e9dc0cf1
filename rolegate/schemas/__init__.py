"""Pydantic request/response schemas."""

from rolegate.schemas.auth import LoginRequest, LoginResponse, TokenBody
from rolegate.schemas.common import Envelope, envelope_responses
from rolegate.schemas.health import HealthResponse
from rolegate.schemas.password import (
    ChangePasswordRequest,
    NewPasswordRequest,
    ResetEmailRequest,
)
from rolegate.schemas.user import UserCreate, UserSearch, UserUpdate

__all__ = [
    "ChangePasswordRequest",
    "Envelope",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "NewPasswordRequest",
    "ResetEmailRequest",
    "TokenBody",
    "UserCreate",
    "UserSearch",
    "UserUpdate",
    "envelope_responses",
]
