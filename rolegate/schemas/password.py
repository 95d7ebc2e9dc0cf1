"""Request schemas for password reset and change."""

from pydantic import BaseModel, EmailStr, Field, field_validator

from rolegate.schemas.common import check_password_strength


class ResetEmailRequest(BaseModel):
    """Email that should receive a reset token."""

    email: EmailStr


class NewPasswordRequest(BaseModel):
    """New password for a reset-token protected update."""

    new_password: str = Field(..., description="New password")

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return check_password_strength(v.strip())


class ChangePasswordRequest(NewPasswordRequest):
    """Authenticated password change: current password plus the new one."""

    current_password: str = Field(..., min_length=1, max_length=128)
