"""Request/response schemas for login and logout."""

from pydantic import BaseModel, EmailStr, Field

from rolegate.schemas.common import Envelope


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class TokenBody(BaseModel):
    """Token pair returned after successful login."""

    token: str = Field(..., description="JWT access token")
    refreshToken: str = Field(..., description="JWT refresh token")


class LoginResponse(Envelope):
    """Envelope of a successful login."""

    body: TokenBody | None = None
