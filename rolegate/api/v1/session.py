"""Login and logout endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from rolegate.api.v1.deps import AuthContext, client_ip, get_token_codec, require_guest
from rolegate.core.config import Settings, get_settings
from rolegate.core.database import get_db
from rolegate.core.responses import server_response
from rolegate.core.security import TokenCodec
from rolegate.schemas.auth import LoginRequest, LoginResponse
from rolegate.schemas.common import envelope_responses
from rolegate.services import auth as auth_service

router = APIRouter()


@router.post("/login", responses=envelope_responses(400, 401, model=LoginResponse))
def login(
    body: LoginRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    settings: Annotated[Settings, Depends(get_settings)],
    user_agent: Annotated[str | None, Header()] = None,
) -> JSONResponse:
    """
    Authenticate with email and password; returns an access and a refresh token.
    Send the access token as ``Authorization: Bearer <token>`` and the refresh
    token as ``x-refresh-token``. A previous session from the same device/IP is replaced.
    """
    result = auth_service.authenticate(
        db,
        codec,
        email=body.email,
        password=body.password,
        ip_address=client_ip(request),
        device_info=user_agent,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
    )
    return server_response(result)


@router.post("/logout", responses=envelope_responses(401, 404, 503))
def logout(
    ctx: Annotated[AuthContext, Depends(require_guest)],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Close the session bound to the presented access token."""
    return ctx.respond(auth_service.logout(db, ctx.access_token))
