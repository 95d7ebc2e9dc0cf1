"""Auth dependencies: maintenance gate, token resolution/renewal, session check, role gate."""

import logging
from dataclasses import dataclass, field
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from rolegate.core.config import Settings, get_settings
from rolegate.core.database import get_db
from rolegate.core.messages import AUTH, GENERAL
from rolegate.core.responses import ServiceResult, server_response
from rolegate.core.security import TokenCodec
from rolegate.models import User
from rolegate.models.role import RoleId
from rolegate.services.email import EmailSender
from rolegate.services.passwords import resolve_reset_user
from rolegate.services.sessions import SessionStore
from rolegate.services.token_renewal import InvalidOrExpiredToken, resolve_tokens
from rolegate.services.users import Requester

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)

HEADER_REFRESH_TOKEN = "x-refresh-token"
HEADER_RESET_TOKEN = "x-reset-token"
HEADER_NEW_TOKEN = "x-new-token"
HEADER_NEW_REFRESH_TOKEN = "x-new-refresh-token"
HEADER_USER_PERMISSIONS = "x-user-permissions"
HEADER_MAINTENANCE = "x-maintenance-mode"


@dataclass
class AuthContext:
    """Authenticated caller for one request, with renewal headers when tokens were rotated."""

    user: User
    access_token: str
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def requester(self) -> Requester:
        return Requester(id=self.user.id, role_id=self.user.role_id)

    def respond(self, result: ServiceResult) -> JSONResponse:
        return server_response(result, headers=self.headers or None)


def get_token_codec(settings: Annotated[Settings, Depends(get_settings)]) -> TokenCodec:
    return TokenCodec(settings)


def get_email_sender(settings: Annotated[Settings, Depends(get_settings)]) -> EmailSender:
    return EmailSender.from_settings(settings)


def client_ip(request: Request) -> str | None:
    """First X-Forwarded-For hop, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.client.host if request.client else None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def check_maintenance(settings: Annotated[Settings, Depends(get_settings)]) -> None:
    """Dependency: answer 503 for every authenticated route while MAINTENANCE_MODE is on."""
    if settings.MAINTENANCE_MODE:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=GENERAL.MAINTENANCE,
            headers={HEADER_MAINTENANCE: "true"},
        )


def get_auth_context(
    _maintenance: Annotated[None, Depends(check_maintenance)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    x_refresh_token: Annotated[str | None, Header(alias=HEADER_REFRESH_TOKEN)] = None,
) -> AuthContext:
    """
    Dependency: resolve the Bearer token (renewing it once from x-refresh-token when
    expired), load the user, and require a live session for the presented token.
    Role is read from the user row, never from the token.
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized(AUTH.NO_TOKEN)
    token = credentials.credentials
    try:
        resolution = resolve_tokens(codec, token, x_refresh_token)
    except InvalidOrExpiredToken:
        raise _unauthorized(AUTH.INVALID_TOKEN)

    user = db.get(User, resolution.user.id)
    if user is None:
        raise _unauthorized(AUTH.UNAUTHORIZED)
    if user.is_blocked:
        raise _unauthorized(AUTH.BLOCKED)

    store = SessionStore(db)
    session = store.find_active(user.id, token)
    if session is None:
        raise _unauthorized(AUTH.SESSION_NOT_FOUND)

    if not resolution.renewed:
        return AuthContext(user=user, access_token=token)

    if session.refresh_token != x_refresh_token:
        raise _unauthorized(AUTH.INVALID_TOKEN)
    store.update_tokens(session, resolution.new_access, resolution.new_refresh)
    logger.info("Session tokens renewed", extra={"user_id": user.id})
    return AuthContext(
        user=user,
        access_token=resolution.new_access,
        headers={
            HEADER_NEW_TOKEN: resolution.new_access,
            HEADER_NEW_REFRESH_TOKEN: resolution.new_refresh,
            HEADER_USER_PERMISSIONS: str(user.role_id),
        },
    )


class RequireRole:
    """Dependency factory: the caller's role must be ``minimum`` or more privileged."""

    def __init__(self, minimum: RoleId) -> None:
        self.minimum = minimum

    def __call__(
        self, ctx: Annotated[AuthContext, Depends(get_auth_context)]
    ) -> AuthContext:
        if ctx.user.role_id > self.minimum:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=AUTH.FORBIDDEN,
            )
        return ctx


require_admin = RequireRole(RoleId.ADMIN)
require_guest = RequireRole(RoleId.GUEST)


def get_reset_user(
    db: Annotated[Session, Depends(get_db)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    x_reset_token: Annotated[str | None, Header(alias=HEADER_RESET_TOKEN)] = None,
) -> User:
    """Dependency: resolve the user behind an unused reset token or answer 401."""
    if not x_reset_token:
        raise _unauthorized(AUTH.NO_TOKEN)
    user = resolve_reset_user(db, x_reset_token, codec)
    if user is None:
        raise _unauthorized(AUTH.RESET_INVALID)
    return user
