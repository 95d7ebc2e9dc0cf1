"""Password reset (token by email) and authenticated password change."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from rolegate.api.v1.deps import (
    AuthContext,
    get_email_sender,
    get_reset_user,
    get_token_codec,
    require_guest,
)
from rolegate.core.config import Settings, get_settings
from rolegate.core.database import get_db
from rolegate.core.responses import server_response
from rolegate.core.security import TokenCodec
from rolegate.models import User
from rolegate.schemas.common import envelope_responses
from rolegate.schemas.password import (
    ChangePasswordRequest,
    NewPasswordRequest,
    ResetEmailRequest,
)
from rolegate.services import passwords
from rolegate.services.email import EmailSender

router = APIRouter()


@router.post("/reset", responses=envelope_responses(400, 404))
def request_reset(
    body: ResetEmailRequest,
    db: Annotated[Session, Depends(get_db)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    sender: Annotated[EmailSender, Depends(get_email_sender)],
) -> JSONResponse:
    """Email a one-time reset token (also returned in the body)."""
    return server_response(passwords.send_reset_email(db, body.email, codec, sender))


@router.post("/update", responses=envelope_responses(400, 401))
def update_with_reset_token(
    body: NewPasswordRequest,
    user: Annotated[User, Depends(get_reset_user)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> JSONResponse:
    """Set a new password using the ``x-reset-token`` header. The token works once."""
    result = passwords.reset_password(
        db, user, body.new_password, bcrypt_rounds=settings.BCRYPT_ROUNDS
    )
    return server_response(result)


@router.post("/change", responses=envelope_responses(400, 401, 404, 503))
def change_password(
    body: ChangePasswordRequest,
    ctx: Annotated[AuthContext, Depends(require_guest)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> JSONResponse:
    """Change the caller's password after checking the current one."""
    result = passwords.change_password(
        db,
        ctx.user.id,
        body.current_password,
        body.new_password,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
    )
    return ctx.respond(result)
