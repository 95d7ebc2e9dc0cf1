"""Authentication: credential check, session issuance per device, and logout."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rolegate.core.errors import format_error
from rolegate.core.messages import AUTH
from rolegate.core.responses import ServiceResult
from rolegate.core.security import TokenCodec, token_user_for, verify_password
from rolegate.services.sessions import SessionStore, TokenPair
from rolegate.services.users import find_by_email

logger = logging.getLogger(__name__)


def authenticate(
    db: Session,
    codec: TokenCodec,
    email: str,
    password: str,
    ip_address: str | None = None,
    device_info: str | None = None,
    bcrypt_rounds: int = 10,
) -> ServiceResult:
    """
    Verify credentials and open a session for (user, ip, device).

    Unknown email and wrong password produce the same 401 result, and both
    pay for a bcrypt check at ``bcrypt_rounds``. A previous session from the
    same device/IP is replaced; other devices keep theirs.
    """
    try:
        user = find_by_email(db, email)
    except SQLAlchemyError as e:
        raise format_error(e, "authenticate-auth_service") from e

    stored = user.password if user else None
    if not verify_password(password, stored, rounds=bcrypt_rounds) or user is None:
        logger.info("Login failed", extra={"reason": "invalid_credentials"})
        return ServiceResult.fail(401, AUTH.INVALID_CREDENTIALS)

    identity = token_user_for(user)
    tokens = TokenPair(
        access_token=codec.issue_access(identity),
        refresh_token=codec.issue_refresh(identity),
    )
    SessionStore(db).replace_for_device(user.id, ip_address, device_info, tokens)
    logger.info("Login succeeded", extra={"user_id": user.id})
    return ServiceResult.ok(
        AUTH.LOGIN_SUCCESS,
        {"token": tokens.access_token, "refreshToken": tokens.refresh_token},
    )


def logout(db: Session, access_token: str) -> ServiceResult:
    """Destroy the session holding ``access_token``."""
    store = SessionStore(db)
    session = store.find_by_access_token(access_token)
    if session is None:
        return ServiceResult.fail(404, AUTH.SESSION_NOT_FOUND)
    user_id = session.user_id
    store.destroy(session)
    logger.info("Logout", extra={"user_id": user_id})
    return ServiceResult.ok(AUTH.LOGOUT_SUCCESS)
