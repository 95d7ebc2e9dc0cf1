"""Password change and reset flows, including one-time reset-token resolution."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rolegate.core.errors import format_error
from rolegate.core.messages import AUTH, USER
from rolegate.core.responses import ServiceResult
from rolegate.core.security import (
    ExpiredOrInvalidToken,
    TokenCodec,
    hash_password,
    token_user_for,
    verify_password,
)
from rolegate.models import User
from rolegate.services.email import EmailDeliveryError, EmailSender, redact_email, render_reset_email
from rolegate.services.users import find_by_email

logger = logging.getLogger(__name__)

RESET_EMAIL_SUBJECT = "Password reset"


def change_password(
    db: Session,
    user_id: int,
    current_password: str,
    new_password: str,
    bcrypt_rounds: int = 10,
) -> ServiceResult:
    """Replace the password after checking the current one."""
    try:
        user = db.get(User, user_id)
        if user is None:
            return ServiceResult.fail(404, USER.NOT_FOUND)
        if not verify_password(current_password, user.password):
            return ServiceResult.fail(401, AUTH.INVALID_CREDENTIALS)
        user.password = hash_password(new_password, rounds=bcrypt_rounds)
        user.updated_by = user.id
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise format_error(e, "change_password-password_service") from e
    logger.info("Password changed", extra={"user_id": user_id})
    return ServiceResult.ok(USER.PASSWORD_CHANGED_SUCCESS)


def send_reset_email(
    db: Session,
    email: str,
    codec: TokenCodec,
    sender: EmailSender,
) -> ServiceResult:
    """
    Issue a reset token, store it on the user as unused, and email it.

    The token is also returned in the body. If the email cannot be delivered
    the stored token stays valid and the response still carries it.
    """
    try:
        user = find_by_email(db, email)
        if user is None:
            return ServiceResult.fail(404, AUTH.INVALID_EMAIL)
        token = codec.issue_reset(token_user_for(user))
        user.reset_password_token = token
        user.reset_password_token_used = False
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise format_error(e, "send_reset_email-password_service") from e

    valid_minutes = int(codec.reset_ttl.total_seconds() // 60)
    text, html = render_reset_email(user.first_name, token, valid_minutes)
    try:
        sender.send(user.email, RESET_EMAIL_SUBJECT, text, html)
    except EmailDeliveryError as e:
        logger.warning(
            "Reset email delivery failed; token returned in response only",
            extra={"to": redact_email(user.email), "reason": str(e.cause or e)[:200]},
        )
        return ServiceResult.ok(
            USER.RESET_EMAIL_NOT_SENT, {"resetToken": token, "emailSent": False}
        )
    return ServiceResult.ok(USER.RESET_EMAIL_SENT, {"resetToken": token, "emailSent": True})


def resolve_reset_user(db: Session, token: str | None, codec: TokenCodec) -> User | None:
    """
    Return the user a reset token belongs to, or None.

    The token must verify with the reset secret, match the value stored on the
    user, and not be marked used.
    """
    try:
        identity = codec.verify_reset(token)
    except ExpiredOrInvalidToken:
        return None
    try:
        return (
            db.query(User)
            .filter(
                User.id == identity.id,
                User.reset_password_token == token,
                User.reset_password_token_used.is_(False),
            )
            .first()
        )
    except SQLAlchemyError as e:
        raise format_error(e, "resolve_reset_user-password_service") from e


def reset_password(
    db: Session, user: User, new_password: str, bcrypt_rounds: int = 10
) -> ServiceResult:
    """Set a new password and mark the reset token used. Token checks happen in resolve_reset_user."""
    try:
        user.password = hash_password(new_password, rounds=bcrypt_rounds)
        user.reset_password_token_used = True
        user.updated_by = user.id
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise format_error(e, "reset_password-password_service") from e
    logger.info("Password reset", extra={"user_id": user.id})
    return ServiceResult.ok(USER.PASSWORD_RESET_SUCCESS)
