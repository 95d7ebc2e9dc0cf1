"""Session store: CRUD over login sessions keyed by user and device/IP or by access token."""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session as DbSession

from rolegate.core.errors import format_error
from rolegate.models import Session

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class SessionStore:
    """Storage adapter for Session rows; every write commits its own transaction."""

    def __init__(self, db: DbSession) -> None:
        self.db = db

    def find_active(self, user_id: int, access_token: str) -> Session | None:
        try:
            return (
                self.db.query(Session)
                .filter(Session.user_id == user_id, Session.access_token == access_token)
                .first()
            )
        except SQLAlchemyError as e:
            raise format_error(e, "find_active-session_store") from e

    def find_by_access_token(self, access_token: str) -> Session | None:
        try:
            return self.db.query(Session).filter(Session.access_token == access_token).first()
        except SQLAlchemyError as e:
            raise format_error(e, "find_by_access_token-session_store") from e

    def find_by_device(self, user_id: int, ip_address: str, device_info: str) -> list[Session]:
        try:
            return (
                self.db.query(Session)
                .filter(
                    Session.user_id == user_id,
                    Session.ip_address == ip_address,
                    Session.device_info == device_info,
                )
                .all()
            )
        except SQLAlchemyError as e:
            raise format_error(e, "find_by_device-session_store") from e

    def replace_for_device(
        self,
        user_id: int,
        ip_address: str | None,
        device_info: str | None,
        tokens: TokenPair,
    ) -> Session:
        """
        Drop any session for (user, ip, device) and insert a fresh one in a single transaction.

        The unique constraint on the triple makes a concurrent insert fail with
        IntegrityError; the replacement is then retried once against the winner's row.
        """
        ip_address = ip_address or UNKNOWN
        device_info = device_info or UNKNOWN
        try:
            return self._replace(user_id, ip_address, device_info, tokens)
        except IntegrityError:
            self.db.rollback()
            logger.info(
                "Concurrent login for same device; retrying session replacement",
                extra={"user_id": user_id},
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise format_error(e, "replace_for_device-session_store") from e

        try:
            return self._replace(user_id, ip_address, device_info, tokens)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise format_error(e, "replace_for_device-session_store") from e

    def _replace(
        self, user_id: int, ip_address: str, device_info: str, tokens: TokenPair
    ) -> Session:
        deleted = (
            self.db.query(Session)
            .filter(
                Session.user_id == user_id,
                Session.ip_address == ip_address,
                Session.device_info == device_info,
            )
            .delete(synchronize_session="fetch")
        )
        session = Session(
            user_id=user_id,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            ip_address=ip_address,
            device_info=device_info,
        )
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)
        if deleted:
            logger.info(
                "Replaced previous session for device",
                extra={"user_id": user_id, "sessions_replaced": deleted},
            )
        return session

    def update_tokens(self, session: Session, new_access: str, new_refresh: str) -> Session:
        try:
            session.access_token = new_access
            session.refresh_token = new_refresh
            self.db.commit()
            self.db.refresh(session)
            return session
        except SQLAlchemyError as e:
            self.db.rollback()
            raise format_error(e, "update_tokens-session_store") from e

    def destroy(self, session: Session) -> None:
        try:
            self.db.delete(session)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise format_error(e, "destroy-session_store") from e
