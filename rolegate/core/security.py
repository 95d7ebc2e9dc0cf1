"""Password hashing and JWT issuance/verification for the three token classes."""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

if TYPE_CHECKING:
    from rolegate.core.config import Settings

# Password length bounds enforced by request schemas.
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 32


# Compared against when the account does not exist; built at the configured
# cost so a missing user costs the same bcrypt work as a wrong password.
@lru_cache
def _dummy_hash(rounds: int) -> str:
    return bcrypt.hashpw(b"rolegate-dummy-password", bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def hash_password(plain_password: str, rounds: int = 10) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None, rounds: int = 10) -> bool:
    """
    Verify a plain password against a stored hash. A missing hash never matches,
    but still runs a bcrypt check at cost ``rounds``.
    """
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        matched = bcrypt.checkpw(pw_bytes, (hashed or _dummy_hash(rounds)).encode("utf-8"))
    except (ValueError, TypeError):
        return False
    return matched and hashed is not None


class ExpiredOrInvalidToken(Exception):
    """Raised when a token fails signature, structure or expiry checks."""

    def __init__(self, message: str = "Invalid or expired token", expired: bool = False) -> None:
        self.message = message
        self.expired = expired
        super().__init__(message)


@dataclass(frozen=True)
class TokenUser:
    """Identity embedded in every token. Role is never part of it."""

    id: int
    display_name: str


def token_user_for(user: Any) -> TokenUser:
    """Build the token identity from a User row (display name is the first name)."""
    return TokenUser(id=int(user.id), display_name=user.first_name or "")


class TokenCodec:
    """
    Signs and verifies access, refresh and reset tokens.

    Each class has its own secret and lifetime, so a token of one class never
    verifies as another.
    """

    def __init__(self, settings: "Settings") -> None:
        self.algorithm = settings.JWT_ALGORITHM
        self.access_secret = settings.ACCESS_TOKEN_SECRET.get_secret_value()
        self.refresh_secret = settings.REFRESH_TOKEN_SECRET.get_secret_value()
        self.reset_secret = settings.RESET_TOKEN_SECRET.get_secret_value()
        self.access_ttl = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        self.refresh_ttl = timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES)
        self.reset_ttl = timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)

    def _issue(self, user: TokenUser, secret: str, ttl: timedelta) -> str:
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(user.id),
            "name": user.display_name,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def issue_access(self, user: TokenUser) -> str:
        return self._issue(user, self.access_secret, self.access_ttl)

    def issue_refresh(self, user: TokenUser) -> str:
        return self._issue(user, self.refresh_secret, self.refresh_ttl)

    def issue_reset(self, user: TokenUser) -> str:
        return self._issue(user, self.reset_secret, self.reset_ttl)

    def verify(self, token: str | None, secret: str) -> TokenUser:
        """
        Decode and validate a token against ``secret``; return the embedded identity.
        Raises ExpiredOrInvalidToken (expired=True only for a well-signed, expired token).
        """
        if not token:
            raise ExpiredOrInvalidToken("Token missing")
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredOrInvalidToken("Token expired", expired=True) from e
        except jwt.PyJWTError as e:
            raise ExpiredOrInvalidToken() from e
        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError) as e:
            raise ExpiredOrInvalidToken("Invalid token payload") from e
        return TokenUser(id=user_id, display_name=str(payload.get("name") or ""))

    def verify_access(self, token: str | None) -> TokenUser:
        return self.verify(token, self.access_secret)

    def verify_refresh(self, token: str | None) -> TokenUser:
        return self.verify(token, self.refresh_secret)

    def verify_reset(self, token: str | None) -> TokenUser:
        return self.verify(token, self.reset_secret)
