"""Per-request token resolution: accept a valid access token or renew it once from a refresh token."""

from dataclasses import dataclass
from enum import Enum

from rolegate.core.security import ExpiredOrInvalidToken, TokenCodec, TokenUser


class TokenState(str, Enum):
    VALID = "valid"
    RENEWED = "renewed"


class InvalidOrExpiredToken(Exception):
    """Terminal failure: the caller must log in again."""

    def __init__(self, message: str = "Invalid or expired token") -> None:
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class TokenResolution:
    """Resolved identity; new_access/new_refresh are set only when state is RENEWED."""

    state: TokenState
    user: TokenUser
    new_access: str | None = None
    new_refresh: str | None = None

    @property
    def renewed(self) -> bool:
        return self.state is TokenState.RENEWED


def resolve_tokens(
    codec: TokenCodec, access_token: str | None, refresh_token: str | None
) -> TokenResolution:
    """
    Single verify-then-maybe-renew pass.

    - access verifies: VALID, no renewal.
    - access expired and refresh verifies: RENEWED with a fresh access+refresh pair.
    - anything else (bad signature, malformed, refresh missing/expired/invalid):
      InvalidOrExpiredToken.

    The caller persists the rotation and surfaces the new tokens; the renewed
    access token is not examined again.
    """
    try:
        user = codec.verify_access(access_token)
        return TokenResolution(state=TokenState.VALID, user=user)
    except ExpiredOrInvalidToken as e:
        if not e.expired:
            raise InvalidOrExpiredToken() from e

    if not refresh_token:
        raise InvalidOrExpiredToken()
    try:
        user = codec.verify_refresh(refresh_token)
    except ExpiredOrInvalidToken as e:
        raise InvalidOrExpiredToken() from e

    return TokenResolution(
        state=TokenState.RENEWED,
        user=user,
        new_access=codec.issue_access(user),
        new_refresh=codec.issue_refresh(user),
    )
