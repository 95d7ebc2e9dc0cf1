"""Wrapping of unexpected errors into externally safe service errors, logged once."""

import logging

from rolegate.core.messages import GENERAL

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """
    Unexpected failure surfaced to the client with a generic message.

    The original exception is kept on ``cause`` for logs only; ``logged``
    records that it has already been written so outer layers do not repeat it.
    """

    def __init__(
        self,
        message: str = GENERAL.FAILURE,
        status: int = 500,
        location: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.message = message
        self.status = status
        self.location = location
        self.cause = cause
        self.logged = False
        super().__init__(message)


def format_error(
    error: BaseException,
    location: str,
    status: int = 500,
    message: str = GENERAL.FAILURE,
) -> ServiceError:
    """
    Return a ServiceError for ``error``, logging the original exactly once.

    An error that is already a ServiceError keeps its status and message.
    """
    if isinstance(error, ServiceError):
        wrapped = error
        if wrapped.location is None:
            wrapped.location = location
    else:
        wrapped = ServiceError(message=message, status=status, location=location, cause=error)

    if not wrapped.logged:
        original = wrapped.cause or wrapped
        logger.error(
            "Error in %s: %s",
            location,
            original,
            exc_info=(type(original), original, original.__traceback__),
            extra={"error_location": location, "error_type": type(original).__name__},
        )
        wrapped.logged = True
    return wrapped
