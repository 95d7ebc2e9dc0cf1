"""Uniform result envelope returned by services and rendered by the API layer."""

from dataclasses import dataclass
from typing import Any

from fastapi.responses import JSONResponse


@dataclass(frozen=True)
class ServiceResult:
    """
    Outcome of a business operation: HTTP-equivalent status plus the envelope fields.

    Business-rule failures (wrong password, role denial, missing entity) are
    returned as ServiceResult with success=False instead of being raised.
    """

    status: int
    success: bool
    message: str | None = None
    body: Any = None

    @classmethod
    def ok(cls, message: str, body: Any = None, status: int = 200) -> "ServiceResult":
        return cls(status=status, success=True, message=message, body=body)

    @classmethod
    def fail(cls, status: int, message: str) -> "ServiceResult":
        return cls(status=status, success=False, message=message)

    def envelope(self) -> dict[str, Any]:
        """Envelope dict; message and body are omitted when unset."""
        out: dict[str, Any] = {"success": self.success}
        if self.message is not None:
            out["message"] = self.message
        if self.body is not None:
            out["body"] = self.body
        return out


def server_response(
    result: ServiceResult, headers: dict[str, str] | None = None
) -> JSONResponse:
    """Render a ServiceResult as a JSON response with its status code."""
    return JSONResponse(status_code=result.status, content=result.envelope(), headers=headers)
