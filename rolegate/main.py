"""FastAPI application entrypoint. No business logic; only wiring and exception handlers."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from rolegate.api.v1 import router as v1_router
from rolegate.core.config import settings
from rolegate.core.errors import ServiceError, format_error
from rolegate.core.messages import GENERAL
from rolegate.core.responses import ServiceResult, server_response

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Rolegate API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)


def _validation_message(exc: RequestValidationError) -> str:
    """First validation error as a readable sentence."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    msg = str(first.get("msg", "Invalid request"))
    # pydantic prefixes messages raised from validators with "Value error, "
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    return f"{'.'.join(loc)}: {msg}" if loc else msg


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return server_response(ServiceResult.fail(400, _validation_message(exc)))


@app.exception_handler(HTTPException)
async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    if exc.status_code == 404:
        message = GENERAL.NOT_FOUND
    elif isinstance(exc.detail, str):
        message = exc.detail
    else:
        message = GENERAL.FAILURE
    return server_response(ServiceResult.fail(exc.status_code, message), headers=exc.headers)


@app.exception_handler(ServiceError)
async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    format_error(exc, f"{request.method} {request.url.path}")
    return server_response(ServiceResult.fail(exc.status, exc.message))


@app.exception_handler(Exception)
async def handle_uncaught(request: Request, exc: Exception) -> JSONResponse:
    format_error(exc, f"{request.method} {request.url.path}")
    return server_response(ServiceResult.fail(500, GENERAL.SERVER_ERROR))


app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Rolegate API"}
