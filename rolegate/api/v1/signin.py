"""Public registration endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from rolegate.core.config import Settings, get_settings
from rolegate.core.database import get_db
from rolegate.core.responses import server_response
from rolegate.schemas.common import envelope_responses
from rolegate.schemas.user import UserCreate
from rolegate.services.users import create_user

router = APIRouter()


@router.post("", status_code=201, responses=envelope_responses(400, 409, success_status=201))
def register(
    body: UserCreate,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> JSONResponse:
    """
    Register a user. The very first account becomes SuperAdmin; afterwards
    self-registration always creates a Guest, whatever role_id is sent.
    """
    result = create_user(db, body.model_dump(), requester=None, bcrypt_rounds=settings.BCRYPT_ROUNDS)
    return server_response(result)
