"""Self-service profile endpoints for any authenticated user."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from rolegate.api.v1.deps import AuthContext, require_guest
from rolegate.core.database import get_db
from rolegate.schemas.common import envelope_responses
from rolegate.schemas.user import UserUpdate
from rolegate.services.users import get_user, update_user

router = APIRouter()


@router.get("", responses=envelope_responses(401, 403, 503))
def get_self(
    ctx: Annotated[AuthContext, Depends(require_guest)],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    return ctx.respond(get_user(db, ctx.requester, ctx.user.id))


@router.patch("", responses=envelope_responses(400, 401, 403, 409, 503))
def update_self(
    body: UserUpdate,
    ctx: Annotated[AuthContext, Depends(require_guest)],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Update own profile. Guests may not change role or block state."""
    changes = body.model_dump(exclude_unset=True)
    return ctx.respond(update_user(db, ctx.requester, ctx.user.id, changes))
