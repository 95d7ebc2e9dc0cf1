"""User administration endpoints (Admin and SuperAdmin)."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from rolegate.api.v1.deps import AuthContext, require_admin
from rolegate.core.config import Settings, get_settings
from rolegate.core.database import get_db
from rolegate.schemas.common import envelope_responses
from rolegate.schemas.user import UserCreate, UserSearch, UserUpdate
from rolegate.services.users import (
    UserQuery,
    create_user,
    get_user,
    list_users,
    update_user,
)

router = APIRouter()


@router.get("", responses=envelope_responses(401, 403, 503))
def get_self(
    ctx: Annotated[AuthContext, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    return ctx.respond(get_user(db, ctx.requester, ctx.user.id))


@router.patch("", responses=envelope_responses(400, 401, 403, 409, 503))
def update_self(
    body: UserUpdate,
    ctx: Annotated[AuthContext, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    changes = body.model_dump(exclude_unset=True)
    return ctx.respond(update_user(db, ctx.requester, ctx.user.id, changes))


@router.post("/search", responses=envelope_responses(400, 401, 403, 503))
def search_users(
    ctx: Annotated[AuthContext, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    body: UserSearch | None = None,
) -> JSONResponse:
    """
    Paginated user search. Admins never see SuperAdmin rows, even when
    filtering by role_id=1.
    """
    body = body or UserSearch()
    query = UserQuery(
        page=body.page,
        limit=body.limit,
        name=body.name,
        role_id=body.role_ids(),
        is_blocked=body.is_blocked,
    )
    return ctx.respond(list_users(db, ctx.requester, query))


@router.get("/users/{user_id}", responses=envelope_responses(401, 403, 404, 503))
def get_user_by_id(
    user_id: int,
    ctx: Annotated[AuthContext, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    return ctx.respond(get_user(db, ctx.requester, user_id))


@router.patch(
    "/users/{user_id}", responses=envelope_responses(400, 401, 403, 404, 409, 503)
)
def update_user_by_id(
    user_id: int,
    body: UserUpdate,
    ctx: Annotated[AuthContext, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """
    Update another user. Admins may block Guests and change their role (never to
    SuperAdmin); only SuperAdmin may touch SuperAdmin accounts or block other Admins.
    """
    changes = body.model_dump(exclude_unset=True)
    return ctx.respond(update_user(db, ctx.requester, user_id, changes))


@router.post(
    "/users",
    status_code=201,
    responses=envelope_responses(400, 401, 403, 409, 503, success_status=201),
)
def create_user_as_admin(
    body: UserCreate,
    ctx: Annotated[AuthContext, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> JSONResponse:
    """Create a user. Admins may create Guests only; SuperAdmin may create any role."""
    result = create_user(
        db, body.model_dump(), requester=ctx.requester, bcrypt_rounds=settings.BCRYPT_ROUNDS
    )
    return ctx.respond(result)
