"""User CRUD gated by the role-permission engine."""

import logging
import math
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rolegate.core.errors import format_error
from rolegate.core.messages import AUTH, USER
from rolegate.core.responses import ServiceResult
from rolegate.core.security import hash_password
from rolegate.models import User
from rolegate.models.role import RoleId
from rolegate.services.permissions import (
    CreationVariant,
    Operation,
    creatable_roles,
    is_allowed,
    is_privileged_viewer,
    may_act_on_others,
    resolve_creation_variant,
    visible_roles,
)

logger = logging.getLogger(__name__)

PRIVILEGED_FIELDS = ("role_id", "is_blocked")
PROFILE_FIELDS = ("email", "first_name", "last_name")


@dataclass(frozen=True)
class Requester:
    """The authenticated caller as resolved from the user record (never from the token)."""

    id: int
    role_id: int


@dataclass(frozen=True)
class UserQuery:
    page: int = 1
    limit: int = 10
    name: str | None = None
    role_id: list[int] | None = None
    is_blocked: bool | None = None


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def find_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(func.lower(User.email) == normalize_email(email)).first()


def count_users(db: Session) -> int:
    return db.query(func.count(User.id)).scalar() or 0


def user_projection(user: User, privileged: bool) -> dict[str, Any]:
    """Fields shown to a viewer. Guests get name and email only."""
    data: dict[str, Any] = {
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
    }
    if privileged:
        data.update(
            {
                "id": user.id,
                "role_name": user.role_name,
                "is_blocked": user.is_blocked,
                "created_by": user.created_by,
                "updated_by": user.updated_by,
            }
        )
    return data


def list_item(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "role_id": user.role_id,
        "role_name": user.role_name,
        "is_blocked": user.is_blocked,
    }


def create_user(
    db: Session,
    data: dict[str, Any],
    requester: Requester | None = None,
    bcrypt_rounds: int = 10,
) -> ServiceResult:
    """
    Create a user. The role actually stored depends on the creation variant:
    first user is SuperAdmin, self-registration is Guest, privileged callers
    may grant what the permission matrix allows.
    """
    try:
        total = count_users(db)
        variant = resolve_creation_variant(
            has_authenticated_caller=requester is not None,
            caller_role=requester.role_id if requester else None,
            total_users=total,
        )
        if variant is CreationVariant.FORBIDDEN:
            return ServiceResult.fail(403, AUTH.UNAUTHORIZED)

        if variant is CreationVariant.FIRST_USER:
            role_id = int(RoleId.SUPER_ADMIN)
        elif variant is CreationVariant.SELF_REGISTRATION:
            role_id = int(RoleId.GUEST)
        else:
            role_id = int(data.get("role_id") or RoleId.GUEST)
            if role_id not in creatable_roles(variant) or not is_allowed(
                requester.role_id, requester.id, role_id, None, Operation.CREATE
            ):
                return ServiceResult.fail(403, AUTH.UNAUTHORIZED)

        email = normalize_email(data["email"])
        if find_by_email(db, email) is not None:
            return ServiceResult.fail(409, USER.EMAIL_EXIST)

        user = User(
            email=email,
            password=hash_password(data["password"], rounds=bcrypt_rounds),
            first_name=data["first_name"],
            last_name=data["last_name"],
            role_id=role_id,
            is_blocked=False,
            created_by=requester.id if requester else None,
            updated_by=requester.id if requester else None,
        )
        db.add(user)
        db.flush()
        if user.created_by is None:
            user.created_by = user.id
            user.updated_by = user.id
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as e:
        db.rollback()
        raise format_error(e, "create_user-user_service") from e

    logger.info(
        "User created",
        extra={"user_id": user.id, "role_id": role_id, "variant": variant.value},
    )
    body = user_projection(user, privileged=True)
    body["role_id"] = user.role_id
    return ServiceResult.ok(USER.CREATED, body, status=201)


def list_users(db: Session, requester: Requester, query: UserQuery) -> ServiceResult:
    """Paginated, filtered listing restricted to the roles the requester may see."""
    roles = visible_roles(requester.role_id)
    if not roles:
        return ServiceResult.fail(403, AUTH.UNAUTHORIZED)
    if query.role_id:
        roles = [r for r in roles if r in set(query.role_id)]

    page = max(query.page, 1)
    limit = max(query.limit, 1)
    try:
        q = db.query(User).filter(User.role_id.in_(roles))
        if query.is_blocked is not None:
            q = q.filter(User.is_blocked.is_(query.is_blocked))
        if query.name:
            pattern = f"%{query.name.strip()}%"
            q = q.filter(or_(User.first_name.ilike(pattern), User.last_name.ilike(pattern)))
        total = q.count()
        users = q.order_by(User.id).offset((page - 1) * limit).limit(limit).all()
    except SQLAlchemyError as e:
        raise format_error(e, "list_users-user_service") from e

    return ServiceResult.ok(
        USER.FOUND,
        {
            "users": [list_item(u) for u in users],
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": math.ceil(total / limit),
        },
    )


def get_user(db: Session, requester: Requester, target_id: int) -> ServiceResult:
    """Fetch one user; the projection depends on whether the requester is privileged."""
    if requester.id != target_id and not may_act_on_others(requester.role_id, Operation.VIEW):
        return ServiceResult.fail(403, AUTH.UNAUTHORIZED)
    try:
        target = db.get(User, target_id)
    except SQLAlchemyError as e:
        raise format_error(e, "get_user-user_service") from e
    if target is None:
        return ServiceResult.fail(404, USER.NOT_FOUND)
    if not is_allowed(requester.role_id, requester.id, target.role_id, target.id, Operation.VIEW):
        return ServiceResult.fail(403, AUTH.UNAUTHORIZED)
    return ServiceResult.ok(
        USER.FOUND, user_projection(target, privileged=is_privileged_viewer(requester.role_id))
    )


def update_user(
    db: Session, requester: Requester, target_id: int, changes: dict[str, Any]
) -> ServiceResult:
    """
    Apply profile and (when permitted) role/block changes to a user.

    Profile fields need UPDATE; role_id or is_blocked additionally need
    UPDATE_PRIVILEGED, and a new role_id needs ASSIGN_ROLE for that role.
    Storage is untouched when any check fails.
    """
    if requester.id != target_id and not may_act_on_others(requester.role_id, Operation.UPDATE):
        return ServiceResult.fail(403, AUTH.UNAUTHORIZED)

    changes = {
        k: v
        for k, v in changes.items()
        if k in PROFILE_FIELDS + PRIVILEGED_FIELDS and v is not None
    }
    try:
        target = db.get(User, target_id)
        if target is None:
            return ServiceResult.fail(404, USER.NOT_FOUND)

        if not is_allowed(
            requester.role_id, requester.id, target.role_id, target.id, Operation.UPDATE
        ):
            return ServiceResult.fail(403, AUTH.UNAUTHORIZED)
        if any(field in changes for field in PRIVILEGED_FIELDS) and not is_allowed(
            requester.role_id, requester.id, target.role_id, target.id, Operation.UPDATE_PRIVILEGED
        ):
            return ServiceResult.fail(403, AUTH.UNAUTHORIZED)
        if "role_id" in changes and not is_allowed(
            requester.role_id, requester.id, changes["role_id"], target.id, Operation.ASSIGN_ROLE
        ):
            return ServiceResult.fail(403, AUTH.UNAUTHORIZED)

        if "email" in changes:
            changes["email"] = normalize_email(changes["email"])
            if changes["email"] != target.email:
                existing = find_by_email(db, changes["email"])
                if existing is not None and existing.id != target.id:
                    return ServiceResult.fail(409, USER.EMAIL_EXIST)

        for field, value in changes.items():
            setattr(target, field, value)
        target.updated_by = requester.id
        db.commit()
        db.refresh(target)
    except SQLAlchemyError as e:
        db.rollback()
        raise format_error(e, "update_user-user_service") from e

    logger.info(
        "User updated",
        extra={"user_id": target.id, "updated_by": requester.id, "fields": sorted(changes)},
    )
    return ServiceResult.ok(
        USER.UPDATED, user_projection(target, privileged=is_privileged_viewer(requester.role_id))
    )
