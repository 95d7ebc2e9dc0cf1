"""
Role-permission engine: authorization decisions for user operations.

Decisions are read from PERMISSION_MATRIX, keyed by
(requester_role, target_role, operation). For CREATE and ASSIGN_ROLE the
target role is the role being granted; for the other operations it is the
current role of the target user (or of the listed rows, for LIST).
"""

from enum import Enum

from rolegate.models.role import RoleId


class Operation(str, Enum):
    CREATE = "create"
    LIST = "list"
    VIEW = "view"
    UPDATE = "update"
    # Changing role_id or is_blocked on the target.
    UPDATE_PRIVILEGED = "update_privileged"
    ASSIGN_ROLE = "assign_role"


class Access(str, Enum):
    ALLOW = "allow"
    SELF_ONLY = "self_only"
    DENY = "deny"


class CreationVariant(str, Enum):
    """Request shape for user creation, chosen from who is asking and how many users exist."""

    FIRST_USER = "first_user"
    SELF_REGISTRATION = "self_registration"
    ADMIN_CREATION = "admin_creation"
    SUPER_ADMIN_CREATION = "super_admin_creation"
    FORBIDDEN = "forbidden"


SA, AD, GU = RoleId.SUPER_ADMIN, RoleId.ADMIN, RoleId.GUEST
A, S, D = Access.ALLOW, Access.SELF_ONLY, Access.DENY

PERMISSION_MATRIX: dict[tuple[RoleId, RoleId, Operation], Access] = {
    # requester SuperAdmin: unrestricted
    **{(SA, target, op): A for target in RoleId for op in Operation},
    # requester Admin
    (AD, SA, Operation.CREATE): D,
    (AD, AD, Operation.CREATE): D,
    (AD, GU, Operation.CREATE): A,
    (AD, SA, Operation.LIST): D,
    (AD, AD, Operation.LIST): A,
    (AD, GU, Operation.LIST): A,
    (AD, SA, Operation.VIEW): D,
    (AD, AD, Operation.VIEW): A,
    (AD, GU, Operation.VIEW): A,
    (AD, SA, Operation.UPDATE): D,
    (AD, AD, Operation.UPDATE): A,
    (AD, GU, Operation.UPDATE): A,
    (AD, SA, Operation.UPDATE_PRIVILEGED): D,
    (AD, AD, Operation.UPDATE_PRIVILEGED): S,
    (AD, GU, Operation.UPDATE_PRIVILEGED): A,
    (AD, SA, Operation.ASSIGN_ROLE): D,
    (AD, AD, Operation.ASSIGN_ROLE): A,
    (AD, GU, Operation.ASSIGN_ROLE): A,
    # requester Guest: own profile only
    **{(GU, target, op): D for target in RoleId for op in Operation},
    (GU, GU, Operation.VIEW): S,
    (GU, GU, Operation.UPDATE): S,
}


def access_for(requester_role: int, target_role: int, operation: Operation) -> Access:
    """Matrix lookup; unknown roles are denied."""
    try:
        key = (RoleId(requester_role), RoleId(target_role), operation)
    except ValueError:
        return Access.DENY
    return PERMISSION_MATRIX.get(key, Access.DENY)


def is_allowed(
    requester_role: int,
    requester_id: int | None,
    target_role: int,
    target_id: int | None,
    operation: Operation,
) -> bool:
    """Pure decision for one requester/target pair."""
    access = access_for(requester_role, target_role, operation)
    if access is Access.ALLOW:
        return True
    if access is Access.SELF_ONLY:
        return requester_id is not None and requester_id == target_id
    return False


def may_act_on_others(requester_role: int, operation: Operation) -> bool:
    """True when some target role other than the requester itself is reachable for ``operation``."""
    return any(
        access_for(requester_role, target, operation) is Access.ALLOW for target in RoleId
    )


def visible_roles(requester_role: int) -> list[int]:
    """Roles whose rows the requester may list; empty means listing is forbidden."""
    return [
        int(target)
        for target in RoleId
        if access_for(requester_role, target, Operation.LIST) is Access.ALLOW
    ]


def is_privileged_viewer(requester_role: int) -> bool:
    """Privileged viewers (Admin and above) see role, block state and audit fields."""
    return may_act_on_others(requester_role, Operation.VIEW)


def resolve_creation_variant(
    has_authenticated_caller: bool,
    caller_role: int | None,
    total_users: int,
) -> CreationVariant:
    """
    Pick the creation request shape.

    An empty system always yields FIRST_USER (forced SuperAdmin). Without an
    authenticated caller a non-empty system yields SELF_REGISTRATION (forced
    Guest). Authenticated callers get the variant matching what their role may create.
    """
    if total_users == 0:
        return CreationVariant.FIRST_USER
    if not has_authenticated_caller or caller_role is None:
        return CreationVariant.SELF_REGISTRATION
    if access_for(caller_role, SA, Operation.CREATE) is Access.ALLOW:
        return CreationVariant.SUPER_ADMIN_CREATION
    if may_act_on_others(caller_role, Operation.CREATE):
        return CreationVariant.ADMIN_CREATION
    return CreationVariant.FORBIDDEN


def creatable_roles(variant: CreationVariant) -> list[int]:
    """Roles a request of the given variant may ask for."""
    if variant is CreationVariant.FIRST_USER:
        return [int(SA)]
    if variant is CreationVariant.SELF_REGISTRATION:
        return [int(GU)]
    if variant is CreationVariant.SUPER_ADMIN_CREATION:
        return [int(r) for r in RoleId]
    if variant is CreationVariant.ADMIN_CREATION:
        return [int(r) for r in RoleId if access_for(AD, r, Operation.CREATE) is Access.ALLOW]
    return []
