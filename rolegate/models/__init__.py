"""SQLAlchemy ORM models."""

from rolegate.models.base import Base
from rolegate.models.role import ROLE_NAMES, Role, RoleId
from rolegate.models.session import Session
from rolegate.models.user import User

__all__ = ["Base", "ROLE_NAMES", "Role", "RoleId", "Session", "User"]
