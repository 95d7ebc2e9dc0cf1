"""ORM model for the static role reference table."""

from enum import IntEnum

from sqlalchemy import Column, DateTime, Integer, String, func

from rolegate.models.base import Base


class RoleId(IntEnum):
    """Role hierarchy; a smaller id carries more privilege."""

    SUPER_ADMIN = 1
    ADMIN = 2
    GUEST = 3


ROLE_NAMES: dict[int, str] = {
    RoleId.SUPER_ADMIN: "SuperAdmin",
    RoleId.ADMIN: "Admin",
    RoleId.GUEST: "Guest",
}


class Role(Base):
    """Role definition referenced by users.role_id. Seeded, never created at runtime."""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(50), nullable=False, unique=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
