"""ORM model for login sessions (one row per user per device/IP pair)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import relationship

from rolegate.models.base import Base


class Session(Base):
    """
    Active login session holding the current access/refresh token pair.

    The (user_id, ip_address, device_info) triple is unique: a new login from
    the same device/IP replaces the previous row.
    """

    __tablename__ = "sessions"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "ip_address", "device_info", name="uq_sessions_user_ip_device"
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    access_token = Column(Text, nullable=False, index=True)
    refresh_token = Column(Text, nullable=False)
    device_info = Column(String(512), nullable=True)
    ip_address = Column(String(255), nullable=True)
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

    user = relationship("User", back_populates="sessions")
