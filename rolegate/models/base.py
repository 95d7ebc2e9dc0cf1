"""Declarative base shared by roles, users and sessions."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
