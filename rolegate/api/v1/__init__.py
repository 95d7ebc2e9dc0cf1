"""API v1 routes."""

from fastapi import APIRouter

from rolegate.api.v1 import admin, guest, health, password, session, signin

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(signin.router, prefix="/signin", tags=["signin"])
router.include_router(session.router, prefix="/session", tags=["session"])
router.include_router(password.router, prefix="/password", tags=["password"])
router.include_router(guest.router, prefix="/guest", tags=["guest"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
