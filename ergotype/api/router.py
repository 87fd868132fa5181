"""Сборка всех роутеров API."""

from fastapi import APIRouter

from ergotype.api.routes import auth, health, keyboards

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, prefix="/api/auth", tags=["auth"])
api_router.include_router(keyboards.router, prefix="/api/keyboards", tags=["keyboards"])
