"""Master API router, mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from vibeframe.api import canvas, conversations, health, turns

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(conversations.router)
api_router.include_router(turns.router)
api_router.include_router(canvas.router)
