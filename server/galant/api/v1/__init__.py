"""API v1 routers."""

from fastapi import APIRouter

from galant.api.v1 import annotations, comments, health, music_sources, pieces, schemata, sessions, users

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(pieces.router, prefix="/pieces", tags=["pieces"])
api_router.include_router(annotations.router, prefix="/pieces", tags=["schema annotations"])
api_router.include_router(comments.router, prefix="/pieces", tags=["comments"])
api_router.include_router(schemata.router, prefix="/schemata", tags=["schemata"])
api_router.include_router(music_sources.router, prefix="/music-sources", tags=["music sources"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["score sessions"])
