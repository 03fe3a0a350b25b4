"""
API Version 1 Router.

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from diary.backend.api.v1.endpoints import auth, notes

router = APIRouter()

# Auth endpoints
router.include_router(auth.router, prefix="/auth", tags=["auth"])

# Notes endpoints
router.include_router(notes.router, prefix="/notes", tags=["notes"])
