"""
Top-level router.

Aggregates the domain routers.  When new endpoints are added, include
their routers here.
"""

from fastapi import APIRouter

from .endpoints import auth, health, posts, users

router = APIRouter()

router.include_router(health.router, tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(posts.router, prefix="/posts", tags=["posts"])
