"""
FastAPI dependencies shared by the endpoint modules.

The application factory stores the settings, entity store, token
service and clock on ``app.state``; these helpers build the services
from them for each request.
"""

from fastapi import Request

from ..services.post_service import PostService
from ..services.user_service import UserService


def get_user_service(request: Request) -> UserService:
    state = request.app.state
    return UserService(
        state.store,
        state.tokens,
        hash_iterations=state.settings.password_hash_iterations,
        clock=state.clock,
    )


def get_post_service(request: Request) -> PostService:
    return PostService(request.app.state.store, clock=request.app.state.clock)
