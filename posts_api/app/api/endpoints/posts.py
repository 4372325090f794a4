"""
Post endpoints.

Reading and listing posts is public.  Creating a post requires a
bearer token and makes the caller its owner; deleting a post requires
the owner's token.
"""

from fastapi import APIRouter, Depends, Query, status

from ...core.security import TokenIdentity, get_current_identity
from ...schemas.post import PostCreate, PostPage, PostRead
from ...services.post_service import PostService
from ..deps import get_post_service

router = APIRouter()


@router.post("", response_model=PostRead, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate,
    identity: TokenIdentity = Depends(get_current_identity),
    service: PostService = Depends(get_post_service),
) -> PostRead:
    return await service.create_post(payload, identity)


@router.get("", response_model=PostPage)
async def list_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    service: PostService = Depends(get_post_service),
) -> PostPage:
    """List posts newest first.

    - **page** — 1-based page number.
    - **limit** — posts per page (at least 1).
    """
    return await service.list_posts(page=page, limit=limit)


@router.get("/{post_id}", response_model=PostRead)
async def get_post(post_id: str, service: PostService = Depends(get_post_service)) -> PostRead:
    return await service.get_post(post_id)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: str,
    identity: TokenIdentity = Depends(get_current_identity),
    service: PostService = Depends(get_post_service),
) -> None:
    """Delete a post.  404 if it does not exist, 403 if the caller is not the owner."""
    await service.delete_post(post_id, identity)
    return None
