"""
Business logic for posts.

Posts are created by an authenticated user, who becomes the owner, and
are immutable afterwards.  Anyone may read or list posts; only the
owner may delete one.
"""

import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

from ..core.errors import NotFound
from ..core.security import TokenIdentity, ensure_owner
from ..core.store import EntityStore, Post, utc_now
from ..schemas.post import PostCreate, PostPage, PostRead

logger = logging.getLogger(__name__)


def _parse_id(post_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(post_id)
    except ValueError:
        return None


class PostService:
    """Create, read, list and delete posts."""

    def __init__(self, store: EntityStore, clock: Callable[[], datetime] = utc_now) -> None:
        self.store = store
        self._clock = clock

    async def create_post(self, data: PostCreate, identity: TokenIdentity) -> PostRead:
        post = Post(
            id=uuid.uuid4(),
            user_id=identity.user_id,
            title=data.title,
            content=data.content,
            created_at=self._clock(),
        )
        self.store.posts.insert(post.id, post)
        logger.info("Post created: %s by user %s", post.id, identity.user_id)
        return PostRead.model_validate(post)

    async def list_posts(self, page: int = 1, limit: int = 10) -> PostPage:
        """Return one page of posts ordered by ``created_at``, newest first.

        Posts with identical timestamps come back in no particular
        order.  A page past the end is empty but still reports the
        full ``total``.
        """
        posts = sorted(self.store.posts.scan(), key=lambda p: p.created_at, reverse=True)
        total = len(posts)
        start = (page - 1) * limit
        window = posts[start:start + limit] if start < total else []
        return PostPage(
            data=[PostRead.model_validate(p) for p in window],
            page=page,
            limit=limit,
            total=total,
        )

    def _get(self, post_id: str) -> Post:
        key = _parse_id(post_id)
        post = self.store.posts.get(key) if key is not None else None
        if post is None:
            raise NotFound()
        return post

    async def get_post(self, post_id: str) -> PostRead:
        """Fetch one post; unknown or malformed ids raise ``NotFound``."""
        return PostRead.model_validate(self._get(post_id))

    async def delete_post(self, post_id: str, identity: TokenIdentity) -> None:
        """Delete a post owned by ``identity``.

        Raises ``NotFound`` if the post does not exist (or was deleted
        concurrently) and ``Forbidden`` if the caller is not the owner.
        """
        post = self._get(post_id)
        ensure_owner(post, identity)
        if not self.store.posts.remove_if(post.id, post):
            raise NotFound()
        logger.info("Post deleted: %s by user %s", post.id, identity.user_id)
