"""
Pydantic models for post data.

``PostCreate`` is the request body for creating a post; ``PostRead``
is returned for single posts and inside ``PostPage`` for listings.
"""

import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class PostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200, examples=["Hello"])
    content: str = Field(..., min_length=1, max_length=5000, examples=["First post!"])


class PostRead(BaseModel):
    """Schema for reading a post from the API."""

    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    content: str
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }


class PostPage(BaseModel):
    """One page of posts, newest first.

    ``total`` is the number of posts across all pages, so it stays
    accurate when ``page`` is past the end and ``data`` is empty.
    """

    data: List[PostRead]
    page: int
    limit: int
    total: int
