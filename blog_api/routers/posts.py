"""Post CRUD endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.db import get_session
from blog_api.models.post import (
    MessageResponse,
    Post,
    PostInput,
    PostListResponse,
    PostResponse,
)
from blog_api.services import post_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])


def _parse_post_id(raw: str) -> int:
    """Parse a path ID; non-integers are a client error, not a 404.

    Only plain ASCII digits are accepted; ``int()`` alone would also take
    signs, surrounding whitespace, underscores and non-ASCII digits.
    """
    if not raw.isascii() or not raw.isdigit():
        raise HTTPException(status_code=400, detail="Invalid post ID")
    post_id = int(raw)
    if post_id < 1:
        raise HTTPException(status_code=400, detail="Invalid post ID")
    return post_id


@router.get("", response_model=PostListResponse)
async def list_posts(session: AsyncSession = Depends(get_session)):
    """List all posts, newest first."""
    try:
        records = await post_store.list_posts(session)
    except SQLAlchemyError as e:
        logger.error("Error fetching posts: %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch posts")
    posts = [Post.model_validate(r) for r in records]
    return PostListResponse(data=posts, count=len(posts))


@router.post("", response_model=PostResponse, status_code=201)
async def create_post(payload: PostInput, session: AsyncSession = Depends(get_session)):
    """Create a post. ``content_html`` is rendered from ``content`` before storing."""
    try:
        record = await post_store.create_post(session, payload)
    except SQLAlchemyError as e:
        logger.error("Error creating post: %s", e)
        raise HTTPException(status_code=500, detail="Failed to create post")
    return PostResponse(
        data=Post.model_validate(record), message="Post created successfully"
    )


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: str, session: AsyncSession = Depends(get_session)):
    """Get a single post. Served as stored; nothing is re-rendered."""
    pid = _parse_post_id(post_id)
    try:
        record = await post_store.get_post(session, pid)
    except SQLAlchemyError as e:
        logger.error("Error fetching post %d: %s", pid, e)
        raise HTTPException(status_code=500, detail="Failed to fetch post")
    if record is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return PostResponse(data=Post.model_validate(record))


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str, payload: PostInput, session: AsyncSession = Depends(get_session)
):
    """Replace a post's title and content, re-rendering ``content_html``."""
    pid = _parse_post_id(post_id)
    try:
        record = await post_store.update_post(session, pid, payload)
    except SQLAlchemyError as e:
        logger.error("Error updating post %d: %s", pid, e)
        raise HTTPException(status_code=500, detail="Failed to update post")
    if record is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return PostResponse(
        data=Post.model_validate(record), message="Post updated successfully"
    )


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(post_id: str, session: AsyncSession = Depends(get_session)):
    """Delete a post."""
    pid = _parse_post_id(post_id)
    try:
        deleted = await post_store.delete_post(session, pid)
    except SQLAlchemyError as e:
        logger.error("Error deleting post %d: %s", pid, e)
        raise HTTPException(status_code=500, detail="Failed to delete post")
    if not deleted:
        raise HTTPException(status_code=404, detail="Post not found")
    return MessageResponse(message="Post deleted successfully")
