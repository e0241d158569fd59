"""Post persistence: CRUD over the ``posts`` table.

Every write computes ``content_html`` before touching the row, commits one
transaction, and re-reads the row so callers get exactly what was stored.
Database errors roll the transaction back and propagate as
``SQLAlchemyError``.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.models.post import PostInput
from blog_api.models.tables import PostRecord
from blog_api.services.content_pipeline import process_content

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def list_posts(session: AsyncSession) -> list[PostRecord]:
    """Return all posts, newest first."""
    result = await session.execute(
        select(PostRecord).order_by(PostRecord.created_at.desc(), PostRecord.id.desc())
    )
    return list(result.scalars().all())


async def get_post(session: AsyncSession, post_id: int) -> PostRecord | None:
    return await session.get(PostRecord, post_id)


async def create_post(session: AsyncSession, data: PostInput) -> PostRecord:
    """Insert a new post with its rendered HTML."""
    content_html = process_content(data.content)
    now = _now()
    record = PostRecord(
        title=data.title,
        content=data.content,
        content_html=content_html,
        created_at=now,
        updated_at=now,
    )
    session.add(record)
    try:
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        raise
    await session.refresh(record)
    logger.info("Created post %d", record.id)
    return record


async def update_post(
    session: AsyncSession, post_id: int, data: PostInput
) -> PostRecord | None:
    """Replace title and content of an existing post.

    Returns None if the post does not exist. ``created_at`` is untouched;
    ``updated_at`` is refreshed.
    """
    record = await session.get(PostRecord, post_id)
    if record is None:
        return None

    # Render first so a failure leaves the stored pair untouched
    content_html = process_content(data.content)

    record.title = data.title
    record.content = data.content
    record.content_html = content_html
    record.updated_at = _now()
    try:
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        raise
    await session.refresh(record)
    logger.info("Updated post %d", record.id)
    return record


async def delete_post(session: AsyncSession, post_id: int) -> bool:
    """Delete a post. Returns False if it did not exist."""
    record = await session.get(PostRecord, post_id)
    if record is None:
        return False
    await session.delete(record)
    try:
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        raise
    logger.info("Deleted post %d", post_id)
    return True
