"""Comments on public streaks."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from golong.db.models import Comment, Profile
from golong.errors import Forbidden, NotFound, ValidationFailed
from golong.social.access import require_public_streak

logger = structlog.get_logger()


def _clean(content: str) -> str:
    content = content.strip()
    if not content:
        raise ValidationFailed("Comment cannot be empty")
    return content


async def list_comments(
    db: AsyncSession,
    streak_id: str,
    limit: int = 50,
    offset: int = 0,
) -> list[tuple[Comment, Profile]]:
    """Comments with their authors, newest first."""
    await require_public_streak(db, streak_id)
    result = await db.execute(
        select(Comment, Profile)
        .join(Profile, Profile.id == Comment.user_id)
        .where(Comment.streak_id == streak_id)
        .order_by(Comment.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    return [(row.Comment, row.Profile) for row in result]


async def create_comment(db: AsyncSession, streak_id: str, user_id: str, content: str) -> Comment:
    await require_public_streak(db, streak_id)
    comment = Comment(streak_id=streak_id, user_id=user_id, content=_clean(content))
    db.add(comment)
    await db.flush()
    logger.info("comment_created", streak_id=streak_id, user_id=user_id, comment_id=comment.id)
    return comment


async def _require_own_comment(db: AsyncSession, comment_id: str, user_id: str) -> Comment:
    result = await db.execute(select(Comment).where(Comment.id == comment_id))
    comment = result.scalar_one_or_none()
    if comment is None:
        raise NotFound("Comment not found")
    await require_public_streak(db, comment.streak_id)
    if comment.user_id != user_id:
        raise Forbidden("You can only modify your own comments")
    return comment


async def update_comment(db: AsyncSession, comment_id: str, user_id: str, content: str) -> Comment:
    comment = await _require_own_comment(db, comment_id, user_id)
    comment.content = _clean(content)
    comment.updated_at = datetime.now(timezone.utc)
    await db.flush()
    return comment


async def delete_comment(db: AsyncSession, comment_id: str, user_id: str) -> None:
    comment = await _require_own_comment(db, comment_id, user_id)
    await db.delete(comment)
    await db.flush()
    logger.info("comment_deleted", comment_id=comment_id, user_id=user_id)
