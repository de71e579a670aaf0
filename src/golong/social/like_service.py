"""Likes on public streaks. One like per (streak, user)."""

from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from golong.db.models import Like, Profile
from golong.errors import Conflict, Forbidden, NotFound, ValidationFailed
from golong.social.access import require_public_streak

logger = structlog.get_logger()


async def get_user_like(db: AsyncSession, streak_id: str, user_id: str) -> Like | None:
    result = await db.execute(
        select(Like).where(Like.streak_id == streak_id, Like.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def list_likes(db: AsyncSession, streak_id: str) -> list[tuple[Like, Profile]]:
    await require_public_streak(db, streak_id)
    result = await db.execute(
        select(Like, Profile)
        .join(Profile, Profile.id == Like.user_id)
        .where(Like.streak_id == streak_id)
        .order_by(Like.created_at.desc())
    )
    return [(row.Like, row.Profile) for row in result]


async def check_user_like(db: AsyncSession, streak_id: str, user_id: str) -> Like | None:
    """The caller's like on the streak, if any."""
    await require_public_streak(db, streak_id)
    return await get_user_like(db, streak_id, user_id)


async def like_streak(db: AsyncSession, streak_id: str, user_id: str) -> Like:
    await require_public_streak(db, streak_id)
    if await get_user_like(db, streak_id, user_id) is not None:
        raise Conflict("Already liked this streak")

    like = Like(streak_id=streak_id, user_id=user_id)
    db.add(like)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise Conflict("Already liked this streak") from e

    logger.info("streak_liked", streak_id=streak_id, user_id=user_id)
    return like


async def unlike_streak(
    db: AsyncSession,
    user_id: str,
    streak_id: str | None = None,
    like_id: str | None = None,
) -> None:
    """Remove a like, addressed either by streak or by like id."""
    if like_id is not None:
        result = await db.execute(select(Like).where(Like.id == like_id))
        like = result.scalar_one_or_none()
        if like is None:
            raise NotFound("Like not found")
        await require_public_streak(db, like.streak_id)
        if like.user_id != user_id:
            raise Forbidden("You can only remove your own likes")
    elif streak_id is not None:
        await require_public_streak(db, streak_id)
        like = await get_user_like(db, streak_id, user_id)
        if like is None:
            raise NotFound("Like not found")
    else:
        raise ValidationFailed("Either streak_id or like_id is required")

    liked_streak_id = like.streak_id
    await db.delete(like)
    await db.flush()
    logger.info("streak_unliked", streak_id=liked_streak_id, user_id=user_id)
