"""Participation rules: join, leave, pin, unpin.

Rules:
- Only public streaks can be joined, and never by their own creator
- At most one active participation per (user, streak); leaving is a soft delete
- Creators of private streaks cannot leave them, they delete them instead
- The last active participant leaving a public streak starts the cleanup grace window
- A user may pin at most ``max_pinned_streaks``; pinning one more evicts the oldest pin
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from golong.config import get_settings
from golong.db.models import Participation, ParticipationStatus
from golong.errors import Conflict, Forbidden, NotFound, ValidationFailed
from golong.streaks.service import (
    count_active_participants,
    get_active_participation,
    require_streak,
)

logger = structlog.get_logger()


async def join_streak(db: AsyncSession, streak_id: str, user_id: str) -> Participation:
    """Join a public streak with zeroed counters."""
    streak = await require_streak(db, streak_id)

    if not streak.is_public:
        raise Forbidden("Cannot join private streaks")
    if streak.created_by == user_id:
        raise ValidationFailed("Cannot join your own streak")
    if await get_active_participation(db, streak_id, user_id) is not None:
        raise Conflict("Already joined this streak")

    now = datetime.now(timezone.utc)
    participation = Participation(
        user_id=user_id,
        streak_id=streak_id,
        status=ParticipationStatus.ACTIVE,
        current_streak_days=0,
        longest_streak_days=0,
        joined_at=now,
    )
    db.add(participation)

    # someone is back, the streak is no longer abandoned
    if streak.last_member_left_at is not None:
        streak.last_member_left_at = None
        streak.updated_at = now

    try:
        await db.flush()
    except IntegrityError as e:
        # lost a race against a concurrent join by the same user
        await db.rollback()
        raise Conflict("Already joined this streak") from e

    logger.info("streak_joined", streak_id=streak_id, user_id=user_id)
    return participation


async def leave_streak(db: AsyncSession, streak_id: str, user_id: str) -> bool:
    """Deactivate the user's participation.

    Returns True when this emptied a public streak and stamped
    ``last_member_left_at``.
    """
    streak = await require_streak(db, streak_id)
    participation = await get_active_participation(db, streak_id, user_id)
    if participation is None:
        raise NotFound("You are not participating in this streak")

    if not streak.is_public and streak.created_by == user_id:
        raise ValidationFailed(
            "Creators of private streaks cannot leave them. Delete the streak instead."
        )

    now = datetime.now(timezone.utc)
    participation.status = ParticipationStatus.INACTIVE
    participation.left_at = now
    participation.pinned_at = None
    await db.flush()

    abandoned = False
    if streak.is_public and await count_active_participants(db, streak_id) == 0:
        streak.last_member_left_at = now
        streak.updated_at = now
        await db.flush()
        abandoned = True

    logger.info("streak_left", streak_id=streak_id, user_id=user_id, abandoned=abandoned)
    return abandoned


async def pin_streak(db: AsyncSession, streak_id: str, user_id: str) -> bool:
    """Pin a participation; returns True if the oldest pin was evicted to make room."""
    participation = await get_active_participation(db, streak_id, user_id)
    if participation is None:
        raise NotFound("You are not part of this streak")
    if participation.pinned_at is not None:
        raise ValidationFailed("Streak is already pinned")

    limit = get_settings().max_pinned_streaks
    result = await db.execute(
        select(Participation)
        .where(
            Participation.user_id == user_id,
            Participation.pinned_at.is_not(None),
        )
        .order_by(Participation.pinned_at.asc())
    )
    pinned = list(result.scalars())

    evicted = False
    while len(pinned) >= limit:
        oldest = pinned.pop(0)
        oldest.pinned_at = None
        evicted = True
        logger.info("streak_pin_evicted", streak_id=oldest.streak_id, user_id=user_id)

    participation.pinned_at = datetime.now(timezone.utc)
    await db.flush()
    logger.info("streak_pinned", streak_id=streak_id, user_id=user_id)
    return evicted


async def unpin_streak(db: AsyncSession, streak_id: str, user_id: str) -> None:
    participation = await get_active_participation(db, streak_id, user_id)
    if participation is None:
        raise NotFound("You are not part of this streak")
    if participation.pinned_at is None:
        raise ValidationFailed("Streak is not pinned")

    participation.pinned_at = None
    await db.flush()
    logger.info("streak_unpinned", streak_id=streak_id, user_id=user_id)
