"""Abandoned-streak purge.

A public streak whose last active participant left more than
``cleanup_grace_days`` ago is purged. Candidates are re-checked for active
participants right before deletion, since someone may have rejoined during
the grace window. Each candidate runs inside its own savepoint: a failure is
recorded and the job moves on to the next one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from golong.db.models import Streak
from golong.streaks.deletion_service import ABANDONED_PURGE_STEPS, CascadeStepError, run_cascade
from golong.streaks.service import count_active_participants

logger = structlog.get_logger()


@dataclass
class CleanupResult:
    deleted_count: int = 0
    skipped_count: int = 0
    errors: list[str] = field(default_factory=list)
    deleted_ids: list[str] = field(default_factory=list)


async def find_abandoned_streaks(
    db: AsyncSession,
    grace_days: int,
    now: datetime | None = None,
) -> list[tuple[str, str]]:
    """(id, title) of public streaks emptied before the grace cutoff, oldest first."""
    if now is None:
        now = datetime.now(timezone.utc)
    cutoff = now - timedelta(days=grace_days)
    result = await db.execute(
        select(Streak.id, Streak.title)
        .where(
            Streak.is_public.is_(True),
            Streak.last_member_left_at.is_not(None),
            Streak.last_member_left_at < cutoff,
        )
        .order_by(Streak.last_member_left_at.asc())
    )
    return [(row.id, row.title) for row in result]


async def purge_abandoned_streaks(
    db: AsyncSession,
    grace_days: int = 15,
    now: datetime | None = None,
) -> CleanupResult:
    """Delete every abandoned public streak. Commits; never raises per-streak errors."""
    outcome = CleanupResult()
    candidates = await find_abandoned_streaks(db, grace_days, now)
    if not candidates:
        logger.info("cleanup_no_candidates", grace_days=grace_days)
        return outcome

    logger.info("cleanup_started", candidates=len(candidates), grace_days=grace_days)

    for streak_id, title in candidates:
        try:
            async with db.begin_nested():
                active = await count_active_participants(db, streak_id)
                if active > 0:
                    logger.info("cleanup_skipped_active", streak_id=streak_id, active=active)
                    outcome.skipped_count += 1
                    continue
                await run_cascade(db, streak_id, ABANDONED_PURGE_STEPS)
        except CascadeStepError as e:
            logger.warning("cleanup_step_failed", streak_id=streak_id, step=e.step, error=str(e.__cause__))
            outcome.errors.append(str(e))
            continue
        except SQLAlchemyError as e:
            logger.warning("cleanup_streak_failed", streak_id=streak_id, error=str(e))
            outcome.errors.append(f"Unexpected error processing streak {streak_id}: {e}")
            continue

        outcome.deleted_count += 1
        outcome.deleted_ids.append(streak_id)
        logger.info("abandoned_streak_purged", streak_id=streak_id, title=title)

    await db.commit()
    logger.info(
        "cleanup_finished",
        deleted=outcome.deleted_count,
        skipped=outcome.skipped_count,
        errors=len(outcome.errors),
    )
    return outcome
