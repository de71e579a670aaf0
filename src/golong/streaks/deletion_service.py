"""Streak deletion cascades.

Two paths delete a streak:

- Owner deletion of a *private* streak (synchronous, all-or-nothing):
  notes -> check-ins -> participations -> streak.
- Purge of an *abandoned public* streak by the cleanup job:
  check-ins -> participations -> comments -> streak.

Each step is named so a failure can report exactly where the cascade stopped.
Likes and reports go with the streak row through ON DELETE CASCADE.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from golong.db.models import Checkin, Comment, Note, Participation, Streak
from golong.errors import Forbidden, OperationFailed, ValidationFailed
from golong.streaks.service import require_streak

logger = structlog.get_logger()


class CascadeStepError(Exception):
    """A single delete step failed; ``step`` names it."""

    def __init__(self, step: str, streak_id: str) -> None:
        super().__init__(f"Failed to delete {step} for streak {streak_id}")
        self.step = step
        self.streak_id = streak_id


async def _participation_ids(db: AsyncSession, streak_id: str) -> list[str]:
    result = await db.execute(select(Participation.id).where(Participation.streak_id == streak_id))
    return list(result.scalars())


async def _delete_notes(db: AsyncSession, streak_id: str) -> None:
    await db.execute(delete(Note).where(Note.streak_id == streak_id))


async def _delete_checkins(db: AsyncSession, streak_id: str) -> None:
    ids = await _participation_ids(db, streak_id)
    if ids:
        await db.execute(delete(Checkin).where(Checkin.user_streak_id.in_(ids)))


async def _delete_participations(db: AsyncSession, streak_id: str) -> None:
    await db.execute(delete(Participation).where(Participation.streak_id == streak_id))


async def _delete_comments(db: AsyncSession, streak_id: str) -> None:
    await db.execute(delete(Comment).where(Comment.streak_id == streak_id))


async def _delete_streak_row(db: AsyncSession, streak_id: str) -> None:
    await db.execute(delete(Streak).where(Streak.id == streak_id))


Step = tuple[str, Callable[[AsyncSession, str], Awaitable[None]]]

PRIVATE_DELETE_STEPS: list[Step] = [
    ("notes", _delete_notes),
    ("check-ins", _delete_checkins),
    ("user streaks", _delete_participations),
    ("streak", _delete_streak_row),
]

ABANDONED_PURGE_STEPS: list[Step] = [
    ("check-ins", _delete_checkins),
    ("user streaks", _delete_participations),
    ("comments", _delete_comments),
    ("streak", _delete_streak_row),
]


async def run_cascade(db: AsyncSession, streak_id: str, steps: list[Step]) -> None:
    """Run delete steps in order, stopping at the first failure.

    Raises:
        CascadeStepError: naming the step that failed. The caller owns the
            transaction and decides whether to roll back or skip.
    """
    for step, fn in steps:
        try:
            await fn(db, streak_id)
        except SQLAlchemyError as e:
            logger.warning("cascade_step_failed", streak_id=streak_id, step=step, error=str(e))
            raise CascadeStepError(step, streak_id) from e


async def delete_private_streak(db: AsyncSession, streak_id: str, user_id: str) -> str:
    """Owner-only deletion of a private streak and everything attached to it.

    Commits on success and rolls back on any failed step. Returns the title.
    """
    streak = await require_streak(db, streak_id)
    if streak.is_public:
        raise ValidationFailed("Cannot delete public streaks. You can only leave them.")
    if streak.created_by != user_id:
        raise Forbidden("Only the creator can delete their private streak")

    title = streak.title
    # the bulk deletes bypass the identity map, keep stale objects out of it
    db.expunge(streak)
    try:
        await run_cascade(db, streak_id, PRIVATE_DELETE_STEPS)
        await db.commit()
    except CascadeStepError as e:
        await db.rollback()
        raise OperationFailed(f"Failed to delete {e.step}", step=e.step) from e

    logger.info("private_streak_deleted", streak_id=streak_id, user_id=user_id)
    return title
