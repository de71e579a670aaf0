"""Check-in recorder.

Rules:
- At most one check-in per participation per calendar date
- The date defaults to "today" in the caller's timezone; future dates are rejected
- Every insert, date change or delete recomputes the participation's streak counters
"""

from __future__ import annotations

from datetime import date

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from golong.checkins.streak_math import (
    StreakCounters,
    compute_streak_counters,
    local_today,
    resolve_timezone,
)
from golong.db.models import Checkin, Participation
from golong.errors import Conflict, NotFound, ValidationFailed
from golong.streaks.service import get_active_participation, require_streak

logger = structlog.get_logger()


async def _find_checkin(db: AsyncSession, participation_id: str, checkin_date: date) -> Checkin | None:
    result = await db.execute(
        select(Checkin).where(
            Checkin.user_streak_id == participation_id,
            Checkin.checkin_date == checkin_date,
        )
    )
    return result.scalar_one_or_none()


def _caller_today(tz_name: str | None) -> date:
    try:
        tz = resolve_timezone(tz_name)
    except ValueError as e:
        raise ValidationFailed(str(e)) from e
    return local_today(tz)


async def recompute_counters(db: AsyncSession, participation: Participation) -> StreakCounters:
    """Rebuild current/longest/last-date from all of the participation's check-ins."""
    result = await db.execute(
        select(Checkin.checkin_date).where(Checkin.user_streak_id == participation.id)
    )
    counters = compute_streak_counters(result.scalars())
    participation.current_streak_days = counters.current_streak_days
    participation.longest_streak_days = counters.longest_streak_days
    participation.last_checkin_date = counters.last_checkin_date
    await db.flush()
    return counters


async def record_checkin(
    db: AsyncSession,
    streak_id: str,
    user_id: str,
    checkin_date: date | None = None,
    tz_name: str | None = None,
) -> tuple[Checkin, StreakCounters]:
    """Record a check-in for the caller's active participation in a streak.

    Raises:
        NotFound: streak missing, or the caller is not participating.
        ValidationFailed: unknown timezone or a date in the future.
        Conflict: a check-in already exists for that date; carries ``checkin_id``.
    """
    await require_streak(db, streak_id)
    participation = await get_active_participation(db, streak_id, user_id)
    if participation is None:
        raise NotFound("You are not participating in this streak")

    today = _caller_today(tz_name)
    if checkin_date is None:
        checkin_date = today
    elif checkin_date > today:
        raise ValidationFailed("Cannot check in for a future date")

    existing = await _find_checkin(db, participation.id, checkin_date)
    if existing is not None:
        raise Conflict("Already checked in for this date", checkin_id=existing.id)

    participation_id = participation.id
    checkin = Checkin(user_streak_id=participation_id, checkin_date=checkin_date)
    db.add(checkin)
    try:
        await db.flush()
    except IntegrityError as e:
        # a concurrent request inserted the same (participation, date) first
        await db.rollback()
        winner = await _find_checkin(db, participation_id, checkin_date)
        raise Conflict(
            "Already checked in for this date",
            checkin_id=winner.id if winner is not None else None,
        ) from e

    counters = await recompute_counters(db, participation)
    logger.info(
        "checkin_recorded",
        streak_id=streak_id,
        user_id=user_id,
        checkin_date=checkin_date.isoformat(),
        current=counters.current_streak_days,
    )
    return checkin, counters


async def list_checkins(
    db: AsyncSession,
    user_id: str,
    streak_id: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[tuple[Checkin, str]]:
    """The caller's own check-ins, newest date first, paired with their streak id."""
    if start_date is not None and end_date is not None and start_date > end_date:
        raise ValidationFailed("start_date must not be after end_date")

    query = (
        select(Checkin, Participation.streak_id)
        .join(Participation, Participation.id == Checkin.user_streak_id)
        .where(Participation.user_id == user_id)
    )
    if streak_id is not None:
        query = query.where(Participation.streak_id == streak_id)
    if start_date is not None:
        query = query.where(Checkin.checkin_date >= start_date)
    if end_date is not None:
        query = query.where(Checkin.checkin_date <= end_date)
    query = query.order_by(Checkin.checkin_date.desc(), Checkin.created_at.desc())
    query = query.offset(offset).limit(limit)

    result = await db.execute(query)
    return [(row.Checkin, row.streak_id) for row in result]


async def _own_checkin(db: AsyncSession, checkin_id: str, user_id: str) -> tuple[Checkin, Participation]:
    result = await db.execute(
        select(Checkin, Participation)
        .join(Participation, Participation.id == Checkin.user_streak_id)
        .where(Checkin.id == checkin_id, Participation.user_id == user_id)
    )
    row = result.one_or_none()
    if row is None:
        raise NotFound("Check-in not found")
    return row.Checkin, row.Participation


async def update_checkin(
    db: AsyncSession,
    checkin_id: str,
    user_id: str,
    checkin_date: date,
    tz_name: str | None = None,
) -> tuple[Checkin, Participation, StreakCounters]:
    """Move one of the caller's check-ins to another date.

    Raises:
        NotFound: no such check-in among the caller's own.
        ValidationFailed: unknown timezone or a date in the future.
        Conflict: the participation already has a check-in on that date;
            carries its ``checkin_id``.
    """
    checkin, participation = await _own_checkin(db, checkin_id, user_id)
    if checkin_date > _caller_today(tz_name):
        raise ValidationFailed("Cannot check in for a future date")

    if checkin_date != checkin.checkin_date:
        clash = await _find_checkin(db, participation.id, checkin_date)
        if clash is not None:
            raise Conflict("Already checked in for this date", checkin_id=clash.id)

        participation_id = participation.id
        checkin.checkin_date = checkin_date
        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            winner = await _find_checkin(db, participation_id, checkin_date)
            raise Conflict(
                "Already checked in for this date",
                checkin_id=winner.id if winner is not None else None,
            ) from e

    counters = await recompute_counters(db, participation)
    logger.info(
        "checkin_moved",
        checkin_id=checkin_id,
        user_id=user_id,
        checkin_date=checkin_date.isoformat(),
        current=counters.current_streak_days,
    )
    return checkin, participation, counters


async def delete_checkin(db: AsyncSession, checkin_id: str, user_id: str) -> StreakCounters:
    """Delete one of the caller's check-ins and recompute that participation's counters."""
    checkin, participation = await _own_checkin(db, checkin_id, user_id)
    await db.delete(checkin)
    await db.flush()

    counters = await recompute_counters(db, participation)
    logger.info("checkin_deleted", checkin_id=checkin_id, user_id=user_id)
    return counters
