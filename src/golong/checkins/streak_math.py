"""Streak counter arithmetic over a set of check-in dates."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


@dataclass(frozen=True)
class StreakCounters:
    current_streak_days: int = 0
    longest_streak_days: int = 0
    last_checkin_date: date | None = None


def compute_streak_counters(dates: Iterable[date]) -> StreakCounters:
    """Derive counters from every check-in date of a participation.

    ``longest`` is the longest run of consecutive days. ``current`` is the run
    ending at the most recent check-in, so a gap before today does not zero it;
    the next check-in after a gap does.
    """
    ordered = sorted(set(dates))
    if not ordered:
        return StreakCounters()

    longest = run = 1
    for prev, cur in zip(ordered, ordered[1:]):
        if cur - prev == timedelta(days=1):
            run += 1
        else:
            run = 1
        longest = max(longest, run)

    return StreakCounters(
        current_streak_days=run,
        longest_streak_days=longest,
        last_checkin_date=ordered[-1],
    )


def resolve_timezone(name: str | None) -> ZoneInfo | timezone:
    """IANA zone by name; UTC when absent. Raises ValueError for unknown zones."""
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e


def local_today(tz: ZoneInfo | timezone, now: datetime | None = None) -> date:
    """The calendar date in ``tz`` at ``now`` (default: the current instant)."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now.astimezone(tz).date()
