"""Streak registry: create, read, list, popular, stats, leaderboard and activity feed.

Rules:
- Creating a streak auto-joins the creator as an active participant
- Private streaks are visible only to their creator
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from golong.db.models import Checkin, Comment, Note, Participation, ParticipationStatus, Profile, Streak
from golong.errors import Forbidden, NotFound

logger = structlog.get_logger()


async def get_streak(db: AsyncSession, streak_id: str) -> Streak | None:
    result = await db.execute(select(Streak).where(Streak.id == streak_id))
    return result.scalar_one_or_none()


async def require_streak(db: AsyncSession, streak_id: str) -> Streak:
    """Get a streak or raise NotFound."""
    streak = await get_streak(db, streak_id)
    if streak is None:
        raise NotFound("Streak not found")
    return streak


async def get_active_participation(
    db: AsyncSession,
    streak_id: str,
    user_id: str,
) -> Participation | None:
    """The user's active participation in a streak, if any."""
    result = await db.execute(
        select(Participation).where(
            Participation.streak_id == streak_id,
            Participation.user_id == user_id,
            Participation.status == ParticipationStatus.ACTIVE,
        )
    )
    return result.scalar_one_or_none()


async def count_active_participants(db: AsyncSession, streak_id: str) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Participation)
        .where(
            Participation.streak_id == streak_id,
            Participation.status == ParticipationStatus.ACTIVE,
        )
    )
    return int(result.scalar_one())


async def create_streak(
    db: AsyncSession,
    owner_id: str,
    title: str,
    description: str | None = None,
    category: str | None = None,
    is_public: bool = True,
    tags: list[str] | None = None,
) -> tuple[Streak, Participation]:
    """Create a streak and join its creator to it."""
    now = datetime.now(timezone.utc)
    streak = Streak(
        title=title.strip(),
        description=description,
        category=category,
        is_public=is_public,
        tags=list(tags or []),
        created_by=owner_id,
        created_at=now,
        updated_at=now,
    )
    db.add(streak)
    await db.flush()

    participation = Participation(
        user_id=owner_id,
        streak_id=streak.id,
        status=ParticipationStatus.ACTIVE,
        current_streak_days=0,
        longest_streak_days=0,
        joined_at=now,
    )
    db.add(participation)
    await db.flush()

    logger.info("streak_created", streak_id=streak.id, owner_id=owner_id, is_public=is_public)
    return streak, participation


async def get_visible_streak(db: AsyncSession, streak_id: str, viewer_id: str) -> Streak:
    """Fetch a streak the viewer may see; private streaks are owner-only."""
    streak = await require_streak(db, streak_id)
    if not streak.is_public and streak.created_by != viewer_id:
        raise Forbidden("Access denied")
    return streak


async def list_streaks(
    db: AsyncSession,
    viewer_id: str,
    category: str | None = None,
    is_public: bool | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[tuple[Streak, Participation | None]]:
    """List visible streaks newest first, each paired with the viewer's participation."""
    query = select(Streak).where(or_(Streak.is_public.is_(True), Streak.created_by == viewer_id))
    if category:
        query = query.where(Streak.category == category)
    if is_public is not None:
        query = query.where(Streak.is_public.is_(is_public))
    query = query.order_by(Streak.created_at.desc()).offset(offset).limit(limit)

    streaks = list((await db.execute(query)).scalars())
    if not streaks:
        return []

    rows = await db.execute(
        select(Participation).where(
            Participation.user_id == viewer_id,
            Participation.streak_id.in_([s.id for s in streaks]),
            Participation.status == ParticipationStatus.ACTIVE,
        )
    )
    by_streak = {p.streak_id: p for p in rows.scalars()}
    return [(s, by_streak.get(s.id)) for s in streaks]


async def list_my_streaks(db: AsyncSession, user_id: str) -> list[tuple[Streak, Participation]]:
    """The user's active participations: pinned first (newest pin first), then by join date."""
    result = await db.execute(
        select(Streak, Participation)
        .join(Participation, Participation.streak_id == Streak.id)
        .where(
            Participation.user_id == user_id,
            Participation.status == ParticipationStatus.ACTIVE,
        )
        .order_by(
            Participation.pinned_at.is_(None),
            Participation.pinned_at.desc(),
            Participation.joined_at.desc(),
        )
    )
    return [(row.Streak, row.Participation) for row in result]


async def get_streak_stats(db: AsyncSession, streak_id: str) -> dict:
    """Participant count, average current streak and longest streak among active participants."""
    streak = await require_streak(db, streak_id)
    result = await db.execute(
        select(
            func.count(Participation.id),
            func.avg(Participation.current_streak_days),
            func.max(Participation.longest_streak_days),
        ).where(
            Participation.streak_id == streak_id,
            Participation.status == ParticipationStatus.ACTIVE,
        )
    )
    total, average, longest = result.one()
    return {
        "total_participants": int(total or 0),
        "average_streak": round(float(average)) if average is not None else 0,
        "longest_streak": int(longest or 0),
        "created_at": streak.created_at,
    }


async def get_leaderboard(db: AsyncSession, streak_id: str, size: int = 3) -> list[dict]:
    """Top active participants by current streak."""
    await require_streak(db, streak_id)
    result = await db.execute(
        select(Participation, Profile)
        .join(Profile, Profile.id == Participation.user_id)
        .where(
            Participation.streak_id == streak_id,
            Participation.status == ParticipationStatus.ACTIVE,
        )
        .order_by(
            Participation.current_streak_days.desc(),
            Participation.longest_streak_days.desc(),
            Participation.joined_at.asc(),
        )
        .limit(size)
    )
    return [
        {
            "rank": rank,
            "user_id": row.Profile.id,
            "username": row.Profile.username,
            "display_name": row.Profile.display_name,
            "avatar_url": row.Profile.avatar_url,
            "current_streak_days": row.Participation.current_streak_days,
            "longest_streak_days": row.Participation.longest_streak_days,
            "last_checkin_date": row.Participation.last_checkin_date,
            "joined_at": row.Participation.joined_at,
        }
        for rank, row in enumerate(result, start=1)
    ]


async def list_popular_streaks(
    db: AsyncSession,
    viewer_id: str,
    limit: int = 12,
    offset: int = 0,
) -> tuple[list[dict], int]:
    """Public streaks ranked by active participant count, then newest.

    Returns the page and the total number of public streaks.
    """
    members = (
        select(Participation.streak_id, func.count(Participation.id).label("participant_count"))
        .where(Participation.status == ParticipationStatus.ACTIVE)
        .group_by(Participation.streak_id)
        .subquery()
    )
    participant_count = func.coalesce(members.c.participant_count, 0)
    result = await db.execute(
        select(Streak, Profile, participant_count.label("participant_count"))
        .join(Profile, Profile.id == Streak.created_by)
        .outerjoin(members, members.c.streak_id == Streak.id)
        .where(Streak.is_public.is_(True))
        .order_by(participant_count.desc(), Streak.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    rows = result.all()

    total = (
        await db.execute(select(func.count()).select_from(Streak).where(Streak.is_public.is_(True)))
    ).scalar_one()

    joined: set[str] = set()
    if rows:
        mine = await db.execute(
            select(Participation.streak_id).where(
                Participation.user_id == viewer_id,
                Participation.status == ParticipationStatus.ACTIVE,
                Participation.streak_id.in_([row.Streak.id for row in rows]),
            )
        )
        joined = set(mine.scalars())

    page = [
        {
            "streak": row.Streak,
            "creator": row.Profile,
            "participant_count": int(row.participant_count),
            "has_joined": row.Streak.id in joined,
        }
        for row in rows
    ]
    return page, int(total)


def _as_utc(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def _preview(text: str, width: int = 50) -> str:
    return text if len(text) <= width else text[:width] + "..."


async def get_recent_activity(
    db: AsyncSession,
    streak_id: str,
    viewer_id: str,
    limit: int = 10,
) -> list[dict]:
    """Latest check-ins, joins, comments (public) and notes (private), newest first."""
    streak = await get_visible_streak(db, streak_id, viewer_id)
    activities: list[dict] = []

    checkins = await db.execute(
        select(Checkin, Profile)
        .join(Participation, Participation.id == Checkin.user_streak_id)
        .join(Profile, Profile.id == Participation.user_id)
        .where(Participation.streak_id == streak_id)
        .order_by(Checkin.created_at.desc())
        .limit(limit)
    )
    for row in checkins:
        activities.append({
            "id": f"checkin_{row.Checkin.id}",
            "type": "checkin",
            "action": "checked in",
            "user": row.Profile,
            "timestamp": row.Checkin.created_at,
            "checkin_date": row.Checkin.checkin_date,
        })

    joins = await db.execute(
        select(Participation, Profile)
        .join(Profile, Profile.id == Participation.user_id)
        .where(
            Participation.streak_id == streak_id,
            Participation.status == ParticipationStatus.ACTIVE,
        )
        .order_by(Participation.joined_at.desc())
        .limit(limit)
    )
    for row in joins:
        activities.append({
            "id": f"join_{row.Participation.id}",
            "type": "join",
            "action": "joined the streak",
            "user": row.Profile,
            "timestamp": row.Participation.joined_at,
        })

    if streak.is_public:
        comments = await db.execute(
            select(Comment, Profile)
            .join(Profile, Profile.id == Comment.user_id)
            .where(Comment.streak_id == streak_id)
            .order_by(Comment.created_at.desc())
            .limit(limit)
        )
        for row in comments:
            activities.append({
                "id": f"comment_{row.Comment.id}",
                "type": "comment",
                "action": "commented",
                "user": row.Profile,
                "timestamp": row.Comment.created_at,
            })
    else:
        notes = await db.execute(
            select(Note, Profile)
            .join(Profile, Profile.id == Note.user_id)
            .where(Note.streak_id == streak_id)
            .order_by(Note.created_at.desc())
            .limit(limit)
        )
        for row in notes:
            activities.append({
                "id": f"note_{row.Note.id}",
                "type": "note",
                "action": "added a note",
                "user": row.Profile,
                "timestamp": row.Note.created_at,
                "content": _preview(row.Note.content),
            })

    activities.sort(key=lambda a: _as_utc(a["timestamp"]), reverse=True)
    return activities[:limit]
