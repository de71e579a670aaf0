"""Streak API endpoints: registry, participation and deletion."""

from __future__ import annotations

import uuid
from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from golong.auth.dependencies import get_current_user
from golong.config import get_settings
from golong.database import get_session
from golong.db.models import Participation, Profile, Streak
from golong.social.schemas import AuthorResponse
from golong.streaks.deletion_service import delete_private_streak
from golong.streaks.participation_service import (
    join_streak,
    leave_streak,
    pin_streak,
    unpin_streak,
)
from golong.streaks.schemas import (
    CreateStreakRequest,
    CreateStreakResponse,
    DeleteStreakResponse,
    JoinResponse,
    LeaderboardEntry,
    LeaderboardResponse,
    LeaveResponse,
    MyStreaksResponse,
    ParticipationResponse,
    PinResponse,
    PopularStreakResponse,
    PopularStreaksResponse,
    RecentActivityResponse,
    StreakListResponse,
    StreakResponse,
    StreakStatsResponse,
    StreakWithParticipationResponse,
)
from golong.streaks.service import (
    create_streak,
    get_active_participation,
    get_leaderboard,
    get_recent_activity,
    get_streak_stats,
    get_visible_streak,
    list_my_streaks,
    list_popular_streaks,
    list_streaks,
)

router = APIRouter(prefix="/api/v1/streaks", tags=["Streaks"])


def _with_participation(
    streak: Streak,
    participation: Participation | None,
) -> StreakWithParticipationResponse:
    return StreakWithParticipationResponse(
        streak=StreakResponse.model_validate(streak),
        user_streak=ParticipationResponse.model_validate(participation) if participation else None,
    )


async def _join(db: AsyncSession, streak_id: str, user: Profile) -> JoinResponse:
    participation = await join_streak(db, streak_id, user.id)
    response = JoinResponse(
        message="Successfully joined streak",
        user_streak=ParticipationResponse.model_validate(participation),
    )
    await db.commit()
    return response


async def _leave(db: AsyncSession, streak_id: str, user: Profile) -> LeaveResponse:
    abandoned = await leave_streak(db, streak_id, user.id)
    await db.commit()
    return LeaveResponse(message="Successfully left streak", streak_abandoned=abandoned)


# ── Registry ──


@router.get("", response_model=StreakListResponse)
async def get_streaks(
    category: str | None = Query(None, max_length=64),
    is_public: bool | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Public streaks plus the caller's private ones, newest first."""
    rows = await list_streaks(
        db, user.id, category=category, is_public=is_public, limit=limit, offset=offset
    )
    return StreakListResponse(
        streaks=[_with_participation(s, p) for s, p in rows],
        limit=limit,
        offset=offset,
    )


@router.post("", response_model=CreateStreakResponse, status_code=201)
async def post_streak(
    body: CreateStreakRequest,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Create a streak; the creator is joined automatically."""
    streak, participation = await create_streak(
        db,
        user.id,
        title=body.title,
        description=body.description,
        category=body.category,
        is_public=body.is_public,
        tags=body.tags,
    )
    response = CreateStreakResponse(
        id=streak.id,
        user_streak_id=participation.id,
        streak=StreakResponse.model_validate(streak),
    )
    await db.commit()
    return response


@router.get("/mine", response_model=MyStreaksResponse)
async def get_my_streaks(
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """The caller's active streaks, pinned ones first."""
    rows = await list_my_streaks(db, user.id)
    return MyStreaksResponse(streaks=[_with_participation(s, p) for s, p in rows])


@router.get("/popular", response_model=PopularStreaksResponse)
async def get_popular_streaks(
    limit: int = Query(12, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Public streaks with the most active participants first."""
    page, total = await list_popular_streaks(db, user.id, limit=limit, offset=offset)
    return PopularStreaksResponse(
        streaks=[
            PopularStreakResponse(
                streak=StreakResponse.model_validate(item["streak"]),
                creator=AuthorResponse.model_validate(item["creator"]),
                participant_count=item["participant_count"],
                has_joined=item["has_joined"],
            )
            for item in page
        ],
        total=total,
        has_more=offset + limit < total,
    )


@router.get("/{streak_id}", response_model=StreakWithParticipationResponse)
async def get_streak_detail(
    streak_id: uuid.UUID,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    streak = await get_visible_streak(db, str(streak_id), user.id)
    participation = await get_active_participation(db, streak.id, user.id)
    return _with_participation(streak, participation)


@router.delete("/{streak_id}", response_model=DeleteStreakResponse)
async def delete_streak(
    streak_id: uuid.UUID,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Delete one of the caller's private streaks with all its notes and check-ins."""
    title = await delete_private_streak(db, str(streak_id), user.id)
    return DeleteStreakResponse(message=f'Streak "{title}" has been permanently deleted')


@router.get("/{streak_id}/stats", response_model=StreakStatsResponse)
async def get_stats(
    streak_id: uuid.UUID,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await get_visible_streak(db, str(streak_id), user.id)
    return StreakStatsResponse(**await get_streak_stats(db, str(streak_id)))


@router.get("/{streak_id}/leaderboard", response_model=LeaderboardResponse)
async def get_streak_leaderboard(
    streak_id: uuid.UUID,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Top active participants by current streak."""
    await get_visible_streak(db, str(streak_id), user.id)
    entries = await get_leaderboard(db, str(streak_id), size=get_settings().leaderboard_size)
    return LeaderboardResponse(
        streak_id=str(streak_id),
        entries=[LeaderboardEntry(**e) for e in entries],
    )


@router.get("/{streak_id}/recent-activity", response_model=RecentActivityResponse)
async def get_streak_activity(
    streak_id: uuid.UUID,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    activities = await get_recent_activity(db, str(streak_id), user.id)
    return RecentActivityResponse(
        activities=[
            {**a, "user": AuthorResponse.model_validate(a["user"])} for a in activities
        ]
    )


# ── Participation ──


@router.post("/{streak_id}", response_model=JoinResponse | LeaveResponse)
async def streak_action(
    streak_id: uuid.UUID,
    action: Literal["join", "leave"] = Query(...),
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Join or leave a streak via ``?action=join|leave``."""
    if action == "join":
        return await _join(db, str(streak_id), user)
    return await _leave(db, str(streak_id), user)


@router.post("/{streak_id}/leave", response_model=LeaveResponse)
async def post_leave(
    streak_id: uuid.UUID,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await _leave(db, str(streak_id), user)


@router.post("/{streak_id}/pin", response_model=PinResponse)
async def post_pin(
    streak_id: uuid.UUID,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Pin a streak; the oldest pin is released when the cap is reached."""
    evicted = await pin_streak(db, str(streak_id), user.id)
    await db.commit()
    message = "Streak pinned (oldest pin was replaced)" if evicted else "Streak pinned"
    return PinResponse(message=message, evicted=evicted)


@router.post("/{streak_id}/unpin", response_model=PinResponse)
async def post_unpin(
    streak_id: uuid.UUID,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await unpin_streak(db, str(streak_id), user.id)
    await db.commit()
    return PinResponse(message="Streak unpinned")
