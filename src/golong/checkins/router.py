"""Check-in endpoints: /api/v1/checkins."""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from golong.auth.dependencies import get_current_user
from golong.checkins.schemas import (
    CheckinCreatedResponse,
    CheckinDeletedResponse,
    CheckinListResponse,
    CheckinRequest,
    CheckinResponse,
    CheckinUpdatedResponse,
    CheckinUpdateRequest,
)
from golong.checkins.service import delete_checkin, list_checkins, record_checkin, update_checkin
from golong.database import get_session
from golong.db.models import Profile

router = APIRouter(prefix="/api/v1/checkins", tags=["Check-ins"])


@router.post("", response_model=CheckinCreatedResponse, status_code=201)
async def create_checkin(
    body: CheckinRequest,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Check in on a streak for today (in ``timezone``) or a past ``checkin_date``."""
    checkin, counters = await record_checkin(
        db, str(body.streak_id), user.id, body.checkin_date, body.timezone
    )
    response = CheckinCreatedResponse(
        id=checkin.id,
        checkin_date=checkin.checkin_date,
        current_streak_days=counters.current_streak_days,
        longest_streak_days=counters.longest_streak_days,
    )
    await db.commit()
    return response


@router.get("", response_model=CheckinListResponse)
async def get_checkins(
    streak_id: uuid.UUID | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    rows = await list_checkins(
        db,
        user.id,
        streak_id=str(streak_id) if streak_id else None,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    checkins = [
        CheckinResponse(
            id=c.id,
            streak_id=sid,
            user_streak_id=c.user_streak_id,
            checkin_date=c.checkin_date,
            created_at=c.created_at,
        )
        for c, sid in rows
    ]
    return CheckinListResponse(checkins=checkins, count=len(checkins))


@router.put("", response_model=CheckinUpdatedResponse)
async def put_checkin(
    body: CheckinUpdateRequest,
    checkin_id: uuid.UUID = Query(..., alias="id"),
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Move a check-in to another (non-future) date."""
    checkin, participation, counters = await update_checkin(
        db, str(checkin_id), user.id, body.checkin_date, body.timezone
    )
    response = CheckinUpdatedResponse(
        id=checkin.id,
        streak_id=participation.streak_id,
        checkin_date=checkin.checkin_date,
        current_streak_days=counters.current_streak_days,
        longest_streak_days=counters.longest_streak_days,
    )
    await db.commit()
    return response


@router.delete("", response_model=CheckinDeletedResponse)
async def remove_checkin(
    checkin_id: uuid.UUID = Query(...),
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    counters = await delete_checkin(db, str(checkin_id), user.id)
    await db.commit()
    return CheckinDeletedResponse(
        current_streak_days=counters.current_streak_days,
        longest_streak_days=counters.longest_streak_days,
    )
