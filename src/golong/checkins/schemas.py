"""Pydantic schemas for check-in endpoints."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field


class CheckinRequest(BaseModel):
    streak_id: uuid.UUID
    checkin_date: date | None = None
    timezone: str | None = Field(None, max_length=64)


class CheckinCreatedResponse(BaseModel):
    id: str
    checkin_date: date
    current_streak_days: int
    longest_streak_days: int


class CheckinResponse(BaseModel):
    id: str
    streak_id: str
    user_streak_id: str
    checkin_date: date
    created_at: datetime


class CheckinListResponse(BaseModel):
    checkins: list[CheckinResponse]
    count: int


class CheckinDeletedResponse(BaseModel):
    message: str = "Check-in deleted"
    current_streak_days: int
    longest_streak_days: int


class CheckinUpdateRequest(BaseModel):
    checkin_date: date
    timezone: str | None = Field(None, max_length=64)


class CheckinUpdatedResponse(BaseModel):
    id: str
    streak_id: str
    checkin_date: date
    current_streak_days: int
    longest_streak_days: int
