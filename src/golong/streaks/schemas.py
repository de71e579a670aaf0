"""Pydantic schemas for streak endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from golong.social.schemas import AuthorResponse


class CreateStreakRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    category: str | None = Field(None, max_length=64)
    is_public: bool = True
    tags: list[str] = Field(default_factory=list, max_length=10)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title must not be blank")
        return v

    @field_validator("tags")
    @classmethod
    def normalise_tags(cls, v: list[str]) -> list[str]:
        seen: list[str] = []
        for tag in v:
            tag = tag.strip().lower()
            if tag and tag not in seen:
                seen.append(tag)
        return seen


class ParticipationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    streak_id: str
    is_active: bool
    current_streak_days: int
    longest_streak_days: int
    last_checkin_date: date | None = None
    joined_at: datetime
    left_at: datetime | None = None
    pinned_at: datetime | None = None


class StreakResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str | None = None
    category: str | None = None
    tags: list[str] = []
    is_public: bool
    created_by: str
    created_at: datetime
    updated_at: datetime
    last_member_left_at: datetime | None = None


class StreakWithParticipationResponse(BaseModel):
    streak: StreakResponse
    user_streak: ParticipationResponse | None = None


class CreateStreakResponse(BaseModel):
    id: str
    user_streak_id: str
    streak: StreakResponse


class StreakListResponse(BaseModel):
    streaks: list[StreakWithParticipationResponse]
    limit: int
    offset: int


class MyStreaksResponse(BaseModel):
    streaks: list[StreakWithParticipationResponse]


class JoinResponse(BaseModel):
    message: str
    user_streak: ParticipationResponse


class LeaveResponse(BaseModel):
    message: str
    streak_abandoned: bool


class PinResponse(BaseModel):
    message: str
    evicted: bool = False


class DeleteStreakResponse(BaseModel):
    message: str


class StreakStatsResponse(BaseModel):
    total_participants: int
    average_streak: int
    longest_streak: int
    created_at: datetime


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    username: str
    display_name: str | None = None
    avatar_url: str | None = None
    current_streak_days: int
    longest_streak_days: int
    last_checkin_date: date | None = None
    joined_at: datetime


class LeaderboardResponse(BaseModel):
    streak_id: str
    entries: list[LeaderboardEntry]


class PopularStreakResponse(BaseModel):
    streak: StreakResponse
    creator: AuthorResponse
    participant_count: int
    has_joined: bool


class PopularStreaksResponse(BaseModel):
    streaks: list[PopularStreakResponse]
    total: int
    has_more: bool


class ActivityResponse(BaseModel):
    id: str
    type: Literal["checkin", "join", "comment", "note"]
    action: str
    user: AuthorResponse
    timestamp: datetime
    checkin_date: date | None = None
    content: str | None = None


class RecentActivityResponse(BaseModel):
    activities: list[ActivityResponse]
