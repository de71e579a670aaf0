"""Pydantic schemas for social endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from golong.db.models import ReportStatus
from golong.social.report_service import ResolveAction


class AuthorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    display_name: str | None = None
    avatar_url: str | None = None


# --- Comments ---


class CreateCommentRequest(BaseModel):
    streak_id: uuid.UUID
    content: str = Field(..., min_length=1, max_length=1000)


class UpdateCommentRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)


class CommentResponse(BaseModel):
    id: str
    streak_id: str
    user_id: str
    content: str
    created_at: datetime
    updated_at: datetime
    author: AuthorResponse | None = None


class CommentListResponse(BaseModel):
    comments: list[CommentResponse]


# --- Likes ---


class LikeRequest(BaseModel):
    streak_id: uuid.UUID


class LikeResponse(BaseModel):
    id: str
    streak_id: str
    user_id: str
    created_at: datetime
    author: AuthorResponse | None = None


class LikeListResponse(BaseModel):
    likes: list[LikeResponse]
    count: int


class UserLikeResponse(BaseModel):
    has_liked: bool
    like_id: str | None = None


# --- Notes ---


class CreateNoteRequest(BaseModel):
    streak_id: uuid.UUID
    content: str = Field(..., max_length=5000)


class UpdateNoteRequest(BaseModel):
    content: str = Field(..., max_length=5000)


class NoteResponse(BaseModel):
    id: str
    streak_id: str
    user_id: str
    content: str
    created_at: datetime
    updated_at: datetime
    author: AuthorResponse | None = None


class NoteListResponse(BaseModel):
    notes: list[NoteResponse]


# --- Reports ---


class CreateReportRequest(BaseModel):
    streak_id: uuid.UUID
    reason: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=1000)


class ResolveReportRequest(BaseModel):
    action: ResolveAction


class ReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    streak_id: str
    reporter_id: str
    reason: str
    description: str | None = None
    status: ReportStatus
    created_at: datetime
    resolved_at: datetime | None = None
    resolved_by: str | None = None


class ReportListResponse(BaseModel):
    reports: list[ReportResponse]


class MessageResponse(BaseModel):
    message: str
