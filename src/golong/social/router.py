"""Social API endpoints: comments, likes, notes and reports."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from golong.auth.dependencies import get_current_admin, get_current_user
from golong.database import get_session
from golong.db.models import Comment, Like, Note, Profile, ReportStatus
from golong.social.comment_service import (
    create_comment,
    delete_comment,
    list_comments,
    update_comment,
)
from golong.social.like_service import check_user_like, like_streak, list_likes, unlike_streak
from golong.social.note_service import create_note, delete_note, list_notes, update_note
from golong.social.report_service import create_report, list_reports, resolve_report
from golong.social.schemas import (
    AuthorResponse,
    CommentListResponse,
    CommentResponse,
    CreateCommentRequest,
    CreateNoteRequest,
    CreateReportRequest,
    LikeListResponse,
    LikeRequest,
    LikeResponse,
    MessageResponse,
    NoteListResponse,
    NoteResponse,
    ReportListResponse,
    ReportResponse,
    ResolveReportRequest,
    UpdateCommentRequest,
    UpdateNoteRequest,
    UserLikeResponse,
)

router = APIRouter(prefix="/api/v1", tags=["Social"])


# ── Helpers ──


def _comment(comment: Comment, author: Profile | None = None) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        streak_id=comment.streak_id,
        user_id=comment.user_id,
        content=comment.content,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        author=AuthorResponse.model_validate(author) if author else None,
    )


def _like(like: Like, author: Profile | None = None) -> LikeResponse:
    return LikeResponse(
        id=like.id,
        streak_id=like.streak_id,
        user_id=like.user_id,
        created_at=like.created_at,
        author=AuthorResponse.model_validate(author) if author else None,
    )


def _note(note: Note, author: Profile | None = None) -> NoteResponse:
    return NoteResponse(
        id=note.id,
        streak_id=note.streak_id,
        user_id=note.user_id,
        content=note.content,
        created_at=note.created_at,
        updated_at=note.updated_at,
        author=AuthorResponse.model_validate(author) if author else None,
    )


# ── Comments ──


@router.get("/comments", response_model=CommentListResponse)
async def get_comments(
    streak_id: uuid.UUID = Query(...),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    _user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Comments on a public streak, newest first."""
    rows = await list_comments(db, str(streak_id), limit=limit, offset=offset)
    return CommentListResponse(comments=[_comment(c, p) for c, p in rows])


@router.post("/comments", response_model=CommentResponse, status_code=201)
async def post_comment(
    body: CreateCommentRequest,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    comment = await create_comment(db, str(body.streak_id), user.id, body.content)
    response = _comment(comment, user)
    await db.commit()
    return response


@router.put("/comments", response_model=CommentResponse)
async def put_comment(
    body: UpdateCommentRequest,
    id: uuid.UUID = Query(...),  # noqa: A002
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    comment = await update_comment(db, str(id), user.id, body.content)
    response = _comment(comment, user)
    await db.commit()
    return response


@router.delete("/comments", response_model=MessageResponse)
async def remove_comment(
    id: uuid.UUID = Query(...),  # noqa: A002
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await delete_comment(db, str(id), user.id)
    await db.commit()
    return MessageResponse(message="Comment deleted successfully")


# ── Likes ──


@router.get("/likes", response_model=LikeListResponse | UserLikeResponse)
async def get_likes(
    streak_id: uuid.UUID = Query(...),
    check_user_like_: bool = Query(False, alias="check_user_like"),
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """All likes on a public streak, or with ``check_user_like=true`` just the caller's."""
    if check_user_like_:
        like = await check_user_like(db, str(streak_id), user.id)
        return UserLikeResponse(has_liked=like is not None, like_id=like.id if like else None)

    rows = await list_likes(db, str(streak_id))
    return LikeListResponse(likes=[_like(lk, p) for lk, p in rows], count=len(rows))


@router.post("/likes", response_model=LikeResponse, status_code=201)
async def post_like(
    body: LikeRequest,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    like = await like_streak(db, str(body.streak_id), user.id)
    response = _like(like, user)
    await db.commit()
    return response


@router.delete("/likes", response_model=MessageResponse)
async def remove_like(
    streak_id: uuid.UUID | None = Query(None),
    like_id: uuid.UUID | None = Query(None),
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await unlike_streak(
        db,
        user.id,
        streak_id=str(streak_id) if streak_id else None,
        like_id=str(like_id) if like_id else None,
    )
    await db.commit()
    return MessageResponse(message="Like removed successfully")


# ── Notes ──


@router.get("/notes", response_model=NoteListResponse)
async def get_notes(
    streak_id: uuid.UUID = Query(...),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    rows = await list_notes(db, str(streak_id), user.id, limit=limit, offset=offset)
    return NoteListResponse(notes=[_note(n, p) for n, p in rows])


@router.post("/notes", response_model=NoteResponse, status_code=201)
async def post_note(
    body: CreateNoteRequest,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    note = await create_note(db, str(body.streak_id), user.id, body.content)
    response = _note(note, user)
    await db.commit()
    return response


@router.put("/notes", response_model=NoteResponse)
async def put_note(
    body: UpdateNoteRequest,
    id: uuid.UUID = Query(...),  # noqa: A002
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    note = await update_note(db, str(id), user.id, body.content)
    response = _note(note, user)
    await db.commit()
    return response


@router.delete("/notes", response_model=MessageResponse)
async def remove_note(
    id: uuid.UUID = Query(...),  # noqa: A002
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await delete_note(db, str(id), user.id)
    await db.commit()
    return MessageResponse(message="Note deleted successfully")


# ── Reports ──


@router.post("/reports", response_model=ReportResponse, status_code=201)
async def post_report(
    body: CreateReportRequest,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    report = await create_report(db, str(body.streak_id), user.id, body.reason, body.description)
    response = ReportResponse.model_validate(report)
    await db.commit()
    return response


@router.get("/reports", response_model=ReportListResponse)
async def get_reports(
    status: ReportStatus | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    _admin: Profile = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
):
    reports = await list_reports(db, status=status, limit=limit, offset=offset)
    return ReportListResponse(reports=[ReportResponse.model_validate(r) for r in reports])


@router.post("/reports/{report_id}/resolve", response_model=ReportResponse)
async def post_resolve_report(
    report_id: uuid.UUID,
    body: ResolveReportRequest,
    admin: Profile = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
):
    report = await resolve_report(db, str(report_id), admin.id, body.action)
    response = ReportResponse.model_validate(report)
    await db.commit()
    return response
