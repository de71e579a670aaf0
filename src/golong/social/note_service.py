"""Notes: journal entries on a streak, owner-only on private streaks."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from golong.db.models import Note, Profile
from golong.errors import Forbidden, NotFound, ValidationFailed
from golong.social.access import require_note_access

logger = structlog.get_logger()


def _clean(content: str) -> str:
    content = content.strip()
    if not content:
        raise ValidationFailed("Note content is required")
    return content


async def list_notes(
    db: AsyncSession,
    streak_id: str,
    user_id: str,
    limit: int = 50,
    offset: int = 0,
) -> list[tuple[Note, Profile]]:
    await require_note_access(db, streak_id, user_id)
    result = await db.execute(
        select(Note, Profile)
        .join(Profile, Profile.id == Note.user_id)
        .where(Note.streak_id == streak_id)
        .order_by(Note.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    return [(row.Note, row.Profile) for row in result]


async def create_note(db: AsyncSession, streak_id: str, user_id: str, content: str) -> Note:
    content = _clean(content)
    await require_note_access(db, streak_id, user_id)
    note = Note(streak_id=streak_id, user_id=user_id, content=content)
    db.add(note)
    await db.flush()
    logger.info("note_created", streak_id=streak_id, user_id=user_id, note_id=note.id)
    return note


async def _require_own_note(db: AsyncSession, note_id: str, user_id: str) -> Note:
    result = await db.execute(select(Note).where(Note.id == note_id))
    note = result.scalar_one_or_none()
    if note is None:
        raise NotFound("Note not found")
    if note.user_id != user_id:
        raise Forbidden("You can only modify your own notes")
    await require_note_access(db, note.streak_id, user_id)
    return note


async def update_note(db: AsyncSession, note_id: str, user_id: str, content: str) -> Note:
    content = _clean(content)
    note = await _require_own_note(db, note_id, user_id)
    note.content = content
    note.updated_at = datetime.now(timezone.utc)
    await db.flush()
    return note


async def delete_note(db: AsyncSession, note_id: str, user_id: str) -> None:
    note = await _require_own_note(db, note_id, user_id)
    await db.delete(note)
    await db.flush()
    logger.info("note_deleted", note_id=note_id, user_id=user_id)
