"""Streak access checks shared by the social services."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from golong.db.models import Streak
from golong.errors import Forbidden
from golong.streaks.service import require_streak


async def require_public_streak(db: AsyncSession, streak_id: str) -> Streak:
    """Comments and likes exist only on public streaks, for everyone including the owner."""
    streak = await require_streak(db, streak_id)
    if not streak.is_public:
        raise Forbidden("Access denied")
    return streak


async def require_note_access(db: AsyncSession, streak_id: str, user_id: str) -> Streak:
    """Notes on a public streak are open; on a private one only the owner may touch them."""
    streak = await require_streak(db, streak_id)
    if not streak.is_public and streak.created_by != user_id:
        raise Forbidden("Access denied")
    return streak
