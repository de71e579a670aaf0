"""Helpers shared by the test modules."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from golong.auth.jwt import create_access_token
from golong.auth.service import register_profile
from golong.db.models import Profile, Streak

TEST_PASSWORD = "Str0ngPassw0rd"


async def make_user(
    db: AsyncSession,
    username: str,
    *,
    is_admin: bool = False,
) -> tuple[Profile, dict[str, str]]:
    """Register and commit a profile; return it with its bearer auth headers."""
    profile = await register_profile(
        db,
        f"{username}@mail.golong.app",
        username,
        TEST_PASSWORD,
        is_admin=is_admin,
    )
    await db.commit()
    token = create_access_token(profile.id, profile.username)
    return profile, {"Authorization": f"Bearer {token}"}


async def backdate_abandonment(db: AsyncSession, streak_id: str, days: int) -> None:
    """Pretend the streak lost its last member ``days`` ago."""
    await db.execute(
        update(Streak)
        .where(Streak.id == streak_id)
        .values(last_member_left_at=datetime.now(timezone.utc) - timedelta(days=days))
    )
    await db.commit()
