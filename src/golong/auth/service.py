"""
Account business logic.

Handles sign-up, password login and profile lookups.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, or_, select

from golong.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from golong.db.models import Profile, Streak
from golong.errors import Conflict, Unauthorized, ValidationFailed

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Profile queries
# ---------------------------------------------------------------------------


async def get_profile_by_id(db: AsyncSession, profile_id: str) -> Profile | None:
    result = await db.execute(select(Profile).where(Profile.id == profile_id))
    return result.scalar_one_or_none()


async def get_profile_by_email(db: AsyncSession, email: str) -> Profile | None:
    """Fetch a profile by email (case-insensitive)."""
    result = await db.execute(select(Profile).where(func.lower(Profile.email) == email.lower()))
    return result.scalar_one_or_none()


async def get_profile_by_username(db: AsyncSession, username: str) -> Profile | None:
    """Fetch a profile by username (case-insensitive)."""
    result = await db.execute(select(Profile).where(func.lower(Profile.username) == username.lower()))
    return result.scalar_one_or_none()


async def search_profiles(
    db: AsyncSession,
    query: str,
    exclude_id: str,
    limit: int = 20,
) -> list[tuple[Profile, int]]:
    """Profiles whose username or display name contains ``query``.

    Each match is paired with how many public streaks it created. The
    searcher is never part of the results.
    """
    needle = query.strip().lower()
    if not needle:
        return []
    pattern = "%" + needle.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_") + "%"

    public_streaks = (
        select(func.count(Streak.id))
        .where(Streak.created_by == Profile.id, Streak.is_public.is_(True))
        .correlate(Profile)
        .scalar_subquery()
    )
    result = await db.execute(
        select(Profile, public_streaks.label("streaks_count"))
        .where(
            Profile.id != exclude_id,
            or_(
                func.lower(Profile.username).like(pattern, escape="\\"),
                func.lower(func.coalesce(Profile.display_name, "")).like(pattern, escape="\\"),
            ),
        )
        .order_by(func.lower(Profile.username))
        .limit(limit)
    )
    return [(row.Profile, int(row.streaks_count)) for row in result]


# ---------------------------------------------------------------------------
# Sign-up / login
# ---------------------------------------------------------------------------


async def register_profile(
    db: AsyncSession,
    email: str,
    username: str,
    password: str,
    display_name: str | None = None,
    *,
    is_admin: bool = False,
) -> Profile:
    """
    Create a profile with an argon2id password hash.

    Raises:
        ValidationFailed: If the password is weak.
        Conflict: If the email or username is already taken.
    """
    try:
        validate_password_strength(password)
    except PasswordStrengthError as e:
        raise ValidationFailed(str(e)) from e

    if await get_profile_by_email(db, email) is not None:
        raise Conflict("Email already registered")
    if await get_profile_by_username(db, username) is not None:
        raise Conflict("Username already taken")

    now = datetime.now(timezone.utc)
    profile = Profile(
        email=email.lower().strip(),
        username=username.lower(),
        password_hash=hash_password(password),
        display_name=display_name or username,
        is_admin=is_admin,
        created_at=now,
        updated_at=now,
    )
    db.add(profile)
    await db.flush()
    logger.info("profile_created", profile_id=profile.id, username=profile.username)
    return profile


async def authenticate(db: AsyncSession, email: str, password: str) -> Profile:
    """
    Check email + password.

    Raises:
        Unauthorized: If the credentials do not match a profile.
    """
    profile = await get_profile_by_email(db, email)
    if profile is None or not verify_password(password, profile.password_hash):
        raise Unauthorized("Invalid email or password")

    if check_needs_rehash(profile.password_hash):
        profile.password_hash = hash_password(password)
        profile.updated_at = datetime.now(timezone.utc)
        await db.flush()
        logger.info("password_rehashed", profile_id=profile.id)

    return profile
