"""Public profile lookup and search: /api/v1/users/*."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from golong.auth.dependencies import get_current_user
from golong.auth.schemas import PublicProfileResponse, UserSearchResponse, UserSearchResult
from golong.auth.service import get_profile_by_username, search_profiles
from golong.database import get_session
from golong.db.models import Profile
from golong.errors import NotFound

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.get("/search", response_model=UserSearchResponse)
async def search_users(
    q: str = Query("", max_length=64),
    limit: int = Query(20, ge=1, le=50),
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Find other users by username or display name; a blank query finds nobody."""
    rows = await search_profiles(db, q, exclude_id=user.id, limit=limit)
    return UserSearchResponse(
        users=[
            UserSearchResult(
                **PublicProfileResponse.model_validate(profile).model_dump(),
                streaks_count=count,
            )
            for profile, count in rows
        ]
    )


@router.get("/{username}", response_model=PublicProfileResponse)
async def get_user_profile(
    username: str,
    _user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Get another user's public profile by username."""
    profile = await get_profile_by_username(db, username)
    if profile is None:
        raise NotFound("User not found")
    return PublicProfileResponse.model_validate(profile)
