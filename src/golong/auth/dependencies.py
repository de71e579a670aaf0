"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from golong.auth.jwt import verify_token
from golong.auth.service import get_profile_by_id
from golong.database import get_session
from golong.db.models import Profile
from golong.errors import Forbidden, Unauthorized

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> Profile:
    """Verify the bearer token and return the caller's profile; 401 otherwise."""
    if credentials is None:
        raise Unauthorized("Unauthorized")
    try:
        payload = verify_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        raise Unauthorized(str(e)) from e

    profile = await get_profile_by_id(db, str(payload["sub"]))
    if profile is None:
        raise Unauthorized("User not found")
    return profile


async def get_current_admin(
    user: Profile = Depends(get_current_user),
) -> Profile:
    """Same as get_current_user but additionally requires ``is_admin``."""
    if not user.is_admin:
        raise Forbidden("Admin access required")
    return user
