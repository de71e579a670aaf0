"""Account router: all /api/v1/auth/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from golong.auth.dependencies import get_current_user
from golong.auth.jwt import create_access_token
from golong.auth.schemas import LoginRequest, ProfileResponse, SignupRequest, TokenResponse
from golong.auth.service import authenticate, register_profile
from golong.config import get_settings
from golong.database import get_session
from golong.db.models import Profile

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


def _token_response(profile: Profile) -> TokenResponse:
    settings = get_settings()
    return TokenResponse(
        access_token=create_access_token(profile.id, profile.username),
        expires_in=settings.jwt_access_token_expire_minutes * 60,
        user=ProfileResponse.model_validate(profile),
    )


@router.post("/signup", response_model=TokenResponse, status_code=201)
async def signup(body: SignupRequest, db: AsyncSession = Depends(get_session)):
    """Create an account and sign it in."""
    profile = await register_profile(db, body.email, body.username, body.password, body.display_name)
    await db.commit()
    return _token_response(profile)


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_session)):
    profile = await authenticate(db, body.email, body.password)
    await db.commit()
    return _token_response(profile)


@router.get("/me", response_model=ProfileResponse)
async def me(user: Profile = Depends(get_current_user)):
    return ProfileResponse.model_validate(user)
