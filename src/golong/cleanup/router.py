"""Abandoned-streak cleanup trigger: /api/v1/cleanup/*."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from golong.auth.dependencies import get_current_admin
from golong.cleanup.schemas import CleanupResponse
from golong.cleanup.service import purge_abandoned_streaks
from golong.config import get_settings
from golong.database import get_session
from golong.db.models import Profile

router = APIRouter(prefix="/api/v1/cleanup", tags=["Cleanup"])


@router.post(
    "/abandoned-streaks",
    response_model=CleanupResponse,
    response_model_by_alias=True,
)
async def cleanup_abandoned_streaks(
    _admin: Profile = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
):
    """Purge public streaks that have had no active participant for the grace period.

    Per-streak failures are reported in ``errors`` and do not abort the run.
    """
    result = await purge_abandoned_streaks(db, grace_days=get_settings().cleanup_grace_days)
    return CleanupResponse(deleted_count=result.deleted_count, errors=result.errors)
