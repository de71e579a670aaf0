"""arq jobs for the abandoned-streak cleanup."""

from __future__ import annotations

import logging

from golong.cleanup.service import purge_abandoned_streaks
from golong.config import get_settings
from golong.database import close_db, get_session_factory, init_db

logger = logging.getLogger(__name__)


async def cleanup_startup(ctx: dict) -> None:  # type: ignore[type-arg]
    """Initialize the database engine on worker startup."""
    settings = get_settings()
    await init_db(settings.database_url)
    ctx["grace_days"] = settings.cleanup_grace_days
    logger.info("Cleanup worker started (grace_days=%d)", settings.cleanup_grace_days)


async def cleanup_shutdown(ctx: dict) -> None:  # type: ignore[type-arg]
    await close_db()
    logger.info("Cleanup worker shut down")


async def purge_abandoned(ctx: dict) -> dict[str, object]:  # type: ignore[type-arg]
    """Run one purge pass with a dedicated session."""
    grace_days = ctx.get("grace_days", get_settings().cleanup_grace_days)
    async with get_session_factory()() as db:
        result = await purge_abandoned_streaks(db, grace_days=grace_days)

    if result.errors:
        logger.warning("Cleanup finished with %d errors", len(result.errors))
    logger.info("Purged %d abandoned streaks", result.deleted_count)
    return {"deleted_count": result.deleted_count, "errors": result.errors}
