"""Standalone one-shot runner for the abandoned-streak cleanup.

Usage: python -m golong.workers.cleanup_runner [--grace-days N]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from golong.cleanup.service import purge_abandoned_streaks
from golong.config import get_settings
from golong.database import close_db, get_session_factory, init_db

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


async def main(grace_days: int | None = None) -> int:
    """Run a single purge pass. Returns the process exit code."""
    settings = get_settings()
    if grace_days is None:
        grace_days = settings.cleanup_grace_days

    await init_db(settings.database_url)
    try:
        async with get_session_factory()() as db:
            result = await purge_abandoned_streaks(db, grace_days=grace_days)
    finally:
        await close_db()

    logger.info("Deleted %d abandoned streaks", result.deleted_count)
    for error in result.errors:
        logger.error("Cleanup error: %s", error)
    return 1 if result.errors else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Purge abandoned public streaks")
    parser.add_argument("--grace-days", type=int, default=None)
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.grace_days)))
