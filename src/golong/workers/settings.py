"""arq worker settings module.

Import path for arq CLI: arq golong.workers.settings.WorkerSettings
"""

from __future__ import annotations

from arq import cron
from arq.connections import RedisSettings

from golong.config import get_settings
from golong.workers.cleanup import cleanup_shutdown, cleanup_startup, purge_abandoned

_settings = get_settings()


class WorkerSettings:
    """arq worker settings for scheduled maintenance."""

    functions = [purge_abandoned]
    cron_jobs = [
        # once a day, default 03:00 UTC
        cron(purge_abandoned, hour={_settings.cleanup_cron_hour}, minute={0}, run_at_startup=False),
    ]
    on_startup = cleanup_startup
    on_shutdown = cleanup_shutdown
    redis_settings = RedisSettings.from_dsn(_settings.redis_url)
    max_jobs = 1
    job_timeout = 600
