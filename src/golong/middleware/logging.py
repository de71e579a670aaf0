"""Structured logging configuration with structlog."""

import logging

import structlog

from golong.config import Settings


def setup_logging(settings: Settings) -> None:
    """Configure structlog; JSON lines in deployed environments, pretty console otherwise."""
    use_json = settings.log_format == "json"
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer()
    )

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if use_json:
        processors.append(structlog.processors.format_exc_info)
    processors += [structlog.processors.UnicodeDecoder(), renderer]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
    # SQL echo goes through the engine flag, not the root logger
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
