"""
Logging setup - Nexus Intelligence Engine
nexus_engine/core/log_config.py

Configures stdlib logging and structlog from Settings.LOG_LEVEL / LOG_FORMAT.
"""

import logging
import sys

import structlog

from nexus_engine.config import Settings


def configure_logging(settings: Settings) -> None:
    """Configure stdlib logging and structlog once at start-up."""
    level = getattr(logging, settings.LOG_LEVEL)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.LOG_FORMAT == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
