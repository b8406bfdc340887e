"""Centralized structlog configuration for the console."""

import logging
from typing import Optional

import structlog

_configured = False


def _resolve_level(level: str) -> int:
    """Map a level name to its number; unknown names fall back to INFO."""
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def configure_logging(level: Optional[str] = None) -> None:
    """Configure structlog with the project-standard processor chain.

    ``level`` defaults to ``CONSOLE_LOG_LEVEL``; events below it are dropped
    so the status line is not drowned out by per-request logs.
    Safe to call multiple times; only the first call takes effect.
    """
    global _configured
    if _configured:
        return
    if level is None:
        from config.settings import settings
        level = settings.CONSOLE_LOG_LEVEL
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level(level)),
    )
    _configured = True
