"""Utility modules for the console.

Sub-modules:
- logging: configure_logging() for structlog setup
- parsing: number/datetime helpers for untrusted payloads (import directly from src.utils.parsing)
"""

from .logging import configure_logging

__all__ = [
    "configure_logging",
]
