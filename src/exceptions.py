"""Custom exceptions for the order execution console."""

from typing import Optional


class ConsoleError(Exception):
    """Base exception for all console errors."""


class ConfigError(ConsoleError):
    """Missing or invalid configuration."""


class RequestError(ConsoleError):
    """A backend request failed: non-success status or transport error."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ValidationError(RequestError):
    """A response payload failed required-field checks."""

    def __init__(self, field: str, message: str = "") -> None:
        super().__init__(message or f"invalid or missing field: {field}")
        self.field = field


class DegradedRead(ConsoleError):
    """A read reached the backend but returned an unusable body."""


class InvalidOrderInput(ConsoleError):
    """Operator input rejected before any request is made."""
