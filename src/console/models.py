# src/console/models.py
"""Strict internal model mirrored from the execution backend."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class OrderStatus(str, Enum):
    QUEUED = "QUEUED"
    EXECUTING = "EXECUTING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.SUCCESS, OrderStatus.FAILED)

    @property
    def rank(self) -> int:
        """Lifecycle position; both terminal states share the last rank."""
        return _STATUS_RANK[self]


_STATUS_RANK = {
    OrderStatus.QUEUED: 0,
    OrderStatus.EXECUTING: 1,
    OrderStatus.SUCCESS: 2,
    OrderStatus.FAILED: 2,
}

_FORWARD = {
    OrderStatus.QUEUED: {OrderStatus.EXECUTING},
    OrderStatus.EXECUTING: {OrderStatus.SUCCESS, OrderStatus.FAILED},
    OrderStatus.SUCCESS: set(),
    OrderStatus.FAILED: set(),
}


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    """True if ``new`` is a single valid forward step from ``current``."""
    return new in _FORWARD[current]


def is_forward(current: OrderStatus, new: OrderStatus) -> bool:
    """True if ``new`` lies strictly further along the lifecycle.

    Unlike ``can_transition`` this allows skipping EXECUTING, which a
    pushed event may do when intermediate updates were missed.
    """
    if current.is_terminal:
        return False
    return new.rank > current.rank


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    DOWN = "down"


@dataclass(frozen=True, slots=True)
class Order:
    id: str
    base_token: str
    quote_token: str
    amount: float
    status: OrderStatus
    timestamp: datetime  # last known transition, tz-aware UTC
    idempotency_key: Optional[str] = None

    @property
    def pair(self) -> str:
        return f"{self.base_token}/{self.quote_token}"


@dataclass(frozen=True, slots=True)
class Metrics:
    workers_active: int = 0
    max_workers: int = 0
    queue_depth: int = 0
    throughput: float = 0.0
    health_status: HealthStatus = HealthStatus.HEALTHY


@dataclass(frozen=True, slots=True)
class ResetResult:
    success: bool
    message: str
