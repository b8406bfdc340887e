# src/console/simulator.py
"""Local stand-in for a live backend feed.

Pure functions of the previous snapshot plus a random source. Inputs are
clamped before any randomization, so malformed snapshots still produce
in-bound output.
"""

from __future__ import annotations

import random
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Iterable, Optional

from src.console.models import HealthStatus, Metrics, Order, OrderStatus
from src.utils.parsing import _clamp, _is_number, _utcnow

MIN_ACTIVE_WORKERS = 4
DEFAULT_MAX_WORKERS = 32
WORKER_STEP = 1
QUEUE_STEP = 2

QUEUED_ADVANCE_PROB = 0.3
EXECUTING_SETTLE_PROB = 0.2
SUCCESS_PROB = 0.9


def _sanitize(previous: Metrics) -> Metrics:
    max_workers = previous.max_workers
    if not _is_number(max_workers) or max_workers < 0:
        max_workers = DEFAULT_MAX_WORKERS
    max_workers = int(max_workers)

    workers = previous.workers_active
    workers = int(workers) if _is_number(workers) else 0
    workers = int(_clamp(workers, 0, max_workers))

    queue = previous.queue_depth
    queue = max(0, int(queue)) if _is_number(queue) else 0

    throughput = previous.throughput
    throughput = max(0.0, float(throughput)) if _is_number(throughput) else 0.0

    health = previous.health_status
    if not isinstance(health, HealthStatus):
        health = HealthStatus.HEALTHY

    return Metrics(
        workers_active=workers,
        max_workers=max_workers,
        queue_depth=queue,
        throughput=throughput,
        health_status=health,
    )


def next_metrics(previous: Metrics, rng: Optional[random.Random] = None) -> Metrics:
    """One random-walk step: workers ±1 in [4, max_workers], queue ±2 in [0, inf).

    When ``max_workers`` is below the floor of 4, the ceiling wins.
    """
    rng = rng or random
    base = _sanitize(previous)
    worker_delta = WORKER_STEP if rng.random() > 0.5 else -WORKER_STEP
    queue_delta = QUEUE_STEP if rng.random() > 0.5 else -QUEUE_STEP
    workers = min(base.max_workers, max(MIN_ACTIVE_WORKERS, base.workers_active + worker_delta))
    return replace(
        base,
        workers_active=workers,
        queue_depth=max(0, base.queue_depth + queue_delta),
    )


def advance_order(
    order: Order,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> Order:
    """Maybe move an order one step forward. Terminal orders come back as-is."""
    rng = rng or random
    if order.status is OrderStatus.QUEUED:
        if rng.random() < QUEUED_ADVANCE_PROB:
            return replace(order, status=OrderStatus.EXECUTING, timestamp=now or _utcnow())
    elif order.status is OrderStatus.EXECUTING:
        if rng.random() < EXECUTING_SETTLE_PROB:
            status = OrderStatus.SUCCESS if rng.random() < SUCCESS_PROB else OrderStatus.FAILED
            return replace(order, status=status, timestamp=now or _utcnow())
    return order


def advance_orders(
    orders: Iterable[Order],
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> tuple[Order, ...]:
    now = now or _utcnow()
    return tuple(advance_order(o, rng, now) for o in orders)


# ---------------------------------------------------------------------------
# Demo seed
# ---------------------------------------------------------------------------


def demo_orders(now: Optional[datetime] = None) -> tuple[Order, ...]:
    """Three sample orders, one per non-failed lifecycle stage."""
    now = now or _utcnow()
    return (
        Order(
            id="ord_7f2k9x1m5",
            base_token="SOL",
            quote_token="USDC",
            amount=145.5,
            status=OrderStatus.SUCCESS,
            timestamp=now - timedelta(minutes=5),
            idempotency_key="idem-8123-af92",
        ),
        Order(
            id="ord_1a8b3c4d5",
            base_token="ETH",
            quote_token="USDT",
            amount=1.25,
            status=OrderStatus.EXECUTING,
            timestamp=now - timedelta(seconds=15),
            idempotency_key="idem-9210-cc01",
        ),
        Order(
            id="ord_9z0y1x2w3",
            base_token="BTC",
            quote_token="USDC",
            amount=0.042,
            status=OrderStatus.QUEUED,
            timestamp=now - timedelta(seconds=5),
            idempotency_key="idem-4411-bd22",
        ),
    )


def demo_metrics() -> Metrics:
    return Metrics(
        workers_active=8,
        max_workers=DEFAULT_MAX_WORKERS,
        queue_depth=42,
        throughput=124.0,
        health_status=HealthStatus.HEALTHY,
    )
