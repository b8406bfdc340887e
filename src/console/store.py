# src/console/store.py
"""In-memory record of orders and metrics for one console session.

Every mutation replaces either the whole order tuple or the whole metrics
snapshot in a single assignment, so an interleaved tick and gateway result
can never observe or leave a half-written state. Once ``close()`` has been
called all mutations are discarded, which covers commands that resolve after
the session is torn down.
"""

from __future__ import annotations

import random
from dataclasses import replace
from typing import Iterable, Optional

import structlog

from src.console.models import HealthStatus, Metrics, Order, is_forward
from src.console.normalizer import default_metrics
from src.console.simulator import advance_orders, next_metrics

logger = structlog.get_logger()


class ReconciliationStore:
    """Owns the current order collection and metrics snapshot."""

    def __init__(
        self,
        orders: Iterable[Order] = (),
        metrics: Optional[Metrics] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._orders: tuple[Order, ...] = tuple(orders)
        self._metrics: Metrics = metrics or default_metrics()
        self._rng = rng or random.Random()
        self._closed = False

    # ── Read side ───────────────────────────────────────────────────

    @property
    def orders(self) -> tuple[Order, ...]:
        return self._orders

    @property
    def metrics(self) -> Metrics:
        return self._metrics

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, order_id: str) -> Optional[Order]:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    def __len__(self) -> int:
        return len(self._orders)

    def close(self) -> None:
        self._closed = True

    def _discard(self, op: str) -> bool:
        if self._closed:
            logger.debug("store_update_discarded", op=op)
            return True
        return False

    # ── Order mutations ─────────────────────────────────────────────

    def prepend(self, order: Order) -> bool:
        """Optimistic insertion of a freshly created order.

        A replayed idempotent create returns an order already present; the
        old entry is dropped so the id stays unique.
        """
        if self._discard("prepend"):
            return False
        rest = tuple(o for o in self._orders if o.id != order.id)
        self._orders = (order,) + rest
        return True

    def replace_orders(self, orders: Iterable[Order], *, force: bool = False) -> bool:
        """Authoritative full refresh. An empty list is ignored unless forced."""
        if self._discard("replace_orders"):
            return False
        fresh = tuple(orders)
        if not fresh and not force:
            return False
        self._orders = fresh
        return True

    def apply_event(self, order: Order) -> bool:
        """Merge a backend-pushed lifecycle update, matched by id.

        Only strictly forward status moves are applied. Duplicate, stale or
        backward events and anything aimed at a terminal order are ignored.
        Unknown ids are prepended.
        """
        if self._discard("apply_event"):
            return False
        current = self.get(order.id)
        if current is None:
            self._orders = (order,) + self._orders
            return True
        if not is_forward(current.status, order.status):
            logger.debug(
                "order_event_ignored",
                order_id=order.id,
                current=current.status.value,
                incoming=order.status.value,
            )
            return False
        merged = replace(
            order,
            idempotency_key=order.idempotency_key or current.idempotency_key,
        )
        self._orders = tuple(merged if o.id == order.id else o for o in self._orders)
        return True

    def tick_orders(self) -> int:
        """Synthetic lifecycle step. Returns the number of orders moved."""
        if self._discard("tick_orders"):
            return 0
        before = self._orders
        after = advance_orders(before, self._rng)
        self._orders = after
        return sum(1 for old, new in zip(before, after) if old is not new)

    # ── Metrics mutations ───────────────────────────────────────────

    def apply_metrics(self, metrics: Metrics) -> bool:
        """Direct assignment from a read or event."""
        if self._discard("apply_metrics"):
            return False
        self._metrics = metrics
        return True

    def mark_degraded(self) -> bool:
        """A metrics read failed: keep the last-good gauges, flag health."""
        if self._discard("mark_degraded"):
            return False
        self._metrics = replace(self._metrics, health_status=HealthStatus.DEGRADED)
        return True

    def tick_metrics(self) -> bool:
        if self._discard("tick_metrics"):
            return False
        self._metrics = next_metrics(self._metrics, self._rng)
        return True

    def tick(self) -> int:
        moved = self.tick_orders()
        self.tick_metrics()
        return moved

    # ── Reset ───────────────────────────────────────────────────────

    def clear(self) -> bool:
        """Drop all orders; the only way orders are ever deleted."""
        return self.replace_orders((), force=True)
