# src/console/status.py
from __future__ import annotations
import time
from collections import Counter
from datetime import datetime, timezone
from src.console.models import OrderStatus
from src.console.store import ReconciliationStore


class StatusLine:

    def __init__(self, store: ReconciliationStore, interval: float = 30.0) -> None:
        self.store = store
        self._last_print: float = 0.0
        self._interval: float = interval

    def print_if_due(self) -> None:
        if time.time() - self._last_print < self._interval:
            return
        self._last_print = time.time()
        print(self.format(), flush=True)

    def format(self) -> str:
        now = datetime.now(timezone.utc).strftime("%H:%M:%S")
        counts = Counter(o.status for o in self.store.orders)
        m = self.store.metrics
        return (
            f"[{now}] orders={len(self.store)} "
            f"queued={counts[OrderStatus.QUEUED]} "
            f"exec={counts[OrderStatus.EXECUTING]} "
            f"ok={counts[OrderStatus.SUCCESS]} "
            f"failed={counts[OrderStatus.FAILED]} | "
            f"workers={m.workers_active}/{m.max_workers} "
            f"queue={m.queue_depth} tput={m.throughput:.0f} "
            f"health={m.health_status.value}"
        )
