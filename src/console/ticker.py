# src/console/ticker.py
"""Cancellable periodic tasks on the running event loop."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, Union

import structlog

logger = structlog.get_logger()

TickCallback = Callable[[], Union[None, Awaitable[None]]]


class TickerHandle:
    """Returned by ``start_ticker``; ``cancel()`` guarantees no further ticks."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._cancelled = False
        self._task: Optional[asyncio.Task] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait_closed(self) -> None:
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass


async def _run(handle: TickerHandle, callback: TickCallback, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        if handle.cancelled:
            return
        try:
            result = callback()
            if asyncio.iscoroutine(result):
                await result
        except Exception as exc:
            logger.error("ticker_callback_error", ticker=handle.name, error=str(exc))


def start_ticker(callback: TickCallback, interval: float, *, name: str = "ticker") -> TickerHandle:
    """Call ``callback`` every ``interval`` seconds until the handle is cancelled.

    Must be called from inside a running event loop.
    """
    if interval <= 0:
        raise ValueError(f"interval must be positive, got {interval}")
    handle = TickerHandle(name)
    handle._task = asyncio.get_running_loop().create_task(
        _run(handle, callback, interval), name=name,
    )
    return handle
