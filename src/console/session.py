# src/console/session.py
"""Operator session: wires gateway, store and tickers together."""

from __future__ import annotations

import asyncio
import math
from typing import Any, Callable, Optional

import structlog

from src.console.gateway import OrderGateway
from src.console.models import Metrics, Order, ResetResult
from src.console.store import ReconciliationStore
from src.console.ticker import TickerHandle, start_ticker
from src.exceptions import InvalidOrderInput

logger = structlog.get_logger()


def parse_amount(value: Any) -> float:
    """Operator-side amount check: a positive finite number."""
    if isinstance(value, bool):
        raise InvalidOrderInput("Please enter a valid positive number for amount.")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InvalidOrderInput("Please enter a valid positive number for amount.") from None
    if not math.isfinite(amount) or amount <= 0:
        raise InvalidOrderInput("Please enter a valid positive number for amount.")
    return amount


class ConsoleSession:
    """One operator session, from construction to ``close()``.

    Owns the periodic tickers; the store it is given must not be shared with
    another session.
    """

    def __init__(
        self,
        *,
        gateway: OrderGateway,
        store: ReconciliationStore,
        simulate: bool = True,
        tick_interval: float = 3.0,
        refresh_interval: float = 0.0,
        clipboard: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.gateway = gateway
        self.store = store
        self.simulate = simulate
        self.tick_interval = tick_interval
        self.refresh_interval = refresh_interval
        self._clipboard = clipboard
        self._tickers: list[TickerHandle] = []

    # ── Lifecycle ───────────────────────────────────────────────────

    def start(self) -> None:
        if self._tickers:
            return
        if self.simulate:
            self._tickers.append(
                start_ticker(self.store.tick, self.tick_interval, name="synthetic_tick")
            )
        if self.refresh_interval > 0:
            self._tickers.append(
                start_ticker(self.refresh, self.refresh_interval, name="backlog_refresh")
            )
        logger.info(
            "session_started",
            base_url=self.gateway.base_url,
            simulate=self.simulate,
            orders=len(self.store),
        )

    async def close(self) -> None:
        for handle in self._tickers:
            handle.cancel()
        for handle in self._tickers:
            await handle.wait_closed()
        self._tickers.clear()
        self.store.close()
        logger.info("session_closed")

    async def __aenter__(self) -> "ConsoleSession":
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ── Commands ────────────────────────────────────────────────────

    async def submit_order(self, base_token: str, quote_token: str, amount: Any) -> Order:
        """Validate input, create the order, then prepend it and refresh metrics.

        Raises InvalidOrderInput before any request, or RequestError /
        ValidationError from the gateway.
        """
        if not isinstance(base_token, str) or not isinstance(quote_token, str):
            raise InvalidOrderInput("Base and quote tokens must be symbols.")
        base_token = base_token.strip()
        quote_token = quote_token.strip()
        if not base_token or not quote_token:
            raise InvalidOrderInput("Base and quote tokens are required.")
        parsed = parse_amount(amount)

        order = await self.gateway.create_order(base_token, quote_token, parsed)
        self.store.prepend(order)
        await self.refresh_metrics()
        return order

    async def reset(self) -> ResetResult:
        """Reset the backend, then reload orders and metrics on success."""
        result = await self.gateway.reset_state()
        if not result.success:
            logger.warning("reset_not_confirmed", message=result.message)
            return result
        orders, metrics = await asyncio.gather(
            self.gateway.list_orders(),
            self.gateway.fetch_metrics(),
        )
        self.store.replace_orders(orders, force=True)
        self._apply_metrics(metrics)
        return result

    async def refresh(self) -> None:
        orders, metrics = await asyncio.gather(
            self.gateway.list_orders(),
            self.gateway.fetch_metrics(),
        )
        self.store.replace_orders(orders)
        self._apply_metrics(metrics)

    async def refresh_metrics(self) -> None:
        self._apply_metrics(await self.gateway.fetch_metrics())

    def _apply_metrics(self, metrics: Optional[Metrics]) -> None:
        if metrics is None:
            self.store.mark_degraded()
        else:
            self.store.apply_metrics(metrics)

    def copy_identifier(self, text: str) -> str:
        """Hand an id or idempotency key to the clipboard, unchanged."""
        if self._clipboard is not None:
            self._clipboard(text)
        return text
