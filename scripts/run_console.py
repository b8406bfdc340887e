#!/usr/bin/env python3
"""Operator console for the order execution backend.

Mirrors the backend's order backlog and worker/queue metrics. Without a live
feed the console drives the store locally: queued orders advance, executing
orders settle, worker and queue gauges random-walk within bounds.

USAGE:
    python scripts/run_console.py                           # watch, simulated
    python scripts/run_console.py --demo                    # seed sample orders
    python scripts/run_console.py --create SOL USDC 1.5     # submit one order
    python scripts/run_console.py --reset --no-simulate     # reset, then watch
"""

from __future__ import annotations

import argparse
import asyncio
import time

import structlog

from src.utils.logging import configure_logging

configure_logging()

from config.settings import settings
from config.validators import validate_console_api
from src.console.gateway import OrderGateway
from src.console.session import ConsoleSession
from src.console.simulator import demo_metrics, demo_orders
from src.console.status import StatusLine
from src.console.store import ReconciliationStore
from src.exceptions import ConsoleError

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Order execution operator console")
    p.add_argument("--base-url", type=str, default=settings.CONSOLE_API_BASE_URL)
    p.add_argument("--timeout", type=float, default=settings.CONSOLE_REQUEST_TIMEOUT_SECONDS,
                   help="HTTP timeout in seconds")
    p.add_argument("--tick-interval", type=float, default=settings.CONSOLE_TICK_INTERVAL_SECONDS,
                   help="Synthetic transition / metrics tick interval")
    p.add_argument("--refresh-interval", type=float,
                   default=settings.CONSOLE_REFRESH_INTERVAL_SECONDS,
                   help="Backlog refresh interval (0 = disabled)")
    p.add_argument("--status-interval", type=float,
                   default=settings.CONSOLE_STATUS_INTERVAL_SECONDS)
    p.add_argument("--simulate", dest="simulate", action="store_true",
                   default=settings.CONSOLE_SIMULATE)
    p.add_argument("--no-simulate", dest="simulate", action="store_false")
    p.add_argument("--demo", action="store_true", default=settings.CONSOLE_DEMO_SEED,
                   help="Seed sample orders and metrics")
    p.add_argument("--create", nargs=3, metavar=("BASE", "QUOTE", "AMOUNT"),
                   help="Submit one order before watching")
    p.add_argument("--reset", action="store_true", help="Reset backend state before watching")
    p.add_argument("--duration", type=float, default=0.0,
                   help="Stop after N seconds (0 = run until interrupted)")
    return p


async def main() -> None:
    args = build_parser().parse_args()
    settings.CONSOLE_API_BASE_URL = args.base_url
    validate_console_api()

    store = (
        ReconciliationStore(demo_orders(), demo_metrics())
        if args.demo else ReconciliationStore()
    )
    status = StatusLine(store, interval=args.status_interval)

    async with OrderGateway(args.base_url, timeout=args.timeout) as gateway:
        session = ConsoleSession(
            gateway=gateway,
            store=store,
            simulate=args.simulate,
            tick_interval=args.tick_interval,
            refresh_interval=args.refresh_interval,
        )

        print(f"=== Order Console {'(SIMULATED)' if args.simulate else '(LIVE)'} ===")
        print(f"  Backend:     {gateway.base_url}")
        print(f"  Tick:        {args.tick_interval}s")
        print(f"  Refresh:     {args.refresh_interval or 'off'}")
        print()

        if not args.demo:
            await session.refresh()

        if args.reset:
            result = await session.reset()
            print(f"Reset: {'ok' if result.success else 'FAILED'} - {result.message}")

        if args.create:
            base, quote, amount = args.create
            try:
                order = await session.submit_order(base, quote, amount)
                print(f"Created {order.id} {order.pair} {order.amount} [{order.status.value}]")
            except ConsoleError as exc:
                print(f"Failed to create order: {exc}")

        started = time.time()
        async with session:
            try:
                while not args.duration or time.time() - started < args.duration:
                    status.print_if_due()
                    await asyncio.sleep(min(1.0, args.tick_interval))
            except asyncio.CancelledError:
                logger.info("console_interrupted")
        print(status.format())


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
