import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx
from httpx import Response

from src.console.gateway import OrderGateway
from src.console.models import HealthStatus, Metrics, Order, OrderStatus, ResetResult
from src.console.normalizer import default_metrics
from src.console.session import ConsoleSession, parse_amount
from src.console.store import ReconciliationStore
from src.exceptions import InvalidOrderInput, RequestError, ValidationError

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
BASE = "http://backend.test"


def make_order(order_id, status=OrderStatus.QUEUED):
    return Order(
        id=order_id, base_token="SOL", quote_token="USDC",
        amount=1.5, status=status, timestamp=T0,
    )


def make_gateway():
    gateway = MagicMock()
    gateway.base_url = "http://backend.test"
    gateway.create_order = AsyncMock(return_value=make_order("o1"))
    gateway.list_orders = AsyncMock(return_value=[])
    gateway.fetch_metrics = AsyncMock(return_value=default_metrics())
    gateway.reset_state = AsyncMock(return_value=ResetResult(True, "ok"))
    return gateway


def make_session(store=None, **kwargs):
    store = store if store is not None else ReconciliationStore([make_order("a"), make_order("b")])
    return ConsoleSession(gateway=make_gateway(), store=store, simulate=False, **kwargs)


class TestParseAmount:
    @pytest.mark.parametrize("value", ["1.5", 2, 0.042])
    def test_valid(self, value):
        assert parse_amount(value) == float(value)

    @pytest.mark.parametrize("value", ["", "abc", "0", -1, "nan", "inf", None, True])
    def test_invalid(self, value):
        with pytest.raises(InvalidOrderInput):
            parse_amount(value)


class TestSubmitOrder:
    @pytest.mark.asyncio
    async def test_prepends_and_refreshes_metrics(self):
        session = make_session()
        order = await session.submit_order("SOL", "USDC", "1.5")

        assert order.id == "o1"
        assert len(session.store) == 3
        assert session.store.orders[0].id == "o1"
        session.gateway.create_order.assert_awaited_once_with("SOL", "USDC", 1.5)
        session.gateway.fetch_metrics.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalid_amount_makes_no_request(self):
        session = make_session()
        with pytest.raises(InvalidOrderInput):
            await session.submit_order("SOL", "USDC", "-2")
        session.gateway.create_order.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_token_rejected(self):
        session = make_session()
        with pytest.raises(InvalidOrderInput):
            await session.submit_order("", "USDC", "1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("base,quote", [(None, "USDC"), ("SOL", 5), (["SOL"], "USDC")])
    async def test_non_string_token_rejected(self, base, quote):
        session = make_session()
        with pytest.raises(InvalidOrderInput):
            await session.submit_order(base, quote, "1")
        session.gateway.create_order.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_create_leaves_store_untouched(self):
        session = make_session()
        session.gateway.create_order.side_effect = ValidationError("status")
        before = session.store.orders
        with pytest.raises(RequestError):
            await session.submit_order("SOL", "USDC", 1)
        assert session.store.orders is before

    @pytest.mark.asyncio
    async def test_completion_after_close_is_discarded(self):
        session = make_session()
        release = asyncio.Event()

        async def slow_create(*args):
            await release.wait()
            return make_order("late")

        session.gateway.create_order.side_effect = slow_create
        task = asyncio.create_task(session.submit_order("SOL", "USDC", 1))
        await asyncio.sleep(0)
        await session.close()
        release.set()
        await task
        assert session.store.get("late") is None


class TestRefresh:
    @pytest.mark.asyncio
    async def test_non_empty_list_replaces(self):
        session = make_session()
        session.gateway.list_orders.return_value = [make_order("x")]
        await session.refresh()
        assert [o.id for o in session.store.orders] == ["x"]

    @pytest.mark.asyncio
    async def test_failed_list_keeps_last_good(self):
        session = make_session()
        await session.refresh()
        assert [o.id for o in session.store.orders] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_failed_metrics_read_flags_degraded(self):
        store = ReconciliationStore(metrics=Metrics(8, 32, 42, 124.0))
        session = make_session(store)
        session.gateway.fetch_metrics.return_value = None
        await session.refresh_metrics()
        assert store.metrics == Metrics(8, 32, 42, 124.0, HealthStatus.DEGRADED)

    def test_injected_empty_store_is_used(self):
        store = ReconciliationStore()
        session = make_session(store)
        assert session.store is store

    @pytest.mark.asyncio
    async def test_backend_reported_degraded_zero_snapshot_is_applied(self):
        store = ReconciliationStore(metrics=Metrics(8, 32, 42, 124.0))
        zero_degraded = {
            "workersActive": 0, "maxWorkers": 0, "queueDepth": 0,
            "throughput": 0, "healthStatus": "degraded",
        }
        with respx.mock(base_url=BASE) as router:
            router.get("/api/metrics").mock(return_value=Response(200, json=zero_degraded))
            async with OrderGateway(BASE) as gateway:
                session = ConsoleSession(gateway=gateway, store=store, simulate=False)
                await session.refresh_metrics()
        assert store.metrics == Metrics(0, 0, 0, 0.0, HealthStatus.DEGRADED)

    @pytest.mark.asyncio
    async def test_transport_failure_keeps_last_good_gauges(self):
        store = ReconciliationStore(metrics=Metrics(8, 32, 42, 124.0))
        with respx.mock(base_url=BASE) as router:
            router.get("/api/metrics").mock(side_effect=httpx.ConnectError("refused"))
            async with OrderGateway(BASE) as gateway:
                session = ConsoleSession(gateway=gateway, store=store, simulate=False)
                await session.refresh_metrics()
        assert store.metrics == Metrics(8, 32, 42, 124.0, HealthStatus.DEGRADED)

    @pytest.mark.asyncio
    async def test_good_metrics_assigned(self):
        session = make_session()
        session.gateway.fetch_metrics.return_value = Metrics(2, 4, 0, 1.0)
        await session.refresh_metrics()
        assert session.store.metrics == Metrics(2, 4, 0, 1.0)


class TestReset:
    @pytest.mark.asyncio
    async def test_success_forces_replace(self):
        session = make_session()
        result = await session.reset()
        assert result.success
        assert session.store.orders == ()
        session.gateway.list_orders.assert_awaited_once()
        session.gateway.fetch_metrics.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_skips_refresh(self):
        session = make_session()
        session.gateway.reset_state.return_value = ResetResult(False, "Failed to reset state")
        result = await session.reset()
        assert not result.success
        assert len(session.store) == 2
        session.gateway.list_orders.assert_not_called()


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_simulation_ticks_until_closed(self):
        store = ReconciliationStore(metrics=Metrics(8, 32, 42))
        session = ConsoleSession(
            gateway=make_gateway(), store=store, simulate=True, tick_interval=0.01,
        )
        async with session:
            await asyncio.sleep(0.05)
        after_close = store.metrics
        await asyncio.sleep(0.03)
        assert store.metrics is after_close
        assert store.closed

    @pytest.mark.asyncio
    async def test_periodic_refresh(self):
        session = make_session(refresh_interval=0.01)
        session.gateway.list_orders.return_value = [make_order("fresh")]
        session.start()
        await asyncio.sleep(0.05)
        await session.close()
        assert session.store.orders[0].id == "fresh"


def test_copy_identifier_passes_through():
    copied = []
    session = make_session(clipboard=copied.append)
    assert session.copy_identifier("idem-8123-af92") == "idem-8123-af92"
    assert copied == ["idem-8123-af92"]
