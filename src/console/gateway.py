# src/console/gateway.py
"""HTTP gateway to the execution backend.

Two mutating operations (``create_order``, ``reset_state``) and two reads
(``list_orders``, ``read_metrics``). Mutations surface failures so the
operator can be told; reads never raise and degrade to empty/default values
so a transient backend hiccup does not blank the dashboard.

The gateway holds no order or metrics state. Applying results is the
caller's job (see ``ReconciliationStore``).
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import httpx
import structlog

from src.console.ids import new_token
from src.console.models import HealthStatus, Metrics, Order, ResetResult
from src.console.normalizer import (
    default_metrics,
    normalize_metrics,
    normalize_order,
    normalize_orders,
    normalize_reset,
)
from src.exceptions import DegradedRead, RequestError, ValidationError

logger = structlog.get_logger()

ORDERS_PATH = "/api/orders"
METRICS_PATH = "/api/metrics"
RESET_PATH = "/api/reset"
IDEMPOTENCY_HEADER = "Idempotency-Key"


class OrderGateway:
    """Issues console commands against the backend REST API."""

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
        token_factory: Callable[[], str] = new_token,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )
        self._token_factory = token_factory

    @classmethod
    def from_settings(cls) -> "OrderGateway":
        from config.settings import settings
        return cls(
            settings.CONSOLE_API_BASE_URL,
            timeout=settings.CONSOLE_REQUEST_TIMEOUT_SECONDS,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "OrderGateway":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # -- transport -------------------------------------------------------

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise RequestError(f"{method} {path} failed: {exc}") from exc
        if not response.is_success:
            raise RequestError(
                f"{method} {path} failed: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise DegradedRead(f"non-JSON body ({len(response.content)} bytes)") from exc

    # -- mutations -------------------------------------------------------

    async def create_order(self, base_token: str, quote_token: str, amount: float) -> Order:
        """Submit a new order. Raises RequestError / ValidationError."""
        token = self._token_factory()
        body = {"baseToken": base_token, "quoteToken": quote_token, "amount": amount}
        try:
            response = await self._request(
                "POST", ORDERS_PATH, json=body, headers={IDEMPOTENCY_HEADER: token},
            )
            try:
                payload = self._json(response)
            except DegradedRead as exc:
                raise ValidationError("body", str(exc)) from exc
            order = normalize_order(payload)
        except RequestError as exc:
            logger.warning(
                "order_create_failed",
                idempotency_key=token,
                status_code=exc.status_code,
                field=getattr(exc, "field", None),
                error=str(exc),
            )
            raise
        logger.info(
            "order_created",
            order_id=order.id,
            pair=order.pair,
            amount=order.amount,
            status=order.status.value,
            idempotency_key=token,
        )
        return order

    async def reset_state(self) -> ResetResult:
        """Ask the backend to reset. Never raises."""
        try:
            response = await self._request("POST", RESET_PATH)
            result = normalize_reset(self._json(response))
        except (RequestError, DegradedRead) as exc:
            logger.warning("reset_failed", error=str(exc))
            return ResetResult(success=False, message="Failed to reset state")
        logger.info("reset_requested", success=result.success, message=result.message)
        return result

    # -- reads -----------------------------------------------------------

    async def list_orders(self) -> list[Order]:
        """Fetch the backlog. Returns ``[]`` on any failure."""
        try:
            response = await self._request("GET", ORDERS_PATH)
            return normalize_orders(self._json(response))
        except (RequestError, DegradedRead) as exc:
            logger.warning("orders_list_degraded", error=str(exc))
            return []

    async def fetch_metrics(self) -> Optional[Metrics]:
        """Fetch a metrics snapshot, or ``None`` when the request itself failed.

        A request that succeeded with an unusable body (text exposition, wrong
        shape) still yields a snapshot: the ``healthy`` default.
        """
        try:
            response = await self._request("GET", METRICS_PATH)
        except RequestError as exc:
            logger.warning("metrics_read_degraded", error=str(exc))
            return None
        try:
            payload = self._json(response)
        except DegradedRead:
            payload = response.text
        return normalize_metrics(payload)

    async def read_metrics(self) -> Metrics:
        """Fetch a metrics snapshot; a failed request yields the ``degraded`` default."""
        metrics = await self.fetch_metrics()
        if metrics is None:
            return default_metrics(HealthStatus.DEGRADED)
        return metrics
