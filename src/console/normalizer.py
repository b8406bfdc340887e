# src/console/normalizer.py
"""Canonicalize backend payloads into the strict console model.

The backend does not commit to a single response shape across deployments.
Entities may arrive bare or wrapped (``{"order": ...}`` / ``{"data": ...}``),
lists bare or wrapped (``{"orders": [...]}`` / ``{"data": [...]}``), and the
metrics endpoint may answer with an exposition-format text body. Everything
downstream of this module only ever sees ``Order`` / ``Metrics`` values.

Policy:
    - ``normalize_order`` is strict: a missing or mistyped required field
      raises ``ValidationError`` naming the field.
    - ``normalize_orders`` and ``normalize_metrics`` degrade to empty / default
      values instead of raising.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog

from src.console.models import HealthStatus, Metrics, Order, OrderStatus, ResetResult
from src.exceptions import ValidationError
from src.utils.parsing import _is_number, _parse_datetime, _to_count, _to_rate, _utcnow

logger = structlog.get_logger()

_ORDER_KEYS = ("id", "baseToken", "quoteToken", "amount", "status")
_METRICS_KEYS = ("workersActive", "maxWorkers", "queueDepth", "throughput", "healthStatus")
_RESET_OK = {"ok", "success", "succeeded", "reset"}


def default_metrics(health: HealthStatus = HealthStatus.HEALTHY) -> Metrics:
    """Conservative snapshot: all gauges zero."""
    return Metrics(health_status=health)


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


def _unwrap_entity(raw: Any, keys: tuple[str, ...], wrappers: tuple[str, ...]) -> Any:
    """Direct value first, then each wrapper key in order."""
    if not isinstance(raw, dict):
        return raw
    if any(k in raw for k in keys):
        return raw
    for wrapper in wrappers:
        inner = raw.get(wrapper)
        if isinstance(inner, dict):
            return inner
    return raw


def _unwrap_list(raw: Any) -> Optional[list[Any]]:
    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict):
        for wrapper in ("orders", "data"):
            inner = raw.get(wrapper)
            if isinstance(inner, list):
                return inner
    return None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


def _require_str(entity: dict[str, Any], field: str) -> str:
    value = entity.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field)
    return value.strip()


def normalize_order(raw: Any) -> Order:
    """Validate one order entity in any supported envelope."""
    entity = _unwrap_entity(raw, _ORDER_KEYS, ("order", "data"))
    if not isinstance(entity, dict):
        raise ValidationError("id", "order payload is not an object")

    order_id = _require_str(entity, "id")
    base_token = _require_str(entity, "baseToken")
    quote_token = _require_str(entity, "quoteToken")

    amount = entity.get("amount")
    if not _is_number(amount) or amount <= 0:
        raise ValidationError("amount")

    raw_status = entity.get("status")
    if not isinstance(raw_status, str):
        raise ValidationError("status")
    try:
        status = OrderStatus(raw_status.strip().upper())
    except ValueError:
        raise ValidationError("status", f"unknown order status: {raw_status!r}") from None

    timestamp = _parse_datetime(entity.get("timestamp")) or _utcnow()

    idempotency_key = entity.get("idempotencyKey")
    if not isinstance(idempotency_key, str) or not idempotency_key:
        idempotency_key = None

    return Order(
        id=order_id,
        base_token=base_token,
        quote_token=quote_token,
        amount=float(amount),
        status=status,
        timestamp=timestamp,
        idempotency_key=idempotency_key,
    )


def normalize_orders(raw: Any) -> list[Order]:
    """Normalize a list read. Non-list shapes yield ``[]``; bad rows are skipped."""
    rows = _unwrap_list(raw)
    if rows is None:
        logger.warning("orders_payload_not_list", payload_type=type(raw).__name__)
        return []

    orders: list[Order] = []
    for idx, row in enumerate(rows):
        try:
            orders.append(normalize_order(row))
        except ValidationError as exc:
            logger.warning("order_row_skipped", index=idx, field=exc.field)
    return orders


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


def _parse_health(value: Any) -> HealthStatus:
    if isinstance(value, str):
        try:
            return HealthStatus(value.strip().lower())
        except ValueError:
            pass
    return HealthStatus.HEALTHY


def normalize_metrics(raw: Any) -> Metrics:
    """Normalize a metrics read; never raises.

    Text bodies (Prometheus exposition) are not parsed here: they mean the
    endpoint is alive, so the healthy default is returned.
    """
    if isinstance(raw, (str, bytes)):
        return default_metrics()
    entity = _unwrap_entity(raw, _METRICS_KEYS, ("metrics", "data"))
    if not isinstance(entity, dict):
        return default_metrics()

    max_workers = _to_count(entity.get("maxWorkers"))
    workers_active = min(_to_count(entity.get("workersActive")), max_workers)
    return Metrics(
        workers_active=workers_active,
        max_workers=max_workers,
        queue_depth=_to_count(entity.get("queueDepth")),
        throughput=_to_rate(entity.get("throughput")),
        health_status=_parse_health(entity.get("healthStatus")),
    )


# ---------------------------------------------------------------------------
# Reset
# ---------------------------------------------------------------------------


def normalize_reset(raw: Any) -> ResetResult:
    """Read ``{success|status, message}``; anything else is unconfirmed."""
    if not isinstance(raw, dict):
        return ResetResult(success=False, message="Reset could not be confirmed")

    success = raw.get("success")
    if not isinstance(success, bool):
        status = raw.get("status")
        if isinstance(status, bool):
            success = status
        elif isinstance(status, str):
            success = status.strip().lower() in _RESET_OK
        else:
            success = False

    message = raw.get("message")
    if not isinstance(message, str) or not message:
        message = "State reset" if success else "Reset could not be confirmed"
    return ResetResult(success=success, message=message)
