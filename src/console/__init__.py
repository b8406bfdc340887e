from .gateway import OrderGateway
from .ids import new_token
from .models import HealthStatus, Metrics, Order, OrderStatus, ResetResult
from .normalizer import normalize_metrics, normalize_order, normalize_orders
from .session import ConsoleSession
from .store import ReconciliationStore
from .ticker import TickerHandle, start_ticker

__all__ = [
    "ConsoleSession",
    "HealthStatus",
    "Metrics",
    "Order",
    "OrderGateway",
    "OrderStatus",
    "ReconciliationStore",
    "ResetResult",
    "TickerHandle",
    "new_token",
    "normalize_metrics",
    "normalize_order",
    "normalize_orders",
    "start_ticker",
]
