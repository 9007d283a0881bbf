"""Simulated trading: portfolio ledger, trade execution and analytics."""

from .ledger import append_metric, create_portfolio, revalue, snapshot
from .models import (
    Order,
    OrderStatus,
    OrderType,
    PerformanceMetric,
    Portfolio,
    Position,
    Trade,
    TradeRequest,
    TradeResult,
    TradeSide,
    TradeStatus,
)
from .trade_executor import TradeExecutor, execute_trade

__all__ = [
    "Order",
    "OrderStatus",
    "OrderType",
    "PerformanceMetric",
    "Portfolio",
    "Position",
    "Trade",
    "TradeExecutor",
    "TradeRequest",
    "TradeResult",
    "TradeSide",
    "TradeStatus",
    "append_metric",
    "create_portfolio",
    "execute_trade",
    "revalue",
    "snapshot",
]
