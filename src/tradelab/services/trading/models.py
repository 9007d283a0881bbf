"""Data models for simulated trading and portfolio accounting."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple


class TradeSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class TradeStatus(str, Enum):
    PENDING = "pending"
    EXECUTED = "executed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class OrderType(str, Enum):
    MARKET = "market"
    LIMIT = "limit"
    STOP = "stop"


class OrderStatus(str, Enum):
    PENDING = "pending"
    FILLED = "filled"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Position:
    """An open holding in a single symbol."""

    id: str
    asset_id: str
    symbol: str
    quantity: int
    average_price: float
    current_price: float

    @property
    def total_value(self) -> float:
        return self.quantity * self.current_price

    @property
    def profit_loss(self) -> float:
        return self.quantity * (self.current_price - self.average_price)

    @property
    def profit_loss_percent(self) -> float:
        cost = self.quantity * self.average_price
        if cost == 0:
            return 0.0
        return self.profit_loss / cost * 100


@dataclass(frozen=True)
class PerformanceMetric:
    """Valuation snapshot relative to the scenario's initial cash."""

    timestamp: datetime
    total_value: float
    profit_loss: float
    profit_loss_percent: float


@dataclass(frozen=True)
class Portfolio:
    """
    Cash, open positions and the valuation history of one scenario run.

    Instances are never mutated; every trade or revaluation produces a new
    Portfolio so a rejected or uncommitted change leaves the old one intact.
    """

    id: str
    user_id: str
    cash: float
    positions: Dict[str, Position] = field(default_factory=dict)
    performance: Tuple[PerformanceMetric, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def positions_value(self) -> float:
        return sum(position.total_value for position in self.positions.values())

    @property
    def total_value(self) -> float:
        return self.cash + self.positions_value

    def get_position(self, symbol: str) -> Optional[Position]:
        return self.positions.get(symbol)


@dataclass(frozen=True)
class Trade:
    """Append-only audit record of a fill."""

    id: str
    portfolio_id: str
    asset_id: str
    symbol: str
    side: TradeSide
    quantity: int
    price: float
    total: float
    timestamp: datetime
    status: TradeStatus = TradeStatus.EXECUTED

    def with_status(self, status: TradeStatus) -> "Trade":
        return replace(self, status=status)


@dataclass
class Order:
    """A standing order. Only market orders are executable."""

    id: str
    portfolio_id: str
    asset_id: str
    symbol: str
    order_type: OrderType
    side: TradeSide
    quantity: int
    price: Optional[float] = None
    stop_price: Optional[float] = None
    status: OrderStatus = OrderStatus.PENDING
    created_at: Optional[datetime] = None


@dataclass
class TradeRequest:
    """Request for executing a simulated trade."""

    symbol: str
    side: TradeSide
    quantity: int
    order_type: OrderType = OrderType.MARKET
    limit_price: Optional[float] = None


@dataclass
class TradeResult:
    """Result of executing a simulated trade."""

    success: bool
    portfolio: Optional[Portfolio]
    trade: Optional[Trade] = None
    error_message: Optional[str] = None
