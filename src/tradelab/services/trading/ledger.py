"""Portfolio bookkeeping: creation, valuation snapshots and revaluation."""

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Mapping, Optional

from .models import PerformanceMetric, Portfolio


def _now() -> datetime:
    return datetime.now(timezone.utc)


def snapshot(total_value: float, initial_cash: float, timestamp: datetime) -> PerformanceMetric:
    """
    Build a performance metric for a valuation.

    Profit and loss are always measured against the scenario's initial cash,
    never against the previous snapshot.
    """
    profit_loss = total_value - initial_cash
    profit_loss_percent = profit_loss / initial_cash * 100 if initial_cash else 0.0
    return PerformanceMetric(
        timestamp=timestamp,
        total_value=total_value,
        profit_loss=profit_loss,
        profit_loss_percent=profit_loss_percent,
    )


def create_portfolio(
    user_id: str,
    initial_cash: float,
    now: Optional[datetime] = None,
    portfolio_id: Optional[str] = None,
) -> Portfolio:
    """Create an all-cash portfolio with its opening metric."""
    if initial_cash <= 0:
        raise ValueError("Initial cash must be positive")

    now = now or _now()
    return Portfolio(
        id=portfolio_id or uuid.uuid4().hex,
        user_id=user_id,
        cash=initial_cash,
        positions={},
        performance=(snapshot(initial_cash, initial_cash, now),),
        created_at=now,
        updated_at=now,
    )


def append_metric(portfolio: Portfolio, initial_cash: float, now: Optional[datetime] = None) -> Portfolio:
    """Return a copy of the portfolio with a fresh metric appended."""
    now = now or _now()
    metric = snapshot(portfolio.total_value, initial_cash, now)
    return replace(
        portfolio,
        performance=portfolio.performance + (metric,),
        updated_at=now,
    )


def revalue(
    portfolio: Portfolio,
    prices: Mapping[str, float],
    initial_cash: float,
    now: Optional[datetime] = None,
) -> Portfolio:
    """
    Mark every open position to the given prices and append a metric.

    Symbols missing from ``prices`` keep their last known price.
    """
    positions = {
        symbol: replace(position, current_price=prices.get(symbol, position.current_price))
        for symbol, position in portfolio.positions.items()
    }
    return append_metric(replace(portfolio, positions=positions), initial_cash, now)
