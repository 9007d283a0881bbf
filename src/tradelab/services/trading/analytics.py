"""Portfolio performance figures and display formatting."""

import math
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..market.models import Asset
from .models import PerformanceMetric, Portfolio

CASH = "cash"


def calculate_return(initial: float, final: float) -> float:
    """Percent return from ``initial`` to ``final``."""
    if initial == 0:
        return 0.0
    return (final - initial) / initial * 100


def calculate_sharpe_ratio(returns: Sequence[float], risk_free_rate: float = 0.02) -> float:
    """
    Sharpe ratio of a return series using population standard deviation.

    Returns 0 for an empty series or one with no dispersion.
    """
    if not returns:
        return 0.0
    mean = sum(returns) / len(returns)
    variance = sum((r - mean) ** 2 for r in returns) / len(returns)
    std_dev = math.sqrt(variance)
    if std_dev == 0:
        return 0.0
    return (mean - risk_free_rate) / std_dev


def daily_returns(performance: Iterable[PerformanceMetric]) -> List[float]:
    """Fractional change between consecutive performance snapshots."""
    values = [metric.total_value for metric in performance]
    return [
        (current - previous) / previous
        for previous, current in zip(values, values[1:])
        if previous
    ]


def max_drawdown(performance: Iterable[PerformanceMetric]) -> float:
    """Largest peak-to-trough fall in total value, as a percent."""
    peak = None
    worst = 0.0
    for metric in performance:
        if peak is None or metric.total_value > peak:
            peak = metric.total_value
        if peak:
            worst = max(worst, (peak - metric.total_value) / peak * 100)
    return worst


def asset_allocation(
    portfolio: Portfolio,
    assets: Optional[Mapping[str, Asset]] = None,
) -> Dict[str, float]:
    """
    Portfolio weights by asset class, in percent.

    Cash is reported under ``"cash"``. Without an asset lookup, positions
    are grouped by symbol instead of class.
    """
    total = portfolio.total_value
    if total <= 0:
        return {}

    allocation: Dict[str, float] = {CASH: portfolio.cash / total * 100}
    for symbol, position in portfolio.positions.items():
        if assets and symbol in assets:
            key = assets[symbol].asset_class.value
        else:
            key = symbol
        allocation[key] = allocation.get(key, 0.0) + position.total_value / total * 100
    return allocation


def risk_metrics(portfolio: Portfolio) -> Dict:
    """Concentration-based risk score (1-10) plus drawdown and Sharpe figures."""
    total = portfolio.total_value
    weights = [
        position.total_value / total * 100 for position in portfolio.positions.values()
    ] if total > 0 else []

    risk_score = 5  # Default medium risk
    if weights:
        # Higher risk if concentrated in few positions
        if len(weights) <= 2:
            risk_score += 2

        largest = max(weights)
        if largest > 50:
            risk_score += 2
        elif largest > 30:
            risk_score += 1
    else:
        risk_score -= 2

    return {
        "risk_score": min(10, max(1, risk_score)),
        "concentration_risk": max(weights, default=0.0),
        "max_drawdown": max_drawdown(portfolio.performance),
        "sharpe_ratio": calculate_sharpe_ratio(daily_returns(portfolio.performance)),
    }


def format_currency(value: float, currency: str = "USD") -> str:
    """Format a value as e.g. ``$1,234.56`` (``-$12.00`` for negatives)."""
    symbol = "$" if currency == "USD" else f"{currency} "
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_percent(value: float, decimals: int = 2) -> str:
    """Signed percent, e.g. ``+1.50%``."""
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.{decimals}f}%"
