"""Seeded per-asset price paths shared by live prices and chart history."""

import random
from datetime import datetime, timedelta
from typing import List, Optional

from .models import PricePoint


class PricePath:
    """
    The full price series of one asset within one scenario run.

    Two independent random streams are derived from the scenario seed: one
    drives live day-by-day evolution, the other the backfilled history that
    precedes day 0. Both are reproducible for the same seed and symbol.
    """

    def __init__(self, symbol: str, seed: str):
        self.symbol = symbol
        self.seed = seed
        self.rng = random.Random(f"{seed}:{symbol}")
        self._history_rng = random.Random(f"{seed}:{symbol}:history")
        self._points: List[PricePoint] = []

    def backfill(
        self,
        start_price: float,
        days: int,
        start_date: datetime,
        volatility: float,
    ) -> None:
        """
        Generate the history leading up to day 0 by walking backwards.

        The series ends exactly at ``start_price`` on ``start_date``.
        """
        prices = [start_price]
        for _ in range(days):
            change = self._history_rng.uniform(-volatility, volatility)
            prices.append(prices[-1] / (1 + change))
        prices.reverse()

        self._points = [
            PricePoint(
                day=offset - days,
                date=start_date + timedelta(days=offset - days),
                price=price,
            )
            for offset, price in enumerate(prices)
        ]

    def record(self, day: int, price: float, date: datetime) -> None:
        """Append a live price. Replaces the point if the day was already recorded."""
        if self._points and self._points[-1].day >= day:
            self._points = [p for p in self._points if p.day < day]
        self._points.append(PricePoint(day=day, date=date, price=price))

    def history(self, days: Optional[int] = None) -> List[PricePoint]:
        """Return the last ``days + 1`` points, or the whole path."""
        if days is None:
            return list(self._points)
        return list(self._points[-(days + 1):])

    @property
    def latest(self) -> Optional[PricePoint]:
        return self._points[-1] if self._points else None

    def __len__(self) -> int:
        return len(self._points)
