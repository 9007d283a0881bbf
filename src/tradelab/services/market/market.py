"""The synthetic market for one scenario run."""

import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ...config.logging import get_logger
from ..scenario.models import MarketCondition
from ..scenario.schedule import event_magnitude
from .engine import PriceEvolutionEngine
from .models import Asset, PricePoint
from .price_path import PricePath
from .registry import generate_initial_assets

logger = get_logger(__name__)


@dataclass(frozen=True)
class MarketDay:
    """
    A computed but not yet applied market day.

    Holds the post-step assets plus the random stream states needed to make
    the day permanent. Discarding it leaves the market untouched.
    """

    day: int
    date: datetime
    assets: Tuple[Asset, ...]
    shocks: Dict[str, float] = field(default_factory=dict)
    events: Tuple[MarketCondition, ...] = ()
    _rng_states: Dict[str, Any] = field(default_factory=dict, repr=False)
    _events_rng_state: Any = field(default=None, repr=False)

    def prices(self) -> Dict[str, float]:
        return {asset.symbol: asset.current_price for asset in self.assets}


class SimulatedMarket:
    """Asset catalog plus one seeded price path per asset."""

    def __init__(
        self,
        engine: Optional[PriceEvolutionEngine] = None,
        history_days: int = 30,
    ):
        self.engine = engine or PriceEvolutionEngine()
        self.history_days = history_days
        self.logger = logger.bind(component="market")

        self.seed: str = ""
        self.day = 0
        self.start_date = datetime.now(timezone.utc)
        self._assets: List[Asset] = []
        self._paths: Dict[str, PricePath] = {}
        self._events_rng = random.Random()

        self.reset()

    def reset(self, seed: Optional[str] = None, start_date: Optional[datetime] = None) -> None:
        """
        Regenerate the catalog and price paths from a seed.

        Args:
            seed: Seed for every random stream; a fresh one is generated if omitted
            start_date: Calendar date of day 0 (defaults to today, UTC midnight)
        """
        self.seed = seed or uuid.uuid4().hex
        if start_date is None:
            start_date = datetime.now(timezone.utc).replace(
                hour=0, minute=0, second=0, microsecond=0
            )
        self.start_date = start_date
        self.day = 0
        self._assets = generate_initial_assets()
        self._events_rng = random.Random(f"{self.seed}:events")

        self._paths = {}
        for asset in self._assets:
            path = PricePath(asset.symbol, self.seed)
            path.backfill(
                asset.current_price,
                self.history_days,
                start_date,
                self.engine.volatility_for(asset),
            )
            self._paths[asset.symbol] = path

        self.logger.debug("Market reset", seed=self.seed, assets=len(self._assets))

    @property
    def assets(self) -> List[Asset]:
        return list(self._assets)

    def get_asset(self, symbol: str) -> Optional[Asset]:
        for asset in self._assets:
            if asset.symbol == symbol:
                return asset
        return None

    def prices(self) -> Dict[str, float]:
        return {asset.symbol: asset.current_price for asset in self._assets}

    def simulate_day(self, day: int, conditions: Iterable[MarketCondition] = ()) -> MarketDay:
        """
        Compute the market for ``day`` without changing the current state.

        Each condition is applied as a single price step to the assets it
        affects, with the event magnitude as trend and half its absolute
        value as volatility. Ordinary evolution then runs on every asset.
        """
        conditions = tuple(conditions)
        rngs = {}
        for symbol, path in self._paths.items():
            rng = random.Random()
            rng.setstate(path.rng.getstate())
            rngs[symbol] = rng
        events_rng = random.Random()
        events_rng.setstate(self._events_rng.getstate())

        assets = list(self._assets)
        shocks: Dict[str, float] = {}

        for condition in conditions:
            magnitude = event_magnitude(condition, events_rng)
            for index, asset in enumerate(assets):
                if not condition.affects(asset.symbol):
                    continue
                assets[index] = self.engine.step(
                    asset,
                    rngs[asset.symbol],
                    volatility=abs(magnitude) / 2,
                    trend=magnitude,
                )
                shocks[asset.symbol] = shocks.get(asset.symbol, 0.0) + magnitude

            self.logger.info(
                "Market event applied",
                day=day,
                event_type=condition.event_type.value,
                impact=condition.impact.value,
                magnitude=round(magnitude, 4),
                description=condition.description,
            )

        assets = [self.engine.step(asset, rngs[asset.symbol]) for asset in assets]

        return MarketDay(
            day=day,
            date=self.start_date + timedelta(days=day),
            assets=tuple(assets),
            shocks=shocks,
            events=conditions,
            _rng_states={symbol: rng.getstate() for symbol, rng in rngs.items()},
            _events_rng_state=events_rng.getstate(),
        )

    def apply(self, market_day: MarketDay) -> None:
        """Make a computed day the current market state."""
        self._assets = list(market_day.assets)
        for asset in self._assets:
            path = self._paths[asset.symbol]
            path.rng.setstate(market_day._rng_states[asset.symbol])
            path.record(market_day.day, asset.current_price, market_day.date)
        self._events_rng.setstate(market_day._events_rng_state)
        self.day = market_day.day

    def historical_prices(self, symbol: str, days: Optional[int] = None) -> List[PricePoint]:
        """
        Price history for charting, ending at the current simulated day.

        Raises:
            KeyError: If the symbol is not in the catalog
        """
        return self._paths[symbol].history(days)
