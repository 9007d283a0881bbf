"""Day-by-day price evolution for synthetic assets."""

import math
import random
from dataclasses import replace
from typing import Dict, Optional

from .models import Asset, AssetClass

# Uniform daily move bound per asset class (fraction of price)
BASE_VOLATILITY: Dict[AssetClass, float] = {
    AssetClass.STOCK: 0.02,
    AssetClass.BOND: 0.005,
    AssetClass.CRYPTO: 0.05,
    AssetClass.COMMODITY: 0.03,
}
DEFAULT_VOLATILITY = 0.02

VOLUME_JITTER = 0.15
MIN_PRICE = 0.01


class PriceEvolutionEngine:
    """Perturbs asset prices and volumes with bounded uniform noise."""

    def __init__(self, volatility_multiplier: float = 1.0):
        if volatility_multiplier <= 0:
            raise ValueError("Volatility multiplier must be positive")
        self.volatility_multiplier = volatility_multiplier

    def volatility_for(self, asset: Asset) -> float:
        """Ordinary daily volatility bound for an asset, after scaling."""
        base = BASE_VOLATILITY.get(asset.asset_class, DEFAULT_VOLATILITY)
        return base * self.volatility_multiplier

    def step(
        self,
        asset: Asset,
        rng: random.Random,
        volatility: Optional[float] = None,
        trend: float = 0.0,
    ) -> Asset:
        """
        Advance one asset by one price step.

        Args:
            asset: Asset before the step
            rng: Random source for this asset's price path
            volatility: Bound of the uniform noise term; defaults to the
                asset's class volatility
            trend: Deterministic drift added to the noise (event shock)

        Returns:
            A new Asset with updated price, 24h change and volume
        """
        if volatility is None:
            volatility = self.volatility_for(asset)

        random_factor = rng.uniform(-volatility, volatility)
        new_price = max(asset.current_price * (1 + random_factor + trend), MIN_PRICE)
        change_24h = (new_price - asset.current_price) / asset.current_price * 100

        volume_factor = rng.uniform(-VOLUME_JITTER, VOLUME_JITTER)
        new_volume = max(0, math.floor(asset.volume * (1 + volume_factor)))

        return replace(
            asset,
            current_price=new_price,
            change_24h=change_24h,
            volume=new_volume,
        )
