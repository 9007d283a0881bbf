"""Synthetic market: asset catalog, price evolution and seeded price paths."""

from .engine import BASE_VOLATILITY, DEFAULT_VOLATILITY, PriceEvolutionEngine
from .market import MarketDay, SimulatedMarket
from .models import Asset, AssetClass, PricePoint
from .price_path import PricePath
from .registry import assets_by_symbol, generate_initial_assets

__all__ = [
    "Asset",
    "AssetClass",
    "BASE_VOLATILITY",
    "DEFAULT_VOLATILITY",
    "MarketDay",
    "PriceEvolutionEngine",
    "PricePath",
    "PricePoint",
    "SimulatedMarket",
    "assets_by_symbol",
    "generate_initial_assets",
]
