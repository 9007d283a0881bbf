"""Data models for the synthetic market."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class AssetClass(str, Enum):
    """Tradable instrument classes."""

    STOCK = "stock"
    BOND = "bond"
    CRYPTO = "crypto"
    COMMODITY = "commodity"
    FOREX = "forex"


@dataclass(frozen=True)
class Asset:
    """Snapshot of a tradable instrument on the current simulated day."""

    id: str
    symbol: str
    name: str
    asset_class: AssetClass
    current_price: float
    change_24h: float  # percent
    volume: int


@dataclass(frozen=True)
class PricePoint:
    """One point on an asset's price path."""

    day: int  # negative for backfilled history, 0 at scenario start
    date: datetime
    price: float
