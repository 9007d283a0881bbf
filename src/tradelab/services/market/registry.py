"""Initial catalog of tradable instruments."""

from typing import Dict, List

from .models import Asset, AssetClass

# id, symbol, name, class, starting price, 24h change %, volume
_CATALOG = (
    ("1", "AAPL", "Apple Inc.", AssetClass.STOCK, 150.25, 2.5, 50_000_000),
    ("2", "GOOGL", "Alphabet Inc.", AssetClass.STOCK, 2800.50, -1.2, 20_000_000),
    ("3", "TSLA", "Tesla Inc.", AssetClass.STOCK, 725.75, 5.8, 80_000_000),
    ("4", "BTC", "Bitcoin", AssetClass.CRYPTO, 42000.0, -3.5, 25_000_000_000),
    ("5", "ETH", "Ethereum", AssetClass.CRYPTO, 2200.0, -2.1, 12_000_000_000),
    ("6", "TLT", "iShares 20+ Year Treasury Bond ETF", AssetClass.BOND, 98.40, 0.3, 18_000_000),
    ("7", "IEF", "iShares 7-10 Year Treasury Bond ETF", AssetClass.BOND, 101.15, -0.1, 6_500_000),
    ("8", "GLD", "SPDR Gold Shares", AssetClass.COMMODITY, 185.20, 0.8, 9_000_000),
    ("9", "USO", "United States Oil Fund", AssetClass.COMMODITY, 72.60, -1.6, 4_200_000),
)


def generate_initial_assets() -> List[Asset]:
    """
    Build a fresh copy of the starting asset catalog.

    Every scenario start and reset gets its own list, so mutations from a
    finished run never leak into the next one.
    """
    return [
        Asset(
            id=asset_id,
            symbol=symbol,
            name=name,
            asset_class=asset_class,
            current_price=price,
            change_24h=change,
            volume=volume,
        )
        for asset_id, symbol, name, asset_class, price, change, volume in _CATALOG
    ]


def assets_by_symbol(assets: List[Asset]) -> Dict[str, Asset]:
    """Index an asset list by symbol."""
    return {asset.symbol: asset for asset in assets}
