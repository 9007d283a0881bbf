"""TradeLab: an educational trading simulator."""

__version__ = "0.1.0"
