"""Repository classes for document store operations using SQLAlchemy ORM."""

from .base import BaseRepository
from .documents import DocumentRepository
from .material import MaterialRepository
from .portfolio import PortfolioRepository
from .scenario import ScenarioRepository
from .scenario_result import ScenarioResultRepository
from .trade import TradeRepository
from .user import UserRepository

__all__ = [
    "BaseRepository",
    "DocumentRepository",
    "MaterialRepository",
    "PortfolioRepository",
    "ScenarioRepository",
    "ScenarioResultRepository",
    "TradeRepository",
    "UserRepository",
]
