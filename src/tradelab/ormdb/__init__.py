"""Document store backed by SQLAlchemy ORM."""

# Import database configuration and session management
from .database import (
    Base,
    check_database_health,
    create_tables,
    drop_tables,
    get_engine,
    get_session_factory,
    get_session_sync,
    reset_database,
)
from .models import Document

# Import repositories
from .repositories import (
    DocumentRepository,
    MaterialRepository,
    PortfolioRepository,
    ScenarioRepository,
    ScenarioResultRepository,
    TradeRepository,
    UserRepository,
)
from .store import SimulationStore

__all__ = [
    # Database components
    "Base",
    "check_database_health",
    "create_tables",
    "drop_tables",
    "get_engine",
    "get_session_factory",
    "get_session_sync",
    "reset_database",
    # Models
    "Document",
    # Repositories
    "DocumentRepository",
    "MaterialRepository",
    "PortfolioRepository",
    "ScenarioRepository",
    "ScenarioResultRepository",
    "TradeRepository",
    "UserRepository",
    "SimulationStore",
]
