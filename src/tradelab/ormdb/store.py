"""Persistence seam used by the game controller."""

from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config.logging import get_logger
from ..exceptions import PersistenceError
from ..services.scenario.models import Scenario, ScenarioResult
from ..services.trading.models import Portfolio, Trade
from .database import get_session_factory
from .repositories import (
    PortfolioRepository,
    ScenarioRepository,
    ScenarioResultRepository,
    TradeRepository,
)

logger = get_logger(__name__)


class SimulationStore:
    """
    Writes simulation state to the document store.

    Every method opens its own session. Storage failures are raised as
    PersistenceError so callers can keep their in-memory state unchanged.
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self._session_factory = session_factory
        self.logger = logger.bind(component="simulation_store")

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        factory = self._session_factory or get_session_factory()
        session = factory()
        try:
            yield session
        except SQLAlchemyError as e:
            session.rollback()
            self.logger.error("Document store operation failed", operation=operation, error=str(e))
            raise PersistenceError(operation, str(e)) from e
        finally:
            session.close()

    def save_portfolio(self, portfolio: Portfolio) -> None:
        with self._session("save_portfolio") as session:
            PortfolioRepository(session).save_portfolio(portfolio)

    def commit_trade(self, portfolio: Portfolio, trade: Trade) -> None:
        """Persist a trade record and the resulting portfolio atomically."""
        with self._session("commit_trade") as session:
            portfolios = PortfolioRepository(session)
            trades = TradeRepository(session)
            with portfolios.transaction():
                trades.save_trade(trade)
                portfolios.save_portfolio(portfolio)

    def save_scenario(self, scenario: Scenario) -> Scenario:
        with self._session("save_scenario") as session:
            return ScenarioRepository(session).save_scenario(scenario)

    def save_scenario_result(self, result: ScenarioResult) -> str:
        with self._session("save_scenario_result") as session:
            return ScenarioResultRepository(session).save_result(result)
