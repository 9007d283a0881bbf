"""Game controller: scenario lifecycle, day advancement and trading."""

import threading
import uuid
from dataclasses import replace
from typing import List, Optional

from apscheduler.schedulers.base import BaseScheduler

from ...config.logging import get_logger, log_audit_event
from ...config.settings import get_settings
from ...exceptions import AuthenticationRequiredError, PersistenceError
from ...oracle import handlers as oracle
from ...oracle.client import OracleClient
from ...oracle.session import OracleSession
from ...ormdb.store import SimulationStore
from ..market.engine import PriceEvolutionEngine
from ..market.market import SimulatedMarket
from ..market.models import Asset, PricePoint
from ..scenario.models import Evaluation, Scenario, ScenarioResult
from ..scenario.schedule import EventSchedule
from ..trading.analytics import calculate_return
from ..trading.ledger import create_portfolio, revalue
from ..trading.models import (
    OrderType,
    Trade,
    TradeRequest,
    TradeResult,
    TradeSide,
    TradeStatus,
)
from ..trading.trade_executor import TradeExecutor
from .clock import GameClock
from .state import VALID_SPEEDS, GamePhase, GameState

logger = get_logger(__name__)


class GameController:
    """
    Owns one user's game session.

    Trades and day advances run under a single lock. Each computes its new
    state from the current snapshot, persists it, and only then swaps it in,
    so a storage failure never leaves memory ahead of the store.
    """

    def __init__(
        self,
        store: Optional[SimulationStore] = None,
        market: Optional[SimulatedMarket] = None,
        executor: Optional[TradeExecutor] = None,
        scheduler: Optional[BaseScheduler] = None,
        oracle_session: Optional[OracleSession] = None,
        oracle_client: Optional[OracleClient] = None,
        session_id: Optional[str] = None,
    ):
        settings = get_settings()
        self.session_id = session_id or uuid.uuid4().hex
        self.base_interval_ms = settings.base_day_interval_ms

        self.store = store or SimulationStore()
        self.market = market or SimulatedMarket(
            PriceEvolutionEngine(settings.volatility_multiplier),
            history_days=settings.price_history_days,
        )
        self.executor = executor or TradeExecutor()
        self.oracle_session = oracle_session or OracleSession(self.session_id)
        self.oracle_client = oracle_client
        self.clock = GameClock(
            self._on_tick,
            scheduler=scheduler,
            job_id=f"day-advance-{self.session_id}",
        )

        self._lock = threading.Lock()
        self._state = GameState()
        self._schedule = EventSchedule()
        self._run_token = uuid.uuid4().hex
        self.last_error: Optional[str] = None
        self.last_evaluation: Optional[Evaluation] = None
        self.logger = logger.bind(component="game_controller", session_id=self.session_id)

    # State access

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def phase(self) -> GamePhase:
        return self._state.phase

    @property
    def assets(self) -> List[Asset]:
        return self.market.assets

    @property
    def trades(self) -> List[Trade]:
        return list(self._state.trades)

    @property
    def interval_ms(self) -> int:
        return max(1, self.base_interval_ms // self._state.speed)

    def is_complete(self) -> bool:
        """Whether a portfolio exists and the scenario has run its full duration."""
        return self._state.is_complete

    def price_history(self, symbol: str, days: Optional[int] = None) -> List[PricePoint]:
        return self.market.historical_prices(symbol, days)

    # Lifecycle

    def start_scenario(
        self,
        scenario: Scenario,
        user_id: Optional[str],
        seed: Optional[str] = None,
    ) -> GameState:
        """
        Begin a scenario with a fresh all-cash portfolio, paused on day 0.

        Raises:
            AuthenticationRequiredError: If no user id is given
            ValueError: If the scenario has no positive initial cash; the
                running session is left untouched
            PersistenceError: If the opening portfolio cannot be stored; the
                controller is then left idle
        """
        if not user_id:
            raise AuthenticationRequiredError("start_scenario")
        portfolio = create_portfolio(user_id, scenario.initial_cash)

        with self._lock:
            self.clock.stop()
            self._run_token = uuid.uuid4().hex
            self._state = GameState(scenario=scenario, speed=self._state.speed)

            self.market.reset(seed)
            self._schedule = EventSchedule.for_scenario(scenario)

            try:
                self.store.save_portfolio(portfolio)
            except PersistenceError as e:
                self.logger.error("Failed to store opening portfolio", error=e.message)
                self._state = GameState(speed=self._state.speed)
                self.market.reset()
                raise

            self._state = GameState(
                scenario=scenario,
                portfolio=portfolio,
                current_day=0,
                is_paused=True,
                speed=self._state.speed,
            )
            self.last_error = None

        self.logger.info(
            "Scenario started",
            scenario_id=scenario.id,
            category=scenario.category.value,
            duration=scenario.duration,
            seed=self.market.seed,
        )
        log_audit_event(
            "scenario_started",
            user_id=user_id,
            scenario_id=scenario.id,
            portfolio_id=portfolio.id,
        )
        return self._state

    def reset_game(self) -> None:
        """Clear the session and return to idle. No tick fires afterwards."""
        with self._lock:
            self.clock.stop()
            previous = self._state
            self._run_token = uuid.uuid4().hex
            self._state = GameState()
            self._schedule = EventSchedule()
            self.market.reset()
            self.oracle_session.reset()
            self.last_error = None

        if previous.scenario is not None:
            self.logger.info("Game reset", scenario_id=previous.scenario.id, day=previous.current_day)
            log_audit_event(
                "game_reset",
                user_id=previous.portfolio.user_id if previous.portfolio else None,
                scenario_id=previous.scenario.id,
            )

    def end_scenario(self) -> None:
        self.reset_game()

    def shutdown(self) -> None:
        """Stop the clock; used when the owning session goes away."""
        self.clock.stop()

    # Clock

    def set_paused(self, paused: bool) -> None:
        with self._lock:
            state = self._state
            if state.portfolio is None:
                return
            if not paused and state.is_complete:
                paused = True
            self._state = replace(state, is_paused=paused)
            if paused:
                self.clock.stop()
            else:
                self.clock.start(self.interval_ms)

    def set_speed(self, speed: int) -> None:
        """
        Change the simulation speed multiplier.

        Raises:
            ValueError: If the speed is not one of 1, 2, 5 or 10
        """
        if speed not in VALID_SPEEDS:
            raise ValueError(f"Speed must be one of {VALID_SPEEDS}")
        with self._lock:
            self._state = replace(self._state, speed=speed)
            self.clock.reschedule(self.interval_ms)

    def _on_tick(self) -> None:
        if not self._lock.acquire(blocking=False):
            self.logger.debug("Skipping tick, day advance still in flight")
            return
        try:
            if self._state.is_paused:
                return
            self._advance_locked()
        finally:
            self._lock.release()

    # Simulation

    def advance_day(self) -> bool:
        """
        Advance the simulation by one day.

        Returns:
            True if a new day was committed
        """
        with self._lock:
            return self._advance_locked()

    def _advance_locked(self) -> bool:
        state = self._state
        if state.scenario is None or state.portfolio is None:
            return False

        next_day = state.current_day + 1
        if next_day > state.scenario.duration:
            self._state = replace(state, is_paused=True)
            self.clock.stop()
            self.logger.info("Scenario complete", scenario_id=state.scenario.id, day=state.current_day)
            return False

        events = self._schedule.events_for_day(next_day)
        market_day = self.market.simulate_day(next_day, events)
        portfolio = revalue(
            state.portfolio, market_day.prices(), state.scenario.initial_cash
        )

        try:
            self.store.save_portfolio(portfolio)
        except PersistenceError as e:
            self.last_error = e.message
            self.logger.error("Day advance not committed", day=next_day, error=e.message)
            return False

        self.market.apply(market_day)
        self._state = replace(state, portfolio=portfolio, current_day=next_day)
        self.last_error = None

        self.logger.info(
            "Day advanced",
            day=next_day,
            events=len(events),
            total_value=round(portfolio.total_value, 2),
        )
        return True

    def execute_trade(
        self,
        symbol: str,
        side: TradeSide,
        quantity: int,
        order_type: OrderType = OrderType.MARKET,
    ) -> TradeResult:
        """
        Execute a market order at the current price and persist it.

        A rejected trade leaves the state untouched. If the store write
        fails the returned trade is marked failed and nothing changes.
        """
        with self._lock:
            state = self._state
            if state.scenario is None or state.portfolio is None:
                return TradeResult(success=False, portfolio=None, error_message="No active scenario")

            asset = self.market.get_asset(symbol)
            if asset is None:
                return TradeResult(
                    success=False,
                    portfolio=state.portfolio,
                    error_message=f"Unknown asset: {symbol}",
                )

            request = TradeRequest(
                symbol=symbol,
                side=TradeSide(side),
                quantity=quantity,
                order_type=OrderType(order_type),
            )
            result = self.executor.execute(
                state.portfolio, asset, request, state.scenario.initial_cash
            )
            if not result.success:
                return result

            try:
                self.store.commit_trade(result.portfolio, result.trade)
            except PersistenceError as e:
                self.last_error = e.message
                self.logger.error("Trade not committed", symbol=symbol, error=e.message)
                return TradeResult(
                    success=False,
                    portfolio=state.portfolio,
                    trade=result.trade.with_status(TradeStatus.FAILED),
                    error_message=f"Trade could not be saved: {e.message}",
                )

            self._state = replace(
                state,
                portfolio=result.portfolio,
                trades=state.trades + (result.trade,),
            )
            self.last_error = None

        log_audit_event(
            "trade_executed",
            user_id=result.portfolio.user_id,
            symbol=symbol,
            side=request.side.value,
            quantity=quantity,
            price=result.trade.price,
        )
        return result

    # Oracle

    async def complete_scenario(self) -> Optional[ScenarioResult]:
        """
        Evaluate the finished run with the oracle and store the result.

        Returns None if there is no scenario, or if the game was reset or
        restarted while the evaluation was in flight.
        """
        state = self._state
        token = self._run_token
        if state.scenario is None or state.portfolio is None:
            return None

        self.clock.stop()
        evaluation: Evaluation = await oracle.evaluate_performance(
            self.oracle_session,
            state.scenario,
            state.portfolio,
            state.trades,
            client=self.oracle_client,
        )

        if token != self._run_token:
            self.logger.info("Discarding late evaluation", scenario_id=state.scenario.id)
            return None

        self.last_evaluation = evaluation
        result = ScenarioResult(
            scenario_id=state.scenario.id,
            user_id=state.portfolio.user_id,
            final_value=state.portfolio.total_value,
            return_percent=calculate_return(state.scenario.initial_cash, state.portfolio.total_value),
            objectives_completed=evaluation.objectives_completed,
            total_objectives=len(state.scenario.objectives),
            trades=state.trades,
            score=evaluation.score,
            feedback=evaluation.feedback,
        )

        try:
            self.store.save_scenario_result(result)
        except PersistenceError as e:
            self.last_error = e.message
            self.logger.error("Scenario result not stored", error=e.message)

        self.logger.info(
            "Scenario evaluated",
            scenario_id=result.scenario_id,
            score=result.score,
            return_percent=round(result.return_percent, 2),
        )
        log_audit_event(
            "scenario_completed",
            user_id=result.user_id,
            scenario_id=result.scenario_id,
            score=result.score,
        )
        return result

    async def market_advice(self) -> Optional[str]:
        state = self._state
        if state.portfolio is None:
            return None
        return await oracle.get_market_advice(
            self.oracle_session, state.portfolio, self.market.assets, client=self.oracle_client
        )
