"""Tests for the game controller lifecycle, day advancement and trading."""

import sys
from dataclasses import replace
from unittest.mock import AsyncMock, Mock, patch

import pytest

sys.path.append("src")
from tradelab.exceptions import AuthenticationRequiredError, PersistenceError
from tradelab.services.game.controller import GameController
from tradelab.services.game.state import GamePhase
from tradelab.services.market.engine import PriceEvolutionEngine
from tradelab.services.market.market import SimulatedMarket
from tradelab.services.scenario.models import Evaluation
from tradelab.services.trading.models import OrderType, TradeSide, TradeStatus

SEED = "controller-seed"


@pytest.fixture
def store():
    return Mock()


@pytest.fixture
def controller(store, mock_scheduler, mock_oracle_client):
    return GameController(
        store=store,
        market=SimulatedMarket(PriceEvolutionEngine(), history_days=30),
        scheduler=mock_scheduler,
        oracle_client=mock_oracle_client,
        session_id="test-session",
    )


@pytest.fixture
def started(controller, sample_scenario):
    controller.start_scenario(sample_scenario, "user-1", seed=SEED)
    return controller


class TestLifecycle:
    def test_initially_idle(self, controller):
        assert controller.phase == GamePhase.IDLE
        assert controller.state.portfolio is None

    def test_start_requires_user(self, controller, sample_scenario):
        with pytest.raises(AuthenticationRequiredError):
            controller.start_scenario(sample_scenario, None)
        assert controller.phase == GamePhase.IDLE

    def test_start_creates_paused_portfolio(self, started, store, sample_scenario):
        state = started.state

        assert started.phase == GamePhase.RUNNING
        assert state.current_day == 0
        assert state.is_paused
        assert state.portfolio.cash == sample_scenario.initial_cash
        assert state.portfolio.user_id == "user-1"
        store.save_portfolio.assert_called_once_with(state.portfolio)

    def test_start_store_failure_leaves_idle(self, controller, store, sample_scenario):
        store.save_portfolio.side_effect = PersistenceError("save_portfolio", "disk full")

        with pytest.raises(PersistenceError):
            controller.start_scenario(sample_scenario, "user-1", seed=SEED)

        assert controller.phase == GamePhase.IDLE

    def test_invalid_cash_keeps_running_session(self, started, store, sample_scenario):
        started.advance_day()
        before = started.state

        with pytest.raises(ValueError):
            started.start_scenario(replace(sample_scenario, initial_cash=0), "user-1")

        assert started.state is before
        assert started.phase == GamePhase.RUNNING
        assert started.market.day == 1
        assert store.save_portfolio.call_count == 2

    def test_reset_returns_to_idle(self, started, mock_scheduler):
        started.set_paused(False)
        started.oracle_session.record("hello", "hi")

        started.reset_game()

        assert started.phase == GamePhase.IDLE
        assert not started.clock.is_running
        assert len(started.oracle_session) == 0
        mock_scheduler.remove_job.assert_called_once_with(started.clock.job_id)
        assert started.market.get_asset("AAPL").current_price == 150.25

    def test_end_scenario_clears_state(self, started):
        started.advance_day()

        started.end_scenario()

        assert started.phase == GamePhase.IDLE
        assert started.state.portfolio is None
        assert started.state.current_day == 0


class TestDayAdvance:
    def test_advance_commits_day(self, started, store):
        assert started.advance_day()

        state = started.state
        assert state.current_day == 1
        assert started.market.day == 1
        assert len(state.portfolio.performance) == 2
        assert store.save_portfolio.call_count == 2

    def test_stops_at_duration(self, started, sample_scenario):
        for _ in range(sample_scenario.duration):
            assert started.advance_day()

        assert started.is_complete()
        assert not started.advance_day()
        assert started.state.current_day == sample_scenario.duration
        assert started.state.is_paused
        assert started.phase == GamePhase.COMPLETE

    def test_failed_save_keeps_previous_day(self, started, store, sample_scenario):
        prices_before = started.market.prices()
        portfolio_before = started.state.portfolio
        store.save_portfolio.side_effect = PersistenceError("save_portfolio", "locked")

        assert not started.advance_day()

        assert started.state.current_day == 0
        assert started.state.portfolio is portfolio_before
        assert started.market.prices() == prices_before
        assert "locked" in started.last_error

    def test_retry_after_failure_matches_clean_run(
        self, started, store, sample_scenario, mock_scheduler
    ):
        store.save_portfolio.side_effect = [PersistenceError("save_portfolio", "locked"), None]
        started.advance_day()
        started.advance_day()

        clean = GameController(store=Mock(), scheduler=mock_scheduler)
        clean.start_scenario(sample_scenario, "user-2", seed=SEED)
        clean.advance_day()

        assert started.market.prices() == clean.market.prices()
        assert started.last_error is None

    def test_history_grows_with_days(self, started):
        started.advance_day()
        history = started.price_history("AAPL")
        assert history[-1].day == 1
        assert history[-1].price == started.market.get_asset("AAPL").current_price


class TestClock:
    def test_unpause_starts_clock(self, started, mock_scheduler):
        started.set_paused(False)

        assert not started.state.is_paused
        assert started.clock.is_running
        kwargs = mock_scheduler.add_job.call_args.kwargs
        assert kwargs["seconds"] == started.base_interval_ms / 1000
        assert kwargs["max_instances"] == 1

    def test_speed_changes_interval(self, started, mock_scheduler):
        started.set_paused(False)
        started.set_speed(5)

        assert started.interval_ms == started.base_interval_ms // 5
        kwargs = mock_scheduler.add_job.call_args.kwargs
        assert kwargs["seconds"] == (started.base_interval_ms // 5) / 1000

    def test_invalid_speed(self, started):
        with pytest.raises(ValueError):
            started.set_speed(3)
        assert started.state.speed == 1

    def test_complete_scenario_cannot_unpause(self, started, sample_scenario):
        for _ in range(sample_scenario.duration):
            started.advance_day()

        started.set_paused(False)

        assert started.state.is_paused
        assert not started.clock.is_running

    def test_tick_ignored_while_paused(self, started):
        started._on_tick()
        assert started.state.current_day == 0

    def test_tick_advances_when_running(self, started):
        started.set_paused(False)
        started._on_tick()
        assert started.state.current_day == 1

    def test_tick_skipped_while_locked(self, started):
        started.set_paused(False)
        with started._lock:
            started._on_tick()
        assert started.state.current_day == 0


class TestTrading:
    def test_trade_without_scenario(self, controller):
        result = controller.execute_trade("AAPL", TradeSide.BUY, 1)
        assert not result.success
        assert result.error_message == "No active scenario"

    def test_unknown_asset(self, started):
        result = started.execute_trade("NOPE", TradeSide.BUY, 1)
        assert not result.success
        assert result.error_message == "Unknown asset: NOPE"

    def test_trade_commits(self, started, store):
        result = started.execute_trade("AAPL", TradeSide.BUY, 10)

        assert result.success
        assert started.state.portfolio is result.portfolio
        assert started.trades == [result.trade]
        store.commit_trade.assert_called_once_with(result.portfolio, result.trade)

    def test_rejected_trade_not_stored(self, started, store):
        result = started.execute_trade("AAPL", TradeSide.SELL, 1)

        assert not result.success
        store.commit_trade.assert_not_called()
        assert started.trades == []

    def test_limit_order_rejected(self, started):
        result = started.execute_trade("AAPL", TradeSide.BUY, 1, order_type=OrderType.LIMIT)
        assert not result.success

    def test_commit_failure_marks_trade_failed(self, started, store):
        store.commit_trade.side_effect = PersistenceError("commit_trade", "locked")
        portfolio_before = started.state.portfolio

        result = started.execute_trade("AAPL", TradeSide.BUY, 10)

        assert not result.success
        assert result.trade.status == TradeStatus.FAILED
        assert result.portfolio is portfolio_before
        assert started.state.portfolio is portfolio_before
        assert started.trades == []


class TestCompletion:
    @pytest.mark.asyncio
    async def test_complete_scenario_stores_result(self, started, store):
        started.execute_trade("AAPL", TradeSide.BUY, 10)
        evaluation = Evaluation(score=82, feedback="Solid risk control", objectives_completed=1)

        with patch(
            "tradelab.oracle.handlers.evaluate_performance",
            AsyncMock(return_value=evaluation),
        ):
            result = await started.complete_scenario()

        assert result.score == 82
        assert result.feedback == "Solid risk control"
        assert result.objectives_completed == 1
        assert result.total_objectives == 1
        assert result.final_value == pytest.approx(started.state.portfolio.total_value)
        assert len(result.trades) == 1
        assert started.last_evaluation is evaluation
        store.save_scenario_result.assert_called_once_with(result)

    @pytest.mark.asyncio
    async def test_late_evaluation_discarded(self, started, store):
        async def evaluate_then_reset(*args, **kwargs):
            started.reset_game()
            return Evaluation(score=50, feedback="late")

        with patch("tradelab.oracle.handlers.evaluate_performance", evaluate_then_reset):
            result = await started.complete_scenario()

        assert result is None
        assert started.last_evaluation is None
        store.save_scenario_result.assert_not_called()

    @pytest.mark.asyncio
    async def test_complete_without_scenario(self, controller):
        assert await controller.complete_scenario() is None

    @pytest.mark.asyncio
    async def test_result_store_failure_still_returns(self, started, store):
        store.save_scenario_result.side_effect = PersistenceError("save_scenario_result", "x")

        with patch(
            "tradelab.oracle.handlers.evaluate_performance",
            AsyncMock(return_value=Evaluation(score=10, feedback="ok")),
        ):
            result = await started.complete_scenario()

        assert result.score == 10
        assert started.last_error is not None
