"""Tests for simulated trade execution."""

import sys
from dataclasses import replace

import pytest

sys.path.append("src")
from tradelab.services.trading.ledger import create_portfolio
from tradelab.services.trading.models import (
    OrderType,
    TradeRequest,
    TradeSide,
    TradeStatus,
)
from tradelab.services.trading.trade_executor import TradeExecutor, execute_trade

INITIAL_CASH = 100000.0


@pytest.fixture
def portfolio(fixed_now):
    return create_portfolio("user-1", INITIAL_CASH, now=fixed_now, portfolio_id="pf-1")


@pytest.fixture
def executor():
    return TradeExecutor()


class TestBuy:
    def test_buy_opens_position(self, executor, portfolio, sample_asset, fixed_now):
        request = TradeRequest(symbol="AAPL", side=TradeSide.BUY, quantity=10)

        result = executor.execute(portfolio, sample_asset, request, INITIAL_CASH, now=fixed_now)

        assert result.success
        assert result.portfolio.cash == pytest.approx(98497.50)
        position = result.portfolio.get_position("AAPL")
        assert position.quantity == 10
        assert position.average_price == 150.25
        assert result.portfolio.total_value == pytest.approx(INITIAL_CASH)

        trade = result.trade
        assert trade.symbol == "AAPL"
        assert trade.side == TradeSide.BUY
        assert trade.price == 150.25
        assert trade.total == pytest.approx(1502.50)
        assert trade.status == TradeStatus.EXECUTED
        assert trade.portfolio_id == "pf-1"

    def test_buy_appends_metric(self, executor, portfolio, sample_asset):
        request = TradeRequest(symbol="AAPL", side=TradeSide.BUY, quantity=1)
        result = executor.execute(portfolio, sample_asset, request, INITIAL_CASH)
        assert len(result.portfolio.performance) == len(portfolio.performance) + 1

    def test_buy_reweights_average_price(self, executor, portfolio, sample_asset):
        first = executor.execute(
            portfolio, sample_asset, TradeRequest("AAPL", TradeSide.BUY, 10), INITIAL_CASH
        )
        cheaper = replace(sample_asset, current_price=100.0)
        second = executor.execute(
            first.portfolio, cheaper, TradeRequest("AAPL", TradeSide.BUY, 10), INITIAL_CASH
        )

        position = second.portfolio.get_position("AAPL")
        assert position.quantity == 20
        assert position.average_price == pytest.approx(125.125)
        assert position.current_price == 100.0

    def test_insufficient_funds(self, executor, portfolio, sample_asset):
        request = TradeRequest(symbol="AAPL", side=TradeSide.BUY, quantity=1000)

        result = executor.execute(portfolio, sample_asset, request, INITIAL_CASH)

        assert not result.success
        assert "Insufficient funds" in result.error_message
        assert result.portfolio is portfolio
        assert result.trade is None

    def test_spend_exact_cash(self, executor, sample_asset, fixed_now):
        portfolio = create_portfolio("user-1", 1502.50, now=fixed_now)
        result = executor.execute(
            portfolio, sample_asset, TradeRequest("AAPL", TradeSide.BUY, 10), 1502.50
        )
        assert result.success
        assert result.portfolio.cash == pytest.approx(0.0)


class TestSell:
    def test_round_trip(self, portfolio, sample_asset, fixed_now):
        bought = execute_trade(portfolio, sample_asset, TradeSide.BUY, 10, INITIAL_CASH, fixed_now)
        risen = replace(sample_asset, current_price=160.0)

        sold = execute_trade(bought.portfolio, risen, TradeSide.SELL, 10, INITIAL_CASH, fixed_now)

        assert sold.success
        assert sold.portfolio.cash == pytest.approx(100097.50)
        assert sold.portfolio.get_position("AAPL") is None
        assert sold.portfolio.performance[-1].profit_loss == pytest.approx(97.50)

    def test_partial_sell_keeps_average(self, portfolio, sample_asset):
        bought = execute_trade(portfolio, sample_asset, TradeSide.BUY, 10, INITIAL_CASH)
        sold = execute_trade(bought.portfolio, sample_asset, TradeSide.SELL, 4, INITIAL_CASH)

        position = sold.portfolio.get_position("AAPL")
        assert position.quantity == 6
        assert position.average_price == 150.25

    def test_sell_without_position(self, executor, portfolio, sample_asset):
        result = executor.execute(
            portfolio, sample_asset, TradeRequest("AAPL", TradeSide.SELL, 1), INITIAL_CASH
        )
        assert not result.success
        assert "No position" in result.error_message
        assert result.portfolio is portfolio

    def test_oversell(self, portfolio, sample_asset):
        bought = execute_trade(portfolio, sample_asset, TradeSide.BUY, 5, INITIAL_CASH)
        result = execute_trade(bought.portfolio, sample_asset, TradeSide.SELL, 6, INITIAL_CASH)

        assert not result.success
        assert "Insufficient units" in result.error_message
        assert result.portfolio.get_position("AAPL").quantity == 5


class TestValidation:
    @pytest.mark.parametrize("quantity", [0, -3, 2.5, True])
    def test_invalid_quantity(self, executor, portfolio, sample_asset, quantity):
        request = TradeRequest(symbol="AAPL", side=TradeSide.BUY, quantity=quantity)
        result = executor.execute(portfolio, sample_asset, request, INITIAL_CASH)
        assert not result.success
        assert result.portfolio is portfolio

    @pytest.mark.parametrize("order_type", [OrderType.LIMIT, OrderType.STOP])
    def test_only_market_orders(self, executor, portfolio, sample_asset, order_type):
        request = TradeRequest(
            symbol="AAPL",
            side=TradeSide.BUY,
            quantity=1,
            order_type=order_type,
            limit_price=100.0,
        )
        result = executor.execute(portfolio, sample_asset, request, INITIAL_CASH)
        assert not result.success
        assert "not supported" in result.error_message

    def test_symbol_mismatch(self, executor, portfolio, sample_asset):
        request = TradeRequest(symbol="TSLA", side=TradeSide.BUY, quantity=1)
        result = executor.execute(portfolio, sample_asset, request, INITIAL_CASH)
        assert not result.success
        assert "mismatch" in result.error_message

    def test_input_portfolio_untouched(self, executor, portfolio, sample_asset):
        executor.execute(
            portfolio, sample_asset, TradeRequest("AAPL", TradeSide.BUY, 10), INITIAL_CASH
        )
        assert portfolio.cash == INITIAL_CASH
        assert portfolio.positions == {}
        assert len(portfolio.performance) == 1
