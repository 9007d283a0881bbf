"""Trade execution logic for buy and sell operations."""

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from ...config.logging import get_logger
from ..market.models import Asset
from .ledger import append_metric
from .models import (
    OrderType,
    Portfolio,
    Position,
    Trade,
    TradeRequest,
    TradeResult,
    TradeSide,
    TradeStatus,
)

logger = get_logger(__name__)


class TradeExecutor:
    """
    Executes simulated market orders against a portfolio.

    Execution is pure: the input portfolio is never modified. An accepted
    trade returns a new portfolio and the trade record; a rejected one
    returns the original portfolio and a reason.
    """

    def __init__(self):
        self.logger = logger.bind(component="trade_executor")

    def execute(
        self,
        portfolio: Portfolio,
        asset: Asset,
        request: TradeRequest,
        initial_cash: float,
        now: Optional[datetime] = None,
    ) -> TradeResult:
        """
        Execute a trade at the asset's current price.

        Args:
            portfolio: Portfolio before the trade
            asset: Current snapshot of the traded asset
            request: Trade request details
            initial_cash: Scenario starting cash, the baseline for P/L
            now: Trade timestamp (defaults to the current UTC time)

        Returns:
            TradeResult with the new portfolio and trade, or the rejection reason
        """
        now = now or datetime.now(timezone.utc)

        error = self._validate(asset, request)
        if error:
            return self._reject(portfolio, request, error)

        if request.side == TradeSide.BUY:
            result = self._execute_buy(portfolio, asset, request, now)
        elif request.side == TradeSide.SELL:
            result = self._execute_sell(portfolio, asset, request, now)
        else:
            return self._reject(portfolio, request, f"Invalid side: {request.side}")

        if not result.success:
            return result

        result.portfolio = append_metric(result.portfolio, initial_cash, now)

        self.logger.info(
            "Executed simulated trade",
            portfolio_id=portfolio.id,
            symbol=asset.symbol,
            side=request.side.value,
            quantity=request.quantity,
            price=asset.current_price,
            cash=result.portfolio.cash,
        )
        return result

    def _validate(self, asset: Asset, request: TradeRequest) -> Optional[str]:
        if request.symbol != asset.symbol:
            return f"Asset mismatch: requested {request.symbol}, priced {asset.symbol}"
        if isinstance(request.quantity, bool) or not isinstance(request.quantity, int):
            return "Quantity must be a whole number of units"
        if request.quantity <= 0:
            return "Quantity must be positive"
        if request.order_type != OrderType.MARKET:
            return f"{request.order_type.value.capitalize()} orders are not supported"
        return None

    def _reject(self, portfolio: Portfolio, request: TradeRequest, reason: str) -> TradeResult:
        self.logger.info(
            "Rejected simulated trade",
            portfolio_id=portfolio.id,
            symbol=request.symbol,
            side=getattr(request.side, "value", request.side),
            quantity=request.quantity,
            reason=reason,
        )
        return TradeResult(success=False, portfolio=portfolio, error_message=reason)

    def _trade(self, portfolio: Portfolio, asset: Asset, request: TradeRequest, now: datetime) -> Trade:
        return Trade(
            id=uuid.uuid4().hex,
            portfolio_id=portfolio.id,
            asset_id=asset.id,
            symbol=asset.symbol,
            side=request.side,
            quantity=request.quantity,
            price=asset.current_price,
            total=asset.current_price * request.quantity,
            timestamp=now,
            status=TradeStatus.EXECUTED,
        )

    def _execute_buy(
        self,
        portfolio: Portfolio,
        asset: Asset,
        request: TradeRequest,
        now: datetime,
    ) -> TradeResult:
        """Execute a buy trade."""
        price = asset.current_price
        total_cost = price * request.quantity

        if portfolio.cash < total_cost:
            return self._reject(
                portfolio,
                request,
                f"Insufficient funds (need {total_cost:.2f}, have {portfolio.cash:.2f})",
            )

        position = portfolio.get_position(asset.symbol)
        if position:
            total_units = position.quantity + request.quantity
            average_price = (
                position.average_price * position.quantity + price * request.quantity
            ) / total_units
            position = replace(
                position,
                quantity=total_units,
                average_price=average_price,
                current_price=price,
            )
        else:
            position = Position(
                id=uuid.uuid4().hex,
                asset_id=asset.id,
                symbol=asset.symbol,
                quantity=request.quantity,
                average_price=price,
                current_price=price,
            )

        positions = dict(portfolio.positions)
        positions[asset.symbol] = position

        return TradeResult(
            success=True,
            portfolio=replace(
                portfolio,
                cash=portfolio.cash - total_cost,
                positions=positions,
                updated_at=now,
            ),
            trade=self._trade(portfolio, asset, request, now),
        )

    def _execute_sell(
        self,
        portfolio: Portfolio,
        asset: Asset,
        request: TradeRequest,
        now: datetime,
    ) -> TradeResult:
        """Execute a sell trade."""
        position = portfolio.get_position(asset.symbol)

        if not position:
            return self._reject(portfolio, request, f"No position found for {asset.symbol}")

        if position.quantity < request.quantity:
            return self._reject(
                portfolio,
                request,
                f"Insufficient units (have {position.quantity}, want to sell {request.quantity})",
            )

        proceeds = asset.current_price * request.quantity
        positions = dict(portfolio.positions)
        remaining = position.quantity - request.quantity

        if remaining <= 0:
            # Close position completely
            del positions[asset.symbol]
        else:
            positions[asset.symbol] = replace(
                position,
                quantity=remaining,
                current_price=asset.current_price,
            )

        return TradeResult(
            success=True,
            portfolio=replace(
                portfolio,
                cash=portfolio.cash + proceeds,
                positions=positions,
                updated_at=now,
            ),
            trade=self._trade(portfolio, asset, request, now),
        )


def execute_trade(
    portfolio: Portfolio,
    asset: Asset,
    side: TradeSide,
    quantity: int,
    initial_cash: float,
    now: Optional[datetime] = None,
) -> TradeResult:
    """Execute a market order with a default executor."""
    request = TradeRequest(symbol=asset.symbol, side=TradeSide(side), quantity=quantity)
    return TradeExecutor().execute(portfolio, asset, request, initial_cash, now)
