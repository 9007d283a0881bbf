"""Repository for the trade audit log."""

from typing import List, Optional

from sqlalchemy.orm import Session

from ...services.trading.models import Trade
from ..serializers import trade_from_document, trade_to_document
from .documents import DocumentRepository


class TradeRepository(DocumentRepository):
    """Append-only trade records."""

    def __init__(self, session: Optional[Session] = None):
        super().__init__("trades", session)

    def save_trade(self, trade: Trade) -> Trade:
        self.set(trade.id, trade_to_document(trade))
        return trade

    def get_trade(self, trade_id: str) -> Optional[Trade]:
        doc = self.get(trade_id)
        return trade_from_document(trade_id, doc) if doc else None

    def get_trades_for_portfolio(self, portfolio_id: str) -> List[Trade]:
        """Trades of a portfolio, newest first."""
        return [
            trade_from_document(doc_id, doc)
            for doc_id, doc in self.query(
                where={"portfolioId": portfolio_id}, order_by="timestamp", descending=True
            )
        ]
