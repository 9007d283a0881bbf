"""Repository for scenario portfolios."""

from dataclasses import replace
from typing import Optional

from sqlalchemy.orm import Session

from ...services.trading.models import Portfolio
from ..serializers import portfolio_from_document, portfolio_to_document
from .documents import DocumentRepository


class PortfolioRepository(DocumentRepository):
    """Repository for portfolio documents."""

    def __init__(self, session: Optional[Session] = None):
        super().__init__("portfolios", session)

    def create_portfolio(self, portfolio: Portfolio) -> Portfolio:
        """Store a new portfolio, assigning an id when it has none."""
        if not portfolio.id:
            portfolio = replace(portfolio, id=self.add(portfolio_to_document(portfolio)))
        else:
            self.set(portfolio.id, portfolio_to_document(portfolio))
        return portfolio

    def save_portfolio(self, portfolio: Portfolio) -> None:
        """Write the full portfolio document (last write wins)."""
        self.set(portfolio.id, portfolio_to_document(portfolio))

    def get_portfolio(self, portfolio_id: str) -> Optional[Portfolio]:
        doc = self.get(portfolio_id)
        return portfolio_from_document(portfolio_id, doc) if doc else None

    def get_latest_for_user(self, user_id: str) -> Optional[Portfolio]:
        """Most recently created portfolio of a user."""
        found = self.query(
            where={"userId": user_id}, order_by="createdAt", descending=True, limit=1
        )
        if not found:
            return None
        doc_id, doc = found[0]
        return portfolio_from_document(doc_id, doc)
