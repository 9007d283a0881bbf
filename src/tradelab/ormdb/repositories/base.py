"""Base repository with shared session and transaction handling."""

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.orm import Session

from ..database import get_session_sync

_TX_DEPTH_KEY = "tradelab_tx_depth"


class BaseRepository:
    """
    Base repository class providing common session management.

    Repositories constructed on the same session share its transaction
    state, so writes made by several of them inside ``transaction()``
    commit or roll back together.
    """

    def __init__(self, session: Optional[Session] = None):
        self.session = session or get_session_sync()
        self._external_session = session is not None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self._external_session:
            self.session.close()

    @property
    def in_transaction(self) -> bool:
        return self.session.info.get(_TX_DEPTH_KEY, 0) > 0

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Group writes into one commit; any exception rolls all of them back."""
        depth = self.session.info.get(_TX_DEPTH_KEY, 0)
        self.session.info[_TX_DEPTH_KEY] = depth + 1
        try:
            yield self.session
        except Exception:
            self.session.info[_TX_DEPTH_KEY] = depth
            if depth == 0:
                self.session.rollback()
            raise
        self.session.info[_TX_DEPTH_KEY] = depth
        if depth == 0:
            self._commit()

    def _commit(self) -> None:
        """Commit unless an enclosing transaction() will do it."""
        if self.in_transaction:
            self.session.flush()
            return
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
