"""Conversation state shared by the oracle calls of one game session."""

import uuid
from typing import Any, Dict, List, Optional

Message = Dict[str, Any]


class OracleSession:
    """
    The running transcript sent with each oracle request.

    Scenario generation and evaluation append to the same transcript so the
    evaluator sees what the scenario was built from. Each game session owns
    its own instance; ``reset()`` starts a fresh conversation.
    """

    def __init__(self, session_id: Optional[str] = None, max_messages: int = 20):
        self.session_id = session_id or uuid.uuid4().hex
        self.max_messages = max_messages
        self._messages: List[Message] = []

    @property
    def messages(self) -> List[Message]:
        return list(self._messages)

    def conversation(self, prompt: Any) -> List[Message]:
        """Transcript plus a new user turn, without recording it."""
        return self.messages + [{"role": "user", "content": prompt}]

    def record(self, prompt: Any, reply: str) -> None:
        """Append a completed exchange, dropping the oldest turns past the limit."""
        self._messages.append({"role": "user", "content": prompt})
        self._messages.append({"role": "assistant", "content": reply})
        overflow = len(self._messages) - self.max_messages
        if overflow > 0:
            # Drop whole exchanges so the transcript still starts with a user turn
            self._messages = self._messages[overflow + overflow % 2:]

    def reset(self) -> None:
        self._messages = []

    def __len__(self) -> int:
        return len(self._messages)
