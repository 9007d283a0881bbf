"""Live simulation cursor for one game session."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from ..scenario.models import Scenario
from ..trading.models import Portfolio, Trade

VALID_SPEEDS = (1, 2, 5, 10)


class GamePhase(str, Enum):
    IDLE = "idle"
    CONFIGURING = "configuring"
    RUNNING = "running"
    COMPLETE = "complete"


@dataclass(frozen=True)
class GameState:
    """
    Immutable snapshot of a game session.

    The controller replaces the whole snapshot on every committed change,
    so readers never observe a half-applied trade or day.
    """

    scenario: Optional[Scenario] = None
    portfolio: Optional[Portfolio] = None
    current_day: int = 0
    is_paused: bool = True
    speed: int = 1
    trades: Tuple[Trade, ...] = ()

    @property
    def is_complete(self) -> bool:
        return (
            self.portfolio is not None
            and self.scenario is not None
            and self.current_day >= self.scenario.duration
        )

    @property
    def phase(self) -> GamePhase:
        if self.scenario is None:
            return GamePhase.IDLE
        if self.portfolio is None:
            return GamePhase.CONFIGURING
        if self.is_complete:
            return GamePhase.COMPLETE
        return GamePhase.RUNNING

    @property
    def days_remaining(self) -> int:
        if self.scenario is None:
            return 0
        return max(0, self.scenario.duration - self.current_day)
