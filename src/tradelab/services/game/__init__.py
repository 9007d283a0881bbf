"""Game session orchestration: state, clock and controller."""

from .clock import GameClock
from .controller import GameController
from .state import VALID_SPEEDS, GamePhase, GameState

__all__ = ["GameClock", "GameController", "GamePhase", "GameState", "VALID_SPEEDS"]
