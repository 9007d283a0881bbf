"""Data models for trading scenarios and their outcomes."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple

ALL_ASSETS = "ALL"


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class ScenarioCategory(str, Enum):
    CRISIS = "crisis"
    GROWTH = "growth"
    VOLATILITY = "volatility"
    EVENT_DRIVEN = "event-driven"
    CUSTOM = "custom"


class ObjectiveType(str, Enum):
    RETURN = "return"
    RISK = "risk"
    HOLDINGS = "holdings"
    TRADES = "trades"


class EventType(str, Enum):
    NEWS = "news"
    ECONOMIC = "economic"
    POLITICAL = "political"
    TECHNICAL = "technical"


class Impact(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class ScenarioObjective:
    """A goal the player is asked to reach during a scenario."""

    id: str
    description: str
    type: ObjectiveType
    target: float
    # Never set during play; completion is judged by the evaluation oracle
    achieved: bool = False


@dataclass(frozen=True)
class MarketCondition:
    """A market event scheduled for a given scenario day."""

    day: int
    event_type: EventType
    description: str
    impact: Impact
    affected_assets: Tuple[str, ...] = (ALL_ASSETS,)

    def affects(self, symbol: str) -> bool:
        """Whether this event moves the given symbol."""
        return ALL_ASSETS in self.affected_assets or symbol in self.affected_assets


@dataclass(frozen=True)
class Scenario:
    """A trading scenario definition. Immutable once created."""

    id: str
    title: str
    description: str
    difficulty: Difficulty
    category: ScenarioCategory
    initial_cash: float
    duration: int  # days
    objectives: Tuple[ScenarioObjective, ...] = ()
    market_conditions: Tuple[MarketCondition, ...] = ()
    is_active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: Optional[str] = None


@dataclass(frozen=True)
class Evaluation:
    """Score and narrative feedback returned by the evaluation oracle."""

    score: float
    feedback: str
    strengths: List[str] = field(default_factory=list)
    improvements: List[str] = field(default_factory=list)
    objectives_completed: int = 0


@dataclass(frozen=True)
class ScenarioResult:
    """Final outcome of a completed scenario run."""

    scenario_id: str
    user_id: str
    final_value: float
    return_percent: float
    objectives_completed: int
    total_objectives: int
    trades: Tuple = ()
    score: float = 0
    feedback: str = ""
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
