"""Scenario definitions, canned catalog and event schedules."""

from .catalog import BUILTIN_SCENARIOS, get_builtin_scenario, list_builtin_scenarios
from .models import (
    ALL_ASSETS,
    Difficulty,
    Evaluation,
    EventType,
    Impact,
    MarketCondition,
    ObjectiveType,
    Scenario,
    ScenarioCategory,
    ScenarioObjective,
    ScenarioResult,
)
from .schedule import CANNED_SCHEDULES, EventSchedule, event_magnitude

__all__ = [
    "ALL_ASSETS",
    "BUILTIN_SCENARIOS",
    "CANNED_SCHEDULES",
    "Difficulty",
    "Evaluation",
    "EventSchedule",
    "EventType",
    "Impact",
    "MarketCondition",
    "ObjectiveType",
    "Scenario",
    "ScenarioCategory",
    "ScenarioObjective",
    "ScenarioResult",
    "event_magnitude",
    "get_builtin_scenario",
    "list_builtin_scenarios",
]
