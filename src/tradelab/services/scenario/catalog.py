"""Built-in scenarios offered before any materials are uploaded."""

from typing import List, Optional

from .models import (
    Difficulty,
    ObjectiveType,
    Scenario,
    ScenarioCategory,
    ScenarioObjective,
)


def _objective(obj_id: str, description: str, obj_type: ObjectiveType, target: float) -> ScenarioObjective:
    return ScenarioObjective(id=obj_id, description=description, type=obj_type, target=target)


# Market conditions are left empty so each run uses its category's canned schedule
BUILTIN_SCENARIOS = (
    Scenario(
        id="builtin-crisis",
        title="Financial Crisis",
        description="A banking liquidity shock spreads through every market. Preserve capital and position for the recovery.",
        difficulty=Difficulty.INTERMEDIATE,
        category=ScenarioCategory.CRISIS,
        initial_cash=100000.0,
        duration=60,
        objectives=(
            _objective("crisis-1", "Limit portfolio drawdown to 10%", ObjectiveType.RISK, 10),
            _objective("crisis-2", "Finish with a positive return", ObjectiveType.RETURN, 0),
            _objective("crisis-3", "Hold at least one safe-haven asset", ObjectiveType.HOLDINGS, 1),
        ),
    ),
    Scenario(
        id="builtin-growth",
        title="Bull Market",
        description="A strong economy lifts risk assets. Capture the upside without overconcentrating.",
        difficulty=Difficulty.BEGINNER,
        category=ScenarioCategory.GROWTH,
        initial_cash=100000.0,
        duration=90,
        objectives=(
            _objective("growth-1", "Achieve a 15% return", ObjectiveType.RETURN, 15),
            _objective("growth-2", "Hold at least four different assets", ObjectiveType.HOLDINGS, 4),
        ),
    ),
    Scenario(
        id="builtin-volatility",
        title="Whipsaw Markets",
        description="Sharp swings in both directions punish late entries. Trade the volatility with discipline.",
        difficulty=Difficulty.ADVANCED,
        category=ScenarioCategory.VOLATILITY,
        initial_cash=50000.0,
        duration=30,
        objectives=(
            _objective("volatility-1", "Achieve a 5% return", ObjectiveType.RETURN, 5),
            _objective("volatility-2", "Keep daily losses under 3%", ObjectiveType.RISK, 3),
            _objective("volatility-3", "Make no more than 20 trades", ObjectiveType.TRADES, 20),
        ),
    ),
    Scenario(
        id="builtin-event-driven",
        title="Headline Trading",
        description="Company news, geopolitics and regulation move individual assets. React to each headline.",
        difficulty=Difficulty.INTERMEDIATE,
        category=ScenarioCategory.EVENT_DRIVEN,
        initial_cash=100000.0,
        duration=45,
        objectives=(
            _objective("event-1", "Achieve a 10% return", ObjectiveType.RETURN, 10),
            _objective("event-2", "Trade at least five times", ObjectiveType.TRADES, 5),
        ),
    ),
)


def list_builtin_scenarios() -> List[Scenario]:
    return list(BUILTIN_SCENARIOS)


def get_builtin_scenario(scenario_id: str) -> Optional[Scenario]:
    """Look up a built-in scenario by id or by category name."""
    for scenario in BUILTIN_SCENARIOS:
        if scenario_id in (scenario.id, scenario.category.value):
            return scenario
    return None
