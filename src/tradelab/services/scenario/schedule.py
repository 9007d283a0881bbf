"""Day-indexed market event schedules and event magnitude draws."""

import random
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from .models import (
    ALL_ASSETS,
    EventType,
    Impact,
    MarketCondition,
    Scenario,
    ScenarioCategory,
)

# Uniform magnitude bounds per impact sign (fraction of price)
IMPACT_RANGES: Dict[Impact, Tuple[float, float]] = {
    Impact.POSITIVE: (0.03, 0.08),
    Impact.NEGATIVE: (-0.08, -0.03),
    Impact.NEUTRAL: (-0.01, 0.01),
}
ECONOMIC_MULTIPLIER = 1.5


def event_magnitude(condition: MarketCondition, rng: random.Random) -> float:
    """
    Draw the price shock for a market event.

    Args:
        condition: The event being applied
        rng: Random source for event draws

    Returns:
        Signed fractional trend, e.g. -0.06 for a 6% drop
    """
    low, high = IMPACT_RANGES[condition.impact]
    magnitude = rng.uniform(low, high)
    if condition.event_type == EventType.ECONOMIC:
        magnitude *= ECONOMIC_MULTIPLIER
    return magnitude


def _event(
    day: int,
    event_type: EventType,
    impact: Impact,
    description: str,
    *assets: str,
) -> MarketCondition:
    return MarketCondition(
        day=day,
        event_type=event_type,
        description=description,
        impact=impact,
        affected_assets=tuple(assets) or (ALL_ASSETS,),
    )


CANNED_SCHEDULES: Dict[ScenarioCategory, Tuple[MarketCondition, ...]] = {
    ScenarioCategory.CRISIS: (
        _event(1, EventType.ECONOMIC, Impact.NEGATIVE, "Major bank announces liquidity crisis"),
        _event(3, EventType.NEWS, Impact.NEGATIVE, "Credit markets freeze as lenders pull back", "AAPL", "GOOGL", "TSLA"),
        _event(5, EventType.ECONOMIC, Impact.POSITIVE, "Flight to safety lifts treasuries", "TLT", "IEF", "GLD"),
        _event(10, EventType.POLITICAL, Impact.POSITIVE, "Government announces emergency stimulus package"),
        _event(20, EventType.ECONOMIC, Impact.NEGATIVE, "Unemployment claims spike", "AAPL", "GOOGL", "TSLA", "USO"),
        _event(35, EventType.NEWS, Impact.NEUTRAL, "Markets await central bank guidance"),
        _event(45, EventType.ECONOMIC, Impact.POSITIVE, "Central bank cuts rates to record lows"),
    ),
    ScenarioCategory.GROWTH: (
        _event(5, EventType.ECONOMIC, Impact.POSITIVE, "GDP growth beats expectations"),
        _event(15, EventType.NEWS, Impact.POSITIVE, "Tech earnings season surprises to the upside", "AAPL", "GOOGL", "TSLA"),
        _event(30, EventType.TECHNICAL, Impact.NEUTRAL, "Indices consolidate near all-time highs"),
        _event(45, EventType.ECONOMIC, Impact.NEGATIVE, "Inflation data prompts rate hike fears", "TLT", "IEF"),
        _event(60, EventType.NEWS, Impact.POSITIVE, "Institutional adoption of digital assets accelerates", "BTC", "ETH"),
        _event(75, EventType.ECONOMIC, Impact.POSITIVE, "Consumer spending hits new record"),
    ),
    ScenarioCategory.VOLATILITY: (
        _event(2, EventType.TECHNICAL, Impact.NEGATIVE, "Algorithmic selling triggers flash crash"),
        _event(4, EventType.TECHNICAL, Impact.POSITIVE, "Sharp rebound as dip buyers step in"),
        _event(8, EventType.NEWS, Impact.NEGATIVE, "Exchange outage rattles crypto markets", "BTC", "ETH"),
        _event(12, EventType.NEWS, Impact.POSITIVE, "Short squeeze sends EV stocks soaring", "TSLA"),
        _event(16, EventType.ECONOMIC, Impact.NEGATIVE, "Surprise inflation print"),
        _event(20, EventType.POLITICAL, Impact.POSITIVE, "Trade deal headlines spark relief rally"),
        _event(25, EventType.TECHNICAL, Impact.NEUTRAL, "Options expiry keeps prices pinned"),
    ),
    ScenarioCategory.EVENT_DRIVEN: (
        _event(3, EventType.NEWS, Impact.POSITIVE, "Apple unveils breakthrough product line", "AAPL"),
        _event(8, EventType.POLITICAL, Impact.NEGATIVE, "Oil supply disruption in major producing region", "AAPL", "TSLA"),
        _event(9, EventType.POLITICAL, Impact.POSITIVE, "Oil supply disruption lifts crude prices", "USO"),
        _event(15, EventType.ECONOMIC, Impact.NEGATIVE, "Regulators propose strict crypto rules", "BTC", "ETH"),
        _event(22, EventType.NEWS, Impact.POSITIVE, "Search giant wins antitrust appeal", "GOOGL"),
        _event(30, EventType.ECONOMIC, Impact.POSITIVE, "Central bank signals end of tightening cycle"),
        _event(40, EventType.NEWS, Impact.NEUTRAL, "Quarterly rebalancing flows hit markets"),
    ),
}


class EventSchedule:
    """Lookup of market events by scenario day."""

    def __init__(self, conditions: Iterable[MarketCondition] = ()):
        self._by_day: Dict[int, List[MarketCondition]] = defaultdict(list)
        for condition in conditions:
            self._by_day[condition.day].append(condition)

    @classmethod
    def for_category(cls, category: ScenarioCategory) -> "EventSchedule":
        """Canned schedule for a category; custom scenarios get an empty one."""
        return cls(CANNED_SCHEDULES.get(category, ()))

    @classmethod
    def for_scenario(cls, scenario: Optional[Scenario]) -> "EventSchedule":
        """
        Build the schedule a scenario runs on.

        Conditions carried by the scenario itself take precedence; otherwise
        the canned schedule for its category is used.
        """
        if scenario is None:
            return cls()
        if scenario.market_conditions:
            return cls(scenario.market_conditions)
        return cls.for_category(scenario.category)

    def events_for_day(self, day: int) -> List[MarketCondition]:
        """Return the events scheduled for a day, in declaration order."""
        return list(self._by_day.get(day, ()))

    @property
    def days(self) -> List[int]:
        return sorted(day for day, events in self._by_day.items() if events)

    def __len__(self) -> int:
        return sum(len(events) for events in self._by_day.values())
