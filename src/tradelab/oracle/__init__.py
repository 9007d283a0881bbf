"""Text-generation oracle: client, session state and typed handlers."""

from .client import OracleClient, response_text
from .handlers import (
    analyze_document,
    evaluate_performance,
    generate_scenario,
    get_market_advice,
    scenario_from_oracle,
    suggest_topics,
)
from .parsing import extract_json_array, extract_json_object
from .session import OracleSession

__all__ = [
    "OracleClient",
    "OracleSession",
    "analyze_document",
    "evaluate_performance",
    "extract_json_array",
    "extract_json_object",
    "generate_scenario",
    "get_market_advice",
    "response_text",
    "scenario_from_oracle",
    "suggest_topics",
]
