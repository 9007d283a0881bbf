"""Oracle-backed scenario generation, analysis and evaluation."""

import json
import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..config.logging import get_logger
from ..config.settings import get_settings
from ..exceptions import OracleError, OracleResponseError
from ..services.market.models import Asset
from ..services.market.registry import generate_initial_assets
from ..services.materials.models import DocumentAnalysis, RiskAssessment, RiskLevel
from ..services.scenario.models import (
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
)
from ..services.trading.analytics import calculate_return, format_currency, format_percent
from ..services.trading.models import Portfolio, Trade
from .client import OracleClient
from .parsing import extract_json_array, extract_json_object
from .prompts import get_error_message, get_max_tokens, render_prompt
from .session import OracleSession

logger = get_logger(__name__)


def _affected_assets(value: Any) -> Tuple[str, ...]:
    if not value:
        return (ALL_ASSETS,)
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list):
        raise OracleResponseError(
            f"Invalid scenario from oracle: affectedAssets must be a list, got {value!r}"
        )
    return tuple(str(symbol) for symbol in value)


def _strings(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if isinstance(item, (str, int, float))]


def scenario_from_oracle(data: Dict[str, Any]) -> Scenario:
    """
    Build a Scenario from the oracle's JSON, validating every field.

    Raises:
        OracleResponseError: If a field is missing or out of range
    """
    try:
        objectives = tuple(
            ScenarioObjective(
                id=str(item.get("id") or index + 1),
                description=str(item["description"]),
                type=ObjectiveType(item["type"]),
                target=float(item["target"]),
            )
            for index, item in enumerate(data.get("objectives") or [])
        )
        conditions = tuple(
            MarketCondition(
                day=int(item["day"]),
                event_type=EventType(item["eventType"]),
                description=str(item["description"]),
                impact=Impact(item["impact"]),
                affected_assets=_affected_assets(item.get("affectedAssets")),
            )
            for item in data.get("marketConditions") or []
        )
        scenario = Scenario(
            id=uuid.uuid4().hex,
            title=str(data["title"]),
            description=str(data.get("description", "")),
            difficulty=Difficulty(data["difficulty"]),
            category=ScenarioCategory(data["category"]),
            initial_cash=float(data.get("initialCash", get_settings().default_initial_cash)),
            duration=int(data["duration"]),
            objectives=objectives,
            market_conditions=conditions,
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise OracleResponseError(f"Invalid scenario from oracle: {e}") from e

    if scenario.duration <= 0:
        raise OracleResponseError("Invalid scenario from oracle: duration must be positive")
    if scenario.initial_cash <= 0:
        raise OracleResponseError("Invalid scenario from oracle: initial cash must be positive")
    if any(c.day < 0 for c in scenario.market_conditions):
        raise OracleResponseError("Invalid scenario from oracle: negative event day")
    return scenario


async def generate_scenario(
    session: OracleSession,
    materials_text: str,
    category: ScenarioCategory = ScenarioCategory.CUSTOM,
    difficulty: Difficulty = Difficulty.INTERMEDIATE,
    client: Optional[OracleClient] = None,
) -> Optional[Scenario]:
    """
    Ask the oracle for a scenario built from course materials.

    Returns:
        The generated scenario, or None if the oracle failed
    """
    client = client or OracleClient()
    symbols = ", ".join(asset.symbol for asset in generate_initial_assets())
    prompt = render_prompt(
        "scenario_generation",
        difficulty=Difficulty(difficulty).value,
        category=ScenarioCategory(category).value,
        materials=materials_text,
        symbols=symbols,
    )

    try:
        text = await client.complete(
            session.conversation(prompt), get_max_tokens("scenario_generation")
        )
        scenario = scenario_from_oracle(extract_json_object(text))
    except OracleError as e:
        logger.warning("Scenario generation failed", error=e.message, session_id=session.session_id)
        return None

    session.record(prompt, text)
    logger.info(
        "Scenario generated",
        scenario_id=scenario.id,
        category=scenario.category.value,
        duration=scenario.duration,
        events=len(scenario.market_conditions),
    )
    return scenario


async def suggest_topics(
    session: OracleSession,
    materials_text: str,
    client: Optional[OracleClient] = None,
) -> List[str]:
    """Topic ideas for scenarios; empty when the oracle fails."""
    client = client or OracleClient()
    prompt = render_prompt("topic_suggestions", materials=materials_text)
    try:
        text = await client.complete(
            session.conversation(prompt), get_max_tokens("topic_suggestions")
        )
        topics = _strings(extract_json_array(text))
    except OracleError as e:
        logger.warning("Topic suggestion failed", error=e.message, session_id=session.session_id)
        return []
    return topics


async def analyze_document(
    session: OracleSession,
    content: str,
    attachment: Optional[Dict[str, Any]] = None,
    client: Optional[OracleClient] = None,
) -> DocumentAnalysis:
    """
    Summarize a study document; an empty, medium-risk analysis on failure.

    Binary documents are passed as an ``attachment`` content block sent
    ahead of the prompt text.
    """
    client = client or OracleClient()
    prompt = render_prompt("document_analysis", content=content)
    message_content: Any = prompt
    if attachment:
        message_content = [attachment, {"type": "text", "text": prompt}]
    try:
        text = await client.complete(
            [{"role": "user", "content": message_content}],
            get_max_tokens("document_analysis"),
        )
        data = extract_json_object(text)
    except OracleError as e:
        logger.warning("Document analysis failed", error=e.message, session_id=session.session_id)
        return DocumentAnalysis.empty()

    risk = data.get("riskAssessment")
    if not isinstance(risk, dict):
        risk = {}
    try:
        level = RiskLevel(str(risk.get("level", "medium")).lower())
    except ValueError:
        level = RiskLevel.MEDIUM

    return DocumentAnalysis(
        summary=str(data.get("summary", "")),
        key_insights=_strings(data.get("keyInsights")),
        recommendations=_strings(data.get("recommendations")),
        risk_assessment=RiskAssessment(level=level, factors=_strings(risk.get("factors"))),
    )


def _portfolio_summary(portfolio: Portfolio) -> str:
    holdings = {
        symbol: {"quantity": p.quantity, "averagePrice": round(p.average_price, 2)}
        for symbol, p in portfolio.positions.items()
    }
    return json.dumps(
        {"cash": round(portfolio.cash, 2), "totalValue": round(portfolio.total_value, 2), "positions": holdings}
    )


def _market_summary(assets: Iterable[Asset]) -> str:
    return json.dumps(
        {
            asset.symbol: {
                "price": round(asset.current_price, 2),
                "change24h": round(asset.change_24h, 2),
            }
            for asset in assets
        }
    )


async def get_market_advice(
    session: OracleSession,
    portfolio: Portfolio,
    assets: Iterable[Asset],
    client: Optional[OracleClient] = None,
) -> Optional[str]:
    """Free-text trading advice, or None when the oracle fails."""
    client = client or OracleClient()
    prompt = render_prompt(
        "market_advice",
        portfolio=_portfolio_summary(portfolio),
        market=_market_summary(assets),
    )
    try:
        return await client.complete(
            session.conversation(prompt), get_max_tokens("market_advice")
        )
    except OracleError as e:
        logger.warning("Market advice failed", error=e.message, session_id=session.session_id)
        return None


def _fallback_evaluation() -> Evaluation:
    return Evaluation(score=0, feedback=get_error_message("unavailable"))


async def evaluate_performance(
    session: OracleSession,
    scenario: Scenario,
    portfolio: Portfolio,
    trades: Sequence[Trade],
    client: Optional[OracleClient] = None,
) -> Evaluation:
    """
    Score a finished scenario run.

    Never raises for oracle failures; a neutral zero-score evaluation is
    returned instead.
    """
    client = client or OracleClient()
    objectives = "\n".join(
        f"- [{o.type.value}] {o.description} (target {o.target:g})" for o in scenario.objectives
    ) or "- none"
    trade_lines = "\n".join(
        f"- {t.timestamp:%Y-%m-%d %H:%M} {t.side.value} {t.quantity} {t.symbol} @ {t.price:.2f}"
        for t in trades
    ) or "- none"
    prompt = render_prompt(
        "performance_evaluation",
        title=scenario.title,
        duration=scenario.duration,
        initial_cash=format_currency(scenario.initial_cash),
        objectives=objectives,
        final_value=format_currency(portfolio.total_value),
        return_percent=format_percent(calculate_return(scenario.initial_cash, portfolio.total_value)),
        trade_count=len(trades),
        trades=trade_lines,
    )

    try:
        text = await client.complete(
            session.conversation(prompt), get_max_tokens("performance_evaluation")
        )
        data = extract_json_object(text)
        score = float(data.get("score", 0))
        objectives_completed = int(data.get("objectivesCompleted", 0))
    except OracleError as e:
        logger.warning("Evaluation failed", error=e.message, session_id=session.session_id)
        return _fallback_evaluation()
    except (TypeError, ValueError) as e:
        logger.warning("Evaluation response invalid", error=str(e), session_id=session.session_id)
        return _fallback_evaluation()

    session.record(prompt, text)
    return Evaluation(
        score=min(100.0, max(0.0, score)),
        feedback=str(data.get("feedback", "")),
        strengths=_strings(data.get("strengths")),
        improvements=_strings(data.get("improvements")),
        objectives_completed=min(len(scenario.objectives), max(0, objectives_completed)),
    )
