"""Conversion between domain dataclasses and camelCase store documents."""

from datetime import datetime
from typing import Any, Dict, Optional

from ..services.materials.models import MaterialStatus, UploadedMaterial
from ..services.scenario.models import (
    Difficulty,
    EventType,
    Impact,
    MarketCondition,
    ObjectiveType,
    Scenario,
    ScenarioCategory,
    ScenarioObjective,
    ScenarioResult,
)
from ..services.trading.models import (
    PerformanceMetric,
    Portfolio,
    Position,
    Trade,
    TradeSide,
    TradeStatus,
)
from ..services.user import User

Document = Dict[str, Any]


def _dt(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


# Users


def user_to_document(user: User) -> Document:
    doc = {
        "email": user.email,
        "displayName": user.display_name,
        "createdAt": _dt(user.created_at),
    }
    if user.photo_url:
        doc["photoURL"] = user.photo_url
    return doc


def user_from_document(doc_id: str, doc: Document) -> User:
    return User(
        id=doc_id,
        email=doc["email"],
        display_name=doc.get("displayName", ""),
        photo_url=doc.get("photoURL"),
        created_at=_parse_dt(doc.get("createdAt")),
    )


# Portfolios


def position_to_document(position: Position) -> Document:
    return {
        "id": position.id,
        "assetId": position.asset_id,
        "symbol": position.symbol,
        "quantity": position.quantity,
        "averagePrice": position.average_price,
        "currentPrice": position.current_price,
        "totalValue": position.total_value,
        "profitLoss": position.profit_loss,
        "profitLossPercent": position.profit_loss_percent,
    }


def position_from_document(doc: Document) -> Position:
    return Position(
        id=doc["id"],
        asset_id=doc["assetId"],
        symbol=doc["symbol"],
        quantity=int(doc["quantity"]),
        average_price=float(doc["averagePrice"]),
        current_price=float(doc["currentPrice"]),
    )


def metric_to_document(metric: PerformanceMetric) -> Document:
    return {
        "timestamp": _dt(metric.timestamp),
        "totalValue": metric.total_value,
        "profitLoss": metric.profit_loss,
        "profitLossPercent": metric.profit_loss_percent,
    }


def metric_from_document(doc: Document) -> PerformanceMetric:
    return PerformanceMetric(
        timestamp=_parse_dt(doc["timestamp"]),
        total_value=float(doc["totalValue"]),
        profit_loss=float(doc["profitLoss"]),
        profit_loss_percent=float(doc["profitLossPercent"]),
    )


def portfolio_to_document(portfolio: Portfolio) -> Document:
    return {
        "userId": portfolio.user_id,
        "cash": portfolio.cash,
        "totalValue": portfolio.total_value,
        "positions": [position_to_document(p) for p in portfolio.positions.values()],
        "performance": [metric_to_document(m) for m in portfolio.performance],
        "createdAt": _dt(portfolio.created_at),
        "updatedAt": _dt(portfolio.updated_at),
    }


def portfolio_from_document(doc_id: str, doc: Document) -> Portfolio:
    positions = [position_from_document(p) for p in doc.get("positions", [])]
    return Portfolio(
        id=doc_id,
        user_id=doc["userId"],
        cash=float(doc["cash"]),
        positions={p.symbol: p for p in positions},
        performance=tuple(metric_from_document(m) for m in doc.get("performance", [])),
        created_at=_parse_dt(doc.get("createdAt")),
        updated_at=_parse_dt(doc.get("updatedAt")),
    )


# Trades


def trade_to_document(trade: Trade) -> Document:
    return {
        "portfolioId": trade.portfolio_id,
        "assetId": trade.asset_id,
        "symbol": trade.symbol,
        "type": trade.side.value,
        "quantity": trade.quantity,
        "price": trade.price,
        "total": trade.total,
        "timestamp": _dt(trade.timestamp),
        "status": trade.status.value,
    }


def trade_from_document(doc_id: str, doc: Document) -> Trade:
    return Trade(
        id=doc_id,
        portfolio_id=doc["portfolioId"],
        asset_id=doc["assetId"],
        symbol=doc["symbol"],
        side=TradeSide(doc["type"]),
        quantity=int(doc["quantity"]),
        price=float(doc["price"]),
        total=float(doc["total"]),
        timestamp=_parse_dt(doc["timestamp"]),
        status=TradeStatus(doc.get("status", TradeStatus.EXECUTED.value)),
    )


# Scenarios


def objective_to_document(objective: ScenarioObjective) -> Document:
    return {
        "id": objective.id,
        "description": objective.description,
        "type": objective.type.value,
        "target": objective.target,
        "achieved": objective.achieved,
    }


def objective_from_document(doc: Document) -> ScenarioObjective:
    return ScenarioObjective(
        id=str(doc["id"]),
        description=doc["description"],
        type=ObjectiveType(doc["type"]),
        target=float(doc["target"]),
        achieved=bool(doc.get("achieved", False)),
    )


def condition_to_document(condition: MarketCondition) -> Document:
    return {
        "day": condition.day,
        "eventType": condition.event_type.value,
        "description": condition.description,
        "impact": condition.impact.value,
        "affectedAssets": list(condition.affected_assets),
    }


def condition_from_document(doc: Document) -> MarketCondition:
    return MarketCondition(
        day=int(doc["day"]),
        event_type=EventType(doc["eventType"]),
        description=doc["description"],
        impact=Impact(doc["impact"]),
        affected_assets=tuple(doc.get("affectedAssets") or ("ALL",)),
    )


def scenario_to_document(scenario: Scenario) -> Document:
    doc = {
        "title": scenario.title,
        "description": scenario.description,
        "difficulty": scenario.difficulty.value,
        "category": scenario.category.value,
        "initialCash": scenario.initial_cash,
        "duration": scenario.duration,
        "objectives": [objective_to_document(o) for o in scenario.objectives],
        "marketConditions": [condition_to_document(c) for c in scenario.market_conditions],
        "isActive": scenario.is_active,
        "createdAt": _dt(scenario.created_at),
    }
    if scenario.user_id:
        doc["userId"] = scenario.user_id
    return doc


def scenario_from_document(doc_id: str, doc: Document) -> Scenario:
    return Scenario(
        id=doc_id,
        title=doc["title"],
        description=doc.get("description", ""),
        difficulty=Difficulty(doc["difficulty"]),
        category=ScenarioCategory(doc["category"]),
        initial_cash=float(doc["initialCash"]),
        duration=int(doc["duration"]),
        objectives=tuple(objective_from_document(o) for o in doc.get("objectives", [])),
        market_conditions=tuple(
            condition_from_document(c) for c in doc.get("marketConditions", [])
        ),
        is_active=bool(doc.get("isActive", True)),
        created_at=_parse_dt(doc.get("createdAt")),
        user_id=doc.get("userId"),
    )


def scenario_result_to_document(result: ScenarioResult) -> Document:
    return {
        "scenarioId": result.scenario_id,
        "userId": result.user_id,
        "finalValue": result.final_value,
        "returnPercent": result.return_percent,
        "objectivesCompleted": result.objectives_completed,
        "totalObjectives": result.total_objectives,
        "trades": [dict(trade_to_document(t), id=t.id) for t in result.trades],
        "score": result.score,
        "feedback": result.feedback,
        "completedAt": _dt(result.completed_at),
    }


def scenario_result_from_document(doc: Document) -> ScenarioResult:
    return ScenarioResult(
        scenario_id=doc["scenarioId"],
        user_id=doc["userId"],
        final_value=float(doc["finalValue"]),
        return_percent=float(doc["returnPercent"]),
        objectives_completed=int(doc.get("objectivesCompleted", 0)),
        total_objectives=int(doc.get("totalObjectives", 0)),
        trades=tuple(trade_from_document(t["id"], t) for t in doc.get("trades", [])),
        score=float(doc.get("score", 0)),
        feedback=doc.get("feedback", ""),
        completed_at=_parse_dt(doc.get("completedAt")),
    )


# Materials


def material_to_document(material: UploadedMaterial) -> Document:
    return {
        "userId": material.user_id,
        "fileName": material.file_name,
        "fileType": material.file_type,
        "fileSize": material.file_size,
        "content": material.content,
        "uploadedAt": _dt(material.uploaded_at),
        "status": material.status.value,
    }


def material_from_document(doc_id: str, doc: Document) -> UploadedMaterial:
    return UploadedMaterial(
        id=doc_id,
        user_id=doc["userId"],
        file_name=doc["fileName"],
        file_type=doc.get("fileType", ""),
        file_size=int(doc.get("fileSize", 0)),
        content=doc.get("content", ""),
        uploaded_at=_parse_dt(doc.get("uploadedAt")),
        status=MaterialStatus(doc.get("status", MaterialStatus.PROCESSING.value)),
    )
