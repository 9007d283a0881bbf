"""Tests for oracle-backed handlers with a mocked client."""

import json
import sys
from unittest.mock import AsyncMock, MagicMock, Mock, patch

import aiohttp
import pytest

sys.path.append("src")
from tradelab.config.settings import Settings
from tradelab.exceptions import OracleRequestError, OracleResponseError
from tradelab.oracle.client import OracleClient, response_text
from tradelab.oracle.handlers import (
    analyze_document,
    evaluate_performance,
    generate_scenario,
    get_market_advice,
    scenario_from_oracle,
    suggest_topics,
)
from tradelab.oracle.session import OracleSession
from tradelab.services.market.registry import generate_initial_assets
from tradelab.services.materials.models import RiskLevel
from tradelab.services.scenario.models import (
    Difficulty,
    EventType,
    Impact,
    ScenarioCategory,
)
from tradelab.services.trading.ledger import create_portfolio

SCENARIO_JSON = {
    "title": "Rate Shock",
    "description": "Central banks surprise markets",
    "difficulty": "advanced",
    "category": "crisis",
    "initialCash": 50000,
    "duration": 20,
    "objectives": [
        {"id": "1", "description": "Stay positive", "type": "return", "target": 0}
    ],
    "marketConditions": [
        {
            "day": 2,
            "eventType": "economic",
            "description": "Surprise hike",
            "impact": "negative",
            "affectedAssets": ["TLT", "IEF"],
        },
        {"day": 5, "eventType": "news", "description": "Calm returns", "impact": "neutral"},
    ],
}


@pytest.fixture
def session():
    return OracleSession("test-session")


class TestScenarioGeneration:
    def test_scenario_from_oracle(self):
        scenario = scenario_from_oracle(SCENARIO_JSON)

        assert scenario.id
        assert scenario.difficulty == Difficulty.ADVANCED
        assert scenario.category == ScenarioCategory.CRISIS
        assert scenario.initial_cash == 50000.0
        assert scenario.market_conditions[0].event_type == EventType.ECONOMIC
        assert scenario.market_conditions[0].affected_assets == ("TLT", "IEF")
        assert scenario.market_conditions[1].impact == Impact.NEUTRAL
        assert scenario.market_conditions[1].affected_assets == ("ALL",)

    @pytest.mark.parametrize(
        "change",
        [
            {"duration": 0},
            {"initialCash": -5},
            {"category": "sideways"},
            {"difficulty": "impossible"},
        ],
    )
    def test_invalid_scenario(self, change):
        with pytest.raises(OracleResponseError):
            scenario_from_oracle(dict(SCENARIO_JSON, **change))

    def test_affected_assets_string_means_one_entry(self):
        data = dict(SCENARIO_JSON)
        data["marketConditions"] = [
            dict(SCENARIO_JSON["marketConditions"][0], affectedAssets="ALL"),
            dict(SCENARIO_JSON["marketConditions"][0], affectedAssets="TLT"),
        ]

        scenario = scenario_from_oracle(data)

        everything, single = scenario.market_conditions
        assert everything.affected_assets == ("ALL",)
        assert everything.affects("AAPL")
        assert single.affected_assets == ("TLT",)
        assert not single.affects("AAPL")

    def test_affected_assets_wrong_type(self):
        data = dict(SCENARIO_JSON)
        data["marketConditions"] = [
            dict(SCENARIO_JSON["marketConditions"][0], affectedAssets={"symbol": "TLT"})
        ]
        with pytest.raises(OracleResponseError, match="affectedAssets"):
            scenario_from_oracle(data)

    def test_missing_cash_uses_configured_default(self):
        data = dict(SCENARIO_JSON)
        del data["initialCash"]
        with patch(
            "tradelab.oracle.handlers.get_settings",
            return_value=Settings(_env_file=None, default_initial_cash=25000.0),
        ):
            assert scenario_from_oracle(data).initial_cash == 25000.0

    def test_missing_field(self):
        data = dict(SCENARIO_JSON)
        del data["title"]
        with pytest.raises(OracleResponseError):
            scenario_from_oracle(data)

    @pytest.mark.asyncio
    async def test_generate_scenario_records_exchange(self, session, mock_oracle_client):
        reply = "Here is your scenario:\n" + json.dumps(SCENARIO_JSON)
        mock_oracle_client.complete.return_value = reply

        scenario = await generate_scenario(
            session, "Notes on monetary policy", client=mock_oracle_client
        )

        assert scenario.title == "Rate Shock"
        messages, max_tokens = mock_oracle_client.complete.call_args.args
        assert max_tokens == 4096
        assert "Notes on monetary policy" in messages[-1]["content"]
        assert "AAPL" in messages[-1]["content"]
        assert len(session) == 2
        assert session.messages[-1] == {"role": "assistant", "content": reply}

    @pytest.mark.asyncio
    async def test_generate_scenario_failure(self, session, mock_oracle_client):
        mock_oracle_client.complete.side_effect = OracleRequestError("boom", status=500)

        assert await generate_scenario(session, "notes", client=mock_oracle_client) is None
        assert len(session) == 0

    @pytest.mark.asyncio
    async def test_generate_scenario_unparseable(self, session, mock_oracle_client):
        mock_oracle_client.complete.return_value = "I cannot help with that."
        assert await generate_scenario(session, "notes", client=mock_oracle_client) is None

    @pytest.mark.asyncio
    async def test_suggest_topics(self, session, mock_oracle_client):
        mock_oracle_client.complete.return_value = '["Inflation", "Bond ladders"]'
        assert await suggest_topics(session, "notes", client=mock_oracle_client) == [
            "Inflation",
            "Bond ladders",
        ]

    @pytest.mark.asyncio
    async def test_suggest_topics_fallback(self, session, mock_oracle_client):
        mock_oracle_client.complete.return_value = "no list"
        assert await suggest_topics(session, "notes", client=mock_oracle_client) == []


class TestDocumentAnalysis:
    @pytest.mark.asyncio
    async def test_analysis_parsed(self, session, mock_oracle_client):
        mock_oracle_client.complete.return_value = json.dumps(
            {
                "summary": "Rates drive bond prices.",
                "keyInsights": ["Duration matters"],
                "recommendations": ["Ladder maturities"],
                "riskAssessment": {"level": "HIGH", "factors": ["Rate risk"]},
            }
        )

        analysis = await analyze_document(session, "text", client=mock_oracle_client)

        assert analysis.summary == "Rates drive bond prices."
        assert analysis.key_insights == ["Duration matters"]
        assert analysis.risk_assessment.level == RiskLevel.HIGH
        assert analysis.risk_assessment.factors == ["Rate risk"]

    @pytest.mark.asyncio
    async def test_attachment_sent_first(self, session, mock_oracle_client):
        mock_oracle_client.complete.return_value = '{"summary": "ok"}'
        attachment = {"type": "document", "source": {"type": "base64", "data": "AAAA"}}

        await analyze_document(session, "see attached", attachment=attachment, client=mock_oracle_client)

        messages = mock_oracle_client.complete.call_args.args[0]
        content = messages[0]["content"]
        assert content[0] == attachment
        assert content[1]["type"] == "text"

    @pytest.mark.asyncio
    async def test_analysis_fallback(self, session, mock_oracle_client):
        mock_oracle_client.complete.side_effect = OracleRequestError("down")

        analysis = await analyze_document(session, "text", client=mock_oracle_client)

        assert analysis.summary == ""
        assert analysis.risk_assessment.level == RiskLevel.MEDIUM

    @pytest.mark.asyncio
    async def test_unknown_risk_level(self, session, mock_oracle_client):
        mock_oracle_client.complete.return_value = (
            '{"summary": "s", "riskAssessment": {"level": "extreme"}}'
        )
        analysis = await analyze_document(session, "text", client=mock_oracle_client)
        assert analysis.risk_assessment.level == RiskLevel.MEDIUM


class TestAdviceAndEvaluation:
    @pytest.mark.asyncio
    async def test_market_advice(self, session, mock_oracle_client):
        mock_oracle_client.complete.return_value = "Diversify."
        portfolio = create_portfolio("user-1", 1000.0)

        advice = await get_market_advice(
            session, portfolio, generate_initial_assets(), client=mock_oracle_client
        )

        assert advice == "Diversify."
        prompt = mock_oracle_client.complete.call_args.args[0][-1]["content"]
        assert '"cash": 1000.0' in prompt
        assert "BTC" in prompt

    @pytest.mark.asyncio
    async def test_market_advice_failure(self, session, mock_oracle_client):
        mock_oracle_client.complete.side_effect = OracleRequestError("down")
        portfolio = create_portfolio("user-1", 1000.0)
        assert await get_market_advice(session, portfolio, [], client=mock_oracle_client) is None

    @pytest.mark.asyncio
    async def test_evaluation_clamped(self, session, mock_oracle_client, sample_scenario):
        mock_oracle_client.complete.return_value = json.dumps(
            {
                "score": 140,
                "feedback": "Great",
                "strengths": ["Patience"],
                "improvements": [],
                "objectivesCompleted": 5,
            }
        )
        portfolio = create_portfolio("user-1", sample_scenario.initial_cash)

        evaluation = await evaluate_performance(
            session, sample_scenario, portfolio, [], client=mock_oracle_client
        )

        assert evaluation.score == 100
        assert evaluation.feedback == "Great"
        assert evaluation.strengths == ["Patience"]
        assert evaluation.objectives_completed == 1
        assert len(session) == 2

    @pytest.mark.asyncio
    async def test_evaluation_fallback(self, session, mock_oracle_client, sample_scenario):
        mock_oracle_client.complete.return_value = "Sorry, no JSON today"
        portfolio = create_portfolio("user-1", sample_scenario.initial_cash)

        evaluation = await evaluate_performance(
            session, sample_scenario, portfolio, [], client=mock_oracle_client
        )

        assert evaluation.score == 0
        assert evaluation.feedback == "Automated evaluation is currently unavailable."
        assert len(session) == 0

    @pytest.mark.asyncio
    async def test_evaluation_non_numeric_score(self, session, mock_oracle_client, sample_scenario):
        mock_oracle_client.complete.return_value = '{"score": "excellent"}'
        portfolio = create_portfolio("user-1", sample_scenario.initial_cash)

        evaluation = await evaluate_performance(
            session, sample_scenario, portfolio, [], client=mock_oracle_client
        )
        assert evaluation.score == 0


class TestOracleClient:
    def test_messages_url(self):
        client = OracleClient(base_url="http://localhost:3001/")
        assert client.messages_url == "http://localhost:3001/api/claude/messages"

    def test_response_text_joins_text_blocks(self):
        response = {
            "content": [
                {"type": "text", "text": "Hello "},
                {"type": "tool_use", "id": "x"},
                {"type": "text", "text": "world"},
            ]
        }
        assert response_text(response) == "Hello world"
        assert response_text({}) == ""

    @pytest.mark.asyncio
    async def test_complete_uses_response_text(self):
        client = OracleClient(base_url="http://localhost:3001")
        with patch.object(
            client,
            "create_message",
            AsyncMock(return_value={"content": [{"type": "text", "text": "hi"}]}),
        ) as create_message:
            assert await client.complete([{"role": "user", "content": "q"}], 10) == "hi"
        create_message.assert_awaited_once_with([{"role": "user", "content": "q"}], 10)

    def _session(self, status, body=None):
        response = Mock()
        response.status = status
        response.json = AsyncMock(return_value=body)

        request_ctx = MagicMock()
        request_ctx.__aenter__ = AsyncMock(return_value=response)
        request_ctx.__aexit__ = AsyncMock(return_value=False)

        session = Mock()
        session.post = Mock(return_value=request_ctx)
        session.get = Mock(return_value=request_ctx)

        session_ctx = MagicMock()
        session_ctx.__aenter__ = AsyncMock(return_value=session)
        session_ctx.__aexit__ = AsyncMock(return_value=False)
        return session_ctx, session

    @pytest.mark.asyncio
    async def test_create_message_error_status(self):
        client = OracleClient(base_url="http://localhost:3001")
        session_ctx, _ = self._session(500, {"error": "Anthropic API key not configured on server"})
        with patch("tradelab.oracle.client.aiohttp.ClientSession", return_value=session_ctx):
            with pytest.raises(OracleRequestError) as exc_info:
                await client.create_message([{"role": "user", "content": "q"}], 10)

        assert exc_info.value.status == 500
        assert exc_info.value.message == "Anthropic API key not configured on server"

    @pytest.mark.asyncio
    async def test_create_message_unreachable(self):
        client = OracleClient(base_url="http://localhost:3001")
        with patch(
            "tradelab.oracle.client.aiohttp.ClientSession",
            side_effect=aiohttp.ClientConnectionError("refused"),
        ):
            with pytest.raises(OracleRequestError, match="Failed to communicate"):
                await client.create_message([{"role": "user", "content": "q"}], 10)

    @pytest.mark.asyncio
    async def test_check_backend_health(self):
        client = OracleClient(base_url="http://localhost:3001")
        session_ctx, session = self._session(200)
        with patch("tradelab.oracle.client.aiohttp.ClientSession", return_value=session_ctx):
            assert await client.check_backend_health()
        session.get.assert_called_once_with("http://localhost:3001/health")

    @pytest.mark.asyncio
    async def test_check_backend_health_down(self):
        client = OracleClient(base_url="http://localhost:3001")
        with patch(
            "tradelab.oracle.client.aiohttp.ClientSession",
            side_effect=aiohttp.ClientConnectionError("refused"),
        ):
            assert not await client.check_backend_health()
