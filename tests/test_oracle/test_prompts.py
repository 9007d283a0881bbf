"""Tests for oracle prompt loading and JSON extraction."""

import sys
from unittest.mock import patch

import pytest

sys.path.append("src")
from tradelab.config.settings import Settings
from tradelab.exceptions import OracleResponseError
from tradelab.oracle.parsing import extract_json_array, extract_json_object
from tradelab.oracle.prompts import (
    get_error_message,
    get_max_tokens,
    get_prompt_config,
    load_oracle_prompts,
    render_prompt,
)
from tradelab.oracle.session import OracleSession


class TestPrompts:
    def test_load_prompts(self):
        prompts = load_oracle_prompts()
        assert "defaults" in prompts
        assert {
            "scenario_generation",
            "topic_suggestions",
            "document_analysis",
            "market_advice",
            "performance_evaluation",
        } <= set(prompts["prompts"])

    def test_config_merges_defaults(self):
        config = get_prompt_config("market_advice")
        assert config["model"] == load_oracle_prompts()["defaults"]["model"]
        assert "template" in config

    def test_unknown_prompt(self):
        with pytest.raises(KeyError, match="not found"):
            get_prompt_config("nonexistent")

    def test_max_tokens(self):
        assert get_max_tokens("scenario_generation") == 4096

    def test_max_tokens_capped_by_settings(self):
        with patch(
            "tradelab.oracle.prompts.get_settings",
            return_value=Settings(_env_file=None, oracle_max_tokens=2048),
        ):
            assert get_max_tokens("scenario_generation") == 2048
            assert get_max_tokens("market_advice") == 1024

    def test_render_keeps_literal_braces(self):
        text = render_prompt("document_analysis", content="Bond yields rose.")
        assert "Bond yields rose." in text
        assert '"summary": "string"' in text
        assert "{content}" not in text

    def test_render_missing_value(self):
        with pytest.raises(KeyError):
            render_prompt("market_advice", portfolio="{}")

    def test_error_message(self):
        assert get_error_message("unavailable") == "Automated evaluation is currently unavailable."
        with pytest.raises(KeyError):
            get_error_message("missing")

    def test_missing_file(self):
        load_oracle_prompts.cache_clear()
        with patch("builtins.open", side_effect=FileNotFoundError):
            with pytest.raises(FileNotFoundError, match="Oracle prompts file not found"):
                load_oracle_prompts()


class TestParsing:
    def test_object_in_prose(self):
        text = 'Here you go:\n```json\n{"score": 75, "nested": {"a": 1}}\n```\nGood luck!'
        assert extract_json_object(text) == {"score": 75, "nested": {"a": 1}}

    def test_array_in_prose(self):
        assert extract_json_array('Topics: ["Rates", "Crypto"] - enjoy') == ["Rates", "Crypto"]

    @pytest.mark.parametrize("text", ["", "no json here", None])
    def test_nothing_found(self, text):
        with pytest.raises(OracleResponseError, match="No JSON object"):
            extract_json_object(text)

    def test_malformed(self):
        with pytest.raises(OracleResponseError, match="Malformed"):
            extract_json_object("{score: 75}")

    def test_greedy_span_across_objects(self):
        # Two separate objects make the first-to-last span invalid JSON
        with pytest.raises(OracleResponseError):
            extract_json_object('{"a": 1} and {"b": 2}')


class TestOracleSession:
    def test_conversation_does_not_record(self):
        session = OracleSession("s-1")
        messages = session.conversation("hello")

        assert messages == [{"role": "user", "content": "hello"}]
        assert len(session) == 0

    def test_record_and_reset(self):
        session = OracleSession("s-1")
        session.record("question", "answer")

        assert session.conversation("next") == [
            {"role": "user", "content": "question"},
            {"role": "assistant", "content": "answer"},
            {"role": "user", "content": "next"},
        ]

        session.reset()
        assert session.messages == []

    def test_trims_whole_exchanges(self):
        session = OracleSession("s-1", max_messages=4)
        for index in range(3):
            session.record(f"q{index}", f"a{index}")

        assert len(session) == 4
        assert session.messages[0] == {"role": "user", "content": "q1"}

    def test_sessions_are_independent(self):
        first = OracleSession()
        second = OracleSession()
        first.record("q", "a")
        assert len(second) == 0
        assert first.session_id != second.session_id
