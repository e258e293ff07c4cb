"""Tests for oracle provider implementations."""

import json
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest
from anthropic import APIConnectionError as AnthropicConnectionError
from openai import APIConnectionError as OpenAIConnectionError

from codesage.config import Settings
from codesage.exceptions import MalformedOracleResponseError, OracleError
from codesage.oracle import (
    FALLBACK_ANSWER,
    create_oracle,
    get_available_providers,
)
from codesage.oracle.anthropic_oracle import AnthropicOracle
from codesage.oracle.openai_oracle import OpenAIOracle

VALID_ANALYSIS = {
    "explanation": {
        "lineRanges": [
            {"start": 1, "end": 1, "title": "Print", "explanation": "Prints hi"}
        ]
    },
    "issues": [
        {
            "line": 1,
            "severity": "info",
            "type": "Style",
            "description": "Consider a main guard",
            "suggestion": "Wrap in if __name__ == '__main__'",
        }
    ],
}


def _openai_response(content: str | None) -> Mock:
    response = Mock()
    response.choices = [Mock(message=Mock(content=content), finish_reason="stop")]
    response.usage = Mock(prompt_tokens=100, completion_tokens=50, total_tokens=150)
    response.model = "gpt-3.5-turbo"
    return response


def _anthropic_response(text: str) -> Mock:
    response = Mock()
    response.content = [Mock(text=text)]
    response.usage = Mock(input_tokens=80, output_tokens=20)
    response.stop_reason = "end_turn"
    response.model = "claude-sonnet-4-5-20250514"
    return response


@pytest.fixture
def openai_client():
    """Patch AsyncOpenAI and return the mocked client instance."""
    with patch("codesage.oracle.openai_oracle.AsyncOpenAI") as mock_class:
        client = Mock()
        client.chat.completions.create = AsyncMock()
        mock_class.return_value = client
        yield client


@pytest.fixture
def anthropic_client():
    """Patch AsyncAnthropic and return the mocked client instance."""
    with patch("codesage.oracle.anthropic_oracle.AsyncAnthropic") as mock_class:
        client = Mock()
        client.messages.create = AsyncMock()
        mock_class.return_value = client
        yield client


class TestOracleFactory:
    """Tests for the create_oracle factory."""

    def test_get_available_providers(self):
        assert get_available_providers() == ["openai", "anthropic"]

    def test_create_openai_oracle(self):
        oracle = create_oracle(
            Settings(_env_file=None, openai_api_key="sk-test", openai_model="gpt-4o-mini")
        )

        assert isinstance(oracle, OpenAIOracle)
        assert oracle.provider_name == "openai"
        assert oracle.model_name == "gpt-4o-mini"

    def test_create_anthropic_oracle(self):
        oracle = create_oracle(
            Settings(
                _env_file=None, oracle_provider="anthropic", anthropic_api_key="sk-ant"
            )
        )

        assert isinstance(oracle, AnthropicOracle)
        assert oracle.provider_name == "anthropic"

    def test_missing_api_key_does_not_fail_construction(self):
        oracle = create_oracle(Settings(_env_file=None, openai_api_key=""))

        assert isinstance(oracle, OpenAIOracle)

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown oracle provider"):
            create_oracle(Settings(_env_file=None, oracle_provider="invalid"))


class TestOpenAIOracle:
    """Tests for the OpenAI oracle."""

    @pytest.mark.asyncio
    async def test_request_analysis_uses_json_mode(self, openai_client: Mock):
        openai_client.chat.completions.create.return_value = _openai_response(
            json.dumps(VALID_ANALYSIS)
        )
        oracle = OpenAIOracle(api_key="sk-test")

        result = await oracle.request_analysis("print('hi')", filename="hi.py")

        assert result.explanation.line_ranges[0].title == "Print"
        assert result.issues[0].severity == "info"

        call_kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert call_kwargs["response_format"] == {"type": "json_object"}
        assert call_kwargs["temperature"] == 0.3
        assert call_kwargs["model"] == "gpt-3.5-turbo"
        user_prompt = call_kwargs["messages"][1]["content"]
        assert "print('hi')" in user_prompt
        assert "hi.py" in user_prompt

    @pytest.mark.asyncio
    async def test_request_answer_is_free_text(self, openai_client: Mock):
        openai_client.chat.completions.create.return_value = _openai_response(
            "It prints hi."
        )
        oracle = OpenAIOracle(api_key="sk-test")

        answer = await oracle.request_answer(
            "print('hi')", "What does this do?", context="Q: a\nA: b"
        )

        assert answer == "It prints hi."
        call_kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert "response_format" not in call_kwargs
        assert call_kwargs["temperature"] == 0.5
        user_prompt = call_kwargs["messages"][1]["content"]
        assert "Previous context: Q: a\nA: b" in user_prompt
        assert "User's question: What does this do?" in user_prompt

    @pytest.mark.asyncio
    async def test_empty_answer_returns_fallback(self, openai_client: Mock):
        openai_client.chat.completions.create.return_value = _openai_response(None)
        oracle = OpenAIOracle(api_key="sk-test")

        answer = await oracle.request_answer("x = 1", "Why?")

        assert answer == FALLBACK_ANSWER

    @pytest.mark.asyncio
    async def test_transport_failure_raises_oracle_error(self, openai_client: Mock):
        cause = OpenAIConnectionError(
            request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        )
        openai_client.chat.completions.create.side_effect = cause
        oracle = OpenAIOracle(api_key="sk-test")

        with pytest.raises(OracleError, match="Failed to analyze code") as exc_info:
            await oracle.request_analysis("x = 1")

        assert exc_info.value.cause is cause
        assert not isinstance(exc_info.value, MalformedOracleResponseError)

    @pytest.mark.asyncio
    async def test_invalid_json_raises_malformed_error(self, openai_client: Mock):
        openai_client.chat.completions.create.return_value = _openai_response(
            "not json"
        )
        oracle = OpenAIOracle(api_key="sk-test")

        with pytest.raises(MalformedOracleResponseError) as exc_info:
            await oracle.request_analysis("x = 1")

        assert exc_info.value.raw_content == "not json"

    @pytest.mark.asyncio
    async def test_missing_keys_raise_malformed_error(self, openai_client: Mock):
        openai_client.chat.completions.create.return_value = _openai_response(
            '{"explanation": {}}'
        )
        oracle = OpenAIOracle(api_key="sk-test")

        with pytest.raises(MalformedOracleResponseError, match="expected structure"):
            await oracle.request_analysis("x = 1")

    @pytest.mark.asyncio
    async def test_missing_api_key_fails_on_first_use(self):
        oracle = OpenAIOracle(api_key="")

        with pytest.raises(OracleError, match="API key is not configured"):
            await oracle.request_answer("x = 1", "Why?")

    @pytest.mark.asyncio
    async def test_client_built_once(self):
        with patch("codesage.oracle.openai_oracle.AsyncOpenAI") as mock_class:
            client = Mock()
            client.chat.completions.create = AsyncMock(
                return_value=_openai_response("ok")
            )
            mock_class.return_value = client
            oracle = OpenAIOracle(api_key="sk-test", timeout=12.5)

            await oracle.request_answer("x = 1", "a")
            await oracle.request_answer("x = 1", "b")

        mock_class.assert_called_once_with(api_key="sk-test", timeout=12.5)


class TestAnthropicOracle:
    """Tests for the Anthropic oracle."""

    @pytest.mark.asyncio
    async def test_request_analysis_adds_json_instruction(self, anthropic_client: Mock):
        anthropic_client.messages.create.return_value = _anthropic_response(
            "```json\n" + json.dumps(VALID_ANALYSIS) + "\n```"
        )
        oracle = AnthropicOracle(api_key="sk-ant")

        result = await oracle.request_analysis("print('hi')")

        assert len(result.explanation.line_ranges) == 1
        call_kwargs = anthropic_client.messages.create.call_args.kwargs
        assert "respond with valid JSON only" in call_kwargs["system"]
        assert call_kwargs["messages"][0]["role"] == "user"

    @pytest.mark.asyncio
    async def test_request_answer(self, anthropic_client: Mock):
        anthropic_client.messages.create.return_value = _anthropic_response(
            "It prints hi."
        )
        oracle = AnthropicOracle(api_key="sk-ant")

        answer = await oracle.request_answer("print('hi')", "What?")

        assert answer == "It prints hi."
        call_kwargs = anthropic_client.messages.create.call_args.kwargs
        assert "valid JSON" not in call_kwargs["system"]

    @pytest.mark.asyncio
    async def test_transport_failure_raises_oracle_error(self, anthropic_client: Mock):
        anthropic_client.messages.create.side_effect = AnthropicConnectionError(
            request=httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        )
        oracle = AnthropicOracle(api_key="sk-ant")

        with pytest.raises(OracleError, match="Failed to answer question"):
            await oracle.request_answer("x = 1", "Why?")
