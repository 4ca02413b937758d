"""
Unit Tests for the LLM Client

LiteLLM's acompletion is mocked; nothing leaves the process.
"""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from learnloop.config import settings
from learnloop.enums.llm import LLMOperation
from learnloop.services.llm.client import (
    LLMClient,
    TextGenerator,
    build_messages,
    get_text_generator,
    reset_llm_client,
)
from learnloop.services.llm.usage import extract_provider, extract_usage_from_response


def _response(content: str) -> MagicMock:
    response = MagicMock()
    response.choices[0].message.content = content
    response.usage.prompt_tokens = 12
    response.usage.completion_tokens = 30
    response.usage.total_tokens = 42
    response._hidden_params = {"response_cost": 0.0012}
    return response


@pytest.fixture(autouse=True)
def _reset_client():
    reset_llm_client()
    yield
    reset_llm_client()


class TestLLMClient:
    @pytest.mark.asyncio
    async def test_generate_returns_text(self) -> None:
        with patch(
            "learnloop.services.llm.client.acompletion",
            AsyncMock(return_value=_response('{"mcqs": []}')),
        ) as completion:
            text = await LLMClient(model="openai/gpt-4o-mini").generate(
                "Make questions", operation=LLMOperation.MCQ_GENERATION
            )

        assert text == '{"mcqs": []}'
        kwargs = completion.await_args.kwargs
        assert kwargs["model"] == "openai/gpt-4o-mini"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"] == [{"role": "user", "content": "Make questions"}]

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self) -> None:
        with patch(
            "learnloop.services.llm.client.acompletion",
            AsyncMock(side_effect=RuntimeError("rate limited")),
        ):
            with pytest.raises(RuntimeError, match="rate limited"):
                await LLMClient().generate("prompt")

    @pytest.mark.asyncio
    async def test_empty_response_is_an_error(self) -> None:
        with patch(
            "learnloop.services.llm.client.acompletion",
            AsyncMock(return_value=_response("")),
        ):
            with pytest.raises(ValueError):
                await LLMClient().generate("prompt")

    def test_client_is_a_text_generator(self) -> None:
        assert isinstance(LLMClient(), TextGenerator)


class TestGetTextGenerator:
    def test_none_without_keys(self) -> None:
        assert get_text_generator() is None

    def test_client_with_a_key(self) -> None:
        with patch.object(settings, "OPENAI_API_KEY", "sk-test"):
            generator = get_text_generator()

        assert isinstance(generator, LLMClient)


class TestUsage:
    def test_extract_usage(self) -> None:
        usage = extract_usage_from_response(
            _response("{}"), model="openai/gpt-4o", latency_ms=250, operation="x"
        )

        assert usage.provider == "openai"
        assert usage.total_tokens == 42
        assert usage.cost_usd == 0.0012
        assert usage.success is True
        assert "tokens=42" in str(usage)

    @pytest.mark.asyncio
    async def test_usage_attached_to_log_record(self, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger="learnloop.services.llm.client")
        with patch(
            "learnloop.services.llm.client.acompletion",
            AsyncMock(return_value=_response("{}")),
        ):
            await LLMClient(model="openai/gpt-4o").generate(
                "hi", operation=LLMOperation.MCQ_GENERATION
            )

        records = [r for r in caplog.records if hasattr(r, "llm_usage")]
        assert len(records) == 1
        assert records[0].llm_usage["model"] == "openai/gpt-4o"
        assert records[0].llm_usage["total_tokens"] == 42
        assert records[0].llm_usage["success"] is True

    def test_extract_provider(self) -> None:
        assert extract_provider("anthropic/claude-3-haiku") == "anthropic"
        assert extract_provider("gpt-4o") == "unknown"

    def test_build_messages_with_system_prompt(self) -> None:
        assert build_messages("hi", system_prompt="be brief") == [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "hi"},
        ]
