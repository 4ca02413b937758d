"""
LLM Client over LiteLLM.

LiteLLM provides a unified interface to many providers using the
format "provider/model-name". Key features:
- Usage capture via LLMUsage
- Automatic retries with exponential backoff
- JSON mode for structured output

Services depend on the TextGenerator protocol rather than on LLMClient
directly, so tests can inject a deterministic fake.

Usage:
    from learnloop.enums import LLMOperation
    from learnloop.services.llm import get_llm_client

    client = get_llm_client()

    # JSON-mode response text for a prompt
    text = await client.generate(prompt, operation=LLMOperation.MCQ_GENERATION)
"""

import logging
import os
import time
from typing import Any, Optional, Protocol, Union, runtime_checkable

import litellm
from litellm import acompletion
from tenacity import retry, stop_after_attempt, wait_exponential

from learnloop.config import settings
from learnloop.enums.llm import LLMOperation
from learnloop.services.llm.usage import (
    LLMUsage,
    create_error_usage,
    extract_usage_from_response,
)

logger = logging.getLogger(__name__)

# Configure LiteLLM
litellm.drop_params = True  # Drop unsupported params instead of erroring
if settings.DEBUG:
    os.environ["LITELLM_LOG"] = "DEBUG"


@runtime_checkable
class TextGenerator(Protocol):
    """Anything that turns a prompt into response text."""

    async def generate(
        self, prompt: str, operation: LLMOperation = LLMOperation.GENERIC
    ) -> str: ...


def build_messages(
    prompt: str,
    system_prompt: Optional[str] = None,
) -> list[dict[str, str]]:
    """Build an OpenAI-format messages list from a prompt."""
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})
    return messages


class LLMClient:
    """
    LiteLLM-backed client with usage capture.

    generate() implements TextGenerator. It always asks for JSON output
    but returns the raw text so callers can parse and validate it
    themselves. Each call logs an LLMUsage record.
    """

    def __init__(self, model: Optional[str] = None):
        self.model = model or settings.TEXT_MODEL
        self._validate_api_keys()

    def _validate_api_keys(self):
        """Warn when no provider key is configured."""
        available_keys = []

        if os.getenv("OPENAI_API_KEY") or settings.OPENAI_API_KEY:
            available_keys.append("OpenAI")
        if os.getenv("ANTHROPIC_API_KEY") or settings.ANTHROPIC_API_KEY:
            available_keys.append("Anthropic")
        if os.getenv("GEMINI_API_KEY") or settings.GEMINI_API_KEY:
            available_keys.append("Google/Gemini")

        if not available_keys:
            logger.warning(
                "No LLM API keys configured. Set at least one of: "
                "OPENAI_API_KEY, ANTHROPIC_API_KEY, GEMINI_API_KEY"
            )
        else:
            logger.info(f"LLM client initialized with providers: {available_keys}")

    async def _call(
        self,
        operation: Union[LLMOperation, str],
        messages: list[dict],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> tuple[str, LLMUsage]:
        operation_name = getattr(operation, "value", operation)
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        if settings.LLM_TIMEOUT_SECONDS:
            kwargs["timeout"] = settings.LLM_TIMEOUT_SECONDS

        start_time = time.perf_counter()
        try:
            response = await acompletion(**kwargs)
        except Exception as e:
            latency_ms = int((time.perf_counter() - start_time) * 1000)
            usage = create_error_usage(
                model=self.model,
                latency_ms=latency_ms,
                error_message=str(e),
                operation=operation_name,
            )
            logger.warning(
                f"LLM completion failed: {e} ({usage})",
                extra={"llm_usage": usage.to_dict()},
            )
            raise

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        usage = extract_usage_from_response(
            response=response,
            model=self.model,
            latency_ms=latency_ms,
            operation=operation_name,
        )
        logger.debug(f"LLM completion: {usage}", extra={"llm_usage": usage.to_dict()})

        content = response.choices[0].message.content
        if not content:
            raise ValueError(f"Empty response from {self.model}")
        return content, usage

    @retry(
        stop=stop_after_attempt(settings.LLM_MAX_RETRIES),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        reraise=True,
    )
    async def generate(
        self, prompt: str, operation: LLMOperation = LLMOperation.GENERIC
    ) -> str:
        """Return the JSON-mode response text for a single user prompt."""
        content, _ = await self._call(
            operation, build_messages(prompt), 0.7, 4096, json_mode=True
        )
        return content


# Singleton instance
_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get or create the shared LLM client."""
    global _client
    if _client is None:
        _client = LLMClient()
    return _client


def get_text_generator() -> Optional[TextGenerator]:
    """
    FastAPI dependency returning the generator, or None when no provider
    key is configured. Services treat None as "generator unavailable".
    """
    if not settings.llm_enabled:
        return None
    return get_llm_client()


def reset_llm_client():
    """Reset the singleton client (useful for testing)."""
    global _client
    _client = None
