"""
LLM Usage Types

Defines the LLMUsage dataclass and a helper for extracting token and
cost information from LiteLLM responses. Usage is logged per call.

Usage:
    from learnloop.services.llm.usage import extract_usage_from_response

    usage = extract_usage_from_response(
        response=litellm_response,
        model="openai/gpt-4o",
        latency_ms=1234,
        operation="flashcard_generation",
    )
"""

import uuid
from dataclasses import asdict, dataclass, field
from typing import Optional


@dataclass
class LLMUsage:
    """
    Structured usage data for one completion call.

    Attributes:
        request_id: Unique identifier for this request (auto-generated UUID)
        model: Full model identifier (e.g., "openai/gpt-4o")
        provider: Provider prefix of the model (e.g., "openai")
        prompt_tokens: Number of input tokens
        completion_tokens: Number of output tokens
        total_tokens: Total tokens used
        cost_usd: Total cost in USD, when LiteLLM reports it
        operation: LLMOperation value the call was made for
        latency_ms: Request latency in milliseconds
        success: Whether the request succeeded
        error_message: Error message if request failed
    """

    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    model: str = ""
    provider: str = ""

    # Token usage
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

    cost_usd: Optional[float] = None
    operation: Optional[str] = None

    # Performance
    latency_ms: Optional[int] = None
    success: bool = True
    error_message: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    def __str__(self) -> str:
        cost_str = f"${self.cost_usd:.4f}" if self.cost_usd else "N/A"
        tokens_str = str(self.total_tokens) if self.total_tokens else "N/A"
        return (
            f"LLMUsage({self.model}, {self.operation}, "
            f"cost={cost_str}, tokens={tokens_str}, latency={self.latency_ms}ms)"
        )


def extract_provider(model: str) -> str:
    """Return the provider prefix of a "provider/model" identifier."""
    if "/" in model:
        return model.split("/")[0]
    return "unknown"


def extract_usage_from_response(
    response,
    model: str,
    latency_ms: int,
    operation: Optional[str] = None,
) -> LLMUsage:
    """
    Extract usage and cost information from a LiteLLM response.

    Args:
        response: LiteLLM response object
        model: Model identifier used for the request
        latency_ms: Measured latency in milliseconds
        operation: Optional operation name for attribution

    Returns:
        LLMUsage populated with whatever the response carries
    """
    usage = LLMUsage(
        model=model,
        provider=extract_provider(model),
        latency_ms=latency_ms,
        operation=operation,
    )

    if getattr(response, "usage", None):
        usage.prompt_tokens = getattr(response.usage, "prompt_tokens", None)
        usage.completion_tokens = getattr(response.usage, "completion_tokens", None)
        usage.total_tokens = getattr(response.usage, "total_tokens", None)

    # LiteLLM reports cost in its hidden params
    hidden = getattr(response, "_hidden_params", None)
    if isinstance(hidden, dict):
        usage.cost_usd = hidden.get("response_cost")

    return usage


def create_error_usage(
    model: str,
    latency_ms: int,
    error_message: str,
    operation: Optional[str] = None,
) -> LLMUsage:
    """Create an LLMUsage record for a failed request."""
    return LLMUsage(
        model=model,
        provider=extract_provider(model),
        latency_ms=latency_ms,
        operation=operation,
        success=False,
        error_message=error_message,
    )
