"""
LLM Service Module

Provides the generative text interface via LiteLLM.

Key Components:
- client.py: LLMClient, the TextGenerator protocol, singleton accessors
- usage.py: LLMUsage dataclass and response parsing

Usage:
    from learnloop.services.llm import get_text_generator

    generator = get_text_generator()  # None when no provider key is set
    if generator:
        text = await generator.generate(prompt)
"""

from learnloop.services.llm.client import (
    LLMClient,
    TextGenerator,
    build_messages,
    get_llm_client,
    get_text_generator,
    reset_llm_client,
)
from learnloop.services.llm.usage import LLMUsage

__all__ = [
    "LLMClient",
    "LLMUsage",
    "TextGenerator",
    "build_messages",
    "get_llm_client",
    "get_text_generator",
    "reset_llm_client",
]
