"""Concrete model backends behind ``LLMProvider``."""

from lifelens.core.llm.providers.anthropic import AnthropicProvider
from lifelens.core.llm.providers.mock import MockProvider
from lifelens.core.llm.providers.openai import OpenAIProvider

__all__ = ["AnthropicProvider", "MockProvider", "OpenAIProvider"]
