"""Provider seam: one model, one async text generation call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

# Used when a provider is built without an explicit model.
DEFAULT_MODELS: dict[str, str] = {
    "anthropic": "claude-sonnet-4-5-20250929",
    "openai": "gpt-4o",
    "mock": "mock",
}


@dataclass(frozen=True)
class ProviderResponse:
    """Text plus accounting for a single generation call."""

    content: str
    input_tokens: int
    output_tokens: int
    model: str
    latency_ms: float


@runtime_checkable
class LLMProvider(Protocol):
    """What the retrying client needs from a model backend.

    Implementations raise the SDK's own errors; the client decides whether
    they are worth retrying.
    """

    model: str

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> ProviderResponse: ...


def create_provider(provider_name: str, api_key: str = "", model: str = "") -> LLMProvider:
    """Build a provider by name ("anthropic", "openai" or "mock").

    SDK imports are deferred so the mock path needs neither SDK configured.

    Raises:
        ValueError: unknown provider name.
    """
    if provider_name not in DEFAULT_MODELS:
        raise ValueError(f"Unknown LLM provider: {provider_name}")
    model = model or DEFAULT_MODELS[provider_name]

    if provider_name == "anthropic":
        from lifelens.core.llm.providers.anthropic import AnthropicProvider

        return AnthropicProvider(api_key=api_key, model=model)
    if provider_name == "openai":
        from lifelens.core.llm.providers.openai import OpenAIProvider

        return OpenAIProvider(api_key=api_key, model=model)

    from lifelens.core.llm.providers.mock import MockProvider

    return MockProvider(model=model)
