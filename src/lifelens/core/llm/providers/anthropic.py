"""Anthropic Messages API provider."""

from __future__ import annotations

import time
from typing import Any

from lifelens.core.llm.provider import ProviderResponse


def _joined_text(response: Any) -> str:
    """Concatenate the text blocks of a Messages reply, skipping tool blocks."""
    parts = [
        block.text for block in response.content or () if getattr(block, "type", "") == "text"
    ]
    return "".join(parts).strip()


class AnthropicProvider:
    """Claude models through ``anthropic.AsyncAnthropic``.

    ``anthropic.APIStatusError`` carries ``status_code``, which the retrying
    client reads to tell rate limits and overload from permanent failures.
    """

    def __init__(self, api_key: str, model: str = "claude-sonnet-4-5-20250929") -> None:
        import anthropic

        self.client = anthropic.AsyncAnthropic(api_key=api_key)
        self.model = model

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> ProviderResponse:
        started = time.monotonic()
        response = await self.client.messages.create(
            model=self.model,
            system=system_message,
            messages=[{"role": "user", "content": user_message}],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        latency_ms = (time.monotonic() - started) * 1000

        return ProviderResponse(
            content=_joined_text(response),
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model=self.model,
            latency_ms=latency_ms,
        )
