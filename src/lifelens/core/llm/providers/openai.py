"""OpenAI chat completions provider."""

from __future__ import annotations

import time
from typing import Any

from lifelens.core.llm.provider import ProviderResponse


def _first_message_text(response: Any) -> str:
    if not response.choices:
        return ""
    return (response.choices[0].message.content or "").strip()


class OpenAIProvider:
    """GPT models through ``openai.AsyncOpenAI``.

    ``openai.APIStatusError`` carries ``status_code``, so rate limits and
    gateway errors surface to the retrying client unchanged.
    """

    def __init__(self, api_key: str, model: str = "gpt-4o") -> None:
        import openai

        self.client = openai.AsyncOpenAI(api_key=api_key)
        self.model = model

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> ProviderResponse:
        messages = [
            {"role": "system", "content": system_message},
            {"role": "user", "content": user_message},
        ]
        started = time.monotonic()
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        latency_ms = (time.monotonic() - started) * 1000

        usage = response.usage
        return ProviderResponse(
            content=_first_message_text(response),
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
            model=self.model,
            latency_ms=latency_ms,
        )
