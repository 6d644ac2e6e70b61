"""Mock LLM provider for testing and offline runs."""

from __future__ import annotations

from collections.abc import Sequence

from lifelens.core.llm.provider import ProviderResponse


class MockProvider:
    """Returns scripted replies in order, repeating the last one.

    A scripted item that is an exception instance is raised instead of
    returned, which lets tests drive the retry and fallback paths.
    """

    def __init__(
        self,
        response_content: str | BaseException | Sequence[str | BaseException] = "[]",
        model: str = "mock",
    ) -> None:
        if isinstance(response_content, (str, BaseException)):
            self._script: list[str | BaseException] = [response_content]
        else:
            self._script = list(response_content) or ["[]"]
        self.model = model
        self.last_system_message: str = ""
        self.last_user_message: str = ""
        self.call_count: int = 0

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> ProviderResponse:
        self.last_system_message = system_message
        self.last_user_message = user_message
        item = self._script[min(self.call_count, len(self._script) - 1)]
        self.call_count += 1
        if isinstance(item, BaseException):
            raise item
        return ProviderResponse(
            content=item,
            input_tokens=len(system_message.split()) + len(user_message.split()),
            output_tokens=len(item.split()),
            model=self.model,
            latency_ms=0.0,
        )
