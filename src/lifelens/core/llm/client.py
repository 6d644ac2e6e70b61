"""LLM client with retry, backoff and model fallback.

The client is an ordinary object built once per process and passed to the
collaborators that need it (card refiner, time machine). Tests construct it
around ``MockProvider`` instances.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from lifelens.core.config.settings import Settings
from lifelens.core.llm.provider import LLMProvider, ProviderResponse, create_provider
from lifelens.core.llm.retry import RetryPolicy, with_retries
from lifelens.core.llm.system_prompt import build_full_system_prompt

logger = logging.getLogger(__name__)


class LLMUnavailableError(Exception):
    """Raised when both the primary and the fallback model failed."""


@dataclass(frozen=True)
class LLMConfig:
    """Generation and retry settings for one client."""

    max_tokens: int = 4096
    temperature: float = 1.0
    primary_retry: RetryPolicy = field(default_factory=lambda: RetryPolicy(attempts=3, base_ms=600))
    fallback_retry: RetryPolicy = field(default_factory=lambda: RetryPolicy(attempts=2, base_ms=800))

    @classmethod
    def from_settings(cls, settings: Settings) -> LLMConfig:
        return cls(
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
            primary_retry=RetryPolicy(
                attempts=settings.llm_primary_attempts,
                base_ms=settings.llm_primary_base_ms,
            ),
            fallback_retry=RetryPolicy(
                attempts=settings.llm_fallback_attempts,
                base_ms=settings.llm_fallback_base_ms,
            ),
        )


class RetryingLLMClient:
    """Calls the primary model with backoff, then the fallback model."""

    def __init__(
        self,
        primary: LLMProvider,
        fallback: LLMProvider | None = None,
        config: LLMConfig | None = None,
        *,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        jitter: Callable[[], float] = random.random,
    ) -> None:
        self.primary = primary
        self.fallback = fallback
        self.config = config or LLMConfig()
        self._sleep = sleep
        self._jitter = jitter

    async def _call(self, provider: LLMProvider, system: str, user: str) -> ProviderResponse:
        return await provider.generate(
            system_message=system,
            user_message=user,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )

    async def complete(self, instructions: str, user_message: str) -> ProviderResponse:
        """Generate a reply to ``user_message`` under the given instructions.

        Raises:
            LLMUnavailableError: primary (and fallback, if any) exhausted.
        """
        system = build_full_system_prompt(instructions)

        try:
            response = await with_retries(
                lambda: self._call(self.primary, system, user_message),
                self.config.primary_retry,
                sleep=self._sleep,
                jitter=self._jitter,
            )
        except Exception as primary_exc:
            if self.fallback is None:
                raise LLMUnavailableError(f"LLM call failed: {primary_exc}") from primary_exc
            logger.warning(
                "Primary model %s failed (%s); trying fallback model %s",
                self.primary.model,
                type(primary_exc).__name__,
                self.fallback.model,
            )
            try:
                response = await with_retries(
                    lambda: self._call(self.fallback, system, user_message),
                    self.config.fallback_retry,
                    sleep=self._sleep,
                    jitter=self._jitter,
                )
            except Exception as fallback_exc:
                raise LLMUnavailableError(
                    f"LLM call failed (primary & fallback). Last error: {fallback_exc}"
                ) from primary_exc

        logger.info(
            "LLM call: model=%s, tokens=%d+%d, latency=%.0fms",
            response.model,
            response.input_tokens,
            response.output_tokens,
            response.latency_ms,
        )
        return response


def create_llm_client(settings: Settings) -> RetryingLLMClient:
    """Build the process-wide client from settings.

    Falls back to the mock provider when the configured provider has no key.
    """
    if settings.llm_provider == "anthropic" and settings.anthropic_api_key:
        api_key = settings.anthropic_api_key
        models = (settings.anthropic_model, settings.anthropic_fallback_model)
        provider_name = "anthropic"
    elif settings.llm_provider == "openai" and settings.openai_api_key:
        api_key = settings.openai_api_key
        models = (settings.openai_model, settings.openai_fallback_model)
        provider_name = "openai"
    else:
        if settings.llm_provider != "mock":
            logger.warning(
                "No API key configured for provider '%s'; falling back to mock provider",
                settings.llm_provider,
            )
        return RetryingLLMClient(
            primary=create_provider("mock"),
            config=LLMConfig.from_settings(settings),
        )

    primary_model, fallback_model = models
    primary = create_provider(provider_name, api_key=api_key, model=primary_model)
    fallback = None
    if fallback_model and fallback_model != primary_model:
        fallback = create_provider(provider_name, api_key=api_key, model=fallback_model)
    return RetryingLLMClient(
        primary=primary,
        fallback=fallback,
        config=LLMConfig.from_settings(settings),
    )
