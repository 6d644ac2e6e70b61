"""Shared test fixtures for LifeLens tests."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_PROVIDER", "mock")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("TODO_DB_PATH", "")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from lifelens.core.llm.client import LLMConfig, RetryingLLMClient  # noqa: E402
from lifelens.core.llm.providers.mock import MockProvider  # noqa: E402
from lifelens.core.llm.retry import RetryPolicy  # noqa: E402
from lifelens.domains.wellness.domain_logic.models import RawHealthInput  # noqa: E402


def run_async(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


class FakeStatusError(Exception):
    """Mimics an SDK APIStatusError carrying an HTTP status code."""

    def __init__(self, status_code: int, message: str = "") -> None:
        super().__init__(message or f"HTTP {status_code}")
        self.status_code = status_code


async def _no_sleep(_seconds: float) -> None:
    return None


def make_llm_client(
    primary: MockProvider,
    fallback: MockProvider | None = None,
) -> RetryingLLMClient:
    """A retrying client over mock providers that never actually sleeps."""
    return RetryingLLMClient(
        primary=primary,
        fallback=fallback,
        config=LLMConfig(
            primary_retry=RetryPolicy(attempts=3, base_ms=1),
            fallback_retry=RetryPolicy(attempts=2, base_ms=1),
        ),
        sleep=_no_sleep,
        jitter=lambda: 0.0,
    )


# ---------------------------------------------------------------------------
# Canonical inputs
# ---------------------------------------------------------------------------

BALANCED: dict[str, Any] = {
    "sleepHoursAvg7d": 7.6,
    "lateScreenMinsAvg7d": 20,
    "stepsAvg7d": 8200,
    "caffeineMgDay": 120,
    "aqiDailyMax": 55,
    "bmi": 22,
    "alcoholUnitsWeek": 1,
    "smokingStatus": "none",
    "moodTrend14d": "up",
    "famHxHypertension": 0,
    "famHxDiabetes": 0,
    "waterAdvisoryFlag": False,
    "allergensHighToday": False,
    "lateMealsPerWeek": 0,
    "restingHRTrend14d": "flat",
    "hrvTrend14d": "flat",
}


@pytest.fixture
def balanced_input() -> RawHealthInput:
    return RawHealthInput.from_mapping(BALANCED)


def with_overrides(**overrides: Any) -> RawHealthInput:
    """The balanced profile with some camelCase fields replaced."""
    return RawHealthInput.from_mapping({**BALANCED, **overrides})


# ---------------------------------------------------------------------------
# LLM fixtures
# ---------------------------------------------------------------------------

SAMPLE_CARDS: list[dict[str, Any]] = [
    {
        "category": "Sleep debt",
        "type": "insight",
        "title": "Your sleep is running short",
        "body": "You're about 2 hours under your target. Try a steadier wind-down tonight.",
        "metric_callouts": ["Sleep debt 2.0h", "Late screen 95m"],
        "priority": 1,
    },
    {
        "category": "Caffeine",
        "type": "action",
        "title": "Trim one coffee",
        "body": "Caffeine is high today. Swap the afternoon cup for water.",
        "metric_callouts": ["Caffeine 420mg"],
        "priority": 2,
    },
    {
        "category": "Air quality",
        "type": "alert",
        "title": "Air is elevated",
        "body": "Prefer indoor or shorter outdoor sessions today.",
        "metric_callouts": ["AQI 160"],
        "priority": 3,
    },
    {
        "category": "Exercise",
        "type": "action",
        "title": "Add a short walk",
        "body": "A 10 minute walk after lunch adds about 1000 steps.",
        "metric_callouts": ["Steps 1800 (goal 7–10k)"],
        "priority": 4,
    },
]


@pytest.fixture
def cards_reply() -> str:
    return "Here are your cards:\n" + json.dumps(SAMPLE_CARDS)


@pytest.fixture
def llm_client(cards_reply: str) -> RetryingLLMClient:
    return make_llm_client(MockProvider(cards_reply))


# ---------------------------------------------------------------------------
# In-memory storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def todo_db():
    """Create an in-memory TodoDatabase for testing."""
    from lifelens.core.storage.database import TodoDatabase

    db = TodoDatabase(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def todo_store(todo_db):
    """Create a TodoStore backed by in-memory SQLite."""
    from lifelens.core.storage.todos import TodoStore

    return TodoStore(todo_db)
