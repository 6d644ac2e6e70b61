"""Time machine: project today's metrics N months ahead as a narrative.

The LLM writes the projection. Anything it leaves out is filled with
conservative defaults, and an LLM failure yields a fallback projection rather
than an error.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from lifelens.core.llm.client import RetryingLLMClient

from lifelens.core.llm.response import (
    ResponseParseError,
    check_guardrails,
    extract_json_object,
    sanitize_content,
)
from lifelens.domains.wellness.output.models import Projection

logger = logging.getLogger(__name__)

MIN_HORIZON_MONTHS = 1
MAX_HORIZON_MONTHS = 480

REQUIRED_FIELDS = (
    "horizon_months",
    "today_metrics",
    "future_metrics",
    "risk_changes",
    "watch",
    "warnings",
    "narrative",
)

DEFAULT_RISK_CHANGES: list[dict[str, Any]] = [
    {
        "risk": "General health decline",
        "direction": "worsen",
        "confidence": 0.5,
        "drivers": ["unknown"],
    }
]
DEFAULT_WATCH = ["Sleep quality", "Physical activity", "Diet consistency"]
DEFAULT_WARNINGS = ["Illustrative only; not medical advice."]


def clamp_horizon(months: Any) -> int:
    try:
        value = int(months)
    except (TypeError, ValueError, OverflowError):
        return 12
    return max(MIN_HORIZON_MONTHS, min(MAX_HORIZON_MONTHS, value))


def build_instructions(horizon: int) -> str:
    return f"""\
Inputs:
- TODAY_METRICS: the JSON object in the user message.
- HORIZON: {horizon} months into the future (up to 480 months / 40 years, with month precision).

Your task:
- Infer negative drivers from TODAY_METRICS.
- Project FUTURE_METRICS for each metric, based on TODAY_METRICS and negative drivers.
- Write a comparison-based narrative (150-220 words).
- Begin with: "Today, you are here..."
- Then contrast with: "But in {horizon} months, if nothing changes, here's how things may look..."
- Emphasize what gets worse, by how much, and why. Use cautious language (may, could, likely).
- Provide 3-5 things to monitor over time.
- End with 1-2 disclaimers (illustrative only, not medical advice).

Constraints:
- Always include ALL keys from TODAY_METRICS in "future_metrics".
- "risk_changes" and "watch" must each have at least 3 entries.
- Escape all newlines in string values as \\n.

Return ONLY valid JSON with this structure:
{{
  "horizon_months": {horizon},
  "today_metrics": {{ ... }},
  "future_metrics": {{ ... }},
  "risk_changes": [ {{ "risk": "...", "direction": "worsen|unchanged|improve", "confidence": 0.5, "drivers": ["..."] }} ],
  "watch": ["..."],
  "warnings": ["..."],
  "narrative": "..."
}}"""


def _fallback(today: dict[str, Any], horizon: int, reason: str) -> Projection:
    return Projection(
        horizon_months=horizon,
        today_metrics=today,
        future_metrics=dict(today),
        risk_changes=[dict(r) for r in DEFAULT_RISK_CHANGES],
        watch=list(DEFAULT_WATCH),
        warnings=list(DEFAULT_WARNINGS),
        narrative=reason,
        missing_fields=list(REQUIRED_FIELDS),
        source="fallback",
    )


def projection_from_reply(
    parsed: Mapping[str, Any], today: dict[str, Any], horizon: int
) -> Projection:
    """Merge an LLM reply with defaults for whatever it left out."""
    missing = [f for f in REQUIRED_FIELDS if f not in parsed]

    future = parsed.get("future_metrics")
    future_metrics = {**today, **(future if isinstance(future, Mapping) else {})}

    risk_changes = parsed.get("risk_changes")
    if not isinstance(risk_changes, list) or not risk_changes:
        risk_changes = [dict(r) for r in DEFAULT_RISK_CHANGES]

    watch = parsed.get("watch")
    if not isinstance(watch, list) or not watch:
        watch = list(DEFAULT_WATCH)

    warnings = parsed.get("warnings")
    if not isinstance(warnings, list):
        warnings = []

    narrative = str(parsed.get("narrative") or "No narrative generated.")
    narrative = sanitize_content(narrative, check_guardrails(narrative))

    return Projection(
        horizon_months=horizon,
        today_metrics=today,
        future_metrics=future_metrics,
        risk_changes=risk_changes,
        watch=[str(w) for w in watch],
        warnings=[str(w) for w in warnings],
        narrative=narrative,
        missing_fields=missing,
        source="llm",
    )


class TimeMachine:
    """Projects today's metrics forward with the LLM."""

    def __init__(self, llm: RetryingLLMClient | None) -> None:
        self._llm = llm

    async def project(
        self, today_metrics: Mapping[str, Any], horizon_months: int = 12
    ) -> Projection:
        """Return a projection; never raises."""
        today = dict(today_metrics or {})
        horizon = clamp_horizon(horizon_months)

        if self._llm is None:
            return _fallback(today, horizon, "No scenario returned. Try again or adjust inputs.")

        try:
            response = await self._llm.complete(
                build_instructions(horizon),
                f"TODAY_METRICS: {json.dumps(today)}",
            )
        except Exception as exc:
            logger.warning("Time machine LLM call failed: %s", exc)
            return _fallback(today, horizon, "No scenario returned. Try again or adjust inputs.")

        try:
            parsed = extract_json_object(response.content)
        except ResponseParseError as exc:
            logger.warning("Time machine reply was not usable JSON: %s", exc)
            return _fallback(
                today, horizon, "AI returned invalid JSON. Try again or adjust your inputs."
            )

        return projection_from_reply(parsed, today, horizon)
