"""Card refiner: rule triggers -> 4-6 LLM-written cards, with a local fallback."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from lifelens.core.llm.client import RetryingLLMClient

from lifelens.core.llm.response import check_guardrails, extract_json_array
from lifelens.domains.wellness.domain_logic.dedupe import unique_by
from lifelens.domains.wellness.domain_logic.models import (
    CATEGORY_NAMES,
    TRIGGER_TYPE_NAMES,
    Trigger,
)
from lifelens.domains.wellness.output.mock_refiner import MAX_CARDS, refine_to_cards
from lifelens.domains.wellness.output.models import (
    BODY_MAX,
    CALLOUTS_MAX,
    TITLE_MAX,
    Card,
)

logger = logging.getLogger(__name__)

MAX_TRIGGERS = 12

REFINER_INSTRUCTIONS = f"""\
You are the LifeLens card refiner. You receive rule-based wellness triggers.
Return 4-6 JSON objects ONLY, as a JSON array, each shaped as:
{{
  "category": "<one of the allowed categories>",
  "type": "insight|action|alert",
  "title": "...",
  "body": "...",
  "metric_callouts": ["..."],
  "priority": <number>
}}

STRICT RULES:
- Output ONLY a JSON array of 4-6 objects. No prose, no markdown, nothing before or after.
- Category MUST be one of: {", ".join(sorted(CATEGORY_NAMES))}. Do not invent new categories.
- No medical advice or diagnosis; wellness tone only.
- Use the triggers' facts. Keep metric_callouts truthful, brief and concrete (at most 4).
- Titles <= 60 chars. 1-2 sentence bodies. Prioritize "doable today" actions.
- Prefer a diverse mix (not all from the same category) and avoid duplicates.
"""


def _trigger_key(t: Trigger) -> str:
    return f"{t.category.value}|{t.type.value}|{t.severity}|{','.join(t.metric_callouts)}"


def select_triggers(triggers: Sequence[Trigger], limit: int = MAX_TRIGGERS) -> list[Trigger]:
    """Unique triggers (ignoring confidence) in engine order, at most ``limit``."""
    return unique_by(triggers, _trigger_key)[:limit]


def sanitize_cards(raw_cards: list[Any]) -> list[Card]:
    """Keep only well-formed, in-vocabulary, guardrail-clean cards (max six)."""
    cleaned: list[Card] = []
    seen: set[str] = set()
    for raw in raw_cards:
        if not isinstance(raw, dict):
            continue
        category = raw.get("category")
        if not isinstance(category, str) or category not in CATEGORY_NAMES:
            continue
        card_type = raw.get("type")
        if not isinstance(card_type, str) or card_type not in TRIGGER_TYPE_NAMES:
            continue
        title = str(raw.get("title") or "")[:TITLE_MAX]
        body = str(raw.get("body") or "")[:BODY_MAX]
        callouts = raw.get("metric_callouts")
        metric_callouts = [str(c) for c in callouts[:CALLOUTS_MAX]] if isinstance(callouts, list) else []

        if not check_guardrails(f"{title}\n{body}").passed:
            continue

        key = f"{raw['category']}|{raw['type']}|{title}|{body}|{','.join(metric_callouts)}"
        if key in seen:
            continue
        seen.add(key)

        priority = raw.get("priority")
        if isinstance(priority, bool) or not isinstance(priority, (int, float)) or not priority:
            priority = len(cleaned) + 1
        cleaned.append(Card(
            category=raw["category"],
            type=raw["type"],
            title=title,
            body=body,
            metric_callouts=metric_callouts,
            priority=priority,
        ))
        if len(cleaned) >= MAX_CARDS:
            break
    return cleaned


class CardRefiner:
    """Asks the LLM to write cards; degrades to the deterministic formatter.

    Usage::

        refiner = CardRefiner(llm_client)
        cards = await refiner.refine(engine_output.triggers)
    """

    def __init__(self, llm: RetryingLLMClient | None, max_triggers: int = MAX_TRIGGERS) -> None:
        self._llm = llm
        self._max_triggers = max_triggers

    def build_payload(
        self,
        triggers: Sequence[Trigger],
        extremes: Sequence[Card] = (),
        todos: Sequence[Any] = (),
        palette: str = "soft_pastel",
    ) -> dict[str, Any]:
        return {
            "palette": palette,
            "triggers": [t.as_dict() for t in triggers],
            "context": {
                "extremes": [
                    {"title": c.title, "callouts": list(c.metric_callouts)} for c in extremes
                ],
                "todos": [
                    {"title": getattr(t, "title", ""), "done": bool(getattr(t, "done", False))}
                    for t in todos
                ],
            },
        }

    async def refine(
        self,
        triggers: Sequence[Trigger],
        extremes: Sequence[Card] = (),
        todos: Sequence[Any] = (),
        palette: str = "soft_pastel",
    ) -> list[Card]:
        """Return up to six cards for the given triggers. Never raises."""
        top = select_triggers(triggers, self._max_triggers)
        if self._llm is None:
            return refine_to_cards(top)

        payload = self.build_payload(top, extremes, todos, palette)
        user_message = f"INPUT:\n{json.dumps(payload)}\n\nOUTPUT: JSON array only"

        try:
            response = await self._llm.complete(REFINER_INSTRUCTIONS, user_message)
            cards = sanitize_cards(extract_json_array(response.content))
            if not cards:
                raise ValueError("Empty cards from LLM")
            return cards
        except Exception as exc:
            logger.warning("LLM card refinement failed, using local cards: %s", exc)
            return refine_to_cards(top)
