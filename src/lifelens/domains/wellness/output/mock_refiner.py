"""Deterministic card formatter used when the LLM is unavailable."""

from __future__ import annotations

from collections.abc import Sequence

from lifelens.domains.wellness.domain_logic.models import Category, Trigger, TriggerType
from lifelens.domains.wellness.output.models import CALLOUTS_MAX, Card

MAX_CARDS = 6

_TITLE_PREFIX = {
    TriggerType.INSIGHT: "Heads-up",
    TriggerType.ACTION: "Try this",
    TriggerType.ALERT: "Alert",
}

_BODIES = {
    Category.AIR_QUALITY: "Air is elevated today. Prefer indoor or shorter sessions.",
    Category.SLEEP_DEBT: "Short sleep and late screens may be adding up. Aim a steadier wind-down.",
    Category.SEDENTARY_LIFESTYLE: "Long sit time and low steps. Add a couple short walks.",
}

_DEFAULT_BODY = "Small changes today can help your recovery and energy."


def refine_to_cards(triggers: Sequence[Trigger]) -> list[Card]:
    """Turn the most severe, most confident triggers into up to six cards."""
    ranked = sorted(triggers, key=lambda t: (-t.severity, -t.confidence))
    return [
        Card(
            category=t.category.value,
            type=t.type.value,
            title=f"{_TITLE_PREFIX[t.type]}: {t.category.value}",
            body=_BODIES.get(t.category, _DEFAULT_BODY),
            metric_callouts=list(t.metric_callouts[:CALLOUTS_MAX]),
            priority=i + 1,
        )
        for i, t in enumerate(ranked[:MAX_CARDS])
    ]
