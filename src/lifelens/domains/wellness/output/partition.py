"""Split a card payload into flagged, extreme and suggested (to-do) cards."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from lifelens.domains.wellness.output.models import Card, Partition

_EXTREME_TITLE = re.compile(r"Alert:|Air quality|Smoking")
_SUGGESTION_TITLE = re.compile(r"Try this:|action", re.IGNORECASE)

_AQI = re.compile(r"AQI\s*(\d+)")
_SLEEP_DEBT = re.compile(r"Sleep debt\s*(\d+(?:\.\d+)?)h")
_STEPS = re.compile(r"Steps\s*(\d+)")
_CAFFEINE = re.compile(r"Caffeine\s*(\d+)mg")

AQI_EXTREME = 150
SLEEP_DEBT_EXTREME_HOURS = 2.5
STEPS_EXTREME = 3000
CAFFEINE_EXTREME_MG = 350


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower())


def _extreme_callout(callout: str) -> bool:
    m = _AQI.search(callout)
    if m and int(m.group(1)) >= AQI_EXTREME:
        return True
    m = _SLEEP_DEBT.search(callout)
    if m and float(m.group(1)) >= SLEEP_DEBT_EXTREME_HOURS:
        return True
    m = _STEPS.search(callout)
    if m and int(m.group(1)) < STEPS_EXTREME:
        return True
    m = _CAFFEINE.search(callout)
    if m and int(m.group(1)) >= CAFFEINE_EXTREME_MG:
        return True
    return False


def is_extreme(card: Card) -> bool:
    return bool(_EXTREME_TITLE.search(card.title)) or any(
        _extreme_callout(c) for c in card.metric_callouts
    )


def partition_cards(cards: Sequence[Card]) -> Partition:
    """Everything is flagged; extremes and suggestions are subsets.

    Suggestions get ``actionable=True`` and an ``action_id`` of the form
    ``<category-slug>-<index>``.
    """
    flagged = list(cards)
    extremes = [c for c in flagged if is_extreme(c)]
    candidates = [
        c for c in flagged if _SUGGESTION_TITLE.search(c.title) or c.type == "action"
    ]
    suggestions = [
        replace(c, actionable=True, action_id=f"{slugify(c.category or 'action')}-{idx}")
        for idx, c in enumerate(candidates)
    ]
    return Partition(flagged=flagged, extremes=extremes, suggestions=suggestions)


def partition_payload(payload: Mapping[str, Any] | None) -> Partition:
    """Partition the ``cards`` list of an app payload (dicts or ``Card``)."""
    raw = (payload or {}).get("cards")
    if not isinstance(raw, list):
        return Partition()
    cards = [c if isinstance(c, Card) else Card.from_dict(c) for c in raw if isinstance(c, (Card, Mapping))]
    return partition_cards(cards)
