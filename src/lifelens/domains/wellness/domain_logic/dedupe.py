"""Stable trigger deduplication."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable
from typing import TypeVar

from lifelens.domains.wellness.domain_logic.models import Trigger

T = TypeVar("T")


def unique_by(items: Iterable[T], key: Callable[[T], Hashable]) -> list[T]:
    """Keep the first item for each key, preserving input order."""
    seen: set[Hashable] = set()
    out: list[T] = []
    for item in items:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        out.append(item)
    return out


def dedupe(triggers: Iterable[Trigger]) -> list[Trigger]:
    """Collapse semantically identical triggers; first occurrence wins.

    Identity is category, type, severity, confidence and callout text.
    Reasons are not part of the identity.
    """
    return unique_by(triggers, Trigger.identity_key)
