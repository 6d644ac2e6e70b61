"""Presentation-side models: cards, partitions and time machine projections."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

TITLE_MAX = 80
BODY_MAX = 240
CALLOUTS_MAX = 4


@dataclass
class Card:
    """A user-facing insight, action or alert built from one or more triggers."""

    category: str
    type: str
    title: str
    body: str
    metric_callouts: list[str] = field(default_factory=list)
    priority: float = 0
    actionable: bool = False
    action_id: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Card:
        callouts = data.get("metric_callouts")
        return cls(
            category=str(data.get("category") or ""),
            type=str(data.get("type") or ""),
            title=str(data.get("title") or ""),
            body=str(data.get("body") or ""),
            metric_callouts=[str(c) for c in callouts] if isinstance(callouts, list) else [],
            priority=data.get("priority") or 0,
            actionable=bool(data.get("actionable", False)),
            action_id=data.get("action_id") or data.get("actionId"),
        )

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "category": self.category,
            "type": self.type,
            "title": self.title,
            "body": self.body,
            "metric_callouts": list(self.metric_callouts),
            "priority": self.priority,
        }
        if self.actionable:
            out["actionable"] = True
        if self.action_id is not None:
            out["action_id"] = self.action_id
        return out


@dataclass
class Partition:
    """Cards split for display: everything, the urgent ones, and to-do candidates."""

    flagged: list[Card] = field(default_factory=list)
    extremes: list[Card] = field(default_factory=list)
    suggestions: list[Card] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "flagged": [c.as_dict() for c in self.flagged],
            "extremes": [c.as_dict() for c in self.extremes],
            "suggestions": [c.as_dict() for c in self.suggestions],
        }


@dataclass
class Projection:
    """A "time machine" look at where today's metrics may be heading."""

    horizon_months: int
    today_metrics: dict[str, Any]
    future_metrics: dict[str, Any]
    risk_changes: list[dict[str, Any]]
    watch: list[str]
    warnings: list[str]
    narrative: str
    missing_fields: list[str] = field(default_factory=list)
    source: str = "llm"                   # 'llm' | 'fallback'

    def as_dict(self) -> dict[str, Any]:
        return {
            "horizon_months": self.horizon_months,
            "today_metrics": self.today_metrics,
            "future_metrics": self.future_metrics,
            "risk_changes": self.risk_changes,
            "watch": self.watch,
            "warnings": self.warnings,
            "narrative": self.narrative,
            "missing_fields": self.missing_fields,
            "source": self.source,
        }
