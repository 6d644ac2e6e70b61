"""Keyed to-do store: actions the user saved from suggestion cards."""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any

from lifelens.core.storage.database import TodoDatabase

logger = logging.getLogger(__name__)

_TRY_THIS = re.compile(r"^Try this:\s*", re.IGNORECASE)


@dataclass
class TodoItem:
    action_id: str
    title: str
    note: str = ""
    chips: list[str] = field(default_factory=list)
    done: bool = False
    ts: int = 0                           # epoch milliseconds

    def as_dict(self) -> dict[str, Any]:
        return {
            "action_id": self.action_id,
            "title": self.title,
            "note": self.note,
            "chips": list(self.chips),
            "done": self.done,
            "ts": self.ts,
        }


def _decode_chips(raw: str | None) -> list[str]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Unreadable chips in to-do row; ignoring")
        return []
    return [str(v) for v in value] if isinstance(value, list) else []


class TodoStore:
    """CRUD over the ``todos`` table, newest first.

    Every mutating call returns the full, updated list.

    Usage::

        db = TodoDatabase(":memory:")
        db.initialize()
        store = TodoStore(db)
        store.add_from_card(suggestion_card)
    """

    def __init__(self, database: TodoDatabase) -> None:
        self._db = database

    def all(self) -> list[TodoItem]:
        rows = self._db.connection.execute(
            "SELECT action_id, title, note, chips_json, done, ts FROM todos ORDER BY seq DESC"
        ).fetchall()
        return [
            TodoItem(
                action_id=row["action_id"],
                title=row["title"],
                note=row["note"] or "",
                chips=_decode_chips(row["chips_json"]),
                done=bool(row["done"]),
                ts=row["ts"],
            )
            for row in rows
        ]

    def add_from_card(self, card: Any) -> list[TodoItem]:
        """Save a suggestion card as a to-do; a known ``action_id`` is a no-op.

        Raises:
            ValueError: the card has no ``action_id``.
        """
        action_id = getattr(card, "action_id", None)
        if not action_id:
            raise ValueError("Card has no action_id; partition the payload first")

        title = _TRY_THIS.sub("", getattr(card, "title", "") or "") or "Action"
        with self._db.transaction() as conn:
            cursor = conn.execute(
                "INSERT OR IGNORE INTO todos (action_id, title, note, chips_json, done, ts) "
                "VALUES (?, ?, ?, ?, 0, ?)",
                (
                    action_id,
                    title,
                    getattr(card, "body", "") or "",
                    json.dumps(list(getattr(card, "metric_callouts", []) or [])),
                    int(time.time() * 1000),
                ),
            )
        if cursor.rowcount:
            logger.info("To-do added: %s", action_id)
        return self.all()

    def toggle(self, action_id: str) -> list[TodoItem]:
        with self._db.transaction() as conn:
            conn.execute("UPDATE todos SET done = 1 - done WHERE action_id = ?", (action_id,))
        return self.all()

    def remove(self, action_id: str) -> list[TodoItem]:
        with self._db.transaction() as conn:
            conn.execute("DELETE FROM todos WHERE action_id = ?", (action_id,))
        return self.all()

    def clear(self) -> list[TodoItem]:
        with self._db.transaction() as conn:
            conn.execute("DELETE FROM todos")
        return []
