"""MCP tools for the to-do list built from suggestion cards."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from fastmcp import FastMCP

if TYPE_CHECKING:
    from lifelens.core.storage.todos import TodoItem, TodoStore

from lifelens.domains.wellness.output.models import Card

logger = logging.getLogger(__name__)


def _dump(items: list[TodoItem]) -> str:
    return json.dumps({"todos": [t.as_dict() for t in items]})


def register_todo_tools(mcp: FastMCP, store: TodoStore) -> None:
    """Register to-do tools on the MCP server (requires the store)."""

    @mcp.tool
    def todo_list() -> str:
        """List saved to-dos, newest first."""
        return _dump(store.all())

    @mcp.tool
    def todo_add(card: dict[str, Any]) -> str:
        """Save a suggestion card (as returned under "suggestions") as a to-do.

        Args:
            card: The suggestion card; must carry an action_id.
        """
        if not card.get("action_id"):
            logger.warning("todo_add: card %r has no action_id", card.get("title"))
        return _dump(store.add_from_card(Card.from_dict(card)))

    @mcp.tool
    def todo_toggle(action_id: str) -> str:
        """Mark a to-do done, or not done again."""
        return _dump(store.toggle(action_id))

    @mcp.tool
    def todo_remove(action_id: str) -> str:
        """Delete one to-do."""
        return _dump(store.remove(action_id))

    @mcp.tool
    def todo_clear() -> str:
        """Delete every to-do."""
        return _dump(store.clear())
