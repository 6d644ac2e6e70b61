"""LifeLens MCP Server — application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from lifelens.core.config.settings import get_settings
from lifelens.core.llm.client import RetryingLLMClient, create_llm_client
from lifelens.core.storage.database import TodoDatabase
from lifelens.core.storage.todos import TodoStore
from lifelens.domains.wellness.domain_logic.rules import RULES
from lifelens.domains.wellness.output.refiner import CardRefiner
from lifelens.domains.wellness.output.time_machine import TimeMachine
from lifelens.domains.wellness.prompts.wellness_prompts import register_wellness_prompts
from lifelens.domains.wellness.resources.rules import register_rule_resources
from lifelens.domains.wellness.tools.wellness_tools import register_wellness_tools

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(
    *,
    llm_client_override: RetryingLLMClient | None = None,
    todo_store_override: TodoStore | None = None,
) -> FastMCP:
    """Create and configure the LifeLens MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Creates the LLM client (one per process, injected downstream)
    3. Builds the card refiner and time machine around it
    4. Opens the to-do store when a path is configured
    5. Registers all tools, resources, and prompts
    """
    settings = get_settings()

    # --- Server instance ---
    server = FastMCP(
        "LifeLens Wellness",
        instructions=(
            "LifeLens wellness server. Turns self-reported and device-derived "
            "health metrics into rule-based wellness triggers, plain-language "
            "cards, a to-do list, and a forward-looking projection. "
            "Wellness insights only; not medical advice."
        ),
    )

    # --- LLM collaborators ---
    llm_client = llm_client_override or create_llm_client(settings)
    refiner = CardRefiner(llm_client)
    projector = TimeMachine(llm_client)

    # --- To-do store ---
    todo_store: TodoStore | None = None
    if todo_store_override is not None:
        todo_store = todo_store_override
    elif settings.todo_db_path:
        todo_db = TodoDatabase(settings.todo_db_path)
        todo_db.initialize()
        todo_store = TodoStore(todo_db)
        logger.info("To-do store initialized: %s", settings.todo_db_path)
    else:
        logger.info("No TODO_DB_PATH configured — to-do tools disabled.")

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": "LifeLens Wellness",
            "version": VERSION,
            "rules_loaded": len(RULES),
            "llm_model": llm_client.primary.model,
            "todos_enabled": todo_store is not None,
        }

    register_wellness_tools(
        server, refiner, projector, default_palette=settings.card_palette, todo_store=todo_store
    )
    logger.info("Wellness tools registered")

    if todo_store is not None:
        from lifelens.domains.wellness.tools.todo_tools import register_todo_tools

        register_todo_tools(server, todo_store)
        logger.info("To-do tools registered")

    # --- Register resources ---
    register_rule_resources(server)

    # --- Register prompts ---
    register_wellness_prompts(server)

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when this attribute is accessed (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
