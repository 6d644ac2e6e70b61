"""MCP Resources for rule battery discovery."""

from __future__ import annotations

import json

from fastmcp import FastMCP

from lifelens.domains.wellness.domain_logic.models import Category, TriggerType
from lifelens.domains.wellness.domain_logic.rules import RULES


def register_rule_resources(mcp: FastMCP) -> None:
    """Register rule catalogue resources on the MCP server."""

    @mcp.resource("rules://wellness/catalogue")
    def rule_catalogue_resource() -> str:
        """The ordered rule battery and the closed vocabularies it emits."""
        return json.dumps(
            {
                "rule_count": len(RULES),
                "rules": [{"order": i + 1, "name": r.name} for i, r in enumerate(RULES)],
                "categories": [c.value for c in Category],
                "types": [t.value for t in TriggerType],
            },
            indent=2,
        )
