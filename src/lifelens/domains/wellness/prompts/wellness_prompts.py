"""MCP Prompts — pre-built interaction templates for wellness journeys."""

from __future__ import annotations

from fastmcp import FastMCP


def register_wellness_prompts(mcp: FastMCP) -> None:
    """Register wellness domain MCP prompts."""

    @mcp.prompt()
    def wellness_check_prompt() -> str:
        """Prompt template for a quick wellness check from today's metrics."""
        return """I'd like a quick wellness check. Please:

1. Run my metrics through the wellness rules
2. Show me the most important insights and alerts first
3. Suggest two or three small things I can do today
4. Add the ones I pick to my to-do list

Keep it encouraging and practical. This is not medical advice."""

    @mcp.prompt()
    def time_machine_prompt(horizon_months: int = 12) -> str:
        """Prompt template for a forward-looking projection."""
        return f"""Show me where my current habits may lead in {horizon_months} months.

1. Start from my metrics today
2. Describe what may change if nothing changes, and why
3. List the things I should keep an eye on
4. Remind me this is illustrative only"""
