"""MCP tools for the wellness engine, card refinement and the time machine."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from lifelens.core.storage.todos import TodoStore
    from lifelens.domains.wellness.output.refiner import CardRefiner
    from lifelens.domains.wellness.output.time_machine import TimeMachine

from lifelens.domains.wellness.connectors.csv_import import input_from_csv
from lifelens.domains.wellness.connectors.scenarios import get_scenario, load_scenarios
from lifelens.domains.wellness.domain_logic.engine import run_risk_engine
from lifelens.domains.wellness.domain_logic.models import EngineOutput
from lifelens.domains.wellness.output.partition import partition_payload
from lifelens.domains.wellness.output.serializer import to_app_json

logger = logging.getLogger(__name__)


def register_wellness_tools(
    mcp: FastMCP,
    refiner: CardRefiner,
    projector: TimeMachine,
    default_palette: str = "soft_pastel",
    todo_store: TodoStore | None = None,
) -> None:
    """Register engine, card and projection tools on the MCP server."""

    async def _cards_payload(output: EngineOutput, palette: str | None) -> dict[str, Any]:
        todos = todo_store.all() if todo_store is not None else []
        payload = await to_app_json(
            output, refiner, palette=palette or default_palette, todos=todos
        )
        payload["suggestions"] = [c.as_dict() for c in partition_payload(payload).suggestions]
        return payload

    @mcp.tool(name="run_risk_engine")
    def run_risk_engine_tool(inputs: dict[str, Any] | None = None) -> str:
        """Run the deterministic wellness rules over raw health metrics.

        Args:
            inputs: Raw metrics with camelCase keys (e.g. sleepHoursAvg7d,
                stepsAvg7d, caffeineMgDay, aqiDailyMax). All keys optional.

        Returns drivers and the deduplicated triggers, in rule order.
        """
        output = run_risk_engine(inputs or {})
        return json.dumps(output.as_dict())

    @mcp.tool
    def list_scenarios() -> str:
        """List the packaged demo input profiles."""
        scenarios = load_scenarios()
        return json.dumps({
            "scenarios": [
                {"name": s.name, "label": s.label, "input": s.input.as_dict()}
                for s in scenarios.values()
            ]
        })

    @mcp.tool
    async def run_scenario(
        ctx: Context,
        name: str,
        refine: bool = True,
        palette: str | None = None,
    ) -> str:
        """Run a demo profile through the engine and, optionally, the card refiner.

        Args:
            name: Scenario name (see list_scenarios).
            refine: When true, also return 4-6 cards and to-do suggestions.
            palette: Optional card palette override.
        """
        try:
            scenario = get_scenario(name)
        except KeyError as exc:
            logger.warning("run_scenario: unknown scenario %r", name)
            raise ValueError(str(exc.args[0])) from None
        output = run_risk_engine(scenario.input)
        if not refine:
            return json.dumps(output.as_dict())
        return json.dumps(await _cards_payload(output, palette))

    @mcp.tool
    async def wellness_cards(
        ctx: Context,
        inputs: dict[str, Any] | None = None,
        palette: str | None = None,
    ) -> str:
        """Turn raw health metrics into plain-language wellness cards.

        Runs the rule engine, then asks the LLM to write 4-6 cards; when the
        LLM is unavailable, deterministic cards are returned instead.

        Args:
            inputs: Raw metrics with camelCase keys. All keys optional.
            palette: Optional card palette override.
        """
        output = run_risk_engine(inputs or {})
        return json.dumps(await _cards_payload(output, palette))

    @mcp.tool
    async def time_machine(
        ctx: Context,
        today_metrics: dict[str, Any],
        horizon_months: int = 12,
    ) -> str:
        """Project today's metrics forward and describe how things may look.

        Illustrative only, not medical advice.

        Args:
            today_metrics: Metric name -> today's value.
            horizon_months: 1-480 months ahead (clamped).
        """
        projection = await projector.project(today_metrics, horizon_months)
        return json.dumps(projection.as_dict())

    @mcp.tool
    def import_health_csv(path: str) -> str:
        """Run the engine over the latest row of an exported metrics CSV.

        Args:
            path: Path to a CSV whose header uses the raw metric names.
        """
        raw = input_from_csv(path)
        output = run_risk_engine(raw)
        return json.dumps({"input": raw.as_dict(), **output.as_dict()})
