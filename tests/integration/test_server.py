"""Integration tests for the LifeLens MCP server."""

from __future__ import annotations

import asyncio
import logging
import json

import pytest
from fastmcp import Client

from conftest import SAMPLE_CARDS, make_llm_client
from lifelens.core.llm.providers.mock import MockProvider
from lifelens.core.server.app import create_app


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _json(result):
    content = getattr(result, "content", result)
    return json.loads(content[0].text)


WELLNESS_TOOLS = [
    "health_check",
    "run_risk_engine",
    "list_scenarios",
    "run_scenario",
    "wellness_cards",
    "time_machine",
    "import_health_csv",
]

TODO_TOOLS = ["todo_list", "todo_add", "todo_toggle", "todo_remove", "todo_clear"]


@pytest.fixture
def provider():
    return MockProvider("Cards:\n" + json.dumps(SAMPLE_CARDS))


@pytest.fixture
def client(provider, todo_store):
    mcp = create_app(
        llm_client_override=make_llm_client(provider),
        todo_store_override=todo_store,
    )
    return Client(mcp)


def test_server_lists_all_tools(client):
    async def _check():
        async with client:
            names = [t.name for t in await client.list_tools()]
            for expected in WELLNESS_TOOLS + TODO_TOOLS:
                assert expected in names, f"Missing tool: {expected}"
    _run(_check())


def test_todo_tools_absent_without_store():
    async def _check():
        async with Client(create_app()) as c:
            names = [t.name for t in await c.list_tools()]
            assert "run_risk_engine" in names
            assert not any(n.startswith("todo_") for n in names)
    _run(_check())


def test_health_check(client):
    async def _check():
        async with client:
            status = _json(await client.call_tool("health_check", {}))
            assert status["status"] == "ok"
            assert status["rules_loaded"] == 22
            assert status["todos_enabled"] is True
    _run(_check())


def test_run_risk_engine(client):
    async def _check():
        async with client:
            result = _json(await client.call_tool(
                "run_risk_engine", {"inputs": {"smokingStatus": "current", "aqiDailyMax": 120}}
            ))
            assert [t["category"] for t in result["triggers"]] == ["Air quality", "Smoking"]
            assert result["drivers"]["smokingStatus"] == "current"
    _run(_check())


def test_list_scenarios(client):
    async def _check():
        async with client:
            result = _json(await client.call_tool("list_scenarios", {}))
            names = [s["name"] for s in result["scenarios"]]
            assert names == ["low-sleep-high-aqi", "balanced", "very-sedentary-high-caffeine"]
    _run(_check())


def test_run_scenario_with_cards(client):
    async def _check():
        async with client:
            payload = _json(await client.call_tool("run_scenario", {"name": "low-sleep-high-aqi"}))
            assert payload["meta"]["palette"] == "soft_pastel"
            assert payload["cards"] == SAMPLE_CARDS
            assert [s["action_id"] for s in payload["suggestions"]] == ["caffeine-0", "exercise-1"]
    _run(_check())


def test_run_scenario_without_refinement(client, provider):
    async def _check():
        async with client:
            result = _json(await client.call_tool(
                "run_scenario", {"name": "balanced", "refine": False}
            ))
            assert result["triggers"] == []
    _run(_check())
    assert provider.call_count == 0


def test_unknown_scenario_is_an_error(client, caplog):
    async def _check():
        async with client:
            with pytest.raises(Exception, match="Unknown scenario"):
                await client.call_tool("run_scenario", {"name": "marathon"})
    with caplog.at_level(logging.WARNING, logger="lifelens.domains.wellness.tools.wellness_tools"):
        _run(_check())
    assert "unknown scenario 'marathon'" in caplog.text


def test_todo_add_without_action_id_is_an_error(client, caplog):
    card = dict(SAMPLE_CARDS[0])

    async def _check():
        async with client:
            with pytest.raises(Exception, match="no action_id"):
                await client.call_tool("todo_add", {"card": card})
            todos = _json(await client.call_tool("todo_list", {}))["todos"]
            assert todos == []
    with caplog.at_level(logging.WARNING, logger="lifelens.domains.wellness.tools.todo_tools"):
        _run(_check())
    assert "has no action_id" in caplog.text


def test_wellness_cards_fall_back_when_llm_fails(todo_store):
    mcp = create_app(
        llm_client_override=make_llm_client(MockProvider(RuntimeError("offline"))),
        todo_store_override=todo_store,
    )

    async def _check():
        async with Client(mcp) as c:
            payload = _json(await c.call_tool(
                "wellness_cards", {"inputs": {"stepsAvg7d": 1800}, "palette": "mono"}
            ))
            assert payload["meta"]["palette"] == "mono"
            assert payload["cards"][0]["title"] == "Heads-up: Sedentary lifestyle"
    _run(_check())


def test_time_machine_fallback(client):
    async def _check():
        async with client:
            result = _json(await client.call_tool(
                "time_machine", {"today_metrics": {"bmi": 29}, "horizon_months": 600}
            ))
            assert result["horizon_months"] == 480
            assert result["future_metrics"] == {"bmi": 29}
    _run(_check())


def test_import_health_csv(client, tmp_path):
    path = tmp_path / "export.csv"
    path.write_text("stepsAvg7d,caffeineMgDay\n9000,100\n2500,300\n")

    async def _check():
        async with client:
            result = _json(await client.call_tool("import_health_csv", {"path": str(path)}))
            assert result["input"] == {"stepsAvg7d": 2500, "caffeineMgDay": 300}
            assert "Caffeine" in [t["category"] for t in result["triggers"]]
    _run(_check())


def test_todo_flow(client):
    async def _check():
        async with client:
            payload = _json(await client.call_tool("run_scenario", {"name": "low-sleep-high-aqi"}))
            suggestion = payload["suggestions"][0]

            todos = _json(await client.call_tool("todo_add", {"card": suggestion}))["todos"]
            assert [t["action_id"] for t in todos] == ["caffeine-0"]

            todos = _json(await client.call_tool("todo_add", {"card": suggestion}))["todos"]
            assert len(todos) == 1

            todos = _json(await client.call_tool("todo_toggle", {"action_id": "caffeine-0"}))["todos"]
            assert todos[0]["done"] is True

            todos = _json(await client.call_tool("todo_list", {}))["todos"]
            assert todos[0]["title"] == "Trim one coffee"

            todos = _json(await client.call_tool("todo_remove", {"action_id": "caffeine-0"}))["todos"]
            assert todos == []
    _run(_check())


def test_rule_catalogue_resource(client):
    async def _check():
        async with client:
            contents = await client.read_resource("rules://wellness/catalogue")
            catalogue = json.loads(contents[0].text)
            assert catalogue["rule_count"] == 22
    _run(_check())


def test_prompts_registered(client):
    async def _check():
        async with client:
            names = [p.name for p in await client.list_prompts()]
            assert "wellness_check_prompt" in names
            assert "time_machine_prompt" in names
    _run(_check())
