"""Demo scenario loader — reads named input profiles from YAML."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from lifelens.domains.wellness.domain_logic.models import RawHealthInput

logger = logging.getLogger(__name__)

DEFAULT_SCENARIOS_PATH = Path(__file__).resolve().parent.parent / "data" / "scenarios.yaml"


@dataclass(frozen=True)
class Scenario:
    name: str
    label: str
    input: RawHealthInput


def load_scenarios(path: str | Path | None = None) -> dict[str, Scenario]:
    """Parse a scenarios YAML file into ``{name: Scenario}`` (file order)."""
    path = Path(path) if path else DEFAULT_SCENARIOS_PATH
    with open(path) as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}

    scenarios: dict[str, Scenario] = {}
    for name, entry in data.items():
        entry = entry or {}
        scenarios[name] = Scenario(
            name=name,
            label=entry.get("label", name),
            input=RawHealthInput.from_mapping(entry.get("input", {})),
        )
    logger.debug("Loaded %d scenarios from %s", len(scenarios), path)
    return scenarios


def get_scenario(name: str, path: str | Path | None = None) -> Scenario:
    """Look up one scenario by name.

    Raises:
        KeyError: unknown name; the message lists the known ones.
    """
    scenarios = load_scenarios(path)
    try:
        return scenarios[name]
    except KeyError:
        raise KeyError(
            f"Unknown scenario {name!r}; known: {', '.join(sorted(scenarios))}"
        ) from None
