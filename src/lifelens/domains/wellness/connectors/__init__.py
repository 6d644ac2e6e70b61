"""Input connectors — where raw health inputs come from.

Scenarios are packaged demo profiles; CSV import reads exported metrics.
Both produce ``RawHealthInput`` for the risk engine.
"""

from __future__ import annotations

from lifelens.domains.wellness.connectors.csv_import import input_from_csv, read_health_csv
from lifelens.domains.wellness.connectors.scenarios import (
    Scenario,
    get_scenario,
    load_scenarios,
)

__all__ = ["Scenario", "get_scenario", "input_from_csv", "load_scenarios", "read_health_csv"]
