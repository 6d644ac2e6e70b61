"""Risk engine: the single entry point into the deterministic core."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from lifelens.domains.wellness.domain_logic.dedupe import dedupe
from lifelens.domains.wellness.domain_logic.drivers import derive_drivers
from lifelens.domains.wellness.domain_logic.models import EngineOutput, RawHealthInput
from lifelens.domains.wellness.domain_logic.rules import evaluate_rules

logger = logging.getLogger(__name__)


def run_risk_engine(raw: RawHealthInput | Mapping[str, Any] | None) -> EngineOutput:
    """Derive drivers, evaluate the rule battery and dedupe the result.

    Accepts a ``RawHealthInput`` or a plain mapping with camelCase keys.
    An empty trigger list is a normal outcome.
    """
    if not isinstance(raw, RawHealthInput):
        raw = RawHealthInput.from_mapping(raw)

    drivers = derive_drivers(raw)
    triggers = dedupe(evaluate_rules(drivers))

    logger.debug("Risk engine: %d triggers fired", len(triggers))
    return EngineOutput(drivers=drivers, triggers=tuple(triggers))
