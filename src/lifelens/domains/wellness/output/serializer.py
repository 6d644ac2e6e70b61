"""Build the app payload: meta, drivers and refined cards."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from lifelens.domains.wellness.domain_logic.models import EngineOutput
from lifelens.domains.wellness.output.partition import partition_payload
from lifelens.domains.wellness.output.refiner import CardRefiner

PAYLOAD_VERSION = "1.0"
DISCLAIMER = "Wellness insights only; not medical advice."


async def to_app_json(
    output: EngineOutput,
    refiner: CardRefiner,
    palette: str = "soft_pastel",
    existing_payload: Mapping[str, Any] | None = None,
    todos: Sequence[Any] = (),
) -> dict[str, Any]:
    """Refine the engine's triggers into cards and wrap them for the client.

    ``existing_payload`` only supplies its extreme cards as context for the
    refiner; its cards are not carried over.
    """
    extremes = partition_payload(existing_payload).extremes if existing_payload else []
    cards = await refiner.refine(output.triggers, extremes=extremes, todos=todos, palette=palette)
    return {
        "meta": {"version": PAYLOAD_VERSION, "palette": palette, "disclaimer": DISCLAIMER},
        "drivers": output.drivers.as_dict(),
        "cards": [c.as_dict() for c in cards],
    }
