"""CSV import — exported health metrics as raw engine input.

Rows are read with a header line; cell values are typed (numbers, booleans,
empty -> None). Read errors are logged and produce no rows.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any

from lifelens.domains.wellness.domain_logic.models import RawHealthInput

logger = logging.getLogger(__name__)


def _typed(cell: str | None) -> Any:
    if cell is None:
        return None
    text = cell.strip()
    if text == "":
        return None
    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


def read_health_csv(path: str | Path) -> list[dict[str, Any]]:
    """Parse a metrics CSV into typed row dicts; ``[]`` on any failure."""
    try:
        with open(Path(path).expanduser(), newline="", encoding="utf-8") as f:
            rows = [
                {key.strip(): _typed(value) for key, value in row.items() if key}
                for row in csv.DictReader(f)
            ]
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        logger.error("Error reading/parsing CSV %s: %s", path, exc)
        return []

    rows = [r for r in rows if any(v is not None for v in r.values())]
    if not rows:
        logger.error("No rows found in CSV %s", path)
    return rows


def input_from_csv(path: str | Path) -> RawHealthInput:
    """Use the most recent (last) row of a metrics CSV as engine input."""
    rows = read_health_csv(path)
    return RawHealthInput.from_mapping(rows[-1] if rows else None)
