"""JSON output helpers backed by orjson.

Usage:
    from warno_companion.json_utils import json_dumps, write_units

    text = json_dumps([unit.to_dict() for unit in units], indent=2)
    write_units(units, "units.json", pretty=True)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import orjson

from warno_descriptor_extractor.models import Unit

logger = logging.getLogger(__name__)


def json_dumps(
    obj: Any,
    *,
    default: Callable[[Any], Any] | None = None,
    indent: int | None = None,
) -> str:
    """Serialize obj to a JSON string using orjson.

    Args:
        obj: Object to serialize
        default: Function for objects that can't be serialized (e.g., default=str)
        indent: If 2, pretty-print with 2-space indent. Other values ignored.

    Returns:
        JSON string
    """
    option = 0
    if indent == 2:
        option |= orjson.OPT_INDENT_2

    return orjson.dumps(obj, default=default, option=option).decode("utf-8")


def units_to_json(units: Iterable[Unit], *, pretty: bool = False) -> str:
    return json_dumps([unit.to_dict() for unit in units], indent=2 if pretty else None)


def write_units(units: Iterable[Unit], path: str | Path, *, pretty: bool = False) -> Path:
    """Write units as a JSON array and return the written path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(units_to_json(units, pretty=pretty), encoding="utf-8")
    logger.info(f"Wrote units to {path}")
    return path
