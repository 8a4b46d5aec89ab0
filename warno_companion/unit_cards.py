"""JSON-backed unit-card lookup.

Accepted layouts:

    {"Descriptor_Unit_X": {"name": "...", "category": "...", "code": 12}, ...}
    [{"descriptor": "Descriptor_Unit_X", "name": "...", "category": "...", "code": 12}, ...]
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import orjson
from pydantic import ValidationError

from warno_descriptor_extractor.inputs import UnitCard

from .config import ConfigError

logger = logging.getLogger(__name__)


class UnitCardTable:
    """Read-only descriptor -> ``UnitCard`` table."""

    def __init__(self, cards: Mapping[str, UnitCard] | None = None):
        self._cards = dict(cards or {})

    def __len__(self) -> int:
        return len(self._cards)

    def find_unit_card_by_descriptor(self, descriptor_name: str) -> UnitCard | None:
        return self._cards.get(descriptor_name)

    @classmethod
    def from_data(cls, data: Any) -> UnitCardTable:
        if isinstance(data, dict):
            entries = [(descriptor, card) for descriptor, card in data.items()]
        elif isinstance(data, list):
            entries = []
            for entry in data:
                if not isinstance(entry, dict) or not entry.get("descriptor"):
                    raise ConfigError(f"Unit card entry without a descriptor: {entry!r}")
                card = {key: value for key, value in entry.items() if key != "descriptor"}
                entries.append((entry["descriptor"], card))
        else:
            raise ConfigError("Unit card table must be a JSON object or list")

        cards = {}
        for descriptor, card in entries:
            try:
                cards[descriptor] = UnitCard.model_validate(card)
            except ValidationError as e:
                raise ConfigError(f"Invalid unit card for {descriptor}: {e}") from e
        return cls(cards)

    @classmethod
    def from_json(cls, path: str | Path) -> UnitCardTable:
        """Load a table from disk.

        Raises:
            ConfigError: If the file is missing or malformed
        """
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Unit card file not found: {path}")
        try:
            data = orjson.loads(path.read_bytes())
        except orjson.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e
        table = cls.from_data(data)
        logger.info(f"Loaded {len(table)} unit cards from {path.name}")
        return table
