"""Public `DescriptorExtractor` facade over the per-descriptor extractors.

Holds the read-only inputs shared by every unit extraction (descriptor
indices, speed modifiers, unit-card lookup) so callers only pass unit nodes.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from types import MappingProxyType

from .diagnostics import DiagnosticsCollector, get_collector
from .errors import ExtractionError
from .inputs import SpeedModifier, UnitCardLookup, no_unit_cards
from .models import Unit
from .tree import Object
from .units import UnitExtractor

logger = logging.getLogger(__name__)


def _frozen(mapping: Mapping[str, Object] | None) -> Mapping[str, Object]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class DescriptorIndex:
    """Descriptor id -> node maps for everything units reference."""

    ammo: Mapping[str, Object] = field(default_factory=dict)
    smoke: Mapping[str, Object] = field(default_factory=dict)
    missiles: Mapping[str, Object] = field(default_factory=dict)
    weapons: Mapping[str, Object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("ammo", "smoke", "missiles", "weapons"):
            object.__setattr__(self, name, _frozen(getattr(self, name)))


class DescriptorExtractor:
    """Extract units against one immutable snapshot of indices and config."""

    def __init__(
        self,
        index: DescriptorIndex,
        speed_modifiers: Sequence[SpeedModifier] = (),
        find_unit_card: UnitCardLookup = no_unit_cards,
    ):
        self.index = index
        self.speed_modifiers = tuple(speed_modifiers)
        self.find_unit_card = find_unit_card

    def extract_unit(self, unit_descriptor: Object) -> Unit:
        """Extract a single unit.

        Raises:
            ExtractionError: If the unit cannot be extracted
        """
        return UnitExtractor(
            unit_descriptor,
            self.speed_modifiers,
            self.index.weapons,
            self.index.ammo,
            self.index.smoke,
            self.index.missiles,
            self.find_unit_card,
        ).extract()

    def _extract_or_skip(self, unit_descriptor: Object, collector: DiagnosticsCollector) -> Unit | None:
        name = unit_descriptor.name or "<anonymous>"
        start = time.perf_counter()
        try:
            unit = self.extract_unit(unit_descriptor)
        except ExtractionError as e:
            logger.warning(f"Skipping unit {name}: {e}")
            collector.record_skip(name, e)
            return None
        collector.record_timing(name, (time.perf_counter() - start) * 1000)
        if unit.info_panel_type is None:
            collector.record_warning(name, "unrecognized info panel type")
        return unit

    def extract_units(self, unit_descriptors: Iterable[Object], *, max_workers: int | None = None) -> list[Unit]:
        """Extract many units, skipping (and recording) the ones that fail.

        Args:
            unit_descriptors: Unit descriptor nodes
            max_workers: Thread count; ``None`` or 1 extracts sequentially

        Returns:
            Extracted units in input order
        """
        descriptors = list(unit_descriptors)
        collector = get_collector()

        if max_workers and max_workers > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                results = list(pool.map(lambda node: self._extract_or_skip(node, collector), descriptors))
        else:
            results = [self._extract_or_skip(node, collector) for node in descriptors]

        units = [unit for unit in results if unit is not None]
        logger.info(f"Extracted {len(units)} of {len(descriptors)} units")
        return units
