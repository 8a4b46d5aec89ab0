from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from .inputs import UnitCard

NameSource = Literal["missing", "unit_card", "fallback"]

UNIT_DESCRIPTOR_PREFIX = "Descriptor_Unit_"

_PREFIX_RE = re.compile(rf"^{re.escape(UNIT_DESCRIPTOR_PREFIX)}")


@dataclass(frozen=True, slots=True)
class ResolvedName:
    """Structured unit name resolution result.

    - display: Human-readable name
    - category: Unit card category ("" when unknown)
    - code: Unit card numeric id (-1 when unknown)
    - source: Where the display name came from
    """

    display: str
    category: str = ""
    code: int = -1
    source: NameSource = "fallback"


def pretty_unit_name_from_descriptor(descriptor_name: str) -> str:
    """``Descriptor_Unit_M1A1_Abrams_US`` -> ``M1A1 Abrams US``."""
    return " ".join(_PREFIX_RE.sub("", descriptor_name).split("_")).strip()


def resolve_unit_name(descriptor_name: str, card: UnitCard | None) -> ResolvedName:
    """Combine the unit card (if any) with the descriptor-derived fallback.

    The card's category and code are kept even when its name is empty.
    """
    category = card.category if card is not None else ""
    code = card.code if card is not None else -1

    if card is not None and card.name.strip():
        return ResolvedName(display=card.name, category=category, code=code, source="unit_card")

    pretty = pretty_unit_name_from_descriptor(descriptor_name)
    if not pretty:
        return ResolvedName(display="", category=category, code=code, source="missing")
    return ResolvedName(display=pretty, category=category, code=code, source="fallback")
