"""Pure decoders for WARNO-specific scalar encodings."""

from __future__ import annotations

import logging
import math
import re
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from .errors import MalformedQuantity, MalformedToken

logger = logging.getLogger(__name__)

# ((1000) * Metre), (60 * Metre), 2450 * Metre
_METRE_RE = re.compile(r"^[\s(]*(-?\d+(?:\.\d+)?)[\s)]*\*\s*Metre[\s)]*$")
_NUMBER_RE = re.compile(r"^\s*-?\d+(?:\.\d+)?\s*$")
_PATH_SEPARATORS_RE = re.compile(r"[/~$]+")
_QUOTES = "'\""
_HUNDREDTH = Decimal("0.01")


class InfoPanelType(Enum):
    DEFAULT = "default"
    SUPPLY_VEHICLE = "supply-vehicle"
    TRANSPORT_VEHICLE = "transport-vehicle"
    INFANTRY = "infantry"
    PLANE = "plane"
    HELICOPTER = "helicopter"
    TRANSPORT_HELICOPTER = "transport-helicopter"
    SUPPLY_HELICOPTER = "supply-helicopter"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def from_token(cls, token: str | None) -> InfoPanelType:
        return _INFO_PANEL_TOKENS.get(strip_quotes(token or ""), cls.UNRECOGNIZED)


_INFO_PANEL_TOKENS = {
    "Default": InfoPanelType.DEFAULT,
    "VehiculeSupplier": InfoPanelType.SUPPLY_VEHICLE,
    "VehiculeTransporter": InfoPanelType.TRANSPORT_VEHICLE,
    "Infantry": InfoPanelType.INFANTRY,
    "avion": InfoPanelType.PLANE,
    "HelicoDefault": InfoPanelType.HELICOPTER,
    "HelicoTransporter": InfoPanelType.TRANSPORT_HELICOPTER,
    "HelicoSupplier": InfoPanelType.SUPPLY_HELICOPTER,
}


class ArmourToken(Enum):
    BLINDAGE = "Blindage"
    INFANTERIE = "Infanterie"
    VEHICULE = "Vehicule"
    HELICO = "Helico"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def from_token(cls, token: str) -> ArmourToken:
        try:
            return cls(token)
        except ValueError:
            return cls.UNRECOGNIZED


def strip_quotes(text: str) -> str:
    """Remove leading/trailing quote characters from an NDF string literal."""
    return text.strip(_QUOTES)


def last_path_segment(reference: str) -> str:
    """Return the id at the end of a reference path.

    ``$/GFX/Weapon/Ammo_M256_120mm`` -> ``Ammo_M256_120mm``
    """
    parts = [part for part in _PATH_SEPARATORS_RE.split(strip_quotes(reference.strip())) if part]
    return parts[-1] if parts else ""


def metres_to_number(text: str | int | float) -> float:
    """Parse a metre quantity such as ``((1000) * Metre)`` into its magnitude.

    Raises:
        MalformedQuantity: If the text is not a metre quantity
    """
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        return float(text)
    if not isinstance(text, str):
        raise MalformedQuantity(text)
    match = _METRE_RE.match(text)
    if not match:
        raise MalformedQuantity(text)
    if text.count("(") != text.count(")"):
        raise MalformedQuantity(text)
    return float(match.group(1))


def parse_number(value: object, *, field: str | None = None) -> float | None:
    """Convert a present value to a number; ``None`` means the field is absent.

    Raises:
        MalformedQuantity: If the value is present but not numeric
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and _NUMBER_RE.match(value):
        return float(value)
    raise MalformedQuantity(value, field=field)


def parse_bool(value: object, *, default: bool = False, field: str | None = None) -> bool:
    """Convert an NDF boolean (``True``, ``False``, 1, 0) to bool; absent gives ``default``.

    Raises:
        MalformedToken: If the value is present but not a boolean
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    text = strip_quotes(str(value)).strip().lower()
    if text in ("true", "1"):
        return True
    if text in ("false", "0"):
        return False
    expected = f"a boolean in {field!r}" if field else "a boolean"
    raise MalformedToken(value, expected)


def parse_distance(value: object, *, field: str | None = None) -> float | None:
    """Like :func:`parse_number`, but also accepts metre quantities."""
    if isinstance(value, str) and "Metre" in value:
        try:
            return metres_to_number(value)
        except MalformedQuantity as e:
            e.field = field
            raise
    return parse_number(value, field=field)


def round_half_up(value: float) -> int:
    """Integer rounding with halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def round2(value: float) -> float:
    """Round to two decimals with halves going away from zero (0.125 -> 0.13).

    Works on the exact binary value, so 1.005 (stored as 1.00499...) gives 1.0.
    """
    return float(Decimal(value).quantize(_HUNDREDTH, rounding=ROUND_HALF_UP))


def decode_armor_token(token: str) -> float:
    """Decode an armour token ``<prefix>_<type>_<strength>`` to its display value.

    - ``leger`` strength is light armour and always 0.5
    - infantry armour is 0
    - helicopter armour is strength - 1, floored at 0.5
    - everything else is the numeric strength

    Raises:
        MalformedToken: If the token has fewer than three parts or a
            non-numeric strength
    """
    parts = token.split("_")
    if len(parts) < 3:
        raise MalformedToken(token, "<prefix>_<type>_<strength>")

    armour_type = ArmourToken.from_token(parts[1])
    strength = parts[2]

    if strength == "leger":
        return 0.5

    if armour_type is ArmourToken.INFANTERIE:
        return 0

    if not _NUMBER_RE.match(strength):
        raise MalformedToken(token, "a numeric armour strength")
    value = float(strength)
    if value.is_integer():
        value = int(value)

    if armour_type is ArmourToken.HELICO:
        helico_armour = value - 1
        if helico_armour >= 1:
            return helico_armour
        return 0.5

    return value


def decode_info_panel_type(token: str | None) -> InfoPanelType | None:
    """Map an info-panel token to its panel type; unknown tokens give None."""
    panel_type = InfoPanelType.from_token(token)
    if panel_type is InfoPanelType.UNRECOGNIZED:
        logger.debug(f"Unmapped info panel token: {token!r}")
        return None
    return panel_type
