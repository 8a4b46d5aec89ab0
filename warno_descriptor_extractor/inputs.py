"""Schemas for the externally supplied inputs: speed modifiers and unit cards."""

from __future__ import annotations

from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field


class MovementTypeModifier(BaseModel):
    """Speed multiplier for one movement-type token."""

    model_config = ConfigDict(frozen=True)

    value: float


class SpeedModifier(BaseModel):
    """Terrain speed modifier, e.g. ``{"name": "Forest", "movementTypes": {"Wheel": {"value": 0.5}}}``.

    ``movement_types`` keeps the file's key order; the first key contained in
    a unit's movement-type token wins.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    movement_types: dict[str, MovementTypeModifier] = Field(alias="movementTypes")


class UnitCard(BaseModel):
    """Localized unit card returned by the lookup service."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    category: str = ""
    code: int = -1


UnitCardLookup = Callable[[str], UnitCard | None]


def no_unit_cards(descriptor_name: str) -> UnitCard | None:
    return None
