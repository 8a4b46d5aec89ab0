"""Typed records produced by the extractors.

Records are frozen and use tuples for sequences, so a returned ``Unit`` can
be shared across threads and compared with ``==``. ``to_dict()`` emits the
camelCase keys consumed by the JSON writer.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from typing import Any, Literal

from .codecs import InfoPanelType

BombStrategy = Literal["DIVE", "NORMAL"]


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _serialize(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {_camel(f.name): _serialize(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, (tuple, list)):
        return [_serialize(item) for item in value]
    return value


class _Record:
    __slots__ = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dict with camelCase keys."""
        return _serialize(self)


@dataclass(frozen=True, slots=True)
class AccuracyDataPoint(_Record):
    distance: float
    accuracy: float


@dataclass(frozen=True, slots=True)
class Missile(_Record):
    descriptor_name: str
    max_speed: float
    max_acceleration: float


@dataclass(frozen=True, slots=True)
class Smoke(_Record):
    descriptor_name: str
    duration: float
    radius: float


@dataclass(frozen=True, slots=True)
class Ammo(_Record):
    """Static ballistic data for one ammunition descriptor."""

    descriptor_name: str
    name: str
    aiming_time: float
    ammunition_per_salvo: float
    fires_left_to_right: bool
    ground_min_range: float
    ground_max_range: float
    heli_min_range: float
    heli_max_range: float
    plane_min_range: float
    plane_max_range: float
    he_damage: float
    he_damage_radius: float
    suppress: float
    suppress_damages_radius: float
    penetration: float
    insta_kill_at_max_range_armour: float
    static_accuracy: float
    moving_accuracy: float
    static_accuracy_over_distance: tuple[AccuracyDataPoint, ...] | None
    moving_accuracy_over_distance: tuple[AccuracyDataPoint, ...] | None
    salvo_length: float
    time_between_shots: float
    reload_time: float
    time_between_salvos: float
    rate_of_fire: int
    true_rate_of_fire: int
    supply_cost_per_salvo: float
    traits: tuple[str, ...]
    missile: Missile | None = None
    smoke: Smoke | None = None


@dataclass(frozen=True, slots=True)
class MountedWeapon(_Record):
    """One physical weapon in one turret, before salvo merging."""

    ammo: Ammo
    number_of_weapons: int
    salvo_index: int
    show_interface: bool


@dataclass(frozen=True, slots=True)
class TurretMount(_Record):
    """A mounted weapon tagged with the attributes of the turret carrying it."""

    mounted_weapon: MountedWeapon
    has_turret: bool
    turret_rotation_speed: float

    @property
    def ammo(self) -> Ammo:
        return self.mounted_weapon.ammo

    @property
    def salvo_index(self) -> int:
        return self.mounted_weapon.salvo_index

    @property
    def number_of_weapons(self) -> int:
        return self.mounted_weapon.number_of_weapons

    @property
    def show_interface(self) -> bool:
        return self.mounted_weapon.show_interface


@dataclass(frozen=True, slots=True)
class Weapon(_Record):
    """A player-visible armament: one or more mounts firing as one salvo group."""

    aiming_time: float
    ammo_descriptor_name: str
    ammunition_per_salvo: float
    fires_left_to_right: bool
    ground_min_range: float
    ground_range: float
    has_turret: bool
    he: float
    he_damage_radius: float
    helicopter_min_range: float
    helicopter_range: float
    insta_kill_at_max_range_armour: float
    missile_properties: Missile | None
    moving_accuracy: float
    moving_accuracy_scaling: tuple[AccuracyDataPoint, ...] | None
    number_of_weapons: int
    penetration: float
    plane_min_range: float
    plane_range: float
    rate_of_fire: int
    reload_time: float
    salvo_index: int
    salvo_length: float
    show_in_interface: bool
    smoke_properties: Smoke | None
    static_accuracy: float
    static_accuracy_scaling: tuple[AccuracyDataPoint, ...] | None
    supply_cost: float
    suppress: float
    suppress_damages_radius: float
    time_between_salvos: float
    total_he_damage: float
    traits: tuple[str, ...]
    true_rate_of_fire: int
    turret_rotation_speed: float
    weapon_name: str


@dataclass(frozen=True, slots=True)
class SpeedOnTerrain(_Record):
    name: str
    speed: int


@dataclass(frozen=True, slots=True)
class UnitType(_Record):
    nationality: str = ""
    mother_country: str = ""
    formation: str = ""


@dataclass(frozen=True, slots=True)
class Unit(_Record):
    descriptor_name: str
    name: str
    category: str
    id: int
    unit_type: UnitType
    command_points: float
    info_panel_type: InfoPanelType | None
    factory_descriptor: str
    front_armor: float
    side_armor: float
    rear_armor: float
    top_armor: float
    max_damage: float
    speed: int
    speeds_for_terrains: tuple[SpeedOnTerrain, ...] | None
    road_speed: int
    rotation_time: float
    optics: float
    air_optics: float
    bomb_strategy: BombStrategy | None
    stealth: float
    advanced_deployment: int
    fuel: float
    fuel_move: float
    supply: float
    ecm: float
    agility: int | None
    travel_time: float | None
    specialities: tuple[str, ...]
    has_defensive_smoke: bool
    weapons: tuple[Weapon, ...]
