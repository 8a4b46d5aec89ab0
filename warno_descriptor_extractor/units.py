from __future__ import annotations

import logging
from collections.abc import Sequence

from .base import DescriptorExtractorBase, DescriptorMap
from .codecs import (
    decode_armor_token,
    decode_info_panel_type,
    last_path_segment,
    metres_to_number,
    parse_number,
    round_half_up,
    strip_quotes,
)
from .errors import ExtractionError, MissingRequiredField
from .inputs import SpeedModifier, UnitCardLookup, no_unit_cards
from .models import BombStrategy, SpeedOnTerrain, Unit, UnitType, Weapon
from .name_resolution import resolve_unit_name
from .tree import Field, Object, extract_reference, extract_tuple_from_map, extract_value
from .weapons import WeaponGroupMerger

logger = logging.getLogger(__name__)

_UNIT_TYPE_FIELDS = {
    "Nationalite": "nationality",
    "MotherCountry": "mother_country",
    "TypeUnitFormation": "formation",
}

_ARMOUR_FIELDS = {
    "front": "ArmorDescriptorFront",
    "side": "ArmorDescriptorSides",
    "rear": "ArmorDescriptorRear",
    "top": "ArmorDescriptorTop",
}

EXCLUDED_SPECIALITY = "appui"


class UnitExtractor(DescriptorExtractorBase):
    """Extracts one ``TEntityDescriptor`` into a ``Unit`` record.

    Weapons are resolved through the unit's ``WeaponManager`` reference and
    the supplied weapon/ammo/smoke/missile indices.
    """

    def __init__(
        self,
        descriptor: Object,
        speed_modifiers: Sequence[SpeedModifier],
        mapped_weapons: DescriptorMap,
        mapped_ammo: DescriptorMap,
        mapped_smoke: DescriptorMap | None = None,
        mapped_missiles: DescriptorMap | None = None,
        find_unit_card: UnitCardLookup = no_unit_cards,
    ):
        super().__init__(descriptor)
        self.speed_modifiers = speed_modifiers
        self.mapped_weapons = mapped_weapons
        self.mapped_ammo = mapped_ammo
        self.mapped_smoke = mapped_smoke
        self.mapped_missiles = mapped_missiles
        self.find_unit_card = find_unit_card

    def extract(self) -> Unit:
        """Extract the unit.

        Raises:
            ExtractionError: Any extraction failure, tagged with this unit's
                descriptor name
        """
        try:
            return self._extract()
        except ExtractionError as e:
            raise e.with_descriptor(self.descriptor_name)

    def _extract(self) -> Unit:
        descriptor_name = self.descriptor_name
        resolved = resolve_unit_name(descriptor_name, self.find_unit_card(descriptor_name))

        armour = self.extract_armour_values()

        speed = round_half_up(metres_to_number(self._value("MaxSpeed") or 0))
        unit_moving_type = self._value("UnitMovingType")
        speeds_for_terrains = None
        if unit_moving_type:
            speeds_for_terrains = tuple(self.calculate_speeds_for_terrains(str(unit_moving_type), speed))

        deployment_shift = self._value("DeploymentShift")
        agility_radius = self._value("AgilityRadius")
        travel_time = self._number("TravelDuration")

        weapons, has_defensive_smoke = self.extract_weapons()

        return Unit(
            descriptor_name=descriptor_name,
            name=resolved.display,
            category=resolved.category,
            id=resolved.code,
            unit_type=self.extract_unit_type(),
            command_points=self.extract_command_points(),
            info_panel_type=decode_info_panel_type(self._value("InfoPanelConfigurationToken")),
            factory_descriptor=str(self._value("Factory") or ""),
            front_armor=armour["front"],
            side_armor=armour["side"],
            rear_armor=armour["rear"],
            top_armor=armour["top"],
            max_damage=self._number("MaxDamages"),
            speed=speed,
            speeds_for_terrains=speeds_for_terrains,
            road_speed=round_half_up(self._number("RealRoadSpeed")),
            rotation_time=self._number("TempsDemiTour"),
            optics=self._number("OpticalStrength"),
            air_optics=self._number("OpticalStrengthAltitude"),
            bomb_strategy=self.get_bomb_strategy(),
            stealth=self._number("UnitConcealmentBonus"),
            advanced_deployment=round_half_up(metres_to_number(deployment_shift)) if deployment_shift else 0,
            fuel=self._number("FuelCapacity"),
            fuel_move=self._number("FuelMoveDuration"),
            supply=self._number("SupplyCapacity"),
            ecm=self._number("HitRollECM"),
            agility=round_half_up(metres_to_number(agility_radius)) if agility_radius else None,
            travel_time=travel_time or None,
            specialities=tuple(self.get_specialities()),
            has_defensive_smoke=has_defensive_smoke,
            weapons=tuple(weapons),
        )

    def extract_command_points(self) -> float:
        """Command point cost from the ``ProductionRessourcesNeeded`` map.

        Raises:
            MissingRequiredField: If the map or its command point entry is absent
        """
        resources = self._require("ProductionRessourcesNeeded")
        command_points = parse_number(
            extract_tuple_from_map(resources, "Resource_CommandPoints"), field="Resource_CommandPoints"
        )
        if command_points is None:
            raise MissingRequiredField("ProductionRessourcesNeeded/Resource_CommandPoints", self.descriptor_name)
        return command_points

    def extract_armour_values(self) -> dict[str, float]:
        """Decode the four armour facings.

        Raises:
            MissingRequiredField: If a facing is absent
            MalformedToken: If a facing token cannot be decoded
        """
        values = {}
        for facing, field in _ARMOUR_FIELDS.items():
            token = extract_value(self._require(field))
            if token is None:
                raise MissingRequiredField(field, self.descriptor_name)
            values[facing] = decode_armor_token(last_path_segment(str(token)))
        return values

    def calculate_speeds_for_terrains(self, unit_moving_type: str, speed: float) -> list[SpeedOnTerrain]:
        """Apply each speed modifier whose movement type matches the unit.

        Modifier order is kept; within a modifier the first movement-type key
        contained in the unit's token is used.
        """
        move_type = last_path_segment(unit_moving_type)
        speeds = []
        for speed_modifier in self.speed_modifiers:
            found = next((key for key in speed_modifier.movement_types if key in move_type), None)
            if found is None:
                continue
            modifier = speed_modifier.movement_types[found]
            speeds.append(SpeedOnTerrain(name=speed_modifier.name, speed=round_half_up(speed * modifier.value)))
        return speeds

    def get_specialities(self) -> list[str]:
        """Quote-stripped specialities, without the ``appui`` entry."""
        return [speciality for speciality in self._strings("SpecialtiesList") if speciality != EXCLUDED_SPECIALITY]

    def get_bomb_strategy(self) -> BombStrategy | None:
        if self._has("TDiveBombAttackStrategyDescriptor"):
            return "DIVE"
        if self._has("TBombAttackStrategyDescriptor"):
            return "NORMAL"
        return None

    def extract_unit_type(self) -> UnitType:
        module = self._first("TTypeUnitModuleDescriptor")
        if not isinstance(module, Object):
            logger.debug(f"{self.descriptor_name}: no TTypeUnitModuleDescriptor")
            return UnitType()

        values = {}
        for child in module.children:
            attribute = _UNIT_TYPE_FIELDS.get(child.name)
            value = extract_value(child) if isinstance(child, Field) else None
            if attribute and value is not None:
                values[attribute] = strip_quotes(str(value))
        return UnitType(**values)

    def extract_weapons(self) -> tuple[list[Weapon], bool]:
        """Merge the weapons of the unit's weapon manager.

        An absent reference, or one missing from the weapon index, means the
        unit is unarmed.
        """
        reference = extract_reference(self._first("WeaponManager"))
        if reference is None:
            return [], False

        weapon_manager_id = last_path_segment(reference)
        weapon_manager = self.mapped_weapons.get(weapon_manager_id)
        if not isinstance(weapon_manager, Object):
            logger.debug(f"{self.descriptor_name}: weapon manager {weapon_manager_id} not in index")
            return [], False

        merger = WeaponGroupMerger(weapon_manager, self.mapped_ammo, self.mapped_smoke, self.mapped_missiles)
        return merger.parse()
