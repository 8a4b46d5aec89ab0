"""Weapon-manager extraction: turret walk, smoke detection and salvo merging.

A unit's weapon manager lists turrets, each carrying mounted weapons. Mounts
that fire as the same salvo group (same ``SalvoStockIndex``) are merged into
one player-visible ``Weapon``:

- the first visible mount of a group seeds every field
- later mounts overwrite penetration (``_AP_`` ammo), HE (``_HE_`` or
  Gatling ammo) and smoke properties, and widen ranges to the maximum
- suppression takes the maximum and is multiplied by the seed's weapon
  count on every merge step, so it compounds across members

Groups are matched against the salvo table with its unused ``-1`` slots
removed, by position. That correspondence is not re-verified here: if the
unused slots are not trailing, salvo indices can drift.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from .base import DescriptorExtractorBase, DescriptorMap
from .codecs import parse_number, round2
from .models import TurretMount, Weapon
from .mounted_weapons import MountedWeaponExtractor
from .tree import Object, extract_reference, extract_value, extract_values, first

logger = logging.getLogger(__name__)

SMOKE_LAUNCHER_AMMO_MARKER = "Ammo_SMOKE_Vehicle"
UNUSED_SALVO = -1


class WeaponGroupMerger(DescriptorExtractorBase):
    """Extracts a ``TWeaponManagerModuleDescriptor`` into merged weapons."""

    def __init__(
        self,
        descriptor: Object,
        mapped_ammo: DescriptorMap,
        mapped_smoke: DescriptorMap | None = None,
        mapped_missiles: DescriptorMap | None = None,
    ):
        super().__init__(descriptor)
        self.mapped_ammo = mapped_ammo
        self.mapped_smoke = mapped_smoke
        self.mapped_missiles = mapped_missiles

    def parse_salvo_map(self) -> list[float]:
        """Read ``Salves`` (list or map) into an ordered list of counts."""
        return [
            parse_number(extract_value(node), field="Salves") or 0
            for node in extract_values(self._first("Salves"))
        ]

    @staticmethod
    def is_smoke_launcher(mounted_weapon_descriptor: Object) -> bool:
        ammunition = extract_reference(first(mounted_weapon_descriptor, "Ammunition"))
        return isinstance(ammunition, str) and SMOKE_LAUNCHER_AMMO_MARKER in ammunition

    def parse(self) -> tuple[list[Weapon], bool]:
        """Extract the merged weapons and the defensive smoke flag.

        Returns:
            Tuple of (weapons ordered by salvo index, has_defensive_smoke)

        Raises:
            UnresolvedReference: If a mount references unknown ammunition
        """
        salvo_map = self.parse_salvo_map()
        mounts, has_defensive_smoke = self._extract_turret_mounts()

        shown_mounts = [mount for mount in mounts if mount.show_interface]

        filtered_salvo_map = [salvo for salvo in salvo_map if salvo != UNUSED_SALVO]

        weapons: list[Weapon] = []
        for salvo_index, salvo in enumerate(filtered_salvo_map):
            group = [mount for mount in shown_mounts if mount.salvo_index == salvo_index]
            if not group:
                continue
            weapons.append(self._merge_group(group, salvo))

        logger.debug(
            f"{self.descriptor_name}: {len(mounts)} mounts, {len(shown_mounts)} shown, "
            f"{len(weapons)} weapons, smoke={has_defensive_smoke}"
        )
        return weapons, has_defensive_smoke

    def _extract_turret_mounts(self) -> tuple[list[TurretMount], bool]:
        has_defensive_smoke = False
        mounts: list[TurretMount] = []

        for turret in extract_values(self._first("TurretDescriptorList")):
            rotation_speed = parse_number(extract_value(first(turret, "VitesseRotation")), field="VitesseRotation") or 0
            has_turret = rotation_speed != 0

            for mounted in extract_values(first(turret, "MountedWeaponDescriptorList")):
                if not isinstance(mounted, Object):
                    continue

                # Smoke launchers only flag the unit; they are never listed as weapons
                if self.is_smoke_launcher(mounted):
                    has_defensive_smoke = True
                    continue

                mounted_weapon = MountedWeaponExtractor(
                    mounted,
                    self.mapped_ammo,
                    self.mapped_smoke,
                    self.mapped_missiles,
                ).extract()
                mounts.append(
                    TurretMount(
                        mounted_weapon=mounted_weapon,
                        has_turret=has_turret,
                        turret_rotation_speed=rotation_speed,
                    )
                )

        return mounts, has_defensive_smoke

    @staticmethod
    def _seed_weapon(seed: TurretMount, salvo: float) -> Weapon:
        ammo = seed.ammo
        return Weapon(
            aiming_time=ammo.aiming_time,
            ammo_descriptor_name=ammo.descriptor_name,
            ammunition_per_salvo=ammo.ammunition_per_salvo,
            fires_left_to_right=ammo.fires_left_to_right,
            ground_min_range=ammo.ground_min_range,
            ground_range=ammo.ground_max_range,
            has_turret=seed.has_turret,
            he=ammo.he_damage,
            he_damage_radius=ammo.he_damage_radius,
            helicopter_min_range=ammo.heli_min_range,
            helicopter_range=ammo.heli_max_range,
            insta_kill_at_max_range_armour=ammo.insta_kill_at_max_range_armour,
            missile_properties=ammo.missile,
            moving_accuracy=ammo.moving_accuracy,
            moving_accuracy_scaling=ammo.moving_accuracy_over_distance,
            number_of_weapons=seed.number_of_weapons,
            penetration=ammo.penetration,
            plane_min_range=ammo.plane_min_range,
            plane_range=ammo.plane_max_range,
            rate_of_fire=ammo.rate_of_fire,
            reload_time=ammo.reload_time,
            salvo_index=seed.salvo_index,
            salvo_length=ammo.salvo_length,
            show_in_interface=seed.show_interface,
            smoke_properties=ammo.smoke,
            static_accuracy=ammo.static_accuracy,
            static_accuracy_scaling=ammo.static_accuracy_over_distance,
            supply_cost=salvo * ammo.supply_cost_per_salvo,
            suppress=ammo.suppress,
            suppress_damages_radius=ammo.suppress_damages_radius,
            time_between_salvos=ammo.time_between_salvos,
            total_he_damage=round2(ammo.he_damage * ammo.salvo_length * seed.number_of_weapons),
            traits=ammo.traits,
            true_rate_of_fire=ammo.true_rate_of_fire,
            turret_rotation_speed=seed.turret_rotation_speed,
            weapon_name=ammo.name,
        )

    def _merge_group(self, group: list[TurretMount], salvo: float) -> Weapon:
        weapon = self._seed_weapon(group[0], salvo)

        for mount in group[1:]:
            ammo = mount.ammo
            ammo_name = ammo.descriptor_name
            changes: dict = {}

            if "_AP_" in ammo_name:
                changes["penetration"] = ammo.penetration

            if "_HE_" in ammo_name:
                changes["he"] = ammo.he_damage
            elif "_AP_" not in ammo_name and ("_GatlingAir_" in ammo_name or "Gatling" in ammo_name):
                changes["he"] = ammo.he_damage

            if ammo.smoke is not None:
                changes["smoke_properties"] = ammo.smoke

            changes["suppress"] = max(weapon.suppress, ammo.suppress) * weapon.number_of_weapons
            changes["ground_range"] = max(weapon.ground_range, ammo.ground_max_range)
            changes["helicopter_range"] = max(weapon.helicopter_range, ammo.heli_max_range)
            changes["plane_range"] = max(weapon.plane_range, ammo.plane_max_range)

            weapon = replace(weapon, **changes)

        return weapon
