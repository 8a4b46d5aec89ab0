"""Ammunition, missile and smoke descriptor extraction."""

from __future__ import annotations

import logging

from .base import DescriptorExtractorBase, DescriptorMap
from .codecs import (
    last_path_segment,
    parse_bool,
    parse_distance,
    parse_number,
    round2,
    round_half_up,
    strip_quotes,
)
from .models import AccuracyDataPoint, Ammo, Missile, Smoke
from .tree import Object, extract_pairs, extract_reference, extract_tuple_from_map, extract_value, first

logger = logging.getLogger(__name__)

# Damage families whose Arme index is an armour-piercing value.
_AP_FAMILY_PREFIX = "ap"


class MissileExtractor(DescriptorExtractorBase):
    def extract(self) -> Missile:
        return Missile(
            descriptor_name=self.descriptor_name,
            max_speed=self._distance("MaxSpeedGRU"),
            max_acceleration=self._distance("MaxAccelerationGRU"),
        )


class SmokeExtractor(DescriptorExtractorBase):
    def extract(self) -> Smoke:
        return Smoke(
            descriptor_name=self.descriptor_name,
            duration=self._number("TimeToLive"),
            radius=self._distance("Radius"),
        )


class AmmunitionExtractor(DescriptorExtractorBase):
    """Extracts one ``TAmmunitionDescriptor`` into an ``Ammo`` record.

    Missile and smoke sub-descriptors are resolved through the supplied
    indices; a reference missing from its index means the ammo simply has
    no missile/smoke properties.
    """

    def __init__(
        self,
        descriptor: Object,
        mapped_smoke: DescriptorMap | None = None,
        mapped_missiles: DescriptorMap | None = None,
    ):
        super().__init__(descriptor)
        self.mapped_smoke = mapped_smoke or {}
        self.mapped_missiles = mapped_missiles or {}

    def extract(self) -> Ammo:
        salvo_length = self._number("NbTirParSalves", default=1)
        time_between_shots = self._number("TempsEntreDeuxTirs")
        reload_time = self._number("TempsEntreDeuxSalves")
        time_between_salvos = round2((salvo_length - 1) * time_between_shots + reload_time)

        hit_modifiers = self._first("BaseHitValueModifiers")

        return Ammo(
            descriptor_name=self.descriptor_name,
            name=self._string("Name") or self.descriptor_name,
            aiming_time=self._number("TempsDeVisee"),
            ammunition_per_salvo=self._number("AffichageMunitionParSalve"),
            fires_left_to_right=parse_bool(self._value("TirGaucheADroite"), field="TirGaucheADroite"),
            ground_min_range=self._distance("PorteeMinimaleGRU"),
            ground_max_range=self._distance("PorteeMaximaleGRU"),
            heli_min_range=self._distance("PorteeMinimaleTBAGRU"),
            heli_max_range=self._distance("PorteeMaximaleTBAGRU"),
            plane_min_range=self._distance("PorteeMinimaleHAGRU"),
            plane_max_range=self._distance("PorteeMaximaleHAGRU"),
            he_damage=self._number("PhysicalDamages"),
            he_damage_radius=self._distance("RadiusSplashPhysicalDamages"),
            suppress=self._number("SuppressDamages"),
            suppress_damages_radius=self._distance("RadiusSplashSuppressDamages"),
            penetration=self._penetration(),
            insta_kill_at_max_range_armour=self._number("MaximumArmorForInstaKill"),
            static_accuracy=parse_number(extract_tuple_from_map(hit_modifiers, "Idling"), field="Idling") or 0,
            moving_accuracy=parse_number(extract_tuple_from_map(hit_modifiers, "Moving"), field="Moving") or 0,
            static_accuracy_over_distance=self._accuracy_over_distance("StaticHitProbabilityOverDistance"),
            moving_accuracy_over_distance=self._accuracy_over_distance("MovingHitProbabilityOverDistance"),
            salvo_length=salvo_length,
            time_between_shots=time_between_shots,
            reload_time=reload_time,
            time_between_salvos=time_between_salvos,
            rate_of_fire=self._rate_of_fire(time_between_shots, reload_time),
            true_rate_of_fire=(
                round_half_up(60 * salvo_length / time_between_salvos) if time_between_salvos > 0 else 0
            ),
            supply_cost_per_salvo=self._number("SupplyCost"),
            traits=tuple(self._strings("TraitsToken")),
            missile=self._missile(),
            smoke=self._smoke(),
        )

    def _penetration(self) -> float:
        """AP value from ``Arme = TDamageTypeRTTI(Family = "ap" Index = 18)``."""
        arme = self._first("Arme")
        if arme is None:
            return 0
        family = extract_value(first(arme, "Family"))
        if not isinstance(family, str) or not strip_quotes(family).startswith(_AP_FAMILY_PREFIX):
            return 0
        return parse_number(extract_value(first(arme, "Index")), field="Index") or 0

    @staticmethod
    def _rate_of_fire(time_between_shots: float, reload_time: float) -> int:
        if time_between_shots > 0:
            return round_half_up(60 / time_between_shots)
        if reload_time > 0:
            return round_half_up(60 / reload_time)
        return 0

    def _accuracy_over_distance(self, name: str) -> tuple[AccuracyDataPoint, ...] | None:
        result = self._first(name)
        if result is None:
            return None
        return tuple(
            AccuracyDataPoint(
                distance=parse_distance(distance, field=name) or 0,
                accuracy=parse_number(accuracy, field=name) or 0,
            )
            for distance, accuracy in extract_pairs(result)
        )

    def _resolve(self, field: str, index: DescriptorMap) -> Object | None:
        reference = extract_reference(self._first(field))
        if not reference:
            return None
        descriptor_id = last_path_segment(reference)
        descriptor = index.get(descriptor_id)
        if descriptor is None:
            logger.debug(f"{self.descriptor_name}: {field} {descriptor_id} not in index, skipping")
        return descriptor

    def _missile(self) -> Missile | None:
        descriptor = self._resolve("MissileDescriptor", self.mapped_missiles)
        if descriptor is None:
            return None
        return MissileExtractor(descriptor).extract()

    def _smoke(self) -> Smoke | None:
        descriptor = self._resolve("SmokeDescriptor", self.mapped_smoke)
        if descriptor is None:
            return None
        return SmokeExtractor(descriptor).extract()
