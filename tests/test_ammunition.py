"""Tests for ammunition, missile and smoke extraction."""

import pytest

from ndf_builders import ammo_descriptor, metres, obj
from warno_descriptor_extractor.ammunition import AmmunitionExtractor, MissileExtractor, SmokeExtractor
from warno_descriptor_extractor.errors import MalformedQuantity
from warno_descriptor_extractor.models import AccuracyDataPoint


class TestAmmunitionExtractor:
    def test_reads_static_fields(self):
        ammo = AmmunitionExtractor(ammo_descriptor("Ammo_Gun_AP_120mm")).extract()

        assert ammo.descriptor_name == "Ammo_Gun_AP_120mm"
        assert ammo.name == "Ammo_Gun_AP_120mm"
        assert ammo.aiming_time == 1.5
        assert ammo.ground_max_range == 2100
        assert ammo.heli_max_range == 1750
        assert ammo.suppress_damages_radius == 50
        assert ammo.penetration == 18
        assert ammo.static_accuracy == 50
        assert ammo.moving_accuracy == 20
        assert ammo.fires_left_to_right is False
        assert ammo.traits == ("KE",)

    def test_derived_timings_for_single_shot_gun(self):
        ammo = AmmunitionExtractor(ammo_descriptor("Ammo_Gun", TempsEntreDeuxSalves=7.2)).extract()

        assert ammo.time_between_salvos == 7.2
        # No time between shots: rate of fire falls back to the reload time
        assert ammo.rate_of_fire == 8
        assert ammo.true_rate_of_fire == 8

    def test_derived_timings_for_salvo_weapon(self):
        ammo = AmmunitionExtractor(
            ammo_descriptor("Ammo_MG", NbTirParSalves=25, TempsEntreDeuxTirs=0.1, TempsEntreDeuxSalves=3)
        ).extract()

        assert ammo.time_between_salvos == 5.4
        assert ammo.rate_of_fire == 600
        assert ammo.true_rate_of_fire == 278

    def test_no_timings_gives_zero_rates(self):
        ammo = AmmunitionExtractor(ammo_descriptor("Ammo_Static", TempsEntreDeuxSalves=0)).extract()

        assert ammo.rate_of_fire == 0
        assert ammo.true_rate_of_fire == 0

    def test_non_ap_family_has_no_penetration(self):
        ammo = AmmunitionExtractor(
            ammo_descriptor("Ammo_HE", Arme=obj("TDamageTypeRTTI", Family="'he'", Index=3))
        ).extract()
        assert ammo.penetration == 0

    def test_missing_name_falls_back_to_descriptor(self):
        ammo = AmmunitionExtractor(ammo_descriptor("Ammo_Unnamed", Name="''")).extract()
        assert ammo.name == "Ammo_Unnamed"

    def test_accuracy_over_distance(self):
        ammo = AmmunitionExtractor(
            ammo_descriptor(
                "Ammo_ATGM",
                StaticHitProbabilityOverDistance={metres(0): 0.6, metres(2000): 0.85},
            )
        ).extract()

        assert ammo.static_accuracy_over_distance == (
            AccuracyDataPoint(distance=0, accuracy=0.6),
            AccuracyDataPoint(distance=2000, accuracy=0.85),
        )
        assert ammo.moving_accuracy_over_distance is None

    def test_resolves_missile_and_smoke(self):
        missile = obj(
            "TMissileDescriptor",
            name="Missile_TOW2",
            MaxSpeedGRU=metres(900),
            MaxAccelerationGRU=metres(600),
        )
        smoke = obj("TSmokeDescriptor", name="Smoke_Arty", TimeToLive=45, Radius=metres(80))
        descriptor = ammo_descriptor(
            "Ammo_TOW2",
            MissileDescriptor="$/GFX/Missile/Missile_TOW2",
            SmokeDescriptor="$/GFX/Smoke/Smoke_Arty",
        )

        ammo = AmmunitionExtractor(
            descriptor,
            mapped_smoke={"Smoke_Arty": smoke},
            mapped_missiles={"Missile_TOW2": missile},
        ).extract()

        assert ammo.missile.max_speed == 900
        assert ammo.missile.max_acceleration == 600
        assert ammo.smoke.duration == 45
        assert ammo.smoke.radius == 80

    def test_unindexed_missile_gives_none(self):
        descriptor = ammo_descriptor("Ammo_TOW2", MissileDescriptor="$/GFX/Missile/Missile_Unknown")
        assert AmmunitionExtractor(descriptor).extract().missile is None

    def test_malformed_range_raises(self):
        descriptor = ammo_descriptor("Ammo_Bad", PorteeMaximaleGRU="((far) * Metre)")
        with pytest.raises(MalformedQuantity):
            AmmunitionExtractor(descriptor).extract()

    def test_to_dict_uses_camel_case(self):
        data = AmmunitionExtractor(ammo_descriptor("Ammo_Gun")).extract().to_dict()

        assert data["descriptorName"] == "Ammo_Gun"
        assert data["groundMaxRange"] == 2100
        assert data["supplyCostPerSalvo"] == 10
        assert data["traits"] == ["KE"]
        assert data["missile"] is None


class TestSubDescriptors:
    def test_missile_defaults_to_zero(self):
        missile = MissileExtractor(obj("TMissileDescriptor", name="Missile_X")).extract()
        assert missile.max_speed == 0
        assert missile.descriptor_name == "Missile_X"

    def test_smoke(self):
        smoke = SmokeExtractor(obj("TSmokeDescriptor", name="Smoke_X", TimeToLive=30, Radius=50)).extract()
        assert (smoke.duration, smoke.radius) == (30, 50)
