"""Tests for mounted weapon extraction."""

import pytest

from ndf_builders import mounted_weapon, obj
from warno_descriptor_extractor.errors import UnresolvedReference
from warno_descriptor_extractor.mounted_weapons import MountedWeaponExtractor


def test_resolves_ammo(ammo_index):
    mounted = MountedWeaponExtractor(
        mounted_weapon("Ammo_MG_762mm", salvo_index=1, nb_weapons=2),
        ammo_index,
    ).extract()

    assert mounted.ammo.descriptor_name == "Ammo_MG_762mm"
    assert mounted.number_of_weapons == 2
    assert mounted.salvo_index == 1
    assert mounted.show_interface is True


def test_defaults_when_fields_absent(ammo_index):
    descriptor = obj("TMountedWeaponDescriptor", Ammunition="$/GFX/Weapon/Ammo_Gun_AP_120mm")

    mounted = MountedWeaponExtractor(descriptor, ammo_index).extract()

    assert mounted.number_of_weapons == 1
    assert mounted.salvo_index == 0
    assert mounted.show_interface is True


def test_hidden_mount(ammo_index):
    mounted = MountedWeaponExtractor(mounted_weapon("Ammo_MG_762mm", show=False), ammo_index).extract()
    assert mounted.show_interface is False


def test_ammunition_id_uses_last_path_segment(ammo_index):
    extractor = MountedWeaponExtractor(mounted_weapon("Ammo_Gun_HE_120mm"), ammo_index)
    assert extractor.ammunition_id() == "Ammo_Gun_HE_120mm"


def test_unknown_ammo_raises(ammo_index):
    with pytest.raises(UnresolvedReference) as excinfo:
        MountedWeaponExtractor(mounted_weapon("Ammo_Missing"), ammo_index).extract()

    assert excinfo.value.reference == "Ammo_Missing"
    assert excinfo.value.index == "ammunition"


def test_missing_ammunition_field_raises(ammo_index):
    with pytest.raises(UnresolvedReference):
        MountedWeaponExtractor(obj("TMountedWeaponDescriptor", NbWeapons=1), ammo_index).extract()
