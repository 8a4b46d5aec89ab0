"""Pytest configuration and shared fixtures for WARNO descriptor extractor tests."""

import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ndf_builders import ammo_descriptor, metres, mounted_weapon, obj, turret, unit_descriptor, weapon_manager  # noqa: E402
from warno_descriptor_extractor.diagnostics import reset_collector  # noqa: E402
from warno_descriptor_extractor.extractor import DescriptorIndex  # noqa: E402
from warno_descriptor_extractor.inputs import SpeedModifier  # noqa: E402


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: marks tests that cross the CLI/parser boundary")


@pytest.fixture(autouse=True)
def fresh_diagnostics():
    """Each test starts with an empty thread-local diagnostics collector."""
    reset_collector()
    yield
    reset_collector()


@pytest.fixture
def project_root():
    """Return the project root directory."""
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


@pytest.fixture
def ammo_index():
    """A small ammunition index: AP gun, HE gun, coax MG and a smoke launcher."""
    return {
        "Ammo_Gun_AP_120mm": ammo_descriptor(
            "Ammo_Gun_AP_120mm",
            PhysicalDamages=0,
            SuppressDamages=40,
            Arme=obj("TDamageTypeRTTI", Family="'ap'", Index=10),
            TempsEntreDeuxSalves=7.2,
            SupplyCost=15,
        ),
        "Ammo_Gun_HE_120mm": ammo_descriptor(
            "Ammo_Gun_HE_120mm",
            PhysicalDamages=5,
            SuppressDamages=60,
            Arme=obj("TDamageTypeRTTI", Family="'he'", Index=0),
            PorteeMaximaleGRU=metres(2275),
        ),
        "Ammo_MG_762mm": ammo_descriptor(
            "Ammo_MG_762mm",
            PhysicalDamages=1,
            SuppressDamages=20,
            Arme=obj("TDamageTypeRTTI", Family="'fmballe'", Index=1),
            NbTirParSalves=25,
            TempsEntreDeuxTirs=0.1,
            TempsEntreDeuxSalves=3,
            SupplyCost=2,
        ),
        "Ammo_SMOKE_Vehicle_Salvolength4": ammo_descriptor("Ammo_SMOKE_Vehicle_Salvolength4"),
    }


@pytest.fixture
def tank_weapon_manager():
    """Main gun (AP+HE in salvo 0), coax MG in salvo 1, hidden mount, smoke launcher."""
    return weapon_manager(
        "WeaponDescriptor_M1A1_Abrams_US",
        [21, 2000, -1],
        turret(
            mounted_weapon("Ammo_Gun_AP_120mm", salvo_index=0),
            mounted_weapon("Ammo_Gun_HE_120mm", salvo_index=0),
            rotation_speed=40,
        ),
        turret(
            mounted_weapon("Ammo_MG_762mm", salvo_index=1, nb_weapons=2),
            mounted_weapon("Ammo_MG_762mm", salvo_index=1, show=False),
            mounted_weapon("Ammo_SMOKE_Vehicle_Salvolength4", salvo_index=2),
        ),
    )


@pytest.fixture
def descriptor_index(ammo_index, tank_weapon_manager):
    return DescriptorIndex(
        ammo=ammo_index,
        weapons={tank_weapon_manager.name: tank_weapon_manager},
    )


@pytest.fixture
def speed_modifiers():
    return [
        SpeedModifier.model_validate({"name": "Forest", "movementTypes": {"Track": {"value": 0.5}}}),
        SpeedModifier.model_validate({"name": "Road", "movementTypes": {"Wheel": {"value": 1.5}}}),
    ]


@pytest.fixture
def tank_descriptor(tank_weapon_manager):
    return unit_descriptor(weapon_manager_id=tank_weapon_manager.name)
