"""Semantic validation of extracted units.

Checks that a ``Unit`` satisfies the invariants downstream consumers rely
on (armour domain, unique salvo groups, clean specialities, ...). Useful as
a sanity pass after a game patch changes descriptor layouts.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import Unit
from .units import EXCLUDED_SPECIALITY
from .weapons import SMOKE_LAUNCHER_AMMO_MARKER


@dataclass
class ValidationResult:
    """Result of a validation run."""

    valid: bool = True
    issues: list[dict] = field(default_factory=list)
    warnings: list[dict] = field(default_factory=list)
    checks_passed: int = 0
    checks_failed: int = 0
    checks_warned: int = 0

    def add_issue(self, check: str, message: str, details: dict | None = None):
        """Add a validation issue (failure)."""
        issue = {"check": check, "message": message}
        if details:
            issue["details"] = details
        self.issues.append(issue)
        self.checks_failed += 1
        self.valid = False

    def add_warning(self, check: str, message: str, details: dict | None = None):
        """Add a validation warning (non-critical)."""
        warning = {"check": check, "message": message}
        if details:
            warning["details"] = details
        self.warnings.append(warning)
        self.checks_warned += 1

    def add_pass(self):
        self.checks_passed += 1

    def merge(self, other: ValidationResult):
        """Merge another result into this one."""
        self.issues.extend(other.issues)
        self.warnings.extend(other.warnings)
        self.checks_passed += other.checks_passed
        self.checks_failed += other.checks_failed
        self.checks_warned += other.checks_warned
        if not other.valid:
            self.valid = False

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "valid": self.valid,
            "issues": self.issues,
            "warnings": self.warnings,
            "summary": {
                "checks_passed": self.checks_passed,
                "checks_failed": self.checks_failed,
                "checks_warned": self.checks_warned,
                "total_checks": self.checks_passed + self.checks_failed,
            },
        }


def _is_valid_armour(value: float) -> bool:
    if value in (0, 0.5):
        return True
    return value >= 1 and float(value).is_integer()


class UnitValidator:
    """Validates extracted units against the record invariants."""

    def validate(self, unit: Unit) -> ValidationResult:
        result = ValidationResult()
        for check in (
            self._check_armour,
            self._check_salvo_indices,
            self._check_specialities,
            self._check_smoke_launchers,
            self._check_ranges,
            self._check_terrain_speeds,
        ):
            check(unit, result)
        return result

    def validate_all(self, units: list[Unit]) -> ValidationResult:
        combined = ValidationResult()
        for unit in units:
            combined.merge(self.validate(unit))
        return combined

    def _check_armour(self, unit: Unit, result: ValidationResult) -> None:
        facings = {
            "front": unit.front_armor,
            "side": unit.side_armor,
            "rear": unit.rear_armor,
            "top": unit.top_armor,
        }
        bad = {facing: value for facing, value in facings.items() if not _is_valid_armour(value)}
        if bad:
            result.add_issue(
                "armour_domain",
                f"{unit.descriptor_name}: armour outside 0 / 0.5 / whole numbers",
                details=bad,
            )
        else:
            result.add_pass()

    def _check_salvo_indices(self, unit: Unit, result: ValidationResult) -> None:
        indices = [weapon.salvo_index for weapon in unit.weapons]
        if len(indices) != len(set(indices)):
            result.add_issue(
                "salvo_index_unique",
                f"{unit.descriptor_name}: duplicate weapon salvo indices",
                details={"salvo_indices": indices},
            )
        elif indices != sorted(indices):
            result.add_warning(
                "salvo_index_order",
                f"{unit.descriptor_name}: weapons not ordered by salvo index",
                details={"salvo_indices": indices},
            )
        else:
            result.add_pass()

    def _check_specialities(self, unit: Unit, result: ValidationResult) -> None:
        dirty = [
            speciality
            for speciality in unit.specialities
            if speciality == EXCLUDED_SPECIALITY or "'" in speciality or '"' in speciality
        ]
        if dirty:
            result.add_issue(
                "specialities_clean",
                f"{unit.descriptor_name}: specialities contain quotes or '{EXCLUDED_SPECIALITY}'",
                details={"specialities": dirty},
            )
        else:
            result.add_pass()

    def _check_smoke_launchers(self, unit: Unit, result: ValidationResult) -> None:
        launchers = [
            weapon.ammo_descriptor_name
            for weapon in unit.weapons
            if SMOKE_LAUNCHER_AMMO_MARKER in weapon.ammo_descriptor_name
        ]
        if launchers:
            result.add_issue(
                "smoke_launcher_excluded",
                f"{unit.descriptor_name}: smoke launcher listed as a weapon",
                details={"ammo": launchers},
            )
        else:
            result.add_pass()

    def _check_ranges(self, unit: Unit, result: ValidationResult) -> None:
        negative = [
            weapon.weapon_name
            for weapon in unit.weapons
            if min(weapon.ground_range, weapon.helicopter_range, weapon.plane_range) < 0
        ]
        if negative:
            result.add_issue(
                "ranges_non_negative",
                f"{unit.descriptor_name}: negative weapon range",
                details={"weapons": negative},
            )
        else:
            result.add_pass()

    def _check_terrain_speeds(self, unit: Unit, result: ValidationResult) -> None:
        if unit.speeds_for_terrains is None:
            result.add_pass()
            return
        negative = [terrain.name for terrain in unit.speeds_for_terrains if terrain.speed < 0]
        if negative:
            result.add_issue(
                "terrain_speed_non_negative",
                f"{unit.descriptor_name}: negative terrain speed",
                details={"terrains": negative},
            )
        elif not unit.speeds_for_terrains and unit.speed > 0:
            result.add_warning(
                "terrain_speed_coverage",
                f"{unit.descriptor_name}: no speed modifier matched its movement type",
            )
        else:
            result.add_pass()
