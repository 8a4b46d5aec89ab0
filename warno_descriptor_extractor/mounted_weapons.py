from __future__ import annotations

from .ammunition import AmmunitionExtractor
from .base import DescriptorExtractorBase, DescriptorMap
from .codecs import last_path_segment, parse_bool
from .errors import UnresolvedReference
from .models import MountedWeapon
from .tree import Object, extract_reference


class MountedWeaponExtractor(DescriptorExtractorBase):
    """Extracts one ``TMountedWeaponDescriptor`` with its resolved ammunition."""

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

    def ammunition_id(self) -> str | None:
        reference = extract_reference(self._first("Ammunition"))
        return last_path_segment(reference) if reference else None

    def extract(self) -> MountedWeapon:
        """Build the mounted weapon record.

        Raises:
            UnresolvedReference: If the ammunition reference is missing or
                points outside the ammo index
        """
        ammo_id = self.ammunition_id()
        ammo_descriptor = self.mapped_ammo.get(ammo_id) if ammo_id else None
        if ammo_descriptor is None:
            raise UnresolvedReference(ammo_id, "ammunition", self.descriptor.name)

        ammo = AmmunitionExtractor(ammo_descriptor, self.mapped_smoke, self.mapped_missiles).extract()

        salvo_index = int(self._number("SalvoStockIndex"))
        show_interface = parse_bool(self._value("ShowInInterface"), default=True, field="ShowInInterface")

        return MountedWeapon(
            ammo=ammo,
            number_of_weapons=int(self._number("NbWeapons", default=1)),
            salvo_index=salvo_index,
            show_interface=show_interface,
        )
