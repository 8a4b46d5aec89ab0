"""WARNO descriptor extraction package.

The main entrypoint is `warno_descriptor_extractor.DescriptorExtractor`;
the per-descriptor extractors live in their own modules.
"""

from .extractor import DescriptorExtractor, DescriptorIndex
from .models import Unit, Weapon

__all__ = ["DescriptorExtractor", "DescriptorIndex", "Unit", "Weapon"]
