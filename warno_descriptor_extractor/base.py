from __future__ import annotations

from collections.abc import Mapping

from .codecs import parse_distance, parse_number, strip_quotes
from .errors import MissingRequiredField
from .tree import Node, Object, extract_value, extract_values, first

DescriptorMap = Mapping[str, Object]


class DescriptorExtractorBase:
    """Base implementation: the wrapped descriptor node and shared lookups.

    Subclasses implement ``extract()`` for one descriptor kind. All helpers
    search the wrapped node's subtree only.
    """

    def __init__(self, descriptor: Object):
        """Wrap one descriptor node.

        Args:
            descriptor: Top-level (or nested) descriptor object to extract from
        """
        self.descriptor = descriptor

    @property
    def descriptor_name(self) -> str:
        return self.descriptor.name or self.descriptor.type or ""

    def _first(self, name: str) -> Node | None:
        return first(self.descriptor, name)

    def _has(self, name: str) -> bool:
        return self._first(name) is not None

    def _value(self, name: str):
        """Scalar value of the first field named ``name``, or None."""
        return extract_value(self._first(name))

    def _string(self, name: str, default: str = "") -> str:
        value = self._value(name)
        if value is None:
            return default
        return strip_quotes(str(value))

    def _number(self, name: str, default: float = 0) -> float:
        """Numeric value of a field; ``default`` when absent.

        Raises:
            MalformedQuantity: If the field is present but not numeric
        """
        value = parse_number(self._value(name), field=name)
        if value is None:
            return default
        return value

    def _distance(self, name: str, default: float = 0) -> float:
        value = parse_distance(self._value(name), field=name)
        if value is None:
            return default
        return value

    def _strings(self, name: str) -> list[str]:
        """Quote-stripped string items of a list field (empty items dropped)."""
        items = []
        for node in extract_values(self._first(name)):
            value = extract_value(node)
            if value is None:
                continue
            text = strip_quotes(str(value))
            if text:
                items.append(text)
        return items

    def _require(self, name: str) -> Node:
        """Return the first match for ``name`` or fail the extraction.

        Raises:
            MissingRequiredField: If the field is absent
        """
        result = self._first(name)
        if result is None:
            raise MissingRequiredField(name, self.descriptor_name)
        return result
