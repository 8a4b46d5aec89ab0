"""Descriptor tree model and generic accessors.

The external NDF parser emits a loosely-typed tree. This module gives it a
small tagged representation and the handful of lookups the extractors need:

    from warno_descriptor_extractor.tree import first, extract_value

    max_damage = extract_value(first(unit_node, "MaxDamages"))

Accessors never raise on absent data; they return ``None`` (or ``[]``) and
leave the "is this field required?" decision to the caller.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Union

from .codecs import last_path_segment
from .errors import MalformedToken

Scalar = Union[str, int, float, bool, None]


@dataclass(frozen=True, slots=True)
class Leaf:
    """A scalar value (number, string, boolean, reference path)."""

    value: Scalar


@dataclass(frozen=True, slots=True)
class Field:
    """One ``name = value`` member of an object."""

    name: str
    value: Node


@dataclass(frozen=True, slots=True)
class Object:
    """A descriptor instance, e.g. ``Descriptor_Unit_X is TEntityDescriptor(...)``."""

    name: str | None
    type: str | None
    children: tuple[Field, ...] = ()


@dataclass(frozen=True, slots=True)
class ListNode:
    items: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class Pair:
    key: Node
    value: Node


@dataclass(frozen=True, slots=True)
class MapNode:
    entries: tuple[Pair, ...] = ()


Node = Union[Leaf, Field, Object, ListNode, MapNode]


def _children(node: Node) -> tuple[Node, ...]:
    if isinstance(node, Object):
        return node.children
    if isinstance(node, Field):
        return (node.value,)
    if isinstance(node, ListNode):
        return node.items
    if isinstance(node, MapNode):
        nodes: list[Node] = []
        for pair in node.entries:
            nodes.append(pair.key)
            nodes.append(pair.value)
        return tuple(nodes)
    return ()


def _matches(node: Node, name: str) -> bool:
    if isinstance(node, Field):
        return node.name == name
    if isinstance(node, Object):
        return node.type == name
    return False


def iter_search(node: Node | None, name: str) -> Iterator[Node]:
    """Depth-first, pre-order scan of ``node``'s descendants.

    Fields match on their name, objects on their NDF type. Matched nodes are
    still descended into.
    """
    if node is None:
        return
    stack = list(reversed(_children(node)))
    while stack:
        current = stack.pop()
        if _matches(current, name):
            yield current
        stack.extend(reversed(_children(current)))


def search(node: Node | None, name: str) -> list[Node]:
    """Return every subtree under ``node`` matching ``name`` in encounter order."""
    return list(iter_search(node, name))


def first(node: Node | None, name: str) -> Node | None:
    """Return the first subtree under ``node`` matching ``name``, if any."""
    return next(iter_search(node, name), None)


def extract_value(result: Node | None) -> Scalar:
    """Return the scalar carried by a search result, or None."""
    if isinstance(result, Field):
        result = result.value
    if isinstance(result, Leaf):
        return result.value
    return None


def extract_values(result: Node | None) -> list[Node]:
    """Return the child values of a list (or map) search result."""
    if isinstance(result, Field):
        result = result.value
    if isinstance(result, ListNode):
        return list(result.items)
    if isinstance(result, MapNode):
        return [pair.value for pair in result.entries]
    return []


def extract_pairs(result: Node | None) -> list[tuple[Scalar, Scalar]]:
    """Return ``(key, value)`` scalar pairs of a map search result."""
    if isinstance(result, Field):
        result = result.value
    if not isinstance(result, MapNode):
        return []
    return [(extract_value(pair.key), extract_value(pair.value)) for pair in result.entries]


def extract_tuple_from_map(result: Node | None, key: str) -> Scalar:
    """Return the value paired with ``key`` in a map search result.

    Map keys are frequently reference paths (``$/GFX/Resources/Resource_X``),
    so a key also matches on its last path segment.
    """
    for raw_key, value in extract_pairs(result):
        if raw_key is None:
            continue
        raw_key = str(raw_key)
        if raw_key == key or last_path_segment(raw_key) == key:
            return value
    return None


def extract_reference(result: Node | None) -> str | None:
    """Return the reference path carried by a field or module selector.

    Handles both ``Field = $/Path/Id`` and
    ``Field = TModuleSelector(Default = $/Path/Id)``.
    """
    if isinstance(result, Field):
        result = result.value
    if isinstance(result, Leaf):
        return result.value if isinstance(result.value, str) else None
    if isinstance(result, Object) and result.children:
        value = extract_value(result.children[0])
        return value if isinstance(value, str) else None
    return None


def node_from_json(data: Any) -> Node:
    """Decode the parser's JSON encoding into nodes.

    Every JSON object carries a ``kind`` (``leaf``, ``field``, ``object``,
    ``list`` or ``map``); bare JSON scalars are treated as leaves.

    Raises:
        MalformedToken: If a JSON object has an unknown ``kind``
    """
    if not isinstance(data, dict):
        if isinstance(data, list):
            return ListNode(items=tuple(node_from_json(item) for item in data))
        return Leaf(value=data)

    kind = data.get("kind")
    if kind == "leaf":
        return Leaf(value=data.get("value"))
    if kind == "field":
        return Field(name=str(data.get("name", "")), value=node_from_json(data.get("value")))
    if kind == "object":
        children = []
        for child in data.get("children", []):
            decoded = node_from_json(child)
            if not isinstance(decoded, Field):
                raise MalformedToken(child, "a field node inside an object", data.get("name"))
            children.append(decoded)
        return Object(name=data.get("name"), type=data.get("type"), children=tuple(children))
    if kind == "list":
        return ListNode(items=tuple(node_from_json(item) for item in data.get("items", [])))
    if kind == "map":
        return MapNode(
            entries=tuple(
                Pair(key=node_from_json(entry.get("key")), value=node_from_json(entry.get("value")))
                for entry in data.get("entries", [])
            )
        )
    raise MalformedToken(kind, "one of leaf/field/object/list/map")
