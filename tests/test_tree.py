"""Tests for the descriptor tree model and accessors."""

import pytest

from ndf_builders import obj, to_json
from warno_descriptor_extractor.errors import MalformedToken
from warno_descriptor_extractor.tree import (
    Field,
    Leaf,
    ListNode,
    MapNode,
    Object,
    extract_pairs,
    extract_reference,
    extract_tuple_from_map,
    extract_value,
    extract_values,
    first,
    node_from_json,
    search,
)


class TestSearch:
    """Depth-first search over fields and object types."""

    def test_matches_fields_by_name_in_encounter_order(self):
        root = obj(
            "TEntityDescriptor",
            name="Descriptor_Unit_X",
            ModulesDescriptors=[
                obj("TModuleA", Value=1, Nested=obj("TInner", Value=2)),
                obj("TModuleB", Value=3),
            ],
        )

        values = [extract_value(result) for result in search(root, "Value")]

        assert values == [1, 2, 3]

    def test_matches_objects_by_type(self):
        inner = obj("TDiveBombAttackStrategyDescriptor", Speed=1)
        root = obj("TEntityDescriptor", Modules=[obj("TAirplaneModuleDescriptor", Strategy=inner)])

        assert search(root, "TDiveBombAttackStrategyDescriptor") == [inner]

    def test_root_itself_is_not_a_match(self):
        root = obj("TEntityDescriptor", name="Descriptor_Unit_X")
        assert search(root, "TEntityDescriptor") == []

    def test_descends_into_matched_nodes(self):
        root = obj("TRoot", Outer=obj("TWrapper", Outer=5))

        results = search(root, "Outer")

        assert len(results) == 2
        assert extract_value(results[1]) == 5

    def test_searches_map_keys_and_values(self):
        root = obj("TRoot", Table={"key": obj("TMapped", Hit=7)})
        assert extract_value(first(root, "Hit")) == 7

    def test_absent_name_gives_empty_results(self):
        root = obj("TRoot", A=1)
        assert search(root, "B") == []
        assert first(root, "B") is None
        assert search(None, "A") == []


class TestAccessors:
    """Value, list, map and reference accessors."""

    def test_extract_value(self):
        assert extract_value(Field("A", Leaf(3))) == 3
        assert extract_value(Leaf("x")) == "x"
        assert extract_value(Field("A", ListNode())) is None
        assert extract_value(None) is None

    def test_extract_values_from_list_and_map(self):
        assert extract_values(Field("L", ListNode((Leaf(1), Leaf(2))))) == [Leaf(1), Leaf(2)]
        table = obj("T", Salves={"0": 4, "1": 8}).children[0]
        assert [extract_value(item) for item in extract_values(table)] == [4, 8]
        assert extract_values(Field("A", Leaf(1))) == []

    def test_extract_pairs(self):
        field = obj("T", Table={"a": 1, "b": 2}).children[0]
        assert extract_pairs(field) == [("a", 1), ("b", 2)]
        assert extract_pairs(Field("A", Leaf(1))) == []

    def test_extract_tuple_from_map_matches_last_path_segment(self):
        field = obj("T", Resources={"$/GFX/Resources/Resource_CommandPoints": 175}).children[0]

        assert extract_tuple_from_map(field, "Resource_CommandPoints") == 175
        assert extract_tuple_from_map(field, "$/GFX/Resources/Resource_CommandPoints") == 175
        assert extract_tuple_from_map(field, "Resource_Fuel") is None

    def test_extract_reference_from_plain_field(self):
        field = obj("T", WeaponManager="$/GFX/Weapon/WeaponDescriptor_X").children[0]
        assert extract_reference(field) == "$/GFX/Weapon/WeaponDescriptor_X"

    def test_extract_reference_from_module_selector(self):
        selector = obj("TModuleSelector", Default="$/GFX/Weapon/WeaponDescriptor_X")
        field = obj("T", WeaponManager=selector).children[0]
        assert extract_reference(field) == "$/GFX/Weapon/WeaponDescriptor_X"

    def test_extract_reference_ignores_non_strings(self):
        assert extract_reference(Field("A", Leaf(3))) is None
        assert extract_reference(None) is None


class TestNodeFromJson:
    """Decoding the parser's JSON encoding."""

    def test_round_trips_a_descriptor(self):
        descriptor = obj(
            "TAmmunitionDescriptor",
            name="Ammo_X",
            Name="'X'",
            TraitsToken=["'KE'", "'MOTION'"],
            BaseHitValueModifiers={"EBaseHitValueModifier/Idling": 50},
            Arme=obj("TDamageTypeRTTI", Family="'ap'", Index=18),
        )

        decoded = node_from_json(to_json(descriptor))

        assert decoded == descriptor
        assert extract_value(first(decoded, "Index")) == 18

    def test_bare_scalars_and_lists(self):
        assert node_from_json(5) == Leaf(5)
        assert node_from_json(None) == Leaf(None)
        assert node_from_json([1, "a"]) == ListNode((Leaf(1), Leaf("a")))

    def test_empty_map(self):
        assert node_from_json({"kind": "map", "entries": []}) == MapNode()

    def test_object_defaults(self):
        decoded = node_from_json({"kind": "object", "type": "TThing"})
        assert decoded == Object(name=None, type="TThing")

    def test_unknown_kind_raises(self):
        with pytest.raises(MalformedToken):
            node_from_json({"kind": "tuple", "items": []})

    def test_non_field_object_child_raises(self):
        with pytest.raises(MalformedToken):
            node_from_json({"kind": "object", "name": "X", "type": "T", "children": [{"kind": "leaf", "value": 1}]})
