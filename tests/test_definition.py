# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for CapabilityDefinition.

Test Surface:
    - define: primitive, composite, prefixes, category, registry writes
    - define errors: duplicate, invalid composite, unknown constituent, usage
    - value_of: defaults, composite conjunction, short-circuit, totality
    - is_capability_kind / find / kinds
    - redefinition when allowed by config, cycle rejection
    - tier visibility of qualified keys, kind objects and assignment records
"""

import pytest

from bintraits import (
    CapabilityDefinition,
    CapabilityKind,
    CapabilityRegistry,
    CapabilityValue,
    CompositeRule,
    DuplicateDefinitionError,
    InvalidCompositeError,
    PrefixRegistry,
    PrimitiveRule,
    TraitsConfig,
    UnknownCapabilityError,
    UsageError,
)

ASSERTED = CapabilityValue.ASSERTED
UNASSERTED = CapabilityValue.UNASSERTED


class Bird:
    pass


class Fish:
    pass


@pytest.fixture
def definitions() -> CapabilityDefinition:
    return CapabilityDefinition(CapabilityRegistry(), PrefixRegistry())


def _assign(definitions, namespace, type_, kind):
    definitions.registry.write(namespace, "assignments", type_, kind.key)


# =============================================================================
# define
# =============================================================================


def test_define_when_primitive_then_kind_and_rule(definitions):
    kind = definitions.define("ns", "Fly")

    assert isinstance(kind, CapabilityKind)
    assert kind.key == "ns.Fly"
    assert kind.category == "Any"
    assert not kind.is_composite
    assert (kind.can_label, kind.cannot_label) == ("CanFly", "CannotFly")
    assert isinstance(definitions.rule(kind), PrimitiveRule)
    assert definitions.registry.read("ns", "definitions", "Fly") == {"ns.Fly"}


def test_define_when_prefixes_and_category_then_labels_follow(definitions):
    kind = definitions.define("ns", "Bird", category="Animal", prefixes=("Is", "Not"))

    assert kind.category == "Animal"
    assert kind.label(ASSERTED) == "IsBird"
    assert kind.label(UNASSERTED) == "NotBird"
    assert definitions.prefixes.get_prefix("ns", "Bird") == ("Is", "Not")


def test_define_when_prefix_installed_earlier_then_first_writer_wins(definitions):
    definitions.prefixes.set_prefix("ns", "Fly", ("Has", "Lacks"))

    kind = definitions.define("ns", "Fly", prefixes=("Is", "Not"))

    assert kind.can_label == "HasFly"


def test_define_when_composite_then_composites_written(definitions):
    definitions.define("ns", "Fly")
    definitions.define("ns", "Swim")

    kind = definitions.define("ns", "FlySwim", constituents=["Fly", "Swim"])

    assert kind.is_composite
    assert kind.constituents == ("Fly", "Swim")
    rule = definitions.rule(kind)
    assert isinstance(rule, CompositeRule)
    assert rule.constituents == ("ns.Fly", "ns.Swim")
    assert definitions.registry.read("ns", "composites", "ns.FlySwim") == {"ns.Fly", "ns.Swim"}


def test_define_when_name_exists_locally_then_duplicate_error(definitions):
    definitions.define("ns", "Fly")

    with pytest.raises(DuplicateDefinitionError) as exc_info:
        definitions.define("ns", "Fly")
    assert exc_info.value.details["existing"] == ["ns.Fly"]


def test_define_when_name_exists_globally_then_duplicate_error(definitions):
    definitions.define("a", "Fly")
    definitions.registry.merge_to_global("a")

    with pytest.raises(DuplicateDefinitionError):
        definitions.define("b", "Fly")


def test_define_when_name_exists_in_unmerged_namespace_then_allowed(definitions):
    definitions.define("a", "Fly")

    kind = definitions.define("b", "Fly")

    assert kind.key == "b.Fly"
    assert len(definitions) == 2


def test_define_when_one_constituent_then_invalid_composite(definitions):
    definitions.define("ns", "Fly")

    with pytest.raises(InvalidCompositeError):
        definitions.define("ns", "JustFly", constituents=["Fly"])
    assert not definitions.is_capability_kind("JustFly", "ns")


def test_define_when_constituent_unknown_then_unknown_capability(definitions):
    definitions.define("ns", "Fly")

    with pytest.raises(UnknownCapabilityError):
        definitions.define("ns", "FlyDig", constituents=["Fly", "Dig"])
    assert definitions.registry.read("ns", "definitions", "FlyDig") == set()


@pytest.mark.parametrize("name", ["", "1Fly", "Fly Swim", "a.b", None])
def test_define_when_name_invalid_then_usage_error(definitions, name):
    with pytest.raises(UsageError):
        definitions.define("ns", name)


def test_define_when_prefixes_invalid_then_usage_error(definitions):
    with pytest.raises(UsageError):
        definitions.define("ns", "Fly", prefixes=("Is", "not ok"))


def test_define_when_redefinition_allowed_then_replaced_and_assignments_kept(caplog):
    definitions = CapabilityDefinition(
        CapabilityRegistry(), PrefixRegistry(), TraitsConfig(allow_redefinition=True)
    )
    first = definitions.define("ns", "Fly")
    _assign(definitions, "ns", Bird, first)

    second = definitions.define("ns", "Fly", category="Ability")

    assert "Redefining capability 'Fly'" in caplog.text
    assert second.category == "Ability"
    assert definitions.kind("Fly", "ns").id == second.id
    assert len(definitions) == 1
    assert definitions.value_of("Fly", Bird, "ns") is ASSERTED


# =============================================================================
# value_of
# =============================================================================


def test_value_of_when_primitive_unassigned_then_unasserted(definitions):
    definitions.define("ns", "Fly")

    assert definitions.value_of("Fly", Bird, "ns") is UNASSERTED


def test_value_of_when_kind_unknown_then_unasserted(definitions):
    assert definitions.value_of("Ghost", Bird, "ns") is UNASSERTED
    assert definitions.value_of(42, Bird, "ns") is UNASSERTED


def test_value_of_accepts_kind_and_qualified_key(definitions):
    kind = definitions.define("ns", "Fly")
    _assign(definitions, "ns", Bird, kind)

    assert definitions.value_of(kind, Bird) is ASSERTED
    assert definitions.value_of("ns.Fly", Bird) is ASSERTED
    assert definitions.value_of("ns.Fly", Bird, "ns") is ASSERTED


def test_value_of_composite_is_conjunction(definitions):
    fly = definitions.define("ns", "Fly")
    swim = definitions.define("ns", "Swim")
    definitions.define("ns", "FlySwim", constituents=["Fly", "Swim"])

    for has_fly in (False, True):
        for has_swim in (False, True):
            t = type(f"T{has_fly}{has_swim}", (), {})
            if has_fly:
                _assign(definitions, "ns", t, fly)
            if has_swim:
                _assign(definitions, "ns", t, swim)
            expected = ASSERTED if has_fly and has_swim else UNASSERTED
            assert definitions.value_of("FlySwim", t, "ns") is expected


def test_value_of_composite_of_composite(definitions):
    for name in ("A", "B", "C"):
        _assign(definitions, "ns", Fish, definitions.define("ns", name))
    definitions.define("ns", "AB", constituents=["A", "B"])
    definitions.define("ns", "ABC", constituents=["AB", "C"])

    assert definitions.value_of("ABC", Fish, "ns") is ASSERTED
    assert definitions.value_of("ABC", Bird, "ns") is UNASSERTED


def test_value_of_composite_short_circuits_on_first_unasserted(definitions, monkeypatch):
    definitions.define("ns", "Fly")
    definitions.define("ns", "Swim")
    definitions.define("ns", "FlySwim", constituents=["Fly", "Swim"])

    seen = []
    real = definitions._evaluate

    def spy(key, type_, namespace):
        seen.append(key)
        return real(key, type_, namespace)

    monkeypatch.setattr(definitions, "_evaluate", spy)
    assert definitions.value_of("FlySwim", Bird, "ns") is UNASSERTED
    assert seen == ["ns.FlySwim", "ns.Fly"]


def test_value_of_does_not_consult_assignment_records_for_composite(definitions):
    definitions.define("ns", "Fly")
    definitions.define("ns", "Swim")
    definitions.define("ns", "FlySwim", constituents=["Fly", "Swim"])
    definitions.registry.write("ns", "assignments", Bird, "ns.FlySwim")

    assert definitions.value_of("FlySwim", Bird, "ns") is UNASSERTED


# =============================================================================
# Introspection helpers
# =============================================================================


def test_is_capability_kind(definitions):
    kind = definitions.define("ns", "Fly")

    assert definitions.is_capability_kind("Fly", "ns")
    assert definitions.is_capability_kind(kind)
    assert not definitions.is_capability_kind("Fly", "elsewhere")
    assert not definitions.is_capability_kind(Bird, "ns")
    assert "ns.Fly" in definitions


def test_find_when_visible_after_merge(definitions):
    definitions.define("a", "Fly")
    definitions.registry.merge_to_global("a")

    assert definitions.find("Fly", "b").key == "a.Fly"


def test_kind_when_unknown_then_error_details(definitions):
    with pytest.raises(UnknownCapabilityError) as exc_info:
        definitions.kind("Ghost", "ns")
    assert exc_info.value.details == {"namespace": "ns", "kind": "Ghost"}


def test_kinds_lists_local_and_global(definitions):
    definitions.define("a", "Fly")
    definitions.registry.merge_to_global("a")
    definitions.define("b", "Swim")

    assert definitions.kinds("b") == ["Fly", "Swim"]
    assert definitions.kinds("c") == ["Fly"]


def test_capability_value_enum():
    assert CapabilityValue.of(True) is ASSERTED
    assert CapabilityValue.of(False) is UNASSERTED
    assert ASSERTED.value == "asserted"


# =============================================================================
# Composite cycles
# =============================================================================


def _redefining() -> CapabilityDefinition:
    return CapabilityDefinition(
        CapabilityRegistry(), PrefixRegistry(), TraitsConfig(allow_redefinition=True)
    )


def test_define_when_redefinition_closes_cycle_then_invalid_composite():
    definitions = _redefining()
    a = definitions.define("ns", "A")
    definitions.define("ns", "B")
    definitions.define("ns", "C", constituents=["A", "B"])

    with pytest.raises(InvalidCompositeError) as exc_info:
        definitions.define("ns", "A", constituents=["C", "B"])

    assert exc_info.value.details["name"] == "A"
    assert definitions.kind("A", "ns").id == a.id
    assert isinstance(definitions.rule(a), PrimitiveRule)
    assert definitions.value_of("C", Bird, "ns") is UNASSERTED


def test_define_when_composite_lists_itself_then_invalid_composite():
    definitions = _redefining()
    definitions.define("ns", "A")
    definitions.define("ns", "B")

    with pytest.raises(InvalidCompositeError):
        definitions.define("ns", "A", constituents=["A", "B"])


def test_define_when_diamond_then_not_a_cycle():
    definitions = _redefining()
    for name in ("A", "B"):
        _assign(definitions, "ns", Fish, definitions.define("ns", name))
    definitions.define("ns", "AB", constituents=["A", "B"])
    definitions.define("ns", "BA", constituents=["B", "A"])

    definitions.define("ns", "Both", constituents=["AB", "BA"])

    assert definitions.value_of("Both", Fish, "ns") is ASSERTED


# =============================================================================
# Tier visibility
# =============================================================================


def test_find_when_qualified_key_of_unmerged_kind_then_none(definitions):
    kind = definitions.define("a", "Fly")

    assert definitions.find("a.Fly", "b") is None
    assert definitions.find(kind, "b") is None
    assert not definitions.is_capability_kind("a.Fly", "b")

    definitions.registry.merge_to_global("a")

    assert definitions.find("a.Fly", "b").id == kind.id
    assert definitions.find(kind, "b").id == kind.id


def test_kind_when_qualified_key_unreachable_then_unknown(definitions):
    definitions.define("a", "Fly")

    with pytest.raises(UnknownCapabilityError) as exc_info:
        definitions.kind("a.Fly", "b")
    assert exc_info.value.details == {"namespace": "b", "kind": "a.Fly"}


def test_find_when_stale_kind_object_then_current_entry():
    definitions = _redefining()
    old = definitions.define("ns", "A")
    definitions.define("ns", "B")
    definitions.define("ns", "X")

    new = definitions.define("ns", "A", constituents=["B", "X"])

    found = definitions.find(old, "ns")
    assert found.id == new.id
    assert found.is_composite
    assert definitions.is_composite(old, "ns")


def test_value_of_when_assignment_unmerged_then_private_to_namespace(definitions):
    kind = definitions.define("lib", "Fly")
    definitions.registry.merge_to_global("lib")
    _assign(definitions, "app", Bird, kind)

    assert definitions.value_of("Fly", Bird, "app") is ASSERTED
    assert definitions.value_of("Fly", Bird, "other") is UNASSERTED

    definitions.registry.merge_to_global("app")

    assert definitions.value_of("Fly", Bird, "other") is ASSERTED


def test_value_of_when_same_name_in_two_namespaces_then_records_kept_apart(definitions):
    a = definitions.define("a", "Fly")
    definitions.define("b", "Fly")
    _assign(definitions, "a", Bird, a)
    definitions.registry.merge_to_global("a")
    definitions.registry.merge_to_global("b")

    assert definitions.value_of("a.Fly", Bird, "c") is ASSERTED
    assert definitions.value_of("b.Fly", Bird, "c") is UNASSERTED


def test_definitions_sharing_registry_share_catalog():
    registry = CapabilityRegistry()
    first = CapabilityDefinition(registry, PrefixRegistry())
    second = CapabilityDefinition(registry, PrefixRegistry())
    kind = first.define("lib", "Fly")
    registry.merge_to_global("lib")

    assert second.kind("Fly", "app").id == kind.id
    assert len(second) == 1
