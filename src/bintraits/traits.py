# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from collections.abc import Hashable, Mapping, Sequence
from types import ModuleType

from .assignment import AssignmentEngine
from .config import DEFAULT_NAMESPACE, TraitsConfig
from .contracts import ContractRegistry, InterfaceChecker, InterfaceReport, Signature
from .definition import CapabilityDefinition
from .kinds import CapabilityKind, CapabilityValue
from .prefixes import PrefixRegistry
from .storage import CapabilityRegistry
from .syntax import parse_assign, parse_trait
from .trace import set_verbose, trace

__all__ = ("Namespace", "Traits")

Namespace = str | ModuleType


def _ns(namespace: Namespace | None) -> str:
    if namespace is None:
        return DEFAULT_NAMESPACE
    if isinstance(namespace, ModuleType):
        return namespace.__name__
    return namespace


def _lookup_ns(namespace: Namespace | None) -> str | None:
    # None lets kind objects and qualified keys resolve from their own namespace
    return None if namespace is None else _ns(namespace)


class Traits:
    """Entry point wiring one CapabilityRegistry into every component.

    Build one per process (or one per test). Namespaces are strings or
    modules; a module is keyed by its `__name__`.

    Usage:
        traits = Traits()
        traits.define("app", "Swim")
        traits.define("app", "Fly")
        traits.define("app", "Amphibious", constituents=["Swim", "Fly"])
        traits.assign("app", Frog, ["Swim", "Fly"])
        traits.value_of("Amphibious", Frog, namespace="app")  # ASSERTED
        traits.merge_to_global("app")
    """

    def __init__(
        self,
        config: TraitsConfig | None = None,
        registry: CapabilityRegistry | None = None,
    ):
        self.config = config or TraitsConfig()
        self.registry = registry if registry is not None else CapabilityRegistry()
        self.prefixes = PrefixRegistry(default=self.config.default_prefixes)
        self.definitions = CapabilityDefinition(self.registry, self.prefixes, self.config)
        self.assignments = AssignmentEngine(self.registry, self.definitions)
        self.contracts = ContractRegistry(self.registry, self.definitions)
        self.checker = InterfaceChecker(self.definitions, self.contracts)

        if self.config.verbose:
            set_verbose(True)

    # =========================================================================
    # Definition
    # =========================================================================

    def define(
        self,
        namespace: Namespace,
        name: str,
        category: str | None = None,
        prefixes: tuple[str, str] | None = None,
        constituents: Sequence[str] = (),
    ) -> CapabilityKind:
        """Define a capability kind. See `CapabilityDefinition.define`."""
        return self.definitions.define(_ns(namespace), name, category, prefixes, constituents)

    def trait(self, namespace: Namespace, declaration: str) -> CapabilityKind:
        """Define a kind from a declaration like "Fly as Ability prefix Is,Not"."""
        decl = parse_trait(declaration)
        return self.define(namespace, decl.name, decl.category, decl.prefixes, decl.constituents)

    def kind(
        self, name: str | CapabilityKind, namespace: Namespace | None = None
    ) -> CapabilityKind:
        return self.definitions.kind(name, _lookup_ns(namespace))

    def is_capability_kind(self, ref: object, namespace: Namespace | None = None) -> bool:
        return self.definitions.is_capability_kind(ref, _lookup_ns(namespace))

    def value_of(
        self,
        kind: str | CapabilityKind,
        type_: Hashable,
        namespace: Namespace | None = None,
    ) -> CapabilityValue:
        return self.definitions.value_of(kind, type_, _lookup_ns(namespace))

    def has(
        self,
        kind: str | CapabilityKind,
        type_: Hashable,
        namespace: Namespace | None = None,
    ) -> bool:
        """True when kind is ASSERTED for type_."""
        return self.value_of(kind, type_, namespace) is CapabilityValue.ASSERTED

    # =========================================================================
    # Assignment
    # =========================================================================

    def assign(
        self,
        namespace: Namespace,
        type_: Hashable,
        kinds: Sequence[str | CapabilityKind],
    ) -> list[CapabilityKind]:
        """Assign primitive kinds to type_. See `AssignmentEngine.assign`."""
        return self.assignments.assign(_ns(namespace), type_, kinds)

    def assign_decl(
        self,
        namespace: Namespace,
        declaration: str,
        types: Mapping[str, Hashable] | None = None,
    ) -> list[CapabilityKind]:
        """Assign from a declaration like "Duck with Fly,Swim".

        The type name is looked up in types; unknown names are used as-is.
        """
        decl = parse_assign(declaration)
        type_ = (types or {}).get(decl.type_name, decl.type_name)
        return self.assign(namespace, type_, decl.kinds)

    def traits_of(self, namespace: Namespace, type_: Hashable) -> set[str]:
        return self.assignments.traits_of(_ns(namespace), type_)

    # =========================================================================
    # Contracts
    # =========================================================================

    def register_contract(
        self,
        namespace: Namespace,
        kind: str | CapabilityKind,
        signature: Signature,
    ) -> Signature:
        return self.contracts.register_contract(_ns(namespace), kind, signature)

    def contracts_of(self, namespace: Namespace, kind: str | CapabilityKind) -> set[Signature]:
        return self.contracts.contracts_of(_ns(namespace), kind)

    def check(self, namespace: Namespace, type_: Hashable) -> InterfaceReport:
        """Check type_ implements the contracts of every kind it holds."""
        return self.checker.check(_ns(namespace), type_)

    # =========================================================================
    # Prefixes and publication
    # =========================================================================

    def get_prefix(self, namespace: Namespace, kind: str) -> tuple[str, str]:
        return self.prefixes.get_prefix(_ns(namespace), kind)

    def set_prefix(
        self, namespace: Namespace, kind: str, prefixes: tuple[str, str]
    ) -> tuple[str, str]:
        return self.prefixes.set_prefix(_ns(namespace), kind, prefixes)

    def merge_to_global(self, namespace: Namespace) -> int:
        """Publish namespace's local facts to the global tier (idempotent)."""
        ns = _ns(namespace)
        moved = self.registry.merge_to_global(ns)
        trace("merge", namespace=ns, entries=moved)
        return moved

    def init_traits(self, namespace: Namespace) -> int:
        """Call once at the end of a namespace's initialization to share its traits."""
        return self.merge_to_global(namespace)

    def __repr__(self) -> str:
        return f"Traits(kinds={len(self.definitions)}, registry={self.registry!r})"
