# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, Sequence

from .config import DEFAULT_NAMESPACE, TraitsConfig
from .errors import (
    DuplicateDefinitionError,
    InvalidCompositeError,
    UnknownCapabilityError,
    UsageError,
)
from .kinds import CapabilityKind, CapabilityValue, CompositeRule, PrimitiveRule
from .prefixes import PrefixRegistry
from .storage import CapabilityRegistry
from .trace import trace

__all__ = ("CapabilityDefinition",)

logger = logging.getLogger(__name__)


class CapabilityDefinition:
    """Defines capability kinds and evaluates their introspection rules.

    The kind catalog and rule table live in the injected registry. A kind is
    only reachable from a namespace through the `definitions` map tiers,
    whether it is referenced by name, qualified key or CapabilityKind object.
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        prefixes: PrefixRegistry,
        config: TraitsConfig | None = None,
    ):
        self.registry = registry
        self.prefixes = prefixes
        self.config = config or TraitsConfig()

    def define(
        self,
        namespace: str,
        name: str,
        category: str | None = None,
        prefixes: tuple[str, str] | None = None,
        constituents: Sequence[str] = (),
    ) -> CapabilityKind:
        """Register a new capability kind in namespace's local tier.

        Args:
            namespace: Defining namespace
            name: Kind identifier, e.g. "Fly"
            category: Parent category (config default if None)
            prefixes: (positive, negative) labels; first writer wins
            constituents: Names of two or more existing kinds for a composite

        Returns:
            The defined CapabilityKind

        Raises:
            UsageError: name or prefixes are not identifiers
            DuplicateDefinitionError: name already defined in a reachable tier
            InvalidCompositeError: exactly one constituent given, or the
                constituents depend on the kind being defined
            UnknownCapabilityError: a constituent is not defined
        """
        if not isinstance(name, str) or not name.isidentifier():
            raise UsageError(f"Invalid capability name {name!r}", details={"name": name})
        if prefixes is not None and not (
            len(prefixes) == 2 and all(isinstance(p, str) and p.isidentifier() for p in prefixes)
        ):
            raise UsageError(f"Invalid prefixes {prefixes!r}", details={"prefixes": prefixes})

        existing = self.registry.read(namespace, "definitions", name)
        if existing:
            if not self.config.allow_redefinition:
                raise DuplicateDefinitionError(
                    f"Capability '{name}' already defined",
                    details={"namespace": namespace, "existing": sorted(existing)},
                )
            logger.warning(f"Redefining capability '{name}' in namespace '{namespace}'")

        constituents = tuple(constituents)
        if len(constituents) == 1:
            raise InvalidCompositeError(
                f"Composite capability '{name}' needs at least two constituents, got 1",
                details={"name": name, "constituents": list(constituents)},
            )
        part_keys = tuple(self.kind(c, namespace).key for c in constituents)

        key = f"{namespace}.{name}"
        if part_keys and self._reaches(part_keys, key):
            raise InvalidCompositeError(
                f"Composite capability '{name}' would depend on itself",
                details={"name": name, "constituents": list(part_keys)},
            )

        if prefixes is None:
            pos, neg = self.prefixes.get_prefix(namespace, name)
        else:
            pos, neg = self.prefixes.set_prefix(namespace, name, prefixes)

        kind = CapabilityKind(
            name=name,
            namespace=namespace,
            category=category or self.config.default_category,
            positive_prefix=pos,
            negative_prefix=neg,
            constituents=constituents,
        )

        self.registry.write(namespace, "definitions", name, kind.key)
        if part_keys:
            self.registry.write(namespace, "composites", kind.key, set(part_keys))
            rule = CompositeRule(kind=kind, constituents=part_keys)
        else:
            rule = PrimitiveRule(kind=kind)
        self.registry.catalog(rule)

        trace(
            "define",
            namespace=namespace,
            kind=name,
            category=kind.category,
            variants=(kind.can_label, kind.cannot_label),
            constituents=list(constituents),
        )
        return kind

    def _reaches(self, keys: Iterable[str], target: str) -> bool:
        """True if target is one of keys or a constituent of them, transitively."""
        seen: set[str] = set()
        stack = list(keys)
        while stack:
            key = stack.pop()
            if key == target:
                return True
            if key in seen:
                continue
            seen.add(key)
            rule = self.registry.rule(key)
            if isinstance(rule, CompositeRule):
                stack.extend(rule.constituents)
        return False

    def kind(self, ref: str | CapabilityKind, namespace: str | None = None) -> CapabilityKind:
        """Resolve a kind name (or qualified key) reachable from namespace.

        Raises:
            UnknownCapabilityError: no such kind in local or global tier
        """
        found = self.find(ref, namespace)
        if found is None:
            raise UnknownCapabilityError(
                f"Capability '{ref}' is not defined",
                details={"namespace": _scope(ref, namespace), "kind": str(ref)},
            )
        return found

    def find(
        self, ref: str | CapabilityKind, namespace: str | None = None
    ) -> CapabilityKind | None:
        """Like `kind` but returns None for unknown kinds.

        The current catalog entry is returned, so a kind object held across a
        redefinition resolves to the new kind.
        """
        if isinstance(ref, CapabilityKind):
            name, key = ref.name, ref.key
        elif isinstance(ref, str):
            name = ref.rpartition(".")[2]
            key = ref if "." in ref else None
        else:
            return None

        namespace = _scope(ref, namespace)
        keys = self.registry.gather(namespace, "definitions", name)
        if key is None:
            own = f"{namespace}.{name}"
            # Same name published by several namespaces: own first, then stable order
            key = own if own in keys else min(keys, default=None)
        if key not in keys:
            return None
        return self.registry.cataloged(key)

    def is_capability_kind(self, ref: object, namespace: str | None = None) -> bool:
        """Check ref names a defined capability kind."""
        return self.find(ref, namespace) is not None  # type: ignore[arg-type]

    def is_composite(self, ref: str | CapabilityKind, namespace: str | None = None) -> bool:
        found = self.find(ref, namespace)
        return found is not None and found.is_composite

    def rule(self, kind: CapabilityKind) -> PrimitiveRule | CompositeRule:
        return self.registry.rule(kind.key)

    def value_of(
        self,
        kind: str | CapabilityKind,
        type_: Hashable,
        namespace: str | None = None,
    ) -> CapabilityValue:
        """Evaluate kind for type as seen from namespace.

        Total: unknown kinds are UNASSERTED. Primitive kinds read the type's
        assignment records through the namespace's tiers, so an unpublished
        assignment is invisible to other namespaces.
        """
        found = self.find(kind, namespace)
        if found is None:
            return CapabilityValue.UNASSERTED
        return self._evaluate(found.key, type_, _scope(kind, namespace))

    def _evaluate(self, key: str, type_: Hashable, namespace: str) -> CapabilityValue:
        rule = self.registry.rule(key)
        if rule is None:
            return CapabilityValue.UNASSERTED
        if isinstance(rule, PrimitiveRule):
            return rule.evaluate(self.registry.gather(namespace, "assignments", type_))
        for part in rule.constituents:
            if self._evaluate(part, type_, namespace) is CapabilityValue.UNASSERTED:
                return CapabilityValue.UNASSERTED
        return CapabilityValue.ASSERTED

    def kinds(self, namespace: str | None = None) -> list[str]:
        """Names of every kind reachable from namespace."""
        return sorted(self.registry.table(namespace or DEFAULT_NAMESPACE, "definitions"))

    def __len__(self) -> int:
        return self.registry.kind_count()

    def __contains__(self, ref: object) -> bool:
        return self.is_capability_kind(ref)

    def __repr__(self) -> str:
        return f"CapabilityDefinition(count={len(self)})"


def _scope(ref: object, namespace: str | None) -> str:
    """Namespace a lookup runs from.

    Without an explicit namespace, a CapabilityKind or qualified key is looked
    up from its own namespace and a bare name from the default namespace.
    """
    if namespace:
        return namespace
    if isinstance(ref, CapabilityKind):
        return ref.namespace
    if isinstance(ref, str) and "." in ref:
        return ref.rpartition(".")[0]
    return DEFAULT_NAMESPACE
