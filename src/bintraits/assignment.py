# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from collections.abc import Hashable, Sequence

from .definition import CapabilityDefinition
from .errors import CompositeAssignmentError
from .kinds import CapabilityKind
from .storage import CapabilityRegistry
from .trace import trace

__all__ = ("AssignmentEngine", "type_name")

logger = logging.getLogger(__name__)


def type_name(type_: Hashable) -> str:
    """Readable name for a type identifier (class or plain key)."""
    return getattr(type_, "__qualname__", None) or str(type_)


class AssignmentEngine:
    """Records that concrete types possess primitive capabilities."""

    def __init__(self, registry: CapabilityRegistry, definitions: CapabilityDefinition):
        self.registry = registry
        self.definitions = definitions

    def assign(
        self,
        namespace: str,
        type_: Hashable,
        kinds: Sequence[str | CapabilityKind],
    ) -> list[CapabilityKind]:
        """Assign kinds to type_, in order.

        Not atomic: when kind i fails, kinds before it stay assigned. Callers
        needing all-or-nothing must validate first (see `validate`).

        Returns:
            The assigned kinds

        Raises:
            UnknownCapabilityError: kind was never defined
            CompositeAssignmentError: kind is composite
        """
        if isinstance(kinds, (str, CapabilityKind)):
            kinds = [kinds]

        assigned = []
        for ref in kinds:
            kind = self._check(namespace, type_, ref)
            self.registry.write(namespace, "assignments", type_, kind.key)
            assigned.append(kind)

            logger.debug(f"Assigned {kind.can_label} to {type_name(type_)} in '{namespace}'")
            trace("assign", namespace=namespace, type=type_name(type_), kind=kind.can_label)
        return assigned

    def validate(
        self,
        namespace: str,
        type_: Hashable,
        kinds: Sequence[str | CapabilityKind],
    ) -> list[CapabilityKind]:
        """Resolve kinds without assigning; raises as `assign` would."""
        if isinstance(kinds, (str, CapabilityKind)):
            kinds = [kinds]
        return [self._check(namespace, type_, ref) for ref in kinds]

    def _check(self, namespace: str, type_: Hashable, ref: str | CapabilityKind) -> CapabilityKind:
        kind = self.definitions.kind(ref, namespace)
        if kind.is_composite:
            raise CompositeAssignmentError(
                f"Cannot assign composite capability '{kind.name}' to {type_name(type_)}; "
                f"assign its constituents {list(kind.constituents)} instead",
                details={"kind": kind.name, "type": type_name(type_)},
            )
        return kind

    def traits_of(self, namespace: str, type_: Hashable) -> set[str]:
        """Qualified keys of kinds assigned to type_ across local and global tiers."""
        return self.registry.gather(namespace, "assignments", type_)

    def __repr__(self) -> str:
        return f"AssignmentEngine(definitions={len(self.definitions)})"
