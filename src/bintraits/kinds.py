# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from dataclasses import dataclass

from lionherd_core import Element, Enum
from pydantic import Field

from .config import DEFAULT_CATEGORY

__all__ = (
    "CapabilityKind",
    "CapabilityValue",
    "CompositeRule",
    "PrimitiveRule",
)


class CapabilityValue(Enum):
    """Per-(kind, type) verdict.

    Values:
        ASSERTED: type has the capability
        UNASSERTED: type lacks the capability
    """

    ASSERTED = "asserted"
    UNASSERTED = "unasserted"

    @classmethod
    def of(cls, flag: bool) -> CapabilityValue:
        return cls.ASSERTED if flag else cls.UNASSERTED


class CapabilityKind(Element):
    """A named boolean classifier a type may or may not possess.

    Immutable once defined. Composite kinds list two or more constituents and
    are always computed, never assigned.
    """

    name: str = Field(..., description="Identifier, unique within its namespace")
    namespace: str = Field(..., description="Namespace that defined the kind")
    category: str = Field(DEFAULT_CATEGORY, description="Parent category")
    positive_prefix: str = "Can"
    negative_prefix: str = "Cannot"
    constituents: tuple[str, ...] = Field(
        default_factory=tuple,
        description="Constituent kind names as given to define, in evaluation order",
    )

    @property
    def key(self) -> str:
        """Qualified identifier `<namespace>.<name>`."""
        return f"{self.namespace}.{self.name}"

    @property
    def is_composite(self) -> bool:
        return len(self.constituents) > 0

    @property
    def can_label(self) -> str:
        return f"{self.positive_prefix}{self.name}"

    @property
    def cannot_label(self) -> str:
        return f"{self.negative_prefix}{self.name}"

    def label(self, value: CapabilityValue) -> str:
        """Variant name for value, e.g. `CanFly` / `CannotFly`."""
        return self.can_label if value is CapabilityValue.ASSERTED else self.cannot_label

    def __repr__(self) -> str:
        if self.is_composite:
            return f"CapabilityKind({self.key}, with={list(self.constituents)})"
        return f"CapabilityKind({self.key})"


@dataclass(frozen=True)
class PrimitiveRule:
    """Introspection rule of a primitive kind.

    UNASSERTED for every type except those whose assignment record, as seen
    from the evaluating namespace, holds the kind's key.
    """

    kind: CapabilityKind

    def evaluate(self, assigned: set[str]) -> CapabilityValue:
        return CapabilityValue.of(self.kind.key in assigned)


@dataclass(frozen=True)
class CompositeRule:
    """Introspection rule of a composite kind: conjunction of constituents.

    Attributes:
        kind: The composite kind
        constituents: Qualified keys of constituent kinds, in evaluation order
    """

    kind: CapabilityKind
    constituents: tuple[str, ...]
