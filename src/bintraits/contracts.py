# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Interface contracts attached to capability kinds.

A contract states that every type holding a capability must provide a method
matching a structural `Signature`. Contracts of a composite kind include the
contracts of its constituents.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Hashable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .definition import CapabilityDefinition
from .kinds import CapabilityKind, CapabilityValue, CompositeRule
from .storage import CapabilityRegistry
from .trace import trace

__all__ = (
    "ContractRegistry",
    "ContractStatus",
    "InterfaceChecker",
    "InterfaceReport",
    "Signature",
)

logger = logging.getLogger(__name__)


def _type_label(annotation: Any) -> str:
    if annotation is None or annotation is type(None):
        return "None"
    if annotation is Any:
        return "Any"
    return getattr(annotation, "__name__", None) or str(annotation)


class Signature(BaseModel):
    """Structural description of a required method.

    Attributes:
        name: Method name looked up on the type
        args: Positional argument types, receiver included (use `Any` for it)
        returns: Return type
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Method name")
    args: tuple[Any, ...] = Field(default_factory=tuple)
    returns: Any = None

    @field_validator("name")
    def _validate_name(cls, value):  # noqa: N805
        if not value.isidentifier():
            raise ValueError(f"Signature name must be an identifier, got {value!r}")
        return value

    @property
    def arity(self) -> int:
        return len(self.args)

    def __str__(self) -> str:
        args = ", ".join(_type_label(a) for a in self.args)
        return f"{self.name}({args}) -> {_type_label(self.returns)}"


class ContractStatus(BaseModel):
    """One (kind, signature) requirement and whether the type meets it."""

    kind: str
    signature: Signature


class InterfaceReport(BaseModel):
    """Result of checking a type against the contracts of its capabilities."""

    type: str
    implemented: list[ContractStatus] = Field(default_factory=list)
    missing: list[ContractStatus] = Field(default_factory=list)

    @property
    def result(self) -> bool:
        return not self.missing

    def __str__(self) -> str:
        verdict = "fully implements" if self.result else "is missing some contracts of"
        lines = [f"{self.type} {verdict} its capabilities."]
        for label, items in (("Implemented", self.implemented), ("Missing", self.missing)):
            if items:
                lines.append(f"{label}:")
                lines.extend(f"  {i + 1}. {s.kind}: {s.signature}" for i, s in enumerate(items))
        return "\n".join(lines)


class ContractRegistry:
    """Registers and enumerates contracts through the capability registry."""

    def __init__(self, registry: CapabilityRegistry, definitions: CapabilityDefinition):
        self.registry = registry
        self.definitions = definitions

    def register_contract(
        self,
        namespace: str,
        kind: str | CapabilityKind,
        signature: Signature,
    ) -> Signature:
        """Require signature from every type holding kind.

        Raises:
            UnknownCapabilityError: kind is not defined
        """
        resolved = self.definitions.kind(kind, namespace)
        self.registry.write(namespace, "contracts", resolved.key, signature)
        trace("contract", namespace=namespace, kind=resolved.can_label, signature=str(signature))
        return signature

    def contracts_of(self, namespace: str, kind: str | CapabilityKind) -> set[Signature]:
        """Signatures required by kind, constituents' contracts included.

        Raises:
            UnknownCapabilityError: kind is not defined
        """
        resolved = self.definitions.kind(kind, namespace)
        return self._collect(namespace, resolved.key)

    def _collect(self, namespace: str, key: str) -> set[Signature]:
        signatures = self.registry.gather(namespace, "contracts", key)
        rule = self.registry.rule(key)
        if isinstance(rule, CompositeRule):
            for part in rule.constituents:
                signatures |= self._collect(namespace, part)
        return signatures


class InterfaceChecker:
    """Matches a type's methods against the contracts of its capabilities.

    Matching is by method name and positional arity only.
    """

    def __init__(self, definitions: CapabilityDefinition, contracts: ContractRegistry):
        self.definitions = definitions
        self.contracts = contracts

    def check(self, namespace: str, type_: Hashable) -> InterfaceReport:
        report = InterfaceReport(type=getattr(type_, "__qualname__", None) or str(type_))
        for name in self.definitions.kinds(namespace):
            kind = self.definitions.find(name, namespace)
            if kind is None:
                continue
            if self.definitions.value_of(kind, type_, namespace) is not CapabilityValue.ASSERTED:
                continue
            signatures = sorted(self.contracts.contracts_of(namespace, kind), key=str)
            for sig in signatures:
                status = ContractStatus(kind=kind.can_label, signature=sig)
                if _implements(getattr(type_, sig.name, None), sig):
                    report.implemented.append(status)
                else:
                    report.missing.append(status)

        if not report.result:
            logger.debug(f"{report.type} is missing {len(report.missing)} contract(s)")
        return report


def _implements(func: Callable[..., Any] | None, sig: Signature) -> bool:
    if func is None or not callable(func):
        return False
    try:
        params = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        # Builtins without introspectable signatures
        return True

    required = total = 0
    for param in params:
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return required <= sig.arity
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            total += 1
            if param.default is inspect.Parameter.empty:
                required += 1
    return required <= sig.arity <= total
