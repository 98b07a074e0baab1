# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Binary traits: named capabilities, their assignment to types and composition.

A capability kind ("trait") is a boolean classifier. Types receive primitive
kinds by assignment; composite kinds are the conjunction of their constituents.
Facts are staged per namespace and published to a shared tier by
`Traits.merge_to_global`.
"""

from .assignment import AssignmentEngine
from .config import DEFAULT_CATEGORY, DEFAULT_NAMESPACE, DEFAULT_PREFIXES, TraitsConfig
from .contracts import (
    ContractRegistry,
    ContractStatus,
    InterfaceChecker,
    InterfaceReport,
    Signature,
)
from .definition import CapabilityDefinition
from .errors import (
    CompositeAssignmentError,
    DuplicateDefinitionError,
    InvalidCompositeError,
    TraitError,
    UnknownCapabilityError,
    UsageError,
)
from .kinds import CapabilityKind, CapabilityValue, CompositeRule, PrimitiveRule
from .prefixes import PrefixRegistry
from .storage import MAP_NAMES, CapabilityRegistry, TraitStorage
from .syntax import AssignDeclaration, TraitDeclaration, parse_assign, parse_trait
from .trace import is_verbose, set_verbose
from .traits import Namespace, Traits

__all__ = (
    # Facade
    "Namespace",
    "Traits",
    "TraitsConfig",
    # Components
    "AssignmentEngine",
    "CapabilityDefinition",
    "CapabilityRegistry",
    "ContractRegistry",
    "InterfaceChecker",
    "PrefixRegistry",
    "TraitStorage",
    # Types
    "AssignDeclaration",
    "CapabilityKind",
    "CapabilityValue",
    "CompositeRule",
    "ContractStatus",
    "InterfaceReport",
    "PrimitiveRule",
    "Signature",
    "TraitDeclaration",
    # Errors
    "CompositeAssignmentError",
    "DuplicateDefinitionError",
    "InvalidCompositeError",
    "TraitError",
    "UnknownCapabilityError",
    "UsageError",
    # Helpers
    "DEFAULT_CATEGORY",
    "DEFAULT_NAMESPACE",
    "DEFAULT_PREFIXES",
    "MAP_NAMES",
    "is_verbose",
    "parse_assign",
    "parse_trait",
    "set_verbose",
)
