# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from lionherd_core.errors import ExistsError, LionherdError, NotFoundError, ValidationError

__all__ = (
    "CompositeAssignmentError",
    "DuplicateDefinitionError",
    "InvalidCompositeError",
    "TraitError",
    "UnknownCapabilityError",
    "UsageError",
)


class TraitError(LionherdError):
    """Base error for capability registration.

    Every registry error is a program-construction defect: raised synchronously
    at the offending call and never retried.
    """

    default_message = "Trait error"
    default_retryable = False


class DuplicateDefinitionError(TraitError, ExistsError):
    """Capability kind name already defined in a reachable tier."""

    default_message = "Capability kind already defined"


class InvalidCompositeError(TraitError, ValidationError):
    """Composite capability with fewer than two constituents, or a cycle."""

    default_message = "A composite capability needs at least two constituents"


class UnknownCapabilityError(TraitError, NotFoundError):
    """Capability kind was never defined in a reachable tier."""

    default_message = "Unknown capability kind"


class CompositeAssignmentError(TraitError):
    """Composite capabilities are derived and cannot be assigned."""

    default_message = "Composite capabilities cannot be assigned directly"


class UsageError(TraitError, ValidationError):
    """Malformed declaration or call."""

    default_message = "Invalid usage"
