# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

__all__ = ("DEFAULT_CATEGORY", "DEFAULT_NAMESPACE", "DEFAULT_PREFIXES", "TraitsConfig")

DEFAULT_PREFIXES: tuple[str, str] = ("Can", "Cannot")
DEFAULT_CATEGORY = "Any"
DEFAULT_NAMESPACE = "__main__"


class TraitsConfig(BaseModel):
    """Configuration for a `Traits` facade.

    Attributes:
        default_prefixes: Label pair installed for kinds without explicit prefixes
        default_category: Parent category for kinds defined without one
        allow_redefinition: Replace an existing kind instead of raising
            DuplicateDefinitionError (logs a warning)
        verbose: Switch the process-wide registration trace on at construction
    """

    default_prefixes: tuple[str, str] = DEFAULT_PREFIXES
    default_category: str = Field(DEFAULT_CATEGORY, min_length=1)
    allow_redefinition: bool = False
    verbose: bool = False

    @field_validator("default_prefixes")
    def _validate_prefixes(cls, value):  # noqa: N805
        pos, neg = value
        if not (pos.isidentifier() and neg.isidentifier()):
            raise ValueError("Prefixes must be non-empty identifiers.")
        if pos == neg:
            raise ValueError("Positive and negative prefixes must differ.")
        return value
