# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Declaration front end.

Grammar:
    trait:  <Name> [as <Category>] [prefix <Pos>,<Neg>] [with <A>,<B>,...]
    assign: <Type> with <A>,<B>,...

Examples:
    >>> parse_trait("Fly as Ability prefix Is,Not")
    TraitDeclaration(name='Fly', category='Ability', prefixes=('Is', 'Not'), constituents=())

    >>> parse_assign("Duck with Fly, Swim").kinds
    ('Fly', 'Swim')
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

from .errors import UsageError

__all__ = ("AssignDeclaration", "TraitDeclaration", "parse_assign", "parse_trait")

TRAIT_USAGE = (
    "Invalid trait declaration. Expected: "
    "<Name> [as <Category>] [prefix <Pos>,<Neg>] [with <A>,<B>,...]"
)
ASSIGN_USAGE = "Invalid assign declaration. Try something like: Duck with Fly,Swim"

_COMMA = re.compile(r"\s*,\s*")


class TraitDeclaration(BaseModel):
    """Parsed trait declaration; fields map onto `define` arguments."""

    name: str
    category: str | None = None
    prefixes: tuple[str, str] | None = None
    constituents: tuple[str, ...] = Field(default_factory=tuple)


class AssignDeclaration(BaseModel):
    """Parsed assign declaration."""

    type_name: str
    kinds: tuple[str, ...]


def _tokens(text: str, usage: str) -> list[str]:
    if not isinstance(text, str) or not text.strip():
        raise UsageError(usage, details={"declaration": text})
    return _COMMA.sub(",", text.strip()).split()


def _names(token: str, usage: str, text: str) -> tuple[str, ...]:
    names = tuple(token.split(","))
    if not all(n.isidentifier() for n in names):
        raise UsageError(usage, details={"declaration": text, "token": token})
    return names


def _name(token: str, usage: str, text: str) -> str:
    names = _names(token, usage, text)
    if len(names) != 1:
        raise UsageError(usage, details={"declaration": text, "token": token})
    return names[0]


def parse_trait(text: str) -> TraitDeclaration:
    """Parse a trait declaration.

    Raises:
        UsageError: malformed declaration
    """
    tokens = _tokens(text, TRAIT_USAGE)
    fields: dict = {"name": _name(tokens[0], TRAIT_USAGE, text)}
    clauses: dict[str, str] = {}

    pos = 1
    for keyword in ("as", "prefix", "with"):
        if pos < len(tokens) and tokens[pos] == keyword:
            if pos + 1 >= len(tokens):
                raise UsageError(
                    f"{TRAIT_USAGE} (missing value after '{keyword}')",
                    details={"declaration": text},
                )
            clauses[keyword] = tokens[pos + 1]
            pos += 2
    if pos != len(tokens):
        raise UsageError(
            f"{TRAIT_USAGE} (unexpected '{tokens[pos]}')",
            details={"declaration": text},
        )

    if "as" in clauses:
        fields["category"] = _name(clauses["as"], TRAIT_USAGE, text)
    if "prefix" in clauses:
        prefixes = _names(clauses["prefix"], TRAIT_USAGE, text)
        if len(prefixes) != 2:
            raise UsageError(
                f"{TRAIT_USAGE} (prefix takes exactly two labels)",
                details={"declaration": text},
            )
        fields["prefixes"] = prefixes
    if "with" in clauses:
        fields["constituents"] = _names(clauses["with"], TRAIT_USAGE, text)
    return TraitDeclaration(**fields)


def parse_assign(text: str) -> AssignDeclaration:
    """Parse an assign declaration.

    Raises:
        UsageError: malformed declaration
    """
    tokens = _tokens(text, ASSIGN_USAGE)
    if len(tokens) != 3 or tokens[1] != "with":
        raise UsageError(ASSIGN_USAGE, details={"declaration": text})
    return AssignDeclaration(
        type_name=_name(tokens[0], ASSIGN_USAGE, text),
        kinds=_names(tokens[2], ASSIGN_USAGE, text),
    )
