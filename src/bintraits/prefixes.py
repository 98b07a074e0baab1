# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from .config import DEFAULT_PREFIXES

__all__ = ("PrefixRegistry",)


class PrefixRegistry:
    """Per-namespace label pairs for the asserted/unasserted variants of a kind.

    Both operations are get-or-create: the first pair installed for a
    (namespace, kind) stays.
    """

    def __init__(self, default: tuple[str, str] = DEFAULT_PREFIXES):
        self.default = tuple(default)
        self._prefixes: dict[str, dict[str, tuple[str, str]]] = {}

    def get_prefix(self, namespace: str, kind: str) -> tuple[str, str]:
        """Get prefix pair, installing the default on first lookup."""
        table = self._prefixes.setdefault(namespace, {})
        return table.setdefault(kind, self.default)

    def set_prefix(self, namespace: str, kind: str, prefixes: tuple[str, str]) -> tuple[str, str]:
        """Install prefix pair unless one exists; returns the installed pair."""
        table = self._prefixes.setdefault(namespace, {})
        return table.setdefault(kind, tuple(prefixes))

    def __contains__(self, item: tuple[str, str]) -> bool:
        namespace, kind = item
        return kind in self._prefixes.get(namespace, {})

    def __repr__(self) -> str:
        count = sum(len(t) for t in self._prefixes.values())
        return f"PrefixRegistry(count={count})"
