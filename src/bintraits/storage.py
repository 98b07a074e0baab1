# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Two-tier capability storage.

Each namespace accumulates facts in its own local tier during initialization.
`CapabilityRegistry.merge_to_global` publishes them to the shared global tier
and empties the local tier. Lookups check the local tier first and fall back
to the global tier.

Thread model:
    Writes to one namespace's local tier must be serialized by the caller.
    Merges into the global tier and catalog updates are serialized by the
    registry lock; reads of merged data need no lock since the global tier
    only grows.

The registry also owns the kind catalog and the rule table, so every
component (and every facade) sharing one registry sees the same kinds.
Visibility of a kind is still decided by the `definitions` map tiers.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Hashable, Iterator
from typing import Any
from uuid import UUID

from lionherd_core import Pile

from .errors import UsageError
from .kinds import CapabilityKind, CompositeRule, PrimitiveRule

__all__ = ("MAP_NAMES", "CapabilityRegistry", "TraitStorage")

logger = logging.getLogger(__name__)

MAP_NAMES: tuple[str, ...] = ("assignments", "contracts", "composites", "definitions")


class TraitStorage:
    """One tier: a named key -> set-of-values map per fact family."""

    __slots__ = ("assignments", "composites", "contracts", "definitions")

    def __init__(self):
        self.assignments: dict[Hashable, set] = {}
        self.contracts: dict[Hashable, set] = {}
        self.composites: dict[Hashable, set] = {}
        self.definitions: dict[Hashable, set] = {}

    def table(self, name: str) -> dict[Hashable, set]:
        if name not in MAP_NAMES:
            raise UsageError(
                f"Unknown storage map '{name}'", details={"allowed": list(MAP_NAMES)}
            )
        return getattr(self, name)

    def tables(self) -> Iterator[tuple[str, dict[Hashable, set]]]:
        for name in MAP_NAMES:
            yield name, getattr(self, name)

    def rehash(self) -> TraitStorage:
        """Rebuild every map into fresh containers, same keys and values."""
        for name, tab in self.tables():
            setattr(self, name, {key: set(values) for key, values in tab.items()})
        return self

    def is_empty(self) -> bool:
        return all(not tab for _, tab in self.tables())

    def __len__(self) -> int:
        return sum(len(tab) for _, tab in self.tables())

    def __repr__(self) -> str:
        sizes = ", ".join(f"{name}={len(tab)}" for name, tab in self.tables())
        return f"TraitStorage({sizes})"


class CapabilityRegistry:
    """Scoped key -> set-of-values store with local and global tiers.

    One instance lives for the whole process; components receive it by
    injection. Tests build a fresh instance each.

    Kinds are cataloged in a Pile with O(1) lookup by qualified key, next to
    a rule table mapping each key to its PrimitiveRule or CompositeRule.
    """

    def __init__(self):
        self._global = TraitStorage()
        self._locals: dict[str, TraitStorage] = {}
        self._lock = threading.RLock()

        self._kinds: Pile[CapabilityKind] = Pile(item_type=CapabilityKind)
        self._key_index: dict[str, UUID] = {}
        self._rules: dict[str, PrimitiveRule | CompositeRule] = {}

    @property
    def global_storage(self) -> TraitStorage:
        return self._global

    def local_storage(self, namespace: str) -> TraitStorage | None:
        """Local tier of namespace, None if it never wrote anything."""
        return self._locals.get(namespace)

    def has_local(self, namespace: str) -> bool:
        st = self._locals.get(namespace)
        return st is not None and not st.is_empty()

    def namespaces(self) -> list[str]:
        return list(self._locals.keys())

    def read(self, namespace: str, name: str, key: Hashable) -> set:
        """Get the set for key: local tier first, then global, else empty.

        A key present in the local tier shadows the global one entirely.
        """
        st = self._locals.get(namespace)
        if st is not None:
            tab = st.table(name)
            if key in tab:
                return set(tab[key])
        tab = self._global.table(name)
        return set(tab[key]) if key in tab else set()

    def gather(self, namespace: str, name: str, key: Hashable) -> set:
        """Union of the local and global sets for key (no shadowing)."""
        values = set(self._global.table(name).get(key, ()))
        st = self._locals.get(namespace)
        if st is not None:
            values.update(st.table(name).get(key, ()))
        return values

    def write(self, namespace: str, name: str, key: Hashable, value: Any) -> None:
        """Insert value (or union a set of values) into the local tier for key."""
        st = self._locals.get(namespace)
        if st is None:
            st = self._locals[namespace] = TraitStorage()
            logger.debug(f"Created local storage for namespace '{namespace}'")
        values = st.table(name).setdefault(key, set())
        if isinstance(value, (set, frozenset)):
            values.update(value)
        else:
            values.add(value)

    def table(self, namespace: str, name: str) -> dict[Hashable, set]:
        """Merged view of a map: global sets unioned with local sets per key."""
        merged = {key: set(values) for key, values in self._global.table(name).items()}
        st = self._locals.get(namespace)
        if st is not None:
            for key, values in st.table(name).items():
                merged.setdefault(key, set()).update(values)
        return merged

    def compact(self, namespace: str) -> None:
        """Rebuild the namespace's local maps without changing their content."""
        st = self._locals.get(namespace)
        if st is not None:
            st.rehash()

    def merge_to_global(self, namespace: str) -> int:
        """Move every local fact of namespace into the global tier.

        The local tier is empty afterwards, so a repeated call is a no-op.

        Returns:
            Number of keys promoted
        """
        st = self._locals.get(namespace)
        if st is None:
            return 0

        self.compact(namespace)
        moved = 0
        with self._lock:
            for name, stab in st.tables():
                dtab = self._global.table(name)
                for key, values in stab.items():
                    dtab.setdefault(key, set()).update(values)
                    moved += 1
                stab.clear()

        if moved:
            logger.info(f"Merged {moved} entries from namespace '{namespace}' into global storage")
        return moved

    # =========================================================================
    # Kind catalog
    # =========================================================================

    def catalog(self, rule: PrimitiveRule | CompositeRule) -> CapabilityKind:
        """Install rule.kind and its rule, replacing any entry with the same key."""
        kind = rule.kind
        with self._lock:
            if kind.key in self._key_index:
                self._kinds.remove(self._key_index[kind.key])
            self._kinds.add(kind)
            self._key_index[kind.key] = kind.id
            self._rules[kind.key] = rule
        return kind

    def cataloged(self, key: str) -> CapabilityKind | None:
        """Current kind for a qualified key, ignoring tier visibility."""
        uid = self._key_index.get(key)
        return self._kinds[uid] if uid is not None else None

    def rule(self, key: str) -> PrimitiveRule | CompositeRule | None:
        return self._rules.get(key)

    def kind_count(self) -> int:
        return len(self._kinds)

    def __repr__(self) -> str:
        return f"CapabilityRegistry(global={len(self._global)}, namespaces={len(self._locals)})"
