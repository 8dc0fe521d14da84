# SPDX-License-Identifier: AGPL-3.0-only
"""Dependency expansion for group render requests.

Dependencies are spliced in immediately before the group that needs them,
so a dependency's tag always lands earlier on the page than its dependents.
There is no topological sort and no explicit cycle detection: a cycle shows
up as runaway recursion and is stopped by ``max_depth``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .errors import DependencyDepthExceeded
from .groups import GroupRegistry
from .types import GROUP_TYPES, check_type

DEFAULT_MAX_DEPTH = 5


@dataclass
class RenderState:
    """Which groups one render session has already emitted, per type."""

    rendered: dict[str, list[str]] = field(default_factory=lambda: {t: [] for t in GROUP_TYPES})

    def is_rendered(self, asset_type: str, name: str) -> bool:
        return name in self.rendered[asset_type]

    def mark(self, asset_type: str, name: str) -> None:
        if name not in self.rendered[asset_type]:
            self.rendered[asset_type].append(name)

    def clear(self) -> dict[str, list[str]]:
        previous = {t: list(names) for t, names in self.rendered.items()}
        for names in self.rendered.values():
            names.clear()
        return previous


class DependencyResolver:
    def __init__(self, groups: GroupRegistry, state: RenderState, max_depth: int = DEFAULT_MAX_DEPTH):
        self.groups = groups
        self.state = state
        self.max_depth = max_depth

    def resolve(self, asset_type: str, names: Iterable[str], depth: int = 0) -> list[str]:
        """Return ``names`` with dependencies spliced in before their dependents.

        The result may still contain duplicates, already-rendered groups and
        (at depth 0) disabled groups; ``render_order`` filters those out.
        Every group reached as a dependency is force-enabled.
        """
        check_type(asset_type)
        order = list(names)
        if depth > self.max_depth:
            raise DependencyDepthExceeded(depth, order)
        expanded: set[str] = set()
        i = 0
        while i < len(order):
            name = order[i]
            if name in expanded or self.state.is_rendered(asset_type, name):
                i += 1
                continue
            group = self.groups.get(asset_type, name)
            # Disabled groups only count when they're requested directly.
            if depth == 0 and not group.enabled:
                i += 1
                continue
            expanded.add(name)
            group.options.enabled = True
            if group.options.deps:
                spliced = self.resolve(asset_type, group.options.deps, depth + 1)
                expanded.update(spliced)
                order[i:i] = spliced
                continue
            i += 1
        return order

    def render_order(self, asset_type: str, names: Iterable[str]) -> list[str]:
        """Resolve and reduce to the groups to actually render, each once."""
        out: list[str] = []
        for name in self.resolve(asset_type, names):
            if name in out or self.state.is_rendered(asset_type, name):
                continue
            if not self.groups.get(asset_type, name).enabled:
                continue
            out.append(name)
        return out
