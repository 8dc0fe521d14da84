# SPDX-License-Identifier: AGPL-3.0-only
"""In-memory catalog of named asset groups, keyed by type then name."""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Union

from .errors import GroupAlreadyExists, UnknownGroup
from .types import GLOBAL_GROUP, GROUP_TYPES, FileRef, Group, GroupOptions, check_type

GroupNames = Union[str, Iterable[str]]


def _as_names(names: GroupNames) -> list[str]:
    if isinstance(names, str):
        return [names]
    return [str(name) for name in names]


class GroupRegistry:
    def __init__(self, defaults: GroupOptions | None = None):
        base = defaults or GroupOptions()
        self.defaults: dict[str, GroupOptions] = {t: base.copy() for t in GROUP_TYPES}
        self._groups: dict[str, dict[str, Group]] = {t: {} for t in GROUP_TYPES}

    def exists(self, asset_type: str, name: str) -> bool:
        return name in self._groups[check_type(asset_type)]

    def get(self, asset_type: str, name: str) -> Group:
        try:
            return self._groups[check_type(asset_type)][name]
        except KeyError:
            raise UnknownGroup(asset_type, name) from None

    def names(self, asset_type: str) -> list[str]:
        return list(self._groups[check_type(asset_type)])

    def groups(self, asset_type: str) -> list[Group]:
        return list(self._groups[check_type(asset_type)].values())

    def create(
        self,
        asset_type: str,
        name: str,
        options: GroupOptions | Mapping[str, Any] | None = None,
    ) -> Group:
        check_type(asset_type)
        if self.exists(asset_type, name):
            raise GroupAlreadyExists(asset_type, name)
        if isinstance(options, GroupOptions):
            resolved = options.copy()
        else:
            resolved = self.defaults[asset_type].with_overrides(options)
        group = Group(type=asset_type, name=name, options=resolved)
        self._groups[asset_type][name] = group
        return group

    def ensure(self, asset_type: str, name: str) -> Group:
        if self.exists(asset_type, name):
            return self.get(asset_type, name)
        return self.create(asset_type, name)

    def add_files(self, asset_type: str, name: str, refs: Iterable[FileRef]) -> Group:
        group = self.ensure(asset_type, name)
        group.files.extend(refs)
        return group

    def set_enabled(self, asset_type: str, names: GroupNames, enabled: bool) -> None:
        """Toggle groups; names that aren't declared in this environment are ignored."""
        groups = self._groups[check_type(asset_type)]
        for name in _as_names(names):
            group = groups.get(name)
            if group is not None:
                group.options.enabled = bool(enabled)

    def set_option(self, asset_type: str, names: GroupNames, key: str, value: Any) -> None:
        """Set one option on several groups.

        ``''`` addresses the reserved global group. ``'*'`` addresses every
        existing group of the type and also changes the default for groups
        created later. Every named group must exist.
        """
        check_type(asset_type)
        if names == "":
            targets = [GLOBAL_GROUP]
        elif names == "*":
            self.defaults[asset_type].set(key, value)
            targets = self.names(asset_type)
        else:
            targets = _as_names(names)
        for name in targets:
            if not self.exists(asset_type, name):
                raise UnknownGroup(asset_type, name, action="set option for")
        for name in targets:
            self._groups[asset_type][name].options.set(key, value)

    def add_dependencies(self, asset_type: str, name: str, deps: GroupNames) -> Group:
        if not self.exists(asset_type, name):
            raise UnknownGroup(asset_type, name, action="add deps to")
        group = self._groups[asset_type][name]
        for dep in _as_names(deps):
            if dep not in group.options.deps:
                group.options.deps.append(dep)
        return group
