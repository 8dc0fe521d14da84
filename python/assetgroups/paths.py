# SPDX-License-Identifier: AGPL-3.0-only
"""Namespace registry: maps path keys to asset roots and per-type folders."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .errors import UnknownNamespace
from .types import ASSET_TYPES, NAMESPACE_SEPARATOR, is_remote

DEFAULT_FOLDERS = {
    "css": "css/",
    "js": "js/",
    "img": "img/",
}

DEFAULT_PATHS = {
    "core": "assets/",
}


def _as_dir(value: str) -> str:
    text = str(value).replace("\\", "/")
    if text and not text.endswith("/"):
        text += "/"
    return text


@dataclass(frozen=True)
class AssetPath:
    key: str
    root: str
    dirs: dict[str, str] = field(default_factory=dict)

    @property
    def remote(self) -> bool:
        return is_remote(self.root)

    def type_dir(self, asset_type: str) -> str:
        return self.dirs.get(asset_type, "")


class PathRegistry:
    def __init__(self, folders: Mapping[str, str] | None = None, default_key: str = "core"):
        self.folders = {k: _as_dir(v) for k, v in {**DEFAULT_FOLDERS, **(folders or {})}.items()}
        self._paths: dict[str, AssetPath] = {}
        self._default_key = default_key

    def register(self, key: str, root: str, dirs: Mapping[str, str] | None = None) -> AssetPath:
        """Register (or overwrite) a namespace. Missing type dirs use the defaults."""
        overrides = dict(dirs or {})
        resolved_dirs = {
            asset_type: _as_dir(overrides.get(asset_type, self.folders[asset_type]))
            for asset_type in ASSET_TYPES
        }
        entry = AssetPath(key=key, root=_as_dir(root), dirs=resolved_dirs)
        self._paths[key] = entry
        return entry

    def add(self, key: str, spec: Any) -> AssetPath:
        """Register a namespace from its config form.

        ``spec`` is either a root string or a mapping with ``path`` and
        optional ``css_dir`` / ``js_dir`` / ``img_dir`` keys.
        """
        if isinstance(spec, Mapping):
            if "path" not in spec:
                raise ValueError(f"Path {key!r} is missing its 'path' entry")
            dirs = {
                asset_type: spec[f"{asset_type}_dir"]
                for asset_type in ASSET_TYPES
                if f"{asset_type}_dir" in spec
            }
            return self.register(key, spec["path"], dirs)
        return self.register(key, str(spec))

    def resolve(self, key: str) -> AssetPath:
        try:
            return self._paths[key]
        except KeyError:
            raise UnknownNamespace(key) from None

    @property
    def default_key(self) -> str:
        return self._default_key

    def set_default(self, key: str) -> None:
        self.resolve(key)
        self._default_key = key

    def qualify(self, pattern: str) -> str:
        if NAMESPACE_SEPARATOR in pattern:
            return pattern
        return f"{self._default_key}{NAMESPACE_SEPARATOR}{pattern}"

    def split(self, pattern: str) -> tuple[AssetPath, str]:
        key, _, remainder = self.qualify(pattern).partition(NAMESPACE_SEPARATOR)
        return self.resolve(key), remainder

    def keys(self) -> list[str]:
        return list(self._paths)

    def __contains__(self, key: object) -> bool:
        return key in self._paths
