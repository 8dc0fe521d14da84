# SPDX-License-Identifier: AGPL-3.0-only
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Literal, Mapping

from .errors import UnknownAssetType

AssetType = Literal["css", "js", "img"]

GROUP_TYPES = ("css", "js")
ASSET_TYPES = ("css", "js", "img")

NAMESPACE_SEPARATOR = "::"
GLOBAL_GROUP = "global"


def check_type(asset_type: str, allowed: tuple[str, ...] = GROUP_TYPES) -> str:
    if asset_type not in allowed:
        raise UnknownAssetType(asset_type, allowed)
    return asset_type


def is_remote(path: str) -> bool:
    """Remote assets are recognised by a protocol or protocol-relative ``//``."""
    return "//" in path


def _coerce_deps(value: Any) -> list[str]:
    if value is None or value is False:
        return []
    if isinstance(value, str):
        return [value]
    out: list[str] = []
    for item in value:
        name = str(item)
        if name not in out:
            out.append(name)
    return out


@dataclass
class GroupOptions:
    enabled: bool = True
    combine: bool = True
    min: bool = True
    inline: bool = False
    attrs: dict[str, str] = field(default_factory=dict)
    deps: list[str] = field(default_factory=list)

    @classmethod
    def keys(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def copy(self) -> "GroupOptions":
        return GroupOptions(
            enabled=self.enabled,
            combine=self.combine,
            min=self.min,
            inline=self.inline,
            attrs=dict(self.attrs),
            deps=list(self.deps),
        )

    def set(self, key: str, value: Any) -> None:
        if key not in self.keys():
            raise ValueError(f"Unknown group option {key!r} (expected one of: {', '.join(self.keys())})")
        if key == "deps":
            value = _coerce_deps(value)
        elif key == "attrs":
            value = {str(k): str(v) for k, v in dict(value or {}).items()}
        else:
            value = bool(value)
        setattr(self, key, value)

    def with_overrides(self, overrides: Mapping[str, Any] | None) -> "GroupOptions":
        """Return a copy with known keys from ``overrides`` applied; unknown keys are ignored."""
        merged = self.copy()
        for key, value in (overrides or {}).items():
            if key in self.keys():
                merged.set(key, value)
        return merged

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "combine": self.combine,
            "min": self.min,
            "inline": self.inline,
            "attrs": dict(self.attrs),
            "deps": list(self.deps),
        }


@dataclass(frozen=True)
class FileRef:
    """A namespaced pattern plus an optional pre-minified stand-in."""

    primary: str
    minified: str | None = None


@dataclass
class Group:
    type: str
    name: str
    options: GroupOptions
    files: list[FileRef] = field(default_factory=list)

    @property
    def enabled(self) -> bool:
        return self.options.enabled

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "name": self.name,
            **self.options.to_dict(),
            "files": [
                {"file": ref.primary, "minified": ref.minified} for ref in self.files
            ],
        }


@dataclass(frozen=True)
class ResolvedFile:
    """One concrete file produced by expanding a FileRef for a render pass.

    ``path`` is what gets linked and hashed (document-root relative, or the
    remote URL verbatim); ``absolute_path`` is what gets read.
    """

    path: str
    absolute_path: str
    is_pre_minified: bool = False

    @property
    def remote(self) -> bool:
        return is_remote(self.path)


@dataclass(frozen=True)
class CacheArtifact:
    cache_key: str
    type: str
    relative_path: str
    absolute_path: str
    written: bool = False

    @property
    def filename(self) -> str:
        return f"{self.cache_key}.{self.type}"


@dataclass
class RenderedGroup:
    """Per-group output handed to an emitter.

    ``paths`` holds link targets (already through the filepath hook and URL
    prefix) and ``contents`` holds text to inline; exactly one is used,
    depending on ``inline``.
    """

    type: str
    name: str
    attrs: dict[str, str]
    inline: bool
    combined: bool
    files: list[ResolvedFile] = field(default_factory=list)
    artifact: CacheArtifact | None = None
    paths: list[str] = field(default_factory=list)
    contents: list[str] = field(default_factory=list)
