# SPDX-License-Identifier: AGPL-3.0-only
"""Named CSS/JS asset groups for server-rendered pages.

Build an ``AssetContext`` from ``Settings`` (or ``load_context`` for a TOML
file), attach files to groups, then render tags. Combined groups are written
once to a content-addressed cache and reused until a source changes.
"""
from importlib.metadata import PackageNotFoundError, version

from .context import AssetContext, Settings
from .config import Config, load_context
from .errors import (
    AssetError,
    AssetWarning,
    DependencyDepthExceeded,
    FileReadFailure,
    GroupAlreadyExists,
    MinifierFailure,
    NoFilesMatched,
    UnknownAssetType,
    UnknownGroup,
    UnknownNamespace,
    UnknownRewriteMode,
)
from .filesystem import FileSystem, LocalFileSystem
from .types import CacheArtifact, FileRef, Group, GroupOptions, RenderedGroup, ResolvedFile


def _get_version():
    try:
        return version("assetgroups")
    except PackageNotFoundError:
        return "0.0.0-dev"


__version__ = _get_version()

__all__ = [
    "AssetContext",
    "AssetError",
    "AssetWarning",
    "CacheArtifact",
    "Config",
    "DependencyDepthExceeded",
    "FileReadFailure",
    "FileRef",
    "FileSystem",
    "Group",
    "GroupAlreadyExists",
    "GroupOptions",
    "LocalFileSystem",
    "MinifierFailure",
    "NoFilesMatched",
    "RenderedGroup",
    "ResolvedFile",
    "Settings",
    "UnknownAssetType",
    "UnknownGroup",
    "UnknownNamespace",
    "UnknownRewriteMode",
    "load_context",
]
