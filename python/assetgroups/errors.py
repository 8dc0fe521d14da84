# SPDX-License-Identifier: AGPL-3.0-only
"""Exception taxonomy for asset grouping, resolution and combining.

Every error is fatal to the call that raised it. Nothing is retried
internally; the caller decides whether to show an error page or abort.
"""
from __future__ import annotations

from typing import Sequence


class AssetWarning(UserWarning):
    """Warning emitted for suspicious but non-fatal render requests."""


class AssetError(Exception):
    """Base class for all assetgroups errors."""


class UnknownAssetType(AssetError):
    def __init__(self, asset_type: str, allowed: Sequence[str]):
        self.asset_type = asset_type
        self.allowed = tuple(allowed)
        super().__init__(
            f"Unknown asset type {asset_type!r} (expected one of: {', '.join(self.allowed)})"
        )


class UnknownNamespace(AssetError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Could not find namespace {key!r}")


class GroupAlreadyExists(AssetError):
    def __init__(self, asset_type: str, name: str):
        self.type = asset_type
        self.name = name
        super().__init__(f"Group {name!r} ({asset_type}) already exists: can't create it.")


class UnknownGroup(AssetError):
    def __init__(self, asset_type: str, name: str, action: str = "use"):
        self.type = asset_type
        self.name = name
        super().__init__(f"Can't {action} group {name!r} ({asset_type}), as it doesn't exist.")


class NoFilesMatched(AssetError):
    def __init__(self, pattern: str):
        self.pattern = pattern
        super().__init__(f"Found no files matching {pattern}")


class DependencyDepthExceeded(AssetError):
    """Raised when dependency resolution recurses past the configured depth.

    This is the only guard against dependency cycles: a cycle shows up as
    runaway depth and is reported with the groups in flight.
    """

    def __init__(self, depth: int, groups: Sequence[str]):
        self.depth = depth
        self.groups = tuple(groups)
        super().__init__(
            f"Reached depth {depth} trying to resolve dependencies. "
            f"You've probably got some circular ones involving {','.join(self.groups)}. "
            "If not, raise deps_max_depth."
        )


class UnknownRewriteMode(AssetError):
    def __init__(self, mode: str):
        self.mode = mode
        super().__init__(f"Unknown CSS URI rewriter: {mode!r} (expected absolute, relative, none)")


class FileReadFailure(AssetError):
    def __init__(self, path: str, reason: object = None):
        self.path = path
        message = f"Couldn't open file {path}"
        if reason is not None:
            message = f"{message}: {reason}"
        super().__init__(message)


class MinifierFailure(AssetError):
    def __init__(self, asset_type: str, path: str, reason: object):
        self.type = asset_type
        self.path = path
        super().__init__(f"Failed to minify {asset_type} file {path}: {reason}")
