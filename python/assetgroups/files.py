# SPDX-License-Identifier: AGPL-3.0-only
from __future__ import annotations

import os

from .errors import NoFilesMatched
from .filesystem import FileSystem
from .paths import AssetPath, PathRegistry
from .types import ASSET_TYPES, ResolvedFile, check_type, is_remote


class FileResolver:
    """Expands namespaced patterns (``key::dir/*.css``) into concrete files.

    Returned paths are relative to the document root, which is what gets
    linked and hashed. Remote namespaces are never globbed: the pattern is
    returned verbatim as a single file.
    """

    def __init__(self, paths: PathRegistry, root: str, fs: FileSystem):
        self.paths = paths
        self.root = root
        self.fs = fs

    def _locate(self, pattern: str, asset_type: str) -> tuple[AssetPath, str]:
        check_type(asset_type, ASSET_TYPES)
        asset_path, remainder = self.paths.split(pattern)
        # A leading slash anchors the pattern at the namespace root.
        folder = "" if remainder.startswith("/") else asset_path.type_dir(asset_type)
        return asset_path, asset_path.root + folder + remainder.lstrip("/")

    def search_pattern(self, pattern: str, asset_type: str) -> str:
        return self._locate(pattern, asset_type)[1]

    def find_files(self, pattern: str, asset_type: str) -> list[str]:
        asset_path, joined = self._locate(pattern, asset_type)
        # Remoteness comes from the namespace root, never from the pattern.
        if asset_path.remote:
            return [joined]
        matches = self.fs.list_files(os.path.join(self.root, joined))
        if not matches:
            raise NoFilesMatched(joined)
        return [self.relative(match) for match in matches]

    def resolve(self, pattern: str, asset_type: str, pre_minified: bool = False) -> list[ResolvedFile]:
        return [
            ResolvedFile(path=path, absolute_path=self.absolute(path), is_pre_minified=pre_minified)
            for path in self.find_files(pattern, asset_type)
        ]

    def relative(self, path: str) -> str:
        rel = os.path.relpath(path, self.root)
        if rel == ".." or rel.startswith(".." + os.sep):
            return os.path.normpath(path).replace(os.sep, "/")
        return rel.replace(os.sep, "/")

    def absolute(self, path: str) -> str:
        if is_remote(path):
            return path
        return os.path.join(self.root, path)
