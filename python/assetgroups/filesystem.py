# SPDX-License-Identifier: AGPL-3.0-only
"""File-system capability used by the resolver and the build cache.

Everything that touches disk or the network goes through a ``FileSystem`` so
resolution and combining can run against an in-memory double in tests.
"""
from __future__ import annotations

import glob
import os
import tempfile
import urllib.error
import urllib.request
from typing import Protocol

from .errors import FileReadFailure
from .types import is_remote


class FileSystem(Protocol):
    def list_files(self, pattern: str) -> list[str]:
        """Glob ``pattern`` and return matching regular files, sorted."""

    def exists(self, path: str) -> bool: ...

    def mtime(self, path: str) -> float: ...

    def size(self, path: str) -> int: ...

    def read_text(self, path: str) -> str: ...

    def write_text(self, path: str, content: str) -> int:
        """Write ``content`` so readers see either nothing or the whole file."""

    def remove(self, path: str) -> None: ...


def _file_mode() -> int:
    # mkstemp creates files 0600; match what open() would give under the umask.
    mask = os.umask(0)
    os.umask(mask)
    return 0o666 & ~mask


def _remote_url(path: str) -> str:
    if path.startswith("//"):
        return "https:" + path
    return path


class LocalFileSystem:
    def __init__(self, timeout: float = 60):
        self.timeout = timeout
        self.file_mode = _file_mode()

    def list_files(self, pattern: str) -> list[str]:
        return sorted(p for p in glob.glob(pattern) if os.path.isfile(p))

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def mtime(self, path: str) -> float:
        return os.path.getmtime(path)

    def size(self, path: str) -> int:
        return os.path.getsize(path)

    def read_text(self, path: str) -> str:
        if is_remote(path):
            return self._read_remote(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise FileReadFailure(path, e) from e

    def _read_remote(self, path: str) -> str:
        try:
            with urllib.request.urlopen(_remote_url(path), timeout=self.timeout) as response:
                charset = response.headers.get_content_charset() or "utf-8"
                return response.read().decode(charset)
        except (urllib.error.URLError, OSError, ValueError) as e:
            raise FileReadFailure(path, e) from e

    def write_text(self, path: str, content: str) -> int:
        directory = os.path.dirname(path) or "."
        os.makedirs(directory, exist_ok=True)
        data = content.encode("utf-8")
        # Same-directory temp file + rename: concurrent writers of the same
        # key race harmlessly and readers never see a partial file.
        handle, temp_path = tempfile.mkstemp(prefix=".assetgroups_", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(handle, "wb") as f:
                f.write(data)
            os.chmod(temp_path, self.file_mode)
            os.replace(temp_path, path)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise
        return len(data)

    def remove(self, path: str) -> None:
        os.unlink(path)
