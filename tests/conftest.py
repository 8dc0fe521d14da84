from __future__ import annotations

import fnmatch
import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
PYTHON_SRC = ROOT / "python"

if str(PYTHON_SRC) not in sys.path:
    sys.path.insert(0, str(PYTHON_SRC))
else:
    sys.path.remove(str(PYTHON_SRC))
    sys.path.insert(0, str(PYTHON_SRC))

from assetgroups.context import AssetContext, Settings  # noqa: E402
from assetgroups.errors import FileReadFailure  # noqa: E402


def _glob_match(pattern: str, path: str) -> bool:
    # Segment-wise so '*' never crosses a '/', like glob.glob.
    pattern_parts = pattern.split("/")
    path_parts = path.split("/")
    if len(pattern_parts) != len(path_parts):
        return False
    return all(fnmatch.fnmatchcase(p, pat) for p, pat in zip(path_parts, pattern_parts))


class MemoryFileSystem:
    """In-memory FileSystem double that records reads and writes."""

    def __init__(self, files=None, clock: float = 1000.0):
        self.files: dict[str, str] = {}
        self.mtimes: dict[str, float] = {}
        self.clock = clock
        self.reads: list[str] = []
        self.writes: list[str] = []
        for path, content in (files or {}).items():
            self.add(path, content)

    def add(self, path: str, content: str, mtime: float | None = None) -> None:
        self.files[path] = content
        self.mtimes[path] = self.clock if mtime is None else mtime

    def touch(self, path: str, mtime: float) -> None:
        self.mtimes[path] = mtime

    def list_files(self, pattern: str) -> list[str]:
        return sorted(p for p in self.files if _glob_match(pattern, p))

    def exists(self, path: str) -> bool:
        return path in self.files

    def mtime(self, path: str) -> float:
        return self.mtimes[path]

    def size(self, path: str) -> int:
        return len(self.files[path].encode("utf-8"))

    def read_text(self, path: str) -> str:
        self.reads.append(path)
        try:
            return self.files[path]
        except KeyError:
            raise FileReadFailure(path, "no such file") from None

    def write_text(self, path: str, content: str) -> int:
        self.writes.append(path)
        self.add(path, content)
        return len(content.encode("utf-8"))

    def remove(self, path: str) -> None:
        del self.files[path]
        del self.mtimes[path]


@pytest.fixture
def memfs() -> MemoryFileSystem:
    return MemoryFileSystem()


@pytest.fixture
def make_context(memfs):
    """Build an AssetContext over ``memfs`` with its document root at /site."""

    def _make(files=None, **settings) -> AssetContext:
        for path, content in (files or {}).items():
            memfs.add(f"/site/{path}", content)
        settings.setdefault("root", "/site")
        return AssetContext(Settings(**settings), fs=memfs)

    return _make
