# SPDX-License-Identifier: AGPL-3.0-only
"""Build cache for combined groups.

Artifacts live flat in the cache directory as ``<md5>.<css|js>``. The key is
derived from the constituent paths, the minify flag and the newest source
mtime, so a changed source yields a new artifact name instead of a rewrite.
Existence of the file is the only persisted state.
"""
import hashlib
import json
import os
import re
import sys
import time
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence

from .filesystem import FileSystem
from .types import CacheArtifact, ResolvedFile, check_type

DEFAULT_CACHE_DIR = "assets/cache/"

TYPE_FILTERS = ("*", "*.css", "*.js")

_IMPORT_RE = re.compile(r"@import.*?;")


def hoist_imports(content: str) -> str:
    """Move every ``@import ...;`` statement, in order, to the top of the file."""
    imports: List[str] = []

    def _collect(match):
        imports.append(match.group(0))
        return ""

    body = _IMPORT_RE.sub(_collect, content)
    if not imports:
        return content
    return "\n".join(imports) + "\n" + body


def _normalize_filter(type_filter: str) -> str:
    if type_filter in ("css", "js"):
        type_filter = f"*.{type_filter}"
    if type_filter not in TYPE_FILTERS:
        raise ValueError(f"unknown cache type filter: {type_filter} (expected *, *.css, *.js)")
    return type_filter


def _coerce_before(before) -> float:
    if before is None:
        return time.time()
    if isinstance(before, datetime):
        return before.timestamp()
    return float(before)


class BuildCache:
    def __init__(
        self,
        root: str,
        fs: FileSystem,
        cache_dir: str = DEFAULT_CACHE_DIR,
        *,
        move_imports_to_top: bool = True,
        show_files_inline: bool = False,
        verbose: bool = False,
    ):
        self.root = root
        self.fs = fs
        self.cache_dir = cache_dir.replace("\\", "/").strip("/")
        self.move_imports_to_top = move_imports_to_top
        self.show_files_inline = show_files_inline
        self.verbose = verbose

    @property
    def directory(self) -> str:
        return os.path.join(self.root, self.cache_dir)

    def _log(self, message: str) -> None:
        if self.verbose:
            sys.stderr.write(f"[cache] {message}\n")

    def last_modified(self, files: Iterable[ResolvedFile]) -> int:
        # Remote files are assumed unchanged; checking them would mean an
        # HTTP round trip per file per render.
        last_mod = 0
        for f in files:
            if f.remote:
                continue
            last_mod = max(last_mod, int(self.fs.mtime(f.absolute_path)))
        return last_mod

    def cache_key(self, files: Sequence[ResolvedFile], minify: bool) -> str:
        seed = "".join(f.path for f in files) + ("min" if minify else "") + str(self.last_modified(files))
        return hashlib.md5(seed.encode("utf-8")).hexdigest()

    def artifact_for(self, asset_type: str, files: Sequence[ResolvedFile], minify: bool) -> CacheArtifact:
        check_type(asset_type)
        key = self.cache_key(files, minify)
        relative_path = f"{self.cache_dir}/{key}.{asset_type}" if self.cache_dir else f"{key}.{asset_type}"
        return CacheArtifact(
            cache_key=key,
            type=asset_type,
            relative_path=relative_path,
            absolute_path=os.path.join(self.directory, f"{key}.{asset_type}"),
        )

    def combine(
        self,
        asset_type: str,
        files: Sequence[ResolvedFile],
        minify: bool,
        load: Callable[[ResolvedFile, str], str],
        minifier: Callable[[str, ResolvedFile], str],
    ) -> CacheArtifact:
        """Return the artifact for ``files``, writing it first if it doesn't exist yet.

        ``load(file, artifact_relative_path)`` returns a source file's text
        with the post-load hook and CSS URI rewriting already applied;
        ``minifier(text, file)`` minifies one file's text.
        """
        artifact = self.artifact_for(asset_type, files, minify)
        if self.fs.exists(artifact.absolute_path):
            self._log(f"hit {artifact.relative_path}")
            return artifact

        parts: List[str] = []
        for f in files:
            if self.show_files_inline:
                parts.append(f"\n/* {f.path} */\n\n")
            content = load(f, artifact.relative_path)
            if minify and not f.is_pre_minified:
                content = minifier(content, f)
            parts.append(content + "\n")
        content = "".join(parts)
        if asset_type == "css" and self.move_imports_to_top:
            content = hoist_imports(content)

        written = self.fs.write_text(artifact.absolute_path, content)
        self._log(f"write {artifact.relative_path} ({written} bytes)")
        return replace(artifact, written=True)

    def read(self, artifact: CacheArtifact) -> str:
        return self.fs.read_text(artifact.absolute_path)

    def list_artifacts(self, type_filter: str = "*") -> List[dict]:
        """List cache files with their sizes and modification times."""
        pattern = os.path.join(self.directory, _normalize_filter(type_filter))
        result = []
        for path in self.fs.list_files(pattern):
            name = os.path.basename(path)
            mtime = self.fs.mtime(path)
            result.append({
                "name": name,
                "type": name.rsplit(".", 1)[-1],
                "path": path,
                "size_bytes": self.fs.size(path),
                "last_modified": datetime.fromtimestamp(mtime).isoformat(),
            })
        return result

    def clear(self, before=None, type_filter: str = "*", dry_run: bool = False) -> List[str]:
        """Delete cache files last modified before ``before`` (default: now).

        Returns the removed paths. Readers racing a deletion are not guarded.
        """
        cutoff = _coerce_before(before)
        pattern = os.path.join(self.directory, _normalize_filter(type_filter))
        removed = []
        for path in self.fs.list_files(pattern):
            if self.fs.mtime(path) < cutoff:
                if not dry_run:
                    self.fs.remove(path)
                removed.append(path)
        return removed


def _context_from_args(args):
    from .config import load_context

    return load_context(getattr(args, "config", None))


def cmd_cache_dir(args):
    """Print the cache directory path."""
    cache = _context_from_args(args).cache
    if getattr(args, "json", False):
        result = {
            "schema": "assetgroups.cache_dir.v1",
            "path": cache.directory,
            "exists": os.path.isdir(cache.directory),
        }
        sys.stdout.write(json.dumps(result, ensure_ascii=True) + "\n")
    else:
        sys.stdout.write(cache.directory + "\n")


def cmd_cache_list(args):
    """List combined artifacts currently in the cache."""
    cache = _context_from_args(args).cache
    artifacts = cache.list_artifacts(getattr(args, "type", None) or "*")
    if getattr(args, "json", False):
        result = {
            "schema": "assetgroups.cache_list.v1",
            "path": cache.directory,
            "count": len(artifacts),
            "artifacts": artifacts,
        }
        sys.stdout.write(json.dumps(result, ensure_ascii=True) + "\n")
        return
    for item in artifacts:
        size_kb = item["size_bytes"] / 1024
        sys.stdout.write(f"  {item['name']} ({size_kb:.1f} KB, {item['last_modified']})\n")
    sys.stdout.write(f"[ok] {len(artifacts)} cached files in {cache.directory}\n")


def cmd_cache_clear(args):
    """Remove cache files older than --max-age-days."""
    from datetime import timedelta

    cache = _context_from_args(args).cache
    max_age: Optional[int] = getattr(args, "max_age_days", 0) or 0
    dry_run = getattr(args, "dry_run", False)
    cutoff = datetime.now() - timedelta(days=max_age)

    removed = cache.clear(cutoff, getattr(args, "type", None) or "*", dry_run=dry_run)

    if getattr(args, "json", False):
        result = {
            "schema": "assetgroups.cache_clear.v1",
            "dry_run": dry_run,
            "removed_count": len(removed),
            "removed": removed,
        }
        sys.stdout.write(json.dumps(result, ensure_ascii=True) + "\n")
    else:
        if dry_run:
            sys.stdout.write(f"[dry-run] would remove {len(removed)} cached files\n")
        else:
            sys.stdout.write(f"[ok] removed {len(removed)} cached files\n")
        for path in removed:
            sys.stdout.write(f"  - {os.path.basename(path)}\n")
