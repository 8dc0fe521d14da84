# SPDX-License-Identifier: AGPL-3.0-only
"""Rewrites relative ``url(...)`` and ``@import "..."`` references in CSS.

A stylesheet moved into a combined cache file keeps working only if its
relative references are re-anchored:

- ``absolute``: resolve against the source file's directory and emit a
  root-relative path (or a protocol-relative URL when a URL prefix is set).
- ``relative``: resolve against the source directory, then re-express the
  target relative to the destination directory.
- ``none``: pass through.

References with a scheme (``http:``, ``data:``), protocol-relative ``//``
references, root-relative paths and bare fragments are never touched.
"""
from __future__ import annotations

import posixpath
import re
from typing import Callable
from urllib.parse import urljoin

from .errors import UnknownRewriteMode
from .types import is_remote

REWRITE_MODES = ("absolute", "relative", "none")

_URL_RE = re.compile(r"url\(\s*(?P<quote>['\"]?)(?P<uri>.*?)(?P=quote)\s*\)", re.IGNORECASE)
_IMPORT_RE = re.compile(r"(?P<head>@import\s+)(?P<quote>['\"])(?P<uri>.*?)(?P=quote)", re.IGNORECASE)
_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.\-]*:", re.IGNORECASE)


def _posix(path: str) -> str:
    return path.replace("\\", "/")


def is_rewritable(uri: str) -> bool:
    uri = uri.strip()
    if not uri:
        return False
    if uri.startswith(("/", "#")):
        return False
    return not _SCHEME_RE.match(uri)


def _split_suffix(uri: str) -> tuple[str, str]:
    """Split ``img/x.svg?v=2#icon`` into the path and its query/fragment."""
    for i, ch in enumerate(uri):
        if ch in "?#":
            return uri[:i], uri[i:]
    return uri, ""


def _resolve(origin_dir: str, uri: str) -> str:
    path, suffix = _split_suffix(uri)
    target = posixpath.normpath(posixpath.join(_posix(origin_dir), path))
    return target + suffix


def _substitute(css: str, transform: Callable[[str], str]) -> str:
    def _url(match: re.Match) -> str:
        uri = match.group("uri").strip()
        if not is_rewritable(uri):
            return match.group(0)
        quote = match.group("quote")
        return f"url({quote}{transform(uri)}{quote})"

    def _import(match: re.Match) -> str:
        uri = match.group("uri").strip()
        if not is_rewritable(uri):
            return match.group(0)
        quote = match.group("quote")
        return f"{match.group('head')}{quote}{transform(uri)}{quote}"

    return _IMPORT_RE.sub(_import, _URL_RE.sub(_url, css))


def to_absolute(uri: str, origin_dir: str, document_root: str | None = None, url_prefix: str = "") -> str:
    target = _resolve(origin_dir, uri)
    if document_root:
        root = posixpath.normpath(_posix(document_root))
        if target == root or target.startswith(root.rstrip("/") + "/"):
            target = target[len(root):]
    if not target.startswith("/"):
        target = "/" + target
    if url_prefix:
        return url_prefix.rstrip("/") + target
    return target


def to_relative(uri: str, origin_dir: str, destination_dir: str) -> str:
    path, suffix = _split_suffix(_resolve(origin_dir, uri))
    destination = posixpath.normpath(_posix(destination_dir))
    return posixpath.relpath(path, destination) + suffix


def rewrite(
    css: str,
    origin_dir: str,
    destination_dir: str | None = None,
    mode: str = "absolute",
    *,
    document_root: str | None = None,
    url_prefix: str = "",
) -> str:
    """Rewrite every relative reference in ``css`` for the given mode."""
    if mode not in REWRITE_MODES:
        raise UnknownRewriteMode(mode)
    if mode == "none":
        return css
    if is_remote(origin_dir):
        # Stylesheets fetched from elsewhere keep pointing at their origin.
        base = origin_dir.rstrip("/") + "/"
        return _substitute(css, lambda uri: urljoin(base, uri))
    if mode == "absolute":
        return _substitute(
            css, lambda uri: to_absolute(uri, origin_dir, document_root, url_prefix)
        )
    if destination_dir is None:
        raise ValueError("relative CSS URI rewriting needs a destination directory")
    return _substitute(css, lambda uri: to_relative(uri, origin_dir, destination_dir))
