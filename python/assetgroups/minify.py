# SPDX-License-Identifier: AGPL-3.0-only
"""Minifier dispatch.

A minifier is a pure ``str -> str`` transform for one asset type. The
defaults are ``jsmin`` for JavaScript and ``csscompressor`` (a YUI
compressor port) for CSS; callers can swap either through ``Settings``.
"""
from __future__ import annotations

from typing import Callable, Dict, Mapping

import csscompressor
import jsmin

from .errors import MinifierFailure
from .types import check_type

Minifier = Callable[[str], str]

MINIFIERS: Dict[str, Minifier] = {
    "js": jsmin.jsmin,
    "css": csscompressor.compress,
}


def get_minifier(asset_type: str, overrides: Mapping[str, Minifier] | None = None) -> Minifier:
    check_type(asset_type)
    if overrides and asset_type in overrides:
        return overrides[asset_type]
    return MINIFIERS[asset_type]


def minify(
    asset_type: str,
    content: str,
    path: str = "<string>",
    overrides: Mapping[str, Minifier] | None = None,
) -> str:
    func = get_minifier(asset_type, overrides)
    try:
        return func(content)
    except Exception as e:
        raise MinifierFailure(asset_type, path, e) from e
