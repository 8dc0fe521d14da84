from __future__ import annotations

import pytest

from assetgroups.errors import UnknownRewriteMode
from assetgroups.rewrite import is_rewritable, rewrite


def test_absolute_mode_resolves_against_source_directory() -> None:
    css = ".logo{background:url(../img/logo.png)}"
    assert rewrite(css, "assets/css") == ".logo{background:url(/assets/img/logo.png)}"


def test_absolute_mode_keeps_quotes() -> None:
    css = "a{background:url('img/a.png')} b{background:url( \"img/b.png\" )}"
    assert rewrite(css, "assets/css") == (
        "a{background:url('/assets/css/img/a.png')} b{background:url(\"/assets/css/img/b.png\")}"
    )


def test_absolute_mode_with_url_prefix() -> None:
    css = "a{background:url(img/a.png)}"
    out = rewrite(css, "assets/css", url_prefix="//cdn.example.com/")
    assert out == "a{background:url(//cdn.example.com/assets/css/img/a.png)}"


def test_query_and_fragment_survive() -> None:
    css = "@font-face{src:url(font.woff?v=2#iefix)}"
    assert rewrite(css, "assets/css") == "@font-face{src:url(/assets/css/font.woff?v=2#iefix)}"


def test_quoted_import_is_rewritten() -> None:
    assert rewrite('@import "base.css";', "assets/css") == '@import "/assets/css/base.css";'


@pytest.mark.parametrize(
    "reference",
    [
        "data:image/png;base64,AAAA",
        "http://example.com/a.png",
        "//cdn.example.com/a.png",
        "/assets/img/a.png",
        "#shape",
    ],
)
def test_non_relative_references_are_untouched(reference) -> None:
    css = f"a{{background:url({reference})}}"
    assert rewrite(css, "assets/css") == css
    assert rewrite(css, "assets/css", "assets/cache", "relative") == css
    assert is_rewritable(reference) is False


def test_relative_mode_targets_destination_directory() -> None:
    css = ".logo{background:url(../img/logo.png)}"
    out = rewrite(css, "assets/css", "assets/cache", "relative")
    assert out == ".logo{background:url(../img/logo.png)}"


def test_relative_mode_across_namespaces() -> None:
    css = "a{background:url(img/x.png)}"
    out = rewrite(css, "vendor/lib/css", "assets/cache", "relative")
    assert out == "a{background:url(../../vendor/lib/css/img/x.png)}"


def test_relative_mode_needs_destination() -> None:
    with pytest.raises(ValueError):
        rewrite("a{background:url(x.png)}", "assets/css", None, "relative")


def test_none_mode_passes_through() -> None:
    css = "a{background:url(../img/x.png)}"
    assert rewrite(css, "assets/css", "assets/cache", "none") == css


def test_remote_origin_resolves_against_origin_url() -> None:
    css = "a{background:url(img/x.png)}"
    out = rewrite(css, "//cdn.example.com/css", "assets/cache", "relative")
    assert out == "a{background:url(//cdn.example.com/css/img/x.png)}"


def test_unknown_mode_raises() -> None:
    with pytest.raises(UnknownRewriteMode) as excinfo:
        rewrite("", "assets/css", None, "sideways")
    assert excinfo.value.mode == "sideways"
