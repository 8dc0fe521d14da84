from __future__ import annotations

import pytest

from assetgroups.errors import NoFilesMatched, UnknownAssetType
from assetgroups.files import FileResolver
from assetgroups.paths import PathRegistry


@pytest.fixture
def resolver(memfs) -> FileResolver:
    for path in (
        "/site/assets/css/b.css",
        "/site/assets/css/a.css",
        "/site/assets/css/print/p.css",
        "/site/assets/vendor/x.js",
        "/site/assets/js/app.js",
    ):
        memfs.add(path, "")
    paths = PathRegistry()
    paths.add("core", "assets/")
    paths.add("cdn", "//cdn.example.com/lib/")
    return FileResolver(paths, "/site", memfs)


def test_glob_returns_sorted_root_relative_paths(resolver) -> None:
    assert resolver.find_files("core::*.css", "css") == [
        "assets/css/a.css",
        "assets/css/b.css",
    ]


def test_glob_does_not_descend_into_subdirectories(resolver) -> None:
    assert resolver.find_files("core::print/*.css", "css") == ["assets/css/print/p.css"]


def test_leading_slash_skips_type_folder(resolver) -> None:
    assert resolver.find_files("core::/vendor/x.js", "js") == ["assets/vendor/x.js"]


def test_no_match_raises_with_joined_pattern(resolver) -> None:
    with pytest.raises(NoFilesMatched) as excinfo:
        resolver.find_files("core::missing.css", "css")
    assert excinfo.value.pattern == "assets/css/missing.css"


def test_remote_namespace_is_returned_verbatim(resolver, memfs) -> None:
    assert resolver.find_files("cdn::jquery.js", "js") == ["//cdn.example.com/lib/js/jquery.js"]
    assert memfs.reads == []


def test_resolve_builds_resolved_files(resolver) -> None:
    files = resolver.resolve("core::app.js", "js", pre_minified=True)
    assert len(files) == 1
    assert files[0].path == "assets/js/app.js"
    assert files[0].absolute_path == "/site/assets/js/app.js"
    assert files[0].is_pre_minified is True
    assert files[0].remote is False


def test_remote_resolved_file_keeps_url_as_absolute_path(resolver) -> None:
    [remote] = resolver.resolve("cdn::jquery.js", "js")
    assert remote.absolute_path == "//cdn.example.com/lib/js/jquery.js"
    assert remote.remote is True


def test_unknown_type_is_rejected(resolver) -> None:
    with pytest.raises(UnknownAssetType):
        resolver.find_files("core::a.css", "font")


def test_doubled_separator_in_local_pattern_is_still_globbed(tmp_path) -> None:
    from assetgroups.filesystem import LocalFileSystem

    (tmp_path / "assets" / "css" / "sub").mkdir(parents=True)
    (tmp_path / "assets" / "css" / "sub" / "a.css").write_text("a{}", encoding="utf-8")
    paths = PathRegistry()
    paths.add("core", "assets/")
    resolver = FileResolver(paths, str(tmp_path), LocalFileSystem())

    [resolved] = resolver.resolve("core::sub//a.css", "css")
    assert resolved.path == "assets/css/sub/a.css"
    assert resolved.remote is False
    with pytest.raises(NoFilesMatched):
        resolver.find_files("core::sub//missing.css", "css")
