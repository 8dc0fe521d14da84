# SPDX-License-Identifier: AGPL-3.0-only
"""Caller-owned asset context.

An ``AssetContext`` owns one path registry, one group registry and one render
session. Nothing is module-global, so independent contexts (one per request,
one per test) never see each other's groups.
"""
from __future__ import annotations

import posixpath
import warnings
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Sequence, Union

from .cache import DEFAULT_CACHE_DIR, BuildCache
from .deps import DEFAULT_MAX_DEPTH, DependencyResolver, RenderState
from .errors import AssetWarning, UnknownRewriteMode
from .files import FileResolver
from .filesystem import FileSystem, LocalFileSystem
from .groups import GroupNames, GroupRegistry
from .minify import Minifier, minify
from .paths import DEFAULT_FOLDERS, DEFAULT_PATHS, PathRegistry
from .render import HtmlEmitter
from .rewrite import REWRITE_MODES, rewrite
from .types import (
    ASSET_TYPES,
    GLOBAL_GROUP,
    GROUP_TYPES,
    CacheArtifact,
    FileRef,
    Group,
    GroupOptions,
    RenderedGroup,
    ResolvedFile,
    check_type,
    is_remote,
)

PostLoadHook = Callable[[str, str, str, Any], str]
FilepathHook = Callable[[str, str, bool], str]


@dataclass
class Settings:
    """Everything needed to build an ``AssetContext``.

    ``root`` is the document root: namespace roots and ``cache_dir`` are
    relative to it, and resolved file paths are reported relative to it.
    ``groups`` maps type -> group name -> ``{"files": [...], <options>}``.
    """

    root: str = "."
    url: str = "/"
    cache_dir: str = DEFAULT_CACHE_DIR
    default_path: str = "core"
    paths: dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_PATHS))
    folders: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_FOLDERS))
    groups: dict[str, dict[str, dict[str, Any]]] = field(default_factory=dict)
    min: bool = True
    combine: bool = True
    deps_max_depth: int = DEFAULT_MAX_DEPTH
    css_uri_rewriter: str = "absolute"
    move_imports_to_top: bool = True
    show_files: bool = False
    show_files_inline: bool = False
    html5: bool = True
    inline_base: str = ""
    post_load_hook: PostLoadHook | None = None
    filepath_hook: FilepathHook | None = None
    minifiers: dict[str, Minifier] = field(default_factory=dict)
    verbose: bool = False


def _normalize_url(url: str) -> str:
    return (url or "").rstrip("/") + "/"


class AssetContext:
    def __init__(self, settings: Settings | None = None, fs: FileSystem | None = None):
        self.settings = settings or Settings()
        self.fs = fs or LocalFileSystem()
        self.reset()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Rebuild every registry from ``settings``, discarding runtime changes."""
        s = self.settings
        if s.css_uri_rewriter not in REWRITE_MODES:
            raise UnknownRewriteMode(s.css_uri_rewriter)
        self.url = _normalize_url(s.url)
        self.paths = PathRegistry(s.folders, s.default_path)
        for key, spec in s.paths.items():
            self.paths.add(key, spec)
        self.paths.set_default(s.default_path)
        self.groups = GroupRegistry(GroupOptions(min=s.min, combine=s.combine))
        self.state = RenderState()
        self.resolver = DependencyResolver(self.groups, self.state, s.deps_max_depth)
        self.files = FileResolver(self.paths, s.root, self.fs)
        self.cache = BuildCache(
            s.root,
            self.fs,
            s.cache_dir,
            move_imports_to_top=s.move_imports_to_top,
            show_files_inline=s.show_files_inline,
            verbose=s.verbose,
        )
        self.emitter = HtmlEmitter(html5=s.html5, show_files=s.show_files)
        self.post_load_hook = s.post_load_hook
        self.filepath_hook = s.filepath_hook
        self.inline_assets: dict[str, list[str]] = {t: [] for t in GROUP_TYPES}

        for asset_type, groups in s.groups.items():
            check_type(asset_type)
            for name, spec in groups.items():
                spec = dict(spec or {})
                self.add_group(asset_type, name, spec.pop("files", []), spec)
        # set_option('') targets the global group, so it always exists.
        for asset_type in GROUP_TYPES:
            self.groups.ensure(asset_type, GLOBAL_GROUP)

    def new_session(self) -> None:
        """Start a fresh render session.

        Groups emitted in the previous session were disabled as they were
        rendered; they're re-enabled so the next session sees them again.
        """
        previous = self.state.clear()
        for asset_type, names in previous.items():
            self.groups.set_enabled(asset_type, names, True)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def add_path(self, key: str, spec: Any) -> None:
        self.paths.add(key, spec)

    def register_path(self, key: str, root: str, dirs: Mapping[str, str] | None = None) -> None:
        self.paths.register(key, root, dirs)

    def set_path(self, key: str = "core") -> None:
        self.paths.set_default(key)

    # ------------------------------------------------------------------
    # Groups and assets
    # ------------------------------------------------------------------

    def add_group(
        self,
        asset_type: str,
        name: str,
        files: Iterable[Any] = (),
        options: GroupOptions | Mapping[str, Any] | None = None,
    ) -> Group:
        """Create a group and attach ``files``.

        Each file entry is a pattern string or a ``(primary, minified)`` pair.
        """
        group = self.groups.create(asset_type, name, options)
        for entry in files:
            if isinstance(entry, (list, tuple)):
                primary = entry[0] if entry else None
                minified = entry[1] if len(entry) > 1 else None
            else:
                primary, minified = entry, None
            self.add_asset(asset_type, primary, minified, name)
        return group

    def group_exists(self, asset_type: str, name: str) -> bool:
        return self.groups.exists(asset_type, name)

    def add_asset(self, asset_type: str, pattern: Any, minified: Any = None, group: str = GLOBAL_GROUP) -> None:
        # Non-string patterns are skipped so configs can switch a file off
        # with a conditional expression.
        if not isinstance(pattern, str):
            return
        if not isinstance(minified, str) or not minified:
            minified = None
        ref = FileRef(
            primary=self.paths.qualify(pattern),
            minified=self.paths.qualify(minified) if minified else None,
        )
        self.groups.add_files(asset_type, group, [ref])

    def css(self, sheet: Any, minified: Any = None, group: str = GLOBAL_GROUP) -> None:
        self.add_asset("css", sheet, minified, group)

    def js(self, script: Any, minified: Any = None, group: str = GLOBAL_GROUP) -> None:
        self.add_asset("js", script, minified, group)

    def css_inline(self, content: str) -> None:
        self.inline_assets["css"].append(content)

    def js_inline(self, content: str) -> None:
        self.inline_assets["js"].append(content)

    def enable(self, names: GroupNames) -> None:
        for asset_type in GROUP_TYPES:
            self.groups.set_enabled(asset_type, names, True)

    def disable(self, names: GroupNames) -> None:
        for asset_type in GROUP_TYPES:
            self.groups.set_enabled(asset_type, names, False)

    def enable_css(self, names: GroupNames) -> None:
        self.groups.set_enabled("css", names, True)

    def disable_css(self, names: GroupNames) -> None:
        self.groups.set_enabled("css", names, False)

    def enable_js(self, names: GroupNames) -> None:
        self.groups.set_enabled("js", names, True)

    def disable_js(self, names: GroupNames) -> None:
        self.groups.set_enabled("js", names, False)

    def set_option(self, asset_type: str, names: GroupNames, key: str, value: Any) -> None:
        self.groups.set_option(asset_type, names, key, value)

    def set_css_option(self, names: GroupNames, key: str, value: Any) -> None:
        self.groups.set_option("css", names, key, value)

    def set_js_option(self, names: GroupNames, key: str, value: Any) -> None:
        self.groups.set_option("js", names, key, value)

    def add_deps(self, asset_type: str, name: str, deps: GroupNames) -> None:
        self.groups.add_dependencies(asset_type, name, deps)

    def add_css_deps(self, name: str, deps: GroupNames) -> None:
        self.groups.add_dependencies("css", name, deps)

    def add_js_deps(self, name: str, deps: GroupNames) -> None:
        self.groups.add_dependencies("js", name, deps)

    def set_post_load_hook(self, hook: PostLoadHook | None) -> None:
        self.post_load_hook = hook

    def set_filepath_hook(self, hook: FilepathHook | None) -> None:
        self.filepath_hook = hook

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def process_filepath(self, path: str, asset_type: str, remote: bool | None = None) -> str:
        if self.filepath_hook is None:
            return path
        if remote is None:
            remote = is_remote(path)
        return self.filepath_hook(path, asset_type, remote)

    def get_filepath(
        self,
        pattern: str,
        asset_type: str,
        add_url: bool = False,
        force_list: bool = False,
    ) -> Union[str, list[str]]:
        check_type(asset_type, ASSET_TYPES)
        found = []
        for path in self.files.find_files(self.paths.qualify(pattern), asset_type):
            remote = is_remote(path)
            path = self.process_filepath(path, asset_type, remote)
            if add_url and not remote:
                path = self.url + path
            found.append(path)
        if len(found) == 1 and not force_list:
            return found[0]
        return found

    def _requested_names(self, asset_type: str, group: Union[str, Sequence[str], None]) -> list[str]:
        if group is None or group is False:
            return self.groups.names(asset_type)
        names = [group] if isinstance(group, str) else list(group)
        known = []
        for name in names:
            if self.groups.exists(asset_type, name):
                known.append(name)
            else:
                warnings.warn(f"Skipping unknown {asset_type} group {name!r}", AssetWarning, stacklevel=3)
        return known

    def files_to_render(
        self,
        asset_type: str,
        group: Union[str, Sequence[str], None] = None,
    ) -> dict[str, list[ResolvedFile]]:
        """Resolve the groups to emit, in order, with their concrete files.

        Each group returned is marked rendered (and disabled) for the rest of
        the session, so asking again yields nothing.
        """
        check_type(asset_type)
        requested = self._requested_names(asset_type, group)
        explicit = group is not None and group is not False
        order = self.resolver.render_order(asset_type, requested)
        result: dict[str, list[ResolvedFile]] = {}
        for name in order:
            grp = self.groups.get(asset_type, name)
            if not grp.files:
                if explicit and name in requested:
                    warnings.warn(f"{asset_type} group {name!r} has no files", AssetWarning, stacklevel=2)
                continue
            self.groups.set_enabled(asset_type, name, False)
            self.state.mark(asset_type, name)
            resolved: list[ResolvedFile] = []
            for ref in grp.files:
                if grp.options.min and ref.minified:
                    resolved.extend(self.files.resolve(ref.minified, asset_type, pre_minified=True))
                else:
                    resolved.extend(self.files.resolve(ref.primary, asset_type))
            result[name] = resolved
        return result

    # ------------------------------------------------------------------
    # Loading and combining
    # ------------------------------------------------------------------

    def rewrite_css(self, content: str, origin_dir: str, destination_dir: str | None) -> str:
        return rewrite(
            content,
            origin_dir,
            destination_dir,
            self.settings.css_uri_rewriter,
            url_prefix=self.url.rstrip("/"),
        )

    def load_file(
        self,
        file: ResolvedFile,
        asset_type: str,
        group_context: Any = None,
        destination_dir: str | None = None,
        apply_hook: bool = True,
    ) -> str:
        content = self.fs.read_text(file.absolute_path)
        if apply_hook and self.post_load_hook is not None:
            content = self.post_load_hook(content, file.absolute_path, asset_type, group_context)
        if asset_type == "css":
            content = self.rewrite_css(content, posixpath.dirname(file.path), destination_dir)
        return content

    def combine(
        self,
        asset_type: str,
        files: Sequence[ResolvedFile],
        minify_files: bool,
        group_context: Any = None,
    ) -> CacheArtifact:
        def _load(f: ResolvedFile, artifact_path: str) -> str:
            return self.load_file(f, asset_type, group_context, posixpath.dirname(artifact_path))

        def _minify(content: str, f: ResolvedFile) -> str:
            return minify(asset_type, content, f.path, self.settings.minifiers)

        return self.cache.combine(asset_type, files, minify_files, _load, _minify)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_groups(
        self,
        asset_type: str,
        group: Union[str, Sequence[str], None] = None,
        inline: bool | None = None,
        attrs: Mapping[str, str] | None = None,
    ) -> list[RenderedGroup]:
        """Produce per-group render output without formatting any markup.

        ``inline`` overrides each group's own option when given; non-empty
        ``attrs`` replace the group's attrs.
        """
        out = []
        for name, files in self.files_to_render(asset_type, group).items():
            grp = self.groups.get(asset_type, name)
            rendered = RenderedGroup(
                type=asset_type,
                name=name,
                attrs=dict(attrs) if attrs else dict(grp.options.attrs),
                inline=grp.options.inline if inline is None else bool(inline),
                combined=grp.options.combine,
                files=files,
            )
            if grp.options.combine:
                artifact = self.combine(asset_type, files, grp.options.min, files)
                rendered.artifact = artifact
                if rendered.inline:
                    content = self.cache.read(artifact)
                    if asset_type == "css":
                        content = self.rewrite_css(
                            content, posixpath.dirname(artifact.relative_path), self.settings.inline_base
                        )
                    rendered.contents.append(content)
                else:
                    rendered.paths.append(
                        self.url + self.process_filepath(artifact.relative_path, asset_type, False)
                    )
            else:
                for f in files:
                    if rendered.inline:
                        rendered.contents.append(
                            self.load_file(f, asset_type, files, self.settings.inline_base, apply_hook=False)
                        )
                    else:
                        base = "" if f.remote else self.url
                        rendered.paths.append(base + self.process_filepath(f.path, asset_type, f.remote))
            out.append(rendered)
        return out

    def _render(self, asset_type, group, inline, gen_tags, attrs):
        rendered = self.render_groups(asset_type, group, inline, attrs)
        if gen_tags:
            return "".join(self.emitter.emit(item) for item in rendered)
        values: list[str] = []
        for item in rendered:
            values.extend(item.contents if item.inline else item.paths)
        return values

    def render_css(
        self,
        group: Union[str, Sequence[str], None] = None,
        inline: bool | None = None,
        gen_tags: bool = True,
        attrs: Mapping[str, str] | None = None,
    ) -> Union[str, list[str]]:
        return self._render("css", group, inline, gen_tags, attrs)

    def render_js(
        self,
        group: Union[str, Sequence[str], None] = None,
        inline: bool | None = None,
        gen_tags: bool = True,
        attrs: Mapping[str, str] | None = None,
    ) -> Union[str, list[str]]:
        return self._render("js", group, inline, gen_tags, attrs)

    def render(
        self,
        group: Union[str, Sequence[str], None] = None,
        inline: bool | None = None,
        attrs: Mapping[str, str] | None = None,
    ) -> str:
        return self.render_css(group, inline, True, attrs) + self.render_js(group, inline, True, attrs)

    def render_css_inline(self) -> str:
        return self.emitter.inline_block("css", self.inline_assets["css"])

    def render_js_inline(self) -> str:
        return self.emitter.inline_block("js", self.inline_assets["js"])

    def img(self, images: Union[str, Iterable[str]], alt: str = "", attrs: Mapping[str, str] | None = None) -> str:
        if isinstance(images, str):
            images = [images]
        tags = []
        for image in images:
            for path in self.files.find_files(self.paths.qualify(image), "img"):
                remote = is_remote(path)
                src = ("" if remote else self.url) + self.process_filepath(path, "img", remote)
                tags.append(self.emitter.img(src, alt, attrs))
        return "".join(tags)

    # ------------------------------------------------------------------
    # Cache sweep
    # ------------------------------------------------------------------

    def clear_cache(self, before=None) -> list[str]:
        return self.cache.clear(before, "*")

    def clear_css_cache(self, before=None) -> list[str]:
        return self.cache.clear(before, "*.css")

    def clear_js_cache(self, before=None) -> list[str]:
        return self.cache.clear(before, "*.js")

    def list_artifacts(self, type_filter: str = "*") -> list[dict]:
        return self.cache.list_artifacts(type_filter)
