# SPDX-License-Identifier: AGPL-3.0-only
from __future__ import annotations

from html import escape
from typing import Any, Iterable, Mapping

from .types import RenderedGroup

_MIME_TYPES = {
    "css": "text/css",
    "js": "text/javascript",
}


def _render_attrs(props: Mapping[str, Any]) -> str:
    parts: list[str] = []
    for key, value in props.items():
        if value is None or value is False:
            continue
        if value is True:
            parts.append(str(key))
        else:
            parts.append(f'{key}="{escape(str(value), quote=True)}"')
    return (" " + " ".join(parts)) if parts else ""


class HtmlEmitter:
    """Formats rendered groups as ``<link>``, ``<script>`` and ``<style>`` tags.

    Attribute values are escaped. Inlined CSS and JS is emitted verbatim.
    """

    def __init__(self, html5: bool = True, show_files: bool = False):
        self.html5 = html5
        self.show_files = show_files

    def _with_type(self, asset_type: str, attrs: Mapping[str, Any]) -> dict[str, Any]:
        if self.html5:
            return dict(attrs)
        return {"type": _MIME_TYPES[asset_type], **attrs}

    def stylesheet(self, href: str, attrs: Mapping[str, Any] | None = None) -> str:
        props = {"rel": "stylesheet", "href": href, **self._with_type("css", attrs or {})}
        return f"<link{_render_attrs(props)} />\n"

    def style(self, content: str, attrs: Mapping[str, Any] | None = None) -> str:
        return f"<style{_render_attrs(self._with_type('css', attrs or {}))}>\n{content}\n</style>\n"

    def script(self, src: str, attrs: Mapping[str, Any] | None = None) -> str:
        props = {"src": src, **self._with_type("js", attrs or {})}
        return f"<script{_render_attrs(props)}></script>\n"

    def inline_script(self, content: str, attrs: Mapping[str, Any] | None = None) -> str:
        return f"<script{_render_attrs(self._with_type('js', attrs or {}))}>\n{content}\n</script>\n"

    def files_comment(self, group: RenderedGroup) -> str:
        listing = "".join(f"\t{f.path}\n" for f in group.files)
        return f"<!--\nGroup: {group.name}\n{listing}-->\n"

    def emit(self, group: RenderedGroup) -> str:
        out = []
        if self.show_files and group.combined and not group.inline:
            out.append(self.files_comment(group))
        if group.type == "css":
            if group.inline:
                out.extend(self.style(content, group.attrs) for content in group.contents)
            else:
                out.extend(self.stylesheet(path, group.attrs) for path in group.paths)
        else:
            if group.inline:
                out.extend(self.inline_script(content, group.attrs) for content in group.contents)
            else:
                out.extend(self.script(path, group.attrs) for path in group.paths)
        return "".join(out)

    def inline_block(self, asset_type: str, snippets: Iterable[str]) -> str:
        snippets = list(snippets)
        if not snippets:
            return ""
        content = "\n".join(snippets)
        if asset_type == "css":
            return self.style(content)
        return self.inline_script(content)

    def img(self, src: str, alt: str = "", attrs: Mapping[str, Any] | None = None) -> str:
        props = {"src": src, "alt": alt, **dict(attrs or {})}
        return f"<img{_render_attrs(props)} />\n"
