# SPDX-License-Identifier: AGPL-3.0-only
import argparse
import json
import sys

from . import builder as builder_module
from . import cache as cache_module
from .config import load_context
from .types import ASSET_TYPES, GROUP_TYPES


def cmd_render(args):
    context = load_context(args.config)
    inline = True if args.inline else None
    out = ""
    if args.type in (None, "css"):
        out += context.render_css(args.group, inline)
    if args.type in (None, "js"):
        out += context.render_js(args.group, inline)
    if args.json:
        result = {"schema": "assetgroups.render.v1", "ok": True, "html": out}
        sys.stdout.write(json.dumps(result, ensure_ascii=True) + "\n")
    else:
        sys.stdout.write(out)


def cmd_resolve(args):
    context = load_context(args.config)
    paths = context.get_filepath(args.pattern, args.type, add_url=args.url, force_list=True)
    if args.json:
        result = {
            "schema": "assetgroups.resolve.v1",
            "pattern": args.pattern,
            "type": args.type,
            "paths": paths,
        }
        sys.stdout.write(json.dumps(result, ensure_ascii=True) + "\n")
        return
    for path in paths:
        sys.stdout.write(path + "\n")


def cmd_groups(args):
    context = load_context(args.config)
    groups = [
        group.to_dict()
        for asset_type in GROUP_TYPES
        for group in context.groups.groups(asset_type)
    ]
    if args.json:
        result = {"schema": "assetgroups.groups.v1", "count": len(groups), "groups": groups}
        sys.stdout.write(json.dumps(result, ensure_ascii=True) + "\n")
        return
    for group in groups:
        flags = [k for k in ("enabled", "combine", "min", "inline") if group[k]]
        deps = f" deps={','.join(group['deps'])}" if group["deps"] else ""
        sys.stdout.write(
            f"  {group['type']}:{group['name']} files={len(group['files'])} [{' '.join(flags)}]{deps}\n"
        )
    sys.stdout.write(f"[ok] {len(groups)} groups\n")


def _add_config(p):
    p.add_argument("--config", default=None, help="Path to assetgroups.toml")


def _build_parser():
    parser = argparse.ArgumentParser(prog="assetgroups")
    parser.add_argument("--json", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    p_build = sub.add_parser("build", help="Combine groups into the build cache")
    _add_config(p_build)
    p_build.add_argument("--type", choices=GROUP_TYPES, default=None)
    p_build.add_argument("--group", default=None)
    p_build.add_argument("--verbose", action="store_true")
    p_build.set_defaults(func=builder_module.cmd_build)

    p_render = sub.add_parser("render", help="Print HTML tags for groups")
    _add_config(p_render)
    p_render.add_argument("--type", choices=GROUP_TYPES, default=None)
    p_render.add_argument("--group", default=None)
    p_render.add_argument("--inline", action="store_true")
    p_render.set_defaults(func=cmd_render)

    p_resolve = sub.add_parser("resolve", help="Print the files a pattern resolves to")
    p_resolve.add_argument("pattern")
    _add_config(p_resolve)
    p_resolve.add_argument("--type", choices=ASSET_TYPES, default="css")
    p_resolve.add_argument("--url", action="store_true", help="Prefix local paths with the asset URL")
    p_resolve.set_defaults(func=cmd_resolve)

    p_groups = sub.add_parser("groups", help="List registered groups")
    _add_config(p_groups)
    p_groups.set_defaults(func=cmd_groups)

    p_cache = sub.add_parser("cache", help="Manage the build cache")
    cache_sub = p_cache.add_subparsers(dest="cache_command", required=True)

    p_cache_dir = cache_sub.add_parser("dir", help="Print cache directory path")
    _add_config(p_cache_dir)
    p_cache_dir.set_defaults(func=cache_module.cmd_cache_dir)

    p_cache_list = cache_sub.add_parser("list", help="List cached artifacts")
    _add_config(p_cache_list)
    p_cache_list.add_argument("--type", choices=GROUP_TYPES, default=None)
    p_cache_list.set_defaults(func=cache_module.cmd_cache_list)

    p_cache_clear = cache_sub.add_parser("clear", help="Remove old cached artifacts")
    _add_config(p_cache_clear)
    p_cache_clear.add_argument("--max-age-days", type=int, default=0)
    p_cache_clear.add_argument("--type", choices=GROUP_TYPES, default=None)
    p_cache_clear.add_argument("--dry-run", action="store_true")
    p_cache_clear.set_defaults(func=cache_module.cmd_cache_clear)

    return parser


def main(argv=None):
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except Exception as exc:
        if args.json:
            err = {
                "schema": "assetgroups.error.v1",
                "ok": False,
                "code": type(exc).__name__,
                "message": str(exc),
            }
            sys.stdout.write(json.dumps(err, ensure_ascii=True) + "\n")
        else:
            sys.stderr.write(f"[error] {exc}\n")
        return 3
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
