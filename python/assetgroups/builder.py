# SPDX-License-Identifier: AGPL-3.0-only
import json
import sys

from .config import load_context
from .types import GROUP_TYPES


def cmd_build(args):
    """Combine every enabled group (or one named group) into the build cache."""
    try:
        context = load_context(args.config, verbose=bool(getattr(args, "verbose", False)))
    except Exception as e:
        sys.stderr.write(f"[error] Failed to load config: {e}\n")
        sys.exit(1)

    types = [args.type] if getattr(args, "type", None) else list(GROUP_TYPES)
    group = getattr(args, "group", None)

    entries = []
    for asset_type in types:
        for name, files in context.files_to_render(asset_type, group).items():
            options = context.groups.get(asset_type, name).options
            entry = {
                "type": asset_type,
                "group": name,
                "files": [f.path for f in files],
                "artifact": None,
                "written": False,
            }
            if options.combine:
                artifact = context.combine(asset_type, files, options.min, files)
                entry["artifact"] = artifact.relative_path
                entry["written"] = artifact.written
            entries.append(entry)

    if args.json:
        result = {
            "schema": "assetgroups.build.v1",
            "ok": True,
            "cache_dir": context.cache.directory,
            "groups": entries,
        }
        sys.stdout.write(json.dumps(result, ensure_ascii=True) + "\n")
        return

    written = 0
    for entry in entries:
        if entry["artifact"] is None:
            sys.stdout.write(f"  {entry['type']}:{entry['group']} not combined ({len(entry['files'])} files)\n")
            continue
        state = "wrote" if entry["written"] else "reused"
        written += int(entry["written"])
        sys.stdout.write(f"  {entry['type']}:{entry['group']} {state} {entry['artifact']}\n")
    sys.stdout.write(f"[ok] Built {len(entries)} groups ({written} written)\n")
