# SPDX-License-Identifier: AGPL-3.0-only
import importlib
import importlib.util
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union
try:
    import tomllib
except ImportError:
    import tomli as tomllib

from .cache import DEFAULT_CACHE_DIR
from .context import AssetContext, Settings
from .deps import DEFAULT_MAX_DEPTH
from .filesystem import FileSystem
from .paths import DEFAULT_FOLDERS, DEFAULT_PATHS
from .types import GROUP_TYPES

CONFIG_FILENAME = "assetgroups.toml"

# Default configuration structure
DEFAULT_CONFIG = {
    "assets": {
        "root": ".",
        "url": "/",
        "cache_dir": DEFAULT_CACHE_DIR,
        "default_path": "core",
        "min": True,
        "combine": True,
        "deps_max_depth": DEFAULT_MAX_DEPTH,
        "css_uri_rewriter": "absolute",
        "move_imports_to_top": True,
        "show_files": False,
        "show_files_inline": False,
        "html5": True,
        "inline_base": "",
        "folders": dict(DEFAULT_FOLDERS),
    },
    "paths": dict(DEFAULT_PATHS),
    "groups": {
        # "css": { "name": { "files": [...], "deps": [...] } }
    },
    "hooks": {
        # "post_load": "hooks.py:post_load"
    },
}


class Config:
    def __init__(self, data: Dict[str, Any], path: Path):
        self.data = data
        self.path = path
        self.root = path.parent

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "Config":
        """Load configuration from assetgroups.toml."""
        if path is None:
            path = Path.cwd() / CONFIG_FILENAME
            if not path.exists():
                raise FileNotFoundError(
                    f"No {CONFIG_FILENAME} found at {path}. Pass --config or create one."
                )
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except Exception as e:
            raise ValueError(f"Failed to parse {path}: {e}") from e

        return cls(data, path)

    @property
    def assets(self) -> Dict[str, Any]:
        return self.data.get("assets", {})

    @property
    def folders(self) -> Dict[str, str]:
        return {**DEFAULT_FOLDERS, **self.assets.get("folders", {})}

    @property
    def paths(self) -> Dict[str, Any]:
        # The core namespace exists unless the file overrides it.
        return {**DEFAULT_PATHS, **self.data.get("paths", {})}

    @property
    def groups(self) -> Dict[str, Dict[str, Any]]:
        groups = self.data.get("groups", {})
        return {t: dict(groups.get(t, {})) for t in GROUP_TYPES}

    @property
    def hooks(self) -> Dict[str, str]:
        return self.data.get("hooks", {})

    def resolve_path(self, relative_path: str) -> Path:
        return self.root / relative_path

    def get_option(self, key: str) -> Any:
        return self.assets.get(key, DEFAULT_CONFIG["assets"][key])

    def load_hook(self, name: str) -> Optional[Callable]:
        entry = self.hooks.get(name)
        if not entry:
            return None
        return load_entrypoint(entry, self.root)

    def to_settings(self, **overrides: Any) -> Settings:
        settings = Settings(
            root=str(self.resolve_path(self.get_option("root"))),
            url=self.get_option("url"),
            cache_dir=self.get_option("cache_dir"),
            default_path=self.get_option("default_path"),
            paths=self.paths,
            folders=self.folders,
            groups=self.groups,
            min=bool(self.get_option("min")),
            combine=bool(self.get_option("combine")),
            deps_max_depth=int(self.get_option("deps_max_depth")),
            css_uri_rewriter=self.get_option("css_uri_rewriter"),
            move_imports_to_top=bool(self.get_option("move_imports_to_top")),
            show_files=bool(self.get_option("show_files")),
            show_files_inline=bool(self.get_option("show_files_inline")),
            html5=bool(self.get_option("html5")),
            inline_base=self.get_option("inline_base"),
            post_load_hook=self.load_hook("post_load"),
            filepath_hook=self.load_hook("filepath"),
        )
        for key, value in overrides.items():
            setattr(settings, key, value)
        return settings


def load_entrypoint(entry: str, base: Path) -> Callable:
    """Load ``"module.py:name"`` (relative to ``base``) or ``"pkg.module:name"``."""
    if ":" not in entry:
        raise ValueError(f"Invalid hook entrypoint: {entry} (expected module:callable)")
    module_ref, attr = entry.rsplit(":", 1)

    if module_ref.endswith(".py") or "/" in module_ref:
        module_path = base / module_ref
        if not module_path.exists():
            raise FileNotFoundError(f"Hook module not found: {module_path}")
        module_name = f"_assetgroups_hook_{module_path.stem}"
        spec = importlib.util.spec_from_file_location(module_name, module_path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Could not load spec for {module_path}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
    else:
        module = importlib.import_module(module_ref)

    if not hasattr(module, attr):
        raise ValueError(f"'{attr}' not found in {module_ref}")
    hook = getattr(module, attr)
    if not callable(hook):
        raise ValueError(f"Hook {entry} is not callable")
    return hook


def load_context(
    path: Optional[Union[str, Path]] = None,
    fs: Optional[FileSystem] = None,
    **overrides: Any,
) -> AssetContext:
    """Build an ``AssetContext`` from a config file."""
    config = Config.load(path)
    return AssetContext(config.to_settings(**overrides), fs=fs)
