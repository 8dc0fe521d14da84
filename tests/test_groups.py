from __future__ import annotations

import pytest

from assetgroups.errors import GroupAlreadyExists, UnknownAssetType, UnknownGroup
from assetgroups.groups import GroupRegistry
from assetgroups.types import GLOBAL_GROUP, FileRef, GroupOptions


def _registry() -> GroupRegistry:
    registry = GroupRegistry()
    for asset_type in ("css", "js"):
        registry.ensure(asset_type, GLOBAL_GROUP)
    return registry


def test_create_applies_type_defaults_and_ignores_unknown_keys() -> None:
    registry = _registry()
    group = registry.create("css", "base", {"min": False, "colour": "blue"})
    assert group.options.min is False
    assert group.options.combine is True
    assert group.options.enabled is True
    assert group.files == []


def test_duplicate_group_is_rejected() -> None:
    registry = _registry()
    registry.create("js", "app")
    with pytest.raises(GroupAlreadyExists) as excinfo:
        registry.create("js", "app")
    assert excinfo.value.name == "app"
    assert excinfo.value.type == "js"


def test_same_name_in_both_types_is_allowed() -> None:
    registry = _registry()
    registry.create("css", "app")
    registry.create("js", "app")
    assert registry.exists("css", "app")
    assert registry.exists("js", "app")


def test_add_files_creates_group_on_demand() -> None:
    registry = _registry()
    registry.add_files("css", "late", [FileRef("core::a.css")])
    assert registry.get("css", "late").files == [FileRef("core::a.css")]


def test_get_unknown_group_raises() -> None:
    with pytest.raises(UnknownGroup):
        _registry().get("css", "nope")


def test_unknown_type_is_rejected() -> None:
    with pytest.raises(UnknownAssetType):
        _registry().create("png", "x")


def test_set_enabled_ignores_unknown_names() -> None:
    registry = _registry()
    registry.create("css", "base")
    registry.set_enabled("css", ["base", "nope"], False)
    assert registry.get("css", "base").enabled is False


def test_empty_name_targets_global_group() -> None:
    registry = _registry()
    registry.set_option("js", "", "inline", True)
    assert registry.get("js", GLOBAL_GROUP).options.inline is True


def test_star_updates_existing_groups_and_future_defaults() -> None:
    registry = _registry()
    registry.create("css", "base")
    registry.set_option("css", "*", "min", False)
    assert registry.get("css", "base").options.min is False
    assert registry.create("css", "later").options.min is False
    assert registry.create("js", "other").options.min is True


def test_set_option_validates_every_name_before_mutating() -> None:
    registry = _registry()
    registry.create("css", "base")
    with pytest.raises(UnknownGroup):
        registry.set_option("css", ["base", "missing"], "combine", False)
    assert registry.get("css", "base").options.combine is True


def test_set_option_rejects_unknown_option() -> None:
    registry = _registry()
    registry.create("css", "base")
    with pytest.raises(ValueError):
        registry.set_option("css", "base", "colour", "blue")


def test_set_option_coerces_deps_and_attrs() -> None:
    registry = _registry()
    registry.create("js", "app")
    registry.set_option("js", "app", "deps", "lib")
    registry.set_option("js", "app", "attrs", {"defer": "defer"})
    options = registry.get("js", "app").options
    assert options.deps == ["lib"]
    assert options.attrs == {"defer": "defer"}


def test_add_dependencies_is_an_ordered_union() -> None:
    registry = _registry()
    registry.create("js", "app", {"deps": ["lib"]})
    registry.add_dependencies("js", "app", ["polyfills", "lib"])
    registry.add_dependencies("js", "app", "polyfills")
    assert registry.get("js", "app").options.deps == ["lib", "polyfills"]


def test_add_dependencies_to_unknown_group_raises() -> None:
    with pytest.raises(UnknownGroup):
        _registry().add_dependencies("js", "nope", ["lib"])


def test_group_options_copy_is_independent() -> None:
    original = GroupOptions(deps=["a"], attrs={"media": "print"})
    copied = original.copy()
    copied.deps.append("b")
    copied.attrs["media"] = "screen"
    assert original.deps == ["a"]
    assert original.attrs == {"media": "print"}
