"""Tests for the module registry and its loaders."""

import json

import pytest

from registry.loader import (
    build_registry,
    load_registry_file,
    parse_dependency_markers,
    scan_shim_directory,
)
from registry.modules import FeatureModule, ModuleRegistry
from resolution.errors import CyclicDependency, DataLoadError, DuplicateModule, UnknownModule


class TestModuleRegistry:
    """Lookup behaviour of a built registry."""

    def setup_method(self):
        self.registry = ModuleRegistry([
            FeatureModule.create("a", globals_=["Map"]),
            FeatureModule.create("b", ["a"]),
        ])

    def test_get_and_sequence(self):
        assert self.registry.get("b").dependencies == ("a",)
        assert self.registry.sequence_of("a") == 0
        assert self.registry.sequence_of("b") == 1

    def test_ids_and_all(self):
        assert self.registry.ids() == ("a", "b")
        assert list(self.registry) == ["a", "b"]
        assert self.registry.all() == frozenset({"a", "b"})
        assert len(self.registry) == 2

    def test_dependencies_of(self):
        assert self.registry.dependencies_of("b") == ("a",)
        assert self.registry.dependencies_of("a") == ()

    def test_unknown(self):
        with pytest.raises(UnknownModule) as exc_info:
            self.registry.get("zzz")
        assert exc_info.value.module_id == "zzz"
        assert "zzz" in str(exc_info.value)


def test_create_defaults():
    mod = FeatureModule.create("es.map", ["x", "y", "x"])
    assert mod.dependencies == ("x", "y")
    assert mod.payload == "es.map.js"
    assert mod.globals == frozenset()


def test_duplicate_rejected():
    with pytest.raises(DuplicateModule) as exc_info:
        ModuleRegistry([FeatureModule.create("a"), FeatureModule.create("a")])
    assert exc_info.value.module_id == "a"


def test_dangling_dependency_rejected():
    with pytest.raises(UnknownModule):
        ModuleRegistry([FeatureModule.create("a", ["missing"])])


def test_cycle_rejected_at_load():
    with pytest.raises(CyclicDependency) as exc_info:
        build_registry([
            FeatureModule.create("a", ["b"]),
            FeatureModule.create("b", ["a"]),
        ])
    assert exc_info.value.cycle == ["a", "b", "a"]


class TestLoadRegistryFile:
    """Registration lists from JSON/YAML."""

    def test_yaml(self, tmp_path):
        path = tmp_path / "modules.yaml"
        path.write_text(
            "- id: es.map\n"
            "- id: esnext.map.from\n"
            "  dependencies: [es.map]\n"
            "  payload: map-from.js\n"
            "  globals: [Map]\n",
            encoding="utf-8",
        )
        registry = load_registry_file(str(path))
        assert registry.ids() == ("es.map", "esnext.map.from")
        assert registry.get("esnext.map.from").payload == "map-from.js"
        assert registry.get("es.map").payload == "es.map.js"

    def test_schema_violation(self, tmp_path):
        path = tmp_path / "modules.json"
        path.write_text(json.dumps([{"dependencies": []}]), encoding="utf-8")
        with pytest.raises(DataLoadError):
            load_registry_file(str(path))

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "modules.json"
        path.write_text(json.dumps([{"id": "a", "deps": []}]), encoding="utf-8")
        with pytest.raises(DataLoadError):
            load_registry_file(str(path))

    def test_duplicate_in_file(self, tmp_path):
        path = tmp_path / "modules.json"
        path.write_text(json.dumps([{"id": "a"}, {"id": "a"}]), encoding="utf-8")
        with pytest.raises(DuplicateModule):
            load_registry_file(str(path))


def test_parse_dependency_markers():
    source = (
        "'use strict';\n"
        "// dependency: es.array.iterator\n"
        "var x = 1;\n"
        "    // dependency: es.object.to-string\n"
        "// dependency: es.array.iterator\n"
        "// dependency:\n"
    )
    assert parse_dependency_markers(source) == ["es.array.iterator", "es.object.to-string"]


def test_scan_shim_directory(shim_tree):
    (shim_tree / "shims" / "README.md").write_text("docs", encoding="utf-8")
    registry = scan_shim_directory(str(shim_tree / "shims"))
    assert registry.ids() == (
        "es.array.iterator",
        "es.map.constructor",
        "esnext.map.from",
        "web.dom-collections.iterator",
    )
    assert registry.dependencies_of("esnext.map.from") == ("es.map.constructor",)
    assert registry.dependencies_of("web.dom-collections.iterator") == ("es.array.iterator",)
    assert registry.get("esnext.map.from").payload == "esnext.map.from.js"


def test_scan_missing_directory(tmp_path):
    with pytest.raises(DataLoadError):
        scan_shim_directory(str(tmp_path / "nope"))
