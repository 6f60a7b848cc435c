"""Module registration loaders.

Two input forms are supported:

* a JSON/YAML list of ``{id, dependencies, payload, globals}`` entries;
* a directory of shim sources, one ``<id>.js`` per module, whose
  ``// dependency: <id>`` comment lines declare dependencies.

Either way the result is a validated, acyclic ModuleRegistry; any
inconsistency aborts the load.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Iterable, List, Mapping

from common.datafile import load_structured
from common.schemas import MODULES_SCHEMA, SchemaError, validate
from constants import Constants
from graph.ordering import DependencyGraph
from resolution.errors import DataLoadError
from .modules import FeatureModule, ModuleRegistry

logger = logging.getLogger(__name__)


def build_registry(modules: Iterable[FeatureModule]) -> ModuleRegistry:
    """Build a registry and reject it if the full graph has a cycle.

    Raises:
        DuplicateModule, UnknownModule, CyclicDependency
    """
    registry = ModuleRegistry(modules)
    DependencyGraph(registry).check_acyclic()
    return registry


def modules_from_entries(entries: Iterable[Mapping[str, Any]]) -> List[FeatureModule]:
    """Convert decoded registration entries into FeatureModule objects."""
    return [
        FeatureModule.create(
            entry["id"],
            entry.get("dependencies"),
            entry.get("payload"),
            entry.get("globals"),
        )
        for entry in entries
    ]


def load_registry_file(path: str) -> ModuleRegistry:
    """Load a registration list from a JSON/YAML file.

    Raises:
        DataLoadError: unreadable file or schema violation.
    """
    data = load_structured(path)
    try:
        validate(MODULES_SCHEMA, data, "module list")
    except SchemaError as e:
        raise DataLoadError(path, str(e)) from e
    registry = build_registry(modules_from_entries(data))
    logger.info("Registered %d modules from %s", len(registry), path)
    return registry


def parse_dependency_markers(source: str) -> List[str]:
    """Extract ``// dependency: <id>`` declarations in order of appearance."""
    deps = []
    for line in source.splitlines():
        stripped = line.strip()
        if not stripped.startswith(Constants.DEPENDENCY_MARKER):
            continue
        dep = stripped[len(Constants.DEPENDENCY_MARKER):].strip()
        if dep:
            deps.append(dep)
    return list(dict.fromkeys(deps))


def scan_shim_directory(root: str) -> ModuleRegistry:
    """Derive registrations from a directory of shim sources.

    Files are registered in sorted file-name order; only top-level ``.js``
    files are considered.

    Raises:
        DataLoadError: when the directory does not exist or a file is unreadable.
    """
    if not os.path.isdir(root):
        raise DataLoadError(root, "shim directory not found")
    modules = []
    for name in sorted(os.listdir(root)):
        if not name.endswith(Constants.SHIM_EXTENSION):
            continue
        path = os.path.join(root, name)
        if not os.path.isfile(path):
            continue
        try:
            with open(path, "r", encoding="utf-8") as fh:
                source = fh.read()
        except (OSError, UnicodeDecodeError) as e:
            raise DataLoadError(path, f"read error: {e}") from e
        module_id = name[: -len(Constants.SHIM_EXTENSION)]
        modules.append(FeatureModule.create(module_id, parse_dependency_markers(source), name))
    registry = build_registry(modules)
    logger.info("Registered %d modules from shim directory %s", len(registry), root)
    return registry
