"""Helpers for building small registries and resolvers in tests."""

from compat.store import CompatDataStore
from registry.loader import build_registry
from registry.modules import FeatureModule, ModuleRegistry
from resolution.resolver import Resolver


def make_registry(*specs, check_cycles=True):
    """Build a registry from ``(id, [deps])`` tuples or bare ids, in order."""
    modules = []
    for spec in specs:
        if isinstance(spec, str):
            modules.append(FeatureModule.create(spec))
        else:
            mid, deps = spec
            modules.append(FeatureModule.create(mid, deps))
    if check_cycles:
        return build_registry(modules)
    return ModuleRegistry(modules)


def make_resolver(compat, *specs):
    """Resolver over an in-memory compat mapping and module specs."""
    return Resolver(CompatDataStore.from_mapping(compat), make_registry(*specs))
