"""Feature module catalog.

The registry is built once from a complete static list and is read-only
afterwards. Registration order is captured explicitly as ``sequence`` so that
later ordering never depends on container iteration order.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Iterator, Optional, Sequence, Tuple

from constants import Constants
from resolution.errors import DuplicateModule, UnknownModule


@dataclass(frozen=True)
class FeatureModule:
    """One unit of shim code and its declared dependencies.

    ``payload`` is an opaque reference handed to a payload resolver;
    ``globals`` is only used in diagnostics.
    """
    id: str
    dependencies: Tuple[str, ...] = ()
    payload: str = ""
    globals: FrozenSet[str] = field(default_factory=frozenset)
    sequence: int = -1

    @classmethod
    def create(
        cls,
        module_id: str,
        dependencies: Optional[Sequence[str]] = None,
        payload: Optional[str] = None,
        globals_: Optional[Iterable[str]] = None,
    ) -> "FeatureModule":
        """Build an unregistered module; duplicate dependency ids collapse in order."""
        deps = tuple(dict.fromkeys(dependencies or ()))
        return cls(
            id=module_id,
            dependencies=deps,
            payload=payload or f"{module_id}{Constants.SHIM_EXTENSION}",
            globals=frozenset(globals_ or ()),
        )


class ModuleRegistry:
    """Immutable catalog keyed by module id."""

    def __init__(self, modules: Iterable[FeatureModule]):
        by_id: Dict[str, FeatureModule] = {}
        for seq, module in enumerate(modules):
            if module.id in by_id:
                raise DuplicateModule(module.id)
            by_id[module.id] = FeatureModule(
                id=module.id,
                dependencies=module.dependencies,
                payload=module.payload,
                globals=module.globals,
                sequence=seq,
            )
        for module in by_id.values():
            for dep in module.dependencies:
                if dep not in by_id:
                    raise UnknownModule(dep, f"declared as dependency of '{module.id}'")
        self._modules = MappingProxyType(by_id)
        self._order = tuple(by_id)

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._modules

    def __iter__(self) -> Iterator[str]:
        """Iterate ids in registration order."""
        return iter(self._order)

    def get(self, module_id: str) -> FeatureModule:
        try:
            return self._modules[module_id]
        except KeyError:
            raise UnknownModule(module_id) from None

    def all(self) -> FrozenSet[str]:
        return frozenset(self._modules)

    def ids(self) -> Tuple[str, ...]:
        """All ids in registration order."""
        return self._order

    def dependencies_of(self, module_id: str) -> Tuple[str, ...]:
        """Direct dependencies, in declared order."""
        return self.get(module_id).dependencies

    def sequence_of(self, module_id: str) -> int:
        return self.get(module_id).sequence
