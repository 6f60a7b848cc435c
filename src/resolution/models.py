"""Data models for resolution requests and results."""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

from constants import BrokenExclusionPolicy, ConflictPolicy, TargetPresets
from versioning.models import EnvironmentVersion
from .diagnostics import Diagnostic, Severity


@dataclass(frozen=True)
class TargetSpec:
    """Environments a build must support.

    An explicit target set (even an empty one) overrides the preset. With no
    explicit targets and no preset the ``none`` preset applies.
    """
    explicit: Optional[Tuple[EnvironmentVersion, ...]] = None
    preset: Optional[TargetPresets] = None

    @classmethod
    def of(cls, *targets: EnvironmentVersion) -> "TargetSpec":
        return cls(explicit=tuple(targets))

    @classmethod
    def named(cls, preset: TargetPresets) -> "TargetSpec":
        return cls(preset=preset)

    @property
    def effective_preset(self) -> Optional[TargetPresets]:
        if self.explicit is not None:
            return None
        return self.preset or TargetPresets.NONE


@dataclass(frozen=True)
class ResolutionRequest:
    """Everything one ``resolve`` call needs besides the shared data."""
    targets: TargetSpec = field(default_factory=TargetSpec)
    exclude: FrozenSet[str] = frozenset()
    include: FrozenSet[str] = frozenset()
    # Exact ids, or prefixes ending in "." or "*"; None means every module.
    modules_filter: Optional[Tuple[str, ...]] = None
    conflict_policy: ConflictPolicy = ConflictPolicy.INCLUDE
    broken_exclusion_policy: BrokenExclusionPolicy = BrokenExclusionPolicy.DROP


@dataclass(frozen=True)
class ResolutionResult:
    """Ordered, duplicate-free module ids plus the audit trail."""
    modules: Tuple[str, ...]
    seed: FrozenSet[str]
    targets: Tuple[EnvironmentVersion, ...]
    diagnostics: Tuple[Diagnostic, ...] = ()

    def __len__(self) -> int:
        return len(self.modules)

    def __iter__(self):
        return iter(self.modules)

    @property
    def has_warnings(self) -> bool:
        return any(d.severity is not Severity.INFO for d in self.diagnostics)

    def to_dict(self) -> dict:
        """Serialize for JSON reports."""
        return {
            "modules": list(self.modules),
            "seed": sorted(self.seed),
            "targets": {t.environment: str(t.version) for t in self.targets},
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
