"""Structured diagnostics recorded alongside a resolution result."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class DiagnosticKind(Enum):
    """Condition that produced a diagnostic."""
    UNKNOWN_MODULE = "unknown_module"
    DUPLICATE_MODULE = "duplicate_module"
    CYCLIC_DEPENDENCY = "cyclic_dependency"
    BROKEN_EXCLUSION = "broken_exclusion"
    MALFORMED_VERSION = "malformed_version"
    CONFLICTING_DIRECTIVES = "conflicting_directives"


class Severity(Enum):
    """How serious the condition is."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """A single auditable note about a decision taken during load or resolution."""
    kind: DiagnosticKind
    severity: Severity
    message: str
    module: Optional[str] = None
    related: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for JSON reports."""
        return {
            "kind": self.kind.value,
            "severity": self.severity.value,
            "module": self.module,
            "message": self.message,
            "related": list(self.related),
        }
