"""Typed failures raised while loading data or resolving a request."""

from __future__ import annotations

from typing import Optional, Sequence


class ShimBuildError(Exception):
    """Base class for every failure raised by the build core."""


class DataLoadError(ShimBuildError):
    """Raised when a data file cannot be read or fails schema validation."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot load {path}: {reason}")
        self.path = path
        self.reason = reason


class UnknownModule(ShimBuildError, KeyError):
    """Raised when an identifier is absent from the module registry."""

    def __init__(self, module_id: str, context: Optional[str] = None):
        msg = f"Unknown module '{module_id}'"
        if context:
            msg = f"{msg} ({context})"
        super().__init__(msg)
        self.module_id = module_id

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message.
        return self.args[0]


class DuplicateModule(ShimBuildError):
    """Raised at load time when two modules share an identifier."""

    def __init__(self, module_id: str):
        super().__init__(f"Module '{module_id}' is registered more than once")
        self.module_id = module_id


class CyclicDependency(ShimBuildError):
    """Raised when the dependency edges contain a cycle.

    ``cycle`` lists the path with the first module repeated at the end,
    e.g. ``["a", "b", "a"]``.
    """

    def __init__(self, cycle: Sequence[str]):
        super().__init__("Dependency cycle: " + " -> ".join(cycle))
        self.cycle = list(cycle)


class BrokenExclusion(ShimBuildError):
    """Raised (under the ``error`` policy) when an excluded module is still needed.

    ``dropped`` marks a dependency removed because of an earlier exclusion
    rather than excluded directly.
    """

    def __init__(self, module_id: str, excluded: str, dropped: bool = False):
        how = "dropped" if dropped else "excluded"
        super().__init__(f"Module '{module_id}' depends on {how} module '{excluded}'")
        self.module = module_id
        self.excluded = excluded


class ConflictingDirectives(ShimBuildError):
    """Raised (under the ``error`` policy) when a module is both forced and excluded."""

    def __init__(self, modules: Sequence[str]):
        super().__init__(
            "Modules both forced and excluded: " + ", ".join(sorted(modules))
        )
        self.modules = sorted(modules)


class MalformedVersion(ShimBuildError, ValueError):
    """A version token that is neither numeric nor a known sentinel.

    The comparator never raises this; it is used to describe the condition in
    diagnostics when the token is normalized away.
    """

    def __init__(self, token: object, where: Optional[str] = None):
        msg = f"Malformed version token {token!r}"
        if where:
            msg = f"{msg} in {where}"
        super().__init__(msg)
        self.token = token


class PayloadNotFound(ShimBuildError):
    """Raised by a payload resolver when a module's payload cannot be read."""

    def __init__(self, module_id: str, location: str):
        super().__init__(f"Payload for '{module_id}' not found at {location}")
        self.module_id = module_id
        self.location = location


class MinifierError(ShimBuildError):
    """Raised when the external minifier fails or times out."""
