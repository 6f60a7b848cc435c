"""Resolver: target specification -> ordered list of required modules.

Steps for one request:

1. candidate universe: registered modules, narrowed by the module filter;
2. seed set: candidates some targeted environment lacks natively, plus
   forced inclusions;
3. closure under declared dependencies;
4. exclusions, with forced/excluded conflicts and broken exclusions
   settled according to the request's policies;
5. deterministic topological order.

Nothing here mutates the shared store, registry or graph.
"""
from __future__ import annotations

import logging
from typing import FrozenSet, Iterable, List, Optional, Set, Tuple

from common.logging_utils import extra_context, is_debug_enabled
from compat.store import CompatDataStore
from constants import BrokenExclusionPolicy, ConflictPolicy, Constants, TargetPresets
from graph.ordering import DependencyGraph
from registry.modules import ModuleRegistry
from versioning.models import EnvironmentVersion
from .diagnostics import Diagnostic, DiagnosticKind, Severity
from .errors import BrokenExclusion, ConflictingDirectives, UnknownModule
from .models import ResolutionRequest, ResolutionResult, TargetSpec

logger = logging.getLogger(__name__)
STG = f"{Constants.RESOLVE} "


class Resolver:
    """Resolves requests against a shared, read-only store and registry."""

    def __init__(
        self,
        store: CompatDataStore,
        registry: ModuleRegistry,
        graph: Optional[DependencyGraph] = None,
    ):
        self.store = store
        self.registry = registry
        self.graph = graph or DependencyGraph(registry)

    # ---------- step 1 ----------

    def candidate_universe(self, modules_filter: Optional[Iterable[str]]) -> Tuple[str, ...]:
        """Registered ids (registration order) matching the filter.

        Filter entries are exact ids, prefixes ending in ``.`` or ``*``, or a
        named alias such as ``stable``.

        Raises:
            UnknownModule: an exact id in the filter is not registered.
        """
        ids = self.registry.ids()
        if modules_filter is None:
            return ids
        exact: Set[str] = set()
        prefixes: List[str] = []
        for entry in modules_filter:
            if entry in Constants.MODULE_FILTERS:
                prefixes.extend(Constants.MODULE_FILTERS[entry])
            elif entry.endswith("*"):
                prefixes.append(entry[:-1])
            elif entry.endswith("."):
                prefixes.append(entry)
            else:
                if entry not in self.registry:
                    raise UnknownModule(entry, "named in module filter")
                exact.add(entry)
        return tuple(
            mid for mid in ids
            if mid in exact or any(mid.startswith(p) for p in prefixes)
        )

    # ---------- step 2 ----------

    def effective_targets(self, spec: TargetSpec) -> Optional[Tuple[EnvironmentVersion, ...]]:
        """Expand presets against the compat table; explicit targets win.

        Returns None for the ``none`` preset, which requires every candidate.
        An explicit empty target set is returned as ``()`` and requires nothing.
        """
        if spec.explicit is not None:
            return tuple(spec.explicit)
        preset = spec.effective_preset
        if preset is TargetPresets.OLDEST:
            return tuple(self.store.oldest_targets())
        if preset is TargetPresets.NEWEST:
            return tuple(self.store.newest_targets())
        return None

    def is_required(self, module_id: str, targets: Optional[Tuple[EnvironmentVersion, ...]]) -> bool:
        """True if any targeted environment lacks the feature natively.

        ``targets=None`` (the ``none`` preset) makes every module required;
        environments absent from ``targets`` add no requirement.
        """
        if targets is None:
            return True
        return any(
            not self.store.is_supported(module_id, t.environment, t.version)
            for t in targets
        )

    def seed_set(
        self,
        universe: Iterable[str],
        targets: Optional[Tuple[EnvironmentVersion, ...]],
        include: Iterable[str] = (),
    ) -> FrozenSet[str]:
        seed = {mid for mid in universe if self.is_required(mid, targets)}
        seed.update(include)
        return frozenset(seed)

    # ---------- steps 3-5 ----------

    def _check_known(self, ids: Iterable[str], what: str) -> None:
        for mid in sorted(ids):
            if mid not in self.registry:
                raise UnknownModule(mid, f"named in {what}")

    def _settle_conflicts(
        self, request: ResolutionRequest, diagnostics: List[Diagnostic]
    ) -> Tuple[FrozenSet[str], FrozenSet[str]]:
        """Return (include, exclude) after applying the conflict policy.

        Under the ``include`` policy a forced module protects its whole
        dependency closure from exclusion.
        """
        include = frozenset(request.include)
        exclude = frozenset(request.exclude)
        if not include or not exclude:
            return include, exclude
        forced_closure = self.graph.close_under(include)
        clashing = exclude & forced_closure
        if not clashing:
            return include, exclude

        policy = request.conflict_policy
        if policy is ConflictPolicy.ERROR:
            raise ConflictingDirectives(clashing)

        for mid in sorted(clashing, key=self.registry.sequence_of):
            direct = mid in include
            if policy is ConflictPolicy.INCLUDE:
                outcome = "kept (forced inclusion wins)"
            else:
                outcome = "removed (exclusion wins)"
            how = "forced and excluded" if direct else "excluded but required by a forced module"
            msg = f"Module '{mid}' is {how}; {outcome}"
            logger.warning("%s%s", STG, msg)
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.CONFLICTING_DIRECTIVES,
                    severity=Severity.WARNING,
                    message=msg,
                    module=mid,
                )
            )

        if policy is ConflictPolicy.INCLUDE:
            return include, exclude - clashing
        return include - clashing, exclude

    def _drop_broken(
        self,
        modules: Set[str],
        exclude: FrozenSet[str],
        policy: BrokenExclusionPolicy,
        diagnostics: List[Diagnostic],
    ) -> Set[str]:
        """Remove modules whose dependencies are gone, repeating to a fixpoint."""
        removed = set(exclude)
        while True:
            broken = []
            for mid in sorted(modules, key=self.registry.sequence_of):
                missing = [d for d in self.registry.dependencies_of(mid) if d in removed]
                if missing:
                    broken.append((mid, missing))
            if not broken:
                return modules
            for mid, missing in broken:
                root = next((d for d in missing if d in exclude), None)
                err = BrokenExclusion(mid, root or missing[0], dropped=root is None)
                if policy is BrokenExclusionPolicy.ERROR:
                    raise err
                logger.warning("%s%s; dropping '%s'", STG, err, mid)
                provides = self.registry.get(mid).globals
                note = f" (no longer provides {', '.join(sorted(provides))})" if provides else ""
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.BROKEN_EXCLUSION,
                        severity=Severity.WARNING,
                        message=f"{err}; dropped{note}",
                        module=mid,
                        related=tuple(missing),
                    )
                )
                modules.discard(mid)
                removed.add(mid)

    def resolve(self, request: ResolutionRequest) -> ResolutionResult:
        """Compute the ordered module list for one request.

        Raises:
            UnknownModule: the request names an unregistered module.
            CyclicDependency: the final set contains a cycle.
            ConflictingDirectives, BrokenExclusion: only under ``error`` policies.
        """
        self._check_known(request.include, "forced inclusions")
        self._check_known(request.exclude, "exclusions")
        diagnostics: List[Diagnostic] = []

        universe = self.candidate_universe(request.modules_filter)
        targets = self.effective_targets(request.targets)
        include, exclude = self._settle_conflicts(request, diagnostics)
        seed = self.seed_set(universe, targets, include)
        closed = self.graph.close_under(seed)

        kept = set(closed - exclude)
        kept = self._drop_broken(kept, exclude & closed, request.broken_exclusion_policy, diagnostics)
        order = self.graph.order(kept)

        in_universe = set(universe)
        load_diags = [d for d in self.store.diagnostics if d.module in in_universe]

        if is_debug_enabled(logger):
            logger.debug(
                "Resolution finished",
                extra=extra_context(
                    event="function_exit",
                    component="resolver",
                    action="resolve",
                    seed=len(seed),
                    closure=len(closed),
                    count=len(order),
                ),
            )
        logger.info(
            "%s%d modules required (%d seeded, %d after closure, %d excluded).",
            STG, len(order), len(seed), len(closed), len(closed) - len(kept),
        )
        return ResolutionResult(
            modules=tuple(order),
            seed=seed,
            targets=targets or (),
            diagnostics=tuple(load_diags + diagnostics),
        )
