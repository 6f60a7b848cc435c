"""Dependency graph closure and deterministic topological ordering.

The graph is an explicit DAG: each registered module gets an integer index
equal to its registration sequence, and edges are stored as adjacency lists
of indices (module -> its dependencies). Ties in the topological sort are
broken by the smallest index, so output never depends on set or dict
iteration order.
"""
from __future__ import annotations

import heapq
import logging
from typing import Dict, FrozenSet, Iterable, List, Set, Tuple

from common.logging_utils import extra_context, is_debug_enabled
from registry.modules import ModuleRegistry
from resolution.errors import CyclicDependency, UnknownModule

logger = logging.getLogger(__name__)


class DependencyGraph:
    """Read-only DAG view over a ModuleRegistry."""

    def __init__(self, registry: ModuleRegistry):
        self._ids: Tuple[str, ...] = registry.ids()
        self._index: Dict[str, int] = {mid: i for i, mid in enumerate(self._ids)}
        # _deps[i] lists indices that module i depends on, in declared order.
        self._deps: Tuple[Tuple[int, ...], ...] = tuple(
            tuple(self._index[d] for d in registry.dependencies_of(mid))
            for mid in self._ids
        )

    def __len__(self) -> int:
        return len(self._ids)

    def _indices(self, module_ids: Iterable[str]) -> Set[int]:
        out = set()
        for mid in module_ids:
            idx = self._index.get(mid)
            if idx is None:
                raise UnknownModule(mid)
            out.add(idx)
        return out

    def close_under(self, seed: Iterable[str]) -> FrozenSet[str]:
        """Smallest superset of ``seed`` closed under "depends on".

        Each module is expanded at most once, so diamonds and repeated
        references terminate without re-walking.
        """
        visited: Set[int] = set()
        stack = sorted(self._indices(seed), reverse=True)
        while stack:
            idx = stack.pop()
            if idx in visited:
                continue
            visited.add(idx)
            for dep in reversed(self._deps[idx]):
                if dep not in visited:
                    stack.append(dep)
        return frozenset(self._ids[i] for i in visited)

    def order(self, candidates: Iterable[str]) -> List[str]:
        """Topologically order ``candidates``.

        Only edges between members of ``candidates`` constrain the order;
        dependencies outside the set are assumed satisfied elsewhere.

        Raises:
            UnknownModule: a candidate is not registered.
            CyclicDependency: the induced subgraph has a cycle.
        """
        members = self._indices(candidates)
        indegree: Dict[int, int] = {}
        dependents: Dict[int, List[int]] = {i: [] for i in members}
        for i in members:
            inside = [d for d in self._deps[i] if d in members]
            indegree[i] = len(set(inside))
            for d in set(inside):
                dependents[d].append(i)

        ready = [i for i in members if indegree[i] == 0]
        heapq.heapify(ready)
        result: List[int] = []
        while ready:
            idx = heapq.heappop(ready)
            result.append(idx)
            for nxt in dependents[idx]:
                indegree[nxt] -= 1
                if indegree[nxt] == 0:
                    heapq.heappush(ready, nxt)

        if len(result) != len(members):
            remaining = members.difference(result)
            raise CyclicDependency(self._find_cycle(remaining))

        if is_debug_enabled(logger):
            logger.debug(
                "Ordered modules",
                extra=extra_context(
                    event="decision",
                    component="graph",
                    action="order",
                    count=len(result),
                ),
            )
        return [self._ids[i] for i in result]

    def check_acyclic(self) -> None:
        """Validate the full registry; raises CyclicDependency on the first cycle."""
        self.order(self._ids)

    def _find_cycle(self, nodes: Set[int]) -> List[str]:
        """Return one cycle among ``nodes`` as an id path, first id repeated last."""
        color: Dict[int, int] = {i: 0 for i in nodes}  # 0 new, 1 on stack, 2 done
        for start in sorted(nodes):
            if color[start]:
                continue
            path: List[int] = [start]
            iters = [iter(self._deps[start])]
            color[start] = 1
            while iters:
                advanced = False
                for dep in iters[-1]:
                    if dep not in nodes:
                        continue
                    if color[dep] == 1:
                        cycle = path[path.index(dep):] + [dep]
                        return [self._ids[i] for i in cycle]
                    if color[dep] == 0:
                        color[dep] = 1
                        path.append(dep)
                        iters.append(iter(self._deps[dep]))
                        advanced = True
                        break
                if not advanced:
                    color[path.pop()] = 2
                    iters.pop()
        # Kahn's leftovers always contain a cycle; reaching here means a bug.
        raise RuntimeError("cycle expected among unresolved modules")
