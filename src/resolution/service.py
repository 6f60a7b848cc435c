"""Parallel resolution of independent requests.

All workers share one Resolver; the store, registry and graph it holds are
read-only, so no locking is needed.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Union

from constants import Constants
from .errors import ShimBuildError
from .models import ResolutionRequest, ResolutionResult
from .resolver import Resolver

logger = logging.getLogger(__name__)

Outcome = Union[ResolutionResult, ShimBuildError]


class ResolutionService:
    """Dispatches resolution requests onto a thread pool."""

    def __init__(self, resolver: Resolver, max_workers: Optional[int] = None):
        self.resolver = resolver
        self.max_workers = max_workers or Constants.DEFAULT_MAX_WORKERS

    def _resolve_one(self, request: ResolutionRequest) -> Outcome:
        try:
            return self.resolver.resolve(request)
        except ShimBuildError as e:
            logger.error("Resolution failed: %s", e)
            return e

    def resolve_all(self, requests: Sequence[ResolutionRequest]) -> List[Outcome]:
        """Resolve every request; results come back in request order.

        A failing request yields its exception object in its slot instead of
        aborting the others.
        """
        if not requests:
            return []
        workers = max(1, min(self.max_workers, len(requests)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(self._resolve_one, requests))
