"""Compat Data Store: feature -> environment -> minimum native version.

The store is built once and never mutated afterwards; every public method is
a pure read, so one instance may be shared by any number of threads.
"""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from common.schemas import COMPAT_SCHEMA, SchemaError, validate
from common.datafile import load_structured
from constants import Sentinels
from resolution.diagnostics import Diagnostic, DiagnosticKind, Severity
from resolution.errors import DataLoadError, MalformedVersion
from versioning.comparator import compare, oldest, parse_version
from versioning.models import EnvironmentVersion, Ordering, VersionToken

logger = logging.getLogger(__name__)


class CompatDataStore:
    """Immutable compatibility table.

    Use ``from_mapping`` or ``from_file`` to build one; the constructor takes
    already-normalized tokens.
    """

    def __init__(
        self,
        entries: Mapping[str, Mapping[str, VersionToken]],
        diagnostics: Tuple[Diagnostic, ...] = (),
    ):
        self._entries = MappingProxyType(
            {fid: MappingProxyType(dict(envs)) for fid, envs in entries.items()}
        )
        self._diagnostics = tuple(diagnostics)
        envs = set()
        for per_env in self._entries.values():
            envs.update(per_env)
        self._environments = frozenset(envs)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Mapping[str, Any]]) -> "CompatDataStore":
        """Build a store from ``{featureId: {environment: token}}``.

        Malformed tokens are kept as the ``false`` sentinel and reported both
        as a warning log record and as a MALFORMED_VERSION diagnostic.
        """
        entries: Dict[str, Dict[str, VersionToken]] = {}
        diagnostics: List[Diagnostic] = []
        for feature_id, per_env in raw.items():
            parsed: Dict[str, VersionToken] = {}
            for env, token in (per_env or {}).items():
                version = parse_version(token)
                if version.malformed:
                    err = MalformedVersion(token, f"{feature_id}.{env}")
                    logger.warning("%s; treating as always required.", err)
                    diagnostics.append(
                        Diagnostic(
                            kind=DiagnosticKind.MALFORMED_VERSION,
                            severity=Severity.WARNING,
                            message=str(err),
                            module=str(feature_id),
                            related=(str(env),),
                        )
                    )
                parsed[str(env).lower()] = version
            entries[str(feature_id)] = parsed
        return cls(entries, tuple(diagnostics))

    @classmethod
    def from_file(cls, path: str) -> "CompatDataStore":
        """Load and validate a compat data file.

        Raises:
            DataLoadError: unreadable file or schema violation.
        """
        data = load_structured(path)
        try:
            validate(COMPAT_SCHEMA, data, "compat data")
        except SchemaError as e:
            raise DataLoadError(path, str(e)) from e
        store = cls.from_mapping(data)
        logger.info(
            "Loaded compat data for %d features across %d environments from %s",
            len(store), len(store.environments()), path,
        )
        return store

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, feature_id: object) -> bool:
        return feature_id in self._entries

    @property
    def diagnostics(self) -> Tuple[Diagnostic, ...]:
        """Load-time diagnostics (malformed tokens)."""
        return self._diagnostics

    def features(self) -> frozenset:
        return frozenset(self._entries)

    def environments(self) -> frozenset:
        """Every environment named anywhere in the table."""
        return self._environments

    def minimum_version(self, feature_id: str, environment: str) -> Optional[VersionToken]:
        per_env = self._entries.get(feature_id)
        if per_env is None:
            return None
        return per_env.get(environment.lower())

    def is_supported(self, feature_id: str, environment: str, requested) -> bool:
        """True only when the feature is natively present at ``requested``.

        Missing feature or environment entries mean "must polyfill".
        """
        stored = self.minimum_version(feature_id, environment)
        if stored is None:
            return False
        if stored.sentinel is Sentinels.ALWAYS_TRUE:
            return True
        if stored.sentinel is Sentinels.ALWAYS_FALSE:
            return False
        return compare(stored, parse_version(requested)) != Ordering.GREATER

    def oldest_targets(self) -> List[EnvironmentVersion]:
        """Each environment at the oldest numeric version listed for it.

        Environments with no numeric entries use the ``false`` sentinel.
        """
        result = []
        for env in sorted(self._environments):
            numeric = [
                per_env[env] for per_env in self._entries.values()
                if env in per_env and per_env[env].is_numeric
            ]
            lowest = oldest(numeric) if numeric else parse_version(Sentinels.ALWAYS_FALSE.value)
            result.append(EnvironmentVersion(env, lowest))
        return result

    def newest_targets(self) -> List[EnvironmentVersion]:
        """Each environment at the always-supported sentinel."""
        top = parse_version(Sentinels.ALWAYS_TRUE.value)
        return [EnvironmentVersion(env, top) for env in sorted(self._environments)]
