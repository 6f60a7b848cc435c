"""Data models for environment versions."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from packaging.version import Version

from constants import Sentinels


class Ordering(IntEnum):
    """Three-way comparison outcome; usable directly as -1/0/1."""
    LESS = -1
    EQUAL = 0
    GREATER = 1


# Position of each token class on the version line. Numeric tokens sit at 0.
SENTINEL_RANK = {
    Sentinels.ALWAYS_FALSE: -1,
    Sentinels.TECH_PREVIEW: 1,
    Sentinels.NOT_RELEASED: 2,
    Sentinels.ALWAYS_TRUE: 3,
}


@dataclass(frozen=True)
class VersionToken:
    """Normalized version token.

    Exactly one of ``numeric`` or ``sentinel`` is set. ``malformed`` marks a
    token whose raw text could not be understood and was normalized to
    ``Sentinels.ALWAYS_FALSE``.
    """
    raw: str
    numeric: Optional[Version] = field(default=None, compare=False)
    sentinel: Optional[Sentinels] = None
    malformed: bool = field(default=False, compare=False)

    @property
    def rank(self) -> int:
        if self.sentinel is None:
            return 0
        return SENTINEL_RANK[self.sentinel]

    @property
    def is_numeric(self) -> bool:
        return self.numeric is not None

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True)
class EnvironmentVersion:
    """An environment name paired with a version token, e.g. chrome 49."""
    environment: str
    version: VersionToken

    def __str__(self) -> str:
        return f"{self.environment} {self.version}"
