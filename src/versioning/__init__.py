"""Environment version model and comparator."""

from .comparator import compare, oldest, parse_version
from .models import EnvironmentVersion, Ordering, VersionToken

__all__ = [
    "compare",
    "oldest",
    "parse_version",
    "EnvironmentVersion",
    "Ordering",
    "VersionToken",
]
