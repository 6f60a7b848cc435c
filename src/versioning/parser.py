"""Token parsing utilities for target specifications."""

from typing import Dict, Iterable, List, Optional, Tuple

from .comparator import parse_version
from .models import EnvironmentVersion


def tokenize_rightmost(s: str, separators: str = "=:") -> Tuple[str, Optional[str]]:
    """Return (environment, version or None) splitting on the rightmost separator.

    Both ``chrome=49`` and ``chrome:49`` are accepted.
    """
    s = s.strip()
    idx = max(s.rfind(sep) for sep in separators)
    if idx < 0:
        return s, None
    environment = s[:idx].strip()
    version = s[idx + 1:].strip()
    return environment, version if version else None


def normalize_environment(name: str) -> str:
    """Environment names are case-insensitive; store them lower-cased."""
    return name.strip().lower()


def parse_target_token(token: str) -> EnvironmentVersion:
    """Parse a CLI token such as ``chrome=49`` into an EnvironmentVersion.

    Raises:
        ValueError: when the environment name or the version is missing.
    """
    environment, version = tokenize_rightmost(token)
    environment = normalize_environment(environment)
    if not environment or version is None:
        raise ValueError(f"Invalid target '{token}'. Expected ENV=VERSION.")
    return EnvironmentVersion(environment, parse_version(version))


def parse_target_tokens(tokens: Iterable[str]) -> List[EnvironmentVersion]:
    """Parse several target tokens; a repeated environment keeps the last value."""
    by_env: Dict[str, EnvironmentVersion] = {}
    for tok in tokens:
        ev = parse_target_token(tok)
        by_env[ev.environment] = ev
    return list(by_env.values())


def parse_target_mapping(mapping: Dict[str, object]) -> List[EnvironmentVersion]:
    """Parse a ``{environment: version}`` mapping from a config file."""
    return [
        EnvironmentVersion(normalize_environment(str(env)), parse_version(ver))
        for env, ver in mapping.items()
    ]
