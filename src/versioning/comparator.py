"""Version token normalization and comparison.

Numeric tokens ("9", "10.1", "5.1.3") compare by value using
``packaging.version``. Sentinels sit around them on the same line::

    false  <  any numeric  <  TP  <  unreleased  <  true

Anything else is malformed and normalized to ``false`` so that resolution
errs toward including more shims. Normalization never raises.
"""

import logging
import re
from functools import lru_cache
from typing import Union

from packaging.version import InvalidVersion, Version

from constants import Constants, Sentinels
from .models import Ordering, VersionToken

logger = logging.getLogger(__name__)

_NUMERIC_RE = re.compile(r"^\d+(\.\d+)*$")

TokenLike = Union[VersionToken, str, int, float, bool, None]


def _raw_text(value: TokenLike) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value).strip()


@lru_cache(maxsize=4096)
def _parse_text(text: str) -> VersionToken:
    sentinel = Constants.SENTINEL_ALIASES.get(text.lower())
    if sentinel is not None:
        return VersionToken(raw=text, sentinel=sentinel)
    if _NUMERIC_RE.match(text):
        try:
            return VersionToken(raw=text, numeric=Version(text))
        except InvalidVersion:
            pass
    return VersionToken(raw=text, sentinel=Sentinels.ALWAYS_FALSE, malformed=True)


def parse_version(value: TokenLike) -> VersionToken:
    """Normalize a raw token from data files, configs or the command line.

    Args:
        value: Token text; numbers and booleans from YAML/JSON are accepted.

    Returns:
        VersionToken; malformed input yields the ``false`` sentinel with
        ``malformed`` set.
    """
    if isinstance(value, VersionToken):
        return value
    return _parse_text(_raw_text(value))


def compare(a: TokenLike, b: TokenLike) -> Ordering:
    """Three-way compare two tokens of the same environment."""
    left = parse_version(a)
    right = parse_version(b)
    if left.rank != right.rank:
        return Ordering.LESS if left.rank < right.rank else Ordering.GREATER
    if left.is_numeric and right.is_numeric:
        if left.numeric < right.numeric:
            return Ordering.LESS
        if left.numeric > right.numeric:
            return Ordering.GREATER
    return Ordering.EQUAL


def oldest(tokens) -> VersionToken:
    """Return the smallest token of a non-empty iterable."""
    result = None
    for tok in tokens:
        tok = parse_version(tok)
        if result is None or compare(tok, result) == Ordering.LESS:
            result = tok
    if result is None:
        raise ValueError("oldest() of an empty sequence")
    return result
