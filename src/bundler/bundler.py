"""Render an ordered module list into a single artifact and write it out.

Artifact layout (all lines end in ``\\n``)::

    <banner>                                  optional
    !function (undefined) { 'use strict';     when wrapping
    /* <module id> */
    <payload bytes>
    ...
    }();                                      when wrapping

Payloads are copied verbatim in the given order; a newline is appended to
any payload that does not already end with one.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from constants import Constants
from .minifier import Minifier
from .payloads import PayloadResolver

logger = logging.getLogger(__name__)
STG = f"{Constants.BUNDLE} "


@dataclass
class BundleOutput:
    """Paths written by ``write_bundle``."""

    bundled: str
    minified: Optional[str] = None
    source_map: Optional[str] = None
    sizes: dict = field(default_factory=dict)


def _line(text: str) -> bytes:
    return (text + "\n").encode("utf-8")


def format_size(data: bytes) -> str:
    """Size in KB with two decimals, as shown in log lines."""
    return f"{len(data) / 1024:.2f}KB"


class Bundler:
    """Concatenates payloads in resolution order."""

    def __init__(self, wrap: bool = True, banner: Optional[str] = None):
        self.wrap = wrap
        self.banner = banner

    def render(self, order: Sequence[str], payload_resolver: PayloadResolver) -> bytes:
        """Fetch each payload in ``order`` and join them into one artifact."""
        parts: List[bytes] = []
        if self.banner:
            parts.append(_line(self.banner))
        if self.wrap:
            parts.append(_line(Constants.WRAP_PREAMBLE))
        for module_id in order:
            payload = payload_resolver.fetch(module_id)
            parts.append(_line(Constants.MODULE_MARKER.format(module_id)))
            parts.append(payload)
            if payload and not payload.endswith(b"\n"):
                parts.append(b"\n")
        if self.wrap:
            parts.append(_line(Constants.WRAP_POSTAMBLE))
        return b"".join(parts)


def _write(path: str, data: bytes, kind: str) -> None:
    with open(path, "wb") as fh:
        fh.write(data)
    logger.info("%s%s: %s, size: %s", STG, kind, path, format_size(data))


def write_bundle(
    order: Sequence[str],
    payload_resolver: PayloadResolver,
    output_dir: str,
    bundled: str,
    *,
    bundler: Optional[Bundler] = None,
    minified: Optional[str] = None,
    minifier: Optional[Minifier] = None,
) -> BundleOutput:
    """Render ``order`` and write ``<bundled>.js`` (plus minified artifacts).

    The minified pair ``<minified>.js`` / ``<minified>.js.map`` is produced
    only when both a name and a minifier are given.

    Raises:
        PayloadNotFound, MinifierError, OSError
    """
    bundler = bundler or Bundler()
    os.makedirs(output_dir, exist_ok=True)
    source = bundler.render(order, payload_resolver)

    bundled_path = os.path.join(output_dir, f"{bundled}{Constants.SHIM_EXTENSION}")
    _write(bundled_path, source, "bundling")
    out = BundleOutput(bundled=bundled_path, sizes={"bundled": len(source)})

    if not minified or minifier is None:
        return out

    map_name = f"{minified}{Constants.SHIM_EXTENSION}.map"
    result = minifier.minify(source.decode("utf-8"), map_name, bundler.banner)
    code = result.code.encode("utf-8")
    out.minified = os.path.join(output_dir, f"{minified}{Constants.SHIM_EXTENSION}")
    out.source_map = os.path.join(output_dir, map_name)
    _write(out.minified, code, "minification")
    with open(out.source_map, "w", encoding="utf-8") as fh:
        fh.write(result.map)
    out.sizes["minified"] = len(code)
    return out
