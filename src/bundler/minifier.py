"""Minifier collaborators.

The bundler hands the fully ordered, concatenated source to a minifier and
stores whatever comes back. ``TerserMinifier`` drives the ``terser`` command
line tool in a temporary directory.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from typing import List, Optional

from constants import Constants
from resolution.errors import MinifierError

logger = logging.getLogger(__name__)

_COMPRESS_OPTIONS = ",".join([
    "hoist_funs",
    "hoist_vars",
    "passes=2",
    "pure_getters",
    # document.all detection
    "typeofs=false",
    "unsafe_proto",
    "unsafe_undefined",
])


@dataclass
class MinifiedOutput:
    """Minified code and its source map, both as text."""

    code: str
    map: str


class Minifier:
    """Base class for minifier collaborators."""

    def minify(self, source: str, map_name: str, banner: Optional[str] = None) -> MinifiedOutput:
        """Return the transformed source and a source map.

        Args:
            source: Concatenated bundle source.
            map_name: File name the code should reference as its source map.
            banner: Optional comment kept verbatim at the top.
        """
        raise NotImplementedError


class TerserMinifier(Minifier):
    """Runs ``terser`` as a subprocess with the legacy-friendly option set."""

    def __init__(self, command: Optional[str] = None, timeout: Optional[float] = None):
        self.command = command or Constants.MINIFIER_COMMAND
        self.timeout = timeout if timeout is not None else Constants.MINIFIER_TIMEOUT_SEC

    def build_command(self, src_path: str, out_path: str, map_name: str,
                      banner: Optional[str]) -> List[str]:
        fmt = [
            f"max_line_len={Constants.MINIFIER_MAX_LINE_LEN}",
            "webkit",
            "wrap_func_args=false",
        ]
        if banner:
            fmt.append(f"preamble={json.dumps(banner)}")
        return [
            self.command, src_path,
            # terser's lowest output level; --ie8 covers older engines
            "--ecma", "5",
            "--ie8",
            "--safari10",
            "--keep-fnames",
            "--compress", _COMPRESS_OPTIONS,
            "--format", ",".join(fmt),
            "--source-map", f"url='{map_name}'",
            "--output", out_path,
        ]

    def minify(self, source: str, map_name: str, banner: Optional[str] = None) -> MinifiedOutput:
        if shutil.which(self.command) is None:
            raise MinifierError(f"Minifier '{self.command}' not found on PATH")
        with tempfile.TemporaryDirectory(prefix="shimbuild-") as tmp:
            src_path = os.path.join(tmp, "bundle.js")
            out_path = os.path.join(tmp, "bundle.min.js")
            with open(src_path, "w", encoding="utf-8") as fh:
                fh.write(source)
            cmd = self.build_command(src_path, out_path, map_name, banner)
            logger.debug("Running minifier: %s", " ".join(cmd))
            try:
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                    check=False,
                )
            except subprocess.TimeoutExpired as e:
                raise MinifierError(f"Minifier timed out after {self.timeout} seconds") from e
            except OSError as e:
                raise MinifierError(f"Minifier failed to start: {e}") from e
            if result.returncode != 0:
                raise MinifierError(
                    f"Minifier exited with {result.returncode}: {result.stderr.strip()}"
                )
            try:
                with open(out_path, "r", encoding="utf-8") as fh:
                    code = fh.read()
                with open(out_path + ".map", "r", encoding="utf-8") as fh:
                    source_map = fh.read()
            except OSError as e:
                raise MinifierError(f"Minifier produced no output: {e}") from e
        return MinifiedOutput(code=code, map=source_map)
