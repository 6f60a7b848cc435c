"""Centralized logging configuration and helpers.

All modules log through the stdlib ``logging`` package with a module-level
``logger = logging.getLogger(__name__)``. The CLI calls ``configure_logging``
once; library code never installs handlers on its own.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from constants import Constants

_HANDLER_NAME = "shimbuild-console"


def _level_from_env(default: int = logging.INFO) -> int:
    """Return the level named by SHIMBUILD_LOG_LEVEL, or the default."""
    name = os.environ.get(Constants.LOG_LEVEL_ENV, "").strip().upper()
    if not name:
        return default
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else default


def configure_logging(level: Optional[int] = None) -> None:
    """Install the console handler on the root logger.

    Safe to call more than once; an existing console handler is reused.

    Args:
        level: Explicit level; when omitted the environment decides.
    """
    root = logging.getLogger()
    handler = next((h for h in root.handlers if h.get_name() == _HANDLER_NAME), None)
    if handler is None:
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level if level is not None else _level_from_env())


def add_file_handler(path: str) -> logging.Handler:
    """Attach a file handler using the detailed file format."""
    file_handler = logging.FileHandler(path)
    file_handler.setFormatter(logging.Formatter(Constants.FILE_LOG_FORMAT))
    logging.getLogger().addHandler(file_handler)
    return file_handler


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by this logger."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured debug records.

    None values are dropped so records stay compact.
    """
    return {k: v for k, v in fields.items() if v is not None}
