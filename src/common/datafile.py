"""Reading structured data files (YAML or JSON).

JSON is chosen by the ``.json`` extension; everything else goes through
``yaml.safe_load``, which also accepts JSON documents.
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any

import yaml

from resolution.errors import DataLoadError

logger = logging.getLogger(__name__)


def load_structured(path: str) -> Any:
    """Load and decode a YAML/JSON file.

    Raises:
        DataLoadError: when the file is missing, unreadable or not parseable.
    """
    if not os.path.isfile(path):
        raise DataLoadError(path, "file not found")
    try:
        with open(path, "r", encoding="utf-8") as fh:
            if path.lower().endswith(".json"):
                return json.load(fh)
            return yaml.safe_load(fh)
    except (OSError, UnicodeDecodeError) as e:
        raise DataLoadError(path, f"read error: {e}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DataLoadError(path, f"parse error: {e}") from e
