"""Built-in bundle presets."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from constants import Constants

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BundlePreset:
    """Artifact names plus the request defaults for one bundle flavor."""

    name: str
    bundled: str
    minified: Optional[str] = None
    targets: Optional[Dict[str, str]] = None
    exclude: Tuple[str, ...] = ()


BUNDLE_PRESETS: Dict[str, BundlePreset] = {
    "default": BundlePreset(
        name="default",
        bundled="index",
        minified="minified",
    ),
    "deno": BundlePreset(
        name="deno",
        bundled="index",
        targets={"deno": "1.0"},
        exclude=(
            "esnext.map.upsert",       # obsolete
            "esnext.weak-map.upsert",  # obsolete
        ),
    ),
}


def build_bundle_preset(preset_name: Optional[str]) -> BundlePreset:
    """Return a built-in preset; unknown names fall back to ``default``."""
    preset = str(preset_name or Constants.DEFAULT_BUNDLE_PRESET).strip().lower()
    if preset not in BUNDLE_PRESETS:
        logger.warning("Unknown bundle preset '%s'; using default.", preset_name)
        preset = Constants.DEFAULT_BUNDLE_PRESET
    return BUNDLE_PRESETS[preset]
