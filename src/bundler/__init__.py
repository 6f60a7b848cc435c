"""Bundle rendering and artifact writing.

This package turns a resolved module order into the emitted artifacts. It
delegates payload retrieval and minification to collaborators.
"""

from .bundler import Bundler, BundleOutput, write_bundle
from .minifier import MinifiedOutput, Minifier, TerserMinifier
from .payloads import FilePayloadResolver, MappingPayloadResolver, PayloadResolver
from .presets import BUNDLE_PRESETS, BundlePreset, build_bundle_preset

__all__ = [
    "Bundler",
    "BundleOutput",
    "write_bundle",
    "MinifiedOutput",
    "Minifier",
    "TerserMinifier",
    "FilePayloadResolver",
    "MappingPayloadResolver",
    "PayloadResolver",
    "BUNDLE_PRESETS",
    "BundlePreset",
    "build_bundle_preset",
]
