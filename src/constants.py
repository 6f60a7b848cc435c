"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    RESOLUTION_ERROR = 2
    EXIT_WARNINGS = 3


class Sentinels(Enum):
    """Non-numeric version tokens understood by the comparator.

    Args:
        Enum (string): Canonical spelling of the sentinel in compat data.
    """

    ALWAYS_FALSE = "false"
    TECH_PREVIEW = "TP"
    NOT_RELEASED = "unreleased"
    ALWAYS_TRUE = "true"


class TargetPresets(Enum):
    """Named target presets.

    Args:
        Enum (string): Preset name as accepted on the command line.
    """

    OLDEST = "oldest"
    NONE = "none"
    NEWEST = "newest"


class ConflictPolicy(Enum):
    """What to do when a module is both forced and excluded."""

    INCLUDE = "include"
    EXCLUDE = "exclude"
    ERROR = "error"


class BrokenExclusionPolicy(Enum):
    """What to do when an excluded module is still depended upon."""

    DROP = "drop"
    ERROR = "error"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    SUPPORTED_PRESETS = [p.value for p in TargetPresets]
    CONFLICT_POLICIES = [p.value for p in ConflictPolicy]
    BROKEN_EXCLUSION_POLICIES = [p.value for p in BrokenExclusionPolicy]
    # Lower-case spellings accepted in data files, mapped to sentinels.
    SENTINEL_ALIASES = {
        "false": Sentinels.ALWAYS_FALSE,
        "tp": Sentinels.TECH_PREVIEW,
        "preview": Sentinels.TECH_PREVIEW,
        "unreleased": Sentinels.NOT_RELEASED,
        "true": Sentinels.ALWAYS_TRUE,
    }
    MODULE_FILTERS = {
        "stable": ["es.", "web."],
        "es": ["es."],
        "proposals": ["esnext."],
        "web": ["web."],
    }
    SHIM_EXTENSION = ".js"
    DEPENDENCY_MARKER = "// dependency:"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    FILE_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    LOG_LEVEL_ENV = "SHIMBUILD_LOG_LEVEL"
    RESOLVE = "[RESOLVE]"
    BUNDLE = "[BUNDLE]"
    WRAP_PREAMBLE = "!function (undefined) { 'use strict';"
    WRAP_POSTAMBLE = "}();"
    MODULE_MARKER = "/* {} */"
    DEFAULT_BANNER = "/** shimbuild bundle */"
    DEFAULT_OUTPUT_DIR = "dist"
    DEFAULT_BUNDLE_PRESET = "default"
    MINIFIER_COMMAND = "terser"
    MINIFIER_TIMEOUT_SEC = 120
    MINIFIER_MAX_LINE_LEN = 32000
    DEFAULT_MAX_WORKERS = 4
