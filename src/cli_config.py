"""Build settings: defaults, config file, ``--set`` overrides and CLI flags.

Precedence, lowest first: built-in defaults, the config file (its ``build``
section when present), ``--set KEY=VALUE`` overrides, explicit CLI flags.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from common.datafile import load_structured
from constants import (
    BrokenExclusionPolicy,
    ConflictPolicy,
    Constants,
    TargetPresets,
)
from resolution.errors import DataLoadError
from versioning.parser import normalize_environment, parse_target_tokens

logger = logging.getLogger(__name__)


@dataclass
class BuildSettings:
    """Effective settings for one shimbuild run."""

    compat: Optional[str] = None
    modules: Optional[str] = None
    shims: Optional[str] = None
    output: str = Constants.DEFAULT_OUTPUT_DIR
    targets: Optional[Dict[str, str]] = None
    preset: Optional[TargetPresets] = None
    exclude: List[str] = field(default_factory=list)
    include: List[str] = field(default_factory=list)
    modules_filter: Optional[List[str]] = None
    conflict_policy: ConflictPolicy = ConflictPolicy.INCLUDE
    broken_exclusion_policy: BrokenExclusionPolicy = BrokenExclusionPolicy.DROP
    wrap: bool = True
    banner: Optional[str] = Constants.DEFAULT_BANNER
    minify: bool = False
    bundles: List[str] = field(default_factory=lambda: [Constants.DEFAULT_BUNDLE_PRESET])
    max_workers: int = Constants.DEFAULT_MAX_WORKERS


def _deep_merge(dest: Dict[str, Any], src: Dict[str, Any]) -> None:
    """Deep-merge src into dest in-place."""
    for k, v in src.items():
        if isinstance(v, dict) and isinstance(dest.get(k), dict):
            _deep_merge(dest[k], v)
        else:
            dest[k] = v


def _coerce_value(text):
    """Best-effort convert string to JSON/number/bool, else raw string."""
    s = str(text).strip()
    try:
        return json.loads(s)
    except ValueError:
        sl = s.lower()
        if sl == "true":
            return True
        if sl == "false":
            return False
        return s


def _apply_dot_path(dct, dot_path, value):
    parts = [p for p in dot_path.split(".") if p]
    if not parts:
        return
    cur = dct
    for key in parts[:-1]:
        if key not in cur or not isinstance(cur.get(key), dict):
            cur[key] = {}
        cur = cur[key]
    cur[parts[-1]] = value


def collect_overrides(pairs) -> Dict[str, Any]:
    """Turn ``KEY=VALUE`` strings into a nested dict; malformed pairs are skipped."""
    overrides: Dict[str, Any] = {}
    for item in pairs or []:
        if not isinstance(item, str) or "=" not in item:
            logger.warning("Ignoring malformed --set value: %s", item)
            continue
        key, val = item.split("=", 1)
        key = key.strip()
        if key.startswith("build."):
            key = key[len("build."):]
        _apply_dot_path(overrides, key, _coerce_value(val.strip()))
    return overrides


def load_config_file(path: Optional[str]) -> Dict[str, Any]:
    """Load the config file and return its ``build`` section (or the whole dict).

    Raises:
        DataLoadError: unreadable file or a top level that is not a mapping.
    """
    if not path:
        return {}
    data = load_structured(path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DataLoadError(path, "configuration must be a mapping")
    section = data.get("build", data)
    if not isinstance(section, dict):
        raise DataLoadError(path, "'build' section must be a mapping")
    logger.info("Loaded configuration from: %s", path)
    return dict(section)


def _as_list(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [s.strip() for s in str(value).split(",") if s.strip()]


def _enum(enum_cls, value, default):
    if value is None:
        return default
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError as e:
        raise ValueError(f"Invalid {enum_cls.__name__} value '{value}'") from e


def settings_from_dict(cfg: Dict[str, Any]) -> BuildSettings:
    """Build settings from a merged config dict.

    Raises:
        ValueError: an enumerated setting has an unknown value.
    """
    s = BuildSettings()
    for key in ("compat", "modules", "shims"):
        if cfg.get(key):
            setattr(s, key, str(cfg[key]))
    if cfg.get("output"):
        s.output = str(cfg["output"])
    targets = cfg.get("targets")
    if isinstance(targets, dict):
        # Later spellings of the same environment win.
        s.targets = {normalize_environment(str(k)): str(v) for k, v in targets.items()}
    elif targets is not None:
        raise ValueError("'targets' must be a mapping of environment to version")
    s.preset = _enum(TargetPresets, cfg.get("preset"), None)
    s.exclude = _as_list(cfg.get("exclude"))
    s.include = _as_list(cfg.get("include"))
    if cfg.get("modules_filter") is not None:
        s.modules_filter = _as_list(cfg.get("modules_filter"))
    s.conflict_policy = _enum(ConflictPolicy, cfg.get("conflict_policy"), s.conflict_policy)
    s.broken_exclusion_policy = _enum(
        BrokenExclusionPolicy, cfg.get("broken_exclusion_policy"), s.broken_exclusion_policy
    )
    if "wrap" in cfg:
        s.wrap = bool(cfg["wrap"])
    if "banner" in cfg:
        s.banner = str(cfg["banner"]) if cfg["banner"] else None
    if "minify" in cfg:
        s.minify = bool(cfg["minify"])
    if cfg.get("bundles"):
        s.bundles = _as_list(cfg["bundles"])
    if cfg.get("max_workers") is not None:
        s.max_workers = max(1, int(cfg["max_workers"]))
    return s


def _cli_layer(args) -> Dict[str, Any]:
    """Only flags that were actually given on the command line."""
    layer: Dict[str, Any] = {}
    simple = {
        "COMPAT": "compat",
        "MODULES": "modules",
        "SHIMS": "shims",
        "OUTPUT": "output",
        "TARGET_PRESET": "preset",
        "EXCLUDE": "exclude",
        "INCLUDE": "include",
        "MODULES_FILTER": "modules_filter",
        "CONFLICT_POLICY": "conflict_policy",
        "BROKEN_EXCLUSION_POLICY": "broken_exclusion_policy",
        "BANNER": "banner",
        "BUNDLES": "bundles",
    }
    for attr, key in simple.items():
        value = getattr(args, attr, None)
        if value is not None:
            layer[key] = value
    if getattr(args, "TARGETS", None):
        layer["targets"] = {
            t.environment: str(t.version) for t in parse_target_tokens(args.TARGETS)
        }
    if getattr(args, "NO_WRAP", False):
        layer["wrap"] = False
    if getattr(args, "MINIFY", False):
        layer["minify"] = True
    return layer


def build_settings(args) -> BuildSettings:
    """Merge every configuration layer for the parsed CLI args.

    Raises:
        DataLoadError: the config file cannot be loaded.
        ValueError: a setting has an invalid value.
    """
    cfg = load_config_file(getattr(args, "CONFIG", None))
    _deep_merge(cfg, collect_overrides(getattr(args, "CONFIG_SET", None)))
    cli = _cli_layer(args)
    # Explicit CLI targets replace configured ones rather than merging.
    if "targets" in cli:
        cfg.pop("targets", None)
    _deep_merge(cfg, cli)
    return settings_from_dict(cfg)
