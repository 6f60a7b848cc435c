"""Argument parsing functionality for shimbuild."""

import argparse

from bundler.presets import BUNDLE_PRESETS
from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program.

    Flags left unset default to None so that config file values can apply.
    """
    parser = argparse.ArgumentParser(
        prog="shimbuild",
        description=(
            "shimbuild - resolve and bundle the runtime shims a set of target "
            "environments needs"
        ),
        add_help=True,
    )

    inputs = parser.add_argument_group("inputs")
    inputs.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    inputs.add_argument("--compat",
                        dest="COMPAT",
                        help="Compat data file: {feature: {environment: version}}",
                        action="store",
                        type=str)
    inputs.add_argument("--modules",
                        dest="MODULES",
                        help="Module registration list (YAML or JSON)",
                        action="store",
                        type=str)
    inputs.add_argument("--shims",
                        dest="SHIMS",
                        help="Directory holding shim payloads; scanned for modules when --modules is absent",
                        action="store",
                        type=str)

    request = parser.add_argument_group("resolution")
    request.add_argument("-t", "--target",
                         dest="TARGETS",
                         help="Target environment, i.e: chrome=49 (repeatable)",
                         action="append",
                         type=str)
    request.add_argument("--preset",
                         dest="TARGET_PRESET",
                         help="Named target preset used when no explicit targets are given",
                         action="store",
                         type=str.lower,
                         choices=Constants.SUPPORTED_PRESETS)
    request.add_argument("-x", "--exclude",
                         dest="EXCLUDE",
                         help="Module id never to include (repeatable)",
                         action="append",
                         type=str)
    request.add_argument("-i", "--include",
                         dest="INCLUDE",
                         help="Module id always to include (repeatable)",
                         action="append",
                         type=str)
    request.add_argument("-m", "--filter",
                         dest="MODULES_FILTER",
                         help="Restrict candidates to ids, prefixes (es.*) or aliases: "
                              + ", ".join(sorted(Constants.MODULE_FILTERS)),
                         action="append",
                         type=str)
    request.add_argument("--conflict-policy",
                         dest="CONFLICT_POLICY",
                         help="Module both forced and excluded: include (default), exclude, error",
                         action="store",
                         type=str.lower,
                         choices=Constants.CONFLICT_POLICIES)
    request.add_argument("--broken-exclusion-policy",
                         dest="BROKEN_EXCLUSION_POLICY",
                         help="Excluded module still needed: drop dependents (default) or error",
                         action="store",
                         type=str.lower,
                         choices=Constants.BROKEN_EXCLUSION_POLICIES)

    output = parser.add_argument_group("output")
    output.add_argument("-b", "--bundle",
                        dest="BUNDLES",
                        help="Bundle preset to build (repeatable): " + ", ".join(BUNDLE_PRESETS),
                        action="append",
                        type=str.lower,
                        choices=list(BUNDLE_PRESETS))
    output.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Output directory for artifacts",
                        action="store",
                        type=str)
    output.add_argument("--no-wrap",
                        dest="NO_WRAP",
                        help="Do not wrap the bundle in an isolation scope",
                        action="store_true")
    output.add_argument("--banner",
                        dest="BANNER",
                        help="Comment line placed at the top of every artifact",
                        action="store",
                        type=str)
    output.add_argument("--minify",
                        dest="MINIFY",
                        help="Also produce a minified artifact and source map (needs terser)",
                        action="store_true")
    output.add_argument("--list",
                        dest="LIST_ONLY",
                        help="Print the ordered module ids instead of writing bundles (one '# <bundle>' block per bundle when several are built)",
                        action="store_true")
    output.add_argument("--report",
                        dest="REPORT",
                        help="Write a JSON resolution report to this path",
                        action="store",
                        type=str)

    parser.add_argument("--set",
                        dest="CONFIG_SET",
                        help="Set configuration override (KEY=VALUE format, can be used multiple times)",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("--error-on-warnings",
                        dest="ERROR_ON_WARNINGS",
                        help="Exit with a non-zero status code if diagnostics are present.",
                        action="store_true")

    return parser.parse_args(argv)
