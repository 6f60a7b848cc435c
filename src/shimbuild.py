"""shimbuild - resolve and bundle the runtime shims target environments need.

    Returns:
        int: Exit code (see constants.ExitCodes)
"""
import json
import logging
import os
import sys
from typing import List, Optional, Tuple

from args import parse_args
from bundler.bundler import Bundler, write_bundle
from bundler.minifier import TerserMinifier
from bundler.payloads import FilePayloadResolver
from bundler.presets import BundlePreset, build_bundle_preset
from cli_config import BuildSettings, build_settings
from common.logging_utils import add_file_handler, configure_logging, extra_context, is_debug_enabled
from compat.store import CompatDataStore
from constants import Constants, ExitCodes
from registry.loader import load_registry_file, scan_shim_directory
from registry.modules import ModuleRegistry
from resolution.errors import (
    CyclicDependency,
    DataLoadError,
    DuplicateModule,
    MinifierError,
    PayloadNotFound,
    ShimBuildError,
    UnknownModule,
)
from resolution.models import ResolutionRequest, ResolutionResult, TargetSpec
from resolution.resolver import Resolver
from resolution.service import ResolutionService
from versioning.parser import parse_target_mapping

logger = logging.getLogger(__name__)


def setup_logging(args) -> None:
    """Configure logging; the CLI --loglevel wins over the environment."""
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.LOG_LEVEL_ENV] = str(args.LOG_LEVEL).upper()
    configure_logging()
    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        add_file_handler(log_file)
        logger.info("Logging to file: %s", log_file)


def load_inputs(settings: BuildSettings) -> Tuple[CompatDataStore, ModuleRegistry]:
    """Load the compat table and module registry named by the settings.

    Raises:
        DataLoadError, DuplicateModule, UnknownModule, CyclicDependency
    """
    if not settings.compat:
        raise DataLoadError("<compat>", "no compat data file configured")
    store = CompatDataStore.from_file(settings.compat)
    if settings.modules:
        registry = load_registry_file(settings.modules)
    elif settings.shims:
        registry = scan_shim_directory(settings.shims)
    else:
        raise DataLoadError("<modules>", "neither a module list nor a shim directory configured")
    return store, registry


def build_request(settings: BuildSettings, preset: BundlePreset,
                  registry: ModuleRegistry) -> ResolutionRequest:
    """Combine run settings with one bundle preset into a request.

    Explicit targets beat the preset's targets, which beat the target preset.
    Preset exclusions naming modules absent from this registry are skipped.
    """
    if settings.targets is not None:
        targets = TargetSpec(explicit=tuple(parse_target_mapping(settings.targets)))
    elif preset.targets is not None:
        targets = TargetSpec(explicit=tuple(parse_target_mapping(preset.targets)))
    else:
        targets = TargetSpec(preset=settings.preset)

    exclude = set(settings.exclude)
    for mid in preset.exclude:
        if mid in registry:
            exclude.add(mid)
        else:
            logger.debug("Preset %s excludes unregistered module %s", preset.name, mid)

    return ResolutionRequest(
        targets=targets,
        exclude=frozenset(exclude),
        include=frozenset(settings.include),
        modules_filter=tuple(settings.modules_filter) if settings.modules_filter is not None else None,
        conflict_policy=settings.conflict_policy,
        broken_exclusion_policy=settings.broken_exclusion_policy,
    )


def export_report(path: str, reports: List[dict]) -> None:
    """Write the JSON resolution report."""
    try:
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(reports, fh, indent=2)
        logger.info("Report written to %s", path)
    except OSError as e:
        logger.error("Failed to write report %s: %s", path, e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def _output_dir(settings: BuildSettings, preset: BundlePreset, many: bool) -> str:
    return os.path.join(settings.output, preset.name) if many else settings.output


def run(args) -> int:
    """Execute one shimbuild invocation and return the exit code."""
    # pylint: disable=too-many-branches, too-many-locals
    try:
        settings = build_settings(args)
    except DataLoadError as e:
        logger.error("%s", e)
        return ExitCodes.FILE_ERROR.value
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return ExitCodes.FILE_ERROR.value

    try:
        store, registry = load_inputs(settings)
    except DataLoadError as e:
        logger.error("%s, aborting", e)
        return ExitCodes.FILE_ERROR.value
    except (DuplicateModule, UnknownModule, CyclicDependency) as e:
        logger.error("Inconsistent module registry: %s, aborting", e)
        return ExitCodes.RESOLUTION_ERROR.value

    presets = [build_bundle_preset(name) for name in settings.bundles]
    presets = list({p.name: p for p in presets}.values())
    requests = [build_request(settings, p, registry) for p in presets]

    if is_debug_enabled(logger):
        logger.debug(
            "Dispatching resolution",
            extra=extra_context(event="decision", component="cli", action="resolve_all",
                                count=len(requests)),
        )
    service = ResolutionService(Resolver(store, registry), settings.max_workers)
    outcomes = service.resolve_all(requests)

    exit_code = ExitCodes.SUCCESS.value
    has_warnings = False
    reports = []
    payloads = FilePayloadResolver(registry, settings.shims or os.path.dirname(settings.modules or "."))
    bundler = Bundler(wrap=settings.wrap, banner=settings.banner)
    minifier = TerserMinifier() if settings.minify else None
    many = len(presets) > 1

    for preset, outcome in zip(presets, outcomes):
        if isinstance(outcome, ShimBuildError):
            logger.error("Bundle %s failed: %s", preset.name, outcome)
            exit_code = ExitCodes.RESOLUTION_ERROR.value
            reports.append({"bundle": preset.name, "error": str(outcome)})
            continue
        result: ResolutionResult = outcome
        has_warnings = has_warnings or result.has_warnings
        reports.append({"bundle": preset.name, **result.to_dict()})

        if getattr(args, "LIST_ONLY", False):
            if many:
                print(f"# {preset.name}")
            for mid in result.modules:
                print(mid)
            continue

        try:
            write_bundle(
                result.modules,
                payloads,
                _output_dir(settings, preset, many),
                preset.bundled,
                bundler=bundler,
                minified=preset.minified,
                minifier=minifier,
            )
        except (PayloadNotFound, MinifierError) as e:
            logger.error("Bundle %s failed: %s", preset.name, e)
            exit_code = ExitCodes.FILE_ERROR.value
        except OSError as e:
            logger.error("IO error writing bundle %s: %s", preset.name, e)
            exit_code = ExitCodes.FILE_ERROR.value

    if getattr(args, "REPORT", None):
        export_report(args.REPORT, reports)

    if exit_code == ExitCodes.SUCCESS.value and has_warnings:
        logger.warning("Resolution recorded diagnostics; see the log above.")
        if getattr(args, "ERROR_ON_WARNINGS", False):
            logger.error("Warnings present, exiting with non-zero status code.")
            exit_code = ExitCodes.EXIT_WARNINGS.value
    return exit_code


def main(argv: Optional[List[str]] = None):
    """Main function of the program."""
    args = parse_args(argv)
    setup_logging(args)
    logger.info("Arguments parsed.")
    sys.exit(run(args))


if __name__ == "__main__":
    main()
