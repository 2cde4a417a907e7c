"""Command-line interface for mapgen."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from mapgen import __version__
from mapgen.build import BuildRequest, run_build
from mapgen.errors import BuildFailedError, ConfigurationError, PathResolutionError
from mapgen.logging_utils import LogOptions, configure_logging
from mapgen.paths import AssetLocator
from mapgen.perf import PerfTracker, resolve_metrics_path
from mapgen.registry import list_maps, parse_selection

LOGGER = logging.getLogger("mapgen.cli")


@dataclass(frozen=True)
class BuildOptions:
    """Structured build options derived from CLI arguments."""

    selection: frozenset[str] | None
    root: str | None
    jobs: int
    report_all: bool
    profile: bool
    metrics_json: str | None

    def as_dict(self) -> dict[str, object]:
        return {
            "selection": sorted(self.selection) if self.selection is not None else None,
            "root": self.root,
            "jobs": self.jobs,
            "report_all": self.report_all,
            "profile": self.profile,
            "metrics_json": self.metrics_json,
        }


def _build_options_from_args(args: argparse.Namespace) -> BuildOptions:
    """Normalize CLI args into a BuildOptions payload."""
    return BuildOptions(
        selection=parse_selection(getattr(args, "maps", None)),
        root=getattr(args, "root", None),
        jobs=int(getattr(args, "jobs", 0) or 0),
        report_all=bool(getattr(args, "report_all", False)),
        profile=bool(getattr(args, "profile", False)),
        metrics_json=getattr(args, "metrics_json", None),
    )


def _add_build_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the build subcommand and its arguments."""
    build = subparsers.add_parser("build", help="Generate terrain artifacts for maps.")
    build.add_argument(
        "--maps",
        help=(
            "Optional comma-separated list of maps to process. "
            "ex: --maps=world,eastasia,big_plains"
        ),
    )
    build.add_argument(
        "--root",
        help="Generator working directory (defaults to MAPGEN_ROOT or the cwd).",
    )
    build.add_argument(
        "--jobs",
        type=int,
        default=0,
        help="Maximum concurrent map builds (0 = one per map).",
    )
    build.add_argument(
        "--report-all",
        action="store_true",
        help="Report every failed map instead of the first one.",
    )
    build.add_argument(
        "--profile",
        action="store_true",
        help="Collect timing metrics for the build.",
    )
    build.add_argument(
        "--metrics-json",
        help="Path for timing metrics JSON (implies --profile).",
    )


def _add_list_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the list subcommand."""
    listing = subparsers.add_parser("list", help="List registered maps.")
    listing.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format.",
    )
    group = listing.add_mutually_exclusive_group()
    group.add_argument("--tests", action="store_true", help="Only list test maps.")
    group.add_argument(
        "--production",
        action="store_true",
        help="Only list production maps.",
    )


def _add_version_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the version subcommand."""
    subparsers.add_parser("version", help="Print the current version.")


def _write_metrics(perf: PerfTracker, metrics_json: str | None) -> None:
    metrics_path = resolve_metrics_path(metrics_json)
    if metrics_path is None:
        LOGGER.info("Build metrics: %s", json.dumps(perf.summary()))
        return
    metrics_path.parent.mkdir(parents=True, exist_ok=True)
    metrics_path.write_text(json.dumps(perf.summary(), indent=2), encoding="utf-8")
    LOGGER.info("Build metrics written to %s", metrics_path)


def _run_build_command(options: BuildOptions) -> int:
    perf = PerfTracker(enabled=options.profile or bool(options.metrics_json))
    perf.start()
    try:
        locator = AssetLocator.from_environment(options.root)
        run_build(
            BuildRequest(selection=options.selection),
            locator=locator,
            jobs=options.jobs,
            report_all=options.report_all,
            perf=perf,
        )
    except ConfigurationError as exc:
        LOGGER.error("Invalid map selection: %s", exc)
        return 2
    except (BuildFailedError, PathResolutionError) as exc:
        LOGGER.error("Error generating terrain maps: %s", exc)
        return 1
    finally:
        perf.stop()
        if perf.enabled:
            _write_metrics(perf, options.metrics_json)
    LOGGER.info("Terrain maps generated successfully")
    return 0


def _run_list_command(args: argparse.Namespace) -> int:
    descriptors = list_maps()
    if args.tests:
        descriptors = tuple(descriptor for descriptor in descriptors if descriptor.is_test)
    elif args.production:
        descriptors = tuple(descriptor for descriptor in descriptors if not descriptor.is_test)
    if args.format == "json":
        payload = [
            {"name": descriptor.name, "is_test": descriptor.is_test}
            for descriptor in descriptors
        ]
        print(json.dumps(payload, indent=2))
    else:
        for descriptor in descriptors:
            print(f"{descriptor.name}\t{descriptor.classification}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the CLI entrypoint and return an exit code."""
    parser = argparse.ArgumentParser(
        prog="mapgen",
        description="Generate terrain binaries, thumbnails, and manifests for maps.",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (repeatable).",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce log output to warnings and errors.",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit logs as JSON on stderr.",
    )
    parser.add_argument(
        "--log-file",
        help="Optional path for JSON log output.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_build_parser(subparsers)
    _add_list_parser(subparsers)
    _add_version_parser(subparsers)

    args = parser.parse_args(argv)
    log_file_value = getattr(args, "log_file", None)
    log_options = LogOptions(
        verbose=getattr(args, "verbose", 0) or 0,
        quiet=bool(getattr(args, "quiet", False)),
        log_file=Path(log_file_value) if log_file_value else None,
        json_console=bool(getattr(args, "log_json", False)),
    )
    configure_logging(log_options)

    if args.command == "version":
        print(__version__)
        return 0
    if args.command == "list":
        return _run_list_command(args)
    if args.command == "build":
        if args.jobs < 0:
            parser.error("--jobs must be >= 0")
        options = _build_options_from_args(args)
        LOGGER.debug("Build options: %s", options.as_dict())
        return _run_build_command(options)

    parser.error("Unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
