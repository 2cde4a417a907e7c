"""Profile a mapgen build using cProfile.

cProfile only sees the calling thread. With --jobs 1 (the default here) maps
are built serially on that thread; larger values move the work onto pool
threads and the profile shows mostly waiting. The per-map timings in the
metrics JSON cover every worker either way.
"""

from __future__ import annotations

import argparse
import cProfile
import os
import pstats
from pathlib import Path

from mapgen import cli


def _selection_slug(maps: str | None) -> str:
    """Return a filename-safe slug based on the selected maps."""
    if not maps:
        return "all"
    names = [name.strip() for name in maps.split(",") if name.strip()]
    if len(names) == 1:
        return names[0]
    return "multi"


def _add_optional_arg(args: list[str], flag: str, value: str | None) -> None:
    """Append a flag/value pair when a value exists."""
    if value is not None:
        args.extend([flag, str(value)])


def _build_cli_args(args: argparse.Namespace, metrics_path: Path) -> list[str]:
    """Translate script arguments into mapgen CLI args."""
    cli_args: list[str] = ["build"]
    _add_optional_arg(cli_args, "--maps", args.maps)
    _add_optional_arg(cli_args, "--root", args.root)
    _add_optional_arg(cli_args, "--jobs", args.jobs)
    cli_args.append("--profile")
    cli_args.extend(["--metrics-json", str(metrics_path)])
    return cli_args


def main() -> int:
    """CLI entrypoint for profiling builds."""
    parser = argparse.ArgumentParser(description="Profile a mapgen build.")
    parser.add_argument("--maps", help="Comma-separated maps to build.")
    parser.add_argument("--root", help="Generator working directory.")
    parser.add_argument(
        "--jobs",
        type=int,
        default=1,
        help=(
            "Maximum concurrent map builds (default 1 builds serially so cProfile "
            "sees the map work)."
        ),
    )
    parser.add_argument(
        "--profile-dir",
        default=os.environ.get("MAPGEN_PROFILE_DIR", "profiles"),
        help="Directory for profiler outputs.",
    )
    parser.add_argument(
        "--metrics-json",
        help="Optional metrics JSON output path override.",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Write a text summary of top functions.",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=40,
        help="Number of functions to include in the summary.",
    )
    args = parser.parse_args()

    profile_dir = Path(args.profile_dir)
    profile_dir.mkdir(parents=True, exist_ok=True)
    slug = _selection_slug(args.maps)
    metrics_path = (
        Path(args.metrics_json)
        if args.metrics_json
        else profile_dir / f"build_{slug}.metrics.json"
    )
    stats_path = profile_dir / f"build_{slug}.pstats"

    cli_args = _build_cli_args(args, metrics_path)
    profiler = cProfile.Profile()
    exit_code = profiler.runcall(lambda: cli.main(cli_args))
    profiler.dump_stats(str(stats_path))

    if args.summary:
        summary_path = profile_dir / f"build_{slug}.txt"
        with summary_path.open("w", encoding="utf-8") as handle:
            stats = pstats.Stats(profiler, stream=handle)
            stats.sort_stats("cumulative")
            stats.print_stats(args.top)

    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
