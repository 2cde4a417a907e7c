"""Build orchestration: fan out one job per selected map and collect failures."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

from mapgen.errors import BuildFailedError, MapBuildError
from mapgen.job import BuildOutcome, run_map_job
from mapgen.paths import AssetLocator
from mapgen.perf import PerfTracker
from mapgen.registry import MapDescriptor, select_maps
from mapgen.terrain import TerrainGenerator, generate_map

LOGGER = logging.getLogger(__name__)

ALL = None


@dataclass(frozen=True)
class BuildRequest:
    """Maps requested for one run; ``selection`` of None means every map."""

    selection: frozenset[str] | None = ALL


@dataclass(frozen=True)
class BuildSummary:
    """Outcomes of every launched job, in completion order."""

    outcomes: tuple[BuildOutcome, ...]

    @property
    def succeeded(self) -> tuple[BuildOutcome, ...]:
        return tuple(outcome for outcome in self.outcomes if outcome.ok)

    @property
    def failed(self) -> tuple[BuildOutcome, ...]:
        return tuple(outcome for outcome in self.outcomes if not outcome.ok)

    def artifacts(self) -> list[Path]:
        return [path for outcome in self.succeeded for path in outcome.artifacts]


def _worker_limit(jobs: int, job_count: int) -> int:
    """Return the pool size; 0 launches every job at once."""
    jobs = int(jobs)
    if jobs < 0:
        raise ValueError("jobs must be >= 0")
    if job_count <= 0:
        return 1
    if jobs == 0:
        return job_count
    return min(jobs, job_count)


def _unexpected_failure(descriptor: MapDescriptor, exc: Exception) -> BuildOutcome:
    LOGGER.error(
        "Unexpected error building map.",
        exc_info=exc,
        extra={"map": descriptor.name},
    )
    error = MapBuildError(descriptor.name, f"unexpected error: {exc!r}")
    error.__cause__ = exc
    return BuildOutcome(descriptor=descriptor, error=error)


def run_jobs(
    descriptors: tuple[MapDescriptor, ...],
    *,
    locator: AssetLocator,
    generator: TerrainGenerator,
    jobs: int = 0,
    perf: PerfTracker | None = None,
) -> list[BuildOutcome]:
    """Run map jobs serially or via a thread pool; outcomes are in completion order.

    An exception escaping a job is recorded as that map's failure so the
    remaining outcomes are still collected.
    """
    outcomes: list[BuildOutcome] = []
    if not descriptors:
        return outcomes
    worker_limit = _worker_limit(jobs, len(descriptors))
    if worker_limit == 1:
        for descriptor in descriptors:
            try:
                outcomes.append(
                    run_map_job(descriptor, locator=locator, generator=generator, perf=perf)
                )
            except Exception as exc:
                outcomes.append(_unexpected_failure(descriptor, exc))
        return outcomes
    with ThreadPoolExecutor(
        max_workers=worker_limit,
        thread_name_prefix="mapgen",
    ) as executor:
        futures = {
            executor.submit(
                run_map_job,
                descriptor,
                locator=locator,
                generator=generator,
                perf=perf,
            ): descriptor
            for descriptor in descriptors
        }
        for future in as_completed(futures):
            descriptor = futures[future]
            try:
                outcomes.append(future.result())
            except Exception as exc:
                outcomes.append(_unexpected_failure(descriptor, exc))
    return outcomes


def run_build(
    request: BuildRequest,
    *,
    locator: AssetLocator | None = None,
    generator: TerrainGenerator = generate_map,
    jobs: int = 0,
    report_all: bool = False,
    perf: PerfTracker | None = None,
) -> BuildSummary:
    """Build every requested map.

    Selection and path resolution are checked before any job starts. Every
    launched job runs to completion; if any failed, a BuildFailedError is
    raised after all of them finish. Outputs from successful jobs stay on disk.
    """
    descriptors = select_maps(request.selection)
    locator = locator or AssetLocator.from_environment()
    LOGGER.info(
        "Building %s map(s) from %s.",
        len(descriptors),
        locator.root,
    )

    outcomes = run_jobs(
        descriptors,
        locator=locator,
        generator=generator,
        jobs=jobs,
        perf=perf,
    )
    summary = BuildSummary(outcomes=tuple(outcomes))

    failures = [outcome.error for outcome in summary.failed if outcome.error is not None]
    if failures:
        # The first failure (or all, with report_all) is carried by the raised error.
        reported = failures if report_all else failures[:1]
        for failure in failures:
            level = logging.DEBUG if failure in reported else logging.WARNING
            LOGGER.log(level, "Map build failed: %s", failure, extra={"map": failure.map_name})
        raise BuildFailedError(failures, report_all=report_all)
    LOGGER.info("Built %s map(s).", len(summary.succeeded))
    return summary
