"""Single-map build: read sources, generate terrain, write artifacts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from time import perf_counter
from typing import Any

from jsonschema import ValidationError

from mapgen.errors import (
    GenerationError,
    InputReadError,
    ManifestParseError,
    ManifestWriteError,
    MapBuildError,
    OutputWriteError,
)
from mapgen.manifest import dump_manifest, load_manifest_document, merge_manifest
from mapgen.paths import (
    IMAGE_FILENAME,
    INFO_FILENAME,
    MANIFEST_FILENAME,
    THUMBNAIL_FILENAME,
    VARIANT_FILENAMES,
    AssetLocator,
)
from mapgen.perf import PerfTracker
from mapgen.registry import MapDescriptor
from mapgen.terrain import GenerationResult, GeneratorArgs, TerrainGenerator, generate_map

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildOutcome:
    """Result of building one map; ``error`` is None on success."""

    descriptor: MapDescriptor
    error: MapBuildError | None = None
    artifacts: tuple[Path, ...] = ()
    seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


def _read_inputs(descriptor: MapDescriptor, input_dir: Path) -> tuple[bytes, dict[str, Any]]:
    """Read the source image and parse the info document."""
    name = descriptor.name
    image_path = input_dir / IMAGE_FILENAME
    try:
        image_buffer = image_path.read_bytes()
    except OSError as exc:
        raise InputReadError(
            name, f"failed to read map file {image_path}: {exc}", path=image_path
        ) from exc

    info_path = input_dir / INFO_FILENAME
    try:
        raw_info = info_path.read_bytes()
    except OSError as exc:
        raise InputReadError(
            name, f"failed to read info file {info_path}: {exc}", path=info_path
        ) from exc
    try:
        document = load_manifest_document(raw_info)
    except ValueError as exc:
        raise ManifestParseError(
            name, f"failed to parse {info_path}: {exc}", path=info_path
        ) from exc
    return image_buffer, document


def _generate(
    descriptor: MapDescriptor, image_buffer: bytes, generator: TerrainGenerator
) -> GenerationResult:
    args = GeneratorArgs(
        image_buffer=image_buffer,
        remove_small=not descriptor.is_test,
        name=descriptor.name,
    )
    try:
        return generator(args)
    except Exception as exc:
        raise GenerationError(
            descriptor.name, f"failed to generate map: {exc}"
        ) from exc


def _write_artifact(name: str, path: Path, payload: bytes, artifact: str) -> None:
    try:
        path.write_bytes(payload)
    except OSError as exc:
        raise OutputWriteError(
            name, f"failed to write {artifact} to {path}: {exc}", artifact=artifact, path=path
        ) from exc


def _write_artifacts(descriptor: MapDescriptor, map_dir: Path, result: GenerationResult) -> list[Path]:
    """Write terrain binaries and the thumbnail; returns written paths."""
    name = descriptor.name
    try:
        map_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputWriteError(
            name,
            f"failed to create output directory {map_dir}: {exc}",
            artifact="directory",
            path=map_dir,
        ) from exc

    written: list[Path] = []
    for key, variant in result.variants().items():
        path = map_dir / VARIANT_FILENAMES[key]
        _write_artifact(name, path, variant.data, VARIANT_FILENAMES[key])
        written.append(path)
    thumbnail_path = map_dir / THUMBNAIL_FILENAME
    _write_artifact(name, thumbnail_path, result.thumbnail, THUMBNAIL_FILENAME)
    written.append(thumbnail_path)
    return written


def _write_manifest(descriptor: MapDescriptor, map_dir: Path, manifest: dict[str, Any]) -> Path:
    """Serialize and write the manifest; it must be the last file written."""
    manifest_path = map_dir / MANIFEST_FILENAME
    try:
        text = dump_manifest(manifest)
    except (ValidationError, TypeError, ValueError) as exc:
        raise ManifestWriteError(
            descriptor.name, f"failed to serialize manifest: {exc}", path=manifest_path
        ) from exc
    try:
        manifest_path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise ManifestWriteError(
            descriptor.name,
            f"failed to write manifest {manifest_path}: {exc}",
            path=manifest_path,
        ) from exc
    return manifest_path


def build_map(
    descriptor: MapDescriptor,
    *,
    locator: AssetLocator,
    generator: TerrainGenerator = generate_map,
    perf: PerfTracker | None = None,
) -> tuple[Path, ...]:
    """Build one map, raising a MapBuildError subclass on failure."""
    perf = perf or PerfTracker(enabled=False)
    name = descriptor.name
    input_dir = locator.map_input_dir(descriptor)
    map_dir = locator.map_output_dir(descriptor)

    with perf.span("read_inputs", map_name=name):
        image_buffer, document = _read_inputs(descriptor, input_dir)
    with perf.span("generate", map_name=name):
        result = _generate(descriptor, image_buffer, generator)
    manifest = merge_manifest(document, result)
    with perf.span("write_artifacts", map_name=name):
        written = _write_artifacts(descriptor, map_dir, result)
    with perf.span("write_manifest", map_name=name):
        written.append(_write_manifest(descriptor, map_dir, manifest))
    return tuple(written)


def run_map_job(
    descriptor: MapDescriptor,
    *,
    locator: AssetLocator,
    generator: TerrainGenerator = generate_map,
    perf: PerfTracker | None = None,
) -> BuildOutcome:
    """Build one map and report the outcome instead of raising."""
    extra = {"map": descriptor.name}
    LOGGER.info("Building %s map.", descriptor.classification, extra=extra)
    start = perf_counter()
    try:
        artifacts = build_map(descriptor, locator=locator, generator=generator, perf=perf)
    except MapBuildError as exc:
        elapsed = perf_counter() - start
        LOGGER.debug("Build failed during %s.", exc.step, extra=extra)
        return BuildOutcome(descriptor=descriptor, error=exc, seconds=elapsed)
    elapsed = perf_counter() - start
    LOGGER.info("Wrote %s artifact(s) in %.2fs.", len(artifacts), elapsed, extra=extra)
    return BuildOutcome(descriptor=descriptor, artifacts=artifacts, seconds=elapsed)
