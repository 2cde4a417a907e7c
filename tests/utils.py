from __future__ import annotations

import io
import json
import threading
from pathlib import Path
from typing import Any, Iterable, Mapping

import numpy as np
from PIL import Image

from mapgen.paths import IMAGE_FILENAME, INFO_FILENAME, AssetLocator
from mapgen.registry import MapDescriptor
from mapgen.terrain.models import GenerationResult, GeneratorArgs, TerrainVariant

LAND_BLUE = 150
WATER_BLUE = 106


def terrain_rgba(land: np.ndarray, *, blue: int = LAND_BLUE) -> np.ndarray:
    """Return an RGBA image where True cells are land and False cells water."""
    land = np.asarray(land, dtype=bool)
    rgba = np.zeros((*land.shape, 4), dtype=np.uint8)
    rgba[..., 1] = 120
    rgba[..., 2] = np.where(land, blue, WATER_BLUE)
    rgba[..., 3] = 255
    return rgba


def png_bytes(rgba: np.ndarray) -> bytes:
    buffer = io.BytesIO()
    Image.fromarray(np.ascontiguousarray(rgba, dtype=np.uint8)).save(buffer, format="PNG")
    return buffer.getvalue()


def write_map_source(
    locator: AssetLocator,
    descriptor: MapDescriptor,
    *,
    image: bytes | None = None,
    info: Mapping[str, Any] | str | None = None,
) -> Path:
    """Write image.png and info.json for a map; returns the map input dir."""
    map_dir = locator.map_input_dir(descriptor)
    map_dir.mkdir(parents=True, exist_ok=True)
    if image is None:
        land = np.zeros((8, 8), dtype=bool)
        land[2:6, 2:6] = True
        image = png_bytes(terrain_rgba(land))
    (map_dir / IMAGE_FILENAME).write_bytes(image)
    if info is None:
        info = {"name": descriptor.name, "nations": []}
    text = info if isinstance(info, str) else json.dumps(info, indent=2)
    (map_dir / INFO_FILENAME).write_text(text, encoding="utf-8")
    return map_dir


def write_sources(locator: AssetLocator, descriptors: Iterable[MapDescriptor]) -> None:
    for descriptor in descriptors:
        write_map_source(locator, descriptor)


def fake_variant(width: int, height: int, land: int, fill: int) -> TerrainVariant:
    return TerrainVariant(
        width=width,
        height=height,
        num_land_tiles=land,
        data=bytes([fill]) * (width * height),
    )


def fake_result(seed: int = 1) -> GenerationResult:
    return GenerationResult(
        map=fake_variant(8, 4, 5 + seed % 7, 0x80),
        map4x=fake_variant(4, 2, 2, 0x81),
        map16x=fake_variant(2, 1, 1, 0x82),
        thumbnail=b"RIFF-fake-webp-" + bytes([seed % 256]),
    )


class FakeGenerator:
    """Deterministic generator that records its calls and can fail per map."""

    def __init__(self, *, fail: Iterable[str] = ()) -> None:
        self.fail = set(fail)
        self.calls: list[GeneratorArgs] = []
        self._lock = threading.Lock()

    def __call__(self, args: GeneratorArgs) -> GenerationResult:
        with self._lock:
            self.calls.append(args)
        if args.name in self.fail:
            raise RuntimeError(f"boom in {args.name}")
        return fake_result(len(args.name))

