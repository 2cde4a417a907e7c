"""Terrain grid classification, water processing, and downsampling."""

from __future__ import annotations

import io
from dataclasses import dataclass

import numpy as np
from PIL import Image
from scipy import ndimage

MIN_ISLAND_SIZE = 30
MIN_LAKE_SIZE = 200
WATER_ALPHA_THRESHOLD = 20
WATER_BLUE_MARKER = 106
MAGNITUDE_BLUE_MIN = 140
MAGNITUDE_BLUE_MAX = 200
MAX_MAGNITUDE = 31

# 4-connectivity
_NEIGHBOURS = ndimage.generate_binary_structure(2, 1)


@dataclass
class TerrainGrid:
    """Per-tile terrain attributes, indexed ``[y, x]``."""

    land: np.ndarray
    magnitude: np.ndarray
    shoreline: np.ndarray
    ocean: np.ndarray

    @property
    def height(self) -> int:
        return int(self.land.shape[0])

    @property
    def width(self) -> int:
        return int(self.land.shape[1])

    @property
    def num_land_tiles(self) -> int:
        return int(np.count_nonzero(self.land))


def _empty_flags(shape: tuple[int, ...]) -> np.ndarray:
    return np.zeros(shape, dtype=bool)


def decode_image(image_buffer: bytes) -> np.ndarray:
    """Decode an image buffer into an RGBA array cropped to multiples of 4."""
    with Image.open(io.BytesIO(image_buffer)) as image:
        rgba = np.asarray(image.convert("RGBA"))
    height, width = rgba.shape[:2]
    width -= width % 4
    height -= height % 4
    if width == 0 or height == 0:
        raise ValueError(f"Image must be at least 4x4 pixels, got {rgba.shape[1]}x{rgba.shape[0]}.")
    return rgba[:height, :width]


def classify_pixels(rgba: np.ndarray) -> TerrainGrid:
    """Classify RGBA pixels into land and water with land elevation magnitude."""
    blue = rgba[..., 2].astype(np.float64)
    alpha = rgba[..., 3]
    water = (alpha < WATER_ALPHA_THRESHOLD) | (rgba[..., 2] == WATER_BLUE_MARKER)
    land = ~water
    magnitude = (np.clip(blue, MAGNITUDE_BLUE_MIN, MAGNITUDE_BLUE_MAX) - MAGNITUDE_BLUE_MIN) / 2
    magnitude = np.where(land, magnitude, 0.0)
    return TerrainGrid(
        land=land,
        magnitude=magnitude,
        shoreline=_empty_flags(land.shape),
        ocean=_empty_flags(land.shape),
    )


def _component_sizes(mask: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Label 4-connected components and return labels plus per-label sizes."""
    labels, _count = ndimage.label(mask, structure=_NEIGHBOURS)
    sizes = np.bincount(labels.ravel())
    sizes[0] = 0
    return labels, sizes


def remove_small_islands(grid: TerrainGrid, min_size: int = MIN_ISLAND_SIZE) -> int:
    """Turn land bodies smaller than ``min_size`` into water; return tiles removed."""
    labels, sizes = _component_sizes(grid.land)
    small = (sizes > 0) & (sizes < min_size)
    removed = small[labels]
    grid.land[removed] = False
    grid.magnitude[removed] = 0.0
    return int(np.count_nonzero(removed))


def process_water(grid: TerrainGrid, *, remove_small: bool, min_lake_size: int = MIN_LAKE_SIZE) -> None:
    """Mark the ocean, optionally fill small lakes, then shoreline and water depth."""
    water = ~grid.land
    labels, sizes = _component_sizes(water)
    grid.ocean = _empty_flags(water.shape)
    if sizes.size > 1:
        ocean_label = int(np.argmax(sizes))
        grid.ocean = labels == ocean_label
        if remove_small:
            lakes = (sizes > 0) & (sizes < min_lake_size)
            lakes[ocean_label] = False
            filled = lakes[labels]
            grid.land[filled] = True
            grid.magnitude[filled] = 0.0
    _process_shoreline(grid)
    _process_water_distance(grid)


def _process_shoreline(grid: TerrainGrid) -> None:
    land = grid.land
    water = ~land
    touches_water = ndimage.binary_dilation(water, structure=_NEIGHBOURS) & land
    touches_land = ndimage.binary_dilation(land, structure=_NEIGHBOURS) & water
    grid.shoreline = touches_water | touches_land


def _process_water_distance(grid: TerrainGrid) -> None:
    water = ~grid.land
    if not grid.land.any():
        grid.magnitude = np.where(water, 0.0, grid.magnitude)
        return
    distance = ndimage.distance_transform_cdt(water, metric="taxicab")
    grid.magnitude = np.where(water, np.maximum(distance - 1, 0), grid.magnitude).astype(np.float64)


def downsample(grid: TerrainGrid) -> TerrainGrid:
    """Halve each dimension; any water in a 2x2 block makes the block water."""
    height = grid.height // 2
    width = grid.width // 2
    if width == 0 or height == 0:
        raise ValueError(f"Cannot downsample {grid.width}x{grid.height} terrain.")
    blocks = grid.land[: height * 2, : width * 2].reshape(height, 2, width, 2)
    land = blocks.all(axis=(1, 3))
    magnitude = np.where(land, grid.magnitude[1 : height * 2 : 2, 1 : width * 2 : 2], 0.0)
    return TerrainGrid(
        land=land,
        magnitude=magnitude,
        shoreline=_empty_flags(land.shape),
        ocean=_empty_flags(land.shape),
    )


def pack_terrain(grid: TerrainGrid) -> bytes:
    """Pack a grid row-major into one byte per tile.

    bit 7 land, bit 6 shoreline, bit 5 ocean, bits 0-4 magnitude.
    """
    land_magnitude = np.ceil(grid.magnitude)
    water_magnitude = np.ceil(grid.magnitude / 2)
    magnitude = np.where(grid.land, land_magnitude, water_magnitude)
    magnitude = np.clip(magnitude, 0, MAX_MAGNITUDE).astype(np.uint8)
    packed = (
        (grid.land.astype(np.uint8) << 7)
        | (grid.shoreline.astype(np.uint8) << 6)
        | (grid.ocean.astype(np.uint8) << 5)
        | magnitude
    )
    return np.ascontiguousarray(packed, dtype=np.uint8).tobytes()
