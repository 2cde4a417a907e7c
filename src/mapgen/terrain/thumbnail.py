"""Thumbnail rendering for generated terrain."""

from __future__ import annotations

import io

import numpy as np
from PIL import Image

from mapgen.terrain.grid import TerrainGrid

THUMBNAIL_SCALE = 0.5
THUMBNAIL_QUALITY = 45

SHORE_WATER_RGB = (100, 143, 255)
DEEP_WATER_RGB = (70, 132, 180)
SHORE_LAND_RGB = (204, 203, 158)


def terrain_colors(grid: TerrainGrid) -> np.ndarray:
    """Return an RGBA array colouring each tile; water is fully transparent."""
    magnitude = grid.magnitude
    rgba = np.zeros((grid.height, grid.width, 4), dtype=np.float64)

    plains = grid.land & (magnitude < 10)
    rgba[plains, 0] = 190
    rgba[plains, 1] = 220 - 2 * magnitude[plains]
    rgba[plains, 2] = 138

    highlands = grid.land & (magnitude >= 10) & (magnitude < 20)
    shift = 2 * magnitude[highlands]
    rgba[highlands, 0] = 200 + shift
    rgba[highlands, 1] = 183 + shift
    rgba[highlands, 2] = 138 + shift

    mountains = grid.land & (magnitude >= 20)
    grey = np.floor(230 + magnitude[mountains] / 2)
    rgba[mountains, 0] = grey
    rgba[mountains, 1] = grey
    rgba[mountains, 2] = grey

    shore_land = grid.land & grid.shoreline
    rgba[shore_land, :3] = SHORE_LAND_RGB
    rgba[grid.land, 3] = 255

    water = ~grid.land
    depth_shift = 1 - np.minimum(magnitude[water] / 2, 10)
    for channel, base in enumerate(DEEP_WATER_RGB):
        rgba[water, channel] = np.maximum(base + depth_shift, 0)
    rgba[water & grid.shoreline, :3] = SHORE_WATER_RGB

    return np.clip(rgba, 0, 255).astype(np.uint8)


def render_thumbnail(grid: TerrainGrid, *, scale: float = THUMBNAIL_SCALE, quality: int = THUMBNAIL_QUALITY) -> bytes:
    """Render a grid to a scaled, lossy WebP thumbnail."""
    image = Image.fromarray(terrain_colors(grid))
    width = max(1, int(grid.width * scale))
    height = max(1, int(grid.height * scale))
    if (width, height) != image.size:
        image = image.resize((width, height), Image.Resampling.BILINEAR)
    buffer = io.BytesIO()
    image.save(buffer, format="WEBP", quality=quality, method=6)
    return buffer.getvalue()
