"""Default terrain generator: PNG source image to packed terrain variants."""

from __future__ import annotations

import logging

from mapgen.terrain.grid import (
    TerrainGrid,
    classify_pixels,
    decode_image,
    downsample,
    pack_terrain,
    process_water,
    remove_small_islands,
)
from mapgen.terrain.models import GenerationResult, GeneratorArgs, TerrainVariant
from mapgen.terrain.thumbnail import render_thumbnail

LOGGER = logging.getLogger(__name__)


def _variant(grid: TerrainGrid) -> TerrainVariant:
    return TerrainVariant(
        width=grid.width,
        height=grid.height,
        num_land_tiles=grid.num_land_tiles,
        data=pack_terrain(grid),
    )


def generate_map(args: GeneratorArgs) -> GenerationResult:
    """Generate base, 4x and 16x terrain plus a thumbnail from a PNG buffer."""
    rgba = decode_image(args.image_buffer)
    grid = classify_pixels(rgba)
    LOGGER.debug(
        "Decoded %sx%s source image.",
        grid.width,
        grid.height,
        extra={"map": args.name},
    )
    if args.remove_small:
        removed = remove_small_islands(grid)
        if removed:
            LOGGER.debug("Removed %s small island tile(s).", removed, extra={"map": args.name})
    process_water(grid, remove_small=args.remove_small)

    grid4x = downsample(grid)
    process_water(grid4x, remove_small=False)
    grid16x = downsample(grid4x)
    process_water(grid16x, remove_small=False)

    return GenerationResult(
        map=_variant(grid),
        map4x=_variant(grid4x),
        map16x=_variant(grid16x),
        thumbnail=render_thumbnail(grid4x),
    )
