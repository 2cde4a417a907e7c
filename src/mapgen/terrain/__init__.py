"""Terrain generation from source map images."""

from mapgen.terrain.generator import generate_map
from mapgen.terrain.grid import TerrainGrid
from mapgen.terrain.models import (
    GenerationResult,
    GeneratorArgs,
    TerrainGenerator,
    TerrainVariant,
)

__all__ = [
    "GenerationResult",
    "GeneratorArgs",
    "TerrainGenerator",
    "TerrainGrid",
    "TerrainVariant",
    "generate_map",
]
