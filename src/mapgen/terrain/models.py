"""Data models exchanged with terrain generators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class GeneratorArgs:
    """Inputs for one terrain generation call.

    ``name`` is only used for diagnostics.
    """

    image_buffer: bytes
    remove_small: bool
    name: str


@dataclass(frozen=True)
class TerrainVariant:
    """One resolution of packed terrain data."""

    width: int
    height: int
    num_land_tiles: int
    data: bytes

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Terrain dimensions must be positive, got {self.width}x{self.height}."
            )
        if not 0 <= self.num_land_tiles <= self.width * self.height:
            raise ValueError(
                f"num_land_tiles {self.num_land_tiles} out of range for "
                f"{self.width}x{self.height} terrain."
            )


@dataclass(frozen=True)
class GenerationResult:
    """Terrain variants and thumbnail produced for one map."""

    map: TerrainVariant
    map4x: TerrainVariant
    map16x: TerrainVariant
    thumbnail: bytes

    def variants(self) -> dict[str, TerrainVariant]:
        """Return variants keyed by their manifest/artifact name."""
        return {"map": self.map, "map4x": self.map4x, "map16x": self.map16x}


class TerrainGenerator(Protocol):
    """Callable that turns a source image into terrain variants."""

    def __call__(self, args: GeneratorArgs) -> GenerationResult:
        ...
