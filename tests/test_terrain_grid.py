from __future__ import annotations

import numpy as np
import pytest
from PIL import UnidentifiedImageError

from mapgen.terrain import grid
from tests.utils import png_bytes, terrain_rgba


def _grid(land: np.ndarray, magnitude: float = 5.0) -> grid.TerrainGrid:
    land = np.asarray(land, dtype=bool)
    return grid.TerrainGrid(
        land=land.copy(),
        magnitude=np.where(land, magnitude, 0.0),
        shoreline=np.zeros(land.shape, dtype=bool),
        ocean=np.zeros(land.shape, dtype=bool),
    )


def test_decode_image_crops_to_multiple_of_four() -> None:
    rgba = terrain_rgba(np.ones((10, 7), dtype=bool))
    decoded = grid.decode_image(png_bytes(rgba))
    assert decoded.shape == (8, 4, 4)


def test_decode_image_rejects_tiny_images() -> None:
    with pytest.raises(ValueError, match="at least 4x4"):
        grid.decode_image(png_bytes(terrain_rgba(np.ones((3, 8), dtype=bool))))


def test_decode_image_rejects_non_images() -> None:
    with pytest.raises(UnidentifiedImageError):
        grid.decode_image(b"not a png")


def test_classify_pixels_water_rules() -> None:
    rgba = np.zeros((1, 4, 4), dtype=np.uint8)
    rgba[0, 0] = (0, 0, 150, 255)  # land
    rgba[0, 1] = (0, 0, 106, 255)  # water marker
    rgba[0, 2] = (0, 0, 150, 10)  # transparent
    rgba[0, 3] = (0, 0, 255, 255)  # high land
    classified = grid.classify_pixels(rgba)
    assert classified.land.tolist() == [[True, False, False, True]]
    assert classified.magnitude[0, 0] == pytest.approx(5.0)
    assert classified.magnitude[0, 3] == pytest.approx(30.0)
    assert classified.magnitude[0, 1] == 0.0


def test_remove_small_islands() -> None:
    land = np.zeros((12, 12), dtype=bool)
    land[0:6, 0:6] = True  # 36 tiles, kept
    land[9:11, 9:11] = True  # 4 tiles, removed
    terrain = _grid(land)
    removed = grid.remove_small_islands(terrain)
    assert removed == 4
    assert terrain.num_land_tiles == 36
    assert not terrain.land[9:11, 9:11].any()


def test_process_water_marks_largest_body_as_ocean() -> None:
    land = np.ones((8, 8), dtype=bool)
    land[:, 0:3] = False  # 24 tile ocean
    land[5, 6] = False  # single tile lake
    terrain = _grid(land)
    grid.process_water(terrain, remove_small=False)
    assert terrain.ocean[:, 0:3].all()
    assert not terrain.ocean[5, 6]
    assert not terrain.land[5, 6]


def test_process_water_fills_small_lakes_when_removing() -> None:
    land = np.ones((8, 8), dtype=bool)
    land[:, 0:3] = False
    land[5, 6] = False
    terrain = _grid(land)
    grid.process_water(terrain, remove_small=True)
    assert terrain.land[5, 6]
    assert terrain.magnitude[5, 6] == 0.0
    assert terrain.ocean[:, 0:3].all()


def test_shoreline_and_water_distance() -> None:
    land = np.zeros((1, 8), dtype=bool)
    land[0, 0:2] = True
    terrain = _grid(land)
    grid.process_water(terrain, remove_small=False)
    assert terrain.shoreline.tolist() == [[False, True, True] + [False] * 5]
    assert terrain.magnitude[0, 2:].tolist() == [0, 1, 2, 3, 4, 5]
    assert terrain.magnitude[0, 0] == 5.0


def test_all_water_grid_has_zero_depth() -> None:
    terrain = _grid(np.zeros((4, 4), dtype=bool))
    grid.process_water(terrain, remove_small=True)
    assert terrain.ocean.all()
    assert not terrain.shoreline.any()
    assert (terrain.magnitude == 0).all()


def test_all_land_grid_has_no_ocean() -> None:
    terrain = _grid(np.ones((4, 4), dtype=bool))
    grid.process_water(terrain, remove_small=True)
    assert not terrain.ocean.any()
    assert not terrain.shoreline.any()


def test_downsample_water_dominates() -> None:
    land = np.ones((4, 4), dtype=bool)
    land[0, 0] = False
    terrain = _grid(land)
    terrain.magnitude[1, 1] = 7.0
    terrain.magnitude[1, 3] = 9.0
    mini = grid.downsample(terrain)
    assert mini.land.tolist() == [[False, True], [True, True]]
    assert mini.magnitude[0, 1] == 9.0
    assert mini.magnitude[0, 0] == 0.0


def test_pack_terrain_bits() -> None:
    terrain = _grid(np.array([[True, False, False, False]]), magnitude=4.5)
    grid.process_water(terrain, remove_small=False)
    packed = grid.pack_terrain(terrain)
    assert len(packed) == 4
    # land + shoreline, ceil(4.5) == 5
    assert packed[0] == 0b11000000 | 5
    # shoreline ocean water at distance 0
    assert packed[1] == 0b01100000
    # ocean water, depth 2 packs as ceil(2 / 2)
    assert packed[3] == 0b00100000 | 1


def test_pack_terrain_is_row_major() -> None:
    land = np.array([[True, False], [False, False]])
    packed = grid.pack_terrain(_grid(land))
    assert packed[0] & 0x80
    assert not packed[1] & 0x80
    assert not packed[2] & 0x80


def test_pack_terrain_caps_magnitude() -> None:
    terrain = _grid(np.zeros((1, 4), dtype=bool))
    terrain.magnitude[:] = 200
    packed = grid.pack_terrain(terrain)
    assert all(value & 0x1F == grid.MAX_MAGNITUDE for value in packed)
