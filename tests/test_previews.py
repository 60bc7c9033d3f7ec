"""Tests for chuk_mcp_terrain.core.previews module."""

import io

import numpy as np
from PIL import Image

from chuk_mcp_terrain.core.previews import (
    compute_hillshade,
    elevation_to_hillshade_png,
    elevation_to_terrain_png,
)


def _decode(png: bytes) -> Image.Image:
    return Image.open(io.BytesIO(png))


class TestComputeHillshade:
    """Tests for compute_hillshade()."""

    def test_shape_and_range(self, funnel_elevation):
        hs = compute_hillshade(funnel_elevation, 2.0)
        assert hs.shape == funnel_elevation.shape
        assert hs.min() >= 0.0
        assert hs.max() <= 255.0

    def test_flat_surface_uniform(self):
        hs = compute_hillshade(np.full((4, 4), 50.0), 1.0)
        expected = 255.0 * np.sin(np.radians(45.0))
        np.testing.assert_allclose(hs, expected)

    def test_nodata_cells_are_zero(self):
        elevation = np.full((3, 3), 10.0)
        elevation[1, 1] = np.nan
        hs = compute_hillshade(elevation, 1.0)
        assert hs[1, 1] == 0.0
        assert np.all(np.isfinite(hs))

    def test_all_nodata(self):
        hs = compute_hillshade(np.full((2, 2), np.nan), 1.0)
        assert np.all(hs == 0.0)

    def test_north_facing_slope_lit(self):
        # Row index grows northwards; the default sun is in the north-west
        _, rows = np.meshgrid(np.arange(5.0), np.arange(5.0))
        facing = compute_hillshade(-rows, 1.0)
        away = compute_hillshade(rows, 1.0)
        assert facing[2, 2] > away[2, 2]


class TestPngEncoding:
    def test_hillshade_png_is_greyscale(self, funnel_elevation):
        img = _decode(elevation_to_hillshade_png(funnel_elevation, 2.0))
        assert img.format == "PNG"
        assert img.mode == "L"
        assert img.size == (5, 5)

    def test_terrain_png_is_rgb(self):
        elevation = np.arange(6, dtype=float).reshape(2, 3)
        img = _decode(elevation_to_terrain_png(elevation))
        assert img.mode == "RGB"
        assert img.size == (3, 2)

    def test_terrain_png_north_up(self):
        # row 0 (south) is the lowest; it must be the bottom image row
        elevation = np.array([[0.0, 0.0], [100.0, 100.0]])
        img = _decode(elevation_to_terrain_png(elevation))
        bottom = img.getpixel((0, 1))
        top = img.getpixel((0, 0))
        assert bottom != top
        assert top[2] > bottom[2]

    def test_terrain_png_nodata_black(self):
        elevation = np.array([[np.nan, 1.0], [2.0, 3.0]])
        img = _decode(elevation_to_terrain_png(elevation))
        assert img.getpixel((0, 1)) == (0, 0, 0)

    def test_terrain_png_flat_grid(self):
        img = _decode(elevation_to_terrain_png(np.full((2, 2), 7.0)))
        assert img.size == (2, 2)

    def test_terrain_png_all_nodata_blank(self):
        img = _decode(elevation_to_terrain_png(np.full((2, 3), np.nan)))
        assert img.mode == "L"
        assert img.size == (3, 2)
        assert img.getextrema() == (0, 0)
