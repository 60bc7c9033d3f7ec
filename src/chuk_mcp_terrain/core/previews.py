"""
PNG previews of tile elevation.

Grid row 0 is the south edge, so arrays are flipped vertically before
encoding to give north-up images.
"""

import io
import logging
import math
from typing import Any

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from ..constants import DEFAULT_ALTITUDE, DEFAULT_AZIMUTH

logger = logging.getLogger(__name__)

FloatArray = NDArray[np.floating[Any]]


def _encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def compute_hillshade(
    elevation: FloatArray,
    cellsize: float,
    azimuth: float = DEFAULT_AZIMUTH,
    altitude: float = DEFAULT_ALTITUDE,
) -> FloatArray:
    """
    Hillshade (0-255) using Horn's method, in grid row order.

    NODATA cells are filled with the valid minimum before differencing and
    come out as 0.
    """
    nodata = np.isnan(elevation)
    fill = float(np.nanmin(elevation)) if not np.all(nodata) else 0.0
    # north-up so that dz/dy points north
    padded = np.pad(np.flipud(np.where(nodata, fill, elevation)), 1, mode="edge")

    dz_dx = (
        (padded[:-2, 2:] + 2 * padded[1:-1, 2:] + padded[2:, 2:])
        - (padded[:-2, :-2] + 2 * padded[1:-1, :-2] + padded[2:, :-2])
    ) / (8.0 * cellsize)

    dz_dy = (
        (padded[:-2, :-2] + 2 * padded[:-2, 1:-1] + padded[:-2, 2:])
        - (padded[2:, :-2] + 2 * padded[2:, 1:-1] + padded[2:, 2:])
    ) / (8.0 * cellsize)

    az_rad = math.radians(360.0 - azimuth + 90.0)
    alt_rad = math.radians(altitude)

    slope = np.arctan(np.sqrt(dz_dx**2 + dz_dy**2))
    aspect = np.arctan2(-dz_dy, dz_dx)

    hillshade = 255.0 * (
        math.cos(alt_rad) * np.cos(slope)
        + math.sin(alt_rad) * np.sin(slope) * np.cos(az_rad - aspect)
    )
    hillshade = np.flipud(np.clip(hillshade, 0, 255))
    hillshade[nodata] = 0.0
    return hillshade


def elevation_to_hillshade_png(elevation: FloatArray, cellsize: float) -> bytes:
    """Greyscale hillshade PNG, north-up."""
    hs = compute_hillshade(elevation, cellsize)
    return _encode_png(Image.fromarray(np.ascontiguousarray(np.flipud(hs).astype(np.uint8))))


def elevation_to_terrain_png(elevation: FloatArray) -> bytes:
    """Terrain-coloured PNG (green -> brown -> white), north-up, NODATA black."""
    nodata = np.isnan(elevation)
    if np.all(nodata):
        img = Image.new("L", (elevation.shape[1], elevation.shape[0]), 0)
        return _encode_png(img)

    vmin, vmax = float(np.nanmin(elevation)), float(np.nanmax(elevation))
    if vmax == vmin:
        vmax = vmin + 1.0

    norm = np.clip(np.nan_to_num((elevation - vmin) / (vmax - vmin), nan=0.0), 0.0, 1.0)

    r = np.clip(norm * 2.0, 0, 1) * 200 + 55
    g = np.clip(1.0 - norm * 0.5, 0, 1) * 200 + 55
    b = np.clip(norm * 1.5 - 0.5, 0, 1) * 200 + 55

    rgb = np.stack([r, g, b], axis=-1).astype(np.uint8)
    rgb[nodata] = 0

    return _encode_png(Image.fromarray(np.ascontiguousarray(np.flipud(rgb))))
