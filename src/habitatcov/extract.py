"""Zonal extraction of raster cell values inside a neighborhood.

A square neighborhood of radius ``r`` covers the ``n = round(2r / res)``
cells nearest the point along each axis, so it always selects exactly
``n x n`` cells (before clipping to the raster extent) no matter where the
point falls relative to the cell grid. This holds even when ``r`` was
rounded up from a non-integer resolution. Circles keep the cells of that
window whose centres lie within ``r`` of the point.
"""

from __future__ import annotations

import math
from typing import Any

import numpy as np
import numpy.typing as npt

from habitatcov._types import RasterLayer, Region
from habitatcov.exceptions import ConfigurationError

# Decimal places kept before taking ceilings on pixel coordinates;
# absorbs floating-point noise from the affine inverse.
_PIXEL_ROUNDING: int = 9


def _first_center(edge: float) -> int:
    """Index of the first cell whose centre is at or after *edge*."""
    return math.ceil(round(edge - 0.5, _PIXEL_ROUNDING))


def _cells_across(radius: float, resolution: float) -> int:
    """Number of cells spanned by a side of ``2 * radius``, at least one."""
    return max(1, round(2.0 * radius / resolution))


def _overlaps(region: Region, layer: RasterLayer) -> bool:
    minx, miny, maxx, maxy = region.bounds
    left, bottom, right, top = layer.bounds
    return minx < right and maxx > left and miny < top and maxy > bottom


def cell_window(region: Region, layer: RasterLayer) -> tuple[slice, slice]:
    """Return the ``(rows, cols)`` slices of the cells in the region box.

    The window holds the ``n`` cells nearest the region centre per axis,
    where ``n`` is the region side divided by the cell size and rounded.
    The slices are clipped to the raster extent and are empty when the
    region lies entirely outside the raster.

    Raises:
        ConfigurationError: If the layer transform is rotated or sheared.
    """
    t = layer.transform
    if t.b != 0 or t.d != 0:
        raise ConfigurationError(
            what="Rotated raster transforms are not supported",
            cause=f"Transform {tuple(t)[:6]} has rotation terms",
            fix="Warp the landcover rasters to a north-up grid",
        )
    if not _overlaps(region, layer):
        return slice(0, 0), slice(0, 0)

    res_x, res_y = layer.resolution
    n_cols = _cells_across(region.radius, res_x)
    n_rows = _cells_across(region.radius, res_y)
    col, row = ~t @ (region.x, region.y)

    c0 = _first_center(col - n_cols / 2)
    r0 = _first_center(row - n_rows / 2)
    c1 = min(c0 + n_cols, layer.width)
    r1 = min(r0 + n_rows, layer.height)
    c0 = max(c0, 0)
    r0 = max(r0, 0)
    return slice(r0, max(r0, r1)), slice(c0, max(c0, c1))


def _valid_mask(values: npt.NDArray[Any], nodata: float | None) -> npt.NDArray[np.bool_]:
    mask = np.ones(values.shape, dtype=bool)
    if nodata is not None and not (isinstance(nodata, float) and math.isnan(nodata)):
        mask &= values != nodata
    if np.issubdtype(values.dtype, np.floating):
        mask &= ~np.isnan(values)
    return mask


def extract(region: Region, layer: RasterLayer) -> npt.NDArray[Any]:
    """Return the values of all valid cells inside *region*.

    Cells outside the raster extent and nodata cells contribute nothing,
    so the result may hold fewer values than the nominal neighborhood
    size near the edge of the study area.

    Args:
        region: Neighborhood in the layer's CRS.
        layer: In-memory raster layer.

    Returns:
        1-D array of cell values (possibly empty), in row-major order.

    Example:
        >>> from rasterio.transform import Affine
        >>> layer = RasterLayer(
        ...     data=np.full((10, 10), 4, dtype=np.uint8),
        ...     transform=Affine(100.0, 0.0, 0.0, 0.0, -100.0, 1000.0),
        ...     crs="EPSG:32618",
        ... )
        >>> extract(Region(x=450.0, y=550.0, radius=250.0), layer).size
        25
    """
    rows, cols = cell_window(region, layer)
    window = layer.data[rows, cols]
    if window.size == 0:
        return window.ravel()

    keep = _valid_mask(window, layer.nodata)

    if region.shape == "circle":
        t = layer.transform
        col_idx = np.arange(cols.start, cols.stop)
        row_idx = np.arange(rows.start, rows.stop)
        xs = t.c + (col_idx + 0.5) * t.a
        ys = t.f + (row_idx + 0.5) * t.e
        dx = xs[np.newaxis, :] - region.x
        dy = ys[:, np.newaxis] - region.y
        keep &= dx**2 + dy**2 <= region.radius**2

    return window[keep]
