"""Prediction grid generation over a study region.

The grid is the landcover raster aggregated by a whole-number factor so
that every grid cell is one neighborhood wide and its edges coincide with
landcover cell edges. Only cells whose centre falls inside the study
region boundary are kept, and the grid template is trimmed to them.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path

import geopandas as gpd
import numpy as np
import shapely
from rasterio.transform import Affine
from shapely.geometry.base import BaseGeometry

from habitatcov._types import GridCell
from habitatcov.exceptions import ConfigurationError, DataSourceError
from habitatcov.location import project
from habitatcov.sources.base import LayerInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GridTemplate:
    """Raster geometry of the trimmed prediction grid.

    Lets a table of per-cell values be written back out as a raster.

    Args:
        transform: Affine transform of the grid.
        width: Number of grid columns.
        height: Number of grid rows.
        crs: CRS of the grid (the landcover CRS).
    """

    transform: Affine
    width: int
    height: int
    crs: str


@dataclass
class PredictionGrid:
    """Retained grid cells together with their template.

    Args:
        cells: Grid cells in row-major order with ids starting at 1.
        template: Geometry for rasterizing per-cell values.
        factor: Aggregation factor relative to the landcover resolution.
    """

    cells: list[GridCell]
    template: GridTemplate
    factor: int


def aggregation_factor(radius: float, resolution: tuple[float, float]) -> int:
    """Return how many landcover cells make up one grid cell side.

    Raises:
        ConfigurationError: If the neighborhood is smaller than half a cell.

    Example:
        >>> aggregation_factor(1160.0, (463.3127, 463.3127))
        5
    """
    factor = int(round(2 * radius / max(resolution)))
    if factor < 1:
        raise ConfigurationError(
            what=f"Invalid grid aggregation factor: {factor}",
            cause=f"Neighborhood diameter {2 * radius} is below the cell size",
            fix="Increase neighborhood_cells",
        )
    return factor


def load_boundary(path: str | Path, crs: str) -> BaseGeometry:
    """Read a study region boundary and dissolve it into one geometry.

    Args:
        path: Any vector file geopandas can read (GeoPackage, shapefile,
            GeoJSON).
        crs: CRS to reproject the boundary into (the landcover CRS).

    Returns:
        Single (multi)polygon in *crs*.

    Raises:
        DataSourceError: If the file cannot be read.
        ConfigurationError: If it has no CRS or no features.
    """
    try:
        gdf = gpd.read_file(path)
    except Exception as exc:  # noqa: BLE001
        raise DataSourceError(
            what=f"Cannot read study region boundary {path}",
            cause=str(exc),
            fix="Check that the file exists and is a readable vector format",
        ) from None

    if gdf.empty:
        raise ConfigurationError(
            what="Study region boundary has no features",
            cause=f"{path} is empty",
        )
    if gdf.crs is None:
        raise ConfigurationError(
            what="Study region boundary has no CRS",
            cause=f"{path} carries no coordinate reference system",
            fix="Assign a CRS to the boundary file",
        )

    geometry = gdf.to_crs(crs).geometry.union_all()
    if not geometry.is_valid:
        geometry = shapely.make_valid(geometry)
    return geometry


def generate_grid(
    boundary: BaseGeometry,
    info: LayerInfo,
    radius: float,
    output_crs: str = "EPSG:4326",
) -> PredictionGrid:
    """Build the prediction grid covering *boundary*.

    Args:
        boundary: Study region geometry in the landcover CRS.
        info: Header of the landcover layer the grid aligns to.
        radius: Neighborhood half-width in CRS units.
        output_crs: CRS for cell latitude/longitude.

    Returns:
        ``PredictionGrid`` with row-major cells and a trimmed template.

    Raises:
        ConfigurationError: If no cell centre falls inside the boundary.
    """
    factor = aggregation_factor(radius, info.resolution)
    t = info.transform
    cell_w = t.a * factor
    cell_h = t.e * factor
    n_cols = math.ceil(info.width / factor)
    n_rows = math.ceil(info.height / factor)

    xs = t.c + (np.arange(n_cols) + 0.5) * cell_w
    ys = t.f + (np.arange(n_rows) + 0.5) * cell_h
    grid_x, grid_y = np.meshgrid(xs, ys)
    inside = shapely.contains_xy(boundary, grid_x, grid_y)

    if not inside.any():
        raise ConfigurationError(
            what="No prediction grid cells inside the study region",
            cause="The boundary does not overlap the landcover raster",
            fix="Check the boundary file and the landcover extent",
        )

    rows_kept = np.flatnonzero(inside.any(axis=1))
    cols_kept = np.flatnonzero(inside.any(axis=0))
    r0, r1 = int(rows_kept[0]), int(rows_kept[-1])
    c0, c1 = int(cols_kept[0]), int(cols_kept[-1])
    template = GridTemplate(
        transform=Affine(cell_w, 0.0, t.c + c0 * cell_w, 0.0, cell_h, t.f + r0 * cell_h),
        width=c1 - c0 + 1,
        height=r1 - r0 + 1,
        crs=info.crs,
    )

    positions = np.argwhere(inside)
    cx = grid_x[inside]
    cy = grid_y[inside]
    lons, lats = project(cx, cy, dst_crs=output_crs, src_crs=info.crs)

    cells = [
        GridCell(
            cell_id=i + 1,
            x=float(x),
            y=float(y),
            row=int(r) - r0,
            col=int(c) - c0,
            latitude=float(lat),
            longitude=float(lon),
        )
        for i, ((r, c), x, y, lon, lat) in enumerate(zip(positions, cx, cy, lons, lats))
    ]
    logger.info(
        "Prediction grid: %d cells (%dx%d template, factor %d)",
        len(cells),
        template.height,
        template.width,
        factor,
    )
    return PredictionGrid(cells=cells, template=template, factor=factor)
