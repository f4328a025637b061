"""Shared test fixtures for the habitatcov test suite.

Rasters are small synthetic UTM grids (100 m cells) built in memory or
written to ``tmp_path`` as GeoTIFFs. Points are placed on cell centres
and converted to WGS84 so the pipeline's own reprojection lands them
far from any cell edge.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np
import pytest
import rasterio
from rasterio.transform import from_origin
from rasterio.warp import transform as warp_transform

from habitatcov._types import RasterLayer
from habitatcov.config import Config

UTM_CRS = "EPSG:32618"
RESOLUTION = 100.0
WEST = 500_000.0
NORTH = 4_500_000.0
NODATA = 255


def make_layer(
    data: Any,
    year: int | None = None,
    nodata: float | None = NODATA,
    crs: str = UTM_CRS,
    west: float = WEST,
    north: float = NORTH,
    resolution: float = RESOLUTION,
) -> RasterLayer:
    """Build an in-memory layer on the shared test grid."""
    return RasterLayer(
        data=np.asarray(data),
        transform=from_origin(west, north, resolution, resolution),
        crs=crs,
        nodata=nodata,
        year=year,
    )


def write_geotiff(path: Path, layer: RasterLayer) -> Path:
    """Write *layer* to *path* as a single-band GeoTIFF."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with rasterio.open(
        path,
        "w",
        driver="GTiff",
        height=layer.height,
        width=layer.width,
        count=1,
        dtype=layer.data.dtype.name,
        crs=layer.crs,
        transform=layer.transform,
        nodata=layer.nodata,
    ) as dst:
        dst.write(layer.data, 1)
    return path


def cell_center(row: int, col: int) -> tuple[float, float]:
    """Projected centre ``(x, y)`` of a cell on the shared test grid."""
    return (WEST + (col + 0.5) * RESOLUTION, NORTH - (row + 0.5) * RESOLUTION)


def to_lonlat(x: float, y: float, crs: str = UTM_CRS) -> tuple[float, float]:
    """Convert a projected point to WGS84 ``(lon, lat)``."""
    lons, lats = warp_transform(crs, "EPSG:4326", [x], [y])
    return (float(lons[0]), float(lats[0]))


def observation_row(
    locality_id: str, year: int, row: int, col: int
) -> dict[str, Any]:
    """Observation table row for a point on the centre of cell ``(row, col)``."""
    lon, lat = to_lonlat(*cell_center(row, col))
    return {
        "locality_id": locality_id,
        "latitude": lat,
        "longitude": lon,
        "observation_date": f"{year}-06-15",
    }


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Return a Config pointing at an isolated landcover directory."""
    return Config(landcover_dir=tmp_path / "landcover")


@pytest.fixture
def uniform_data() -> np.ndarray:
    """40 x 40 raster of class 4 (deciduous broadleaf)."""
    return np.full((40, 40), 4, dtype=np.uint8)


@pytest.fixture
def geotiff_dir(test_config: Config, uniform_data: np.ndarray) -> Path:
    """Landcover directory with uniform class-4 layers for 2014 and 2015."""
    for year in (2014, 2015):
        write_geotiff(
            test_config.landcover_path(year), make_layer(uniform_data, year=year)
        )
    return test_config.landcover_dir
