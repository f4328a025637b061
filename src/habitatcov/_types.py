"""Internal shared types for cross-boundary data contracts.

These types define the data shapes passed between the raster sources,
the extraction stages and the pipeline. ``RasterLayer`` and
``CompositionVector`` are re-exported from ``habitatcov.__init__``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

import numpy as np
import numpy.typing as npt
from rasterio.transform import Affine

Bounds = tuple[float, float, float, float]
"""Bounding box ``(minx, miny, maxx, maxy)`` in the raster CRS."""

Shape = Literal["square", "circle"]
"""Neighborhood shape rule."""


@dataclass(frozen=True)
class ObservationPoint:
    """One (location, year) pair to extract covariates for.

    Args:
        location_id: Location identifier (e.g. eBird ``locality_id``).
        year: Observation year.
        x: Easting in the raster CRS.
        y: Northing in the raster CRS.
        latitude: WGS84 latitude as read from the input table.
        longitude: WGS84 longitude as read from the input table.
    """

    location_id: str
    year: int
    x: float
    y: float
    latitude: float = float("nan")
    longitude: float = float("nan")


@dataclass(frozen=True)
class Region:
    """Neighborhood around a projected point.

    Args:
        x: Centre easting in the raster CRS.
        y: Centre northing in the raster CRS.
        radius: Half-width of the square (or radius of the circle).
        shape: ``"square"`` or ``"circle"``.

    Example:
        >>> Region(x=500.0, y=500.0, radius=250.0).bounds
        (250.0, 250.0, 750.0, 750.0)
    """

    x: float
    y: float
    radius: float
    shape: Shape = "square"

    @property
    def bounds(self) -> Bounds:
        """Axis-aligned bounding box of the region."""
        return (
            self.x - self.radius,
            self.y - self.radius,
            self.x + self.radius,
            self.y + self.radius,
        )


@dataclass
class RasterLayer:
    """Single-band raster held in memory.

    Args:
        data: 2-D array of cell values, row 0 at the top.
        transform: Affine transform from pixel to CRS coordinates.
        crs: CRS string (e.g. ``"EPSG:32618"``) or WKT.
        nodata: Value marking cells without data, if any.
        year: Calendar year of an annual layer, ``None`` otherwise.

    Example:
        >>> from rasterio.transform import Affine
        >>> layer = RasterLayer(
        ...     data=np.zeros((10, 10), dtype=np.uint8),
        ...     transform=Affine(100.0, 0.0, 0.0, 0.0, -100.0, 1000.0),
        ...     crs="EPSG:32618",
        ... )
        >>> layer.resolution
        (100.0, 100.0)
    """

    data: npt.NDArray[Any]
    transform: Affine
    crs: str
    nodata: float | None = None
    year: int | None = None

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def resolution(self) -> tuple[float, float]:
        """Cell size ``(x, y)`` in CRS units."""
        return (abs(self.transform.a), abs(self.transform.e))

    @property
    def bounds(self) -> Bounds:
        """Raster extent ``(minx, miny, maxx, maxy)`` for a north-up transform."""
        t = self.transform
        x0, x1 = sorted((t.c, t.c + t.a * self.width))
        y0, y1 = sorted((t.f, t.f + t.e * self.height))
        return (x0, y0, x1, y1)


@dataclass
class CompositionVector:
    """Landcover class proportions within one neighborhood.

    Args:
        class_codes: Class codes in ascending order.
        counts: Valid cell count per class, aligned with ``class_codes``.
        valid_cells: Total number of valid cells (sum of ``counts``).

    Example:
        >>> vec = CompositionVector(
        ...     class_codes=(0, 1), counts=np.array([1, 3]), valid_cells=4
        ... )
        >>> vec.as_dict()
        {0: 0.25, 1: 0.75}
    """

    class_codes: tuple[int, ...]
    counts: npt.NDArray[np.int64]
    valid_cells: int
    proportions: npt.NDArray[np.float64] = field(init=False)

    def __post_init__(self) -> None:
        self.proportions = self.counts / float(self.valid_cells)

    def as_dict(self) -> dict[int, float]:
        """Return ``{class_code: proportion}`` for every class."""
        return {
            code: float(p) for code, p in zip(self.class_codes, self.proportions)
        }


@dataclass(frozen=True)
class GridCell:
    """One prediction grid cell.

    Args:
        cell_id: Unique 1-based identifier, row-major within the template.
        x: Cell centre easting in the raster CRS.
        y: Cell centre northing in the raster CRS.
        row: Row in the grid template.
        col: Column in the grid template.
        latitude: Cell centre latitude in the output CRS.
        longitude: Cell centre longitude in the output CRS.
    """

    cell_id: int
    x: float
    y: float
    row: int
    col: int
    latitude: float = float("nan")
    longitude: float = float("nan")
