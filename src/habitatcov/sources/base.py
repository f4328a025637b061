"""Landcover source interface and shared types.

Defines the ``LandcoverSource`` abstract base class and the layer
metadata used to check that all annual layers share one grid.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass

from rasterio.crs import CRS
from rasterio.errors import CRSError
from rasterio.transform import Affine

from habitatcov._types import RasterLayer
from habitatcov.exceptions import ConfigurationError

# Relative tolerance when comparing resolutions and grid offsets.
_GRID_TOLERANCE: float = 1e-6


@dataclass(frozen=True)
class LayerInfo:
    """Header metadata of a raster layer, read without loading pixels.

    Args:
        crs: CRS string.
        transform: Affine pixel-to-CRS transform.
        width: Number of columns.
        height: Number of rows.
        nodata: Nodata value, if any.
        year: Layer year, if annual.
    """

    crs: str
    transform: Affine
    width: int
    height: int
    nodata: float | None = None
    year: int | None = None

    @property
    def resolution(self) -> tuple[float, float]:
        return (abs(self.transform.a), abs(self.transform.e))

    @classmethod
    def from_layer(cls, layer: RasterLayer) -> LayerInfo:
        return cls(
            crs=layer.crs,
            transform=layer.transform,
            width=layer.width,
            height=layer.height,
            nodata=layer.nodata,
            year=layer.year,
        )


def same_crs(a: str, b: str) -> bool:
    """Return ``True`` if two CRS definitions describe the same system."""
    if a == b:
        return True
    try:
        return CRS.from_user_input(a) == CRS.from_user_input(b)
    except CRSError:
        return False


def check_projected(info: LayerInfo) -> None:
    """Reject layers whose CRS is not projected.

    Neighborhood sizes are physical distances, so they cannot be applied
    to latitude/longitude degrees.

    Raises:
        ConfigurationError: If the CRS is geographic or unparseable.
    """
    label = f"Landcover layer {info.year}" if info.year is not None else "Raster layer"
    try:
        crs = CRS.from_user_input(info.crs)
    except CRSError as exc:
        raise ConfigurationError(
            what=f"{label} has an unreadable CRS",
            cause=str(exc),
            fix="Assign a projected CRS to the raster",
        ) from None
    if crs.is_geographic:
        raise ConfigurationError(
            what=f"{label} uses a geographic CRS ({info.crs})",
            cause="Neighborhood sizes are in metres, raster cells are in degrees",
            fix="Reproject the rasters to an equal-area or UTM projection",
        )


def _aligned(a: float, b: float, step: float) -> bool:
    offset = (a - b) / step
    return math.isclose(offset, round(offset), abs_tol=_GRID_TOLERANCE)


def validate_alignment(infos: Iterable[LayerInfo]) -> None:
    """Check that all layers share CRS, resolution and grid alignment.

    Raises:
        ConfigurationError: On the first layer that differs from the first.
    """
    infos = list(infos)
    if not infos:
        return
    ref = infos[0]
    check_projected(ref)
    rx, ry = ref.resolution
    for info in infos[1:]:
        if not same_crs(info.crs, ref.crs):
            raise ConfigurationError(
                what=f"Landcover layer {info.year} uses a different CRS",
                cause=f"{info.crs} vs {ref.crs} in {ref.year}",
                fix="Reproject all landcover layers to one CRS",
            )
        ix, iy = info.resolution
        if not (
            math.isclose(ix, rx, rel_tol=_GRID_TOLERANCE)
            and math.isclose(iy, ry, rel_tol=_GRID_TOLERANCE)
        ):
            raise ConfigurationError(
                what=f"Landcover layer {info.year} has a different resolution",
                cause=f"{info.resolution} vs {ref.resolution} in {ref.year}",
                fix="Resample all landcover layers to one resolution",
            )
        if not (
            _aligned(info.transform.c, ref.transform.c, rx)
            and _aligned(info.transform.f, ref.transform.f, ry)
        ):
            raise ConfigurationError(
                what=f"Landcover layer {info.year} is not aligned with {ref.year}",
                cause="Cell edges are offset by a fraction of a cell",
                fix="Snap all landcover layers to one grid",
            )


class LandcoverSource(ABC):
    """Abstract supplier of annual landcover layers.

    Implementations only read; layers are never modified once loaded.
    Loading is on demand so a run holds one year in memory at a time.
    """

    @abstractmethod
    def available_years(self) -> list[int]:
        """Return the years for which a layer exists, ascending."""
        ...

    @abstractmethod
    def describe(self, year: int) -> LayerInfo:
        """Return header metadata for *year* without reading pixels.

        Raises:
            ConfigurationError: If no layer exists for *year*.
        """
        ...

    @abstractmethod
    def load(self, year: int) -> RasterLayer:
        """Read the full layer for *year* into memory.

        Raises:
            ConfigurationError: If no layer exists for *year*.
            DataSourceError: If the file cannot be read.
        """
        ...
