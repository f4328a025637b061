"""Suppliers of annual landcover layers.

``GeoTiffLandcoverSource`` reads one GeoTIFF per year from disk;
``MemoryLandcoverSource`` serves layers built in memory.
"""

from __future__ import annotations

from habitatcov.sources.base import (
    LandcoverSource,
    LayerInfo,
    check_projected,
    same_crs,
    validate_alignment,
)
from habitatcov.sources.geotiff import GeoTiffLandcoverSource, read_info, read_raster
from habitatcov.sources.memory import MemoryLandcoverSource

__all__ = [
    "GeoTiffLandcoverSource",
    "LandcoverSource",
    "LayerInfo",
    "MemoryLandcoverSource",
    "check_projected",
    "read_info",
    "read_raster",
    "same_crs",
    "validate_alignment",
]
