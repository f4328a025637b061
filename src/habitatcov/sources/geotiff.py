"""GeoTIFF-backed raster sources.

Annual landcover layers live in one directory, one file per year, found
through the ``landcover_pattern`` of the run ``Config``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

import rasterio
from rasterio.errors import RasterioIOError

from habitatcov._types import RasterLayer
from habitatcov.config import Config
from habitatcov.exceptions import ConfigurationError, DataSourceError
from habitatcov.sources.base import LandcoverSource, LayerInfo

logger = logging.getLogger(__name__)


def _crs_string(crs: rasterio.crs.CRS | None) -> str:
    if crs is None:
        return ""
    return crs.to_string()


def read_info(path: str | Path, year: int | None = None) -> LayerInfo:
    """Read raster header metadata without loading pixel data.

    Raises:
        DataSourceError: If the file cannot be opened.
    """
    try:
        with rasterio.open(path) as src:
            return LayerInfo(
                crs=_crs_string(src.crs),
                transform=src.transform,
                width=src.width,
                height=src.height,
                nodata=src.nodata,
                year=year,
            )
    except RasterioIOError as exc:
        raise DataSourceError(
            what=f"Cannot open raster {path}",
            cause=str(exc),
            fix="Check that the file exists and is a readable GeoTIFF",
        ) from None


def read_raster(path: str | Path, year: int | None = None) -> RasterLayer:
    """Read the first band of a raster file into memory.

    Args:
        path: Raster file path.
        year: Year to attach to the layer, if annual.

    Returns:
        ``RasterLayer`` holding the full band.

    Raises:
        DataSourceError: If the file cannot be opened or read.
    """
    try:
        with rasterio.open(path) as src:
            data = src.read(1)
            return RasterLayer(
                data=data,
                transform=src.transform,
                crs=_crs_string(src.crs),
                nodata=src.nodata,
                year=year,
            )
    except RasterioIOError as exc:
        raise DataSourceError(
            what=f"Cannot read raster {path}",
            cause=str(exc),
            fix="Check that the file exists and is a readable GeoTIFF",
        ) from None


class GeoTiffLandcoverSource(LandcoverSource):
    """Annual landcover GeoTIFFs located by a ``{year}`` filename pattern.

    Args:
        config: Run configuration providing ``landcover_dir`` and
            ``landcover_pattern``.

    Example:
        >>> source = GeoTiffLandcoverSource(Config(landcover_dir="data/modis"))
        >>> source.available_years()  # doctest: +SKIP
        [2014, 2015, 2016, 2017, 2018, 2019]
    """

    def __init__(self, config: Config) -> None:
        self._config = config
        self._dir = Path(config.landcover_dir)
        head, _, tail = config.landcover_pattern.partition("{year}")
        self._regex = re.compile(
            "^" + re.escape(head) + r"(\d{4})" + re.escape(tail) + "$"
        )

    def available_years(self) -> list[int]:
        if not self._dir.is_dir():
            raise ConfigurationError(
                what="Landcover directory not found",
                cause=f"{self._dir} does not exist",
                fix="Set landcover_dir to the folder holding the annual rasters",
            )
        years: list[int] = []
        for child in self._dir.iterdir():
            match = self._regex.match(child.name)
            if match and child.is_file():
                years.append(int(match.group(1)))
        return sorted(years)

    def _path(self, year: int) -> Path:
        path = self._config.landcover_path(year)
        if not path.exists():
            raise ConfigurationError(
                what=f"No landcover layer for {year}",
                cause=f"File not found: {path}",
                fix="Add the missing landcover year or filter out those observations",
            )
        return path

    def describe(self, year: int) -> LayerInfo:
        return read_info(self._path(year), year=year)

    def load(self, year: int) -> RasterLayer:
        path = self._path(year)
        logger.info("Reading landcover %d from %s", year, path)
        return read_raster(path, year=year)
