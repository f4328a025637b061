"""Top-level extraction functions for habitatcov.

Example:
    >>> import habitatcov as hc
    >>> cfg = hc.Config(landcover_dir="data/modis", neighborhood_cells=5)
    >>> table = hc.extract_observation_covariates("ebd_zf.csv", cfg)  # doctest: +SKIP
    >>> table.to_csv("output/pland-elev_location-year.csv")  # doctest: +SKIP
    >>> surface = hc.extract_prediction_covariates("bcr.gpkg", cfg)  # doctest: +SKIP
    >>> surface.to_geotiff("pland_04_deciduous_broadleaf", "forest.tif")  # doctest: +SKIP
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd
from shapely.geometry.base import BaseGeometry

from habitatcov._pipeline import _extract_observations, _extract_prediction, _prepare
from habitatcov.cache import LayerCache
from habitatcov.config import Config
from habitatcov.grid import load_boundary
from habitatcov.ingest import read_table
from habitatcov.results import CovariateTable, PredictionSurface
from habitatcov.sources.base import LandcoverSource
from habitatcov.sources.geotiff import GeoTiffLandcoverSource


def _resolve_source(config: Config, source: LandcoverSource | None) -> LandcoverSource:
    return source if source is not None else GeoTiffLandcoverSource(config)


def extract_observation_covariates(
    observations: pd.DataFrame | str | Path,
    config: Config,
    *,
    source: LandcoverSource | None = None,
    id_column: str = "locality_id",
) -> CovariateTable:
    """Compute landcover composition for every (location, year) pair.

    Observation years after the last landcover year use the last year;
    the ``landcover_year`` column records which layer was used.

    Args:
        observations: Observation table, or a path to it as CSV. Needs
            *id_column*, ``latitude``, ``longitude`` and ``year`` or
            ``observation_date``.
        config: Run configuration.
        source: Landcover supplier. Defaults to GeoTIFFs located through
            ``config.landcover_dir`` and ``config.landcover_pattern``.
        id_column: Location identifier column.

    Returns:
        ``CovariateTable`` with one row per retained location-year.

    Raises:
        ConfigurationError: For invalid settings, mismatched layers,
            missing landcover years or malformed input tables.
        DataSourceError: If a raster cannot be read.
    """
    if not isinstance(observations, pd.DataFrame):
        observations = read_table(observations)
    lc_source = _resolve_source(config, source)
    ctx = _prepare(config, lc_source)
    cache = LayerCache(lc_source)
    return _extract_observations(observations, ctx, cache, id_column=id_column)


def extract_prediction_covariates(
    boundary: BaseGeometry | str | Path,
    config: Config,
    *,
    source: LandcoverSource | None = None,
) -> PredictionSurface:
    """Compute landcover composition over a prediction grid.

    Uses the most recent landcover year for every grid cell.

    Args:
        boundary: Study region geometry in the landcover CRS, or a path to
            a vector file (reprojected automatically).
        config: Run configuration.
        source: Landcover supplier, as for ``extract_observation_covariates``.

    Returns:
        ``PredictionSurface`` with one row per retained grid cell.

    Raises:
        ConfigurationError: For invalid settings or a boundary that does
            not overlap the landcover raster.
        DataSourceError: If a raster or the boundary cannot be read.
    """
    lc_source = _resolve_source(config, source)
    ctx = _prepare(config, lc_source)
    if not isinstance(boundary, BaseGeometry):
        boundary = load_boundary(boundary, ctx.crs)
    cache = LayerCache(lc_source)
    return _extract_prediction(boundary, ctx, cache)
