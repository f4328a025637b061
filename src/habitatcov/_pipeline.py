"""Pipeline helpers for covariate extraction.

Ties the stages together: validate the landcover layers, route points to
years, then per landcover year load the layer once, run
neighborhood -> extract -> summarize for every point, and release it.
Configuration problems raise before any extraction starts; rows without
valid cells are dropped and recorded.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any

import pandas as pd
from shapely.geometry.base import BaseGeometry

from habitatcov._types import ObservationPoint, RasterLayer
from habitatcov.analysis.composition import summarize
from habitatcov.analysis.terrain import summarize_elevation
from habitatcov.cache import LayerCache
from habitatcov.config import Config
from habitatcov.exceptions import ConfigurationError, DataGapError
from habitatcov.extract import extract
from habitatcov.grid import generate_grid
from habitatcov.location import observation_points
from habitatcov.neighborhood import neighborhood, neighborhood_radius
from habitatcov.results import CovariateTable, PredictionSurface, ResultMetadata
from habitatcov.sources.base import (
    LandcoverSource,
    LayerInfo,
    same_crs,
    validate_alignment,
)
from habitatcov.sources.geotiff import read_raster
from habitatcov.years import YearRouter

logger = logging.getLogger(__name__)

_ELEVATION_COLUMNS: tuple[str, str] = ("elevation_median", "elevation_sd")


@dataclass
class ExtractionContext:
    """Everything a run needs, resolved and validated up front.

    Args:
        config: Run configuration.
        source: Landcover layer supplier.
        router: Observation-year to landcover-year mapping.
        reference: Header of the most recent landcover layer.
        radius: Neighborhood half-width in CRS units.
        elevation: Optional elevation layer in the landcover CRS.
    """

    config: Config
    source: LandcoverSource
    router: YearRouter
    reference: LayerInfo
    radius: float
    elevation: RasterLayer | None = None

    @property
    def crs(self) -> str:
        return self.reference.crs

    @property
    def covariate_columns(self) -> list[str]:
        columns = list(self.config.class_columns)
        if self.elevation is not None:
            columns.extend(_ELEVATION_COLUMNS)
        return columns

    def metadata(self, years: list[int]) -> ResultMetadata:
        return ResultMetadata(
            crs=self.crs,
            resolution=self.reference.resolution,
            neighborhood_radius=self.radius,
            neighborhood_shape=self.config.neighborhood_shape,
            landcover_years=years,
            class_columns=list(self.config.class_columns),
        )


def _load_elevation(config: Config, crs: str) -> RasterLayer | None:
    if config.elevation_path is None:
        return None
    layer = read_raster(config.elevation_path)
    if not same_crs(layer.crs, crs):
        raise ConfigurationError(
            what="Elevation raster uses a different CRS than the landcover",
            cause=f"{layer.crs} vs {crs}",
            fix="Reproject the elevation raster to the landcover CRS",
        )
    return layer


def _prepare(config: Config, source: LandcoverSource) -> ExtractionContext:
    """Validate layers and derive run-wide settings.

    Raises:
        ConfigurationError: For missing years, mismatched grids or an
            invalid neighborhood.
    """
    router = YearRouter(source.available_years())
    infos = [source.describe(year) for year in router.available_years]
    validate_alignment(infos)
    reference = infos[-1]
    radius = neighborhood_radius(reference.resolution, config.neighborhood_cells)
    logger.info(
        "Landcover years %d-%d, neighborhood radius %.1f",
        router.available_years[0],
        router.latest_year,
        radius,
    )
    return ExtractionContext(
        config=config,
        source=source,
        router=router,
        reference=reference,
        radius=radius,
        elevation=_load_elevation(config, reference.crs),
    )


def _covariates(
    row_id: str,
    x: float,
    y: float,
    layer: RasterLayer,
    ctx: ExtractionContext,
) -> dict[str, float]:
    """Compute one row of covariates.

    Raises:
        DataGapError: If the neighborhood has no valid landcover cell.
    """
    region = neighborhood(x, y, ctx.radius, ctx.config.neighborhood_shape)
    vector = summarize(extract(region, layer), ctx.config.class_codes)
    if vector is None:
        raise DataGapError(row_id, layer.year)

    row: dict[str, float] = dict(
        zip(ctx.config.class_columns, vector.proportions.tolist())
    )
    if ctx.elevation is not None:
        median, sd = summarize_elevation(extract(region, ctx.elevation))
        row[_ELEVATION_COLUMNS[0]] = median
        row[_ELEVATION_COLUMNS[1]] = sd
    return row


def _extract_observations(
    observations: pd.DataFrame,
    ctx: ExtractionContext,
    cache: LayerCache,
    id_column: str = "locality_id",
) -> CovariateTable:
    points = observation_points(observations, ctx.crs, id_column=id_column)
    ctx.router.validate(p.year for p in points)

    by_layer: dict[int, list[ObservationPoint]] = defaultdict(list)
    for point in points:
        by_layer[ctx.router.route(point.year)].append(point)

    rows: list[dict[str, Any]] = []
    dropped: list[DataGapError] = []
    for lc_year in sorted(by_layer):
        batch = by_layer[lc_year]
        logger.info("Extracting %d location-years against landcover %d", len(batch), lc_year)
        with cache.hold(lc_year) as layer:
            for point in batch:
                try:
                    covs = _covariates(point.location_id, point.x, point.y, layer, ctx)
                except DataGapError as exc:
                    logger.warning("Dropping %s (%d): %s", point.location_id, point.year, exc.what)
                    dropped.append(exc)
                    continue
                rows.append(
                    {
                        id_column: point.location_id,
                        "year": point.year,
                        "landcover_year": lc_year,
                        **covs,
                    }
                )

    columns = [id_column, "year", "landcover_year", *ctx.covariate_columns]
    data = pd.DataFrame(rows, columns=columns)
    data = data.sort_values([id_column, "year"], kind="mergesort").reset_index(drop=True)

    return CovariateTable(
        data=data,
        metadata=ctx.metadata(sorted(by_layer)),
        notices=ctx.router.notices(data["year"].tolist()),
        dropped=dropped,
    )


def _extract_prediction(
    boundary: BaseGeometry,
    ctx: ExtractionContext,
    cache: LayerCache,
) -> PredictionSurface:
    year = ctx.router.latest_year
    grid = generate_grid(boundary, ctx.reference, ctx.radius, ctx.config.output_crs)

    rows: list[dict[str, Any]] = []
    dropped: list[DataGapError] = []
    with cache.hold(year) as layer:
        for cell in grid.cells:
            try:
                covs = _covariates(str(cell.cell_id), cell.x, cell.y, layer, ctx)
            except DataGapError as exc:
                logger.warning("Dropping grid cell %d: %s", cell.cell_id, exc.what)
                dropped.append(exc)
                continue
            rows.append(
                {
                    "cell_id": cell.cell_id,
                    "longitude": cell.longitude,
                    "latitude": cell.latitude,
                    "x": cell.x,
                    "y": cell.y,
                    "row": cell.row,
                    "col": cell.col,
                    "year": year,
                    **covs,
                }
            )

    columns = ["cell_id", "longitude", "latitude", "x", "y", "row", "col", "year"]
    data = pd.DataFrame(rows, columns=[*columns, *ctx.covariate_columns])

    return PredictionSurface(
        data=data,
        metadata=ctx.metadata([year]),
        dropped=dropped,
        template=grid.template,
    )
