"""habitatcov: habitat covariates for species distribution models.

Computes the proportion of each landcover class around bird observation
locations and over a regular prediction grid, from annual landcover
rasters.

Example:
    >>> import habitatcov as hc
    >>>
    >>> cfg = hc.Config(landcover_dir="data/modis", neighborhood_cells=5)
    >>> table = hc.extract_observation_covariates("ebd_zf.csv", cfg)
    >>> table.to_csv("output/pland_location-year.csv")
    >>>
    >>> surface = hc.extract_prediction_covariates("data/bcr.gpkg", cfg)
    >>> surface.to_csv("output/pland_prediction-surface.csv")
"""

from habitatcov.__about__ import __version__
from habitatcov._types import (
    CompositionVector,
    GridCell,
    ObservationPoint,
    RasterLayer,
    Region,
)
from habitatcov.analysis import summarize, summarize_elevation
from habitatcov.api import extract_observation_covariates, extract_prediction_covariates
from habitatcov.cache import LayerCache
from habitatcov.config import Config, load_config
from habitatcov.exceptions import (
    ConfigurationError,
    DataGapError,
    DataSourceError,
    HabitatCovError,
    IngestError,
    YearApproximationNotice,
)
from habitatcov.extract import extract
from habitatcov.grid import generate_grid, load_boundary
from habitatcov.ingest import filter_effort, parse_count, prepare_effort, zero_fill
from habitatcov.neighborhood import neighborhood, neighborhood_radius
from habitatcov.results import CovariateTable, PredictionSurface, ResultMetadata
from habitatcov.sources import (
    GeoTiffLandcoverSource,
    LandcoverSource,
    MemoryLandcoverSource,
)
from habitatcov.subsample import subsample
from habitatcov.years import YearRouter

__all__ = [
    # Version
    "__version__",
    # Extraction API
    "extract_observation_covariates",
    "extract_prediction_covariates",
    # Pipeline stages
    "extract",
    "generate_grid",
    "load_boundary",
    "neighborhood",
    "neighborhood_radius",
    "summarize",
    "summarize_elevation",
    "LayerCache",
    "YearRouter",
    # Landcover sources
    "GeoTiffLandcoverSource",
    "LandcoverSource",
    "MemoryLandcoverSource",
    # Ingestion
    "filter_effort",
    "parse_count",
    "prepare_effort",
    "subsample",
    "zero_fill",
    # Configuration
    "Config",
    "load_config",
    # Types and results
    "CompositionVector",
    "CovariateTable",
    "GridCell",
    "ObservationPoint",
    "PredictionSurface",
    "RasterLayer",
    "Region",
    "ResultMetadata",
    # Exceptions
    "ConfigurationError",
    "DataGapError",
    "DataSourceError",
    "HabitatCovError",
    "IngestError",
    "YearApproximationNotice",
]
