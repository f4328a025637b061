"""Observation locations and coordinate handling.

Validates WGS84 coordinates read from observation tables, derives the
distinct (location, year) pairs that covariates are computed for, and
reprojects them into the landcover CRS.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import pandas as pd
from rasterio.warp import transform as warp_transform

from habitatcov._types import ObservationPoint
from habitatcov.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_MIN_LAT = -90.0
_MAX_LAT = 90.0
_MIN_LON = -180.0
_MAX_LON = 180.0
_WGS84 = "EPSG:4326"


def project(
    xs: Sequence[float],
    ys: Sequence[float],
    dst_crs: str,
    src_crs: str = _WGS84,
) -> tuple[list[float], list[float]]:
    """Reproject coordinate sequences between two CRSs.

    Args:
        xs: Eastings or longitudes in *src_crs*.
        ys: Northings or latitudes in *src_crs*.
        dst_crs: Target CRS.
        src_crs: Source CRS, WGS84 by default.

    Returns:
        ``(xs, ys)`` in *dst_crs*.
    """
    xs = [float(v) for v in xs]
    ys = [float(v) for v in ys]
    if not xs:
        return [], []
    out_x, out_y = warp_transform(src_crs, dst_crs, xs, ys)
    return list(out_x), list(out_y)


def validate_coordinates(df: pd.DataFrame) -> None:
    """Check latitude/longitude columns lie within WGS84 bounds.

    Raises:
        ConfigurationError: If any coordinate is missing or out of range.
    """
    lat = pd.to_numeric(df["latitude"], errors="coerce")
    lon = pd.to_numeric(df["longitude"], errors="coerce")
    bad_lat = lat.isna() | (lat < _MIN_LAT) | (lat > _MAX_LAT)
    bad_lon = lon.isna() | (lon < _MIN_LON) | (lon > _MAX_LON)
    if bad_lat.any():
        raise ConfigurationError(
            what=f"Invalid latitude in {int(bad_lat.sum())} row(s)",
            cause=f"Latitude must be between {_MIN_LAT} and {_MAX_LAT}",
            fix="Provide valid WGS84 latitude values",
        )
    if bad_lon.any():
        raise ConfigurationError(
            what=f"Invalid longitude in {int(bad_lon.sum())} row(s)",
            cause=f"Longitude must be between {_MIN_LON} and {_MAX_LON}",
            fix="Provide valid WGS84 longitude values",
        )


def _require_columns(df: pd.DataFrame, columns: Sequence[str]) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ConfigurationError(
            what="Observation table is missing required columns",
            cause=f"Missing: {', '.join(missing)}",
            fix=f"Provide columns: {', '.join(columns)}",
        )


def observation_years(df: pd.DataFrame) -> pd.Series:
    """Return the observation year of every row.

    Uses a ``year`` column when present, otherwise the year of
    ``observation_date``.

    Raises:
        ConfigurationError: If neither column is present or a date is invalid.
    """
    if "year" in df.columns:
        years = pd.to_numeric(df["year"], errors="coerce")
    elif "observation_date" in df.columns:
        years = pd.to_datetime(df["observation_date"], errors="coerce").dt.year
    else:
        raise ConfigurationError(
            what="Observation table has no year information",
            cause="Neither 'year' nor 'observation_date' column is present",
            fix="Add an observation_date (YYYY-MM-DD) or year column",
        )
    if years.isna().any():
        raise ConfigurationError(
            what=f"Missing or invalid observation year in {int(years.isna().sum())} row(s)",
            fix="Fix or drop rows without a valid observation date",
        )
    return years.astype(int)


def observation_points(
    df: pd.DataFrame,
    crs: str,
    id_column: str = "locality_id",
) -> list[ObservationPoint]:
    """Build the distinct (location, year) points of an observation table.

    Duplicate (location, year) rows collapse into one point; the first
    row's coordinates are used.

    Args:
        df: Observation table with *id_column*, ``latitude``, ``longitude``
            and ``year`` or ``observation_date``.
        crs: Landcover CRS to project into.
        id_column: Location identifier column.

    Returns:
        Points sorted by location id then year.

    Raises:
        ConfigurationError: For missing columns or invalid coordinates.
    """
    _require_columns(df, [id_column, "latitude", "longitude"])
    validate_coordinates(df)

    distinct = (
        pd.DataFrame(
            {
                "location_id": df[id_column].astype(str),
                "year": observation_years(df),
                "latitude": df["latitude"].astype(float),
                "longitude": df["longitude"].astype(float),
            }
        )
        .drop_duplicates(subset=["location_id", "year"], keep="first")
        .sort_values(["location_id", "year"], kind="mergesort")
        .reset_index(drop=True)
    )
    logger.debug(
        "Collapsed %d observation rows into %d location-years", len(df), len(distinct)
    )

    xs, ys = project(distinct["longitude"], distinct["latitude"], dst_crs=crs)
    return [
        ObservationPoint(
            location_id=row.location_id,
            year=int(row.year),
            x=float(x),
            y=float(y),
            latitude=float(row.latitude),
            longitude=float(row.longitude),
        )
        for row, x, y in zip(distinct.itertuples(index=False), xs, ys)
    ]

