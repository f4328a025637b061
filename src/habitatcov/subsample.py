"""Spatiotemporal subsampling of checklists.

Checklists cluster around roads, towns and popular sites. Binning them
into equal-area cells and keeping one checklist per cell, year and week
reduces that spatial bias. Detections and non-detections are sampled
separately so rare detections are not thinned away by common absences.
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from habitatcov.config import Config
from habitatcov.exceptions import ConfigurationError
from habitatcov.location import observation_years, project, validate_coordinates

logger = logging.getLogger(__name__)

_WEEKS_PER_YEAR = 52


def assign_cells(df: pd.DataFrame, config: Config) -> pd.DataFrame:
    """Add subsampling cell and week columns.

    Adds ``cell_x``/``cell_y`` (integer cell indices in the equal-area
    CRS) and ``week`` (1-52, days past week 52 fold into week 52).

    Raises:
        ConfigurationError: If coordinates or dates are missing or invalid.
    """
    validate_coordinates(df)
    if "observation_date" not in df.columns:
        raise ConfigurationError(
            what="Subsampling needs an observation_date column",
            fix="Add observation_date (YYYY-MM-DD) to the checklist table",
        )

    out = df.copy()
    xs, ys = project(out["longitude"], out["latitude"], dst_crs=config.equal_area_crs)
    cell_size = config.subsample_cell_km * 1000.0
    out["cell_x"] = np.floor(np.asarray(xs) / cell_size).astype(np.int64)
    out["cell_y"] = np.floor(np.asarray(ys) / cell_size).astype(np.int64)

    day = pd.to_datetime(out["observation_date"], errors="coerce").dt.dayofyear
    if day.isna().any():
        raise ConfigurationError(
            what=f"Invalid observation_date in {int(day.isna().sum())} row(s)",
            fix="Fix or drop rows without a valid observation date",
        )
    out["week"] = np.minimum((day - 1) // 7 + 1, _WEEKS_PER_YEAR).astype(int)
    out["year"] = observation_years(out)
    return out


def subsample(df: pd.DataFrame, config: Config) -> pd.DataFrame:
    """Keep one randomly chosen checklist per cell, year, week and outcome.

    Args:
        df: Zero-filled checklists with ``latitude``, ``longitude``,
            ``observation_date`` and ``species_observed``.
        config: Provides cell size, equal-area CRS and random seed.

    Returns:
        Subsampled checklists in their original order, without the helper
        columns.

    Raises:
        ConfigurationError: For missing columns or invalid coordinates.
    """
    if "species_observed" not in df.columns:
        raise ConfigurationError(
            what="Subsampling needs a species_observed column",
            fix="Run zero_fill() before subsampling",
        )
    if df.empty:
        return df.copy()

    df = df.reset_index(drop=True)
    binned = assign_cells(df, config)
    keys = ["species_observed", "year", "week", "cell_x", "cell_y"]
    sampled = binned.groupby(keys, sort=True).sample(n=1, random_state=config.random_seed)
    result = df.loc[sampled.index.sort_values()].reset_index(drop=True)
    logger.info("Subsampled %d checklists down to %d", len(df), len(result))
    return result
