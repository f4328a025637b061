"""Ingestion of checklist and observation tables.

Everything here runs before covariate extraction: reading the extracted
checklist/observation tables, resolving observation counts into explicit
values, zero-filling non-detections on complete checklists, deriving
effort variables and applying effort filters.

Counts arrive as integers or the ``"X"`` marker (species present, not
counted). They are parsed once into ``Counted`` / ``PresentUncounted``
and resolved to a nullable integer column, so nothing downstream ever
sees the marker.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from habitatcov.config import Config
from habitatcov.exceptions import ConfigurationError, DataSourceError, IngestError

logger = logging.getLogger(__name__)

_UNCOUNTED_MARKER = "X"
_TRUE_STRINGS: frozenset[str] = frozenset({"1", "true", "t", "yes"})
_TAB_SUFFIXES: frozenset[str] = frozenset({".txt", ".tsv"})


@dataclass(frozen=True)
class Counted:
    """A species count, including explicit zeros from zero-filling."""

    n: int

    def resolve(self) -> int | None:
        return self.n

    @property
    def detected(self) -> bool:
        return self.n > 0


@dataclass(frozen=True)
class PresentUncounted:
    """Species reported present without a count (the ``"X"`` marker)."""

    def resolve(self) -> int | None:
        return None

    @property
    def detected(self) -> bool:
        return True


SpeciesCount = Counted | PresentUncounted


def parse_count(value: Any) -> SpeciesCount:
    """Parse a raw observation count.

    Args:
        value: Integer, integral float, digit string, or ``"X"``.

    Returns:
        ``Counted`` or ``PresentUncounted``.

    Raises:
        IngestError: For negative, fractional, missing or non-numeric values.

    Example:
        >>> parse_count("X")
        PresentUncounted()
        >>> parse_count("12")
        Counted(n=12)
    """
    if isinstance(value, (bool, np.bool_)):
        raise IngestError(what=f"Invalid observation count: {value!r}")
    if isinstance(value, (int, np.integer)):
        n = int(value)
    elif isinstance(value, (float, np.floating)):
        if math.isnan(value) or not float(value).is_integer():
            raise IngestError(
                what=f"Invalid observation count: {value!r}",
                cause="Counts must be whole numbers or 'X'",
            )
        n = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if text.upper() == _UNCOUNTED_MARKER:
            return PresentUncounted()
        if not text.isdigit():
            raise IngestError(
                what=f"Invalid observation count: {value!r}",
                cause="Counts must be whole numbers or 'X'",
                fix="Check the observation_count column of the source file",
            )
        n = int(text)
    else:
        raise IngestError(what=f"Invalid observation count: {value!r}")

    if n < 0:
        raise IngestError(what=f"Negative observation count: {n}")
    return Counted(n)


def read_table(path: str | Path, required_columns: Sequence[str] = ()) -> pd.DataFrame:
    """Read a checklist or observation table.

    Tab-separated for ``.txt``/``.tsv`` files, comma-separated otherwise.

    Raises:
        DataSourceError: If the file cannot be read.
        ConfigurationError: If a required column is missing.
    """
    path = Path(path)
    sep = "\t" if path.suffix.lower() in _TAB_SUFFIXES else ","
    try:
        df = pd.read_csv(path, sep=sep)
    except FileNotFoundError:
        raise DataSourceError(
            what="Cannot read table",
            cause=f"File not found: {path}",
            fix="Check the input path",
        ) from None
    except pd.errors.EmptyDataError:
        raise DataSourceError(
            what="Cannot read table",
            cause=f"File is empty: {path}",
        ) from None
    except OSError as exc:
        raise DataSourceError(
            what="Cannot read table",
            cause=f"{path}: {exc.strerror or exc}",
            fix="Pass the path of a readable table file",
        ) from None
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise DataSourceError(
            what=f"Cannot parse table {path}",
            cause=str(exc),
        ) from None

    missing = [c for c in required_columns if c not in df.columns]
    if missing:
        raise ConfigurationError(
            what=f"Table {path.name} is missing required columns",
            cause=f"Missing: {', '.join(missing)}",
        )
    logger.debug("Read %d rows from %s", len(df), path)
    return df


def _truthy(series: pd.Series) -> pd.Series:
    if series.dtype == bool:
        return series
    return series.astype(str).str.strip().str.lower().isin(_TRUE_STRINGS)


def zero_fill(
    checklists: pd.DataFrame,
    observations: pd.DataFrame,
    species: str | None = None,
) -> pd.DataFrame:
    """Combine checklists and observations into detection/non-detection data.

    Only complete checklists (``all_species_reported``) are kept, because
    only they imply that an unreported species was not detected.

    Args:
        checklists: One row per checklist with ``checklist_id`` and
            ``all_species_reported``.
        observations: Observations with ``checklist_id`` and
            ``observation_count``; optionally ``scientific_name``.
        species: Restrict observations to this scientific name.

    Returns:
        One row per complete checklist with nullable integer
        ``observation_count`` (``<NA>`` for uncounted) and boolean
        ``species_observed``.

    Raises:
        ConfigurationError: For missing columns.
        IngestError: For invalid counts or several observations of the
            species on one checklist.
    """
    for name, df, cols in (
        ("checklists", checklists, ("checklist_id", "all_species_reported")),
        ("observations", observations, ("checklist_id", "observation_count")),
    ):
        missing = [c for c in cols if c not in df.columns]
        if missing:
            raise ConfigurationError(
                what=f"The {name} table is missing required columns",
                cause=f"Missing: {', '.join(missing)}",
            )

    obs = observations
    if species is not None and "scientific_name" in obs.columns:
        obs = obs[obs["scientific_name"] == species]
    duplicated = obs["checklist_id"].duplicated()
    if duplicated.any():
        raise IngestError(
            what=f"{int(duplicated.sum())} checklist(s) have several observations",
            cause="Observations cover more than one species",
            fix="Pass species= to select a single species",
        )

    complete = checklists[_truthy(checklists["all_species_reported"])]
    merged = complete.merge(
        obs[["checklist_id", "observation_count"]],
        on="checklist_id",
        how="left",
    )

    counts: list[SpeciesCount] = [
        Counted(0) if pd.isna(raw) else parse_count(raw)
        for raw in merged["observation_count"]
    ]
    merged["observation_count"] = pd.array([c.resolve() for c in counts], dtype="Int64")
    merged["species_observed"] = [c.detected for c in counts]
    logger.info(
        "Zero-filled %d complete checklists (%d detections)",
        len(merged),
        int(merged["species_observed"].sum()),
    )
    return merged.reset_index(drop=True)


def prepare_effort(df: pd.DataFrame) -> pd.DataFrame:
    """Derive effort and timing variables.

    Adds ``effort_hours``, ``hours_of_day`` (decimal start time), ``year``
    and ``day_of_year``; sets ``effort_distance_km`` to 0 for stationary
    counts.
    """
    out = df.copy()
    if "protocol_type" in out.columns and "effort_distance_km" in out.columns:
        stationary = out["protocol_type"] == "Stationary"
        out.loc[stationary, "effort_distance_km"] = 0.0
    if "duration_minutes" in out.columns:
        out["effort_hours"] = out["duration_minutes"] / 60.0
    if "time_observations_started" in out.columns:
        started = pd.to_timedelta(out["time_observations_started"], errors="coerce")
        out["hours_of_day"] = started.dt.total_seconds() / 3600.0
    if "observation_date" in out.columns:
        dates = pd.to_datetime(out["observation_date"], errors="coerce")
        out["year"] = dates.dt.year
        out["day_of_year"] = dates.dt.dayofyear
    return out


def filter_effort(df: pd.DataFrame, config: Config) -> pd.DataFrame:
    """Keep checklists within the configured effort limits.

    Applies protocol, duration, distance, party size and minimum year
    limits for the columns that are present. Rows with a missing value
    in a filtered column are removed.
    """
    keep = pd.Series(True, index=df.index)
    if "protocol_type" in df.columns:
        keep &= df["protocol_type"].isin(config.protocols)
    if "duration_minutes" in df.columns:
        keep &= df["duration_minutes"] <= config.max_duration_minutes
    if "effort_distance_km" in df.columns:
        keep &= df["effort_distance_km"].fillna(np.inf) <= config.max_distance_km
    if "number_observers" in df.columns:
        keep &= df["number_observers"] <= config.max_observers
    if config.min_year is not None and "year" in df.columns:
        keep &= df["year"] >= config.min_year

    removed = int((~keep).sum())
    if removed:
        logger.info("Effort filters removed %d of %d checklists", removed, len(df))
    return df[keep].reset_index(drop=True)
