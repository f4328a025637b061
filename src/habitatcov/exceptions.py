"""habitatcov exception hierarchy.

All exceptions follow a three-part message pattern: what failed,
likely cause, and suggested fix.
"""

from __future__ import annotations

from dataclasses import dataclass


class HabitatCovError(Exception):
    """Base exception for all habitatcov errors.

    Args:
        what: Description of what failed.
        cause: Likely cause of the failure.
        fix: Suggested action to resolve the issue.

    Example:
        >>> raise HabitatCovError(
        ...     what="Extraction failed",
        ...     cause="Unexpected internal state",
        ...     fix="Please report this issue",
        ... )
    """

    def __init__(
        self,
        what: str,
        cause: str = "",
        fix: str = "",
    ) -> None:
        self.what = what
        self.cause = cause
        self.fix = fix
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Build the multi-line error message from parts."""
        parts = [self.what]
        if self.cause:
            parts.append(f"Cause: {self.cause}")
        if self.fix:
            parts.append(f"Fix: {self.fix}")
        return "\n".join(parts)


class ConfigurationError(HabitatCovError):
    """Raised for invalid run configuration. Always fatal.

    Covers invalid neighborhood radii, mismatched coordinate systems
    between layers, missing landcover years and malformed input tables.

    Example:
        >>> raise ConfigurationError(
        ...     what="No landcover layer for 2009",
        ...     cause="Available years: 2014-2019",
        ...     fix="Download the missing years or drop older checklists",
        ... )
    """


class DataSourceError(HabitatCovError):
    """Raised when a raster or vector file cannot be opened or read."""


class IngestError(HabitatCovError):
    """Raised for malformed values in observation tables."""


class DataGapError(HabitatCovError):
    """Raised for a single row whose neighborhood has no valid cells.

    Non-fatal: the pipeline catches it, logs it and drops the row.

    Args:
        row_id: Location or grid cell identifier of the dropped row.
        year: Landcover year the row was evaluated against.
    """

    def __init__(self, row_id: str, year: int | None = None) -> None:
        self.row_id = row_id
        self.year = year
        when = f" in {year}" if year is not None else ""
        super().__init__(
            what=f"No valid landcover cells around {row_id}{when}",
            cause="Neighborhood lies outside the raster or is entirely nodata",
            fix="Row dropped from output; check the raster extent if unexpected",
        )


@dataclass(frozen=True)
class YearApproximationNotice:
    """Record of observation years mapped onto an earlier landcover year.

    Informational only. Kept on the result so downstream users can see
    which rows use a reused landcover layer.

    Args:
        observation_year: Year the observations were made.
        landcover_year: Landcover year actually used.
        n_rows: Number of output rows affected.
    """

    observation_year: int
    landcover_year: int
    n_rows: int

    def __str__(self) -> str:
        return (
            f"{self.n_rows} row(s) from {self.observation_year} use "
            f"landcover from {self.landcover_year}"
        )
