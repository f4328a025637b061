"""Run configuration for habitat covariate extraction.

A ``Config`` is an immutable snapshot passed explicitly into every
pipeline stage. There is no module-level default: callers build one
directly or load it from a JSON file with ``load_config()``.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from habitatcov.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# MODIS MCD12Q1 University of Maryland (UMD) classification.
UMD_CLASSES: dict[int, str] = {
    0: "water",
    1: "evergreen_needleleaf",
    2: "evergreen_broadleaf",
    3: "deciduous_needleleaf",
    4: "deciduous_broadleaf",
    5: "mixed_forest",
    6: "closed_shrubland",
    7: "open_shrubland",
    8: "woody_savanna",
    9: "savanna",
    10: "grassland",
    11: "wetland",
    12: "cropland",
    13: "urban",
    14: "mosaic",
    15: "barren",
}


class Config(BaseModel):
    """Immutable run configuration.

    Args:
        landcover_dir: Directory holding one landcover GeoTIFF per year.
        landcover_pattern: Filename pattern with a ``{year}`` placeholder.
        neighborhood_cells: Neighborhood width in landcover cells.
        neighborhood_shape: ``"square"`` or ``"circle"``.
        landcover_classes: Mapping of class code to short class name.
        elevation_path: Optional continuous elevation raster.
        output_crs: CRS for latitude/longitude columns in outputs.
        equal_area_crs: Equal-area CRS used to bin points when subsampling.
        subsample_cell_km: Width of subsampling cells in kilometres.
        random_seed: Seed for subsampling.
        min_year: Drop checklists older than this year.
        max_duration_minutes: Maximum checklist duration.
        max_distance_km: Maximum distance travelled.
        max_observers: Maximum party size.
        protocols: Accepted protocol types.

    Example:
        >>> cfg = Config(landcover_dir="~/data/modis", neighborhood_cells=5)
        >>> cfg.neighborhood_shape
        'square'
    """

    model_config = ConfigDict(frozen=True, validate_default=True, extra="forbid")

    landcover_dir: Path = Path("data/landcover")
    landcover_pattern: str = "landcover_{year}.tif"
    neighborhood_cells: int = 5
    neighborhood_shape: Literal["square", "circle"] = "square"
    landcover_classes: dict[int, str] = Field(default_factory=lambda: dict(UMD_CLASSES))
    elevation_path: Path | None = None
    output_crs: str = "EPSG:4326"
    equal_area_crs: str = "EPSG:6933"
    subsample_cell_km: float = 3.0
    random_seed: int = 1
    min_year: int | None = None
    max_duration_minutes: float = 300.0
    max_distance_km: float = 5.0
    max_observers: int = 10
    protocols: tuple[str, ...] = ("Stationary", "Traveling")

    @field_validator("landcover_dir", mode="before")
    @classmethod
    def _expand_landcover_dir(cls, v: str | Path) -> Path:
        return Path(v).expanduser()

    @field_validator("elevation_path", mode="before")
    @classmethod
    def _expand_elevation_path(cls, v: str | Path | None) -> Path | None:
        if v is None:
            return None
        return Path(v).expanduser()

    @field_validator("landcover_pattern")
    @classmethod
    def _validate_pattern(cls, v: str) -> str:
        if "{year}" not in v:
            msg = "landcover_pattern must contain a '{year}' placeholder"
            raise ValueError(msg)
        return v

    @field_validator("neighborhood_cells", "max_observers")
    @classmethod
    def _validate_positive_int(cls, v: int) -> int:
        if v <= 0:
            msg = "value must be greater than 0"
            raise ValueError(msg)
        return v

    @field_validator("subsample_cell_km", "max_duration_minutes", "max_distance_km")
    @classmethod
    def _validate_positive_float(cls, v: float) -> float:
        if v <= 0:
            msg = "value must be greater than 0"
            raise ValueError(msg)
        return v

    @field_validator("landcover_classes")
    @classmethod
    def _validate_classes(cls, v: dict[int, str]) -> dict[int, str]:
        if not v:
            msg = "landcover_classes must define at least one class"
            raise ValueError(msg)
        if any(code < 0 for code in v):
            msg = "landcover_classes codes must be non-negative"
            raise ValueError(msg)
        return dict(sorted(v.items()))

    @field_validator("output_crs", "equal_area_crs")
    @classmethod
    def _validate_crs(cls, v: str) -> str:
        if not re.match(r"^EPSG:\d+$", v):
            msg = "CRS must match 'EPSG:<number>' format"
            raise ValueError(msg)
        return v

    @property
    def class_codes(self) -> tuple[int, ...]:
        """Landcover class codes in ascending order."""
        return tuple(self.landcover_classes)

    @property
    def class_columns(self) -> list[str]:
        """Output column names, one per class, in class code order."""
        return [
            f"pland_{code:02d}_{name}" for code, name in self.landcover_classes.items()
        ]

    def landcover_path(self, year: int) -> Path:
        """Return the expected landcover file path for *year*."""
        return self.landcover_dir / self.landcover_pattern.format(year=year)


def load_config(path: str | Path) -> Config:
    """Load a ``Config`` from a JSON file.

    Args:
        path: Path to a JSON object whose keys are ``Config`` fields.

    Returns:
        Validated ``Config``.

    Raises:
        ConfigurationError: If the file is missing, is not a JSON object,
            or fails validation.
    """
    resolved = Path(path).expanduser()
    try:
        text = resolved.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigurationError(
            what="Cannot read configuration file",
            cause=f"File not found: {resolved}",
            fix="Check the --config path",
        ) from None

    try:
        parsed: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(
            what="Invalid configuration file format",
            cause=f"JSON parse error in {resolved}: {exc}",
            fix="Ensure the file contains a valid JSON object",
        ) from None

    if not isinstance(parsed, dict):
        raise ConfigurationError(
            what="Invalid configuration file format",
            cause=f"Expected a JSON object in {resolved}, got {type(parsed).__name__}",
            fix="Wrap the settings in a JSON object",
        )

    try:
        config = Config(**parsed)
    except ValidationError as exc:
        raise ConfigurationError(
            what="Invalid configuration values",
            cause=str(exc),
            fix=f"Correct the listed fields in {resolved}",
        ) from None

    logger.debug("Loaded configuration from %s", resolved)
    return config
