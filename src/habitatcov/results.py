"""Result objects for covariate extraction."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import pandas as pd
from pydantic import BaseModel, Field

from habitatcov.exceptions import DataGapError, YearApproximationNotice
from habitatcov.grid import GridTemplate

logger = logging.getLogger(__name__)


class ResultMetadata(BaseModel):
    """Metadata describing how a covariate table was produced.

    Uses Pydantic so it can be dumped next to the CSV output.

    Attributes:
        crs: CRS of the landcover layers.
        resolution: Landcover cell size ``(x, y)`` in CRS units.
        neighborhood_radius: Neighborhood half-width in CRS units.
        neighborhood_shape: ``"square"`` or ``"circle"``.
        landcover_years: Landcover years used.
        class_columns: Proportion column names in class code order.

    Example:
        >>> meta = ResultMetadata(crs="EPSG:32618", neighborhood_radius=1160.0)
        >>> meta.neighborhood_shape
        'square'
    """

    crs: str = ""
    resolution: tuple[float, float] | None = None
    neighborhood_radius: float = 0.0
    neighborhood_shape: str = "square"
    landcover_years: list[int] = Field(default_factory=list)
    class_columns: list[str] = Field(default_factory=list)


@dataclass
class CovariateTable:
    """Per-(location, year) habitat covariates.

    Attributes:
        data: One row per output unit with identifier columns followed by
            one proportion column per landcover class.
        metadata: Extraction settings.
        notices: Observation years that reused an earlier landcover year.
        dropped: Rows dropped because their neighborhood had no valid cells.

    Example:
        >>> table = CovariateTable(data=pd.DataFrame())
        >>> len(table.dropped)
        0
    """

    data: pd.DataFrame
    metadata: ResultMetadata = field(default_factory=ResultMetadata)
    notices: list[YearApproximationNotice] = field(default_factory=list)
    dropped: list[DataGapError] = field(default_factory=list)

    def __repr__(self) -> str:
        cls_name = type(self).__name__
        parts = [f"rows={len(self.data)}", f"classes={len(self.metadata.class_columns)}"]
        if self.dropped:
            parts.append(f"dropped={len(self.dropped)}")
        if self.notices:
            parts.append(f"notices={len(self.notices)}")
        return f"{cls_name}({', '.join(parts)})"

    def to_dataframe(self) -> pd.DataFrame:
        """Return a copy of the covariate table."""
        return self.data.copy()

    def to_csv(self, path: str | Path) -> Path:
        """Write the table as CSV.

        Args:
            path: Output file path; parent directories are created.

        Returns:
            Path to the written file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.data.to_csv(path, index=False)
        logger.info("Wrote %d rows to %s", len(self.data), path)
        return path


@dataclass(repr=False)
class PredictionSurface(CovariateTable):
    """Covariates over the prediction grid for one reference year.

    Attributes:
        template: Grid geometry used by ``to_geotiff()``.
    """

    template: GridTemplate | None = None

    def to_array(self, column: str) -> np.ndarray:
        """Arrange one column into the grid template as a 2-D array.

        Cells without a row (outside the study region or dropped) are NaN.

        Raises:
            ValueError: If there is no template or *column* is unknown.
        """
        if self.template is None:
            msg = "PredictionSurface has no grid template"
            raise ValueError(msg)
        if column not in self.data.columns:
            msg = f"Unknown column: {column!r}"
            raise ValueError(msg)

        out = np.full((self.template.height, self.template.width), np.nan, dtype=np.float32)
        rows = self.data["row"].to_numpy(dtype=int)
        cols = self.data["col"].to_numpy(dtype=int)
        out[rows, cols] = self.data[column].to_numpy(dtype=np.float32)
        return out

    def to_geotiff(self, column: str, path: str | Path) -> Path:
        """Write one covariate column as a single-band GeoTIFF.

        Args:
            column: Column to rasterize (e.g. ``"pland_04_deciduous_broadleaf"``).
            path: Output file path.

        Returns:
            Path to the written file.

        Raises:
            ValueError: If there is no template or *column* is unknown.
        """
        import rasterio

        values = self.to_array(column)

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with rasterio.open(
            path,
            "w",
            driver="GTiff",
            height=self.template.height,
            width=self.template.width,
            count=1,
            dtype="float32",
            crs=self.template.crs,
            transform=self.template.transform,
            nodata=np.nan,
        ) as dst:
            dst.write(values, 1)
        return path
