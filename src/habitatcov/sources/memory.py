"""In-memory landcover source for layers built programmatically."""

from __future__ import annotations

from collections.abc import Iterable

from habitatcov._types import RasterLayer
from habitatcov.exceptions import ConfigurationError
from habitatcov.sources.base import LandcoverSource, LayerInfo


class MemoryLandcoverSource(LandcoverSource):
    """Serve annual layers that are already held in memory.

    Args:
        layers: Layers with ``year`` set; one per year.

    Raises:
        ConfigurationError: If a layer has no year or a year repeats.
    """

    def __init__(self, layers: Iterable[RasterLayer]) -> None:
        self._layers: dict[int, RasterLayer] = {}
        for layer in layers:
            if layer.year is None:
                raise ConfigurationError(
                    what="Landcover layer without a year",
                    fix="Set RasterLayer.year on every annual layer",
                )
            if layer.year in self._layers:
                raise ConfigurationError(
                    what=f"Duplicate landcover layer for {layer.year}",
                    fix="Provide one layer per year",
                )
            self._layers[layer.year] = layer

    def available_years(self) -> list[int]:
        return sorted(self._layers)

    def _get(self, year: int) -> RasterLayer:
        try:
            return self._layers[year]
        except KeyError:
            raise ConfigurationError(
                what=f"No landcover layer for {year}",
                cause=f"Available years: {self.available_years()}",
            ) from None

    def describe(self, year: int) -> LayerInfo:
        return LayerInfo.from_layer(self._get(year))

    def load(self, year: int) -> RasterLayer:
        return self._get(year)
