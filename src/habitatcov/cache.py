"""Per-run, per-year cache of landcover layers.

Each year is read from its source once and reused for every point routed
to it. The cache holds at most ``max_layers`` years; when a new year is
requested at capacity, the least recently used year is released.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from habitatcov._types import RasterLayer
from habitatcov.exceptions import ConfigurationError
from habitatcov.sources.base import LandcoverSource

logger = logging.getLogger(__name__)


@dataclass
class CacheStatus:
    """Summary statistics for the layer cache.

    Args:
        loaded_years: Years currently held in memory, least recent first.
        loads: Number of reads from the source.
        hits: Number of requests served from memory.
        total_bytes: Memory held by loaded layer arrays.

    Example:
        >>> CacheStatus(loaded_years=[], loads=0, hits=0, total_bytes=0).loads
        0
    """

    __slots__ = ("loaded_years", "loads", "hits", "total_bytes")

    loaded_years: list[int]
    loads: int
    hits: int
    total_bytes: int


class LayerCache:
    """Load-once, read-many holder of annual landcover layers.

    Args:
        source: Where layers are read from.
        max_layers: Maximum number of years held at once.

    Raises:
        ConfigurationError: If *max_layers* is not positive.

    Example:
        >>> cache = LayerCache(source)  # doctest: +SKIP
        >>> with cache.hold(2019) as layer:  # doctest: +SKIP
        ...     layer.year
        2019
    """

    def __init__(self, source: LandcoverSource, max_layers: int = 1) -> None:
        if max_layers <= 0:
            raise ConfigurationError(
                what=f"Invalid layer cache size: {max_layers}",
                fix="Use max_layers >= 1",
            )
        self._source = source
        self._max_layers = max_layers
        self._layers: OrderedDict[int, RasterLayer] = OrderedDict()
        self._loads = 0
        self._hits = 0

    def get(self, year: int) -> RasterLayer:
        """Return the layer for *year*, reading it on first use."""
        if year in self._layers:
            self._layers.move_to_end(year)
            self._hits += 1
            logger.debug("Layer cache hit for %d", year)
            return self._layers[year]

        while len(self._layers) >= self._max_layers:
            evicted, _ = self._layers.popitem(last=False)
            logger.debug("Evicted landcover %d from layer cache", evicted)

        logger.debug("Layer cache miss for %d, reading from source", year)
        layer = self._source.load(year)
        self._loads += 1
        self._layers[year] = layer
        return layer

    def release(self, year: int | None = None) -> None:
        """Drop *year* from memory, or every year when *year* is ``None``."""
        if year is None:
            self._layers.clear()
        else:
            self._layers.pop(year, None)

    @contextmanager
    def hold(self, year: int) -> Iterator[RasterLayer]:
        """Yield the layer for *year* and release it on exit."""
        layer = self.get(year)
        try:
            yield layer
        finally:
            self.release(year)

    def status(self) -> CacheStatus:
        return CacheStatus(
            loaded_years=list(self._layers),
            loads=self._loads,
            hits=self._hits,
            total_bytes=sum(int(layer.data.nbytes) for layer in self._layers.values()),
        )
