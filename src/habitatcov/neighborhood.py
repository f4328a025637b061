"""Neighborhood construction around projected points.

Pure geometry: no raster access and no reprojection. Points must
already be in the raster CRS.
"""

from __future__ import annotations

import math

from habitatcov._types import Region, Shape
from habitatcov.exceptions import ConfigurationError

_SHAPES: frozenset[str] = frozenset({"square", "circle"})


def neighborhood_radius(resolution: tuple[float, float], cells: int) -> float:
    """Compute the neighborhood half-width for a run.

    The neighborhood is ``cells`` landcover cells wide, with the cell size
    rounded up to a whole CRS unit so the width is stable across layers
    whose resolution differs by floating-point noise.

    Args:
        resolution: Cell size ``(x, y)`` of the landcover layers.
        cells: Neighborhood width in cells.

    Returns:
        Half-width in CRS units.

    Raises:
        ConfigurationError: If the resulting radius is not positive.

    Example:
        >>> neighborhood_radius((463.3127, 463.3127), 5)
        1160.0
    """
    radius = cells * math.ceil(max(resolution)) / 2
    if not radius > 0:
        raise ConfigurationError(
            what=f"Invalid neighborhood radius: {radius}",
            cause=f"neighborhood_cells={cells}, resolution={resolution}",
            fix="Use a positive neighborhood_cells and a projected raster",
        )
    return float(radius)


def neighborhood(x: float, y: float, radius: float, shape: Shape = "square") -> Region:
    """Build the region of interest centred on a projected point.

    Args:
        x: Easting in the raster CRS.
        y: Northing in the raster CRS.
        radius: Half-width (square) or radius (circle) in CRS units.
        shape: ``"square"`` (side ``2 * radius``) or ``"circle"``.

    Returns:
        ``Region`` centred on ``(x, y)``.

    Raises:
        ConfigurationError: If *radius* is not positive or *shape* is unknown.
    """
    if not radius > 0:
        raise ConfigurationError(
            what=f"Invalid neighborhood radius: {radius}",
            cause="A zero or negative radius selects no cells",
            fix="Set neighborhood_cells to a positive value",
        )
    if shape not in _SHAPES:
        raise ConfigurationError(
            what=f"Unknown neighborhood shape: {shape!r}",
            cause=f"Valid shapes are: {', '.join(sorted(_SHAPES))}",
        )
    return Region(x=float(x), y=float(y), radius=float(radius), shape=shape)
