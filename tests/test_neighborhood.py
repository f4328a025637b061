"""Tests for neighborhood construction."""

from __future__ import annotations

import pytest

from habitatcov._types import Region
from habitatcov.exceptions import ConfigurationError
from habitatcov.neighborhood import neighborhood, neighborhood_radius


@pytest.mark.unit
class TestNeighborhoodRadius:
    """Radius is half of n cells with the cell size rounded up."""

    def test_modis_resolution(self) -> None:
        # ceil(463.3127) = 464 m; 5 * 464 / 2
        assert neighborhood_radius((463.3127, 463.3127), 5) == 1160.0

    def test_whole_resolution(self) -> None:
        assert neighborhood_radius((100.0, 100.0), 5) == 250.0

    def test_uses_larger_axis(self) -> None:
        assert neighborhood_radius((30.0, 40.0), 3) == 60.0

    @pytest.mark.parametrize("cells", [0, -1])
    def test_non_positive_rejected(self, cells: int) -> None:
        with pytest.raises(ConfigurationError, match="Invalid neighborhood radius"):
            neighborhood_radius((100.0, 100.0), cells)


@pytest.mark.unit
class TestNeighborhood:
    """neighborhood() builds a region centred on the point."""

    def test_square_bounds(self) -> None:
        region = neighborhood(1000.0, 2000.0, 250.0)
        assert isinstance(region, Region)
        assert region.shape == "square"
        assert region.bounds == (750.0, 1750.0, 1250.0, 2250.0)

    def test_side_is_twice_radius(self) -> None:
        minx, miny, maxx, maxy = neighborhood(0.0, 0.0, 1160.0).bounds
        assert maxx - minx == pytest.approx(2320.0)
        assert maxy - miny == pytest.approx(2320.0)

    def test_circle(self) -> None:
        region = neighborhood(0.0, 0.0, 100.0, shape="circle")
        assert region.shape == "circle"
        assert region.radius == 100.0

    @pytest.mark.parametrize("radius", [0.0, -5.0])
    def test_degenerate_radius_rejected(self, radius: float) -> None:
        with pytest.raises(ConfigurationError):
            neighborhood(0.0, 0.0, radius)

    def test_unknown_shape_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown neighborhood shape"):
            neighborhood(0.0, 0.0, 100.0, shape="hexagon")  # type: ignore[arg-type]
