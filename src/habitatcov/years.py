"""Routing of observation years onto available landcover years.

The landcover product lags behind the observations, so observations made
after the last available year reuse the most recent layer. The mapping is
reported through ``YearApproximationNotice`` records and kept in the
output as a separate ``landcover_year`` column.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable

from habitatcov.exceptions import ConfigurationError, YearApproximationNotice

logger = logging.getLogger(__name__)


class YearRouter:
    """Map observation years onto landcover layer years.

    Args:
        available_years: Years for which a landcover layer exists.

    Raises:
        ConfigurationError: If no years are available.

    Example:
        >>> router = YearRouter([2014, 2015, 2016])
        >>> router.route(2015), router.route(2019)
        (2015, 2016)
    """

    def __init__(self, available_years: Iterable[int]) -> None:
        self._years: tuple[int, ...] = tuple(sorted({int(y) for y in available_years}))
        if not self._years:
            raise ConfigurationError(
                what="No landcover layers available",
                cause="The landcover directory holds no file matching the pattern",
                fix="Check landcover_dir and landcover_pattern",
            )

    @property
    def available_years(self) -> tuple[int, ...]:
        return self._years

    @property
    def latest_year(self) -> int:
        """Most recent available landcover year."""
        return self._years[-1]

    def route(self, observation_year: int) -> int:
        """Return the landcover year to use for *observation_year*.

        Raises:
            ConfigurationError: If the year predates the first layer or
                falls in a gap between available layers.
        """
        year = int(observation_year)
        if year > self.latest_year:
            return self.latest_year
        if year in self._years:
            return year
        raise ConfigurationError(
            what=f"No landcover layer for {year}",
            cause=f"Available years: {', '.join(map(str, self._years))}",
            fix="Add the missing landcover year or filter out those observations",
        )

    def validate(self, observation_years: Iterable[int]) -> None:
        """Check that every observation year can be routed.

        Run before any extraction so a missing year aborts the whole run
        up front rather than midway.

        Raises:
            ConfigurationError: Listing every year that cannot be routed.
        """
        missing = sorted(
            {
                int(y)
                for y in observation_years
                if int(y) <= self.latest_year and int(y) not in self._years
            }
        )
        if missing:
            raise ConfigurationError(
                what=f"Missing landcover years: {', '.join(map(str, missing))}",
                cause=f"Available years: {', '.join(map(str, self._years))}",
                fix="Add the missing landcover years or filter out those observations",
            )

    def notices(self, observation_years: Iterable[int]) -> list[YearApproximationNotice]:
        """Summarize the clamped years among *observation_years*.

        Args:
            observation_years: One entry per output row.

        Returns:
            One notice per clamped observation year, oldest first.
        """
        tally = Counter(int(y) for y in observation_years if int(y) > self.latest_year)
        result = [
            YearApproximationNotice(
                observation_year=year,
                landcover_year=self.latest_year,
                n_rows=n,
            )
            for year, n in sorted(tally.items())
        ]
        for notice in result:
            logger.info("Year approximation: %s", notice)
        return result
