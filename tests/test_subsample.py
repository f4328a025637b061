"""Tests for spatiotemporal subsampling."""

from __future__ import annotations

import pandas as pd
import pytest

from habitatcov.config import Config
from habitatcov.exceptions import ConfigurationError
from habitatcov.subsample import assign_cells, subsample

# Two checklists at one hotspot share a 3 km cell; a third is 80 km east.
HOTSPOT = (42.0, -76.0)
FAR = (42.0, -75.0)


def _checklist(
    checklist_id: str,
    point: tuple[float, float],
    date: str,
    observed: bool = False,
) -> dict[str, object]:
    return {
        "checklist_id": checklist_id,
        "latitude": point[0],
        "longitude": point[1],
        "observation_date": date,
        "species_observed": observed,
    }


@pytest.mark.unit
class TestAssignCells:
    """Cells are equal-area bins; weeks run 1 to 52."""

    def test_same_hotspot_shares_cell(self) -> None:
        df = pd.DataFrame(
            [
                _checklist("S1", HOTSPOT, "2019-06-01"),
                _checklist("S2", HOTSPOT, "2019-06-01"),
                _checklist("S3", FAR, "2019-06-01"),
            ]
        )
        binned = assign_cells(df, Config())
        cells = list(zip(binned["cell_x"], binned["cell_y"]))
        assert cells[0] == cells[1]
        assert cells[0] != cells[2]

    @pytest.mark.parametrize(
        "date, week",
        [("2019-01-01", 1), ("2019-01-07", 1), ("2019-01-08", 2), ("2019-12-31", 52)],
    )
    def test_week(self, date: str, week: int) -> None:
        df = pd.DataFrame([_checklist("S1", HOTSPOT, date)])
        assert assign_cells(df, Config())["week"].tolist() == [week]

    def test_invalid_date(self) -> None:
        df = pd.DataFrame([_checklist("S1", HOTSPOT, "someday")])
        with pytest.raises(ConfigurationError):
            assign_cells(df, Config())

    def test_missing_date_column(self) -> None:
        df = pd.DataFrame([_checklist("S1", HOTSPOT, "2019-01-01")]).drop(
            columns="observation_date"
        )
        with pytest.raises(ConfigurationError, match="observation_date"):
            assign_cells(df, Config())


@pytest.mark.unit
class TestSubsample:
    """One checklist per cell, year, week and detection outcome."""

    def test_same_cell_and_week_thinned(self) -> None:
        df = pd.DataFrame(
            [
                _checklist("S1", HOTSPOT, "2019-06-04"),
                _checklist("S2", HOTSPOT, "2019-06-05"),
            ]
        )
        result = subsample(df, Config())
        assert len(result) == 1
        assert result["checklist_id"].iloc[0] in {"S1", "S2"}

    def test_detections_sampled_separately(self) -> None:
        df = pd.DataFrame(
            [
                _checklist("S1", HOTSPOT, "2019-06-03", observed=True),
                _checklist("S2", HOTSPOT, "2019-06-04", observed=False),
            ]
        )
        assert len(subsample(df, Config())) == 2

    def test_different_weeks_years_and_cells_kept(self) -> None:
        df = pd.DataFrame(
            [
                _checklist("S1", HOTSPOT, "2019-06-03"),
                _checklist("S2", HOTSPOT, "2019-07-03"),
                _checklist("S3", HOTSPOT, "2018-06-03"),
                _checklist("S4", FAR, "2019-06-03"),
            ]
        )
        result = subsample(df, Config())
        assert result["checklist_id"].tolist() == ["S1", "S2", "S3", "S4"]

    def test_reproducible_with_seed(self) -> None:
        df = pd.DataFrame(
            [_checklist(f"S{i}", HOTSPOT, "2019-06-03") for i in range(20)]
        )
        first = subsample(df, Config(random_seed=42))
        second = subsample(df, Config(random_seed=42))
        pd.testing.assert_frame_equal(first, second)

    def test_original_columns_preserved(self) -> None:
        df = pd.DataFrame([_checklist("S1", HOTSPOT, "2019-06-03")], index=[7])
        result = subsample(df, Config())
        assert list(result.columns) == list(df.columns)
        assert list(result.index) == [0]

    def test_requires_species_observed(self) -> None:
        df = pd.DataFrame([_checklist("S1", HOTSPOT, "2019-06-03")]).drop(
            columns="species_observed"
        )
        with pytest.raises(ConfigurationError, match="species_observed"):
            subsample(df, Config())

    def test_empty(self) -> None:
        df = pd.DataFrame(
            columns=["latitude", "longitude", "observation_date", "species_observed"]
        )
        assert subsample(df, Config()).empty
