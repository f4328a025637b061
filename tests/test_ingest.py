"""Tests for checklist ingestion, zero-filling and effort handling."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from habitatcov.config import Config
from habitatcov.exceptions import ConfigurationError, DataSourceError, IngestError
from habitatcov.ingest import (
    Counted,
    PresentUncounted,
    SpeciesCount,
    filter_effort,
    parse_count,
    prepare_effort,
    read_table,
    zero_fill,
)


@pytest.mark.unit
class TestParseCount:
    """Raw counts resolve to tagged values once, at the boundary."""

    @pytest.mark.parametrize("raw", ["X", "x", " X "])
    def test_uncounted_marker(self, raw: str) -> None:
        count = parse_count(raw)
        assert count == PresentUncounted()
        assert count.resolve() is None
        assert count.detected

    @pytest.mark.parametrize(
        "raw, n",
        [(3, 3), ("12", 12), (np.int64(7), 7), (2.0, 2), ("0", 0)],
    )
    def test_counted(self, raw: object, n: int) -> None:
        count = parse_count(raw)
        assert count == Counted(n)
        assert count.resolve() == n

    def test_zero_is_not_detected(self) -> None:
        assert not parse_count(0).detected
        assert parse_count(1).detected

    @pytest.mark.parametrize("raw", ["X", 5])
    def test_result_is_a_species_count(self, raw: object) -> None:
        assert isinstance(parse_count(raw), SpeciesCount)

    @pytest.mark.parametrize(
        "raw", [True, -1, "-4", 2.5, float("nan"), "many", "", None, [1]]
    )
    def test_invalid(self, raw: object) -> None:
        with pytest.raises(IngestError):
            parse_count(raw)


@pytest.mark.unit
class TestReadTable:
    """Tables are read as CSV or tab-separated text."""

    def test_csv(self, tmp_path: Path) -> None:
        path = tmp_path / "checklists.csv"
        path.write_text("checklist_id,all_species_reported\nS1,1\n")
        df = read_table(path, required_columns=["checklist_id"])
        assert df["checklist_id"].tolist() == ["S1"]

    def test_tab_separated(self, tmp_path: Path) -> None:
        path = tmp_path / "ebd.txt"
        path.write_text("checklist_id\tobservation_count\nS1\tX\nS2\t4\n")
        df = read_table(path)
        assert df["observation_count"].tolist() == ["X", "4"]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(DataSourceError, match="File not found"):
            read_table(tmp_path / "missing.csv")

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(DataSourceError, match="File is empty"):
            read_table(path)

    def test_directory_path(self, tmp_path: Path) -> None:
        with pytest.raises(DataSourceError, match="Cannot read table"):
            read_table(tmp_path)

    def test_missing_columns(self, tmp_path: Path) -> None:
        path = tmp_path / "t.csv"
        path.write_text("a,b\n1,2\n")
        with pytest.raises(ConfigurationError) as exc_info:
            read_table(path, required_columns=["a", "latitude", "longitude"])
        assert exc_info.value.cause == "Missing: latitude, longitude"


@pytest.fixture
def checklists() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "checklist_id": ["S1", "S2", "S3", "S4"],
            "all_species_reported": [True, True, True, False],
        }
    )


@pytest.mark.unit
class TestZeroFill:
    """Complete checklists gain explicit non-detections."""

    def test_zero_fill(self, checklists: pd.DataFrame) -> None:
        observations = pd.DataFrame(
            {"checklist_id": ["S1", "S3", "S4"], "observation_count": ["X", "5", "2"]}
        )
        df = zero_fill(checklists, observations)

        assert df["checklist_id"].tolist() == ["S1", "S2", "S3"]
        assert df["species_observed"].tolist() == [True, False, True]
        assert str(df["observation_count"].dtype) == "Int64"
        assert pd.isna(df.loc[0, "observation_count"])
        assert df.loc[1, "observation_count"] == 0
        assert df.loc[2, "observation_count"] == 5

    def test_string_flags(self) -> None:
        checklists = pd.DataFrame(
            {"checklist_id": ["S1", "S2"], "all_species_reported": ["1", "0"]}
        )
        observations = pd.DataFrame(columns=["checklist_id", "observation_count"])
        df = zero_fill(checklists, observations)
        assert df["checklist_id"].tolist() == ["S1"]
        assert df["species_observed"].tolist() == [False]

    def test_species_filter(self, checklists: pd.DataFrame) -> None:
        observations = pd.DataFrame(
            {
                "checklist_id": ["S1", "S1"],
                "scientific_name": ["Setophaga caerulescens", "Turdus migratorius"],
                "observation_count": [2, 1],
            }
        )
        df = zero_fill(checklists, observations, species="Setophaga caerulescens")
        assert df.loc[0, "observation_count"] == 2

    def test_multiple_species_rejected(self, checklists: pd.DataFrame) -> None:
        observations = pd.DataFrame(
            {"checklist_id": ["S1", "S1"], "observation_count": [2, 1]}
        )
        with pytest.raises(IngestError, match="several observations"):
            zero_fill(checklists, observations)

    def test_invalid_count(self, checklists: pd.DataFrame) -> None:
        observations = pd.DataFrame({"checklist_id": ["S1"], "observation_count": ["lots"]})
        with pytest.raises(IngestError):
            zero_fill(checklists, observations)

    def test_missing_columns(self, checklists: pd.DataFrame) -> None:
        with pytest.raises(ConfigurationError, match="observations table"):
            zero_fill(checklists, pd.DataFrame({"checklist_id": ["S1"]}))


@pytest.mark.unit
class TestEffort:
    """Effort variables and effort filters."""

    @pytest.fixture
    def effort(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "protocol_type": ["Stationary", "Traveling", "Traveling", "Incidental"],
                "effort_distance_km": [np.nan, 2.0, 12.0, np.nan],
                "duration_minutes": [30, 90, 60, 10],
                "time_observations_started": ["06:30:00", "07:15:00", "18:00:00", "12:00:00"],
                "observation_date": ["2019-01-01", "2019-06-15", "2014-06-15", "2019-02-01"],
                "number_observers": [1, 2, 3, 1],
            }
        )

    def test_prepare_effort(self, effort: pd.DataFrame) -> None:
        df = prepare_effort(effort)
        assert df.loc[0, "effort_distance_km"] == 0.0
        assert df.loc[1, "effort_hours"] == 1.5
        assert df.loc[0, "hours_of_day"] == 6.5
        assert df.loc[1, "hours_of_day"] == 7.25
        assert df["year"].tolist() == [2019, 2019, 2014, 2019]
        assert df.loc[1, "day_of_year"] == 166
        assert np.isnan(effort.loc[0, "effort_distance_km"])

    def test_filter_effort(self, effort: pd.DataFrame) -> None:
        df = filter_effort(prepare_effort(effort), Config())
        # Distance over 5 km and the incidental protocol are removed
        assert df["protocol_type"].tolist() == ["Stationary", "Traveling"]

    def test_min_year(self, effort: pd.DataFrame) -> None:
        df = filter_effort(prepare_effort(effort), Config(min_year=2015, max_distance_km=50.0))
        assert 2014 not in df["year"].tolist()
        assert len(df) == 2

    def test_missing_distance_removed_when_not_stationary(self) -> None:
        df = pd.DataFrame(
            {"protocol_type": ["Traveling"], "effort_distance_km": [np.nan]}
        )
        assert filter_effort(df, Config()).empty
