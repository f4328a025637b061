"""Tests for Config model and load_config()."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from habitatcov.config import UMD_CLASSES, Config, load_config
from habitatcov.exceptions import ConfigurationError


@pytest.mark.unit
class TestConfigDefaults:
    """Verify Config constructs with correct defaults."""

    def test_defaults(self) -> None:
        cfg = Config()
        assert cfg.neighborhood_cells == 5
        assert cfg.neighborhood_shape == "square"
        assert cfg.landcover_pattern == "landcover_{year}.tif"
        assert cfg.elevation_path is None
        assert cfg.output_crs == "EPSG:4326"
        assert cfg.equal_area_crs == "EPSG:6933"
        assert cfg.random_seed == 1
        assert cfg.protocols == ("Stationary", "Traveling")

    def test_default_classes_are_umd(self) -> None:
        cfg = Config()
        assert cfg.landcover_classes == UMD_CLASSES
        assert cfg.class_codes == tuple(range(16))

    def test_landcover_dir_expands_home(self) -> None:
        cfg = Config(landcover_dir="~/modis")
        assert "~" not in str(cfg.landcover_dir)
        assert cfg.landcover_dir.is_absolute()


@pytest.mark.unit
class TestClassColumns:
    """Column names follow pland_<code>_<name> in class code order."""

    def test_default_columns(self) -> None:
        cols = Config().class_columns
        assert len(cols) == 16
        assert cols[0] == "pland_00_water"
        assert cols[4] == "pland_04_deciduous_broadleaf"
        assert cols[-1] == "pland_15_barren"

    def test_classes_sorted_by_code(self) -> None:
        cfg = Config(landcover_classes={12: "cropland", 1: "forest", 7: "shrub"})
        assert cfg.class_codes == (1, 7, 12)
        assert cfg.class_columns == [
            "pland_01_forest",
            "pland_07_shrub",
            "pland_12_cropland",
        ]

    def test_landcover_path(self, tmp_path: Path) -> None:
        cfg = Config(landcover_dir=tmp_path, landcover_pattern="mcd12q1_{year}.tif")
        assert cfg.landcover_path(2019) == tmp_path / "mcd12q1_2019.tif"


@pytest.mark.unit
class TestConfigValidation:
    """Invalid values are rejected at construction."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"neighborhood_cells": 0},
            {"neighborhood_cells": -3},
            {"neighborhood_shape": "hexagon"},
            {"landcover_pattern": "landcover.tif"},
            {"landcover_classes": {}},
            {"landcover_classes": {-1: "fill"}},
            {"output_crs": "WGS84"},
            {"equal_area_crs": "6933"},
            {"subsample_cell_km": 0.0},
            {"max_observers": 0},
            {"unknown_field": 1},
        ],
    )
    def test_rejected(self, kwargs: dict[str, object]) -> None:
        with pytest.raises(ValidationError):
            Config(**kwargs)

    def test_frozen(self) -> None:
        cfg = Config()
        with pytest.raises(ValidationError):
            cfg.neighborhood_cells = 7  # type: ignore[misc]


@pytest.mark.unit
class TestLoadConfig:
    """load_config() reads JSON files and wraps every failure."""

    def test_valid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "habitatcov.json"
        path.write_text(
            json.dumps(
                {
                    "landcover_dir": str(tmp_path / "modis"),
                    "neighborhood_cells": 3,
                    "landcover_classes": {"4": "forest", "12": "cropland"},
                }
            )
        )
        cfg = load_config(path)
        assert cfg.neighborhood_cells == 3
        assert cfg.landcover_dir == tmp_path / "modis"
        assert cfg.class_codes == (4, 12)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Cannot read configuration"):
            load_config(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="Invalid configuration file"):
            load_config(path)

    def test_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigurationError, match="Invalid configuration file"):
            load_config(path)

    def test_invalid_values(self, tmp_path: Path) -> None:
        path = tmp_path / "values.json"
        path.write_text(json.dumps({"neighborhood_cells": 0}))
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(path)
        assert "neighborhood_cells" in exc_info.value.cause
