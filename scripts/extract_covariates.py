#!/usr/bin/env python3
"""Extract habitat covariates for observations or a prediction grid.

Writes landcover composition (PLAND) tables from annual landcover GeoTIFFs,
either per (location, year) for an observation table or per cell of a
regular grid covering a study region.

Usage:
    python extract_covariates.py observations --observations ebd_zf.csv \\
        --out output/pland_location-year.csv --config habitatcov.json

    python extract_covariates.py prediction-grid --boundary data/bcr.gpkg \\
        --out output/pland_prediction-surface.csv \\
        --geotiff-column pland_04_deciduous_broadleaf --geotiff-out forest.tif
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Check imports before running
try:
    import habitatcov as hc
except ImportError:
    print("Error: habitatcov not installed. Run: pip install -e .")
    sys.exit(1)


def _load_config(path: str | None) -> hc.Config:
    return hc.load_config(path) if path else hc.Config()


def _report(table: hc.CovariateTable) -> None:
    for notice in table.notices:
        print(f"  Note: {notice}")
    if table.dropped:
        print(f"  Dropped {len(table.dropped)} row(s) without valid landcover cells")


def run_observations(args: argparse.Namespace) -> None:
    """Extract covariates for every location-year of an observation table."""
    config = _load_config(args.config)
    print(f"Extracting covariates for {args.observations}...")
    print(f"  Landcover: {config.landcover_dir / config.landcover_pattern}")

    table = hc.extract_observation_covariates(Path(args.observations), config)
    _report(table)

    out = table.to_csv(args.out)
    print(f"\n[OK] {len(table.data)} rows saved to: {out.absolute()}")


def run_prediction_grid(args: argparse.Namespace) -> None:
    """Extract covariates over a prediction grid covering a study region."""
    config = _load_config(args.config)
    print(f"Building prediction grid for {args.boundary}...")

    surface = hc.extract_prediction_covariates(Path(args.boundary), config)
    _report(surface)
    print(f"  Grid: {surface.template.width} x {surface.template.height} cells")

    out = surface.to_csv(args.out)
    print(f"\n[OK] {len(surface.data)} cells saved to: {out.absolute()}")

    if args.geotiff_column:
        tif = surface.to_geotiff(args.geotiff_column, args.geotiff_out)
        print(f"[OK] {args.geotiff_column} raster saved to: {tif.absolute()}")


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        description="Extract habitat covariates from annual landcover rasters.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python extract_covariates.py observations --observations ebd_zf.csv --out pland.csv
  python extract_covariates.py prediction-grid --boundary bcr.gpkg --out grid.csv
        """,
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON configuration file (default: built-in settings)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress log messages",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    obs = commands.add_parser("observations", help="Covariates per location-year")
    obs.add_argument(
        "--observations",
        type=str,
        required=True,
        help="Observation table (CSV, or tab-separated .txt/.tsv)",
    )
    obs.add_argument("-o", "--out", type=str, required=True, help="Output CSV path")
    obs.set_defaults(func=run_observations)

    grid = commands.add_parser("prediction-grid", help="Covariates over a prediction grid")
    grid.add_argument(
        "--boundary",
        type=str,
        required=True,
        help="Study region vector file (GeoPackage, shapefile, GeoJSON)",
    )
    grid.add_argument("-o", "--out", type=str, required=True, help="Output CSV path")
    grid.add_argument(
        "--geotiff-column",
        type=str,
        default=None,
        help="Also write this column as a GeoTIFF (optional)",
    )
    grid.add_argument(
        "--geotiff-out",
        type=str,
        default="prediction_surface.tif",
        help="GeoTIFF path for --geotiff-column (default: prediction_surface.tif)",
    )
    grid.set_defaults(func=run_prediction_grid)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run the selected extraction.

    Returns:
        Process exit code.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        args.func(args)
    except (hc.HabitatCovError, ValueError) as e:
        print(f"\nError: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
