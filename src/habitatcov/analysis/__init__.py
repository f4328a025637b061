"""Summaries computed from extracted neighborhood values."""

from habitatcov.analysis.composition import summarize
from habitatcov.analysis.terrain import summarize_elevation

__all__ = ["summarize", "summarize_elevation"]
