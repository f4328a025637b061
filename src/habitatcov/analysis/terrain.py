"""Elevation summaries within a neighborhood."""

from __future__ import annotations

from typing import Any

import numpy as np
import numpy.typing as npt


def summarize_elevation(values: npt.NDArray[Any]) -> tuple[float, float]:
    """Return ``(median, standard deviation)`` of valid elevation values.

    The standard deviation is the sample estimate (``ddof=1``). Both are
    NaN when there are no values, and the deviation is NaN for a single
    value.

    Example:
        >>> summarize_elevation(np.array([10.0, 20.0, 30.0]))
        (20.0, 10.0)
    """
    flat = np.asarray(values, dtype=np.float64).ravel()
    flat = flat[~np.isnan(flat)]
    if flat.size == 0:
        return (float("nan"), float("nan"))
    median = float(np.median(flat))
    sd = float(np.std(flat, ddof=1)) if flat.size > 1 else float("nan")
    return (median, sd)
