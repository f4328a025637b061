"""Landcover composition (PLAND) from extracted cell values.

Pure computation module: no raster I/O. Takes the multiset of class
codes found in one neighborhood and returns fixed-width proportions.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np
import numpy.typing as npt

from habitatcov._types import CompositionVector


def summarize(
    values: npt.NDArray[Any],
    class_codes: Sequence[int],
) -> CompositionVector | None:
    """Convert extracted class codes into a composition vector.

    Values that are not one of *class_codes* (fill values, unclassified
    pixels) are treated like nodata: they are excluded from both the
    tallies and the denominator. Classes that do not occur get an
    explicit zero.

    Args:
        values: 1-D array of cell values from ``extract()``.
        class_codes: All class codes, in the order of output columns.

    Returns:
        ``CompositionVector`` of length ``len(class_codes)``, or ``None``
        when no valid cell remains.

    Example:
        >>> vec = summarize(np.array([4, 4, 12, 255]), class_codes=range(16))
        >>> vec.valid_cells
        3
        >>> round(vec.as_dict()[4], 4)
        0.6667
    """
    codes = tuple(int(c) for c in sorted(class_codes))
    if values.size == 0:
        return None

    flat = np.asarray(values).ravel()
    if np.issubdtype(flat.dtype, np.floating):
        flat = flat[~np.isnan(flat)]
    uniques, tallies = np.unique(flat, return_counts=True)
    lookup = dict(zip(uniques.tolist(), tallies.tolist()))

    counts = np.array([lookup.get(code, 0) for code in codes], dtype=np.int64)
    valid = int(counts.sum())
    if valid == 0:
        return None

    return CompositionVector(class_codes=codes, counts=counts, valid_cells=valid)
