# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Geometric distances between projected samples.

All functions are vectorized over pairs: coordinate arrays have shape
(P, d) and results have shape (P,).
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from corvid.schema import LumContrast


def euclidean(a: NDArray[np.float64], b: NDArray[np.float64]) -> NDArray[np.float64]:
    """Unweighted Euclidean distance between matching rows."""
    delta = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return np.sqrt(np.sum(delta ** 2, axis=-1))


def manhattan(a: NDArray[np.float64], b: NDArray[np.float64]) -> NDArray[np.float64]:
    """City-block distance between matching rows."""
    delta = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return np.sum(np.abs(delta), axis=-1)


def lum_contrast(
    lum1: NDArray[np.float64],
    lum2: NDArray[np.float64],
    kind: LumContrast = LumContrast.WEBER,
) -> NDArray[np.float64]:
    """
    Luminance contrast between two samples.

    - SIMPLE:    lum1 / lum2
    - WEBER:     (max - min) / min
    - MICHELSON: (max - min) / (max + min)

    Zero denominators give inf or NaN rather than raising.
    """
    lum1 = np.asarray(lum1, dtype=np.float64)
    lum2 = np.asarray(lum2, dtype=np.float64)
    hi = np.maximum(lum1, lum2)
    lo = np.minimum(lum1, lum2)
    with np.errstate(divide="ignore", invalid="ignore"):
        if kind is LumContrast.SIMPLE:
            return lum1 / lum2
        if kind is LumContrast.WEBER:
            return (hi - lo) / lo
        return (hi - lo) / (hi + lo)
