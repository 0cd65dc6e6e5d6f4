# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Pair enumeration and pattern-based pair selection.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from corvid.diagnostics import ContractError, warn
from corvid.schema import DistanceRecord

Patterns = Union[str, Sequence[str]]


def pair_indices(n: int) -> tuple[NDArray[np.intp], NDArray[np.intp]]:
    """
    Row indices of every unordered pair of n samples.

    Pairs are in index-ascending order: (0,1), (0,2), ..., (1,2), ...
    """
    return np.triu_indices(n, k=1)


def as_patterns(subset: Optional[Patterns]) -> tuple[str, ...]:
    """
    Normalize a subset argument to a tuple of patterns.

    Raises:
        ContractError: If more than two patterns are given
    """
    if subset is None:
        return ()
    patterns = (subset,) if isinstance(subset, str) else tuple(subset)
    if len(patterns) > 2:
        raise ContractError(
            f"Too many subsetting conditions ({len(patterns)}); one or two allowed"
        )
    return patterns


def _matches(pattern: str, labels: Sequence[str]) -> NDArray[np.bool_]:
    regex = re.compile(pattern)
    return np.array([regex.search(label) is not None for label in labels], dtype=bool)


def filter_pairs(record: DistanceRecord, subset: Optional[Patterns]) -> DistanceRecord:
    """
    Keep only the pairs selected by one or two label patterns.

    With one pattern, a pair is kept if either member matches it. With
    two patterns, a pair is kept if its members match different patterns.
    Patterns are regular expressions searched anywhere in the label.
    Pair order is preserved; the reference distances are left untouched.
    """
    patterns = as_patterns(subset)
    if not patterns:
        return record

    if len(patterns) == 1:
        keep = _matches(patterns[0], record.patch1) | _matches(patterns[0], record.patch2)
    else:
        first, second = patterns
        keep = (
            _matches(first, record.patch1) & _matches(second, record.patch2)
        ) | (
            _matches(second, record.patch1) & _matches(first, record.patch2)
        )

    if not keep.any():
        warn("Subset condition not found", stacklevel=4)

    index = np.flatnonzero(keep)
    return replace(
        record,
        patch1=tuple(record.patch1[i] for i in index),
        patch2=tuple(record.patch2[i] for i in index),
        dS=record.dS[index],
        dL=record.dL[index],
    )
