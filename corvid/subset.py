# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Row selection by sample label.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Sequence, Union

import numpy as np
from numpy.typing import NDArray

from corvid.diagnostics import ContractError, warn
from corvid.schema import ColourSpaceRecord, QuantumCatchRecord

Selector = Union[str, Sequence[str], Sequence[bool], NDArray[np.bool_]]
Record = Union[QuantumCatchRecord, ColourSpaceRecord]


def _selection_mask(labels: Sequence[str], selector: Selector) -> NDArray[np.bool_]:
    """Boolean row mask from a pattern, a list of patterns, or a mask."""
    if isinstance(selector, str):
        patterns: Sequence[str] = (selector,)
    else:
        values = list(selector)
        if values and all(isinstance(v, (bool, np.bool_)) for v in values):
            if len(values) != len(labels):
                raise ContractError(
                    f"Logical mask has {len(values)} values for {len(labels)} samples"
                )
            return np.asarray(values, dtype=bool)
        if not values or not all(isinstance(v, str) for v in values):
            raise ContractError(
                "Subset must be a label pattern, a list of patterns or a logical mask"
            )
        patterns = values

    regex = re.compile("|".join(patterns))
    return np.array([regex.search(label) is not None for label in labels], dtype=bool)


def subset_by_label(
    record: Record,
    selector: Selector,
    *,
    invert: bool = False,
) -> Record:
    """
    Keep the rows whose labels match.

    Args:
        record: QuantumCatchRecord or ColourSpaceRecord
        selector: Regular expression searched anywhere in each label, a
            list of expressions (a label matching any of them is kept),
            or a logical mask with one value per row
        invert: Keep the rows that do not match instead

    Returns:
        Record of the same type with every per-sample field subset and
        all metadata carried unchanged. Row order is preserved.

    Raises:
        ContractError: If the record type or selector is not supported
    """
    if not isinstance(record, (QuantumCatchRecord, ColourSpaceRecord)):
        raise ContractError(
            f"Cannot subset {type(record).__name__}; expected a quantum-catch "
            "or colour-space record"
        )

    keep = _selection_mask(record.labels, selector)
    if invert:
        keep = ~keep
    if not keep.any():
        warn("Subset condition not found")

    index = np.flatnonzero(keep)
    labels = tuple(record.labels[i] for i in index)

    if isinstance(record, QuantumCatchRecord):
        return replace(record, labels=labels, data=record.data[index])

    return replace(
        record,
        labels=labels,
        columns={name: values[index] for name, values in record.columns.items()},
        lum=record.lum[index] if record.lum is not None else None,
    )
