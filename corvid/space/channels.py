# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Channel resolution and row normalization.

Every colour-space model needs a fixed number of channels in a fixed
order. Input either comes from a visual model (channel order declared)
or is a bare table (channel identity guessed). Resolution has exactly
three outcomes:

    EXACT       channels identified (declared order, or matched by name)
    POSITIONAL  bare table of the right width, columns taken in order
    TRUNCATED   too many channels, the first N are used

Fewer channels than the model needs is a contract error.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from corvid.diagnostics import ContractError
from corvid.schema import RELATIVE_TOLERANCE


class ChannelOutcome(Enum):
    """How input columns were mapped onto model channels."""
    EXACT = "exact"
    POSITIONAL = "positional"
    TRUNCATED = "truncated"


@dataclass(frozen=True, slots=True)
class ChannelResolution:
    """
    Result of matching input columns to model channels.

    Attributes:
        outcome: Which resolution rule applied
        indices: Input column index for each model channel, in model order
        message: Diagnostic to report, or None when nothing needs saying
    """
    outcome: ChannelOutcome
    indices: tuple[int, ...]
    message: Optional[str] = None


def _quoted(names: Sequence[str]) -> str:
    return ", ".join(f'"{n}"' for n in names)


def resolve_channels(
    names: Sequence[str],
    required: Sequence[str],
    *,
    declared: bool,
    space: str = "colour space",
) -> ChannelResolution:
    """
    Map input columns onto the channels a model requires.

    Args:
        names: Input chromatic column names, in input order
        required: Channel names the model expects, in model order
        declared: True if channel order comes from a visual model, False
            for bare tables whose column identity must be guessed
        space: Model name used in messages

    Returns:
        ChannelResolution with the selected column indices

    Raises:
        ContractError: If the input has fewer channels than required
    """
    width = len(names)
    n_required = len(required)
    first = tuple(range(n_required))

    if width < n_required:
        source = "Visual model input" if declared else "Input data"
        raise ContractError(
            f"{source} has {width} chromatic channel(s); "
            f"the {space} space needs {n_required}"
        )

    if declared:
        if width == n_required:
            return ChannelResolution(ChannelOutcome.EXACT, first)
        return ChannelResolution(
            ChannelOutcome.TRUNCATED,
            first,
            f"Visual model input has {width} receptors; considering the first "
            f"{n_required} only for the {space} space",
        )

    if all(name in names for name in required):
        indices = tuple(list(names).index(name) for name in required)
        return ChannelResolution(ChannelOutcome.EXACT, indices)

    if width == n_required:
        return ChannelResolution(
            ChannelOutcome.POSITIONAL,
            first,
            "Input data is not from a visual model and has no columns named "
            f"{_quoted(required)}; treating columns as {_quoted(required)} "
            "receptors, respectively",
        )

    used = [names[i] for i in first]
    return ChannelResolution(
        ChannelOutcome.TRUNCATED,
        first,
        f"Input data is not from a visual model and has {width} columns; "
        f"using the first {n_required} ({_quoted(used)}) as "
        f"{_quoted(required)} receptors, respectively",
    )


def row_sums_deviate(
    catches: NDArray[np.float64],
    tolerance: float = RELATIVE_TOLERANCE,
) -> bool:
    """True if any row sum differs from 1 by more than tolerance."""
    if catches.size == 0:
        return False
    return bool(np.any(np.abs(catches.sum(axis=1) - 1.0) > tolerance))


def normalize_rows(catches: NDArray[np.float64]) -> NDArray[np.float64]:
    """Scale each row to sum to 1."""
    catches = np.asarray(catches, dtype=np.float64)
    return catches / catches.sum(axis=1, keepdims=True)
