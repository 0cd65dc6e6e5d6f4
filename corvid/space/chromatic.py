# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Generic dichromatic and trichromatic spaces.

Relative catches are placed on a line segment (dichromats) or in a
Maxwell triangle (trichromats) centred on the achromatic point.
"""

from __future__ import annotations

from typing import Any, Mapping

import numpy as np
from numpy.typing import NDArray

from corvid.schema import ModelId
from corvid.space.metrics import euclidean
from corvid.space.model import ColourSpaceModel, Normalization, register_model


def dichromatic_coordinates(
    catches: NDArray[np.float64],
    params: Mapping[str, Any] | None = None,
) -> dict[str, NDArray[np.float64]]:
    """Segment position x of relative (s, l) catches and its magnitude."""
    catches = np.asarray(catches, dtype=np.float64)
    s, l = catches.T
    x = (l - s) / np.sqrt(2.0)
    return {"s": s, "l": l, "x": x, "r_vec": np.abs(x)}


def trichromatic_coordinates(
    catches: NDArray[np.float64],
    params: Mapping[str, Any] | None = None,
) -> dict[str, NDArray[np.float64]]:
    """Maxwell-triangle coordinates of relative (s, m, l) catches."""
    catches = np.asarray(catches, dtype=np.float64)
    s, m, l = catches.T
    x = (l - m) / np.sqrt(2.0)
    y = np.sqrt(2.0 / 3.0) * (s - (l + m) / 2.0)
    return {
        "s": s,
        "m": m,
        "l": l,
        "x": x,
        "y": y,
        "h_theta": np.arctan2(y, x),
        "r_vec": np.sqrt(x ** 2 + y ** 2),
    }


DISPACE = register_model(ColourSpaceModel(
    model_id=ModelId.DISPACE,
    channel_names=("s", "l"),
    coordinates=dichromatic_coordinates,
    distance_axes=("x",),
    chromatic=euclidean,
    normalization=Normalization.REQUIRED,
))

TRISPACE = register_model(ColourSpaceModel(
    model_id=ModelId.TRISPACE,
    channel_names=("s", "m", "l"),
    coordinates=trichromatic_coordinates,
    distance_axes=("x", "y"),
    chromatic=euclidean,
    normalization=Normalization.REQUIRED,
))
