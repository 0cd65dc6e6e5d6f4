# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Categorical colour vision model for flies.

The four receptor channels R7p, R7y, R8p and R8y feed two opponent
mechanisms whose signs alone decide the colour category.

Reference:
- Troje (1993), Spectral categories in the learning behaviour of
  blowflies. Zeitschrift fur Naturforschung C 48, 96-104.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import numpy as np
from numpy.typing import NDArray

from corvid.schema import ModelId
from corvid.space.metrics import euclidean
from corvid.space.model import ColourSpaceModel, Normalization, register_model


# Four-state categories, keyed by (x > 0, y > 0)
CATEGORIES = ("p+y+", "p+y-", "p-y+", "p-y-")


def categorize(x: float, y: float) -> Optional[str]:
    """
    Fly colour category for one point.

    Axis-aligned points get a two-state label; the origin has no
    category and returns None.
    """
    if x == 0 and y == 0:
        return None
    if x == 0:
        return "y+" if y > 0 else "y-"
    if y == 0:
        return "p+" if x > 0 else "p-"
    return ("p+" if x > 0 else "p-") + ("y+" if y > 0 else "y-")


def categorical_coordinates(
    catches: NDArray[np.float64],
    params: Mapping[str, Any] | None = None,
) -> dict[str, NDArray]:
    """
    Opponent coordinates and categories.

    Args:
        catches: Shape (n, 4) in R7p, R7y, R8p, R8y order
        params: Unused

    Returns:
        Ordered columns R7p, R7y, R8p, R8y, x, y, category, r_vec, h_theta
    """
    catches = np.asarray(catches, dtype=np.float64)
    r7p, r7y, r8p, r8y = catches.T

    x = r7p - r8p
    y = r7y - r8y
    category = np.array(
        [categorize(float(xi), float(yi)) for xi, yi in zip(x, y)], dtype=object
    )

    return {
        "R7p": r7p,
        "R7y": r7y,
        "R8p": r8p,
        "R8y": r8y,
        "x": x,
        "y": y,
        "category": category,
        "r_vec": np.sqrt(x ** 2 + y ** 2),
        "h_theta": np.arctan2(y, x),
    }


CATEGORICAL = register_model(ColourSpaceModel(
    model_id=ModelId.CATEGORICAL,
    channel_names=("u", "s", "m", "l"),
    coordinates=categorical_coordinates,
    distance_axes=("x", "y"),
    chromatic=euclidean,
    normalization=Normalization.ADVISED,
))
