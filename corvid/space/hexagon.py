# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Hymenopteran colour spaces: the colour hexagon and the colour
opponent coding (COC) space.

Both take hyperbolically transformed, von Kries adapted photoreceptor
excitations (Ei) of the s, m and l receptors.

References:
- Chittka (1992), The colour hexagon: a chromaticity diagram based on
  photoreceptor excitations as a generalized representation of colour
  opponency. J. Comp. Physiol. A 170, 533-543.
- Backhaus (1991), Color opponent coding in the visual system of the
  honeybee. Vision Research 31, 1381-1397.
"""

from __future__ import annotations

from typing import Any, Mapping

import numpy as np
from numpy.typing import NDArray

from corvid.schema import CatchScale, LumContrast, ModelId
from corvid.space.metrics import euclidean, manhattan
from corvid.space.model import ColourSpaceModel, register_model


# Sixty-degree hue sectors centred on the vertices (blue, green, uv) and
# on the midpoints between them, clockwise from the blue (m) axis.
COARSE_SECTORS = ("blue", "bluegreen", "green", "uvgreen", "uv", "uvblue")

FINE_SECTOR_WIDTH = 10.0


def _hexagon_sectors(h_theta: NDArray[np.float64]) -> tuple[NDArray, NDArray]:
    """Fine (degrees, NaN-safe) and coarse (named) hue sectors."""
    fine = np.floor(h_theta / FINE_SECTOR_WIDTH) * FINE_SECTOR_WIDTH
    coarse = np.array(
        [
            None if np.isnan(h) else COARSE_SECTORS[int(((h + 30.0) % 360.0) // 60.0)]
            for h in h_theta
        ],
        dtype=object,
    )
    return fine, coarse


def hexagon_coordinates(
    catches: NDArray[np.float64],
    params: Mapping[str, Any] | None = None,
) -> dict[str, NDArray]:
    """
    Colour hexagon coordinates.

    Args:
        catches: Excitations, shape (n, 3), in s, m, l order
        params: Unused

    Returns:
        Ordered columns:
        - s, m, l: the excitations used
        - x, y: hexagon coordinates
        - h_theta: hue in degrees [0, 360), clockwise from the m axis
          (NaN at the centre)
        - r_vec: distance from the centre
        - sec_fine: lower bound of the 10 degree hue sector
        - sec_coarse: named 60 degree hue sector (None at the centre)
    """
    catches = np.asarray(catches, dtype=np.float64)
    s, m, l = catches.T

    x = (np.sqrt(3.0) / 2.0) * (l - s)
    y = m - 0.5 * (s + l)
    r_vec = np.sqrt(x ** 2 + y ** 2)

    h_theta = np.degrees(np.arctan2(x, y)) % 360.0
    h_theta = np.where(r_vec == 0, np.nan, h_theta)
    sec_fine, sec_coarse = _hexagon_sectors(h_theta)

    return {
        "s": s,
        "m": m,
        "l": l,
        "x": x,
        "y": y,
        "h_theta": h_theta,
        "r_vec": r_vec,
        "sec_fine": sec_fine,
        "sec_coarse": sec_coarse,
    }


def coc_coordinates(
    catches: NDArray[np.float64],
    params: Mapping[str, Any] | None = None,
) -> dict[str, NDArray[np.float64]]:
    """
    Colour opponent coding coordinates.

    Saturation (r_vec) is the city-block distance from the origin,
    matching the Manhattan metric used between samples.
    """
    catches = np.asarray(catches, dtype=np.float64)
    s, m, l = catches.T

    x = -9.86 * s + 7.70 * m + 2.16 * l
    y = -5.17 * s + 20.25 * m - 15.08 * l

    return {
        "s": s,
        "m": m,
        "l": l,
        "x": x,
        "y": y,
        "r_vec": np.abs(x) + np.abs(y),
    }


HEXAGON = register_model(ColourSpaceModel(
    model_id=ModelId.HEXAGON,
    channel_names=("s", "m", "l"),
    coordinates=hexagon_coordinates,
    distance_axes=("x", "y"),
    chromatic=euclidean,
    expected_scale=CatchScale.EI,
    von_kries=True,
    achromatic=LumContrast.SIMPLE,
    achromatic_column="l",
))

COC = register_model(ColourSpaceModel(
    model_id=ModelId.COC,
    channel_names=("s", "m", "l"),
    coordinates=coc_coordinates,
    distance_axes=("x", "y"),
    chromatic=manhattan,
    chromatic_label="Manhattan distances",
    expected_scale=CatchScale.EI,
    von_kries=True,
))
