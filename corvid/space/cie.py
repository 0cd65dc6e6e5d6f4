# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
CIE colour spaces for human (trichromatic) viewers.

Conversion chain: XYZ tristimulus → xyz chromaticity
                  XYZ tristimulus → CIELAB → CIELCh

References:
- CIE 15:2004, Colorimetry
- Sharma, Wu & Dalal (2005), The CIEDE2000 color-difference formula:
  implementation notes, supplementary test data, and mathematical
  observations. Color Res. Appl. 30(1), 21-30.

All conversions are pure NumPy and vectorized over rows.
"""

from __future__ import annotations

from typing import Any, Mapping

import numpy as np
from numpy.typing import NDArray

from corvid.diagnostics import ContractError
from corvid.schema import LumContrast, ModelId
from corvid.space.metrics import euclidean
from corvid.space.model import ColourSpaceModel, register_model


# D65 reference white, 2° observer, Y normalized to 1
D65_WHITE = (0.95047, 1.0, 1.08883)

# CIE constants for the Lab companding function
_EPSILON = (6.0 / 29.0) ** 3
_KAPPA = 1.0 / (3.0 * (6.0 / 29.0) ** 2)


# =============================================================================
# XYZ → Chromaticity
# =============================================================================


def xyz_to_chromaticity(xyz: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Convert XYZ tristimulus values to xyz chromaticity.

    Args:
        xyz: Array of shape (..., 3)

    Returns:
        Array of shape (..., 3) summing to 1 along the last axis
    """
    xyz = np.asarray(xyz, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        return xyz / np.sum(xyz, axis=-1, keepdims=True)


# =============================================================================
# XYZ → CIELAB → CIELCh
# =============================================================================


def _lab_f(t: NDArray[np.float64]) -> NDArray[np.float64]:
    """Cube root above the CIE threshold, linear segment below it."""
    return np.where(
        t > _EPSILON,
        np.cbrt(t),
        _KAPPA * t + 4.0 / 29.0,
    )


def xyz_to_lab(
    xyz: NDArray[np.float64],
    white: tuple[float, float, float] = D65_WHITE,
) -> NDArray[np.float64]:
    """
    Convert XYZ to CIELAB relative to a reference white.

    Args:
        xyz: Array of shape (..., 3)
        white: Reference white (Xn, Yn, Zn) on the same scale as xyz

    Returns:
        Array of shape (..., 3) with L in [0, 100] for in-gamut input
    """
    xyz = np.asarray(xyz, dtype=np.float64)
    white_arr = np.asarray(white, dtype=np.float64)
    if white_arr.shape != (3,) or np.any(white_arr <= 0):
        raise ContractError(f"Reference white must be three positive values, got {white!r}")

    fx, fy, fz = np.moveaxis(_lab_f(xyz / white_arr), -1, 0)

    L = 116.0 * fy - 16.0
    a = 500.0 * (fx - fy)
    b = 200.0 * (fy - fz)

    return np.stack([L, a, b], axis=-1)


def lab_to_lch(lab: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Convert CIELAB to CIELCh (cylindrical coordinates).

    Returns:
        Array of shape (..., 3) with (L, C, h), h in degrees [0, 360)
    """
    lab = np.asarray(lab, dtype=np.float64)
    L, a, b = lab[..., 0], lab[..., 1], lab[..., 2]
    C = np.hypot(a, b)
    h = np.degrees(np.arctan2(b, a)) % 360.0
    return np.stack([L, C, h], axis=-1)


# =============================================================================
# ΔE2000 (Perceptual Colour Difference)
# =============================================================================


def delta_e_cie2000(
    lab1: NDArray[np.float64],
    lab2: NDArray[np.float64],
    kL: float = 1.0,
    kC: float = 1.0,
    kH: float = 1.0,
) -> NDArray[np.float64]:
    """
    CIEDE2000 colour difference between matching rows.

    Args:
        lab1: Array of shape (..., 3) with CIELAB values
        lab2: Array of the same shape
        kL, kC, kH: Parametric weights for lightness, chroma and hue

    Returns:
        Array of shape (...,) with ΔE00 values (≈1 is a just noticeable
        difference for human observers)
    """
    lab1 = np.asarray(lab1, dtype=np.float64)
    lab2 = np.asarray(lab2, dtype=np.float64)
    L1, a1, b1 = lab1[..., 0], lab1[..., 1], lab1[..., 2]
    L2, a2, b2 = lab2[..., 0], lab2[..., 1], lab2[..., 2]

    # Chroma adjustment of a*
    C_bar = (np.hypot(a1, b1) + np.hypot(a2, b2)) / 2.0
    C_bar_7 = C_bar ** 7
    G = 0.5 * (1.0 - np.sqrt(C_bar_7 / (C_bar_7 + 25.0 ** 7)))

    a1_p = (1.0 + G) * a1
    a2_p = (1.0 + G) * a2
    C1_p = np.hypot(a1_p, b1)
    C2_p = np.hypot(a2_p, b2)
    h1_p = np.degrees(np.arctan2(b1, a1_p)) % 360.0
    h2_p = np.degrees(np.arctan2(b2, a2_p)) % 360.0

    # Differences
    dL_p = L2 - L1
    dC_p = C2_p - C1_p

    chroma_product = C1_p * C2_p
    dh_p = h2_p - h1_p
    dh_p = np.where(dh_p > 180.0, dh_p - 360.0, dh_p)
    dh_p = np.where(dh_p < -180.0, dh_p + 360.0, dh_p)
    dh_p = np.where(chroma_product == 0, 0.0, dh_p)
    dH_p = 2.0 * np.sqrt(chroma_product) * np.sin(np.radians(dh_p / 2.0))

    # Means (hue mean accounts for circularity)
    L_bar_p = (L1 + L2) / 2.0
    C_bar_p = (C1_p + C2_p) / 2.0
    h_sum = h1_p + h2_p
    h_bar_p = np.where(
        np.abs(h1_p - h2_p) <= 180.0,
        h_sum / 2.0,
        np.where(h_sum < 360.0, (h_sum + 360.0) / 2.0, (h_sum - 360.0) / 2.0),
    )
    h_bar_p = np.where(chroma_product == 0, h_sum, h_bar_p)

    T = (
        1.0
        - 0.17 * np.cos(np.radians(h_bar_p - 30.0))
        + 0.24 * np.cos(np.radians(2.0 * h_bar_p))
        + 0.32 * np.cos(np.radians(3.0 * h_bar_p + 6.0))
        - 0.20 * np.cos(np.radians(4.0 * h_bar_p - 63.0))
    )
    d_theta = 30.0 * np.exp(-(((h_bar_p - 275.0) / 25.0) ** 2))
    C_bar_p_7 = C_bar_p ** 7
    R_C = 2.0 * np.sqrt(C_bar_p_7 / (C_bar_p_7 + 25.0 ** 7))

    L_offset = (L_bar_p - 50.0) ** 2
    S_L = 1.0 + 0.015 * L_offset / np.sqrt(20.0 + L_offset)
    S_C = 1.0 + 0.045 * C_bar_p
    S_H = 1.0 + 0.015 * C_bar_p * T
    R_T = -np.sin(np.radians(2.0 * d_theta)) * R_C

    l_term = dL_p / (kL * S_L)
    c_term = dC_p / (kC * S_C)
    h_term = dH_p / (kH * S_H)

    return np.sqrt(l_term ** 2 + c_term ** 2 + h_term ** 2 + R_T * c_term * h_term)


# =============================================================================
# Colour-Space Models
# =============================================================================


def _white(params: Mapping[str, Any] | None) -> tuple[float, float, float]:
    params = params or {}
    return tuple(params.get("white", D65_WHITE))


def _tristimulus(catches: NDArray[np.float64]) -> dict[str, NDArray[np.float64]]:
    return {"X": catches[:, 0], "Y": catches[:, 1], "Z": catches[:, 2]}


def ciexyz_coordinates(
    catches: NDArray[np.float64],
    params: Mapping[str, Any] | None = None,
) -> dict[str, NDArray[np.float64]]:
    """
    Chromaticity coordinates.

    ``r_vec`` is the distance in the (x, y) plane from the chromaticity
    of the reference white (param ``white``, default D65).
    """
    catches = np.asarray(catches, dtype=np.float64)
    chroma = xyz_to_chromaticity(catches)
    white = xyz_to_chromaticity(np.asarray(_white(params), dtype=np.float64))
    x, y, z = chroma[:, 0], chroma[:, 1], chroma[:, 2]
    return {
        **_tristimulus(catches),
        "x": x,
        "y": y,
        "z": z,
        "r_vec": np.hypot(x - white[0], y - white[1]),
    }


def cielab_coordinates(
    catches: NDArray[np.float64],
    params: Mapping[str, Any] | None = None,
) -> dict[str, NDArray[np.float64]]:
    """CIELAB coordinates; ``r_vec`` is the chroma (distance from the L axis)."""
    catches = np.asarray(catches, dtype=np.float64)
    lab = xyz_to_lab(catches, _white(params))
    return {
        **_tristimulus(catches),
        "L": lab[:, 0],
        "a": lab[:, 1],
        "b": lab[:, 2],
        "r_vec": np.hypot(lab[:, 1], lab[:, 2]),
    }


def cielch_coordinates(
    catches: NDArray[np.float64],
    params: Mapping[str, Any] | None = None,
) -> dict[str, NDArray[np.float64]]:
    """CIELAB coordinates plus chroma C and hue angle h (degrees)."""
    columns = cielab_coordinates(catches, params)
    lch = lab_to_lch(np.column_stack([columns["L"], columns["a"], columns["b"]]))
    columns["C"] = lch[:, 1]
    columns["h"] = lch[:, 2]
    return columns


CIEXYZ = register_model(ColourSpaceModel(
    model_id=ModelId.CIEXYZ,
    channel_names=("X", "Y", "Z"),
    coordinates=ciexyz_coordinates,
    distance_axes=("x", "y"),
    chromatic=euclidean,
    achromatic=None,
))

CIELAB = register_model(ColourSpaceModel(
    model_id=ModelId.CIELAB,
    channel_names=("X", "Y", "Z"),
    coordinates=cielab_coordinates,
    distance_axes=("L", "a", "b"),
    chromatic=delta_e_cie2000,
    chromatic_label="CIE2000 distances",
    achromatic=LumContrast.WEBER,
    achromatic_column="L",
))

CIELCH = register_model(ColourSpaceModel(
    model_id=ModelId.CIELCH,
    channel_names=("X", "Y", "Z"),
    coordinates=cielch_coordinates,
    distance_axes=("L", "a", "b"),
    chromatic=delta_e_cie2000,
    chromatic_label="CIE2000 distances",
    achromatic=LumContrast.WEBER,
    achromatic_column="L",
))
