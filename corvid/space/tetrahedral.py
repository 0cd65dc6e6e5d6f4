# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Avian tetrahedral colour space.

Relative catches of the four cones (u, s, m, l) are barycentric
coordinates inside a regular tetrahedron whose centroid is the
achromatic point. Hue is the direction from the centroid (theta, phi);
saturation is the distance r from it.

References:
- Stoddard & Prum (2008), Evolution of avian plumage color in a
  tetrahedral color space. The American Naturalist 171(6), 755-776.
- Endler & Mielke (2005), Comparing entire colour patterns as birds
  see them. Biol. J. Linn. Soc. 86(4), 405-431.
"""

from __future__ import annotations

from typing import Any, Mapping

import numpy as np
from numpy.typing import NDArray

from corvid.schema import ModelId
from corvid.space.channels import normalize_rows
from corvid.space.metrics import euclidean
from corvid.space.model import ColourSpaceModel, Normalization, register_model


# =============================================================================
# Tetrahedron Geometry
# =============================================================================

_SQRT6_4 = np.sqrt(6.0) / 4.0
_SQRT2_4 = np.sqrt(2.0) / 4.0

# One vertex per cone, centroid at the origin. The m vertex is written as
# 2 * sqrt(2)/4 (== 1/sqrt(2)) so that equal stimulation cancels exactly.
VERTICES = np.array([
    [0.0, 0.0, 0.75],                 # u
    [-_SQRT6_4, -_SQRT2_4, -0.25],    # s
    [0.0, 2.0 * _SQRT2_4, -0.25],     # m
    [_SQRT6_4, -_SQRT2_4, -0.25],     # l
], dtype=np.float64)
VERTICES.setflags(write=False)

# Hue direction of each vertex
_VERTEX_THETA = np.arctan2(VERTICES[:, 1], VERTICES[:, 0])
_VERTEX_PHI = np.arcsin(VERTICES[:, 2] / np.linalg.norm(VERTICES, axis=1))

# Points this close to the centroid have no defined hue.
_CENTROID_ATOL = 1e-12


def barycentric_to_cartesian(catches: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Map relative (u, s, m, l) catches to tetrahedral x, y, z.

    Args:
        catches: Array of shape (..., 4), rows summing to 1

    Returns:
        Array of shape (..., 3)
    """
    catches = np.asarray(catches, dtype=np.float64)
    return np.einsum("...j,jk->...k", catches, VERTICES)


def _hue_cosines(theta: NDArray[np.float64], phi: NDArray[np.float64]) -> NDArray[np.float64]:
    """Cosine of the angle between each hue direction and each vertex, (n, 4)."""
    theta = theta[:, np.newaxis]
    phi = phi[:, np.newaxis]
    return (
        np.cos(phi) * np.cos(_VERTEX_PHI) * np.cos(theta - _VERTEX_THETA)
        + np.sin(phi) * np.sin(_VERTEX_PHI)
    )


def tetrahedral_coordinates(
    catches: NDArray[np.float64],
    params: Mapping[str, Any] | None = None,
) -> dict[str, NDArray[np.float64]]:
    """
    Tetrahedral coordinates and hue/saturation descriptors.

    Args:
        catches: Relative catches, shape (n, 4), in u, s, m, l order
        params: Unused

    Returns:
        Ordered columns:
        - u, s, m, l: the catches used
        - u_r .. l_r: cone stimulation for the hue, as a function of r
        - x, y, z: Cartesian coordinates
        - h_theta, h_phi: hue angles in radians (NaN at the centroid)
        - r_vec: distance from the centroid (NaN at the centroid)
        - r_max: largest r reachable for the hue
        - r_achieved: r_vec / r_max
    """
    catches = np.asarray(catches, dtype=np.float64)
    xyz = barycentric_to_cartesian(catches)
    x, y, z = xyz[:, 0], xyz[:, 1], xyz[:, 2]

    r_vec = np.sqrt(x * x + y * y + z * z)
    r_vec[r_vec <= _CENTROID_ATOL] = np.nan

    h_theta = np.where(np.isnan(r_vec), np.nan, np.arctan2(y, x))
    h_phi = np.arcsin(np.clip(z / r_vec, -1.0, 1.0))

    cosalpha = _hue_cosines(h_theta, h_phi)
    # The vertex closest to the antipode of the hue bounds how far it extends
    r_max = 0.25 / -np.min(cosalpha, axis=1)
    r_achieved = r_vec / r_max

    stimulation = r_vec[:, np.newaxis] * cosalpha

    return {
        "u": catches[:, 0],
        "s": catches[:, 1],
        "m": catches[:, 2],
        "l": catches[:, 3],
        "u_r": stimulation[:, 0],
        "s_r": stimulation[:, 1],
        "m_r": stimulation[:, 2],
        "l_r": stimulation[:, 3],
        "x": x,
        "y": y,
        "z": z,
        "h_theta": h_theta,
        "h_phi": h_phi,
        "r_vec": r_vec,
        "r_max": r_max,
        "r_achieved": r_achieved,
    }


def tetrahedral_gamut(max_catches: NDArray[np.float64]) -> NDArray[np.float64]:
    """Project maximum catches into the tetrahedron, shape (m, 3)."""
    return barycentric_to_cartesian(normalize_rows(max_catches))


TCS = register_model(ColourSpaceModel(
    model_id=ModelId.TCS,
    channel_names=("u", "s", "m", "l"),
    coordinates=tetrahedral_coordinates,
    distance_axes=("x", "y", "z"),
    chromatic=euclidean,
    normalization=Normalization.REQUIRED,
    gamut=tetrahedral_gamut,
))
