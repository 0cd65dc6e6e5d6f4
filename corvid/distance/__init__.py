# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Colour distances for Corvid.

Receptor-noise-limited distances for quantum catches, geometric
distances for projected colour spaces.
"""

from corvid.distance.engine import compute_distance
from corvid.distance.noise import NoiseConfig, rnl_distance
from corvid.distance.pairs import filter_pairs, pair_indices

__all__ = [
    "compute_distance",
    "NoiseConfig",
    "rnl_distance",
    "filter_pairs",
    "pair_indices",
]
