# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Corvid -- Colour spaces and perceptual distances for animal vision.

Projects photoreceptor quantum catches into geometric colour spaces and
computes chromatic and achromatic contrasts between samples, either
noise-weighted (receptor-noise-limited model) or geometric.

Quick start::

    from corvid import QuantumCatchRecord, compute_distance, project_colour_space

    qc = QuantumCatchRecord.from_table(table, qcatch="Qi")
    tcs = project_colour_space(qc, "tcs")
    tcs["h_theta"]                       # hue angles
    compute_distance(qc).dS              # noise-weighted distances
    compute_distance(tcs).dS             # Euclidean distances in the tetrahedron
"""

from __future__ import annotations

__version__ = "1.0.0"

from corvid.diagnostics import ContractError, CorvidWarning
from corvid.distance import NoiseConfig, compute_distance
from corvid.schema import (
    CatchScale,
    ColourSpaceRecord,
    DistanceRecord,
    LumContrast,
    ModelId,
    NoiseMode,
    QuantumCatchRecord,
)
from corvid.space import get_model, project_colour_space, register_model
from corvid.subset import subset_by_label

__all__ = [
    # Core API
    "project_colour_space",
    "compute_distance",
    "subset_by_label",
    # Records
    "QuantumCatchRecord",
    "ColourSpaceRecord",
    "DistanceRecord",
    # Types (commonly needed)
    "CatchScale",
    "ModelId",
    "NoiseMode",
    "LumContrast",
    "NoiseConfig",
    # Model registry
    "register_model",
    "get_model",
    # Diagnostics
    "ContractError",
    "CorvidWarning",
    # Version
    "__version__",
]
