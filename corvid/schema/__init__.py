# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Record definitions for Corvid.

All types in this module are immutable (frozen dataclasses).
Once a record is produced, it is a fact and cannot be altered;
transforms always return new records.
"""

from corvid.schema.records import (
    RELATIVE_TOLERANCE,
    SCHEMA_VERSION,
    CatchScale,
    ColourSpaceRecord,
    DistanceRecord,
    LumContrast,
    ModelId,
    NoiseMode,
    QuantumCatchRecord,
)

__all__ = [
    # Version
    "SCHEMA_VERSION",
    "RELATIVE_TOLERANCE",
    # Enumerations
    "CatchScale",
    "ModelId",
    "NoiseMode",
    "LumContrast",
    # Records
    "QuantumCatchRecord",
    "ColourSpaceRecord",
    "DistanceRecord",
]
