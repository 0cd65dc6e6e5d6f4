# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Colour-space model registry.

Each geometric space is described by one ColourSpaceModel that keeps
all of its rules together: which channels it needs, how input must be
normalized, how coordinates are computed and how distances are taken
between projected samples. The projector and the distance engine look
models up here and never branch on the model identity themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional

import numpy as np
from numpy.typing import NDArray

from corvid.diagnostics import ContractError
from corvid.schema import CatchScale, LumContrast, ModelId


CoordinateFn = Callable[[NDArray[np.float64], Mapping[str, Any]], dict[str, NDArray]]
ChromaticFn = Callable[[NDArray[np.float64], NDArray[np.float64]], NDArray[np.float64]]
GamutFn = Callable[[NDArray[np.float64]], NDArray[np.float64]]


class Normalization(Enum):
    """Whether a model needs relative (sum to 1) catches."""
    REQUIRED = "required"  # renormalize with a warning
    ADVISED = "advised"    # warn only
    NOT_USED = "not_used"  # leave untouched


@dataclass(frozen=True)
class ColourSpaceModel:
    """
    Rules for one geometric colour space.

    Attributes:
        model_id: Registry key
        channel_names: Expected receptor names, in model order
        coordinates: (catches, params) -> ordered column mapping
        distance_axes: Columns the chromatic distance is taken over
        chromatic: Distance between two (P, axes) coordinate arrays
        chromatic_label: Human-readable name of the chromatic formula
        normalization: Relative-catch requirement
        expected_scale: Catch scale the model is designed for, if any
        achromatic: Luminance contrast formula, or None if the model has none
        achromatic_column: Column used for luminance contrast; None means
            the record's achromatic channel
        von_kries: True if the model assumes von Kries adapted catches
        gamut: Maps normalized maximum catches to a gamut boundary
    """
    model_id: ModelId
    channel_names: tuple[str, ...]
    coordinates: CoordinateFn
    distance_axes: tuple[str, ...]
    chromatic: ChromaticFn
    chromatic_label: str = "unweighted Euclidean distances"
    normalization: Normalization = Normalization.NOT_USED
    expected_scale: Optional[CatchScale] = None
    achromatic: Optional[LumContrast] = LumContrast.WEBER
    achromatic_column: Optional[str] = None
    von_kries: bool = False
    gamut: Optional[GamutFn] = None

    @property
    def n_channels(self) -> int:
        """Number of chromatic channels the model needs."""
        return len(self.channel_names)


_REGISTRY: dict[ModelId, ColourSpaceModel] = {}


def register_model(model: ColourSpaceModel) -> ColourSpaceModel:
    """Add (or replace) a model in the registry and return it."""
    _REGISTRY[model.model_id] = model
    return model


def get_model(model_id: ModelId | str) -> ColourSpaceModel:
    """
    Look up a registered model.

    Raises:
        ContractError: If the identifier is unknown
    """
    try:
        key = model_id if isinstance(model_id, ModelId) else ModelId(model_id)
    except ValueError:
        key = None
    if key is None or key not in _REGISTRY:
        known = ", ".join(repr(m.value) for m in _REGISTRY)
        raise ContractError(
            f"Unknown colour space {model_id!r}; registered spaces are {known}"
        )
    return _REGISTRY[key]


def registered_models() -> tuple[ModelId, ...]:
    """Identifiers of all registered models, in registration order."""
    return tuple(_REGISTRY)
