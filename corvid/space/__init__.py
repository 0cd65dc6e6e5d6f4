# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Colour-space projection for Corvid.

Importing this package registers the built-in models:
dispace, trispace, tcs, categorical, hexagon, coc, CIEXYZ, CIELAB, CIELCh.
"""

from corvid.space.model import (
    ColourSpaceModel,
    Normalization,
    get_model,
    register_model,
    registered_models,
)
from corvid.space import categorical, chromatic, cie, hexagon, tetrahedral  # noqa: F401  (registration)
from corvid.space.channels import ChannelOutcome, ChannelResolution, resolve_channels
from corvid.space.project import project_colour_space

__all__ = [
    "project_colour_space",
    "ColourSpaceModel",
    "Normalization",
    "register_model",
    "get_model",
    "registered_models",
    "ChannelOutcome",
    "ChannelResolution",
    "resolve_channels",
]
