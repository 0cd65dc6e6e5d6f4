# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Colour-space projection API.

Applies the same input policy to every registered model:

1. Resolve which input columns feed the model's channels
2. Check the catch scale and adaptation the model expects
3. Renormalize (or warn about) non-relative rows
4. Compute model coordinates and, when available, the gamut boundary

The input record is never modified; a new ColourSpaceRecord is returned.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import numpy as np

from corvid.diagnostics import warn
from corvid.schema import (
    CatchScale,
    ColourSpaceRecord,
    ModelId,
    QuantumCatchRecord,
)
from corvid.space.channels import normalize_rows, resolve_channels, row_sums_deviate
from corvid.space.model import Normalization, get_model

logger = logging.getLogger(__name__)


def as_quantum_catch_record(
    data: Any,
    *,
    qcatch: Optional[CatchScale | str] = None,
    achromatic: bool = False,
) -> QuantumCatchRecord:
    """Return data unchanged if it is a record, else build one from the table."""
    if isinstance(data, QuantumCatchRecord):
        return data
    return QuantumCatchRecord.from_table(data, qcatch=qcatch, achromatic=achromatic)


def project_colour_space(
    data: Any,
    model_id: ModelId | str,
    params: Optional[Mapping[str, Any]] = None,
    *,
    qcatch: Optional[CatchScale | str] = None,
) -> ColourSpaceRecord:
    """
    Project quantum catches into a geometric colour space.

    Args:
        data: QuantumCatchRecord, or a bare table (2-D array, mapping of
            column name -> values, or data-frame-like object)
        model_id: Colour space, as a ModelId or its value (e.g. "tcs")
        params: Model-specific options:
            - "white": reference white for CIE spaces (default D65)
            - "max_catches": gamut reference, overriding the record's
        qcatch: Catch scale of a bare table (ignored for records)

    Returns:
        ColourSpaceRecord tagged with the model and the input metadata

    Raises:
        ContractError: If the input has fewer channels than the model needs,
            or the model identifier is unknown
    """
    model = get_model(model_id)
    params = dict(params or {})
    record = as_quantum_catch_record(data, qcatch=qcatch)
    space = model.model_id.value

    resolution = resolve_channels(
        record.cone_channels,
        model.channel_names,
        declared=not record.inferred,
        space=space,
    )
    if resolution.message:
        warn(resolution.message)
    indices = list(resolution.indices)
    catches = record.catches[:, indices]

    if not record.inferred:
        if model.expected_scale is not None and record.catch_scale is not model.expected_scale:
            scale = record.catch_scale.value if record.catch_scale else "unknown"
            warn(
                f"Quantum catches are {scale!r} but the {space} space expects "
                f"{model.expected_scale.value!r} (hyperbolically transformed) catches"
            )
        if model.von_kries and not record.von_kries:
            warn(f"The {space} space expects von Kries adapted quantum catches")

    relative = record.relative
    if model.normalization is Normalization.REQUIRED:
        if not record.relative:
            catches = normalize_rows(catches)
            warn("Quantum catches are not relative, and have been transformed")
        elif row_sums_deviate(catches):
            catches = normalize_rows(catches)
            warn(
                "Quantum catches are declared relative but rows do not sum to 1; "
                "they have been renormalized"
            )
        relative = True
    elif model.normalization is Normalization.ADVISED:
        # Declared records are trusted; bare tables are judged by their row sums
        not_relative = row_sums_deviate(catches) if record.inferred else not record.relative
        if not_relative:
            warn("Quantum catches are not relative, which may produce unexpected results")

    columns = model.coordinates(catches, params)

    max_gamut = None
    max_catches = params.get("max_catches", record.max_catches)
    if model.gamut is not None and max_catches is not None:
        max_catches = np.atleast_2d(np.asarray(max_catches, dtype=np.float64))
        if max_catches.shape[1] > max(indices):
            max_gamut = model.gamut(max_catches[:, indices])
        else:
            logger.info(
                "Gamut reference has %d channel(s); %s needs %d, no gamut attached",
                max_catches.shape[1], space, model.n_channels,
            )

    return ColourSpaceRecord(
        labels=record.labels,
        model=model.model_id,
        columns=columns,
        cone_count=model.n_channels,
        catch_scale=record.catch_scale,
        relative=relative,
        visual_system=record.visual_system,
        achromatic=record.achromatic,
        background=record.background,
        illuminant=record.illuminant,
        von_kries=record.von_kries,
        lum=record.lum,
        max_gamut=max_gamut,
    )
