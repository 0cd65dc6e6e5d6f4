# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Colour distance API.

Quantum catches go through the receptor-noise model; projected colour
spaces use the geometric metric their model declares. Either way the
result is one DistanceRecord with a row per unordered sample pair.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from corvid.diagnostics import ContractError
from corvid.distance.noise import (
    NoiseConfig,
    Weber,
    achromatic_contrast,
    channel_noise,
    noise_to_signal,
    reference_stimuli,
    relative_density,
    rnl_distance,
)
from corvid.distance.pairs import Patterns, as_patterns, filter_pairs, pair_indices
from corvid.schema import (
    CatchScale,
    ColourSpaceRecord,
    DistanceRecord,
    LumContrast,
    NoiseMode,
    QuantumCatchRecord,
)
from corvid.space import get_model
from corvid.space.metrics import lum_contrast

logger = logging.getLogger(__name__)

_CONTRAST_NAMES = {
    LumContrast.SIMPLE: "simple",
    LumContrast.WEBER: "Weber",
    LumContrast.MICHELSON: "Michelson",
}


def compute_distance(
    data: Any,
    noise: Union[NoiseMode, str] = NoiseMode.NEURAL,
    subset: Optional[Patterns] = None,
    achromatic: bool = False,
    density: Sequence[float] = (1, 2, 2, 4),
    weber: Weber = 0.1,
    weber_ref: Union[int, str] = "longest",
    weber_achro: float = 0.1,
    *,
    qcatch: Optional[Union[CatchScale, str]] = None,
) -> DistanceRecord:
    """
    Pairwise colour distances.

    Args:
        data: One of:
            - QuantumCatchRecord: noise-weighted (RNL) distances
            - ColourSpaceRecord: geometric distances of its model
            - Bare table of quantum catches: RNL distances, ``qcatch``
              required
        noise: "neural" or "quantum" noise (RNL only)
        subset: One or two label patterns selecting the pairs returned
        achromatic: Also compute achromatic (luminance) contrast
        density: Relative photoreceptor densities (RNL only)
        weber: Weber fraction of the reference channel, or one per channel
        weber_ref: "longest" or 0-based index of the Weber reference channel
        weber_achro: Weber fraction of the achromatic channel (RNL only)
        qcatch: Scale of a bare table's catches: "Qi" or "fi"

    Returns:
        DistanceRecord. ``dL`` is NaN unless achromatic contrast was requested
        and the input declares an achromatic channel. RNL distances carry
        ``reference`` distances between synthetic stimuli.

    Raises:
        ContractError: On inconsistent parameters or input
    """
    patterns = as_patterns(subset)
    if isinstance(noise, str):
        try:
            noise = NoiseMode(noise)
        except ValueError:
            raise ContractError(
                f'noise must be "neural" or "quantum", got {noise!r}'
            ) from None

    if isinstance(data, ColourSpaceRecord):
        result = _geometric_distance(data, achromatic)
    else:
        config = NoiseConfig(
            noise=noise,
            density=tuple(float(d) for d in density),
            weber=weber,
            weber_ref=weber_ref,
            weber_achro=weber_achro,
        )
        result = _receptor_noise_distance(data, config, achromatic, qcatch)

    return filter_pairs(result, patterns)


# =============================================================================
# Receptor-Noise Path
# =============================================================================


def _receptor_noise_record(
    data: Any,
    config: NoiseConfig,
    achromatic: bool,
    qcatch: Optional[Union[CatchScale, str]],
) -> QuantumCatchRecord:
    """Accept a record as is, or infer one from a bare table."""
    if isinstance(data, QuantumCatchRecord):
        return data
    if config.noise is NoiseMode.QUANTUM:
        raise ContractError(
            "Quantum receptor noise needs a QuantumCatchRecord from a visual model"
        )
    record = QuantumCatchRecord.from_table(data, qcatch=qcatch, achromatic=achromatic)
    if achromatic:
        logger.info(
            "Number of cones assumed to be %d (last column used only for "
            "achromatic contrast)", record.cone_count,
        )
    else:
        logger.info("Number of cones assumed to be %d", record.cone_count)
    return record


def _log_and_linear(
    values: NDArray[np.float64],
    scale: CatchScale,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """(log catches, linear catches) for a catch scale."""
    if scale is CatchScale.FI:
        return values, np.exp(values)
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.log(values), values


def _receptor_noise_distance(
    data: Any,
    config: NoiseConfig,
    achromatic: bool,
    qcatch: Optional[Union[CatchScale, str]],
) -> DistanceRecord:
    record = _receptor_noise_record(data, config, achromatic, qcatch)

    if record.catch_scale is None:
        raise ContractError(
            'Scale of quantum catches not defined ("Qi" or "fi" in argument qcatch)'
        )
    if record.catch_scale is CatchScale.EI:
        raise ContractError(
            "Receptor-noise model not compatible with hyperbolically transformed "
            "quantum catches (Ei)"
        )
    if record.relative:
        logger.info("Quantum catches are relative, distances may not be meaningful")

    if achromatic and not record.has_achromatic:
        logger.info(
            'achromatic=True but the visual model has achromatic channel "none"; '
            "achromatic contrast not calculated"
        )
        achromatic = False

    k = record.cone_count
    config.validate(k)
    quantum = config.noise is NoiseMode.QUANTUM

    log_all, linear_all = _log_and_linear(record.data, record.catch_scale)
    log_catches = log_all[:, :k]
    linear_catches = linear_all[:, :k]

    if quantum:
        checked = log_all if achromatic else log_catches
        n_negative = int(np.sum(checked < 0))
        if n_negative:
            raise ContractError(
                f"{n_negative} negative quantum-catch value(s) returned following "
                "log-transformation, as required when noise = 'quantum', so "
                "distances cannot be calculated. This typically results from very "
                "small raw quantum catch estimates (< 1). Consider whether the "
                "illuminant is properly scaled, and the appropriate form of noise "
                "is being calculated."
            )

    reln = relative_density(config.density)
    v = noise_to_signal(reln, config.weber, config.reference_index())

    def chromatic(f: NDArray, q: NDArray, i: NDArray, j: NDArray) -> NDArray:
        if quantum:
            e = channel_noise(reln, v, q[i], q[j])
        else:
            e = channel_noise(reln, v)
        return rnl_distance(f[i], f[j], e)

    def luminance(f: NDArray, q: NDArray, i: NDArray, j: NDArray) -> NDArray:
        if quantum:
            return achromatic_contrast(f[i], f[j], config.weber_achro, q[i], q[j])
        return achromatic_contrast(f[i], f[j], config.weber_achro)

    i, j = pair_indices(record.n_samples)
    dS = chromatic(log_catches, linear_catches, i, j)

    ref_labels, ref_log = reference_stimuli(log_catches, record.labels, record.cone_channels)
    ref_linear = np.exp(ref_log)
    ri, rj = pair_indices(len(ref_labels))
    ref_dS = chromatic(ref_log, ref_linear, ri, rj)

    method = "noise-weighted Euclidean distances"
    if achromatic:
        method += " and noise-weighted luminance contrasts"
        lum_log = log_all[:, k]
        dL = luminance(lum_log, linear_all[:, k], i, j)

        n_real = len(ref_labels) - k - 1
        ref_lum = np.concatenate([
            lum_log[:n_real],
            np.full(k + 1, ref_log[n_real, 0]),
        ])
        ref_dL = luminance(ref_lum, np.exp(ref_lum), ri, rj)
    else:
        dL = np.full(len(i), np.nan)
        ref_dL = np.full(len(ri), np.nan)

    logger.info("Calculating %s", method)

    reference = DistanceRecord(
        patch1=tuple(ref_labels[x] for x in ri),
        patch2=tuple(ref_labels[x] for x in rj),
        dS=ref_dS,
        dL=ref_dL,
        noise_weighted=True,
        cone_count=k,
        method=method,
    )
    return DistanceRecord(
        patch1=tuple(record.labels[x] for x in i),
        patch2=tuple(record.labels[x] for x in j),
        dS=dS,
        dL=dL,
        noise_weighted=True,
        cone_count=k,
        method=method,
        reference=reference,
    )


# =============================================================================
# Geometric Path
# =============================================================================


def _geometric_distance(record: ColourSpaceRecord, achromatic: bool) -> DistanceRecord:
    model = get_model(record.model)
    i, j = pair_indices(record.n_samples)

    coords = record.coordinates(model.distance_axes)
    dS = model.chromatic(coords[i], coords[j])
    method = model.chromatic_label

    if model.achromatic_column is not None:
        lum = np.asarray(record[model.achromatic_column], dtype=np.float64)
    else:
        lum = record.lum

    compute_dL = (
        achromatic
        and record.has_achromatic
        and model.achromatic is not None
        and lum is not None
    )
    if compute_dL:
        dL = lum_contrast(lum[i], lum[j], model.achromatic)
        method += f" and {_CONTRAST_NAMES[model.achromatic]} luminance contrast"
    else:
        if achromatic:
            logger.info(
                "achromatic=True but no achromatic channel is available for the "
                "%s space; achromatic contrast not calculated", model.model_id.value,
            )
        dL = np.full(len(i), np.nan)

    logger.info("Calculating %s", method)

    return DistanceRecord(
        patch1=tuple(record.labels[x] for x in i),
        patch2=tuple(record.labels[x] for x in j),
        dS=dS,
        dL=dL,
        noise_weighted=False,
        cone_count=record.cone_count,
        method=method,
    )
