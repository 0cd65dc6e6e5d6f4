# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""
Receptor-noise-limited (RNL) colour distances.

Colour discrimination is assumed to be limited by noise in the
photoreceptor channels. The noise of each channel follows from its
relative density and an empirically measured Weber fraction; the
distance between two stimuli is their difference in log quantum catch,
weighted by that noise.

For K chromatic channels the distance is

    dS^2 = sum over (K-2)-subsets S of [ prod_{i in S} e_i * (df_d - df_e) ]^2
           -------------------------------------------------------------
                   sum over (K-1)-subsets S of [ prod_{i in S} e_i ]^2

where {d, e} are the two channels not in S and df = f1 - f2 are the
differences in log catch. This reduces to the classical di-, tri- and
tetrachromatic formulas and holds for any K >= 2.

References:
- Vorobyev & Osorio (1998), Receptor noise as a determinant of colour
  thresholds. Proc. R. Soc. B 265, 351-358.
- Vorobyev et al. (1998), Tetrachromacy, oil droplets and bird plumage
  colours. J. Comp. Physiol. A 183, 621-633.
- Olsson, Lind & Kelber (2017), Chromatic and achromatic vision:
  parameter choice and limitations for reliable model predictions.
  Behavioral Ecology 29, 273-282.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from itertools import combinations
from typing import Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from corvid.diagnostics import ContractError
from corvid.schema import NoiseMode


# Synthetic reference stimuli, in raw quantum-catch units
REFERENCE_PEAK = 9.0          # stimulated channel of a pure stimulus
REFERENCE_FLOOR = 0.001       # other channels of a pure stimulus
REFERENCE_ACHROMATIC = 1e-10  # every channel of the achromatic limit

# Weber fraction given for all channels, or for the reference channel only
Weber = Union[float, Sequence[float]]


@dataclass(frozen=True)
class NoiseConfig:
    """Parameters of the receptor-noise model."""

    noise: NoiseMode = NoiseMode.NEURAL

    # Relative photoreceptor densities, one per chromatic channel.
    # Default: Pekin robin (Leiothrix lutea), UVS:SWS:MWS:LWS = 1:2:2:4
    density: tuple[float, ...] = (1.0, 2.0, 2.0, 4.0)

    # Weber fraction of the reference channel (or one per channel).
    # 0.1 is the LWS estimate for Leiothrix lutea.
    weber: Weber = 0.1

    # Channel the single Weber fraction was measured for:
    # "longest" (the last channel) or a 0-based channel index
    weber_ref: Union[int, str] = "longest"

    # Weber fraction of the achromatic channel
    weber_achro: float = 0.1

    def reference_index(self) -> int:
        """0-based index of the Weber reference channel."""
        n_density = len(self.density)
        if self.weber_ref == "longest":
            return n_density - 1
        if isinstance(self.weber_ref, str) or isinstance(self.weber_ref, bool):
            raise ContractError(
                f'weber_ref must be "longest" or a channel index, got {self.weber_ref!r}'
            )
        ref = int(self.weber_ref)
        if not 0 <= ref < n_density:
            raise ContractError(
                f"Reference cone class for the Weber fraction (weber_ref={ref}) "
                f"is outside the vector of relative cone densities "
                f"(valid indices 0..{n_density - 1})"
            )
        return ref

    def validate(self, cone_count: int) -> None:
        """
        Check the parameters against the number of chromatic channels.

        Raises:
            ContractError: On any mismatch
        """
        self.reference_index()
        if len(self.density) != cone_count:
            raise ContractError(
                f"Vector of relative cone densities has {len(self.density)} "
                f"value(s) but the visual model has {cone_count} cone(s)"
            )
        if cone_count < 2:
            raise ContractError(
                f"Colour distances need at least 2 chromatic channels, got {cone_count}"
            )
        if np.any(np.asarray(self.density, dtype=np.float64) <= 0):
            raise ContractError(f"Cone densities must be positive, got {self.density}")
        n_weber = np.size(self.weber)
        if n_weber not in (1, cone_count):
            raise ContractError(
                f"weber must be a single value or one per cone ({cone_count}), "
                f"got {n_weber} values"
            )


# =============================================================================
# Noise Estimates
# =============================================================================


def relative_density(density: Sequence[float]) -> NDArray[np.float64]:
    """Densities scaled to sum to 1."""
    density = np.asarray(density, dtype=np.float64)
    return density / density.sum()


def noise_to_signal(
    reln: NDArray[np.float64],
    weber: Weber,
    weber_ref: int,
) -> NDArray[np.float64]:
    """
    Back-calculate the noise-to-signal ratio v of each channel.

    With a single Weber fraction, v is derived at the reference channel
    and shared by all channels; with one Weber fraction per channel each
    channel gets its own v.
    """
    weber = np.asarray(weber, dtype=np.float64)
    if weber.size == reln.size and reln.size > 1:
        return weber * np.sqrt(reln)
    return np.full(reln.shape, float(weber.reshape(-1)[0]) * np.sqrt(reln[weber_ref]))


def channel_noise(
    reln: NDArray[np.float64],
    v: NDArray[np.float64],
    linear1: Optional[NDArray[np.float64]] = None,
    linear2: Optional[NDArray[np.float64]] = None,
) -> NDArray[np.float64]:
    """
    Noise e of each channel.

    Neural noise (no catches given) is constant, shape (K,). Quantum
    noise adds photon shot noise from the linear catches of both
    stimuli in each pair, shape (P, K).
    """
    if linear1 is None or linear2 is None:
        return v / np.sqrt(reln)
    return np.sqrt(v ** 2 / reln + 2.0 / (linear1 + linear2))


# =============================================================================
# Combinatorial Distance
# =============================================================================


@lru_cache(maxsize=None)
def subset_tables(
    k: int,
) -> tuple[tuple[tuple[int, ...], ...], tuple[tuple[int, int], ...], tuple[tuple[int, ...], ...]]:
    """
    Channel index lists for K channels.

    Returns:
        (numerator subsets of size K-2,
         the complementary channel pair of each,
         denominator subsets of size K-1)
    """
    channels = tuple(range(k))
    numerator = tuple(combinations(channels, k - 2))
    complements = tuple(
        tuple(c for c in channels if c not in subset) for subset in numerator
    )
    denominator = tuple(combinations(channels, k - 1))
    return numerator, complements, denominator


def _subset_product(e: NDArray[np.float64], subset: tuple[int, ...]) -> NDArray[np.float64]:
    """Product of noise terms over a channel subset (1 for the empty subset)."""
    return np.prod(e[..., list(subset)], axis=-1)


def rnl_distance(
    f1: NDArray[np.float64],
    f2: NDArray[np.float64],
    e: NDArray[np.float64],
) -> NDArray[np.float64]:
    """
    Noise-weighted distance between matching rows of f1 and f2.

    Args:
        f1, f2: Log quantum catches, shape (P, K)
        e: Channel noise, shape (K,) or (P, K)

    Returns:
        dS, shape (P,)
    """
    f1 = np.asarray(f1, dtype=np.float64)
    f2 = np.asarray(f2, dtype=np.float64)
    k = f1.shape[1]
    numerator_sets, complements, denominator_sets = subset_tables(k)

    df = f1 - f2
    numerator = np.zeros(f1.shape[0])
    for subset, (d, c) in zip(numerator_sets, complements):
        term = _subset_product(e, subset) * (df[:, d] - df[:, c])
        numerator += term ** 2

    denominator = sum(_subset_product(e, subset) ** 2 for subset in denominator_sets)

    return np.sqrt(numerator / denominator)


def achromatic_contrast(
    lum1: NDArray[np.float64],
    lum2: NDArray[np.float64],
    weber_achro: float,
    linear1: Optional[NDArray[np.float64]] = None,
    linear2: Optional[NDArray[np.float64]] = None,
) -> NDArray[np.float64]:
    """
    Noise-weighted achromatic contrast dL.

    Args:
        lum1, lum2: Log achromatic catches
        weber_achro: Weber fraction of the achromatic channel
        linear1, linear2: Linear achromatic catches (quantum noise only)

    Returns:
        |lum1 - lum2| / w, rounded to 7 decimals
    """
    delta = np.asarray(lum1, dtype=np.float64) - np.asarray(lum2, dtype=np.float64)
    if linear1 is None or linear2 is None:
        w = weber_achro
    else:
        w = np.sqrt(weber_achro ** 2 + 2.0 / (linear1 + linear2))
    return np.round(np.abs(delta / w), 7)


# =============================================================================
# Reference Stimuli
# =============================================================================


def reference_stimuli(
    log_catches: NDArray[np.float64],
    labels: Sequence[str],
    channels: Sequence[str],
) -> tuple[tuple[str, ...], NDArray[np.float64]]:
    """
    Stimuli that put real distances on an interpretable scale.

    Rows are the first min(n, K) samples, an achromatic-limit stimulus
    (near zero on every channel) and K pure stimuli (one channel
    stimulated, the others near zero), all in log units.

    Returns:
        (labels, log catches of shape (min(n, K) + 1 + K, K))
    """
    log_catches = np.asarray(log_catches, dtype=np.float64)
    k = log_catches.shape[1]
    n_real = min(log_catches.shape[0], k)

    pure = np.full((k, k), REFERENCE_FLOOR)
    np.fill_diagonal(pure, REFERENCE_PEAK)

    rows = np.vstack([
        log_catches[:n_real],
        np.full((1, k), np.log(REFERENCE_ACHROMATIC)),
        np.log(pure),
    ])
    ref_labels = (
        tuple(labels[:n_real])
        + ("ref.achro",)
        + tuple(f"ref.{ch}" for ch in channels)
    )
    return ref_labels, rows
