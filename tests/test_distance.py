# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""Tests for the colour distance API."""

import logging
import math

import numpy as np
import pytest

from corvid import (
    ContractError,
    CorvidWarning,
    DistanceRecord,
    QuantumCatchRecord,
    compute_distance,
    project_colour_space,
)
from corvid.distance.noise import NoiseConfig, channel_noise, noise_to_signal, relative_density, rnl_distance


def _tetrachromat(n=4, achromatic=False, scale=100.0) -> QuantumCatchRecord:
    """Bird-like quantum catches, well above 1 so logs are positive."""
    rng = np.random.RandomState(17)
    catches = rng.uniform(1.0, 3.0, size=(n, 4)) * scale
    channels = ("u", "s", "m", "l")
    if achromatic:
        catches = np.column_stack([catches, rng.uniform(1.0, 3.0, size=n) * scale])
        channels += ("dbl",)
    return QuantumCatchRecord(
        labels=tuple(f"patch{i}" for i in range(n)),
        channels=channels,
        data=catches,
        cone_count=4,
        visual_system="avg.v",
        achromatic="bt.dc" if achromatic else "none",
    )


class TestDispatch:
    """Every unordered sample pair gets one distance, in label order."""

    def test_completeness(self):
        for n in (2, 3, 6):
            dist = compute_distance(_tetrachromat(n))
            assert len(dist) == n * (n - 1) // 2
            assert len(set(dist.pairs)) == len(dist)

    def test_canonical_pair_order(self):
        dist = compute_distance(_tetrachromat(3))
        assert dist.pairs == (
            ("patch0", "patch1"), ("patch0", "patch2"), ("patch1", "patch2"),
        )

    def test_deterministic(self):
        qc = _tetrachromat(5, achromatic=True)
        a = compute_distance(qc, achromatic=True)
        b = compute_distance(qc, achromatic=True)
        np.testing.assert_array_equal(a.dS, b.dS)
        np.testing.assert_array_equal(a.dL, b.dL)

    def test_geometric_record(self):
        tcs = project_colour_space(
            QuantumCatchRecord.from_table(np.full((2, 4), 0.25) + [[0, 0, 0, 0], [0.1, -0.1, 0, 0]]),
            "tcs",
        )
        dist = compute_distance(tcs)
        assert not dist.noise_weighted
        assert dist.reference is None
        assert dist.method == "unweighted Euclidean distances"

    def test_unknown_noise(self):
        with pytest.raises(ContractError, match="noise must be"):
            compute_distance(_tetrachromat(2), noise="photon")


class TestReceptorNoise:
    """Quantum catch records are compared with the receptor noise model."""

    def test_matches_model_formula(self):
        qc = _tetrachromat(3)
        dist = compute_distance(qc)
        reln = relative_density((1, 2, 2, 4))
        e = channel_noise(reln, noise_to_signal(reln, 0.1, 3))
        f = np.log(qc.data)
        assert dist.dS[0] == pytest.approx(rnl_distance(f[:1], f[1:2], e)[0])
        assert dist.noise_weighted
        assert dist.method == "noise-weighted Euclidean distances"

    def test_log_scale_input(self):
        qc = _tetrachromat(3)
        fi = QuantumCatchRecord(
            labels=qc.labels, channels=qc.channels, data=np.log(qc.data),
            cone_count=4, catch_scale="fi",
        )
        np.testing.assert_allclose(compute_distance(fi).dS, compute_distance(qc).dS)

    def test_scale_invariant_under_neural_noise(self):
        low = compute_distance(_tetrachromat(3, scale=10.0))
        high = compute_distance(_tetrachromat(3, scale=1000.0))
        np.testing.assert_allclose(low.dS, high.dS)

    def test_quantum_noise_depends_on_intensity(self):
        qc = _tetrachromat(3)
        neural = compute_distance(qc)
        quantum = compute_distance(qc, noise="quantum")
        assert not np.allclose(quantum.dS, neural.dS)

    def test_quantum_converges_to_neural_at_high_intensity(self):
        qc = _tetrachromat(3, scale=1e9)
        neural = compute_distance(qc)
        quantum = compute_distance(qc, noise="quantum")
        np.testing.assert_allclose(quantum.dS, neural.dS, rtol=1e-6)

    def test_quantum_rejects_negative_logs(self):
        qc = _tetrachromat(3, scale=0.1)
        with pytest.raises(ContractError, match="illuminant"):
            compute_distance(qc, noise="quantum")

    def test_density_mismatch(self):
        with pytest.raises(ContractError, match="relative cone densities"):
            compute_distance(_tetrachromat(3), density=(1, 2, 2))

    def test_weber_ref_index(self):
        qc = _tetrachromat(3)
        by_index = compute_distance(qc, weber_ref=3)
        longest = compute_distance(qc, weber_ref="longest")
        np.testing.assert_allclose(by_index.dS, longest.dS)

    def test_weber_ref_out_of_range(self):
        with pytest.raises(ContractError, match="outside"):
            compute_distance(_tetrachromat(3), weber_ref=7)

    def test_ei_rejected(self):
        qc = _tetrachromat(3)
        ei = QuantumCatchRecord(
            labels=qc.labels, channels=qc.channels, data=qc.data / (qc.data + 1),
            cone_count=4, catch_scale="Ei",
        )
        with pytest.raises(ContractError, match="Ei"):
            compute_distance(ei)

    def test_reference_distances(self):
        dist = compute_distance(_tetrachromat(5))
        ref = dist.reference
        labels = set(ref.patch1) | set(ref.patch2)
        assert labels == {
            "patch0", "patch1", "patch2", "patch3",
            "ref.achro", "ref.u", "ref.s", "ref.m", "ref.l",
        }
        assert len(ref) == 9 * 8 // 2
        assert ref.get("patch0", "patch1")[0] == pytest.approx(dist.get("patch0", "patch1")[0])

    def test_relative_input_logged(self, caplog):
        qc = QuantumCatchRecord(
            labels=("a", "b"), channels=("s", "l"), data=[[0.4, 0.6], [0.5, 0.5]],
            cone_count=2, relative=True,
        )
        with caplog.at_level(logging.INFO, logger="corvid.distance.engine"):
            compute_distance(qc, density=(1, 1))
        assert "relative" in caplog.text


class TestAchromatic:
    """Luminance contrast is computed only when requested and declared."""

    def test_dl_nan_unless_requested(self):
        dist = compute_distance(_tetrachromat(3, achromatic=True))
        assert np.isnan(dist.dL).all()
        assert not dist.has_achromatic

    def test_dl_computed(self):
        qc = _tetrachromat(3, achromatic=True)
        dist = compute_distance(qc, achromatic=True, weber_achro=0.2)
        lum = np.log(qc.lum)
        assert dist.dL[0] == pytest.approx(abs(lum[0] - lum[1]) / 0.2, abs=1e-6)
        assert dist.method.endswith("noise-weighted luminance contrasts")
        assert not np.isnan(dist.reference.dL).any()

    def test_dl_nan_without_achromatic_channel(self, caplog):
        with caplog.at_level(logging.INFO, logger="corvid.distance.engine"):
            dist = compute_distance(_tetrachromat(3), achromatic=True)
        assert np.isnan(dist.dL).all()
        assert "achromatic contrast not calculated" in caplog.text

    def test_hexagon_simple_ratio(self):
        qc = QuantumCatchRecord(
            labels=("a", "b"),
            channels=("s", "m", "l", "lum"),
            data=[[0.2, 0.5, 0.8, 10.0], [0.6, 0.3, 0.4, 20.0]],
            cone_count=3,
            catch_scale="Ei",
            von_kries=True,
            achromatic="l",
        )
        dist = compute_distance(project_colour_space(qc, "hexagon"), achromatic=True)
        # Ratio of the l excitations, not of the achromatic channel
        assert dist.dL[0] == pytest.approx(2.0)
        assert dist.method == "unweighted Euclidean distances and simple luminance contrast"

    def test_hexagon_needs_achromatic_channel(self):
        qc = QuantumCatchRecord(
            labels=("a", "b"),
            channels=("s", "m", "l"),
            data=[[0.2, 0.5, 0.8], [0.6, 0.3, 0.4]],
            cone_count=3,
            catch_scale="Ei",
            von_kries=True,
        )
        dist = compute_distance(project_colour_space(qc, "hexagon"), achromatic=True)
        assert np.isnan(dist.dL).all()

    def test_tcs_weber(self):
        qc = QuantumCatchRecord(
            labels=("a", "b"),
            channels=("u", "s", "m", "l", "lum"),
            data=[[0.1, 0.2, 0.3, 0.4, 2.0], [0.25, 0.25, 0.25, 0.25, 3.0]],
            cone_count=4,
            relative=True,
            achromatic="bt.dc",
        )
        dist = compute_distance(project_colour_space(qc, "tcs"), achromatic=True)
        assert dist.dL[0] == pytest.approx(0.5)
        assert dist.method == "unweighted Euclidean distances and Weber luminance contrast"


class TestGeometricFormulas:
    """Colour space records use their model's chromatic metric."""

    def test_coc_manhattan(self):
        qc = QuantumCatchRecord(
            labels=("a", "b"),
            channels=("s", "m", "l"),
            data=[[0.0, 1.0, 0.0], [0.0, 0.0, 1.0]],
            cone_count=3,
            catch_scale="Ei",
            von_kries=True,
        )
        coc = project_colour_space(qc, "coc")
        dist = compute_distance(coc)
        expected = abs(coc["x"][0] - coc["x"][1]) + abs(coc["y"][0] - coc["y"][1])
        assert dist.dS[0] == pytest.approx(expected)
        assert dist.method == "Manhattan distances"

    def test_trispace_euclidean(self):
        tri = project_colour_space(
            QuantumCatchRecord.from_table({"s": [1.0, 0.0], "m": [0.0, 1.0], "l": [0.0, 0.0]}),
            "trispace",
        )
        dist = compute_distance(tri)
        assert dist.dS[0] == pytest.approx(math.hypot(tri["x"][0] - tri["x"][1], tri["y"][0] - tri["y"][1]))


class TestBareTables:
    """Bare tables need a catch scale and infer their cone count."""

    def test_needs_scale(self):
        with pytest.raises(ContractError, match="qcatch"):
            compute_distance(np.full((3, 4), 50.0))

    def test_cone_count_inferred(self, caplog):
        table = np.random.RandomState(1).uniform(10, 20, size=(3, 5))
        with caplog.at_level(logging.INFO, logger="corvid.distance.engine"):
            dist = compute_distance(table, qcatch="Qi", achromatic=True)
        assert dist.cone_count == 4
        assert "Number of cones assumed to be 4" in caplog.text
        assert dist.has_achromatic

    def test_nan_column_ignored(self):
        table = np.array([[10.0, np.nan, 20.0], [15.0, np.nan, 12.0]])
        dist = compute_distance(table, qcatch="Qi", density=(1, 1))
        assert dist.cone_count == 2

    def test_quantum_needs_record(self):
        with pytest.raises(ContractError, match="QuantumCatchRecord"):
            compute_distance(np.full((3, 4), 50.0), noise="quantum", qcatch="Qi")


class TestSubsetting:
    """Label patterns restrict which pairs are compared."""

    def _dist(self) -> DistanceRecord:
        qc = _tetrachromat(4)
        labelled = QuantumCatchRecord(
            labels=("crown", "throat", "wing", "tail"),
            channels=qc.channels, data=qc.data, cone_count=4,
        )
        return compute_distance(labelled, subset=None)

    def test_single_pattern_union(self):
        qc = _tetrachromat(4)
        labelled = QuantumCatchRecord(
            labels=("crown", "throat", "wing", "tail"),
            channels=qc.channels, data=qc.data, cone_count=4,
        )
        dist = compute_distance(labelled, subset="wing")
        assert dist.pairs == (("crown", "wing"), ("throat", "wing"), ("wing", "tail"))

    def test_two_patterns_cross(self):
        qc = _tetrachromat(4)
        labelled = QuantumCatchRecord(
            labels=("crown", "throat", "wing", "tail"),
            channels=qc.channels, data=qc.data, cone_count=4,
        )
        dist = compute_distance(labelled, subset=["^t", "wing"])
        assert dist.pairs == (("throat", "wing"), ("wing", "tail"))
        full = self._dist()
        assert dist.get("throat", "wing")[0] == full.get("throat", "wing")[0]

    def test_too_many_patterns(self):
        with pytest.raises(ContractError, match="Too many"):
            compute_distance(_tetrachromat(3), subset=["a", "b", "c"])

    def test_no_match_warns(self):
        with pytest.warns(CorvidWarning, match="Subset condition not found"):
            dist = compute_distance(_tetrachromat(3), subset="nothing")
        assert len(dist) == 0
        assert dist.reference is not None


class TestConfig:
    """Noise settings are immutable once built."""

    def test_frozen(self):
        config = NoiseConfig()
        with pytest.raises(AttributeError):
            config.weber = 0.05
