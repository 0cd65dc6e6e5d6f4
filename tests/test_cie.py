# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""Tests for CIE colour spaces and the CIEDE2000 colour difference."""

import math

import numpy as np
import pytest

from corvid import ContractError, QuantumCatchRecord, compute_distance, project_colour_space
from corvid.space.cie import (
    D65_WHITE,
    delta_e_cie2000,
    lab_to_lch,
    xyz_to_chromaticity,
    xyz_to_lab,
)


def _xyz_record(rows, achromatic="none") -> QuantumCatchRecord:
    rows = np.asarray(rows, dtype=float)
    channels = ("X", "Y", "Z") + (("lum",) if achromatic != "none" else ())
    return QuantumCatchRecord(
        labels=tuple(f"c{i}" for i in range(len(rows))),
        channels=channels,
        data=rows,
        cone_count=3,
        visual_system="cie10",
        achromatic=achromatic,
    )


class TestLab:
    """XYZ to CIELAB and CIELCh conversions against known values."""

    def test_white_is_l100(self):
        lab = xyz_to_lab(np.array(D65_WHITE))
        np.testing.assert_allclose(lab, [100.0, 0.0, 0.0], atol=1e-10)

    def test_black_is_l0(self):
        lab = xyz_to_lab(np.zeros(3))
        np.testing.assert_allclose(lab, [0.0, 0.0, 0.0], atol=1e-10)

    def test_mid_grey(self):
        Y = 0.18
        lab = xyz_to_lab(np.array(D65_WHITE) * Y)
        assert lab[0] == pytest.approx(116 * Y ** (1 / 3) - 16)

    def test_bad_white(self):
        with pytest.raises(ContractError, match="Reference white"):
            xyz_to_lab(np.ones(3), white=(1.0, 0.0, 1.0))

    def test_lch_hue_degrees(self):
        lch = lab_to_lch(np.array([50.0, 0.0, 10.0]))
        np.testing.assert_allclose(lch, [50.0, 10.0, 90.0])

    def test_chromaticity_sums_to_one(self):
        xyz = np.array([[0.2, 0.3, 0.5], [1.0, 2.0, 1.0]])
        np.testing.assert_allclose(xyz_to_chromaticity(xyz).sum(axis=1), 1.0)


class TestDeltaE2000:
    """CIEDE2000 must reproduce published reference pairs."""

    @pytest.mark.parametrize(
        "lab1, lab2, expected",
        [
            ((50.0, 2.6772, -79.7751), (50.0, 0.0, -82.7485), 2.0425),
            ((50.0, 0.0, 0.0), (50.0, -1.0, 2.0), 2.3669),
            ((50.0, 2.5, 0.0), (73.0, 25.0, -18.0), 27.1492),
            ((2.0776, 0.0795, -1.1350), (0.9033, -0.0636, -0.5514), 0.9082),
        ],
    )
    def test_published_pairs(self, lab1, lab2, expected):
        de = delta_e_cie2000(np.array(lab1), np.array(lab2))
        assert float(de) == pytest.approx(expected, abs=1e-4)

    def test_symmetric(self):
        a = np.array([[60.0, 20.0, -10.0]])
        b = np.array([[55.0, -5.0, 30.0]])
        np.testing.assert_allclose(delta_e_cie2000(a, b), delta_e_cie2000(b, a))

    def test_identical_is_zero(self):
        lab = np.array([[40.0, 12.0, -3.0]])
        np.testing.assert_allclose(delta_e_cie2000(lab, lab), [0.0], atol=1e-12)


class TestProjection:
    """CIE spaces expose the expected columns for each model."""

    def test_cielab_columns(self):
        rec = project_colour_space(_xyz_record([D65_WHITE, [0.2, 0.3, 0.1]]), "CIELAB")
        assert list(rec.columns) == ["X", "Y", "Z", "L", "a", "b", "r_vec"]
        assert rec["L"][0] == pytest.approx(100.0)
        assert rec["r_vec"][0] == pytest.approx(0.0, abs=1e-10)

    def test_cielch_adds_polar(self):
        rec = project_colour_space(_xyz_record([[0.2, 0.3, 0.1]]), "CIELCh")
        assert rec["C"][0] == pytest.approx(math.hypot(rec["a"][0], rec["b"][0]))
        assert 0.0 <= rec["h"][0] < 360.0

    def test_custom_white(self):
        white = (1.0, 1.0, 1.0)
        rec = project_colour_space(_xyz_record([white]), "CIELAB", {"white": white})
        assert rec["L"][0] == pytest.approx(100.0)
        assert rec["a"][0] == pytest.approx(0.0, abs=1e-10)

    def test_ciexyz_white_has_no_saturation(self):
        rec = project_colour_space(_xyz_record([D65_WHITE]), "CIEXYZ")
        assert rec["r_vec"][0] == pytest.approx(0.0, abs=1e-12)
        assert rec["x"][0] + rec["y"][0] + rec["z"][0] == pytest.approx(1.0)


class TestDistance:
    """CIE distances use CIEDE2000 and lightness contrast."""

    def test_cie2000_distances(self):
        rec = project_colour_space(_xyz_record([[0.2, 0.3, 0.1], [0.25, 0.3, 0.2]]), "CIELAB")
        dist = compute_distance(rec)
        lab = rec.coordinates(("L", "a", "b"))
        assert dist.dS[0] == pytest.approx(float(delta_e_cie2000(lab[0], lab[1])))
        assert dist.method == "CIE2000 distances"

    def test_lightness_contrast_needs_achromatic_channel(self):
        rows = [[0.2, 0.3, 0.1], [0.2, 0.6, 0.1]]
        rec = project_colour_space(_xyz_record(rows), "CIELAB")
        dist = compute_distance(rec, achromatic=True)
        assert np.isnan(dist.dL).all()

    def test_lightness_contrast_on_l(self):
        rows = [[0.2, 0.3, 0.1, 1.0], [0.2, 0.6, 0.1, 2.0]]
        rec = project_colour_space(_xyz_record(rows, achromatic="cie10"), "CIELAB")
        dist = compute_distance(rec, achromatic=True)
        L1, L2 = sorted(rec["L"])
        assert dist.dL[0] == pytest.approx((L2 - L1) / L1)

    def test_ciexyz_never_has_dl(self):
        rows = [[0.2, 0.3, 0.1, 1.0], [0.2, 0.6, 0.1, 2.0]]
        rec = project_colour_space(_xyz_record(rows, achromatic="cie10"), "CIEXYZ")
        dist = compute_distance(rec, achromatic=True)
        assert np.isnan(dist.dL).all()
