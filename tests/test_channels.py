# Copyright (c) 2026 Corvid
# SPDX-License-Identifier: MIT

"""Tests for channel resolution and row normalization."""

import numpy as np
import pytest

from corvid.diagnostics import ContractError
from corvid.space.channels import (
    ChannelOutcome,
    normalize_rows,
    resolve_channels,
    row_sums_deviate,
)

TCS_CHANNELS = ("u", "s", "m", "l")


class TestDeclaredInput:
    """Declared channel names are matched to the model's receptors."""

    def test_exact(self):
        res = resolve_channels(TCS_CHANNELS, TCS_CHANNELS, declared=True)
        assert res.outcome is ChannelOutcome.EXACT
        assert res.indices == (0, 1, 2, 3)
        assert res.message is None

    def test_truncated(self):
        res = resolve_channels(("a", "b", "c", "d", "e"), ("s", "m", "l"), declared=True)
        assert res.outcome is ChannelOutcome.TRUNCATED
        assert res.indices == (0, 1, 2)
        assert "first 3 only" in res.message

    def test_too_few(self):
        with pytest.raises(ContractError, match="Visual model input has 2"):
            resolve_channels(("s", "l"), TCS_CHANNELS, declared=True)


class TestBareTable:
    """Bare tables are matched by name, then by position."""

    def test_names_matched_in_any_order(self):
        res = resolve_channels(("l", "m", "s", "u"), TCS_CHANNELS, declared=False)
        assert res.outcome is ChannelOutcome.EXACT
        assert res.indices == (3, 2, 1, 0)

    def test_positional(self):
        res = resolve_channels(("V1", "V2", "V3"), ("s", "m", "l"), declared=False)
        assert res.outcome is ChannelOutcome.POSITIONAL
        assert res.indices == (0, 1, 2)
        assert '"s", "m", "l"' in res.message

    def test_truncated_names_used_columns(self):
        res = resolve_channels(("V1", "V2", "V3", "V4"), ("s", "m", "l"), declared=False)
        assert res.outcome is ChannelOutcome.TRUNCATED
        assert '"V1", "V2", "V3"' in res.message

    def test_too_few(self):
        with pytest.raises(ContractError, match="Input data has 3"):
            resolve_channels(("V1", "V2", "V3"), TCS_CHANNELS, declared=False)


class TestNormalization:
    """Row normalization yields relative catches within tolerance."""

    def test_rows_sum_to_one(self):
        out = normalize_rows(np.array([[1.0, 1.0, 2.0], [3.0, 0.0, 1.0]]))
        np.testing.assert_allclose(out.sum(axis=1), [1.0, 1.0])
        np.testing.assert_allclose(out[0], [0.25, 0.25, 0.5])

    def test_idempotent(self):
        rows = np.array([[0.2, 0.3, 0.5]])
        np.testing.assert_allclose(normalize_rows(rows), rows)

    def test_deviation_tolerance(self):
        assert not row_sums_deviate(np.array([[0.5, 0.5005]]))
        assert row_sums_deviate(np.array([[0.5, 0.502]]))

    def test_empty_never_deviates(self):
        assert not row_sums_deviate(np.empty((0, 3)))
