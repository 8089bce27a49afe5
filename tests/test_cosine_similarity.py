"""Tests for the cosine similarity of original vs reconstructed."""

import logging
import math

import numpy as np
import pandas as pd
import pytest

from sigrefit.cosine_similarity import (cos_sim, cos_sim_matrix,
                                        mean_cos_sim_ori_vs_rec)
from sigrefit.errors import DimensionMismatchError


def test_cos_sim_of_known_vectors():
    """Compute the normalized dot product."""
    assert cos_sim([1, 0], [1, 0]) == pytest.approx(1.0)
    assert cos_sim([1, 0], [0, 1]) == pytest.approx(0.0)
    assert cos_sim([10, 5], [10, 0]) == pytest.approx(
        10 / math.sqrt(125))


def test_cos_sim_zero_norm_is_nan():
    """Return NaN instead of raising for a zero vector."""
    assert math.isnan(cos_sim([0, 0], [1, 2]))
    assert math.isnan(cos_sim([0, 0], [0, 0]))


def test_cos_sim_shape_mismatch():
    """Refuse to compare vectors of different length."""
    with pytest.raises(DimensionMismatchError):
        cos_sim([1, 2, 3], [1, 2])


def test_cos_sim_matrix_labels():
    """Index by the columns of the first matrix, columns by the second."""
    m1 = pd.DataFrame({"x": [1.0, 0.0], "y": [1.0, 1.0]})
    m2 = pd.DataFrame({"S1": [1.0, 0.0], "S2": [0.0, 1.0],
                       "S3": [2.0, 2.0]})

    sims = cos_sim_matrix(m1, m2)

    assert list(sims.index) == ["x", "y"]
    assert list(sims.columns) == ["S1", "S2", "S3"]
    assert sims.loc["x", "S1"] == pytest.approx(1.0)
    assert sims.loc["y", "S3"] == pytest.approx(1.0)
    assert sims.loc["y", "S1"] == pytest.approx(1 / math.sqrt(2))


def test_mean_over_matching_columns():
    """Average column-wise similarities of matching columns only."""
    original = pd.DataFrame({"a": [10.0, 5.0], "b": [1.0, 1.0]})
    reconstructed = pd.DataFrame({"a": [10.0, 0.0], "b": [1.0, 1.0]})

    result = mean_cos_sim_ori_vs_rec(original, reconstructed)

    expected = (10 / math.sqrt(125) + 1.0) / 2
    assert result.value == pytest.approx(expected)
    assert result.note is None
    assert list(result.per_sample.index) == ["a", "b"]


def test_undefined_similarity_counts_as_zero(caplog):
    """Replace NaN by 0, keep a note and log a warning."""
    original = pd.DataFrame({"empty": [0.0, 0.0], "full": [1.0, 2.0]})
    reconstructed = pd.DataFrame({"empty": [0.0, 0.0],
                                  "full": [1.0, 2.0]})

    with caplog.at_level(logging.WARNING,
                         logger="sigrefit.cosine_similarity"):
        result = mean_cos_sim_ori_vs_rec(original, reconstructed)

    assert result.value == pytest.approx(0.5)
    assert result.per_sample["empty"] == 0.0
    assert not np.isnan(result.per_sample).any()
    assert result.note is not None
    assert "empty" in result.note
    assert "converted into a 0" in caplog.text


def test_mean_cos_sim_shape_mismatch():
    """Fail when the reconstruction has a different shape."""
    original = pd.DataFrame({"a": [1.0, 2.0]})
    reconstructed = pd.DataFrame({"a": [1.0, 2.0], "b": [1.0, 2.0]})

    with pytest.raises(DimensionMismatchError):
        mean_cos_sim_ori_vs_rec(original, reconstructed)
