"""Tests for the shared pairwise matrix builder."""

import inspect

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose

import trackway.intersection.metric as intersection_metric
from trackway._pairwise import pairwise_matrix
from trackway.errors import InvariantError
from trackway.intersection.geometry import count_intersections
from trackway.similarity import pairwise_distance_matrix
from trackway.similarity.distance import dtw_distance
from trackway.track import Track


class TestPairwiseMatrix:
    """Tests for pairwise_matrix."""

    def test_layout(self, small_track):
        """Matrix is symmetric, labelled, with a NaN diagonal."""
        matrix = pairwise_matrix(small_track, count_intersections)
        assert isinstance(matrix, pd.DataFrame)
        assert list(matrix.index) == list(matrix.columns) == list(small_track.names)
        values = matrix.to_numpy()
        assert values.dtype == np.float64
        assert np.all(np.isnan(np.diag(values)))
        assert_allclose(values, values.T, equal_nan=True)

    def test_pair_order(self, crossing_pair):
        """Each unordered pair is passed once, earlier trajectory first."""
        calls = []

        def kernel(a, b):
            calls.append((a.name, b.name))
            return 2.0

        matrix = pairwise_matrix(crossing_pair, kernel)
        assert calls == [("Rising", "Falling")]
        assert matrix.loc["Falling", "Rising"] == 2.0

    def test_accepts_plain_sequence(self, parallel_pair):
        """Any iterable of trajectories works, not just a Track."""
        matrix = pairwise_matrix(list(parallel_pair), count_intersections)
        assert matrix.loc["Lower", "Upper"] == 0.0

    def test_needs_two_trajectories(self, straight_line):
        """A single trajectory has no pairs."""
        with pytest.raises(InvariantError, match="at least two"):
            pairwise_matrix(Track((straight_line,)), count_intersections)

    def test_distance_matrix_delegates(self, small_track):
        """The similarity wrapper gives the same matrix."""
        pd.testing.assert_frame_equal(
            pairwise_distance_matrix(small_track, dtw_distance),
            pairwise_matrix(small_track, dtw_distance),
        )


def test_intersection_metric_independent_of_similarity():
    """The intersection metric builds its matrices without the similarity package."""
    assert intersection_metric.pairwise_matrix is pairwise_matrix
    source = inspect.getsource(intersection_metric)
    assert "trackway.similarity" not in source
