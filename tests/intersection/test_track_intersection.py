"""Tests for track_intersection and its hypothesis-directed tests."""

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose

from trackway.errors import ConfigurationError
from trackway.intersection import Hypothesis, track_intersection
from trackway.progress import ProgressEvent
from trackway.similarity import superpose_all
from trackway.simulation import simulate_track
from trackway.simulation.batch import SimulatedTrajectorySet
from trackway.track import Trajectory

T = np.linspace(0.0, 4.0, 6)
RISING = np.column_stack([T, T])


def _pair_set(k: int, falling: np.ndarray) -> SimulatedTrajectorySet:
    return SimulatedTrajectorySet(k, (Trajectory("Rising", RISING), Trajectory("Falling", falling)))


@pytest.fixture
def counted_sets() -> list[SimulatedTrajectorySet]:
    """Three sets whose Rising/Falling pair crosses 0, 0 and 2 times."""
    apart = np.column_stack([T, T + 10.0])
    zigzag = np.array([[0.0, 4.0], [4.0, 0.0], [4.0, 1.0], [0.0, 1.0]])
    return [_pair_set(1, apart), _pair_set(2, apart), _pair_set(3, zigzag)]


class TestObserved:
    """Tests for the observed count matrix."""

    def test_crossing_pair(self, crossing_pair):
        """The X fixture has one crossing."""
        result = track_intersection(crossing_pair)
        assert result.metric == "Intersection"
        assert result.observed.loc["Rising", "Falling"] == 1.0
        assert np.isnan(result.observed.loc["Rising", "Rising"])
        assert not result.tested

    def test_parallel_pair(self, parallel_pair):
        """Parallel lines have zero crossings."""
        result = track_intersection(parallel_pair)
        assert result.observed.loc["Lower", "Upper"] == 0.0

    def test_counts_are_integral_floats(self, small_track):
        """Counts are stored as float64 whole numbers."""
        values = track_intersection(small_track).observed.to_numpy()
        off = values[~np.eye(4, dtype=bool)]
        assert values.dtype == np.float64
        assert_allclose(off, np.round(off))
        assert np.all(off >= 0)


class TestHypothesis:
    """Tests for the hypothesis-dependent tail."""

    def test_tail_mapping(self):
        """Lower tests the lower tail, Higher the upper tail."""
        assert Hypothesis.LOWER.tail == "less"
        assert Hypothesis.HIGHER.tail == "greater"

    def test_sim_without_hypothesis(self, crossing_pair, counted_sets):
        """A test without a hypothesis is refused."""
        with pytest.raises(ConfigurationError, match=r"\[E2002\]"):
            track_intersection(crossing_pair, sim=counted_sets)

    def test_unknown_hypothesis(self, crossing_pair, counted_sets):
        """Unknown hypothesis names are rejected."""
        with pytest.raises(ConfigurationError, match=r"\[E2001\]"):
            track_intersection(crossing_pair, sim=counted_sets, hypothesis="Sideways")

    def test_lower(self, crossing_pair, counted_sets):
        """Under Lower, simulated counts <= observed are extreme."""
        result = track_intersection(crossing_pair, sim=counted_sets, hypothesis="Lower")
        assert result.hypothesis == "Lower"
        assert result.tail == "less"
        assert result.p_values.loc["Rising", "Falling"] == pytest.approx(0.75)
        assert result.p_value_global == pytest.approx(2 / 3)

    def test_higher(self, crossing_pair, counted_sets):
        """Under Higher, simulated counts >= observed are extreme."""
        result = track_intersection(crossing_pair, sim=counted_sets, hypothesis="higher")
        assert result.hypothesis == "Higher"
        assert result.tail == "greater"
        assert result.p_values.loc["Rising", "Falling"] == pytest.approx(0.5)
        assert result.p_value_global == pytest.approx(1 / 3)

    def test_simulated_counts_kept(self, crossing_pair, counted_sets):
        """Per-iteration count matrices are kept in order."""
        result = track_intersection(crossing_pair, sim=counted_sets, hypothesis="Lower")
        counts = [m.loc["Rising", "Falling"] for m in result.simulations]
        assert counts == [0.0, 0.0, 2.0]


class TestOriginPermutation:
    """Tests for relocating simulated starting points."""

    def test_seed_reproducible(self, small_track, small_batch):
        """Identical seeds give identical permuted counts."""
        kwargs = dict(sim=small_batch, hypothesis="Lower", origin_permutation="Conv.Hull")
        first = track_intersection(small_track, rng=11, **kwargs)
        second = track_intersection(small_track, rng=11, **kwargs)
        for a, b in zip(first.simulations, second.simulations, strict=True):
            pd.testing.assert_frame_equal(a, b)
        pd.testing.assert_frame_equal(first.p_values, second.p_values)

    def test_observed_never_permuted(self, small_track, small_batch):
        """The observed matrix does not depend on the permutation."""
        plain = track_intersection(small_track)
        permuted = track_intersection(
            small_track, sim=small_batch, hypothesis="Higher", origin_permutation="Min.Box", rng=0
        )
        pd.testing.assert_frame_equal(plain.observed, permuted.observed)
        assert permuted.origin_permutation == "Min.Box"

    def test_custom_requires_polygon(self, small_track, small_batch):
        """Custom permutation without coordinates is rejected."""
        with pytest.raises(ConfigurationError, match=r"\[E2005\]"):
            track_intersection(
                small_track, sim=small_batch, hypothesis="Lower", origin_permutation="Custom"
            )

    def test_custom_polygon(self, small_track, small_batch):
        """A custom polygon is accepted."""
        square = [[-5.0, -5.0], [10.0, -5.0], [10.0, 10.0], [-5.0, 10.0]]
        result = track_intersection(
            small_track,
            sim=small_batch,
            hypothesis="Lower",
            origin_permutation="Custom",
            custom_coords=square,
            rng=0,
        )
        assert result.tested
        assert result.n_simulations == small_batch.nsim

    def test_progress_events(self, crossing_pair):
        """Permutation and metric events alternate, then completed."""
        batch = simulate_track(crossing_pair, nsim=3, model="Directed", rng=0)
        events: list[ProgressEvent] = []
        track_intersection(
            crossing_pair,
            sim=batch,
            hypothesis="Lower",
            origin_permutation="Min.Box",
            rng=0,
            progress=events.append,
        )
        assert [e.stage for e in events] == ["permutation", "metric"] * 3 + ["completed"]

    def test_no_permutation_no_permutation_events(self, crossing_pair, counted_sets):
        """Without permutation only metric events are sent."""
        events: list[ProgressEvent] = []
        track_intersection(
            crossing_pair, sim=counted_sets, hypothesis="Lower", progress=events.append
        )
        assert [e.stage for e in events] == ["metric"] * 3 + ["completed"]


class TestCrossingTopology:
    """Tests for crossings under superposition modes that keep geometry."""

    @pytest.mark.parametrize("mode", ["None", "Centroid"])
    def test_x_crosses_once(self, crossing_pair, mode):
        """Both diagonals share a centroid, so Centroid keeps the single crossing."""
        aligned = superpose_all(crossing_pair, mode)
        assert track_intersection(aligned).observed.loc["Rising", "Falling"] == 1.0
