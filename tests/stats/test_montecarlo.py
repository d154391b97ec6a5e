"""Tests for Monte Carlo p-values, BH adjustment and global p-values."""

import numpy as np
import pandas as pd
import pytest
from hypothesis import given
from hypothesis import strategies as st
from numpy.testing import assert_allclose

from trackway.errors import ConfigurationError, InvariantError
from trackway.stats import (
    adjust_pvalues_bh,
    compute_montecarlo_pvalue,
    extreme_indicators,
    global_pvalue,
    monte_carlo_test,
    pairwise_pvalues,
)

LABELS = ["a", "b", "c"]


def sym(ab: float, ac: float, bc: float, labels=LABELS) -> pd.DataFrame:
    """Symmetric 3 x 3 matrix with a NaN diagonal."""
    values = np.array([[np.nan, ab, ac], [ab, np.nan, bc], [ac, bc, np.nan]])
    return pd.DataFrame(values, index=labels, columns=labels)


class TestComputeMonteCarloPvalue:
    """Tests for compute_montecarlo_pvalue."""

    def test_most_extreme_observation(self):
        """An observation beyond every simulation gets 1 / (nsim + 1)."""
        assert compute_montecarlo_pvalue(0.0, np.arange(1.0, 10.0), tail="less") == 0.1

    def test_least_extreme_observation(self):
        """An observation behind every simulation gets 1."""
        assert compute_montecarlo_pvalue(100.0, np.arange(9.0), tail="less") == 1.0

    def test_greater_tail(self):
        """The greater tail counts simulations >= observed."""
        assert compute_montecarlo_pvalue(2.0, [1.0, 2.0, 3.0], tail="greater") == 0.75

    def test_nan_never_extreme(self):
        """NaN simulations count towards nsim but never as extreme."""
        p = compute_montecarlo_pvalue(1.0, [np.nan, np.nan, 0.0], tail="less")
        assert p == 0.5

    def test_bad_tail(self):
        """Only less and greater are valid tails."""
        with pytest.raises(ValueError, match="tail"):
            compute_montecarlo_pvalue(1.0, [1.0], tail="two-sided")

    @given(
        st.floats(-100, 100, allow_nan=False),
        st.lists(st.floats(-100, 100, allow_nan=False), min_size=1, max_size=50),
        st.sampled_from(["less", "greater"]),
    )
    def test_range(self, observed, simulated, tail):
        """p lies in [1 / (nsim + 1), 1]."""
        p = compute_montecarlo_pvalue(observed, simulated, tail=tail)
        assert 1.0 / (len(simulated) + 1) <= p <= 1.0


class TestPairwise:
    """Tests for per-pair indicators and p-values."""

    def test_indicators_layout(self):
        """Indicators are symmetric with a False diagonal."""
        ind = extreme_indicators(sym(1, 1, 1), [sym(0, 2, 1), sym(3, 3, 3)], tail="less")
        assert ind.shape == (2, 3, 3)
        assert not ind[:, [0, 1, 2], [0, 1, 2]].any()
        assert ind[0, 0, 1] and ind[0, 1, 0]
        assert not ind[0, 0, 2]
        assert ind[0, 1, 2]
        assert not ind[1].any()

    def test_pvalues(self):
        """Each pair gets (1 + k) / (nsim + 1)."""
        p = pairwise_pvalues(sym(1, 1, 1), [sym(0, 2, 1), sym(3, 3, 3), sym(0, 0, 5)], tail="less")
        assert p.loc["a", "b"] == pytest.approx(0.75)
        assert p.loc["a", "c"] == pytest.approx(0.5)
        assert p.loc["b", "c"] == pytest.approx(0.5)
        assert np.isnan(p.loc["a", "a"])
        assert_allclose(p.to_numpy(), p.to_numpy().T, equal_nan=True)

    def test_sentinel_compares_as_number(self):
        """A -1 distance is simply smaller than every valid distance."""
        observed = sym(-1.0, 2.0, 2.0)
        p = pairwise_pvalues(observed, [sym(0.5, -1.0, 3.0), sym(-1.0, 2.5, 1.0)], tail="less")
        assert p.loc["a", "b"] == pytest.approx(2 / 3)
        assert p.loc["a", "c"] == pytest.approx(2 / 3)
        assert p.loc["b", "c"] == pytest.approx(2 / 3)


class TestValidation:
    """Tests for matrix validation."""

    def test_asymmetric_observed(self):
        """Asymmetric matrices violate the pairwise invariant."""
        bad = sym(1, 2, 3)
        bad.loc["a", "b"] = 9.0
        with pytest.raises(InvariantError, match="symmetric"):
            monte_carlo_test(bad, [sym(1, 2, 3)], tail="less")

    def test_asymmetric_simulated(self):
        """Simulated matrices are checked too."""
        bad = sym(1, 2, 3)
        bad.loc["c", "b"] = 0.0
        with pytest.raises(InvariantError, match="simulated"):
            monte_carlo_test(sym(1, 2, 3), [sym(1, 2, 3), bad], tail="less")

    def test_non_square(self):
        """Observed must be square."""
        with pytest.raises(InvariantError, match="square"):
            monte_carlo_test(sym(1, 2, 3).iloc[:2], [sym(1, 2, 3)], tail="less")

    def test_label_mismatch(self):
        """Simulated matrices must carry the observed labels."""
        with pytest.raises(ConfigurationError, match=r"\[E2004\]"):
            monte_carlo_test(sym(1, 2, 3), [sym(1, 2, 3, labels=["a", "b", "d"])], tail="less")

    def test_no_simulations(self):
        """An empty simulation list is rejected."""
        with pytest.raises(ConfigurationError, match=r"\[E2006\]"):
            monte_carlo_test(sym(1, 2, 3), [], tail="less")


class TestAdjustBH:
    """Tests for adjust_pvalues_bh."""

    def test_known_values(self):
        """Matches hand-computed BH over three pairs."""
        adjusted = adjust_pvalues_bh(sym(0.01, 0.04, 0.03))
        assert adjusted.loc["a", "b"] == pytest.approx(0.03)
        assert adjusted.loc["a", "c"] == pytest.approx(0.04)
        assert adjusted.loc["c", "b"] == pytest.approx(0.04)
        assert np.isnan(adjusted.loc["b", "b"])

    @given(st.lists(st.floats(0.001, 1.0), min_size=3, max_size=3))
    def test_bounds_and_order(self, raw):
        """Adjusted values are in [raw, 1] and keep the raw ordering."""
        adjusted = adjust_pvalues_bh(sym(*raw))
        adj = np.array([adjusted.loc["a", "b"], adjusted.loc["a", "c"], adjusted.loc["b", "c"]])
        raw = np.array(raw)
        assert np.all(adj >= raw - 1e-12)
        assert np.all(adj <= 1.0 + 1e-12)
        order = np.argsort(raw, kind="stable")
        assert np.all(np.diff(adj[order]) >= -1e-12)

    def test_nan_pairs_skipped(self):
        """NaN pairs stay NaN and are not part of the family."""
        adjusted = adjust_pvalues_bh(sym(0.02, np.nan, 0.04))
        assert np.isnan(adjusted.loc["a", "c"])
        assert adjusted.loc["a", "b"] == pytest.approx(0.04)
        assert adjusted.loc["b", "c"] == pytest.approx(0.04)


class TestGlobalPvalue:
    """Tests for the joint criterion over all pairs."""

    def test_all_pairs_must_be_extreme(self):
        """Only iterations where every pair is extreme count."""
        sims = [sym(0, 0, 0), sym(0, 0, 5), sym(2, 2, 2), sym(1, 1, 1)]
        assert global_pvalue(sym(1, 1, 1), sims, tail="less") == pytest.approx(0.5)

    def test_can_be_zero(self):
        """Without a hit the global p-value is 0."""
        assert global_pvalue(sym(1, 1, 1), [sym(5, 5, 5)], tail="less") == 0.0

    def test_nan_pairs_skipped(self):
        """A NaN pair is ignored within its iteration."""
        sims = [sym(0, np.nan, 0), sym(np.nan, np.nan, np.nan)]
        assert global_pvalue(sym(1, 1, 1), sims, tail="less") == pytest.approx(0.5)

    def test_greater_tail(self):
        """The greater tail uses >= comparisons."""
        sims = [sym(3, 3, 3), sym(3, 0, 3)]
        assert global_pvalue(sym(1, 1, 1), sims, tail="greater") == pytest.approx(0.5)


class TestMonteCarloTest:
    """Tests for monte_carlo_test."""

    def test_result_fields(self):
        """The result bundles consistent outputs."""
        observed = sym(1, 1, 1)
        sims = [sym(0, 2, 1), sym(3, 3, 3), sym(0, 0, 5)]
        result = monte_carlo_test(observed, sims, tail="less")
        pd.testing.assert_frame_equal(result.p_values, pairwise_pvalues(observed, sims, tail="less"))
        pd.testing.assert_frame_equal(result.p_values_bh, adjust_pvalues_bh(result.p_values))
        assert result.p_value_global == global_pvalue(observed, sims, tail="less")
        assert result.n_simulations == 3
        assert result.tail == "less"
        assert result.indicators.shape == (3, 3, 3)

    def test_is_significant(self):
        """Significance uses the global p-value at 0.05."""
        sims = [sym(5, 5, 5)] * 30
        assert monte_carlo_test(sym(1, 1, 1), sims, tail="less").is_significant
        assert not monte_carlo_test(sym(9, 9, 9), sims, tail="less").is_significant
