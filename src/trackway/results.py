"""Result container shared by the pairwise metrics."""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from trackway.stats.montecarlo import MonteCarloTestResult, Tail

__all__ = ["PairwiseMetricResult"]


@dataclass(frozen=True, eq=False)
class PairwiseMetricResult:
    """Observed pairwise metric matrix, optionally with its Monte Carlo test.

    Parameters
    ----------
    metric : str
        Metric name: ``"DTW"``, ``"Frechet"`` or ``"Intersection"``.
    observed : pandas.DataFrame
        Symmetric matrix labelled by trajectory name with a NaN diagonal.
    test : MonteCarloTestResult, optional
        Present when simulations were supplied.
    simulations : tuple of pandas.DataFrame, optional
        Metric matrix of every simulation iteration, in order.
    superposition : str, optional
        Superposition applied before computing distances.
    hypothesis : str, optional
        Alternative hypothesis of an intersection test (``"Lower"`` or
        ``"Higher"``).
    origin_permutation : str, optional
        Origin permutation applied to simulated intersection sets.

    Examples
    --------
    >>> import numpy as np
    >>> from trackway.track import Track
    >>> from trackway.similarity import simil_dtw_metric
    >>> line = np.column_stack([np.arange(4.0), np.zeros(4)])
    >>> result = simil_dtw_metric(Track.from_points([line, line + [0, 1]]))
    >>> result.tested, result.p_values is None
    (False, True)
    """

    metric: str
    observed: pd.DataFrame
    test: MonteCarloTestResult | None = None
    simulations: tuple[pd.DataFrame, ...] | None = None
    superposition: str | None = None
    hypothesis: str | None = None
    origin_permutation: str | None = None

    @property
    def tested(self) -> bool:
        """True if a Monte Carlo test was run."""
        return self.test is not None

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self.observed.index)

    @property
    def p_values(self) -> pd.DataFrame | None:
        return None if self.test is None else self.test.p_values

    @property
    def p_values_bh(self) -> pd.DataFrame | None:
        return None if self.test is None else self.test.p_values_bh

    @property
    def p_value_global(self) -> float | None:
        return None if self.test is None else self.test.p_value_global

    @property
    def n_simulations(self) -> int | None:
        return None if self.test is None else self.test.n_simulations

    @property
    def tail(self) -> Tail | None:
        return None if self.test is None else self.test.tail
