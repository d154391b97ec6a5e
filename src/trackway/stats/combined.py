"""Joint Monte Carlo test over several pairwise metrics.

A track can look non-random on one metric by chance alone. Requiring that a
simulation be at least as extreme as the observation on every metric at
once gives a stricter joint test. The results being combined must come from
the same simulation batch, so that iteration ``k`` of every metric refers to
the same simulated track.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from trackway.errors import ConfigurationError
from trackway.stats.montecarlo import (
    _global_hits,
    _pvalues_from_indicators,
    adjust_pvalues_bh,
)

if TYPE_CHECKING:
    from trackway.results import PairwiseMetricResult

__all__ = ["CombinedTestResult", "combined_prob"]

logger = logging.getLogger("trackway.stats")


@dataclass(frozen=True, eq=False)
class CombinedTestResult:
    """Outcome of `combined_prob`.

    Attributes
    ----------
    p_values : pandas.DataFrame
        Joint per-pair p-values, symmetric with a NaN diagonal.
    p_values_bh : pandas.DataFrame
        Benjamini-Hochberg adjusted joint p-values.
    p_value_global : float
        Joint p-value over all pairs and all metrics.
    metrics : tuple of str
        Names of the combined metrics, in input order.
    n_simulations : int
        Number of simulation iterations shared by the inputs.
    indicators : NDArray[np.bool_], shape (nsim, k, k)
        Per-iteration joint indicators (AND over metrics).
    """

    p_values: pd.DataFrame
    p_values_bh: pd.DataFrame
    p_value_global: float
    metrics: tuple[str, ...]
    n_simulations: int
    indicators: NDArray[np.bool_]


def _check_compatible(results: Sequence[PairwiseMetricResult]) -> None:
    if len(results) == 0:
        raise ConfigurationError(
            "combined_prob needs at least one tested metric result.", error_code="E2007"
        )
    for position, result in enumerate(results, start=1):
        if result.test is None:
            raise ConfigurationError(
                f"Metric result {position} ({result.metric}) has no Monte Carlo test.\n"
                f"Fix: compute it with sim= set to the shared simulation batch.",
                error_code="E2007",
            )

    reference = results[0]
    for result in results[1:]:
        if result.n_simulations != reference.n_simulations:
            raise ConfigurationError(
                f"Metric results were tested with different numbers of simulations: "
                f"{reference.metric}={reference.n_simulations}, "
                f"{result.metric}={result.n_simulations}.\n"
                f"Fix: compute every metric from the same simulation batch.",
                error_code="E2003",
            )
        if result.names != reference.names:
            raise ConfigurationError(
                f"Metric results cover different trajectories: "
                f"{list(reference.names)} vs {list(result.names)}.",
                error_code="E2004",
            )


def combined_prob(metrics: Sequence[PairwiseMetricResult]) -> CombinedTestResult:
    """Combine tested metric results into one joint test.

    Parameters
    ----------
    metrics : sequence of PairwiseMetricResult
        Tested results (DTW, Fréchet and/or intersection) built from the
        same track and the same simulation batch. Each keeps its own tail;
        intersection results keep the hypothesis they were tested under.

    Returns
    -------
    CombinedTestResult

    Raises
    ------
    ConfigurationError
        If `metrics` is empty, any result is untested, or the results differ
        in number of simulations or trajectories.

    Notes
    -----
    For every iteration ``k`` and pair ``(i, j)`` the joint indicator is the
    AND of each metric's own indicator (NaN comparisons count as not
    extreme). With ``h`` the number of iterations in which the joint
    indicator holds,

    .. math::

        p_{ij} = \\frac{1 + h_{ij}}{n_{sim} + 1}

    and the per-pair values are BH adjusted over the unique pairs. The
    global p-value counts the iterations in which every pair that is
    comparable (non-NaN) on all metrics is jointly extreme, with the same
    correction. An iteration with no such pair is never a hit.

    Because the joint indicator implies each metric's indicator, every joint
    per-pair p-value is at most the smallest corresponding input p-value.
    """
    _check_compatible(metrics)

    joint = np.logical_and.reduce([result.test.indicators for result in metrics])
    comparable = np.logical_and.reduce([result.test.comparable for result in metrics])
    nsim = joint.shape[0]
    names = metrics[0].names

    p_values = _pvalues_from_indicators(joint, names)
    p_values_bh = adjust_pvalues_bh(p_values)

    hits = int(np.sum(_global_hits(joint, comparable)))
    p_global = float((1 + hits) / (nsim + 1))

    metric_names = tuple(result.metric for result in metrics)
    logger.info(
        "Combined test of %s (%d simulations): global p = %.4g",
        ", ".join(metric_names),
        nsim,
        p_global,
    )
    return CombinedTestResult(
        p_values=p_values,
        p_values_bh=p_values_bh,
        p_value_global=p_global,
        metrics=metric_names,
        n_simulations=nsim,
        indicators=joint,
    )
