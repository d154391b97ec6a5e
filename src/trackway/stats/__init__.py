"""Monte Carlo inference over pairwise trajectory metrics."""

from trackway.stats.combined import CombinedTestResult, combined_prob
from trackway.stats.montecarlo import (
    MonteCarloTestResult,
    adjust_pvalues_bh,
    compute_montecarlo_pvalue,
    extreme_indicators,
    global_pvalue,
    monte_carlo_test,
    pairwise_pvalues,
)

__all__ = [
    "CombinedTestResult",
    "MonteCarloTestResult",
    "adjust_pvalues_bh",
    "combined_prob",
    "compute_montecarlo_pvalue",
    "extreme_indicators",
    "global_pvalue",
    "monte_carlo_test",
    "pairwise_pvalues",
]
