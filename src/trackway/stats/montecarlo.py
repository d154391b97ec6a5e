"""Monte Carlo significance testing of pairwise metric matrices.

An observed pairwise matrix is compared against the matrices of ``nsim``
simulated tracks. For every trajectory pair, the count of simulations at
least as extreme as the observation gives a bias-corrected p-value, and a
joint criterion over all pairs gives one global p-value for the track as a
whole.

Tail Conventions
----------------
- ``"less"``: a simulation is extreme when ``simulated <= observed``. Used for
  distances (observed trajectories more similar than chance) and for
  intersection counts under ``H1 = Lower``.
- ``"greater"``: ``simulated >= observed``. Used for intersection counts
  under ``H1 = Higher``.

Comparisons are plain numeric comparisons. NaN never counts as extreme; the
Fréchet sentinel ``-1`` takes part as the number it is.

References
----------
.. [1] Phipson, B., & Smyth, G. K. (2010). Permutation P-values should
       never be zero: calculating exact P-values when permutations are
       randomly drawn. Statistical Applications in Genetics and Molecular
       Biology, 9(1).
.. [2] Benjamini, Y., & Hochberg, Y. (1995). Controlling the false discovery
       rate: a practical and powerful approach to multiple testing. Journal
       of the Royal Statistical Society B, 57(1), 289-300.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike, NDArray
from scipy.stats import false_discovery_control

from trackway.errors import ConfigurationError, InvariantError

__all__ = [
    "MonteCarloTestResult",
    "Tail",
    "adjust_pvalues_bh",
    "compute_montecarlo_pvalue",
    "extreme_indicators",
    "global_pvalue",
    "monte_carlo_test",
    "pairwise_pvalues",
]

logger = logging.getLogger("trackway.stats")

Tail = Literal["greater", "less"]


def _check_tail(tail: str) -> None:
    if tail not in ("greater", "less"):
        raise ValueError(f"tail must be 'greater' or 'less', got '{tail}'")


def _is_extreme(
    simulated: NDArray[np.float64], observed: NDArray[np.float64] | float, tail: Tail
) -> NDArray[np.bool_]:
    # NaN compares False in both directions.
    if tail == "less":
        return simulated <= observed
    return simulated >= observed


def compute_montecarlo_pvalue(
    observed: float,
    simulated: ArrayLike,
    *,
    tail: Tail = "less",
) -> float:
    """Monte Carlo p-value of one observation with Phipson-Smyth correction.

    Parameters
    ----------
    observed : float
        Observed statistic.
    simulated : array_like, shape (nsim,)
        Statistic of each simulation. NaN values are never counted as
        extreme but still count towards ``nsim``.
    tail : {"less", "greater"}, default="less"
        Direction of the test (see module docstring).

    Returns
    -------
    float
        ``(k + 1) / (nsim + 1)`` in the range (0, 1].

    Examples
    --------
    >>> import numpy as np
    >>> from trackway.stats.montecarlo import compute_montecarlo_pvalue
    >>> compute_montecarlo_pvalue(0.5, np.array([1.0, 2.0, 3.0, 4.0]), tail="less")
    0.2
    >>> compute_montecarlo_pvalue(2.0, np.array([1.0, 2.0, np.nan, 4.0]), tail="less")
    0.6
    """
    _check_tail(tail)
    simulated = np.asarray(simulated, dtype=np.float64).ravel()
    k = int(np.sum(_is_extreme(simulated, observed, tail)))
    return float((k + 1) / (len(simulated) + 1))


def _stack(
    observed: pd.DataFrame, simulations: Sequence[pd.DataFrame]
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Validate labels and symmetry, and return (observed, simulated) arrays."""
    if observed.shape[0] != observed.shape[1] or list(observed.index) != list(
        observed.columns
    ):
        raise InvariantError(
            f"Observed matrix must be square with matching labels, got shape "
            f"{observed.shape}."
        )
    if len(simulations) == 0:
        raise ConfigurationError(
            "At least one simulated matrix is required for a Monte Carlo test.",
            error_code="E2006",
        )

    labels = list(observed.index)
    obs = observed.to_numpy(dtype=np.float64)
    sims = np.empty((len(simulations), *obs.shape))
    for k, sim in enumerate(simulations):
        if list(sim.index) != labels or list(sim.columns) != labels:
            raise ConfigurationError(
                f"Simulated matrix {k + 1} is labelled {list(sim.index)}, but the "
                f"observed matrix is labelled {labels}.\n"
                f"Fix: simulate from the same track the observed matrix was built from.",
                error_code="E2004",
            )
        sims[k] = sim.to_numpy(dtype=np.float64)

    for name, values in (("observed", obs[np.newaxis]), ("simulated", sims)):
        if not np.allclose(
            values, np.swapaxes(values, 1, 2), equal_nan=True, rtol=1e-12, atol=0.0
        ):
            raise InvariantError(f"The {name} metric matrix is not symmetric.")
    return obs, sims


def extreme_indicators(
    observed: pd.DataFrame,
    simulations: Sequence[pd.DataFrame],
    *,
    tail: Tail,
) -> NDArray[np.bool_]:
    """Which simulated pairs are at least as extreme as observed.

    Parameters
    ----------
    observed : pandas.DataFrame, shape (k, k)
        Observed symmetric metric matrix.
    simulations : sequence of pandas.DataFrame
        ``nsim`` simulated matrices with the same labels.
    tail : {"less", "greater"}

    Returns
    -------
    NDArray[np.bool_], shape (nsim, k, k)
        Symmetric per-iteration indicators. The diagonal and every NaN
        comparison are False.
    """
    _check_tail(tail)
    obs, sims = _stack(observed, simulations)
    return _indicators(obs, sims, tail)


def _indicators(
    obs: NDArray[np.float64], sims: NDArray[np.float64], tail: Tail
) -> NDArray[np.bool_]:
    indicators = _is_extreme(sims, obs[np.newaxis], tail)
    diag = np.arange(obs.shape[0])
    indicators[:, diag, diag] = False
    return indicators


def _pvalues_from_indicators(
    indicators: NDArray[np.bool_], labels: Sequence[str]
) -> pd.DataFrame:
    nsim = indicators.shape[0]
    pvalues = (indicators.sum(axis=0) + 1.0) / (nsim + 1.0)
    np.fill_diagonal(pvalues, np.nan)
    return pd.DataFrame(pvalues, index=list(labels), columns=list(labels))


def pairwise_pvalues(
    observed: pd.DataFrame,
    simulations: Sequence[pd.DataFrame],
    *,
    tail: Tail,
) -> pd.DataFrame:
    """Per-pair Monte Carlo p-values.

    Returns
    -------
    pandas.DataFrame
        Symmetric matrix of ``(1 + k) / (nsim + 1)`` values with a NaN
        diagonal, labelled like `observed`.
    """
    indicators = extreme_indicators(observed, simulations, tail=tail)
    return _pvalues_from_indicators(indicators, observed.index)


def adjust_pvalues_bh(pvalues: pd.DataFrame) -> pd.DataFrame:
    """Benjamini-Hochberg adjustment over the unique trajectory pairs.

    The upper triangle is adjusted as one family and the adjusted values are
    written to both ``(i, j)`` and ``(j, i)``.

    Parameters
    ----------
    pvalues : pandas.DataFrame
        Symmetric raw p-value matrix.

    Returns
    -------
    pandas.DataFrame
        Adjusted matrix with a NaN diagonal. Every adjusted value is at
        least its raw value and at most 1.

    Examples
    --------
    >>> import numpy as np
    >>> import pandas as pd
    >>> from trackway.stats.montecarlo import adjust_pvalues_bh
    >>> raw = pd.DataFrame(
    ...     [[np.nan, 0.01, 0.04], [0.01, np.nan, 0.03], [0.04, 0.03, np.nan]],
    ...     index=list("abc"), columns=list("abc"),
    ... )
    >>> adjusted = adjust_pvalues_bh(raw)
    >>> [round(float(adjusted.loc[i, j]), 2) for i, j in [("a", "b"), ("a", "c"), ("b", "c")]]
    [0.03, 0.04, 0.04]
    """
    values = pvalues.to_numpy(dtype=np.float64)
    n = values.shape[0]
    adjusted = np.full((n, n), np.nan)
    rows, cols = np.triu_indices(n, k=1)
    upper = values[rows, cols]
    finite = ~np.isnan(upper)
    if np.any(finite):
        corrected = np.full(upper.shape, np.nan)
        corrected[finite] = false_discovery_control(upper[finite], method="bh")
        adjusted[rows, cols] = corrected
        adjusted[cols, rows] = corrected
    return pd.DataFrame(adjusted, index=pvalues.index, columns=pvalues.columns)


def _global_hits(
    indicators: NDArray[np.bool_], comparable: NDArray[np.bool_]
) -> NDArray[np.bool_]:
    """Iterations in which every comparable pair is extreme.

    An iteration with no comparable pair is never a hit.
    """
    n = indicators.shape[1]
    rows, cols = np.triu_indices(n, k=1)
    ind = indicators[:, rows, cols]
    cmp = comparable[:, rows, cols]
    all_extreme = np.all(ind | ~cmp, axis=1)
    return all_extreme & np.any(cmp, axis=1)


def global_pvalue(
    observed: pd.DataFrame,
    simulations: Sequence[pd.DataFrame],
    *,
    tail: Tail,
) -> float:
    """Fraction of simulations in which every pair is at least as extreme.

    A pair is skipped in an iteration when its observed or simulated value
    is NaN.

    Returns
    -------
    float
        ``hits / nsim`` in [0, 1]. Unlike per-pair p-values this can be 0.
    """
    _check_tail(tail)
    obs, sims = _stack(observed, simulations)
    indicators = _indicators(obs, sims, tail)
    comparable = ~np.isnan(sims) & ~np.isnan(obs)[np.newaxis]
    hits = _global_hits(indicators, comparable)
    return float(np.sum(hits) / len(simulations))


@dataclass(frozen=True, eq=False)
class MonteCarloTestResult:
    """Outcome of `monte_carlo_test`.

    Attributes
    ----------
    p_values : pandas.DataFrame
        Raw per-pair p-values, symmetric with a NaN diagonal.
    p_values_bh : pandas.DataFrame
        Benjamini-Hochberg adjusted p-values, same layout.
    p_value_global : float
        Joint p-value over all pairs (see `global_pvalue`).
    indicators : NDArray[np.bool_], shape (nsim, k, k)
        Per-iteration extreme indicators, kept so that results of different
        metrics can be combined.
    comparable : NDArray[np.bool_], shape (nsim, k, k)
        True where both the observed and the simulated value of a pair are
        non-NaN. Pairs that are not comparable are skipped by the global
        criterion.
    tail : {"less", "greater"}
        Direction of the test.
    n_simulations : int
        Number of simulated matrices.
    """

    p_values: pd.DataFrame
    p_values_bh: pd.DataFrame
    p_value_global: float
    indicators: NDArray[np.bool_]
    comparable: NDArray[np.bool_]
    tail: Tail
    n_simulations: int

    @property
    def is_significant(self) -> bool:
        """Return True if the global p-value is below 0.05."""
        return self.p_value_global < 0.05


def monte_carlo_test(
    observed: pd.DataFrame,
    simulations: Sequence[pd.DataFrame],
    *,
    tail: Tail,
) -> MonteCarloTestResult:
    """Test an observed pairwise matrix against simulated ones.

    Parameters
    ----------
    observed : pandas.DataFrame, shape (k, k)
        Observed symmetric metric matrix labelled by trajectory name.
    simulations : sequence of pandas.DataFrame
        One matrix per simulation, with the same labels.
    tail : {"less", "greater"}
        Direction of the test.

    Returns
    -------
    MonteCarloTestResult

    Raises
    ------
    InvariantError
        If any matrix is not symmetric or `observed` is not square.
    ConfigurationError
        If `simulations` is empty or labelled differently from `observed`.

    Examples
    --------
    >>> import numpy as np
    >>> import pandas as pd
    >>> from trackway.stats.montecarlo import monte_carlo_test
    >>> def sym(v):
    ...     return pd.DataFrame([[np.nan, v], [v, np.nan]], index=["a", "b"], columns=["a", "b"])
    >>> result = monte_carlo_test(sym(1.0), [sym(2.0), sym(3.0), sym(0.5)], tail="less")
    >>> float(result.p_values.loc["a", "b"])
    0.5
    >>> result.p_value_global
    0.3333333333333333
    """
    _check_tail(tail)
    obs, sims = _stack(observed, simulations)
    indicators = _indicators(obs, sims, tail)
    comparable = ~np.isnan(sims) & ~np.isnan(obs)[np.newaxis]

    p_values = _pvalues_from_indicators(indicators, observed.index)
    p_values_bh = adjust_pvalues_bh(p_values)
    hits = _global_hits(indicators, comparable)
    p_global = float(np.sum(hits) / len(simulations))

    logger.info(
        "Monte Carlo test (%s tail, %d simulations): global p = %.4g",
        tail,
        len(simulations),
        p_global,
    )
    return MonteCarloTestResult(
        p_values=p_values,
        p_values_bh=p_values_bh,
        p_value_global=p_global,
        indicators=indicators,
        comparable=comparable,
        tail=tail,
        n_simulations=len(simulations),
    )
