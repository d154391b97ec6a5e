"""Labelled matrices of a symmetric statistic over trajectory pairs."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from itertools import combinations

import numpy as np
import pandas as pd

from trackway.errors import InvariantError
from trackway.track import Trajectory

__all__ = ["PairKernel", "pairwise_matrix"]

PairKernel = Callable[[Trajectory, Trajectory], float]


def pairwise_matrix(trajectories: Iterable[Trajectory], kernel: PairKernel) -> pd.DataFrame:
    """Evaluate `kernel` on every unordered pair of trajectories.

    Parameters
    ----------
    trajectories : iterable of Trajectory
        A `Track`, a simulated set or a plain sequence; at least two
        trajectories with unique names.
    kernel : callable
        ``kernel(a, b) -> float``; assumed symmetric and evaluated once per
        pair.

    Returns
    -------
    pandas.DataFrame
        Symmetric ``float64`` matrix labelled by trajectory name with a NaN
        diagonal.

    Raises
    ------
    InvariantError
        If fewer than two trajectories are given.
    """
    trajs = list(trajectories)
    if len(trajs) < 2:
        raise InvariantError(
            f"A pairwise metric needs at least two trajectories, got {len(trajs)}."
        )
    n = len(trajs)
    values = np.full((n, n), np.nan)
    for i, j in combinations(range(n), 2):
        values[i, j] = values[j, i] = kernel(trajs[i], trajs[j])
    names = [traj.name for traj in trajs]
    return pd.DataFrame(values, index=names, columns=names)
