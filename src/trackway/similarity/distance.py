"""Pairwise trajectory distance kernels.

Both kernels compare two ordered point sequences of possibly different
lengths through monotone couplings of their indices, using Euclidean local
costs:

- Dynamic time warping sums the local costs along the cheapest coupling.
- The discrete Fréchet distance takes the largest local cost along the
  coupling that minimizes it (the "leash length").

References
----------
.. [1] Giorgino, T. (2009). Computing and visualizing dynamic time warping
       alignments in R: the dtw package. Journal of Statistical Software,
       31(7), 1-24.
.. [2] Eiter, T., & Mannila, H. (1994). Computing discrete Fréchet distance.
       Technical Report CD-TR 94/64, TU Wien.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.spatial.distance import cdist

from trackway.track import Trajectory

__all__ = ["FRECHET_INVALID", "dtw_distance", "frechet_distance", "local_costs"]

logger = logging.getLogger("trackway.similarity")

FRECHET_INVALID = -1.0
"""Value returned by `frechet_distance` when no meaningful distance exists.

It is an ordinary float, so it flows through metric matrices and tail
comparisons like any other value.
"""


def _as_points(points: Trajectory | ArrayLike) -> NDArray[np.float64]:
    if isinstance(points, Trajectory):
        return points.points
    pts = np.asarray(points, dtype=np.float64)
    if pts.size == 0:
        return pts.reshape(0, 2)
    return pts


def local_costs(
    a: Trajectory | ArrayLike, b: Trajectory | ArrayLike
) -> NDArray[np.float64]:
    """Euclidean distance between every point of `a` and every point of `b`.

    Returns
    -------
    NDArray[np.float64], shape (len(a), len(b))
    """
    return cdist(_as_points(a), _as_points(b), metric="euclidean")


def dtw_distance(a: Trajectory | ArrayLike, b: Trajectory | ArrayLike) -> float:
    """Dynamic time warping distance between two trajectories.

    Parameters
    ----------
    a, b : Trajectory or array_like, shape (n_points, 2)
        Point sequences. Lengths may differ.

    Returns
    -------
    float
        Cumulative Euclidean cost of the optimal warping path from
        ``(a[0], b[0])`` to ``(a[-1], b[-1])``. Non-negative, 0 for identical
        sequences. NaN if either sequence has non-finite coordinates,
        which the Monte Carlo test never counts as extreme.

    Raises
    ------
    ValueError
        If either sequence is empty.

    Notes
    -----
    Uses the symmetric step pattern with unit weights and no normalization:

    .. math::

        g_{i,j} = d_{i,j} + \\min(g_{i-1,j},\\ g_{i,j-1},\\ g_{i-1,j-1})

    For two parallel, equally spaced lines of ``n`` points at perpendicular
    offset ``h`` the optimal path is the diagonal and the distance is
    ``n * h``.

    Examples
    --------
    >>> import numpy as np
    >>> from trackway.similarity.distance import dtw_distance
    >>> a = np.column_stack([np.arange(5.0), np.zeros(5)])
    >>> dtw_distance(a, a + [0.0, 2.0])
    10.0
    """
    cost = local_costs(a, b)
    n, m = cost.shape
    if n == 0 or m == 0:
        raise ValueError("DTW needs two non-empty point sequences.")
    if not np.all(np.isfinite(cost)):
        logger.debug("DTW distance of non-finite coordinates; returning NaN")
        return float("nan")

    g = np.full((n + 1, m + 1), np.inf)
    g[0, 0] = 0.0
    for i in range(1, n + 1):
        row_prev = g[i - 1]
        row = g[i]
        for j in range(1, m + 1):
            row[j] = cost[i - 1, j - 1] + min(row_prev[j], row[j - 1], row_prev[j - 1])
    return float(g[n, m])


def frechet_distance(a: Trajectory | ArrayLike, b: Trajectory | ArrayLike) -> float:
    """Discrete Fréchet distance between two trajectories.

    Parameters
    ----------
    a, b : Trajectory or array_like, shape (n_points, 2)
        Point sequences. Lengths may differ.

    Returns
    -------
    float
        The smallest leash length with which both sequences can be
        traversed monotonically, or `FRECHET_INVALID` (-1.0) when either
        sequence is empty, contains non-finite coordinates, or the leash
        length overflows.

    Notes
    -----
    The discrete distance is an upper bound of the continuous Fréchet
    distance and converges to it as the sequences are densified. Two
    parallel lines at perpendicular offset ``h`` have distance ``h``.

    Examples
    --------
    >>> import numpy as np
    >>> from trackway.similarity.distance import frechet_distance
    >>> a = np.column_stack([np.arange(5.0), np.zeros(5)])
    >>> frechet_distance(a, a + [0.0, 2.0])
    2.0
    >>> frechet_distance(a, [[np.nan, 0.0]])
    -1.0
    """
    pa = _as_points(a)
    pb = _as_points(b)
    if len(pa) == 0 or len(pb) == 0:
        logger.debug("Fréchet distance of an empty sequence; returning %s", FRECHET_INVALID)
        return FRECHET_INVALID
    if not (np.all(np.isfinite(pa)) and np.all(np.isfinite(pb))):
        logger.debug("Fréchet distance of non-finite coordinates; returning %s", FRECHET_INVALID)
        return FRECHET_INVALID

    cost = local_costs(pa, pb)
    n, m = cost.shape

    # Coupling cost: ca[i, j] = max(min(ca[i-1, j], ca[i-1, j-1], ca[i, j-1]), d[i, j])
    ca = np.empty((n, m))
    ca[0, :] = np.maximum.accumulate(cost[0, :])
    ca[:, 0] = np.maximum.accumulate(cost[:, 0])
    for i in range(1, n):
        prev = ca[i - 1]
        row = ca[i]
        for j in range(1, m):
            row[j] = max(min(prev[j], prev[j - 1], row[j - 1]), cost[i, j])

    leash = float(ca[n - 1, m - 1])
    if not np.isfinite(leash):
        logger.debug("Fréchet leash length overflowed; returning %s", FRECHET_INVALID)
        return FRECHET_INVALID
    return leash
