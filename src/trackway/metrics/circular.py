"""
Core circular statistics functions.

Turning angles are directional data: a turn of +179° and one of -179° are
nearly identical, so their dispersion must be measured on the circle rather
than on the line. This module provides the few circular summaries the
movement models need.

Angle Units
-----------
All functions take and return radians.

References
----------
Mardia, K.V. & Jupp, P.E. (2000). Directional Statistics. Wiley.
Batschelet, E. (1981). Circular Statistics in Biology. Academic Press.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.stats import directional_stats

__all__ = [
    "circular_mean",
    "circular_std",
    "mean_resultant_length",
    "wrap_angle",
]


def wrap_angle(angles: ArrayLike) -> NDArray[np.float64]:
    """Wrap angles to the interval (-π, π].

    Parameters
    ----------
    angles : array_like
        Angles in radians.

    Returns
    -------
    NDArray[np.float64]
        Wrapped angles.

    Examples
    --------
    >>> import numpy as np
    >>> from trackway.metrics.circular import wrap_angle
    >>> np.allclose(wrap_angle([3 * np.pi / 2, -3 * np.pi / 2]), [-np.pi / 2, np.pi / 2])
    True
    """
    angles = np.asarray(angles, dtype=np.float64)
    wrapped = np.mod(angles + np.pi, 2 * np.pi) - np.pi
    # Map -π to π so the interval is half-open on the left.
    return np.where(wrapped == -np.pi, np.pi, wrapped)


def _unit_vectors(angles: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.column_stack([np.cos(angles), np.sin(angles)])


def mean_resultant_length(angles: ArrayLike) -> float:
    """
    Compute mean resultant length (Rayleigh vector length).

    Parameters
    ----------
    angles : array_like
        Angles in radians. NaN values are ignored.

    Returns
    -------
    float
        Mean resultant length R in [0, 1], or NaN if no valid angle is given.

    Notes
    -----
    The mean resultant length is defined as:

        R = |mean(exp(i * angles))|

    R = 1 when all angles coincide and approaches 0 for angles spread
    uniformly around the circle.
    """
    angles = np.asarray(angles, dtype=np.float64).ravel()
    angles = angles[~np.isnan(angles)]
    if len(angles) == 0:
        return np.nan
    result = directional_stats(_unit_vectors(angles), normalize=False)
    return float(np.clip(result.mean_resultant_length, 0.0, 1.0))


def circular_mean(angles: ArrayLike) -> float:
    """Mean direction of a set of angles, in (-π, π].

    Returns NaN when no valid angle is given or the mean resultant vector has
    zero length (no preferred direction).
    """
    angles = np.asarray(angles, dtype=np.float64).ravel()
    angles = angles[~np.isnan(angles)]
    if len(angles) == 0:
        return np.nan
    sin_sum = np.sum(np.sin(angles))
    cos_sum = np.sum(np.cos(angles))
    if np.isclose(sin_sum, 0.0) and np.isclose(cos_sum, 0.0):
        return np.nan
    return float(wrap_angle(np.arctan2(sin_sum, cos_sum)))


def circular_std(angles: ArrayLike) -> float:
    """Circular standard deviation of a set of angles.

    Parameters
    ----------
    angles : array_like
        Angles in radians. NaN values are ignored.

    Returns
    -------
    float
        ``sqrt(-2 ln R)`` in radians, where R is the mean resultant length.
        Exactly 0 when all angles coincide. NaN if no valid angle is given.

    Notes
    -----
    For concentrated samples the circular standard deviation is close to the
    ordinary standard deviation of the angles, but it stays well defined
    across the ±π seam. It diverges as R approaches 0.

    Examples
    --------
    >>> import numpy as np
    >>> from trackway.metrics.circular import circular_std
    >>> circular_std(np.zeros(5))
    0.0
    >>> round(circular_std([np.pi - 0.1, -np.pi + 0.1]), 3)
    0.1
    """
    r = mean_resultant_length(angles)
    if np.isnan(r):
        return np.nan
    if r <= 0.0:
        return np.inf
    # -2 ln(1) can come out as -0.0; keep the result non-negative.
    return float(np.sqrt(max(0.0, -2.0 * np.log(r))))
