"""Trajectory characterization metrics.

This module provides the step-length and turning-angle descriptors from which
the movement models in `trackway.simulation` are fitted. They follow the
conventions used in trajectory-analysis toolkits for animal movement: step
lengths are Euclidean distances between consecutive positions, and turning
angles are signed changes of heading between consecutive steps.

References
----------
.. [1] McLean, D. J., & Skowron Volponi, M. A. (2018). trajr: An R package
       for characterisation of animal trajectories. Ethology, 124(6),
       440-448.
.. [2] Batschelet, E. (1981). Circular Statistics in Biology. Academic Press.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from trackway.metrics.circular import circular_mean, circular_std
from trackway.track import Trajectory

__all__ = [
    "MovementStatistics",
    "compute_step_lengths",
    "compute_turn_angles",
    "movement_statistics",
    "overall_bearing",
]

_MAX_TURN_STD = 2 * np.pi


def _as_points(points: Trajectory | ArrayLike) -> NDArray[np.float64]:
    if isinstance(points, Trajectory):
        return points.points
    return np.asarray(points, dtype=np.float64)


def compute_step_lengths(points: Trajectory | ArrayLike) -> NDArray[np.float64]:
    """
    Compute step lengths (distances) between consecutive positions.

    Parameters
    ----------
    points : Trajectory or array_like, shape (n_points, 2)
        Positions in traversal order.

    Returns
    -------
    NDArray[np.float64], shape (n_points - 1,)
        Euclidean distance of each step.

    Examples
    --------
    >>> from trackway.metrics.trajectory import compute_step_lengths
    >>> compute_step_lengths([[0, 0], [3, 4], [3, 5]])
    array([5., 1.])
    """
    pts = _as_points(points)
    return np.linalg.norm(np.diff(pts, axis=0), axis=1)


def compute_turn_angles(points: Trajectory | ArrayLike) -> NDArray[np.float64]:
    """
    Compute turn angles between consecutive movement vectors.

    A turn angle of 0 indicates straight movement, positive angles indicate
    left (counter-clockwise) turns, and negative angles right turns.

    Parameters
    ----------
    points : Trajectory or array_like, shape (n_points, 2)
        Positions in traversal order.

    Returns
    -------
    NDArray[np.float64], shape (n_points - 2,)
        Turn angles in radians, in the range [-π, π]. Empty when fewer than
        three points are given.

    Notes
    -----
    Turn angles are computed from the angle between consecutive movement
    vectors:

    .. math::

        \\theta_i = \\text{atan2}(v_i \\times v_{i+1}, v_i \\cdot v_{i+1})

    A zero-length step has no heading; the turn into or out of it is 0.

    Examples
    --------
    >>> import numpy as np
    >>> from trackway.metrics.trajectory import compute_turn_angles
    >>> angles = compute_turn_angles([[0, 0], [1, 0], [1, 1], [0, 1]])
    >>> np.allclose(angles, [np.pi / 2, np.pi / 2])
    True
    """
    pts = _as_points(points)
    if len(pts) < 3:
        return np.array([], dtype=np.float64)

    vectors = np.diff(pts, axis=0)
    v1 = vectors[:-1]
    v2 = vectors[1:]
    cross = v1[:, 0] * v2[:, 1] - v1[:, 1] * v2[:, 0]
    dot = np.sum(v1 * v2, axis=1)
    return np.arctan2(cross, dot)


def overall_bearing(points: Trajectory | ArrayLike) -> float:
    """Straight-line direction from the first to the last position.

    Parameters
    ----------
    points : Trajectory or array_like, shape (n_points, 2)
        Positions in traversal order.

    Returns
    -------
    float
        Bearing in radians, counter-clockwise from the positive x axis. If
        the path ends where it started, the heading of the first non-zero
        step is returned instead; 0.0 if the trajectory never moves.

    Examples
    --------
    >>> import numpy as np
    >>> from trackway.metrics.trajectory import overall_bearing
    >>> bool(np.isclose(overall_bearing([[0, 0], [1, 2], [0, 4]]), np.pi / 2))
    True
    """
    pts = _as_points(points)
    displacement = pts[-1] - pts[0]
    if np.any(displacement != 0):
        return float(np.arctan2(displacement[1], displacement[0]))

    steps = np.diff(pts, axis=0)
    moving = np.flatnonzero(np.any(steps != 0, axis=1))
    if len(moving) == 0:
        return 0.0
    first = steps[moving[0]]
    return float(np.arctan2(first[1], first[0]))


@dataclass(frozen=True, eq=False)
class MovementStatistics:
    """Step-length and turning-angle summary of one trajectory.

    Attributes
    ----------
    step_lengths : NDArray[np.float64], shape (n_points - 1,)
    turn_angles : NDArray[np.float64], shape (n_points - 2,)
    mean_step_length : float
    std_step_length : float
        Sample standard deviation (ddof=1); 0 for a single step.
    mean_turn_angle : float
        Circular mean, radians.
    std_turn_angle : float
        Circular standard deviation, radians.
    bearing : float
        Overall start-to-end bearing, radians.
    """

    step_lengths: NDArray[np.float64]
    turn_angles: NDArray[np.float64]
    mean_step_length: float
    std_step_length: float
    mean_turn_angle: float
    std_turn_angle: float
    bearing: float


def movement_statistics(trajectory: Trajectory | ArrayLike) -> MovementStatistics:
    """Summarize step lengths and turning angles of a trajectory.

    Undefined dispersion estimates (fewer than two samples) are reported as
    0 so that downstream draws degrade to noiseless movement rather than
    propagating NaN. A turning-angle sample with no preferred direction at
    all (R = 0) is capped at 2π, which is effectively uniform once wrapped.

    Parameters
    ----------
    trajectory : Trajectory or array_like, shape (n_points, 2)

    Returns
    -------
    MovementStatistics
    """
    steps = compute_step_lengths(trajectory)
    angles = compute_turn_angles(trajectory)

    mean_step = float(np.mean(steps)) if len(steps) else 0.0
    std_step = float(np.std(steps, ddof=1)) if len(steps) > 1 else 0.0
    std_angle = circular_std(angles) if len(angles) else 0.0
    if np.isinf(std_angle):
        # R == 0: turning angles carry no directional information.
        std_angle = _MAX_TURN_STD

    return MovementStatistics(
        step_lengths=steps,
        turn_angles=angles,
        mean_step_length=mean_step,
        std_step_length=std_step if np.isfinite(std_step) else 0.0,
        mean_turn_angle=circular_mean(angles) if len(angles) else np.nan,
        std_turn_angle=std_angle if np.isfinite(std_angle) else 0.0,
        bearing=overall_bearing(trajectory),
    )
