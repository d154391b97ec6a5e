"""Trajectory simulation functions for generating null movement patterns.

A simulated trajectory keeps the step-length and turning-angle statistics of
an empirical trajectory while discarding everything else about its path.
Comparing observed trackways against many such simulations tells whether
their relationship (similarity, crossings) is more structured than chance.

All three movement models are correlated random walks of the same length as
the source, starting at the source's first point:

1. Step lengths are drawn from ``Normal(mean_step, std_step)``.
2. Heading increments are drawn from ``Normal(0, std_turn)``, where
   ``std_turn`` is the circular standard deviation of the source's turning
   angles, and accumulated into a heading sequence.
3. The models differ only in the initial heading:

   - ``Directed`` and ``Constrained`` start along the source's overall
     start-to-end bearing.
   - ``Unconstrained`` starts in a uniformly random direction.
"""

from __future__ import annotations

import logging
from enum import Enum

import numpy as np
from numpy.typing import NDArray

from trackway._rng import _ensure_rng
from trackway._validation import coerce_enum
from trackway.errors import InsufficientDataError
from trackway.metrics.trajectory import movement_statistics
from trackway.track import Trajectory

__all__ = ["MIN_POINTS", "MovementModel", "simulate_trajectory"]

logger = logging.getLogger("trackway.simulation")

MIN_POINTS = 4
"""Fewest points from which a movement model can be fitted."""

_STEP_FLOOR_FRACTION = 1e-6


class MovementModel(str, Enum):
    """Generative models for simulated trajectories.

    Attributes
    ----------
    DIRECTED : str
        Starts along the empirical overall bearing. Suited to movement toward
        a resource or along a corridor.
    CONSTRAINED : str
        Correlated random walk anchored to the empirical starting direction.
    UNCONSTRAINED : str
        Correlated random walk with a uniformly random starting direction.
        Pure exploratory movement with no relation to the source orientation.

    Notes
    -----
    Directed and Constrained currently share the same recursion and initial
    heading, so given the same generator state they produce identical
    trajectories. Both names are kept because they encode different
    biological hypotheses.
    """

    DIRECTED = "Directed"
    CONSTRAINED = "Constrained"
    UNCONSTRAINED = "Unconstrained"


def _step_floor(mean_step: float) -> float:
    return max(_STEP_FLOOR_FRACTION * mean_step, np.finfo(np.float64).tiny)


def _draw_step_lengths(
    generator: np.random.Generator, mean: float, std: float, n: int
) -> NDArray[np.float64]:
    """Draw strictly positive step lengths.

    Negative draws are reflected and anything below the floor is clipped up
    to it.
    """
    steps = np.abs(generator.normal(mean, std, size=n))
    floor = _step_floor(mean)
    n_clipped = int(np.sum(steps < floor))
    if n_clipped:
        logger.debug("Clipped %d non-positive step length(s) to %.3g", n_clipped, floor)
    return np.maximum(steps, floor)


def _initial_heading(
    model: MovementModel, bearing: float, generator: np.random.Generator
) -> float:
    if model in (MovementModel.DIRECTED, MovementModel.CONSTRAINED):
        return bearing
    elif model is MovementModel.UNCONSTRAINED:
        return float(generator.uniform(0.0, 2 * np.pi))
    else:  # pragma: no cover - exhaustive over MovementModel
        raise AssertionError(f"Unhandled movement model {model!r}")


def simulate_trajectory(
    trajectory: Trajectory,
    model: MovementModel | str = MovementModel.UNCONSTRAINED,
    *,
    rng: np.random.Generator | int | None = None,
) -> Trajectory:
    """Simulate one trajectory from the movement statistics of another.

    Parameters
    ----------
    trajectory : Trajectory
        Empirical trajectory with at least four points.
    model : MovementModel or str, default=MovementModel.UNCONSTRAINED
        Generative model ("Directed", "Constrained" or "Unconstrained").
    rng : np.random.Generator | int | None, default=None
        Random number generator for reproducibility.

        - If Generator: Use directly
        - If int: Seed for ``np.random.default_rng()``
        - If None: Use default RNG (not reproducible)

    Returns
    -------
    Trajectory
        Simulated trajectory with the same name, time index and number of
        points as `trajectory`, starting at the same position.

    Raises
    ------
    InsufficientDataError
        If `trajectory` has fewer than four points.
    ConfigurationError
        If `model` is not a known movement model.

    Notes
    -----
    With ``n`` source points, ``n - 1`` step lengths ``s_k`` and ``n - 2``
    heading increments ``d_k`` are drawn. Headings follow

    .. math::

        h_1 = h_0, \\qquad h_{k+1} = h_k + d_k

    and positions are the cumulative sum of ``s_k (cos h_k, sin h_k)``
    translated to the source start. A source with zero step-length variance
    and zero turning variance yields a perfectly regular straight line.

    Examples
    --------
    >>> import numpy as np
    >>> from trackway.track import Trajectory
    >>> from trackway.simulation.trajectory import simulate_trajectory
    >>> source = Trajectory("T1", np.column_stack([np.arange(6.0), np.zeros(6)]))
    >>> sim = simulate_trajectory(source, "Directed", rng=0)
    >>> sim.n_points
    6
    >>> np.allclose(sim.points[-1], [5.0, 0.0])  # noiseless source
    True
    """
    model = coerce_enum(model, MovementModel, "model")
    if trajectory.n_points < MIN_POINTS:
        raise InsufficientDataError(trajectory.name, trajectory.n_points, MIN_POINTS)

    generator = _ensure_rng(rng)
    stats = movement_statistics(trajectory)
    n_steps = trajectory.n_points - 1

    steps = _draw_step_lengths(
        generator, stats.mean_step_length, stats.std_step_length, n_steps
    )
    turns = generator.normal(0.0, stats.std_turn_angle, size=n_steps - 1)
    heading0 = _initial_heading(model, stats.bearing, generator)
    headings = heading0 + np.concatenate([[0.0], np.cumsum(turns)])

    increments = np.column_stack([steps * np.cos(headings), steps * np.sin(headings)])
    points = np.vstack([np.zeros((1, 2)), np.cumsum(increments, axis=0)])
    points += trajectory.points[0]

    return trajectory.with_points(points)
