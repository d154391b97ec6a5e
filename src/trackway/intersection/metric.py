"""Intersection counts between trajectories, with Monte Carlo tests.

Animals moving together (or avoiding each other) cross paths less often than
independent walkers would; an animal pursuing another crosses its path more
often. `track_intersection` counts the crossings of every pair of
trajectories and, given simulations, tests the counts in the direction of an
explicitly stated alternative hypothesis.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum

import numpy as np
from numpy.typing import ArrayLike
from shapely import Polygon

from trackway._pairwise import pairwise_matrix
from trackway._rng import _spawn_rngs
from trackway._validation import coerce_enum
from trackway.errors import ConfigurationError
from trackway.intersection.geometry import count_intersections
from trackway.intersection.origins import (
    OriginPermutation,
    observed_starts,
    origin_region,
    permute_origins,
)
from trackway.progress import ProgressCallback, ProgressEvent, report_progress
from trackway.results import PairwiseMetricResult
from trackway.simulation.batch import (
    SimulatedTrajectorySet,
    SimulationBatch,
    validate_against_track,
)
from trackway.stats.montecarlo import Tail, monte_carlo_test
from trackway.track import Track

__all__ = ["Hypothesis", "track_intersection"]

logger = logging.getLogger("trackway.intersection")


class Hypothesis(str, Enum):
    """Alternative hypothesis of an intersection test.

    Attributes
    ----------
    LOWER : str
        Fewer crossings than chance, e.g. gregarious or coordinated movement.
        A simulation is extreme when its count is ``<=`` the observed count.
    HIGHER : str
        More crossings than chance, e.g. chasing. A simulation is extreme
        when its count is ``>=`` the observed count.
    """

    LOWER = "Lower"
    HIGHER = "Higher"

    @property
    def tail(self) -> Tail:
        """Tail of the Monte Carlo test for this hypothesis."""
        if self is Hypothesis.LOWER:
            return "less"
        return "greater"


def track_intersection(
    track: Track,
    *,
    sim: SimulationBatch | Sequence[SimulatedTrajectorySet] | None = None,
    hypothesis: Hypothesis | str | None = None,
    origin_permutation: OriginPermutation | str = OriginPermutation.NONE,
    custom_coords: ArrayLike | Polygon | None = None,
    rng: np.random.Generator | int | None = None,
    progress: ProgressCallback | None = None,
) -> PairwiseMetricResult:
    """Count unique intersections between every pair of trajectories.

    Parameters
    ----------
    track : Track
        Observed track with at least two trajectories.
    sim : SimulationBatch, optional
        Simulations of `track`. When given, the observed counts are tested
        against the counts of every simulated set.
    hypothesis : {"Lower", "Higher"}, optional
        Alternative hypothesis. Required when `sim` is given; there is no
        default because the two directions have opposite interpretations.
    origin_permutation : {"None", "Min.Box", "Conv.Hull", "Custom"}, default="None"
        Region from which every simulated trajectory draws a new starting
        point before counting. Never applied to the observed track.
    custom_coords : array_like, shape (n_vertices, 2), or shapely.Polygon, optional
        Polygon for ``origin_permutation="Custom"``.
    rng : np.random.Generator | int | None, default=None
        Random number generator for origin permutation. Unused otherwise.
    progress : callable, optional
        Receives a ``"permutation"`` event per relocated set, a ``"metric"``
        event per simulation iteration and a final ``"completed"`` event.

    Returns
    -------
    PairwiseMetricResult
        Integral counts stored as float64 with a NaN diagonal, plus the test
        outputs when `sim` is given.

    Raises
    ------
    ConfigurationError
        If `sim` is given without `hypothesis`, an option value is unknown,
        the custom polygon is missing or malformed, or `sim` was built from
        different trajectories.
    InvariantError
        If the track has fewer than two trajectories.

    Examples
    --------
    >>> import numpy as np
    >>> from trackway.track import Track
    >>> from trackway.intersection import track_intersection
    >>> track = Track.from_points([
    ...     [[0, 0], [1, 1], [2, 2], [3, 3]],
    ...     [[0, 3], [1, 2], [2, 1], [3, 0]],
    ... ])
    >>> float(track_intersection(track).observed.loc["Track_1", "Track_2"])
    1.0
    """
    if hypothesis is not None:
        hypothesis = coerce_enum(hypothesis, Hypothesis, "hypothesis")
    mode = coerce_enum(origin_permutation, OriginPermutation, "origin_permutation")

    if sim is not None and hypothesis is None:
        raise ConfigurationError(
            "An intersection test needs an alternative hypothesis.\n"
            "Fix: pass hypothesis='Lower' (fewer crossings than chance) or "
            "hypothesis='Higher' (more crossings than chance).",
            error_code="E2002",
        )

    observed = pairwise_matrix(track, count_intersections)
    if sim is None:
        return PairwiseMetricResult(
            "Intersection",
            observed,
            hypothesis=None if hypothesis is None else hypothesis.value,
            origin_permutation=mode.value,
        )

    validate_against_track(sim, track)
    region = origin_region(observed_starts(track), mode, custom_coords)
    nsim = len(sim)
    children = _spawn_rngs(rng, nsim) if region is not None else [None] * nsim

    description = "Intersection metric"
    simulated = []
    for k, (sim_set, child) in enumerate(zip(sim, children, strict=True), start=1):
        if region is not None:
            sim_set = permute_origins(sim_set, region, child)
            report_progress(
                progress,
                logger,
                ProgressEvent("permutation", k, nsim, description=description),
            )
        matrix = pairwise_matrix(sim_set, count_intersections)
        simulated.append(matrix)
        report_progress(
            progress,
            logger,
            ProgressEvent("metric", k, nsim, description=description, matrix=matrix),
        )

    test = monte_carlo_test(observed, simulated, tail=hypothesis.tail)
    report_progress(
        progress, logger, ProgressEvent("completed", nsim, nsim, description=description)
    )
    return PairwiseMetricResult(
        "Intersection",
        observed,
        test=test,
        simulations=tuple(simulated),
        hypothesis=hypothesis.value,
        origin_permutation=mode.value,
    )
