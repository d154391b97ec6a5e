"""Pairwise shape similarity between trajectories, with Monte Carlo tests.

`simil_dtw_metric` and `simil_frechet_metric` compare every pair of
trajectories in a track. When a `~trackway.simulation.SimulationBatch` is
given, the same comparison is repeated on every simulated set and the
observed distances are tested for being smaller (more similar) than chance.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import pandas as pd

from trackway._pairwise import PairKernel, pairwise_matrix
from trackway._validation import coerce_enum
from trackway.progress import ProgressCallback, ProgressEvent, report_progress
from trackway.results import PairwiseMetricResult
from trackway.similarity.distance import dtw_distance, frechet_distance
from trackway.similarity.superposition import Superposition, superpose_all
from trackway.simulation.batch import (
    SimulatedTrajectorySet,
    SimulationBatch,
    validate_against_track,
)
from trackway.stats.montecarlo import monte_carlo_test
from trackway.track import Track, Trajectory

__all__ = ["pairwise_distance_matrix", "simil_dtw_metric", "simil_frechet_metric"]

logger = logging.getLogger("trackway.similarity")


def pairwise_distance_matrix(
    trajectories: Track | SimulatedTrajectorySet | Sequence[Trajectory],
    kernel: PairKernel,
) -> pd.DataFrame:
    """Distance `kernel` evaluated on every unordered pair of trajectories.

    Returns
    -------
    pandas.DataFrame
        Symmetric distance matrix labelled by trajectory name with a NaN
        diagonal.

    Raises
    ------
    InvariantError
        If fewer than two trajectories are given.
    """
    return pairwise_matrix(trajectories, kernel)


def _similarity_metric(
    metric: str,
    kernel: PairKernel,
    track: Track,
    sim: SimulationBatch | Sequence[SimulatedTrajectorySet] | None,
    superposition: Superposition | str,
    progress: ProgressCallback | None,
) -> PairwiseMetricResult:
    mode = coerce_enum(superposition, Superposition, "superposition")
    if sim is not None:
        validate_against_track(sim, track)

    observed = pairwise_distance_matrix(superpose_all(track, mode), kernel)
    if sim is None:
        return PairwiseMetricResult(metric, observed, superposition=mode.value)

    description = f"{metric} metric"
    nsim = len(sim)
    simulated = []
    for k, sim_set in enumerate(sim, start=1):
        matrix = pairwise_distance_matrix(superpose_all(sim_set, mode), kernel)
        simulated.append(matrix)
        report_progress(
            progress,
            logger,
            ProgressEvent("metric", k, nsim, description=description, matrix=matrix),
        )

    test = monte_carlo_test(observed, simulated, tail="less")
    report_progress(
        progress, logger, ProgressEvent("completed", nsim, nsim, description=description)
    )
    return PairwiseMetricResult(
        metric,
        observed,
        test=test,
        simulations=tuple(simulated),
        superposition=mode.value,
    )


def simil_dtw_metric(
    track: Track,
    *,
    sim: SimulationBatch | Sequence[SimulatedTrajectorySet] | None = None,
    superposition: Superposition | str = Superposition.NONE,
    progress: ProgressCallback | None = None,
) -> PairwiseMetricResult:
    """Dynamic time warping distance between every pair of trajectories.

    Parameters
    ----------
    track : Track
        Observed track with at least two trajectories.
    sim : SimulationBatch, optional
        Simulations of `track`. When given, every observed distance is
        tested against the simulated distances of the same pair.
    superposition : {"None", "Centroid", "Origin"}, default="None"
        Per-trajectory translation applied to the observed track and to
        every simulated set before distances are computed.
    progress : callable, optional
        Receives a ``"metric"`` event for each simulation iteration and a
        ``"completed"`` event at the end of the test.

    Returns
    -------
    PairwiseMetricResult
        ``observed`` always; p-value matrices, the global p-value and the
        per-iteration matrices when `sim` is given. Smaller distances mean
        more similar trajectories, so the test is lower-tailed.

    Raises
    ------
    ConfigurationError
        If `superposition` is unknown or `sim` was built from different
        trajectories.
    InvariantError
        If the track has fewer than two trajectories.

    See Also
    --------
    trackway.similarity.distance.dtw_distance : Kernel for a single pair.

    Examples
    --------
    >>> import numpy as np
    >>> from trackway.track import Track
    >>> from trackway.similarity import simil_dtw_metric
    >>> line = np.column_stack([np.arange(5.0), np.zeros(5)])
    >>> result = simil_dtw_metric(Track.from_points([line, line + [0, 1]]))
    >>> float(result.observed.loc["Track_1", "Track_2"])
    5.0
    """
    return _similarity_metric("DTW", dtw_distance, track, sim, superposition, progress)


def simil_frechet_metric(
    track: Track,
    *,
    sim: SimulationBatch | Sequence[SimulatedTrajectorySet] | None = None,
    superposition: Superposition | str = Superposition.NONE,
    progress: ProgressCallback | None = None,
) -> PairwiseMetricResult:
    """Fréchet distance between every pair of trajectories.

    Parameters and return value are as for `simil_dtw_metric`.

    Notes
    -----
    Pairs for which no meaningful distance exists hold
    `~trackway.similarity.distance.FRECHET_INVALID` (-1). The value is kept
    as is and compared like any other number in the Monte Carlo test, so a
    simulated -1 always counts as at least as similar as a valid observed
    distance.

    Examples
    --------
    >>> import numpy as np
    >>> from trackway.track import Track
    >>> from trackway.similarity import simil_frechet_metric
    >>> line = np.column_stack([np.arange(5.0), np.zeros(5)])
    >>> result = simil_frechet_metric(Track.from_points([line, line + [0, 1]]))
    >>> float(result.observed.loc["Track_1", "Track_2"])
    1.0
    """
    return _similarity_metric(
        "Frechet", frechet_distance, track, sim, superposition, progress
    )
