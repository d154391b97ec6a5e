"""Batched simulation of whole tracks.

`simulate_track` runs the trajectory generator independently for every
trajectory of a track and every iteration, producing the null distribution
against which observed similarity and intersection metrics are tested.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

import numpy as np
from tqdm.auto import tqdm

from trackway._rng import _spawn_rngs
from trackway._validation import coerce_enum, validate_nsim
from trackway.errors import ConfigurationError, InsufficientDataError, InvariantError
from trackway.progress import ProgressCallback, ProgressEvent, report_progress
from trackway.simulation.trajectory import MIN_POINTS, MovementModel, simulate_trajectory
from trackway.track import Track, Trajectory

__all__ = [
    "SimulatedTrajectorySet",
    "SimulationBatch",
    "simulate_track",
    "validate_against_track",
]

logger = logging.getLogger("trackway.simulation")


@dataclass(frozen=True, eq=False)
class SimulatedTrajectorySet:
    """One simulation iteration: a simulated counterpart for every trajectory.

    Behaves like a `~trackway.track.Track` for the metric functions: it can
    be iterated, indexed by position or name, and exposes ``names``.

    Attributes
    ----------
    iteration : int
        1-based iteration index within its batch.
    trajectories : tuple of Trajectory
        Simulated trajectories, in the order of the source track.
    """

    iteration: int
    trajectories: tuple[Trajectory, ...]

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(traj.name for traj in self.trajectories)

    def replace_trajectories(self, trajectories: tuple[Trajectory, ...]) -> SimulatedTrajectorySet:
        """Return a set with the same iteration index and new trajectories."""
        return SimulatedTrajectorySet(self.iteration, tuple(trajectories))

    def __len__(self) -> int:
        return len(self.trajectories)

    def __iter__(self) -> Iterator[Trajectory]:
        return iter(self.trajectories)

    def __getitem__(self, key: int | str) -> Trajectory:
        if isinstance(key, str):
            for traj in self.trajectories:
                if traj.name == key:
                    return traj
            raise KeyError(f"No trajectory named '{key}'. Available: {list(self.names)}")
        return self.trajectories[key]


@dataclass(frozen=True, eq=False)
class SimulationBatch:
    """Result of `simulate_track`.

    Attributes
    ----------
    sets : tuple of SimulatedTrajectorySet
        One set per iteration, in iteration order.
    model : MovementModel
        Movement model used for every trajectory.
    model_defaulted : bool
        True when no model was requested and the Unconstrained default was
        applied. Automated callers can check this instead of capturing the
        warning.
    source_names : tuple of str
        Names of the source track's trajectories.
    """

    sets: tuple[SimulatedTrajectorySet, ...]
    model: MovementModel
    model_defaulted: bool
    source_names: tuple[str, ...]

    @property
    def nsim(self) -> int:
        """Number of simulation iterations."""
        return len(self.sets)

    def iteration(self, k: int) -> SimulatedTrajectorySet:
        """Return iteration `k` (1-based)."""
        if not 1 <= k <= len(self.sets):
            raise IndexError(f"Iteration {k} out of range 1..{len(self.sets)}.")
        return self.sets[k - 1]

    def __len__(self) -> int:
        return len(self.sets)

    def __iter__(self) -> Iterator[SimulatedTrajectorySet]:
        return iter(self.sets)

    def __getitem__(self, index: int) -> SimulatedTrajectorySet:
        return self.sets[index]


def _check_lengths(track: Track) -> None:
    for traj in track:
        if traj.n_points < MIN_POINTS:
            raise InsufficientDataError(traj.name, traj.n_points, MIN_POINTS)


def simulate_track(
    track: Track,
    nsim: int = 1000,
    model: MovementModel | str | None = None,
    *,
    rng: np.random.Generator | int | None = None,
    show_progress: bool = False,
    progress: ProgressCallback | None = None,
) -> SimulationBatch:
    """Simulate every trajectory of a track `nsim` times.

    Parameters
    ----------
    track : Track
        Observed track. Every trajectory needs at least four points.
    nsim : int, default=1000
        Number of simulation iterations.
    model : MovementModel or str, optional
        Movement model ("Directed", "Constrained" or "Unconstrained"). If
        omitted, Unconstrained is used and a `UserWarning` is issued, since
        the choice changes the scientific interpretation of any test built
        on the batch.
    rng : np.random.Generator | int | None, default=None
        Random number generator for reproducibility.

        - If Generator: Use directly
        - If int: Seed for ``np.random.default_rng()``
        - If None: Use default RNG (not reproducible)
    show_progress : bool, default=False
        Show a progress bar over iterations.
    progress : callable, optional
        Called with a `~trackway.progress.ProgressEvent` after every
        iteration.

    Returns
    -------
    SimulationBatch
        `nsim` simulated trajectory sets.

    Raises
    ------
    InsufficientDataError
        If any trajectory has fewer than four points. Nothing is simulated.
    ConfigurationError
        If `nsim` is not a positive integer or `model` is unknown.

    Notes
    -----
    Each iteration draws from its own child generator spawned from `rng`, so
    iteration ``k`` of a seeded batch is the same regardless of how many
    iterations are requested or in which order they are computed.

    Examples
    --------
    >>> import numpy as np
    >>> from trackway.track import Track
    >>> from trackway.simulation.batch import simulate_track
    >>> track = Track.from_points([np.column_stack([np.arange(5.0), np.zeros(5)])])
    >>> batch = simulate_track(track, nsim=3, model="Directed", rng=1)
    >>> batch.nsim, batch.model_defaulted
    (3, False)
    """
    nsim = validate_nsim(nsim)
    model_defaulted = model is None
    if model_defaulted:
        warnings.warn(
            "No movement model given; using 'Unconstrained'. Pass model= explicitly "
            "to choose 'Directed', 'Constrained' or 'Unconstrained'.",
            UserWarning,
            stacklevel=2,
        )
        model = MovementModel.UNCONSTRAINED
    model = coerce_enum(model, MovementModel, "model")
    if len(track) == 0:
        raise InvariantError("Cannot simulate an empty track.")
    _check_lengths(track)

    logger.info(
        "Simulating %d iteration(s) of %d trajectories (model=%s)",
        nsim,
        len(track),
        model.value,
    )
    children = _spawn_rngs(rng, nsim)
    sets = []
    for k, child in enumerate(
        tqdm(children, total=nsim, desc="Simulating tracks", disable=not show_progress),
        start=1,
    ):
        simulated = tuple(simulate_trajectory(traj, model, rng=child) for traj in track)
        sets.append(SimulatedTrajectorySet(k, simulated))
        report_progress(
            progress,
            logger,
            ProgressEvent("simulation", k, nsim, description="Track simulation"),
        )

    return SimulationBatch(
        sets=tuple(sets),
        model=model,
        model_defaulted=model_defaulted,
        source_names=track.names,
    )


def validate_against_track(
    sim: SimulationBatch | Iterable[SimulatedTrajectorySet], track: Track
) -> None:
    """Check that every simulated set mirrors the trajectories of `track`.

    Raises
    ------
    ConfigurationError
        If `sim` is empty or any set holds differently named (or ordered)
        trajectories.
    """
    sets = list(sim)
    if not sets:
        raise ConfigurationError("The simulation batch is empty.", error_code="E2006")
    for sim_set in sets:
        if sim_set.names != track.names:
            raise ConfigurationError(
                f"Simulated set {sim_set.iteration} holds trajectories "
                f"{list(sim_set.names)}, but the track holds {list(track.names)}.\n"
                f"Fix: simulate from the same (subset) track that is being tested.",
                error_code="E2004",
            )
