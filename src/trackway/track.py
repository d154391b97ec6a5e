"""Trajectory and track data model.

A `Track` is a named collection of `Trajectory` objects sharing one
coordinate frame, for example all trackways digitized from one surface. Each
trajectory is the ordered sequence of midpoints between consecutive
footprints of one trackmaker. The footprints themselves travel alongside as
one table per trajectory; analysis code in this package never reads them.

Tracks are produced by an ingestion step (e.g. a landmark-file reader) and
are treated as read-only afterwards. All transforms return new objects.

Examples
--------
>>> import numpy as np
>>> from trackway.track import Track
>>> track = Track.from_points(
...     [np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0], [3.0, 0.0]]),
...      np.array([[0.0, 1.0], [1.0, 1.0], [2.0, 1.0], [3.0, 1.0]])]
... )
>>> track.names
('Track_1', 'Track_2')
>>> track["Track_2"].start
array([0., 1.])
"""

from __future__ import annotations

import warnings
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike, NDArray

from trackway.errors import ConfigurationError, InvariantError

__all__ = [
    "FootprintSide",
    "Track",
    "Trajectory",
    "default_trajectory_names",
    "subset_track",
]

FOOTPRINT_COLUMNS = ("X", "Y", "Side", "Missing")


class FootprintSide(str, Enum):
    """Side of the body a footprint belongs to."""

    LEFT = "L"
    RIGHT = "R"


def _readonly(array: NDArray) -> NDArray:
    array = np.array(array, copy=True)
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class Trajectory:
    """Ordered sequence of 2D positions travelled by one individual.

    Parameters
    ----------
    name : str
        Identifier of the trajectory, unique within its track.
    points : array_like, shape (n_points, 2)
        Positions in traversal order. Stored as a read-only float64 copy.
    time : array_like, shape (n_points,), optional
        Ordinal time index of each point. Defaults to ``0..n_points-1``.

    Raises
    ------
    InvariantError
        If `points` is not an (n, 2) array with n >= 1 or `time` has the
        wrong length.

    Examples
    --------
    >>> from trackway.track import Trajectory
    >>> traj = Trajectory("T1", [[0, 0], [3, 4]])
    >>> traj.n_points
    2
    >>> traj.translated(1.0, 1.0).start
    array([1., 1.])
    """

    name: str
    points: NDArray[np.float64]
    time: NDArray[np.float64] | None = None

    def __post_init__(self) -> None:
        points = np.asarray(self.points, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 2:
            raise InvariantError(
                f"Trajectory '{self.name}' points must have shape (n_points, 2), "
                f"got {points.shape}."
            )
        if points.shape[0] < 1:
            raise InvariantError(f"Trajectory '{self.name}' has no points.")

        if self.time is None:
            time = np.arange(points.shape[0], dtype=np.float64)
        else:
            time = np.asarray(self.time, dtype=np.float64).ravel()
            if time.shape[0] != points.shape[0]:
                raise InvariantError(
                    f"Trajectory '{self.name}' has {points.shape[0]} points but "
                    f"{time.shape[0]} time values."
                )

        object.__setattr__(self, "name", str(self.name))
        object.__setattr__(self, "points", _readonly(points))
        object.__setattr__(self, "time", _readonly(time))

    @property
    def n_points(self) -> int:
        """Number of positions in the trajectory."""
        return int(self.points.shape[0])

    @property
    def x(self) -> NDArray[np.float64]:
        return self.points[:, 0]

    @property
    def y(self) -> NDArray[np.float64]:
        return self.points[:, 1]

    @property
    def start(self) -> NDArray[np.float64]:
        """First position (a writable copy)."""
        return self.points[0].copy()

    def with_points(self, points: ArrayLike) -> Trajectory:
        """Return a trajectory with the same name and time but new positions."""
        return Trajectory(self.name, np.asarray(points, dtype=np.float64), self.time)

    def translated(self, dx: float, dy: float) -> Trajectory:
        """Return a copy shifted by ``(dx, dy)``."""
        return self.with_points(self.points + np.array([dx, dy]))

    def to_dataframe(self) -> pd.DataFrame:
        """Return the trajectory as a DataFrame with ``x``, ``y``, ``time`` columns."""
        return pd.DataFrame(
            {
                "x": self.points[:, 0],
                "y": self.points[:, 1],
                "time": self.time,
                "Trajectory": self.name,
            }
        )

    def __len__(self) -> int:
        return self.n_points


def default_trajectory_names(n: int) -> list[str]:
    """Generate ``Track_1 .. Track_n`` names, zero-padded to a common width.

    Examples
    --------
    >>> default_trajectory_names(3)
    ['Track_1', 'Track_2', 'Track_3']
    >>> default_trajectory_names(10)[:2]
    ['Track_01', 'Track_02']
    """
    width = len(str(n))
    return [f"Track_{str(i).zfill(width)}" for i in range(1, n + 1)]


def _validate_footprints(footprints: pd.DataFrame, name: str) -> pd.DataFrame:
    missing = [col for col in ("X", "Y") if col not in footprints.columns]
    if missing:
        raise InvariantError(
            f"Footprints of trajectory '{name}' lack columns {missing}; expected "
            f"{list(FOOTPRINT_COLUMNS)}."
        )
    return footprints.copy()


@dataclass(frozen=True, eq=False)
class Track:
    """Named collection of trajectories sharing one coordinate frame.

    Parameters
    ----------
    trajectories : sequence of Trajectory
        One trajectory per trackmaker. Names must be unique.
    footprints : sequence of pandas.DataFrame, optional
        One footprint table per trajectory with columns ``X``, ``Y``,
        ``Side`` ("L"/"R") and ``Missing`` ("Actual"/"Inferred").
    name : str, optional
        Name of the track (e.g. the site or surface).

    Raises
    ------
    InvariantError
        If the track is empty, names are duplicated, or the number of
        footprint tables does not match the number of trajectories.
    """

    trajectories: tuple[Trajectory, ...]
    footprints: tuple[pd.DataFrame, ...] | None = None
    name: str | None = None
    _index: dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        trajectories = tuple(self.trajectories)
        if len(trajectories) == 0:
            raise InvariantError("A track must contain at least one trajectory.")

        names = [traj.name for traj in trajectories]
        duplicated = sorted({n for n in names if names.count(n) > 1})
        if duplicated:
            raise InvariantError(f"Duplicate trajectory names in track: {duplicated}.")

        footprints = self.footprints
        if footprints is not None:
            footprints = tuple(footprints)
            if len(footprints) != len(trajectories):
                raise InvariantError(
                    f"Track has {len(trajectories)} trajectories but "
                    f"{len(footprints)} footprint tables."
                )
            footprints = tuple(
                _validate_footprints(fp, traj.name)
                for fp, traj in zip(footprints, trajectories, strict=True)
            )

        object.__setattr__(self, "trajectories", trajectories)
        object.__setattr__(self, "footprints", footprints)
        object.__setattr__(self, "_index", {n: i for i, n in enumerate(names)})

    @classmethod
    def from_points(
        cls,
        points: Mapping[str, ArrayLike] | Sequence[ArrayLike],
        *,
        footprints: Sequence[pd.DataFrame] | None = None,
        name: str | None = None,
    ) -> Track:
        """Build a track from raw ``(n_points, 2)`` coordinate arrays.

        Parameters
        ----------
        points : mapping of name to array, or sequence of arrays
            Coordinates per trajectory. Unnamed sequences get default names
            (see `default_trajectory_names`).
        footprints : sequence of pandas.DataFrame, optional
            Footprint tables, one per trajectory.
        name : str, optional
            Name of the track.

        Returns
        -------
        Track
        """
        if isinstance(points, Mapping):
            items = list(points.items())
        else:
            arrays = list(points)
            items = list(zip(default_trajectory_names(len(arrays)), arrays, strict=True))
        trajectories = tuple(Trajectory(n, np.asarray(p, dtype=np.float64)) for n, p in items)
        return cls(trajectories, footprints=footprints, name=name)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(traj.name for traj in self.trajectories)

    @property
    def n_trajectories(self) -> int:
        return len(self.trajectories)

    def replace_trajectories(self, trajectories: Sequence[Trajectory]) -> Track:
        """Return a track with new trajectories and the same footprints and name."""
        return Track(tuple(trajectories), footprints=self.footprints, name=self.name)

    def __len__(self) -> int:
        return len(self.trajectories)

    def __iter__(self) -> Iterator[Trajectory]:
        return iter(self.trajectories)

    def __getitem__(self, key: int | str) -> Trajectory:
        if isinstance(key, str):
            try:
                return self.trajectories[self._index[key]]
            except KeyError:
                raise KeyError(
                    f"No trajectory named '{key}'. Available: {list(self.names)}"
                ) from None
        return self.trajectories[key]


def subset_track(track: Track, indices: Sequence[int] | None = None) -> Track:
    """Keep a subset of trajectories (and their footprints) by 1-based index.

    Parameters
    ----------
    track : Track
        Track to subset.
    indices : sequence of int, optional
        1-based positions of the trajectories to keep, in the order given.
        If None, all trajectories are kept. Indices beyond the number of
        trajectories are ignored with a warning.

    Returns
    -------
    Track
        New track with the selected trajectories.

    Raises
    ------
    ConfigurationError
        If any index is not a positive integer, or no valid index remains.

    Examples
    --------
    >>> import numpy as np
    >>> from trackway.track import Track, subset_track
    >>> pts = [np.zeros((4, 2)) + i for i in range(3)]
    >>> subset_track(Track.from_points(pts), [1, 3]).names
    ('Track_1', 'Track_3')
    """
    if indices is None:
        return track

    indices = list(indices)
    if any(
        isinstance(i, bool) or not isinstance(i, (int, np.integer)) or i <= 0
        for i in indices
    ):
        raise ConfigurationError(
            f"Subset indices must be positive integers (1-based), got {indices}.",
            error_code="E2008",
        )

    out_of_range = [i for i in indices if i > len(track)]
    if out_of_range:
        warnings.warn(
            f"Indices {out_of_range} exceed the number of trajectories "
            f"({len(track)}) and will be ignored.",
            UserWarning,
            stacklevel=2,
        )
    kept = [int(i) - 1 for i in indices if i <= len(track)]
    if not kept:
        raise ConfigurationError(
            "No valid trajectory indices remain after subsetting.", error_code="E2008"
        )

    trajectories = [track.trajectories[i] for i in kept]
    footprints = None
    if track.footprints is not None:
        footprints = [track.footprints[i] for i in kept]
    return Track(tuple(trajectories), footprints=footprints, name=track.name)
