"""Per-trajectory alignment before shape comparison."""

from __future__ import annotations

from enum import Enum
from typing import TypeVar

import numpy as np

from trackway._validation import coerce_enum
from trackway.track import Trajectory

__all__ = ["Superposition", "superpose", "superpose_all"]

T = TypeVar("T")


class Superposition(str, Enum):
    """How each trajectory is translated before comparison.

    Attributes
    ----------
    NONE : str
        Coordinates are used as given.
    CENTROID : str
        Each trajectory is centred on its own mean position.
    ORIGIN : str
        Each trajectory is moved so that its first point is at (0, 0).
    """

    NONE = "None"
    CENTROID = "Centroid"
    ORIGIN = "Origin"


def superpose(
    trajectory: Trajectory, mode: Superposition | str = Superposition.NONE
) -> Trajectory:
    """Translate one trajectory according to `mode`.

    The translation is computed from the trajectory itself, never from the
    rest of the track.

    Parameters
    ----------
    trajectory : Trajectory
    mode : Superposition or str, default="None"

    Returns
    -------
    Trajectory
        `trajectory` itself for ``"None"``, otherwise a translated copy.

    Examples
    --------
    >>> from trackway.track import Trajectory
    >>> from trackway.similarity.superposition import superpose
    >>> superpose(Trajectory("T", [[2, 2], [4, 2]]), "Origin").points
    array([[0., 0.],
           [2., 0.]])
    >>> superpose(Trajectory("T", [[2, 2], [4, 2]]), "Centroid").points
    array([[-1.,  0.],
           [ 1.,  0.]])
    """
    mode = coerce_enum(mode, Superposition, "superposition")
    if mode is Superposition.NONE:
        return trajectory
    elif mode is Superposition.CENTROID:
        offset = np.mean(trajectory.points, axis=0)
    elif mode is Superposition.ORIGIN:
        offset = trajectory.points[0]
    else:  # pragma: no cover - exhaustive over Superposition
        raise AssertionError(f"Unhandled superposition {mode!r}")
    return trajectory.with_points(trajectory.points - offset)


def superpose_all(collection: T, mode: Superposition | str = Superposition.NONE) -> T:
    """Superpose every trajectory of a `Track` or simulated set.

    Returns the collection unchanged for ``"None"``.
    """
    mode = coerce_enum(mode, Superposition, "superposition")
    if mode is Superposition.NONE:
        return collection
    return collection.replace_trajectories(  # type: ignore[attr-defined]
        tuple(superpose(traj, mode) for traj in collection)  # type: ignore[attr-defined]
    )
