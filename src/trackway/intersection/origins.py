"""Random relocation of simulated trajectory starting points.

Simulated trajectories start where their observed counterparts start, which
keeps the spatial arrangement of the observed track in every simulation. For
intersection tests this arrangement can itself be randomized: each simulated
trajectory is translated wholesale so that it starts at a point drawn
uniformly from a region around the observed starting points.
"""

from __future__ import annotations

import logging
from enum import Enum

import numpy as np
import shapely
from numpy.typing import ArrayLike, NDArray
from shapely import LineString, MultiPoint, Point, Polygon

from trackway._rng import _ensure_rng
from trackway._validation import coerce_enum
from trackway.errors import ConfigurationError, InvariantError
from trackway.simulation.batch import SimulatedTrajectorySet
from trackway.track import Track

__all__ = [
    "OriginPermutation",
    "observed_starts",
    "origin_region",
    "permute_origins",
    "sample_in_region",
]

logger = logging.getLogger("trackway.intersection")

_MAX_REJECTION_ROUNDS = 1000


class OriginPermutation(str, Enum):
    """Region from which new starting points are drawn.

    Attributes
    ----------
    NONE : str
        Starting points are not changed.
    MIN_BOX : str
        Axis-aligned bounding box of the observed starting points.
    CONV_HULL : str
        Convex hull of the observed starting points.
    CUSTOM : str
        A user-supplied polygon.
    """

    NONE = "None"
    MIN_BOX = "Min.Box"
    CONV_HULL = "Conv.Hull"
    CUSTOM = "Custom"


def _custom_polygon(custom_coords: ArrayLike | Polygon | None) -> Polygon:
    if custom_coords is None:
        raise ConfigurationError(
            "origin_permutation='Custom' requires custom_coords.\n"
            "Fix: pass the polygon vertices as an (n_vertices, 2) array or a "
            "shapely Polygon.",
            error_code="E2005",
        )
    if isinstance(custom_coords, Polygon):
        polygon = custom_coords
    else:
        coords = np.asarray(custom_coords, dtype=np.float64)
        if coords.ndim != 2 or coords.shape[1] != 2 or coords.shape[0] < 3:
            raise ConfigurationError(
                f"custom_coords must be an (n_vertices, 2) array with at least 3 "
                f"vertices, got shape {coords.shape}.",
                error_code="E2005",
            )
        polygon = Polygon(coords)
    if polygon.is_empty or polygon.area <= 0:
        raise ConfigurationError(
            "custom_coords must enclose a region of positive area.", error_code="E2005"
        )
    return polygon


def origin_region(
    starts: ArrayLike,
    mode: OriginPermutation | str,
    custom_coords: ArrayLike | Polygon | None = None,
) -> shapely.Geometry | None:
    """Region from which new starting points are drawn.

    Parameters
    ----------
    starts : array_like, shape (n_trajectories, 2)
        Observed starting points.
    mode : OriginPermutation or str
        Kind of region.
    custom_coords : array_like or shapely.Polygon, optional
        Polygon vertices, required for ``"Custom"``.

    Returns
    -------
    shapely.Geometry or None
        None for ``"None"``. For the point-derived regions, a `Polygon`
        when the starting points span an area, otherwise the degenerate
        `LineString` or `Point` they reduce to.

    Raises
    ------
    ConfigurationError
        If `custom_coords` is missing or malformed for ``"Custom"``.

    Examples
    --------
    >>> from trackway.intersection.origins import origin_region
    >>> origin_region([[0, 0], [2, 0], [1, 3]], "Min.Box").bounds
    (0.0, 0.0, 2.0, 3.0)
    >>> origin_region([[0, 0], [2, 0], [1, 3]], "Conv.Hull").area
    3.0
    """
    mode = coerce_enum(mode, OriginPermutation, "origin_permutation")
    if mode is OriginPermutation.NONE:
        return None
    elif mode is OriginPermutation.CUSTOM:
        return _custom_polygon(custom_coords)

    points = MultiPoint(np.asarray(starts, dtype=np.float64).reshape(-1, 2))
    if mode is OriginPermutation.MIN_BOX:
        return points.envelope
    elif mode is OriginPermutation.CONV_HULL:
        return points.convex_hull
    else:  # pragma: no cover - exhaustive over OriginPermutation
        raise AssertionError(f"Unhandled origin permutation {mode!r}")


def sample_in_region(
    region: shapely.Geometry,
    n: int,
    rng: np.random.Generator | int | None = None,
) -> NDArray[np.float64]:
    """Draw `n` points uniformly from `region`.

    Polygons are sampled by rejection from their bounding box. Regions of
    zero area are sampled along their length (a segment) or return their
    single point.

    Parameters
    ----------
    region : shapely.Geometry
        Polygon, line or point.
    n : int
        Number of points.
    rng : np.random.Generator | int | None, default=None
        Random number generator for reproducibility.

    Returns
    -------
    NDArray[np.float64], shape (n, 2)

    Raises
    ------
    InvariantError
        If the region is empty or rejection sampling does not converge.
    """
    generator = _ensure_rng(rng)
    if region.is_empty:
        raise InvariantError("Cannot sample from an empty region.")

    if region.area > 0:
        minx, miny, maxx, maxy = region.bounds
        accepted: list[NDArray[np.float64]] = []
        n_accepted = 0
        for _ in range(_MAX_REJECTION_ROUNDS):
            batch = max(2 * (n - n_accepted), 16)
            x = generator.uniform(minx, maxx, size=batch)
            y = generator.uniform(miny, maxy, size=batch)
            inside = shapely.contains_xy(region, x, y)
            accepted.append(np.column_stack([x[inside], y[inside]]))
            n_accepted += int(np.sum(inside))
            if n_accepted >= n:
                return np.concatenate(accepted, axis=0)[:n]
        raise InvariantError(
            f"Rejection sampling drew fewer than {n} points inside the region after "
            f"{_MAX_REJECTION_ROUNDS} rounds."
        )

    if region.length > 0:
        logger.debug("Origin region has zero area; sampling along its boundary line")
        line = region if isinstance(region, LineString) else LineString(
            shapely.get_coordinates(region)
        )
        distances = generator.uniform(0.0, line.length, size=n)
        return shapely.get_coordinates(shapely.line_interpolate_point(line, distances))

    logger.debug("Origin region is a single point; all starts coincide")
    point = region if isinstance(region, Point) else region.representative_point()
    return np.repeat(shapely.get_coordinates(point), n, axis=0)


def permute_origins(
    sim_set: SimulatedTrajectorySet,
    region: shapely.Geometry,
    rng: np.random.Generator | int | None = None,
) -> SimulatedTrajectorySet:
    """Translate every trajectory of a simulated set to a random start.

    Each trajectory receives its own independent draw from `region`; its
    shape is unchanged.

    Parameters
    ----------
    sim_set : SimulatedTrajectorySet
    region : shapely.Geometry
        Region returned by `origin_region`.
    rng : np.random.Generator | int | None, default=None
        Random number generator for reproducibility.

    Returns
    -------
    SimulatedTrajectorySet
    """
    new_starts = sample_in_region(region, len(sim_set), rng)
    moved = tuple(
        traj.translated(*(start - traj.points[0]))
        for traj, start in zip(sim_set, new_starts, strict=True)
    )
    return sim_set.replace_trajectories(moved)


def observed_starts(track: Track) -> NDArray[np.float64]:
    """Starting point of every trajectory, shape (n_trajectories, 2)."""
    return np.array([traj.points[0] for traj in track])
