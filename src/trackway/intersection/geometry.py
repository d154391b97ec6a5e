"""Polyline intersection geometry.

Trajectories are treated as polylines: consecutive points are joined by
straight segments. Two trajectories intersect wherever a segment of one
meets a segment of the other. Intersections are reported as unique
locations, so a crossing that falls on a shared vertex (and is therefore
found by two adjacent segments) counts once.

Edge Cases
----------
- Touching counts: a segment endpoint lying on the other segment is an
  intersection.
- Parallel segments on distinct lines never intersect.
- Collinear segments that meet at exactly one point contribute that point.
  Collinear segments that overlap along a positive length contribute
  nothing.
- Zero-length segments (repeated points) and segments with non-finite
  coordinates are ignored.
"""

from __future__ import annotations

import logging

import numpy as np
import shapely
from numpy.typing import ArrayLike, NDArray
from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import connected_components
from scipy.spatial import cKDTree

from trackway.track import Trajectory

__all__ = ["count_intersections", "segment_intersections"]

logger = logging.getLogger("trackway.intersection")

_MERGE_TOLERANCE = 1e-9
"""Points closer than this (relative to the coordinate scale) are one location."""

_POINT = shapely.GeometryType.POINT
_LINESTRING = shapely.GeometryType.LINESTRING


def _as_points(points: Trajectory | ArrayLike) -> NDArray[np.float64]:
    if isinstance(points, Trajectory):
        return points.points
    return np.asarray(points, dtype=np.float64).reshape(-1, 2)


def _segments(pts: NDArray[np.float64]) -> NDArray[np.object_]:
    """Finite, non-degenerate segments of a polyline as shapely LineStrings."""
    coords = np.stack([pts[:-1], pts[1:]], axis=1)
    keep = np.any(coords[:, 0] != coords[:, 1], axis=1) & np.all(
        np.isfinite(coords), axis=(1, 2)
    )
    return shapely.linestrings(coords[keep])


def _merge_close(points: NDArray[np.float64], tolerance: float) -> NDArray[np.float64]:
    """Collapse clusters of points within `tolerance` of each other to one point."""
    if len(points) < 2:
        return points
    pairs = cKDTree(points).query_pairs(tolerance, output_type="ndarray")
    if len(pairs) == 0:
        return points
    n = len(points)
    graph = coo_matrix((np.ones(len(pairs)), (pairs[:, 0], pairs[:, 1])), shape=(n, n))
    _, labels = connected_components(graph, directed=False)
    _, first = np.unique(labels, return_index=True)
    return points[np.sort(first)]


def segment_intersections(
    a: Trajectory | ArrayLike, b: Trajectory | ArrayLike
) -> NDArray[np.float64]:
    """Unique intersection points of two polylines.

    Parameters
    ----------
    a, b : Trajectory or array_like, shape (n_points, 2)
        Polyline vertices in order.

    Returns
    -------
    NDArray[np.float64], shape (n_intersections, 2)
        Intersection locations in lexicographic order. Points closer than
        ``1e-9`` times the coordinate scale are merged into one.

    Notes
    -----
    Every segment of `a` is intersected with every segment of `b` using
    ``shapely.intersection``. A pair of segments meets in nothing, a point,
    or (when collinear) a shared piece of line. Only the points are kept.

    Examples
    --------
    >>> from trackway.intersection.geometry import segment_intersections
    >>> segment_intersections([[0, 0], [2, 2]], [[0, 2], [2, 0]])
    array([[1., 1.]])
    """
    pa = _as_points(a)
    pb = _as_points(b)
    if len(pa) < 2 or len(pb) < 2:
        return np.empty((0, 2))
    seg_a = _segments(pa)
    seg_b = _segments(pb)
    if len(seg_a) == 0 or len(seg_b) == 0:
        return np.empty((0, 2))

    # Broadcast to (n_a, n_b) segment pairs.
    meets = shapely.intersection(seg_a[:, np.newaxis], seg_b[np.newaxis, :]).ravel()
    meets = meets[~shapely.is_empty(meets)]
    kinds = shapely.get_type_id(meets)

    overlaps = meets[kinds == _LINESTRING]
    if len(overlaps):
        logger.debug(
            "Ignoring %d collinear overlap(s), longest %.3g",
            len(overlaps),
            float(np.max(shapely.length(overlaps))),
        )

    points = shapely.get_coordinates(meets[kinds == _POINT])
    if len(points) == 0:
        return np.empty((0, 2))

    coords = np.abs(np.concatenate([pa, pb]))
    scale = float(np.max(coords[np.isfinite(coords)], initial=1.0))
    points = _merge_close(points, _MERGE_TOLERANCE * scale)
    return points[np.lexsort((points[:, 1], points[:, 0]))]


def count_intersections(a: Trajectory | ArrayLike, b: Trajectory | ArrayLike) -> int:
    """Number of unique intersection points of two polylines.

    Symmetric in its arguments and always non-negative.

    Examples
    --------
    >>> from trackway.intersection.geometry import count_intersections
    >>> count_intersections([[0, 0], [1, 1], [2, 2]], [[0, 2], [1, 1], [2, 0]])
    1
    >>> count_intersections([[0, 0], [4, 0]], [[0, 1], [4, 1]])
    0
    """
    return int(len(segment_intersections(a, b)))
