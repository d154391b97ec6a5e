"""Crossings between trajectories."""

from trackway.intersection.geometry import count_intersections, segment_intersections
from trackway.intersection.metric import Hypothesis, track_intersection
from trackway.intersection.origins import (
    OriginPermutation,
    origin_region,
    permute_origins,
    sample_in_region,
)

__all__ = [
    "Hypothesis",
    "OriginPermutation",
    "count_intersections",
    "origin_region",
    "permute_origins",
    "sample_in_region",
    "segment_intersections",
    "track_intersection",
]
