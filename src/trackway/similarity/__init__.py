"""Trajectory shape similarity."""

from trackway.similarity.distance import FRECHET_INVALID, dtw_distance, frechet_distance
from trackway.similarity.metric import (
    pairwise_distance_matrix,
    simil_dtw_metric,
    simil_frechet_metric,
)
from trackway.similarity.superposition import Superposition, superpose, superpose_all

__all__ = [
    "FRECHET_INVALID",
    "Superposition",
    "dtw_distance",
    "frechet_distance",
    "pairwise_distance_matrix",
    "simil_dtw_metric",
    "simil_frechet_metric",
    "superpose",
    "superpose_all",
]
