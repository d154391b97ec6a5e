"""Descriptors of individual trajectories."""

from trackway.metrics.circular import (
    circular_mean,
    circular_std,
    mean_resultant_length,
    wrap_angle,
)
from trackway.metrics.trajectory import (
    MovementStatistics,
    compute_step_lengths,
    compute_turn_angles,
    movement_statistics,
    overall_bearing,
)

__all__ = [
    "MovementStatistics",
    "circular_mean",
    "circular_std",
    "compute_step_lengths",
    "compute_turn_angles",
    "mean_resultant_length",
    "movement_statistics",
    "overall_bearing",
    "wrap_angle",
]
