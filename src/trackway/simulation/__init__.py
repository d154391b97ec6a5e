"""Simulation of null movement for trackway hypothesis tests.

Examples
--------
>>> import numpy as np
>>> from trackway.track import Track
>>> from trackway.simulation import simulate_track
>>> line = np.column_stack([np.arange(6.0), np.zeros(6)])
>>> batch = simulate_track(Track.from_points([line, line + [0, 1]]), nsim=5,
...                        model="Constrained", rng=42)
>>> len(batch)
5
"""

from trackway.simulation.batch import (
    SimulatedTrajectorySet,
    SimulationBatch,
    simulate_track,
)
from trackway.simulation.trajectory import MovementModel, simulate_trajectory

__all__ = [
    "MovementModel",
    "SimulatedTrajectorySet",
    "SimulationBatch",
    "simulate_track",
    "simulate_trajectory",
]
