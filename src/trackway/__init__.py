"""Null-model hypothesis testing for fossil and modern trackways.

**trackway** asks whether a group of trajectories (for example the trackways
left by several dinosaurs on one bedding surface) moved together more than
chance would explain. Observed trajectories are compared pairwise, then the
comparison is repeated on many simulated trajectories that share their
movement statistics but nothing else.

Core Classes (Top-Level Exports)
--------------------------------
Trajectory : Ordered 2D positions of one trackmaker
Track : Named collection of trajectories on one surface
subset_track : Keep trajectories by 1-based index
TrackwayError : Base class of all package errors

Submodule Organization
----------------------
All other functionality is accessed via explicit submodule imports.

simulation : Null movement models
    Directed, Constrained and Unconstrained correlated random walks.

    >>> from trackway.simulation import simulate_track, MovementModel

similarity : Shape similarity
    Dynamic time warping and Fréchet distances, with superposition.

    >>> from trackway.similarity import simil_dtw_metric, simil_frechet_metric

intersection : Crossings
    Intersection counts with optional origin permutation.

    >>> from trackway.intersection import track_intersection

stats : Monte Carlo inference
    Per-pair and global p-values, BH adjustment, joint tests.

    >>> from trackway.stats import combined_prob, monte_carlo_test

metrics : Trajectory descriptors
    Step lengths, turning angles, circular statistics.

    >>> from trackway.metrics import movement_statistics

Common Usage
------------
    >>> import numpy as np
    >>> from trackway import Track
    >>> from trackway.simulation import simulate_track
    >>> from trackway.similarity import simil_dtw_metric
    >>> from trackway.intersection import track_intersection
    >>> from trackway.stats import combined_prob
    >>> rng = np.random.default_rng(0)
    >>> walks = [np.cumsum(rng.normal(1.0, 0.2, (12, 2)), axis=0) + [0, i] for i in range(3)]
    >>> track = Track.from_points(walks)
    >>> sim = simulate_track(track, nsim=19, model="Directed", rng=1)
    >>> dtw = simil_dtw_metric(track, sim=sim, superposition="Origin")
    >>> crossings = track_intersection(track, sim=sim, hypothesis="Lower")
    >>> joint = combined_prob([dtw, crossings])
    >>> 0 < joint.p_value_global <= 1
    True
"""

import logging

from trackway.errors import (
    ConfigurationError,
    InsufficientDataError,
    InvariantError,
    TrackwayError,
)
from trackway.track import Track, Trajectory, subset_track

# Add NullHandler to prevent "No handler found" warnings if user doesn't configure logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ConfigurationError",
    "InsufficientDataError",
    "InvariantError",
    "Track",
    "Trajectory",
    "TrackwayError",
    "subset_track",
]
