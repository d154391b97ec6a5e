"""Shared test fixtures for the trackway test suite.

Fixture Naming Convention
=========================

Geometry fixtures are named after their shape:
    - straight_line: one evenly spaced straight trajectory (no noise)
    - parallel_pair: two equal-length parallel lines at a known offset
    - crossing_pair: two trajectories forming an "X" (one crossing)
    - small_track: four noisy walks, long enough to simulate

Simulation fixtures are seeded batches built from `small_track`.
"""

import os

import numpy as np
import pytest
from hypothesis import Phase, Verbosity, settings

from trackway.simulation import SimulationBatch, simulate_track
from trackway.track import Track, Trajectory

# =============================================================================
# Hypothesis Configuration for Performance
# =============================================================================
# Register Hypothesis profiles for different testing scenarios:
# - "ci": Fast profile for CI pipelines (fewer examples, no deadline)
# - "dev": Standard development profile (moderate examples)
# - "thorough": Full property testing (many examples, for pre-release)

settings.register_profile(
    "ci",
    max_examples=10,
    deadline=None,  # Disable deadline in CI (variable performance)
    phases=[Phase.explicit, Phase.reuse, Phase.generate],
    verbosity=Verbosity.quiet,
)

settings.register_profile(
    "dev",
    max_examples=25,
    deadline=5000,  # 5 second deadline
    verbosity=Verbosity.normal,
)

settings.register_profile(
    "thorough",
    max_examples=100,
    deadline=None,
    verbosity=Verbosity.verbose,
)

# Load profile based on environment variable (default to "dev")
_profile = os.environ.get("HYPOTHESIS_PROFILE", "dev")
settings.load_profile(_profile)

# =============================================================================
# Test Configuration Constants
# =============================================================================

DEFAULT_SEED = 42
ALT_SEED = 43

N_LINE_POINTS = 10
PARALLEL_OFFSET = 2.0
SMALL_NSIM = 20


# =============================================================================
# --- Fixtures ---
# =============================================================================
@pytest.fixture
def straight_line() -> Trajectory:
    """Evenly spaced straight line along +x, ten points, unit steps."""
    points = np.column_stack([np.arange(N_LINE_POINTS, dtype=float), np.zeros(N_LINE_POINTS)])
    return Trajectory("Line", points)


@pytest.fixture
def parallel_pair() -> Track:
    """Two parallel lines of ten points, PARALLEL_OFFSET apart."""
    x = np.arange(N_LINE_POINTS, dtype=float)
    return Track.from_points(
        {
            "Lower": np.column_stack([x, np.zeros_like(x)]),
            "Upper": np.column_stack([x, np.full_like(x, PARALLEL_OFFSET)]),
        }
    )


@pytest.fixture
def crossing_pair() -> Track:
    """Two diagonals forming an "X" that cross once at (2, 2)."""
    t = np.linspace(0.0, 4.0, 6)
    return Track.from_points(
        {
            "Rising": np.column_stack([t, t]),
            "Falling": np.column_stack([t, 4.0 - t]),
        }
    )


@pytest.fixture
def small_track() -> Track:
    """Four correlated walks of 12 points starting on a 2 x 2 grid."""
    rng = np.random.default_rng(DEFAULT_SEED)
    walks = {}
    for i, start in enumerate([(0.0, 0.0), (0.0, 3.0), (3.0, 0.0), (3.0, 3.0)]):
        heading = np.pi / 4 + np.cumsum(rng.normal(0.0, 0.3, 11))
        steps = rng.normal(1.0, 0.1, 11)
        increments = np.column_stack([steps * np.cos(heading), steps * np.sin(heading)])
        walks[f"T{i + 1}"] = np.vstack([[start], start + np.cumsum(increments, axis=0)])
    return Track.from_points(walks, name="small")


@pytest.fixture
def small_batch(small_track: Track) -> SimulationBatch:
    """Seeded Directed batch of SMALL_NSIM simulations of `small_track`."""
    return simulate_track(small_track, nsim=SMALL_NSIM, model="Directed", rng=DEFAULT_SEED)
