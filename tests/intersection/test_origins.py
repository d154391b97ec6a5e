"""Tests for origin regions and starting-point permutation."""

import numpy as np
import pytest
import shapely
from numpy.testing import assert_allclose, assert_array_equal
from shapely import LineString, Point, Polygon

from trackway.errors import ConfigurationError, InvariantError
from trackway.intersection.origins import (
    OriginPermutation,
    observed_starts,
    origin_region,
    permute_origins,
    sample_in_region,
)
from trackway.simulation.batch import SimulatedTrajectorySet

TRIANGLE = [[0.0, 0.0], [4.0, 0.0], [0.0, 4.0]]


class TestOriginRegion:
    """Tests for origin_region."""

    def test_none(self):
        """No permutation has no region."""
        assert origin_region(TRIANGLE, "None") is None

    def test_min_box(self):
        """Min.Box is the axis-aligned bounding box."""
        region = origin_region(TRIANGLE, OriginPermutation.MIN_BOX)
        assert isinstance(region, Polygon)
        assert region.bounds == (0.0, 0.0, 4.0, 4.0)
        assert region.area == pytest.approx(16.0)

    def test_convex_hull(self):
        """Conv.Hull is the convex hull of the starts."""
        region = origin_region(TRIANGLE + [[1.0, 1.0]], "Conv.Hull")
        assert region.area == pytest.approx(8.0)

    def test_collinear_starts_degenerate(self):
        """Collinear starts give a line, not a polygon."""
        region = origin_region([[0, 0], [1, 1], [3, 3]], "Conv.Hull")
        assert isinstance(region, LineString)
        assert region.length == pytest.approx(3 * np.sqrt(2))

    def test_identical_starts_degenerate(self):
        """Coinciding starts give a point."""
        region = origin_region([[2, 5], [2, 5]], "Min.Box")
        assert isinstance(region, Point)

    def test_custom_array(self):
        """Custom vertices are used as given."""
        region = origin_region([[0, 0]], "Custom", custom_coords=TRIANGLE)
        assert region.area == pytest.approx(8.0)

    def test_custom_polygon(self):
        """A shapely polygon is accepted as is."""
        polygon = Polygon(TRIANGLE)
        assert origin_region([[0, 0]], "Custom", custom_coords=polygon) is polygon

    @pytest.mark.parametrize(
        "coords",
        [None, [[0, 0], [1, 1]], [[0, 0], [1, 1], [2, 2]], np.zeros((4, 3))],
        ids=["missing", "two-vertices", "zero-area", "wrong-columns"],
    )
    def test_custom_invalid(self, coords):
        """Missing or malformed custom polygons are rejected."""
        with pytest.raises(ConfigurationError, match=r"\[E2005\]"):
            origin_region([[0, 0]], "Custom", custom_coords=coords)

    def test_unknown_mode(self):
        """Unknown modes are configuration errors."""
        with pytest.raises(ConfigurationError, match=r"\[E2001\]"):
            origin_region(TRIANGLE, "Circle")


class TestSampleInRegion:
    """Tests for sample_in_region."""

    def test_points_inside_polygon(self):
        """Every sample lies inside the polygon."""
        region = Polygon(TRIANGLE)
        points = sample_in_region(region, 200, rng=0)
        assert points.shape == (200, 2)
        assert np.all(shapely.contains_xy(region, points[:, 0], points[:, 1]))

    def test_seed_reproducible(self):
        """Identical seeds give identical samples."""
        region = Polygon(TRIANGLE)
        assert_array_equal(sample_in_region(region, 5, rng=3), sample_in_region(region, 5, rng=3))

    def test_line_region(self):
        """Zero-area regions are sampled along their length."""
        points = sample_in_region(LineString([[0, 0], [2, 2]]), 50, rng=1)
        assert points.shape == (50, 2)
        assert_allclose(points[:, 0], points[:, 1], atol=1e-12)
        assert np.all((points >= -1e-12) & (points <= 2 + 1e-12))

    def test_point_region(self):
        """A point region repeats the point."""
        points = sample_in_region(Point(2.0, 5.0), 3, rng=0)
        assert_allclose(points, [[2.0, 5.0]] * 3)

    def test_empty_region(self):
        """An empty geometry cannot be sampled."""
        with pytest.raises(InvariantError):
            sample_in_region(Polygon(), 3, rng=0)


class TestPermuteOrigins:
    """Tests for permute_origins."""

    def test_shapes_preserved_and_starts_inside(self, small_track):
        """Trajectories are translated into the region without reshaping."""
        sim_set = SimulatedTrajectorySet(1, tuple(small_track))
        region = origin_region(observed_starts(small_track), "Min.Box")
        moved = permute_origins(sim_set, region, rng=0)
        assert moved.iteration == 1
        assert moved.names == sim_set.names
        for before, after in zip(sim_set, moved, strict=True):
            assert_allclose(after.points - after.points[0], before.points - before.points[0])
            assert region.covers(Point(after.points[0]))

    def test_observed_starts(self, small_track):
        """observed_starts stacks the first points."""
        assert_allclose(
            observed_starts(small_track), [[0.0, 0.0], [0.0, 3.0], [3.0, 0.0], [3.0, 3.0]]
        )
