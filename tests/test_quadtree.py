"""Tests for QuadTree implementation, Barnes-Hut charge and spatial lookups."""

import math

import numpy as np

from forcegraph.spatial.quadtree import MIN_HALF_SIZE, Body, QuadTree, QuadTreeNode


def build_tree(points, theta=0.9, bounds=None):
    """Build a tree over (x, y) points, body i at points[i]."""
    if bounds is None:
        return QuadTree.from_positions([p[0] for p in points], [p[1] for p in points], theta=theta)
    tree = QuadTree(bounds=bounds, theta=theta)
    for i, (x, y) in enumerate(points):
        tree.insert(Body(float(x), float(y), index=i))
    tree.compute_mass_distribution()
    return tree


def exact_charge(points, target_idx, strength, min_distance=1.0):
    """Pairwise charge on one point: offset * strength / max(d^2, min_d^2)."""
    tx, ty = points[target_idx]
    fx, fy = 0.0, 0.0
    for i, (x, y) in enumerate(points):
        if i == target_idx:
            continue
        dx, dy = tx - x, ty - y
        w = strength / max(dx * dx + dy * dy, min_distance * min_distance)
        fx += dx * w
        fy += dy * w
    return fx, fy


class TestBody:
    """Tests for the Body dataclass."""

    def test_body_creation(self):
        """Test basic body creation."""
        body = Body(x=10.0, y=20.0, mass=1.5, index=5)
        assert body.x == 10.0
        assert body.y == 20.0
        assert body.mass == 1.5
        assert body.index == 5

    def test_body_defaults(self):
        """Test body default values."""
        body = Body(x=0.0, y=0.0)
        assert body.mass == 1.0
        assert body.index == -1


class TestQuadTreeNode:
    """Tests for QuadTreeNode."""

    def test_node_creation(self):
        node = QuadTreeNode(x=50.0, y=50.0, half_size=50.0)
        assert node.half_size == 50.0
        assert node.is_empty()
        assert node.is_leaf()

    def test_contains(self):
        """Test point containment, boundary included."""
        node = QuadTreeNode(x=50.0, y=50.0, half_size=50.0)
        assert node.contains(25.0, 25.0)
        assert node.contains(0.0, 0.0)
        assert node.contains(100.0, 100.0)
        assert not node.contains(-1.0, 50.0)
        assert not node.contains(50.0, 101.0)

    def test_get_quadrant(self):
        node = QuadTreeNode(x=50.0, y=50.0, half_size=50.0)
        assert node.get_quadrant(25.0, 25.0) == 0
        assert node.get_quadrant(75.0, 25.0) == 1
        assert node.get_quadrant(25.0, 75.0) == 2
        assert node.get_quadrant(75.0, 75.0) == 3

    def test_distance_to(self):
        """Distance to the square is zero inside and grows outside."""
        node = QuadTreeNode(x=50.0, y=50.0, half_size=50.0)
        assert node.distance_to(50.0, 50.0) == 0.0
        assert node.distance_to(110.0, 50.0) == 10.0
        assert math.isclose(node.distance_to(103.0, 104.0), 5.0)


class TestQuadTreeInsertion:
    """Tests for QuadTree insertion operations."""

    def test_empty_tree(self):
        tree = QuadTree(bounds=(0, 0, 100, 100))
        assert tree.body_count == 0
        assert tree.root.is_empty()

    def test_single_body_insertion(self):
        tree = QuadTree(bounds=(0, 0, 100, 100))
        body = Body(25.0, 25.0, index=0)
        tree.insert(body)

        assert tree.body_count == 1
        assert tree.root.bodies == [body]
        assert tree.root.is_leaf()

    def test_two_body_insertion(self):
        """Test inserting two bodies causes subdivision."""
        tree = QuadTree(bounds=(0, 0, 100, 100))
        tree.insert(Body(25.0, 25.0, index=0))
        tree.insert(Body(75.0, 75.0, index=1))

        assert tree.body_count == 2
        assert not tree.root.is_leaf()

    def test_coincident_bodies_share_a_leaf(self):
        """Coincident points terminate instead of subdividing forever."""
        tree = QuadTree(bounds=(0, 0, 100, 100))
        for i in range(5):
            tree.insert(Body(40.0, 40.0, index=i))

        assert tree.body_count == 5
        assert tree.root.is_leaf()
        assert len(tree.root.bodies) == 5

    def test_nearly_coincident_bodies_terminate(self):
        """Subdivision stops at the minimum region size."""
        tree = QuadTree(bounds=(0, 0, 1, 1))
        tree.insert(Body(0.5, 0.5, index=0))
        tree.insert(Body(0.5 + MIN_HALF_SIZE / 10, 0.5, index=1))
        assert tree.body_count == 2


class TestQuadTreeMassDistribution:
    """Tests for center of mass computation."""

    def test_single_body_mass(self):
        tree = QuadTree(bounds=(0, 0, 100, 100))
        tree.insert(Body(30.0, 40.0, mass=2.0, index=0))
        tree.compute_mass_distribution()

        assert tree.root.total_mass == 2.0
        assert tree.root.center_of_mass_x == 30.0
        assert tree.root.center_of_mass_y == 40.0

    def test_weighted_center_of_mass(self):
        """Test center of mass with different masses."""
        tree = QuadTree(bounds=(0, 0, 100, 100))
        tree.insert(Body(0.0, 0.0, mass=3.0, index=0))
        tree.insert(Body(100.0, 0.0, mass=1.0, index=1))
        tree.compute_mass_distribution()

        # COM = (3*0 + 1*100) / 4 = 25
        assert tree.root.total_mass == 4.0
        assert abs(tree.root.center_of_mass_x - 25.0) < 1e-10


class TestQuadTreeChargeForce:
    """Tests for Barnes-Hut charge approximation."""

    def test_no_force_on_single_body(self):
        tree = build_tree([(50.0, 50.0)], bounds=(0, 0, 100, 100))
        fx, fy = tree.calculate_force(Body(50.0, 50.0, index=0), strength=400.0)
        assert fx == 0.0
        assert fy == 0.0

    def test_repulsive_force_direction(self):
        """Positive strength pushes bodies apart."""
        tree = build_tree([(40.0, 50.0), (60.0, 50.0)], bounds=(0, 0, 100, 100))

        fx, _ = tree.calculate_force(Body(40.0, 50.0, index=0), strength=400.0)
        assert fx < 0
        fx, _ = tree.calculate_force(Body(60.0, 50.0, index=1), strength=400.0)
        assert fx > 0

    def test_magnitude_falls_off_with_distance(self):
        """Magnitude is strength / d."""
        tree = build_tree([(0.0, 50.0)], bounds=(0, 0, 200, 100))

        fx_close, _ = tree.calculate_force(Body(20.0, 50.0, index=1), strength=400.0)
        fx_far, _ = tree.calculate_force(Body(100.0, 50.0, index=2), strength=400.0)

        assert math.isclose(fx_close, 400.0 / 20.0)
        assert math.isclose(fx_far, 400.0 / 100.0)

    def test_min_distance_floor(self):
        """Distances below min_distance are floored."""
        tree = build_tree([(0.0, 0.0)], bounds=(-10, -10, 10, 10))
        fx, _ = tree.calculate_force(Body(0.5, 0.0, index=1), strength=100.0, min_distance=1.0)
        assert math.isclose(fx, 0.5 * 100.0 / 1.0)

    def test_max_distance_cutoff(self):
        tree = build_tree([(0.0, 0.0)], bounds=(0, 0, 500, 500))
        fx, fy = tree.calculate_force(Body(300.0, 0.0, index=1), strength=400.0, max_distance=200)
        assert (fx, fy) == (0.0, 0.0)

    def test_theta_zero_matches_exact(self):
        """With theta=0 every interaction is computed exactly."""
        points = [(50, 50), (150, 50), (100, 150), (120, 90), (60, 170)]
        tree = build_tree(points, theta=0.0)

        for i, (x, y) in enumerate(points):
            exact = exact_charge(points, i, 400.0)
            approx = tree.calculate_force(Body(float(x), float(y), index=i), strength=400.0)
            assert abs(approx[0] - exact[0]) < 1e-9
            assert abs(approx[1] - exact[1]) < 1e-9

    def test_barnes_hut_close_to_exact(self):
        """Default theta stays within a loose tolerance of the exact sum."""
        rng = np.random.default_rng(3)
        points = [tuple(p) for p in rng.uniform(0, 1000, size=(120, 2))]
        tree = build_tree(points, theta=0.9)

        for i in range(0, len(points), 10):
            exact = np.array(exact_charge(points, i, 400.0))
            x, y = points[i]
            approx = np.array(tree.calculate_force(Body(x, y, index=i), strength=400.0))
            # Sum of the individual pair magnitudes, strength / d
            scale = sum(
                400.0 / max(math.hypot(x - px, y - py), 1.0)
                for j, (px, py) in enumerate(points)
                if j != i
            )
            assert np.linalg.norm(approx - exact) <= 0.1 * scale


class TestQuadTreeLookups:
    """Tests for nearest and radius queries."""

    def test_find_nearest(self):
        tree = build_tree([(0, 0), (100, 0), (50, 80)])
        assert tree.find(95.0, 5.0) == 1
        assert tree.find(48.0, 70.0) == 2

    def test_find_respects_radius(self):
        tree = build_tree([(0, 0), (100, 0)])
        assert tree.find(50.0, 50.0, radius=10.0) is None
        assert tree.find(5.0, 0.0, radius=10.0) == 0

    def test_find_empty_tree(self):
        tree = QuadTree.from_positions([], [])
        assert tree.find(0.0, 0.0) is None

    def test_query_radius(self):
        points = [(0, 0), (10, 0), (0, 10), (100, 100)]
        tree = build_tree(points)
        assert sorted(tree.query_radius(0.0, 0.0, 10.0)) == [0, 1, 2]
        assert tree.query_radius(200.0, 200.0, 5.0) == []

    def test_query_radius_matches_brute_force(self):
        rng = np.random.default_rng(11)
        xs = rng.uniform(0, 500, 300)
        ys = rng.uniform(0, 500, 300)
        tree = QuadTree.from_positions(xs, ys)

        for cx, cy, r in [(250, 250, 60), (10, 490, 40), (400, 100, 90)]:
            expected = {i for i in range(300) if math.hypot(xs[i] - cx, ys[i] - cy) <= r}
            assert set(tree.query_radius(cx, cy, r)) == expected


class TestQuadTreeFromPositions:
    """Tests for building a QuadTree from coordinate arrays."""

    def test_from_positions_basic(self):
        tree = QuadTree.from_positions(np.array([10.0, 30.0, 50.0]), np.array([20.0, 40.0, 60.0]))
        assert tree.body_count == 3
        assert tree.root.total_mass == 3.0

    def test_from_positions_theta(self):
        tree = QuadTree.from_positions([0.0], [0.0], theta=0.8)
        assert tree.theta == 0.8

    def test_from_positions_all_coincident(self):
        tree = QuadTree.from_positions([5.0] * 4, [5.0] * 4)
        assert tree.body_count == 4
        assert sorted(tree.query_radius(5.0, 5.0, 0.0)) == [0, 1, 2, 3]

    def test_from_positions_skips_non_finite(self):
        xs = np.array([0.0, math.nan, 100.0, math.inf])
        ys = np.array([0.0, 50.0, 100.0, 0.0])
        tree = QuadTree.from_positions(xs, ys)
        assert tree.body_count == 2
        assert tree.find(95.0, 95.0) == 2
        assert sorted(tree.query_radius(50.0, 50.0, 100.0)) == [0, 2]

    def test_from_positions_only_non_finite(self):
        tree = QuadTree.from_positions([math.nan, -math.inf], [0.0, 0.0])
        assert tree.body_count == 0
        assert tree.find(0.0, 0.0) is None
