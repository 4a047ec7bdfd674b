"""
Tests for the force contributors and their sum.
"""

import math

import numpy as np
import pytest

from forcegraph.continuity import ContinuityManager
from forcegraph.force import (
    CenteringForce,
    ChargeForce,
    CollisionForce,
    ForceModel,
    LinkForce,
)
from forcegraph.force.base import separate_coincident
from forcegraph.types import Edge, GraphSnapshot, Node

# =============================================================================
# Test Fixtures
# =============================================================================


def make_graph(points, edges=(), radii=None, collision_radius=45.0):
    """Working graph with node str(i) seeded at points[i]; edges by index."""
    nodes = []
    for i, (x, y) in enumerate(points):
        radius = radii[i] if radii is not None else None
        nodes.append(Node(str(i), x=x, y=y, radius=radius))
    snap = GraphSnapshot(nodes=nodes, edges=[Edge(str(s), str(t)) for s, t in edges])
    manager = ContinuityManager(collision_radius=collision_radius)
    return manager.merge(snap, (0.0, 0.0))


def apply(force, graph, alpha=1.0):
    """Run one contributor on its own and return (fx, fy)."""
    fx = np.zeros(graph.node_count)
    fy = np.zeros(graph.node_count)
    force.initialize(graph)
    force.apply(graph, alpha, fx, fy)
    return fx, fy


def random_points(n, seed=0, extent=600.0):
    rng = np.random.default_rng(seed)
    return [tuple(p) for p in rng.uniform(0, extent, size=(n, 2))]


# =============================================================================
# Coincident separation
# =============================================================================


class TestSeparateCoincident:
    """Tests for the index-derived direction for zero offsets."""

    def test_antisymmetric(self):
        dx = np.zeros(2)
        dy = np.zeros(2)
        separate_coincident(dx, dy, np.array([3, 8]), np.array([8, 3]), 1.0)
        assert dx[0] == -dx[1]
        assert dy[0] == -dy[1]
        assert math.hypot(dx[0], dy[0]) == pytest.approx(1.0)

    def test_self_pairs_untouched(self):
        dx = np.zeros(1)
        dy = np.zeros(1)
        separate_coincident(dx, dy, np.array([4]), np.array([4]), 1.0)
        assert dx[0] == 0.0 and dy[0] == 0.0

    def test_non_zero_offsets_untouched(self):
        dx = np.array([2.0])
        dy = np.array([0.0])
        separate_coincident(dx, dy, np.array([0]), np.array([1]), 1.0)
        assert dx[0] == 2.0

    def test_different_pairs_get_different_directions(self):
        dx = np.zeros(2)
        dy = np.zeros(2)
        separate_coincident(dx, dy, np.array([0, 0]), np.array([1, 2]), 1.0)
        assert (dx[0], dy[0]) != (dx[1], dy[1])


# =============================================================================
# Link force
# =============================================================================


class TestLinkForce:
    """Tests for LinkForce."""

    def test_stretched_edge_pulls_together(self):
        """Two degree-1 nodes split the correction evenly."""
        graph = make_graph([(0, 0), (200, 0)], [(0, 1)])
        fx, fy = apply(LinkForce(distance=120.0), graph)

        # (200 - 120) / 200 * 200 * 0.5
        assert fx[0] == pytest.approx(40.0)
        assert fx[1] == pytest.approx(-40.0)
        assert np.allclose(fy, 0.0)

    def test_compressed_edge_pushes_apart(self):
        graph = make_graph([(0, 0), (50, 0)], [(0, 1)])
        fx, _ = apply(LinkForce(distance=120.0), graph)
        assert fx[0] < 0
        assert fx[1] > 0

    def test_rest_length_is_equilibrium(self):
        graph = make_graph([(0, 0), (0, 120)], [(0, 1)])
        fx, fy = apply(LinkForce(distance=120.0), graph)
        assert np.allclose(fx, 0.0)
        assert np.allclose(fy, 0.0)

    def test_hub_moves_less_than_leaf(self):
        """Path a-b-c: edge a-b moves the leaf a twice as much as the hub b."""
        graph = make_graph([(0, 0), (200, 0), (200, 120)], [(0, 1), (1, 2)])
        fx, _ = apply(LinkForce(distance=120.0), graph)

        # strength 1 / min(1, 2) = 1, bias = 1 / 3 for the target b
        assert fx[0] == pytest.approx(200 * 0.4 * 2 / 3)
        assert fx[1] == pytest.approx(-200 * 0.4 / 3)

    def test_fixed_strength(self):
        graph = make_graph([(0, 0), (200, 0)], [(0, 1)])
        fx, _ = apply(LinkForce(distance=120.0, strength=0.5), graph)
        assert fx[0] == pytest.approx(20.0)

    def test_scaled_by_alpha(self):
        graph = make_graph([(0, 0), (200, 0)], [(0, 1)])
        full, _ = apply(LinkForce(), graph, alpha=1.0)
        half, _ = apply(LinkForce(), graph, alpha=0.5)
        assert half[0] == pytest.approx(full[0] / 2)

    def test_self_loop_contributes_nothing(self):
        graph = make_graph([(0, 0), (300, 0)], [(0, 0)])
        fx, fy = apply(LinkForce(), graph)
        assert np.all(fx == 0.0)
        assert np.all(fy == 0.0)

    def test_coincident_endpoints_stay_finite(self):
        graph = make_graph([(10, 10), (10, 10)], [(0, 1)])
        fx, fy = apply(LinkForce(), graph)
        assert np.all(np.isfinite(fx)) and np.all(np.isfinite(fy))
        assert fx[0] != 0.0 or fy[0] != 0.0

    def test_strength_setter_reinitializes(self):
        graph = make_graph([(0, 0), (200, 0)], [(0, 1)])
        force = LinkForce()
        apply(force, graph)
        force.strength = 0.25
        fx = np.zeros(2)
        fy = np.zeros(2)
        force.apply(graph, 1.0, fx, fy)
        assert fx[0] == pytest.approx(10.0)


# =============================================================================
# Charge force
# =============================================================================


class TestChargeForce:
    """Tests for ChargeForce."""

    def test_pair_repels_with_inverse_distance(self):
        graph = make_graph([(0, 0), (100, 0)])
        fx, fy = apply(ChargeForce(strength=400.0), graph)

        # offset * 400 / 100^2
        assert fx[0] == pytest.approx(-4.0)
        assert fx[1] == pytest.approx(4.0)
        assert np.allclose(fy, 0.0)

    def test_negative_strength_attracts(self):
        graph = make_graph([(0, 0), (100, 0)])
        fx, _ = apply(ChargeForce(strength=-400.0), graph)
        assert fx[0] > 0

    def test_coincident_nodes_are_separated(self):
        graph = make_graph([(50, 50), (50, 50)])
        fx, fy = apply(ChargeForce(), graph)

        assert np.all(np.isfinite(fx)) and np.all(np.isfinite(fy))
        assert math.hypot(fx[0], fy[0]) > 0
        assert fx[0] == pytest.approx(-fx[1])
        assert fy[0] == pytest.approx(-fy[1])

    def test_deterministic(self):
        graph = make_graph([(0, 0), (0, 0), (0, 0), (40, 10)])
        first = apply(ChargeForce(), graph)
        second = apply(ChargeForce(), graph)
        assert np.array_equal(first[0], second[0])
        assert np.array_equal(first[1], second[1])

    def test_max_distance(self):
        graph = make_graph([(0, 0), (500, 0)])
        fx, _ = apply(ChargeForce(max_distance=300.0), graph)
        assert np.all(fx == 0.0)

    def test_threshold_selects_path(self):
        force = ChargeForce(barnes_hut_threshold=200)
        assert not force.uses_barnes_hut(200)
        assert force.uses_barnes_hut(201)

    def test_barnes_hut_with_zero_theta_matches_exact(self):
        graph = make_graph(random_points(40, seed=1))
        exact = apply(ChargeForce(barnes_hut_threshold=1000), graph)
        tree = apply(ChargeForce(barnes_hut_threshold=0, theta=0.0), graph)
        assert np.allclose(exact[0], tree[0])
        assert np.allclose(exact[1], tree[1])

    def test_barnes_hut_approximates_exact(self):
        graph = make_graph(random_points(250, seed=2, extent=2000.0))
        exact = apply(ChargeForce(barnes_hut_threshold=1000), graph)
        approx = apply(ChargeForce(barnes_hut_threshold=200, theta=0.9), graph)

        # Sum of pair magnitudes per node, strength / d
        dist = np.hypot(graph.x[:, None] - graph.x[None, :], graph.y[:, None] - graph.y[None, :])
        np.fill_diagonal(dist, np.inf)
        scale = (400.0 / np.maximum(dist, 1.0)).sum(axis=1)

        error = np.hypot(approx[0] - exact[0], approx[1] - exact[1])
        assert np.all(error <= 0.1 * scale)


# =============================================================================
# Centering force
# =============================================================================


class TestCenteringForce:
    """Tests for CenteringForce."""

    def test_uniform_pull_toward_center(self):
        graph = make_graph([(0, 0), (100, 0)])
        fx, fy = apply(CenteringForce(center=(400, 300), strength=0.1), graph)

        # centroid (50, 0)
        assert fx == pytest.approx([35.0, 35.0])
        assert fy == pytest.approx([30.0, 30.0])

    def test_no_force_at_center(self):
        graph = make_graph([(390, 300), (410, 300)])
        fx, fy = apply(CenteringForce(center=(400, 300)), graph)
        assert np.allclose(fx, 0.0) and np.allclose(fy, 0.0)

    def test_suspended_without_center(self):
        graph = make_graph([(0, 0), (100, 0)])
        fx, fy = apply(CenteringForce(center=None), graph)
        assert np.all(fx == 0.0) and np.all(fy == 0.0)

    def test_pinned_nodes_excluded(self):
        graph = make_graph([(0, 0), (100, 0), (1000, 1000)])
        graph.set_pins({"2": (1000.0, 1000.0)})
        fx, fy = apply(CenteringForce(center=(50, 0), strength=1.0), graph)

        # Free centroid is already at the center; the pinned node is ignored
        assert np.allclose(fx, 0.0) and np.allclose(fy, 0.0)

    def test_scaled_by_alpha(self):
        graph = make_graph([(0, 0)])
        fx, _ = apply(CenteringForce(center=(100, 0), strength=0.1), graph, alpha=0.5)
        assert fx[0] == pytest.approx(5.0)


# =============================================================================
# Collision force
# =============================================================================


class TestCollisionForce:
    """Tests for CollisionForce."""

    def test_overlapping_pair_pushed_apart(self):
        graph = make_graph([(0, 0), (50, 0)])
        fx, fy = apply(CollisionForce(strength=0.7), graph)

        # (90 - 50) / 50 * 0.7 * 50 * 0.5
        assert fx[0] == pytest.approx(-14.0)
        assert fx[1] == pytest.approx(14.0)
        assert np.allclose(fy, 0.0)

    def test_separated_pair_untouched(self):
        graph = make_graph([(0, 0), (91, 0)])
        fx, fy = apply(CollisionForce(), graph)
        assert np.all(fx == 0.0) and np.all(fy == 0.0)

    def test_not_scaled_by_alpha(self):
        graph = make_graph([(0, 0), (50, 0)])
        hot, _ = apply(CollisionForce(), graph, alpha=1.0)
        cold, _ = apply(CollisionForce(), graph, alpha=0.0)
        assert np.array_equal(hot, cold)

    def test_small_node_yields_to_large(self):
        graph = make_graph([(0, 0), (30, 0)], radii=[10.0, 50.0], collision_radius=0.0)
        fx, _ = apply(CollisionForce(), graph)
        assert abs(fx[0]) > abs(fx[1])
        assert fx[0] < 0 < fx[1]

    def test_coincident_nodes_are_separated(self):
        graph = make_graph([(5, 5), (5, 5)])
        fx, fy = apply(CollisionForce(), graph)
        assert np.all(np.isfinite(fx)) and np.all(np.isfinite(fy))
        assert math.hypot(fx[0], fy[0]) > 0
        assert fx[0] == pytest.approx(-fx[1])

    def test_quadtree_neighbours_match_exact(self):
        graph = make_graph(random_points(80, seed=4, extent=500.0))
        exact = apply(CollisionForce(barnes_hut_threshold=1000), graph)
        tree = apply(CollisionForce(barnes_hut_threshold=0), graph)
        assert np.allclose(exact[0], tree[0])
        assert np.allclose(exact[1], tree[1])


# =============================================================================
# Force model
# =============================================================================


class TestForceModel:
    """Tests for ForceModel."""

    def test_sum_of_contributors(self):
        graph = make_graph(random_points(12, seed=5), [(0, 1), (1, 2), (3, 4)])
        model = ForceModel(center=CenteringForce(center=(300, 300)))
        model.initialize(graph)
        fx, fy = model.compute(graph, 0.7)

        ex = np.zeros(12)
        ey = np.zeros(12)
        for force in model:
            part = apply(force, graph, alpha=0.7)
            ex += part[0]
            ey += part[1]
        assert np.allclose(fx, ex)
        assert np.allclose(fy, ey)

    def test_pinned_nodes_receive_zero(self):
        graph = make_graph([(0, 0), (10, 0), (20, 0)], [(0, 1)])
        graph.set_pins({"1": (10.0, 0.0)})
        model = ForceModel(center=CenteringForce(center=(500, 500)))
        model.initialize(graph)
        fx, fy = model.compute(graph, 1.0)

        assert fx[1] == 0.0 and fy[1] == 0.0
        assert fx[0] != 0.0

    def test_empty_graph(self):
        graph = make_graph([])
        model = ForceModel()
        model.initialize(graph)
        fx, fy = model.compute(graph, 1.0)
        assert len(fx) == 0 and len(fy) == 0

    def test_extra_contributor(self):
        class Wind(LinkForce):
            def apply(self, graph, alpha, fx, fy):
                fx += 1.0

        graph = make_graph([(0, 0), (500, 500)])
        model = ForceModel(center=CenteringForce(center=None)).add(Wind())
        model.initialize(graph)
        fx, _ = model.compute(graph, 1.0)
        base = apply(ChargeForce(), graph)[0]
        assert fx == pytest.approx(base + 1.0)
