"""
Many-body charge force (node repulsion).

Every pair of nodes repels: node i receives the offset vector (p_i - p_j)
scaled by strength / d^2, so the push falls off as strength / d. Small
graphs use an exact O(n^2) computation; larger ones switch to a
Barnes-Hut quadtree, which only approximates far-away clusters.
"""

from __future__ import annotations

import math

import numpy as np

from ..continuity import WorkingGraph
from ..spatial.quadtree import Body, QuadTree
from .base import Force, separate_coincident


class ChargeForce(Force):
    """
    Coulomb-like repulsion between all node pairs.

    Example:
        force = ChargeForce(strength=400.0, barnes_hut_threshold=200)
        force.apply(graph, alpha, fx, fy)
    """

    def __init__(
        self,
        *,
        strength: float = 400.0,
        min_distance: float = 1.0,
        max_distance: float = math.inf,
        theta: float = 0.9,
        barnes_hut_threshold: int = 200,
    ) -> None:
        """
        Args:
            strength: Charge strength; positive repels, negative attracts
            min_distance: Distance floor replacing smaller (or zero) distances
            max_distance: Pairs further apart than this do not interact
            theta: Barnes-Hut accuracy (0 = exact, 0.9 = balanced)
            barnes_hut_threshold: Node count above which the quadtree is used
        """
        self._strength = float(strength)
        self._min_distance = max(1e-9, float(min_distance))
        self._max_distance = float(max_distance)
        self._theta = max(0.0, float(theta))
        self._barnes_hut_threshold = max(0, int(barnes_hut_threshold))

    @property
    def strength(self) -> float:
        return self._strength

    @strength.setter
    def strength(self, value: float) -> None:
        self._strength = float(value)

    @property
    def min_distance(self) -> float:
        return self._min_distance

    @min_distance.setter
    def min_distance(self, value: float) -> None:
        self._min_distance = max(1e-9, float(value))

    @property
    def max_distance(self) -> float:
        return self._max_distance

    @max_distance.setter
    def max_distance(self, value: float) -> None:
        self._max_distance = float(value)

    @property
    def theta(self) -> float:
        """Get Barnes-Hut theta parameter (accuracy)."""
        return self._theta

    @theta.setter
    def theta(self, value: float) -> None:
        self._theta = max(0.0, float(value))

    @property
    def barnes_hut_threshold(self) -> int:
        return self._barnes_hut_threshold

    @barnes_hut_threshold.setter
    def barnes_hut_threshold(self, value: int) -> None:
        self._barnes_hut_threshold = max(0, int(value))

    def uses_barnes_hut(self, node_count: int) -> bool:
        """True if a graph of this size takes the quadtree path."""
        return node_count > self._barnes_hut_threshold

    def apply(self, graph: WorkingGraph, alpha: float, fx: np.ndarray, fy: np.ndarray) -> None:
        n = graph.node_count
        if n < 2 or self._strength == 0.0 or alpha == 0.0:
            return
        if self.uses_barnes_hut(n):
            self._apply_barnes_hut(graph, alpha, fx, fy)
        else:
            self._apply_exact(graph, alpha, fx, fy)

    def _apply_exact(
        self, graph: WorkingGraph, alpha: float, fx: np.ndarray, fy: np.ndarray
    ) -> None:
        """Compute repulsive forces using O(n^2) pairwise calculation."""
        n = graph.node_count
        dx = graph.x[:, None] - graph.x[None, :]
        dy = graph.y[:, None] - graph.y[None, :]
        ii, jj = np.indices((n, n))
        separate_coincident(dx, dy, ii, jj, self._min_distance)

        dist_sq = dx * dx + dy * dy
        w = (self._strength * alpha) / np.maximum(dist_sq, self._min_distance**2)
        if math.isfinite(self._max_distance):
            w[dist_sq >= self._max_distance**2] = 0.0
        np.fill_diagonal(w, 0.0)

        fx += (w * dx).sum(axis=1)
        fy += (w * dy).sum(axis=1)

    def _apply_barnes_hut(
        self, graph: WorkingGraph, alpha: float, fx: np.ndarray, fy: np.ndarray
    ) -> None:
        """Compute repulsive forces using Barnes-Hut O(n log n) approximation."""
        tree = QuadTree.from_positions(graph.x, graph.y, padding=10.0, theta=self._theta)
        strength = self._strength * alpha
        for i in range(graph.node_count):
            body = Body(float(graph.x[i]), float(graph.y[i]), mass=1.0, index=i)
            cfx, cfy = tree.calculate_force(
                body,
                strength=strength,
                min_distance=self._min_distance,
                max_distance=self._max_distance,
            )
            fx[i] += cfx
            fy[i] += cfy


__all__ = ["ChargeForce"]
