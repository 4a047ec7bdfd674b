"""
Collision force (overlap removal).
"""

from __future__ import annotations

import numpy as np

from ..continuity import WorkingGraph
from ..spatial.quadtree import QuadTree
from .base import Force, separate_coincident


class CollisionForce(Force):
    """
    Pushes apart nodes whose collision radii overlap.

    Only pairs with d < r_i + r_j interact. Each overlap is corrected by
    `strength` of its depth per step, split by squared radius so smaller
    nodes yield to larger ones. The force ignores alpha: overlaps are
    resolved even while the layout cools.

    Radii come from the working graph (`graph.radius`).
    """

    def __init__(self, *, strength: float = 0.7, barnes_hut_threshold: int = 200) -> None:
        """
        Args:
            strength: Fraction of the overlap removed per step (0 to 1)
            barnes_hut_threshold: Node count above which neighbours come from a quadtree
        """
        self._strength = max(0.0, min(1.0, float(strength)))
        self._barnes_hut_threshold = max(0, int(barnes_hut_threshold))

    @property
    def strength(self) -> float:
        return self._strength

    @strength.setter
    def strength(self, value: float) -> None:
        self._strength = max(0.0, min(1.0, float(value)))

    @property
    def barnes_hut_threshold(self) -> int:
        return self._barnes_hut_threshold

    @barnes_hut_threshold.setter
    def barnes_hut_threshold(self, value: int) -> None:
        self._barnes_hut_threshold = max(0, int(value))

    def apply(self, graph: WorkingGraph, alpha: float, fx: np.ndarray, fy: np.ndarray) -> None:
        n = graph.node_count
        if n < 2 or self._strength == 0.0 or not np.any(graph.radius > 0):
            return

        if n > self._barnes_hut_threshold:
            oi, oj = self._overlaps_quadtree(graph)
        else:
            oi, oj = self._overlaps_exact(graph)
        if len(oi) == 0:
            return

        dx = graph.x[oi] - graph.x[oj]
        dy = graph.y[oi] - graph.y[oj]
        separate_coincident(dx, dy, oi, oj, 1e-3)
        dist = np.hypot(dx, dy)

        r = graph.radius
        depth = (r[oi] + r[oj] - dist) / dist * self._strength
        r2 = r * r
        share = r2[oj] / (r2[oi] + r2[oj])

        np.add.at(fx, oi, dx * depth * share)
        np.add.at(fy, oi, dy * depth * share)

    def _overlaps_exact(self, graph: WorkingGraph) -> tuple[np.ndarray, np.ndarray]:
        """All ordered pairs (i, j), i != j, whose radii overlap."""
        n = graph.node_count
        dx = graph.x[:, None] - graph.x[None, :]
        dy = graph.y[:, None] - graph.y[None, :]
        dist = np.hypot(dx, dy)
        reach = graph.radius[:, None] + graph.radius[None, :]
        overlap = dist < reach
        overlap[np.arange(n), np.arange(n)] = False
        return np.nonzero(overlap)

    def _overlaps_quadtree(self, graph: WorkingGraph) -> tuple[np.ndarray, np.ndarray]:
        """Same pairs as the exact path, found with radius queries."""
        tree = QuadTree.from_positions(graph.x, graph.y)
        r = graph.radius
        r_max = float(r.max())
        oi: list[int] = []
        oj: list[int] = []
        for i in range(graph.node_count):
            xi, yi = float(graph.x[i]), float(graph.y[i])
            for j in tree.query_radius(xi, yi, float(r[i]) + r_max):
                if j == i:
                    continue
                if np.hypot(graph.x[j] - xi, graph.y[j] - yi) < r[i] + r[j]:
                    oi.append(i)
                    oj.append(j)
        return np.array(oi, dtype=np.intp), np.array(oj, dtype=np.intp)


__all__ = ["CollisionForce"]
