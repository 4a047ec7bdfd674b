"""
Spring force along edges.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..continuity import WorkingGraph
from .base import Force, separate_coincident


class LinkForce(Force):
    """
    Pulls the endpoints of every edge toward a rest distance.

    The correction is linear in the displacement from the rest length.
    Unless a fixed strength is given, each edge's strength is
    1 / min(degree(source), degree(target)), and the correction is split
    between the endpoints by degree so that hubs move less than leaves:
    the target takes `bias = degree(source) / (degree(source) + degree(target))`
    of it and the source the rest.

    Example:
        force = LinkForce(distance=120.0)
        force.initialize(graph)
        force.apply(graph, alpha, fx, fy)
    """

    def __init__(self, *, distance: float = 120.0, strength: Optional[float] = None) -> None:
        """
        Args:
            distance: Rest length of every edge
            strength: Fixed spring strength, or None for the degree-based default
        """
        self._distance = max(0.0, float(distance))
        self._strength = float(strength) if strength is not None else None
        self._mask: Optional[np.ndarray] = None
        self._edge_strength: Optional[np.ndarray] = None
        self._bias: Optional[np.ndarray] = None

    @property
    def distance(self) -> float:
        """Get the rest length."""
        return self._distance

    @distance.setter
    def distance(self, value: float) -> None:
        self._distance = max(0.0, float(value))

    @property
    def strength(self) -> Optional[float]:
        """Get the fixed strength (None = degree-based)."""
        return self._strength

    @strength.setter
    def strength(self, value: Optional[float]) -> None:
        self._strength = float(value) if value is not None else None
        self._edge_strength = None

    def initialize(self, graph: WorkingGraph) -> None:
        self._mask = graph.sources != graph.targets
        s = graph.sources[self._mask]
        t = graph.targets[self._mask]
        count = graph.degree().astype(np.float64)
        if len(s) == 0:
            self._edge_strength = np.zeros(0)
            self._bias = np.zeros(0)
            return
        if self._strength is None:
            self._edge_strength = 1.0 / np.minimum(count[s], count[t])
        else:
            self._edge_strength = np.full(len(s), self._strength)
        self._bias = count[s] / (count[s] + count[t])

    def apply(self, graph: WorkingGraph, alpha: float, fx: np.ndarray, fy: np.ndarray) -> None:
        if self._mask is None or len(self._mask) != graph.edge_count or self._edge_strength is None:
            self.initialize(graph)
        assert self._mask is not None and self._edge_strength is not None
        assert self._bias is not None

        s = graph.sources[self._mask]
        t = graph.targets[self._mask]
        if len(s) == 0:
            return

        dx = graph.x[t] - graph.x[s]
        dy = graph.y[t] - graph.y[s]
        separate_coincident(dx, dy, s, t, 1.0)
        dist = np.hypot(dx, dy)

        scale = (dist - self._distance) / dist * alpha * self._edge_strength
        ddx = dx * scale
        ddy = dy * scale

        np.subtract.at(fx, t, ddx * self._bias)
        np.subtract.at(fy, t, ddy * self._bias)
        np.add.at(fx, s, ddx * (1.0 - self._bias))
        np.add.at(fy, s, ddy * (1.0 - self._bias))


__all__ = ["LinkForce"]
