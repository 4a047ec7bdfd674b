"""
Centering force.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..continuity import WorkingGraph
from .base import Force


class CenteringForce(Force):
    """
    Pulls the centroid of the free nodes toward a target point.

    Every free node receives the same vector, strength * (center - centroid),
    so the layout moves as a whole and its shape is untouched. With no
    center (a collapsed viewport) the force is suspended.
    """

    def __init__(
        self, *, center: Optional[tuple[float, float]] = None, strength: float = 0.1
    ) -> None:
        self._center = center
        self._strength = max(0.0, float(strength))

    @property
    def center(self) -> Optional[tuple[float, float]]:
        """Target point, or None while suspended."""
        return self._center

    @center.setter
    def center(self, value: Optional[tuple[float, float]]) -> None:
        self._center = (float(value[0]), float(value[1])) if value is not None else None

    @property
    def strength(self) -> float:
        return self._strength

    @strength.setter
    def strength(self, value: float) -> None:
        self._strength = max(0.0, float(value))

    def apply(self, graph: WorkingGraph, alpha: float, fx: np.ndarray, fy: np.ndarray) -> None:
        if self._center is None or self._strength == 0.0:
            return
        free = ~graph.fixed
        if not np.any(free):
            return
        cx, cy = self._center
        k = self._strength * alpha
        fx[free] += k * (cx - graph.x[free].mean())
        fy[free] += k * (cy - graph.y[free].mean())


__all__ = ["CenteringForce"]
