"""
Shared pieces of the force contributors.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod

import numpy as np

from ..continuity import WorkingGraph

_GOLDEN = (math.sqrt(5.0) - 1.0) / 2.0
_SILVER = math.sqrt(2.0) - 1.0


class Force(ABC):
    """
    One contribution to the net force on every node.

    Contributors accumulate into the force arrays; they never move nodes
    themselves.
    """

    def initialize(self, graph: WorkingGraph) -> None:
        """Precompute per-graph data. Called once per working graph."""
        pass

    @abstractmethod
    def apply(self, graph: WorkingGraph, alpha: float, fx: np.ndarray, fy: np.ndarray) -> None:
        """Add this contribution for the current positions to fx, fy."""
        pass


def separate_coincident(
    dx: np.ndarray,
    dy: np.ndarray,
    i: np.ndarray,
    j: np.ndarray,
    length: float,
) -> None:
    """
    Replace zero offsets between distinct nodes with a fixed-length offset.

    The direction is derived from the index pair, never from a random
    source, and is antisymmetric: the offset for (j, i) is the negation of
    the offset for (i, j). Arrays are modified in place.
    """
    coincident = (dx == 0.0) & (dy == 0.0) & (i != j)
    if not np.any(coincident):
        return
    ci = i[coincident]
    cj = j[coincident]
    lo = np.minimum(ci, cj)
    hi = np.maximum(ci, cj)
    angle = 2.0 * math.pi * np.mod((lo + 1) * _GOLDEN + (hi + 1) * _SILVER, 1.0)
    sign = np.where(ci < cj, 1.0, -1.0)
    dx[coincident] = sign * length * np.cos(angle)
    dy[coincident] = sign * length * np.sin(angle)


__all__ = ["Force", "separate_coincident"]
