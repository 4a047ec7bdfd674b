"""
Net force on every node: the sum of all contributors.
"""

from __future__ import annotations

from typing import Iterator, Optional, Sequence

import numpy as np

from ..continuity import WorkingGraph
from .base import Force
from .center import CenteringForce
from .charge import ChargeForce
from .collide import CollisionForce
from .link import LinkForce


class ForceModel:
    """
    Sums link, charge, centering and collision contributions.

    Pinned nodes always receive a zero net force; they still act on the
    others.

    Example:
        model = ForceModel()
        model.initialize(graph)
        fx, fy = model.compute(graph, alpha=1.0)
    """

    def __init__(
        self,
        *,
        link: Optional[LinkForce] = None,
        charge: Optional[ChargeForce] = None,
        center: Optional[CenteringForce] = None,
        collide: Optional[CollisionForce] = None,
        extra: Sequence[Force] = (),
    ) -> None:
        self.link = link if link is not None else LinkForce()
        self.charge = charge if charge is not None else ChargeForce()
        self.center = center if center is not None else CenteringForce()
        self.collide = collide if collide is not None else CollisionForce()
        self._extra = list(extra)

    def __iter__(self) -> Iterator[Force]:
        yield self.link
        yield self.charge
        yield self.center
        yield self.collide
        yield from self._extra

    def add(self, force: Force) -> ForceModel:
        """Register an additional contributor."""
        self._extra.append(force)
        return self

    def initialize(self, graph: WorkingGraph) -> None:
        """Prepare every contributor for a new working graph."""
        for force in self:
            force.initialize(graph)

    def compute(self, graph: WorkingGraph, alpha: float) -> tuple[np.ndarray, np.ndarray]:
        """
        Net force per node for the current positions.

        Returns:
            (fx, fy) arrays, zero at pinned nodes
        """
        n = graph.node_count
        fx = np.zeros(n)
        fy = np.zeros(n)
        if n == 0:
            return fx, fy
        for force in self:
            force.apply(graph, alpha, fx, fy)
        fx[graph.fixed] = 0.0
        fy[graph.fixed] = 0.0
        return fx, fy


__all__ = ["ForceModel"]
