"""
Quadtree implementation for Barnes-Hut charge approximation and lookups.

The quadtree recursively subdivides 2D space into quadrants,
enabling O(n log n) approximate n-body charge forces, nearest-node
hit testing, and radius queries for collision detection.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

# Regions smaller than this stop subdividing and hold all their bodies.
MIN_HALF_SIZE = 1e-6


@dataclass
class Body:
    """A body (node) with position and mass for force calculations."""

    x: float
    y: float
    mass: float = 1.0
    index: int = -1  # Working-graph node index


@dataclass
class QuadTreeNode:
    """
    A node in the quadtree.

    Attributes:
        x, y: Center of this region
        half_size: Half the width/height of this region
        center_of_mass_x/y: Center of mass of bodies in this subtree
        total_mass: Total mass of bodies in this subtree
        bodies: Bodies held by a leaf; more than one only when they coincide
        children: Four child quadrants [NW, NE, SW, SE] if internal
    """

    x: float
    y: float
    half_size: float

    # Aggregated properties
    center_of_mass_x: float = 0.0
    center_of_mass_y: float = 0.0
    total_mass: float = 0.0

    # Content
    bodies: List[Body] = field(default_factory=list)
    children: Optional[List[Optional[QuadTreeNode]]] = None

    def is_leaf(self) -> bool:
        """True if this node has no children."""
        return self.children is None

    def is_empty(self) -> bool:
        """True if this node contains no bodies."""
        return not self.bodies and self.children is None

    def contains(self, x: float, y: float) -> bool:
        """Check if point (x, y) is within this node's region."""
        return abs(x - self.x) <= self.half_size and abs(y - self.y) <= self.half_size

    def get_quadrant(self, x: float, y: float) -> int:
        """
        Get quadrant index for a point.

        Returns:
            0=NW, 1=NE, 2=SW, 3=SE
        """
        east = x >= self.x
        south = y >= self.y
        return (2 if south else 0) + (1 if east else 0)

    def distance_to(self, x: float, y: float) -> float:
        """Distance from a point to this node's square (0 if inside)."""
        dx = max(abs(x - self.x) - self.half_size, 0.0)
        dy = max(abs(y - self.y) - self.half_size, 0.0)
        return math.sqrt(dx * dx + dy * dy)


class QuadTree:
    """
    Barnes-Hut quadtree for approximate charge forces and spatial lookups.

    For distant clusters, the algorithm treats the cluster as a single
    body at its center of mass, reducing complexity from O(n^2) to
    O(n log n).

    Usage:
        tree = QuadTree.from_positions(xs, ys, theta=0.9)

        # Charge on a body (offset vector scaled by strength * m / d^2)
        fx, fy = tree.calculate_force(body, strength=400.0)

        # Nearest body within a radius
        index = tree.find(x, y, radius=20.0)

    The theta parameter controls the accuracy/speed tradeoff:
    - theta = 0: Exact calculation (no approximation)
    - theta = 0.9: Good balance for interactive layouts
    - theta = 1.5+: Fast but less accurate
    """

    def __init__(
        self,
        bounds: Tuple[float, float, float, float],
        theta: float = 0.9,
    ):
        """
        Initialize quadtree.

        Args:
            bounds: (min_x, min_y, max_x, max_y) bounding box
            theta: Barnes-Hut threshold (0 = exact, higher = more approximation)
        """
        min_x, min_y, max_x, max_y = bounds
        center_x = (min_x + max_x) / 2
        center_y = (min_y + max_y) / 2
        # Use max dimension to ensure square region
        half_size = max(max_x - min_x, max_y - min_y, 2 * MIN_HALF_SIZE) / 2

        self.root = QuadTreeNode(center_x, center_y, half_size)
        self.theta = theta
        self.body_count = 0

    def insert(self, body: Body) -> None:
        """Insert a body into the quadtree."""
        self._insert_into(self.root, body)
        self.body_count += 1

    def _insert_into(self, node: QuadTreeNode, body: Body) -> None:
        """Recursively insert body into subtree rooted at node."""
        if node.is_empty():
            node.bodies.append(body)
            return

        if node.is_leaf():
            first = node.bodies[0]
            if (first.x == body.x and first.y == body.y) or node.half_size <= MIN_HALF_SIZE:
                # Coincident points cannot be separated by subdividing
                node.bodies.append(body)
                return

            existing = node.bodies
            node.bodies = []
            node.children = [None, None, None, None]
            for other in existing:
                self._insert_into_child(node, other)

        self._insert_into_child(node, body)

    def _insert_into_child(self, node: QuadTreeNode, body: Body) -> None:
        """Insert body into the appropriate child of node."""
        quadrant = node.get_quadrant(body.x, body.y)

        if node.children is not None and node.children[quadrant] is None:
            hs = node.half_size / 2
            cx = node.x + hs * (1 if quadrant & 1 else -1)
            cy = node.y + hs * (1 if quadrant & 2 else -1)
            node.children[quadrant] = QuadTreeNode(cx, cy, hs)

        if node.children is not None:
            child = node.children[quadrant]
            if child is not None:
                self._insert_into(child, body)

    def compute_mass_distribution(self) -> None:
        """Compute center of mass for all nodes (post-order traversal)."""
        self._compute_mass(self.root)

    def _compute_mass(self, node: QuadTreeNode) -> None:
        """Recursively compute mass distribution."""
        if node.is_leaf():
            total = sum(b.mass for b in node.bodies)
            node.total_mass = total
            if node.bodies:
                node.center_of_mass_x = node.bodies[0].x
                node.center_of_mass_y = node.bodies[0].y
            return

        total_mass = 0.0
        weighted_x = 0.0
        weighted_y = 0.0

        if node.children:
            for child in node.children:
                if child is not None:
                    self._compute_mass(child)
                    total_mass += child.total_mass
                    weighted_x += child.center_of_mass_x * child.total_mass
                    weighted_y += child.center_of_mass_y * child.total_mass

        node.total_mass = total_mass
        if total_mass > 0:
            node.center_of_mass_x = weighted_x / total_mass
            node.center_of_mass_y = weighted_y / total_mass

    def calculate_force(
        self,
        body: Body,
        strength: float = 1.0,
        min_distance: float = 1.0,
        max_distance: float = math.inf,
    ) -> Tuple[float, float]:
        """
        Calculate approximate charge force on a body.

        Each (aggregated) mass contributes its offset vector scaled by
        strength * m / d^2, so the magnitude falls off as strength * m / d.
        Distances below min_distance are floored; bodies further than
        max_distance are ignored. Bodies coinciding exactly with `body`
        are skipped here; the exact path separates those.

        Args:
            body: The body to calculate force on
            strength: Charge strength (positive repels)
            min_distance: Distance floor to avoid infinite forces
            max_distance: Interaction cutoff

        Returns:
            (fx, fy) force vector
        """
        return self._calculate_force(
            self.root, body, strength, min_distance * min_distance, max_distance * max_distance
        )

    def _calculate_force(
        self,
        node: QuadTreeNode,
        body: Body,
        strength: float,
        min_d2: float,
        max_d2: float,
    ) -> Tuple[float, float]:
        """Recursively calculate force contribution from node."""
        if node.is_empty():
            return 0.0, 0.0

        dx = body.x - node.center_of_mass_x
        dy = body.y - node.center_of_mass_y
        dist_sq = dx * dx + dy * dy

        if node.is_leaf():
            if dist_sq == 0.0 or dist_sq >= max_d2:
                return 0.0, 0.0
            mass = sum(b.mass for b in node.bodies if b.index != body.index)
            w = strength * mass / max(dist_sq, min_d2)
            return dx * w, dy * w

        # Barnes-Hut criterion: s/d < theta, never for a region holding the body itself
        far = (node.half_size * 2) ** 2 < self.theta * self.theta * dist_sq
        if far and not node.contains(body.x, body.y):
            if dist_sq >= max_d2:
                return 0.0, 0.0
            w = strength * node.total_mass / max(dist_sq, min_d2)
            return dx * w, dy * w

        fx, fy = 0.0, 0.0
        if node.children:
            for child in node.children:
                if child is not None:
                    cfx, cfy = self._calculate_force(child, body, strength, min_d2, max_d2)
                    fx += cfx
                    fy += cfy

        return fx, fy

    def find(self, x: float, y: float, radius: float = math.inf) -> Optional[int]:
        """
        Find the body nearest to (x, y) within radius.

        Returns:
            The body's index, or None if no body lies within radius.
        """
        best: list = [None, radius]
        self._find(self.root, x, y, best)
        return best[0]

    def _find(self, node: QuadTreeNode, x: float, y: float, best: list) -> None:
        if node.is_empty() or node.distance_to(x, y) > best[1]:
            return
        if node.is_leaf():
            for b in node.bodies:
                d = math.hypot(b.x - x, b.y - y)
                # ties go to the first body found
                if d < best[1] or (best[0] is None and d <= best[1]):
                    best[0], best[1] = b.index, d
            return
        if node.children:
            # Visit the quadrant containing the point first to shrink the radius early
            first = node.get_quadrant(x, y)
            order = [first] + [q for q in range(4) if q != first]
            for q in order:
                child = node.children[q]
                if child is not None:
                    self._find(child, x, y, best)

    def query_radius(self, x: float, y: float, radius: float) -> List[int]:
        """Indices of all bodies within radius of (x, y)."""
        found: List[int] = []
        self._query(self.root, x, y, radius, found)
        return found

    def _query(
        self, node: QuadTreeNode, x: float, y: float, radius: float, found: List[int]
    ) -> None:
        if node.is_empty() or node.distance_to(x, y) > radius:
            return
        if node.is_leaf():
            found.extend(b.index for b in node.bodies if math.hypot(b.x - x, b.y - y) <= radius)
            return
        if node.children:
            for child in node.children:
                if child is not None:
                    self._query(child, x, y, radius, found)

    @classmethod
    def from_positions(
        cls,
        xs: Sequence[float],
        ys: Sequence[float],
        padding: float = 10.0,
        theta: float = 0.9,
    ) -> QuadTree:
        """
        Build a quadtree from parallel coordinate sequences.

        Body i gets index i. Non-finite coordinates are skipped.

        Args:
            xs, ys: Node coordinates
            padding: Padding around bounding box
            theta: Barnes-Hut threshold

        Returns:
            QuadTree with all bodies inserted and mass computed
        """
        bodies = [
            Body(float(x), float(y), mass=1.0, index=i)
            for i, (x, y) in enumerate(zip(xs, ys))
            if math.isfinite(x) and math.isfinite(y)
        ]
        if not bodies:
            return cls((0, 0, 100, 100), theta=theta)

        min_x = min(b.x for b in bodies) - padding
        min_y = min(b.y for b in bodies) - padding
        max_x = max(b.x for b in bodies) + padding
        max_y = max(b.y for b in bodies) + padding

        tree = cls((min_x, min_y, max_x, max_y), theta=theta)

        for body in bodies:
            tree.insert(body)

        tree.compute_mass_distribution()
        return tree


__all__ = ["Body", "QuadTree", "QuadTreeNode"]
