"""
Layout metrics.

Continuity measures compare two id-keyed position maps (for example the
engine's `positions` before and after an edit):
- Bounding box and diagonal of a layout
- Per-node displacement, mean and max

Quality measures describe a single layout:
- Edge crossings: Number of intersecting edges
- Edge length statistics: Mean, min, max and spread of edge lengths

All functions take plain `{id: (x, y)}` mappings and edges by id.
"""

from __future__ import annotations

import math
from typing import Iterable, Mapping, Optional, Sequence, Tuple, Union

from .types import Edge

Positions = Mapping[str, Tuple[float, float]]
EdgeRef = Union[Edge, Tuple[str, str]]


def bounding_box(positions: Positions) -> Optional[Tuple[float, float, float, float]]:
    """
    Axis-aligned bounds of a layout.

    Returns:
        (min_x, min_y, max_x, max_y), or None for an empty layout
    """
    if not positions:
        return None
    xs = [p[0] for p in positions.values()]
    ys = [p[1] for p in positions.values()]
    return min(xs), min(ys), max(xs), max(ys)


def bounding_diagonal(positions: Positions) -> float:
    """Length of the bounding box diagonal (0 for fewer than two nodes)."""
    box = bounding_box(positions)
    if box is None:
        return 0.0
    min_x, min_y, max_x, max_y = box
    return math.hypot(max_x - min_x, max_y - min_y)


def displacements(before: Positions, after: Positions) -> dict[str, float]:
    """Distance moved by every id present in both layouts."""
    moved = {}
    for node_id, (x0, y0) in before.items():
        p = after.get(node_id)
        if p is not None:
            moved[node_id] = math.hypot(p[0] - x0, p[1] - y0)
    return moved


def mean_displacement(before: Positions, after: Positions) -> float:
    moved = displacements(before, after)
    if not moved:
        return 0.0
    return sum(moved.values()) / len(moved)


def max_displacement(before: Positions, after: Positions) -> float:
    moved = displacements(before, after)
    return max(moved.values(), default=0.0)


def _endpoints(edge: EdgeRef) -> Tuple[str, str]:
    if isinstance(edge, Edge):
        return edge.source, edge.target
    return edge[0], edge[1]


def _segments(positions: Positions, edges: Iterable[EdgeRef]) -> list:
    """Resolvable edges as (source, target, p, q); others are skipped."""
    segments = []
    for edge in edges:
        s, t = _endpoints(edge)
        p = positions.get(s)
        q = positions.get(t)
        if p is not None and q is not None:
            segments.append((s, t, p, q))
    return segments


def edge_crossings(positions: Positions, edges: Sequence[EdgeRef]) -> int:
    """
    Count the number of edge crossings in the layout.

    Two edges cross if their line segments intersect. Edges sharing an
    endpoint never count.

    Time Complexity: O(m^2) where m = number of edges
    """
    segments = _segments(positions, edges)
    crossings = 0
    for i in range(len(segments)):
        s1, t1, p1, p2 = segments[i]
        for j in range(i + 1, len(segments)):
            s2, t2, p3, p4 = segments[j]
            if {s1, t1} & {s2, t2}:
                continue
            if _segments_intersect(p1, p2, p3, p4):
                crossings += 1
    return crossings


def _segments_intersect(
    p1: Tuple[float, float],
    p2: Tuple[float, float],
    p3: Tuple[float, float],
    p4: Tuple[float, float],
) -> bool:
    """Check if line segments (p1,p2) and (p3,p4) intersect."""

    def ccw(a: Tuple[float, float], b: Tuple[float, float], c: Tuple[float, float]) -> bool:
        return (c[1] - a[1]) * (b[0] - a[0]) > (b[1] - a[1]) * (c[0] - a[0])

    return ccw(p1, p3, p4) != ccw(p2, p3, p4) and ccw(p1, p2, p3) != ccw(p1, p2, p4)


def edge_length_stats(positions: Positions, edges: Sequence[EdgeRef]) -> dict[str, float]:
    """
    Summary of edge lengths.

    Returns:
        Dictionary with count, mean, min, max, std and uniformity
        (1 - std / mean, clamped to [0, 1]); zeros when there are no edges
    """
    lengths = [math.hypot(q[0] - p[0], q[1] - p[1]) for _, _, p, q in _segments(positions, edges)]
    if not lengths:
        return {"count": 0, "mean": 0.0, "min": 0.0, "max": 0.0, "std": 0.0, "uniformity": 1.0}

    mean = sum(lengths) / len(lengths)
    variance = sum((length - mean) ** 2 for length in lengths) / len(lengths)
    std = math.sqrt(variance)
    uniformity = max(0.0, min(1.0, 1.0 - std / mean)) if mean > 0 else 0.0

    return {
        "count": len(lengths),
        "mean": mean,
        "min": min(lengths),
        "max": max(lengths),
        "std": std,
        "uniformity": uniformity,
    }


__all__ = [
    "bounding_box",
    "bounding_diagonal",
    "displacements",
    "mean_displacement",
    "max_displacement",
    "edge_crossings",
    "edge_length_stats",
]
