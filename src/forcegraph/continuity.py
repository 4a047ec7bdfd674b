"""
Continuity across snapshot replacements.

The caller replaces the whole graph on every edit. To keep the picture
stable, the engine never lays out a snapshot from scratch: node positions
are cached by id and carried over into each new working graph, and only
brand-new nodes receive fresh positions.

- PositionCache: id -> (x, y), rebuilt from the current id set after updates
- WorkingGraph: index-based arena (numpy arrays) the simulation mutates
- ContinuityManager: merges a snapshot with the cache and writes positions back
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Iterator, Mapping, Optional

import numpy as np

from .types import CATEGORY_COLORS, Edge, GraphSnapshot, Node, NodeState

logger = logging.getLogger(__name__)


class PositionCache:
    """Last known position of every node id, keyed by id."""

    def __init__(self, positions: Optional[Mapping[str, tuple[float, float]]] = None) -> None:
        self._positions: dict[str, tuple[float, float]] = {}
        if positions:
            for node_id, (x, y) in positions.items():
                self._positions[str(node_id)] = (float(x), float(y))

    def get(self, node_id: str) -> Optional[tuple[float, float]]:
        return self._positions.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._positions

    def __len__(self) -> int:
        return len(self._positions)

    def __iter__(self) -> Iterator[str]:
        return iter(self._positions)

    def items(self):
        return self._positions.items()

    def as_dict(self) -> dict[str, tuple[float, float]]:
        """Copy of the cached positions."""
        return dict(self._positions)

    def rebuild(self, ids: list[str], xs: np.ndarray, ys: np.ndarray) -> None:
        """Replace the cache with exactly these ids; absent ids are pruned."""
        self._positions = {node_id: (float(x), float(y)) for node_id, x, y in zip(ids, xs, ys)}

    def clear(self) -> None:
        self._positions.clear()

    def __repr__(self) -> str:
        return f"PositionCache(size={len(self._positions)})"


@dataclass
class WorkingGraph:
    """
    The engine's private working copy of a snapshot.

    Nodes live at array indices; edges reference those indices. Built
    once per snapshot, mutated in place by every simulation step.

    Attributes:
        ids: Node id per index
        nodes: Caller's Node per index (read only)
        x, y: Positions
        vx, vy: Velocities
        radius: Collision radius per node
        draw_radius: Rendered radius per node
        sources, targets: Edge endpoint indices
        edges: Resolved edges, parallel to sources/targets
        dropped_edges: Edges whose endpoints were missing
        fixed: True where the node is pinned
        pin_x, pin_y: Pin coordinates where fixed
        new_ids: Ids that were not seeded from the cache
    """

    ids: list[str]
    nodes: list[Node]
    x: np.ndarray
    y: np.ndarray
    vx: np.ndarray
    vy: np.ndarray
    radius: np.ndarray
    draw_radius: np.ndarray
    sources: np.ndarray
    targets: np.ndarray
    edges: list[Edge]
    dropped_edges: list[Edge] = field(default_factory=list)
    new_ids: list[str] = field(default_factory=list)
    index: dict[str, int] = field(default_factory=dict)
    fixed: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=bool))
    pin_x: np.ndarray = field(default_factory=lambda: np.zeros(0))
    pin_y: np.ndarray = field(default_factory=lambda: np.zeros(0))

    def __post_init__(self) -> None:
        n = len(self.ids)
        if not self.index:
            self.index = {node_id: i for i, node_id in enumerate(self.ids)}
        if len(self.fixed) != n:
            self.fixed = np.zeros(n, dtype=bool)
            self.pin_x = np.zeros(n)
            self.pin_y = np.zeros(n)

    @classmethod
    def empty(cls) -> WorkingGraph:
        return cls(
            ids=[],
            nodes=[],
            x=np.zeros(0),
            y=np.zeros(0),
            vx=np.zeros(0),
            vy=np.zeros(0),
            radius=np.zeros(0),
            draw_radius=np.zeros(0),
            sources=np.zeros(0, dtype=np.intp),
            targets=np.zeros(0, dtype=np.intp),
            edges=[],
        )

    @property
    def node_count(self) -> int:
        return len(self.ids)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    @property
    def structure(self) -> tuple[frozenset, frozenset]:
        """(node ids, edge endpoint pairs); equal structures need no reheat."""
        return frozenset(self.ids), frozenset(e.key for e in self.edges)

    def degree(self) -> np.ndarray:
        """Edge count per node, self-loops excluded."""
        n = self.node_count
        mask = self.sources != self.targets
        return np.bincount(self.sources[mask], minlength=n) + np.bincount(
            self.targets[mask], minlength=n
        )

    def position_of(self, node_id: str) -> Optional[tuple[float, float]]:
        i = self.index.get(node_id)
        if i is None:
            return None
        return float(self.x[i]), float(self.y[i])

    def set_pins(self, pins: Mapping[str, tuple[float, float]]) -> None:
        """Mark pinned nodes; ids not in this graph are ignored."""
        self.fixed[:] = False
        for node_id, (px, py) in pins.items():
            i = self.index.get(node_id)
            if i is not None:
                self.fixed[i] = True
                self.pin_x[i] = px
                self.pin_y[i] = py

    def node_states(self) -> list[NodeState]:
        """Per-node view of the simulation state."""
        states = []
        for i, node in enumerate(self.nodes):
            states.append(
                NodeState(
                    id=self.ids[i],
                    label=node.label,
                    category=node.category,
                    color=node.color or CATEGORY_COLORS[node.category],
                    x=float(self.x[i]),
                    y=float(self.y[i]),
                    radius=float(self.draw_radius[i]),
                    vx=float(self.vx[i]),
                    vy=float(self.vy[i]),
                    pinned=(float(self.pin_x[i]), float(self.pin_y[i])) if self.fixed[i] else None,
                )
            )
        return states


class ContinuityManager:
    """
    Bridges simulation state across snapshot replacements.

    Example:
        manager = ContinuityManager(jitter=10.0, random_seed=7)
        graph = manager.merge(snapshot, center=(400, 300))
        ...  # simulate
        manager.capture(graph)

        # Later edits keep the positions of known ids
        graph = manager.merge(edited_snapshot, center=(400, 300))
    """

    def __init__(
        self,
        *,
        cache: Optional[PositionCache] = None,
        jitter: float = 10.0,
        random_seed: Optional[int] = None,
        collision_radius: float = 45.0,
        node_radius: float = 20.0,
    ) -> None:
        """
        Initialize the continuity manager.

        Args:
            cache: Existing position cache to continue from
            jitter: Half-width of the square around the center where new nodes land
            random_seed: Seed for the jitter generator
            collision_radius: Default collision radius per node
            node_radius: Default drawn radius per node
        """
        self._cache = cache if cache is not None else PositionCache()
        self._jitter = max(0.0, float(jitter))
        self._random_seed = random_seed
        self._rng = random.Random(random_seed)
        self._collision_radius = max(0.0, float(collision_radius))
        self._node_radius = float(node_radius)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def cache(self) -> PositionCache:
        """The position cache owned by this manager."""
        return self._cache

    @property
    def jitter(self) -> float:
        return self._jitter

    @jitter.setter
    def jitter(self, value: float) -> None:
        self._jitter = max(0.0, float(value))

    @property
    def random_seed(self) -> Optional[int]:
        return self._random_seed

    @random_seed.setter
    def random_seed(self, value: Optional[int]) -> None:
        """Set the seed and restart the jitter sequence."""
        self._random_seed = value
        self._rng = random.Random(value)

    # -------------------------------------------------------------------------
    # Merge / capture
    # -------------------------------------------------------------------------

    def merge(self, snapshot: GraphSnapshot, center: tuple[float, float]) -> WorkingGraph:
        """
        Build a working graph for a snapshot, seeded from the cache.

        Args:
            snapshot: The caller's graph; never mutated
            center: Where brand-new nodes without seed coordinates are placed

        Returns:
            A fresh WorkingGraph with zero velocities
        """
        by_id: dict[str, Node] = {}
        for node in snapshot.nodes:
            if node.id in by_id:
                logger.debug("Duplicate node id %r; keeping the later occurrence", node.id)
            by_id[node.id] = node

        ids = list(by_id)
        nodes = [by_id[i] for i in ids]
        n = len(ids)
        x = np.zeros(n)
        y = np.zeros(n)
        new_ids: list[str] = []

        cx, cy = center
        for i, node in enumerate(nodes):
            cached = self._cache.get(node.id)
            if cached is not None:
                x[i], y[i] = cached
                continue
            new_ids.append(node.id)
            if node.has_seed and math.isfinite(node.x) and math.isfinite(node.y):
                x[i], y[i] = node.x, node.y
            else:
                if node.has_seed:
                    logger.debug(
                        "Ignoring non-finite seed (%s, %s) for node %r", node.x, node.y, node.id
                    )
                x[i] = cx + self._rng.uniform(-self._jitter, self._jitter)
                y[i] = cy + self._rng.uniform(-self._jitter, self._jitter)

        index = {node_id: i for i, node_id in enumerate(ids)}
        sources: list[int] = []
        targets: list[int] = []
        edges: list[Edge] = []
        dropped: list[Edge] = []
        for edge in snapshot.edges:
            s = index.get(edge.source)
            t = index.get(edge.target)
            if s is None or t is None:
                dropped.append(edge)
                continue
            sources.append(s)
            targets.append(t)
            edges.append(edge)
        if dropped:
            logger.debug("Dropped %d dangling edge(s): %s", len(dropped), dropped)

        draw_radius = np.array(
            [
                node.radius
                if node.radius is not None and math.isfinite(node.radius) and node.radius > 0
                else self._node_radius
                for node in nodes
            ],
            dtype=np.float64,
        )
        radius = np.maximum(draw_radius, self._collision_radius) if n else np.zeros(0)

        return WorkingGraph(
            ids=ids,
            nodes=nodes,
            x=x,
            y=y,
            vx=np.zeros(n),
            vy=np.zeros(n),
            radius=radius,
            draw_radius=draw_radius,
            sources=np.array(sources, dtype=np.intp),
            targets=np.array(targets, dtype=np.intp),
            edges=edges,
            dropped_edges=dropped,
            new_ids=new_ids,
            index=index,
        )

    def capture(self, graph: WorkingGraph) -> None:
        """Write every node's current position into the cache."""
        self._cache.rebuild(graph.ids, graph.x, graph.y)


__all__ = ["PositionCache", "WorkingGraph", "ContinuityManager"]
