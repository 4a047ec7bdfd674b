"""
Common types for the force-directed graph engine.

This module provides the data shapes exchanged with the host:
- NodeCategory: Pipeline asset categories (with default colors)
- Node: Graph vertex as supplied by the caller
- Edge: Relationship between two node ids
- GraphSnapshot: Ordered nodes and edges at one point in time
- NodeState: Simulation state of a node inside the engine
- EventType: Simulation lifecycle events
- Event: Event payload for callbacks
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Callable, Mapping, Optional, Sequence, TypedDict, Union

from .validation import InvalidEdgeError, InvalidNodeError


class NodeCategory(str, Enum):
    """Pipeline asset categories."""

    PIPE = "PIPE"
    VALVE = "VALVE"
    STATION = "STATION"
    FITTING = "FITTING"
    RISK = "RISK"
    LOCATION = "LOCATION"
    PERSON = "PERSON"
    DOCUMENT = "DOCUMENT"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def coerce(cls, value: Any) -> NodeCategory:
        """Convert a category name (any case) to a member, UNKNOWN if unrecognized."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.UNKNOWN
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.UNKNOWN


CATEGORY_COLORS: dict[NodeCategory, str] = {
    NodeCategory.PIPE: "#3b82f6",
    NodeCategory.VALVE: "#ef4444",
    NodeCategory.STATION: "#eab308",
    NodeCategory.FITTING: "#10b981",
    NodeCategory.RISK: "#f97316",
    NodeCategory.LOCATION: "#8b5cf6",
    NodeCategory.PERSON: "#ec4899",
    NodeCategory.DOCUMENT: "#64748b",
    NodeCategory.UNKNOWN: "#9ca3af",
}

CATEGORY_LABELS: dict[NodeCategory, str] = {
    NodeCategory.PIPE: "Pipe body",
    NodeCategory.VALVE: "Valve / device",
    NodeCategory.STATION: "Station / facility",
    NodeCategory.FITTING: "Fitting / structure",
    NodeCategory.RISK: "Risk / anomaly",
    NodeCategory.LOCATION: "Environment / location",
    NodeCategory.PERSON: "Person / organization",
    NodeCategory.DOCUMENT: "Data / document",
    NodeCategory.UNKNOWN: "Other",
}


class EventType(IntEnum):
    """
    Simulation lifecycle events.

    - start: Simulation begins moving after being idle
    - tick: Fired once per integration step
    - end: Simulation has settled
    """

    start = 0
    tick = 1
    end = 2


class Event(TypedDict, total=False):
    """Event payload passed to event listeners."""

    type: EventType
    alpha: float
    iteration: int
    movement: Optional[float]


class Node:
    """
    Graph node as supplied by the caller.

    Attributes:
        id: Unique, stable identifier
        label: Display text
        category: Asset category
        color: Optional fill color overriding the category color
        x, y: Optional seed position for nodes the engine has not seen yet
        radius: Optional drawn radius overriding the engine default
        properties: Free-form attributes shown by the host
    """

    def __init__(
        self,
        id: str,
        label: str = "",
        category: Union[NodeCategory, str, None] = NodeCategory.UNKNOWN,
        color: Optional[str] = None,
        x: Optional[float] = None,
        y: Optional[float] = None,
        radius: Optional[float] = None,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> None:
        if id is None or str(id) == "":
            raise InvalidNodeError("Node id cannot be empty")
        self.id = str(id)
        self.label = label if label is not None else ""
        self.category = NodeCategory.coerce(category)
        self.color = color
        self.x = _number(x, "x", self.id)
        self.y = _number(y, "y", self.id)
        self.radius = _number(radius, "radius", self.id)
        self.properties: dict[str, Any] = dict(properties) if properties else {}

    @property
    def has_seed(self) -> bool:
        """True if both seed coordinates are given."""
        return self.x is not None and self.y is not None

    def __repr__(self) -> str:
        return f"Node(id={self.id!r}, category={self.category.value})"


class Edge:
    """
    Relationship between two nodes, referenced by id.

    Attributes:
        source: Source node id
        target: Target node id
        label: Relationship name (e.g. "CONNECTS_TO")
    """

    def __init__(self, source: str, target: str, label: str = "") -> None:
        if source is None:
            raise InvalidEdgeError("Edge source cannot be None")
        if target is None:
            raise InvalidEdgeError("Edge target cannot be None")
        self.source = str(source)
        self.target = str(target)
        self.label = label if label is not None else ""

    @property
    def key(self) -> tuple[str, str]:
        """(source, target) pair identifying the edge's endpoints."""
        return (self.source, self.target)

    def __repr__(self) -> str:
        return f"Edge({self.source!r} -> {self.target!r})"


NodeLike = Union[Node, Mapping[str, Any], Any]
"""Input type for nodes: Node objects, dicts, or objects with node attributes."""

EdgeLike = Union[Edge, Mapping[str, Any], Any]
"""Input type for edges: Edge objects, dicts, or objects with source/target."""

SizeType = Union[tuple[float, float], list[float], Sequence[float]]
"""Viewport size: (width, height) tuple, list, or sequence."""


def _number(value: Any, name: str, node_id: str) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidNodeError(f"Node {node_id!r} has a non-numeric {name}: {value!r}") from None


def _field(data: Any, *names: str, default: Any = None) -> Any:
    """Read the first present key/attribute out of a dict or object."""
    for name in names:
        if isinstance(data, Mapping):
            if name in data:
                return data[name]
        elif hasattr(data, name):
            return getattr(data, name)
    return default


def _endpoint_id(value: Any) -> Any:
    """Edge endpoints may arrive as ids or as already-resolved node objects."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return value.get("id")
    return getattr(value, "id", value)


def coerce_node(data: NodeLike) -> Node:
    """Convert a Node, dict, or attribute-bearing object into a Node."""
    if isinstance(data, Node):
        return data
    node_id = _field(data, "id")
    if node_id is None:
        raise InvalidNodeError(f"Node has no id: {data!r}")
    return Node(
        id=node_id,
        label=_field(data, "label", "name", default=""),
        category=_field(data, "category", "type"),
        color=_field(data, "color"),
        x=_field(data, "x"),
        y=_field(data, "y"),
        radius=_field(data, "radius"),
        properties=_field(data, "properties"),
    )


def coerce_edge(data: EdgeLike) -> Edge:
    """Convert an Edge, dict, or attribute-bearing object into an Edge."""
    if isinstance(data, Edge):
        return data
    source = _endpoint_id(_field(data, "source", "source_id", "sourceId"))
    target = _endpoint_id(_field(data, "target", "target_id", "targetId"))
    return Edge(source, target, _field(data, "label", default=""))


@dataclass
class GraphSnapshot:
    """
    Full node and edge state supplied by the caller at a point in time.

    The engine never mutates a snapshot; it builds its own working copy.
    """

    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    @classmethod
    def from_data(cls, data: Any) -> GraphSnapshot:
        """
        Build a snapshot from loose input.

        Accepts an existing snapshot, a mapping with ``nodes`` and ``edges``
        (or ``links``, as in graph exports), or an object exposing
        those attributes.

        Raises:
            InvalidNodeError: If a node has no id.
            InvalidEdgeError: If an edge has no source or target.
        """
        if isinstance(data, cls):
            return data
        nodes = _field(data, "nodes", default=None) or []
        edges = _field(data, "edges", "links", default=None) or []
        return cls(
            nodes=[coerce_node(n) for n in nodes],
            edges=[coerce_edge(e) for e in edges],
        )


@dataclass
class NodeState:
    """Simulation state of one node, as exposed to the renderer."""

    id: str
    label: str
    category: NodeCategory
    color: str
    x: float
    y: float
    radius: float
    vx: float = 0.0
    vy: float = 0.0
    pinned: Optional[tuple[float, float]] = None


EventCallback = Callable[[Optional[Event]], None]


__all__ = [
    "NodeCategory",
    "CATEGORY_COLORS",
    "CATEGORY_LABELS",
    "EventType",
    "Event",
    "EventCallback",
    "Node",
    "Edge",
    "NodeLike",
    "EdgeLike",
    "SizeType",
    "GraphSnapshot",
    "NodeState",
    "coerce_node",
    "coerce_edge",
]
