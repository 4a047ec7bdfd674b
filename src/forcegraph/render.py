"""
Projection of simulation state into screen-space draw primitives.

RenderProjector is a pure function of (node states, edges, camera). It
knows nothing about the backend: hosts walk the DrawList and issue their
own canvas, SVG or matplotlib calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence, Union

from .interaction import CameraTransform
from .types import Edge, NodeState


@dataclass(frozen=True)
class LinePrimitive:
    """An edge segment in screen coordinates."""

    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str = "#4b5563"
    stroke_width: float = 2.0
    opacity: float = 0.6
    source: str = ""
    target: str = ""


@dataclass(frozen=True)
class CirclePrimitive:
    """A node glyph in screen coordinates."""

    cx: float
    cy: float
    r: float
    fill: str
    stroke: str = "#ffffff"
    stroke_width: float = 1.5
    node_id: str = ""


@dataclass(frozen=True)
class TextPrimitive:
    """A centered text label in screen coordinates."""

    x: float
    y: float
    text: str
    font_size: float
    fill: str = "#e5e7eb"
    anchor: str = "middle"


Primitive = Union[LinePrimitive, CirclePrimitive, TextPrimitive]


@dataclass
class DrawList:
    """
    Primitives for one frame, grouped by layer.

    Iteration yields them in paint order: edges, edge labels, nodes,
    node labels.
    """

    lines: list[LinePrimitive] = field(default_factory=list)
    edge_labels: list[TextPrimitive] = field(default_factory=list)
    circles: list[CirclePrimitive] = field(default_factory=list)
    node_labels: list[TextPrimitive] = field(default_factory=list)

    def __iter__(self) -> Iterator[Primitive]:
        yield from self.lines
        yield from self.edge_labels
        yield from self.circles
        yield from self.node_labels

    def __len__(self) -> int:
        return len(self.lines) + len(self.edge_labels) + len(self.circles) + len(self.node_labels)

    def circle_for(self, node_id: str) -> Optional[CirclePrimitive]:
        for circle in self.circles:
            if circle.node_id == node_id:
                return circle
        return None


class RenderProjector:
    """
    Maps node states and edges through the camera into a DrawList.

    Radii, label offsets, stroke widths and font sizes are given in
    simulation units and scale with the camera.

    Example:
        projector = RenderProjector(show_edge_labels=False)
        draw_list = projector.project(states, edges, camera)
        for circle in draw_list.circles:
            canvas.circle(circle.cx, circle.cy, circle.r, fill=circle.fill)
    """

    def __init__(
        self,
        *,
        node_label_offset: float = 32.0,
        edge_label_offset: float = -5.0,
        show_edge_labels: bool = True,
        node_font_size: float = 12.0,
        edge_font_size: float = 10.0,
        edge_color: str = "#4b5563",
        edge_width: float = 2.0,
        edge_opacity: float = 0.6,
        node_stroke: str = "#ffffff",
        node_stroke_width: float = 1.5,
        node_label_color: str = "#e5e7eb",
        edge_label_color: str = "#9ca3af",
    ) -> None:
        self.node_label_offset = float(node_label_offset)
        self.edge_label_offset = float(edge_label_offset)
        self.show_edge_labels = bool(show_edge_labels)
        self.node_font_size = float(node_font_size)
        self.edge_font_size = float(edge_font_size)
        self.edge_color = edge_color
        self.edge_width = float(edge_width)
        self.edge_opacity = float(edge_opacity)
        self.node_stroke = node_stroke
        self.node_stroke_width = float(node_stroke_width)
        self.node_label_color = node_label_color
        self.edge_label_color = edge_label_color

    def project(
        self,
        nodes: Sequence[NodeState],
        edges: Sequence[Edge],
        camera: CameraTransform,
    ) -> DrawList:
        """
        Build the draw list for one frame.

        Edges whose endpoints are not among `nodes` are skipped.
        """
        s = camera.scale
        screen: dict[str, tuple[float, float]] = {}
        for node in nodes:
            screen[node.id] = camera.apply(node.x, node.y)

        draw_list = DrawList()

        for edge in edges:
            p = screen.get(edge.source)
            q = screen.get(edge.target)
            if p is None or q is None:
                continue
            draw_list.lines.append(
                LinePrimitive(
                    p[0],
                    p[1],
                    q[0],
                    q[1],
                    stroke=self.edge_color,
                    stroke_width=self.edge_width * s,
                    opacity=self.edge_opacity,
                    source=edge.source,
                    target=edge.target,
                )
            )
            if self.show_edge_labels and edge.label:
                draw_list.edge_labels.append(
                    TextPrimitive(
                        (p[0] + q[0]) / 2,
                        (p[1] + q[1]) / 2 + self.edge_label_offset * s,
                        edge.label,
                        font_size=self.edge_font_size * s,
                        fill=self.edge_label_color,
                    )
                )

        for node in nodes:
            cx, cy = screen[node.id]
            draw_list.circles.append(
                CirclePrimitive(
                    cx,
                    cy,
                    node.radius * s,
                    fill=node.color,
                    stroke=self.node_stroke,
                    stroke_width=self.node_stroke_width * s,
                    node_id=node.id,
                )
            )
            draw_list.node_labels.append(
                TextPrimitive(
                    cx,
                    cy + self.node_label_offset * s,
                    node.label or node.id,
                    font_size=self.node_font_size * s,
                    fill=self.node_label_color,
                )
            )

        return draw_list


__all__ = [
    "LinePrimitive",
    "CirclePrimitive",
    "TextPrimitive",
    "Primitive",
    "DrawList",
    "RenderProjector",
]
