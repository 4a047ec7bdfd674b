"""
SVG export for draw lists.

Serializes a DrawList produced by the render projector. Coordinates are
already in screen space, so the document simply spans the viewport.
"""

from __future__ import annotations

from typing import Optional, Sequence
from xml.sax.saxutils import escape, quoteattr

from ..render import CirclePrimitive, DrawList, LinePrimitive, TextPrimitive


def to_svg(
    draw_list: DrawList,
    size: Sequence[float],
    *,
    background: Optional[str] = None,
    font_family: str = "sans-serif",
) -> str:
    """
    Export a draw list to SVG format.

    Args:
        draw_list: Primitives from RenderProjector.project or GraphEngine.render
        size: Viewport (width, height)
        background: Background color (default None for transparent)
        font_family: Font family for labels (default sans-serif)

    Returns:
        SVG string representation of the frame
    """
    width, height = float(size[0]), float(size[1])

    svg_parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{width:.1f}" height="{height:.1f}" '
        f'viewBox="0 0 {width:.1f} {height:.1f}">'
    ]

    if background:
        svg_parts.append(f'  <rect width="100%" height="100%" fill={quoteattr(background)}/>')

    svg_parts.append('  <g class="edges">')
    for line in draw_list.lines:
        svg_parts.append(_render_line(line))
    svg_parts.append("  </g>")

    if draw_list.edge_labels:
        svg_parts.append('  <g class="edge-labels">')
        for text in draw_list.edge_labels:
            svg_parts.append(_render_text(text, font_family))
        svg_parts.append("  </g>")

    svg_parts.append('  <g class="nodes">')
    for circle in draw_list.circles:
        svg_parts.append(_render_circle(circle))
    svg_parts.append("  </g>")

    svg_parts.append('  <g class="labels">')
    for text in draw_list.node_labels:
        svg_parts.append(_render_text(text, font_family))
    svg_parts.append("  </g>")

    svg_parts.append("</svg>")

    return "\n".join(svg_parts)


def _render_line(line: LinePrimitive) -> str:
    return (
        f'    <line x1="{line.x1:.1f}" y1="{line.y1:.1f}" '
        f'x2="{line.x2:.1f}" y2="{line.y2:.1f}" '
        f"stroke={quoteattr(line.stroke)} stroke-width=\"{line.stroke_width:.2f}\" "
        f'stroke-opacity="{line.opacity}"/>'
    )


def _render_circle(circle: CirclePrimitive) -> str:
    return (
        f'    <circle cx="{circle.cx:.1f}" cy="{circle.cy:.1f}" r="{circle.r:.1f}" '
        f"fill={quoteattr(circle.fill)} stroke={quoteattr(circle.stroke)} "
        f'stroke-width="{circle.stroke_width:.2f}" data-id={quoteattr(circle.node_id)}/>'
    )


def _render_text(text: TextPrimitive, font_family: str) -> str:
    return (
        f'    <text x="{text.x:.1f}" y="{text.y:.1f}" '
        f"fill={quoteattr(text.fill)} font-size=\"{text.font_size:.1f}\" "
        f"font-family={quoteattr(font_family)} "
        f'text-anchor="{text.anchor}">'
        f"{escape(text.text)}</text>"
    )


__all__ = ["to_svg"]
