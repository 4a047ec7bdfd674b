#!/usr/bin/env python3
"""
Visualization script for the force-directed engine.

Settles the pipeline demo graph, applies an incremental edit and saves
before/after images plus an SVG of the final frame into ./build/

Usage:
    uv run python scripts/visualize.py
"""

from pathlib import Path

import matplotlib.pyplot as plt

from forcegraph import EngineConfig, GraphEngine
from forcegraph.export import to_svg
from forcegraph.metrics import bounding_diagonal, edge_crossings, max_displacement

# Output directory
BUILD_DIR = Path(__file__).parent.parent / "build"


def ensure_build_dir():
    """Create build directory if it doesn't exist."""
    BUILD_DIR.mkdir(exist_ok=True)


def pipeline_graph():
    """Pipeline lifecycle data: a document root, four categories and their items."""
    nodes = [
        {"id": "root", "label": "PE pipeline lifecycle", "type": "DOCUMENT"},
        {"id": "cat1", "label": "Base data", "type": "DOCUMENT"},
        {"id": "cat2", "label": "Production", "type": "DOCUMENT"},
        {"id": "cat3", "label": "Installation", "type": "DOCUMENT"},
        {"id": "cat4", "label": "Operation", "type": "DOCUMENT"},
        {"id": "n1_1", "label": "Body data", "type": "PIPE"},
        {"id": "n1_2", "label": "Material", "type": "PIPE"},
        {"id": "n1_3", "label": "Certificate", "type": "DOCUMENT"},
        {"id": "n1_4", "label": "Wall thickness", "type": "FITTING"},
        {"id": "n2_1", "label": "Design data", "type": "DOCUMENT"},
        {"id": "n2_2", "label": "Safety device", "type": "VALVE"},
        {"id": "n2_3", "label": "Design pressure", "type": "RISK"},
        {"id": "n3_1", "label": "Soil", "type": "LOCATION"},
        {"id": "n3_2", "label": "Corrosion check", "type": "RISK"},
        {"id": "n3_3", "label": "Condensate tank", "type": "STATION"},
        {"id": "n4_1", "label": "Welding", "type": "PIPE"},
        {"id": "n4_2", "label": "Inspection", "type": "DOCUMENT"},
        {"id": "n4_3", "label": "Patrol log", "type": "PERSON"},
        {"id": "e1", "label": "Network office", "type": "PERSON"},
        {"id": "e2", "label": "Regulator box", "type": "STATION"},
    ]
    links = [
        ("root", "cat1", "CONTAINS"),
        ("root", "cat2", "CONTAINS"),
        ("root", "cat3", "CONTAINS"),
        ("root", "cat4", "CONTAINS"),
        ("cat1", "n1_1", "FILED"),
        ("cat1", "n1_2", "FILED"),
        ("cat1", "n1_3", "FILED"),
        ("n1_1", "n1_4", "PROPERTY"),
        ("cat2", "n2_1", "FILED"),
        ("cat2", "n2_2", "FILED"),
        ("n2_1", "n2_3", "DEFINES"),
        ("cat3", "n3_1", "FILED"),
        ("cat3", "n3_2", "FILED"),
        ("n3_1", "n3_2", "AFFECTS"),
        ("cat3", "n3_3", "FILED"),
        ("cat4", "n4_1", "FILED"),
        ("cat4", "n4_2", "FILED"),
        ("cat4", "n4_3", "FILED"),
        ("e1", "n4_3", "PERFORMS"),
        ("e2", "n3_3", "NEAR"),
    ]
    return {
        "nodes": nodes,
        "links": [{"source": s, "target": t, "label": label} for s, t, label in links],
    }


def draw(draw_list, title, ax):
    """Draw a DrawList on a matplotlib axis (screen y grows downward)."""
    for line in draw_list.lines:
        ax.plot(
            [line.x1, line.x2],
            [line.y1, line.y2],
            color=line.stroke,
            alpha=line.opacity,
            linewidth=line.stroke_width / 2,
        )

    for circle in draw_list.circles:
        ax.add_patch(
            plt.Circle(
                (circle.cx, circle.cy),
                circle.r,
                facecolor=circle.fill,
                edgecolor=circle.stroke,
                linewidth=circle.stroke_width / 2,
                zorder=5,
            )
        )

    for text in draw_list.node_labels:
        ax.annotate(text.text, (text.x, text.y), ha="center", va="center", fontsize=6, zorder=6)

    ax.set_title(title, fontsize=12, fontweight="bold")
    ax.set_aspect("equal")
    ax.invert_yaxis()
    ax.autoscale_view()
    ax.axis("off")


def generate_all():
    """Generate the demo images."""
    ensure_build_dir()

    config = EngineConfig(width=900, height=700, random_seed=42, show_edge_labels=False)
    engine = GraphEngine(config)
    data = pipeline_graph()

    print("Settling pipeline graph...")
    engine.set_graph(data).run()
    before_frame = engine.render()
    before = engine.positions

    print("Adding a risk node...")
    data["nodes"].append({"id": "e3", "label": "Corrosion hole", "type": "RISK"})
    data["links"].append({"source": "e3", "target": "n3_2", "label": "FOUND_BY"})
    engine.set_graph(data).run()
    after_frame = engine.render()
    after = engine.positions

    moved = max_displacement(before, after)
    print(f"  Max displacement: {moved:.1f} ({moved / bounding_diagonal(before):.1%} of diagonal)")
    print(f"  Edge crossings: {edge_crossings(after, engine.graph.edges)}")

    fig, axes = plt.subplots(1, 2, figsize=(14, 7))
    draw(before_frame, "Settled", axes[0])
    draw(after_frame, "After adding one node", axes[1])
    fig.tight_layout()
    fig.savefig(BUILD_DIR / "pipeline_continuity.png", dpi=150)
    plt.close(fig)

    (BUILD_DIR / "pipeline.svg").write_text(to_svg(after_frame, engine.size, background="#111827"))

    print()
    print(f"All images saved to: {BUILD_DIR.absolute()}")


if __name__ == "__main__":
    generate_all()
