"""Tests for SVG export of draw lists."""

import xml.etree.ElementTree as ET

import pytest

from forcegraph import EngineConfig, GraphEngine
from forcegraph.export import to_svg
from forcegraph.render import CirclePrimitive, DrawList, TextPrimitive

SVG_NS = "{http://www.w3.org/2000/svg}"

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def engine():
    """A small labeled graph with known positions."""
    engine = GraphEngine(EngineConfig(width=400, height=300, random_seed=1))
    engine.set_graph(
        {
            "nodes": [
                {"id": "p1", "label": "Main pipe", "type": "PIPE", "x": 100, "y": 100},
                {"id": "v1", "label": "Valve <A&B>", "type": "VALVE", "x": 300, "y": 100},
                {"id": "s1", "type": "STATION", "x": 200, "y": 250},
            ],
            "edges": [
                {"source": "p1", "target": "v1", "label": "CONNECTS_TO"},
                {"source": "v1", "target": "s1"},
            ],
        }
    )
    return engine.stop()


def parse(svg):
    return ET.fromstring(svg)


class TestSVGExport:
    """Tests for to_svg."""

    def test_basic_svg_export(self, engine):
        svg = to_svg(engine.render(), engine.size)
        root = parse(svg)
        assert root.tag == f"{SVG_NS}svg"
        assert root.get("width") == "400.0"
        assert root.get("viewBox") == "0 0 400.0 300.0"

    def test_svg_contains_nodes(self, engine):
        root = parse(to_svg(engine.render(), engine.size))
        circles = root.findall(f".//{SVG_NS}circle")
        assert [c.get("data-id") for c in circles] == ["p1", "v1", "s1"]
        assert circles[0].get("cx") == "100.0"

    def test_svg_contains_edges(self, engine):
        root = parse(to_svg(engine.render(), engine.size))
        assert len(root.findall(f".//{SVG_NS}line")) == 2

    def test_svg_labels_escaped(self, engine):
        svg = to_svg(engine.render(), engine.size)
        assert "Valve &lt;A&amp;B&gt;" in svg
        texts = [t.text for t in parse(svg).findall(f".//{SVG_NS}text")]
        assert "Valve <A&B>" in texts
        assert "CONNECTS_TO" in texts
        assert "s1" in texts

    def test_svg_group_order(self, engine):
        root = parse(to_svg(engine.render(), engine.size))
        groups = [g.get("class") for g in root.findall(f"{SVG_NS}g")]
        assert groups == ["edges", "edge-labels", "nodes", "labels"]

    def test_svg_no_edge_label_group_when_empty(self):
        draw_list = DrawList(circles=[CirclePrimitive(10, 10, 5, "#fff", node_id="a")])
        root = parse(to_svg(draw_list, (50, 50)))
        groups = [g.get("class") for g in root.findall(f"{SVG_NS}g")]
        assert "edge-labels" not in groups

    def test_svg_background(self, engine):
        svg = to_svg(engine.render(), engine.size, background="#111827")
        rect = parse(svg).find(f"{SVG_NS}rect")
        assert rect.get("fill") == "#111827"

    def test_svg_font_family(self):
        draw_list = DrawList(node_labels=[TextPrimitive(0, 0, "x", 12.0)])
        svg = to_svg(draw_list, (10, 10), font_family="monospace")
        assert parse(svg).find(f".//{SVG_NS}text").get("font-family") == "monospace"

    def test_svg_follows_camera(self, engine):
        engine.pan_by(50, 0)
        root = parse(to_svg(engine.render(), engine.size))
        assert root.find(f".//{SVG_NS}circle").get("cx") == "150.0"

    def test_svg_empty_draw_list(self):
        root = parse(to_svg(DrawList(), (100, 100)))
        assert root.findall(f".//{SVG_NS}circle") == []
