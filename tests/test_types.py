"""Tests for graph data types and snapshot ingestion."""

import pytest

from forcegraph.types import (
    CATEGORY_COLORS,
    CATEGORY_LABELS,
    Edge,
    EventType,
    GraphSnapshot,
    Node,
    NodeCategory,
    coerce_edge,
    coerce_node,
)
from forcegraph.validation import InvalidEdgeError, InvalidNodeError


class Asset:
    """Attribute-bearing node object, as a host model might supply."""

    def __init__(self, id, label, type):
        self.id = id
        self.label = label
        self.type = type


class TestNodeCategory:
    """Tests for NodeCategory coercion and lookup tables."""

    def test_coerce_member(self):
        assert NodeCategory.coerce(NodeCategory.VALVE) is NodeCategory.VALVE

    def test_coerce_case_insensitive(self):
        assert NodeCategory.coerce("pipe") is NodeCategory.PIPE

    def test_coerce_unknown(self):
        assert NodeCategory.coerce("SPACESHIP") is NodeCategory.UNKNOWN
        assert NodeCategory.coerce(None) is NodeCategory.UNKNOWN

    def test_every_category_has_color_and_label(self):
        for category in NodeCategory:
            assert CATEGORY_COLORS[category].startswith("#")
            assert CATEGORY_LABELS[category]


class TestNode:
    """Tests for Node."""

    def test_defaults(self):
        node = Node("v1")
        assert node.id == "v1"
        assert node.label == ""
        assert node.category is NodeCategory.UNKNOWN
        assert node.color is None
        assert node.properties == {}
        assert not node.has_seed

    def test_id_is_stringified(self):
        assert Node(7).id == "7"

    def test_seed(self):
        node = Node("v1", x=10, y=20)
        assert node.has_seed
        assert (node.x, node.y) == (10.0, 20.0)

    def test_partial_seed_is_not_a_seed(self):
        assert not Node("v1", x=10).has_seed

    def test_numeric_strings_accepted(self):
        node = Node("v1", x="10.5", y="-3", radius="12")
        assert (node.x, node.y, node.radius) == (10.5, -3.0, 12.0)

    def test_malformed_seed_raises(self):
        with pytest.raises(InvalidNodeError, match="non-numeric x"):
            Node("v1", x="left", y=0)
        with pytest.raises(InvalidNodeError, match="non-numeric y"):
            coerce_node({"id": "v1", "x": 0, "y": [1, 2]})
        with pytest.raises(InvalidNodeError, match="non-numeric radius"):
            Node("v1", radius=object())

    def test_empty_id_raises(self):
        with pytest.raises(InvalidNodeError):
            Node("")

    def test_properties_are_copied(self):
        props = {"material": "PE100"}
        node = Node("p1", properties=props)
        props["material"] = "steel"
        assert node.properties == {"material": "PE100"}


class TestEdge:
    """Tests for Edge."""

    def test_key(self):
        edge = Edge("a", "b", "CONNECTS_TO")
        assert edge.key == ("a", "b")
        assert edge.label == "CONNECTS_TO"

    def test_missing_endpoint_raises(self):
        with pytest.raises(InvalidEdgeError):
            Edge(None, "b")
        with pytest.raises(InvalidEdgeError):
            Edge("a", None)


class TestCoercion:
    """Tests for NodeLike / EdgeLike coercion."""

    def test_node_from_dict_with_type(self):
        node = coerce_node({"id": "v1", "label": "Valve 1", "type": "VALVE"})
        assert node.category is NodeCategory.VALVE
        assert node.label == "Valve 1"

    def test_node_from_object(self):
        node = coerce_node(Asset("s1", "Station", "station"))
        assert node.id == "s1"
        assert node.category is NodeCategory.STATION

    def test_node_without_id_raises(self):
        with pytest.raises(InvalidNodeError):
            coerce_node({"label": "nameless"})

    def test_node_passthrough(self):
        node = Node("v1")
        assert coerce_node(node) is node

    def test_edge_from_dict(self):
        edge = coerce_edge({"source": "a", "target": "b", "label": "FEEDS"})
        assert edge.key == ("a", "b")

    def test_edge_alternate_spellings(self):
        assert coerce_edge({"sourceId": "a", "targetId": "b"}).key == ("a", "b")
        assert coerce_edge({"source_id": "a", "target_id": "b"}).key == ("a", "b")

    def test_edge_with_resolved_endpoints(self):
        """Endpoints already resolved to node objects are reduced to ids."""
        edge = coerce_edge({"source": {"id": "a"}, "target": Node("b")})
        assert edge.key == ("a", "b")

    def test_edge_without_target_raises(self):
        with pytest.raises(InvalidEdgeError):
            coerce_edge({"source": "a"})


class TestGraphSnapshot:
    """Tests for GraphSnapshot.from_data."""

    def test_export_format_with_links(self):
        data = {
            "nodes": [
                {"id": "p1", "label": "Main pipe", "type": "PIPE"},
                {"id": "v1", "label": "Valve", "type": "VALVE"},
            ],
            "links": [{"source": "p1", "target": "v1", "label": "CONNECTS_TO"}],
        }
        snapshot = GraphSnapshot.from_data(data)
        assert [n.id for n in snapshot.nodes] == ["p1", "v1"]
        assert snapshot.edges[0].key == ("p1", "v1")

    def test_edges_key(self):
        snapshot = GraphSnapshot.from_data({"nodes": [{"id": "a"}], "edges": []})
        assert len(snapshot.nodes) == 1
        assert snapshot.edges == []

    def test_snapshot_passthrough(self):
        snapshot = GraphSnapshot([Node("a")], [])
        assert GraphSnapshot.from_data(snapshot) is snapshot

    def test_empty(self):
        snapshot = GraphSnapshot.from_data({})
        assert snapshot.nodes == []
        assert snapshot.edges == []


class TestEventType:
    """Tests for EventType."""

    def test_lookup_by_name(self):
        assert EventType["tick"] is EventType.tick
        assert [e.name for e in EventType] == ["start", "tick", "end"]
