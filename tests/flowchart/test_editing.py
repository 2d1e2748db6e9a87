import pytest

from flowsketch.core.exceptions import NodeNotFoundError, SchemaError
from flowsketch.flowchart.editing import (
    connect_nodes,
    update_node,
    update_node_type_color,
    update_palette_field,
)
from flowsketch.flowchart.model import MAX_EDGES, FlowEdge, NodeType


class TestUpdateNode:
    def test_updates_label_and_details(self, canonical_flowchart):
        node = update_node(canonical_flowchart, "ship", label="Dispatch parcel", details="Courier pickup")
        assert node.label == "Dispatch parcel"
        assert canonical_flowchart.node("ship").details == "Courier pickup"

    def test_changes_type(self, canonical_flowchart):
        update_node(canonical_flowchart, "backorder", node_type="data")
        assert canonical_flowchart.node("backorder").type == NodeType.DATA

    def test_refuses_removing_last_start(self, canonical_flowchart):
        with pytest.raises(SchemaError):
            update_node(canonical_flowchart, "receive-order", node_type=NodeType.PROCESS)
        assert canonical_flowchart.node("receive-order").type == NodeType.START

    def test_refuses_removing_last_end(self, canonical_flowchart):
        with pytest.raises(SchemaError):
            update_node(canonical_flowchart, "done", node_type="process")

    def test_allows_retyping_start_when_another_exists(self, canonical_flowchart):
        update_node(canonical_flowchart, "ship", node_type="start")
        update_node(canonical_flowchart, "receive-order", node_type="process")
        assert canonical_flowchart.node("receive-order").type == NodeType.PROCESS

    def test_invalid_input_leaves_node_untouched(self, canonical_flowchart):
        with pytest.raises(SchemaError):
            update_node(canonical_flowchart, "ship", label="", details="fine")
        assert canonical_flowchart.node("ship").label == "Ship parcel"
        assert canonical_flowchart.node("ship").details == ""

    def test_unknown_type_is_rejected(self, canonical_flowchart):
        with pytest.raises(SchemaError):
            update_node(canonical_flowchart, "ship", node_type="cloud")

    def test_unknown_node(self, canonical_flowchart):
        with pytest.raises(NodeNotFoundError):
            update_node(canonical_flowchart, "missing", label="x")


class TestConnectNodes:
    def test_appends_edge_with_counter_id(self, canonical_flowchart):
        edge = connect_nodes(canonical_flowchart, "backorder", "done", label="cancel")
        assert edge.id == "edge-backorder-done-6"
        assert canonical_flowchart.edges[-1] is edge

    def test_counter_skips_taken_ids(self, canonical_flowchart):
        canonical_flowchart.edges.append(
            FlowEdge(id="edge-ship-done-6", source="ship", target="done")
        )
        edge = connect_nodes(canonical_flowchart, "ship", "done")
        assert edge.id == "edge-ship-done-7"

    def test_unknown_endpoint(self, canonical_flowchart):
        with pytest.raises(NodeNotFoundError):
            connect_nodes(canonical_flowchart, "ship", "nowhere")

    def test_edge_limit(self, canonical_flowchart):
        while len(canonical_flowchart.edges) < MAX_EDGES:
            connect_nodes(canonical_flowchart, "ship", "done")
        with pytest.raises(SchemaError):
            connect_nodes(canonical_flowchart, "ship", "done")


class TestPaletteEdits:
    def test_valid_color_is_stored_lowercase(self, canonical_flowchart):
        assert update_palette_field(canonical_flowchart, "mutedText", "#ABCDEF") is True
        assert canonical_flowchart.palette.muted_text == "#abcdef"

    def test_invalid_color_keeps_previous_value(self, canonical_flowchart):
        before = canonical_flowchart.palette.canvas
        assert update_palette_field(canonical_flowchart, "canvas", "blue") is False
        assert canonical_flowchart.palette.canvas == before

    def test_unknown_field(self, canonical_flowchart):
        with pytest.raises(SchemaError):
            update_palette_field(canonical_flowchart, "border", "#000000")

    def test_node_type_color(self, canonical_flowchart):
        assert update_node_type_color(canonical_flowchart, NodeType.DECISION, "#112233") is True
        assert canonical_flowchart.palette.node_colors.decision == "#112233"
        assert update_node_type_color(canonical_flowchart, "decision", "#12") is False
        assert canonical_flowchart.palette.node_colors.decision == "#112233"

    def test_unknown_node_type_color(self, canonical_flowchart):
        with pytest.raises(SchemaError):
            update_node_type_color(canonical_flowchart, "cloud", "#112233")
