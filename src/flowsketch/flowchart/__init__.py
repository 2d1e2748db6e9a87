"""Flowchart domain models, repair, and layout."""

from .model import (
    FlowEdge,
    Flowchart,
    FlowchartInput,
    FlowNode,
    NodeColors,
    NodeType,
    Palette,
)
from .ids import claim_node_id, sanitize_id
from .palette import DEFAULT_PALETTE, normalize_palette, pick_palette_from_prompt
from .repair import import_flowchart, repair_existing_flowchart, repair_flowchart
from .fallback import fallback_flowchart, refined_fallback
from .sizing import NodeSize, estimate_node_dimensions
from .layout import LayoutResult, Orientation, bounding_area, layout_document, layout_flowchart
from .placement import LayeredPlacer, PlacementConfig, Placer
from .editing import connect_nodes, update_node, update_node_type_color, update_palette_field

__all__ = [
    "FlowEdge",
    "Flowchart",
    "FlowchartInput",
    "FlowNode",
    "NodeColors",
    "NodeType",
    "Palette",
    "claim_node_id",
    "sanitize_id",
    "DEFAULT_PALETTE",
    "normalize_palette",
    "pick_palette_from_prompt",
    "import_flowchart",
    "repair_existing_flowchart",
    "repair_flowchart",
    "fallback_flowchart",
    "refined_fallback",
    "NodeSize",
    "estimate_node_dimensions",
    "LayoutResult",
    "Orientation",
    "bounding_area",
    "layout_document",
    "layout_flowchart",
    "LayeredPlacer",
    "PlacementConfig",
    "Placer",
    "connect_nodes",
    "update_node",
    "update_node_type_color",
    "update_palette_field",
]
