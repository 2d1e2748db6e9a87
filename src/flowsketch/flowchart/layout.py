"""Flowchart layout: sizing, placement per orientation, and compact selection."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .model import FlowEdge, Flowchart, FlowNode
from .placement import LayeredPlacer, PlacementConfig, Placer, SizedNode
from .sizing import NodeSize, estimate_flow_node

POSITION_MARGIN = 20

ARROW_MARKER: Mapping[str, str] = {"type": "arrowclosed"}


class Orientation(str, Enum):
    VERTICAL = "TB"
    HORIZONTAL = "LR"
    COMPACT = "COMPACT"

    @classmethod
    def parse(cls, value: Union["Orientation", str, None]) -> "Orientation":
        """Lenient lookup; anything unrecognized lays out top-to-bottom."""
        if isinstance(value, Orientation):
            return value
        key = str(value or "").strip().upper()
        aliases = {"VERTICAL": "TB", "HORIZONTAL": "LR"}
        key = aliases.get(key, key)
        for member in cls:
            if member.value == key:
                return member
        return cls.VERTICAL


@dataclass(frozen=True)
class Spacing:
    rank_sep: float
    node_sep: float
    margin: float


STANDARD_SPACING = Spacing(rank_sep=100, node_sep=80, margin=30)
COMPACT_SPACING = Spacing(rank_sep=45, node_sep=30, margin=20)


@dataclass
class Position:
    x: float
    y: float


@dataclass
class LayoutNode:
    id: str
    label: str
    type: str
    details: str
    notes: str
    width: float
    height: float
    position: Position
    source_position: str
    target_position: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "type": self.type,
            "details": self.details,
            "notes": self.notes,
            "width": self.width,
            "height": self.height,
            "position": {"x": self.position.x, "y": self.position.y},
            "sourcePosition": self.source_position,
            "targetPosition": self.target_position,
        }


@dataclass
class LayoutEdge:
    id: str
    source: str
    target: str
    label: str = ""
    condition: str = ""
    marker_end: Dict[str, str] = field(default_factory=lambda: dict(ARROW_MARKER))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "label": self.label,
            "condition": self.condition,
            "markerEnd": dict(self.marker_end),
        }


@dataclass
class LayoutResult:
    nodes: List[LayoutNode]
    edges: List[LayoutEdge]
    direction: str
    area: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "direction": self.direction,
            "area": self.area,
        }


def layout_flowchart(
    nodes: Sequence[FlowNode],
    edges: Sequence[FlowEdge],
    orientation: Union[Orientation, str] = Orientation.VERTICAL,
    *,
    sizes: Optional[Mapping[str, NodeSize]] = None,
    placer: Optional[Placer] = None,
) -> LayoutResult:
    """Position ``nodes`` for rendering.

    ``sizes`` overrides the estimated size of any node it names. Compact mode
    lays the graph out top-to-bottom and left-to-right with tighter spacing
    and keeps whichever bounding box is smaller (top-to-bottom on a tie).
    """
    orientation = Orientation.parse(orientation)
    placer = placer or LayeredPlacer()
    resolved = {node.id: (sizes or {}).get(node.id) or estimate_flow_node(node) for node in nodes}

    if orientation is Orientation.COMPACT:
        candidates = [
            _run_placement(nodes, edges, resolved, direction, COMPACT_SPACING, placer)
            for direction in (Orientation.VERTICAL.value, Orientation.HORIZONTAL.value)
        ]
        best = candidates[0]
        for candidate in candidates[1:]:
            if candidate.area < best.area:
                best = candidate
        return best

    return _run_placement(nodes, edges, resolved, orientation.value, STANDARD_SPACING, placer)


def layout_document(
    document: Flowchart,
    orientation: Union[Orientation, str] = Orientation.VERTICAL,
    *,
    placer: Optional[Placer] = None,
) -> LayoutResult:
    return layout_flowchart(document.nodes, document.edges, orientation, placer=placer)


def _run_placement(
    nodes: Sequence[FlowNode],
    edges: Sequence[FlowEdge],
    sizes: Mapping[str, NodeSize],
    direction: str,
    spacing: Spacing,
    placer: Placer,
) -> LayoutResult:
    config = PlacementConfig(
        direction=direction,
        rank_sep=spacing.rank_sep,
        node_sep=spacing.node_sep,
        margin_x=spacing.margin,
        margin_y=spacing.margin,
    )
    sized = [SizedNode(node.id, sizes[node.id].width, sizes[node.id].height) for node in nodes]
    centers = placer.place(sized, [(edge.source, edge.target) for edge in edges], config)

    horizontal = direction == Orientation.HORIZONTAL.value
    layout_nodes: List[LayoutNode] = []
    for node in nodes:
        size = sizes[node.id]
        center_x, center_y = centers[node.id]
        layout_nodes.append(
            LayoutNode(
                id=node.id,
                label=node.label,
                type=node.type.value,
                details=node.details,
                notes=node.notes,
                width=size.width,
                height=size.height,
                position=Position(x=center_x - size.width / 2, y=center_y - size.height / 2),
                source_position="right" if horizontal else "bottom",
                target_position="left" if horizontal else "top",
            )
        )

    layout_nodes = normalize_positions(layout_nodes)
    layout_edges = [
        LayoutEdge(
            id=edge.id,
            source=edge.source,
            target=edge.target,
            label=edge.label,
            condition=edge.condition,
        )
        for edge in edges
    ]
    return LayoutResult(
        nodes=layout_nodes,
        edges=layout_edges,
        direction=direction,
        area=bounding_area(layout_nodes),
    )


def normalize_positions(nodes: List[LayoutNode], margin: float = POSITION_MARGIN) -> List[LayoutNode]:
    """Shift every node so the minimum x and y are at least ``margin``. Never rescales."""
    if not nodes:
        return nodes

    min_x = min(node.position.x for node in nodes)
    min_y = min(node.position.y for node in nodes)
    shift_x = margin - min_x if min_x < margin else 0.0
    shift_y = margin - min_y if min_y < margin else 0.0
    if shift_x == 0 and shift_y == 0:
        return nodes

    return [
        replace(node, position=Position(x=node.position.x + shift_x, y=node.position.y + shift_y))
        for node in nodes
    ]


def bounding_area(nodes: Sequence[LayoutNode]) -> float:
    """Axis-aligned bounding-box area; each side counts as at least 1."""
    if not nodes:
        return float("inf")

    min_x = min(node.position.x for node in nodes)
    min_y = min(node.position.y for node in nodes)
    max_x = max(node.position.x + node.width for node in nodes)
    max_y = max(node.position.y + node.height for node in nodes)
    return max(1.0, max_x - min_x) * max(1.0, max_y - min_y)
