"""In-place edits on a canonical flowchart.

Each operation either leaves the document canonical or raises before
touching it.
"""

from __future__ import annotations

import re
from typing import Optional, Union

from pydantic import ValidationError

from ..core.exceptions import NodeNotFoundError, SchemaError
from ..utils.logging import get_logger
from .model import (
    HEX_COLOR_PATTERN,
    MAX_EDGES,
    NODE_TYPES,
    FlowEdge,
    Flowchart,
    FlowNode,
    NodeType,
)

logger = get_logger(__name__)

_HEX_COLOR = re.compile(HEX_COLOR_PATTERN)

PALETTE_COLOR_FIELDS = {
    "canvas": "canvas",
    "panel": "panel",
    "text": "text",
    "mutedText": "muted_text",
    "muted_text": "muted_text",
    "edge": "edge",
    "accent": "accent",
}


def _require_node(document: Flowchart, node_id: str) -> FlowNode:
    node = document.node(node_id)
    if node is None:
        raise NodeNotFoundError(f"Node '{node_id}' not found", context={"node_id": node_id})
    return node


def update_node(
    document: Flowchart,
    node_id: str,
    *,
    label: Optional[str] = None,
    node_type: Optional[Union[NodeType, str]] = None,
    details: Optional[str] = None,
    notes: Optional[str] = None,
) -> FlowNode:
    """Edit a node's content or type. Removing the last start or end node is refused."""
    node = _require_node(document, node_id)
    updates = {
        key: value
        for key, value in (("label", label), ("type", node_type), ("details", details), ("notes", notes))
        if value is not None
    }

    try:
        candidate = FlowNode.model_validate({**node.model_dump(), **updates})
    except ValidationError as exc:
        raise SchemaError(
            f"Invalid update for node '{node_id}'",
            context={"errors": [err["msg"] for err in exc.errors()]},
        ) from exc

    for terminal in (NodeType.START, NodeType.END):
        if node.type == terminal and candidate.type != terminal:
            remaining = [other for other in document.nodes if other.type == terminal and other is not node]
            if not remaining:
                raise SchemaError(
                    f"Flowchart must keep at least one {terminal.value} node",
                    context={"node_id": node_id},
                )

    node.label = candidate.label
    node.type = candidate.type
    node.details = candidate.details
    node.notes = candidate.notes
    return node


def connect_nodes(
    document: Flowchart,
    source: str,
    target: str,
    *,
    label: str = "",
    condition: str = "",
) -> FlowEdge:
    """Add a manual edge between two existing nodes."""
    _require_node(document, source)
    _require_node(document, target)
    if len(document.edges) >= MAX_EDGES:
        raise SchemaError(
            f"Flowchart already has the maximum of {MAX_EDGES} edges",
            context={"edge_count": len(document.edges)},
        )

    existing_ids = {edge.id for edge in document.edges}
    counter = len(document.edges) + 1
    edge_id = f"edge-{source}-{target}-{counter}"
    while edge_id in existing_ids:
        counter += 1
        edge_id = f"edge-{source}-{target}-{counter}"

    try:
        edge = FlowEdge(id=edge_id, source=source, target=target, label=label, condition=condition)
    except ValidationError as exc:
        raise SchemaError(
            "Invalid edge",
            context={"errors": [err["msg"] for err in exc.errors()]},
        ) from exc

    document.edges.append(edge)
    return edge


def update_palette_field(document: Flowchart, field: str, value: str) -> bool:
    """Set one chrome color. Returns False (and keeps the old color) if ``value`` is not hex."""
    attr = PALETTE_COLOR_FIELDS.get(field)
    if attr is None:
        raise SchemaError(f"Unknown palette field '{field}'", context={"field": field})
    if not isinstance(value, str) or not _HEX_COLOR.match(value.strip()):
        logger.debug("Ignoring invalid palette color", extra={"field": field, "value": value})
        return False
    document.palette = document.palette.model_copy(update={attr: value.strip().lower()})
    return True


def update_node_type_color(document: Flowchart, node_type: Union[NodeType, str], value: str) -> bool:
    """Set the base color of one node type. Invalid hex keeps the old color."""
    kind = node_type.value if isinstance(node_type, NodeType) else str(node_type)
    if kind not in NODE_TYPES:
        raise SchemaError(f"Unknown node type '{kind}'", context={"node_type": kind})
    if not isinstance(value, str) or not _HEX_COLOR.match(value.strip()):
        logger.debug("Ignoring invalid node color", extra={"node_type": kind, "value": value})
        return False
    node_colors = document.palette.node_colors.model_copy(update={kind: value.strip().lower()})
    document.palette = document.palette.model_copy(update={"node_colors": node_colors})
    return True
