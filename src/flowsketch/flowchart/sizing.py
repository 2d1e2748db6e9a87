"""Content-aware node size estimation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Union

from .model import FlowNode, NodeType

MAX_WIDTH = 420
MAX_HEIGHT = 560

# Approximate characters per rendered line for each text block.
LABEL_CHARS_PER_LINE = 24
DETAILS_CHARS_PER_LINE = 42
NOTES_CHARS_PER_LINE = 44

FREE_LINES = 5
LINE_HEIGHT = 18


@dataclass(frozen=True)
class NodeSize:
    width: float
    height: float


BASE_DIMENSIONS: Mapping[str, NodeSize] = MappingProxyType(
    {
        NodeType.START.value: NodeSize(250, 130),
        NodeType.PROCESS.value: NodeSize(250, 140),
        NodeType.DECISION.value: NodeSize(240, 240),
        NodeType.DATA.value: NodeSize(260, 150),
        NodeType.SUBPROCESS.value: NodeSize(250, 150),
        NodeType.END.value: NodeSize(250, 130),
        NodeType.ACTOR.value: NodeSize(250, 145),
        NodeType.DOCUMENT.value: NodeSize(255, 155),
    }
)


def estimate_node_dimensions(
    node_type: Union[NodeType, str],
    label: str = "",
    details: str = "",
    notes: str = "",
) -> NodeSize:
    """Estimate a box large enough for the node's text.

    Every estimated line past the fifth adds 18 units of height. Decisions
    grow faster in both directions so the diamond still fits; data, actor and
    document nodes have minimum widths. The result never exceeds 420x560.
    """
    kind = node_type.value if isinstance(node_type, NodeType) else str(node_type or "process")
    if kind not in BASE_DIMENSIONS:
        kind = NodeType.PROCESS.value
    base = BASE_DIMENSIONS[kind]

    label_lines = max(1, math.ceil(len(label or "") / LABEL_CHARS_PER_LINE))
    detail_lines = math.ceil(len(details or "") / DETAILS_CHARS_PER_LINE)
    note_lines = math.ceil(len(notes or "") / NOTES_CHARS_PER_LINE)
    extra_lines = max(0, label_lines + detail_lines + note_lines - FREE_LINES)

    width = base.width
    height = base.height + extra_lines * LINE_HEIGHT

    if kind == NodeType.DECISION.value:
        width = max(width, 280 + extra_lines * 12)
        height = max(height, 280 + extra_lines * 24)
    elif kind == NodeType.DATA.value:
        width = max(width, 280 + max(0, detail_lines - 3) * 10)
    elif kind in (NodeType.ACTOR.value, NodeType.DOCUMENT.value):
        width = max(width, 270)
        height += 8

    return NodeSize(width=min(width, MAX_WIDTH), height=min(height, MAX_HEIGHT))


def estimate_flow_node(node: FlowNode) -> NodeSize:
    return estimate_node_dimensions(node.type, node.label, node.details, node.notes)
