"""Flowchart schema: raw input bounds and the canonical document.

Two layers of models live here:

- ``FlowchartInput`` and friends describe what a caller (or a completion) may
  send. They carry the hard structural bounds; violating them is a caller error.
- ``Flowchart``, ``FlowNode`` and ``FlowEdge`` are the canonical, repaired
  document. Construction re-checks the graph invariants (unique node ids,
  resolvable edges, start and end present).

Wire names are camelCase (``mutedText``, ``nodeColors``, ``sourcePrompt``) via
aliases; Python attributes are snake_case.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

MAX_NODES = 35
MIN_NODES = 2
MAX_EDGES = 90
MAX_SUGGESTIONS = 8
MAX_SUMMARY_LENGTH = 1000
MAX_RATIONALE_LENGTH = 1200
MAX_SOURCE_PROMPT_LENGTH = 5000

HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"

HexColor = Annotated[str, StringConstraints(pattern=HEX_COLOR_PATTERN)]
NodeId = Annotated[str, StringConstraints(min_length=1, max_length=60)]


class NodeType(str, Enum):
    """Node kinds a flowchart may contain, in palette order."""
    START = "start"
    PROCESS = "process"
    DECISION = "decision"
    DATA = "data"
    SUBPROCESS = "subprocess"
    END = "end"
    ACTOR = "actor"
    DOCUMENT = "document"


NODE_TYPES = tuple(node_type.value for node_type in NodeType)


# -----------------------------------------------------------------------------
# Palette
# -----------------------------------------------------------------------------


class NodeColors(BaseModel):
    """One base color per node type. Absent slots take the default color."""

    model_config = ConfigDict(frozen=True)

    start: HexColor = "#2a9d8f"
    process: HexColor = "#4f7cff"
    decision: HexColor = "#f4a261"
    data: HexColor = "#e76f51"
    subprocess: HexColor = "#9b7de6"
    end: HexColor = "#e63973"
    actor: HexColor = "#22b8b0"
    document: HexColor = "#e9c46a"


class Palette(BaseModel):
    """Named color scheme for canvas chrome plus per-type node colors."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: Annotated[str, StringConstraints(min_length=2, max_length=80)] = "Clean Blueprint"
    canvas: HexColor = "#eef3ff"
    panel: HexColor = "#ffffff"
    text: HexColor = "#1e2b43"
    muted_text: HexColor = Field(default="#5d6e90", alias="mutedText")
    edge: HexColor = "#48658f"
    accent: HexColor = "#0f8b8d"
    node_colors: NodeColors = Field(alias="nodeColors")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# -----------------------------------------------------------------------------
# Raw input (bounded)
# -----------------------------------------------------------------------------


class NodeInput(BaseModel):
    id: NodeId
    label: Annotated[str, StringConstraints(min_length=1, max_length=120)]
    type: NodeType
    details: Annotated[str, StringConstraints(max_length=350)] = ""
    notes: Annotated[str, StringConstraints(max_length=220)] = ""


class EdgeInput(BaseModel):
    id: Optional[Annotated[str, StringConstraints(max_length=80)]] = None
    source: NodeId
    target: NodeId
    label: Annotated[str, StringConstraints(max_length=120)] = ""
    condition: Annotated[str, StringConstraints(max_length=120)] = ""


class ExistingEdgeInput(EdgeInput):
    # Ids generated by repair can run past 80 characters; they are re-sanitized anyway.
    id: Optional[str] = None


class FlowchartInput(BaseModel):
    """A candidate document as produced by a completion or an import."""

    title: Annotated[str, StringConstraints(min_length=3, max_length=140)]
    summary: Annotated[str, StringConstraints(min_length=10, max_length=MAX_SUMMARY_LENGTH)]
    rationale: Annotated[str, StringConstraints(min_length=10, max_length=MAX_RATIONALE_LENGTH)]
    suggestions: List[Annotated[str, StringConstraints(min_length=2, max_length=160)]] = Field(
        default_factory=list, max_length=MAX_SUGGESTIONS
    )
    nodes: List[NodeInput] = Field(min_length=MIN_NODES, max_length=MAX_NODES)
    edges: List[EdgeInput] = Field(max_length=MAX_EDGES)
    # Validated separately so a bad palette is replaced rather than rejected.
    palette: Optional[Any] = None


class ExistingFlowchartInput(BaseModel):
    """Looser shape for a document that already exists (refine, import).

    Narrative fields may be absent; the caller fills them in before repair.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[Annotated[str, StringConstraints(max_length=140)]] = None
    summary: Optional[Annotated[str, StringConstraints(max_length=MAX_SUMMARY_LENGTH)]] = None
    rationale: Optional[Annotated[str, StringConstraints(max_length=MAX_RATIONALE_LENGTH)]] = None
    suggestions: List[Annotated[str, StringConstraints(min_length=1, max_length=160)]] = Field(
        default_factory=list, max_length=MAX_SUGGESTIONS
    )
    nodes: List[NodeInput] = Field(min_length=MIN_NODES, max_length=MAX_NODES)
    edges: List[ExistingEdgeInput] = Field(default_factory=list, max_length=MAX_EDGES)
    palette: Optional[Any] = None
    source_prompt: Annotated[str, StringConstraints(max_length=MAX_SOURCE_PROMPT_LENGTH)] = Field(
        default="", alias="sourcePrompt"
    )


# -----------------------------------------------------------------------------
# Canonical document
# -----------------------------------------------------------------------------


class FlowNode(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    id: NodeId
    label: Annotated[str, StringConstraints(min_length=1, max_length=120)]
    type: NodeType
    details: Annotated[str, StringConstraints(max_length=350)] = ""
    notes: Annotated[str, StringConstraints(max_length=220)] = ""


class FlowEdge(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    # Generated ids embed both endpoint ids, so no length cap here.
    id: Annotated[str, StringConstraints(min_length=1)]
    source: NodeId
    target: NodeId
    label: Annotated[str, StringConstraints(max_length=120)] = ""
    condition: Annotated[str, StringConstraints(max_length=120)] = ""


class Flowchart(BaseModel):
    """Canonical flowchart document."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    summary: Annotated[str, StringConstraints(max_length=MAX_SUMMARY_LENGTH)]
    rationale: Annotated[str, StringConstraints(max_length=MAX_RATIONALE_LENGTH)]
    suggestions: List[str] = Field(default_factory=list, max_length=MAX_SUGGESTIONS)
    palette: Palette
    nodes: List[FlowNode] = Field(min_length=MIN_NODES, max_length=MAX_NODES)
    edges: List[FlowEdge] = Field(max_length=MAX_EDGES)
    source_prompt: Annotated[str, StringConstraints(max_length=MAX_SOURCE_PROMPT_LENGTH)] = Field(
        default="", alias="sourcePrompt"
    )

    @model_validator(mode="after")
    def validate_graph(self) -> "Flowchart":
        problems = graph_problems(self.nodes, self.edges)
        if problems:
            raise ValueError("; ".join(problems))
        return self

    def node(self, node_id: str) -> Optional[FlowNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def node_ids(self) -> List[str]:
        return [node.id for node in self.nodes]

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


def graph_problems(nodes: List[FlowNode], edges: List[FlowEdge]) -> List[str]:
    """Return human-readable invariant violations (empty when the graph is canonical)."""
    problems: List[str] = []
    seen: set[str] = set()
    for node in nodes:
        if node.id in seen:
            problems.append(f"duplicate node id '{node.id}'")
        seen.add(node.id)

    for edge in edges:
        if edge.source not in seen:
            problems.append(f"edge '{edge.id}' has unknown source '{edge.source}'")
        if edge.target not in seen:
            problems.append(f"edge '{edge.id}' has unknown target '{edge.target}'")

    types = {node.type for node in nodes}
    if NodeType.START not in types:
        problems.append("no start node")
    if NodeType.END not in types:
        problems.append("no end node")
    return problems
