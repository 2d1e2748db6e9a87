"""Validate and repair candidate flowcharts into canonical documents.

Structural bounds (node/edge counts, string lengths, node types) are checked
first and raise ``SchemaError``. Everything after that is silent, ordered
repair:

1. node ids are sanitized and de-duplicated by position,
2. edges are remapped to the new ids and dropped if an endpoint is missing,
3. edge ids are sanitized or generated,
4. the first node becomes ``start`` / the last ``end`` if none exists,
5. an edgeless graph is chained in document order,
6. the palette is validated as a whole (document, then fallback, then default).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..core.exceptions import SchemaError
from ..utils.logging import get_logger
from .ids import claim_node_id, sanitize_id
from .model import (
    MAX_SOURCE_PROMPT_LENGTH,
    ExistingFlowchartInput,
    FlowEdge,
    Flowchart,
    FlowchartInput,
    FlowNode,
    NodeType,
)
from .palette import normalize_palette
from .shapes import coerce_flowchart_input

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class NarrativeDefaults:
    """Stand-ins for missing title/summary/rationale on existing documents."""

    title: str
    summary: str
    rationale: str


REFINE_DEFAULTS = NarrativeDefaults(
    title="Refined Flowchart",
    summary="Refined flowchart based on follow-up instructions.",
    rationale="Refinement preserves structure and applies the requested update.",
)

IMPORT_DEFAULTS = NarrativeDefaults(
    title="Imported Diagram",
    summary="Flowchart imported from a previously exported file.",
    rationale="Imported documents are repaired to keep ids unique and edges resolvable.",
)


def parse_model(model: Type[ModelT], raw: Any) -> ModelT:
    """Validate ``raw`` against ``model``, converting pydantic errors to ``SchemaError``."""
    if not isinstance(raw, dict):
        raise SchemaError(
            "Flowchart payload must be a JSON object",
            context={"received": type(raw).__name__},
        )
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in exc.errors()
        ]
        raise SchemaError(
            "Flowchart failed schema validation",
            context={"errors": errors[:20]},
        ) from exc


def repair_flowchart(
    raw: Any,
    source_prompt: str,
    fallback_palette: Any = None,
) -> Flowchart:
    """Turn a candidate document into a canonical ``Flowchart``.

    Args:
        raw: Candidate document (usually parsed completion JSON).
        source_prompt: Carried through unchanged for traceability.
        fallback_palette: Used when the document's own palette is missing or invalid.

    Raises:
        SchemaError: if the candidate violates the structural bounds.
    """
    parsed = parse_model(FlowchartInput, raw)
    return _repair(parsed, source_prompt=source_prompt, fallback_palette=fallback_palette)


def repair_existing_flowchart(
    raw: Any,
    *,
    defaults: NarrativeDefaults = REFINE_DEFAULTS,
) -> Flowchart:
    """Repair a document the user already holds (refine input, import).

    Missing narrative fields take ``defaults``; a summary or rationale with
    fewer than 10 non-blank characters is replaced as well. The document's own
    palette doubles as its fallback.
    """
    existing = parse_model(ExistingFlowchartInput, raw)

    summary = existing.summary or ""
    rationale = existing.rationale or ""
    candidate: Dict[str, Any] = {
        "title": existing.title if existing.title is not None else defaults.title,
        "summary": summary if len(summary.strip()) >= 10 else defaults.summary,
        "rationale": rationale if len(rationale.strip()) >= 10 else defaults.rationale,
        "suggestions": [item for item in existing.suggestions if len(item) >= 2],
        "nodes": [node.model_dump() for node in existing.nodes],
        "edges": [
            {**edge.model_dump(), "id": sanitize_id(edge.id, "") or None if edge.id else None}
            for edge in existing.edges
        ],
        "palette": existing.palette,
    }
    parsed = parse_model(FlowchartInput, candidate)
    own_palette = normalize_palette(existing.palette)
    return _repair(parsed, source_prompt=existing.source_prompt, fallback_palette=own_palette)


def import_flowchart(payload: Any) -> Flowchart:
    """Accept any supported import shape and return a canonical document."""
    return repair_existing_flowchart(coerce_flowchart_input(payload), defaults=IMPORT_DEFAULTS)


def _repair(
    parsed: FlowchartInput,
    *,
    source_prompt: str,
    fallback_palette: Any,
) -> Flowchart:
    used_ids: set[str] = set()
    id_map: Dict[str, str] = {}
    nodes: List[FlowNode] = []

    for index, node in enumerate(parsed.nodes):
        node_id = claim_node_id(node.id, index + 1, used_ids)
        if node_id != node.id:
            logger.debug(
                "Node id rewritten",
                extra={"original_id": node.id, "node_id": node_id, "position": index + 1},
            )
        id_map[node.id] = node_id
        nodes.append(
            FlowNode(
                id=node_id,
                label=node.label,
                type=node.type,
                details=node.details,
                notes=node.notes,
            )
        )

    valid_ids = {node.id for node in nodes}
    edges: List[FlowEdge] = []
    for index, edge in enumerate(parsed.edges):
        source = id_map.get(edge.source, sanitize_id(edge.source, ""))
        target = id_map.get(edge.target, sanitize_id(edge.target, ""))
        if source not in valid_ids or target not in valid_ids:
            logger.debug(
                "Dropping edge with unresolved endpoint",
                extra={"source": edge.source, "target": edge.target, "position": index + 1},
            )
            continue

        if edge.id:
            edge_id = sanitize_id(edge.id, f"edge-{index + 1}")
        else:
            edge_id = f"edge-{source}-{target}-{index + 1}"

        edges.append(
            FlowEdge(
                id=edge_id,
                source=source,
                target=target,
                label=edge.label,
                condition=edge.condition,
            )
        )

    _enforce_terminals(nodes)

    if not edges:
        edges = chain_nodes(nodes)
        logger.debug("No usable edges; chained nodes in order", extra={"edge_count": len(edges)})

    palette = normalize_palette(parsed.palette, fallback_palette)

    return Flowchart(
        title=parsed.title,
        summary=parsed.summary,
        rationale=parsed.rationale,
        suggestions=list(parsed.suggestions),
        palette=palette,
        nodes=nodes,
        edges=edges,
        source_prompt=(source_prompt or "")[:MAX_SOURCE_PROMPT_LENGTH],
    )


def _enforce_terminals(nodes: List[FlowNode]) -> None:
    if not any(node.type == NodeType.START for node in nodes):
        logger.debug("No start node; promoting first node", extra={"node_id": nodes[0].id})
        nodes[0].type = NodeType.START
    if not any(node.type == NodeType.END for node in nodes):
        logger.debug("No end node; promoting last node", extra={"node_id": nodes[-1].id})
        nodes[-1].type = NodeType.END
        # The last node may have been the only start.
        if not any(node.type == NodeType.START for node in nodes):
            nodes[0].type = NodeType.START


def chain_nodes(nodes: List[FlowNode]) -> List[FlowEdge]:
    """Connect ``nodes`` in order: n nodes yield n-1 edges."""
    return [
        FlowEdge(
            id=f"edge-{current.id}-{following.id}-{index + 1}",
            source=current.id,
            target=following.id,
        )
        for index, (current, following) in enumerate(zip(nodes, nodes[1:]))
    ]
