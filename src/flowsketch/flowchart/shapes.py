"""Recognize the payload shapes accepted at the import boundary."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from ..core.exceptions import UnsupportedShapeError


def _is_positioned_shape(raw: Mapping[str, Any]) -> bool:
    nodes = raw.get("nodes")
    return (
        isinstance(nodes, list)
        and len(nodes) > 0
        and isinstance(nodes[0], Mapping)
        and isinstance(nodes[0].get("data"), Mapping)
    )


def _unwrap_positioned(raw: Mapping[str, Any]) -> Dict[str, Any]:
    nodes: List[Dict[str, Any]] = []
    for index, node in enumerate(raw.get("nodes") or []):
        node = node if isinstance(node, Mapping) else {}
        data = node.get("data") if isinstance(node.get("data"), Mapping) else {}
        nodes.append(
            {
                "id": node.get("id") or f"node-{index + 1}",
                "label": data.get("label") or "Untitled",
                "type": data.get("kind") or "process",
                "details": data.get("details") or "",
                "notes": data.get("notes") or "",
            }
        )

    edges: List[Dict[str, Any]] = []
    for index, edge in enumerate(raw.get("edges") or []):
        edge = edge if isinstance(edge, Mapping) else {}
        data = edge.get("data") if isinstance(edge.get("data"), Mapping) else {}
        edges.append(
            {
                "id": edge.get("id") or f"edge-{index + 1}",
                "source": edge.get("source"),
                "target": edge.get("target"),
                "label": edge.get("label") or "",
                "condition": data.get("condition") or "",
            }
        )

    return {
        "title": raw.get("title") or "Imported Diagram",
        "summary": raw.get("summary") or "",
        "rationale": raw.get("rationale") or "",
        "suggestions": raw.get("suggestions") if isinstance(raw.get("suggestions"), list) else [],
        "sourcePrompt": raw.get("sourcePrompt") or "",
        "palette": raw.get("palette"),
        "nodes": nodes,
        "edges": edges,
    }


def coerce_flowchart_input(raw: Any) -> Dict[str, Any]:
    """Return the canonical raw shape for any accepted import payload.

    Accepts the canonical shape, the laid-out export shape (node content under
    ``data``, positions discarded), or either of those wrapped under a
    ``flowchart`` key. Anything else raises ``UnsupportedShapeError``.
    """
    if not isinstance(raw, Mapping):
        raise UnsupportedShapeError("Imported content is not a valid JSON object.")

    if _is_positioned_shape(raw):
        return _unwrap_positioned(raw)

    if isinstance(raw.get("flowchart"), Mapping):
        return coerce_flowchart_input(raw["flowchart"])

    if isinstance(raw.get("nodes"), list):
        return dict(raw)

    raise UnsupportedShapeError(
        "Unsupported JSON shape for import.",
        context={"keys": sorted(str(key) for key in raw.keys())[:20]},
    )
