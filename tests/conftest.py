"""Shared fixtures for flowchart, generation and API tests."""

import copy
from typing import Any, Callable, Dict, List, Optional

import pytest

from flowsketch.flowchart.repair import repair_flowchart


def make_raw_flowchart(
    nodes: Optional[List[Dict[str, Any]]] = None,
    edges: Optional[List[Dict[str, Any]]] = None,
    **overrides: Any,
) -> Dict[str, Any]:
    """Build a candidate document that passes the structural bounds."""
    raw: Dict[str, Any] = {
        "title": "Order Fulfilment",
        "summary": "How an incoming order moves from checkout to delivery.",
        "rationale": "Each step maps to a team hand-off so owners are explicit.",
        "suggestions": ["Add a refund branch", "Show the warehouse actor"],
        "nodes": nodes
        if nodes is not None
        else [
            {"id": "receive-order", "label": "Receive order", "type": "start"},
            {"id": "check-stock", "label": "In stock?", "type": "decision"},
            {"id": "ship", "label": "Ship parcel", "type": "process"},
            {"id": "backorder", "label": "Backorder item", "type": "process"},
            {"id": "done", "label": "Order closed", "type": "end"},
        ],
        "edges": edges
        if edges is not None
        else [
            {"source": "receive-order", "target": "check-stock"},
            {"source": "check-stock", "target": "ship", "label": "Yes"},
            {"source": "check-stock", "target": "backorder", "label": "No", "condition": "out of stock"},
            {"source": "backorder", "target": "check-stock"},
            {"source": "ship", "target": "done"},
        ],
    }
    raw.update(overrides)
    return raw


@pytest.fixture
def raw_flowchart() -> Dict[str, Any]:
    return make_raw_flowchart()


@pytest.fixture
def raw_factory() -> Callable[..., Dict[str, Any]]:
    """Factory fixture returning fresh candidate documents."""
    def _make(**kwargs: Any) -> Dict[str, Any]:
        return copy.deepcopy(make_raw_flowchart(**kwargs))

    return _make


@pytest.fixture
def canonical_flowchart(raw_flowchart):
    return repair_flowchart(raw_flowchart, "order fulfilment process")
