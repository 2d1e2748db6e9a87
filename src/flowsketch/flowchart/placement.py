"""Layered (Sugiyama-style) node placement.

The layout engine only needs centre coordinates per node; anything that
implements ``Placer`` can stand in for ``LayeredPlacer``.

Phases:
  1. Cycle removal (DFS back-edges are reversed)
  2. Rank assignment (longest path from sources)
  3. In-rank ordering (barycenter sweeps, down then up)
  4. Coordinate assignment (ranks packed along the flow axis, each rank
     centred on the widest one)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Protocol, Sequence, Set, Tuple

import networkx as nx

Point = Tuple[float, float]

DIRECTIONS = ("TB", "LR")


@dataclass(frozen=True)
class SizedNode:
    id: str
    width: float
    height: float


@dataclass(frozen=True)
class PlacementConfig:
    """Spacing for one placement run. ``direction`` is "TB" or "LR"."""

    direction: str = "TB"
    rank_sep: float = 100
    node_sep: float = 80
    margin_x: float = 30
    margin_y: float = 30


class Placer(Protocol):
    def place(
        self,
        nodes: Sequence[SizedNode],
        edges: Sequence[Tuple[str, str]],
        config: PlacementConfig,
    ) -> Dict[str, Point]:
        """Return the centre point of every node, keyed by node id."""
        ...


class LayeredPlacer:
    """Default placer. Deterministic for a given node and edge order."""

    def __init__(self, *, ordering_sweeps: int = 4):
        self.ordering_sweeps = ordering_sweeps

    def place(
        self,
        nodes: Sequence[SizedNode],
        edges: Sequence[Tuple[str, str]],
        config: PlacementConfig,
    ) -> Dict[str, Point]:
        if config.direction not in DIRECTIONS:
            raise ValueError(f"Unsupported placement direction: {config.direction!r}")
        if not nodes:
            return {}

        graph = build_graph(nodes, edges)
        dag = remove_cycles(graph)
        ranks = assign_ranks(dag)
        layers = self._order_layers(dag, ranks, [node.id for node in nodes])
        return _assign_coordinates(layers, {node.id: node for node in nodes}, config)

    def _order_layers(
        self,
        dag: nx.DiGraph,
        ranks: Dict[str, int],
        document_order: List[str],
    ) -> List[List[str]]:
        max_rank = max(ranks.values(), default=0)
        layers: List[List[str]] = [[] for _ in range(max_rank + 1)]
        for node_id in document_order:
            layers[ranks[node_id]].append(node_id)

        order_index: Dict[str, int] = {}
        for layer in layers:
            for idx, node_id in enumerate(layer):
                order_index[node_id] = idx

        for _ in range(self.ordering_sweeps):
            for level in range(1, max_rank + 1):
                _sort_by_barycenter(layers[level], order_index, dag.predecessors)
            for level in range(max_rank - 1, -1, -1):
                _sort_by_barycenter(layers[level], order_index, dag.successors)

        return layers


def build_graph(nodes: Sequence[SizedNode], edges: Sequence[Tuple[str, str]]) -> nx.DiGraph:
    """Directed graph over ``nodes``; unknown endpoints and self-loops are skipped."""
    graph = nx.DiGraph()
    for node in nodes:
        graph.add_node(node.id, width=node.width, height=node.height)
    for source, target in edges:
        if source == target or source not in graph or target not in graph:
            continue
        graph.add_edge(source, target)
    return graph


def find_back_edges(graph: nx.DiGraph) -> Set[Tuple[str, str]]:
    """Back-edges of an iterative DFS visiting roots and successors in insertion order."""
    white, gray, black = 0, 1, 2
    color: Dict[str, int] = {node: white for node in graph.nodes}
    back_edges: Set[Tuple[str, str]] = set()

    for root in graph.nodes:
        if color[root] != white:
            continue
        color[root] = gray
        stack: List[Tuple[str, List[str], int]] = [(root, list(graph.successors(root)), 0)]
        while stack:
            node, successors, idx = stack[-1]
            if idx < len(successors):
                stack[-1] = (node, successors, idx + 1)
                child = successors[idx]
                if color[child] == gray:
                    back_edges.add((node, child))
                elif color[child] == white:
                    color[child] = gray
                    stack.append((child, list(graph.successors(child)), 0))
            else:
                color[node] = black
                stack.pop()

    return back_edges


def remove_cycles(graph: nx.DiGraph) -> nx.DiGraph:
    """Copy of ``graph`` with every DFS back-edge reversed, which makes it acyclic."""
    back_edges = find_back_edges(graph)
    dag = nx.DiGraph()
    dag.add_nodes_from(graph.nodes(data=True))
    for source, target in graph.edges:
        if (source, target) in back_edges:
            dag.add_edge(target, source)
        else:
            dag.add_edge(source, target)
    return dag


def assign_ranks(dag: nx.DiGraph) -> Dict[str, int]:
    """Longest-path ranking: every node sits one rank below its deepest parent."""
    ranks: Dict[str, int] = {}
    for node in nx.topological_sort(dag):
        ranks[node] = max((ranks[parent] + 1 for parent in dag.predecessors(node)), default=0)
    return ranks


def _sort_by_barycenter(layer: List[str], order_index: Dict[str, int], neighbors) -> None:
    def key(node_id: str) -> float:
        related = list(neighbors(node_id))
        if not related:
            return float(order_index[node_id])
        return sum(order_index[other] for other in related) / len(related)

    # Stable sort keeps document order on ties.
    layer.sort(key=key)
    for idx, node_id in enumerate(layer):
        order_index[node_id] = idx


def _assign_coordinates(
    layers: List[List[str]],
    sized: Dict[str, SizedNode],
    config: PlacementConfig,
) -> Dict[str, Point]:
    horizontal = config.direction == "LR"

    def along(node_id: str) -> float:
        node = sized[node_id]
        return node.width if horizontal else node.height

    def across(node_id: str) -> float:
        node = sized[node_id]
        return node.height if horizontal else node.width

    spans = [
        sum(across(node_id) for node_id in layer) + config.node_sep * max(0, len(layer) - 1)
        for layer in layers
    ]
    widest = max(spans, default=0.0)
    flow_margin = config.margin_x if horizontal else config.margin_y
    cross_margin = config.margin_y if horizontal else config.margin_x

    centers: Dict[str, Point] = {}
    flow_cursor = flow_margin
    for layer, span in zip(layers, spans):
        if not layer:
            continue
        thickness = max(along(node_id) for node_id in layer)
        flow_center = flow_cursor + thickness / 2
        cross_cursor = cross_margin + (widest - span) / 2
        for node_id in layer:
            size = across(node_id)
            cross_center = cross_cursor + size / 2
            if horizontal:
                centers[node_id] = (flow_center, cross_center)
            else:
                centers[node_id] = (cross_center, flow_center)
            cross_cursor += size + config.node_sep
        flow_cursor += thickness + config.rank_sep

    return centers
