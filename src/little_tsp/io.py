"""File I/O helpers for TSP instances and solver results."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, MutableMapping, Sequence
from pathlib import Path
from typing import Any

from .data import Graph, TourResult, build_graph, build_graph_from_edges
from .exceptions import InvalidGraphError


def _normalize_edges(raw: Iterable[Any]) -> Sequence[dict[str, Any]]:
    # Normalize incoming edge dictionaries so the graph builder receives a uniform schema.
    edges = []
    for edge in raw:
        if not isinstance(edge, Mapping) or "tail" not in edge or "head" not in edge:
            raise InvalidGraphError(
                f"Invalid edge specification: {edge}. Each edge must have 'tail' and 'head' fields."
            )
        if "weight" not in edge and "cost" not in edge:
            raise InvalidGraphError(f"Edge {edge['tail']} -> {edge['head']} has no 'weight'.")
        edges.append(
            {
                "tail": edge["tail"],
                "head": edge["head"],
                "weight": edge["weight"] if "weight" in edge else edge["cost"],
            }
        )
    return edges


def graph_from_payload(payload: Mapping[str, Any]) -> Graph:
    """Build a Graph from an already-parsed JSON document."""
    precision = payload.get("precision", 0)
    if not isinstance(precision, int) or isinstance(precision, bool):
        raise InvalidGraphError(f"'precision' must be an integer, got {precision!r}.")

    weights = payload.get("weights")
    edges = payload.get("edges")
    cities = payload.get("cities")
    if cities is not None and not isinstance(cities, list):
        raise InvalidGraphError(
            f"'cities' must be an array, got {type(cities).__name__}."
        )

    if weights is not None:
        if not isinstance(weights, list) or not all(isinstance(row, list) for row in weights):
            raise InvalidGraphError("'weights' must be an array of arrays (an N x N matrix).")
        if cities is not None and len(cities) != len(weights):
            raise InvalidGraphError(
                f"'cities' lists {len(cities)} cities but 'weights' has {len(weights)} rows."
            )
        return build_graph(weights, labels=cities, precision=precision)

    if edges is not None:
        if not isinstance(edges, list):
            raise InvalidGraphError(f"'edges' must be an array, got {type(edges).__name__}.")
        if cities is None:
            raise InvalidGraphError("An edge-list problem must include a 'cities' array.")
        return build_graph_from_edges(
            cities,
            _normalize_edges(edges),
            directed=bool(payload.get("directed", False)),
            precision=precision,
        )

    raise InvalidGraphError(
        "Invalid problem format: JSON must include either a 'weights' matrix or an 'edges' array."
    )


def load_graph(path: str | Path) -> Graph:
    """Load a TSP instance from a JSON file."""
    with Path(path).open("r", encoding="utf-8") as fh:
        try:
            payload: MutableMapping[str, Any] = json.load(fh)
        except json.JSONDecodeError as exc:
            raise InvalidGraphError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise InvalidGraphError(
            f"Invalid problem format: expected a JSON object, got {type(payload).__name__}."
        )
    return graph_from_payload(payload)


def result_to_dict(result: TourResult, graph: Graph | None = None) -> dict[str, Any]:
    """Serializable view of a result; city labels are used when a graph is given."""

    def name(city: int) -> str | int:
        return graph.label(city) if graph is not None else city

    tour = result.tour or []
    return {
        "status": result.status,
        "mode": result.mode,
        "cost": result.cost,
        "objective": result.objective,
        "lower_bound": result.lower_bound,
        "tour": [name(city) for city in tour],
        "edges": [{"tail": name(edge.row), "head": name(edge.column)} for edge in result.edges],
        "nodes_expanded": result.nodes_expanded,
        "nodes_pruned": result.nodes_pruned,
        "nodes_infeasible": result.nodes_infeasible,
        "max_frontier_size": result.max_frontier_size,
    }


def save_result(path: str | Path, result: TourResult, graph: Graph | None = None) -> None:
    """Persist a solver result to JSON."""
    # Timing is left out so the same solve always writes the same file.
    data = result_to_dict(result, graph)
    with Path(path).open("w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2, sort_keys=False)


def graph_from_networkx(nx_graph: Any, weight: str = "weight", precision: int = 0) -> Graph:
    """Build a Graph from a networkx Graph or DiGraph.

    Nodes become cities (labels are ``str(node)``, in the graph's node order) and
    the ``weight`` edge attribute becomes the travel cost. Undirected graphs are
    usable in both directions.

    Raises:
        InvalidGraphError: If an edge has no ``weight`` attribute or is a self-loop.
    """
    cities = list(nx_graph.nodes())
    edges = []
    for tail, head, attributes in nx_graph.edges(data=True):
        if weight not in attributes:
            raise InvalidGraphError(f"Edge {tail} -> {head} has no '{weight}' attribute.")
        edges.append({"tail": tail, "head": head, "weight": attributes[weight]})
    return build_graph_from_edges(
        cities,
        edges,
        directed=bool(nx_graph.is_directed()),
        precision=precision,
    )
