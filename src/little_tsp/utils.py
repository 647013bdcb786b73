"""Utility functions for building, costing and validating tours."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .data import Edge, Graph, is_infinite, saturating_add


@dataclass
class TourValidation:
    """Results from validating a tour against a graph.

    Attributes:
        is_valid: True if the tour visits every city exactly once over existing edges.
        errors: List of validation error messages (empty if valid).
        cost: Tour cost in cost units, or None if the tour is structurally invalid
              or uses a missing edge.
    """

    is_valid: bool
    errors: list[str]
    cost: int | None


def tour_to_edges(tour: Sequence[int]) -> list[Edge]:
    """Directed edges of a closed tour, including the return to the first city.

    Examples:
        >>> tour_to_edges([0, 2, 1])
        [Edge(row=0, column=2), Edge(row=2, column=1), Edge(row=1, column=0)]
    """
    if len(tour) < 2:
        raise ValueError(f"A tour needs at least 2 cities, got {len(tour)}")
    return [Edge(tour[idx], tour[(idx + 1) % len(tour)]) for idx in range(len(tour))]


def edges_to_tour(edges: Iterable[Edge], start: int = 0) -> list[int]:
    """Order a set of directed edges into a tour beginning at ``start``.

    Raises:
        ValueError: If a city has two outgoing edges, ``start`` has none, or the
                    edges form more than one cycle.
    """
    successor: dict[int, int] = {}
    for edge in edges:
        if edge.row in successor:
            raise ValueError(f"City {edge.row} has more than one outgoing edge")
        successor[edge.row] = edge.column
    if start not in successor:
        raise ValueError(f"Start city {start} has no outgoing edge")

    tour = [start]
    visited = {start}
    city = successor[start]
    while city != start:
        if city in visited or city not in successor:
            raise ValueError("Edges do not form a single cycle")
        tour.append(city)
        visited.add(city)
        city = successor[city]
    if len(tour) != len(successor):
        raise ValueError(
            f"Edges form a sub-tour of {len(tour)} cities; {len(successor)} cities have edges"
        )
    return tour


def rotate_to_start(tour: Sequence[int], start: int = 0) -> list[int]:
    """Rotate a tour so that it begins at ``start``."""
    position = list(tour).index(start)
    return list(tour[position:]) + list(tour[:position])


def tour_cost(graph: Graph, tour: Sequence[int]) -> int:
    """Sum of edge weights along the closed tour (saturating at INFINITE_COST)."""
    return saturating_add(*(graph.weight(edge.row, edge.column) for edge in tour_to_edges(tour)))


def validate_tour(graph: Graph, tour: Sequence[int]) -> TourValidation:
    """Validate that a tour is a Hamiltonian cycle of the graph.

    Checks:
    - The tour lists exactly N cities, each index in range
    - Every city appears exactly once
    - Every consecutive pair (and the return leg) is an existing edge

    Args:
        graph: Graph the tour should traverse.
        tour: City indices in visiting order (return to the start is implicit).

    Returns:
        TourValidation with detailed information about any violations.
    """
    errors: list[str] = []
    n = graph.size()

    if len(tour) != n:
        errors.append(f"Tour has {len(tour)} cities, graph has {n}")
    out_of_range = [city for city in tour if not 0 <= city < n]
    if out_of_range:
        errors.append(f"Cities out of range: {out_of_range}")
    seen: set[int] = set()
    duplicates: list[int] = []
    for city in tour:
        if city in seen:
            duplicates.append(city)
        seen.add(city)
    if duplicates:
        errors.append(f"Cities visited more than once: {sorted(set(duplicates))}")
    missing = sorted(set(range(n)) - seen)
    if missing:
        errors.append(f"Cities never visited: {missing}")

    if errors or n < 2:
        if n < 2:
            errors.append(f"Graph has {n} cities; a tour needs at least 2")
        return TourValidation(is_valid=False, errors=errors, cost=None)

    for edge in tour_to_edges(tour):
        if not graph.has_edge(edge.row, edge.column):
            errors.append(
                f"Edge {graph.label(edge.row)} -> {graph.label(edge.column)} does not exist"
            )
    cost = tour_cost(graph, tour)
    if errors or is_infinite(cost):
        return TourValidation(is_valid=False, errors=errors, cost=None)
    return TourValidation(is_valid=True, errors=[], cost=cost)
