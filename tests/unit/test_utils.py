"""Tests for tour helper functions."""

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from little_tsp.data import INFINITE_COST, Edge, build_graph  # noqa: E402
from little_tsp.utils import (  # noqa: E402
    edges_to_tour,
    rotate_to_start,
    tour_cost,
    tour_to_edges,
    validate_tour,
)


@pytest.fixture
def graph():
    return build_graph(
        [
            [0, 10, 15, 20],
            [10, 0, 35, None],
            [15, 35, 0, 30],
            [20, 25, 30, 0],
        ],
        labels=["A", "B", "C", "D"],
    )


def test_tour_to_edges_closes_the_cycle():
    assert tour_to_edges([0, 2, 1]) == [Edge(0, 2), Edge(2, 1), Edge(1, 0)]


def test_tour_to_edges_needs_two_cities():
    with pytest.raises(ValueError, match="at least 2"):
        tour_to_edges([0])


def test_edges_to_tour_orders_from_start():
    edges = [Edge(3, 1), Edge(0, 2), Edge(1, 0), Edge(2, 3)]
    assert edges_to_tour(edges) == [0, 2, 3, 1]
    assert edges_to_tour(edges, start=3) == [3, 1, 0, 2]


def test_edges_to_tour_rejects_subtours():
    edges = [Edge(0, 1), Edge(1, 0), Edge(2, 3), Edge(3, 2)]
    with pytest.raises(ValueError, match="sub-tour"):
        edges_to_tour(edges)


def test_edges_to_tour_rejects_branching():
    with pytest.raises(ValueError, match="more than one outgoing"):
        edges_to_tour([Edge(0, 1), Edge(0, 2)])


def test_edges_to_tour_rejects_open_path():
    with pytest.raises(ValueError, match="single cycle"):
        edges_to_tour([Edge(0, 1), Edge(1, 2)])


def test_edges_to_tour_missing_start():
    with pytest.raises(ValueError, match="no outgoing edge"):
        edges_to_tour([Edge(1, 2), Edge(2, 1)])


def test_rotate_to_start():
    assert rotate_to_start([2, 3, 0, 1]) == [0, 1, 2, 3]
    assert rotate_to_start([2, 3, 0, 1], start=3) == [3, 0, 1, 2]


def test_tour_cost(graph):
    assert tour_cost(graph, [0, 2, 3, 1]) == 15 + 30 + 25 + 10


def test_tour_cost_saturates_on_missing_edge(graph):
    assert tour_cost(graph, [0, 2, 1, 3]) == INFINITE_COST


def test_validate_valid_tour(graph):
    validation = validate_tour(graph, [0, 2, 3, 1])

    assert validation.is_valid
    assert validation.errors == []
    assert validation.cost == 80


def test_validate_reports_missing_edge(graph):
    validation = validate_tour(graph, [0, 2, 1, 3])

    assert not validation.is_valid
    assert validation.cost is None
    assert any("B -> D does not exist" in error for error in validation.errors)


def test_validate_reports_structure_errors(graph):
    validation = validate_tour(graph, [0, 0, 5])

    assert not validation.is_valid
    joined = " ".join(validation.errors)
    assert "3 cities, graph has 4" in joined
    assert "out of range: [5]" in joined
    assert "more than once: [0]" in joined
    assert "never visited: [1, 2, 3]" in joined


def test_validate_on_single_city_graph():
    validation = validate_tour(build_graph([[0]]), [0])
    assert not validation.is_valid
