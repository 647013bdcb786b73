"""Tests for graph construction, cost arithmetic and option validation."""

import math
import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from little_tsp.data import (  # noqa: E402
    INFINITE_COST,
    Edge,
    SolverOptions,
    TourResult,
    build_graph,
    build_graph_from_edges,
    is_infinite,
    saturating_add,
)
from little_tsp.exceptions import InvalidGraphError, SolverConfigurationError  # noqa: E402


class TestCostArithmetic:
    def test_saturating_add_finite(self):
        assert saturating_add(3, 4, 5) == 12
        assert saturating_add() == 0

    def test_saturating_add_infinite_operand(self):
        assert saturating_add(1, INFINITE_COST) == INFINITE_COST
        assert saturating_add(INFINITE_COST, INFINITE_COST) == INFINITE_COST

    def test_saturating_add_overflow(self):
        assert saturating_add(INFINITE_COST - 1, 5) == INFINITE_COST

    def test_is_infinite(self):
        assert is_infinite(INFINITE_COST)
        assert not is_infinite(0)

    def test_numpy_integers(self):
        assert saturating_add(np.int64(2), np.int64(3)) == 5


class TestEdge:
    def test_self_loop_rejected(self):
        with pytest.raises(InvalidGraphError, match="Self-loop"):
            Edge(2, 2)

    def test_ordering_and_helpers(self):
        assert sorted([Edge(1, 0), Edge(0, 2), Edge(0, 1)]) == [Edge(0, 1), Edge(0, 2), Edge(1, 0)]
        assert Edge(0, 3).as_tuple() == (0, 3)


class TestBuildGraph:
    def test_basic_matrix(self):
        graph = build_graph([[0, 1, 2], [3, 0, 4], [5, 6, 0]])

        assert graph.size() == 3
        assert graph.weight(1, 2) == 4
        assert graph.labels == ("0", "1", "2")
        assert graph.weights.dtype == np.int64

    def test_diagonal_is_infinite(self):
        graph = build_graph([[7, 1], [1, 7]])
        assert graph.weight(0, 0) == INFINITE_COST
        assert not graph.has_edge(0, 0)

    @pytest.mark.parametrize("missing", [None, math.inf, float("inf")])
    def test_missing_edges(self, missing):
        graph = build_graph([[0, missing], [1, 0]])
        assert not graph.has_edge(0, 1)
        assert graph.has_edge(1, 0)

    def test_weights_are_read_only(self):
        graph = build_graph([[0, 1], [1, 0]])
        with pytest.raises(ValueError):
            graph.weights[0, 1] = 5

    def test_numpy_input(self):
        graph = build_graph(np.array([[0, 2], [3, 0]]))
        assert graph.weight(0, 1) == 2

    def test_labels(self):
        graph = build_graph([[0, 1], [1, 0]], labels=["home", "work"])
        assert graph.label(1) == "work"
        assert graph.index_of("home") == 0
        with pytest.raises(InvalidGraphError, match="not found"):
            graph.index_of("gym")

    def test_precision_scaling(self):
        graph = build_graph([[0, 1.25], [0.5, 0]], precision=2)

        assert graph.weight(0, 1) == 125
        assert graph.to_objective(175) == pytest.approx(1.75)

    def test_precision_too_low(self):
        with pytest.raises(InvalidGraphError, match="not representable"):
            build_graph([[0, 1.25], [0.5, 0]], precision=1)

    def test_non_square(self):
        with pytest.raises(InvalidGraphError, match="square"):
            build_graph([[0, 1, 2], [1, 0]])

    def test_negative_weight(self):
        with pytest.raises(InvalidGraphError, match="negative"):
            build_graph([[0, -1], [1, 0]])

    def test_nan_weight(self):
        with pytest.raises(InvalidGraphError, match="NaN"):
            build_graph([[0, float("nan")], [1, 0]])

    def test_non_numeric_weight(self):
        with pytest.raises(InvalidGraphError, match="non-numeric"):
            build_graph([[0, "far"], [1, 0]])

    @pytest.mark.parametrize("flag", [True, False, np.True_])
    def test_boolean_weight(self, flag):
        with pytest.raises(InvalidGraphError, match="boolean"):
            build_graph([[0, flag], [1, 0]])

    def test_overflowing_weight(self):
        with pytest.raises(InvalidGraphError, match="too large"):
            build_graph([[0, INFINITE_COST // 2 + 1], [1, 0]])

    def test_duplicate_labels(self):
        with pytest.raises(InvalidGraphError, match="Duplicate city labels"):
            build_graph([[0, 1], [1, 0]], labels=["a", "a"])

    def test_label_count_mismatch(self):
        with pytest.raises(InvalidGraphError, match="labels"):
            build_graph([[0, 1], [1, 0]], labels=["a", "b", "c"])

    def test_negative_precision(self):
        with pytest.raises(InvalidGraphError, match="precision"):
            build_graph([[0, 1], [1, 0]], precision=-1)


class TestBuildGraphFromEdges:
    def test_undirected_edges_are_mirrored(self):
        graph = build_graph_from_edges(
            ["a", "b", "c"],
            [
                {"tail": "a", "head": "b", "weight": 4},
                {"tail": "b", "head": "c", "weight": 2},
            ],
        )

        assert graph.weight(0, 1) == graph.weight(1, 0) == 4
        assert graph.weight(2, 1) == 2
        assert not graph.has_edge(0, 2)

    def test_directed_edges(self):
        graph = build_graph_from_edges(
            ["a", "b"], [{"tail": "a", "head": "b", "weight": 4}], directed=True
        )
        assert graph.has_edge(0, 1)
        assert not graph.has_edge(1, 0)

    def test_unknown_endpoint(self):
        with pytest.raises(InvalidGraphError, match="not found in city set"):
            build_graph_from_edges(["a"], [{"tail": "a", "head": "z", "weight": 1}])

    def test_duplicate_city(self):
        with pytest.raises(InvalidGraphError, match="Duplicate city"):
            build_graph_from_edges(["a", "a"], [])

    def test_duplicate_edge(self):
        edges = [
            {"tail": "a", "head": "b", "weight": 1},
            {"tail": "b", "head": "a", "weight": 2},
        ]
        with pytest.raises(InvalidGraphError, match="Duplicate edge"):
            build_graph_from_edges(["a", "b"], edges)
        # Directed graphs may carry both directions.
        graph = build_graph_from_edges(["a", "b"], edges, directed=True)
        assert graph.weight(1, 0) == 2

    def test_self_loop(self):
        with pytest.raises(InvalidGraphError, match="Self-loop"):
            build_graph_from_edges(["a"], [{"tail": "a", "head": "a", "weight": 1}])

    def test_missing_weight(self):
        with pytest.raises(InvalidGraphError, match="no 'weight'"):
            build_graph_from_edges(["a", "b"], [{"tail": "a", "head": "b"}])


class TestSolverOptions:
    def test_defaults(self):
        options = SolverOptions()

        assert options.max_nodes is None
        assert options.time_limit is None
        assert options.naive_max_cities == 10
        assert options.use_matrix_arena is True
        assert options.arena_capacity == 256
        assert options.raise_on_infeasible is False
        assert options.raise_on_limit is False
        assert options.log_interval == 1000

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"max_nodes": 0}, "max_nodes must be positive"),
            ({"time_limit": -1.0}, "time_limit must be positive"),
            ({"naive_max_cities": 1}, "naive_max_cities"),
            ({"arena_capacity": 0}, "arena_capacity must be positive"),
            ({"log_interval": 0}, "log_interval must be positive"),
        ],
    )
    def test_invalid_values(self, kwargs, message):
        with pytest.raises(SolverConfigurationError, match=message):
            SolverOptions(**kwargs)


def test_tour_result_has_tour():
    assert not TourResult(status="infeasible").has_tour
    assert TourResult(status="optimal", tour=[0, 1], cost=2).has_tour
