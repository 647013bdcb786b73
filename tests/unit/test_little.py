"""Tests for the Little branch-and-bound driver."""

import logging
import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from little_tsp import little  # noqa: E402
from little_tsp.data import Edge, ProgressInfo, SolverOptions, build_graph  # noqa: E402
from little_tsp.exceptions import (  # noqa: E402
    InfeasibleProblemError,
    InvariantViolationError,
    SearchLimitError,
    SolverConfigurationError,
)
from little_tsp.little import LittleSolver  # noqa: E402
from little_tsp.utils import tour_cost, validate_tour  # noqa: E402

TEXTBOOK_WEIGHTS = [
    [0, 10, 15, 20],
    [10, 0, 35, 25],
    [15, 35, 0, 30],
    [20, 25, 30, 0],
]


def _random_graph(cities, seed, high=100):
    rng = np.random.default_rng(seed)
    return build_graph(rng.integers(1, high, size=(cities, cities)).tolist())


@pytest.fixture
def textbook():
    return build_graph(TEXTBOOK_WEIGHTS, labels=["A", "B", "C", "D"])


class TestOptimalTours:
    def test_textbook_instance(self, textbook):
        result = LittleSolver(textbook).solve()

        assert result.status == "optimal"
        assert result.cost == 80
        assert result.objective == pytest.approx(80.0)
        assert result.lower_bound == 80
        assert result.tour == [0, 2, 3, 1]
        assert result.labels == ["A", "C", "D", "B"]
        assert result.edges == [Edge(0, 2), Edge(2, 3), Edge(3, 1), Edge(1, 0)]
        assert result.mode == "opttsp"

    def test_textbook_search_counters(self, textbook):
        result = LittleSolver(textbook).solve()

        assert result.nodes_expanded == 4
        assert result.nodes_pruned == 3
        assert result.nodes_infeasible == 0
        assert result.max_frontier_size >= 2
        assert result.elapsed_time >= 0.0

    def test_all_unit_weights(self):
        graph = build_graph(np.ones((5, 5), dtype=int).tolist())
        result = LittleSolver(graph).solve()

        assert result.status == "optimal"
        assert result.cost == 5
        assert validate_tour(graph, result.tour).is_valid

    def test_two_cities(self):
        result = LittleSolver(build_graph([[0, 3], [4, 0]])).solve()

        assert result.status == "optimal"
        assert result.tour == [0, 1]
        assert result.cost == 7

    def test_asymmetric_three_cities(self):
        graph = build_graph(
            [
                [0, 1, 10],
                [10, 0, 1],
                [1, 10, 0],
            ]
        )
        result = LittleSolver(graph).solve()

        assert result.tour == [0, 1, 2]
        assert result.cost == 3

    def test_sparse_graph_with_single_cycle(self):
        n = 6
        weights = [[None] * n for _ in range(n)]
        order = [0, 3, 1, 5, 2, 4]
        for idx, city in enumerate(order):
            weights[city][order[(idx + 1) % n]] = 7
        graph = build_graph(weights)

        result = LittleSolver(graph).solve()

        assert result.status == "optimal"
        assert result.cost == 42
        assert result.tour == order

    def test_fractional_weights(self):
        graph = build_graph(
            [
                [0, 1.5, 2.25],
                [1.5, 0, 0.75],
                [2.25, 0.75, 0],
            ],
            precision=2,
        )
        result = LittleSolver(graph).solve()

        assert result.cost == 450
        assert result.objective == pytest.approx(4.5)

    def test_cost_matches_recomputed_tour_cost(self):
        graph = _random_graph(8, seed=5)
        result = LittleSolver(graph).solve()

        assert result.status == "optimal"
        assert tour_cost(graph, result.tour) == result.cost
        assert result.tour[0] == 0
        assert sorted(result.tour) == list(range(8))

    def test_without_matrix_arena(self):
        graph = _random_graph(7, seed=3)
        pooled = LittleSolver(graph).solve()
        fresh = LittleSolver(graph, SolverOptions(use_matrix_arena=False)).solve()

        assert fresh.cost == pooled.cost
        assert fresh.tour == pooled.tour
        assert fresh.nodes_expanded == pooled.nodes_expanded

    def test_deterministic(self):
        graph = _random_graph(8, seed=21, high=5)
        first = LittleSolver(graph).solve()
        second = LittleSolver(graph).solve()

        assert first.tour == second.tour
        assert first.nodes_expanded == second.nodes_expanded
        assert first.nodes_pruned == second.nodes_pruned


class TestInfeasible:
    def test_disconnected_components(self):
        graph = build_graph(
            [
                [0, 1, None, None],
                [1, 0, None, None],
                [None, None, 0, 1],
                [None, None, 1, 0],
            ]
        )
        result = LittleSolver(graph).solve()

        assert result.status == "infeasible"
        assert result.tour is None
        assert result.cost is None
        assert result.lower_bound is None
        assert not result.has_tour

    def test_city_without_exit_is_infeasible_at_root(self):
        graph = build_graph(
            [
                [0, None, None],
                [1, 0, 1],
                [1, 1, 0],
            ]
        )
        result = LittleSolver(graph).solve()

        assert result.status == "infeasible"
        assert result.nodes_expanded == 0

    @pytest.mark.parametrize("weights", [[], [[0]]])
    def test_fewer_than_two_cities(self, weights):
        result = LittleSolver(build_graph(weights)).solve()
        assert result.status == "infeasible"
        assert result.tour is None

    def test_raise_on_infeasible(self):
        graph = build_graph([[0, None], [1, 0]])
        solver = LittleSolver(graph, SolverOptions(raise_on_infeasible=True))

        with pytest.raises(InfeasibleProblemError):
            solver.solve()


class TestLimits:
    def test_node_limit_before_any_tour(self):
        graph = _random_graph(9, seed=1)
        result = LittleSolver(graph, SolverOptions(max_nodes=1)).solve()

        assert result.status == "node_limit"
        assert result.nodes_expanded == 1
        assert result.tour is None
        assert result.lower_bound is not None

    def test_node_limit_keeps_best_tour(self):
        graph = _random_graph(10, seed=2)
        optimal = LittleSolver(graph).solve()
        if optimal.nodes_expanded <= 9:
            pytest.skip("instance solved too quickly to exercise the limit")

        result = LittleSolver(graph, SolverOptions(max_nodes=9)).solve(
            warm_start_tour=list(range(10))
        )

        assert result.status in {"node_limit", "optimal"}
        assert result.tour is not None
        assert result.cost >= optimal.cost
        if result.status == "node_limit":
            assert result.lower_bound <= optimal.cost

    def test_raise_on_limit(self):
        graph = _random_graph(9, seed=1)
        solver = LittleSolver(graph, SolverOptions(max_nodes=1, raise_on_limit=True))

        with pytest.raises(SearchLimitError) as exc_info:
            solver.solve()

        assert exc_info.value.status == "node_limit"
        assert exc_info.value.nodes_expanded == 1
        assert exc_info.value.best_cost is None

    def test_time_limit(self):
        graph = _random_graph(9, seed=4)
        result = LittleSolver(graph, SolverOptions(time_limit=1e-9)).solve()

        assert result.status == "time_limit"
        assert result.nodes_expanded == 0

    def test_limit_only_counts_expansions(self, textbook):
        # Four expansions find the optimum; the rest of the frontier is pruned without expanding.
        result = LittleSolver(textbook, SolverOptions(max_nodes=4)).solve()

        assert result.status == "optimal"
        assert result.cost == 80

    def test_node_limit_lower_bound(self, textbook):
        result = LittleSolver(textbook, SolverOptions(max_nodes=3)).solve()

        assert result.status == "node_limit"
        assert result.tour is None
        assert result.lower_bound == 80


class TestWarmStartAndProgress:
    def test_valid_warm_start(self, textbook):
        cold = LittleSolver(textbook).solve()
        warm = LittleSolver(textbook).solve(warm_start_tour=[1, 0, 2, 3])

        assert warm.status == "optimal"
        assert warm.cost == 80
        assert warm.nodes_expanded <= cold.nodes_expanded

    def test_invalid_warm_start_is_ignored(self, textbook, caplog):
        with caplog.at_level(logging.WARNING, logger="little_tsp.little"):
            result = LittleSolver(textbook).solve(warm_start_tour=[0, 0, 1, 2])

        assert result.cost == 80
        assert any("Warm-start tour rejected" in record.getMessage() for record in caplog.records)

    def test_warm_start_over_missing_edge_is_ignored(self):
        graph = build_graph([[0, 1, None], [1, 0, 1], [1, 1, 0]])
        result = LittleSolver(graph).solve(warm_start_tour=[0, 2, 1])
        assert result.tour == [0, 1, 2]

    def test_progress_callback(self, textbook):
        updates = []

        def callback(info: ProgressInfo) -> None:
            updates.append(info)

        result = LittleSolver(textbook).solve(progress_callback=callback, progress_interval=1)

        assert len(updates) == result.nodes_expanded
        assert [info.nodes_expanded for info in updates] == list(
            range(1, result.nodes_expanded + 1)
        )
        assert all(info.best_bound <= 80 for info in updates)
        assert updates[0].incumbent_cost is None

    def test_progress_interval_must_be_positive(self, textbook):
        with pytest.raises(SolverConfigurationError):
            LittleSolver(textbook).solve(progress_interval=0)

    def test_logs_start_and_incumbent(self, textbook, caplog):
        with caplog.at_level(logging.INFO, logger="little_tsp.little"):
            LittleSolver(textbook).solve()

        messages = [record.getMessage() for record in caplog.records]
        assert "Starting Little branch-and-bound solver" in messages
        assert "New incumbent tour" in messages
        assert "Solver complete" in messages
        complete = next(r for r in caplog.records if r.getMessage() == "Solver complete")
        assert complete.status == "optimal"


def test_incumbent_cost_mismatch_raises(textbook, monkeypatch):
    monkeypatch.setattr(little, "tour_cost", lambda graph, tour: -1)

    with pytest.raises(InvariantViolationError, match="tour costs"):
        LittleSolver(textbook).solve()
