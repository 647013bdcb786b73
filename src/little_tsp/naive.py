"""Exhaustive enumeration baseline for small TSP instances."""

from __future__ import annotations

import itertools
import logging
import time

from .data import INFINITE_COST, Graph, ProgramMode, SolverOptions, TourResult
from .exceptions import InfeasibleProblemError, SolverConfigurationError
from .utils import tour_cost, tour_to_edges


class NaiveSolver:
    """Exact TSP solver that tries every tour starting at city 0.

    Enumerates the (N-1)! orderings of the remaining cities in lexicographic
    order and keeps the first cheapest one. Useful as a reference for the
    branch-and-bound solver on small graphs.

    Raises:
        SolverConfigurationError: If the graph has more than
            ``options.naive_max_cities`` cities.
    """

    def __init__(self, graph: Graph, options: SolverOptions | None = None):
        self.graph = graph
        self.options = options if options is not None else SolverOptions()
        self.logger = logging.getLogger(__name__)
        if graph.size() > self.options.naive_max_cities:
            raise SolverConfigurationError(
                f"Exhaustive enumeration is limited to {self.options.naive_max_cities} cities, "
                f"graph has {graph.size()}. Use ProgramMode.OPTTSP or raise "
                f"SolverOptions.naive_max_cities."
            )

    def solve(self) -> TourResult:
        start_time = time.time()
        n = self.graph.size()
        self.logger.info("Starting exhaustive enumeration", extra={"cities": n})

        best_cost = INFINITE_COST
        best_tour: list[int] | None = None
        enumerated = 0
        if n >= 2:
            for rest in itertools.permutations(range(1, n)):
                enumerated += 1
                tour = [0, *rest]
                cost = tour_cost(self.graph, tour)
                if cost < best_cost:
                    best_cost = cost
                    best_tour = tour

        elapsed = time.time() - start_time
        result = TourResult(
            status="optimal" if best_tour is not None else "infeasible",
            mode=ProgramMode.NAIVETSP.value,
            nodes_expanded=enumerated,
            elapsed_time=elapsed,
        )
        if best_tour is not None:
            result.tour = best_tour
            result.edges = tour_to_edges(best_tour)
            result.cost = best_cost
            result.objective = self.graph.to_objective(best_cost)
            result.lower_bound = best_cost
            result.labels = [self.graph.label(city) for city in best_tour]

        self.logger.info(
            "Enumeration complete",
            extra={
                "status": result.status,
                "cost": result.cost,
                "tours_enumerated": enumerated,
                "elapsed_ms": elapsed * 1000,
            },
        )
        if result.status == "infeasible" and self.options.raise_on_infeasible:
            raise InfeasibleProblemError(
                f"No tour exists for a graph of {n} cities", nodes_expanded=enumerated
            )
        return result
