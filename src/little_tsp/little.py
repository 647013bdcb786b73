"""Little's branch-and-bound implementation for the traveling salesman problem."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from .cost_matrix import MatrixArena
from .data import (
    INFINITE_COST,
    Edge,
    Graph,
    ProgramMode,
    ProgressCallback,
    ProgressInfo,
    SolverOptions,
    TourResult,
    is_infinite,
)
from .diagnostics import SearchMonitor
from .exceptions import (
    InfeasibleProblemError,
    InvariantViolationError,
    SearchLimitError,
    SolverConfigurationError,
)
from .search import Frontier, SearchNode, select_branch_edge
from .utils import edges_to_tour, rotate_to_start, tour_cost, tour_to_edges, validate_tour


class LittleSolver:
    """Exact TSP solver using Little's reduction-based branch-and-bound.

    Every search node owns a reduced cost matrix whose total reduction is a lower
    bound on all tours that respect the node's decisions. Nodes are expanded
    best-bound-first. Expanding a node picks the zero cell with the largest
    exclusion penalty and creates two children: one forcing that edge into the
    tour, one forbidding it. Nodes whose bound reaches the incumbent tour cost
    are pruned.

    Implementation Details:
        - Cost matrices keep their N x N shape; decisions flip row/column
          availability flags
        - Sub-tours are prevented by forbidding the closing cell of every path
          formed by forced edges
        - At depth N - 2 the last two edges are forced directly
        - Matrix buffers are recycled through a MatrixArena
        - Costs are integers, so the final bound equals the tour cost exactly

    Attributes:
        graph: The Graph instance to solve.
        options: Solver configuration (limits, arena, error policy).
        monitor: SearchMonitor collecting node counters.
        arena: Buffer pool for cost matrices, or None when disabled.

    See Also:
        - solve_tsp(): Public API wrapper
        - CostMatrix: Reduction and availability bookkeeping
        - SearchNode: Branching and tour completion

    Note:
        This class is internal to the solver. Use solve_tsp() instead of
        instantiating this class directly.
    """

    def __init__(self, graph: Graph, options: SolverOptions | None = None):
        self.graph = graph
        self.options = options if options is not None else SolverOptions()
        self.logger = logging.getLogger(__name__)
        self.monitor = SearchMonitor()
        self.arena: MatrixArena | None = None
        if self.options.use_matrix_arena and graph.size() > 0:
            self.arena = MatrixArena(graph.size(), capacity=self.options.arena_capacity)

        self.best_cost = INFINITE_COST
        self.best_edges: tuple[Edge, ...] | None = None
        self._next_id = 0

    def _allocate_ids(self, count: int = 1) -> int:
        first = self._next_id
        self._next_id += count
        return first

    def _apply_warm_start(self, warm_start_tour: Sequence[int]) -> bool:
        """Seed the incumbent with a caller-supplied tour.

        Returns:
            True if the tour was accepted, False if it was rejected (cold start).
        """
        validation = validate_tour(self.graph, warm_start_tour)
        if not validation.is_valid or validation.cost is None:
            self.logger.warning(
                "Warm-start tour rejected, starting cold",
                extra={"errors": validation.errors},
            )
            return False
        tour = rotate_to_start(warm_start_tour, 0)
        self.best_cost = validation.cost
        self.best_edges = tuple(tour_to_edges(tour))
        self.monitor.record_incumbent(validation.cost)
        self.logger.info(
            "Warm-start tour accepted as initial incumbent",
            extra={"incumbent_cost": validation.cost},
        )
        return True

    def _update_incumbent(self, node: SearchNode) -> None:
        if node.bound >= self.best_cost:
            self.monitor.record_pruned()
            return
        tour = edges_to_tour(node.included, start=0)
        recomputed = tour_cost(self.graph, tour)
        if recomputed != node.bound:
            raise InvariantViolationError(
                f"Complete node {node.node_id} has bound {node.bound} but its tour costs "
                f"{recomputed}"
            )
        self.best_cost = node.bound
        self.best_edges = node.included
        self.monitor.record_incumbent(node.bound)
        self.logger.info(
            "New incumbent tour",
            extra={
                "incumbent_cost": node.bound,
                "nodes_expanded": self.monitor.nodes_expanded,
            },
        )

    def _expand(self, node: SearchNode, frontier: Frontier) -> None:
        n = self.graph.size()
        if node.depth == n - 2:
            leaf = node.close_tour(self._allocate_ids())
            node.release()
            if leaf is None:
                self.monitor.record_infeasible()
            elif leaf.bound >= self.best_cost:
                self.monitor.record_pruned()
            else:
                frontier.push(leaf)
            return

        choice = select_branch_edge(node.matrix)
        if choice is None:
            raise InvariantViolationError(
                f"Reduced matrix of node {node.node_id} has no zero cell to branch on"
            )
        children = node.branch(choice, self._allocate_ids(2))
        node.release()

        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                "Branching on edge",
                extra={
                    "node_id": node.node_id,
                    "depth": node.depth,
                    "bound": node.bound,
                    "edge": choice.edge.as_tuple(),
                    "penalty": choice.penalty,
                    "include_bound": children[0].bound,
                    "exclude_bound": children[1].bound,
                },
            )

        for child in children:
            if child.is_infeasible:
                self.monitor.record_infeasible()
                child.release()
            elif child.bound >= self.best_cost:
                self.monitor.record_pruned()
                child.release()
            else:
                frontier.push(child)

    def _check_limits(self, start_time: float) -> str | None:
        max_nodes = self.options.max_nodes
        if max_nodes is not None and self.monitor.nodes_expanded >= max_nodes:
            return "node_limit"
        time_limit = self.options.time_limit
        if time_limit is not None and time.time() - start_time >= time_limit:
            return "time_limit"
        return None

    def solve(
        self,
        warm_start_tour: Sequence[int] | None = None,
        progress_callback: ProgressCallback | None = None,
        progress_interval: int = 100,
    ) -> TourResult:
        """Find a minimum-cost Hamiltonian cycle.

        Args:
            warm_start_tour: Optional tour (city indices) used as the initial
                             incumbent. Invalid tours are ignored with a warning.
            progress_callback: Optional callback function to receive progress updates.
            progress_interval: Number of expansions between progress callbacks (default: 100).

        Returns:
            TourResult with the tour, its cost and search statistics.

        Raises:
            InfeasibleProblemError: If no tour exists and options.raise_on_infeasible is set.
            SearchLimitError: If a limit stops the search and options.raise_on_limit is set.
            InvariantViolationError: If the search detects an internal inconsistency.
        """
        if progress_interval <= 0:
            raise SolverConfigurationError(
                f"progress_interval must be positive, got {progress_interval}."
            )

        start_time = time.time()
        n = self.graph.size()

        self.logger.info(
            "Starting Little branch-and-bound solver",
            extra={
                "cities": n,
                "max_nodes": self.options.max_nodes,
                "time_limit": self.options.time_limit,
                "matrix_arena": self.arena is not None,
                "warm_start": warm_start_tour is not None,
            },
        )

        if n < 2:
            self.logger.info("Graph has fewer than 2 cities, no tour exists", extra={"cities": n})
            return self._finish("infeasible", None, start_time, 0)

        if warm_start_tour is not None:
            self._apply_warm_start(warm_start_tour)

        root = SearchNode.root(self.graph, arena=self.arena, node_id=self._allocate_ids())
        self.logger.info(
            "Root reduction complete",
            extra={
                "root_bound": None if root.is_infeasible else root.bound,
                "elapsed_ms": (time.time() - start_time) * 1000,
            },
        )
        if root.is_infeasible:
            root.release()
            self.monitor.record_infeasible()
            self.logger.info("Root cost matrix is infeasible, no tour exists")
            return self._finish("infeasible", None, start_time, 0)

        frontier = Frontier()
        frontier.push(root)
        status = "optimal"

        lower_bound: int | None = None
        while frontier:
            node = frontier.pop()
            if node.bound >= self.best_cost:
                self.monitor.record_pruned()
                node.release()
                continue
            if node.is_complete:
                self._update_incumbent(node)
                continue

            limit = self._check_limits(start_time)
            if limit is not None:
                # Nodes leave the frontier in bound order, so this one bounds every open node.
                status = limit
                lower_bound = node.bound
                node.release()
                break

            self.monitor.record_expansion(node.bound)
            self._expand(node, frontier)

            expanded = self.monitor.nodes_expanded
            if progress_callback is not None and expanded % progress_interval == 0:
                progress_callback(
                    ProgressInfo(
                        nodes_expanded=expanded,
                        frontier_size=len(frontier),
                        best_bound=node.bound,
                        incumbent_cost=None if is_infinite(self.best_cost) else self.best_cost,
                        elapsed_time=time.time() - start_time,
                    )
                )
            if expanded % self.options.log_interval == 0:
                self.logger.info(
                    "Search progress",
                    extra={
                        "nodes_expanded": expanded,
                        "frontier_size": len(frontier),
                        "best_bound": node.bound,
                        "incumbent_cost": self.best_cost,
                        "elapsed_ms": (time.time() - start_time) * 1000,
                    },
                )

        if status != "optimal":
            self.logger.warning(
                "Search limit reached before optimality was proven",
                extra={
                    "limit": status,
                    "nodes_expanded": self.monitor.nodes_expanded,
                    "lower_bound": lower_bound,
                    "incumbent_cost": None if is_infinite(self.best_cost) else self.best_cost,
                },
            )
        for node in frontier.drain():
            node.release()

        if self.best_edges is None and status == "optimal":
            status = "infeasible"
        if status == "optimal":
            lower_bound = self.best_cost
        return self._finish(status, lower_bound, start_time, frontier.max_size)

    def _finish(
        self,
        status: str,
        lower_bound: int | None,
        start_time: float,
        max_frontier_size: int,
    ) -> TourResult:
        elapsed = time.time() - start_time
        result = TourResult(
            status=status,
            lower_bound=lower_bound,
            mode=ProgramMode.OPTTSP.value,
            nodes_expanded=self.monitor.nodes_expanded,
            nodes_pruned=self.monitor.nodes_pruned,
            nodes_infeasible=self.monitor.nodes_infeasible,
            max_frontier_size=max_frontier_size,
            elapsed_time=elapsed,
        )
        if self.best_edges is not None:
            tour = edges_to_tour(self.best_edges, start=0)
            result.tour = tour
            result.edges = tour_to_edges(tour)
            result.cost = self.best_cost
            result.objective = self.graph.to_objective(self.best_cost)
            result.labels = [self.graph.label(city) for city in tour]

        self.logger.info(
            "Solver complete",
            extra={
                "status": status,
                "cost": result.cost,
                "elapsed_ms": elapsed * 1000,
                "arena_allocated": self.arena.allocated if self.arena is not None else None,
                "arena_reused": self.arena.reused if self.arena is not None else None,
                **self.monitor.summary(),
            },
        )

        if status == "infeasible" and self.options.raise_on_infeasible:
            raise InfeasibleProblemError(
                f"No tour exists for a graph of {self.graph.size()} cities",
                nodes_expanded=self.monitor.nodes_expanded,
            )
        if status in ("node_limit", "time_limit") and self.options.raise_on_limit:
            raise SearchLimitError(
                f"Search stopped on {status.replace('_', ' ')} after "
                f"{self.monitor.nodes_expanded} expanded nodes",
                status=status,
                nodes_expanded=self.monitor.nodes_expanded,
                best_cost=result.cost,
            )
        return result
