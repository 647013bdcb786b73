"""Public solver entrypoints."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from .data import Graph, ProgramMode, ProgressCallback, SolverOptions, TourResult
from .exceptions import SolverConfigurationError
from .io import load_graph as load_graph_file
from .io import save_result as save_result_file
from .little import LittleSolver
from .naive import NaiveSolver


def solve_tsp(
    graph: Graph,
    options: SolverOptions | None = None,
    mode: ProgramMode = ProgramMode.OPTTSP,
    warm_start_tour: Sequence[int] | None = None,
    progress_callback: ProgressCallback | None = None,
    progress_interval: int = 100,
) -> TourResult:
    """Find a minimum-cost Hamiltonian cycle of a weighted graph.

    This is the main entry point. The default mode runs Little's branch-and-bound,
    which reduces the cost matrix of every subproblem to obtain lower bounds and
    explores include/exclude branches best-bound-first.

    Args:
        graph: The graph to solve (see build_graph() / load_graph()).
        options: Solver configuration options. If None, uses defaults.
                 See SolverOptions for limits and error policy.
        mode: ProgramMode.OPTTSP (branch-and-bound, default) or
              ProgramMode.NAIVETSP (exhaustive enumeration for small graphs).
        warm_start_tour: Optional tour of city indices used as the initial
                         incumbent. Ignored (with a warning) when invalid.
                         Only used by OPTTSP.
        progress_callback: Optional callback function to receive progress updates.
                           Called every progress_interval expansions with ProgressInfo.
        progress_interval: Number of node expansions between progress callbacks (default: 100).

    Returns:
        TourResult containing:
        - status: 'optimal', 'infeasible', 'node_limit' or 'time_limit'
        - tour: City indices starting at city 0 (None when no tour was found)
        - cost / objective: Tour cost in cost units and in the caller's units
        - lower_bound: Proven lower bound on the optimal cost
        - search counters (expanded, pruned, infeasible nodes)

    Raises:
        SolverConfigurationError: If mode is NOT_SET, or NAIVETSP is asked to
                                  enumerate a graph above options.naive_max_cities.
        InfeasibleProblemError: If no tour exists and options.raise_on_infeasible is set.
        SearchLimitError: If a limit stops the search and options.raise_on_limit is set.

    Time Complexity:
        - Worst case: exponential in N for both modes ((N-1)! tours for NAIVETSP)
        - Each branch-and-bound expansion costs O(N^2) for the matrix copy and reduction

    Examples:
        >>> from little_tsp import build_graph, solve_tsp
        >>> graph = build_graph([
        ...     [0, 10, 15, 20],
        ...     [10, 0, 35, 25],
        ...     [15, 35, 0, 30],
        ...     [20, 25, 30, 0],
        ... ])
        >>> result = solve_tsp(graph)
        >>> print(f"Status: {result.status}, Cost: {result.cost}")
        Status: optimal, Cost: 80

    See Also:
        - build_graph(): Construct a graph from a weight matrix
        - SolverOptions: Configuration and limits
        - TourResult: Solution output format
    """
    if mode is ProgramMode.NOT_SET:
        raise SolverConfigurationError(
            "Program mode is not set. Choose ProgramMode.OPTTSP or ProgramMode.NAIVETSP."
        )
    if mode is ProgramMode.NAIVETSP:
        return NaiveSolver(graph, options=options).solve()
    # Instantiate a fresh solver each call to avoid cross-run state sharing.
    solver = LittleSolver(graph, options=options)
    return solver.solve(
        warm_start_tour=warm_start_tour,
        progress_callback=progress_callback,
        progress_interval=progress_interval,
    )


def load_graph(path: str | Path) -> Graph:
    """Load a TSP instance from a JSON file.

    Args:
        path: Path to JSON file containing the problem definition.

    Returns:
        Graph instance ready to solve.

    Raises:
        FileNotFoundError: If file does not exist.
        InvalidGraphError: If JSON is malformed or the graph is invalid.

    Examples:
        >>> from little_tsp import load_graph, solve_tsp
        >>> graph = load_graph("examples/sample_problem.json")
        >>> graph.size()
        4
    """
    return load_graph_file(path)


def save_result(path: str | Path, result: TourResult, graph: Graph | None = None) -> None:
    """Save a tour result to a JSON file.

    Args:
        path: Path where JSON file will be written.
        result: TourResult from solve_tsp().
        graph: Optional graph used to write city labels instead of indices.

    Raises:
        OSError: If file cannot be written.

    See Also:
        - load_graph(): Load a problem from JSON
    """
    save_result_file(path, result, graph)
