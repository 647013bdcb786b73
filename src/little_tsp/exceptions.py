"""Custom exceptions for the little_tsp solver library."""

from __future__ import annotations


class TSPSolverError(Exception):
    """Base exception for all TSP solver errors.

    All custom exceptions in the little_tsp package inherit from this class,
    allowing users to catch all solver-related errors with a single except clause.

    Example:
        try:
            result = solve_tsp(graph)
        except TSPSolverError as e:
            print(f"Solver error: {e}")
    """


class InvalidGraphError(TSPSolverError):
    """Raised when a graph definition is invalid or malformed.

    This includes:
    - Non-square weight matrices
    - Negative edge weights
    - Weights that are not integral at the requested precision
    - Unknown cities referenced by edges, duplicate edges or labels
    - Malformed JSON input

    Example:
        InvalidGraphError("Weight matrix must be square, got shape (3, 4)")
    """


class NotAvailableError(TSPSolverError):
    """Raised when a row, column or cell of a cost matrix is not available.

    A row becomes unavailable once its city has a forced outgoing edge and a
    column once its city has a forced incoming edge. Reading such a line is a
    programming error: callers must check availability first (or use the
    checked accessors CostMatrix.get_row() / CostMatrix.get_column()).

    Example:
        NotAvailableError("Row 2 is not available")
    """


class InfeasibleProblemError(TSPSolverError):
    """Raised when the graph admits no Hamiltonian cycle.

    By default the solver reports infeasibility through
    TourResult.status == "infeasible". This exception is raised instead when
    SolverOptions.raise_on_infeasible is set.

    Example:
        InfeasibleProblemError(
            "No tour exists: root cost matrix has a row with no finite cell",
            nodes_expanded=0,
        )
    """

    def __init__(self, message: str, nodes_expanded: int = 0):
        """Initialize with message and optional search effort."""
        super().__init__(message)
        self.nodes_expanded = nodes_expanded


class SearchLimitError(TSPSolverError):
    """Raised when the search stops on a node or time limit before proving optimality.

    This is technically not an error condition - the solver returns the best
    tour found so far with status "node_limit" or "time_limit". This exception
    is provided for users who want to treat limits as errors
    (SolverOptions.raise_on_limit).

    Example:
        SearchLimitError(
            "Node limit reached: 1000 nodes expanded",
            status="node_limit",
            nodes_expanded=1000,
            best_cost=412,
        )
    """

    def __init__(
        self,
        message: str,
        status: str = "unknown",
        nodes_expanded: int = 0,
        best_cost: int | None = None,
    ):
        """Initialize with message and search state."""
        super().__init__(message)
        self.status = status
        self.nodes_expanded = nodes_expanded
        self.best_cost = best_cost


class SolverConfigurationError(TSPSolverError):
    """Raised when solver configuration, options or program mode are invalid.

    This includes:
    - Non-positive node limits, time limits or arena capacities
    - An unset program mode
    - Graphs too large for the naive baseline

    Example:
        SolverConfigurationError("max_nodes must be positive, got -1")
    """


class InvariantViolationError(TSPSolverError):
    """Raised when an internal invariant of the branch-and-bound search is broken.

    This signals a bug, not a property of the input:
    - A feasible reduced matrix without a zero cell to branch on
    - A forced edge that would close a sub-tour
    - An incumbent whose bound differs from its recomputed tour cost
    """
