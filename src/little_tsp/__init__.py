"""High-level entrypoints for the Little branch-and-bound TSP solver library."""

from .cost_matrix import Axis, CostMatrix, CostVector, MatrixArena
from .data import (
    INFINITE_COST,
    Edge,
    Graph,
    ProgramMode,
    ProgressCallback,
    ProgressInfo,
    SolverOptions,
    TourResult,
    build_graph,
    build_graph_from_edges,
    is_infinite,
    saturating_add,
)
from .diagnostics import SearchMonitor
from .exceptions import (
    InfeasibleProblemError,
    InvalidGraphError,
    InvariantViolationError,
    NotAvailableError,
    SearchLimitError,
    SolverConfigurationError,
    TSPSolverError,
)
from .fragments import TourFragments
from .io import graph_from_networkx
from .little import LittleSolver
from .naive import NaiveSolver
from .search import BranchChoice, Frontier, SearchNode, select_branch_edge
from .solver import load_graph, save_result, solve_tsp
from .utils import (
    TourValidation,
    edges_to_tour,
    rotate_to_start,
    tour_cost,
    tour_to_edges,
    validate_tour,
)
from .visualization import visualize_graph, visualize_tour

__version__ = "0.1.0"

__all__ = [
    # Main API
    "build_graph",
    "build_graph_from_edges",
    "graph_from_networkx",
    "load_graph",
    "solve_tsp",
    "save_result",
    # Configuration
    "SolverOptions",
    "ProgramMode",
    # Data model
    "Graph",
    "Edge",
    "TourResult",
    "INFINITE_COST",
    "is_infinite",
    "saturating_add",
    # Progress tracking
    "ProgressCallback",
    "ProgressInfo",
    # Search internals
    "Axis",
    "CostMatrix",
    "CostVector",
    "MatrixArena",
    "TourFragments",
    "SearchNode",
    "BranchChoice",
    "Frontier",
    "select_branch_edge",
    "LittleSolver",
    "NaiveSolver",
    # Utilities
    "tour_cost",
    "tour_to_edges",
    "edges_to_tour",
    "rotate_to_start",
    "validate_tour",
    "TourValidation",
    # Diagnostics
    "SearchMonitor",
    # Visualization
    "visualize_graph",
    "visualize_tour",
    # Exceptions
    "TSPSolverError",
    "InvalidGraphError",
    "NotAvailableError",
    "InfeasibleProblemError",
    "SearchLimitError",
    "SolverConfigurationError",
    "InvariantViolationError",
    # Version
    "__version__",
]
