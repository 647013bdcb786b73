"""Core data structures for exact traveling salesman problems."""

from __future__ import annotations

import math
import numbers
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np

from .exceptions import InvalidGraphError, SolverConfigurationError

# Sentinel for "infinite / forbidden" cells (diagonal, missing and excluded edges).
INFINITE_COST: int = int(np.iinfo(np.int64).max)


def is_infinite(cost: int) -> bool:
    """Return True when ``cost`` is the infinite sentinel."""
    return cost >= INFINITE_COST


def saturating_add(*costs: int) -> int:
    """Add costs, saturating at INFINITE_COST instead of wrapping.

    Any infinite operand makes the result infinite, and so does a finite sum that
    reaches the sentinel. This keeps an infeasible bound from turning into a
    misleadingly small finite value.

    Examples:
        >>> saturating_add(3, 4)
        7
        >>> saturating_add(3, INFINITE_COST) == INFINITE_COST
        True
    """
    total = 0
    for cost in costs:
        cost = int(cost)
        if cost >= INFINITE_COST:
            return INFINITE_COST
        total += cost
    return min(total, INFINITE_COST)


class ProgramMode(Enum):
    """Algorithm selected for a solve.

    Attributes:
        NOT_SET: No mode chosen yet (rejected by solve_tsp()).
        OPTTSP: Little's branch-and-bound (the optimizing solver).
        NAIVETSP: Exhaustive enumeration baseline.
    """

    NOT_SET = "not_set"
    OPTTSP = "opttsp"
    NAIVETSP = "naivetsp"


@dataclass(frozen=True, order=True)
class Edge:
    """Directed edge: travel directly from city ``row`` to city ``column``.

    The same value type is used for graph edges and for branching decisions
    (forcing an edge into, or out of, the tour).

    Examples:
        >>> edge = Edge(0, 3)
        >>> edge.as_tuple()
        (0, 3)

    Raises:
        InvalidGraphError: If row == column (self-loops are never part of a tour).
    """

    row: int
    column: int

    def __post_init__(self) -> None:
        if self.row == self.column:
            raise InvalidGraphError(
                f"Self-loop detected on city {self.row}. A tour never travels from a "
                f"city to itself."
            )

    def as_tuple(self) -> tuple[int, int]:
        return (self.row, self.column)


@dataclass(frozen=True)
class Graph:
    """Read-only weight store over N cities.

    Weights are stored as int64 *cost units*: a real weight w becomes
    ``round(w * 10**precision)``. Missing edges and the diagonal hold
    INFINITE_COST. The weights array is made read-only so a graph cannot change
    during a solve.

    Attributes:
        weights: N x N int64 array of costs in cost units.
        labels: City names, index-aligned with the matrix.
        precision: Number of decimal digits kept when scaling real weights.

    Examples:
        >>> graph = build_graph([[0, 10, 15], [10, 0, 20], [15, 20, 0]])
        >>> graph.size()
        3
        >>> graph.weight(0, 2)
        15

    See Also:
        - build_graph(): Construct from a weight matrix.
        - build_graph_from_edges(): Construct from city and edge lists.
    """

    weights: np.ndarray
    labels: tuple[str, ...]
    precision: int = 0

    def __post_init__(self) -> None:
        if self.weights.ndim != 2 or self.weights.shape[0] != self.weights.shape[1]:
            raise InvalidGraphError(
                f"Weight matrix must be square, got shape {self.weights.shape}."
            )
        if self.weights.dtype != np.int64:
            raise InvalidGraphError(
                f"Weight matrix must hold int64 cost units, got dtype {self.weights.dtype}. "
                f"Use build_graph() to convert real-valued weights."
            )
        if len(self.labels) != self.weights.shape[0]:
            raise InvalidGraphError(
                f"Expected {self.weights.shape[0]} city labels, got {len(self.labels)}."
            )
        self.weights.setflags(write=False)

    def size(self) -> int:
        return int(self.weights.shape[0])

    def weight(self, row: int, column: int) -> int:
        return int(self.weights[row, column])

    def has_edge(self, row: int, column: int) -> bool:
        return row != column and not is_infinite(self.weight(row, column))

    def label(self, city: int) -> str:
        return self.labels[city]

    def index_of(self, label: str) -> int:
        try:
            return self.labels.index(str(label))
        except ValueError:
            raise InvalidGraphError(f"City '{label}' not found in graph.") from None

    def to_objective(self, cost: int) -> float:
        """Convert a cost in cost units back to the caller's units."""
        if self.precision == 0:
            return float(cost)
        return cost / 10**self.precision


@dataclass(frozen=True)
class ProgressInfo:
    """Progress information provided during a branch-and-bound search.

    Attributes:
        nodes_expanded: Search nodes expanded so far.
        frontier_size: Nodes waiting in the frontier.
        best_bound: Smallest lower bound among unexplored nodes (cost units).
        incumbent_cost: Cost of the best tour found so far, or None.
        elapsed_time: Elapsed time in seconds since the solve started.
    """

    nodes_expanded: int
    frontier_size: int
    best_bound: int
    incumbent_cost: int | None
    elapsed_time: float


# Type alias for progress callback function
ProgressCallback = Callable[[ProgressInfo], None]


@dataclass
class TourResult:
    """Represents the output of a TSP solve.

    Attributes:
        status: Solution status:
                - 'optimal': Tour proven optimal
                - 'infeasible': No Hamiltonian cycle exists
                - 'node_limit': Node limit reached; tour (if any) is the best found
                - 'time_limit': Time limit reached; tour (if any) is the best found
        tour: City indices in visiting order starting at city 0 (the return
              to the start is implicit), or None when no tour was found.
        cost: Tour cost in integer cost units, or None.
        objective: Tour cost in the caller's units (cost / 10**precision), or None.
        lower_bound: Best proven lower bound in cost units, or None if infeasible.
        edges: The N directed edges of the tour.
        labels: City names in tour order.
        mode: Algorithm that produced the result ('opttsp' or 'naivetsp').
        nodes_expanded: Search nodes expanded (tours enumerated for 'naivetsp').
        nodes_pruned: Nodes discarded because their bound reached the incumbent.
        nodes_infeasible: Nodes discarded because their reduction was infinite.
        max_frontier_size: Peak number of nodes waiting in the frontier.
        elapsed_time: Wall-clock solve time in seconds.

    Examples:
        >>> from little_tsp import build_graph, solve_tsp
        >>> graph = build_graph([
        ...     [0, 10, 15, 20],
        ...     [10, 0, 35, 25],
        ...     [15, 35, 0, 30],
        ...     [20, 25, 30, 0],
        ... ])
        >>> result = solve_tsp(graph)
        >>> result.status, result.cost
        ('optimal', 80)
        >>> result.tour
        [0, 2, 3, 1]
    """

    status: str
    tour: list[int] | None = None
    cost: int | None = None
    objective: float | None = None
    lower_bound: int | None = None
    edges: list[Edge] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)
    mode: str = ProgramMode.OPTTSP.value
    nodes_expanded: int = 0
    nodes_pruned: int = 0
    nodes_infeasible: int = 0
    max_frontier_size: int = 0
    elapsed_time: float = 0.0

    @property
    def has_tour(self) -> bool:
        return self.tour is not None


@dataclass
class SolverOptions:
    """Configuration options for the TSP solvers.

    Attributes:
        max_nodes: Maximum number of search nodes to expand before stopping with
                   status 'node_limit'. None means no limit.
        time_limit: Wall-clock budget in seconds before stopping with status
                    'time_limit'. None means no limit.
        naive_max_cities: Largest graph the exhaustive baseline accepts (default: 10).
                          Enumeration visits (N-1)! tours.
        use_matrix_arena: Recycle cost-matrix buffers of discarded search nodes
                          instead of allocating a fresh N x N array per branch
                          (default: True).
        arena_capacity: Maximum number of free buffers the arena keeps (default: 256).
        raise_on_infeasible: Raise InfeasibleProblemError instead of returning a
                             result with status 'infeasible' (default: False).
        raise_on_limit: Raise SearchLimitError instead of returning a result with
                        status 'node_limit' / 'time_limit' (default: False).
        log_interval: Number of expansions between INFO progress log records
                      (default: 1000).

    Examples:
        >>> # Default options
        >>> options = SolverOptions()

        >>> # Bounded search returning the best tour found within 5 seconds
        >>> options = SolverOptions(time_limit=5.0)

        >>> # Treat infeasibility as an error
        >>> options = SolverOptions(raise_on_infeasible=True)
    """

    max_nodes: int | None = None
    time_limit: float | None = None
    naive_max_cities: int = 10
    use_matrix_arena: bool = True
    arena_capacity: int = 256
    raise_on_infeasible: bool = False
    raise_on_limit: bool = False
    log_interval: int = 1000

    def __post_init__(self) -> None:
        if self.max_nodes is not None and self.max_nodes <= 0:
            raise SolverConfigurationError(
                f"max_nodes must be positive, got {self.max_nodes}. "
                f"Use None to expand nodes until the search completes."
            )
        if self.time_limit is not None and self.time_limit <= 0:
            raise SolverConfigurationError(
                f"time_limit must be positive, got {self.time_limit}. "
                f"Use None to disable the time limit."
            )
        if self.naive_max_cities < 2:
            raise SolverConfigurationError(
                f"naive_max_cities must be at least 2, got {self.naive_max_cities}."
            )
        if self.arena_capacity <= 0:
            raise SolverConfigurationError(
                f"arena_capacity must be positive, got {self.arena_capacity}."
            )
        if self.log_interval <= 0:
            raise SolverConfigurationError(
                f"log_interval must be positive, got {self.log_interval}."
            )


def _to_cost_units(value: Any, scale: int, row: int, column: int) -> int | None:
    # None and +inf both mean "no edge"; everything else must be a non-negative
    # weight that is integral once scaled to the requested precision.
    if value is None:
        return None
    if isinstance(value, (bool, np.bool_)):
        raise InvalidGraphError(
            f"Edge {row} -> {column} has boolean weight {value!r}. Weights must be numbers."
        )
    if isinstance(value, numbers.Integral):
        if value < 0:
            raise InvalidGraphError(
                f"Edge {row} -> {column} has negative weight {value}. "
                f"Weights must be non-negative."
            )
        return int(value) * scale
    try:
        weight = float(value)
    except (TypeError, ValueError):
        raise InvalidGraphError(
            f"Edge {row} -> {column} has non-numeric weight {value!r}."
        ) from None
    if math.isnan(weight):
        raise InvalidGraphError(f"Edge {row} -> {column} has NaN weight.")
    if weight < 0:
        raise InvalidGraphError(
            f"Edge {row} -> {column} has negative weight {weight}. Weights must be non-negative."
        )
    if math.isinf(weight):
        return None
    scaled = weight * scale
    rounded = round(scaled)
    if abs(scaled - rounded) > 1e-9 * max(1.0, abs(scaled)):
        raise InvalidGraphError(
            f"Edge {row} -> {column} weight {weight} is not representable with "
            f"precision={int(math.log10(scale))}. Increase the precision to keep more "
            f"decimal digits."
        )
    return int(rounded)


def build_graph(
    weights: Sequence[Sequence[Any]] | np.ndarray,
    labels: Sequence[Any] | None = None,
    precision: int = 0,
) -> Graph:
    """Build a Graph from an N x N weight matrix.

    Args:
        weights: Square nested sequence (or array) of weights. ``weights[i][j]`` is
                 the cost of travelling from city i to city j. None or +inf mean
                 "no edge". Diagonal entries are ignored.
        labels: Optional city names (default: "0", "1", ...).
        precision: Decimal digits to keep for real-valued weights (default: 0).

    Returns:
        Immutable Graph in integer cost units.

    Raises:
        InvalidGraphError: On non-square input, negative or NaN weights, weights not
                           integral at the requested precision, bad labels, or
                           weights so large that a tour cost could overflow.
    """
    if not isinstance(precision, int) or precision < 0:
        raise InvalidGraphError(f"precision must be a non-negative integer, got {precision!r}.")
    scale = 10**precision

    rows = [list(row) for row in weights]
    n = len(rows)
    for idx, row in enumerate(rows):
        if len(row) != n:
            raise InvalidGraphError(
                f"Weight matrix must be square: row {idx} has {len(row)} entries, "
                f"expected {n}."
            )

    matrix = np.full((n, n), INFINITE_COST, dtype=np.int64)
    max_cost = 0
    for i, row in enumerate(rows):
        for j, value in enumerate(row):
            if i == j:
                continue
            cost = _to_cost_units(value, scale, i, j)
            if cost is None:
                continue
            max_cost = max(max_cost, cost)
            if max_cost * max(n, 1) >= INFINITE_COST:
                raise InvalidGraphError(
                    f"Edge {i} -> {j} weight is too large: a tour over {n} cities could "
                    f"overflow the cost range. Rescale the weights or lower the precision."
                )
            matrix[i, j] = cost

    if labels is None:
        names = tuple(str(idx) for idx in range(n))
    else:
        names = tuple(str(label) for label in labels)
        if len(set(names)) != len(names):
            raise InvalidGraphError("Duplicate city labels. Each city must have a unique name.")

    return Graph(weights=matrix, labels=names, precision=precision)


def build_graph_from_edges(
    cities: Iterable[Any],
    edges: Iterable[Mapping[str, Any]],
    directed: bool = False,
    precision: int = 0,
) -> Graph:
    """Factory helper used by the IO layer to assemble a Graph from an edge list.

    Pairs of cities without an edge get no edge (infinite cost). For undirected
    graphs each edge is usable in both directions at the same weight.
    """
    names = [str(city) for city in cities]
    index: dict[str, int] = {}
    for idx, name in enumerate(names):
        # Deduplicate cities here so downstream code can index directly.
        if name in index:
            raise InvalidGraphError(
                f"Duplicate city '{name}'. Each city must have a unique identifier."
            )
        index[name] = idx

    matrix: list[list[Any]] = [[None] * len(names) for _ in names]
    seen: set[tuple[int, int]] = set()
    for edge in edges:
        if "tail" not in edge or "head" not in edge:
            raise InvalidGraphError(
                f"Invalid edge specification: {edge}. Each edge must have 'tail' and 'head' fields."
            )
        if "weight" not in edge:
            raise InvalidGraphError(f"Edge {edge['tail']} -> {edge['head']} has no 'weight'.")
        tail, head = str(edge["tail"]), str(edge["head"])
        for endpoint in (tail, head):
            if endpoint not in index:
                raise InvalidGraphError(
                    f"Edge endpoint '{endpoint}' not found in city set. All edge endpoints "
                    f"must reference existing cities."
                )
        if tail == head:
            raise InvalidGraphError(f"Self-loop detected on city '{tail}'.")
        row, column = index[tail], index[head]
        pairs = [(row, column)] if directed else [(row, column), (column, row)]
        for pair in pairs:
            if pair in seen:
                raise InvalidGraphError(
                    f"Duplicate edge {names[pair[0]]} -> {names[pair[1]]}."
                )
            seen.add(pair)
            matrix[pair[0]][pair[1]] = edge["weight"]

    return build_graph(matrix, labels=names, precision=precision)
