"""Search tree nodes, branching rule and frontier for Little's algorithm."""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .cost_matrix import CostMatrix, MatrixArena
from .data import Edge, is_infinite, saturating_add
from .exceptions import InvariantViolationError
from .fragments import TourFragments

if TYPE_CHECKING:
    from .data import Graph


@dataclass(frozen=True)
class BranchChoice:
    """Zero-cost cell selected for branching and its exclusion penalty."""

    edge: Edge
    penalty: int


def select_branch_edge(matrix: CostMatrix) -> BranchChoice | None:
    """Pick the zero cell whose exclusion raises the bound the most.

    The penalty of a zero at (r, c) is the smallest other cost in row r plus the
    smallest other cost in column c: the amount a re-reduction gains once the
    cell is forbidden. The largest penalty wins; ties go to the lowest row, then
    the lowest column.

    Returns:
        The chosen cell, or None if the matrix has no zero cell.
    """
    best: BranchChoice | None = None
    for edge in matrix.zero_cells():
        row = matrix.get_row(edge.row)
        column = matrix.get_column(edge.column)
        penalty = saturating_add(
            row.minimum(excluding=edge.column),
            column.minimum(excluding=edge.row),
        )
        # zero_cells() is row-major, so strict comparison keeps the lowest index on ties.
        if best is None or penalty > best.penalty:
            best = BranchChoice(edge=edge, penalty=penalty)
    return best


class SearchNode:
    """Node of the branch-and-bound tree.

    A node is defined by the edges forced into the tour (``included``, in the
    order they were fixed) and the edges forced out (``excluded``). It owns the
    reduced cost matrix implied by those decisions and the lower bound on every
    tour that respects them. A complete node (depth == N) carries no matrix and
    its bound is the exact tour cost.

    Attributes:
        node_id: Creation sequence number within a solve.
        matrix: Reduced cost matrix, or None once released or for complete tours.
        fragments: Paths formed by the included edges.
        bound: Lower bound in cost units (INFINITE_COST when infeasible).
        included: Edges forced into the tour.
        excluded: Edges forced out of the tour.
    """

    __slots__ = ("node_id", "matrix", "fragments", "bound", "included", "excluded")

    def __init__(
        self,
        node_id: int,
        matrix: CostMatrix | None,
        fragments: TourFragments,
        bound: int,
        included: tuple[Edge, ...] = (),
        excluded: tuple[Edge, ...] = (),
    ):
        self.node_id = node_id
        self.matrix = matrix
        self.fragments = fragments
        self.bound = bound
        self.included = included
        self.excluded = excluded

    @classmethod
    def root(cls, graph: Graph, arena: MatrixArena | None = None, node_id: int = 0) -> SearchNode:
        """Root node: no decisions, bound = reduction cost of the raw matrix."""
        matrix = CostMatrix(graph, arena=arena)
        bound = matrix.reduce_matrix()
        return cls(node_id, matrix, TourFragments(graph.size()), bound)

    @property
    def depth(self) -> int:
        return len(self.included)

    @property
    def city_count(self) -> int:
        return self.fragments.city_count

    @property
    def is_infeasible(self) -> bool:
        return is_infinite(self.bound)

    @property
    def is_complete(self) -> bool:
        return self.depth == self.city_count

    def sort_key(self) -> tuple[int, int]:
        # Lowest bound first; among equal bounds the deeper node finishes a tour sooner.
        return (self.bound, -self.depth)

    def _live_matrix(self) -> CostMatrix:
        if self.matrix is None or self.matrix.released:
            raise InvariantViolationError(f"Search node {self.node_id} has no cost matrix to branch on")
        return self.matrix

    def include_child(self, edge: Edge, node_id: int) -> SearchNode:
        """Child forcing ``edge`` into the tour.

        The edge's row and column become unavailable and, while the merged path is
        shorter than a full tour, the cell that would close it into a sub-tour is
        forbidden before the child's own reduction. The edge's reduced cost (zero
        for a branching edge) is added to the bound.
        """
        matrix = self._live_matrix().copy()
        fragments = self.fragments.copy()
        closing = fragments.add(edge)
        edge_cost = matrix[edge.row, edge.column]
        matrix.include_edge(edge)
        if closing is not None:
            matrix.forbid(closing)
        reduction = matrix.reduce_matrix()
        return SearchNode(
            node_id,
            matrix,
            fragments,
            saturating_add(self.bound, edge_cost, reduction),
            self.included + (edge,),
            self.excluded,
        )

    def exclude_child(self, edge: Edge, node_id: int) -> SearchNode:
        """Child forbidding ``edge``.

        On a reduced parent the child's reduction equals the edge's penalty, so the
        bound rises by exactly that amount.
        """
        matrix = self._live_matrix().copy()
        matrix.forbid(edge)
        reduction = matrix.reduce_matrix()
        return SearchNode(
            node_id,
            matrix,
            self.fragments.copy(),
            saturating_add(self.bound, reduction),
            self.included,
            self.excluded + (edge,),
        )

    def branch(self, choice: BranchChoice, next_id: int) -> tuple[SearchNode, SearchNode]:
        """Return the (include, exclude) children; ids ``next_id`` and ``next_id + 1``."""
        return (
            self.include_child(choice.edge, next_id),
            self.exclude_child(choice.edge, next_id + 1),
        )

    def close_tour(self, node_id: int) -> SearchNode | None:
        """Force the last two edges of a node at depth N - 2.

        Two rows and two columns remain, so there are two ways to pair them. The
        pairing with finite cells that closes one Hamiltonian cycle is kept (the
        cheaper one if, unusually, both qualify).

        Returns:
            A complete node whose bound is the exact tour cost, or None if no
            pairing is feasible.
        """
        matrix = self._live_matrix()
        rows = matrix.available_rows()
        columns = matrix.available_columns()
        if len(rows) != 2 or len(columns) != 2:
            raise InvariantViolationError(
                f"close_tour() needs a 2x2 remainder, node {self.node_id} has "
                f"{len(rows)} rows and {len(columns)} columns"
            )

        best: SearchNode | None = None
        first_row, second_row = rows
        for first_column, second_column in (columns, columns[::-1]):
            if first_row == first_column or second_row == second_column:
                continue
            first_cost = matrix[first_row, first_column]
            second_cost = matrix[second_row, second_column]
            if is_infinite(first_cost) or is_infinite(second_cost):
                continue
            fragments = self.fragments.copy()
            first = Edge(first_row, first_column)
            second = Edge(second_row, second_column)
            if fragments.closes_subtour(first):
                continue
            fragments.add(first)
            if fragments.closes_subtour(second):
                continue
            fragments.add(second)
            bound = saturating_add(self.bound, first_cost, second_cost)
            if best is None or bound < best.bound:
                best = SearchNode(
                    node_id,
                    None,
                    fragments,
                    bound,
                    self.included + (first, second),
                    self.excluded,
                )
        return best

    def release(self) -> None:
        """Hand the matrix storage back to its arena."""
        if self.matrix is not None:
            self.matrix.release()
            self.matrix = None

    def __repr__(self) -> str:
        return (
            f"SearchNode(id={self.node_id}, depth={self.depth}, bound={self.bound}, "
            f"included={[e.as_tuple() for e in self.included]})"
        )


class Frontier:
    """Priority queue of unexplored search nodes.

    Ordered by ascending bound, then deeper depth first, then insertion order,
    which makes the exploration order fully deterministic.
    """

    def __init__(self) -> None:
        self._heap: list[tuple[int, int, int, SearchNode]] = []
        self._counter = itertools.count()
        self.max_size = 0

    def push(self, node: SearchNode) -> None:
        bound, depth_key = node.sort_key()
        heapq.heappush(self._heap, (bound, depth_key, next(self._counter), node))
        self.max_size = max(self.max_size, len(self._heap))

    def pop(self) -> SearchNode:
        if not self._heap:
            raise IndexError("pop from an empty Frontier")
        return heapq.heappop(self._heap)[-1]

    def best_bound(self) -> int | None:
        """Smallest bound in the frontier, or None when empty."""
        if not self._heap:
            return None
        return self._heap[0][0]

    def drain(self) -> Iterator[SearchNode]:
        """Pop every remaining node in priority order."""
        while self._heap:
            yield heapq.heappop(self._heap)[-1]

    def __len__(self) -> int:
        return len(self._heap)
