"""Reducible cost matrix for Little's branch-and-bound.

The matrix keeps its original N x N shape for its whole lifetime. Decisions made
by the search never delete rows or columns; they flip availability flags instead,
and every traversal (row and column views, cell iteration, reduction) skips the
unavailable lines.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from .data import INFINITE_COST, Edge, is_infinite, saturating_add
from .exceptions import NotAvailableError
from .fragments import TourFragments

if TYPE_CHECKING:
    from .data import Graph


class Axis(Enum):
    """Which axis of the matrix a CostVector holds fixed."""

    ROW = "row"
    COLUMN = "column"


class MatrixArena:
    """Pool of N x N int64 buffers shared by the cost matrices of one solve.

    Search nodes are created and discarded at a high rate; recycling the buffers
    of pruned or expanded nodes avoids a fresh allocation per branch. Each buffer
    is owned by exactly one live CostMatrix at a time.

    Attributes:
        size: Matrix dimension N.
        capacity: Maximum number of free buffers kept for reuse.
        allocated: Buffers created by the arena so far.
        reused: Acquisitions served from the free list.
    """

    def __init__(self, size: int, capacity: int = 256):
        self.size = size
        self.capacity = capacity
        self.allocated = 0
        self.reused = 0
        self._free: list[np.ndarray] = []

    def acquire(self) -> np.ndarray:
        if self._free:
            self.reused += 1
            return self._free.pop()
        self.allocated += 1
        return np.empty((self.size, self.size), dtype=np.int64)

    def release(self, buffer: np.ndarray) -> None:
        if buffer.shape != (self.size, self.size):
            raise ValueError(
                f"Buffer of shape {buffer.shape} does not belong to a {self.size}x{self.size} arena"
            )
        if len(self._free) < self.capacity:
            self._free.append(buffer)

    def __len__(self) -> int:
        return len(self._free)


class CostVector:
    """View over one row or one column of a CostMatrix.

    The view holds the fixed index and the fixed axis; the other axis varies over
    the *available* positions only. Indexing, iteration and ``len()`` therefore
    see just the live cells, in ascending position order. Availability is read
    from the matrix on every access, so a view never reports stale cells.

    Raises:
        NotAvailableError: If the row or column is (or becomes) unavailable.

    Examples:
        >>> matrix = CostMatrix(graph)
        >>> row = CostVector(matrix, Axis.ROW, 0)
        >>> len(row), row.minimum()
        (4, 10)
        >>> row.minimum(excluding=1)
        15
    """

    __slots__ = ("_matrix", "axis", "index")

    def __init__(self, matrix: CostMatrix, axis: Axis, index: int):
        self._matrix = matrix
        self.axis = axis
        self.index = index
        self._check_available()

    def _check_available(self) -> None:
        self._matrix._check_live()
        if self.axis is Axis.ROW:
            available = self._matrix.is_row_available(self.index)
        else:
            available = self._matrix.is_column_available(self.index)
        if not available:
            raise NotAvailableError(f"{self.axis.value.capitalize()} {self.index} is not available")

    def _positions(self) -> np.ndarray:
        self._check_available()
        if self.axis is Axis.ROW:
            return np.flatnonzero(self._matrix._column_available)
        return np.flatnonzero(self._matrix._row_available)

    def _values_at(self, positions: np.ndarray) -> np.ndarray:
        if self.axis is Axis.ROW:
            return self._matrix._costs[self.index, positions]
        return self._matrix._costs[positions, self.index]

    def positions(self) -> list[int]:
        """Indices along the varying axis that are currently available."""
        return self._positions().tolist()

    def values(self) -> np.ndarray:
        """Copy of the live cell costs, aligned with positions()."""
        return self._values_at(self._positions())

    def items(self) -> Iterator[tuple[int, int]]:
        positions = self._positions()
        return zip(positions.tolist(), self._values_at(positions).tolist())

    def edge_at(self, position: int) -> Edge:
        """Edge of the cell at ``position`` along the varying axis.

        Raises:
            NotAvailableError: If the position is unavailable or is the diagonal.
        """
        if position not in self.positions() or position == self.index:
            raise NotAvailableError(
                f"Position {position} of {self.axis.value} {self.index} has no edge"
            )
        if self.axis is Axis.ROW:
            return Edge(self.index, position)
        return Edge(position, self.index)

    def minimum(self, excluding: int | None = None) -> int:
        """Smallest live cost, optionally ignoring one position.

        Returns INFINITE_COST when no live cell remains.
        """
        positions = self._positions()
        values = self._values_at(positions)
        if excluding is not None:
            values = values[positions != excluding]
        if values.size == 0:
            return INFINITE_COST
        return int(values.min())

    def reduce(self) -> int:
        """Subtract the minimum live cost from every finite live cell.

        Returns:
            The amount subtracted, 0 for an empty or already reduced line, or
            INFINITE_COST when every live cell is infinite (nothing is changed).
        """
        positions = self._positions()
        values = self._values_at(positions)
        if values.size == 0:
            return 0
        smallest = int(values.min())
        if is_infinite(smallest):
            return INFINITE_COST
        if smallest > 0:
            finite = positions[values < INFINITE_COST]
            if self.axis is Axis.ROW:
                self._matrix._costs[self.index, finite] -= smallest
            else:
                self._matrix._costs[finite, self.index] -= smallest
        return smallest

    def __len__(self) -> int:
        return int(self._positions().size)

    def __iter__(self) -> Iterator[int]:
        return iter(self.values().tolist())

    def __getitem__(self, cell_num: int) -> int:
        return int(self.values()[cell_num])

    def __repr__(self) -> str:
        return f"CostVector({self.axis.value}={self.index}, cells={dict(self.items())})"


class CostMatrix:
    """N x N cost matrix with per-row and per-column availability.

    Built fresh from a graph and a set of branching decisions, or derived from a
    parent node's matrix with copy(). Each instance owns its storage; copies never
    alias. Cells hold int64 cost units with INFINITE_COST marking forbidden cells
    (the diagonal, missing edges, excluded edges and sub-tour closing edges).

    Args:
        graph: Source of the edge weights.
        include: Edges forced into the tour. Their rows and columns become
                 unavailable and the sub-tour closing cells are forbidden.
        exclude: Edges forced out of the tour (set to INFINITE_COST).
        arena: Optional buffer pool to draw storage from.

    Examples:
        >>> matrix = CostMatrix(graph)
        >>> matrix.reduce_matrix()
        70
        >>> matrix.size()
        4

    Note:
        Reading a cell, row or column that is unavailable raises
        NotAvailableError. Use is_row_available() / is_column_available() or the
        checked accessors get_row() / get_column() first.
    """

    __slots__ = ("_size", "_costs", "_row_available", "_column_available", "_arena")

    def __init__(
        self,
        graph: Graph,
        include: Iterable[Edge] = (),
        exclude: Iterable[Edge] = (),
        arena: MatrixArena | None = None,
    ):
        n = graph.size()
        self._size = n
        self._arena = arena
        self._costs: np.ndarray | None = self._allocate()
        np.copyto(self._costs, graph.weights)
        np.fill_diagonal(self._costs, INFINITE_COST)
        self._row_available = np.ones(n, dtype=bool)
        self._column_available = np.ones(n, dtype=bool)

        fragments = TourFragments(n)
        for edge in include:
            closing = fragments.add(edge)
            self.include_edge(edge)
            if closing is not None:
                self.forbid(closing)
        for edge in exclude:
            # An excluded edge whose row or column was later consumed is moot.
            if self._row_available[edge.row] and self._column_available[edge.column]:
                self.forbid(edge)

    def _allocate(self) -> np.ndarray:
        if self._arena is not None:
            return self._arena.acquire()
        return np.empty((self._size, self._size), dtype=np.int64)

    def _check_live(self) -> None:
        if self._costs is None:
            raise NotAvailableError("Cost matrix storage has been released")

    # ------------------------------------------------------------------
    # Shape and availability
    # ------------------------------------------------------------------

    def size(self) -> int:
        """Original dimension N; never shrinks."""
        return self._size

    def is_row_available(self, row_num: int) -> bool:
        return bool(self._row_available[row_num])

    def is_column_available(self, column_num: int) -> bool:
        return bool(self._column_available[column_num])

    def available_rows(self) -> list[int]:
        return np.flatnonzero(self._row_available).tolist()

    def available_columns(self) -> list[int]:
        return np.flatnonzero(self._column_available).tolist()

    @property
    def released(self) -> bool:
        return self._costs is None

    # ------------------------------------------------------------------
    # Cell access and views
    # ------------------------------------------------------------------

    def __getitem__(self, key: tuple[int, int]) -> int:
        row_num, column_num = key
        self._check_live()
        if not self._row_available[row_num]:
            raise NotAvailableError(f"Row {row_num} is not available")
        if not self._column_available[column_num]:
            raise NotAvailableError(f"Column {column_num} is not available")
        return int(self._costs[row_num, column_num])

    def get_row(self, row_num: int) -> CostVector | None:
        """Checked row view: None when the row is unavailable."""
        self._check_live()
        if not self._row_available[row_num]:
            return None
        return CostVector(self, Axis.ROW, row_num)

    def get_column(self, column_num: int) -> CostVector | None:
        """Checked column view: None when the column is unavailable."""
        self._check_live()
        if not self._column_available[column_num]:
            return None
        return CostVector(self, Axis.COLUMN, column_num)

    def cells(self) -> Iterator[tuple[Edge, int]]:
        """Yield (edge, cost) for every available off-diagonal cell, row-major."""
        self._check_live()
        columns = self.available_columns()
        for row_num in self.available_rows():
            for column_num in columns:
                if row_num != column_num:
                    yield Edge(row_num, column_num), int(self._costs[row_num, column_num])

    def __iter__(self) -> Iterator[tuple[Edge, int]]:
        return self.cells()

    def zero_cells(self) -> list[Edge]:
        """Available cells whose reduced cost is zero, in row-major order."""
        self._check_live()
        rows = np.flatnonzero(self._row_available)
        columns = np.flatnonzero(self._column_available)
        if rows.size == 0 or columns.size == 0:
            return []
        live = self._costs[np.ix_(rows, columns)]
        zero_rows, zero_columns = np.nonzero(live == 0)
        return [
            Edge(int(rows[r]), int(columns[c]))
            for r, c in zip(zero_rows.tolist(), zero_columns.tolist())
        ]

    def to_array(self) -> np.ndarray:
        """Copy of the full N x N storage, unavailable lines included."""
        self._check_live()
        return self._costs.copy()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def include_edge(self, edge: Edge) -> None:
        """Mark the edge's row and column as used up."""
        self._check_live()
        if not self._row_available[edge.row]:
            raise NotAvailableError(f"Row {edge.row} is not available")
        if not self._column_available[edge.column]:
            raise NotAvailableError(f"Column {edge.column} is not available")
        self._row_available[edge.row] = False
        self._column_available[edge.column] = False

    def forbid(self, edge: Edge) -> None:
        """Set a cell to INFINITE_COST (edge exclusion or sub-tour closure)."""
        self._check_live()
        if not self._row_available[edge.row]:
            raise NotAvailableError(f"Row {edge.row} is not available")
        if not self._column_available[edge.column]:
            raise NotAvailableError(f"Column {edge.column} is not available")
        self._costs[edge.row, edge.column] = INFINITE_COST

    def reduce_matrix(self) -> int:
        """Reduce every available row, then every available column.

        Returns:
            Total cost subtracted, or INFINITE_COST if some available row or
            column has no finite cell (the node is infeasible).
        """
        self._check_live()
        total = 0
        for row_num in self.available_rows():
            total = saturating_add(total, CostVector(self, Axis.ROW, row_num).reduce())
            if is_infinite(total):
                return INFINITE_COST
        for column_num in self.available_columns():
            total = saturating_add(total, CostVector(self, Axis.COLUMN, column_num).reduce())
            if is_infinite(total):
                return INFINITE_COST
        return total

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def copy(self) -> CostMatrix:
        """Independent snapshot sharing only the arena."""
        self._check_live()
        clone = CostMatrix.__new__(CostMatrix)
        clone._size = self._size
        clone._arena = self._arena
        clone._costs = clone._allocate()
        np.copyto(clone._costs, self._costs)
        clone._row_available = self._row_available.copy()
        clone._column_available = self._column_available.copy()
        return clone

    def release(self) -> None:
        """Return the storage to the arena. Further access raises NotAvailableError."""
        if self._costs is None:
            return
        if self._arena is not None:
            self._arena.release(self._costs)
        self._costs = None

    def __repr__(self) -> str:
        if self._costs is None:
            return f"CostMatrix(size={self._size}, released)"
        return (
            f"CostMatrix(size={self._size}, rows={self.available_rows()}, "
            f"columns={self.available_columns()})"
        )
