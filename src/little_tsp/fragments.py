"""Path bookkeeping for forced edges.

Edges forced into the tour join cities into vertex-disjoint paths ("fragments").
Including an edge that links the end of one fragment to the start of another
merges them; the edge from the merged fragment's end back to its start would
then close a sub-tour and must be forbidden until the fragment spans every city.
"""

from __future__ import annotations

from .data import Edge
from .exceptions import InvariantViolationError


class TourFragments:
    """Tracks the start and end of every path formed by included edges.

    Only fragment endpoints are stored: ``start_of[end]`` and ``end_of[start]``.
    Cities not touched by any included edge are implicit single-city fragments.

    Examples:
        >>> fragments = TourFragments(5)
        >>> fragments.add(Edge(0, 1))
        Edge(row=1, column=0)
        >>> fragments.add(Edge(1, 2))
        Edge(row=2, column=0)
    """

    __slots__ = ("city_count", "edge_count", "_start_of", "_end_of")

    def __init__(self, city_count: int):
        self.city_count = city_count
        self.edge_count = 0
        self._start_of: dict[int, int] = {}
        self._end_of: dict[int, int] = {}

    def copy(self) -> TourFragments:
        clone = TourFragments(self.city_count)
        clone.edge_count = self.edge_count
        clone._start_of = dict(self._start_of)
        clone._end_of = dict(self._end_of)
        return clone

    def start_of(self, city: int) -> int:
        """Start of the fragment ending at ``city`` (``city`` itself if none)."""
        return self._start_of.get(city, city)

    def end_of(self, city: int) -> int:
        """End of the fragment starting at ``city`` (``city`` itself if none)."""
        return self._end_of.get(city, city)

    def closes_subtour(self, edge: Edge) -> bool:
        """True if including ``edge`` would close a cycle shorter than a full tour."""
        closes = self.start_of(edge.row) == edge.column
        return closes and self.edge_count + 1 < self.city_count

    def add(self, edge: Edge) -> Edge | None:
        """Record a forced edge and return the closing edge to forbid, if any.

        Returns:
            The edge from the merged fragment's end back to its start while the
            fragment is still shorter than a full tour, otherwise None.

        Raises:
            InvariantViolationError: If the edge would close a premature sub-tour.
        """
        if self.closes_subtour(edge):
            raise InvariantViolationError(
                f"Including edge {edge.row} -> {edge.column} closes a sub-tour of "
                f"{self.edge_count + 1} edges over {self.city_count} cities."
            )
        start = self._start_of.pop(edge.row, edge.row)
        end = self._end_of.pop(edge.column, edge.column)
        self.edge_count += 1
        if self.edge_count == self.city_count:
            # The tour is complete; no fragment remains open.
            self._start_of.clear()
            self._end_of.clear()
            return None
        self._end_of[start] = end
        self._start_of[end] = start
        if self.edge_count < self.city_count - 1:
            return Edge(end, start)
        return None

    def fragments(self) -> list[tuple[int, int]]:
        """(start, end) pairs of all fragments with at least one edge, sorted by start."""
        return sorted(self._end_of.items())
