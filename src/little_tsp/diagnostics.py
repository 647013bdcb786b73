"""Search diagnostics for the branch-and-bound solver.

This module provides a monitor that counts what happened to search nodes and
records the evolution of the incumbent and the global lower bound, which is
useful for spotting slow convergence (a wide, persistent gap between the two).
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from .data import is_infinite


@dataclass
class SearchMonitor:
    """Monitors branch-and-bound progress.

    Tracks:
    - Node outcomes: expanded, pruned by bound, discarded as infeasible
    - Incumbent improvements (cost and the expansion count when found)
    - Recent global lower bounds, to measure the optimality gap

    Attributes:
        window_size: Number of recent bound samples to keep

    Examples:
        >>> monitor = SearchMonitor(window_size=100)
        >>> monitor.record_expansion(bound=70)
        >>> monitor.record_incumbent(cost=80)
        >>> monitor.gap()
        0.125
    """

    window_size: int = 100

    nodes_expanded: int = 0
    nodes_pruned: int = 0
    nodes_infeasible: int = 0
    incumbent_history: list[tuple[int, int]] = field(default_factory=list)
    bound_history: deque[int] = field(default_factory=lambda: deque(maxlen=100))

    def __post_init__(self) -> None:
        """Initialize history with correct maxlen."""
        self.bound_history = deque(maxlen=self.window_size)

    def record_expansion(self, bound: int) -> None:
        self.nodes_expanded += 1
        self.bound_history.append(bound)

    def record_pruned(self, count: int = 1) -> None:
        self.nodes_pruned += count

    def record_infeasible(self, count: int = 1) -> None:
        self.nodes_infeasible += count

    def record_incumbent(self, cost: int) -> None:
        self.incumbent_history.append((self.nodes_expanded, cost))

    @property
    def incumbent_cost(self) -> int | None:
        if not self.incumbent_history:
            return None
        return self.incumbent_history[-1][1]

    @property
    def last_bound(self) -> int | None:
        if not self.bound_history:
            return None
        return self.bound_history[-1]

    def gap(self) -> float | None:
        """Relative gap between the incumbent and the latest expanded bound.

        Returns:
            (incumbent - bound) / incumbent, 0.0 for a zero-cost incumbent, or
            None when either value is unknown.
        """
        incumbent = self.incumbent_cost
        bound = self.last_bound
        if incumbent is None or bound is None or is_infinite(bound):
            return None
        if incumbent == 0:
            return 0.0
        return max(0, incumbent - bound) / incumbent

    def summary(self) -> dict[str, int | float | None]:
        return {
            "nodes_expanded": self.nodes_expanded,
            "nodes_pruned": self.nodes_pruned,
            "nodes_infeasible": self.nodes_infeasible,
            "incumbent_updates": len(self.incumbent_history),
            "incumbent_cost": self.incumbent_cost,
            "gap": self.gap(),
        }
