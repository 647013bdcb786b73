"""Example demonstrating progress reporting for longer branch-and-bound solves."""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from little_tsp import ProgressInfo, SolverOptions, build_graph, solve_tsp  # noqa: E402


def main() -> None:
    """Solve a random asymmetric instance while printing search progress."""

    print("=" * 70)
    print("PROGRESS REPORTING DEMONSTRATION")
    print("=" * 70)

    cities = 14
    rng = np.random.default_rng(seed=7)
    weights = rng.integers(1, 100, size=(cities, cities))
    graph = build_graph(weights.tolist())
    print(f"\nRandom asymmetric instance: {cities} cities, weights in [1, 99]")

    def progress_callback(info: ProgressInfo) -> None:
        incumbent = "-" if info.incumbent_cost is None else str(info.incumbent_cost)
        print(
            f"\rExpanded: {info.nodes_expanded:7d} | "
            f"Frontier: {info.frontier_size:6d} | "
            f"Bound: {info.best_bound:6d} | "
            f"Incumbent: {incumbent:>6s} | "
            f"Time: {info.elapsed_time:6.2f}s",
            end="",
            flush=True,
        )

    print("\nSolving with progress reporting...")
    print("-" * 70)

    result = solve_tsp(
        graph,
        options=SolverOptions(time_limit=60.0),
        progress_callback=progress_callback,
        progress_interval=25,
    )

    print()
    print("-" * 70)
    print("\nSolution found:")
    print(f"  Status: {result.status}")
    print(f"  Cost: {result.cost}")
    print(f"  Lower bound: {result.lower_bound}")
    print(f"  Tour: {result.tour}")
    print(f"  Nodes expanded: {result.nodes_expanded}")
    print(f"  Nodes pruned: {result.nodes_pruned}")
    print(f"  Peak frontier size: {result.max_frontier_size}")


if __name__ == "__main__":
    main()
