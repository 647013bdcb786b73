"""Example script demonstrating usage of the Little branch-and-bound TSP solver."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from little_tsp import load_graph, save_result, solve_tsp  # noqa: E402


def main() -> None:
    base_dir = Path(__file__).resolve().parent
    problem_path = base_dir / "sample_problem.json"
    output_path = base_dir / "sample_solution.json"

    graph = load_graph(problem_path)
    result = solve_tsp(graph)
    save_result(output_path, result, graph)

    print(f"Solved {problem_path.name}: status={result.status}, cost={result.cost}")

    if result.has_tour:
        print("\nTour:")
        for edge in result.edges:
            print(
                f"  {graph.label(edge.row)} -> {graph.label(edge.column)}: "
                f"{graph.weight(edge.row, edge.column)}"
            )
        print(
            f"\nSearch: {result.nodes_expanded} expanded, {result.nodes_pruned} pruned, "
            f"{result.nodes_infeasible} infeasible"
        )


if __name__ == "__main__":
    main()
