"""Visualization example for TSP instances and tours.

Requires optional visualization dependencies:
    pip install 'little-tsp[visualization]'
"""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from little_tsp import build_graph, solve_tsp, visualize_graph, visualize_tour  # noqa: E402


def main() -> None:
    rng = np.random.default_rng(seed=3)
    points = rng.uniform(0, 10, size=(8, 2))
    distances = np.linalg.norm(points[:, None, :] - points[None, :, :], axis=-1).round(1)
    labels = [f"c{idx}" for idx in range(len(points))]
    graph = build_graph(distances.tolist(), labels=labels, precision=1)
    coordinates = {label: (float(x), float(y)) for label, (x, y) in zip(labels, points)}

    result = solve_tsp(graph)
    print(f"Status: {result.status}, length: {result.objective}")

    try:
        fig = visualize_graph(graph, coordinates=coordinates, show_weights=False)
        fig.savefig("tsp_graph.png", dpi=150, bbox_inches="tight")
        print("Saved: tsp_graph.png")

        fig = visualize_tour(graph, result, coordinates=coordinates)
        fig.savefig("tsp_tour.png", dpi=150, bbox_inches="tight")
        print("Saved: tsp_tour.png")
    except ImportError as e:
        print("Error: Visualization dependencies not installed")
        print("Install with: pip install 'little-tsp[visualization]'")
        print(f"Details: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
