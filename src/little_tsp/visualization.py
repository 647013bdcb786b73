"""Visualization utilities for TSP instances and tours.

This module draws a graph and a solved tour using matplotlib and networkx.

Example:
    >>> from little_tsp import visualize_graph, visualize_tour
    >>>
    >>> fig = visualize_graph(graph)
    >>> fig.savefig("graph.png")
    >>>
    >>> fig = visualize_tour(graph, result)
    >>> fig.savefig("tour.png")
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .data import Graph, TourResult

logger = logging.getLogger(__name__)

# Check for optional dependencies
try:
    import matplotlib.pyplot as plt
    import networkx as nx  # type: ignore[import-untyped,unused-ignore]
    from matplotlib.figure import Figure

    _HAS_VISUALIZATION_DEPS = True
except ImportError:
    _HAS_VISUALIZATION_DEPS = False
    Figure = Any  # type: ignore[misc, assignment]


def _check_dependencies() -> None:
    """Check if visualization dependencies are installed."""
    if not _HAS_VISUALIZATION_DEPS:
        msg = (
            "Visualization requires optional dependencies. "
            "Install with: pip install 'little-tsp[visualization]'"
        )
        raise ImportError(msg)


def _to_networkx(graph: Graph) -> Any:
    G = nx.DiGraph()
    n = graph.size()
    for city in range(n):
        G.add_node(graph.label(city))
    for row in range(n):
        for column in range(n):
            if graph.has_edge(row, column):
                G.add_edge(
                    graph.label(row),
                    graph.label(column),
                    weight=graph.to_objective(graph.weight(row, column)),
                )
    return G


def _layout(
    G: Any,
    layout: str,
    coordinates: Mapping[str, tuple[float, float]] | None,
) -> dict[Any, Any]:
    if coordinates is not None:
        missing = [node for node in G.nodes() if node not in coordinates]
        if not missing:
            return {node: coordinates[node] for node in G.nodes()}
        logger.warning(f"Coordinates missing for cities {missing}, using '{layout}' layout")

    layout_funcs = {
        "spring": nx.spring_layout,
        "circular": nx.circular_layout,
        "kamada_kawai": nx.kamada_kawai_layout,
        "shell": nx.shell_layout,
    }
    if layout not in layout_funcs:
        logger.warning(f"Unknown layout '{layout}', using 'circular'")
        layout = "circular"
    try:
        return layout_funcs[layout](G)
    except Exception as e:
        logger.warning(f"Layout '{layout}' failed: {e}, using 'circular'")
        return nx.circular_layout(G)


def _format_weight(value: float) -> str:
    return f"{value:.0f}" if float(value).is_integer() else f"{value:g}"


def visualize_graph(
    graph: Graph,
    layout: str = "circular",
    coordinates: Mapping[str, tuple[float, float]] | None = None,
    figsize: tuple[float, float] = (10, 8),
    node_size: int = 900,
    font_size: int = 10,
    show_weights: bool = True,
    title: str | None = None,
) -> Figure:
    """Visualize a TSP instance: every city and every finite edge with its weight.

    Args:
        graph: Graph to draw.
        layout: Layout algorithm ("circular", "spring", "kamada_kawai", "shell")
                used when no coordinates are given.
        coordinates: Optional mapping from city label to (x, y) position.
        figsize: Figure size (width, height) in inches
        node_size: Size of city markers
        font_size: Font size for labels
        show_weights: Whether to label edges with their weights
        title: Custom title for the plot (default: "TSP Instance (N cities)")

    Returns:
        matplotlib Figure object

    Raises:
        ImportError: If matplotlib or networkx is not installed

    See Also:
        visualize_tour() - Highlight a solved tour
    """
    _check_dependencies()

    G = _to_networkx(graph)
    fig, ax = plt.subplots(figsize=figsize)
    pos = _layout(G, layout, coordinates)

    nx.draw_networkx_nodes(G, pos, node_color="lightblue", node_size=node_size, ax=ax)
    nx.draw_networkx_edges(
        G,
        pos,
        edge_color="gray",
        arrows=True,
        arrowsize=15,
        ax=ax,
        connectionstyle="arc3,rad=0.1",
    )
    nx.draw_networkx_labels(G, pos, font_size=font_size, ax=ax)

    if show_weights:
        edge_labels = {
            (tail, head): _format_weight(data["weight"]) for tail, head, data in G.edges(data=True)
        }
        nx.draw_networkx_edge_labels(
            G, pos, edge_labels=edge_labels, font_size=font_size - 2, ax=ax, label_pos=0.3
        )

    ax.set_title(title or f"TSP Instance ({graph.size()} cities)", fontsize=14, fontweight="bold")
    ax.axis("off")

    plt.tight_layout()
    return fig


def visualize_tour(
    graph: Graph,
    result: TourResult,
    coordinates: Mapping[str, tuple[float, float]] | None = None,
    layout: str = "circular",
    figsize: tuple[float, float] = (10, 8),
    node_size: int = 900,
    font_size: int = 10,
    show_unused_edges: bool = True,
    title: str | None = None,
) -> Figure:
    """Visualize a solved tour on top of its graph.

    Tour edges are drawn in red with their weights; the remaining edges are
    drawn faintly in gray. The start city is highlighted.

    Args:
        graph: Graph the tour was solved on.
        result: TourResult returned by solve_tsp().
        coordinates: Optional mapping from city label to (x, y) position.
        layout: Layout algorithm used when no coordinates are given.
        figsize: Figure size (width, height) in inches
        node_size: Size of city markers
        font_size: Font size for labels
        show_unused_edges: Whether to draw edges that are not part of the tour
        title: Custom title (default includes status and cost)

    Returns:
        matplotlib Figure object

    Raises:
        ImportError: If matplotlib or networkx is not installed
        ValueError: If the result has no tour

    Examples:
        >>> result = solve_tsp(graph)
        >>> fig = visualize_tour(graph, result)
        >>> fig.savefig("tour.png")
    """
    _check_dependencies()

    if result.tour is None:
        raise ValueError(f"Result has no tour to draw (status={result.status!r}).")

    G = _to_networkx(graph)
    fig, ax = plt.subplots(figsize=figsize)
    pos = _layout(G, layout, coordinates)

    tour_edges = [(graph.label(edge.row), graph.label(edge.column)) for edge in result.edges]
    start = graph.label(result.tour[0])
    others = [node for node in G.nodes() if node != start]

    nx.draw_networkx_nodes(G, pos, nodelist=[start], node_color="gold", node_size=node_size, ax=ax)
    nx.draw_networkx_nodes(
        G, pos, nodelist=others, node_color="lightblue", node_size=node_size, ax=ax
    )

    if show_unused_edges:
        tour_set = set(tour_edges)
        unused = [edge for edge in G.edges() if edge not in tour_set]
        nx.draw_networkx_edges(
            G,
            pos,
            edgelist=unused,
            edge_color="lightgray",
            alpha=0.5,
            arrows=True,
            arrowsize=10,
            ax=ax,
            connectionstyle="arc3,rad=0.1",
        )
    nx.draw_networkx_edges(
        G,
        pos,
        edgelist=tour_edges,
        edge_color="red",
        width=2.5,
        arrows=True,
        arrowsize=20,
        ax=ax,
        connectionstyle="arc3,rad=0.1",
    )
    nx.draw_networkx_labels(G, pos, font_size=font_size, ax=ax)
    edge_labels = {
        (tail, head): _format_weight(G.edges[tail, head]["weight"]) for tail, head in tour_edges
    }
    nx.draw_networkx_edge_labels(
        G, pos, edge_labels=edge_labels, font_size=font_size - 2, ax=ax, label_pos=0.3
    )

    cost = _format_weight(result.objective) if result.objective is not None else "n/a"
    ax.set_title(
        title or f"TSP Tour (status: {result.status}, cost: {cost})",
        fontsize=14,
        fontweight="bold",
    )
    ax.axis("off")

    plt.tight_layout()
    return fig
