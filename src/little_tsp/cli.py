"""Command line interface: ``little-tsp problem.json --mode opt``."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from .data import Graph, ProgramMode, SolverOptions, TourResult
from .exceptions import InvalidGraphError, SolverConfigurationError
from .solver import load_graph, save_result, solve_tsp

logger = logging.getLogger(__name__)

_MODE_ALIASES = {
    "opt": ProgramMode.OPTTSP,
    "opttsp": ProgramMode.OPTTSP,
    "naive": ProgramMode.NAIVETSP,
    "naivetsp": ProgramMode.NAIVETSP,
}


def check_mode(value: str) -> ProgramMode:
    """argparse type converting a mode name to a ProgramMode.

    Examples:
        >>> check_mode("OPT")
        <ProgramMode.OPTTSP: 'opttsp'>
    """
    mode = _MODE_ALIASES.get(str(value).strip().lower())
    if mode is None:
        raise argparse.ArgumentTypeError(
            f"invalid mode {value!r} (choose from 'opt', 'opttsp', 'naive', 'naivetsp')"
        )
    return mode


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="little-tsp",
        description="Solve a traveling salesman problem exactly with Little's branch-and-bound",
    )
    parser.add_argument("input", help="Path to the JSON problem file")
    parser.add_argument(
        "-m",
        "--mode",
        type=check_mode,
        default=ProgramMode.NOT_SET,
        help="Algorithm: 'opt' (branch-and-bound) or 'naive' (exhaustive enumeration)",
    )
    parser.add_argument("-o", "--output", help="Write the result to this JSON file")
    parser.add_argument(
        "--max-nodes",
        type=int,
        default=None,
        help="Stop after expanding this many search nodes",
    )
    parser.add_argument(
        "--time-limit",
        type=float,
        default=None,
        help="Stop after this many seconds",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG)",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def _configure_logging(verbose: int) -> None:
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)-8s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def format_result(source: str, graph: Graph, result: TourResult) -> str:
    """One-line summary: ``Solved <file>: status=..., cost=..., tour=A -> B -> A``."""
    if result.tour is None:
        return f"Solved {source}: status={result.status}, cost=none, tour=none"
    cost = result.cost if graph.precision == 0 else result.objective
    names = [graph.label(city) for city in result.tour]
    tour = " -> ".join([*names, names[0]])
    return f"Solved {source}: status={result.status}, cost={cost}, tour={tour}"


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        0 when a tour was found, 1 when no tour was found, 2 on invalid input
        or configuration.
    """
    args = parse_args(argv)
    _configure_logging(args.verbose)

    if args.mode is ProgramMode.NOT_SET:
        print(
            "little-tsp: error: program mode not set (use --mode opt or --mode naive)",
            file=sys.stderr,
        )
        return 2

    try:
        options = SolverOptions(max_nodes=args.max_nodes, time_limit=args.time_limit)
        graph = load_graph(args.input)
        result = solve_tsp(graph, options=options, mode=args.mode)
    except (InvalidGraphError, SolverConfigurationError, OSError) as exc:
        print(f"little-tsp: error: {exc}", file=sys.stderr)
        return 2

    if args.output:
        save_result(args.output, result, graph)
        logger.info("Result written", extra={"path": args.output})

    print(format_result(args.input, graph, result))
    return 0 if result.has_tour else 1


if __name__ == "__main__":
    sys.exit(main())
