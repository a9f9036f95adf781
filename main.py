# main.py
from input import InputError, parse_file, parse_matrix
from graph import Edge, Graph, GraphError
from generator import DEFAULT_MAX_ATTEMPTS, InvalidParametersError, generate_graph
from solver import EulerianTrailError, solve_eulerian, trail_vertices

import argparse
import json
import logging
import random
import sys
import time
from typing import Dict, List, Optional

from tqdm import tqdm

# ============================================================
# Default params
# ============================================================
DEFAULT_NODES = 5
DEFAULT_EDGES = 6
DEFAULT_PRINT_LIMIT = 100

# ============================================================
# CLI & Logging
# ============================================================
def build_argparser():
    p = argparse.ArgumentParser(description="Eulerian trail generator/solver")

    # Graph source: file, inline matrix, or random generation
    src = p.add_mutually_exclusive_group()
    src.add_argument("-i", "--input", help="Path to a graph file (.json, .xlsx or matrix text)")
    src.add_argument("--matrix", help='Adjacency matrix, e.g. "0,1,0;1,0,1;0,1,0"')

    # Generation parameters
    p.add_argument("--nodes", type=int, default=DEFAULT_NODES)
    p.add_argument("--edges", type=int, default=DEFAULT_EDGES)
    p.add_argument("--no-require-solution", dest="require_solution", action="store_false",
                   help="Generate an unconstrained random graph (may have no Eulerian trail)")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--max-attempts", type=int, default=DEFAULT_MAX_ATTEMPTS)
    p.add_argument("--trials", type=int, default=0,
                   help="Generate and solve this many graphs, then report the success count")

    # Export & logs
    p.add_argument("--save-graph", help="Write the graph as JSON to this path")
    p.add_argument("--export", help="Output path for the trail (JSON/CSV)")
    p.add_argument("--export-format", choices=["json", "csv"], default="json")
    p.add_argument("-v", "--verbose", action="count", default=1)
    # verbosity: 0=warning, 1=info, 2=debug

    # Print route options
    p.add_argument("--print-route", action="store_true", help="Print the computed trail")
    p.add_argument("--print-full-route", action="store_true", help="Print the full trail (can be long!)")
    p.add_argument("--print-limit", type=int, default=DEFAULT_PRINT_LIMIT)
    p.add_argument("--print-edges", action="store_true")

    return p


def configure_logging(verbosity: int):
    """Configure logging level based on verbosity.
    Parameters
    ----------
    verbosity : int
        0 = warning, 1 = info, 2 = debug
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S",
    )

# ============================================================
# Graph source
# ============================================================
def load_graph(args, rng: random.Random) -> Graph:
    '''
    Load the graph from --input/--matrix, or generate one.
    '''
    if args.input:
        logging.info(f"Reading graph from {args.input}")
        return parse_file(args.input)
    if args.matrix:
        return parse_matrix(args.matrix)
    return generate_graph(args.nodes, args.edges, args.require_solution,
                          rng=rng, max_attempts=args.max_attempts)


def run_trials(args, rng: random.Random) -> Dict:
    '''
    Generate and solve args.trials random graphs, counting solved ones.
    '''
    solved, infeasible = 0, 0
    for _ in tqdm(range(args.trials), desc=f"trials (n={args.nodes}, m={args.edges})"):
        graph = generate_graph(args.nodes, args.edges, args.require_solution,
                               rng=rng, max_attempts=args.max_attempts)
        try:
            solve_eulerian(graph)
            solved += 1
        except EulerianTrailError as exc:
            logging.debug(f"Trial graph has no trail: {exc}")
            infeasible += 1
    return {"trials": args.trials, "solved": solved, "infeasible": infeasible}

# ============================================================
# Route & printing utils
# ============================================================
def print_route_to_console(trail: List[Edge], start: Optional[str], print_edges: bool = False,
                           limit: int = DEFAULT_PRINT_LIMIT, full: bool = False):
    '''
    Print route to console, either as list of edges or list of vertices.
    If full is False and route is longer than limit, print head and tail with ellipsis.
    '''
    if not trail:
        print("Route: <empty>"); return
    if print_edges:
        eds = [e.id for e in trail]
        print(f"Route (edges) count = {len(eds)}")
        if full or len(eds) <= limit: print(eds)
        else:
            head, tail = eds[: limit//2], eds[-(limit - limit//2):]
            print(head + ["..."] + tail)
    else:
        walk = trail_vertices(trail, start)
        print(f"Route (nodes) length = {len(walk)}")
        if full or len(walk) <= limit: print(walk)
        else:
            head, tail = walk[: limit//2], walk[-(limit - limit//2):]
            print(head + ["..."] + tail)


def print_summary(meta: Dict, graph: Graph):
    '''
    Print solution summary to the console.
    '''
    print("\n=== Solution Summary ===")
    print(f"Resolution mode        : {meta.get('mode')}")
    print(f"Total vertices         : {len(graph.nodes)}")
    print(f"Total edges            : {len(graph.edges)}")
    print(f"Odd-degree vertices (k): {meta.get('k')}")
    print(f"Start / end            : {meta.get('start')} -> {meta.get('end')}")
    print(f"Final trail length     : {meta.get('edges')}")
    print(f"Total time             : {meta.get('total_time_sec')} s")
    print("========================\n")

# ============================================================
# Export
# ============================================================
def export_trail(path: Optional[str], trail: List[Edge], meta: Dict, fmt: str = "json"):
    '''
    Export trail and meta to file in JSON or CSV format.
    '''
    if not path: return
    walk = trail_vertices(trail, meta["start"]) if trail else []
    if fmt == "json":
        rows = [{"id": e.id, "source": e.source, "target": e.target} for e in trail]
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"trail": rows, "nodes": walk, "meta": meta}, f, ensure_ascii=False, indent=2)
    else:
        with open(path, "w", encoding="utf-8") as f:
            f.write("step,edge,from,to\n")
            for i, e in enumerate(trail):
                f.write(f"{i + 1},{e.id},{walk[i]},{walk[i + 1]}\n")
    logging.info(f"Trail exported to {path}")


def save_graph(path: Optional[str], graph: Graph):
    if not path: return
    with open(path, "w", encoding="utf-8") as f:
        json.dump(graph.to_dict(), f, ensure_ascii=False, indent=2)
    logging.info(f"Graph saved to {path}")

# ============================================================
# Main
# ============================================================
def main(argv=None) -> int:
    args = build_argparser().parse_args(argv)
    configure_logging(args.verbose)
    rng = random.Random(args.seed)

    try:
        if args.trials > 0:
            stats = run_trials(args, rng)
            print(f"Solved {stats['solved']}/{stats['trials']} graphs ({stats['infeasible']} without trail)")
            return 0

        graph = load_graph(args, rng)
        save_graph(args.save_graph, graph)

        t0 = time.time()
        trail, meta = solve_eulerian(graph)
        meta["total_time_sec"] = round(time.time() - t0, 3)
    except (InvalidParametersError, InputError, GraphError, EulerianTrailError) as exc:
        logging.error(str(exc))
        return 1

    print_summary(meta, graph)

    if args.print_route:
        print_route_to_console(trail, meta["start"], print_edges=args.print_edges,
                               limit=args.print_limit, full=args.print_full_route)

    if args.export:
        export_trail(args.export, trail, meta, fmt=args.export_format)

    return 0


if __name__=="__main__":
    sys.exit(main())
