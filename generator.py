# generator.py
import logging
import random
from collections import defaultdict
from itertools import combinations
from typing import Iterable, List, Optional, Set, Tuple

from graph import Edge, Graph, Node

# ============================================================
# Default params
# ============================================================
DEFAULT_MAX_ATTEMPTS = 20000 # candidate draws before giving up
RESTART_AFTER = 100 # consecutive rejections before restarting from the seed path
# (nodes, edges) within max_edges that the seed path cannot reach: with 4 nodes
# the free pairs are 1-3, 1-4, 2-4 and any two of them leave an interior node odd
UNREACHABLE_SOLVABLE = {(4, 5)}


class InvalidParametersError(ValueError):
    '''
    Raised when node/edge counts violate the bounds of the requested mode.
    '''


class GenerationError(InvalidParametersError):
    '''
    Raised when rejection sampling runs out of attempts.
    '''


# ============================================================
# Parameter bounds
# ============================================================
def max_edges(node_count: int, require_solution: bool) -> int:
    '''
    Largest edge count allowed for node_count nodes.

    Without the solvability requirement this is the simple-graph bound n(n-1)/2.
    With it, the seed path (n-1 edges) plus two edges per pair of interior nodes,
    which keeps every interior node at even degree.
    '''
    simple = node_count * (node_count - 1) // 2
    if not require_solution:
        return simple
    return min(simple, (node_count - 1) + 2 * max(0, (node_count - 2) // 2))


def validate_parameters(node_count: int, edge_count: int, require_solution: bool):
    if node_count < 1:
        raise InvalidParametersError(f"Node count must be at least 1, got {node_count}")
    if edge_count < 0:
        raise InvalidParametersError(f"Edge count must be non-negative, got {edge_count}")
    if node_count > 1 and edge_count < node_count - 1:
        raise InvalidParametersError(
            f"{node_count} nodes need at least {node_count - 1} edges, got {edge_count}"
        )
    upper = max_edges(node_count, require_solution)
    if edge_count > upper:
        raise InvalidParametersError(
            f"{node_count} nodes allow at most {upper} edges"
            f"{' with a guaranteed Eulerian trail' if require_solution else ''}, got {edge_count}"
        )
    if require_solution and (node_count, edge_count) in UNREACHABLE_SOLVABLE:
        raise InvalidParametersError(
            f"{node_count} nodes cannot have exactly {edge_count} edges with a guaranteed Eulerian trail"
        )


# ============================================================
# Rejection sampling
# ============================================================
def keeps_parity(degrees: List[int], walk: List[int], endpoints: Set[int]) -> bool:
    '''
    True if adding the edges of walk leaves every non-endpoint vertex at even degree.

    Walks from sample_candidate always pass: a cycle or an endpoint-to-endpoint
    chain adds an even count to every vertex it passes through. The check
    states the acceptance rule for any candidate, it does not filter those.
    '''
    delta = defaultdict(int)
    for u, v in zip(walk, walk[1:]):
        delta[u] += 1
        delta[v] += 1
    return all((degrees[u] + d) % 2 == 0 for u, d in delta.items() if u not in endpoints)


def sample_candidate(rng: random.Random, n: int, remaining: int) -> List[int]:
    '''
    Draw a random walk of at most `remaining` edges that can keep the interior
    vertices even: a cycle over distinct vertices, or a chain joining vertex 0
    to vertex n-1. A chain of length 1 is the single pair (0, n-1).
    '''
    longest_cycle = min(remaining, n)
    if longest_cycle >= 3 and rng.random() < 0.5:
        walk = rng.sample(range(n), rng.randint(3, longest_cycle))
        return walk + [walk[0]]
    length = rng.randint(1, min(remaining, n - 1))
    middle = rng.sample(range(1, n - 1), length - 1)
    return [0] + middle + [n - 1]


def _new_pairs(walk: List[int], pairs: Set[frozenset]) -> Optional[List[frozenset]]:
    '''
    Pairs of walk if none of them exists yet (nor repeats), else None.
    '''
    candidate = [frozenset((u, v)) for u, v in zip(walk, walk[1:])]
    if len(set(candidate)) != len(candidate) or any(p in pairs for p in candidate):
        return None
    return candidate


def _solvable_edges(rng: random.Random, n: int, m: int, max_attempts: int) -> List[Tuple[int, int]]:
    '''
    Seed a Hamiltonian path 0-1-...-(n-1), then add random parity-safe walks
    until m edges exist. Only vertices 0 and n-1 may end with odd degree.
    '''
    seed = [(i, i + 1) for i in range(n - 1)]
    endpoints = {0, n - 1}

    def reset():
        degrees = [2] * n
        degrees[0] = degrees[-1] = 1 if n > 1 else 0
        return list(seed), {frozenset(p) for p in seed}, degrees

    edges, pairs, degrees = reset()
    attempts, rejected = 0, 0
    while len(edges) < m:
        if attempts >= max_attempts:
            raise GenerationError(
                f"Could not place {m} edges on {n} nodes with a guaranteed Eulerian trail "
                f"after {attempts} attempts"
            )
        attempts += 1
        if rejected >= RESTART_AFTER:
            logging.debug(f"Restarting from seed path after {rejected} rejections ({len(edges)}/{m} edges)")
            edges, pairs, degrees = reset()
            rejected = 0
        walk = sample_candidate(rng, n, m - len(edges))
        new = _new_pairs(walk, pairs)
        if new is None or not keeps_parity(degrees, walk, endpoints):
            rejected += 1
            continue
        for u, v in zip(walk, walk[1:]):
            edges.append((u, v))
            degrees[u] += 1
            degrees[v] += 1
        pairs.update(new)
        rejected = 0
    logging.debug(f"Solvable graph built after {attempts} candidate draws")
    return edges


def _random_edges(rng: random.Random, n: int, m: int, max_attempts: int) -> List[Tuple[int, int]]:
    '''
    Sample random unconnected pairs until m edges exist. Once max_attempts draws
    are spent, the missing edges are taken from the shuffled remaining pairs.
    '''
    edges, pairs = [], set()
    attempts = 0
    while len(edges) < m and attempts < max_attempts:
        attempts += 1
        u, v = rng.randrange(n), rng.randrange(n)
        if u == v or frozenset((u, v)) in pairs:
            continue
        edges.append((u, v))
        pairs.add(frozenset((u, v)))
    if len(edges) < m:
        logging.info(f"Random sampling stopped after {attempts} attempts, filling {m - len(edges)} edges directly")
        missing = [(u, v) for u, v in combinations(range(n), 2) if frozenset((u, v)) not in pairs]
        rng.shuffle(missing)
        edges.extend(missing[: m - len(edges)])
    return edges


def build_graph(node_count: int, index_edges: Iterable[Tuple[int, int]]) -> Graph:
    '''
    Build a Graph with node ids "1".."n" and edge ids "e1".."em" from 0-based index pairs.
    '''
    nodes = [Node(str(i + 1)) for i in range(node_count)]
    edges = [Edge(f"e{k}", str(u + 1), str(v + 1)) for k, (u, v) in enumerate(index_edges, start=1)]
    return Graph(nodes, edges)


def generate_graph(node_count: int, edge_count: int, require_solution: bool = True,
                   rng: Optional[random.Random] = None,
                   max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> Graph:
    '''
    Generate a random simple graph with node_count nodes and edge_count edges.

    Parameters
    ----------
    node_count : int
        Number of nodes, at least 1.
    edge_count : int
        Exact number of edges.
    require_solution : bool
        If True the graph is connected and only its first and last nodes may
        have odd degree, so an Eulerian trail always exists.
    rng : random.Random, optional
        Random source. A fresh unseeded one is used if not given.
    max_attempts : int
        Number of random draws before giving up (solvable mode) or filling
        the rest directly (unconstrained mode).

    Raises
    ------
    InvalidParametersError
        If the counts are out of bounds for the requested mode.
    GenerationError
        If no solvable graph was found within max_attempts draws.
    '''
    validate_parameters(node_count, edge_count, require_solution)
    if rng is None:
        rng = random.Random()
    if require_solution:
        index_edges = _solvable_edges(rng, node_count, edge_count, max_attempts)
    else:
        index_edges = _random_edges(rng, node_count, edge_count, max_attempts)
    graph = build_graph(node_count, index_edges)
    logging.info(f"Generated graph: {node_count} nodes, {edge_count} edges (require_solution={require_solution})")
    return graph
