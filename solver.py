# solver.py
import logging
import time
from typing import Dict, List, Optional, Tuple

import networkx as nx

from graph import Edge, Graph


class EulerianTrailError(Exception):
    '''
    Raised when the graph has no Eulerian trail or circuit.
    '''
    def __init__(self, message: str = "Eulerian trail does not exist"):
        super().__init__(message)


class DisconnectedGraphError(EulerianTrailError):
    '''
    Raised when the edges of the graph do not lie in a single connected component.
    '''


# ============================================================
# Graph utils
# ============================================================
def build_adjacency(graph: Graph) -> Dict[str, List[Tuple[int, str]]]:
    '''
    Build a private adjacency list: node -> [(edge_index, neighbour), ...]
    in edge insertion order. Isolated nodes map to an empty list.
    '''
    adj: Dict[str, List[Tuple[int, str]]] = {u: [] for u in graph.node_ids()}
    for idx, e in enumerate(graph.edges):
        adj[e.source].append((idx, e.target))
        adj[e.target].append((idx, e.source))
    return adj


def odd_degree_vertices(graph: Graph, adj: Dict) -> List[str]:
    '''
    Return odd-degree vertices in node-list order.
    '''
    return [u for u in graph.node_ids() if len(adj[u]) % 2 == 1]


def is_connected_on_non_isolated(graph: Graph) -> bool:
    '''
    Check if graph is connected ignoring isolated vertices.
    '''
    G = graph.to_networkx()
    active = [u for u, d in G.degree() if d > 0]
    if not active:
        return True
    return nx.is_connected(G.subgraph(active))


def find_start(graph: Graph, adj: Optional[Dict] = None) -> Optional[str]:
    '''
    Pick the start vertex of the trail.

        0 odd-degree vertices -> circuit, start at the first vertex with an edge.
        2 odd-degree vertices -> trail, start at the first odd vertex.
        otherwise             -> no Eulerian trail exists.

    Returns None for a graph without edges.
    '''
    if adj is None:
        adj = build_adjacency(graph)
    odds = odd_degree_vertices(graph, adj)
    k = len(odds)
    logging.debug(f"Odd-degree vertices: k={k} {odds}")
    if k == 2:
        return odds[0]
    if k != 0:
        raise EulerianTrailError(f"Eulerian trail does not exist ({k} odd-degree vertices)")
    return next((u for u in graph.node_ids() if adj[u]), None)


# ============================================================
# Hierholzer
# ============================================================
def hierholzer_edge_trail(graph: Graph, adj: Dict, start: str) -> List[Edge]:
    '''
    Hierholzer's algorithm with an explicit stack, on edges instead of vertices.

    The walk always leaves the top-of-stack vertex through its first unused edge
    (adjacency insertion order) and keeps going from the neighbour until it gets
    stuck, only then backtracking. Each popped stack entry emits the edge it was
    entered by; reversing the emitted sequence gives the trail.
    '''
    used = [False] * len(graph.edges)
    cursor = {u: 0 for u in adj}
    stack: List[Tuple[str, Optional[int]]] = [(start, None)]
    emitted: List[Edge] = []
    while stack:
        u, via = stack[-1]
        incident = adj[u]
        i = cursor[u]
        # skip edges already consumed from the other endpoint
        while i < len(incident) and used[incident[i][0]]:
            i += 1
        cursor[u] = i
        if i < len(incident):
            idx, v = incident[i]
            used[idx] = True
            stack.append((v, idx))
        else:
            stack.pop()
            if via is not None:
                emitted.append(graph.edges[via])
    emitted.reverse()
    return emitted


def _walk_all_edges(graph: Graph, adj: Dict, start: Optional[str]) -> List[Edge]:
    '''
    Connectivity check, then the walk from start. Raises if any edge is left over.
    '''
    if start is None:
        return []
    if not is_connected_on_non_isolated(graph):
        raise DisconnectedGraphError("Eulerian trail does not exist (graph is not connected)")
    trail = hierholzer_edge_trail(graph, adj, start)
    if len(trail) != len(graph.edges):
        raise DisconnectedGraphError(
            f"Eulerian trail does not exist (walk covered {len(trail)} of {len(graph.edges)} edges)"
        )
    return trail


def calculate_eulerian_trail(graph: Graph) -> List[Edge]:
    '''
    Find an Eulerian trail or circuit through graph.

    Returns the original Edge objects in traversal order. The graph is not
    modified and repeated calls return the same sequence.

    Raises
    ------
    EulerianTrailError
        If the number of odd-degree vertices is neither 0 nor 2.
    DisconnectedGraphError
        If the edges do not all lie in one connected component.
    '''
    adj = build_adjacency(graph)
    return _walk_all_edges(graph, adj, find_start(graph, adj))


def trail_vertices(trail: List[Edge], start: str) -> List[str]:
    '''
    Convert a trail of edges to the list of vertices it walks through.
    E.g. [(1,2), (3,2)] from 1 -> [1, 2, 3]
    '''
    walk = [start]
    for e in trail:
        cur = walk[-1]
        if cur not in (e.source, e.target):
            raise EulerianTrailError(f"Edge {e.id} does not continue the walk at vertex {cur}")
        walk.append(e.other(cur))
    return walk


def solve_eulerian(graph: Graph) -> Tuple[List[Edge], Dict]:
    '''
    Solve and return (trail, meta) with mode, k, start/end vertices and timings.
    '''
    timings = {}
    t0 = time.time()
    adj = build_adjacency(graph)
    start = find_start(graph, adj)
    # find_start only returns when k is 0 or 2; the start is odd iff k == 2
    k = 2 if start is not None and len(adj[start]) % 2 == 1 else 0
    timings["feasibility_sec"] = round(time.time() - t0, 3)

    t1 = time.time()
    trail = _walk_all_edges(graph, adj, start)
    timings["hierholzer_sec"] = round(time.time() - t1, 3)

    if not trail:
        mode = "empty"
        end = start
    else:
        mode = "circuit" if k == 0 else "trail"
        end = trail_vertices(trail, start)[-1]
    logging.info(f"Found {mode} over {len(trail)} edges from {start} to {end}")
    meta = {
        "mode": mode,
        "k": k,
        "start": start,
        "end": end,
        "edges": len(trail),
        "timings_sec": timings,
    }
    return trail, meta
