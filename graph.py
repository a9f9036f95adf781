# graph.py
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Tuple

import networkx as nx


class GraphError(ValueError):
    '''
    Raised when a node/edge set does not form a valid simple undirected graph.
    '''


@dataclass(frozen=True)
class Node:
    id: str


@dataclass(frozen=True)
class Edge:
    ''' Undirected edge between two node ids.
    source/target only record the order the edge was given in,
    the traversal may use it in either direction.
    '''
    id: str
    source: str
    target: str

    def endpoints(self) -> FrozenSet[str]:
        return frozenset((self.source, self.target))

    def other(self, node_id: str) -> str:
        '''
        Returns the endpoint opposite to node_id.
        '''
        if node_id == self.source:
            return self.target
        if node_id == self.target:
            return self.source
        raise GraphError(f"Node {node_id} is not an endpoint of edge {self.id}")


class Graph:
    ''' Simple undirected graph with ordered node and edge sets.

    Attributes
    ----------
    nodes : Tuple[Node, ...]
        Nodes in generation/input order.
    edges : Tuple[Edge, ...]
        Edges in insertion order.

    Methods
    -------
    degree(node_id) -> int
        Number of edges incident to node_id.
    odd_nodes() -> List[str]
        Odd-degree node ids, in node order.
    adjacency() -> Dict[str, List[Edge]]
        Incident edges per node, in edge insertion order.

    Degrees are always recomputed from the edge set.
    '''
    def __init__(self, nodes: Iterable[Node], edges: Iterable[Edge]):
        self.nodes: Tuple[Node, ...] = tuple(nodes)
        self.edges: Tuple[Edge, ...] = tuple(edges)
        self._validate()

    def _validate(self):
        ids = set()
        for node in self.nodes:
            if node.id in ids:
                raise GraphError(f"Duplicate node id {node.id}")
            ids.add(node.id)
        edge_ids, pairs = set(), set()
        for e in self.edges:
            if e.id in edge_ids:
                raise GraphError(f"Duplicate edge id {e.id}")
            edge_ids.add(e.id)
            if e.source not in ids or e.target not in ids:
                raise GraphError(f"Edge {e.id} references an unknown node ({e.source}, {e.target})")
            if e.source == e.target:
                raise GraphError(f"Edge {e.id} is a self-loop on node {e.source}")
            pair = e.endpoints()
            if pair in pairs:
                raise GraphError(f"Edge {e.id} duplicates the pair ({e.source}, {e.target})")
            pairs.add(pair)

    def __repr__(self) -> str:
        return f"Graph(nodes={len(self.nodes)}, edges={len(self.edges)})"

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def adjacency(self) -> Dict[str, List[Edge]]:
        adj: Dict[str, List[Edge]] = {n.id: [] for n in self.nodes}
        for e in self.edges:
            adj[e.source].append(e)
            adj[e.target].append(e)
        return adj

    def degrees(self) -> Dict[str, int]:
        return {u: len(incident) for u, incident in self.adjacency().items()}

    def degree(self, node_id: str) -> int:
        return sum(1 for e in self.edges if node_id in (e.source, e.target))

    def odd_nodes(self) -> List[str]:
        degrees = self.degrees()
        return [u for u in self.node_ids() if degrees[u] % 2 == 1]

    # ============================================================
    # Conversions
    # ============================================================
    def to_dict(self) -> Dict:
        '''
        Export as {nodes: [{id}], edges: [{id, source, target}]}.
        '''
        return {
            "nodes": [{"id": n.id} for n in self.nodes],
            "edges": [{"id": e.id, "source": e.source, "target": e.target} for e in self.edges],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Graph":
        '''
        Build a Graph from the {nodes, edges} shape. Ids are coerced to str,
        a missing edge id is replaced by its position ("e1", "e2", ...).
        '''
        try:
            nodes = [Node(str(n["id"])) for n in data["nodes"]]
            edges = [
                Edge(str(e.get("id", f"e{i}")), str(e["source"]), str(e["target"]))
                for i, e in enumerate(data["edges"], start=1)
            ]
        except (KeyError, TypeError) as exc:
            raise GraphError(f"Malformed graph data: {exc!r}") from exc
        return cls(nodes, edges)

    def to_networkx(self) -> nx.Graph:
        G = nx.Graph()
        G.add_nodes_from(self.node_ids())
        for e in self.edges:
            G.add_edge(e.source, e.target, id=e.id)
        return G
