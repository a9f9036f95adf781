import pytest

from graph import Edge, Graph, Node
from solver import trail_vertices


def _make_graph(node_ids, pairs):
    nodes = [Node(str(u)) for u in node_ids]
    edges = [Edge(f"e{i}", str(u), str(v)) for i, (u, v) in enumerate(pairs, start=1)]
    return Graph(nodes, edges)


@pytest.fixture
def make_graph():
    return _make_graph


@pytest.fixture
def check_trail():
    '''
    Assert trail uses every edge of graph once as one continuous walk from start.
    Returns the vertex walk.
    '''
    def check(graph, trail, start):
        assert len(trail) == len(graph.edges)
        assert sorted(e.id for e in trail) == sorted(e.id for e in graph.edges)
        walk = trail_vertices(trail, start)
        assert len(walk) == len(trail) + 1
        return walk
    return check
