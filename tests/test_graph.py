import pytest

from graph import Edge, Graph, GraphError, Node


def test_degrees_and_odd_nodes(make_graph):
    g = make_graph([1, 2, 3, 4], [(1, 2), (2, 3), (2, 4)])
    assert g.degrees() == {"1": 1, "2": 3, "3": 1, "4": 1}
    assert g.degree("2") == 3
    assert g.odd_nodes() == ["1", "2", "3", "4"]


def test_adjacency_keeps_insertion_order(make_graph):
    g = make_graph([1, 2, 3], [(1, 3), (2, 1)])
    assert [e.id for e in g.adjacency()["1"]] == ["e1", "e2"]
    assert g.adjacency()["3"] == [g.edges[0]]


def test_edge_other_endpoint():
    e = Edge("e1", "a", "b")
    assert e.other("a") == "b"
    assert e.other("b") == "a"
    with pytest.raises(GraphError):
        e.other("c")


@pytest.mark.parametrize("nodes, edges", [
    (["1", "1"], []),
    (["1", "2"], [("e1", "1", "3")]),
    (["1", "2"], [("e1", "1", "1")]),
    (["1", "2"], [("e1", "1", "2"), ("e2", "2", "1")]),
    (["1", "2", "3"], [("e1", "1", "2"), ("e1", "2", "3")]),
])
def test_invalid_graphs_are_rejected(nodes, edges):
    with pytest.raises(GraphError):
        Graph([Node(n) for n in nodes], [Edge(*e) for e in edges])


def test_dict_round_trip_coerces_ids():
    data = {"nodes": [{"id": 1}, {"id": 2}], "edges": [{"source": 1, "target": 2}]}
    g = Graph.from_dict(data)
    assert g.to_dict() == {
        "nodes": [{"id": "1"}, {"id": "2"}],
        "edges": [{"id": "e1", "source": "1", "target": "2"}],
    }


def test_from_dict_rejects_missing_keys():
    with pytest.raises(GraphError):
        Graph.from_dict({"nodes": [{"id": "1"}]})


def test_to_networkx(make_graph):
    g = make_graph([1, 2, 3], [(1, 2), (2, 3)])
    G = g.to_networkx()
    assert list(G.nodes) == ["1", "2", "3"]
    assert G.edges["2", "3"]["id"] == "e2"
    assert G.has_edge("3", "2")
    assert not G.has_edge("1", "3")
