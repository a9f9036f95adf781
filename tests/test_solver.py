import logging
import random

import networkx as nx
import pytest

from generator import generate_graph
from graph import Edge
from solver import (
    DisconnectedGraphError,
    EulerianTrailError,
    calculate_eulerian_trail,
    find_start,
    hierholzer_edge_trail,
    build_adjacency,
    solve_eulerian,
    trail_vertices,
)


def test_four_cycle_is_circuit_from_first_node(make_graph, check_trail):
    g = make_graph([1, 2, 3, 4], [(1, 2), (2, 3), (3, 4), (4, 1)])
    trail = calculate_eulerian_trail(g)
    assert [e.id for e in trail] == ["e1", "e2", "e3", "e4"]
    walk = check_trail(g, trail, "1")
    assert walk == ["1", "2", "3", "4", "1"]


def test_path_is_trail_between_odd_nodes(make_graph, check_trail):
    g = make_graph([1, 2, 3], [(1, 2), (2, 3)])
    trail = calculate_eulerian_trail(g)
    assert check_trail(g, trail, "1") == ["1", "2", "3"]


def test_triangle_is_three_edge_circuit(make_graph, check_trail):
    g = make_graph([1, 2, 3], [(1, 2), (2, 3), (1, 3)])
    trail = calculate_eulerian_trail(g)
    walk = check_trail(g, trail, "1")
    assert len(trail) == 3
    assert walk[0] == walk[-1] == "1"


def test_star_has_no_trail(make_graph):
    g = make_graph([1, 2, 3, 4, 5], [(1, 2), (1, 3), (1, 4), (1, 5)])
    with pytest.raises(EulerianTrailError, match="does not exist"):
        calculate_eulerian_trail(g)


def test_dead_end_first_edge_is_reordered(make_graph, check_trail):
    # from 1 the first edge leads to the dead end 2, the triangle must come first
    g = make_graph([1, 2, 3, 4], [(1, 2), (1, 3), (3, 4), (4, 1)])
    trail = calculate_eulerian_trail(g)
    assert [e.id for e in trail] == ["e2", "e3", "e4", "e1"]
    assert check_trail(g, trail, "1") == ["1", "3", "4", "1", "2"]


def test_bridge_between_two_triangles(make_graph, check_trail):
    # degrees: 3 and 4 are odd; the bridge 3-4 must be crossed last from 3's side
    g = make_graph(range(1, 7), [(3, 4), (1, 2), (2, 3), (3, 1), (4, 5), (5, 6), (6, 4)])
    trail = calculate_eulerian_trail(g)
    walk = check_trail(g, trail, "3")
    assert walk[-1] == "4"


def test_start_is_first_odd_node_in_node_order(make_graph):
    g = make_graph([3, 2, 1], [(1, 2), (2, 3)])
    assert find_start(g) == "3"


def test_circuit_skips_leading_isolated_node(make_graph, check_trail):
    g = make_graph([9, 1, 2, 3], [(1, 2), (2, 3), (3, 1)])
    trail, meta = solve_eulerian(g)
    assert meta["start"] == "1" and meta["end"] == "1"
    check_trail(g, trail, "1")


def test_disconnected_components_are_rejected(make_graph):
    g = make_graph(range(1, 7), [(1, 2), (2, 3), (3, 1), (4, 5), (5, 6), (6, 4)])
    with pytest.raises(DisconnectedGraphError):
        calculate_eulerian_trail(g)


def test_disconnected_error_is_a_trail_error(make_graph):
    g = make_graph(range(1, 5), [(1, 2), (3, 4)])
    with pytest.raises(EulerianTrailError):
        calculate_eulerian_trail(g)


def test_no_edges_gives_empty_trail(make_graph):
    g = make_graph([1, 2], [])
    trail, meta = solve_eulerian(g)
    assert trail == []
    assert meta["mode"] == "empty"


def test_solve_meta_reports_mode_and_endpoints(make_graph):
    g = make_graph([1, 2, 3], [(1, 2), (2, 3)])
    trail, meta = solve_eulerian(g)
    assert meta["mode"] == "trail"
    assert meta["k"] == 2
    assert (meta["start"], meta["end"]) == ("1", "3")
    assert meta["edges"] == 2
    assert "hierholzer_sec" in meta["timings_sec"]


def test_repeated_calls_are_identical_and_do_not_mutate(make_graph):
    g = make_graph(range(1, 6), [(1, 2), (2, 3), (3, 1), (1, 4), (4, 5), (5, 1)])
    edges_before = g.edges
    first = calculate_eulerian_trail(g)
    second = calculate_eulerian_trail(g)
    assert first == second
    assert g.edges == edges_before
    assert all(isinstance(e, Edge) for e in first)


def test_solve_checks_feasibility_once(make_graph, caplog):
    g = make_graph([1, 2, 3], [(1, 2), (2, 3), (1, 3)])
    with caplog.at_level(logging.DEBUG):
        trail, meta = solve_eulerian(g)
    assert sum("Odd-degree vertices" in r.getMessage() for r in caplog.records) == 1
    assert meta["k"] == 0 and meta["mode"] == "circuit"
    assert trail == calculate_eulerian_trail(g)


def test_returns_original_edge_objects(make_graph):
    g = make_graph([1, 2, 3], [(1, 2), (2, 3), (1, 3)])
    trail = calculate_eulerian_trail(g)
    assert all(any(e is orig for orig in g.edges) for e in trail)


def test_walk_stops_on_its_own_component(make_graph):
    g = make_graph(range(1, 7), [(1, 2), (2, 3), (3, 1), (4, 5), (5, 6), (6, 4)])
    adj = build_adjacency(g)
    assert len(hierholzer_edge_trail(g, adj, "1")) == 3


def test_trail_vertices_rejects_broken_walk(make_graph):
    g = make_graph([1, 2, 3, 4], [(1, 2), (3, 4)])
    with pytest.raises(EulerianTrailError):
        trail_vertices(list(g.edges), "1")


def test_long_cycle_does_not_hit_recursion_limit(make_graph, check_trail):
    n = 5000
    g = make_graph(range(n), [(i, (i + 1) % n) for i in range(n)])
    trail = calculate_eulerian_trail(g)
    walk = check_trail(g, trail, "0")
    assert walk[-1] == "0"


def _has_trail(g):
    G = g.to_networkx()
    active = [u for u, d in G.degree() if d > 0]
    return len(g.odd_nodes()) in (0, 2) and nx.is_connected(G.subgraph(active))


@pytest.mark.parametrize("seed", range(30))
def test_random_graphs_solved_iff_trail_exists(seed, check_trail):
    rng = random.Random(seed)
    n = rng.randint(3, 9)
    m = rng.randint(n - 1, n * (n - 1) // 2)
    g = generate_graph(n, m, require_solution=False, rng=rng)
    if _has_trail(g):
        trail, meta = solve_eulerian(g)
        walk = check_trail(g, trail, meta["start"])
        if meta["k"] == 0:
            assert walk[0] == walk[-1]
        else:
            assert set(g.odd_nodes()) == {walk[0], walk[-1]}
    else:
        with pytest.raises(EulerianTrailError):
            calculate_eulerian_trail(g)
