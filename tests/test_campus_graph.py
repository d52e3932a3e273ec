"""
Unit tests for models/campus_graph.py.

Tests cover:
  - find_route: BFS shortest path, unset/unknown ids, dangling neighbors
  - mirror_connections / build_campus_graph: symmetric vs directed fixture
  - validate, describe_route, to_dict
"""
from collections import deque

import pytest

from campusfix.models.campus_graph import (
    MAP_POINTS,
    Building,
    CampusGraph,
    Waypoint,
    WaypointKind,
    build_campus_graph,
    find_route,
    mirror_connections,
)


# ── helpers ────────────────────────────────────────────────────────────────────

def make_graph(connections, coords=None):
    """Graph of corridor waypoints from {id: [neighbor ids]}."""
    coords = coords or {}
    graph = CampusGraph()
    for i, (pid, neighbors) in enumerate(connections.items()):
        x, y = coords.get(pid, (i * 10, 0))
        graph.add_waypoint(Waypoint(
            id=pid, name=pid.upper(), building_id="", floor=0,
            kind=WaypointKind.CORRIDOR, x=x, y=y, neighbor_ids=tuple(neighbors),
        ))
    return graph


def shortest_hops(graph, start, end):
    """Reference hop count, independent of find_route."""
    seen = {start: 0}
    queue = deque([start])
    while queue:
        node = queue.popleft()
        for n in graph.neighbors(node):
            if n not in seen:
                seen[n] = seen[node] + 1
                queue.append(n)
    return seen.get(end)


LINE = {"A": ["B"], "B": ["A", "C"], "C": ["B"]}


# ── find_route ─────────────────────────────────────────────────────────────────

class TestFindRoute:
    def test_line_graph(self):
        assert find_route(make_graph(LINE), "A", "C") == ["A", "B", "C"]

    def test_same_start_and_end(self):
        assert find_route(make_graph(LINE), "B", "B") == ["B"]

    def test_unreachable_end(self):
        graph = make_graph({"A": ["B"], "B": ["A"], "C": []})
        assert find_route(graph, "A", "C") == []

    @pytest.mark.parametrize("start,end", [("", "C"), ("A", ""), (None, "C"), ("A", None)])
    def test_unset_ids(self, start, end):
        assert find_route(make_graph(LINE), start, end) == []

    def test_unknown_start(self):
        assert find_route(make_graph(LINE), "Z", "A") == []

    def test_unknown_end(self):
        assert find_route(make_graph(LINE), "A", "Z") == []

    def test_dangling_neighbor_is_dead_end(self):
        graph = make_graph({"A": ["GHOST", "B"], "B": ["A"]})
        assert find_route(graph, "A", "B") == ["A", "B"]
        assert find_route(graph, "A", "GHOST") == []

    def test_prefers_fewest_hops(self):
        # A-B-C-D is three hops, A-E-D is two
        graph = make_graph({
            "A": ["B", "E"], "B": ["A", "C"], "C": ["B", "D"],
            "D": ["C", "E"], "E": ["A", "D"],
        })
        assert find_route(graph, "A", "D") == ["A", "E", "D"]

    def test_tie_broken_by_stored_order(self):
        graph = make_graph({"A": ["B", "C"], "B": ["A", "D"], "C": ["A", "D"], "D": ["B", "C"]})
        assert find_route(graph, "A", "D") == ["A", "B", "D"]

        reordered = make_graph({"A": ["C", "B"], "B": ["A", "D"], "C": ["A", "D"], "D": ["B", "C"]})
        assert find_route(reordered, "A", "D") == ["A", "C", "D"]

    def test_directed_edge(self):
        graph = make_graph({"A": ["B"], "B": []})
        assert find_route(graph, "A", "B") == ["A", "B"]
        assert find_route(graph, "B", "A") == []

    def test_method_and_function_agree(self):
        graph = make_graph(LINE)
        assert graph.find_route("A", "C") == find_route(graph, "A", "C")


class TestFixtureRoutes:
    @pytest.fixture
    def graph(self):
        return build_campus_graph()

    def test_admin_to_cafeteria(self, graph):
        assert graph.find_route("node-admin", "node-cafe") == [
            "node-admin", "node-lib-n", "node-lib", "node-lib-e", "node-block-b", "node-cafe",
        ]

    def test_every_hop_is_an_edge(self, graph):
        for start in graph.waypoints:
            for end in graph.waypoints:
                path = graph.find_route(start, end)
                assert path[0] == start and path[-1] == end
                for a, b in zip(path, path[1:]):
                    assert b in graph.neighbors(a)

    def test_route_is_shortest(self, graph):
        for start in graph.waypoints:
            for end in graph.waypoints:
                path = graph.find_route(start, end)
                assert len(path) - 1 == shortest_hops(graph, start, end)

    def test_deterministic(self, graph):
        first = graph.find_route("node-block-a", "node-block-b")
        for _ in range(5):
            assert graph.find_route("node-block-a", "node-block-b") == first

    def test_symmetric_graph_reaches_cafeteria(self, graph):
        assert graph.find_route("node-block-b", "node-cafe") == ["node-block-b", "node-cafe"]

    def test_directed_graph_cannot_reach_cafeteria(self):
        directed = build_campus_graph(symmetric=False)
        assert directed.find_route("node-block-b", "node-cafe") == []
        assert directed.find_route("node-cafe", "node-admin")[-1] == "node-admin"


# ── mirror_connections ─────────────────────────────────────────────────────────

class TestMirrorConnections:
    def test_appends_missing_reverse_edge(self):
        mirrored = mirror_connections({"A": ["B"], "B": ["C"], "C": []})
        assert mirrored == {"A": ["B"], "B": ["C", "A"], "C": ["B"]}

    def test_keeps_unknown_references(self):
        assert mirror_connections({"A": ["GHOST"]}) == {"A": ["GHOST"]}

    def test_does_not_mutate_input(self):
        points = {"A": ["B"], "B": []}
        mirror_connections(points)
        assert points == {"A": ["B"], "B": []}

    def test_fixture_only_gains_cafeteria_edge(self):
        raw = {pid: data["connections"] for pid, data in MAP_POINTS.items()}
        mirrored = mirror_connections(raw)
        changed = {pid for pid in raw if raw[pid] != mirrored[pid]}
        assert changed == {"node-block-b"}
        assert mirrored["node-block-b"][-1] == "node-cafe"


# ── validate / describe / export ───────────────────────────────────────────────

class TestValidate:
    def test_directed_fixture_has_one_asymmetric_edge(self):
        issues = build_campus_graph(symmetric=False).validate()
        assert [(i.kind, i.waypoint_id, i.neighbor_id) for i in issues] == [
            ("asymmetric", "node-cafe", "node-block-b"),
        ]

    def test_symmetric_fixture_is_clean(self):
        assert build_campus_graph().validate() == []

    def test_dangling_reported(self):
        issues = make_graph({"A": ["GHOST"]}).validate()
        assert [(i.kind, i.neighbor_id) for i in issues] == [("dangling", "GHOST")]


class TestDescribeRoute:
    def test_steps(self):
        graph = build_campus_graph()
        path = graph.find_route("node-admin", "node-lib")
        steps = graph.describe_route(path)
        assert [s.point_id for s in steps] == path
        assert steps[0].description == "Start at Admin Entrance"
        assert steps[1].description == "Continue along the pathway"
        assert steps[-1].description == "Arrive at Library Main"

    def test_empty_route(self):
        assert build_campus_graph().describe_route([]) == []

    def test_distance(self):
        graph = make_graph(LINE, coords={"A": (0, 0), "B": (3, 4), "C": (3, 10)})
        assert graph.route_distance(["A", "B", "C"]) == pytest.approx(11.0)
        assert graph.route_distance(["A"]) == 0.0


class TestLookups:
    def test_get_building_by_name(self):
        graph = build_campus_graph()
        assert graph.get_building("central library").id == "b-library"
        assert graph.get_building("B-CAFE").id == "b-cafe"
        assert graph.get_building("gym") is None

    def test_building_footprint(self):
        building = Building("b-x", "X", 1, "", (), 10, 10, 20, 20)
        assert building.center == (20, 20)
        assert building.contains(15, 15)
        assert building.contains(30, 30)
        assert not building.contains(50, 50)

    def test_get_waypoint(self):
        graph = build_campus_graph()
        assert graph.get_waypoint("node-cafe").building_id == "b-cafe"
        assert graph.get_waypoint("node-lib-n").building_id == ""
        assert graph.get_waypoint("node-x") is None

    def test_entrances(self):
        ids = {w.id for w in build_campus_graph().entrances()}
        assert "node-cafe" in ids
        assert "node-lib-n" not in ids

    def test_to_dict_shape(self):
        data = build_campus_graph().to_dict()
        assert (data["width"], data["height"]) == (1000, 800)
        assert len(data["buildings"]) == 6
        assert len(data["waypoints"]) == len(MAP_POINTS)
        cafe = next(w for w in data["waypoints"] if w["id"] == "node-cafe")
        assert cafe["kind"] == "ENTRANCE"
        assert cafe["neighbor_ids"] == ["node-block-b"]
