"""
Campus Navigation Graph for CampusFix.

Models the campus map used by the map view:
- Building footprints on a fixed 1000x800 plane
- Waypoints (entrances, path junctions) linked by neighbor lists
- Road segments drawn between buildings
- Hop-count route finding between two waypoints (breadth-first search)

The graph is static: it is loaded once from the fixture data at the bottom
of this module and never mutated while serving requests.
"""
import logging
import math
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

MAP_WIDTH = 1000
MAP_HEIGHT = 800


class WaypointKind(str, Enum):
    """What a waypoint represents on the map."""
    ROOM = "ROOM"
    CORRIDOR = "CORRIDOR"
    STAIRS = "STAIRS"
    ENTRANCE = "ENTRANCE"
    FACILITY = "FACILITY"


@dataclass(frozen=True)
class Waypoint:
    """A navigable point on the campus map."""
    id: str
    name: str
    building_id: str  # Empty for a corridor junction
    floor: int
    kind: WaypointKind
    x: float
    y: float
    neighbor_ids: tuple[str, ...] = ()

    def distance_to(self, other: "Waypoint") -> float:
        """Straight-line distance on the map plane."""
        return math.hypot(other.x - self.x, other.y - self.y)


@dataclass(frozen=True)
class Building:
    """A building footprint on the campus map."""
    id: str
    name: str
    floor_count: int
    description: str
    facilities: tuple[str, ...]
    map_x: float
    map_y: float
    width: float
    height: float

    @property
    def center(self) -> tuple[float, float]:
        return (self.map_x + self.width / 2, self.map_y + self.height / 2)

    def contains(self, x: float, y: float) -> bool:
        """Check whether a map point falls inside this footprint."""
        return (self.map_x <= x <= self.map_x + self.width and
                self.map_y <= y <= self.map_y + self.height)


@dataclass(frozen=True)
class RoadSegment:
    """A straight path segment drawn on the 2D map."""
    id: str
    x1: float
    y1: float
    x2: float
    y2: float


@dataclass(frozen=True)
class NavigationStep:
    """One human-readable instruction along a route."""
    description: str
    point_id: str


@dataclass(frozen=True)
class GraphIssue:
    """A well-formedness problem found by CampusGraph.validate()."""
    kind: str  # "dangling" or "asymmetric"
    waypoint_id: str
    neighbor_id: str

    def __str__(self) -> str:
        if self.kind == "dangling":
            return f"{self.waypoint_id} lists unknown neighbor {self.neighbor_id}"
        return f"{self.waypoint_id} -> {self.neighbor_id} has no reverse edge"


class CampusGraph:
    """
    Static waypoint graph of the campus.

    Provides:
    - Building and waypoint lookup
    - Neighbor traversal in stored order
    - Shortest route by hop count
    - Graph validation and export for map clients
    """

    def __init__(self):
        self.buildings: dict[str, Building] = {}
        self.waypoints: dict[str, Waypoint] = {}
        self.roads: list[RoadSegment] = []

    def add_building(self, building: Building):
        """Add a building to the graph."""
        self.buildings[building.id] = building

    def add_waypoint(self, waypoint: Waypoint):
        """Add a waypoint to the graph."""
        self.waypoints[waypoint.id] = waypoint

    def add_road(self, road: RoadSegment):
        """Add a road segment to the map."""
        self.roads.append(road)

    def get_waypoint(self, waypoint_id: str) -> Optional[Waypoint]:
        return self.waypoints.get(waypoint_id)

    def get_building(self, name: str) -> Optional[Building]:
        """Get building by ID or name."""
        if name in self.buildings:
            return self.buildings[name]

        name_lower = name.lower()
        for bldg_id, bldg in self.buildings.items():
            if bldg.name.lower() == name_lower or bldg_id.lower() == name_lower:
                return bldg

        return None

    def entrances(self) -> list[Waypoint]:
        """Waypoints that can be picked as route start or end."""
        return [w for w in self.waypoints.values() if w.kind == WaypointKind.ENTRANCE]

    def neighbors(self, waypoint_id: str) -> list[str]:
        """
        Neighbor ids of a waypoint in stored order.

        References to waypoints that are not in the graph are skipped,
        so a malformed edge behaves as a dead end.
        """
        waypoint = self.waypoints.get(waypoint_id)
        if waypoint is None:
            return []
        return [n for n in waypoint.neighbor_ids if n in self.waypoints]

    def find_route(self, start: Optional[str], end: Optional[str]) -> list[str]:
        """
        Shortest route from start to end by number of hops.

        Breadth-first search exploring neighbors in stored order, so ties
        between equally short routes always resolve the same way.

        Returns:
            Waypoint ids from start to end inclusive, or an empty list if
            either id is unset, start is unknown, or end is unreachable.
        """
        if not start or not end:
            return []
        if start not in self.waypoints:
            return []

        parents: dict[str, Optional[str]] = {start: None}
        queue = deque([start])

        while queue:
            node = queue.popleft()
            if node == end:
                return self._rebuild_path(parents, end)

            for neighbor_id in self.neighbors(node):
                if neighbor_id not in parents:
                    parents[neighbor_id] = node
                    queue.append(neighbor_id)

        return []

    @staticmethod
    def _rebuild_path(parents: dict[str, Optional[str]], end: str) -> list[str]:
        path = []
        node: Optional[str] = end
        while node is not None:
            path.append(node)
            node = parents[node]
        path.reverse()
        return path

    def route_distance(self, path: list[str]) -> float:
        """Straight-line length of a route on the map plane."""
        total = 0.0
        for a, b in zip(path, path[1:]):
            total += self.waypoints[a].distance_to(self.waypoints[b])
        return total

    def describe_route(self, path: list[str]) -> list[NavigationStep]:
        """Turn a route into step-by-step instructions."""
        steps = []
        for i, waypoint_id in enumerate(path):
            waypoint = self.waypoints[waypoint_id]
            if i == 0:
                text = f"Start at {waypoint.name}"
            elif i == len(path) - 1:
                text = f"Arrive at {waypoint.name}"
            elif waypoint.kind == WaypointKind.CORRIDOR:
                text = "Continue along the pathway"
            else:
                text = f"Pass {waypoint.name}"
            steps.append(NavigationStep(description=text, point_id=waypoint_id))
        return steps

    def validate(self) -> list[GraphIssue]:
        """Report dangling and one-way neighbor references."""
        issues = []
        for waypoint in self.waypoints.values():
            for neighbor_id in waypoint.neighbor_ids:
                neighbor = self.waypoints.get(neighbor_id)
                if neighbor is None:
                    issues.append(GraphIssue("dangling", waypoint.id, neighbor_id))
                elif waypoint.id not in neighbor.neighbor_ids:
                    issues.append(GraphIssue("asymmetric", waypoint.id, neighbor_id))
        return issues

    def to_dict(self) -> dict:
        """Export the map for a client that draws it."""
        return {
            "width": MAP_WIDTH,
            "height": MAP_HEIGHT,
            "buildings": [
                {
                    "id": b.id,
                    "name": b.name,
                    "floor_count": b.floor_count,
                    "description": b.description,
                    "facilities": list(b.facilities),
                    "map_x": b.map_x,
                    "map_y": b.map_y,
                    "width": b.width,
                    "height": b.height,
                }
                for b in self.buildings.values()
            ],
            "waypoints": [
                {
                    "id": w.id,
                    "name": w.name,
                    "building_id": w.building_id,
                    "floor": w.floor,
                    "kind": w.kind.value,
                    "x": w.x,
                    "y": w.y,
                    "neighbor_ids": list(w.neighbor_ids),
                }
                for w in self.waypoints.values()
            ],
            "roads": [
                {"id": r.id, "x1": r.x1, "y1": r.y1, "x2": r.x2, "y2": r.y2}
                for r in self.roads
            ],
        }


def find_route(graph: CampusGraph, start: Optional[str], end: Optional[str]) -> list[str]:
    """Shortest hop-count route between two waypoints of a graph."""
    return graph.find_route(start, end)


# Building footprints on the 1000x800 map
CAMPUS_BUILDINGS = {
    "b-admin": {
        "name": "Administrative Building",
        "floors": 3,
        "description": "Registrar, Admissions, HRD",
        "facilities": ["Admissions Office", "Registrar", "HRD"],
        "rect": (420, 50, 160, 100),
    },
    "b-academic-a": {
        "name": "Academic Block A",
        "floors": 4,
        "description": "Computer Science, IT",
        "facilities": ["CS Labs", "Electronics Labs", "Lecture Halls 101-105"],
        "rect": (100, 200, 140, 250),
    },
    "b-academic-b": {
        "name": "Academic Block B",
        "floors": 4,
        "description": "Engineering Sciences",
        "facilities": ["Workshops", "Physics Lab", "Lecture Halls 201-205"],
        "rect": (760, 200, 140, 250),
    },
    "b-library": {
        "name": "Central Library",
        "floors": 2,
        "description": "Main Library & Archives",
        "facilities": ["Digital Library", "Reading Room", "Book Bank"],
        "rect": (430, 300, 140, 140),
    },
    "b-audit": {
        "name": "University Auditorium",
        "floors": 1,
        "description": "Events & Convocation Hall",
        "facilities": ["Main Stage", "Green Room"],
        "rect": (420, 550, 160, 120),
    },
    "b-cafe": {
        "name": "Student Cafeteria",
        "floors": 1,
        "description": "Food Court",
        "facilities": ["Food Court", "Coffee Shop"],
        "rect": (780, 550, 100, 80),
    },
}

# Road network for the 2D map: (x1, y1, x2, y2)
CAMPUS_ROADS = {
    "r1": (500, 150, 500, 300),  # Admin to Library
    "r2": (500, 440, 500, 550),  # Library to Auditorium
    "r3": (240, 325, 430, 370),  # Block A to Library
    "r4": (570, 370, 760, 325),  # Library to Block B
    "r5": (240, 450, 420, 610),  # Block A to Auditorium
    "r6": (580, 610, 760, 450),  # Auditorium to Block B
    "r7": (760, 450, 780, 550),  # Block B to Cafe
}

# Navigation waypoints. Connections are stored per node as drawn on the
# map; a few are one-way (the cafeteria link) and get mirrored when the
# graph is built symmetric.
MAP_POINTS = {
    # Building entrances
    "node-admin": {
        "name": "Admin Entrance", "building": "b-admin", "kind": "ENTRANCE",
        "xy": (500, 150), "connections": ["node-lib-n"],
    },
    "node-block-a": {
        "name": "Block A Entrance", "building": "b-academic-a", "kind": "ENTRANCE",
        "xy": (240, 325), "connections": ["node-lib-w", "node-audit-w"],
    },
    "node-block-b": {
        "name": "Block B Entrance", "building": "b-academic-b", "kind": "ENTRANCE",
        "xy": (760, 325), "connections": ["node-lib-e", "node-audit-e"],
    },
    "node-lib": {
        "name": "Library Main", "building": "b-library", "kind": "ENTRANCE",
        "xy": (500, 370), "connections": ["node-lib-n", "node-lib-s", "node-lib-w", "node-lib-e"],
    },
    "node-audit": {
        "name": "Auditorium", "building": "b-audit", "kind": "ENTRANCE",
        "xy": (500, 550), "connections": ["node-audit-n", "node-audit-w", "node-audit-e"],
    },
    "node-cafe": {
        "name": "Cafeteria", "building": "b-cafe", "kind": "ENTRANCE",
        "xy": (780, 550), "connections": ["node-block-b"],
    },

    # Path intersections
    "node-lib-n": {"name": "Pathway", "xy": (500, 300), "connections": ["node-admin", "node-lib"]},
    "node-lib-s": {"name": "Pathway", "xy": (500, 440), "connections": ["node-lib", "node-audit-n"]},
    "node-lib-w": {"name": "Pathway", "xy": (430, 370), "connections": ["node-lib", "node-block-a"]},
    "node-lib-e": {"name": "Pathway", "xy": (570, 370), "connections": ["node-lib", "node-block-b"]},
    "node-audit-n": {"name": "Pathway", "xy": (500, 500), "connections": ["node-lib-s", "node-audit"]},
    "node-audit-w": {"name": "Pathway", "xy": (420, 610), "connections": ["node-audit", "node-block-a"]},
    "node-audit-e": {"name": "Pathway", "xy": (580, 610), "connections": ["node-audit", "node-block-b"]},
}


def mirror_connections(points: dict[str, list[str]]) -> dict[str, list[str]]:
    """
    Make neighbor lists symmetric.

    Stored order is kept; a missing reverse edge is appended to the end of
    the neighbor's list, in the order the points are given. References to
    unknown points are left untouched.
    """
    mirrored = {pid: list(conns) for pid, conns in points.items()}
    for pid, conns in points.items():
        for neighbor_id in conns:
            if neighbor_id in mirrored and pid not in mirrored[neighbor_id]:
                mirrored[neighbor_id].append(pid)
    return mirrored


def build_campus_graph(symmetric: bool = True) -> CampusGraph:
    """
    Build the CampusGraph from the static map fixture.

    Args:
        symmetric: Mirror one-way connections so every edge can be
            walked in both directions. With False the neighbor lists are
            used exactly as stored (directed edges).
    """
    graph = CampusGraph()

    for bldg_id, data in CAMPUS_BUILDINGS.items():
        x, y, w, h = data["rect"]
        graph.add_building(Building(
            id=bldg_id,
            name=data["name"],
            floor_count=data["floors"],
            description=data["description"],
            facilities=tuple(data["facilities"]),
            map_x=x,
            map_y=y,
            width=w,
            height=h,
        ))

    for road_id, (x1, y1, x2, y2) in CAMPUS_ROADS.items():
        graph.add_road(RoadSegment(id=road_id, x1=x1, y1=y1, x2=x2, y2=y2))

    connections = {pid: data["connections"] for pid, data in MAP_POINTS.items()}
    if symmetric:
        connections = mirror_connections(connections)

    for point_id, data in MAP_POINTS.items():
        x, y = data["xy"]
        graph.add_waypoint(Waypoint(
            id=point_id,
            name=data["name"],
            building_id=data.get("building", ""),
            floor=data.get("floor", 0),
            kind=WaypointKind(data.get("kind", "CORRIDOR")),
            x=x,
            y=y,
            neighbor_ids=tuple(connections[point_id]),
        ))

    issues = graph.validate()
    for issue in issues:
        logger.debug(f"Campus graph: {issue}")
    logger.info(
        f"Campus graph loaded: {len(graph.buildings)} buildings, "
        f"{len(graph.waypoints)} waypoints, {len(issues)} one-way or dangling edges"
    )

    return graph
