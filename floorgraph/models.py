"""
Floor plan graph data model.

Defines the wayfinding graph entities authored by the editor: nodes (points of
interest), edges (weighted connections, possibly between floors) and corridors
(named polylines). Also includes helpers to read the camelCase dictionaries
returned by the admin API and to suggest attributes for a freshly drawn edge.

This module contains:
- NodeCategory, EdgeCategory: category enums with lenient parsing
- PathPoint, Node, Edge, Corridor: graph entities
- FloorGraph: the collections of the active floor handed to the editor
"""

# floorgraph imports
from floorgraph import config

# Standard library imports
import json
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Union


class NodeCategory(Enum):
    ROOM        = 0
    CORRIDOR    = 1
    ELEVATOR    = 2
    STAIRS      = 3
    ENTRANCE    = 4
    RESTROOM    = 5
    INFO_DESK   = 6
    UNKNOWN     = 7

    @property
    def label(self) -> str:
        return config.NODE_STYLES[self.value]["label"]

    @property
    def color(self) -> str:
        return config.NODE_STYLES[self.value]["color"]

    @classmethod
    def parse(cls, value: Union["NodeCategory", int, str, None]) -> "NodeCategory":
        """Convert an enum, integer, numeric string or label into a NodeCategory.

        The API returns categories either as numbers or as their display label
        ("Room", "Information Desk"). Anything unrecognised maps to ROOM.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                value = int(text)
            else:
                for member in cls:
                    if text.lower() in (member.label.lower(), member.name.lower()):
                        return member
                return cls.ROOM
        try:
            return cls(value)
        except ValueError:
            return cls.ROOM


class EdgeCategory(Enum):
    WALKING     = "Walking"
    STAIRS      = "Stairs"
    ELEVATOR    = "Elevator"
    TRANSITION  = "Transition"

    @property
    def style(self) -> dict:
        return config.EDGE_STYLES[self.value]

    @classmethod
    def parse(cls, value: Union["EdgeCategory", int, str, None]) -> "EdgeCategory":
        """Convert an enum, label or ordinal into an EdgeCategory (default WALKING)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            members = list(cls)
            return members[value] if 0 <= value < len(members) else cls.WALKING
        if isinstance(value, str):
            for member in cls:
                if value.strip().lower() == member.value.lower():
                    return member
        return cls.WALKING


@dataclass(frozen=True)
class PathPoint:
    """A 2D point in authored floor plan units."""
    x: float
    y: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict) -> "PathPoint":
        return cls(x=data["x"], y=data["y"])


@dataclass
class Node:
    """A point of interest in the wayfinding graph.

    Attributes:
        id: Node identity.
        name: Display name.
        category: Room, elevator, stairs, ...
        x, y: Authored position (floor plan image units).
        floor_id: Identity of the floor the node belongs to.
        code: Optional external code (e.g. the QR code printed on site).
    """
    id:         str
    name:       str
    category:   NodeCategory
    x:          float
    y:          float
    floor_id:   str
    code:       Optional[str] = None

    def __post_init__(self):
        self.category = NodeCategory.parse(self.category)

    @property
    def position(self) -> PathPoint:
        return PathPoint(self.x, self.y)


@dataclass
class Edge:
    """A weighted, typed and unordered connection between two distinct nodes."""
    id:             str
    node_a_id:      str
    node_b_id:      str
    weight:         float = 10.0
    category:       EdgeCategory = EdgeCategory.WALKING
    is_accessible:  bool = True

    def __post_init__(self):
        if self.node_a_id == self.node_b_id:
            raise ValueError(f"Edge {self.id} connects node {self.node_a_id} to itself")
        self.category = EdgeCategory.parse(self.category)

    def connects(self, node_id: str) -> bool:
        return node_id in (self.node_a_id, self.node_b_id)

    def other_end(self, node_id: str) -> str:
        if node_id == self.node_a_id:
            return self.node_b_id
        if node_id == self.node_b_id:
            return self.node_a_id
        raise KeyError(f"Node {node_id} is not an endpoint of edge {self.id}")

    def same_pair(self, node_a_id: str, node_b_id: str) -> bool:
        return {self.node_a_id, self.node_b_id} == {node_a_id, node_b_id}


@dataclass
class Corridor:
    """A named walkable polyline with at least two points."""
    id:             str
    name:           str
    points:         List[PathPoint]
    floor_id:       str
    is_accessible:  bool = True
    width:          float = 2.0

    def __post_init__(self):
        self.points = [p if isinstance(p, PathPoint) else PathPoint.from_dict(p) for p in self.points]
        if len(self.points) < 2:
            raise ValueError(f"Corridor {self.id} needs at least 2 points, got {len(self.points)}")

    def segments(self):
        """Yield consecutive (start, end) point pairs."""
        for a, b in zip(self.points[:-1], self.points[1:]):
            yield a, b


@dataclass
class FloorGraph:
    """Node, edge and corridor collections for the floor being edited.

    ``all_nodes`` optionally holds nodes of other floors so that cross-floor
    edges can be resolved. Nodes of the active floor take precedence in lookups.
    """
    floor_id:   str
    nodes:      List[Node]      = field(default_factory=list)
    edges:      List[Edge]      = field(default_factory=list)
    corridors:  List[Corridor]  = field(default_factory=list)
    all_nodes:  List[Node]      = field(default_factory=list)

    def node_lookup(self) -> Dict[str, Node]:
        lookup = {n.id: n for n in self.all_nodes}
        lookup.update({n.id: n for n in self.nodes})
        return lookup

    def floor_edges(self) -> List[Edge]:
        """Edges with at least one endpoint on this floor, in input order."""
        floor_ids = {n.id for n in self.nodes}
        return [e for e in self.edges if e.node_a_id in floor_ids or e.node_b_id in floor_ids]

    def is_cross_floor(self, edge: Edge, lookup: Optional[Dict[str, Node]] = None) -> bool:
        lookup = lookup if lookup is not None else self.node_lookup()
        a, b = lookup.get(edge.node_a_id), lookup.get(edge.node_b_id)
        if a is None or b is None:
            return False
        return a.floor_id != b.floor_id

    def find_node(self, node_id: Optional[str]) -> Optional[Node]:
        return next((n for n in self.nodes if n.id == node_id), None)

    def find_edge(self, edge_id: Optional[str]) -> Optional[Edge]:
        return next((e for e in self.edges if e.id == edge_id), None)

    def find_corridor(self, corridor_id: Optional[str]) -> Optional[Corridor]:
        return next((c for c in self.corridors if c.id == corridor_id), None)


# -----------------------------------------------------------------------------
# API dictionaries
# -----------------------------------------------------------------------------

def node_from_dto(dto: dict) -> Node:
    return Node(
        id=str(dto["id"]),
        name=dto.get("name", ""),
        category=NodeCategory.parse(dto.get("nodeType")),
        x=dto.get("x", 0),
        y=dto.get("y", 0),
        floor_id=str(dto.get("floorId", "")),
        code=dto.get("qrCode") or None,
    )


def edge_from_dto(dto: dict) -> Edge:
    return Edge(
        id=str(dto["id"]),
        node_a_id=str(dto["nodeAId"]),
        node_b_id=str(dto["nodeBId"]),
        weight=dto.get("weight", 10),
        category=EdgeCategory.parse(dto.get("edgeType")),
        is_accessible=dto.get("isAccessible", True),
    )


def parse_path_points(raw: Optional[str]) -> List[PathPoint]:
    """Parse a ``pathPointsJson`` string; malformed input yields an empty list."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
        return [PathPoint.from_dict(p) for p in data]
    except (ValueError, TypeError, KeyError):
        return []


def path_points_to_json(points: Iterable[PathPoint]) -> str:
    return json.dumps([p.to_dict() for p in points], separators=(",", ":"))


def corridor_from_dto(dto: dict) -> Optional[Corridor]:
    """Build a Corridor from an API dictionary.

    Returns None when the stored path has fewer than two usable points, so a
    damaged record is skipped instead of breaking the whole floor.
    """
    points = parse_path_points(dto.get("pathPointsJson"))
    if len(points) < 2:
        return None
    return Corridor(
        id=str(dto["id"]),
        name=dto.get("name", ""),
        points=points,
        floor_id=str(dto.get("floorId", "")),
        is_accessible=dto.get("isAccessible", True),
        width=dto.get("width") or 2,
    )


# -----------------------------------------------------------------------------
# Edge attribute suggestions
# -----------------------------------------------------------------------------

def suggest_edge_category(node_a: Node, node_b: Node) -> EdgeCategory:
    """Guess the edge category from the floors and categories of its endpoints."""
    if node_a.floor_id == node_b.floor_id:
        return EdgeCategory.WALKING
    kinds = {node_a.category, node_b.category}
    if NodeCategory.ELEVATOR in kinds:
        return EdgeCategory.ELEVATOR
    if NodeCategory.STAIRS in kinds:
        return EdgeCategory.STAIRS
    return EdgeCategory.TRANSITION


def suggest_accessibility(category: EdgeCategory) -> bool:
    return category != EdgeCategory.STAIRS


def suggest_weight(category: EdgeCategory, floor_difference: int = 0, distance: float = 0.0) -> float:
    """Suggested traversal cost: distance for walking, per-floor cost otherwise."""
    if category == EdgeCategory.WALKING:
        return max(distance, 1.0)
    per_floor, fixed = config.WEIGHT_PER_FLOOR[category.value]
    return abs(floor_difference) * per_floor + fixed


def node_distance(node_a: Node, node_b: Node) -> float:
    return math.hypot(node_b.x - node_a.x, node_b.y - node_a.y)
