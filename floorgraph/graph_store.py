"""
In-memory graph store acting as the editor's create/update collaborator.

The editor only requests changes through its callbacks; GraphStore applies
them to its own collections, validates referential integrity, and publishes a
fresh FloorGraph snapshot to its listeners (typically
``InteractionController.set_graph``). Rejected requests are logged and
ignored, matching the fire-and-forget contract of the callbacks.

Usage:
    store = GraphStore(FloorGraph(floor_id="L1"))
    ctl = InteractionController(store.graph, store.callbacks(), mode="addNode")
    store.subscribe(ctl.set_graph)
"""

# floorgraph imports
from floorgraph.callbacks import EditorCallbacks
from floorgraph.models import (
    Corridor,
    Edge,
    FloorGraph,
    Node,
    NodeCategory,
    PathPoint,
    node_distance,
    suggest_accessibility,
    suggest_edge_category,
    suggest_weight,
)

# Standard library imports
import dataclasses
import logging
import uuid
from typing import Callable, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


class GraphStore:
    """Owns the node, edge and corridor collections of one floor.

    Args:
        graph: Initial collections. The store copies the lists it is given.
        floor_levels: Optional floor id -> level number, used to size the
            suggested weight of cross-floor edges. Unknown floors count as one
            level apart.
    """

    def __init__(self, graph: FloorGraph, floor_levels: Optional[Dict[str, int]] = None):
        self.floor_id                                               = graph.floor_id
        self.floor_levels:  Dict[str, int]                          = dict(floor_levels or {})
        self._nodes:        List[Node]                              = list(graph.nodes)
        self._edges:        List[Edge]                              = list(graph.edges)
        self._corridors:    List[Corridor]                          = list(graph.corridors)
        self._other_nodes:  List[Node]                              = [n for n in graph.all_nodes
                                                                       if n.floor_id != graph.floor_id]
        self._listeners:    List[Callable[[FloorGraph], None]]      = []
        self._node_seq                                              = len(self._nodes)
        self._corridor_seq                                          = len(self._corridors)

    # -------------------------------------------------------------------------
    # Snapshots and listeners
    # -------------------------------------------------------------------------

    @property
    def graph(self) -> FloorGraph:
        """A snapshot of the current collections; later changes do not alter it."""
        return FloorGraph(
            floor_id=self.floor_id,
            nodes=list(self._nodes),
            edges=list(self._edges),
            corridors=list(self._corridors),
            all_nodes=list(self._other_nodes) + list(self._nodes),
        )

    def subscribe(self, listener: Callable[[FloorGraph], None]) -> None:
        self._listeners.append(listener)

    def _publish(self) -> None:
        snapshot = self.graph
        for listener in self._listeners:
            listener(snapshot)

    def _lookup(self) -> Dict[str, Node]:
        lookup = {n.id: n for n in self._other_nodes}
        lookup.update({n.id: n for n in self._nodes})
        return lookup

    # -------------------------------------------------------------------------
    # Nodes
    # -------------------------------------------------------------------------

    def create_node(self, position: PathPoint, category: NodeCategory = NodeCategory.ROOM,
                    name: Optional[str] = None) -> Node:
        self._node_seq += 1
        node = Node(
            id=_new_id(),
            name=name or f"Node {self._node_seq}",
            category=category,
            x=int(position.x),
            y=int(position.y),
            floor_id=self.floor_id,
        )
        self._nodes.append(node)
        logger.info("Created node %s '%s' at (%d, %d)", node.id, node.name, node.x, node.y)
        self._publish()
        return node

    def move_node(self, node_id: str, x: int, y: int) -> Optional[Node]:
        for i, node in enumerate(self._nodes):
            if node.id == node_id:
                moved = dataclasses.replace(node, x=int(x), y=int(y))
                self._nodes[i] = moved
                logger.info("Moved node %s to (%d, %d)", node_id, moved.x, moved.y)
                self._publish()
                return moved
        logger.warning("Cannot move unknown node %s", node_id)
        return None

    def update_node(self, node_id: str, **changes) -> Optional[Node]:
        """Apply edit-form changes (name, category, code) to a node."""
        for i, node in enumerate(self._nodes):
            if node.id == node_id:
                self._nodes[i] = dataclasses.replace(node, **changes)
                self._publish()
                return self._nodes[i]
        logger.warning("Cannot update unknown node %s", node_id)
        return None

    def delete_node(self, node_id: str) -> bool:
        """Remove a node together with every edge that references it."""
        before = len(self._nodes)
        self._nodes = [n for n in self._nodes if n.id != node_id]
        if len(self._nodes) == before:
            logger.warning("Cannot delete unknown node %s", node_id)
            return False
        dropped = [e.id for e in self._edges if e.connects(node_id)]
        self._edges = [e for e in self._edges if not e.connects(node_id)]
        logger.info("Deleted node %s and %d connected edge(s)", node_id, len(dropped))
        self._publish()
        return True

    # -------------------------------------------------------------------------
    # Edges
    # -------------------------------------------------------------------------

    def floor_difference(self, node_a: Node, node_b: Node) -> int:
        if node_a.floor_id == node_b.floor_id:
            return 0
        level_a = self.floor_levels.get(node_a.floor_id)
        level_b = self.floor_levels.get(node_b.floor_id)
        if level_a is None or level_b is None:
            return 1
        return abs(level_a - level_b)

    def create_edge(self, node_a_id: str, node_b_id: str) -> Optional[Edge]:
        """Connect two existing nodes with suggested category, weight and accessibility."""
        if node_a_id == node_b_id:
            logger.warning("Rejected self-loop edge on node %s", node_a_id)
            return None
        lookup = self._lookup()
        node_a, node_b = lookup.get(node_a_id), lookup.get(node_b_id)
        if node_a is None or node_b is None:
            logger.warning("Rejected edge %s <-> %s: unknown node", node_a_id, node_b_id)
            return None
        if any(e.same_pair(node_a_id, node_b_id) for e in self._edges):
            logger.warning("Rejected duplicate edge %s <-> %s", node_a_id, node_b_id)
            return None

        category = suggest_edge_category(node_a, node_b)
        edge = Edge(
            id=_new_id(),
            node_a_id=node_a_id,
            node_b_id=node_b_id,
            weight=round(suggest_weight(category, self.floor_difference(node_a, node_b),
                                        node_distance(node_a, node_b)), 2),
            category=category,
            is_accessible=suggest_accessibility(category),
        )
        self._edges.append(edge)
        logger.info("Created %s edge %s (%s <-> %s, weight %.2f)",
                    category.value, edge.id, node_a.name, node_b.name, edge.weight)
        self._publish()
        return edge

    def delete_edge(self, edge_id: str) -> bool:
        before = len(self._edges)
        self._edges = [e for e in self._edges if e.id != edge_id]
        if len(self._edges) == before:
            logger.warning("Cannot delete unknown edge %s", edge_id)
            return False
        logger.info("Deleted edge %s", edge_id)
        self._publish()
        return True

    # -------------------------------------------------------------------------
    # Corridors
    # -------------------------------------------------------------------------

    def create_corridor(self, points: Iterable[PathPoint], name: Optional[str] = None) -> Optional[Corridor]:
        points = list(points)
        if len(points) < 2:
            logger.warning("Rejected corridor with %d point(s)", len(points))
            return None
        self._corridor_seq += 1
        corridor = Corridor(
            id=_new_id(),
            name=name or f"Corridor {self._corridor_seq}",
            points=points,
            floor_id=self.floor_id,
        )
        self._corridors.append(corridor)
        logger.info("Created corridor %s '%s' with %d points", corridor.id, corridor.name, len(points))
        self._publish()
        return corridor

    def delete_corridor(self, corridor_id: str) -> bool:
        before = len(self._corridors)
        self._corridors = [c for c in self._corridors if c.id != corridor_id]
        if len(self._corridors) == before:
            logger.warning("Cannot delete unknown corridor %s", corridor_id)
            return False
        logger.info("Deleted corridor %s", corridor_id)
        self._publish()
        return True

    # -------------------------------------------------------------------------
    # Editor wiring
    # -------------------------------------------------------------------------

    def callbacks(self, extra: Optional[EditorCallbacks] = None) -> EditorCallbacks:
        """Editor callbacks bound to this store, chained with ``extra`` when given."""
        bound = EditorCallbacks(
            on_node_create=self.create_node,
            on_node_position_commit=self.move_node,
            on_node_delete=self.delete_node,
            on_edge_create=self.create_edge,
            on_edge_delete=self.delete_edge,
            on_corridor_create=self.create_corridor,
            on_corridor_delete=self.delete_corridor,
        )
        return bound.merged(extra) if extra is not None else bound
