# Standard library imports
import logging

# Third-party imports
import pytest

# floorgraph imports
from floorgraph.callbacks import EditorCallbacks
from floorgraph.graph_store import GraphStore
from floorgraph.models import Corridor, Edge, EdgeCategory, FloorGraph, Node, NodeCategory, PathPoint


@pytest.fixture
def store():
    """Two rooms, a stair and an elevator on L1; matching cores on L2"""
    graph = FloorGraph(
        floor_id="L1",
        nodes=[
            Node("A", "Room A", NodeCategory.ROOM, 0, 0, "L1"),
            Node("B", "Room B", NodeCategory.ROOM, 30, 40, "L1"),
            Node("S1", "Stair 1", NodeCategory.STAIRS, 200, 0, "L1"),
            Node("E1", "Lift 1", NodeCategory.ELEVATOR, 200, 100, "L1"),
        ],
        corridors=[Corridor("c", "Hall", [PathPoint(0, 0), PathPoint(10, 0)], "L1")],
        all_nodes=[
            Node("S3", "Stair 3", NodeCategory.STAIRS, 200, 0, "L3"),
            Node("E9", "Lift 9", NodeCategory.ELEVATOR, 200, 100, "L9"),
        ],
    )
    return GraphStore(graph, floor_levels={"L1": 1, "L3": 3})


class TestEdgeSuggestions:
    """create_edge fills in category, weight and accessibility"""

    def test_walking_edge_weight_is_distance(self, store):
        edge = store.create_edge("A", "B")
        assert edge.category is EdgeCategory.WALKING
        assert edge.weight == 50
        assert edge.is_accessible

    def test_stairs_between_floors(self, store):
        edge = store.create_edge("S1", "S3")
        assert edge.category is EdgeCategory.STAIRS
        assert edge.weight == 110
        assert not edge.is_accessible

    def test_elevator_with_unknown_level_counts_one_floor(self, store):
        edge = store.create_edge("E1", "E9")
        assert edge.category is EdgeCategory.ELEVATOR
        assert edge.weight == 35
        assert edge.is_accessible


class TestEdgeRejections:
    """Invalid edge requests are logged and ignored"""

    def test_self_loop(self, store, caplog):
        with caplog.at_level(logging.WARNING):
            assert store.create_edge("A", "A") is None
        assert "self-loop" in caplog.text
        assert store.graph.edges == []

    def test_unknown_node(self, store, caplog):
        with caplog.at_level(logging.WARNING):
            assert store.create_edge("A", "nope") is None
        assert "unknown node" in caplog.text

    def test_duplicate_in_either_order(self, store):
        assert store.create_edge("A", "B") is not None
        assert store.create_edge("B", "A") is None
        assert len(store.graph.edges) == 1


class TestNodes:
    """Node creation, moves and deletion"""

    def test_create_node_names_and_publishes(self, store):
        published = []
        store.subscribe(published.append)
        node = store.create_node(PathPoint(12, 34))
        assert node.name == "Node 5"
        assert (node.x, node.y, node.floor_id) == (12, 34, "L1")
        assert published[-1].find_node(node.id) is not None

    def test_move_node(self, store):
        store.move_node("A", 7, 8)
        node = store.graph.find_node("A")
        assert (node.x, node.y) == (7, 8)

    def test_move_unknown_node(self, store):
        assert store.move_node("ghost", 1, 1) is None

    def test_update_node(self, store):
        store.update_node("A", name="Reception", category=NodeCategory.INFO_DESK)
        node = store.graph.find_node("A")
        assert node.name == "Reception"
        assert node.category is NodeCategory.INFO_DESK

    def test_delete_node_removes_connected_edges(self, store):
        store.create_edge("A", "B")
        store.create_edge("B", "S1")
        store.create_edge("A", "S1")
        assert store.delete_node("B")
        edges = store.graph.edges
        assert len(edges) == 1
        assert edges[0].same_pair("A", "S1")
        assert store.graph.find_node("B") is None

    def test_delete_unknown_node(self, store):
        assert not store.delete_node("ghost")


class TestCorridors:
    """Corridor creation and deletion"""

    def test_create_corridor(self, store):
        corridor = store.create_corridor([PathPoint(0, 50), PathPoint(100, 50)])
        assert corridor.name == "Corridor 2"
        assert corridor.floor_id == "L1"
        assert len(store.graph.corridors) == 2

    def test_short_corridor_rejected(self, store):
        assert store.create_corridor([PathPoint(0, 50)]) is None
        assert len(store.graph.corridors) == 1

    def test_delete_corridor(self, store):
        assert store.delete_corridor("c")
        assert not store.delete_corridor("c")


class TestSnapshots:
    """graph returns independent snapshots"""

    def test_snapshot_unchanged_by_later_commits(self, store):
        before = store.graph
        store.create_node(PathPoint(1, 1))
        store.create_edge("A", "B")
        assert len(before.nodes) == 4
        assert before.edges == []

    def test_other_floor_nodes_resolvable(self, store):
        lookup = store.graph.node_lookup()
        assert "S3" in lookup
        assert "S3" not in {n.id for n in store.graph.nodes}


class TestCallbacks:
    """Editor callbacks bound to the store"""

    def test_bound_callbacks_apply_changes(self, store):
        callbacks = store.callbacks()
        callbacks.fire("on_edge_create", "A", "B")
        callbacks.fire("on_node_position_commit", "A", 3, 4)
        graph = store.graph
        assert len(graph.edges) == 1
        assert graph.find_node("A").x == 3

    def test_extra_callbacks_run_after_store(self, store):
        seen = []
        extra = EditorCallbacks(
            on_edge_create=lambda a, b: seen.append(len(store.graph.edges)),
            on_path_test=lambda a, b: seen.append((a, b)),
        )
        callbacks = store.callbacks(extra)
        callbacks.fire("on_edge_create", "A", "B")
        callbacks.fire("on_path_test", "A", "B")
        assert seen == [1, ("A", "B")]

    def test_existing_edges_kept(self):
        graph = FloorGraph(
            floor_id="L1",
            nodes=[Node("A", "", NodeCategory.ROOM, 0, 0, "L1"), Node("B", "", NodeCategory.ROOM, 1, 0, "L1")],
            edges=[Edge("ab", "A", "B")],
        )
        store = GraphStore(graph)
        assert store.create_edge("A", "B") is None
        assert store.delete_edge("ab")
