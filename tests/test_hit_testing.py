# Third-party imports
import pytest

# floorgraph imports
from floorgraph.hit_testing import (
    corridor_threshold,
    nearest_corridor,
    nearest_edge,
    nearest_node,
    point_to_segment_dist,
)
from floorgraph.models import Corridor, Edge, Node, NodeCategory, PathPoint


ALL = set(NodeCategory)


@pytest.fixture
def nodes():
    """Two rooms and a stair core on one floor"""
    return [
        Node("A", "Room A", NodeCategory.ROOM, 0, 0, "L1"),
        Node("B", "Room B", NodeCategory.ROOM, 100, 0, "L1"),
        Node("S", "Stairs", NodeCategory.STAIRS, 100, 100, "L1"),
    ]


@pytest.fixture
def lookup(nodes):
    return {n.id: n for n in nodes}


class TestPointToSegmentDist:
    """Tests for point_to_segment_dist"""

    def test_point_on_segment_is_zero(self):
        dist, proj = point_to_segment_dist((5, 0), (0, 0), (10, 0))
        assert dist == 0
        assert proj == (5, 0)

    def test_perpendicular_distance(self):
        dist, _ = point_to_segment_dist((5, 3), (0, 0), (10, 0))
        assert dist == pytest.approx(3)

    def test_beyond_endpoint_measures_to_endpoint(self):
        """Projection is clamped to [0, 1]"""
        dist, proj = point_to_segment_dist((13, 4), (0, 0), (10, 0))
        assert dist == pytest.approx(5)
        assert proj == (10, 0)
        dist, proj = point_to_segment_dist((-3, -4), (0, 0), (10, 0))
        assert dist == pytest.approx(5)
        assert proj == (0, 0)

    def test_degenerate_segment(self):
        dist, proj = point_to_segment_dist((3, 4), (0, 0), (0, 0))
        assert dist == pytest.approx(5)
        assert proj == (0, 0)


class TestNearestNode:
    """Tests for nearest_node"""

    def test_hit_within_radius(self, nodes):
        assert nearest_node((3, 4), nodes, ALL) == "A"

    def test_miss_outside_radius(self, nodes):
        assert nearest_node((50, 50), nodes, ALL) is None

    def test_radius_is_inclusive(self, nodes):
        assert nearest_node((110, 0), nodes, ALL, radius_px=10) == "B"
        assert nearest_node((110.01, 0), nodes, ALL, radius_px=10) is None

    def test_overlapping_nodes_first_in_order_wins(self):
        """Identical input ordering always yields the same id"""
        first = Node("first", "", NodeCategory.ROOM, 10, 10, "L1")
        second = Node("second", "", NodeCategory.ROOM, 10, 10, "L1")
        for _ in range(5):
            assert nearest_node((10, 10), [first, second], ALL) == "first"
        assert nearest_node((10, 10), [second, first], ALL) == "second"

    def test_hidden_categories_are_not_hit(self, nodes):
        assert nearest_node((0, 0), nodes, {NodeCategory.STAIRS}) is None
        assert nearest_node((100, 100), nodes, {NodeCategory.STAIRS}) == "S"

    def test_display_scale_applied_before_radius(self, nodes):
        """Node (100, 0) at scale 0.5 sits at canvas (50, 0)"""
        assert nearest_node((50, 0), nodes, ALL, display_scale=0.5) == "B"
        assert nearest_node((100, 0), nodes, ALL, display_scale=0.5) is None

    def test_position_overrides(self, nodes):
        assert nearest_node((40, 40), nodes, ALL, positions={"A": (40, 40)}) == "A"
        assert nearest_node((0, 0), nodes, ALL, positions={"A": (40, 40)}) is None

    def test_empty_input(self):
        assert nearest_node((0, 0), [], ALL) is None


class TestNearestEdge:
    """Tests for nearest_edge"""

    def test_hit_within_threshold(self, lookup):
        edges = [Edge("ab", "A", "B")]
        assert nearest_edge((50, 5), edges, lookup, ALL) == "ab"

    def test_miss_outside_threshold(self, lookup):
        edges = [Edge("ab", "A", "B")]
        assert nearest_edge((50, 9), edges, lookup, ALL) is None

    def test_hidden_endpoint_not_hit(self, lookup):
        edges = [Edge("bs", "B", "S")]
        assert nearest_edge((100, 50), edges, lookup, {NodeCategory.ROOM}) is None
        assert nearest_edge((100, 50), edges, lookup, ALL) == "bs"

    def test_unresolved_endpoint_skipped(self, lookup):
        edges = [Edge("ghost", "A", "missing"), Edge("ab", "A", "B")]
        assert nearest_edge((50, 0), edges, lookup, ALL) == "ab"

    def test_first_edge_in_order_wins(self, lookup):
        edges = [Edge("ab", "A", "B"), Edge("ba", "B", "A")]
        assert nearest_edge((50, 0), edges, lookup, ALL) == "ab"

    def test_cross_floor_edge_hit_only_along_stub(self, lookup):
        edges = [Edge("bs", "B", "S")]
        on_floor = {"A", "B"}
        assert nearest_edge((100, 20), edges, lookup, ALL, floor_ids=on_floor) == "bs"
        assert nearest_edge((100, 60), edges, lookup, ALL, floor_ids=on_floor) is None
        assert nearest_edge((100, 60), edges, lookup, ALL) == "bs"

    def test_stub_measured_from_on_floor_end(self, lookup):
        edges = [Edge("sb", "S", "B")]
        assert nearest_edge((100, 90), edges, lookup, ALL, floor_ids={"S"}) == "sb"
        assert nearest_edge((100, 40), edges, lookup, ALL, floor_ids={"S"}) is None

    def test_edge_off_floor_not_hit(self, lookup):
        assert nearest_edge((100, 10), [Edge("bs", "B", "S")], lookup, ALL, floor_ids={"A"}) is None


class TestNearestCorridor:
    """Tests for nearest_corridor"""

    @pytest.fixture
    def corridor(self):
        return Corridor("c", "Hall", [PathPoint(0, 0), PathPoint(100, 0), PathPoint(100, 100)], "L1")

    def test_hit_on_any_segment(self, corridor):
        assert nearest_corridor((50, 4), [corridor]) == "c"
        assert nearest_corridor((104, 50), [corridor]) == "c"

    def test_miss(self, corridor):
        assert nearest_corridor((50, 50), [corridor]) is None

    def test_threshold_grows_with_width(self):
        wide = Corridor("w", "Atrium", [PathPoint(0, 0), PathPoint(100, 0)], "L1", width=10)
        assert corridor_threshold(wide, 8) == 15
        assert nearest_corridor((50, 12), [wide]) == "w"

    def test_display_scale(self, corridor):
        assert nearest_corridor((50, 50), [corridor], display_scale=0.5) == "c"
