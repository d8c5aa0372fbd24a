"""
Hit testing of node markers, edge segments and corridor polylines.

All queries take a point in canvas space (see ``transform.to_model``) and
compare it against element positions projected with the display scale, so the
pixel radii stay fixed regardless of the zoom level. Scans are order
preserving: the first element within range wins, which keeps results
reproducible when markers overlap.
"""

# floorgraph imports
from floorgraph import config
from floorgraph.models import Corridor, Edge, Node, NodeCategory

# Standard library imports
from typing import Collection, Dict, Optional, Sequence, Tuple

# Third-party imports
import numpy as np

Point = Tuple[float, float]


def point_to_segment_dist(p: Point, a: Point, b: Point) -> Tuple[float, Point]:
    """Return (distance, projection) from point P to segment A→B.

    The projection parameter is clamped to [0, 1], so points beyond an end of
    the segment measure to that endpoint.
    """
    dx, dy = b[0] - a[0], b[1] - a[1]
    seg_len_sq = dx*dx + dy*dy
    if seg_len_sq == 0:
        return float(np.hypot(p[0] - a[0], p[1] - a[1])), (a[0], a[1])
    t = max(0.0, min(1.0, ((p[0] - a[0])*dx + (p[1] - a[1])*dy) / seg_len_sq))
    proj = (a[0] + t*dx, a[1] + t*dy)
    return float(np.hypot(p[0] - proj[0], p[1] - proj[1])), proj


def nearest_node(point: Point,
                 nodes: Sequence[Node],
                 visible: Collection[NodeCategory],
                 display_scale: float = 1.0,
                 radius_px: float = config.NODE_HIT_RADIUS_PX,
                 positions: Optional[Dict[str, Point]] = None) -> Optional[str]:
    """Return the id of the first visible node within ``radius_px`` of ``point``.

    Args:
        point: Query point in canvas space.
        nodes: Candidate nodes, scanned in order.
        visible: Categories that can be hit; other nodes are skipped entirely.
        display_scale: Authored units to canvas pixels.
        radius_px: Inclusive hit radius in canvas pixels.
        positions: Optional authored-position overrides (drag overlay).
    """
    candidates = [n for n in nodes if n.category in visible]
    if not candidates:
        return None
    positions = positions or {}
    xy = np.array([positions.get(n.id, (n.x, n.y)) for n in candidates], dtype=float) * display_scale
    dists = np.hypot(xy[:, 0] - point[0], xy[:, 1] - point[1])
    hits = np.flatnonzero(dists <= radius_px)
    if hits.size == 0:
        return None
    return candidates[int(hits[0])].id


def _toward(a: Point, b: Point, t: float) -> Point:
    return a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t


def nearest_edge(point: Point,
                 edges: Sequence[Edge],
                 node_lookup: Dict[str, Node],
                 visible: Collection[NodeCategory],
                 display_scale: float = 1.0,
                 threshold_px: float = config.EDGE_HIT_THRESHOLD_PX,
                 floor_ids: Optional[Collection[str]] = None) -> Optional[str]:
    """Return the id of the first edge whose segment lies within ``threshold_px``.

    Edges with an unresolved or hidden endpoint are not hit-testable. When
    ``floor_ids`` is given, an edge with one endpoint off the floor is tested
    only along the stub drawn from its on-floor end.
    """
    for edge in edges:
        a = node_lookup.get(edge.node_a_id)
        b = node_lookup.get(edge.node_b_id)
        if a is None or b is None:
            continue
        if a.category not in visible or b.category not in visible:
            continue
        pa = (a.x * display_scale, a.y * display_scale)
        pb = (b.x * display_scale, b.y * display_scale)
        if floor_ids is not None:
            a_on, b_on = a.id in floor_ids, b.id in floor_ids
            if not (a_on or b_on):
                continue
            if not b_on:
                pb = _toward(pa, pb, config.CROSS_FLOOR_FRACTION)
            elif not a_on:
                pa = _toward(pb, pa, config.CROSS_FLOOR_FRACTION)
        dist, _ = point_to_segment_dist(point, pa, pb)
        if dist <= threshold_px:
            return edge.id
    return None


def corridor_threshold(corridor: Corridor, threshold_px: float) -> float:
    """Corridors are drawn ``width * 3`` wide; the hit band covers the stroke."""
    return max(threshold_px, corridor.width * 3 / 2)


def nearest_corridor(point: Point,
                     corridors: Sequence[Corridor],
                     display_scale: float = 1.0,
                     threshold_px: float = config.CORRIDOR_HIT_THRESHOLD_PX) -> Optional[str]:
    """Return the id of the first corridor with a segment within range of ``point``."""
    for corridor in corridors:
        limit = corridor_threshold(corridor, threshold_px)
        for a, b in corridor.segments():
            dist, _ = point_to_segment_dist(
                point,
                (a.x * display_scale, a.y * display_scale),
                (b.x * display_scale, b.y * display_scale),
            )
            if dist <= limit:
                return corridor.id
    return None
