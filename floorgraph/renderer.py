"""
Renderer for the floor plan graph editor.

``Renderer.draw`` paints one frame onto a DrawSurface from the committed graph,
the transient EditorState, the viewport and the visibility filters. It reads
its inputs and never writes to them, so calling it twice with the same inputs
produces the same picture.

Paint order:
    1. clear and apply pan/zoom
    2. floor plan image
    3. edges (cross-floor stubs, badges, accessibility markers)
    4. corridors
    5. edge preview and corridor drawing buffer
    6. nodes with their rings
    7. node labels
"""

# floorgraph imports
from floorgraph import config
from floorgraph.models import Corridor, Edge, FloorGraph, Node
from floorgraph.state import EditorState, VisibilityFilters
from floorgraph.surfaces import DrawSurface
from floorgraph.transform import Viewport

# Standard library imports
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Sequence, Tuple

# Third-party imports
from PIL import Image

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

EDGE_IDLE_ALPHA         = 0.7
CORRIDOR_IDLE_ALPHA     = 0.7
PREVIEW_ALPHA           = 0.7
BUFFER_ALPHA            = 0.8
LABEL_BG_ALPHA          = 0.9
INACCESSIBLE_MARKER_R   = 6.0
CORRIDOR_POINT_R        = 5.0
BUFFER_POINT_R          = 6.0
LABEL_PAD               = 4.0
LABEL_BOX_H             = 14.0


def truncate_label(name: str, max_chars: int = config.LABEL_MAX_CHARS) -> str:
    """Shorten long names to ``max_chars - 2`` characters plus an ellipsis."""
    if len(name) > max_chars:
        return name[:max_chars - 2] + "..."
    return name


def lerp(a: Point, b: Point, t: float) -> Point:
    return a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t


@dataclass(frozen=True)
class _Frame:
    """Per-draw lookups shared by the paint passes."""
    graph:          FloorGraph
    state:          EditorState
    filters:        VisibilityFilters
    scale:          float
    lookup:         Dict[str, Node]
    floor_ids:      FrozenSet[str]
    highlight:      FrozenSet[str]

    def position(self, node: Node) -> Point:
        """Canvas position of a node, preferring the drag overlay."""
        p = self.state.overlay.get(node.id)
        x, y = (p.x, p.y) if p is not None else (node.x, node.y)
        return x * self.scale, y * self.scale


class Renderer:
    """Paints a frame of the editor onto a DrawSurface."""

    def draw(self,
             surface:           DrawSurface,
             graph:             FloorGraph,
             state:             EditorState,
             viewport:          Viewport,
             filters:           VisibilityFilters,
             highlight_path:    Sequence[str] = (),
             image:             Optional[Image.Image] = None) -> None:
        """Paint one frame.

        Args:
            surface: Target surface; cleared first.
            graph: Committed collections of the active floor.
            state: Transient editor state (hover, selection, overlay, previews).
            viewport: Zoom, pan and display scale.
            filters: Category visibility, layer toggles and marker size.
            highlight_path: Node ids of a route to emphasise.
            image: Floor plan image in authored units, drawn scaled by the display scale.
        """
        frame = _Frame(
            graph=graph,
            state=state,
            filters=filters,
            scale=viewport.display_scale,
            lookup=graph.node_lookup(),
            floor_ids=frozenset(n.id for n in graph.nodes),
            highlight=frozenset(highlight_path),
        )

        surface.clear()
        surface.set_transform(viewport.zoom, viewport.pan)

        if image is not None:
            surface.draw_image(image, image.width * frame.scale, image.height * frame.scale)

        if filters.show_edges:
            for edge in graph.edges:
                self._draw_edge(surface, frame, edge)

        if filters.show_corridors:
            for corridor in graph.corridors:
                self._draw_corridor(surface, frame, corridor)

        self._draw_previews(surface, frame)

        visible_nodes = [n for n in graph.nodes if filters.is_visible(n.category)]
        for node in visible_nodes:
            self._draw_node(surface, frame, node)

        if filters.show_labels:
            for node in visible_nodes:
                self._draw_node_label(surface, frame, node)

    # -------------------------------------------------------------------------
    # Edges
    # -------------------------------------------------------------------------

    def _edge_geometry(self, frame: _Frame, edge: Edge) -> Optional[Tuple[Point, Point, bool, Point, Point]]:
        """Return (start, end, cross_floor, near, far) or None when the edge is not drawn.

        ``start``/``end`` delimit the stroke; ``near``/``far`` are the full-length
        endpoints ordered from the on-floor node.
        """
        a, b = frame.lookup.get(edge.node_a_id), frame.lookup.get(edge.node_b_id)
        if a is None or b is None:
            return None
        if not (frame.filters.is_visible(a.category) and frame.filters.is_visible(b.category)):
            return None
        a_on, b_on = a.id in frame.floor_ids, b.id in frame.floor_ids
        if not (a_on or b_on):
            return None

        pa, pb = frame.position(a), frame.position(b)
        cross_floor = a.floor_id != b.floor_id
        if a_on and b_on:
            return pa, pb, cross_floor, pa, pb
        if a_on:
            return pa, lerp(pa, pb, config.CROSS_FLOOR_FRACTION), True, pa, pb
        return lerp(pb, pa, config.CROSS_FLOOR_FRACTION), pb, True, pb, pa

    def _draw_edge(self, surface: DrawSurface, frame: _Frame, edge: Edge) -> None:
        geometry = self._edge_geometry(frame, edge)
        if geometry is None:
            return
        start, end, cross_floor, near, far = geometry

        style       = edge.category.style
        selected    = frame.state.selected_edge_id == edge.id
        hovered     = frame.state.hovered_edge_id == edge.id
        highlighted = edge.node_a_id in frame.highlight and edge.node_b_id in frame.highlight

        if highlighted:
            color = config.HIGHLIGHT_COLOR
        elif selected:
            color = config.SELECT_COLOR
        elif hovered:
            color = style["color"]
        elif cross_floor:
            color = config.CROSS_FLOOR_COLOR
        else:
            color = style["color"]

        width = (style["width"] + 1 if selected or hovered else style["width"]) * (1.5 if highlighted else 1)
        dash  = config.CROSS_FLOOR_DASH if cross_floor else style["dash"]
        alpha = 1.0 if selected or hovered or highlighted else EDGE_IDLE_ALPHA
        surface.line(start, end, color, width=width, dash=dash, alpha=alpha)

        if cross_floor and frame.filters.show_cross_floor_indicators:
            badge = lerp(near, far, config.CROSS_FLOOR_BADGE_AT)
            surface.circle(badge, config.CROSS_FLOOR_BADGE_R, fill=config.CROSS_FLOOR_COLOR,
                           outline=config.NODE_BORDER_COLOR, width=1)
            surface.text(badge, style["badge"], config.NODE_BORDER_COLOR, size=config.LABEL_FONT_SIZE)

        if not edge.is_accessible:
            surface.circle(lerp(start, end, 0.5), INACCESSIBLE_MARKER_R, fill=config.INACCESSIBLE_FILL,
                           outline=config.INACCESSIBLE_STROKE, width=1)

    # -------------------------------------------------------------------------
    # Corridors
    # -------------------------------------------------------------------------

    def _draw_corridor(self, surface: DrawSurface, frame: _Frame, corridor: Corridor) -> None:
        if len(corridor.points) < 2:
            return
        selected = frame.state.selected_corridor_id == corridor.id
        hovered  = frame.state.hovered_corridor_id == corridor.id
        active   = selected or hovered
        points   = [(p.x * frame.scale, p.y * frame.scale) for p in corridor.points]

        if selected:
            color = config.CORRIDOR_SELECT_COLOR
        elif hovered:
            color = config.CORRIDOR_HOVER_COLOR
        else:
            color = config.CORRIDOR_COLOR
        width = (corridor.width or 2) * 3 * (1.3 if active else 1)
        surface.polyline(points, color, width=width, alpha=1.0 if active else CORRIDOR_IDLE_ALPHA)

        if active:
            last = len(points) - 1
            for i, p in enumerate(points):
                fill = config.PATH_START_COLOR if i == 0 else config.PATH_END_COLOR if i == last \
                    else config.CORRIDOR_SELECT_COLOR
                surface.circle(p, CORRIDOR_POINT_R, fill=fill, outline=config.NODE_BORDER_COLOR, width=1)

        if frame.filters.show_labels and corridor.name:
            lx, ly = points[len(points) // 2]
            self._label(surface, (lx, ly - 13), corridor.name, config.NODE_BORDER_COLOR,
                        config.CORRIDOR_LABEL_BG)

    # -------------------------------------------------------------------------
    # In-progress previews
    # -------------------------------------------------------------------------

    def _draw_previews(self, surface: DrawSurface, frame: _Frame) -> None:
        state = frame.state
        if state.edge_preview is not None:
            start, end = state.edge_preview
            surface.line(start, end, config.SELECT_COLOR, width=2, dash=config.PREVIEW_DASH,
                         alpha=PREVIEW_ALPHA)

        buffer = state.machine.corridor_points
        if not buffer:
            return
        points = [(p.x * frame.scale, p.y * frame.scale) for p in buffer]
        if len(points) > 1:
            surface.polyline(points, config.CORRIDOR_HOVER_COLOR, width=4, dash=config.PREVIEW_DASH,
                             alpha=BUFFER_ALPHA)
        for i, p in enumerate(points):
            fill = config.PATH_START_COLOR if i == 0 else config.CORRIDOR_HOVER_COLOR
            surface.circle(p, BUFFER_POINT_R, fill=fill, outline=config.NODE_BORDER_COLOR, width=2)
        if len(points) == 1:
            fx, fy = points[0]
            self._label(surface, (fx, fy + 22), config.CORRIDOR_FINISH_HINT, config.NODE_BORDER_COLOR,
                        config.CORRIDOR_LABEL_BG)

    # -------------------------------------------------------------------------
    # Nodes
    # -------------------------------------------------------------------------

    def _node_radius(self, frame: _Frame, node: Node) -> float:
        state = frame.state
        base  = frame.filters.node_size
        if state.dragged_node_id == node.id:
            return base * 1.2
        if node.id in (state.selected_node_id, state.hovered_node_id,
                       state.machine.path_start_id, state.machine.path_end_id):
            return base * 1.1
        return base

    def _draw_node(self, surface: DrawSurface, frame: _Frame, node: Node) -> None:
        state       = frame.state
        machine     = state.machine
        center      = frame.position(node)
        radius      = self._node_radius(frame, node)
        selected    = state.selected_node_id == node.id
        edge_start  = machine.edge_start_id == node.id
        path_start  = machine.path_start_id == node.id
        path_end    = machine.path_end_id == node.id
        path_marker = path_start or path_end

        if path_marker:
            color = config.PATH_START_COLOR if path_start else config.PATH_END_COLOR
            surface.circle(center, radius + 4, outline=color, width=3)
            surface.text((center[0], center[1] - radius - 12), "START" if path_start else "END",
                         color, size=config.LABEL_FONT_SIZE, bold=True)
        elif selected or edge_start:
            color = config.EDGE_START_COLOR if edge_start else config.SELECT_COLOR
            surface.circle(center, radius + 3, outline=color, width=2, dash=config.SELECTION_RING_DASH)

        if node.id in frame.highlight and not selected and not path_marker:
            surface.circle(center, radius + 3, outline=config.HIGHLIGHT_COLOR, width=3)

        if path_start:
            fill = config.PATH_START_COLOR
        elif path_end:
            fill = config.PATH_END_COLOR
        else:
            fill = node.category.color
        surface.circle(center, radius, fill=fill, outline=config.NODE_BORDER_COLOR, width=2)

    def _draw_node_label(self, surface: DrawSurface, frame: _Frame, node: Node) -> None:
        machine = frame.state.machine
        if not node.name or node.id in (machine.path_start_id, machine.path_end_id):
            return
        x, y   = frame.position(node)
        radius = self._node_radius(frame, node)
        self._label(surface, (x, y - radius - 11), truncate_label(node.name), config.LABEL_TEXT_COLOR,
                    config.LABEL_BG_COLOR)

    # -------------------------------------------------------------------------
    # Labels
    # -------------------------------------------------------------------------

    def _label(self, surface: DrawSurface, center: Point, text: str, color: str, background: str) -> None:
        """Text on a measured background box, so it never sits directly on line art."""
        tw, _ = surface.text_size(text, config.LABEL_FONT_SIZE)
        x, y  = center
        surface.rect((x - tw / 2 - LABEL_PAD, y - LABEL_BOX_H / 2),
                     (x + tw / 2 + LABEL_PAD, y + LABEL_BOX_H / 2),
                     fill=background, alpha=LABEL_BG_ALPHA)
        surface.text(center, text, color, size=config.LABEL_FONT_SIZE)


def render_frame(controller, surface: DrawSurface, image: Optional[Image.Image] = None,
                 renderer: Optional[Renderer] = None) -> DrawSurface:
    """Draw the current state of an InteractionController onto ``surface``."""
    renderer = renderer or Renderer()
    renderer.draw(surface, controller.graph, controller.state, controller.viewport,
                  controller.filters, controller.highlight_path, image)
    return surface

