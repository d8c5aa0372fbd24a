"""
Pointer-driven interaction controller for the floor plan graph editor.

The controller is the only component that mutates EditorState. Each handler
converts the incoming screen point to canvas space once, hit-tests against the
current graph, advances the mode machine and fires collaborator callbacks.
Invalid interactions (self-loops, short corridors, hidden elements, edits in
read-only mode) are rejected silently; nothing here raises during interaction.

Usage:
    from floorgraph.controller import InteractionController
    ctl = InteractionController(graph, callbacks, mode="addEdge")
    ctl.pointer_down((12, 40))
    ctl.pointer_down((300, 40))   # fires callbacks.on_edge_create(a, b)
"""

# floorgraph imports
from floorgraph import config
from floorgraph.callbacks import EditorCallbacks
from floorgraph.hit_testing import nearest_corridor, nearest_edge, nearest_node
from floorgraph.models import FloorGraph, NodeCategory, PathPoint
from floorgraph.modes import CorridorCreate, EdgeCreate, EditorMode, PathTest
from floorgraph.state import DragSession, EditorState, PanSession, VisibilityFilters
from floorgraph.transform import Viewport

# Standard library imports
import logging
from typing import Callable, Iterable, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

LEFT_BUTTON     = 1
MIDDLE_BUTTON   = 2

_SELECT_LIKE = (EditorMode.VIEW, EditorMode.SELECT)


class InteractionController:
    """Turns raw pointer, key and toolbar input into editor state changes.

    Args:
        graph: Collections of the active floor.
        callbacks: Collaborator callbacks fired on commits and requests.
        viewport: Pan/zoom/display-scale state; a default one is created if omitted.
        filters: Visibility filters and marker size.
        mode: Initial editor mode.
        readonly: Suppress every mutation and every drag.
        on_change: Called after each state change so the host can repaint.
    """

    def __init__(
        self,
        graph:      FloorGraph,
        callbacks:  Optional[EditorCallbacks]       = None,
        viewport:   Optional[Viewport]              = None,
        filters:    Optional[VisibilityFilters]     = None,
        mode:       Union[EditorMode, str]          = EditorMode.VIEW,
        readonly:   bool                            = False,
        on_change:  Optional[Callable[[], None]]    = None,
    ):
        self.graph                                  = graph
        self.callbacks                              = callbacks or EditorCallbacks()
        self.viewport                               = viewport or Viewport()
        self.filters                                = filters or VisibilityFilters()
        self.readonly                               = readonly
        self.on_change                              = on_change
        self.state                                  = EditorState()
        self.highlight_path:    Tuple[str, ...]     = ()
        self.active:            bool                = False
        self._lookup                                = graph.node_lookup()
        self.set_mode(mode)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def mode(self) -> EditorMode:
        return self.state.machine.mode

    @property
    def interaction_mode(self) -> EditorMode:
        return self.state.machine.interaction_mode

    @property
    def machine(self):
        return self.state.machine

    def _changed(self):
        if self.on_change is not None:
            self.on_change()

    # -------------------------------------------------------------------------
    # Hit testing helpers (canvas space)
    # -------------------------------------------------------------------------

    def _hit_node(self, point: Point, radius: float = config.NODE_HIT_RADIUS_PX) -> Optional[str]:
        return nearest_node(point, self.graph.nodes, self.filters.visible_categories,
                            self.viewport.display_scale, radius)

    def _hit_edge(self, point: Point) -> Optional[str]:
        if not self.filters.show_edges:
            return None
        return nearest_edge(point, self.graph.floor_edges(), self._lookup,
                            self.filters.visible_categories, self.viewport.display_scale,
                            config.EDGE_HIT_THRESHOLD_PX, {n.id for n in self.graph.nodes})

    def _hit_corridor(self, point: Point) -> Optional[str]:
        if not self.filters.show_corridors:
            return None
        return nearest_corridor(point, self.graph.corridors, self.viewport.display_scale,
                                config.CORRIDOR_HIT_THRESHOLD_PX)

    def _authored(self, point: Point) -> PathPoint:
        """Canvas point to integer authored units."""
        ix, iy = self.viewport.to_image(point)
        return PathPoint(int(round(ix)), int(round(iy)))

    # -------------------------------------------------------------------------
    # Pointer events
    # -------------------------------------------------------------------------

    def pointer_down(self, screen: Point, button: int = LEFT_BUTTON) -> None:
        """Handle a press at ``screen`` (widget pixels)."""
        point = self.viewport.to_model(screen)
        mode  = self.interaction_mode
        state = self.state

        if button == MIDDLE_BUTTON or state.space_held:
            self._begin_pan(screen)
            return
        if button != LEFT_BUTTON:
            return

        node_id = self._hit_node(point)

        if node_id is not None:
            if mode == EditorMode.PATH_TEST:
                if self.machine.path_start_id is None:
                    state.select_node(node_id)
                effect = self.machine.path_click(node_id)
                self._apply_effect(effect)
            elif mode == EditorMode.ADD_EDGE:
                effect = self.machine.edge_click(node_id)
                if effect is not None or self.machine.edge_start_id is None:
                    state.edge_preview = None
                self._apply_effect(effect)
            elif mode in (EditorMode.ADD_NODE, EditorMode.ADD_CORRIDOR):
                logger.debug("Ignored node click in %s mode", mode.value)
                return
            else:
                state.select_node(node_id)
                self.callbacks.fire("on_node_click", node_id)
                if mode == EditorMode.SELECT and not self.readonly:
                    self._begin_drag(node_id, screen)
            self._changed()
            return

        # Empty canvas (or a hidden node, which is never hit)
        if mode == EditorMode.ADD_NODE:
            if not self.readonly:
                position = self._authored(point)
                logger.info("Requesting node at (%d, %d)", position.x, position.y)
                self.callbacks.fire("on_node_create", position)
            return

        if mode == EditorMode.ADD_CORRIDOR:
            if not self.readonly:
                ix, iy = self.viewport.to_image(point)
                self.machine.corridor_click(ix, iy)
                self._changed()
            return

        if mode == EditorMode.ADD_EDGE:
            self.machine.edge_cancel()
            state.edge_preview = None
            state.clear_selection()
            self._changed()
            return

        if mode == EditorMode.PATH_TEST:
            state.clear_selection()
            self._changed()
            return

        edge_id = self._hit_edge(point)
        if edge_id is not None:
            state.select_edge(edge_id)
            self.callbacks.fire("on_edge_click", edge_id)
            self._changed()
            return

        corridor_id = self._hit_corridor(point)
        if corridor_id is not None:
            state.select_corridor(corridor_id)
            self.callbacks.fire("on_corridor_click", corridor_id)
            self._changed()
            return

        state.clear_selection()
        if mode == EditorMode.VIEW:
            self._begin_pan(screen)
        self._changed()

    def pointer_move(self, screen: Point) -> None:
        """Handle pointer motion: pan, drag preview, edge preview and hover."""
        state = self.state

        if state.pan is not None:
            ax, ay = state.pan.anchor
            self.viewport.pan_to((screen[0] - ax, screen[1] - ay))
            self._changed()
            return

        if state.drag is not None:
            drag   = state.drag
            origin = self.viewport.to_model((screen[0] - drag.offset[0], screen[1] - drag.offset[1]))
            state.overlay[drag.node_id] = self._authored(origin)
            drag.moved = True
            self._changed()
            return

        point   = self.viewport.to_model(screen)
        changed = False

        start_id = self.machine.edge_start_id
        if start_id is not None:
            start = self._lookup.get(start_id)
            if start is not None:
                scale = self.viewport.display_scale
                state.edge_preview = ((start.x * scale, start.y * scale), point)
                changed = True

        hover = (self._hit_node(point), None, None)
        if hover[0] is None:
            edge_id = self._hit_edge(point)
            hover = (None, edge_id, None if edge_id else self._hit_corridor(point))
        if hover != (state.hovered_node_id, state.hovered_edge_id, state.hovered_corridor_id):
            state.hovered_node_id, state.hovered_edge_id, state.hovered_corridor_id = hover
            changed = True

        if changed:
            self._changed()

    def pointer_up(self, screen: Optional[Point] = None) -> None:
        """End a pan or drag. A moved drag commits here and only here."""
        if self.state.pan is not None:
            self.state.pan = None
            self._changed()
        if self.state.drag is not None:
            self._end_drag()
            self._changed()

    def pointer_leave(self) -> None:
        """Pointer left the canvas: behaves as pointer-up, so a drag commits."""
        self.pointer_up()
        if any((self.state.hovered_node_id, self.state.hovered_edge_id, self.state.hovered_corridor_id)):
            self.state.clear_hover()
            self._changed()

    def double_click(self, screen: Point) -> None:
        """Finish a corridor in progress, otherwise request an edit form."""
        point = self.viewport.to_model(screen)

        if self.machine.is_drawing_corridor:
            self.finish_corridor()
            return

        node_id = self._hit_node(point, config.NODE_DBLCLICK_RADIUS_PX)
        if node_id is not None:
            self.callbacks.fire("on_node_open_editor", node_id)
            return
        edge_id = self._hit_edge(point)
        if edge_id is not None:
            self.callbacks.fire("on_edge_open_editor", edge_id)
            return
        corridor_id = self._hit_corridor(point)
        if corridor_id is not None:
            self.callbacks.fire("on_corridor_open_editor", corridor_id)

    # -------------------------------------------------------------------------
    # Drag and pan sessions
    # -------------------------------------------------------------------------

    def _begin_drag(self, node_id: str, screen: Point) -> None:
        node = self.graph.find_node(node_id)
        if node is None:
            return
        nx, ny = self.viewport.to_screen(self.viewport.from_image((node.x, node.y)))
        self.state.drag = DragSession(node_id=node_id, offset=(screen[0] - nx, screen[1] - ny))

    def _end_drag(self) -> None:
        drag = self.state.drag
        self.state.drag = None
        position = self.state.overlay.pop(drag.node_id, None)
        if not drag.moved or position is None or self.readonly:
            return
        logger.info("Committing node %s at (%d, %d)", drag.node_id, position.x, position.y)
        self.callbacks.fire("on_node_position_commit", drag.node_id, int(position.x), int(position.y))

    def _begin_pan(self, screen: Point) -> None:
        px, py = self.viewport.pan
        self.state.pan = PanSession(anchor=(screen[0] - px, screen[1] - py))

    # -------------------------------------------------------------------------
    # Mode machine effects
    # -------------------------------------------------------------------------

    def _apply_effect(self, effect) -> None:
        if effect is None:
            return
        if isinstance(effect, EdgeCreate):
            if self.readonly:
                return
            logger.info("Requesting edge %s <-> %s", effect.node_a_id, effect.node_b_id)
            self.callbacks.fire("on_edge_create", effect.node_a_id, effect.node_b_id)
        elif isinstance(effect, CorridorCreate):
            if self.readonly:
                return
            logger.info("Requesting corridor with %d points", len(effect.points))
            self.callbacks.fire("on_corridor_create", list(effect.points))
        elif isinstance(effect, PathTest):
            self.callbacks.fire("on_path_test", effect.start_id, effect.end_id)

    # -------------------------------------------------------------------------
    # Toolbar actions
    # -------------------------------------------------------------------------

    def set_mode(self, mode: Union[EditorMode, str]) -> EditorMode:
        """Switch mode, discarding every sub-state of the previous one.

        In read-only mode anything other than view/select falls back to view.
        An active drag is committed first.
        """
        mode = EditorMode.parse(mode)
        if self.readonly and mode.interaction_mode() not in _SELECT_LIKE:
            logger.debug("Read-only editor: %s coerced to view", mode.value)
            mode = EditorMode.VIEW

        previous = self.interaction_mode
        if self.state.drag is not None:
            self._end_drag()
        self.machine.set_mode(mode)
        self.state.reset_transient()
        self.state.pan = None
        if previous not in _SELECT_LIKE or mode.interaction_mode() not in _SELECT_LIKE:
            self.state.clear_selection()
        self._changed()
        return mode

    def cancel(self) -> None:
        """Escape / cancel button: drop any in-progress multi-step interaction."""
        self.machine.corridor_cancel()
        self.machine.edge_cancel()
        self.machine.path_cancel()
        self.state.edge_preview = None
        self.state.clear_selection()
        self._changed()

    def finish_corridor(self) -> None:
        """Commit the corridor in progress when it has at least two points."""
        effect = self.machine.corridor_finish()
        self._apply_effect(effect)
        if effect is not None:
            self._changed()

    def delete_selected(self) -> None:
        """Request deletion of the selection; select mode only."""
        if self.readonly or self.interaction_mode != EditorMode.SELECT:
            return
        state = self.state
        if state.selected_node_id is not None:
            self.callbacks.fire("on_node_delete", state.selected_node_id)
        elif state.selected_edge_id is not None:
            self.callbacks.fire("on_edge_delete", state.selected_edge_id)
        elif state.selected_corridor_id is not None:
            self.callbacks.fire("on_corridor_delete", state.selected_corridor_id)
        else:
            return
        state.clear_selection()
        self._changed()

    # -------------------------------------------------------------------------
    # Keyboard
    # -------------------------------------------------------------------------

    def activate(self) -> None:
        self.active = True

    def deactivate(self) -> None:
        """Stop reacting to keys; a held space bar is released."""
        self.active = False
        self.state.space_held = False

    def key_press(self, key: str) -> bool:
        """Handle a key press while the editor is the active input target."""
        if not self.active:
            return False
        if key in (" ", "space"):
            self.state.space_held = True
            return True
        if key == "escape":
            self.cancel()
            return True
        if key in ("delete", "backspace"):
            self.delete_selected()
            return True
        return False

    def key_release(self, key: str) -> bool:
        if key in (" ", "space"):
            self.state.space_held = False
            return True
        return False

    # -------------------------------------------------------------------------
    # Zoom
    # -------------------------------------------------------------------------

    def zoom_in(self) -> float:
        zoom = self.viewport.zoom_in()
        self._changed()
        return zoom

    def zoom_out(self) -> float:
        zoom = self.viewport.zoom_out()
        self._changed()
        return zoom

    def zoom_reset(self) -> None:
        self.viewport.reset()
        self._changed()

    def scroll(self, steps: float) -> float:
        """Scroll-wheel zoom: positive steps zoom in by ZOOM_SCROLL_STEP each."""
        zoom = self.viewport.zoom_by(steps * config.ZOOM_SCROLL_STEP)
        self._changed()
        return zoom

    def rescale(self, container_width: float, max_height: float,
                image_width: float, image_height: float) -> float:
        scale = self.viewport.rescale(container_width, max_height, image_width, image_height)
        self._changed()
        return scale

    # -------------------------------------------------------------------------
    # Filters and data
    # -------------------------------------------------------------------------

    def set_visible_categories(self, categories: Iterable[NodeCategory]) -> None:
        self.filters.visible_categories = {NodeCategory.parse(c) for c in categories}
        self._prune()
        self._changed()

    def toggle_category(self, category: NodeCategory) -> None:
        category = NodeCategory.parse(category)
        visible = set(self.filters.visible_categories)
        visible.symmetric_difference_update({category})
        self.set_visible_categories(visible)

    def show_all_categories(self) -> None:
        self.set_visible_categories(NodeCategory)

    def hide_all_categories(self) -> None:
        self.set_visible_categories(())

    def toggle_labels(self) -> bool:
        self.filters.show_labels = not self.filters.show_labels
        self._changed()
        return self.filters.show_labels

    def set_show_edges(self, show: bool) -> None:
        self.filters.show_edges = show
        self._prune()
        self._changed()

    def set_show_corridors(self, show: bool) -> None:
        self.filters.show_corridors = show
        self._prune()
        self._changed()

    def set_node_size(self, size: float) -> float:
        self.filters.node_size = max(config.NODE_SIZE_MIN, min(config.NODE_SIZE_MAX, float(size)))
        self._changed()
        return self.filters.node_size

    def set_highlight_path(self, node_ids: Sequence[str]) -> None:
        """Show a route returned by the path-test collaborator."""
        self.highlight_path = tuple(node_ids)
        self._changed()

    def set_graph(self, graph: FloorGraph) -> None:
        """Replace the collections after the collaborator committed a change."""
        self.graph = graph
        self._lookup = graph.node_lookup()
        self._prune()
        self._changed()

    def _node_ok(self, node_id: Optional[str]) -> bool:
        node = self.graph.find_node(node_id)
        return node is not None and self.filters.is_visible(node.category)

    def _edge_ok(self, edge_id: Optional[str]) -> bool:
        return self.filters.show_edges and self.graph.find_edge(edge_id) is not None

    def _corridor_ok(self, corridor_id: Optional[str]) -> bool:
        return self.filters.show_corridors and self.graph.find_corridor(corridor_id) is not None

    def _prune(self) -> None:
        """Drop selection/hover ids that are hidden or no longer exist."""
        state = self.state
        if state.selected_node_id is not None and not self._node_ok(state.selected_node_id):
            state.selected_node_id = None
        if state.selected_edge_id is not None and not self._edge_ok(state.selected_edge_id):
            state.selected_edge_id = None
        if state.selected_corridor_id is not None and not self._corridor_ok(state.selected_corridor_id):
            state.selected_corridor_id = None
        if state.hovered_node_id is not None and not self._node_ok(state.hovered_node_id):
            state.hovered_node_id = None
        if state.hovered_edge_id is not None and not self._edge_ok(state.hovered_edge_id):
            state.hovered_edge_id = None
        if state.hovered_corridor_id is not None and not self._corridor_ok(state.hovered_corridor_id):
            state.hovered_corridor_id = None
        start_id = self.machine.edge_start_id
        if start_id is not None and not self._node_ok(start_id):
            self.machine.edge_cancel()
            state.edge_preview = None

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    def hint(self) -> str:
        """One-line instruction for the info bar."""
        mode = self.interaction_mode
        if self.readonly:
            return "Read-only mode"
        if mode == EditorMode.ADD_EDGE:
            if self.machine.edge_start_id:
                return "Select second node to create edge"
            return "Click a node to start an edge"
        if mode == EditorMode.ADD_NODE:
            return "Click on canvas to add node"
        if mode == EditorMode.ADD_CORRIDOR:
            n = len(self.machine.corridor_points)
            if n == 0:
                return "Click to place corridor points"
            return f"{n} point{'s' if n != 1 else ''} - double-click to finish"
        if mode == EditorMode.PATH_TEST:
            if self.machine.path_start_id:
                return "Select destination node"
            return "Select start node"
        if mode == EditorMode.SELECT:
            return "Click to select, drag to move nodes"
        return "Drag to pan, scroll to zoom"
