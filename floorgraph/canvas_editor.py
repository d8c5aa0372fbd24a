"""
Interactive matplotlib window for authoring a floor's wayfinding graph.

The canvas is a PillowSurface raster shown with ``imshow`` on an axes whose
data coordinates equal raster pixels, so ``event.xdata``/``event.ydata`` are
the screen points the InteractionController expects. Every controller state
change triggers a synchronous repaint.

Usage:
    from floorgraph.canvas_editor import FloorPlanEditor
    editor = FloorPlanEditor(FloorGraph(floor_id="L1"), image_path="plans/level1.png")
    editor.launch()
"""

# floorgraph imports
from floorgraph import config
from floorgraph.callbacks import EditorCallbacks
from floorgraph.controller import InteractionController
from floorgraph.graph_store import GraphStore
from floorgraph.models import FloorGraph, NodeCategory
from floorgraph.modes import EditorMode
from floorgraph.renderer import Renderer
from floorgraph.surfaces import PillowSurface

# Standard library imports
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

# Third-party imports
import matplotlib.pyplot as plt
from matplotlib.widgets import Button, CheckButtons, Slider
from PIL import Image

# Configure basic logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
)
logger = logging.getLogger(__name__)

MODE_KEYS: Dict[str, EditorMode] = {
    "v": EditorMode.VIEW,
    "s": EditorMode.SELECT,
    "n": EditorMode.ADD_NODE,
    "e": EditorMode.ADD_EDGE,
    "c": EditorMode.ADD_CORRIDOR,
    "p": EditorMode.PATH_TEST,
}

MODE_LABELS: Dict[EditorMode, str] = {
    EditorMode.VIEW:            "View (V)",
    EditorMode.SELECT:          "Select (S)",
    EditorMode.ADD_NODE:        "Add Node (N)",
    EditorMode.ADD_EDGE:        "Add Edge (E)",
    EditorMode.ADD_CORRIDOR:    "Add Corridor (C)",
    EditorMode.PATH_TEST:       "Path Test (P)",
}

EDITOR_KEYS = set(MODE_KEYS) | {"+", "=", "-", "r", "l", "q"}


def _release_default_keymaps(keys) -> None:
    """Remove editor shortcuts from matplotlib's built-in navigation keymaps."""
    for name in [k for k in plt.rcParams if k.startswith("keymap.")]:
        plt.rcParams[name] = [k for k in plt.rcParams[name] if k not in keys]


class FloorPlanEditor:
    """Matplotlib editor for nodes, edges and corridors drawn over a floor plan.

    Args:
        graph: Floor collections, or a GraphStore that already owns them.
        image_path: Optional floor plan image, read with PIL.
        mode: Initial editor mode.
        readonly: Inspection only; every mutation is suppressed.
        callbacks: Extra callbacks chained after the store's own handlers
            (path test, edit-form requests, click notifications).
        path_finder: Optional ``(start_id, end_id) -> [node ids]`` used to
            highlight the route of a path test.
        canvas_size: Raster size in pixels; also the container used for the
            display scale.
    """

    _WINDOW_TITLE = "Floor Plan Graph Editor"

    def __init__(
        self,
        graph:          Union[FloorGraph, GraphStore],
        image_path:     Optional[Union[Path, str]]                          = None,
        mode:           Union[EditorMode, str]                              = EditorMode.SELECT,
        readonly:       bool                                                = False,
        callbacks:      Optional[EditorCallbacks]                           = None,
        path_finder:    Optional[Callable[[str, str], Sequence[str]]]       = None,
        canvas_size:    Sequence[int]                                       = (config.DEFAULT_CONTAINER_WIDTH,
                                                                               config.DEFAULT_MAX_HEIGHT),
    ):
        self.store                                  = graph if isinstance(graph, GraphStore) else GraphStore(graph)
        self.path_finder                            = path_finder
        self.canvas_width:  int                     = int(canvas_size[0])
        self.canvas_height: int                     = int(canvas_size[1])
        self.image:         Optional[Image.Image]   = None

        # matplotlib artists (created by build)
        self.fig                                    = None
        self.ax                                     = None
        self._image_handle                          = None
        self.status_text                            = None
        self.hint_text                              = None
        self.mode_buttons:  Dict[EditorMode, Button] = {}
        self.category_checks: Optional[CheckButtons] = None
        self._status_message: str                   = ""

        own = EditorCallbacks(
            on_path_test=self._on_path_test,
            on_node_open_editor=self._on_node_open_editor,
            on_edge_open_editor=self._on_edge_open_editor,
            on_corridor_open_editor=self._on_corridor_open_editor,
        )
        merged = own.merged(callbacks) if callbacks is not None else own

        self.controller = InteractionController(
            self.store.graph,
            self.store.callbacks(merged),
            mode=mode,
            readonly=readonly,
            on_change=self._redraw,
        )
        self.store.subscribe(self.controller.set_graph)

        self.surface                                = PillowSurface(self.canvas_width, self.canvas_height)
        self.renderer                               = Renderer()

        if image_path is not None:
            self.load_image(image_path)

    # -------------------------------------------------------------------------
    # Image
    # -------------------------------------------------------------------------

    def load_image(self, image_path: Union[Path, str]) -> None:
        """Load a floor plan and derive its display scale."""
        path = Path(image_path)
        with Image.open(path) as img:
            self.image = img.convert("RGBA")
        scale = self.controller.rescale(self.canvas_width, self.canvas_height,
                                        self.image.width, self.image.height)
        logger.info("Loaded floor plan %s (%dx%d, display scale %.3f)",
                    path.name, self.image.width, self.image.height, scale)

    # -------------------------------------------------------------------------
    # Layout helper: top-left coordinate system
    # -------------------------------------------------------------------------

    def _axes(self, x, y, w, h):
        """Create figure axes at (x, y) measured from the top-left corner."""
        return self.fig.add_axes((x, 1.0 - y - h, w, h))

    # -------------------------------------------------------------------------
    # Window
    # -------------------------------------------------------------------------

    def build(self):
        """Create the figure, widgets and event bindings without showing them."""
        for fig_num in plt.get_fignums():
            fig = plt.figure(fig_num)
            if getattr(fig, "_floorgraph_editor", False):
                plt.close(fig)

        _release_default_keymaps(EDITOR_KEYS | {" ", "escape", "delete", "backspace"})

        self.fig = plt.figure(figsize=(14, 8), facecolor="#F5F5F0")
        self.fig._floorgraph_editor = True
        if self.fig.canvas.manager is not None:
            self.fig.canvas.manager.set_window_title(self._WINDOW_TITLE)

        self.ax = self._axes(0.25, 0.05, 0.72, 0.85)
        self.ax.set_facecolor(config.BACKGROUND_COLOR)
        self.ax.axis("off")
        self._image_handle = self.ax.imshow(
            self.surface.to_array(),
            extent=(0, self.canvas_width, self.canvas_height, 0),
            interpolation="nearest",
        )
        self.ax.set_xlim(0, self.canvas_width)
        self.ax.set_ylim(self.canvas_height, 0)

        self._setup_side_panel()

        self.fig.canvas.mpl_connect("button_press_event", self._on_press)
        self.fig.canvas.mpl_connect("button_release_event", self._on_release)
        self.fig.canvas.mpl_connect("motion_notify_event", self._on_motion)
        self.fig.canvas.mpl_connect("scroll_event", self._on_scroll)
        self.fig.canvas.mpl_connect("key_press_event", self._on_key_press)
        self.fig.canvas.mpl_connect("key_release_event", self._on_key_release)
        self.fig.canvas.mpl_connect("axes_enter_event", self._on_axes_enter)
        self.fig.canvas.mpl_connect("axes_leave_event", self._on_axes_leave)
        self.fig.canvas.mpl_connect("figure_leave_event", self._on_figure_leave)

        self._redraw()
        return self.fig

    def launch(self):
        """Open the interactive editor window."""
        self.build()
        graph = self.controller.graph
        print(f"\n=== {self._WINDOW_TITLE} ===")
        print(f"Floor {graph.floor_id}: {len(graph.nodes)} nodes, {len(graph.edges)} edges, "
              f"{len(graph.corridors)} corridors")
        print("v/s/n/e/c/p: modes | +/-/r: zoom | l: labels | space+drag: pan")
        print("Double-click: finish corridor / edit | Esc: cancel | Del: delete | q: quit")
        print("=" * (len(self._WINDOW_TITLE) + 8) + "\n")
        plt.show()

    def _setup_side_panel(self):
        """Mode buttons, view controls, category filter, node size and status lines."""
        pl      = 0.02
        pw      = 0.20
        btn_h   = 0.036
        gap     = 0.008

        self._btn_color = "#E8E8E0"
        self._btn_hover = "#D8D8D0"
        self._btn_active = "#BBDEFB"

        ax_title = self._axes(pl, 0.02, pw, 0.03)
        ax_title.axis("off")
        ax_title.text(0, 0.5, "FLOOR PLAN EDITOR", fontsize=10, fontweight="bold", color="#404040")

        # Modes
        y = 0.06
        for mode, label in MODE_LABELS.items():
            btn = Button(self._axes(pl, y, pw, btn_h), label, color=self._btn_color, hovercolor=self._btn_hover)
            btn.label.set_fontsize(8)
            btn.on_clicked(lambda _event, m=mode: self.set_mode(m))
            self.mode_buttons[mode] = btn
            y += btn_h + gap

        # View controls: zoom -, reset, +, labels
        y += gap
        third = (pw - 2 * gap) / 3
        self.btn_zoom_out = self._small_button(pl, y, third, btn_h, "Zoom -", self.controller.zoom_out)
        self.btn_zoom_reset = self._small_button(pl + third + gap, y, third, btn_h, "Reset (R)",
                                                 self.controller.zoom_reset)
        self.btn_zoom_in = self._small_button(pl + 2 * (third + gap), y, third, btn_h, "Zoom +",
                                              self.controller.zoom_in)
        y += btn_h + gap
        half = (pw - gap) / 2
        self.btn_labels = self._small_button(pl, y, half, btn_h, "Labels (L)", self.controller.toggle_labels)
        self.btn_snapshot = self._small_button(pl + half + gap, y, half, btn_h, "Save PNG", self.save_snapshot)

        # Corridor and selection actions
        y += btn_h + 2 * gap
        self.btn_finish = self._small_button(pl, y, half, btn_h, "Finish", self.controller.finish_corridor)
        self.btn_cancel = self._small_button(pl + half + gap, y, half, btn_h, "Cancel (Esc)",
                                             self.controller.cancel)
        y += btn_h + gap
        self.btn_delete = Button(self._axes(pl, y, pw, btn_h), "Delete Selected (Del)",
                                 color="#FFCDD2", hovercolor="#EF9A9A")
        self.btn_delete.label.set_fontsize(8)
        self.btn_delete.on_clicked(lambda _event: self.controller.delete_selected())

        # Node size
        y += btn_h + 2 * gap
        ax_size = self._axes(pl + 0.05, y, pw - 0.07, 0.025)
        self.size_slider = Slider(ax_size, "Node size", config.NODE_SIZE_MIN, config.NODE_SIZE_MAX,
                                  valinit=self.controller.filters.node_size, valstep=1)
        self.size_slider.label.set_fontsize(8)
        self.size_slider.on_changed(self.controller.set_node_size)

        # Category filter
        y += 0.025 + 2 * gap
        categories = list(NodeCategory)
        ax_checks = self._axes(pl, y, pw, 0.24)
        ax_checks.set_facecolor("#FAFAF8")
        self.category_checks = CheckButtons(
            ax_checks,
            [c.label for c in categories],
            [self.controller.filters.is_visible(c) for c in categories],
        )
        for text in self.category_checks.labels:
            text.set_fontsize(8)
        self.category_checks.on_clicked(self._on_category_toggle)

        # Status lines
        ax_status = self._axes(0.25, 0.91, 0.72, 0.07)
        ax_status.axis("off")
        self.status_text = ax_status.text(0, 0.7, "", fontsize=9, color="#1565C0", transform=ax_status.transAxes)
        self.hint_text = ax_status.text(0, 0.15, "", fontsize=8, color="#505050", transform=ax_status.transAxes)

    def _small_button(self, x, y, w, h, label, action) -> Button:
        btn = Button(self._axes(x, y, w, h), label, color=self._btn_color, hovercolor=self._btn_hover)
        btn.label.set_fontsize(8)
        btn.on_clicked(lambda _event: action())
        return btn

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def _redraw(self):
        """Repaint the raster from the controller state and refresh the panel."""
        if self.fig is None:
            return
        c = self.controller
        self.renderer.draw(self.surface, c.graph, c.state, c.viewport, c.filters, c.highlight_path, self.image)
        self._image_handle.set_data(self.surface.to_array())
        for mode, btn in self.mode_buttons.items():
            btn.color = self._btn_active if mode == c.interaction_mode else self._btn_color
            btn.ax.set_facecolor(btn.color)
        self.hint_text.set_text(f"{c.hint()}  |  zoom {c.viewport.zoom:.0%}")
        self.status_text.set_text(f"Status: {self._status_message or c.mode.value}")
        self.fig.canvas.draw_idle()

    def _update_status(self, message: str):
        self._status_message = message
        logger.info(message)
        self._redraw()

    def save_snapshot(self, path: Optional[Union[Path, str]] = None) -> Path:
        """Write the current canvas raster as PNG (default: SNAPSHOT_DIR/<floor>.png)."""
        c = self.controller
        self.renderer.draw(self.surface, c.graph, c.state, c.viewport, c.filters, c.highlight_path, self.image)
        target = Path(path) if path is not None else config.SNAPSHOT_DIR / f"floor_{c.graph.floor_id}.png"
        self.surface.save(target)
        self._update_status(f"Saved snapshot to {target}")
        return target

    # -------------------------------------------------------------------------
    # Toolbar
    # -------------------------------------------------------------------------

    def set_mode(self, mode: Union[EditorMode, str]) -> EditorMode:
        self._status_message = ""
        return self.controller.set_mode(mode)

    def _on_category_toggle(self, label: str):
        for category in NodeCategory:
            if category.label == label:
                self.controller.toggle_category(category)
                return

    # -------------------------------------------------------------------------
    # Collaborator requests handled by the window
    # -------------------------------------------------------------------------

    def _on_path_test(self, start_id: str, end_id: str):
        lookup = self.controller.graph.node_lookup()
        start, end = lookup.get(start_id), lookup.get(end_id)
        names = (start.name if start else start_id, end.name if end else end_id)
        if self.path_finder is None:
            self._update_status(f"Path test: {names[0]} -> {names[1]}")
            return
        route: List[str] = list(self.path_finder(start_id, end_id) or [])
        self.controller.set_highlight_path(route)
        if route:
            self._update_status(f"Route {names[0]} -> {names[1]}: {len(route)} nodes")
        else:
            self._update_status(f"No route from {names[0]} to {names[1]}")

    def _on_node_open_editor(self, node_id: str):
        node = self.controller.graph.find_node(node_id)
        if node is not None:
            self._update_status(f"Node '{node.name}' ({node.category.label}) at ({node.x:g}, {node.y:g})")

    def _on_edge_open_editor(self, edge_id: str):
        edge = self.controller.graph.find_edge(edge_id)
        if edge is not None:
            access = "accessible" if edge.is_accessible else "not accessible"
            self._update_status(f"Edge {edge.category.style['label']}, weight {edge.weight:g}, {access}")

    def _on_corridor_open_editor(self, corridor_id: str):
        corridor = self.controller.graph.find_corridor(corridor_id)
        if corridor is not None:
            self._update_status(f"Corridor '{corridor.name}' with {len(corridor.points)} points")

    # -------------------------------------------------------------------------
    # Mouse and keyboard events
    # -------------------------------------------------------------------------

    def _on_press(self, event):
        if event.inaxes is not self.ax or event.xdata is None:
            return
        screen = (event.xdata, event.ydata)
        if event.dblclick:
            self.controller.double_click(screen)
        else:
            self.controller.pointer_down(screen, int(event.button))

    def _on_release(self, event):
        screen = (event.xdata, event.ydata) if event.inaxes is self.ax and event.xdata is not None else None
        self.controller.pointer_up(screen)

    def _on_motion(self, event):
        if event.inaxes is not self.ax or event.xdata is None:
            return
        self.controller.pointer_move((event.xdata, event.ydata))

    def _on_scroll(self, event):
        if event.inaxes is not self.ax:
            return
        self.controller.scroll(event.step)

    def _on_key_press(self, event):
        """Editor shortcuts first, then the controller's canvas keys."""
        key = event.key
        if key in MODE_KEYS:
            self.set_mode(MODE_KEYS[key])
        elif key in ("+", "="):
            self.controller.zoom_in()
        elif key == "-":
            self.controller.zoom_out()
        elif key == "r":
            self.controller.zoom_reset()
        elif key == "l":
            self.controller.toggle_labels()
        elif key == "q":
            plt.close(self.fig)
        else:
            self.controller.key_press(key)

    def _on_key_release(self, event):
        self.controller.key_release(event.key)

    def _on_axes_enter(self, event):
        if event.inaxes is self.ax:
            self.controller.activate()

    def _on_axes_leave(self, event):
        if event.inaxes is self.ax:
            self.controller.pointer_leave()
            self.controller.deactivate()

    def _on_figure_leave(self, event):
        self.controller.pointer_leave()
        self.controller.deactivate()
