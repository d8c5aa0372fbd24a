# Standard library imports
from types import SimpleNamespace

# Third-party imports
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pytest
from PIL import Image

# floorgraph imports
from floorgraph.canvas_editor import FloorPlanEditor
from floorgraph.graph_store import GraphStore
from floorgraph.models import FloorGraph, Node, NodeCategory
from floorgraph.modes import EditorMode


def floor():
    return FloorGraph(
        floor_id="L1",
        nodes=[
            Node("A", "Room A", NodeCategory.ROOM, 20, 20, "L1"),
            Node("B", "Room B", NodeCategory.ROOM, 150, 20, "L1"),
        ],
    )


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def editor():
    """Editor over a small canvas, built but not shown"""
    ed = FloorPlanEditor(floor(), canvas_size=(200, 150))
    ed.build()
    return ed


def press(editor, x, y, button=1, dblclick=False):
    editor._on_press(SimpleNamespace(inaxes=editor.ax, xdata=x, ydata=y, button=button, dblclick=dblclick))


def release(editor, x, y):
    editor._on_release(SimpleNamespace(inaxes=editor.ax, xdata=x, ydata=y))


def move(editor, x, y):
    editor._on_motion(SimpleNamespace(inaxes=editor.ax, xdata=x, ydata=y))


def key(editor, name):
    editor._on_key_press(SimpleNamespace(key=name))


class TestBuild:
    """Window construction"""

    def test_build_creates_canvas_and_panel(self, editor):
        assert editor.fig is not None
        assert editor._image_handle.get_array().shape[:2] == (150, 200)
        assert set(editor.mode_buttons) == {EditorMode.VIEW, EditorMode.SELECT, EditorMode.ADD_NODE,
                                             EditorMode.ADD_EDGE, EditorMode.ADD_CORRIDOR, EditorMode.PATH_TEST}
        assert "zoom 100%" in editor.hint_text.get_text()

    def test_rebuild_closes_previous_window(self, editor):
        first = editor.fig
        editor.build()
        open_figures = [plt.figure(n) for n in plt.get_fignums()]
        assert first not in open_figures
        assert editor.fig in open_figures

    def test_accepts_existing_store(self):
        store = GraphStore(floor())
        ed = FloorPlanEditor(store, canvas_size=(200, 150))
        assert ed.store is store

    def test_load_image_sets_display_scale(self, tmp_path):
        path = tmp_path / "plan.png"
        Image.new("RGB", (400, 300), "white").save(path)
        ed = FloorPlanEditor(floor(), image_path=path, canvas_size=(200, 150))
        assert ed.controller.viewport.display_scale == pytest.approx(0.5)
        ed.build()
        assert ed.surface.to_array().shape == (150, 200, 4)


class TestPointerEvents:
    """Mouse events routed to the controller and the store"""

    def test_add_node_click_creates_node(self, editor):
        key(editor, "n")
        press(editor, 80, 100)
        nodes = editor.store.graph.nodes
        assert len(nodes) == 3
        assert (nodes[-1].x, nodes[-1].y) == (80, 100)

    def test_drag_moves_node(self, editor):
        press(editor, 20, 20)
        move(editor, 60, 90)
        release(editor, 60, 90)
        node = editor.store.graph.find_node("A")
        assert (node.x, node.y) == (60, 90)

    def test_add_edge_with_two_clicks(self, editor):
        key(editor, "e")
        assert editor.controller.mode is EditorMode.ADD_EDGE
        press(editor, 20, 20)
        press(editor, 150, 20)
        assert len(editor.store.graph.edges) == 1

    def test_double_click_finishes_corridor(self, editor):
        key(editor, "c")
        press(editor, 40, 100)
        press(editor, 120, 100)
        press(editor, 120, 100, dblclick=True)
        corridors = editor.store.graph.corridors
        assert len(corridors) == 1
        assert len(corridors[0].points) == 2

    def test_press_outside_canvas_ignored(self, editor):
        key(editor, "n")
        editor._on_press(SimpleNamespace(inaxes=None, xdata=None, ydata=None, button=1, dblclick=False))
        assert len(editor.store.graph.nodes) == 2

    def test_double_click_node_reports_details(self, editor):
        press(editor, 20, 20, dblclick=True)
        assert "Room A" in editor.status_text.get_text()

    def test_scroll_zooms(self, editor):
        editor._on_scroll(SimpleNamespace(inaxes=editor.ax, step=2))
        assert editor.controller.viewport.zoom == pytest.approx(1.2)

    def test_axes_leave_deactivates(self, editor):
        editor._on_axes_enter(SimpleNamespace(inaxes=editor.ax))
        assert editor.controller.active
        editor._on_axes_leave(SimpleNamespace(inaxes=editor.ax))
        assert not editor.controller.active


class TestPathTest:
    """Path test requests"""

    def test_path_finder_route_is_highlighted(self):
        ed = FloorPlanEditor(floor(), canvas_size=(200, 150), path_finder=lambda a, b: [a, b])
        ed.build()
        key(ed, "p")
        press(ed, 20, 20)
        press(ed, 150, 20)
        assert ed.controller.highlight_path == ("A", "B")
        assert "Route Room A -> Room B" in ed.status_text.get_text()

    def test_without_path_finder_status_only(self, editor):
        key(editor, "p")
        press(editor, 20, 20)
        press(editor, 150, 20)
        assert editor.controller.highlight_path == ()
        assert "Path test: Room A -> Room B" in editor.status_text.get_text()


class TestToolbar:
    """Keyboard shortcuts and side panel widgets"""

    def test_zoom_keys(self, editor):
        key(editor, "+")
        key(editor, "+")
        key(editor, "-")
        assert editor.controller.viewport.zoom == pytest.approx(1.25)
        key(editor, "r")
        assert editor.controller.viewport.zoom == 1.0

    def test_labels_key(self, editor):
        key(editor, "l")
        assert not editor.controller.filters.show_labels

    def test_quit_key_closes_window(self, editor):
        number = editor.fig.number
        key(editor, "q")
        assert not plt.fignum_exists(number)

    def test_escape_reaches_controller_when_active(self, editor):
        key(editor, "c")
        editor.controller.activate()
        press(editor, 40, 100)
        key(editor, "escape")
        assert not editor.controller.machine.is_drawing_corridor

    def test_category_checkbox_hides_nodes(self, editor):
        editor.category_checks.set_active(0)
        assert not editor.controller.filters.is_visible(NodeCategory.ROOM)

    def test_size_slider(self, editor):
        editor.size_slider.set_val(20)
        assert editor.controller.filters.node_size == 20

    def test_save_snapshot(self, editor, tmp_path):
        path = editor.save_snapshot(tmp_path / "floor.png")
        assert path.exists()
        assert Image.open(path).size == (200, 150)
        assert "Saved snapshot" in editor.status_text.get_text()

    def test_mode_switch_clears_status(self, editor):
        editor._update_status("something")
        editor.set_mode(EditorMode.VIEW)
        assert editor.status_text.get_text() == "Status: view"
