"""
Floorgraph: Interactive Wayfinding Graph Editor for Floor Plan Images

Author nodes (rooms, stairs, elevators, ...), weighted edges and corridor
polylines by drawing directly on a floor plan. Changes are applied to an
in-memory GraphStore; the terminal log records every commit.

Controls:
    v / s         View / Select mode
    n             Add Node: click empty canvas
    e             Add Edge: click two nodes
    c             Add Corridor: click points, double-click to finish
    p             Path Test: click start and destination nodes
    Drag          Move a node (select mode)
    Space+drag    Pan (middle-drag or view-mode drag also pan)
    Scroll        Zoom
    + / - / r     Zoom in / out / reset
    l             Toggle labels
    Double-click  Finish corridor, or show details of a node/edge/corridor
    Esc           Cancel the current interaction
    Del           Delete the selection
    q             Quit

Set IMAGE_PATH to a floor plan image to draw over it; without one, the demo
floor is shown on a blank canvas.
"""

# fmt: off
# autopep8: off

# floorgraph imports
from floorgraph.canvas_editor import FloorPlanEditor
from floorgraph.graph_store import GraphStore
from floorgraph.models import Corridor, Edge, EdgeCategory, FloorGraph, Node, NodeCategory, PathPoint

# Standard library imports
import logging

IMAGE_PATH  = None      # e.g. "inputs/level_1.png"
READ_ONLY   = False


def demo_floor() -> FloorGraph:
    """Level 1 with a lobby, two rooms, a stair core and a link to level 2."""
    lobby   = Node("n-lobby",   "Main Lobby",       NodeCategory.ENTRANCE,  120, 350, "L1")
    office  = Node("n-101",     "Room 101",         NodeCategory.ROOM,      320, 180, "L1")
    meeting = Node("n-102",     "Meeting Room 102", NodeCategory.ROOM,      320, 520, "L1")
    stairs  = Node("n-st1",     "Stair A",          NodeCategory.STAIRS,    560, 350, "L1")
    wc      = Node("n-wc1",     "Restroom",         NodeCategory.RESTROOM,  560, 560, "L1")
    upper   = Node("n-st2",     "Stair A (L2)",     NodeCategory.STAIRS,    700, 200, "L2")

    edges = [
        Edge("e-1", lobby.id,   office.id,  weight=255),
        Edge("e-2", lobby.id,   meeting.id, weight=266),
        Edge("e-3", lobby.id,   stairs.id,  weight=440),
        Edge("e-4", stairs.id,  wc.id,      weight=210),
        Edge("e-5", stairs.id,  upper.id,   weight=60, category=EdgeCategory.STAIRS, is_accessible=False),
    ]
    corridors = [
        Corridor("c-1", "East Corridor", [PathPoint(160, 350), PathPoint(440, 350), PathPoint(520, 350)], "L1"),
    ]
    return FloorGraph(
        floor_id="L1",
        nodes=[lobby, office, meeting, stairs, wc],
        edges=edges,
        corridors=corridors,
        all_nodes=[upper],
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    store = GraphStore(demo_floor(), floor_levels={"L1": 1, "L2": 2})
    editor = FloorPlanEditor(store, image_path=IMAGE_PATH, readonly=READ_ONLY)
    editor.launch()

    graph = store.graph
    print(f"Session ended with {len(graph.nodes)} nodes, {len(graph.edges)} edges, "
          f"{len(graph.corridors)} corridors on floor {graph.floor_id}")
