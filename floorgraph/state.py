"""
Transient editor state and visibility filters.

EditorState is owned by the InteractionController; the renderer only reads
it. Dragged node positions live in ``overlay`` (node id -> authored position)
until the drag commits, so the committed node collection is never touched
mid-interaction.
"""

# floorgraph imports
from floorgraph import config
from floorgraph.models import NodeCategory, PathPoint
from floorgraph.modes import ModeMachine

# Standard library imports
from dataclasses import dataclass, field
from typing import Dict, Optional, Set, Tuple

Point = Tuple[float, float]


@dataclass
class VisibilityFilters:
    """Toolbar display settings: which node categories and layers are shown."""
    visible_categories:             Set[NodeCategory]   = field(default_factory=lambda: set(NodeCategory))
    show_edges:                     bool                = True
    show_corridors:                 bool                = True
    show_labels:                    bool                = True
    show_cross_floor_indicators:    bool                = True
    node_size:                      float               = config.DEFAULT_NODE_SIZE

    def is_visible(self, category: NodeCategory) -> bool:
        return category in self.visible_categories


@dataclass
class DragSession:
    """An active node drag.

    Attributes:
        node_id: Node being dragged.
        offset: Pointer minus the node's projected screen position, in zoomed
            screen units.
        moved: Set once the pointer has moved; a click without movement
            commits nothing.
    """
    node_id:    str
    offset:     Point
    moved:      bool    = False


@dataclass
class PanSession:
    """An active pan gesture: pointer position minus pan offset at gesture start."""
    anchor: Point


@dataclass
class EditorState:
    machine:                ModeMachine             = field(default_factory=ModeMachine)

    hovered_node_id:        Optional[str]           = None
    hovered_edge_id:        Optional[str]           = None
    hovered_corridor_id:    Optional[str]           = None

    selected_node_id:       Optional[str]           = None
    selected_edge_id:       Optional[str]           = None
    selected_corridor_id:   Optional[str]           = None

    # Edge preview from the first chosen node to the pointer, in canvas space
    edge_preview:           Optional[Tuple[Point, Point]] = None

    drag:                   Optional[DragSession]   = None
    overlay:                Dict[str, PathPoint]    = field(default_factory=dict)

    pan:                    Optional[PanSession]    = None
    space_held:             bool                    = False

    @property
    def dragged_node_id(self) -> Optional[str]:
        return self.drag.node_id if self.drag is not None and self.drag.moved else None

    def select_node(self, node_id: Optional[str]) -> None:
        self.selected_node_id, self.selected_edge_id, self.selected_corridor_id = node_id, None, None

    def select_edge(self, edge_id: Optional[str]) -> None:
        self.selected_node_id, self.selected_edge_id, self.selected_corridor_id = None, edge_id, None

    def select_corridor(self, corridor_id: Optional[str]) -> None:
        self.selected_node_id, self.selected_edge_id, self.selected_corridor_id = None, None, corridor_id

    def clear_selection(self) -> None:
        self.select_node(None)

    def clear_hover(self) -> None:
        self.hovered_node_id = self.hovered_edge_id = self.hovered_corridor_id = None

    def reset_transient(self) -> None:
        """Drop everything a mode switch must not carry over (drag is handled by the caller)."""
        self.edge_preview = None
        self.overlay.clear()
        self.clear_hover()
