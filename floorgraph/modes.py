"""
Editing modes and their interaction sub-states.

Each mode owns its own family of sub-state classes, so a combination such as
"corridor points collected while adding an edge" cannot be represented. The
machine never calls collaborators itself: transitions return an effect object
describing what the controller should fire.

    addEdge      EdgeNoFirstNode -> EdgeFirstChosen(a) -> [EdgeCreate] -> EdgeNoFirstNode
    addCorridor  CorridorIdle -> CorridorDrawing(points) -> [CorridorCreate] -> CorridorIdle
    pathTest     PathNoStart -> PathStartChosen(s) -> [PathTest] -> PathStartChosen(s, e)
"""

# floorgraph imports
from floorgraph.models import PathPoint

# Standard library imports
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)


class EditorMode(str, Enum):
    VIEW            = "view"
    SELECT          = "select"
    ADD_NODE        = "addNode"
    ADD_EDGE        = "addEdge"
    ADD_CORRIDOR    = "addCorridor"
    PATH_TEST       = "pathTest"
    # Presentation aliases: select plus an open edit form
    EDIT_NODE       = "editNode"
    EDIT_EDGE       = "editEdge"
    EDIT_CORRIDOR   = "editCorridor"

    def interaction_mode(self) -> "EditorMode":
        if self in (EditorMode.EDIT_NODE, EditorMode.EDIT_EDGE, EditorMode.EDIT_CORRIDOR):
            return EditorMode.SELECT
        return self

    @property
    def mutates(self) -> bool:
        """Whether the mode exists to change the graph."""
        return self.interaction_mode() in (
            EditorMode.ADD_NODE, EditorMode.ADD_EDGE, EditorMode.ADD_CORRIDOR)

    @classmethod
    def parse(cls, value: Union["EditorMode", str]) -> "EditorMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown editor mode: {value!r}") from None


# -----------------------------------------------------------------------------
# Sub-states
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Idle:
    """View, select and addNode carry no multi-step state."""


@dataclass(frozen=True)
class EdgeNoFirstNode:
    pass


@dataclass(frozen=True)
class EdgeFirstChosen:
    node_id: str


@dataclass(frozen=True)
class CorridorIdle:
    pass


@dataclass(frozen=True)
class CorridorDrawing:
    points: Tuple[PathPoint, ...]


@dataclass(frozen=True)
class PathNoStart:
    pass


@dataclass(frozen=True)
class PathStartChosen:
    start_id: str
    end_id: Optional[str] = None


SubState = Union[Idle, EdgeNoFirstNode, EdgeFirstChosen, CorridorIdle,
                 CorridorDrawing, PathNoStart, PathStartChosen]


def initial_substate(mode: EditorMode) -> SubState:
    mode = mode.interaction_mode()
    if mode == EditorMode.ADD_EDGE:
        return EdgeNoFirstNode()
    if mode == EditorMode.ADD_CORRIDOR:
        return CorridorIdle()
    if mode == EditorMode.PATH_TEST:
        return PathNoStart()
    return Idle()


# -----------------------------------------------------------------------------
# Effects
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class EdgeCreate:
    node_a_id: str
    node_b_id: str


@dataclass(frozen=True)
class CorridorCreate:
    points: Tuple[PathPoint, ...]


@dataclass(frozen=True)
class PathTest:
    start_id: str
    end_id: str


Effect = Union[EdgeCreate, CorridorCreate, PathTest]


class ModeMachine:
    """Finite state machine over editor modes and their sub-states.

    ``set_mode`` is the only input accepted at any time; it always returns the
    machine to the entry sub-state of the requested mode. Every other input
    is ignored unless the current mode expects it.
    """

    def __init__(self, mode: Union[EditorMode, str] = EditorMode.VIEW):
        self.mode: EditorMode = EditorMode.parse(mode)
        self.substate: SubState = initial_substate(self.mode)

    def __repr__(self):
        return f"ModeMachine(mode={self.mode.value}, substate={self.substate})"

    @property
    def interaction_mode(self) -> EditorMode:
        return self.mode.interaction_mode()

    def set_mode(self, mode: Union[EditorMode, str]) -> None:
        self.mode = EditorMode.parse(mode)
        self.substate = initial_substate(self.mode)
        logger.debug("Mode set to %s", self.mode.value)

    # -- addEdge --------------------------------------------------------------

    @property
    def edge_start_id(self) -> Optional[str]:
        return self.substate.node_id if isinstance(self.substate, EdgeFirstChosen) else None

    def edge_click(self, node_id: str) -> Optional[EdgeCreate]:
        if self.interaction_mode != EditorMode.ADD_EDGE:
            return None
        if isinstance(self.substate, EdgeFirstChosen):
            first = self.substate.node_id
            if first == node_id:
                logger.debug("Ignored self-loop on node %s", node_id)
                return None
            self.substate = EdgeNoFirstNode()
            return EdgeCreate(first, node_id)
        self.substate = EdgeFirstChosen(node_id)
        return None

    def edge_cancel(self) -> None:
        if isinstance(self.substate, EdgeFirstChosen):
            self.substate = EdgeNoFirstNode()

    # -- addCorridor ----------------------------------------------------------

    @property
    def is_drawing_corridor(self) -> bool:
        return isinstance(self.substate, CorridorDrawing)

    @property
    def corridor_points(self) -> Tuple[PathPoint, ...]:
        return self.substate.points if isinstance(self.substate, CorridorDrawing) else ()

    def corridor_click(self, x: float, y: float) -> None:
        if self.interaction_mode != EditorMode.ADD_CORRIDOR:
            return
        point  = PathPoint(int(round(x)), int(round(y)))
        points = self.corridor_points
        if points and points[-1] == point:
            # second press of a double-click lands on the point just placed
            logger.debug("Skipped duplicate corridor point %s", point)
            self.substate = CorridorDrawing(points)
            return
        self.substate = CorridorDrawing(points + (point,))

    def corridor_finish(self) -> Optional[CorridorCreate]:
        points = self.corridor_points
        if len(points) < 2:
            logger.debug("Corridor finish ignored with %d point(s)", len(points))
            return None
        self.substate = CorridorIdle()
        return CorridorCreate(points)

    def corridor_cancel(self) -> None:
        if self.interaction_mode == EditorMode.ADD_CORRIDOR:
            self.substate = CorridorIdle()

    # -- pathTest -------------------------------------------------------------

    @property
    def path_start_id(self) -> Optional[str]:
        return self.substate.start_id if isinstance(self.substate, PathStartChosen) else None

    @property
    def path_end_id(self) -> Optional[str]:
        return self.substate.end_id if isinstance(self.substate, PathStartChosen) else None

    def path_click(self, node_id: str) -> Optional[PathTest]:
        if self.interaction_mode != EditorMode.PATH_TEST:
            return None
        if isinstance(self.substate, PathStartChosen):
            start = self.substate.start_id
            if start == node_id:
                return None
            self.substate = PathStartChosen(start, node_id)
            return PathTest(start, node_id)
        self.substate = PathStartChosen(node_id)
        return None

    def path_cancel(self) -> None:
        if self.interaction_mode == EditorMode.PATH_TEST:
            self.substate = PathNoStart()
