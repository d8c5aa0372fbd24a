from .models import Corridor, Edge, EdgeCategory, FloorGraph, Node, NodeCategory, PathPoint
from .transform import Viewport
from .modes import EditorMode, ModeMachine
from .state import EditorState, VisibilityFilters
from .callbacks import EditorCallbacks
from .controller import InteractionController
from .renderer import Renderer, render_frame
from .surfaces import DrawSurface, PillowSurface, RecordingSurface
from .graph_store import GraphStore
from . import config, hit_testing
