"""
Collaborator callbacks fired by the editor.

All callbacks are optional and fire-and-forget: the editor resets its own
transient state before firing and never inspects the return value.
"""

# floorgraph imports
from floorgraph.models import PathPoint

# Standard library imports
import logging
from dataclasses import dataclass, fields
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class EditorCallbacks:
    on_node_create:             Optional[Callable[[PathPoint], None]]               = None
    on_node_position_commit:    Optional[Callable[[str, int, int], None]]           = None
    on_node_delete:             Optional[Callable[[str], None]]                     = None
    on_edge_create:             Optional[Callable[[str, str], None]]                = None
    on_edge_delete:             Optional[Callable[[str], None]]                     = None
    on_corridor_create:         Optional[Callable[[List[PathPoint]], None]]         = None
    on_corridor_delete:         Optional[Callable[[str], None]]                     = None
    on_path_test:               Optional[Callable[[str, str], None]]                = None
    on_node_open_editor:        Optional[Callable[[str], None]]                     = None
    on_edge_open_editor:        Optional[Callable[[str], None]]                     = None
    on_corridor_open_editor:    Optional[Callable[[str], None]]                     = None
    on_node_click:              Optional[Callable[[str], None]]                     = None
    on_edge_click:              Optional[Callable[[str], None]]                     = None
    on_corridor_click:          Optional[Callable[[str], None]]                     = None

    def fire(self, name: str, *args) -> None:
        """Call the named callback when one is registered."""
        callback = getattr(self, name)
        if callback is None:
            logger.debug("No handler for %s%s", name, args)
            return
        logger.debug("Firing %s%s", name, args)
        callback(*args)

    def merged(self, other: "EditorCallbacks") -> "EditorCallbacks":
        """Return callbacks where every handler of ``other`` also runs after ours."""
        combined = {}
        for f in fields(self):
            first, second = getattr(self, f.name), getattr(other, f.name)
            combined[f.name] = _chain(first, second) if first and second else (first or second)
        return EditorCallbacks(**combined)


def _chain(first: Callable, second: Callable) -> Callable:
    def _both(*args):
        first(*args)
        second(*args)
    return _both
