"""
Floorgraph Configuration Module
===============================

Centralized constants for the floor plan graph editor: hit-test radii, zoom
limits, marker sizes and the colour tables used by the renderer. Values that
operators commonly tune can be overridden through environment variables.
"""

# fmt: off
# autopep8: off

import os
from pathlib import Path

# Root directory of the project
PROJECT_ROOT        = Path(__file__).parent.parent

# Output directory for exported editor snapshots
OUTPUTS_DIR         = Path(os.getenv("FLOORGRAPH_OUTPUTS_DIR", str(PROJECT_ROOT / "outputs")))
SNAPSHOT_DIR        = OUTPUTS_DIR / "snapshots"

# ============================================================================
# HIT TESTING (display pixels, applied after the display scale projection)
# ============================================================================
NODE_HIT_RADIUS_PX          = 10.0
NODE_DBLCLICK_RADIUS_PX     = 12.0
EDGE_HIT_THRESHOLD_PX       = 8.0
CORRIDOR_HIT_THRESHOLD_PX   = 8.0

# ============================================================================
# VIEW CONTROLS
# ============================================================================
ZOOM_MIN            = 0.25
ZOOM_MAX            = 4.0
ZOOM_STEP           = 0.25
ZOOM_SCROLL_STEP    = 0.1

# Canvas container used to derive the display scale of a floor plan image
DEFAULT_CONTAINER_WIDTH = 800
DEFAULT_MAX_HEIGHT      = 700

# Node marker display radius (toolbar slider)
DEFAULT_NODE_SIZE   = float(os.getenv("FLOORGRAPH_NODE_SIZE", "10"))
NODE_SIZE_MIN       = 4.0
NODE_SIZE_MAX       = 30.0

# ============================================================================
# RENDERING
# ============================================================================
CROSS_FLOOR_FRACTION    = 0.3      # portion of a cross-floor edge drawn from the on-floor end
CROSS_FLOOR_BADGE_AT    = 0.15     # badge position along the full segment
CROSS_FLOOR_BADGE_R     = 8.0
CROSS_FLOOR_DASH        = (10, 5)
PREVIEW_DASH            = (8, 4)
SELECTION_RING_DASH     = (4, 2)
LABEL_MAX_CHARS         = 12
LABEL_FONT_SIZE         = 10
CORRIDOR_FINISH_HINT    = "Double-click to finish"

BACKGROUND_COLOR    = "#F3F4F6"
SELECT_COLOR        = "#3B82F6"
EDGE_START_COLOR    = "#10B981"
HIGHLIGHT_COLOR     = "#10B981"
CROSS_FLOOR_COLOR   = "#EF4444"
PATH_START_COLOR    = "#22C55E"
PATH_END_COLOR      = "#EF4444"
INACCESSIBLE_FILL   = "#FEF3C7"
INACCESSIBLE_STROKE = "#F59E0B"
NODE_BORDER_COLOR   = "#FFFFFF"
LABEL_BG_COLOR      = "#FFFFFF"
LABEL_TEXT_COLOR    = "#374151"

CORRIDOR_COLOR          = "#A78BFA"
CORRIDOR_HOVER_COLOR    = "#8B5CF6"
CORRIDOR_SELECT_COLOR   = "#7C3AED"
CORRIDOR_LABEL_BG       = "#8B5CF6"

# Node category styles, keyed by NodeCategory value
NODE_STYLES = {
    0: {"label": "Room",             "color": "#3B82F6"},
    1: {"label": "Corridor",         "color": "#6B7280"},
    2: {"label": "Elevator",         "color": "#8B5CF6"},
    3: {"label": "Stairs",           "color": "#F59E0B"},
    4: {"label": "Entrance",         "color": "#10B981"},
    5: {"label": "Restroom",         "color": "#06B6D4"},
    6: {"label": "Information Desk", "color": "#6366F1"},
    7: {"label": "Unknown",          "color": "#9CA3AF"},
}

# Edge category styles, keyed by EdgeCategory value
EDGE_STYLES = {
    "Walking":    {"label": "Walking Path", "color": "#6B7280", "dash": (),     "width": 2, "badge": "W"},
    "Stairs":     {"label": "Stairs",       "color": "#F59E0B", "dash": (8, 4), "width": 3, "badge": "S"},
    "Elevator":   {"label": "Elevator",     "color": "#8B5CF6", "dash": (),     "width": 4, "badge": "E"},
    "Transition": {"label": "Transition",   "color": "#06B6D4", "dash": (4, 2), "width": 3, "badge": "T"},
}

# Edge weight suggestions (units per floor travelled, plus a fixed cost)
WEIGHT_PER_FLOOR = {
    "Stairs":     (50, 10),
    "Elevator":   (30, 5),
    "Transition": (20, 5),
}
