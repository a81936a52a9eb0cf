"""
Frame Composer - Constants and Configuration

This module contains all constant values used throughout the engine:
- Layer types and base layer defaults
- Zoom, pan and inertia tuning
- Snapping and grid settings
- Transform handle geometry and gesture constraints
- Coordinate system definitions
"""

# ======================================================================
# LAYER TYPES
# ======================================================================

LAYER_TYPE_BASE = 'base'
LAYER_TYPE_IMAGE = 'image'
LAYER_TYPE_GROUP = 'group'

LAYER_TYPES = (LAYER_TYPE_BASE, LAYER_TYPE_IMAGE, LAYER_TYPE_GROUP)

# Base layer is forced to this name whenever the invariant is restored
BASE_LAYER_NAME = 'Base Canvas'
DEFAULT_GROUP_NAME = 'Group'

# Appended to duplicated layers (a trailing " copy" / " copy 2" is stripped first)
COPY_SUFFIX = ' copy'

# ======================================================================
# COORDINATE SYSTEM
# ======================================================================

# Document space: origin at the document's top-left corner, Y-down, units are
# document pixels. Angles are degrees externally, radians only inside trig.
# Viewport offsets are screen-space translation of the document origin
# relative to the container center.

DEFAULT_ZOOM = 1.0
DEFAULT_OFFSET_X = 0.0
DEFAULT_OFFSET_Y = 0.0

# ======================================================================
# ZOOM
# ======================================================================

ZOOM_MIN = 0.05   # 5%
ZOOM_MAX = 8.0    # 800%
ZOOM_STEP = 1.2   # Toolbar / keyboard zoom multiplier
WHEEL_ZOOM_IN_FACTOR = 1.1
WHEEL_ZOOM_OUT_FACTOR = 0.9

# Fit-to-screen margin as fraction of the container (0.1 = 10%)
FIT_MARGIN = 0.1

# Screen pixels kept free on each side when the minimum zoom is raised
MIN_ZOOM_PADDING = 48.0


# ======================================================================
# PAN BOUNDS
# ======================================================================

# How much of the visible area the content may be dragged past the edges
PAN_MARGIN_FACTOR = 0.5
# Elastic pull-back strength when panning past the soft bounds (0-1)
PAN_RESISTANCE = 0.7

# ======================================================================
# INERTIA
# ======================================================================

INERTIA_MIN_VELOCITY = 0.1    # px/ms needed to start inertia
INERTIA_FRICTION = 0.95       # Friction coefficient (higher = glides longer)
INERTIA_MAX_DURATION = 600.0  # ms
INERTIA_FRAME_MS = 16.0       # Nominal frame length used to scale deltas

# Nominal frame interval for the Qt frame scheduler (~60 fps)
FRAME_INTERVAL_MS = 16

# ======================================================================
# SNAPPING
# ======================================================================

DEFAULT_GRID_SIZE = 10.0
# Screen-space snap threshold in pixels (divided by zoom for document space)
DEFAULT_SNAP_THRESHOLD = 8.0
# Absorbs float noise when a candidate sits exactly on the threshold
SNAP_EPSILON = 1e-9

# Adaptive grid levels: (min_zoom, max_zoom, spacing, subdivisions)
GRID_LEVELS = (
    (0.0, 0.25, 100.0, 1),
    (0.25, 0.5, 50.0, 1),
    (0.5, 1.5, 24.0, 1),
    (1.5, 3.0, 24.0, 2),
    (3.0, float('inf'), 12.0, 2),
)

# ======================================================================
# TRANSFORM HANDLES & GESTURES
# ======================================================================

HANDLE_MOVE = 'move'
HANDLE_ROTATE = 'rotate'
HANDLE_TOP = 'top'
HANDLE_RIGHT = 'right'
HANDLE_BOTTOM = 'bottom'
HANDLE_LEFT = 'left'
HANDLE_TOP_LEFT = 'top-left'
HANDLE_TOP_RIGHT = 'top-right'
HANDLE_BOTTOM_RIGHT = 'bottom-right'
HANDLE_BOTTOM_LEFT = 'bottom-left'

CORNER_HANDLES = (HANDLE_TOP_LEFT, HANDLE_TOP_RIGHT, HANDLE_BOTTOM_RIGHT, HANDLE_BOTTOM_LEFT)
EDGE_HANDLES = (HANDLE_TOP, HANDLE_RIGHT, HANDLE_BOTTOM, HANDLE_LEFT)
RESIZE_HANDLES = CORNER_HANDLES + EDGE_HANDLES
HANDLE_KINDS = (HANDLE_MOVE, HANDLE_ROTATE) + RESIZE_HANDLES

# Visual handle size in screen pixels, scaled by zoom * device pixel ratio
TRANSFORM_HANDLE_SIZE = 12.0
TRANSFORM_HANDLE_MIN_EFFECTIVE_ZOOM = 0.5
TRANSFORM_HANDLE_MAX_EFFECTIVE_ZOOM = 6.0
# Distance of the rotation handle above the box, in handle sizes
TRANSFORM_ROTATION_HANDLE_OFFSET = 4.0

# Smallest width/height a resize may produce (document units)
MIN_RESIZE_SIZE = 8.0
# Selection box dimensions are floored to this before computing resize ratios
MIN_BOX_SIZE = 1.0

ROTATION_SNAP_INCREMENT = 15.0

# Modifier names carried by input events
MODIFIER_SHIFT = 'shift'
MODIFIER_CTRL = 'ctrl'
MODIFIER_ALT = 'alt'
MODIFIER_META = 'meta'

# Holding this releases the aspect lock on corner handles
ASPECT_UNLOCK_MODIFIER = MODIFIER_SHIFT
# Holding this snaps rotation to ROTATION_SNAP_INCREMENT
ROTATION_SNAP_MODIFIER = MODIFIER_ALT

# Pointer buttons (DOM numbering)
BUTTON_LEFT = 0
BUTTON_MIDDLE = 1
BUTTON_RIGHT = 2

# ======================================================================
# KEYBOARD
# ======================================================================

KEY_ESCAPE = 'Escape'
KEY_SPACE = 'Space'

# Amount to move layers when using arrow keys (document units)
ARROW_KEY_MOVE_NORMAL = 1.0
ARROW_KEY_MOVE_LARGE = 10.0  # With Shift modifier

ARROW_KEYS = {
    'ArrowLeft': (-1.0, 0.0),
    'ArrowRight': (1.0, 0.0),
    'ArrowUp': (0.0, -1.0),
    'ArrowDown': (0.0, 1.0),
}

# ======================================================================
# CONFIG FILE
# ======================================================================

CONFIG_DIR_NAME = '.frame_composer'
CONFIG_FILE_NAME = 'config.json'
