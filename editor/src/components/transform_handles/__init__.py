"""
Frame Composer - Transform Handle Components

- handles.py: ABC-based handle classes (MoveHandle, ResizeHandle, RotateHandle)
- drag_context.py: Gesture state captured at pointer-down
"""

from .drag_context import GestureState
from .handles import (
    Handle, MoveHandle, ResizeHandle, RotateHandle, create_handle, get_handle_at_point
)

__all__ = [
    'GestureState',
    'Handle', 'MoveHandle', 'ResizeHandle', 'RotateHandle',
    'create_handle', 'get_handle_at_point',
]
