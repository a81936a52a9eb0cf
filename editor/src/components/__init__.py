"""Interactive components for Frame Composer

- frame_scheduler: one-slot frame scheduling (Qt timer or manual stepping)
- inertial_pan: velocity tracking and post-release glide
- viewport_controller: wheel/keyboard zoom and elastic panning
- gesture_controller: move/resize/rotate gesture state machine
- transform_handles: handle hit testing and drag math
"""

from .frame_scheduler import FrameScheduler, QtFrameScheduler, ManualFrameScheduler, FrameThrottle
from .inertial_pan import InertialPanController
from .viewport_controller import ViewportController
from .gesture_controller import GestureController

__all__ = [
    'FrameScheduler',
    'QtFrameScheduler',
    'ManualFrameScheduler',
    'FrameThrottle',
    'InertialPanController',
    'ViewportController',
    'GestureController',
]
