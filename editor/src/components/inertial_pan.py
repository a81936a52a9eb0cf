"""Inertial panning: velocity tracking during a pan and decaying glide after release."""
import math
import logging

from PyQt5.QtCore import QObject, pyqtSignal

from models.viewport import InertiaConfig
from constants import INERTIA_FRAME_MS


def ease_out_cubic(t: float) -> float:
    return 1 - (1 - t) ** 3


class InertialPanController(QObject):
    """Emits decaying offset deltas after a fast pan release.

    Velocity is measured in px/ms between successive pointer samples. On
    release, if speed >= min_velocity, one delta per frame is emitted for
    min(max_duration, speed * 1000) ms, shaped by an ease-out curve and a
    friction factor. The last frame emits a zero delta, then finished fires.
    With reduced motion enabled no glide runs.
    """

    offsetDelta = pyqtSignal(float, float)
    finished = pyqtSignal()

    def __init__(self, scheduler, config: InertiaConfig = InertiaConfig(),
                 reduced_motion: bool = False, parent=None):
        super().__init__(parent)
        self._logger = logging.getLogger(__name__)
        self.scheduler = scheduler
        self.config = config
        self.reduced_motion = reduced_motion

        self._velocity = (0.0, 0.0)
        self._last_position = None
        self._last_time = None

        self._running = False
        self._start_time = 0.0
        self._duration = 0.0
        self._glide_velocity = (0.0, 0.0)

    # ========================================
    # Velocity tracking
    # ========================================

    @property
    def velocity(self):
        """Last measured velocity (vx, vy) in px/ms"""
        return self._velocity

    @property
    def is_running(self) -> bool:
        return self._running

    def track_velocity(self, x: float, y: float, timestamp: float = None):
        """Record a pointer sample during a pan

        Args:
            x, y: Client position
            timestamp: Sample time in ms (scheduler clock when None)
        """
        now = self.scheduler.now() if timestamp is None else timestamp
        if self._last_position is not None and self._last_time is not None:
            dt = now - self._last_time
            if dt > 0:
                self._velocity = (
                    (x - self._last_position[0]) / dt,
                    (y - self._last_position[1]) / dt,
                )
        self._last_position = (x, y)
        self._last_time = now

    def reset_velocity(self):
        """Forget tracked samples (call on pointer down)"""
        self._velocity = (0.0, 0.0)
        self._last_position = None
        self._last_time = None

    # ========================================
    # Glide animation
    # ========================================

    def start_inertia(self) -> bool:
        """Start gliding with the tracked velocity

        Returns:
            True if an animation started
        """
        self._stop_animation()

        vx, vy = self._velocity
        speed = math.hypot(vx, vy)
        if speed < self.config.min_velocity:
            return False

        duration = 0.0 if self.reduced_motion else min(self.config.max_duration, speed * 1000)
        if duration <= 0:
            return False

        self._glide_velocity = (vx, vy)
        self._duration = duration
        self._start_time = self.scheduler.now()
        self._running = True
        self._logger.debug(f"Inertia started: speed={speed:.3f}px/ms duration={duration:.0f}ms")
        self.scheduler.request_frame(self._animate)
        return True

    def cancel_inertia(self):
        """Stop any running glide and clear velocity tracking"""
        self._stop_animation()
        self.reset_velocity()

    def _stop_animation(self):
        if self._running:
            self.scheduler.cancel()
            self._running = False

    def _animate(self, now: float):
        if not self._running:
            return
        elapsed = now - self._start_time
        progress = min(elapsed / self._duration, 1.0)

        eased = ease_out_cubic(progress)
        friction_factor = self.config.friction ** (progress * 100)
        vx, vy = self._glide_velocity
        dx = vx * (1 - eased) * friction_factor * INERTIA_FRAME_MS
        dy = vy * (1 - eased) * friction_factor * INERTIA_FRAME_MS
        self.offsetDelta.emit(dx, dy)

        # A slot may have cancelled us
        if not self._running:
            return
        if progress < 1:
            self.scheduler.request_frame(self._animate)
        else:
            self._running = False
            self._velocity = (0.0, 0.0)
            self.finished.emit()
