"""Viewport navigation controller.

Ties the zoom and pan math to input events:
- Wheel zoom anchored at the cursor
- Toolbar / keyboard zoom about the container center, fit and 100%
- Pan with middle/right button or while Space is held
- Elastic resistance while dragging, inertia on release, hard clamp once settled
"""
import logging

from PyQt5.QtCore import QObject, pyqtSignal

from models.events import PointerInput, WheelInput, KeyInput
from models.transform import Rect, Size, Vec2
from models.viewport import Viewport
from services.zoom import (
    calculate_min_zoom, zoom_about_point, zoom_about_center, apply_zoom_preset,
)
from services.pan_bounds import (
    calculate_pan_bounds, constrain_viewport_with_elasticity, clamp_to_bounds,
)
from utils.coordinate_transforms import (
    client_to_document, document_to_client, document_rect_for_viewport,
)
from utils.settings import EngineSettings
from components.frame_scheduler import QtFrameScheduler, FrameThrottle
from components.inertial_pan import InertialPanController
from constants import (
    WHEEL_ZOOM_IN_FACTOR, WHEEL_ZOOM_OUT_FACTOR, BUTTON_MIDDLE, BUTTON_RIGHT,
    KEY_SPACE, MODIFIER_CTRL, MODIFIER_META, MODIFIER_SHIFT,
)


class ViewportController(QObject):
    """Owns the current Viewport and publishes every change."""

    viewportChanged = pyqtSignal(object)  # Viewport

    def __init__(self, content_size: Size, container_rect: Rect, settings: EngineSettings = None,
                 scheduler_factory=None, parent=None):
        """
        Args:
            content_size: Document size in document pixels
            container_rect: Client rect of the canvas container
            settings: Engine settings (defaults when None)
            scheduler_factory: Callable returning a FrameScheduler (Qt timer based by default)
            parent: Optional QObject parent
        """
        super().__init__(parent)
        self._logger = logging.getLogger(__name__)
        self.settings = settings or EngineSettings()
        self.content_size = content_size
        self.container_rect = container_rect
        self._viewport = Viewport()

        factory = scheduler_factory or QtFrameScheduler
        self.pan_throttle = FrameThrottle(self._apply_pan, factory())
        self.inertia = InertialPanController(
            factory(), self.settings.inertia, self.settings.reduced_motion, parent=self
        )
        self.inertia.offsetDelta.connect(self._on_inertia_delta)
        self.inertia.finished.connect(self.settle)

        self.space_pressed = False
        self._pan_pointer_id = None
        self._pan_start = None
        self._pan_start_offset = None

    # ========================================
    # State
    # ========================================

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    def set_viewport(self, viewport: Viewport):
        if viewport == self._viewport:
            return
        self._viewport = viewport
        self.viewportChanged.emit(viewport)

    def set_container_rect(self, rect: Rect):
        self.container_rect = rect

    def set_content_size(self, size: Size):
        self.content_size = size

    @property
    def container_size(self) -> Size:
        return Size(self.container_rect.width, self.container_rect.height)

    @property
    def is_panning(self) -> bool:
        return self._pan_pointer_id is not None

    def document_rect(self) -> Rect:
        """Client rect of the rendered document for the current viewport"""
        return document_rect_for_viewport(self._viewport, self.container_rect, self.content_size)

    def client_to_document(self, point) -> Vec2:
        return client_to_document(point, self._viewport, self.document_rect())

    def document_to_client(self, point) -> Vec2:
        return document_to_client(point, self._viewport, self.document_rect())

    def min_zoom(self) -> float:
        """Dynamic minimum zoom keeping the padded document on screen"""
        return calculate_min_zoom(
            self.content_size, self.container_size,
            self.settings.min_zoom_padding, self.settings.zoom.min_zoom,
        )

    def _zoom_floor(self) -> float:
        # A preset may sit below the dynamic minimum; stepping out from there must not zoom in
        return min(self._viewport.zoom, self.min_zoom())

    # ========================================
    # Zoom
    # ========================================

    def zoom_at(self, target_zoom: float, client_x: float, client_y: float):
        """Zoom keeping the document point under (client_x, client_y) fixed"""
        self.set_viewport(zoom_about_point(
            self._viewport, target_zoom,
            client_x - self.container_rect.left, client_y - self.container_rect.top,
            self.container_size, self.settings.zoom, self._zoom_floor(),
        ))

    def zoom_in(self):
        self.set_viewport(zoom_about_center(
            self._viewport, self._viewport.zoom * self.settings.zoom.zoom_step,
            self.container_size, self.settings.zoom, self._zoom_floor(),
        ))

    def zoom_out(self):
        self.set_viewport(zoom_about_center(
            self._viewport, self._viewport.zoom / self.settings.zoom.zoom_step,
            self.container_size, self.settings.zoom, self._zoom_floor(),
        ))

    def apply_preset(self, preset: str):
        """Centered viewport at 'fit', 'fill', '100%', '200%' or '50%'"""
        self.inertia.cancel_inertia()
        self.set_viewport(apply_zoom_preset(
            preset, self.content_size, self.container_size, self.settings.zoom, self.settings.fit_margin,
        ))

    def fit(self):
        self.apply_preset('fit')

    def reset_zoom(self):
        self.apply_preset('100%')

    def wheel(self, event: WheelInput) -> bool:
        """Wheel zoom about the cursor. Returns True if handled."""
        if event.delta_y == 0:
            return False
        factor = WHEEL_ZOOM_OUT_FACTOR if event.delta_y > 0 else WHEEL_ZOOM_IN_FACTOR
        self.zoom_at(self._viewport.zoom * factor, event.x, event.y)
        return True

    # ========================================
    # Keyboard
    # ========================================

    def key_press(self, event: KeyInput) -> bool:
        """Handle Space and the zoom shortcuts. Returns True if handled."""
        if event.key == KEY_SPACE:
            self.space_pressed = True
            return True

        command = (event.has(MODIFIER_CTRL) or event.has(MODIFIER_META)) and not event.has(MODIFIER_SHIFT)
        if not command:
            return False
        if event.key in ('=', '+'):
            self.zoom_in()
        elif event.key in ('-', '_'):
            self.zoom_out()
        elif event.key == '0':
            self.fit()
        elif event.key == '1':
            self.reset_zoom()
        else:
            return False
        return True

    def key_release(self, event: KeyInput) -> bool:
        if event.key == KEY_SPACE:
            self.space_pressed = False
            return True
        return False

    # ========================================
    # Panning
    # ========================================

    def should_start_pan(self, event: PointerInput) -> bool:
        return event.button in (BUTTON_MIDDLE, BUTTON_RIGHT) or self.space_pressed

    def begin_pan(self, event: PointerInput) -> bool:
        """Start a pan if the button/Space state allows it. Running inertia is cancelled."""
        if self.is_panning or not self.should_start_pan(event):
            return False
        self.inertia.cancel_inertia()
        self.inertia.reset_velocity()
        self._pan_pointer_id = event.pointer_id
        self._pan_start = (event.x, event.y)
        self._pan_start_offset = (self._viewport.offset_x, self._viewport.offset_y)
        self.inertia.track_velocity(event.x, event.y, event.timestamp)
        self._logger.debug(f"Pan started at ({event.x}, {event.y})")
        return True

    def pan_move(self, event: PointerInput):
        """Track velocity and schedule an elastic offset update (once per frame)"""
        if event.pointer_id != self._pan_pointer_id:
            return
        self.inertia.track_velocity(event.x, event.y, event.timestamp)
        self.pan_throttle(event.x, event.y)

    def end_pan(self, event: PointerInput = None) -> bool:
        """Finish the pan: glide if fast enough, otherwise settle

        Returns:
            True if inertia started
        """
        if not self.is_panning:
            return False
        if event is not None and event.pointer_id != self._pan_pointer_id:
            return False
        if self.pan_throttle.is_pending:
            self.pan_throttle.flush()
        self._pan_pointer_id = None
        self._pan_start = None
        self._pan_start_offset = None

        started = self.inertia.start_inertia()
        if not started:
            self.settle()
        return started

    def settle(self):
        """Hard clamp offsets to the pan bounds"""
        bounds = calculate_pan_bounds(self.content_size, self.container_size, self._viewport.zoom,
                                      self.settings.elastic)
        offset_x, offset_y = clamp_to_bounds(self._viewport.offset_x, self._viewport.offset_y, bounds)
        self.set_viewport(Viewport(self._viewport.zoom, offset_x, offset_y))

    def _apply_pan(self, client_x: float, client_y: float):
        if self._pan_start is None:
            return
        offset_x = self._pan_start_offset[0] + (client_x - self._pan_start[0])
        offset_y = self._pan_start_offset[1] + (client_y - self._pan_start[1])
        offset_x, offset_y = constrain_viewport_with_elasticity(
            offset_x, offset_y, self.content_size, self.container_size,
            self._viewport.zoom, self.settings.elastic,
        )
        self.set_viewport(Viewport(self._viewport.zoom, offset_x, offset_y))

    def _on_inertia_delta(self, dx: float, dy: float):
        self.set_viewport(Viewport(
            self._viewport.zoom, self._viewport.offset_x + dx, self._viewport.offset_y + dy,
        ))
