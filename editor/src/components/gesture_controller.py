"""Gesture state machine for move / resize / rotate of the selection.

idle -> active(handle) -> committed | cancelled -> idle

One gesture at a time, owned by the pointer that started it. Pointer moves
are coalesced through a one-slot frame scheduler (latest sample wins); the
release point is recomputed synchronously so the commit never depends on a
frame that did not run.
"""
import logging
from dataclasses import replace

from PyQt5.QtCore import QObject, pyqtSignal

from models.events import PointerInput, KeyInput
from models.transform import Rect, Vec2
from models.viewport import Viewport
from services.interaction_math import pointer_angle
from utils.geometry import get_union_bounding_box
from utils.coordinate_transforms import client_to_document, scale_handle_size_for_zoom
from utils.settings import EngineSettings
from components.frame_scheduler import QtFrameScheduler
from components.transform_handles import GestureState, create_handle, get_handle_at_point
from constants import HANDLE_ROTATE, KEY_ESCAPE


class GestureController(QObject):
    """Turns pointer samples on a handle into preview and committed transforms.

    Signals:
        previewChanged(dict, list): layer id -> Transform, active SnapGuides
        committed(dict): final layer id -> Transform batch
        cancelled(): gesture abandoned, nothing committed
        guidesChanged(list): active SnapGuides (empty list clears)
        captureReleased(int): pointer id whose capture can be released
    """

    previewChanged = pyqtSignal(object, object)  # dict, list
    committed = pyqtSignal(object)  # dict
    cancelled = pyqtSignal()
    guidesChanged = pyqtSignal(object)  # list
    captureReleased = pyqtSignal(int)

    def __init__(self, scheduler=None, settings: EngineSettings = None, parent=None):
        """
        Args:
            scheduler: FrameScheduler for preview frames (Qt timer based by default)
            settings: Handle size and snapping options (defaults when None)
            parent: Optional QObject parent
        """
        super().__init__(parent)
        self._logger = logging.getLogger(__name__)
        self.settings = settings or EngineSettings()
        self.scheduler = scheduler or QtFrameScheduler(parent=self)

        self._selection = []
        self._document_rect = None
        self._viewport = Viewport()
        self._snap_context = None

        self._state = None
        self._handle = None
        self._guides = []

    # ========================================
    # Inputs from the document / viewport stores
    # ========================================

    def set_selection(self, layers):
        """Selected layers in selection order (read at pointer-down)"""
        self._selection = list(layers)

    def set_document_rect(self, rect: Rect):
        """Client rect of the rendered document (None when unknown)"""
        self._document_rect = rect

    def set_viewport(self, viewport: Viewport):
        self._viewport = viewport

    def set_snap_context(self, context):
        """SnapContext for move gestures, or None to disable snapping

        Grid size and threshold are taken from the settings at gesture time.
        """
        self._snap_context = context

    # ========================================
    # State
    # ========================================

    @property
    def is_active(self) -> bool:
        return self._state is not None

    @property
    def state(self):
        return self._state

    @property
    def guides(self):
        return list(self._guides)

    def handle_at(self, x: float, y: float, device_pixel_ratio: float = 1.0):
        """Handle kind under a client position for the current selection, or None"""
        if not self._selection or self._document_rect is None:
            return None
        box = get_union_bounding_box(layer.transform for layer in self._selection)
        size = scale_handle_size_for_zoom(self.settings.handle_size, self._viewport.zoom, device_pixel_ratio)
        return get_handle_at_point(self._to_document(x, y), box, size)

    def cursor_for(self, handle_kind):
        """Qt cursor shape for a handle kind"""
        return create_handle(handle_kind).get_cursor()

    # ========================================
    # Pointer events
    # ========================================

    def pointer_down(self, handle_kind: str, event: PointerInput) -> bool:
        """Start a gesture on a handle

        Returns:
            True if the gesture started (False for an empty selection, unknown
            document rect, or while another gesture is active)
        """
        if self._state is not None:
            self._logger.debug(f"Ignoring pointer {event.pointer_id}: gesture owned by {self._state.pointer_id}")
            return False
        if not self._selection or self._document_rect is None:
            return False

        handle = create_handle(handle_kind)
        start = self._to_document(event.x, event.y)
        initial = {layer.id: layer.transform for layer in self._selection}
        box = get_union_bounding_box(initial.values())
        initial_angle = None
        if handle_kind == HANDLE_ROTATE and box is not None:
            initial_angle = pointer_angle(box.center, start)

        self._handle = handle
        self._state = GestureState(
            handle=handle_kind,
            pointer_id=event.pointer_id,
            start_point=start,
            initial_transforms=initial,
            box=box,
            aspect_locked=handle.locks_aspect(event.modifiers),
            initial_angle=initial_angle,
            modifiers=frozenset(event.modifiers),
        )
        self._logger.debug(f"Gesture '{handle_kind}' started by pointer {event.pointer_id} on {len(initial)} layer(s)")
        return True

    def pointer_move(self, event: PointerInput) -> bool:
        """Schedule a preview for this sample (replaces any pending one)"""
        if not self._owns(event):
            return False
        self.scheduler.request_frame(lambda _timestamp: self._preview(event))
        return True

    def pointer_up(self, event: PointerInput) -> bool:
        """Commit using the release point

        Returns:
            True if a batch was committed
        """
        if not self._owns(event):
            return False
        self.scheduler.cancel()
        if self._document_rect is None:
            self._cancel()
            return False

        transforms, _ = self._compute(event)
        pointer_id = self._state.pointer_id
        self._reset()
        self._logger.debug(f"Gesture committed: {len(transforms)} layer(s)")
        self.committed.emit(transforms)
        self._set_guides([])
        self.captureReleased.emit(pointer_id)
        return True

    def pointer_cancel(self, event: PointerInput = None) -> bool:
        if self._state is None:
            return False
        if event is not None and event.pointer_id != self._state.pointer_id:
            return False
        self._cancel()
        return True

    def key_press(self, event: KeyInput) -> bool:
        """Escape cancels the active gesture"""
        if event.key == KEY_ESCAPE and self._state is not None:
            self._cancel()
            return True
        return False

    # ========================================
    # Internals
    # ========================================

    def _owns(self, event: PointerInput) -> bool:
        return self._state is not None and event.pointer_id == self._state.pointer_id

    def _to_document(self, x: float, y: float) -> Vec2:
        return client_to_document((x, y), self._viewport, self._document_rect)

    def _effective_snap_context(self):
        if self._snap_context is None or not self.settings.snap_enabled:
            return None
        return replace(
            self._snap_context,
            zoom=self._viewport.zoom,
            grid_size=self.settings.grid_size,
            threshold=self.settings.snap_threshold,
        )

    def _compute(self, event: PointerInput):
        point = self._to_document(event.x, event.y)
        return self._handle.drag(self._state, point, event.modifiers, self._effective_snap_context())

    def _preview(self, event: PointerInput):
        if self._state is None or self._document_rect is None:
            return
        transforms, guides = self._compute(event)
        self.previewChanged.emit(transforms, guides)
        self._set_guides(guides)

    def _set_guides(self, guides):
        if guides == self._guides:
            return
        self._guides = list(guides)
        self.guidesChanged.emit(list(guides))

    def _cancel(self):
        self.scheduler.cancel()
        pointer_id = self._state.pointer_id
        self._reset()
        self._logger.debug(f"Gesture cancelled (pointer {pointer_id})")
        self._set_guides([])
        self.cancelled.emit()
        self.captureReleased.emit(pointer_id)

    def _reset(self):
        self._state = None
        self._handle = None
