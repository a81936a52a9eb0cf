"""One-slot frame scheduling.

A scheduler holds at most one pending callback. Requesting a new frame while
one is pending replaces the callback (last request wins, nothing queues).
Callbacks receive the frame timestamp in milliseconds.

- QtFrameScheduler: single-shot QTimer at the nominal frame interval,
  QElapsedTimer as clock. Used by the running editor.
- ManualFrameScheduler: frames run only when flush()/advance() is called.
  Used headless and in tests.
"""
from abc import ABC, abstractmethod

from PyQt5.QtCore import QTimer, QElapsedTimer

from constants import FRAME_INTERVAL_MS


class FrameScheduler(ABC):
    """Abstract one-slot frame scheduler."""

    @abstractmethod
    def request_frame(self, callback):
        """Run callback(timestamp_ms) on the next frame, replacing any pending callback"""
        pass

    @abstractmethod
    def cancel(self):
        """Drop the pending callback, if any"""
        pass

    @property
    @abstractmethod
    def is_pending(self) -> bool:
        pass

    @abstractmethod
    def now(self) -> float:
        """Current clock in milliseconds"""
        pass


class QtFrameScheduler(FrameScheduler):
    """Frame scheduler driven by the Qt event loop.

    Needs a running QApplication; the timer fires on the owning thread.
    """

    def __init__(self, interval_ms=FRAME_INTERVAL_MS, parent=None):
        self._callback = None
        self._clock = QElapsedTimer()
        self._clock.start()
        self._timer = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._on_timeout)

    def request_frame(self, callback):
        self._callback = callback
        if not self._timer.isActive():
            self._timer.start()

    def cancel(self):
        self._callback = None
        self._timer.stop()

    @property
    def is_pending(self) -> bool:
        return self._callback is not None

    def now(self) -> float:
        return self._clock.nsecsElapsed() / 1_000_000.0

    def _on_timeout(self):
        callback, self._callback = self._callback, None
        if callback is not None:
            callback(self.now())


class ManualFrameScheduler(FrameScheduler):
    """Frame scheduler stepped explicitly by the caller."""

    def __init__(self, start_ms=0.0, frame_ms=float(FRAME_INTERVAL_MS)):
        self._now = float(start_ms)
        self.frame_ms = frame_ms
        self._callback = None
        self.frames_run = 0

    def request_frame(self, callback):
        self._callback = callback

    def cancel(self):
        self._callback = None

    @property
    def is_pending(self) -> bool:
        return self._callback is not None

    def now(self) -> float:
        return self._now

    def flush(self) -> bool:
        """Run the pending callback at the current time

        Returns:
            True if a callback ran
        """
        callback, self._callback = self._callback, None
        if callback is None:
            return False
        self.frames_run += 1
        callback(self._now)
        return True

    def advance(self, ms=None) -> bool:
        """Move the clock forward (one frame by default) and flush"""
        self._now += self.frame_ms if ms is None else ms
        return self.flush()

    def run_until_idle(self, max_frames=10000) -> int:
        """Advance frame by frame until nothing is pending

        Returns:
            Number of frames run
        """
        count = 0
        while self.is_pending and count < max_frames:
            self.advance()
            count += 1
        return count


class FrameThrottle:
    """Run a callable at most once per frame with the latest arguments."""

    def __init__(self, callback, scheduler: FrameScheduler):
        self._callback = callback
        self.scheduler = scheduler
        self._args = None

    def __call__(self, *args):
        self._args = args
        if not self.scheduler.is_pending:
            self.scheduler.request_frame(self._invoke)

    @property
    def is_pending(self) -> bool:
        return self._args is not None

    def flush(self):
        """Run the pending call now instead of on the next frame"""
        self.scheduler.cancel()
        self._invoke(self.scheduler.now())

    def cancel(self):
        self.scheduler.cancel()
        self._args = None

    def _invoke(self, _timestamp):
        args, self._args = self._args, None
        if args is not None:
            self._callback(*args)
