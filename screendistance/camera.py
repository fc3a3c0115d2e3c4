import asyncio
import logging
import threading

import cv2

from .exceptions import CameraUnavailable

logger = logging.getLogger(__name__)


async def open_camera(index=None, attempts=5, indexes=5, delay=1.0, capture_factory=cv2.VideoCapture):
    """Open the first camera that delivers a frame, retrying a few times."""
    candidates = [index] if index is not None else list(range(indexes))
    logger.info("Attempting to initialize camera...")
    for attempt in range(attempts):
        for candidate in candidates:
            camera = capture_factory(candidate)
            if camera.isOpened():
                logger.info(f"Camera successfully opened at index {candidate} on attempt {attempt + 1}")
                ret, _ = camera.read()
                if ret:
                    logger.info("Successfully read a frame from the camera")
                    return camera
                logger.warning(f"Camera opened but couldn't read a frame at index {candidate}")
            else:
                logger.warning(f"Failed to open camera at index {candidate} on attempt {attempt + 1}")
            camera.release()
        await asyncio.sleep(delay)
    raise CameraUnavailable(f"Could not start camera after {attempts} attempts.")


class LatestFrameSource:
    """
    Reads frames on a background thread and keeps only the newest one.

    Frames that arrive before the previous one was consumed replace it and
    are counted in ``dropped``.
    """

    def __init__(self, capture):
        self.capture = capture
        self.dropped = 0
        self._frame = None
        self._fresh = False
        self._lock = threading.Lock()
        self._available = threading.Condition(self._lock)
        self._running = False
        self._thread = None

    def start(self):
        if self._running:
            return self
        self._running = True
        self._thread = threading.Thread(target=self._reader, name="frame-source", daemon=True)
        self._thread.start()
        return self

    def _reader(self):
        capture = self.capture
        while self._running:
            ret, frame = capture.read()
            if not ret:
                logger.error("Failed to capture frame")
                break
            with self._available:
                if self._fresh:
                    self.dropped += 1
                self._frame = frame
                self._fresh = True
                self._available.notify_all()
        with self._available:
            self._running = False
            self._available.notify_all()

    def read(self, timeout=None):
        """Return the newest unread frame, or None if none arrived in time or the source stopped."""
        with self._available:
            if not self._fresh and self._running:
                self._available.wait(timeout)
            if not self._fresh:
                return None
            self._fresh = False
            return self._frame

    @property
    def running(self):
        return self._running

    def stop(self):
        with self._available:
            self._running = False
            self._available.notify_all()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=2.0)
        self._thread = None
        if self.capture is not None:
            self.capture.release()
            self.capture = None

    def __enter__(self):
        return self.start()

    def __exit__(self, *exc):
        self.stop()
