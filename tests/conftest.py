import numpy as np
import pytest

from screendistance.detector import Face
from screendistance.distance import CalibrationParams, EyeLandmarks, Point2D


@pytest.fixture
def calib():
    return CalibrationParams(focal_length=1, sensor_width=4, sensor_height=3,
                             image_width=1024, image_height=1024)


@pytest.fixture
def frame():
    return np.zeros((1024, 1024, 3), dtype=np.uint8)


class FakeDetector:
    """Returns the same faces for every frame."""

    def __init__(self, faces=None):
        if faces is None:
            faces = [Face(box=(80, 150, 140, 140),
                          landmarks=EyeLandmarks(Point2D(100, 200), Point2D(180, 205)))]
        self.faces = faces
        self.calls = 0

    def detect(self, frame):
        self.calls += 1
        return list(self.faces)


class FakeCapture:
    def __init__(self, frames, opened=True):
        self.frames = list(frames)
        self.opened = opened
        self.released = False

    def isOpened(self):
        return self.opened

    def read(self):
        if self.frames:
            return True, self.frames.pop(0)
        return False, None

    def release(self):
        self.released = True
