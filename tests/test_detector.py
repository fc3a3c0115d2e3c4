import numpy as np
import pytest

from screendistance.detector import (
    EYE_REGION_RATIO,
    Face,
    LandmarkDetector,
    eyes_to_landmarks,
    scale_landmarks,
)
from screendistance.distance import EyeLandmarks, Point2D


class FakeCascade:
    def __init__(self, boxes):
        self.boxes = boxes
        self.images = []

    def detectMultiScale(self, image, scale_factor, min_neighbors):
        self.images.append(image)
        return np.array(self.boxes, dtype=np.int32).reshape(-1, 4) if self.boxes else ()


def test_eyes_to_landmarks_orders_by_x():
    landmarks = eyes_to_landmarks([(130, 40, 30, 30), (20, 40, 30, 30)], offset=(100, 100))
    assert landmarks == EyeLandmarks(Point2D(135, 155), Point2D(245, 155))


def test_eyes_to_landmarks_keeps_two_largest():
    landmarks = eyes_to_landmarks([(60, 100, 10, 10), (20, 40, 30, 30), (130, 40, 28, 28)])
    assert landmarks.left == Point2D(35, 55)
    assert landmarks.right == Point2D(144, 54)


def test_eyes_to_landmarks_single_eye():
    landmarks = eyes_to_landmarks([(20, 40, 30, 30)])
    assert landmarks.left == Point2D(35, 55)
    assert landmarks.right is None


def test_eyes_to_landmarks_no_eyes():
    assert eyes_to_landmarks(()) == EyeLandmarks()


def test_scale_landmarks():
    landmarks = EyeLandmarks(Point2D(320, 240), None)
    scaled = scale_landmarks(landmarks, (640, 480), (1024, 1024))
    assert scaled.left == Point2D(512, 512)
    assert scaled.right is None


def test_detect_with_fake_cascades():
    face_cascade = FakeCascade([(100, 100, 200, 200)])
    eye_cascade = FakeCascade([(20, 40, 30, 30), (130, 40, 30, 30), (60, 100, 10, 10)])
    detector = LandmarkDetector(face_cascade=face_cascade, eye_cascade=eye_cascade)

    faces = detector.detect(np.zeros((480, 640, 3), dtype=np.uint8))

    assert faces == [Face(box=(100, 100, 200, 200),
                          landmarks=EyeLandmarks(Point2D(135, 155), Point2D(245, 155)))]
    assert face_cascade.images[0].ndim == 2
    assert eye_cascade.images[0].shape == (int(200 * EYE_REGION_RATIO), 200)


def test_detect_keeps_cascade_order():
    face_cascade = FakeCascade([(300, 10, 100, 100), (10, 10, 50, 50)])
    detector = LandmarkDetector(face_cascade=face_cascade, eye_cascade=FakeCascade([]))
    faces = detector.detect(np.zeros((480, 640), dtype=np.uint8))
    assert [f.box for f in faces] == [(300, 10, 100, 100), (10, 10, 50, 50)]
    assert all(f.landmarks == EyeLandmarks() for f in faces)


def test_detect_blank_frame_with_real_cascades():
    detector = LandmarkDetector()
    assert detector.detect(np.zeros((240, 320, 3), dtype=np.uint8)) == []


def test_missing_cascade():
    from screendistance import detector as module
    from screendistance.exceptions import DetectorError

    with pytest.raises(DetectorError):
        module.load_cascade("does_not_exist.xml")
