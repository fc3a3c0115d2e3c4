"""
Eye landmark detection with OpenCV Haar cascades.

A face cascade finds faces in the frame, then an eye cascade runs inside the
upper part of each face. Eye centers are reported in frame pixel coordinates.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2
import numpy as np

from .distance import EyeLandmarks, Point2D
from .exceptions import DetectorError

logger = logging.getLogger(__name__)

FACE_CASCADE = "haarcascade_frontalface_default.xml"
EYE_CASCADE = "haarcascade_eye.xml"

# Eyes sit in the upper part of a frontal face box
EYE_REGION_RATIO = 0.6


@dataclass(frozen=True)
class Face:
    box: Tuple[int, int, int, int]  # x, y, w, h
    landmarks: EyeLandmarks


def load_cascade(name):
    cascade = cv2.CascadeClassifier(cv2.data.haarcascades + name)
    if cascade.empty():
        raise DetectorError(f"Could not load cascade {name}")
    return cascade


def _box_center(x, y, w, h):
    return Point2D(x + w / 2.0, y + h / 2.0)


def eyes_to_landmarks(eye_boxes, offset=(0, 0)) -> EyeLandmarks:
    """
    Turn eye boxes found inside a face ROI into left/right landmarks.

    The two largest boxes are kept; ``left`` is the one with the smaller x in
    image space. A single box only fills the ``left`` side.
    """
    ox, oy = offset
    boxes = sorted((tuple(int(v) for v in box) for box in eye_boxes),
                   key=lambda b: b[2] * b[3], reverse=True)[:2]
    centers = sorted((_box_center(x + ox, y + oy, w, h) for x, y, w, h in boxes),
                     key=lambda p: p.x)
    if len(centers) == 2:
        return EyeLandmarks(left=centers[0], right=centers[1])
    if len(centers) == 1:
        return EyeLandmarks(left=centers[0], right=None)
    return EyeLandmarks()


def scale_landmarks(landmarks: EyeLandmarks, frame_size, image_size) -> EyeLandmarks:
    """Map landmarks from a ``(width, height)`` frame into the calibrated image space."""
    fw, fh = frame_size
    iw, ih = image_size
    sx, sy = iw / float(fw), ih / float(fh)

    def scale(point: Optional[Point2D]):
        if point is None:
            return None
        return Point2D(point.x * sx, point.y * sy)

    return EyeLandmarks(left=scale(landmarks.left), right=scale(landmarks.right))


class LandmarkDetector:
    def __init__(self, scale_factor=1.3, min_neighbors=5, face_cascade=None, eye_cascade=None):
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.face_cascade = face_cascade if face_cascade is not None else load_cascade(FACE_CASCADE)
        self.eye_cascade = eye_cascade if eye_cascade is not None else load_cascade(EYE_CASCADE)

    def detect(self, frame: np.ndarray) -> List[Face]:
        """Return every face in the frame with its eye landmarks, in cascade order."""
        if frame.ndim == 3:
            gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        else:
            gray = frame

        faces = self.face_cascade.detectMultiScale(gray, self.scale_factor, self.min_neighbors)
        results = []
        for (x, y, w, h) in faces:
            x, y, w, h = int(x), int(y), int(w), int(h)
            roi = gray[y:y + int(h * EYE_REGION_RATIO), x:x + w]
            eyes = self.eye_cascade.detectMultiScale(roi, 1.1, self.min_neighbors)
            landmarks = eyes_to_landmarks(eyes, offset=(x, y))
            results.append(Face(box=(x, y, w, h), landmarks=landmarks))

        if not results:
            logger.debug("No face detected")
        return results
