"""
Distance estimation from the pixel separation of the two eyes.

Similar triangles: a known physical length (the average inter-pupillary
distance) spanning ``delta`` pixels of an ``image`` pixels wide frame, seen
through a lens of focal length ``f`` onto a sensor of physical width
``sensor``, sits at

    distance = f * (AVERAGE_EYE_DISTANCE_MM / sensor) * (image / delta)
"""
import enum
import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from .exceptions import InvalidCalibration

logger = logging.getLogger(__name__)

AVERAGE_EYE_DISTANCE_MM = 63  # population average, not a per-user measurement

HORIZONTAL = "horizontal"
VERTICAL = "vertical"


@dataclass(frozen=True)
class Point2D:
    x: float
    y: float


@dataclass(frozen=True)
class EyeLandmarks:
    left: Optional[Point2D] = None
    right: Optional[Point2D] = None


@dataclass(frozen=True)
class CalibrationParams:
    """Camera intrinsics and image dimensions, fixed at startup.

    Raises InvalidCalibration if any value is not a finite number above zero.
    """

    focal_length: float
    sensor_width: float
    sensor_height: float
    image_width: float = 1024
    image_height: float = 1024

    def __post_init__(self):
        for name in ("focal_length", "sensor_width", "sensor_height", "image_width", "image_height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidCalibration(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value) or value <= 0:
                raise InvalidCalibration(f"{name} must be a finite value > 0, got {value!r}")


class Unavailable(enum.Enum):
    MISSING_LANDMARK = "missing_landmark"
    DEGENERATE_GEOMETRY = "degenerate_geometry"


@dataclass(frozen=True)
class DistanceEstimate:
    millimeters: Optional[float] = None
    axis: Optional[str] = None
    reason: Optional[Unavailable] = None

    @classmethod
    def unavailable(cls, reason: Unavailable) -> "DistanceEstimate":
        return cls(reason=reason)

    @property
    def available(self) -> bool:
        return self.millimeters is not None


def estimate(landmarks: EyeLandmarks, calib: CalibrationParams) -> DistanceEstimate:
    """
    Estimate the camera-to-face distance in millimeters.

    The dominant axis of the eye separation picks the formula; ties go to the
    horizontal axis. A missing eye or a zero separation on the chosen axis
    yields an unavailable estimate instead of raising.
    """
    left, right = landmarks.left, landmarks.right
    if left is None or right is None:
        return DistanceEstimate.unavailable(Unavailable.MISSING_LANDMARK)

    delta_x = abs(left.x - right.x)
    delta_y = abs(left.y - right.y)

    if delta_x >= delta_y:
        axis, delta = HORIZONTAL, delta_x
        scale = AVERAGE_EYE_DISTANCE_MM / calib.sensor_width
        image = calib.image_width
    else:
        axis, delta = VERTICAL, delta_y
        scale = AVERAGE_EYE_DISTANCE_MM / calib.sensor_height
        image = calib.image_height

    if not delta > 0:
        return DistanceEstimate.unavailable(Unavailable.DEGENERATE_GEOMETRY)

    distance = calib.focal_length * scale * (image / delta)
    if not math.isfinite(distance):
        return DistanceEstimate.unavailable(Unavailable.DEGENERATE_GEOMETRY)

    return DistanceEstimate(millimeters=distance, axis=axis)


class DistanceEstimator:
    """Binds a validated calibration to the estimate function."""

    def __init__(self, calib: CalibrationParams):
        if not isinstance(calib, CalibrationParams):
            raise InvalidCalibration(f"expected CalibrationParams, got {type(calib).__name__}")
        self.calib = calib

    def estimate(self, landmarks: EyeLandmarks) -> DistanceEstimate:
        result = estimate(landmarks, self.calib)
        if result.available:
            logger.debug("Distance (%s): %.1f mm", result.axis, result.millimeters)
        else:
            logger.debug("No estimate: %s", result.reason.value)
        return result

    def estimate_faces(self, faces: Sequence) -> DistanceEstimate:
        """Estimate from the first detected face only; each face exposes ``landmarks``."""
        if not faces:
            return DistanceEstimate.unavailable(Unavailable.MISSING_LANDMARK)
        return self.estimate(faces[0].landmarks)
