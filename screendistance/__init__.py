"""
Face-to-screen distance estimation from a front camera.
"""
from .distance import (
    AVERAGE_EYE_DISTANCE_MM,
    CalibrationParams,
    DistanceEstimate,
    DistanceEstimator,
    EyeLandmarks,
    Point2D,
    Unavailable,
    estimate,
)
from .exceptions import (
    CameraUnavailable,
    DetectorError,
    InvalidCalibration,
    ScreenDistanceError,
)

__version__ = "0.1.0"

__all__ = [
    "AVERAGE_EYE_DISTANCE_MM",
    "CalibrationParams",
    "CameraUnavailable",
    "DetectorError",
    "DistanceEstimate",
    "DistanceEstimator",
    "EyeLandmarks",
    "InvalidCalibration",
    "Point2D",
    "ScreenDistanceError",
    "Unavailable",
    "estimate",
]
