class ScreenDistanceError(Exception):
    """Base class for errors raised by screendistance."""


class InvalidCalibration(ScreenDistanceError, ValueError):
    """Calibration values are missing, non-numeric or not strictly positive."""


class DetectorError(ScreenDistanceError):
    """A Haar cascade could not be loaded."""


class CameraUnavailable(ScreenDistanceError, RuntimeError):
    """No camera could be opened."""
