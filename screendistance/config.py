import os

from .distance import CalibrationParams
from .exceptions import InvalidCalibration

# Reference defaults used when no device metadata is available
DEFAULT_FOCAL_LENGTH = 1.0
DEFAULT_IMAGE_WIDTH = 1024
DEFAULT_IMAGE_HEIGHT = 1024

DEFAULT_PORT = 8000

FOCAL_LENGTH_ENV = "SCREEN_DISTANCE_FOCAL_LENGTH"
SENSOR_WIDTH_ENV = "SCREEN_DISTANCE_SENSOR_WIDTH"
SENSOR_HEIGHT_ENV = "SCREEN_DISTANCE_SENSOR_HEIGHT"
IMAGE_WIDTH_ENV = "SCREEN_DISTANCE_IMAGE_WIDTH"
IMAGE_HEIGHT_ENV = "SCREEN_DISTANCE_IMAGE_HEIGHT"
CAMERA_INDEX_ENV = "SCREEN_DISTANCE_CAMERA_INDEX"


def _read_float(environ, name, default=None):
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        if default is None:
            raise InvalidCalibration(f"{name} is required")
        return default
    try:
        return float(raw)
    except ValueError:
        raise InvalidCalibration(f"{name} must be a number, got {raw!r}") from None


def load_calibration(environ=None) -> CalibrationParams:
    """Build the process-wide calibration from the environment.

    Sensor dimensions have no usable default and must be supplied.
    """
    environ = os.environ if environ is None else environ
    return CalibrationParams(
        focal_length=_read_float(environ, FOCAL_LENGTH_ENV, DEFAULT_FOCAL_LENGTH),
        sensor_width=_read_float(environ, SENSOR_WIDTH_ENV),
        sensor_height=_read_float(environ, SENSOR_HEIGHT_ENV),
        image_width=_read_float(environ, IMAGE_WIDTH_ENV, DEFAULT_IMAGE_WIDTH),
        image_height=_read_float(environ, IMAGE_HEIGHT_ENV, DEFAULT_IMAGE_HEIGHT),
    )


def camera_index(environ=None):
    """Configured camera index, or None to probe."""
    environ = os.environ if environ is None else environ
    raw = environ.get(CAMERA_INDEX_ENV)
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


def port(environ=None) -> int:
    environ = os.environ if environ is None else environ
    return int(environ.get("PORT", DEFAULT_PORT))
