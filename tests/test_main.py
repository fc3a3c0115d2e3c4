import pytest
from fastapi.testclient import TestClient

from screendistance.exceptions import InvalidCalibration
from screendistance.main import create_app

from conftest import FakeCapture, FakeDetector


def make_opener(frames):
    async def opener(index):
        return FakeCapture(frames)
    return opener


def test_health(calib):
    app = create_app(calib, detector_factory=FakeDetector, camera_opener=make_opener([]))
    with TestClient(app) as client:
        response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["calibration"]["sensor_width"] == 4


def test_startup_rejects_missing_sensor_size(monkeypatch):
    monkeypatch.delenv("SCREEN_DISTANCE_SENSOR_WIDTH", raising=False)
    monkeypatch.delenv("SCREEN_DISTANCE_SENSOR_HEIGHT", raising=False)
    with pytest.raises(InvalidCalibration):
        with TestClient(create_app()):
            pass


def test_websocket_streams_distances(calib, frame):
    app = create_app(calib, detector_factory=FakeDetector, camera_opener=make_opener([frame]))
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as websocket:
            assert websocket.receive_json() == {"message": "Camera initialized"}
            message = websocket.receive_json()
            assert message["distance"] == pytest.approx(201.6, abs=0.1)
            assert message["text"] == "Distance: 202 mm"
            assert message["axis"] == "horizontal"
            assert message["image"]
            assert websocket.receive_json() == {"error": "Failed to capture frame"}


def test_websocket_reports_unavailable(calib, frame):
    app = create_app(calib, detector_factory=lambda: FakeDetector([]), camera_opener=make_opener([frame]))
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as websocket:
            websocket.receive_json()
            message = websocket.receive_json()
            assert message["distance"] == -1
            assert message["text"] == "Distance: - mm"
            assert message["reason"] == "missing_landmark"


def test_websocket_camera_failure(calib):
    async def opener(index):
        raise RuntimeError("Could not start camera after 5 attempts.")

    app = create_app(calib, detector_factory=FakeDetector, camera_opener=opener)
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as websocket:
            assert websocket.receive_json() == {"error": "Could not start camera after 5 attempts."}
