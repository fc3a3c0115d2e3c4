import base64

import cv2

from .distance import DistanceEstimate

PLACEHOLDER = "Distance: - mm"

GREEN = (0, 255, 0)
RED = (0, 0, 255)
BLUE = (255, 0, 0)


def format_distance(estimate: DistanceEstimate) -> str:
    if not estimate.available:
        return PLACEHOLDER
    return f"Distance: {estimate.millimeters:.0f} mm"


def annotate(frame, face, estimate: DistanceEstimate):
    """Draw the face box, eye centers and distance text onto ``frame`` in place."""
    if face is None:
        cv2.putText(frame, "No face detected", (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 1, RED, 2)
        return frame

    x, y, w, h = face.box
    cv2.rectangle(frame, (x, y), (x + w, y + h), GREEN, 2)
    for eye in (face.landmarks.left, face.landmarks.right):
        if eye is not None:
            cv2.circle(frame, (int(eye.x), int(eye.y)), 4, BLUE, -1)
    cv2.putText(frame, format_distance(estimate), (x, max(y - 10, 20)),
                cv2.FONT_HERSHEY_SIMPLEX, 0.6, GREEN, 2)
    return frame


def encode_frame(frame) -> str:
    ok, buffer = cv2.imencode('.jpg', frame)
    if not ok:
        raise ValueError("Could not encode frame as JPEG")
    return base64.b64encode(buffer).decode('utf-8')


def to_message(estimate: DistanceEstimate, frame=None) -> dict:
    """JSON payload sent to WebSocket clients; ``distance`` is -1 when unavailable."""
    message = {
        "distance": round(estimate.millimeters, 1) if estimate.available else -1,
        "text": format_distance(estimate),
        "axis": estimate.axis,
        "reason": estimate.reason.value if estimate.reason is not None else None,
    }
    if frame is not None:
        message["image"] = encode_frame(frame)
    return message
