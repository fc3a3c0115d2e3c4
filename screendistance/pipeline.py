"""
Per-frame processing: detect, estimate, annotate.

Each frame is handled on its own; nothing is carried over between frames.
Analysis runs on a single worker thread so at most one frame is in flight.
"""
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from .detector import Face, scale_landmarks
from .distance import DistanceEstimate, DistanceEstimator, Unavailable
from .presenter import annotate

logger = logging.getLogger(__name__)


@dataclass
class FrameResult:
    face: Optional[Face]
    estimate: DistanceEstimate
    frame: object = None


class FramePipeline:
    def __init__(self, detector, estimator: DistanceEstimator, draw=True):
        self.detector = detector
        self.estimator = estimator
        self.draw = draw
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="analyzer")

    @property
    def image_size(self):
        calib = self.estimator.calib
        return calib.image_width, calib.image_height

    def process(self, frame) -> FrameResult:
        faces = self.detector.detect(frame)
        if not faces:
            result = FrameResult(None, DistanceEstimate.unavailable(Unavailable.MISSING_LANDMARK), frame)
        else:
            face = faces[0]
            height, width = frame.shape[:2]
            landmarks = scale_landmarks(face.landmarks, (width, height), self.image_size)
            result = FrameResult(face, self.estimator.estimate(landmarks), frame)

        if self.draw:
            annotate(frame, result.face, result.estimate)
        return result

    async def process_async(self, frame) -> FrameResult:
        """Run ``process`` on the analyzer thread without blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self.process, frame)

    def shutdown(self):
        self._executor.shutdown(wait=True)
