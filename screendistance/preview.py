"""
Local preview: show annotated camera frames in an OpenCV window.
"""
import argparse
import asyncio
import logging
import sys

import cv2

from . import config
from .camera import LatestFrameSource, open_camera
from .detector import LandmarkDetector
from .distance import DistanceEstimator
from .exceptions import ScreenDistanceError
from .pipeline import FramePipeline
from .presenter import format_distance

logger = logging.getLogger(__name__)

WINDOW = "Screen Distance"


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Estimate face-to-screen distance from the camera")
    parser.add_argument("--camera", type=int, default=None, help="Camera index (default: probe)")
    parser.add_argument("--quiet", action="store_true", help="Do not print distances")
    return parser.parse_args(argv)


async def preview(pipeline, camera, quiet=False):
    with LatestFrameSource(camera) as source:
        while True:
            frame = source.read(timeout=1.0)
            if frame is None:
                if source.running:
                    continue
                logger.error("Failed to capture frame")
                break

            result = await pipeline.process_async(frame)
            if not quiet:
                print(format_distance(result.estimate))

            cv2.imshow(WINDOW, result.frame)
            if cv2.waitKey(1) & 0xFF == ord('q'):
                break


async def main_async(args):
    estimator = DistanceEstimator(config.load_calibration())
    pipeline = FramePipeline(LandmarkDetector(), estimator)
    index = args.camera if args.camera is not None else config.camera_index()
    camera = await open_camera(index)
    try:
        await preview(pipeline, camera, quiet=args.quiet)
    finally:
        pipeline.shutdown()
        cv2.destroyAllWindows()


def main(argv=None):
    logging.basicConfig(level=logging.INFO)
    args = parse_args(argv)
    try:
        asyncio.run(main_async(args))
    except ScreenDistanceError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
