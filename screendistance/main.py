import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .camera import LatestFrameSource, open_camera
from .detector import LandmarkDetector
from .distance import DistanceEstimator
from .pipeline import FramePipeline
from .presenter import to_message

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)

FRAME_INTERVAL = 0.1
READ_TIMEOUT = 1.0


def create_app(calibration=None, detector_factory=LandmarkDetector, camera_opener=open_camera, camera_index=None):
    """
    Build the service. Without an explicit calibration it is loaded from the
    environment at startup, and an invalid one stops the server from starting.
    """

    @asynccontextmanager
    async def lifespan(app):
        calib = calibration if calibration is not None else config.load_calibration()
        app.state.estimator = DistanceEstimator(calib)
        logger.info(f"Calibration loaded: {calib}")
        yield

    app = FastAPI(lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        return {"status": "ok", "calibration": asdict(app.state.estimator.calib)}

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        await websocket.accept()
        loop = asyncio.get_running_loop()
        source = None
        pipeline = None

        try:
            index = camera_index if camera_index is not None else config.camera_index()
            camera = await camera_opener(index)
            source = LatestFrameSource(camera).start()
            await websocket.send_json({"message": "Camera initialized"})

            pipeline = FramePipeline(detector_factory(), app.state.estimator)

            while True:
                frame = await loop.run_in_executor(None, source.read, READ_TIMEOUT)
                if frame is None:
                    if source.running:
                        continue
                    logger.error("Failed to capture frame")
                    await websocket.send_json({"error": "Failed to capture frame"})
                    break

                result = await pipeline.process_async(frame)
                await websocket.send_json(to_message(result.estimate, result.frame))

                await asyncio.sleep(FRAME_INTERVAL)
        except WebSocketDisconnect:
            logger.info("Client disconnected")
        except Exception as e:
            logger.error(f"Error in websocket connection: {str(e)}")
            await websocket.send_json({"error": str(e)})
        finally:
            if source is not None:
                logger.debug(f"Frames dropped: {source.dropped}")
                source.stop()
            if pipeline is not None:
                pipeline.shutdown()
            logger.info("WebSocket connection closed")

    return app


app = create_app()


def run():
    import uvicorn
    # Fail before binding the port if the calibration is unusable
    config.load_calibration()
    uvicorn.run(app, host="0.0.0.0", port=config.port())


if __name__ == "__main__":
    run()
