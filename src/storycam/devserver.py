"""
StoryCam Development Server
===========================

FastAPI stand-in for the face/emotion inference endpoint.

Lets the client run end-to-end without the real detection service.
Uploaded videos are probed with OpenCV for their metadata; faces come
from an optional JSON fixture and are empty otherwise.

Endpoints:
    GET  /health  - Liveness probe
    POST /upload  - multipart/form-data with a single "file" field

Usage:
    python -m storycam.devserver
    STORYCAM_FIXTURE_PATH=fixtures/faces.json python -m storycam.devserver
"""

import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import List, Optional

import cv2
from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from storycam.config import settings, setup_logging
from storycam.models.response import FaceDetection, FaceDetectionResponse, VideoMetadata


logger = logging.getLogger(__name__)


# =============================================================================
# Video Probing
# =============================================================================

def _decode_fourcc(value: float) -> Optional[str]:
    code = int(value)
    if code <= 0:
        return None
    chars = "".join(chr((code >> (8 * i)) & 0xFF) for i in range(4))
    return chars.strip("\x00 ").lower() or None


def probe_video(path: str) -> VideoMetadata:
    """
    Read container metadata of a video file with OpenCV.

    Args:
        path: Video file on disk

    Returns:
        VideoMetadata (fields are None where OpenCV reports nothing)

    Raises:
        ValueError: If OpenCV cannot open the file
    """
    capture = cv2.VideoCapture(path)
    try:
        if not capture.isOpened():
            raise ValueError(f"Cannot open video: {path}")

        fps = capture.get(cv2.CAP_PROP_FPS) or 0.0
        frame_count = capture.get(cv2.CAP_PROP_FRAME_COUNT) or 0.0
        width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
        height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)
        codec = _decode_fourcc(capture.get(cv2.CAP_PROP_FOURCC) or 0)
    finally:
        capture.release()

    duration_millis = int(frame_count / fps * 1000) if fps > 0 else None

    return VideoMetadata(
        codec=codec,
        duration_millis=duration_millis,
        format="mp4",
        frame_rate=round(fps, 3) if fps > 0 else None,
        frame_height=height or None,
        frame_width=width or None,
    )


def load_fixture_faces(fixture_path: Optional[str]) -> List[FaceDetection]:
    """
    Load canned face detections.

    The fixture is either a full response object or a bare list of
    face detections.
    """
    if not fixture_path:
        return []

    path = Path(fixture_path)
    if not path.exists():
        logger.warning(f"Fixture not found: {fixture_path}, returning no faces")
        return []

    raw = json.loads(path.read_text())
    if isinstance(raw, list):
        raw = {"faces": raw}
    response = FaceDetectionResponse.model_validate(raw)
    logger.info(f"Loaded {len(response.faces)} fixture faces from {fixture_path}")
    return list(response.faces)


# =============================================================================
# FastAPI Application
# =============================================================================

def create_app(fixture_path: Optional[str] = None) -> FastAPI:
    """
    Build the development server application.

    Args:
        fixture_path: JSON fixture with faces to return for every upload
    """
    faces = load_fixture_faces(fixture_path)
    started_at = time.time()

    app = FastAPI(
        title="StoryCam Dev Inference Server",
        description="Local stand-in for the face/emotion detection endpoint",
        version=settings.app.version,
    )

    @app.get("/health")
    async def health() -> JSONResponse:
        """Liveness probe."""
        return JSONResponse({
            "status": "healthy",
            "uptime_seconds": round(time.time() - started_at, 1),
        })

    @app.post("/upload")
    def upload(file: UploadFile = File(...)) -> JSONResponse:
        """Accept a recording and answer with metadata plus fixture faces."""
        # sync route so the disk write and OpenCV probe run in the threadpool
        content = file.file.read()
        if not content:
            raise HTTPException(status_code=400, detail="Empty upload")

        logger.info(f"Received {file.filename} ({len(content)} bytes)")

        suffix = Path(file.filename or "upload.mp4").suffix or ".mp4"
        with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as tmp:
            tmp.write(content)
            tmp_path = tmp.name

        try:
            metadata = probe_video(tmp_path)
        except ValueError as e:
            logger.warning(f"Probe failed: {e}")
            raise HTTPException(status_code=422, detail="Uploaded file is not a readable video")
        finally:
            os.unlink(tmp_path)

        response = FaceDetectionResponse(faces=faces, video_metadata=metadata)
        return JSONResponse(response.model_dump(mode="json", by_alias=True))

    return app


app = create_app(settings.devserver.fixture_path)


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    setup_logging(settings)

    port = int(os.environ.get("PORT", settings.devserver.port))

    uvicorn.run(
        "storycam.devserver:app",
        host=settings.devserver.host,
        port=port,
        reload=False,
    )
