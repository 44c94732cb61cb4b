"""
Test Configuration
==================

Pytest fixtures and test doubles for StoryCam.
"""

import json
from pathlib import Path

import numpy as np
import pytest
import requests


@pytest.fixture
def sample_response_payload():
    """Camel-case response as sent by the inference endpoint."""
    return {
        "faces": [
            {
                "timestamp": 0,
                "face": {
                    "confidence": 99.87,
                    "boundingBox": {"width": 0.3, "height": 0.4, "left": 0.2, "top": 0.1},
                    "emotions": [
                        {"type": "CALM", "confidence": 12.5},
                        {"type": "HAPPY", "confidence": 80.1},
                    ],
                },
            },
            {
                "timestamp": 500,
                "face": {
                    "confidence": 97.5,
                    "emotions": [{"type": "FEAR", "confidence": 55.0}],
                },
            },
            {
                "timestamp": 1000,
                "face": {"confidence": 90.0, "emotions": []},
            },
        ],
        "videoMetadata": {
            "codec": "h264",
            "durationMillis": 5000,
            "format": "QuickTime / MOV",
            "frameRate": 30.0,
            "frameHeight": 1920,
            "frameWidth": 1080,
        },
    }


@pytest.fixture
def rekognition_payload():
    """Pascal-case payload in the shape of a raw GetFaceDetection result."""
    return {
        "JobStatus": "SUCCEEDED",
        "Faces": [
            {
                "Timestamp": 0,
                "Face": {
                    "Confidence": 99.9,
                    "BoundingBox": {"Width": 0.5, "Height": 0.5, "Left": 0.25, "Top": 0.25},
                    "Emotions": [
                        {"Type": "SAD", "Confidence": 70.0},
                        {"Type": "CONFUSED", "Confidence": 20.0},
                    ],
                },
            }
        ],
        "VideoMetadata": {
            "Codec": "h264",
            "DurationMillis": 3000,
            "FrameRate": 29.97,
            "FrameHeight": 720,
            "FrameWidth": 1280,
        },
    }


@pytest.fixture
def video_file(tmp_path) -> Path:
    """A small fake MP4 file."""
    path = tmp_path / "recording-2025-01-19-10-00-00.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42" + b"\x01" * 64)
    return path


# =============================================================================
# HTTP double
# =============================================================================

class StubResponse:
    def __init__(self, status_code: int = 200, content: bytes = b"") -> None:
        self.status_code = status_code
        self.content = content


class StubSession:
    """Stands in for requests.Session; records every POST."""

    def __init__(self, response=None, error=None) -> None:
        self.response = response or StubResponse()
        self.error = error
        self.calls = []
        self.closed = False

    def post(self, url, data=None, headers=None, timeout=None):
        self.calls.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


@pytest.fixture
def ok_session(sample_response_payload):
    return StubSession(StubResponse(200, json.dumps(sample_response_payload).encode()))


@pytest.fixture
def stub_session_factory():
    def factory(status_code=200, content=b"", error=None):
        return StubSession(StubResponse(status_code, content), error=error)
    return factory


@pytest.fixture
def connection_error():
    return requests.ConnectionError("connection refused")


# =============================================================================
# Camera doubles
# =============================================================================

class StubCapture:
    """Stands in for cv2.VideoCapture."""

    def __init__(self, opened: bool = True, width: int = 64, height: int = 48) -> None:
        self.opened = opened
        self.width = width
        self.height = height
        self.released = False
        self.props = {}
        self.reads = 0

    def isOpened(self):
        return self.opened and not self.released

    def set(self, prop, value):
        self.props[prop] = value
        return True

    def read(self):
        if self.released:
            return False, None
        self.reads += 1
        frame = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        frame[:, : self.width // 2] = 255
        return True, frame

    def release(self):
        self.released = True


class StubWriter:
    """Stands in for cv2.VideoWriter; writes one byte per frame on release."""

    def __init__(self, path, fourcc, fps, size) -> None:
        self.path = Path(path)
        self.fps = fps
        self.size = size
        self.frames = []
        self.released = False

    def isOpened(self):
        return True

    def write(self, frame):
        self.frames.append(frame)

    def release(self):
        self.released = True
        self.path.write_bytes(b"\x00" * len(self.frames))


@pytest.fixture
def stub_capture():
    return StubCapture()


@pytest.fixture
def recorder_factory(tmp_path):
    """Build a CameraRecorder wired to camera doubles."""
    from datetime import datetime

    from storycam.capture.recorder import CameraRecorder

    writers = []

    def make_writer(*args):
        writer = StubWriter(*args)
        writers.append(writer)
        return writer

    def factory(capture=None, clock=None):
        capture = capture or StubCapture()
        recorder = CameraRecorder(
            device_index=0,
            output_dir=str(tmp_path / "recordings"),
            frame_width=64,
            frame_height=48,
            fps=100.0,
            capture_factory=lambda index: capture,
            writer_factory=make_writer,
            clock=clock or (lambda: datetime(2025, 1, 19, 10, 30, 45)),
        )
        recorder.writers = writers
        return recorder

    return factory
