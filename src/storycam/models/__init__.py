"""
Data Models
===========

Pydantic models for StoryCam.

Models:
    Response:
        - Emotion: Emotion label + confidence
        - BoundingBox: Face location
        - Face: Detected face with emotions
        - FaceDetection: Face at a video timestamp
        - VideoMetadata: Codec, duration, frame rate, resolution
        - FaceDetectionResponse: Full server payload

    Session:
        - SessionPhase: IDLE, RECORDING, UPLOADING, DISPLAYING_RESULTS
        - SessionState: Observable UI state
"""

from storycam.models.response import (
    BoundingBox,
    Emotion,
    Face,
    FaceDetection,
    FaceDetectionResponse,
    VideoMetadata,
)
from storycam.models.session import SessionPhase, SessionState

__all__ = [
    # Response
    "Emotion",
    "BoundingBox",
    "Face",
    "FaceDetection",
    "VideoMetadata",
    "FaceDetectionResponse",
    # Session
    "SessionPhase",
    "SessionState",
]
