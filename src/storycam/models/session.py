"""
Session State Models
====================

Observable UI state of one capture session.

Core Concepts:
    - SessionPhase: Discrete phases (IDLE, RECORDING, UPLOADING, DISPLAYING_RESULTS)
    - SessionState: Everything the screens render from

Lifecycle:
    IDLE → RECORDING → UPLOADING → DISPLAYING_RESULTS → IDLE

Results (faces + metadata) are held only while DISPLAYING_RESULTS and
dropped when the results screen is dismissed.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from storycam.models.response import Face, VideoMetadata


class SessionPhase(str, Enum):
    """
    Discrete phases of a capture session.

    Attributes:
        IDLE: Camera running, nothing recorded or in flight
        RECORDING: Frames are being written to a local MP4 file
        UPLOADING: The recording is being sent to the inference endpoint
        DISPLAYING_RESULTS: Results screen is showing server output
    """

    IDLE = "IDLE"
    RECORDING = "RECORDING"
    UPLOADING = "UPLOADING"
    DISPLAYING_RESULTS = "DISPLAYING_RESULTS"


class SessionState(BaseModel):
    """
    Snapshot of the session state handed to listeners.

    Snapshots are immutable; the manager builds a new one on every change.

    Attributes:
        phase: Current session phase
        is_recording: Whether a recording is active
        detection_results: Short summary, e.g. "Detected 2 faces."
        detected_faces: Faces from the last response
        video_metadata: Metadata from the last response
        show_face_details: Whether the results screen should be presented
        current_recording_path: Path of the latest recording
        last_error: Message of the last failure, if any
    """

    model_config = ConfigDict(frozen=True)

    phase: SessionPhase = Field(default=SessionPhase.IDLE)
    is_recording: bool = Field(default=False)
    detection_results: str = Field(default="")
    detected_faces: List[Face] = Field(default_factory=list)
    video_metadata: Optional[VideoMetadata] = Field(default=None)
    show_face_details: bool = Field(default=False)
    current_recording_path: Optional[str] = Field(default=None)
    last_error: Optional[str] = Field(default=None)
