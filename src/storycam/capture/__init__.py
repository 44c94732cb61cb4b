"""
Capture Module
==============

Front-camera recording on top of OpenCV.

Components:
    - CameraRecorder: Device session, MP4 recording and preview frames
    - RecordingResult: A finished recording (path, frame count, size)
"""

from storycam.capture.recorder import CameraRecorder, RecordingResult


__all__ = [
    "CameraRecorder",
    "RecordingResult",
]
