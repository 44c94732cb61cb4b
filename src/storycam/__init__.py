"""
StoryCam
========

Detective-story client around a face/emotion inference endpoint.

The client records a short front-camera clip, uploads it as
multipart/form-data, and presents the returned faces and emotions as
scenes of a detective story. Detection itself happens server-side.

Components:
    - capture: OpenCV camera session and MP4 recording
    - upload: Multipart upload client
    - session: Observable session manager (idle → recording → uploading → results)
    - story: Welcome screen, results view-model and narration
    - devserver: Local stand-in for the inference endpoint

Example:
    from storycam.config import settings
    from storycam.session import CameraManager

    with CameraManager.from_settings(settings) as manager:
        manager.start_session()
        manager.recorder.wait_until_ready(timeout=5.0)
        outcome = manager.record_and_upload(5.0)
"""

__version__ = "0.1.0"
__author__ = "StoryCam Project"

__all__ = [
    "__version__",
]
