"""
Error Types
===========

Exception hierarchy shared by the capture, upload and session layers.

Every failure the client can hit (camera setup, file I/O, network,
non-2xx response, JSON parse) is one of these. Callers either catch
StoryCamError or receive the exception inside a failed UploadOutcome.
"""

from typing import Optional


class StoryCamError(Exception):
    """Base class for all StoryCam errors."""
    pass


class CameraError(StoryCamError):
    """Raised when the capture device cannot be opened or used."""
    pass


class InvalidTransitionError(StoryCamError):
    """Raised when a session phase change is not allowed."""
    pass


class UploadInProgressError(StoryCamError):
    """Raised when an upload is requested while another is in flight."""
    pass


class UploadError(StoryCamError):
    """Base class for upload pipeline failures."""
    pass


class VideoReadError(UploadError):
    """Raised when the recorded video file cannot be read."""
    pass


class TransportError(UploadError):
    """Raised when the HTTP request itself fails (DNS, connect, timeout)."""
    pass


class ServerError(UploadError):
    """Raised when the inference endpoint answers with a non-2xx status."""

    def __init__(self, status_code: int, message: Optional[str] = None) -> None:
        self.status_code = status_code
        super().__init__(message or f"Server error: {status_code}")


class EmptyResponseError(UploadError):
    """Raised when a successful response carries no body."""
    pass


class ResponseParseError(UploadError):
    """Raised when the response body does not match the expected schema."""
    pass
