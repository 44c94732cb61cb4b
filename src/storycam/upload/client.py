"""
Upload Client
=============

Multipart upload of a recording to the inference endpoint.

This client:
    - Reads the MP4 recording from disk
    - Builds a multipart/form-data body with a single "file" part
    - POSTs it to the configured URL with requests
    - Parses the JSON response into a FaceDetectionResponse

The multipart body is framed by hand (uppercase UUID boundary, CRLF
separators) so the bytes on the wire match what the endpoint expects,
rather than letting requests build it through files=.

Design Rules:
    - No retries; every failure is logged and raised as an UploadError
    - Status code and raw body are always logged
    - One request per call, no shared mutable state

Example:
    from storycam.upload import UploadClient
    from storycam.config import settings

    client = UploadClient(settings.upload.url)
    response = client.upload("recordings/recording-2025-01-19-10-00-00.mp4")
    print(len(response.faces))
"""

import logging
import uuid
from pathlib import Path
from typing import Optional, Tuple, Union

import requests

from storycam.errors import (
    EmptyResponseError,
    ResponseParseError,
    ServerError,
    TransportError,
    VideoReadError,
)
from storycam.models.response import FaceDetectionResponse


logger = logging.getLogger(__name__)


CRLF = b"\r\n"


def build_multipart(
    path: Union[str, Path],
    field_name: str = "file",
    mime_type: str = "video/mp4",
    boundary: Optional[str] = None,
) -> Tuple[bytes, str]:
    """
    Build a multipart/form-data body holding one file part.

    Args:
        path: File to embed
        field_name: Form field name
        mime_type: Content type of the part
        boundary: Boundary string (random UUID if omitted)

    Returns:
        Tuple of (body, content_type header value)

    Raises:
        VideoReadError: If the file cannot be read
    """
    path = Path(path)
    boundary = boundary or str(uuid.uuid4()).upper()

    try:
        video_data = path.read_bytes()
    except OSError as e:
        logger.error(f"Error reading video file: {e}")
        raise VideoReadError(f"Error reading video file {path}: {e}") from e

    head = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{field_name}"; filename="{path.name}"\r\n'
        f"Content-Type: {mime_type}\r\n\r\n"
    ).encode("utf-8")
    tail = CRLF + f"--{boundary}--\r\n".encode("utf-8")

    body = head + video_data + tail
    content_type = f"multipart/form-data; boundary={boundary}"
    return body, content_type


class UploadClient:
    """
    HTTP client for the face/emotion inference endpoint.

    Attributes:
        url: Endpoint URL
        field_name: Multipart field carrying the video
        mime_type: Content type of the video part
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        url: str,
        field_name: str = "file",
        mime_type: str = "video/mp4",
        timeout: float = 120.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize upload client.

        Args:
            url: Endpoint URL
            field_name: Multipart form field name
            mime_type: Content type of the video part
            timeout: Request timeout in seconds
            session: requests session to use (a new one if omitted)
        """
        self.url = url
        self.field_name = field_name
        self.mime_type = mime_type
        self.timeout = timeout
        self._session = session or requests.Session()

    def upload(self, path: Union[str, Path]) -> FaceDetectionResponse:
        """
        Upload a recording and parse the detection results.

        Args:
            path: Path of the MP4 recording

        Returns:
            Parsed FaceDetectionResponse

        Raises:
            VideoReadError: The file could not be read
            TransportError: The request failed before a response arrived
            ServerError: The endpoint answered with a non-2xx status
            EmptyResponseError: The endpoint answered without a body
            ResponseParseError: The body did not match the schema
        """
        body, content_type = build_multipart(path, self.field_name, self.mime_type)

        logger.info(f"Uploading {Path(path).name} ({len(body)} bytes) to {self.url}")
        try:
            http_response = self._session.post(
                self.url,
                data=body,
                headers={"Content-Type": content_type},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Error uploading video: {e}")
            raise TransportError(f"Error uploading video: {e}") from e

        status_code = http_response.status_code
        logger.info(f"HTTP Response Status Code: {status_code}")

        if not 200 <= status_code <= 299:
            logger.error(f"Server error: {status_code}")
            raise ServerError(status_code)

        data = http_response.content
        if not data:
            logger.error("No data received from upload response.")
            raise EmptyResponseError("No data received from upload response.")

        logger.info(f"Raw response data: {data.decode('utf-8', errors='replace')}")

        try:
            return FaceDetectionResponse.parse(data)
        except ResponseParseError as e:
            logger.error(str(e))
            raise

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def __enter__(self) -> "UploadClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()
