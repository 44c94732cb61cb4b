"""
Camera Recorder
===============

OpenCV-backed recording of short front-camera clips.

This module:
    - Opens the capture device on a background thread
    - Writes frames to a unique MP4 file while recording
    - Keeps the latest preview frame for the UI
    - Reports the finished file and its size

Design Rules:
    - Camera startup never blocks the caller
    - One recording at a time
    - Misuse (no session, double start) raises CameraError
    - Device read failures are logged, the writer stops on its own

Example:
    from storycam.capture import CameraRecorder

    with CameraRecorder(device_index=0, output_dir="./recordings") as recorder:
        recorder.start_session()
        recorder.wait_until_ready(timeout=5.0)
        result = recorder.record_for(3.0)
        print(result.path, result.size_bytes)
"""

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

import cv2
import numpy as np

from storycam.errors import CameraError


logger = logging.getLogger(__name__)


RECORDING_PREFIX = "recording"
RECORDING_TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"


@dataclass(frozen=True, slots=True)
class RecordingResult:
    """
    A finished recording.

    Attributes:
        path: Location of the MP4 file
        frames_written: Number of frames written
        size_bytes: File size, or None if it could not be read
    """

    path: Path
    frames_written: int
    size_bytes: Optional[int]


class CameraRecorder:
    """
    Front-camera recorder built on cv2.VideoCapture and cv2.VideoWriter.

    Attributes:
        device_index: OpenCV device index
        output_dir: Directory for recordings
        fps: Frame rate written into the MP4 container
        fourcc: Codec FourCC string
        mirror_preview: Flip preview frames horizontally
    """

    def __init__(
        self,
        device_index: int = 0,
        output_dir: str = "./recordings",
        frame_width: int = 640,
        frame_height: int = 480,
        fps: float = 30.0,
        fourcc: str = "mp4v",
        mirror_preview: bool = True,
        capture_factory: Optional[Callable[[int], "cv2.VideoCapture"]] = None,
        writer_factory: Optional[Callable[..., "cv2.VideoWriter"]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """
        Initialize the recorder. No device is opened until start_session().

        Args:
            device_index: OpenCV device index of the camera
            output_dir: Directory recordings are written to
            frame_width: Requested capture width
            frame_height: Requested capture height
            fps: Frame rate of the written file
            fourcc: Four-character codec code
            mirror_preview: Mirror preview frames
            capture_factory: Builds the capture object (tests pass a stub)
            writer_factory: Builds the writer object (tests pass a stub)
            clock: Source of the timestamp used in file names
        """
        self.device_index = device_index
        self.output_dir = Path(output_dir)
        self.frame_width = frame_width
        self.frame_height = frame_height
        self.fps = fps
        self.fourcc = fourcc
        self.mirror_preview = mirror_preview

        self._capture_factory = capture_factory or cv2.VideoCapture
        self._writer_factory = writer_factory or cv2.VideoWriter
        self._clock = clock

        self._capture = None
        self._writer = None
        self._lock = threading.Lock()
        self._ready = threading.Event()
        self._stop_writing = threading.Event()
        self._startup_thread: Optional[threading.Thread] = None
        self._writer_thread: Optional[threading.Thread] = None

        self._latest_frame: Optional[np.ndarray] = None
        self._recording_path: Optional[Path] = None
        self._frames_written: int = 0
        self._session_error: Optional[str] = None

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def start_session(self) -> threading.Thread:
        """
        Open the capture device on a background thread.

        Returns:
            The startup thread (join it or use wait_until_ready)
        """
        thread = threading.Thread(target=self._open_device, name="camera_startup", daemon=True)
        self._startup_thread = thread
        thread.start()
        return thread

    def _open_device(self) -> None:
        try:
            capture = self._capture_factory(self.device_index)
        except Exception as e:
            self._session_error = f"Error setting up camera input: {e}"
            logger.error(self._session_error)
            self._ready.set()
            return

        if capture is None or not capture.isOpened():
            self._session_error = f"Error setting up camera input (device {self.device_index})."
            logger.error(self._session_error)
            self._ready.set()
            return

        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.frame_width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.frame_height)

        with self._lock:
            self._capture = capture
        self._ready.set()
        logger.info("Camera session started.")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Block until startup finished.

        Returns:
            True if the device is open, False on failure or timeout
        """
        self._ready.wait(timeout)
        return self.is_running

    @property
    def is_running(self) -> bool:
        """Whether the capture device is open."""
        with self._lock:
            return self._capture is not None

    @property
    def is_recording(self) -> bool:
        """Whether frames are currently being written."""
        return self._writer_thread is not None and self._writer_thread.is_alive()

    @property
    def session_error(self) -> Optional[str]:
        """Message from a failed startup, if any."""
        return self._session_error

    # -------------------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------------------

    def unique_video_path(self) -> Path:
        """Path of the form <output_dir>/recording-YYYY-MM-DD-HH-MM-SS.mp4."""
        timestamp = self._clock().strftime(RECORDING_TIMESTAMP_FORMAT)
        return self.output_dir / f"{RECORDING_PREFIX}-{timestamp}.mp4"

    def start_recording(self) -> Path:
        """
        Start writing frames to a new MP4 file.

        Returns:
            Path of the file being written

        Raises:
            CameraError: If no session is running or a recording is active
        """
        if not self.is_running:
            raise CameraError("Video output is not available.")
        if self.is_recording:
            raise CameraError("A recording is already in progress.")

        if self._writer is not None:
            # previous writer loop ended on a read failure
            self._writer.release()
            self._writer = None

        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.unique_video_path()

        fourcc = cv2.VideoWriter_fourcc(*self.fourcc)
        writer = self._writer_factory(
            str(path), fourcc, self.fps, (self.frame_width, self.frame_height)
        )
        if writer is None or not writer.isOpened():
            raise CameraError(f"Could not open video writer for {path}")

        self._writer = writer
        self._recording_path = path
        self._frames_written = 0
        self._stop_writing.clear()

        self._writer_thread = threading.Thread(
            target=self._write_loop, name="camera_writer", daemon=True
        )
        self._writer_thread.start()

        logger.info(f"Started recording to: {path}")
        return path

    def _write_loop(self) -> None:
        frame_interval = 1.0 / self.fps
        while not self._stop_writing.is_set():
            started = time.monotonic()
            with self._lock:
                capture = self._capture
            if capture is None:
                break

            ok, frame = capture.read()
            if not ok or frame is None:
                logger.error("Recording error: failed to read frame from camera")
                break

            if frame.shape[1] != self.frame_width or frame.shape[0] != self.frame_height:
                frame = cv2.resize(frame, (self.frame_width, self.frame_height))

            self._writer.write(frame)
            self._frames_written += 1

            preview = cv2.flip(frame, 1) if self.mirror_preview else frame
            with self._lock:
                self._latest_frame = preview

            remaining = frame_interval - (time.monotonic() - started)
            if remaining > 0:
                self._stop_writing.wait(remaining)

    def stop_recording(self) -> RecordingResult:
        """
        Stop the active recording and finalize the file.

        Returns:
            RecordingResult for the finished file

        Raises:
            CameraError: If nothing was recorded
        """
        if self._writer_thread is None or self._recording_path is None:
            raise CameraError("No recording in progress.")

        self._stop_writing.set()
        self._writer_thread.join()
        self._writer_thread = None

        if self._writer is not None:
            self._writer.release()
            self._writer = None

        path = self._recording_path
        self._recording_path = None
        logger.info("Stopped recording.")
        logger.info(f"Recording finished successfully at: {path}")

        size_bytes: Optional[int]
        try:
            size_bytes = path.stat().st_size
            logger.info(f"Recorded video file size: {size_bytes} bytes")
        except OSError:
            size_bytes = None
            logger.warning("Could not retrieve file size.")

        return RecordingResult(
            path=path,
            frames_written=self._frames_written,
            size_bytes=size_bytes,
        )

    def record_for(self, seconds: float) -> RecordingResult:
        """Record a clip of the given length and return it."""
        self.start_recording()
        time.sleep(seconds)
        return self.stop_recording()

    # -------------------------------------------------------------------------
    # Preview
    # -------------------------------------------------------------------------

    def latest_frame(self) -> Optional[np.ndarray]:
        """
        Most recent preview frame (BGR).

        While recording this is the last written frame; otherwise a
        frame is read from the device on demand.
        """
        if self.is_recording:
            with self._lock:
                return self._latest_frame

        with self._lock:
            capture = self._capture
        if capture is None:
            return None

        ok, frame = capture.read()
        if not ok or frame is None:
            return None
        return cv2.flip(frame, 1) if self.mirror_preview else frame

    # -------------------------------------------------------------------------
    # Cleanup
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Stop any recording, release the writer and the device."""
        if self.is_recording:
            self.stop_recording()

        if self._writer is not None:
            # write loop ended on its own after a failed read
            self._writer.release()
            self._writer = None
            self._writer_thread = None
            self._recording_path = None

        with self._lock:
            capture = self._capture
            self._capture = None
        if capture is not None:
            capture.release()
            logger.info("Camera session stopped.")

    def __enter__(self) -> "CameraRecorder":
        return self

    def __exit__(self, *args) -> None:
        self.close()
