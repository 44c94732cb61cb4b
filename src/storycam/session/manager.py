"""
Camera Session Manager
======================

Observable manager tying together recording, upload and results state.

This module:
    - Drives the session phases IDLE → RECORDING → UPLOADING → DISPLAYING_RESULTS
    - Runs uploads on a single background worker
    - Publishes a new SessionState to every listener after each change
    - Reports each upload to the caller as an UploadOutcome

Design Rules:
    - At most one upload in flight
    - Listeners are called without the manager lock held
    - Uploading while recording stops and finalizes the recording first
    - Failures never escape the worker; they become failed outcomes
    - Results are discarded when the results screen is dismissed

Example:
    from storycam.session import CameraManager

    manager = CameraManager.from_settings(settings)
    manager.subscribe(lambda state: print(state.phase))
    manager.start_session()

    manager.start_recording()
    ...
    result = manager.stop_recording()
    outcome = manager.upload_video(result.path).result()
    if outcome.ok:
        print(manager.state.detection_results)
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Union

from storycam.capture.recorder import CameraRecorder, RecordingResult
from storycam.errors import StoryCamError, UploadInProgressError
from storycam.models.response import FaceDetectionResponse
from storycam.models.session import SessionPhase, SessionState
from storycam.session.transitions import validate_transition
from storycam.upload.client import UploadClient


logger = logging.getLogger(__name__)


StateListener = Callable[[SessionState], None]


@dataclass(frozen=True)
class UploadOutcome:
    """
    Result of one upload: either a response or an error.

    Attributes:
        response: Parsed server response on success
        error: Failure cause otherwise
    """

    response: Optional[FaceDetectionResponse] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.response is not None

    def unwrap(self) -> FaceDetectionResponse:
        """Return the response or raise the stored error."""
        if self.error is not None:
            raise self.error
        if self.response is None:
            raise StoryCamError("Upload produced no response")
        return self.response


class CameraManager:
    """
    Camera-session manager with observable state.

    Attributes:
        recorder: Camera recorder
        client: Upload client
        state: Latest SessionState snapshot
    """

    def __init__(self, recorder: CameraRecorder, client: UploadClient) -> None:
        """
        Initialize manager.

        Args:
            recorder: Recorder used for capture
            client: Client used for uploads
        """
        self.recorder = recorder
        self.client = client

        self._lock = threading.RLock()
        self._state = SessionState()
        self._listeners: List[StateListener] = []
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="upload")
        self._upload_in_flight = False

    @classmethod
    def from_settings(cls, settings) -> "CameraManager":
        """Build a manager from loaded Settings."""
        camera = settings.camera
        recorder = CameraRecorder(
            device_index=camera.device_index,
            output_dir=camera.output_dir,
            frame_width=camera.frame_width,
            frame_height=camera.frame_height,
            fps=camera.fps,
            fourcc=camera.fourcc,
            mirror_preview=camera.mirror_preview,
        )
        client = UploadClient(
            url=settings.upload.url,
            field_name=settings.upload.field_name,
            mime_type=settings.upload.mime_type,
            timeout=settings.upload.timeout_seconds,
        )
        return cls(recorder, client)

    # -------------------------------------------------------------------------
    # Observable state
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener called with every new state.

        Returns:
            Callable that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _apply(self, **changes) -> SessionState:
        # caller holds self._lock
        if "phase" in changes and changes["phase"] != self._state.phase:
            validate_transition(self._state.phase, changes["phase"])
        self._state = self._state.model_copy(update=changes)
        return self._state

    def _notify(self, state: SessionState) -> None:
        # never called with self._lock held
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(state)
            except Exception as e:
                logger.warning(f"State listener failed: {e}")

    def _update(self, **changes) -> SessionState:
        with self._lock:
            new_state = self._apply(**changes)
        self._notify(new_state)
        return new_state

    # -------------------------------------------------------------------------
    # Camera
    # -------------------------------------------------------------------------

    def start_session(self) -> None:
        """Start the camera on a background thread."""
        self.recorder.start_session()

    def start_recording(self) -> Path:
        """
        Start recording to a new file.

        Returns:
            Path being written

        Raises:
            CameraError: If the camera is not available
            InvalidTransitionError: If the session cannot record now
        """
        with self._lock:
            validate_transition(self._state.phase, SessionPhase.RECORDING)
            path = self.recorder.start_recording()
            new_state = self._apply(
                phase=SessionPhase.RECORDING,
                is_recording=True,
                current_recording_path=str(path),
                detected_faces=[],
                video_metadata=None,
                show_face_details=False,
                detection_results="",
                last_error=None,
            )
        self._notify(new_state)
        return path

    def stop_recording(self) -> RecordingResult:
        """Stop recording and return to IDLE."""
        with self._lock:
            result = self.recorder.stop_recording()
            new_state = self._apply(phase=SessionPhase.IDLE, is_recording=False)
        self._notify(new_state)
        return result

    # -------------------------------------------------------------------------
    # Upload
    # -------------------------------------------------------------------------

    def upload_video(
        self,
        path: Union[str, Path],
        completion: Optional[Callable[[UploadOutcome], None]] = None,
    ) -> "Future[UploadOutcome]":
        """
        Upload a recording on the background worker.

        An active recording is stopped and finalized first.

        Args:
            path: Recording to upload
            completion: Called with the outcome once the upload finished

        Returns:
            Future resolving to the same UploadOutcome

        Raises:
            UploadInProgressError: If another upload is still running
            InvalidTransitionError: If the session cannot upload now
            RuntimeError: If the manager was closed
        """
        with self._lock:
            if self._upload_in_flight:
                raise UploadInProgressError("An upload is already in progress.")
            validate_transition(self._state.phase, SessionPhase.UPLOADING)

            if self._state.phase == SessionPhase.RECORDING:
                self.recorder.stop_recording()

            self._upload_in_flight = True
            new_state = self._apply(
                phase=SessionPhase.UPLOADING,
                is_recording=False,
                last_error=None,
            )
        self._notify(new_state)

        try:
            return self._executor.submit(self._run_upload, Path(path), completion)
        except RuntimeError as e:
            logger.error(f"Upload worker unavailable: {e}")
            with self._lock:
                self._upload_in_flight = False
                new_state = self._apply(phase=SessionPhase.IDLE, last_error=str(e))
            self._notify(new_state)
            raise

    def _run_upload(
        self,
        path: Path,
        completion: Optional[Callable[[UploadOutcome], None]],
    ) -> UploadOutcome:
        try:
            response = self.client.upload(path)
        except Exception as e:
            logger.error(f"Upload failed: {e}")
            outcome = UploadOutcome(error=e)
            with self._lock:
                self._upload_in_flight = False
                new_state = self._apply(phase=SessionPhase.IDLE, last_error=str(e))
            self._notify(new_state)
        else:
            outcome = UploadOutcome(response=response)
            self._handle_face_detection_response(response)

        if completion is not None:
            try:
                completion(outcome)
            except Exception as e:
                logger.warning(f"Upload completion callback failed: {e}")
        return outcome

    def _handle_face_detection_response(self, response: FaceDetectionResponse) -> None:
        count = len(response.faces)
        with self._lock:
            self._upload_in_flight = False
            new_state = self._apply(
                phase=SessionPhase.DISPLAYING_RESULTS,
                detection_results=f"Detected {count} faces.",
                detected_faces=response.detected_faces(),
                video_metadata=response.video_metadata,
                show_face_details=True,
            )
        self._notify(new_state)

        if count == 0:
            logger.info("No faces detected.")
        else:
            logger.info(f"Detected {count} faces.")
        logger.info("Results received, showing face results")

    def record_and_upload(self, seconds: float) -> UploadOutcome:
        """Record a clip, upload it and wait for the outcome."""
        self.start_recording()
        time.sleep(seconds)
        result = self.stop_recording()
        return self.upload_video(result.path).result()

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    def dismiss_results(self) -> None:
        """Close the results screen and drop the results."""
        self._update(
            phase=SessionPhase.IDLE,
            detected_faces=[],
            video_metadata=None,
            show_face_details=False,
            detection_results="",
        )

    # -------------------------------------------------------------------------
    # Cleanup
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Wait for the upload worker and release the camera."""
        self._executor.shutdown(wait=True)
        self.recorder.close()
        self.client.close()

    def __enter__(self) -> "CameraManager":
        return self

    def __exit__(self, *args) -> None:
        self.close()
