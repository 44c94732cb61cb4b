"""
Recorder Tests
==============

CameraRecorder session startup, recording and preview against camera doubles.
"""

import time
from pathlib import Path

import pytest

from storycam.errors import CameraError


class TestSession:
    """Tests for camera startup."""

    def test_start_session_opens_device(self, recorder_factory):
        recorder = recorder_factory()
        recorder.start_session()

        assert recorder.wait_until_ready(timeout=2.0)
        assert recorder.is_running
        assert recorder.session_error is None

    def test_unopened_device(self, recorder_factory):
        from conftest import StubCapture

        recorder = recorder_factory(capture=StubCapture(opened=False))
        recorder.start_session()

        assert recorder.wait_until_ready(timeout=2.0) is False
        assert "Error setting up camera input" in recorder.session_error

    def test_factory_failure(self, tmp_path):
        from storycam.capture.recorder import CameraRecorder

        def broken(index):
            raise RuntimeError("no such device")

        recorder = CameraRecorder(output_dir=str(tmp_path), capture_factory=broken)
        recorder.start_session()

        assert recorder.wait_until_ready(timeout=2.0) is False
        assert "no such device" in recorder.session_error

    def test_close_releases_device(self, recorder_factory, stub_capture):
        recorder = recorder_factory(capture=stub_capture)
        recorder.start_session()
        recorder.wait_until_ready(timeout=2.0)

        recorder.close()

        assert stub_capture.released
        assert not recorder.is_running


class TestRecording:
    """Tests for start/stop recording."""

    def test_unique_video_path(self, recorder_factory, tmp_path):
        recorder = recorder_factory()
        path = recorder.unique_video_path()
        assert path == tmp_path / "recordings" / "recording-2025-01-19-10-30-45.mp4"

    def test_start_without_session(self, recorder_factory):
        recorder = recorder_factory()
        with pytest.raises(CameraError):
            recorder.start_recording()

    def test_record_writes_frames(self, recorder_factory):
        recorder = recorder_factory()
        recorder.start_session()
        recorder.wait_until_ready(timeout=2.0)

        path = recorder.start_recording()
        assert recorder.is_recording
        time.sleep(0.1)
        result = recorder.stop_recording()

        assert not recorder.is_recording
        assert result.path == path
        assert result.frames_written >= 1
        assert result.size_bytes == result.frames_written
        assert Path(path).exists()

        writer = recorder.writers[0]
        assert writer.released
        assert writer.size == (64, 48)
        assert writer.fps == 100.0

    def test_close_releases_writer_after_read_failure(self, recorder_factory):
        from conftest import StubCapture

        class DroppingCapture(StubCapture):
            def read(self):
                return False, None

        recorder = recorder_factory(capture=DroppingCapture())
        recorder.start_session()
        recorder.wait_until_ready(timeout=2.0)

        recorder.start_recording()
        recorder._writer_thread.join(timeout=2.0)
        assert not recorder.is_recording

        recorder.close()

        assert recorder.writers[-1].released
        with pytest.raises(CameraError):
            recorder.stop_recording()

    def test_double_start_rejected(self, recorder_factory):
        recorder = recorder_factory()
        recorder.start_session()
        recorder.wait_until_ready(timeout=2.0)

        recorder.start_recording()
        try:
            with pytest.raises(CameraError):
                recorder.start_recording()
        finally:
            recorder.stop_recording()

    def test_stop_without_recording(self, recorder_factory):
        recorder = recorder_factory()
        with pytest.raises(CameraError):
            recorder.stop_recording()

    def test_record_for(self, recorder_factory):
        recorder = recorder_factory()
        recorder.start_session()
        recorder.wait_until_ready(timeout=2.0)

        result = recorder.record_for(0.05)

        assert result.path.name == "recording-2025-01-19-10-30-45.mp4"
        assert result.frames_written >= 1


class TestPreview:
    """Tests for preview frames."""

    def test_no_session_no_frame(self, recorder_factory):
        assert recorder_factory().latest_frame() is None

    def test_preview_is_mirrored(self, recorder_factory):
        recorder = recorder_factory()
        recorder.start_session()
        recorder.wait_until_ready(timeout=2.0)

        frame = recorder.latest_frame()

        # stub frames are white on the left half; mirrored, white is on the right
        assert frame[0, 0].tolist() == [0, 0, 0]
        assert frame[0, -1].tolist() == [255, 255, 255]
