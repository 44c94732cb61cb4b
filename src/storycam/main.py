"""
StoryCam Command Line
=====================

Terminal entry point for the detective story.

Commands:
    welcome              Show the case file
    record [--seconds N] Record from the front camera, upload, show results
    upload PATH          Upload an existing recording and show results
    serve                Run the development inference server

Usage:
    storycam record --seconds 5
    storycam upload recordings/recording-2025-01-19-10-00-00.mp4
    storycam --url http://localhost:8002/upload upload clip.mp4
"""

import argparse
import logging
import sys
from typing import List, Optional

from storycam.config import Settings, load_config, setup_logging
from storycam.errors import StoryCamError
from storycam.models.response import FaceDetectionResponse
from storycam.session.manager import CameraManager
from storycam.story.narrative import narrate
from storycam.story.results import ResultsScreen
from storycam.story.welcome import build_welcome_screen
from storycam.upload.client import UploadClient


logger = logging.getLogger(__name__)


def render_results(response: FaceDetectionResponse, settings: Settings) -> str:
    """Results screen followed by the story narration."""
    screen = ResultsScreen(
        faces=response.detected_faces(),
        video_metadata=response.video_metadata,
        loading_delay=settings.results.loading_delay_seconds,
        time_step=settings.results.time_step_seconds,
    )
    story = narrate(screen.cards())
    return f"{screen.render_text()}\n\n{story.render_text()}"


def cmd_welcome(args: argparse.Namespace, settings: Settings) -> int:
    print(build_welcome_screen().render_text())
    return 0


def cmd_upload(args: argparse.Namespace, settings: Settings) -> int:
    client = UploadClient(
        url=settings.upload.url,
        field_name=settings.upload.field_name,
        mime_type=settings.upload.mime_type,
        timeout=settings.upload.timeout_seconds,
    )
    with client:
        try:
            response = client.upload(args.path)
        except StoryCamError as e:
            logger.error(f"Upload failed: {e}")
            return 1

    print(f"Detected {len(response.faces)} faces.")
    print(render_results(response, settings))
    return 0


def cmd_record(args: argparse.Namespace, settings: Settings) -> int:
    with CameraManager.from_settings(settings) as manager:
        manager.start_session()
        if not manager.recorder.wait_until_ready(timeout=args.camera_timeout):
            logger.error(manager.recorder.session_error or "Camera did not start in time")
            return 1

        try:
            outcome = manager.record_and_upload(args.seconds)
        except StoryCamError as e:
            logger.error(f"Recording failed: {e}")
            return 1

        if not outcome.ok:
            logger.error(f"Upload failed: {outcome.error}")
            return 1

        print(manager.state.detection_results)
        print(render_results(outcome.unwrap(), settings))
        manager.dismiss_results()
    return 0


def cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    from storycam.devserver import create_app

    app = create_app(args.fixture or settings.devserver.fixture_path)
    uvicorn.run(app, host=settings.devserver.host, port=settings.devserver.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storycam",
        description="Record, upload and investigate: a face/emotion detective story",
    )
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--url", help="Override the inference endpoint URL")
    parser.add_argument("--log-level", help="Override the log level (DEBUG, INFO, ...)")

    sub = parser.add_subparsers(dest="command", required=True)

    welcome = sub.add_parser("welcome", help="Show the case file")
    welcome.set_defaults(func=cmd_welcome)

    record = sub.add_parser("record", help="Record from the camera and upload")
    record.add_argument("--seconds", type=float, default=5.0, help="Clip length in seconds")
    record.add_argument(
        "--camera-timeout", type=float, default=10.0, help="Seconds to wait for the camera"
    )
    record.set_defaults(func=cmd_record)

    upload = sub.add_parser("upload", help="Upload an existing recording")
    upload.add_argument("path", help="MP4 file to upload")
    upload.set_defaults(func=cmd_upload)

    serve = sub.add_parser("serve", help="Run the development inference server")
    serve.add_argument("--fixture", help="JSON fixture with faces to return")
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = load_config(args.config)
    if args.url:
        settings.upload.url = args.url
    if args.log_level:
        settings.logging.level = args.log_level
    setup_logging(settings)

    return args.func(args, settings)


if __name__ == "__main__":
    sys.exit(main())
