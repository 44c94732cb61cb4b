"""
StoryCam Configuration
======================

This module handles configuration loading for the StoryCam client.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    STORYCAM_UPLOAD_URL      -> upload.url
    STORYCAM_UPLOAD_TIMEOUT  -> upload.timeout_seconds
    STORYCAM_CAMERA_INDEX    -> camera.device_index
    STORYCAM_OUTPUT_DIR      -> camera.output_dir
    STORYCAM_DEVSERVER_PORT  -> devserver.port
    STORYCAM_FIXTURE_PATH    -> devserver.fixture_path
    STORYCAM_LOG_LEVEL       -> logging.level
    PORT                     -> devserver.port (container platforms)

Example:
    from storycam.config import settings

    print(settings.upload.url)
    print(settings.camera.device_index)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class AppConfig(BaseModel):
    """Application identification."""

    name: str = Field(default="storycam", description="Application name")
    version: str = Field(default="v0.1.0", description="Application version")


class CameraConfig(BaseModel):
    """Capture device and recording configuration."""

    device_index: int = Field(
        default=0,
        ge=0,
        description="OpenCV device index of the front-facing camera",
    )
    frame_width: int = Field(default=640, ge=16, description="Requested frame width")
    frame_height: int = Field(default=480, ge=16, description="Requested frame height")
    fps: float = Field(default=30.0, gt=0, le=120, description="Recording frame rate")
    fourcc: str = Field(
        default="mp4v",
        min_length=4,
        max_length=4,
        description="FourCC codec used for MP4 recordings",
    )
    output_dir: str = Field(
        default="./recordings",
        description="Directory where recordings are written",
    )
    mirror_preview: bool = Field(
        default=True,
        description="Mirror preview frames like a front camera",
    )


class UploadConfig(BaseModel):
    """Inference endpoint configuration."""

    url: str = Field(
        default="http://localhost:8002/upload",
        description="Inference endpoint receiving the multipart upload",
    )
    field_name: str = Field(default="file", description="Multipart form field name")
    mime_type: str = Field(default="video/mp4", description="Content type of the video part")
    timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Upper bound on a single upload request",
    )


class ResultsConfig(BaseModel):
    """Results screen configuration."""

    loading_delay_seconds: float = Field(
        default=2.0,
        ge=0,
        description="How long the 'please wait' panel is shown before results",
    )
    time_step_seconds: float = Field(
        default=0.5,
        gt=0,
        description="Seconds between consecutive face cards",
    )


class DevServerConfig(BaseModel):
    """Local inference stand-in configuration."""

    host: str = Field(default="127.0.0.1", description="Bind host")
    port: int = Field(default=8002, ge=1, le=65535, description="Bind port")
    fixture_path: Optional[str] = Field(
        default=None,
        description="JSON file with canned faces to return",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for StoryCam.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    app: AppConfig = Field(default_factory=AppConfig)
    camera: CameraConfig = Field(default_factory=CameraConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)
    results: ResultsConfig = Field(default_factory=ResultsConfig)
    devserver: DevServerConfig = Field(default_factory=DevServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Upload settings
    if env_url := os.environ.get("STORYCAM_UPLOAD_URL"):
        config_data.setdefault("upload", {})["url"] = env_url
    if env_timeout := os.environ.get("STORYCAM_UPLOAD_TIMEOUT"):
        config_data.setdefault("upload", {})["timeout_seconds"] = float(env_timeout)

    # Camera settings
    if env_index := os.environ.get("STORYCAM_CAMERA_INDEX"):
        config_data.setdefault("camera", {})["device_index"] = int(env_index)
    if env_dir := os.environ.get("STORYCAM_OUTPUT_DIR"):
        config_data.setdefault("camera", {})["output_dir"] = env_dir

    # Dev server settings
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("devserver", {})["port"] = int(env_port)
    elif env_port := os.environ.get("STORYCAM_DEVSERVER_PORT"):
        config_data.setdefault("devserver", {})["port"] = int(env_port)
    if env_fixture := os.environ.get("STORYCAM_FIXTURE_PATH"):
        config_data.setdefault("devserver", {})["fixture_path"] = env_fixture

    # Logging settings
    if env_log := os.environ.get("STORYCAM_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
