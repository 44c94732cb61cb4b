"""
Session Module
==============

Camera-session management and phase transitions.

Components:
    - CameraManager: Observable manager for recording, upload and results
    - UploadOutcome: Success/failure result of one upload
    - validate_transition: Phase change rules
"""

from storycam.session.manager import CameraManager, UploadOutcome
from storycam.session.transitions import (
    ALLOWED_TRANSITIONS,
    can_transition,
    validate_transition,
)


__all__ = [
    "CameraManager",
    "UploadOutcome",
    "ALLOWED_TRANSITIONS",
    "can_transition",
    "validate_transition",
]
