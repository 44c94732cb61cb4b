"""
Session Transition Logic
========================

Allowed phase changes for a capture session.

Transition Rules:
    IDLE → RECORDING:                 user starts recording
    IDLE → UPLOADING:                 upload an existing recording
    RECORDING → IDLE:                 recording stopped, nothing uploaded
    RECORDING → UPLOADING:            upload requested mid-recording (file finalized first)
    UPLOADING → DISPLAYING_RESULTS:   server answered with a valid payload
    UPLOADING → IDLE:                 upload failed
    DISPLAYING_RESULTS → IDLE:        results screen dismissed
    DISPLAYING_RESULTS → RECORDING:   recording again from the results screen

Self-transitions are never allowed.
"""

import logging
from typing import Dict, FrozenSet

from storycam.errors import InvalidTransitionError
from storycam.models.session import SessionPhase


logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: Dict[SessionPhase, FrozenSet[SessionPhase]] = {
    SessionPhase.IDLE: frozenset({
        SessionPhase.RECORDING,
        SessionPhase.UPLOADING,
    }),
    SessionPhase.RECORDING: frozenset({
        SessionPhase.IDLE,
        SessionPhase.UPLOADING,
    }),
    SessionPhase.UPLOADING: frozenset({
        SessionPhase.DISPLAYING_RESULTS,
        SessionPhase.IDLE,
    }),
    SessionPhase.DISPLAYING_RESULTS: frozenset({
        SessionPhase.IDLE,
        SessionPhase.RECORDING,
    }),
}


def can_transition(current: SessionPhase, target: SessionPhase) -> bool:
    """Whether moving from current to target is allowed."""
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def validate_transition(current: SessionPhase, target: SessionPhase) -> None:
    """
    Check a phase change.

    Args:
        current: Phase the session is in
        target: Phase requested

    Raises:
        InvalidTransitionError: If the change is not allowed
    """
    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Cannot move session from {current.value} to {target.value}"
        )
    logger.debug(f"Session transition: {current.value} -> {target.value}")
