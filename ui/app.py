"""
StoryCam Detective Story UI
===========================

Streamlit front end for the capture → upload → results flow.

Screens:
    - Welcome:  case file intro with a "BEGIN INVESTIGATION" button
    - Story:    camera preview, record / stop, upload to the endpoint
    - Results:  loading panel, face cards, video metadata, narration

Architecture:
    - One CameraManager per server process (st.cache_resource) runs camera
      startup, recording and upload on background threads
    - Every rerun reads the manager's current SessionState snapshot
    - Per-browser UI bits (screen, results timer, last error) live in
      st.session_state

Usage:
    streamlit run ui/app.py

Environment:
    STORYCAM_UPLOAD_URL   - inference endpoint (default: http://localhost:8002/upload)
    STORYCAM_CAMERA_INDEX - OpenCV device index (default: 0)
"""

import time

import cv2
import numpy as np
import streamlit as st

from storycam.config import settings, setup_logging
from storycam.errors import StoryCamError
from storycam.models.session import SessionPhase, SessionState
from storycam.session.manager import CameraManager
from storycam.story.narrative import narrate
from storycam.story.results import ResultsScreen
from storycam.story.welcome import build_welcome_screen


# =============================================================================
# Page config
# =============================================================================

st.set_page_config(
    page_title="StoryCam",
    page_icon="🕵️",
    layout="wide",
)

setup_logging(settings)


# =============================================================================
# Shared manager
# Streamlit re-executes this script on every interaction, so module globals
# do not survive a rerun. The cached manager does, and it owns the state.
# =============================================================================

@st.cache_resource
def get_manager() -> CameraManager:
    """One camera manager per Streamlit server process."""
    manager = CameraManager.from_settings(settings)
    manager.start_session()
    return manager


def _init_session_state() -> None:
    defaults = {
        "screen": "welcome",
        "results_opened_at": None,
        "auto_refresh": True,
        "refresh_rate": 0.2,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def _show_pending_error() -> None:
    error = st.session_state.pop("ui_error", None)
    if error:
        st.error(error)


# =============================================================================
# Screens
# =============================================================================

def _gradient_css() -> str:
    screen = build_welcome_screen()
    (r1, g1, b1), (r2, g2, b2) = screen.gradient
    start = f"rgb({int(r1 * 255)}, {int(g1 * 255)}, {int(b1 * 255)})"
    end = f"rgb({int(r2 * 255)}, {int(g2 * 255)}, {int(b2 * 255)})"
    return (
        "<style>.stApp {"
        f"background: linear-gradient(135deg, {start}, {end});"
        "color: white;}</style>"
    )


def welcome_screen() -> None:
    screen = build_welcome_screen()
    st.markdown(_gradient_css(), unsafe_allow_html=True)

    st.markdown("<div style='text-align:center;font-size:80px'>🛡️</div>", unsafe_allow_html=True)
    st.markdown(
        f"<h1 style='text-align:center;font-family:monospace'>{screen.title}</h1>",
        unsafe_allow_html=True,
    )
    st.markdown(
        f"<p style='text-align:center;font-family:monospace;color:rgba(255,59,48,0.8)'>"
        f"{screen.case_file}</p>",
        unsafe_allow_html=True,
    )
    for line in screen.body_lines:
        st.markdown(
            f"<p style='text-align:center;font-family:serif;color:gray'>{line}</p>",
            unsafe_allow_html=True,
        )

    _, mid, _ = st.columns([1, 2, 1])
    with mid:
        if st.button(screen.call_to_action, use_container_width=True):
            st.session_state.screen = "story"
            st.rerun()


def story_screen(manager: CameraManager) -> None:
    st.markdown(_gradient_css(), unsafe_allow_html=True)
    state: SessionState = manager.state
    camera_ready = manager.recorder.is_running
    uploading = state.phase == SessionPhase.UPLOADING

    if state.show_face_details:
        st.session_state.results_opened_at = time.time()
        st.session_state.screen = "results"
        st.rerun()

    left_col, right_col = st.columns([2, 1])

    with left_col:
        st.subheader("The Midnight Cipher")
        st.write(
            "Look into the camera and tell us where you were last night. "
            "Every expression will be examined."
        )

        col_a, col_b = st.columns(2)
        with col_a:
            if st.button(
                "⏺ Record",
                key="record",
                disabled=not camera_ready or state.is_recording or uploading,
                use_container_width=True,
            ):
                try:
                    manager.start_recording()
                except StoryCamError as e:
                    st.session_state.ui_error = f"Could not start recording: {e}"
                st.rerun()
        with col_b:
            if st.button(
                "⏹ Stop & Upload",
                key="stop",
                disabled=not state.is_recording,
                use_container_width=True,
            ):
                st.session_state.results_opened_at = None
                try:
                    result = manager.stop_recording()
                    manager.upload_video(result.path)
                except StoryCamError as e:
                    st.session_state.ui_error = f"Could not send the tape: {e}"
                st.rerun()

        _show_pending_error()
        if not camera_ready:
            if manager.recorder.session_error:
                st.error(manager.recorder.session_error)
            else:
                st.info("Starting camera…")
        if uploading:
            st.info("Sending the tape to the lab…")
        if state.last_error:
            st.error(f"The lab could not process the tape: {state.last_error}")

    with right_col:
        frame = manager.recorder.latest_frame()
        if frame is not None:
            st.image(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB), use_container_width=True)
        else:
            ph = np.full((300, 200, 3), 40, dtype=np.uint8)
            cv2.putText(ph, "No camera", (40, 150), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (120, 120, 120), 1)
            st.image(ph, channels="BGR", use_container_width=True)
        if state.is_recording:
            st.caption("🔴 Recording")

    # Auto-refresh while the camera starts, records or uploads
    starting = not camera_ready and manager.recorder.session_error is None
    if st.session_state.auto_refresh and (starting or state.is_recording or uploading):
        time.sleep(st.session_state.refresh_rate)
        st.rerun()


def _emotion_badge(label: str, css_color: str) -> str:
    return (
        f"<span style='background:{css_color};color:white;padding:5px;"
        f"border-radius:5px'>{label}</span>"
    )


def results_screen(manager: CameraManager) -> None:
    state: SessionState = manager.state
    screen = ResultsScreen(
        faces=state.detected_faces,
        video_metadata=state.video_metadata,
        loading_delay=settings.results.loading_delay_seconds,
        time_step=settings.results.time_step_seconds,
    )

    if st.session_state.results_opened_at is None:
        st.session_state.results_opened_at = time.time()
    elapsed = time.time() - st.session_state.results_opened_at

    st.title(screen.header)
    if screen.is_loading(elapsed):
        with st.spinner(screen.loading_message):
            time.sleep(max(0.0, screen.loading_delay - elapsed))
        st.rerun()

    st.info(f"**{screen.loading_message}**")
    if state.detection_results:
        st.caption(state.detection_results)

    for card in screen.cards():
        with st.container(border=True):
            head_l, head_r = st.columns([3, 1])
            head_l.markdown(f"**{card.time_label}**")
            head_r.markdown(_emotion_badge(card.emotion_label, card.color.to_css()), unsafe_allow_html=True)
            st.write(card.confidence_text)

    panel = screen.metadata_panel()
    if panel is not None:
        with st.container(border=True):
            st.markdown("**Video Metadata**")
            for line in panel.lines():
                st.text(line)

    st.divider()
    st.subheader("Case Notes")
    for line in narrate(screen.cards()).lines():
        st.write(line)

    if st.button("Close Case File", key="close_case"):
        manager.dismiss_results()
        st.session_state.results_opened_at = None
        st.session_state.screen = "story"
        st.rerun()


# =============================================================================
# Main UI
# =============================================================================

def main():
    _init_session_state()

    if st.session_state.screen == "welcome":
        welcome_screen()
        return

    with st.sidebar:
        st.header("Controls")
        st.checkbox("Live refresh", key="auto_refresh")
        st.slider("Refresh (s)", 0.1, 2.0, step=0.1, key="refresh_rate")

    manager = get_manager()
    if st.session_state.screen == "results":
        results_screen(manager)
    else:
        story_screen(manager)


if __name__ == "__main__":
    main()
