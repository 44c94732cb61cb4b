"""
Story Tests
===========

Welcome screen content, results view-model and narration.
"""

import pytest

from storycam.models.response import Emotion, Face, FaceDetectionResponse, VideoMetadata
from storycam.story.narrative import NEUTRAL_VERDICT, NO_FACES_OPENING, dominant_label, narrate
from storycam.story.results import (
    DEFAULT_COLOR,
    LOADING_MESSAGE,
    ResultsScreen,
    build_face_card,
    build_metadata_panel,
    color_for_emotion,
)
from storycam.story.welcome import (
    RAIN_DROP_COUNT,
    build_welcome_screen,
    scatter_rain,
)


def _face(confidence, *emotions):
    return Face(
        confidence=confidence,
        emotions=[Emotion(type=label, confidence=score) for label, score in emotions],
    )


class TestWelcomeScreen:
    """Tests for the welcome screen."""

    def test_content(self):
        screen = build_welcome_screen(seed=7)
        assert screen.title == "WELCOME, DETECTIVE"
        assert screen.case_file == "CASE FILE: THE MIDNIGHT CIPHER"
        assert screen.body_lines == (
            "A series of cryptic messages have surfaced.",
            "Time is running out.",
        )
        assert screen.call_to_action == "BEGIN INVESTIGATION"
        assert screen.gradient == ((0.1, 0.1, 0.2), (0.2, 0.2, 0.3))
        assert len(screen.rain) == RAIN_DROP_COUNT

    def test_rain_within_bounds_and_seeded(self):
        drops = scatter_rain(100, 200, seed=3)
        assert all(0 <= d.x <= 100 and 0 <= d.y <= 200 for d in drops)
        assert drops == scatter_rain(100, 200, seed=3)
        assert (drops[0].width, drops[0].height) == (2, 10)

    def test_fade_in(self):
        screen = build_welcome_screen()
        assert screen.text_opacity(0) == 0.0
        assert 0.0 < screen.text_opacity(0.75) < 1.0
        assert screen.text_opacity(1.5) == 1.0
        assert screen.text_opacity(10) == 1.0

    def test_render_text(self):
        text = build_welcome_screen().render_text()
        assert text.startswith("WELCOME, DETECTIVE")
        assert "[ BEGIN INVESTIGATION ]" in text


class TestEmotionColors:
    """Tests for the emotion colour mapping."""

    @pytest.mark.parametrize("emotion,name", [
        ("HAPPY", "green"),
        ("SAD", "blue"),
        ("ANGRY", "red"),
        ("SURPRISED", "yellow"),
        ("CALM", "gray"),
        ("DISGUSTED", "purple"),
        ("CONFUSED", "orange"),
        ("FEAR", "black"),
    ])
    def test_known(self, emotion, name):
        color = color_for_emotion(emotion)
        assert color.name == name
        assert color.opacity == 0.3

    def test_unknown_is_white(self):
        assert color_for_emotion("BORED") == DEFAULT_COLOR
        assert DEFAULT_COLOR.to_css() == "rgba(255, 255, 255, 1.0)"


class TestFaceCards:
    """Tests for face cards."""

    def test_card_fields(self):
        card = build_face_card(_face(99.8, ("CALM", 10), ("HAPPY", 80)), index=3)
        assert card.time_label == "Time 1.5 Seconds"
        assert card.emotion_label == "HAPPY"
        assert card.color.name == "green"
        assert card.confidence_text == "Confidence: 99.80%"

    def test_first_card_time(self):
        assert build_face_card(_face(50), index=0).time_label == "Time 0.0 Seconds"

    def test_no_emotions_is_unknown_with_calm_color(self):
        card = build_face_card(_face(50), index=1)
        assert card.emotion_label == "Unknown"
        assert card.color.name == "gray"

    def test_custom_time_step(self):
        assert build_face_card(_face(50), index=2, time_step=1.0).time_label == "Time 2.0 Seconds"


class TestMetadataPanel:
    """Tests for the metadata panel."""

    def test_full(self):
        panel = build_metadata_panel(VideoMetadata(
            codec="h264", duration_millis=5000, frame_rate=30.0, frame_width=1080, frame_height=1920,
        ))
        assert panel.lines() == [
            "Codec: h264",
            "Duration: 5000 ms",
            "Frame Rate: 30 fps",
            "Resolution: 1080x1920",
        ]

    def test_missing_values(self):
        panel = build_metadata_panel(VideoMetadata())
        assert panel.lines() == [
            "Codec: N/A",
            "Duration: 0 ms",
            "Frame Rate: 0 fps",
            "Resolution: 0x0",
        ]

    def test_fractional_frame_rate(self):
        assert build_metadata_panel(VideoMetadata(frame_rate=29.97)).frame_rate == "Frame Rate: 29.97 fps"


class TestResultsScreen:
    """Tests for the results screen view-model."""

    def test_loading_window(self):
        screen = ResultsScreen(faces=[], loading_delay=2.0)
        assert screen.is_loading(0.0)
        assert screen.is_loading(1.99)
        assert not screen.is_loading(2.0)

    def test_loading_render_hides_cards(self, sample_response_payload):
        response = FaceDetectionResponse.model_validate(sample_response_payload)
        screen = ResultsScreen(response.detected_faces(), response.video_metadata)

        text = screen.render_text(elapsed=0.5)

        assert LOADING_MESSAGE in text
        assert "Time" not in text

    def test_full_render(self, sample_response_payload):
        response = FaceDetectionResponse.model_validate(sample_response_payload)
        screen = ResultsScreen(response.detected_faces(), response.video_metadata)

        text = screen.render_text()

        assert text.startswith("Face Detection Results")
        assert "Time 0.0 Seconds  [HAPPY]" in text
        assert "Time 0.5 Seconds  [FEAR]" in text
        assert "Time 1.0 Seconds  [Unknown]" in text
        assert "Codec: h264" in text
        assert [card.index for card in screen.cards()] == [0, 1, 2]

    def test_no_metadata(self):
        screen = ResultsScreen(faces=[_face(90, ("SAD", 50))])
        assert screen.metadata_panel() is None
        assert "Video Metadata" not in screen.render_text()


class TestNarrative:
    """Tests for story narration."""

    def test_observations_follow_cards(self):
        cards = [
            build_face_card(_face(90, ("ANGRY", 70)), 0),
            build_face_card(_face(90, ("ANGRY", 60)), 1),
            build_face_card(_face(90, ("CALM", 90)), 2),
        ]
        story = narrate(cards)

        assert "3 observation(s)" in story.opening
        assert story.observations[0].startswith("At 0.0s")
        assert "anger" in story.observations[1]
        assert story.observations[2].startswith("At 1.0s")
        assert story.verdict.startswith("Verdict: they know who wrote the cipher")

    def test_empty(self):
        story = narrate([])
        assert story.opening == NO_FACES_OPENING
        assert story.observations == []
        assert story.verdict == NEUTRAL_VERDICT

    def test_unknown_only(self):
        cards = [build_face_card(_face(90), 0), build_face_card(_face(90, ("BORED", 99)), 1)]
        story = narrate(cards)
        assert story.observations == [
            "At 0.0s the suspect gave nothing away.",
            "At 0.5s the suspect gave nothing away.",
        ]
        assert story.verdict == NEUTRAL_VERDICT

    def test_dominant_label_tie_goes_to_first_seen(self):
        cards = [
            build_face_card(_face(90, ("SAD", 50)), 0),
            build_face_card(_face(90, ("HAPPY", 50)), 1),
        ]
        assert dominant_label(cards) == "SAD"

    def test_render_text(self):
        story = narrate([build_face_card(_face(90, ("FEAR", 50)), 0)])
        assert story.render_text().splitlines() == story.lines()
