"""
Results Screen
==============

View-model for the face detection results screen.

Layout (top to bottom):
    1. Header "Face Detection Results"
    2. Loading panel, shown alone for the first couple of seconds
    3. One card per detected face, spaced 0.5 s apart
    4. Video metadata panel

Emotion Colours:
    HAPPY green, SAD blue, ANGRY red, SURPRISED yellow, CALM gray,
    DISGUSTED purple, CONFUSED orange, FEAR black, all at 0.3 opacity.
    Anything else renders white.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from storycam.models.response import Face, VideoMetadata


HEADER = "Face Detection Results"
LOADING_MESSAGE = "Please wait for the machine learning model to determine emotions..."
UNKNOWN_EMOTION = "Unknown"
FALLBACK_COLOR_EMOTION = "CALM"

DEFAULT_LOADING_DELAY_SECONDS = 2.0
DEFAULT_TIME_STEP_SECONDS = 0.5


@dataclass(frozen=True, slots=True)
class Color:
    """A named colour with opacity."""

    name: str
    opacity: float = 1.0

    def to_rgba(self) -> Tuple[int, int, int, float]:
        """RGBA tuple (0-255 channels, opacity as float)."""
        r, g, b = _NAMED_RGB[self.name]
        return (r, g, b, self.opacity)

    def to_css(self) -> str:
        r, g, b, a = self.to_rgba()
        return f"rgba({r}, {g}, {b}, {a})"


_NAMED_RGB: Dict[str, Tuple[int, int, int]] = {
    "green": (52, 199, 89),
    "blue": (0, 122, 255),
    "red": (255, 59, 48),
    "yellow": (255, 204, 0),
    "gray": (142, 142, 147),
    "purple": (175, 82, 222),
    "orange": (255, 149, 0),
    "black": (0, 0, 0),
    "white": (255, 255, 255),
}

EMOTION_COLORS: Dict[str, Color] = {
    "HAPPY": Color("green", 0.3),
    "SAD": Color("blue", 0.3),
    "ANGRY": Color("red", 0.3),
    "SURPRISED": Color("yellow", 0.3),
    "CALM": Color("gray", 0.3),
    "DISGUSTED": Color("purple", 0.3),
    "CONFUSED": Color("orange", 0.3),
    "FEAR": Color("black", 0.3),
}

DEFAULT_COLOR = Color("white", 1.0)


def color_for_emotion(emotion: str) -> Color:
    """Badge colour for an emotion label."""
    return EMOTION_COLORS.get(emotion, DEFAULT_COLOR)


@dataclass(frozen=True, slots=True)
class FaceCard:
    """
    One face entry on the results screen.

    Attributes:
        index: Position of the face in the response
        time_label: e.g. "Time 1.5 Seconds"
        emotion_label: Dominant emotion or "Unknown"
        color: Badge colour
        confidence_text: e.g. "Confidence: 99.12%"
    """

    index: int
    time_label: str
    emotion_label: str
    color: Color
    confidence_text: str


@dataclass(frozen=True, slots=True)
class MetadataPanel:
    """Video metadata lines with fallbacks for missing values."""

    codec: str
    duration: str
    frame_rate: str
    resolution: str

    def lines(self) -> List[str]:
        return [self.codec, self.duration, self.frame_rate, self.resolution]


def _format_number(value) -> str:
    # Whole floats print without a trailing ".0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_face_card(face: Face, index: int, time_step: float = DEFAULT_TIME_STEP_SECONDS) -> FaceCard:
    """Build the card for the face at `index`."""
    dominant = face.dominant_emotion()
    label = dominant.type if dominant else UNKNOWN_EMOTION
    color = color_for_emotion(dominant.type if dominant else FALLBACK_COLOR_EMOTION)

    return FaceCard(
        index=index,
        time_label=f"Time {float(index) * time_step} Seconds",
        emotion_label=label,
        color=color,
        confidence_text=f"Confidence: {face.confidence:.2f}%",
    )


def build_metadata_panel(metadata: VideoMetadata) -> MetadataPanel:
    """Build the metadata panel, using N/A and 0 for missing values."""
    return MetadataPanel(
        codec=f"Codec: {metadata.codec or 'N/A'}",
        duration=f"Duration: {metadata.duration_millis or 0} ms",
        frame_rate=f"Frame Rate: {_format_number(metadata.frame_rate or 0)} fps",
        resolution=f"Resolution: {metadata.frame_width or 0}x{metadata.frame_height or 0}",
    )


class ResultsScreen:
    """
    Results screen built from one response.

    Attributes:
        faces: Faces to show
        video_metadata: Metadata to show, if any
        loading_delay: Seconds the loading panel is shown alone
        time_step: Seconds between face cards
    """

    header = HEADER
    loading_message = LOADING_MESSAGE

    def __init__(
        self,
        faces: Sequence[Face],
        video_metadata: Optional[VideoMetadata] = None,
        loading_delay: float = DEFAULT_LOADING_DELAY_SECONDS,
        time_step: float = DEFAULT_TIME_STEP_SECONDS,
    ) -> None:
        self.faces = list(faces)
        self.video_metadata = video_metadata
        self.loading_delay = loading_delay
        self.time_step = time_step

    def is_loading(self, elapsed: float) -> bool:
        """Whether only the loading panel is visible `elapsed` seconds after opening."""
        return elapsed < self.loading_delay

    def cards(self) -> List[FaceCard]:
        return [
            build_face_card(face, index, self.time_step)
            for index, face in enumerate(self.faces)
        ]

    def metadata_panel(self) -> Optional[MetadataPanel]:
        if self.video_metadata is None:
            return None
        return build_metadata_panel(self.video_metadata)

    def render_text(self, elapsed: Optional[float] = None) -> str:
        """
        Plain-text rendering for terminals.

        Args:
            elapsed: Seconds since the screen opened. None renders the
                fully loaded screen.
        """
        lines = [self.header, "", self.loading_message]
        if elapsed is not None and self.is_loading(elapsed):
            return "\n".join(lines)

        for card in self.cards():
            lines.append("")
            lines.append(f"{card.time_label}  [{card.emotion_label}]")
            lines.append(f"  {card.confidence_text}")

        panel = self.metadata_panel()
        if panel is not None:
            lines.append("")
            lines.append("Video Metadata")
            lines.extend(f"  {line}" for line in panel.lines())

        return "\n".join(lines)
